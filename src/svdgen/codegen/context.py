from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable

from svdgen.codegen.expand import register_type_name
from svdgen.codegen.names import unique
from svdgen.svd.model import Register

# module-level names an emitted module binds through its imports
MODULE_NAMES = frozenset(
    {
        "annotations",
        "Callable",
        "U8",
        "U16",
        "U32",
        "FieldEnum",
        "FieldProxy",
        "ReadEnum",
        "Register",
        "RegisterBlock",
        "RegisterReader",
        "RegisterWriter",
        "Reserved",
        "Slot",
        "require_unsafe",
    }
)


@dataclass
class GenerationContext:
    """Bookkeeping for one generation run, passed explicitly to the generators.

    Every module-level name is handed out by `name_for`, keyed by what it names
    (a register, a register's reader, an enumerated value set seen from one
    view, ...), so one thing always gets one name and two things never share
    one. `claim` records which bodies and aliases were already emitted.
    """

    taken: set[str] = field(default_factory=lambda: set(MODULE_NAMES))
    names: dict[Hashable, str] = field(default_factory=dict)
    emitted: set[str] = field(default_factory=set)

    def name_for(self, key: Hashable, wanted: str) -> str:
        """Name previously given to `key`, else `wanted` made unique."""
        name = self.names.get(key)
        if name is None:
            name = unique(wanted, self.taken)
            self.names[key] = name
        return name

    def type_name(self, register: Register) -> str:
        return self.name_for(("register", id(register)), register_type_name(register))

    def claim(self, name: str) -> bool:
        """Record `name` as emitted; False if it already was."""
        if name in self.emitted:
            return False
        self.emitted.add(name)
        return True
