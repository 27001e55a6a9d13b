from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from svdgen.codegen.names import sanitized_pascal_case, sanitized_snake_case
from svdgen.svd.model import ArrayRegister, Register, RegisterInfo


class TypeHandle:
    """Canonical type name shared by every instance of one register array."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"TypeHandle({self.name!r})"


@dataclass(frozen=True)
class OwnedTypeName:
    name: str


@dataclass(frozen=True)
class SharedTypeName:
    handle: TypeHandle


TypeName = Union[OwnedTypeName, SharedTypeName]


@dataclass(frozen=True)
class ExpandedRegister:
    info: RegisterInfo
    name: str
    offset: int
    ty: TypeName


def type_name_text(ty: TypeName) -> str:
    if isinstance(ty, SharedTypeName):
        return ty.handle.name
    return ty.name


def strip_placeholder(name: str) -> str:
    if "[%s]" in name:
        return name.replace("[%s]", "")
    return name.replace("%s", "")


def substitute_placeholder(name: str, label: str) -> str:
    if "[%s]" in name:
        return name.replace("[%s]", label)
    return name.replace("%s", label)


def register_type_name(register: Register) -> str:
    if isinstance(register, ArrayRegister):
        return sanitized_pascal_case(strip_placeholder(register.info.name))
    return sanitized_pascal_case(register.info.name)


def expand(
    registers: tuple[Register, ...],
    type_name: Callable[[Register], str] = register_type_name,
) -> list[ExpandedRegister]:
    """Flatten register arrays and sort everything by address offset.

    Array instances are offset by their position in the label list, not by the
    label's value, and all of them share one `TypeHandle`. `type_name` gives
    the generated type of each register.
    """
    out: list[ExpandedRegister] = []

    for r in registers:
        info = r.info
        if not isinstance(r, ArrayRegister):
            out.append(
                ExpandedRegister(
                    info=info,
                    name=sanitized_snake_case(info.name),
                    offset=info.address_offset,
                    ty=OwnedTypeName(type_name(r)),
                )
            )
            continue

        ty = SharedTypeName(TypeHandle(type_name(r)))
        labels = r.array.index_labels
        if labels is None:
            labels = tuple(str(i) for i in range(r.array.count))

        for i, label in enumerate(labels):
            out.append(
                ExpandedRegister(
                    info=info,
                    name=sanitized_snake_case(substitute_placeholder(info.name, label)),
                    offset=info.address_offset + i * r.array.increment,
                    ty=ty,
                )
            )

    # list.sort is stable: equal offsets keep declaration order
    out.sort(key=lambda x: x.offset)
    return out
