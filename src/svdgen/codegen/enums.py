"""Enumerated-value resolution.

For each field the reader and the writer independently pick an enumerated
value set. A picked set may point elsewhere through `derivedFrom`:

* ``NAME``: another set of the same field, then of the sibling fields of the
  same register;
* ``REG.FIELD``: a set of field FIELD on register REG of the same peripheral
  (if REG has no such field, a set named FIELD on any of REG's fields);
* ``REG.FIELD.NAME``: the set NAME of that field.

A derived field refers to the defining register's enum through an alias. Each
set gets its own body per view, emitted once per run and named through
`GenerationContext`, so two same-named sets never share a type.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from svdgen.codegen.context import GenerationContext
from svdgen.codegen.errors import (
    EnumDerivationError,
    EnumSetNotFoundError,
    FieldNotFoundError,
    MissingEnumValueError,
    RegisterNotFoundError,
)
from svdgen.codegen.expand import strip_placeholder
from svdgen.codegen.items import AliasItem, EnumItem, EnumVariant, Item, View
from svdgen.codegen.names import respace, sanitized_pascal_case, sanitized_snake_case, unique
from svdgen.svd.model import EnumeratedValue, EnumeratedValueSet, Field, Peripheral, Register, Usage
from svdgen.utils.logger import get_logger

log = get_logger(__name__)

# read enums up to this width list their reserved codes; wider ones get them
# synthesized by the runtime on first decode
EXPLICIT_RESERVED_MAX_WIDTH = 8


@dataclass(frozen=True)
class ResolvedEnum:
    view: View
    values: EnumeratedValueSet
    field: Field  # field declaring `values`
    register_type: str  # type of the register declaring `values`
    type_name: str  # what the current field's accessor refers to
    body_name: str

    @property
    def aliased(self) -> bool:
        return self.type_name != self.body_name


def eligible(evs: EnumeratedValueSet, view: View) -> bool:
    if view is View.READ:
        return evs.usage is not Usage.WRITE
    return evs.usage is not Usage.READ


def select_set(field: Field, view: View) -> Optional[EnumeratedValueSet]:
    for evs in field.enumerated_value_sets:
        if eligible(evs, view):
            return evs
    return None


def set_type_name(evs: EnumeratedValueSet, field: Field) -> str:
    return sanitized_pascal_case(evs.name if evs.name else field.name)


def _find_register(peripheral: Peripheral, name: str) -> Register:
    for r in peripheral.registers:
        if r.info.name == name or strip_placeholder(r.info.name) == name:
            return r
    raise RegisterNotFoundError(f"register {name} not found in peripheral {peripheral.name}")


def _fields_from(field: Field, register: Register) -> Iterator[Field]:
    yield field
    for f in register.info.fields or ():
        if f is not field:
            yield f


def _follow(
    source: EnumeratedValueSet,
    field: Field,
    register: Register,
    peripheral: Peripheral,
    view: View,
) -> tuple[Register, Field, EnumeratedValueSet]:
    ref = source.derived_from
    assert ref is not None
    parts = ref.split(".")

    if len(parts) == 1:
        for f in _fields_from(field, register):
            for evs in f.enumerated_value_sets:
                if evs is not source and evs.name == ref and eligible(evs, view):
                    return register, f, evs
        raise EnumSetNotFoundError(f"{register.info.name}.{field.name}: enumeratedValues {ref} not found")

    reg_name, field_name = parts[0], parts[1]
    target = _find_register(peripheral, reg_name)
    fields = target.info.fields
    if not fields:
        raise FieldNotFoundError(f"{ref}: register {reg_name} has no fields")
    target_field = next((f for f in fields if f.name == field_name), None)

    if len(parts) > 2:
        if target_field is None:
            raise FieldNotFoundError(f"{ref}: register {reg_name} has no field {field_name}")
        for evs in target_field.enumerated_value_sets:
            if evs.name == parts[2] and eligible(evs, view):
                return target, target_field, evs
        raise EnumSetNotFoundError(f"{ref}: no {view.name.lower()} enumeratedValues named {parts[2]}")

    if target_field is None:
        # "REGISTER.SET"
        for f in fields:
            for evs in f.enumerated_value_sets:
                if evs.name == field_name and eligible(evs, view):
                    return target, f, evs
        raise FieldNotFoundError(f"{ref}: register {reg_name} has no field {field_name}")

    candidates = [
        evs for evs in target_field.enumerated_value_sets if evs is not source and eligible(evs, view)
    ]
    for evs in candidates:
        if evs.name == field_name:
            return target, target_field, evs
    if candidates:
        return target, target_field, candidates[0]
    raise EnumSetNotFoundError(f"{ref}: field has no {view.name.lower()} enumeratedValues")


def resolve_enum(
    ctx: GenerationContext,
    field: Field,
    register: Register,
    peripheral: Peripheral,
    view: View,
) -> Optional[ResolvedEnum]:
    """Pick and resolve the enumerated value set `field` uses for `view`.

    The enum is named after the register and field declaring the set, once per
    set and view; a field of another register gets an alias named after its
    own register.
    """
    evs = select_set(field, view)
    if evs is None:
        return None

    owner_register, owner_field, target = register, field, evs
    seen: set[tuple[str, str, str]] = set()
    while target.derived_from is not None:
        key = (owner_register.info.name, owner_field.name, target.derived_from)
        if key in seen:
            raise EnumDerivationError(f"derivedFrom cycle through {'.'.join(key[:2])} -> {key[2]}")
        seen.add(key)
        owner_register, owner_field, target = _follow(target, owner_field, owner_register, peripheral, view)

    if view is View.READ and owner_field.bit_width < field.bit_width:
        raise EnumDerivationError(
            f"{register.info.name}.{field.name} is {field.bit_width} bits wide but derives "
            f"from {owner_register.info.name}.{owner_field.name} ({owner_field.bit_width} bits)"
        )

    set_name = set_type_name(target, owner_field)
    owner_type = ctx.type_name(owner_register)
    body_name = ctx.name_for(("enum", view, id(target)), f"{owner_type}{view.value}{set_name}")
    type_name = body_name
    if owner_register is not register:
        type_name = ctx.name_for(
            ("alias", view, id(register), id(target)),
            f"{ctx.type_name(register)}{view.value}{set_name}",
        )
    return ResolvedEnum(
        view=view,
        values=target,
        field=owner_field,
        register_type=owner_type,
        type_name=type_name,
        body_name=body_name,
    )


def writable_values(evs: EnumeratedValueSet, width: int, where: str) -> list[EnumeratedValue]:
    """Named values of `evs` that fit in `width` bits."""
    out: list[EnumeratedValue] = []
    for ev in evs.values:
        if ev.name is None:
            continue
        if ev.value is None:
            raise MissingEnumValueError(f"{where}: enumerated value {ev.name} has no value")
        if not 0 <= ev.value < 1 << width:
            log.warning("%s: enumerated value %s=%d does not fit in %d bits, skipping", where, ev.name, ev.value, width)
            continue
        out.append(ev)
    return out


def build_read_enum(name: str, evs: EnumeratedValueSet, width: int, doc: Optional[str] = None) -> EnumItem:
    """Enum total over [0, 2**width); undeclared codes become hidden variants."""
    taken: set[str] = set()
    # ReadEnum already defines is_reserved
    predicates: set[str] = {"is_reserved"}
    named: dict[int, EnumVariant] = {}
    for ev in evs.values:
        if ev.name is None or ev.value is None or not 0 <= ev.value < 1 << width:
            continue
        if ev.value in named:
            # first declaration of a code wins
            continue
        named[ev.value] = EnumVariant(
            name=unique(sanitized_pascal_case(ev.name), taken),
            value=ev.value,
            description=respace(ev.description) if ev.description else None,
            predicate=unique(f"is_{sanitized_snake_case(ev.name)}", predicates),
        )

    if width > EXPLICIT_RESERVED_MAX_WIDTH:
        variants = tuple(sorted(named.values(), key=lambda v: v.value))
    else:
        variants = tuple(
            named.get(code) or EnumVariant(name=f"_Reserved{code:b}", value=code, reserved=True)
            for code in range(1 << width)
        )
    return EnumItem(name=name, view=View.READ, width=width, variants=variants, doc=doc)


def build_write_enum(name: str, evs: EnumeratedValueSet, width: int, doc: Optional[str] = None) -> EnumItem:
    taken: set[str] = set()
    variants = tuple(
        EnumVariant(
            name=unique(sanitized_pascal_case(ev.name or ""), taken),
            value=ev.value,
            description=respace(ev.description) if ev.description else None,
        )
        for ev in writable_values(evs, width, name)
    )
    return EnumItem(name=name, view=View.WRITE, width=width, variants=variants, doc=doc)


def enum_items(ctx: GenerationContext, resolved: ResolvedEnum) -> list[Item]:
    """Body (once per run) and alias (when derived) for a resolved enum."""
    items: list[Item] = []
    width = resolved.field.bit_width
    if ctx.claim(resolved.body_name):
        word = "Read" if resolved.view is View.READ else "Write"
        doc = f"{word} values of the {resolved.register_type}.{resolved.field.name} field"
        if resolved.view is View.READ:
            items.append(build_read_enum(resolved.body_name, resolved.values, width, doc))
        else:
            items.append(build_write_enum(resolved.body_name, resolved.values, width, doc))

    if resolved.aliased and ctx.claim(resolved.type_name):
        items.append(AliasItem(name=resolved.type_name, target=resolved.body_name))
    return items
