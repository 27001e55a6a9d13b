from __future__ import annotations

from typing import Optional

from svdgen.codegen.access import field_access
from svdgen.codegen.context import GenerationContext
from svdgen.codegen.enums import enum_items, resolve_enum, writable_values
from svdgen.codegen.items import (
    FieldReader,
    FieldWriter,
    Item,
    ProxyItem,
    ProxyMethod,
    ReaderItem,
    View,
    WriterItem,
)
from svdgen.codegen.names import respace, sanitized_pascal_case, sanitized_snake_case, unique
from svdgen.codegen.widths import int_type
from svdgen.svd.model import Access, Field, Peripheral, Register
from svdgen.utils.bits import bit_mask, bit_range


def field_doc(field: Field) -> Optional[str]:
    if not field.description:
        return None
    return f"{bit_range(field.bit_offset, field.bit_width)} - {respace(field.description)}"


def _visible(field: Field) -> bool:
    # fields named RESERVED are never exposed
    return field.name.lower() != "reserved"


def gen_reader(ctx: GenerationContext, register: Register, peripheral: Peripheral) -> list[Item]:
    """Read proxy for `register` plus the enums its accessors return."""
    info = register.info
    rtype = ctx.type_name(register)
    items: list[Item] = []
    accessors: list[FieldReader] = []
    taken: set[str] = set()

    for field in info.fields or ():
        if not _visible(field) or field_access(field, info) is Access.WRITE_ONLY:
            continue

        width = field.bit_width
        common = dict(
            name=unique(sanitized_snake_case(field.name), taken),
            offset=field.bit_offset,
            width=width,
            mask=bit_mask(width),
            int_type=int_type(width),
            doc=field_doc(field),
        )
        if width == 1:
            accessors.append(FieldReader(kind="bool", **common))
            continue

        resolved = resolve_enum(ctx, field, register, peripheral, View.READ)
        if resolved is None:
            accessors.append(FieldReader(kind="int", **common))
            continue

        items.extend(enum_items(ctx, resolved))
        accessors.append(FieldReader(kind="enum", enum_name=resolved.type_name, **common))

    rname = ctx.name_for(("reader", id(register)), f"{rtype}R")
    items.append(ReaderItem(name=rname, register=rtype, fields=tuple(accessors)))
    return items


def gen_writer(
    ctx: GenerationContext,
    register: Register,
    peripheral: Peripheral,
    reset_value: Optional[int],
) -> list[Item]:
    """Write proxy (builder) for `register`, its enums and field sub-proxies."""
    info = register.info
    rtype = ctx.type_name(register)
    wname = ctx.name_for(("writer", id(register)), f"{rtype}W")
    items: list[Item] = []
    setters: list[FieldWriter] = []
    taken: set[str] = set()

    for field in info.fields or ():
        if not _visible(field) or field_access(field, info) is Access.READ_ONLY:
            continue

        width = field.bit_width
        name = unique(sanitized_snake_case(field.name), taken)
        common = dict(
            name=name,
            offset=field.bit_offset,
            width=width,
            mask=bit_mask(width),
            int_type=int_type(width),
            doc=field_doc(field),
        )
        if width == 1:
            setters.append(FieldWriter(kind="bool", **common))
            continue

        resolved = resolve_enum(ctx, field, register, peripheral, View.WRITE)
        if resolved is None:
            setters.append(FieldWriter(kind="int", **common))
            continue

        items.extend(enum_items(ctx, resolved))

        values = writable_values(resolved.values, width, f"{info.name}.{field.name}")
        method_names: set[str] = set()
        proxy_name = ctx.name_for(
            ("proxy", id(register), id(field)),
            f"_{rtype}W{sanitized_pascal_case(field.name)}",
        )
        items.append(
            ProxyItem(
                name=proxy_name,
                writer=wname,
                field=field.name,
                methods=tuple(
                    ProxyMethod(
                        name=unique(sanitized_snake_case(ev.name or ""), method_names),
                        value=ev.value,
                        doc=respace(ev.description) if ev.description else None,
                    )
                    for ev in values
                ),
            )
        )
        setters.append(
            FieldWriter(
                kind="enum",
                enum_name=resolved.type_name,
                proxy_name=proxy_name,
                enum_method=unique(f"{name}_enum", taken),
                bits_method=unique(f"{name}_bits", taken),
                bits_safe=len({ev.value for ev in values}) == 1 << width,
                **common,
            )
        )

    items.append(WriterItem(name=wname, register=rtype, reset_value=reset_value, fields=tuple(setters)))
    return items
