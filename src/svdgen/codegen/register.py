from __future__ import annotations

from typing import Optional

from svdgen.codegen.access import classify_access
from svdgen.codegen.context import GenerationContext
from svdgen.codegen.expand import register_type_name
from svdgen.codegen.fields import gen_reader, gen_writer
from svdgen.codegen.items import Item, Operation, RegisterItem
from svdgen.codegen.layout import register_size
from svdgen.codegen.names import respace
from svdgen.codegen.widths import int_type
from svdgen.svd.model import Access, Defaults, Peripheral, Register
from svdgen.utils.logger import get_logger

log = get_logger(__name__)


def register_operations(access: Access, has_fields: bool, has_reset: bool) -> tuple[Operation, ...]:
    """Operations a register exposes, by access mode and field presence.

    The builder form of `write` needs a reset value to start from; without one
    only the raw value form of `write` is offered.
    """
    write = Operation.WRITE_BUILDER if has_reset else Operation.WRITE_VALUE

    if not has_fields:
        if access is Access.READ_ONLY:
            return (Operation.READ_VALUE,)
        if access is Access.WRITE_ONLY:
            return (Operation.WRITE_VALUE,)
        return (Operation.READ_VALUE, Operation.WRITE_VALUE)

    if access is Access.READ_ONLY:
        return (Operation.READ_PROXY, Operation.READ_BITS)
    if access is Access.WRITE_ONLY:
        return (write, Operation.WRITE_BITS)
    return (
        Operation.READ_PROXY,
        write,
        Operation.MODIFY,
        Operation.READ_BITS,
        Operation.WRITE_BITS,
        Operation.MODIFY_BITS,
    )


def reset_value_of(register: Register, defaults: Defaults) -> Optional[int]:
    if register.info.reset_value is not None:
        return register.info.reset_value
    return defaults.reset_value


def gen_register(
    ctx: GenerationContext,
    register: Register,
    peripheral: Peripheral,
    defaults: Defaults,
) -> list[Item]:
    """All fragments for one register type: enums, proxies and the wrapper."""
    info = register.info
    name = ctx.type_name(register)
    if name != register_type_name(register):
        log.warning("register %s is generated as %s to avoid a name clash", info.name, name)

    size = register_size(info, defaults)
    bits_type = int_type(size)
    access = classify_access(info)
    has_fields = bool(info.fields)
    reset_value = reset_value_of(register, defaults)

    items: list[Item] = []
    reader = writer = None
    if has_fields and access is not Access.WRITE_ONLY:
        fragments = gen_reader(ctx, register, peripheral)
        reader = fragments[-1].name
        items.extend(fragments)
    if has_fields and access is not Access.READ_ONLY:
        fragments = gen_writer(ctx, register, peripheral, reset_value)
        writer = fragments[-1].name
        items.extend(fragments)

    items.append(
        RegisterItem(
            name=name,
            description=respace(info.description) if info.description else None,
            access=access,
            size=size,
            bits_type=bits_type,
            reset_value=reset_value,
            operations=register_operations(access, has_fields, reset_value is not None),
            reader=reader,
            writer=writer,
        )
    )
    return items
