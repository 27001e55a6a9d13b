from __future__ import annotations

from typing import Optional

from svdgen.codegen.context import GenerationContext
from svdgen.codegen.errors import PeripheralNotFoundError, UnresolvedDerivationError
from svdgen.codegen.expand import expand
from svdgen.codegen.items import BlockItem, Item, PeripheralUnit
from svdgen.codegen.layout import build_layout
from svdgen.codegen.names import respace, sanitized_pascal_case, sanitized_snake_case
from svdgen.codegen.register import gen_register
from svdgen.svd.model import Defaults, Device, Peripheral
from svdgen.utils.logger import get_logger

log = get_logger(__name__)


def gen_peripheral(
    p: Peripheral,
    defaults: Defaults,
    ctx: Optional[GenerationContext] = None,
) -> PeripheralUnit:
    """Generate the fragments of one peripheral.

    Registers are laid out and their types emitted in ascending offset order;
    a register overlapping an earlier one is left out of the layout (reported in
    `PeripheralUnit.overlaps`) but still gets its type.
    """
    if p.derived_from is not None:
        raise UnresolvedDerivationError(
            f"peripheral {p.name} is derived from {p.derived_from}; resolve it before generating"
        )
    if ctx is None:
        ctx = GenerationContext()

    # register types take their names first, in offset order
    ordered = sorted(p.registers, key=lambda r: r.info.address_offset)
    for register in ordered:
        ctx.type_name(register)

    layout = build_layout(expand(p.registers, ctx.type_name), defaults)

    items: list[Item] = []
    for register in ordered:
        items.extend(gen_register(ctx, register, p, defaults))

    wanted = sanitized_pascal_case(p.name)
    if wanted in ctx.taken:
        wanted += "Block"
    block_name = ctx.name_for(("block", id(p)), wanted)

    description = respace(p.description) if p.description else None
    block = BlockItem(name=block_name, description=description, elements=layout.elements, size=layout.size)

    log.info(
        "Generated %s: %d registers, %d bytes, %d overlaps",
        p.name, len(p.registers), layout.size, len(layout.overlaps),
    )
    return PeripheralUnit(
        name=p.name,
        module_name=sanitized_snake_case(p.name),
        description=description,
        block=block,
        items=tuple(items),
        overlaps=layout.overlaps,
    )


def gen_device(device: Device, name: Optional[str] = None) -> list[PeripheralUnit]:
    """One self-contained unit for the named peripheral, or one per peripheral."""
    if name is not None:
        p = device.find_peripheral(name)
        if p is None:
            raise PeripheralNotFoundError(f"no peripheral named {name} in {device.name}")
        return [gen_peripheral(p, device.defaults)]
    return [gen_peripheral(p, device.defaults) for p in device.peripherals]
