from __future__ import annotations

from dataclasses import dataclass

from svdgen.codegen.errors import MissingSizeError, RegisterOverlap
from svdgen.codegen.expand import ExpandedRegister, type_name_text
from svdgen.codegen.items import LayoutElement, Padding, RegisterSlot
from svdgen.codegen.names import respace
from svdgen.codegen.widths import byte_size
from svdgen.svd.model import Defaults, RegisterInfo
from svdgen.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Layout:
    elements: tuple[LayoutElement, ...]
    overlaps: tuple[RegisterOverlap, ...]
    size: int  # bytes covered, padding included


def register_size(info: RegisterInfo, defaults: Defaults) -> int:
    """Declared size in bits, falling back to the peripheral-wide default."""
    size = info.size if info.size is not None else defaults.size
    if size is None:
        raise MissingSizeError(f"register {info.name} has no size and no default size applies")
    return size


def build_layout(registers: list[ExpandedRegister], defaults: Defaults) -> Layout:
    """Lay out offset-sorted registers, padding gaps and dropping overlaps."""
    elements: list[LayoutElement] = []
    overlaps: list[RegisterOverlap] = []
    cursor = 0
    n_pad = 0

    for reg in registers:
        gap = reg.offset - cursor
        if gap < 0:
            log.warning("%s overlaps with another register at offset 0x%X. Ignoring.", reg.name, reg.offset)
            overlaps.append(RegisterOverlap(register=reg.name, offset=reg.offset))
            continue

        if gap > 0:
            elements.append(Padding(name=f"_reserved{n_pad}", size=gap))
            n_pad += 1

        doc = f"0x{reg.offset:02x}"
        if reg.info.description:
            doc += f" - {respace(reg.info.description)}"

        size = byte_size(register_size(reg.info, defaults))
        elements.append(
            RegisterSlot(
                name=reg.name,
                type_name=type_name_text(reg.ty),
                offset=reg.offset,
                size=size,
                doc=doc,
            )
        )
        cursor = reg.offset + size

    return Layout(elements=tuple(elements), overlaps=tuple(overlaps), size=cursor)
