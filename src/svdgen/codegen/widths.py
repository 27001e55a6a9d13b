from __future__ import annotations

from svdgen.codegen.errors import FieldWidthError


def storage_width(bits: int) -> int:
    """Smallest natural storage size (8, 16 or 32 bits) holding `bits` bits."""
    if 1 <= bits <= 8:
        return 8
    if 9 <= bits <= 16:
        return 16
    if 17 <= bits <= 32:
        return 32
    raise FieldWidthError(f"a width of {bits} bits is not supported (1..32)")


def int_type(bits: int) -> str:
    return f"u{storage_width(bits)}"


def byte_size(bits: int) -> int:
    """Bytes a register of `bits` bits spans, both in the layout and per bus access."""
    storage_width(bits)
    return (bits + 7) // 8
