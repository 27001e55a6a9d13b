from __future__ import annotations


def mask_for_size(size: int) -> int:
    """Mask covering an access of `size` bytes."""
    if size == 1:
        return 0xFF
    if size == 2:
        return 0xFFFF
    if size == 4:
        return 0xFFFFFFFF
    return (1 << (size * 8)) - 1


def bit_mask(width: int) -> int:
    """Unshifted mask of a `width`-bit field."""
    return (1 << width) - 1


def bit_range(offset: int, width: int) -> str:
    if width == 1:
        return f"Bit {offset}"
    return f"Bits {offset}:{offset + width - 1}"
