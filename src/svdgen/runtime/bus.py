from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from svdgen.utils.logger import get_logger

log = get_logger(__name__)


class PeripheralModel:
    def read(self, addr: int, size: int) -> int:  # noqa: D401
        """Read from an MMIO address (size in bytes)."""
        raise NotImplementedError

    def write(self, addr: int, size: int, value: int) -> None:  # noqa: D401
        """Write to an MMIO address (size in bytes)."""
        raise NotImplementedError


@dataclass(frozen=True)
class AttachedBlock:
    name: str
    base: int
    end: int  # exclusive
    block: type  # RegisterBlock subclass
    model: PeripheralModel


class PeripheralBus:
    """Routes register accesses of several generated blocks to their models."""

    def __init__(self) -> None:
        self._ranges: list[AttachedBlock] = []
        self.mmio_log_enabled = False

    def attach(self, name: str, base: int, block: type, model: PeripheralModel):
        """Map `model` at `base` and return an instance of `block` bound to this bus."""
        end = base + max(block.SIZE, 4)
        for r in self._ranges:
            if base < r.end and r.base < end:
                raise ValueError(f"{name} [0x{base:08X}, 0x{end:08X}) overlaps {r.name}")
        self._ranges.append(AttachedBlock(name=name, base=base, end=end, block=block, model=model))
        self._ranges.sort(key=lambda r: r.base)
        return block(self, base)

    def find(self, addr: int) -> Optional[AttachedBlock]:
        for r in self._ranges:
            if r.base <= addr < r.end:
                return r
        return None

    def _route(self, addr: int) -> AttachedBlock:
        r = self.find(addr)
        if r is None:
            raise KeyError(f"no peripheral for addr 0x{addr:08X}")
        return r

    def _reg_name(self, r: AttachedBlock, addr: int) -> str:
        return r.block.register_at(addr - r.base) or f"+0x{addr - r.base:X}"

    def read(self, addr: int, size: int) -> int:
        r = self._route(addr)
        val = r.model.read(addr, size)
        if self.mmio_log_enabled:
            log.info("MMIO R  %s.%s [0x%08X size=%d] -> 0x%X", r.name, self._reg_name(r, addr), addr, size, val)
        return val

    def write(self, addr: int, size: int, value: int) -> None:
        r = self._route(addr)
        if self.mmio_log_enabled:
            log.info("MMIO W  %s.%s [0x%08X size=%d] <- 0x%X", r.name, self._reg_name(r, addr), addr, size, value)
        r.model.write(addr, size, value)
