from __future__ import annotations

from dataclasses import dataclass, field

from svdgen.runtime.bus import PeripheralModel
from svdgen.utils.bits import mask_for_size


@dataclass
class RegisterFile(PeripheralModel):
    """In-memory register storage keyed by address.

    Counts every read and write per address so callers can check how many bus
    transactions an operation performed.
    """

    reset_values: dict[int, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # addr->value
        self._regs: dict[int, int] = {a: v & 0xFFFFFFFF for a, v in self.reset_values.items()}
        self.reads: dict[int, int] = {}
        self.writes: dict[int, int] = {}

    def read(self, addr: int, size: int) -> int:
        self.reads[addr] = self.reads.get(addr, 0) + 1
        return self._regs.get(addr, 0) & mask_for_size(size)

    def write(self, addr: int, size: int, value: int) -> None:
        self.writes[addr] = self.writes.get(addr, 0) + 1
        m = mask_for_size(size)
        prev = self._regs.get(addr, 0)
        self._regs[addr] = ((prev & ~m) | (value & m)) & 0xFFFFFFFF

    def peek(self, addr: int) -> int:
        """Stored value, without counting an access."""
        return self._regs.get(addr, 0)

    def poke(self, addr: int, value: int) -> None:
        self._regs[addr] = value & 0xFFFFFFFF

    def reset_counters(self) -> None:
        self.reads.clear()
        self.writes.clear()
