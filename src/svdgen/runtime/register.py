"""Base classes for generated register-access modules.

A generated register talks to a bus object with two methods,
``read(address, size) -> int`` and ``write(address, size, value)``, sizes in
bytes. `svdgen.runtime.memory.RegisterFile` and `svdgen.runtime.bus.PeripheralBus`
are two such buses.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

from svdgen.utils.bits import mask_for_size

# storage types of field and register values
U8 = int
U16 = int
U32 = int


class Bus(Protocol):
    def read(self, addr: int, size: int) -> int: ...

    def write(self, addr: int, size: int, value: int) -> None: ...


class UnsafeAccessError(RuntimeError):
    """A raw access that may put undefined codes into hardware was not acknowledged."""


def require_unsafe(unsafe: bool, what: str) -> None:
    if not unsafe:
        raise UnsafeAccessError(f"{what} may write undefined values; pass unsafe=True to allow it")


class FieldEnum(Enum):
    def bits(self) -> int:
        return self.value


class ReadEnum(FieldEnum):
    """Enum decoded from hardware; every code of the field maps to a member.

    Subclasses set ``__width__``. Codes without a declared variant decode to a
    hidden ``_Reserved<binary>`` member, created on first use.
    """

    @classmethod
    def from_bits(cls, bits: int) -> Any:
        return cls(bits)

    @classmethod
    def _missing_(cls, value: object) -> Any:
        width = getattr(cls, "__width__", 0)
        if not isinstance(value, int) or not 0 <= value < 1 << width:
            return None
        member = object.__new__(cls)
        member._name_ = f"_Reserved{value:b}"
        member._value_ = value
        return cls._value2member_map_.setdefault(value, member)

    @property
    def is_reserved(self) -> bool:
        return self._name_.startswith("_Reserved")


class RegisterReader:
    """Immutable view of bits read from a register."""

    __slots__ = ("_bits",)

    def __init__(self, bits: int):
        self._bits = bits

    @property
    def bits(self) -> int:
        return self._bits

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._bits == other._bits

    def __hash__(self) -> int:
        return hash((type(self), self._bits))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(0x{self._bits:X})"


class RegisterWriter:
    """Bits to be written; setters mutate in place and return the writer."""

    __slots__ = ("_bits",)

    def __init__(self, bits: int):
        self._bits = bits

    @property
    def bits(self) -> int:
        return self._bits

    def _set_bit(self, offset: int, value: bool) -> Any:
        if value:
            self._bits |= 1 << offset
        else:
            self._bits &= ~(1 << offset)
        return self

    def _set_field(self, offset: int, mask: int, value: int) -> Any:
        self._bits &= ~(mask << offset)
        self._bits |= (value & mask) << offset
        return self

    def _set_enum(self, offset: int, mask: int, value: FieldEnum) -> Any:
        bits = value.bits()
        if bits & ~mask:
            raise ValueError(f"{value!r} does not fit in a field of mask 0x{mask:X}")
        return self._set_field(offset, mask, bits)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(0x{self._bits:X})"


class FieldProxy:
    """Writer-bound helper offering one method per named value of a field."""

    __slots__ = ("_writer", "_offset", "_mask")

    def __init__(self, writer: RegisterWriter, offset: int, mask: int):
        self._writer = writer
        self._offset = offset
        self._mask = mask

    def _variant(self, value: int) -> Any:
        return self._writer._set_field(self._offset, self._mask, value)


class Register:
    SIZE = 4  # bytes per bus access
    RESET_VALUE: Optional[int] = None

    __slots__ = ("_bus", "_address")

    def __init__(self, bus: Bus, address: int):
        self._bus = bus
        self._address = address

    @property
    def address(self) -> int:
        return self._address

    def _load(self) -> int:
        return self._bus.read(self._address, self.SIZE) & mask_for_size(self.SIZE)

    def _store(self, bits: int) -> None:
        self._bus.write(self._address, self.SIZE, bits & mask_for_size(self.SIZE))

    @staticmethod
    def _commit(w: Any, writer: type) -> int:
        if not isinstance(w, writer):
            raise TypeError(f"the closure must return the {writer.__name__} it was given, got {w!r}")
        return w.bits

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address=0x{self._address:08X})"


@dataclass(frozen=True)
class Slot:
    name: str
    register: type
    size: int  # bytes
    doc: Optional[str] = None


@dataclass(frozen=True)
class Reserved:
    name: str
    size: int  # bytes


class RegisterBlock:
    """Memory layout of a peripheral, instantiated at a base address.

    Subclasses list their `_layout_` in address order; offsets are the running
    sum of the element sizes, padding included.
    """

    _layout_: tuple = ()
    _offsets_: dict[str, int] = {}
    SIZE = 0

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        offsets: dict[str, int] = {}
        cursor = 0
        for element in cls._layout_:
            if isinstance(element, Slot):
                offsets[element.name] = cursor
            cursor += element.size
        cls._offsets_ = offsets
        cls.SIZE = cursor

    def __init__(self, bus: Bus, base_address: int):
        self._bus = bus
        self._base_address = base_address
        for element in self._layout_:
            if isinstance(element, Slot):
                setattr(self, element.name, element.register(bus, base_address + self._offsets_[element.name]))

    @property
    def base_address(self) -> int:
        return self._base_address

    @classmethod
    def offset_of(cls, name: str) -> int:
        return cls._offsets_[name]

    @classmethod
    def register_at(cls, offset: int) -> Optional[str]:
        for name, off in cls._offsets_.items():
            if off == offset:
                return name
        return None

    @classmethod
    def reset_values(cls, base_address: int = 0) -> dict[int, int]:
        """Address -> reset value for every laid-out register that has one."""
        out: dict[int, int] = {}
        for element in cls._layout_:
            if isinstance(element, Slot) and element.register.RESET_VALUE is not None:
                out[base_address + cls._offsets_[element.name]] = element.register.RESET_VALUE
        return out
