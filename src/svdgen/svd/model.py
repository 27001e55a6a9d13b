from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class Access(Enum):
    READ_ONLY = "read-only"
    WRITE_ONLY = "write-only"
    READ_WRITE = "read-write"


class Usage(Enum):
    READ = "read"
    WRITE = "write"
    READ_WRITE = "read-write"


@dataclass(frozen=True)
class EnumeratedValue:
    name: Optional[str] = None
    description: Optional[str] = None
    value: Optional[int] = None


@dataclass(frozen=True)
class EnumeratedValueSet:
    name: Optional[str] = None
    derived_from: Optional[str] = None  # "NAME", "REG.FIELD" or "REG.FIELD.NAME"
    usage: Optional[Usage] = None  # None: usable for reading and writing
    values: tuple[EnumeratedValue, ...] = ()


@dataclass(frozen=True)
class Field:
    name: str
    bit_offset: int
    bit_width: int
    description: Optional[str] = None
    access: Optional[Access] = None
    enumerated_value_sets: tuple[EnumeratedValueSet, ...] = ()


@dataclass(frozen=True)
class RegisterInfo:
    name: str  # arrays carry a "%s" / "[%s]" placeholder
    address_offset: int
    description: Optional[str] = None
    size: Optional[int] = None  # bits
    access: Optional[Access] = None
    reset_value: Optional[int] = None
    fields: Optional[tuple[Field, ...]] = None


@dataclass(frozen=True)
class ArrayInfo:
    count: int
    increment: int  # bytes
    index_labels: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class SingleRegister:
    info: RegisterInfo


@dataclass(frozen=True)
class ArrayRegister:
    info: RegisterInfo
    array: ArrayInfo


Register = Union[SingleRegister, ArrayRegister]


@dataclass(frozen=True)
class Defaults:
    size: Optional[int] = None
    reset_value: Optional[int] = None


@dataclass(frozen=True)
class Peripheral:
    name: str
    base_address: int = 0
    description: Optional[str] = None
    derived_from: Optional[str] = None  # must be resolved by the loader
    registers: tuple[Register, ...] = ()


@dataclass(frozen=True)
class Device:
    name: str
    defaults: Defaults = field(default_factory=Defaults)
    peripherals: tuple[Peripheral, ...] = ()

    def find_peripheral(self, name: str) -> Optional[Peripheral]:
        if not name:
            return None
        wanted = name.upper()
        for p in self.peripherals:
            if p.name.upper() == wanted:
                return p
        return None
