"""Runtime support imported by generated register-access modules."""

from .bus import PeripheralBus, PeripheralModel
from .memory import RegisterFile
from .register import (
    U8,
    U16,
    U32,
    FieldEnum,
    FieldProxy,
    ReadEnum,
    Register,
    RegisterBlock,
    RegisterReader,
    RegisterWriter,
    Reserved,
    Slot,
    UnsafeAccessError,
    require_unsafe,
)

__all__ = [
    "U8",
    "U16",
    "U32",
    "FieldEnum",
    "FieldProxy",
    "PeripheralBus",
    "PeripheralModel",
    "ReadEnum",
    "Register",
    "RegisterBlock",
    "RegisterFile",
    "RegisterReader",
    "RegisterWriter",
    "Reserved",
    "Slot",
    "UnsafeAccessError",
    "require_unsafe",
]
