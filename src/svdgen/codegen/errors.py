"""Error types raised (or, for overlaps, recorded) during generation.

Every fatal condition is a `GenerationError` subclass so callers can tell them
apart by type. The only recovered condition, a register overlapping space that
is already laid out, is returned as a `RegisterOverlap` record instead.
"""
from __future__ import annotations

from dataclasses import dataclass


class GenerationError(Exception):
    """Aborts the generation run."""


class UnresolvedDerivationError(GenerationError):
    """A peripheral still carries `derivedFrom`; the loader must resolve it."""


class MissingSizeError(GenerationError):
    """A register has no bit size and no default applies."""


class FieldWidthError(GenerationError):
    """A bit width outside 1..32."""


class EnumDerivationError(GenerationError):
    """An enumerated-value `derivedFrom` reference cannot be honoured."""


class RegisterNotFoundError(EnumDerivationError):
    pass


class FieldNotFoundError(EnumDerivationError):
    pass


class EnumSetNotFoundError(EnumDerivationError):
    pass


class MissingEnumValueError(GenerationError):
    """A writable enumerated value has a name but no value."""


class PeripheralNotFoundError(GenerationError):
    pass


@dataclass(frozen=True)
class RegisterOverlap:
    register: str
    offset: int

    def __str__(self) -> str:
        return f"{self.register} overlaps with another register at offset 0x{self.offset:X}"
