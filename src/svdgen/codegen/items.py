"""Code fragments produced by the generators and consumed by an emitter.

Fragments carry structural decisions only (names, offsets, masks, which
operations exist); turning them into source text is the emitter's job.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union

from svdgen.codegen.errors import RegisterOverlap
from svdgen.codegen.widths import byte_size
from svdgen.svd.model import Access


class View(Enum):
    READ = "R"
    WRITE = "W"


class Operation(str, Enum):
    READ_VALUE = "read_value"  # read() -> raw bits
    READ_PROXY = "read_proxy"  # read() -> reader
    READ_BITS = "read_bits"
    WRITE_VALUE = "write_value"  # write(value)
    WRITE_BUILDER = "write_builder"  # write(f), seeded from the reset value
    WRITE_BITS = "write_bits"
    MODIFY = "modify"
    MODIFY_BITS = "modify_bits"


# ---- layout


@dataclass(frozen=True)
class Padding:
    kind: ClassVar[str] = "padding"
    name: str
    size: int  # bytes


@dataclass(frozen=True)
class RegisterSlot:
    kind: ClassVar[str] = "slot"
    name: str
    type_name: str
    offset: int
    size: int  # bytes
    doc: str


LayoutElement = Union[Padding, RegisterSlot]


@dataclass(frozen=True)
class BlockItem:
    kind: ClassVar[str] = "block"
    name: str
    description: Optional[str]
    elements: tuple[LayoutElement, ...]
    size: int


# ---- enumerated values


@dataclass(frozen=True)
class EnumVariant:
    name: str
    value: int
    description: Optional[str] = None
    reserved: bool = False
    predicate: Optional[str] = None  # "is_<variant>" for named read variants


@dataclass(frozen=True)
class EnumItem:
    kind: ClassVar[str] = "enum"
    name: str
    view: View
    width: int
    variants: tuple[EnumVariant, ...]
    doc: Optional[str] = None


@dataclass(frozen=True)
class AliasItem:
    kind: ClassVar[str] = "alias"
    name: str
    target: str


# ---- per-field accessors


@dataclass(frozen=True)
class FieldReader:
    kind: str  # "bool" | "int" | "enum"
    name: str
    offset: int
    width: int
    mask: int
    int_type: str
    enum_name: Optional[str] = None
    doc: Optional[str] = None


@dataclass(frozen=True)
class ReaderItem:
    kind: ClassVar[str] = "reader"
    name: str
    register: str
    fields: tuple[FieldReader, ...]


@dataclass(frozen=True)
class ProxyMethod:
    name: str
    value: int
    doc: Optional[str] = None


@dataclass(frozen=True)
class ProxyItem:
    kind: ClassVar[str] = "proxy"
    name: str
    writer: str
    field: str
    methods: tuple[ProxyMethod, ...]


@dataclass(frozen=True)
class FieldWriter:
    kind: str  # "bool" | "int" | "enum"
    name: str
    offset: int
    width: int
    mask: int
    int_type: str
    enum_name: Optional[str] = None
    proxy_name: Optional[str] = None
    enum_method: Optional[str] = None
    bits_method: Optional[str] = None
    bits_safe: bool = True  # every code has a named variant
    doc: Optional[str] = None


@dataclass(frozen=True)
class WriterItem:
    kind: ClassVar[str] = "writer"
    name: str
    register: str
    reset_value: Optional[int]
    fields: tuple[FieldWriter, ...]


# ---- registers


@dataclass(frozen=True)
class RegisterItem:
    kind: ClassVar[str] = "register"
    name: str
    description: Optional[str]
    access: Access
    size: int  # declared bits
    bits_type: str  # storage type, e.g. "u32"
    reset_value: Optional[int]
    operations: tuple[Operation, ...]
    reader: Optional[str] = None
    writer: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return byte_size(self.size)


Item = Union[EnumItem, AliasItem, ReaderItem, ProxyItem, WriterItem, RegisterItem]


@dataclass(frozen=True)
class PeripheralUnit:
    name: str
    module_name: str
    description: Optional[str]
    block: BlockItem
    items: tuple[Item, ...]
    overlaps: tuple[RegisterOverlap, ...] = ()
