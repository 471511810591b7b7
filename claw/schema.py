"""Field types, numeric kinds and the field mapping that describes a struct."""

from __future__ import annotations

import operator
import struct
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import NamedTuple, Optional


class FieldError(ValueError):
    """Raised when a field number or field type is not valid for an operation."""


class FieldType(IntEnum):
    """The type of a field as written in its header."""

    UNKNOWN = 0
    BOOL = 1
    INT8 = 2
    INT16 = 3
    INT32 = 4
    INT64 = 5
    UINT8 = 6
    UINT16 = 7
    UINT32 = 8
    UINT64 = 9
    FLOAT32 = 10
    FLOAT64 = 11
    STRING = 12
    BYTES = 13
    STRUCT = 14
    LIST_BOOLS = 41
    LIST_INT8 = 42
    LIST_INT16 = 43
    LIST_INT32 = 44
    LIST_INT64 = 45
    LIST_UINT8 = 46
    LIST_UINT16 = 47
    LIST_UINT32 = 48
    LIST_UINT64 = 49
    LIST_FLOAT32 = 50
    LIST_FLOAT64 = 51
    LIST_BYTES = 52
    LIST_STRINGS = 53
    LIST_STRUCTS = 54


NUMERIC_LIST_TYPES = frozenset(
    {
        FieldType.LIST_INT8,
        FieldType.LIST_INT16,
        FieldType.LIST_INT32,
        FieldType.LIST_INT64,
        FieldType.LIST_UINT8,
        FieldType.LIST_UINT16,
        FieldType.LIST_UINT32,
        FieldType.LIST_UINT64,
        FieldType.LIST_FLOAT32,
        FieldType.LIST_FLOAT64,
    }
)

LIST_TYPES = NUMERIC_LIST_TYPES | {
    FieldType.LIST_BOOLS,
    FieldType.LIST_BYTES,
    FieldType.LIST_STRINGS,
    FieldType.LIST_STRUCTS,
}


class _KindInfo(NamedTuple):
    fmt: str
    is_float: bool
    is_signed: bool
    scalar: FieldType
    list_type: FieldType


class NumberKind(Enum):
    """The numeric types a field or list of numbers can hold."""

    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def _info(self) -> _KindInfo:
        return _KIND_INFO[self]

    def size_in_bytes(self) -> int:
        """Return the encoded size of one value."""
        return struct.calcsize(self._info.fmt)

    def is_float(self) -> bool:
        """Return True for floating point kinds."""
        return self._info.is_float

    def is_signed(self) -> bool:
        """Return True for kinds that can hold negative values."""
        return self._info.is_signed

    def list_field_type(self) -> FieldType:
        """Return the field type of a list holding this kind."""
        return self._info.list_type

    def pack(self, value) -> bytes:
        """Encode ``value`` as little endian bytes of this kind."""
        info = self._info
        if info.is_float:
            try:
                return struct.pack(info.fmt, float(value))
            except (OverflowError, struct.error) as exc:
                raise ValueError(f"{value!r} does not fit in a {self.value}") from exc
        number = operator.index(value)
        bits = self.size_in_bytes() * 8
        if info.is_signed:
            low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        else:
            low, high = 0, (1 << bits) - 1
        if not low <= number <= high:
            raise ValueError(f"{number} does not fit in a {self.value}")
        return struct.pack(info.fmt, number)

    def unpack(self, data):
        """Decode one value of this kind from the start of ``data``."""
        size = self.size_in_bytes()
        if len(data) < size:
            raise ValueError(f"a {self.value} needs {size} bytes, got {len(data)}")
        return struct.unpack_from(self._info.fmt, data)[0]


_KIND_INFO = {
    NumberKind.INT8: _KindInfo("<b", False, True, FieldType.INT8, FieldType.LIST_INT8),
    NumberKind.INT16: _KindInfo("<h", False, True, FieldType.INT16, FieldType.LIST_INT16),
    NumberKind.INT32: _KindInfo("<i", False, True, FieldType.INT32, FieldType.LIST_INT32),
    NumberKind.INT64: _KindInfo("<q", False, True, FieldType.INT64, FieldType.LIST_INT64),
    NumberKind.UINT8: _KindInfo("<B", False, False, FieldType.UINT8, FieldType.LIST_UINT8),
    NumberKind.UINT16: _KindInfo("<H", False, False, FieldType.UINT16, FieldType.LIST_UINT16),
    NumberKind.UINT32: _KindInfo("<I", False, False, FieldType.UINT32, FieldType.LIST_UINT32),
    NumberKind.UINT64: _KindInfo("<Q", False, False, FieldType.UINT64, FieldType.LIST_UINT64),
    NumberKind.FLOAT32: _KindInfo("<f", True, True, FieldType.FLOAT32, FieldType.LIST_FLOAT32),
    NumberKind.FLOAT64: _KindInfo("<d", True, True, FieldType.FLOAT64, FieldType.LIST_FLOAT64),
}

_KIND_BY_FIELD_TYPE = {
    ft: kind for kind, info in _KIND_INFO.items() for ft in (info.scalar, info.list_type)
}


@dataclass
class FieldDescr:
    """Describes one field of a struct."""

    name: str = ""
    type: FieldType = FieldType.UNKNOWN
    field_num: int = 0
    mapping: Optional["Mapping"] = None
    self_referential: bool = False


@dataclass
class Mapping:
    """The ordered field descriptions of a struct type."""

    fields: list = field(default_factory=list)
    name: str = ""


def number_kind_for(field_type) -> NumberKind:
    """Return the number kind held by a numeric field or numeric list type."""
    try:
        return _KIND_BY_FIELD_TYPE[FieldType(field_type)]
    except (KeyError, ValueError):
        raise FieldError(f"field type {field_type!r} does not hold numbers") from None


def number_desc_check(kind, desc: FieldDescr):
    """Check that ``desc`` holds values of ``kind``; return (size in bits, is float)."""
    if not isinstance(kind, NumberKind):
        raise FieldError(f"passed a number kind of {kind!r} that is not supported")
    info = _KIND_INFO[kind]
    if desc.type not in (info.scalar, info.list_type):
        raise FieldError(
            f"field is not a {kind.value} or []{kind.value} type, was {desc.type!r}"
        )
    return kind.size_in_bytes() * 8, info.is_float


def validate_field_num(field_num: int, mapping: Mapping, *field_types) -> FieldDescr:
    """Check ``field_num`` exists in ``mapping`` and, if types are given, has one of them."""
    count = len(mapping.fields)
    if not 0 <= field_num < count:
        raise FieldError(
            f"fieldNum {field_num} is >= the number of possible fields ({count})"
        )
    desc = mapping.fields[field_num]
    if field_types and desc.type not in field_types:
        raise FieldError(f"fieldNum({field_num}) was {desc.type!r}, which was not valid")
    return desc