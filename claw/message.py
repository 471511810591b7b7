"""The Struct type: a set of typed fields kept in their encoded form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .header import HEADER_SIZE, MAX_DATA_SIZE, GenericHeader
from .padding import size_with_padding
from .schema import (
    LIST_TYPES,
    FieldError,
    FieldType,
    Mapping,
    NumberKind,
    number_desc_check,
    number_kind_for,
    validate_field_num,
)

_SCALAR_NUMBER_TYPES = frozenset(
    {
        FieldType.INT8,
        FieldType.INT16,
        FieldType.INT32,
        FieldType.INT64,
        FieldType.UINT8,
        FieldType.UINT16,
        FieldType.UINT32,
        FieldType.UINT64,
        FieldType.FLOAT32,
        FieldType.FLOAT64,
    }
)
_BOOL_BIT = 1  # bit 24 of the header is bit 0 of the final 40 bits
_INLINE_MASK = 0xFFFFFFFF


@dataclass
class StructField:
    """One field slot of a Struct: its header and, when needed, its value."""

    header: Optional[GenericHeader] = None
    value: Any = None

    def clear(self) -> None:
        self.header = None
        self.value = None


class Struct:
    """A set of values described by a Mapping, tracking its encoded size.

    ``total`` is the encoded size in bytes, header included. Every change to a
    field updates the total of this Struct and of every Struct above it.
    """

    def __init__(self, field_num: int = 0, mapping: Optional[Mapping] = None) -> None:
        if mapping is None:
            raise ValueError("mapping must not be None")
        self.header = GenericHeader()
        self.header.set_field_num(field_num)
        self.header.set_field_type(FieldType.STRUCT)
        self.mapping = mapping
        self.fields = [StructField() for _ in mapping.fields]
        self.parent: Optional[Struct] = None
        self.total = 0
        self.zero_type_compression = True
        self.in_list = False
        self.add_to_total(HEADER_SIZE)

    def new_from(self) -> "Struct":
        """Return a new, empty Struct of the same type."""
        fresh = Struct(0, self.mapping)
        fresh.zero_type_compression = self.zero_type_compression
        return fresh

    def set_no_zero_type_compression(self) -> None:
        """Keep headers for scalar fields even when they hold their zero value."""
        self.zero_type_compression = False

    def is_set(self, field_num: int) -> bool:
        """Report whether a field is set; invalid field numbers report False.

        With zero type compression on, scalar, string and bytes fields always
        count as set, since their zero value is not written.
        """
        if not 0 <= field_num < len(self.mapping.fields):
            return False
        slot = self.fields[field_num]
        if not self.zero_type_compression:
            return slot.header is not None
        if slot.header is not None:
            return True
        field_type = self.mapping.fields[field_num].type
        return field_type != FieldType.STRUCT and field_type not in LIST_TYPES

    def add_to_total(self, value: int) -> None:
        """Add ``value`` bytes to this Struct's size and to every parent's."""
        node: Optional[Struct] = self
        while node is not None:
            node.total += int(value)
            node.header.set_final40(node.total)
            node = node.parent

    # Booleans

    def get_bool(self, field_num: int) -> bool:
        """Return a bool field; an unset field is False."""
        validate_field_num(field_num, self.mapping, FieldType.BOOL)
        slot = self.fields[field_num]
        if slot.header is None:
            return False
        return bool(slot.header.final40() & _BOOL_BIT)

    def set_bool(self, field_num: int, value: bool) -> None:
        """Set a bool field."""
        validate_field_num(field_num, self.mapping, FieldType.BOOL)
        slot = self.fields[field_num]
        if slot.header is None:
            slot.header = GenericHeader()
            slot.header.set_field_num(field_num)
            slot.header.set_field_type(FieldType.BOOL)
            self.add_to_total(HEADER_SIZE)
        current = slot.header.final40()
        if value:
            slot.header.set_final40(current | _BOOL_BIT)
        else:
            slot.header.set_final40(current & ~_BOOL_BIT)

    def delete_bool(self, field_num: int) -> None:
        """Remove a bool field."""
        validate_field_num(field_num, self.mapping, FieldType.BOOL)
        slot = self.fields[field_num]
        if slot.header is None:
            return
        slot.clear()
        self.add_to_total(-HEADER_SIZE)

    # Numbers

    def _check_number(self, field_num: int, kind: NumberKind, action: str):
        desc = validate_field_num(field_num, self.mapping)
        try:
            size, is_float = number_desc_check(kind, desc)
        except FieldError as exc:
            raise FieldError(f"error {action} field number {field_num}: {exc}") from exc
        return desc, size, is_float

    def get_number(self, field_num: int, kind: NumberKind):
        """Return a number field read as ``kind``; an unset field is zero."""
        _, size, is_float = self._check_number(field_num, kind, "getting")
        slot = self.fields[field_num]
        if slot.header is None:
            return 0.0 if is_float else 0
        if size < 64:
            raw = bytes(slot.header)[3 : 3 + kind.size_in_bytes()]
            return kind.unpack(raw)
        return kind.unpack(slot.value)

    def set_number(self, field_num: int, kind: NumberKind, value) -> None:
        """Set a number field; values over 32 bits are stored after the header."""
        desc, size, is_float = self._check_number(field_num, kind, "setting")
        packed = kind.pack(value)
        slot = self.fields[field_num]
        if slot.header is None:
            slot.header = GenericHeader()
            if size < 64:
                self.add_to_total(HEADER_SIZE)
            else:
                slot.value = bytearray(8)
                self.add_to_total(2 * HEADER_SIZE)
        slot.header.set_field_num(field_num)
        slot.header.set_field_type(desc.type)
        if size < 64:
            if is_float:
                inline = int.from_bytes(packed, "little")
            else:
                inline = int(value) & _INLINE_MASK
            slot.header.set_final40(inline)
        else:
            slot.header.set_final40(0)
            slot.value[:] = packed

    def delete_number(self, field_num: int) -> None:
        """Remove a number field."""
        desc = validate_field_num(field_num, self.mapping)
        if desc.type not in _SCALAR_NUMBER_TYPES:
            raise FieldError(f"fieldNum({field_num}) was {desc.type!r}, not a number")
        slot = self.fields[field_num]
        if slot.header is None:
            return
        kind = number_kind_for(desc.type)
        slot.clear()
        self.add_to_total(-(HEADER_SIZE if kind.size_in_bytes() < 8 else 2 * HEADER_SIZE))

    # Bytes and strings

    def get_bytes(self, field_num: int) -> Optional[bytes]:
        """Return a bytes or string field as bytes, or None when unset."""
        validate_field_num(field_num, self.mapping, FieldType.BYTES, FieldType.STRING)
        slot = self.fields[field_num]
        if slot.header is None:
            return None
        return slot.value

    def set_bytes(self, field_num: int, value, is_string: bool = False) -> None:
        """Set a bytes or string field; ``str`` values are stored as UTF-8."""
        validate_field_num(field_num, self.mapping, FieldType.BYTES, FieldType.STRING)
        data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        if not data:
            raise ValueError("cannot encode an empty Bytes value")
        if len(data) > MAX_DATA_SIZE:
            raise ValueError(f"cannot set a String or Byte field to size > {MAX_DATA_SIZE}")
        slot = self.fields[field_num]
        if slot.header is None:
            slot.header = GenericHeader()
        else:
            self.add_to_total(-(HEADER_SIZE + size_with_padding(slot.header.final40())))
        slot.header.set_field_num(field_num)
        slot.header.set_field_type(FieldType.STRING if is_string else FieldType.BYTES)
        slot.header.set_final40(len(data))
        slot.value = data
        self.add_to_total(HEADER_SIZE + size_with_padding(len(data)))

    def delete_bytes(self, field_num: int) -> None:
        """Remove a bytes or string field."""
        validate_field_num(field_num, self.mapping, FieldType.BYTES, FieldType.STRING)
        slot = self.fields[field_num]
        if slot.header is None:
            return
        removed = HEADER_SIZE + size_with_padding(slot.header.final40())
        slot.clear()
        self.add_to_total(-removed)

    # Nested structs

    def get_struct(self, field_num: int) -> Optional["Struct"]:
        """Return a nested Struct field, or None when unset."""
        validate_field_num(field_num, self.mapping, FieldType.STRUCT)
        slot = self.fields[field_num]
        if slot.header is None:
            return None
        return slot.value

    def set_struct(self, field_num: int, value: "Struct") -> None:
        """Attach ``value`` as a nested Struct field, replacing any previous one."""
        if value is None:
            raise ValueError("value cannot be None, to delete a Struct use delete_struct()")
        validate_field_num(field_num, self.mapping, FieldType.STRUCT)
        if value.total > MAX_DATA_SIZE:
            raise ValueError(f"cannot set a Struct field to size > {MAX_DATA_SIZE}")
        slot = self.fields[field_num]
        if slot.header is not None:
            old = slot.value
            old.parent = None
            self.add_to_total(-old.total)
        value.parent = self
        value.header.set_field_num(field_num)
        slot.header = value.header
        slot.value = value
        self.add_to_total(value.total)

    def delete_struct(self, field_num: int) -> None:
        """Detach and remove a nested Struct field."""
        validate_field_num(field_num, self.mapping, FieldType.STRUCT)
        slot = self.fields[field_num]
        if slot.header is None:
            return
        old = slot.value
        slot.clear()
        if old is None:
            self.add_to_total(-HEADER_SIZE)
            return
        old.parent = None
        self.add_to_total(-old.total)

    def __repr__(self) -> str:
        name = self.mapping.name or "Struct"
        return f"<{name} field_num={self.header.field_num()} total={self.total}>"