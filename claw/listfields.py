"""List-valued fields of a Struct, the list of nested Structs, and generic field access."""

from __future__ import annotations

import operator
from numbers import Real
from typing import Optional

from .bytes_lists import Bytes, Strings
from .header import HEADER_SIZE, MAX_DATA_SIZE, GenericHeader, update_items
from .lists import Bools, Numbers
from .message import Struct
from .schema import (
    NUMERIC_LIST_TYPES,
    FieldError,
    FieldType,
    Mapping,
    NumberKind,
    number_desc_check,
    number_kind_for,
    validate_field_num,
)

_BYTES_LIST_TYPES = (FieldType.LIST_BYTES, FieldType.LIST_STRINGS)
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


class Structs:
    """A list of Structs that all share one Mapping."""

    def __init__(self, mapping: Mapping) -> None:
        if mapping is None:
            raise ValueError("mapping cannot be None")
        self.mapping = mapping
        self.header = GenericHeader()
        self.header.set_field_num(0)
        self.header.set_field_type(FieldType.LIST_STRUCTS)
        self.header.set_final40(0)
        self._items: list = []
        self.owner: Optional[Struct] = None
        self.zero_type_compression = True

    @property
    def size(self) -> int:
        """Encoded size in bytes: the list header plus every entry."""
        return HEADER_SIZE + sum(item.total for item in self._items)

    def new(self) -> Struct:
        """Return a new Struct of the type this list holds."""
        return Struct(0, self.mapping)

    def reset(self) -> None:
        """Empty the list and detach it and its entries; owner totals are not touched."""
        for item in self._items:
            item.parent = None
            item.in_list = False
        self._items = []
        self.owner = None
        update_items(self.header, 0)

    def _set_owner(self, owner: Optional[Struct]) -> None:
        self.owner = owner
        for item in self._items:
            item.parent = owner

    def __len__(self) -> int:
        return len(self._items)

    def _index(self, index) -> int:
        position = operator.index(index)
        if position < 0:
            position += len(self._items)
        if not 0 <= position < len(self._items):
            raise IndexError(
                f"slice out of bounds: index {index} in slice of size {len(self._items)}"
            )
        return position

    def __getitem__(self, index) -> Struct:
        return self._items[self._index(index)]

    def _check_entry(self, value, label: str) -> None:
        if value is None:
            raise ValueError(f"{label} cannot be a None Struct")
        if not isinstance(value, Struct):
            raise TypeError(f"{label} must be a Struct, got {type(value).__name__}")
        if value.parent is not None or value.in_list:
            raise ValueError(f"{label} is attached to another field")
        if value.mapping is not self.mapping:
            raise ValueError(f"{label} is a Struct with a different type than the list")

    def _attach(self, value: Struct) -> None:
        value.parent = self.owner
        value.in_list = True
        value.zero_type_compression = self.zero_type_compression

    def __setitem__(self, index, value: Struct) -> None:
        position = self._index(index)
        old = self._items[position]
        if value is old:
            return
        self._check_entry(value, f"value for index {position}")
        old.parent = None
        old.in_list = False
        self._attach(value)
        self._items[position] = value
        if self.owner is not None:
            self.owner.add_to_total(value.total - old.total)

    def __iter__(self):
        return iter(list(self._items))

    def range(self, start: int, stop: int):
        """Iterate over entries from ``start`` (inclusive) to ``stop`` (exclusive)."""
        length = len(self._items)
        if length == 0:
            return iter(())
        if start < 0 or start > length - 1:
            raise IndexError("range 'start' argument is out of bounds")
        if stop > length:
            raise IndexError("range 'stop' argument is out of bounds")
        if start >= stop:
            raise ValueError("range 'start' must be less than 'stop'")
        return iter(self._items[start:stop])

    def append(self, *values) -> None:
        """Append Structs; each must be detached and of this list's type."""
        seen = set()
        for position, value in enumerate(values):
            self._check_entry(value, f"entry {position}")
            if id(value) in seen:
                raise ValueError(f"entry {position} appears more than once")
            seen.add(id(value))
        if len(self._items) + len(values) > MAX_DATA_SIZE:
            raise ValueError(f"cannot have more than {MAX_DATA_SIZE} items in a list")
        for value in values:
            self._attach(value)
        self._items.extend(values)
        update_items(self.header, len(self._items))
        if self.owner is not None:
            self.owner.add_to_total(sum(value.total for value in values))

    def to_list(self) -> list:
        """Return the entries as a new Python list."""
        return list(self._items)

    def __repr__(self) -> str:
        return f"Structs(len={len(self._items)}, size={self.size})"


def _replace(msg: Struct, field_num: int, value) -> None:
    slot = msg.fields[field_num]
    if slot.header is not None:
        old = slot.value
        old.owner = None
        msg.add_to_total(-old.size)
    value.header.set_field_num(field_num)
    slot.header = value.header
    slot.value = value
    value.owner = msg
    msg.add_to_total(value.size)


def _remove(msg: Struct, field_num: int) -> None:
    slot = msg.fields[field_num]
    if slot.header is None:
        return
    old = slot.value
    slot.clear()
    old.owner = None
    msg.add_to_total(-old.size)


def _checked_kind(kind, desc, field_num: int, action: str) -> None:
    try:
        number_desc_check(kind, desc)
    except FieldError as exc:
        raise FieldError(f"error {action} field number {field_num}: {exc}") from exc


# Lists of bools


def get_list_bools(msg: Struct, field_num: int) -> Optional[Bools]:
    """Return the list of bools at ``field_num``, or None when unset."""
    validate_field_num(field_num, msg.mapping, FieldType.LIST_BOOLS)
    return msg.fields[field_num].value


def set_list_bools(msg: Struct, field_num: int, value: Bools) -> None:
    """Store a list of bools at ``field_num``, replacing any previous list."""
    validate_field_num(field_num, msg.mapping, FieldType.LIST_BOOLS)
    if not isinstance(value, Bools):
        raise TypeError(f"expected Bools, got {type(value).__name__}")
    _replace(msg, field_num, value)


def delete_list_bools(msg: Struct, field_num: int) -> None:
    """Remove the list of bools at ``field_num``."""
    validate_field_num(field_num, msg.mapping, FieldType.LIST_BOOLS)
    _remove(msg, field_num)


# Lists of numbers


def get_list_numbers(msg: Struct, field_num: int, kind: NumberKind) -> Optional[Numbers]:
    """Return the list of ``kind`` numbers at ``field_num``, or None when unset."""
    desc = validate_field_num(field_num, msg.mapping, *NUMERIC_LIST_TYPES)
    slot = msg.fields[field_num]
    if slot.header is None:
        return None
    _checked_kind(kind, desc, field_num, "getting")
    return slot.value


def set_list_numbers(msg: Struct, field_num: int, value: Numbers) -> None:
    """Store a list of numbers at ``field_num``, replacing any previous list."""
    desc = validate_field_num(field_num, msg.mapping, *NUMERIC_LIST_TYPES)
    if not isinstance(value, Numbers):
        raise TypeError(f"expected Numbers, got {type(value).__name__}")
    _checked_kind(value.kind, desc, field_num, "setting")
    _replace(msg, field_num, value)


def delete_list_numbers(msg: Struct, field_num: int, kind: NumberKind) -> None:
    """Remove the list of ``kind`` numbers at ``field_num``."""
    desc = validate_field_num(field_num, msg.mapping, *NUMERIC_LIST_TYPES)
    if msg.fields[field_num].header is None:
        return
    _checked_kind(kind, desc, field_num, "deleting")
    _remove(msg, field_num)


# Lists of bytes and strings


def get_list_bytes(msg: Struct, field_num: int) -> Optional[Bytes]:
    """Return the list of bytes (or encoded strings) at ``field_num``, or None."""
    validate_field_num(field_num, msg.mapping, *_BYTES_LIST_TYPES)
    return msg.fields[field_num].value


def set_list_bytes(msg: Struct, field_num: int, value: Bytes) -> None:
    """Store a list of bytes at ``field_num``, replacing any previous list."""
    desc = validate_field_num(field_num, msg.mapping, *_BYTES_LIST_TYPES)
    if not isinstance(value, Bytes):
        raise TypeError(f"expected Bytes, got {type(value).__name__}")
    value.header.set_field_type(desc.type)
    _replace(msg, field_num, value)


def set_list_strings(msg: Struct, field_num: int, value: Strings) -> None:
    """Store a list of strings at ``field_num``, replacing any previous list."""
    if not isinstance(value, Strings):
        raise TypeError(f"expected Strings, got {type(value).__name__}")
    set_list_bytes(msg, field_num, value.bytes_list)


def delete_list_bytes(msg: Struct, field_num: int) -> None:
    """Remove the list of bytes or strings at ``field_num``."""
    validate_field_num(field_num, msg.mapping, *_BYTES_LIST_TYPES)
    _remove(msg, field_num)


# Lists of structs


def get_list_structs(msg: Struct, field_num: int) -> Optional[Structs]:
    """Return the list of Structs at ``field_num``, or None when unset."""
    validate_field_num(field_num, msg.mapping, FieldType.LIST_STRUCTS)
    return msg.fields[field_num].value


def set_list_structs(msg: Struct, field_num: int, value: Structs) -> None:
    """Replace the list of Structs at ``field_num`` with ``value``."""
    validate_field_num(field_num, msg.mapping, FieldType.LIST_STRUCTS)
    if not isinstance(value, Structs):
        raise TypeError(f"expected Structs, got {type(value).__name__}")
    if len(value) > MAX_DATA_SIZE:
        raise ValueError(f"cannot have more than {MAX_DATA_SIZE} items in a list")
    delete_list_structs(msg, field_num)
    value.zero_type_compression = msg.zero_type_compression
    for item in value:
        item.zero_type_compression = msg.zero_type_compression
    value._set_owner(msg)
    value.header.set_field_num(field_num)
    value.header.set_field_type(FieldType.LIST_STRUCTS)
    slot = msg.fields[field_num]
    slot.header = value.header
    slot.value = value
    msg.add_to_total(value.size)


def append_list_structs(msg: Struct, field_num: int, *values) -> None:
    """Append Structs to the list at ``field_num``, creating the list if needed."""
    if not values:
        raise ValueError("must add at least a single value")
    desc = validate_field_num(field_num, msg.mapping, FieldType.LIST_STRUCTS)
    slot = msg.fields[field_num]
    created = slot.header is None
    if created:
        item_mapping = msg.mapping if desc.self_referential else desc.mapping
        lst = Structs(item_mapping)
    else:
        lst = slot.value
    lst._set_owner(msg)
    lst.zero_type_compression = msg.zero_type_compression
    lst.append(*values)
    lst.header.set_field_num(field_num)
    lst.header.set_field_type(FieldType.LIST_STRUCTS)
    if created:
        slot.header = lst.header
        slot.value = lst
        msg.add_to_total(HEADER_SIZE)


def delete_list_structs(msg: Struct, field_num: int) -> None:
    """Remove the list of Structs at ``field_num`` and detach its entries."""
    validate_field_num(field_num, msg.mapping, FieldType.LIST_STRUCTS)
    slot = msg.fields[field_num]
    if slot.header is None:
        return
    lst = slot.value
    size = lst.size
    slot.clear()
    lst._set_owner(None)
    msg.add_to_total(-size)


# Generic access


def _as_struct(value) -> Struct:
    if isinstance(value, Struct):
        return value
    convert = getattr(value, "struct", None)
    if callable(convert):
        result = convert()
        if isinstance(result, Struct):
            return result
    raise TypeError(f"tried to set a struct field with type {type(value).__name__}")


def _check_number_value(field_type: FieldType, value) -> None:
    if isinstance(value, bool):
        raise TypeError(f"setting a {field_type.name} field with a bool")
    if field_type in (FieldType.FLOAT32, FieldType.FLOAT64):
        if not isinstance(value, Real):
            raise TypeError(f"setting a {field_type.name} field with a {type(value).__name__}")
        return
    try:
        operator.index(value)
    except TypeError:
        raise TypeError(
            f"setting a {field_type.name} field with a {type(value).__name__}"
        ) from None


def set_field(msg: Struct, field_num: int, value) -> None:
    """Set the field at ``field_num`` to ``value``, dispatching on the field's type."""
    desc = validate_field_num(field_num, msg.mapping)
    field_type = desc.type
    if field_type == FieldType.BOOL:
        if not isinstance(value, bool):
            raise TypeError(f"setting a BOOL field with a {type(value).__name__}")
        msg.set_bool(field_num, value)
    elif field_type in _SCALAR_NUMBER_TYPES:
        _check_number_value(field_type, value)
        msg.set_number(field_num, number_kind_for(field_type), value)
    elif field_type == FieldType.BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"setting a BYTES field with a {type(value).__name__}")
        msg.set_bytes(field_num, value, False)
    elif field_type == FieldType.STRING:
        if not isinstance(value, str):
            raise TypeError(f"setting a STRING field with a {type(value).__name__}")
        msg.set_bytes(field_num, value, True)
    elif field_type == FieldType.STRUCT:
        msg.set_struct(field_num, _as_struct(value))
    elif field_type == FieldType.LIST_BOOLS:
        set_list_bools(msg, field_num, value)
    elif field_type in NUMERIC_LIST_TYPES:
        set_list_numbers(msg, field_num, value)
    elif field_type == FieldType.LIST_BYTES:
        set_list_bytes(msg, field_num, value)
    elif field_type == FieldType.LIST_STRINGS:
        if isinstance(value, Strings):
            set_list_strings(msg, field_num, value)
        else:
            set_list_bytes(msg, field_num, value)
    elif field_type == FieldType.LIST_STRUCTS:
        set_list_structs(msg, field_num, value)
    else:
        raise FieldError(f"unsupported field type {field_type!r}")


def delete_field(msg: Struct, field_num: int) -> None:
    """Remove the field at ``field_num``, dispatching on the field's type."""
    desc = validate_field_num(field_num, msg.mapping)
    field_type = desc.type
    if field_type == FieldType.BOOL:
        msg.delete_bool(field_num)
    elif field_type in _SCALAR_NUMBER_TYPES:
        msg.delete_number(field_num)
    elif field_type in (FieldType.BYTES, FieldType.STRING):
        msg.delete_bytes(field_num)
    elif field_type == FieldType.STRUCT:
        msg.delete_struct(field_num)
    elif field_type == FieldType.LIST_BOOLS:
        delete_list_bools(msg, field_num)
    elif field_type in NUMERIC_LIST_TYPES:
        delete_list_numbers(msg, field_num, number_kind_for(field_type))
    elif field_type in _BYTES_LIST_TYPES:
        delete_list_bytes(msg, field_num)
    elif field_type == FieldType.LIST_STRUCTS:
        delete_list_structs(msg, field_num)
    else:
        raise FieldError(f"unsupported field type {field_type!r}")