"""Packed lists of booleans and numbers stored in their encoded form."""

from __future__ import annotations

import operator

from .header import HEADER_SIZE, GenericHeader, update_items
from .schema import FieldType, NumberKind

_WORD = 8


def _words_required(items: int, size_in_bytes: int) -> int:
    required = items * size_in_bytes
    return -(-required // _WORD)


class _PackedList:
    """Shared behaviour of lists whose items live in one header-prefixed buffer."""

    def __init__(self) -> None:
        self._data = bytearray(HEADER_SIZE)
        self._header = GenericHeader(self._data)
        self._len = 0
        self.owner = None

    @property
    def header(self) -> GenericHeader:
        """The list header, a live view onto the encoded buffer."""
        return self._header

    @property
    def size(self) -> int:
        """Encoded size in bytes, header included."""
        return len(self._data)

    def _index(self, index) -> int:
        position = operator.index(index)
        if position < 0:
            position += self._len
        if not 0 <= position < self._len:
            raise IndexError(f"list with len {self._len} has no position {index}")
        return position

    def _iter_items(self):
        for position in range(self._len):
            yield self[position]

    def _range(self, start: int, stop: int):
        if self._len == 0:
            return iter(())
        if start < 0 or start > self._len - 1:
            raise IndexError("range 'start' argument is out of bounds")
        if stop > self._len:
            raise IndexError("range 'stop' argument is out of bounds")
        if start >= stop:
            raise ValueError("range 'start' must be less than 'stop'")
        return (self[position] for position in range(start, stop))

    def _grow_to(self, length: int) -> None:
        if len(self._data) < length:
            self._data.extend(bytes(length - len(self._data)))

    def _finish_append(self, old_size: int) -> None:
        update_items(self._header, self._len)
        if self.owner is not None:
            self.owner.add_to_total(len(self._data) - old_size)

    def _adopt(self, encoded, items: int, owner) -> None:
        self._data[:] = encoded
        self._len = items
        self.owner = owner
        if owner is not None:
            owner.add_to_total(len(self._data))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._iter_items())!r})"


class Bools(_PackedList):
    """A list of booleans packed one bit per value into 64-bit words."""

    def __init__(self, field_num: int = 0) -> None:
        super().__init__()
        self._header.set_field_num(field_num)
        self._header.set_field_type(FieldType.LIST_BOOLS)

    @classmethod
    def from_bytes(cls, data, owner=None):
        """Decode a list from the start of ``data``; return (list, remaining data)."""
        if len(data) < HEADER_SIZE:
            raise ValueError("list of bools header was < 64 bits")
        header = GenericHeader(bytes(data[:HEADER_SIZE]))
        items = header.final40()
        if items == 0:
            raise ValueError("list of bools header had item count == 0, which is not allowed")
        words_needed = items // 64 + 1
        if len(data) - HEADER_SIZE < words_needed * _WORD:
            raise ValueError(
                "malformed: list of boolean: header had data size not consistent with message"
            )
        bound = words_needed * _WORD + HEADER_SIZE
        result = cls()
        result._adopt(bytes(data[:bound]), items, owner)
        return result, data[bound:]

    def _capacity(self) -> int:
        return (len(self._data) - HEADER_SIZE) * 8

    def __len__(self) -> int:
        return self._len

    def __getitem__(self, index) -> bool:
        position = self._index(index)
        byte = self._data[HEADER_SIZE + position // 8]
        return bool(byte >> (position % 8) & 1)

    def __setitem__(self, index, value) -> None:
        position = self._index(index)
        offset = HEADER_SIZE + position // 8
        mask = 1 << (position % 8)
        if value:
            self._data[offset] |= mask
        else:
            self._data[offset] &= ~mask & 0xFF

    def __iter__(self):
        return self._iter_items()

    def range(self, start: int, stop: int):
        """Iterate over items from ``start`` (inclusive) to ``stop`` (exclusive)."""
        return self._range(start, stop)

    def append(self, *values) -> None:
        """Append booleans, growing the storage a 64-bit word at a time."""
        old_size = len(self._data)
        required = self._len + len(values)
        if required > self._capacity():
            words = -(-required // 64)
            self._grow_to(words * _WORD + HEADER_SIZE)
        start = self._len
        self._len = required
        for offset, value in enumerate(values):
            self[start + offset] = bool(value)
        self._finish_append(old_size)

    def to_list(self) -> list:
        """Return the items as a new, unlinked Python list."""
        return list(self)

    def encode(self) -> bytes:
        """Return the bytes that represent this list on the wire."""
        return bytes(self._data)


class Numbers(_PackedList):
    """A list of fixed-size numbers of one kind, packed little endian."""

    def __init__(self, kind: NumberKind) -> None:
        if not isinstance(kind, NumberKind):
            raise TypeError(f"unsupported number kind {kind!r}")
        super().__init__()
        self.kind = kind
        self._item_size = kind.size_in_bytes()
        self._header.set_field_type(kind.list_field_type())

    @classmethod
    def from_bytes(cls, kind, data, owner=None):
        """Decode a list of ``kind`` from the start of ``data``; return (list, remaining data)."""
        if len(data) < HEADER_SIZE:
            raise ValueError("list of numbers header was < 64 bits")
        header = GenericHeader(bytes(data[:HEADER_SIZE]))
        items = header.final40()
        if items == 0:
            raise ValueError("list of numbers had zero items, which is an encoding error")
        result = cls(kind)
        words = _words_required(items, result._item_size)
        if len(data) - HEADER_SIZE < words * _WORD:
            raise ValueError(
                f"malformed: list of numbers[{result._item_size} bytes]: "
                "header had data size not consistent with message"
            )
        bound = words * _WORD + HEADER_SIZE
        result._adopt(bytes(data[:bound]), items, owner)
        return result, data[bound:]

    def _slot(self, index) -> int:
        return HEADER_SIZE + self._index(index) * self._item_size

    def __len__(self) -> int:
        return self._len

    def __getitem__(self, index):
        start = self._slot(index)
        return self.kind.unpack(self._data[start : start + self._item_size])

    def __setitem__(self, index, value) -> None:
        start = self._slot(index)
        self._data[start : start + self._item_size] = self.kind.pack(value)

    def __iter__(self):
        return self._iter_items()

    def range(self, start: int, stop: int):
        """Iterate over items from ``start`` (inclusive) to ``stop`` (exclusive)."""
        return self._range(start, stop)

    def append(self, *values) -> None:
        """Append numbers, keeping the storage a whole number of 64-bit words."""
        packed = [self.kind.pack(value) for value in values]
        old_size = len(self._data)
        words = _words_required(self._len + len(packed), self._item_size)
        self._grow_to(words * _WORD + HEADER_SIZE)
        start = HEADER_SIZE + self._len * self._item_size
        for offset, raw in enumerate(packed):
            at = start + offset * self._item_size
            self._data[at : at + self._item_size] = raw
        self._len += len(packed)
        self._finish_append(old_size)

    def to_list(self) -> list:
        """Return the items as a new, unlinked Python list."""
        return list(self)

    def encode(self) -> bytes:
        """Return the bytes that represent this list on the wire."""
        return bytes(self._data)