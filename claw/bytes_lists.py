"""Lists of byte strings and text strings stored with their encoded sizes."""

from __future__ import annotations

import operator

from .header import HEADER_SIZE, GenericHeader, update_items
from .padding import padding, padding_needed
from .schema import FieldType

ENTRY_HEADER_SIZE = 4
MAX_ITEM_SIZE = (1 << 32) - 1
_MIN_ENCODED_SIZE = 16


def _check_item(value) -> bytes:
    value = bytes(value)
    if len(value) > MAX_ITEM_SIZE:
        raise ValueError(f"cannot set a value > {MAX_ITEM_SIZE // 1024}KiB")
    return value


class Bytes:
    """A list of byte strings; each item is encoded as a 32-bit size and its data."""

    def __init__(self) -> None:
        self.header = GenericHeader()
        self.header.set_field_num(0)
        self.header.set_field_type(FieldType.LIST_BYTES)
        self.header.set_final40(0)
        self._items: list = []
        self.owner = None
        self.data_size = 0
        self.padding_size = 0

    @classmethod
    def from_bytes(cls, data, owner=None):
        """Decode a list from the start of ``data``; return (list, remaining data)."""
        if len(data) < _MIN_ENCODED_SIZE:
            raise ValueError("malformed list of bytes: must be at least 16 bytes in size")
        result = cls()
        result.header = GenericHeader(bytes(data[:HEADER_SIZE]))
        count = result.header.final40()
        if count == 0:
            raise ValueError("cannot have a ListBytes field that has zero entries")

        offset = HEADER_SIZE
        items = []
        for item_num in range(count):
            if len(data) - offset < ENTRY_HEADER_SIZE:
                raise ValueError(
                    f"malformed list of bytes field: an item ({item_num}) did not have a valid header"
                )
            size = int.from_bytes(bytes(data[offset : offset + ENTRY_HEADER_SIZE]), "little")
            start = offset + ENTRY_HEADER_SIZE
            if len(data) - start < size:
                raise ValueError(
                    "malformed list of bytes field: an item did not have enough data to match the header"
                )
            items.append(bytes(data[start : start + size]))
            offset = start + size

        pad = padding_needed(offset)
        if pad:
            if len(data) - offset < pad:
                raise ValueError("malformed list of bytes field: was missing byte list padding")
            offset += pad

        result._items = items
        result.owner = owner
        result.data_size = offset - HEADER_SIZE - pad
        result.padding_size = pad
        if owner is not None:
            owner.add_to_total(offset)
        return result, data[offset:]

    @property
    def size(self) -> int:
        """Encoded size in bytes: header, entries and padding."""
        return HEADER_SIZE + self.data_size + self.padding_size

    def _add_to_owner(self, value: int) -> None:
        if self.owner is not None:
            self.owner.add_to_total(value)

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

    def __getitem__(self, index) -> bytes:
        return self._items[self._index(index)]

    def __setitem__(self, index, value) -> None:
        position = self._index(index)
        value = _check_item(value)
        self._add_to_owner(-(self.data_size + self.padding_size))
        self.data_size += len(value) - len(self._items[position])
        self.padding_size = padding_needed(self.data_size)
        self._items[position] = value
        self._add_to_owner(self.data_size + self.padding_size)

    def __iter__(self):
        return iter(list(self._items))

    def range(self, start: int, stop: int):
        """Iterate over items from ``start`` (inclusive) to ``stop`` (exclusive)."""
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
        """Append byte strings to the list."""
        checked = [_check_item(value) for value in values]
        self._add_to_owner(-(self.data_size + self.padding_size))
        self._items.extend(checked)
        self.data_size += sum(ENTRY_HEADER_SIZE + len(value) for value in checked)
        self.padding_size = padding_needed(self.data_size)
        update_items(self.header, len(self._items))
        self._add_to_owner(self.data_size + self.padding_size)

    def to_list(self) -> list:
        """Return the items as a new, unlinked Python list."""
        return list(self._items)

    def encode(self, writer) -> int:
        """Write the encoded list to ``writer``; return the number of bytes written.

        An empty list writes nothing.
        """
        if not self._items:
            return 0
        chunks = [bytes(self.header)]
        for item in self._items:
            chunks.append(len(item).to_bytes(ENTRY_HEADER_SIZE, "little"))
            chunks.append(item)
        chunks.append(padding(self.padding_size))
        written = 0
        for chunk in chunks:
            writer.write(chunk)
            written += len(chunk)
        return written

    def __repr__(self) -> str:
        return f"Bytes({self._items!r})"


class Strings:
    """A list of text strings stored as UTF-8 in a ``Bytes`` list."""

    def __init__(self, items=None) -> None:
        if isinstance(items, Bytes):
            self._bytes = items
        else:
            self._bytes = Bytes()
            if items is not None:
                self.append(*items)

    @property
    def bytes_list(self) -> Bytes:
        """The underlying list of encoded strings."""
        return self._bytes

    def __len__(self) -> int:
        return len(self._bytes)

    def __getitem__(self, index) -> str:
        return self._bytes[index].decode("utf-8")

    def __setitem__(self, index, value: str) -> None:
        self._bytes[index] = value.encode("utf-8")

    def __iter__(self):
        return (item.decode("utf-8") for item in self._bytes)

    def range(self, start: int, stop: int):
        """Iterate over strings from ``start`` (inclusive) to ``stop`` (exclusive)."""
        return (item.decode("utf-8") for item in self._bytes.range(start, stop))

    def append(self, *values) -> None:
        """Append strings to the list."""
        self._bytes.append(*(value.encode("utf-8") for value in values))

    def to_list(self) -> list:
        """Return the strings as a new, unlinked Python list."""
        return list(self)

    def __repr__(self) -> str:
        return f"Strings({self.to_list()!r})"