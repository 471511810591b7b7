"""The 64-bit header that starts every encoded field and struct."""

from __future__ import annotations

HEADER_SIZE = 8
MAX_DATA_SIZE = (1 << 40) - 1
_MAX_FIELD_NUM = (1 << 16) - 1
_MAX_FIELD_TYPE = (1 << 8) - 1


class GenericHeader:
    """An 8 byte header: field number (16 bits), field type (8 bits), final 40 bits.

    When built from a ``bytearray`` the header reads and writes the first eight
    bytes of that buffer in place; any other input is copied.
    """

    __slots__ = ("_buf",)

    def __init__(self, data=None):
        if data is None:
            self._buf = bytearray(HEADER_SIZE)
            return
        if len(data) < HEADER_SIZE:
            raise ValueError(f"a header needs {HEADER_SIZE} bytes, got {len(data)}")
        if isinstance(data, bytearray):
            self._buf = data
        else:
            self._buf = bytearray(bytes(data[:HEADER_SIZE]))

    def field_num(self) -> int:
        """Return the field number stored in the first 16 bits."""
        return int.from_bytes(self._buf[0:2], "little")

    def set_field_num(self, value: int) -> None:
        """Store the field number in the first 16 bits."""
        value = int(value)
        if not 0 <= value <= _MAX_FIELD_NUM:
            raise ValueError(f"field number {value} does not fit in 16 bits")
        self._buf[0:2] = value.to_bytes(2, "little")

    def field_type(self) -> int:
        """Return the field type stored in bits 16 to 24."""
        return self._buf[2]

    def set_field_type(self, value: int) -> None:
        """Store the field type in bits 16 to 24."""
        value = int(value)
        if not 0 <= value <= _MAX_FIELD_TYPE:
            raise ValueError(f"field type {value} does not fit in 8 bits")
        self._buf[2] = value

    def final40(self) -> int:
        """Return the value held in the last 40 bits."""
        return int.from_bytes(self._buf[3:8], "little")

    def set_final40(self, value: int) -> None:
        """Store ``value`` in the last 40 bits."""
        value = int(value)
        if not 0 <= value <= MAX_DATA_SIZE:
            raise ValueError(f"value {value} does not fit in 40 bits")
        self._buf[3:8] = value.to_bytes(5, "little")

    def __bytes__(self) -> bytes:
        return bytes(self._buf[:HEADER_SIZE])

    def __eq__(self, other):
        if isinstance(other, GenericHeader):
            return bytes(self) == bytes(other)
        return NotImplemented

    def __hash__(self):
        return hash(bytes(self))

    def __repr__(self) -> str:
        return (
            f"GenericHeader(field_num={self.field_num()}, "
            f"field_type={self.field_type()}, final40={self.final40()})"
        )


def update_items(header, items: int) -> None:
    """Record ``items`` as the number of entries in a list header."""
    if items > MAX_DATA_SIZE:
        raise ValueError(f"cannot add more than {MAX_DATA_SIZE} items into a list")
    if items < 0:
        raise ValueError("item count cannot be negative")
    if not isinstance(header, GenericHeader):
        header = GenericHeader(header)
    header.set_final40(items)