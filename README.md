# claw

Building blocks for the Claw binary wire format: 64-bit field headers, structs
described by a field mapping, and packed lists of booleans, numbers, byte
strings, strings and nested structs. Everything in the encoding is aligned to
8 bytes, and every struct keeps track of its encoded size as fields change.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Describing a message

A `Mapping` (in `claw.schema`) lists the fields of a struct type in order; each
`FieldDescr` gives a field's `FieldType`, and for struct fields the `Mapping`
of the nested type:

```python
from claw.schema import FieldDescr, FieldType, Mapping, NumberKind
from claw.message import Struct

inner = Mapping(fields=[FieldDescr(name="Flag", type=FieldType.BOOL)])
outer = Mapping(fields=[
    FieldDescr(name="On", type=FieldType.BOOL),
    FieldDescr(name="Count", type=FieldType.INT32),
    FieldDescr(name="Name", type=FieldType.STRING),
    FieldDescr(name="Child", type=FieldType.STRUCT, mapping=inner),
])

msg = Struct(0, outer)
msg.set_bool(0, True)
msg.set_number(1, NumberKind.INT32, -3)
msg.set_bytes(2, "hello", True)

child = Struct(0, inner)
msg.set_struct(3, child)
child.set_bool(0, True)

assert msg.get_number(1, NumberKind.INT32) == -3
assert msg.get_bytes(2) == b"hello"
print(msg.total)  # encoded size in bytes, header included
```

`Struct` offers `get_`, `set_` and `delete_` methods for bools, numbers,
bytes/strings and nested structs. Numbers are read and written through a
`NumberKind` (`INT8` to `UINT64`, `FLOAT32`, `FLOAT64`), which must match the
field's type. An accessor called with a field number outside the mapping, or
with a type that does not match the field, raises `FieldError` (a
`ValueError`). A field that was never set reads as its type's zero value:
`False`, `0`, or `None` for bytes and structs. `Struct.is_set` reports whether
a field holds a value, and `set_no_zero_type_compression` makes scalar fields
count as set only once they have been written.

## Lists

The list types are Python sequences: they support `len()`, indexing, item
assignment, iteration, `append(*values)`, `range(start, stop)` and
`to_list()`.

- `claw.lists.Bools` packs booleans one bit each.
- `claw.lists.Numbers(kind)` holds fixed-size numbers of one `NumberKind`.
- `claw.bytes_lists.Bytes` holds byte strings; `claw.bytes_lists.Strings`
  wraps a `Bytes` list and stores text as UTF-8.
- `claw.listfields.Structs(mapping)` holds nested `Struct` values of one type.

```python
from claw.lists import Numbers
from claw.bytes_lists import Strings
from claw.schema import NumberKind

nums = Numbers(NumberKind.UINT16)
nums.append(1, 2, 3)
nums[0] = 10
assert nums.to_list() == [10, 2, 3]
assert list(nums.range(1, 3)) == [2, 3]

names = Strings(["a", "b"])
names.append("c")
```

`range` raises `IndexError` when a bound lies outside the list and
`ValueError` when `start` is not below `stop`; on an empty list it yields
nothing.

Lists are attached to struct fields with the functions in `claw.listfields`:
`set_list_bools`, `set_list_numbers`, `set_list_bytes`, `set_list_strings`,
`set_list_structs` and `append_list_structs`, with matching `get_list_*` and
`delete_list_*` functions. Once attached, appending to a list updates the
struct's `total`:

```python
from claw.listfields import append_list_structs, get_list_structs, set_list_numbers

mapping = Mapping(fields=[
    FieldDescr(name="Nums", type=FieldType.LIST_UINT16),
    FieldDescr(name="Items", type=FieldType.LIST_STRUCTS, mapping=inner),
])
msg = Struct(0, mapping)
set_list_numbers(msg, 0, nums)
append_list_structs(msg, 1, Struct(0, inner), Struct(0, inner))
assert len(get_list_structs(msg, 1)) == 2
```

`set_field` and `delete_field` set or remove any field, choosing the right
operation from the field's type in the mapping.

## Encoded lists

`Bools.encode()` and `Numbers.encode()` return a list's wire bytes, and
`Bytes.encode(writer)` writes them to a file-like object and returns the
count written (nothing for an empty list). `Bools.from_bytes(data)`,
`Numbers.from_bytes(kind, data)` and `Bytes.from_bytes(data)` decode a list
from the start of `data` and return the list together with the remaining
data; malformed input raises `ValueError`.

## Headers and padding

`claw.header.GenericHeader` reads and writes the 8-byte header every field
carries: a 16-bit field number, an 8-bit field type and a 40-bit value.
`claw.padding` provides `padding_needed`, `size_with_padding` and `padding`
for aligning sizes to 8 bytes.

## What this package does not do

A whole `Struct` cannot be written to or read from bytes: there is no
marshalling of complete messages, only the size accounting (`Struct.total`)
and the encoding of individual lists described above. There is no schema
language or code generator either; mappings are built by hand in Python.