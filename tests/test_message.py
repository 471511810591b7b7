import sys

import pytest

from claw.header import HEADER_SIZE
from claw.message import Struct, StructField
from claw.schema import FieldDescr, FieldError, FieldType, Mapping, NumberKind


def _mapping(*types, **kwargs):
    return Mapping(fields=[FieldDescr(type=t) for t in types], **kwargs)


MSG1 = Mapping(fields=[FieldDescr(name="Bool", type=FieldType.BOOL)])


def _msg0():
    return Mapping(
        fields=[
            FieldDescr(name="Bool", type=FieldType.BOOL),
            FieldDescr(name="Int8", type=FieldType.INT8),
            FieldDescr(name="Int16", type=FieldType.INT16),
            FieldDescr(name="Int32", type=FieldType.INT32),
            FieldDescr(name="Int64", type=FieldType.INT64),
            FieldDescr(name="Uint8", type=FieldType.UINT8),
            FieldDescr(name="Uint16", type=FieldType.UINT16),
            FieldDescr(name="Uint32", type=FieldType.UINT32),
            FieldDescr(name="Uint64", type=FieldType.UINT64),
            FieldDescr(name="Float32", type=FieldType.FLOAT32),
            FieldDescr(name="Float64", type=FieldType.FLOAT64),
            FieldDescr(name="Bytes", type=FieldType.BYTES),
            FieldDescr(name="Msg1", type=FieldType.STRUCT, mapping=MSG1),
        ]
    )


SCALARS = [
    (1, NumberKind.INT8, -1),
    (2, NumberKind.INT16, -2),
    (3, NumberKind.INT32, -3),
    (4, NumberKind.INT64, -4),
    (5, NumberKind.UINT8, 1),
    (6, NumberKind.UINT16, 2),
    (7, NumberKind.UINT32, 3),
    (8, NumberKind.UINT64, 4),
]


def test_new_struct_counts_its_header():
    s = Struct(3, _mapping(FieldType.BOOL))
    assert s.total == 8
    assert s.header.final40() == 8
    assert s.header.field_num() == 3
    assert s.header.field_type() == FieldType.STRUCT
    assert s.fields == [StructField()]


def test_new_struct_requires_mapping():
    with pytest.raises(ValueError):
        Struct(0, None)


def test_basic_scalars_bytes_and_struct_totals():
    root = Struct(0, _msg0())
    root.set_no_zero_type_compression()

    assert root.get_bool(0) is False
    root.set_bool(0, True)
    assert root.get_bool(0) is True

    for field_num, kind, value in SCALARS:
        assert root.get_number(field_num, kind) == 0
        root.set_number(field_num, kind, value)
        assert root.get_number(field_num, kind) == value

    assert root.get_number(9, NumberKind.FLOAT32) == 0
    root.set_number(9, NumberKind.FLOAT32, 1.2)
    assert root.get_number(9, NumberKind.FLOAT32) == pytest.approx(1.2, rel=1e-6)

    assert root.get_number(10, NumberKind.FLOAT64) == 0
    root.set_number(10, NumberKind.FLOAT64, 1.2)
    assert root.get_number(10, NumberKind.FLOAT64) == 1.2

    assert root.total == 120

    assert root.get_bytes(11) is None
    root.set_bytes(11, b"Hello World", False)
    assert root.get_bytes(11) == b"Hello World"
    assert root.total == 120 + 8 + 16
    assert root.total % 8 == 0

    sub = Struct(13, MSG1)
    root.set_struct(12, sub)
    assert root.total == 152
    sub.set_bool(0, True)
    got = root.get_struct(12)
    assert got is sub
    assert got.get_bool(0) is True
    assert root.total == 160
    assert root.header.final40() == 160
    assert sub.total == 16


def _bool_struct():
    s = Struct(0, _mapping(FieldType.BOOL, FieldType.FLOAT32, FieldType.BOOL, FieldType.BOOL))
    s.set_bool(2, True)
    s.set_bool(3, False)
    return s


@pytest.mark.parametrize("field_num,want", [(0, False), (2, True), (3, False)])
def test_get_bool(field_num, want):
    assert _bool_struct().get_bool(field_num) is want


@pytest.mark.parametrize("field_num", [4, 1])
def test_get_bool_errors(field_num):
    with pytest.raises(FieldError):
        _bool_struct().get_bool(field_num)


def test_set_number_floats():
    s = Struct(0, _mapping(FieldType.FLOAT32, FieldType.FLOAT64))
    s.set_number(0, NumberKind.FLOAT32, 8.7)
    s.set_number(1, NumberKind.FLOAT64, sys.float_info.max)
    assert s.get_number(0, NumberKind.FLOAT32) == pytest.approx(8.7, rel=1e-6)
    assert s.get_number(1, NumberKind.FLOAT64) == sys.float_info.max


def _number_struct():
    s = Struct(
        0,
        _mapping(
            FieldType.UINT8, FieldType.BOOL, FieldType.INT8, FieldType.UINT64, FieldType.FLOAT32
        ),
    )
    s.set_number(2, NumberKind.INT8, 10)
    s.set_number(3, NumberKind.UINT64, 0xFFFFFFFF + 1)
    s.set_number(4, NumberKind.FLOAT32, 3.2)
    return s


def test_get_number_values():
    s = _number_struct()
    assert s.get_number(0, NumberKind.UINT8) == 0
    assert s.get_number(2, NumberKind.INT8) == 10
    assert s.get_number(3, NumberKind.UINT64) == 0xFFFFFFFF + 1
    assert s.get_number(4, NumberKind.FLOAT32) == pytest.approx(3.2, rel=1e-6)


def test_get_number_errors():
    s = _number_struct()
    with pytest.raises(FieldError):
        s.get_number(29, NumberKind.UINT8)
    with pytest.raises(FieldError):
        s.get_number(1, NumberKind.UINT64)
    with pytest.raises(FieldError):
        s.get_number(2, NumberKind.UINT8)


def test_set_number_out_of_range():
    s = Struct(0, _mapping(FieldType.UINT8))
    with pytest.raises(ValueError):
        s.set_number(0, NumberKind.UINT8, 256)


def test_number_totals_and_delete():
    s = Struct(0, _mapping(FieldType.INT32, FieldType.INT64))
    s.set_number(0, NumberKind.INT32, -7)
    s.set_number(1, NumberKind.INT64, -(1 << 40))
    assert s.total == 8 + 8 + 16
    s.set_number(0, NumberKind.INT32, 9)
    assert s.total == 32
    assert s.get_number(1, NumberKind.INT64) == -(1 << 40)
    s.delete_number(1)
    assert s.total == 16
    assert s.get_number(1, NumberKind.INT64) == 0
    s.delete_number(0)
    assert s.total == HEADER_SIZE


def test_delete_number_rejects_non_number():
    s = Struct(0, _mapping(FieldType.BOOL))
    with pytest.raises(FieldError):
        s.delete_number(0)


def test_delete_bool():
    s = Struct(0, _mapping(FieldType.BOOL))
    s.set_bool(0, True)
    assert s.total == 16
    s.delete_bool(0)
    assert s.total == 8
    assert s.get_bool(0) is False


def test_bytes_replace_and_delete():
    s = Struct(0, _mapping(FieldType.STRING))
    s.set_bytes(0, "abc", True)
    assert s.total == 8 + 8 + 8
    assert s.fields[0].header.field_type() == FieldType.STRING
    s.set_bytes(0, b"0123456789", True)
    assert s.total == 8 + 8 + 16
    assert s.get_bytes(0) == b"0123456789"
    s.delete_bytes(0)
    assert s.total == 8
    assert s.get_bytes(0) is None


def test_set_bytes_empty_rejected():
    s = Struct(0, _mapping(FieldType.BYTES))
    with pytest.raises(ValueError):
        s.set_bytes(0, b"", False)


def test_set_struct_replace_and_delete():
    root = Struct(0, _mapping(FieldType.STRUCT))
    first = Struct(0, MSG1)
    first.set_bool(0, True)
    root.set_struct(0, first)
    assert root.total == 24
    assert first.parent is root

    second = Struct(0, MSG1)
    root.set_struct(0, second)
    assert first.parent is None
    assert root.total == 16
    assert second.header.field_num() == 0

    root.delete_struct(0)
    assert root.total == 8
    assert second.parent is None
    assert root.get_struct(0) is None


def test_set_struct_none_rejected():
    root = Struct(0, _mapping(FieldType.STRUCT))
    with pytest.raises(ValueError):
        root.set_struct(0, None)


def test_nested_totals_propagate():
    inner_map = Mapping(fields=[FieldDescr(type=FieldType.BOOL)])
    mid_map = Mapping(fields=[FieldDescr(type=FieldType.STRUCT, mapping=inner_map)])
    root = Struct(0, Mapping(fields=[FieldDescr(type=FieldType.STRUCT, mapping=mid_map)]))
    mid = Struct(0, mid_map)
    inner = Struct(0, inner_map)
    root.set_struct(0, mid)
    mid.set_struct(0, inner)
    assert root.total == 24
    inner.set_bool(0, True)
    assert inner.total == 16
    assert mid.total == 24
    assert root.total == 32
    assert root.header.final40() == 32


def test_is_set_with_compression():
    s = Struct(0, _mapping(FieldType.BOOL, FieldType.STRUCT, FieldType.LIST_BOOLS))
    assert s.is_set(0) is True
    assert s.is_set(1) is False
    assert s.is_set(2) is False
    assert s.is_set(99) is False


def test_is_set_without_compression():
    s = Struct(0, _mapping(FieldType.BOOL, FieldType.INT8))
    s.set_no_zero_type_compression()
    assert s.is_set(0) is False
    s.set_number(1, NumberKind.INT8, 0)
    assert s.is_set(1) is True


def test_new_from_copies_type_and_compression():
    s = Struct(5, MSG1)
    s.set_no_zero_type_compression()
    s.set_bool(0, True)
    fresh = s.new_from()
    assert fresh.mapping is MSG1
    assert fresh.total == 8
    assert fresh.zero_type_compression is False
    assert fresh.get_bool(0) is False
    assert fresh.header.field_num() == 0