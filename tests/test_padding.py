import pytest

from claw.padding import padding, padding_needed, size_with_padding


@pytest.mark.parametrize("size", [0, 8, 16, 64, 800])
def test_aligned_sizes_need_no_padding(size):
    assert padding_needed(size) == 0
    assert size_with_padding(size) == size


def test_values_fixed_by_source():
    # 17 bytes (list header + entry header + "hello") needs 7 bytes of padding.
    assert padding_needed(17) == 7
    # 45 bytes rounds up to 48.
    assert size_with_padding(45) == 48


@pytest.mark.parametrize("size", range(0, 100))
def test_padding_invariants(size):
    needed = padding_needed(size)
    total = size_with_padding(size)
    assert 0 <= needed < 8
    assert total % 8 == 0
    assert total - size == needed


def test_negative_size_rejected():
    with pytest.raises(ValueError):
        padding_needed(-1)
    with pytest.raises(ValueError):
        size_with_padding(-5)


@pytest.mark.parametrize("count", range(0, 8))
def test_padding_bytes_are_zero(count):
    pad = padding(count)
    assert len(pad) == count
    assert not any(pad)


@pytest.mark.parametrize("count", [8, 9, 100, -1])
def test_padding_out_of_range(count):
    with pytest.raises(ValueError):
        padding(count)


@pytest.mark.parametrize("size", [1, 5, 11, 17, 45])
def test_padding_fills_to_alignment(size):
    assert (size + len(padding(padding_needed(size)))) % 8 == 0