"""Helpers for keeping encoded data aligned to 64-bit words."""

WORD_SIZE = 8


def padding_needed(size: int) -> int:
    """Return how many bytes must follow ``size`` bytes to reach a 64-bit boundary."""
    if size < 0:
        raise ValueError("size cannot be < 0")
    left_over = size % WORD_SIZE
    if left_over == 0:
        return 0
    return WORD_SIZE - left_over


def size_with_padding(size: int) -> int:
    """Return ``size`` rounded up to the next 64-bit boundary."""
    return size + padding_needed(size)


def padding(count: int) -> bytes:
    """Return ``count`` zero bytes used to pad data to a 64-bit boundary."""
    if count < 0:
        raise ValueError("padding cannot be negative")
    if count >= WORD_SIZE:
        raise ValueError(
            f"data is 64 bit aligned, so padding can never exceed {WORD_SIZE - 1} bytes, got {count}"
        )
    return bytes(count)