"""Byte layout constants and helpers of the NetCDF-3 format."""

ABSENT_TAG = bytes(8)
"""Marks a dimension, attribute or variable list as absent."""

DIMENSION_TAG = b"\x00\x00\x00\x0a"
VARIABLE_TAG = b"\x00\x00\x00\x0b"
ATTRIBUTE_TAG = b"\x00\x00\x00\x0c"

ALIGNMENT_SIZE = 4


def compute_padding_size(num_bytes: int) -> int:
    """Return how many padding bytes bring ``num_bytes`` to a 4-byte boundary."""
    if num_bytes < 0:
        raise ValueError(f"number of bytes must be non-negative, got {num_bytes}")
    remainder = num_bytes % ALIGNMENT_SIZE
    return 0 if remainder == 0 else ALIGNMENT_SIZE - remainder