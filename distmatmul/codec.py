"""
Wire format of one worker's output: the row block as a flat sequence of
fixed-width signed integers in row-major order. There is no header or length
prefix; both ends compute the expected length from the worker's RowRange.
"""
import numpy as np

from distmatmul.partitioning import RowRange

ELEMENT_DTYPE = np.dtype("<i8")


def as_element_dtype(dtype) -> np.dtype:
    dtype = np.dtype(dtype)
    if dtype.kind != "i": raise ValueError(f"Element dtype must be a signed integer type. Got {dtype}")
    return dtype.newbyteorder("<")


def expected_byte_count(row_range: RowRange, n: int, dtype=ELEMENT_DTYPE) -> int:
    return len(row_range) * n * as_element_dtype(dtype).itemsize


def encode_row_block(block: np.ndarray, dtype=ELEMENT_DTYPE) -> bytes:
    if block.ndim != 2: raise ValueError(f"Row block must be 2-dimensional. Got shape {block.shape}")
    return np.ascontiguousarray(block, dtype=as_element_dtype(dtype)).tobytes()


def decode_row_block(payload: bytes, row_count: int, n: int, dtype=ELEMENT_DTYPE) -> np.ndarray:
    dtype = as_element_dtype(dtype)
    expected = row_count * n * dtype.itemsize
    if len(payload) != expected: raise ValueError(f"Row block of {row_count}x{n} needs {expected} bytes. Got {len(payload)}")
    return np.frombuffer(payload, dtype=dtype).reshape(row_count, n)
