import numpy as np

from distmatmul.partitioning import RowRange


def check_operands(a: np.ndarray, b: np.ndarray) -> int:
    """ returns N for two N×N integer matrices, raises ValueError otherwise """
    if a.ndim != 2 or a.shape[0] != a.shape[1]: raise ValueError(f"A must be a square matrix. Got shape {a.shape}")
    if b.shape != a.shape: raise ValueError(f"B must have the same shape as A ({a.shape}). Got {b.shape}")
    if a.dtype.kind not in "iu" or b.dtype.kind not in "iu": raise ValueError(f"Only integer matrices are supported. Got {a.dtype} and {b.dtype}")
    return a.shape[0]


def compute_rows(a: np.ndarray, b: np.ndarray, row_range: RowRange) -> np.ndarray:
    """
    Rows {row_range} of C = A×B, where C[r][c] = sum(A[r][k] * B[k][c] for k in 0..N-1).
    Accumulates in int64. Returns a (len(row_range), N) block.
    """
    n = check_operands(a, b)
    if row_range.end > n: raise ValueError(f"Row range {row_range} exceeds matrix size {n}")
    return a[row_range.start:row_range.end].astype(np.int64) @ b.astype(np.int64)


def compute_reference(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Single-process baseline: applies compute_rows to every row, one at a time"""
    n = check_operands(a, b)
    c_ref = np.zeros((n, n), dtype=np.int64)
    for r in range(n):
        c_ref[r] = compute_rows(a, b, RowRange(r, r + 1))[0]
    return c_ref
