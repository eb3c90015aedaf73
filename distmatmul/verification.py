import numpy as np


def find_first_mismatch(c: np.ndarray, c_ref: np.ndarray) -> tuple[int, int] | None:
    """ returns the first differing (row, col) in row-major order, or None if the matrices are equal """
    if c.shape != c_ref.shape: raise ValueError(f"Can't compare matrices of shapes {c.shape} and {c_ref.shape}")
    mismatches = np.argwhere(c != c_ref)
    if len(mismatches) == 0:
        return None
    row, col = mismatches[0]
    return int(row), int(col)


def verify(c: np.ndarray, c_ref: np.ndarray) -> bool:
    return find_first_mismatch(c, c_ref) is None
