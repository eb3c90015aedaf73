import numpy as np


def init_matrices(n: int, dtype=np.int64) -> tuple[np.ndarray, np.ndarray]:
    """
    Deterministic seed data:
        A[i][j] = i + j + 1
        B[i][j] = 2 if i == j else 1
    """
    if n < 0: raise ValueError(f"Matrix size can't be negative. Got {n}")
    i, j = np.indices((n, n))
    a = (i + j + 1).astype(dtype)
    b = (np.ones((n, n)) + np.eye(n)).astype(dtype)
    a.setflags(write=False)
    b.setflags(write=False)
    return a, b


def format_matrix(m: np.ndarray) -> str:
    return "\n".join(" ".join(str(int(v)) for v in row) + " " for row in m)


def print_matrix(m: np.ndarray) -> None:
    print(format_matrix(m))
