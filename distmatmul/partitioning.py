from dataclasses import dataclass


@dataclass(frozen=True)
class RowRange:
    """Half-open interval [start, end) of output rows"""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid row range [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def __iter__(self):
        return iter(range(self.start, self.end))

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


def get_work_range(total_rows: int, worker_count: int, worker_index: int) -> RowRange:
    """
    The first {total_rows % worker_count} workers get one extra row each, so
    range sizes never differ by more than one row and earlier workers absorb
    the remainder.
    """
    if worker_count <= 0: raise ValueError(f"worker_count must be positive. Got {worker_count}")
    if not 0 <= worker_index < worker_count: raise ValueError(f"worker_index must be in [0, {worker_count}). Got {worker_index}")
    if total_rows < 0: raise ValueError(f"total_rows can't be negative. Got {total_rows}")

    base_rows = total_rows // worker_count
    extra_rows = total_rows % worker_count

    if worker_index < extra_rows:
        start = worker_index * (base_rows + 1)
        return RowRange(start, start + base_rows + 1)

    start = extra_rows * (base_rows + 1) + (worker_index - extra_rows) * base_rows
    return RowRange(start, start + base_rows)


def partition_rows(total_rows: int, worker_count: int) -> list[RowRange]:
    return [get_work_range(total_rows, worker_count, i) for i in range(worker_count)]
