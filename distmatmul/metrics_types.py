from dataclasses import dataclass

from distmatmul.partitioning import RowRange


@dataclass
class WorkerCollectionMetrics:
    worker_index: int
    row_range: RowRange
    expected_bytes: int
    received_bytes: int
    collection_time_ms: float # time blocked reading this worker's channel (includes waiting for its computation)

    @property
    def complete(self) -> bool:
        return self.received_bytes == self.expected_bytes


@dataclass
class CollectionFailure:
    worker_index: int
    row_range: RowRange
    reason: str
