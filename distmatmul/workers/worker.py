from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

from distmatmul.channels.channel import ConsumerEnd, ProducerEnd
from distmatmul.codec import ELEMENT_DTYPE, encode_row_block
from distmatmul.errors import HandleRetiredError
from distmatmul.kernel import compute_rows
from distmatmul.partitioning import RowRange
from distmatmul.utils.logger import create_logger
from distmatmul.utils.timer import Timer

RowKernel = Callable[[np.ndarray, np.ndarray, RowRange], np.ndarray]


@dataclass
class WorkerStartContext:
    """Everything a worker needs. Travels to the worker process by value (its own copies of A and B)"""
    worker_index: int
    row_range: RowRange
    a: np.ndarray
    b: np.ndarray
    element_dtype: np.dtype = ELEMENT_DTYPE
    row_kernel: RowKernel = compute_rows


@dataclass
class WorkerHandle:
    """
    Coordinator-side view of one spawned worker. Created at spawn time and
    retired once the worker's output was read and the process was reaped.
    """
    worker_index: int
    row_range: RowRange
    process: Any # opaque, owned by the Worker implementation that spawned it
    consumer: ConsumerEnd
    retired: bool = False

    def retire(self) -> None:
        if self.retired: raise HandleRetiredError(self.worker_index)
        self.consumer.close()
        self.retired = True


def run_worker(context: WorkerStartContext, producer: ProducerEnd) -> None:
    """
    Computes the worker's rows and writes them, unframed, onto {producer}.
    The producer end is always released before returning so the reader observes end of stream.
    Any failure propagates after logging; the reader only notices it as a short read.
    """
    wlogger = create_logger(f"{__name__}.W{context.worker_index}", prefix=f"W{context.worker_index}")
    row_range = context.row_range
    try:
        _timer = Timer()
        block = context.row_kernel(context.a, context.b, row_range)
        expected_shape = (len(row_range), context.a.shape[0])
        if block.shape != expected_shape:
            raise ValueError(f"Kernel produced a block of shape {block.shape} for rows {row_range}. Expected {expected_shape}")
        compute_time_ms = _timer.stop()

        payload = encode_row_block(block, context.element_dtype)
        producer.write_all(payload)
        wlogger.debug(f"Rows {row_range}: computed in {compute_time_ms:.3f} ms, wrote {len(payload)} bytes")
    except Exception as e:
        wlogger.error(f"Failed to deliver rows {row_range}: {e}")
        raise e
    finally:
        producer.close()


class Worker(ABC):
    """Spawns isolated workers running run_worker() and waits for their termination"""

    @dataclass
    class Config(ABC):
        @abstractmethod
        def create_instance(self) -> "Worker": pass

    def __init__(self, config: Config):
        self.config = config

    @abstractmethod
    def spawn(self, context: WorkerStartContext, producer: ProducerEnd) -> Any:
        """
        Starts one worker with its own copy of {context}, writing to {producer}.
        Returns an identifier for wait()/terminate(). Raises WorkerSpawnError on failure
        """
        pass

    @abstractmethod
    def wait(self, process: Any) -> int:
        """ blocks until {process} terminated and reaps it. returns its exit code """
        pass

    @abstractmethod
    def terminate(self, process: Any) -> None: pass
