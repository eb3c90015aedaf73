from dataclasses import dataclass, field

import numpy as np

from distmatmul.channels.channel import Channel
from distmatmul.channels.pipe_channel import PipeChannel
from distmatmul.codec import ELEMENT_DTYPE, as_element_dtype, decode_row_block, expected_byte_count
from distmatmul.errors import ChannelSetupError, ShortTransferError, WorkerSpawnError
from distmatmul.kernel import check_operands, compute_reference, compute_rows
from distmatmul.matrix import init_matrices
from distmatmul.metrics_types import CollectionFailure, WorkerCollectionMetrics
from distmatmul.partitioning import RowRange, partition_rows
from distmatmul.utils.logger import create_logger
from distmatmul.utils.timer import Timer
from distmatmul.verification import find_first_mismatch
from distmatmul.workers.process_worker import ProcessWorker
from distmatmul.workers.worker import RowKernel, Worker, WorkerHandle, WorkerStartContext

logger = create_logger(__name__)


@dataclass
class CoordinatorReport:
    result: np.ndarray # C, assembled from the workers' output
    reference: np.ndarray # C_ref, computed serially
    ranges: list[RowRange]
    worker_metrics: list[WorkerCollectionMetrics]
    collection_failures: list[CollectionFailure]
    exit_codes: list[int]
    first_mismatch: tuple[int, int] | None
    total_time_ms: float

    @property
    def verified(self) -> bool:
        return self.first_mismatch is None


class Coordinator:
    """
    Splits C = A×B by row ranges across `worker_count` isolated workers, each
    writing its rows back on a dedicated channel, then checks the assembled
    result against a serial reference.
    """

    @dataclass
    class Config:
        matrix_size: int = 10
        worker_count: int = 4
        channel_config: Channel.Config = field(default_factory=PipeChannel.Config)
        worker_config: Worker.Config = field(default_factory=ProcessWorker.Config)
        element_dtype: str = ELEMENT_DTYPE.str
        row_kernel: RowKernel = compute_rows # what workers run. The reference always uses compute_rows

        def create_instance(self) -> "Coordinator": return Coordinator(self)

    def __init__(self, config: Config):
        if config.worker_count <= 0: raise ValueError(f"worker_count must be positive. Got {config.worker_count}")
        if config.matrix_size < 0: raise ValueError(f"matrix_size can't be negative. Got {config.matrix_size}")
        self.config = config
        self.element_dtype = as_element_dtype(config.element_dtype)
        self.worker = config.worker_config.create_instance()

    def run(self, a: np.ndarray | None = None, b: np.ndarray | None = None) -> CoordinatorReport:
        """
        {a} and {b} default to the deterministic seed matrices of size `matrix_size`.
        Raises ChannelSetupError/WorkerSpawnError if the workers can't all be started.
        """
        if (a is None) != (b is None): raise ValueError("Pass both A and B, or neither to use the seed matrices")
        _total_timer = Timer()
        if a is None or b is None:
            a, b = init_matrices(self.config.matrix_size)
        n = check_operands(a, b)

        _reference_timer = Timer()
        c_ref = compute_reference(a, b)
        logger.info(f"Reference {n}x{n} computed in {_reference_timer.stop():.3f} ms")

        ranges = partition_rows(n, self.config.worker_count)
        handles = self._spawn_workers(a, b, ranges)

        c = np.zeros((n, n), dtype=np.int64)
        worker_metrics: list[WorkerCollectionMetrics] = []
        collection_failures: list[CollectionFailure] = []
        try:
            for handle in handles:
                metrics, failure = self._collect(handle, c, n)
                worker_metrics.append(metrics)
                if failure is not None: collection_failures.append(failure)
        except BaseException:
            # remaining output is unusable. Workers blocked writing to an unread channel
            # may never see the reader go away (forked siblings hold copies), so stop them
            self._abort(handles)
            raise
        exit_codes = self._reap(handles)

        first_mismatch = find_first_mismatch(c, c_ref)
        if first_mismatch is None:
            logger.info("Distributed result matches the reference")
        else:
            row, col = first_mismatch
            logger.warning(f"Distributed result differs from the reference at ({row}, {col}): {c[row, col]} != {c_ref[row, col]}")

        return CoordinatorReport(
            result=c,
            reference=c_ref,
            ranges=ranges,
            worker_metrics=worker_metrics,
            collection_failures=collection_failures,
            exit_codes=exit_codes,
            first_mismatch=first_mismatch,
            total_time_ms=_total_timer.stop(),
        )

    def _spawn_workers(self, a: np.ndarray, b: np.ndarray, ranges: list[RowRange]) -> list[WorkerHandle]:
        handles: list[WorkerHandle] = []
        for worker_index, row_range in enumerate(ranges):
            try:
                channel = self.config.channel_config.create_instance()
            except ChannelSetupError as e:
                logger.error(f"Channel setup failed for worker {worker_index}: {e.reason}. Aborting")
                self._abort(handles)
                raise ChannelSetupError(e.reason, worker_index=worker_index) from e

            context = WorkerStartContext(
                worker_index=worker_index,
                row_range=row_range,
                a=a,
                b=b,
                element_dtype=self.element_dtype,
                row_kernel=self.config.row_kernel,
            )
            try:
                process = self.worker.spawn(context, channel.producer)
            except WorkerSpawnError as e:
                logger.error(f"{e}. Aborting")
                channel.close()
                self._abort(handles)
                raise e

            # the coordinator never writes on a worker's channel. Detach, so the
            # stream stays open for the worker
            channel.producer.detach()
            handles.append(WorkerHandle(worker_index, row_range, process, channel.consumer))
            logger.info(f"Worker {worker_index} started for rows {row_range} ({len(row_range)} rows)")
        return handles

    def _collect(self, handle: WorkerHandle, c: np.ndarray, n: int) -> tuple[WorkerCollectionMetrics, CollectionFailure | None]:
        row_range = handle.row_range
        expected_bytes = expected_byte_count(row_range, n, self.element_dtype)
        _collection_timer = Timer()
        failure = None
        try:
            payload = handle.consumer.read_exact(expected_bytes)
            received_bytes = len(payload)
            c[row_range.start:row_range.end] = decode_row_block(payload, len(row_range), n, self.element_dtype)
        except ShortTransferError as e:
            received_bytes = e.transferred_bytes
            logger.error(f"Collection from worker {handle.worker_index} failed for rows {row_range}: {e}")
            failure = CollectionFailure(handle.worker_index, row_range, str(e))
        finally:
            handle.consumer.close()

        metrics = WorkerCollectionMetrics(
            worker_index=handle.worker_index,
            row_range=row_range,
            expected_bytes=expected_bytes,
            received_bytes=received_bytes,
            collection_time_ms=_collection_timer.stop(),
        )
        logger.debug(f"Collected {received_bytes}/{expected_bytes} bytes from worker {handle.worker_index} in {metrics.collection_time_ms:.3f} ms")
        return metrics, failure

    def _reap(self, handles: list[WorkerHandle]) -> list[int]:
        # release every reader before joining, so no writer waits on a channel nobody will read
        for handle in handles:
            handle.consumer.close()
        exit_codes = []
        for handle in handles:
            exit_code = self.worker.wait(handle.process)
            handle.retire()
            if exit_code != 0:
                logger.warning(f"Worker {handle.worker_index} exited with code {exit_code}")
            exit_codes.append(exit_code)
        return exit_codes

    def _abort(self, handles: list[WorkerHandle]) -> None:
        for handle in handles:
            self.worker.terminate(handle.process)
        self._reap(handles)
