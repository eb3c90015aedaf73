import multiprocessing
import sys
from dataclasses import dataclass
from multiprocessing.process import BaseProcess

import cloudpickle

from distmatmul.channels.channel import ProducerEnd
from distmatmul.errors import WorkerSpawnError
from distmatmul.utils.logger import create_logger
from distmatmul.workers.worker import Worker, WorkerStartContext, run_worker

logger = create_logger(__name__)


def _worker_entrypoint(serialized_context: bytes, producer: ProducerEnd) -> None:
    context: WorkerStartContext = cloudpickle.loads(serialized_context)
    try:
        run_worker(context, producer)
    except Exception:
        # already logged by run_worker
        sys.exit(1)


class ProcessWorker(Worker):
    """
    One OS process per worker (multiprocessing). The start context is
    serialized with cloudpickle, so the row kernel can be any callable,
    closures included.
    """

    @dataclass
    class Config(Worker.Config):
        start_method: str | None = None # "fork", "spawn", "forkserver" or None for the platform default

        def create_instance(self) -> "ProcessWorker": return ProcessWorker(self)

    process_config: Config

    def __init__(self, config: Config):
        super().__init__(config)
        self.process_config = config
        self.mp_context = multiprocessing.get_context(config.start_method)

    def spawn(self, context: WorkerStartContext, producer: ProducerEnd) -> BaseProcess:
        try:
            process = self.mp_context.Process(
                target=_worker_entrypoint,
                args=(cloudpickle.dumps(context), producer),
                name=f"distmatmul-worker-{context.worker_index}",
            )
            process.start()
        except Exception as e:
            # unpicklable context (e.g. a kernel closing over a lock) or the OS refusing a new process
            raise WorkerSpawnError(context.worker_index, str(e)) from e
        logger.debug(f"Spawned worker {context.worker_index} (pid={process.pid}) for rows {context.row_range}")
        return process

    def wait(self, process: BaseProcess) -> int:
        process.join()
        exit_code = process.exitcode
        process.close()
        return exit_code # type: ignore

    def terminate(self, process: BaseProcess) -> None:
        if process.is_alive():
            process.terminate()
