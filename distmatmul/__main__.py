import argparse
import logging
import sys

from distmatmul.channels.pipe_channel import PipeChannel
from distmatmul.channels.socket_channel import SocketChannel
from distmatmul.coordinator import Coordinator
from distmatmul.errors import ChannelSetupError, WorkerSpawnError
from distmatmul.matrix import print_matrix
import distmatmul.utils.logger as logger_module
from distmatmul.workers.process_worker import ProcessWorker

TRANSPORTS = {
    "pipe": PipeChannel.Config,
    "socket": SocketChannel.Config,
}


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="distmatmul", description="Distributed matrix multiplication across worker processes")
    ap.add_argument("--size", "-n", type=int, default=10, help="Matrix size (NxN)")
    ap.add_argument("--workers", "-p", type=int, default=4, help="Number of worker processes")
    ap.add_argument("--transport", choices=sorted(TRANSPORTS), default="pipe", help="Channel used by workers to send back their rows")
    ap.add_argument("--start-method", choices=["fork", "spawn", "forkserver"], default=None, help="multiprocessing start method (default: platform default)")
    ap.add_argument("--element-bits", type=int, choices=[32, 64], default=64, help="Width of each integer sent over the channel")
    ap.add_argument("--quiet", "-q", action="store_true", help="Don't print the matrices")
    ap.add_argument("--verbose", "-v", action="store_true", help="Show info and debug logs alongside the results")
    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_arg_parser()
    args = ap.parse_args(argv)
    if args.size < 0: ap.error("--size can't be negative")
    if args.workers <= 0: ap.error("--workers must be positive")

    # timestamped logs would interleave with the printed matrices; LOGS still wins when set
    if args.verbose:
        logger_module.set_console_level(logging.DEBUG)
    elif logger_module.logs_env is None:
        logger_module.set_console_level(logging.WARNING)

    config = Coordinator.Config(
        matrix_size=args.size,
        worker_count=args.workers,
        channel_config=TRANSPORTS[args.transport](),
        worker_config=ProcessWorker.Config(start_method=args.start_method),
        element_dtype=f"<i{args.element_bits // 8}",
    )

    print(f"Distributed Matrix Multiplication ({args.size}x{args.size}) with {args.workers} processes")
    try:
        report = config.create_instance().run()
    except (ChannelSetupError, WorkerSpawnError) as e:
        print(str(e), file=sys.stderr)
        return 1

    if not args.quiet:
        print("\nResult matrix C (distributed):")
        print_matrix(report.result)
        print("\nReference matrix C_ref (single-threaded):")
        print_matrix(report.reference)

    for failure in report.collection_failures:
        print(f"\nParent: read from child {failure.worker_index} failed ({failure.reason})")

    if report.verified:
        print("\nSUCCESS: distributed result matches reference.")
    else:
        print("\nERROR: distributed result differs from reference.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
