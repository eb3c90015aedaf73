import time


class Timer:
    """Wall-clock stopwatch. All values are in milliseconds."""

    def __init__(self):
        self.start_time = time.perf_counter()
        self.total_time_ms: float | None = None

    def elapsed(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000

    def stop(self) -> float:
        """ returns in milliseconds. Calling it again returns the first measurement """
        if self.total_time_ms is None:
            self.total_time_ms = self.elapsed()
        return self.total_time_ms
