class DistMatmulError(Exception):
    """Base class for all distributed matrix multiplication errors"""
    pass

class ChannelSetupError(DistMatmulError):
    """Raised when a worker channel could not be established"""
    def __init__(self, reason: str, worker_index: int | None = None):
        target = "" if worker_index is None else f" for worker {worker_index}"
        message = f"[SetupError] Could not create channel{target}: {reason}"
        super().__init__(message)
        self.reason = reason
        self.worker_index = worker_index

class WorkerSpawnError(DistMatmulError):
    """Raised when a worker process could not be started"""
    def __init__(self, worker_index: int, reason: str):
        message = f"[SetupError] Could not spawn worker {worker_index}: {reason}"
        super().__init__(message)
        self.worker_index = worker_index

class ShortTransferError(DistMatmulError):
    """Raised when a channel ends or fails before the expected number of bytes was transferred"""
    def __init__(self, direction: str, expected_bytes: int, transferred_bytes: int, reason: str = "end of stream"):
        message = f"[TransferError] Short {direction}: {transferred_bytes}/{expected_bytes} bytes ({reason})"
        super().__init__(message)
        self.direction = direction
        self.expected_bytes = expected_bytes
        self.transferred_bytes = transferred_bytes

class ChannelClosedError(DistMatmulError):
    """Raised when a channel endpoint is used after its owner closed it"""
    def __init__(self, endpoint: str):
        super().__init__(f"[ClientError] Channel {endpoint} end was already closed")

class HandleRetiredError(DistMatmulError):
    """Raised when a worker handle is used after it was retired"""
    def __init__(self, worker_index: int):
        super().__init__(f"[ClientError] Handle of worker {worker_index} was already retired and can't be reused")
