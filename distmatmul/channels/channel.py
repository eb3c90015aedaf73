from abc import ABC, abstractmethod
from dataclasses import dataclass

from distmatmul.errors import ChannelClosedError, ShortTransferError


class _ChannelEnd(ABC):
    endpoint_name: str

    def __init__(self, max_chunk_bytes: int | None = None):
        self.max_chunk_bytes = max_chunk_bytes
        self.closed = False

    def _check_open(self):
        if self.closed: raise ChannelClosedError(self.endpoint_name)

    def _chunk_limit(self, remaining: int) -> int:
        if self.max_chunk_bytes is None: return remaining
        return min(remaining, self.max_chunk_bytes)

    def close(self) -> None:
        """Releases this end. Closing twice is a no-op, any other use after close raises ChannelClosedError"""
        if self.closed: return
        self.closed = True
        self._close()

    @abstractmethod
    def _close(self) -> None: pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class ProducerEnd(_ChannelEnd):
    endpoint_name = "producer"

    def detach(self) -> None:
        """
        Drops this process's reference without ending the stream. Used by a process
        that handed the end over to the writer and never writes itself.
        """
        if self.closed: return
        self.closed = True
        self._detach()

    def _detach(self) -> None:
        self._close()

    @abstractmethod
    def _send_some(self, data: memoryview) -> int:
        """ returns how many bytes of {data} were written. May be less than len(data) """
        pass

    def write_all(self, data: bytes) -> int:
        """
        Writes every byte of {data}, retrying partial writes.
        Raises ShortTransferError if the channel fails before all bytes are sent.
        """
        self._check_open()
        view = memoryview(data).cast("B")
        total = len(view)
        written = 0
        while written < total:
            try:
                w = self._send_some(view[written:written + self._chunk_limit(total - written)])
            except OSError as e:
                raise ShortTransferError("write", total, written, reason=str(e)) from e
            if w <= 0:
                raise ShortTransferError("write", total, written, reason="channel accepted no bytes")
            written += w
        return written


class ConsumerEnd(_ChannelEnd):
    endpoint_name = "consumer"

    @abstractmethod
    def _recv_some(self, max_bytes: int) -> bytes:
        """ returns up to {max_bytes} bytes. An empty result means the producer closed its end """
        pass

    def read_exact(self, expected_bytes: int) -> bytes:
        """
        Reads exactly {expected_bytes}, accumulating partial reads.
        Zero expected bytes is satisfied immediately without touching the channel.
        Raises ShortTransferError if the stream ends or fails early.
        """
        self._check_open()
        if expected_bytes < 0: raise ValueError(f"expected_bytes can't be negative. Got {expected_bytes}")
        buf = bytearray()
        while len(buf) < expected_bytes:
            try:
                chunk = self._recv_some(self._chunk_limit(expected_bytes - len(buf)))
            except OSError as e:
                raise ShortTransferError("read", expected_bytes, len(buf), reason=str(e)) from e
            if not chunk:
                raise ShortTransferError("read", expected_bytes, len(buf))
            buf += chunk
        return bytes(buf)


class Channel(ABC):
    """
    Unidirectional, ordered byte stream with one producer end (written by a
    single worker) and one consumer end (read by the coordinator).
    """

    @dataclass
    class Config(ABC):
        max_chunk_bytes: int | None = None # upper bound on bytes moved per read/write call

        @abstractmethod
        def create_instance(self) -> "Channel":
            """ raises ChannelSetupError if the OS can't provide the channel """
            pass

    producer: ProducerEnd
    consumer: ConsumerEnd

    def close(self) -> None:
        self.producer.close()
        self.consumer.close()
