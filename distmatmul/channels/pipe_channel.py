import multiprocessing
import os
from dataclasses import dataclass
from multiprocessing.connection import Connection

from distmatmul.channels.channel import Channel, ConsumerEnd, ProducerEnd
from distmatmul.errors import ChannelSetupError


class PipeProducerEnd(ProducerEnd):
    def __init__(self, conn: Connection, max_chunk_bytes: int | None = None):
        super().__init__(max_chunk_bytes)
        self.conn = conn

    def _send_some(self, data: memoryview) -> int:
        return os.write(self.conn.fileno(), data)

    def _close(self) -> None:
        self.conn.close()


class PipeConsumerEnd(ConsumerEnd):
    def __init__(self, conn: Connection, max_chunk_bytes: int | None = None):
        super().__init__(max_chunk_bytes)
        self.conn = conn

    def _recv_some(self, max_bytes: int) -> bytes:
        return os.read(self.conn.fileno(), max_bytes)

    def _close(self) -> None:
        self.conn.close()


class PipeChannel(Channel):
    """
    OS pipe. The raw file descriptors are used directly (no multiprocessing
    message framing); the Connection objects only carry them across any
    multiprocessing start method.
    """

    @dataclass
    class Config(Channel.Config):
        def create_instance(self) -> "PipeChannel": return PipeChannel(self)

    def __init__(self, config: Config):
        try:
            read_conn, write_conn = multiprocessing.Pipe(duplex=False)
        except OSError as e:
            raise ChannelSetupError(str(e)) from e
        self.config = config
        self.producer = PipeProducerEnd(write_conn, config.max_chunk_bytes)
        self.consumer = PipeConsumerEnd(read_conn, config.max_chunk_bytes)
