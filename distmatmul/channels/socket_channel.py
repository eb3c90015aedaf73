import socket
from dataclasses import dataclass

from distmatmul.channels.channel import Channel, ConsumerEnd, ProducerEnd
from distmatmul.errors import ChannelSetupError


class SocketProducerEnd(ProducerEnd):
    def __init__(self, sock: socket.socket, max_chunk_bytes: int | None = None):
        super().__init__(max_chunk_bytes)
        self.sock = sock

    def _send_some(self, data: memoryview) -> int:
        return self.sock.send(data)

    def _detach(self) -> None:
        self.sock.close()

    def _close(self) -> None:
        # shutdown acts on the socket shared by every process holding it:
        # only the writer may end the stream this way
        try:
            self.sock.shutdown(socket.SHUT_WR)
        except OSError:
            pass # peer already gone
        self.sock.close()


class SocketConsumerEnd(ConsumerEnd):
    def __init__(self, sock: socket.socket, max_chunk_bytes: int | None = None):
        super().__init__(max_chunk_bytes)
        self.sock = sock

    def _recv_some(self, max_bytes: int) -> bytes:
        return self.sock.recv(max_bytes)

    def _close(self) -> None:
        self.sock.close()


class SocketChannel(Channel):
    """
    Connected stream socket pair used in one direction only: the unused
    direction of each socket is shut down when the channel is created.
    """

    @dataclass
    class Config(Channel.Config):
        def create_instance(self) -> "SocketChannel": return SocketChannel(self)

    def __init__(self, config: Config):
        try:
            producer_sock, consumer_sock = socket.socketpair()
        except OSError as e:
            raise ChannelSetupError(str(e)) from e
        try:
            producer_sock.shutdown(socket.SHUT_RD)
            consumer_sock.shutdown(socket.SHUT_WR)
        except OSError as e:
            producer_sock.close()
            consumer_sock.close()
            raise ChannelSetupError(str(e)) from e
        self.config = config
        self.producer = SocketProducerEnd(producer_sock, config.max_chunk_bytes)
        self.consumer = SocketConsumerEnd(consumer_sock, config.max_chunk_bytes)
