import multiprocessing
import os
import socket
import sys
import threading

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from distmatmul.channels.pipe_channel import PipeChannel
from distmatmul.channels.socket_channel import SocketChannel
from distmatmul.errors import ChannelClosedError, ShortTransferError
from distmatmul.utils.logger import create_logger

logger = create_logger(__name__)

transports = pytest.mark.parametrize("config_class", [PipeChannel.Config, SocketChannel.Config], ids=["pipe", "socket"])

@transports
def test_chunked_transfer(config_class):
    channel = config_class(max_chunk_bytes=3).create_instance()
    payload = bytes(range(50))
    assert channel.producer.write_all(payload) == 50
    channel.producer.close()
    assert channel.consumer.read_exact(50) == payload
    channel.consumer.close()

@transports
def test_large_transfer_with_concurrent_writer(config_class):
    # larger than any OS buffer, so writes and reads are necessarily partial
    channel = config_class().create_instance()
    payload = os.urandom(4 * 1024 * 1024)

    def _write():
        with channel.producer:
            channel.producer.write_all(payload)

    writer = threading.Thread(target=_write)
    writer.start()
    try:
        received = channel.consumer.read_exact(len(payload))
    finally:
        writer.join()
        channel.consumer.close()
    assert received == payload

@transports
def test_short_read_is_reported(config_class):
    channel = config_class().create_instance()
    channel.producer.write_all(b"12345")
    channel.producer.close()
    with pytest.raises(ShortTransferError) as exc_info:
        channel.consumer.read_exact(8)
    assert exc_info.value.expected_bytes == 8
    assert exc_info.value.transferred_bytes == 5
    assert exc_info.value.direction == "read"
    channel.consumer.close()

@transports
def test_zero_length_read_does_not_block(config_class):
    channel = config_class().create_instance()
    # the producer is still open: a real read would block forever
    assert channel.consumer.read_exact(0) == b""
    channel.close()

@transports
def test_closed_ends_cannot_be_reused(config_class):
    channel = config_class().create_instance()
    channel.producer.close()
    channel.producer.close()
    with pytest.raises(ChannelClosedError):
        channel.producer.write_all(b"x")
    channel.consumer.close()
    with pytest.raises(ChannelClosedError):
        channel.consumer.read_exact(1)

def test_write_to_closed_pipe_fails():
    channel = PipeChannel.Config().create_instance()
    channel.consumer.close()
    with pytest.raises(ShortTransferError) as exc_info:
        channel.producer.write_all(b"abc")
    assert exc_info.value.direction == "write"
    assert exc_info.value.transferred_bytes == 0
    channel.producer.close()

def test_socket_channel_is_one_way():
    channel = SocketChannel.Config().create_instance()
    with pytest.raises(OSError):
        channel.consumer.sock.send(b"x")
    channel.close()

def test_detached_socket_producer_keeps_stream_open():
    channel = SocketChannel.Config().create_instance()
    writer_sock = channel.producer.sock.dup()
    channel.producer.detach()
    assert channel.producer.closed
    # the other holder can still write, and its half-close ends the stream
    writer_sock.sendall(b"abc")
    writer_sock.shutdown(socket.SHUT_WR)
    writer_sock.close()
    assert channel.consumer.read_exact(3) == b"abc"
    with pytest.raises(ShortTransferError):
        channel.consumer.read_exact(1)
    channel.consumer.close()

def _write_and_close(producer, payload):
    with producer:
        producer.write_all(payload)

@transports
@pytest.mark.parametrize("start_method", [m for m in ("fork", "spawn") if m in multiprocessing.get_all_start_methods()])
def test_writer_in_another_process(config_class, start_method):
    channel = config_class().create_instance()
    payload = os.urandom(256 * 1024)
    process = multiprocessing.get_context(start_method).Process(target=_write_and_close, args=(channel.producer, payload))
    process.start()
    # the parent's copy goes away while the child is still writing
    channel.producer.detach()
    try:
        assert channel.consumer.read_exact(len(payload)) == payload
        with pytest.raises(ShortTransferError):
            channel.consumer.read_exact(1)
    finally:
        channel.consumer.close()
        process.join()
    assert process.exitcode == 0
