from distmatmul.channels.channel import Channel, ConsumerEnd, ProducerEnd
from distmatmul.channels.pipe_channel import PipeChannel
from distmatmul.channels.socket_channel import SocketChannel

__all__ = ["Channel", "ConsumerEnd", "ProducerEnd", "PipeChannel", "SocketChannel"]
