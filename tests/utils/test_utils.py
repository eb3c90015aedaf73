import os

from distmatmul.channels.channel import Channel
from distmatmul.channels.pipe_channel import PipeChannel
from distmatmul.channels.socket_channel import SocketChannel
from distmatmul.workers.process_worker import ProcessWorker

# TRANSPORT=pipe|socket and START_METHOD=fork|spawn|forkserver select what the execution tests run on
_transports = {
    "pipe": PipeChannel.Config,
    "socket": SocketChannel.Config,
}

def get_channel_config(**kwargs) -> Channel.Config:
    transport = os.getenv("TRANSPORT", "pipe")
    if transport not in _transports: raise ValueError(f"Unknown TRANSPORT: {transport}. Use one of {list(_transports)}")
    return _transports[transport](**kwargs)

def get_worker_config() -> ProcessWorker.Config:
    return ProcessWorker.Config(start_method=os.getenv("START_METHOD") or None)
