import socket

import pytest

from logger import ChatLogger
from network import ChatSession
from server import EchoServer


@pytest.fixture
def chat_logger(tmp_path):
    logger = ChatLogger(name="client", log_dir=tmp_path)
    yield logger
    logger.close()


@pytest.fixture
def echo_server(tmp_path):
    server = EchoServer("127.0.0.1", 0, logger=ChatLogger(name="server", log_dir=tmp_path))
    server.start()
    yield server
    server.stop()


@pytest.fixture
def listener():
    """A bare listening socket; tests accept() and play the peer by hand."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)
    srv.settimeout(5)
    yield srv
    srv.close()


@pytest.fixture
def session(chat_logger):
    s = ChatSession(connect_timeout=2.0, logger=chat_logger)
    yield s
    s.disconnect()
