# network.py
import queue
import socket
import threading
from enum import Enum
from typing import Iterator, Optional

from config import (
    SERVER_HOST,
    SERVER_PORT,
    CONNECT_TIMEOUT,
    READ_TIMEOUT,
    JOIN_TIMEOUT,
)
from logger import ChatLogger
from protocol import FrameTooLargeError, encode_frame, read_frame
from threading_utils import start_daemon_thread


class ChatError(Exception):
    """Base class for chat session errors."""


class ConnectError(ChatError, ConnectionError):
    """Opening the connection failed; the session stays disconnected."""


class WriteError(ChatError):
    """A line could not be sent. The session state is left as it was."""


class ReceiveError(ChatError):
    """The receive loop hit a protocol or I/O failure and stopped."""


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CLOSING = "closing"


# Marks the end of the received-lines stream
_END = object()

# Peer went away abruptly; treated like a clean close
_PEER_RESET = (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)


class ChatSession:
    """
    One TCP connection to a chat peer.

    The caller's thread connects and sends lines. A single background thread,
    started with start_receiving(), reads frames and queues them for
    received_lines(). disconnect() closes the socket, which is also what
    wakes the receive thread up.

    A session is single-use: after disconnect(), create a new one.
    """

    def __init__(
        self,
        connect_timeout: Optional[float] = CONNECT_TIMEOUT,
        read_timeout: Optional[float] = READ_TIMEOUT,
        logger: Optional[ChatLogger] = None,
    ):
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

        self.host: Optional[str] = None
        self.port: Optional[int] = None
        self.sock: Optional[socket.socket] = None

        self._state = SessionState.DISCONNECTED
        self._used = False
        self._state_lock = threading.Lock()
        self._send_lock = threading.Lock()

        self._lines: "queue.Queue" = queue.Queue()
        self._finished = False
        self._stream_ended = False
        self._recv_thread: Optional[threading.Thread] = None

        self._owns_logger = logger is None
        self.logger = logger or ChatLogger(name="client")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    @property
    def state(self) -> SessionState:
        with self._state_lock:
            return self._state

    def is_connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------
    def connect(self, host: str = SERVER_HOST, port: int = SERVER_PORT) -> None:
        """Open the TCP connection. Raises ConnectError on failure."""
        self._check_can_connect()

        target = f"{host}:{port}"
        try:
            sock = socket.create_connection((host, port), timeout=self.connect_timeout)
        except OSError as e:
            self.logger.log_connection(target, f"FAILED: {e}")
            raise ConnectError(f"could not connect to {target}: {e}") from e

        # create_connection left the connect timeout on the socket
        sock.settimeout(self.read_timeout)

        with self._state_lock:
            raced = self._state is not SessionState.DISCONNECTED or self._used
            if not raced:
                self.sock = sock
                self.host = host
                self.port = port
                self._state = SessionState.CONNECTED
                self._used = True
        if raced:
            sock.close()
            raise ConnectError("session was connected by another caller")

        self.logger.log_connection(target, "SUCCESS")

    def _check_can_connect(self) -> None:
        with self._state_lock:
            if self._state is not SessionState.DISCONNECTED:
                raise ConnectError(f"session is already {self._state.value}")
            if self._used:
                raise ConnectError("session has been closed; create a new ChatSession")

    def disconnect(self) -> None:
        """Close the connection. Safe to call any number of times."""
        with self._state_lock:
            if self._state is SessionState.CLOSING:
                return
            was_connected = self._state is SessionState.CONNECTED
            if was_connected:
                self._state = SessionState.CLOSING
            sock = self.sock
            thread = self._recv_thread
            # Without a receive thread nobody else will end the stream
            end_stream = thread is None and not self._stream_ended
            if end_stream:
                self._stream_ended = True
            self._used = True

        if was_connected:
            try:
                # Wakes a recv() blocked in the receive thread
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass  # already half closed or reset by the peer
            finally:
                sock.close()

            with self._state_lock:
                self.sock = None
                self._state = SessionState.DISCONNECTED
            self.logger.log_disconnection(self.address)

            if thread is not None and thread is not threading.current_thread():
                thread.join(JOIN_TIMEOUT)

        if end_stream:
            self._lines.put(_END)

        if self._owns_logger:
            self.logger.close()

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------
    def send_line(self, text: str) -> None:
        """Send one line as one frame. Raises WriteError on failure."""
        with self._state_lock:
            connected = self._state is SessionState.CONNECTED
            sock = self.sock
        if not connected:
            raise WriteError("not connected")

        try:
            frame = encode_frame(text)
        except FrameTooLargeError as e:
            raise WriteError(str(e)) from e

        try:
            with self._send_lock:
                sock.sendall(frame)
        except OSError as e:
            self.logger.log_error("SEND", str(e))
            raise WriteError(f"write failed: {e}") from e

        self.logger.log_message_sent(self.address, text)

    # ------------------------------------------------------------------
    # Receiving
    # ------------------------------------------------------------------
    def start_receiving(self) -> threading.Thread:
        """Start the receive loop. Only once, and only after connect()."""
        with self._state_lock:
            if self._state is not SessionState.CONNECTED:
                raise RuntimeError("connect() must succeed before receiving")
            if self._recv_thread is not None:
                raise RuntimeError("receive loop already started")
            self._recv_thread = start_daemon_thread(
                self._receive_loop, name="linechat-recv"
            )
        return self._recv_thread

    def received_lines(self) -> Iterator[str]:
        """
        Yield received lines in arrival order.

        Ends when the peer closes or the session is disconnected. If the
        receive loop failed, the ReceiveError is raised from the iterator
        instead. Once ended, iterating again yields nothing.
        """
        while not self._finished:
            item = self._lines.get()
            if item is _END:
                self._finished = True
                return
            if isinstance(item, ReceiveError):
                self._finished = True
                raise item
            yield item

    def _receive_loop(self) -> None:
        sock = self.sock
        try:
            while self.is_connected():
                try:
                    line = read_frame(sock)
                except _PEER_RESET as e:
                    self.logger.log_info("RECEIVE", f"connection reset: {e}")
                    break
                except (OSError, EOFError, UnicodeDecodeError) as e:
                    if not self.is_connected():
                        # disconnect() closed the socket under the read
                        break
                    self.logger.log_error("RECEIVE", str(e))
                    err = ReceiveError(f"receive failed: {e}")
                    err.__cause__ = e
                    self._lines.put(err)
                    break

                if line is None:
                    if self.is_connected():
                        self.logger.log_info("RECEIVE", "peer closed the connection")
                    break

                self.logger.log_message_received(self.address, line)
                self._lines.put(line)
        finally:
            self._lines.put(_END)
            self.disconnect()
