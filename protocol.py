# protocol.py
"""
Frame codec.

Every message on the wire is a UTF-8 string preceded by its byte length as a
2-byte unsigned big-endian integer:

    [length: 2 bytes][payload: length bytes]

The format is symmetric, so the client and the echo server share it.
"""

import socket
import struct
from typing import Optional

HEADER = struct.Struct("!H")
MAX_FRAME_SIZE = 0xFFFF


class FrameTooLargeError(ValueError):
    """Payload does not fit in the 2-byte length prefix."""


class IncompleteReadError(EOFError):
    """The stream ended before the expected number of bytes arrived."""

    def __init__(self, partial: bytes, expected: int):
        super().__init__(f"stream ended after {len(partial)} of {expected} bytes")
        self.partial = partial
        self.expected = expected


def encode_frame(text: str) -> bytes:
    payload = text.encode("utf-8")
    if len(payload) > MAX_FRAME_SIZE:
        raise FrameTooLargeError(
            f"payload is {len(payload)} bytes, limit is {MAX_FRAME_SIZE}"
        )
    return HEADER.pack(len(payload)) + payload


def recv_exact(sock: socket.socket, n: int) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        chunk = sock.recv(n - len(buf))
        if not chunk:
            raise IncompleteReadError(bytes(buf), n)
        buf.extend(chunk)
    return bytes(buf)


def read_frame(sock: socket.socket) -> Optional[str]:
    """
    Read one frame and return its text.

    Returns None if the peer closed the stream cleanly on a frame boundary.
    Raises IncompleteReadError if it closed in the middle of a frame and
    UnicodeDecodeError if the payload is not valid UTF-8.
    """
    first = sock.recv(HEADER.size)
    if not first:
        return None
    if len(first) < HEADER.size:
        first += recv_exact(sock, HEADER.size - len(first))
    (size,) = HEADER.unpack(first)
    if size == 0:
        return ""
    return recv_exact(sock, size).decode("utf-8")


def write_frame(sock: socket.socket, text: str) -> None:
    # one sendall per frame: header and payload leave together
    sock.sendall(encode_frame(text))
