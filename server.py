# server.py
import argparse
import socket
import threading
from typing import Optional, Set, Tuple

from config import SERVER_HOST, SERVER_PORT, LISTEN_BACKLOG
from logger import ChatLogger
from protocol import IncompleteReadError, read_frame, write_frame
from threading_utils import start_daemon_thread


class EchoServer:
    """
    Console-based peer for local testing.

    Responsibilities:
    - Accept TCP connections from clients
    - Read each framed line and send the same frame back to its sender
    """

    def __init__(self, host: str = SERVER_HOST, port: int = SERVER_PORT,
                 logger: Optional[ChatLogger] = None):
        self.host = host
        self.port = port
        self.running = False
        self.server_socket: Optional[socket.socket] = None
        self.clients: Set[socket.socket] = set()
        self._clients_lock = threading.Lock()
        self.logger = logger or ChatLogger(name="server")

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); useful when started on port 0."""
        return self._bound_socket().getsockname()[:2]

    def bind(self) -> None:
        self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.server_socket.bind((self.host, self.port))
        self.server_socket.listen(LISTEN_BACKLOG)
        self.running = True
        self._log_event(f"Server listening on {self.address[0]}:{self.address[1]}")

    def start(self) -> threading.Thread:
        """Bind and serve on a background thread."""
        self.bind()
        return start_daemon_thread(self._accept_loop, name="linechat-accept")

    def serve_forever(self) -> None:
        """Start the server (blocking call)."""
        self.bind()
        try:
            self._accept_loop()
        finally:
            self.stop()

    def _bound_socket(self) -> socket.socket:
        if self.server_socket is None:
            raise RuntimeError("server not bound")
        return self.server_socket

    def _accept_loop(self) -> None:
        server_socket = self._bound_socket()
        while self.running:
            try:
                client_socket, address = server_socket.accept()
            except OSError:
                # Socket was closed while waiting on accept
                break

            with self._clients_lock:
                self.clients.add(client_socket)
            start_daemon_thread(self._handle_client, args=(client_socket, address))

    def _handle_client(self, client_socket: socket.socket, address) -> None:
        peer = f"{address[0]}:{address[1]}"
        self._log_event(f"Client connected: {peer}")
        try:
            while self.running:
                line = read_frame(client_socket)
                if line is None:
                    break
                self.logger.log_message_received(peer, line)
                write_frame(client_socket, line)
        except (OSError, IncompleteReadError, UnicodeDecodeError) as e:
            if self.running:
                self.logger.log_error("CLIENT", f"{peer}: {e}")
        finally:
            with self._clients_lock:
                self.clients.discard(client_socket)
            client_socket.close()
            self._log_event(f"Client disconnected: {peer}")

    def stop(self) -> None:
        """Stop accepting and drop every client."""
        if not self.running:
            return
        self.running = False
        if self.server_socket:
            try:
                # Linux only wakes a blocked accept() on shutdown
                self.server_socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            try:
                self.server_socket.close()
            except OSError:
                pass
        with self._clients_lock:
            clients = list(self.clients)
        for client in clients:
            try:
                client.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        self._log_event("Server stopped")
        self.logger.close()

    def _log_event(self, text: str) -> None:
        print(f"[server] {text}")
        self.logger.log_info("SERVER", text)


def main():
    parser = argparse.ArgumentParser(description="LineChat echo server")
    parser.add_argument("--host", default=SERVER_HOST)
    parser.add_argument("--port", type=int, default=SERVER_PORT)
    args = parser.parse_args()

    server = EchoServer(args.host, args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        server.stop()


if __name__ == "__main__":
    main()
