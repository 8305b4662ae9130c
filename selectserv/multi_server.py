"""A select() server for a fixed number of client slots.

A new connection has its first request read in full (until the peer has
sent enough or finished sending) and logged; afterwards whatever a client
sends is echoed back up to the first NUL byte.
"""

from __future__ import annotations

import select
import socket
import sys
from typing import Sequence

PORT = 8080
MAX_CLIENTS = 30
READ_SIZE = 1024
REQUEST_SIZE = 100000


class MultiClientServer:
    """Serves up to ``max_clients`` tracked connections on one port."""

    def __init__(
        self,
        port: int = PORT,
        host: str = "0.0.0.0",
        max_clients: int = MAX_CLIENTS,
    ) -> None:
        self.requests: list[bytes] = []
        self._slots: list[socket.socket | None] = [None] * max_clients
        self._untracked: list[socket.socket] = []
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._listener.bind((host, port))
            print(f"Listener on port number {self.address()[1]}")
            self._listener.listen(max_clients + 1)
        except OSError:
            self._listener.close()
            raise
        print("Waiting for connections...")

    def address(self) -> tuple[str, int]:
        """The (host, port) the listener is bound to."""
        return self._listener.getsockname()[:2]

    def poll(self, timeout: float | None = None) -> int:
        """Wait for activity once, handle it, and return how many sockets were ready."""
        watched = [self._listener, *(sock for sock in self._slots if sock is not None)]
        try:
            readable, _, _ = select.select(watched, [], [], timeout)
        except OSError:
            print("Select error")
            return 0
        ready = set(readable)
        if self._listener in ready and not self._accept():
            return len(readable)
        for index, sock in enumerate(self._slots):
            if sock is not None and sock in ready:
                self._serve_client(index, sock)
        return len(readable)

    def serve_forever(self) -> None:
        """Handle activity until interrupted."""
        while True:
            self.poll()

    def close(self) -> None:
        """Close every client and the listening socket."""
        for sock in [*self._slots, *self._untracked]:
            if sock is not None:
                sock.close()
        self._slots = [None] * len(self._slots)
        self._untracked.clear()
        self._listener.close()

    def __enter__(self) -> "MultiClientServer":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _accept(self) -> bool:
        """Accept a connection and read its first request; False if that read failed."""
        conn, address = self._listener.accept()
        print(
            f"New connection , socket fd is {conn.fileno()} , "
            f"ip is : {address[0]} , sin_port : {address[1]}"
        )
        try:
            index = self._slots.index(None)
        except ValueError:
            self._untracked.append(conn)
        else:
            self._slots[index] = conn
            print(f"Adding to list of sockets at position of {index}")
        try:
            request = conn.recv(REQUEST_SIZE, socket.MSG_WAITALL)
        except OSError as exc:
            print(f"recv: {exc}", file=sys.stderr)
            self._forget(conn)
            conn.close()
            return False
        self.requests.append(request)
        print(
            "Request received from Client:\n---------------------------\n"
            + request.decode("utf-8", errors="replace")
            + "----------------------------"
        )
        return True

    def _forget(self, conn: socket.socket) -> None:
        self._slots = [None if sock is conn else sock for sock in self._slots]
        if conn in self._untracked:
            self._untracked.remove(conn)

    def _serve_client(self, index: int, sock: socket.socket) -> None:
        try:
            data = sock.recv(READ_SIZE)
        except ConnectionError:
            data = b""
        if data:
            sock.send(data.split(b"\0", 1)[0])
            return
        try:
            ip, port = sock.getpeername()[:2]
        except OSError:
            ip, port = "0.0.0.0", 0
        print(f"Host disconnected , ip {ip} , port {port} \n")
        sock.close()
        self._slots[index] = None


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server on its fixed port until interrupted."""
    try:
        server = MultiClientServer()
    except OSError as exc:
        print(f"Fail to bind: {exc}", file=sys.stderr)
        return 1
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())