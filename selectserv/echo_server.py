"""A non-blocking echo server that stops after a period of inactivity.

Every readable connection is drained completely and each chunk is echoed
back. The server ends when no descriptor becomes ready within the idle
timeout, or when accepting a connection fails.
"""

from __future__ import annotations

import select
import socket
import sys
from typing import Sequence

SERVER_PORT = 12345
BACKLOG = 32
RECV_SIZE = 80
IDLE_TIMEOUT = 3 * 60.0


class EchoServer:
    """Echoes back everything its clients send, on one listening socket."""

    def __init__(
        self,
        port: int = SERVER_PORT,
        host: str = "::",
        idle_timeout: float = IDLE_TIMEOUT,
    ) -> None:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        self.idle_timeout = idle_timeout
        self._connections: set[socket.socket] = set()
        self._listener = socket.socket(family, socket.SOCK_STREAM)
        try:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._listener.setblocking(False)
            self._listener.bind((host, port))
            self._listener.listen(BACKLOG)
        except OSError:
            self._listener.close()
            raise

    def address(self) -> tuple[str, int]:
        """The (host, port) the listener is bound to."""
        return self._listener.getsockname()[:2]

    def serve(self) -> None:
        """Serve until idle for the timeout or accept fails; then close everything."""
        try:
            running = True
            while running:
                print("Waiting on select()...")
                watched = [self._listener, *self._connections]
                try:
                    readable, _, _ = select.select(watched, [], [], self.idle_timeout)
                except OSError as exc:
                    print(f"  select() failed: {exc}", file=sys.stderr)
                    break
                if not readable:
                    print("  select() timed out.  End program.")
                    break
                for sock in sorted(readable, key=lambda s: s.fileno()):
                    if sock is self._listener:
                        print("  Listening socket is readable")
                        if not self._accept_all():
                            running = False
                    else:
                        self._drain(sock)
        finally:
            self.close()

    def close(self) -> None:
        """Close every connection and the listening socket."""
        for sock in self._connections:
            sock.close()
        self._connections.clear()
        self._listener.close()

    def __enter__(self) -> "EchoServer":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _accept_all(self) -> bool:
        """Accept every queued connection; False if accepting failed for real."""
        while True:
            try:
                conn, _ = self._listener.accept()
            except BlockingIOError:
                return True
            except OSError as exc:
                print(f"  accept() failed: {exc}", file=sys.stderr)
                return False
            conn.setblocking(False)
            print(f"  New incoming connection - {conn.fileno()}")
            self._connections.add(conn)

    def _drain(self, sock: socket.socket) -> None:
        """Echo everything available on a connection, closing it when done with."""
        print(f"  Descriptor {sock.fileno()} is readable")
        close_conn = False
        while True:
            try:
                data = sock.recv(RECV_SIZE)
            except BlockingIOError:
                break
            except OSError as exc:
                print(f"  recv() failed: {exc}", file=sys.stderr)
                close_conn = True
                break
            if not data:
                print("  Connection closed")
                close_conn = True
                break
            print(f"  {len(data)} bytes received")
            try:
                sock.send(data)
            except OSError as exc:
                print(f"  send() failed: {exc}", file=sys.stderr)
                close_conn = True
                break
        if close_conn:
            self._connections.discard(sock)
            sock.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the echo server on its fixed port until it goes idle."""
    try:
        server = EchoServer()
    except OSError as exc:
        print(f"bind() failed: {exc}", file=sys.stderr)
        return 1
    server.serve()
    return 0


if __name__ == "__main__":
    sys.exit(main())