"""A two-room chat relay built on a single select() loop.

Each listening port belongs to one room. Whatever a client sends is
relayed verbatim to every other client connected to the same room.
"""

from __future__ import annotations

import enum
import os
import re
import select
import socket
import sys
from typing import Iterable, Sequence

BUF_SIZE = 4096
BACKLOG = 42
USAGE = "Usage: {} port\n"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class Room(enum.IntEnum):
    """Chat rooms, one per listening port."""

    A = 1
    B = 2


def _atoi(text: str) -> int:
    """Parse a leading integer the lenient way: junk yields 0."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_ports(argv: Sequence[str]) -> tuple[int, ...]:
    """Return the ports named by the command arguments, one per room."""
    if len(argv) != len(Room):
        raise ValueError(f"expected {len(Room)} ports, got {len(argv)}")
    return tuple(_atoi(arg) for arg in argv)


class ChatServer:
    """Listens on one port per room and relays messages within each room."""

    def __init__(self, ports: Iterable[int], host: str = "0.0.0.0") -> None:
        ports = list(ports)
        if len(ports) != len(Room):
            raise ValueError(f"expected {len(Room)} ports, got {len(ports)}")
        self._listeners: dict[socket.socket, Room] = {}
        self._clients: dict[socket.socket, Room] = {}
        try:
            for port, room in zip(ports, Room):
                listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
                self._listeners[listener] = room
                listener.bind((host, port))
                listener.listen(BACKLOG)
        except OSError:
            self.close()
            raise

    def addresses(self) -> list[tuple[str, int]]:
        """The bound (host, port) of each listener, in room order."""
        ordered = sorted(self._listeners.items(), key=lambda item: item[1])
        return [sock.getsockname()[:2] for sock, _ in ordered]

    def poll(self, timeout: float | None = None) -> int:
        """Wait for activity once, handle it, and return how many sockets were ready."""
        watched = list(self._listeners) + list(self._clients)
        if not watched:
            return 0
        readable, _, _ = select.select(watched, [], [], timeout)
        for sock in sorted(readable, key=lambda s: s.fileno()):
            if sock in self._listeners:
                self._accept(sock)
            elif sock in self._clients:
                self._read(sock)
        return len(readable)

    def serve_forever(self) -> None:
        """Handle activity until interrupted."""
        while True:
            self.poll()

    def close(self) -> None:
        """Close every client and listening socket."""
        for sock in list(self._clients) + list(self._listeners):
            sock.close()
        self._clients.clear()
        self._listeners.clear()

    def __enter__(self) -> "ChatServer":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _accept(self, listener: socket.socket) -> None:
        conn, peer = listener.accept()
        addr, port = peer[0], peer[1]
        room = self._listeners[listener]
        self._clients[conn] = room
        print(f"New client #{conn.fileno()} from {addr}:{port}")
        print(f"chatroom is: {int(room)}")

    def _read(self, sock: socket.socket) -> None:
        try:
            data = sock.recv(BUF_SIZE)
        except OSError:
            data = b""
        if not data:
            number = sock.fileno()
            sock.close()
            del self._clients[sock]
            print(f"client #{number} gone away")
            return
        room = self._clients[sock]
        for other, other_room in list(self._clients.items()):
            if other is not sock and other_room == room:
                try:
                    other.send(data)
                except OSError:
                    pass


def main(argv: Sequence[str] | None = None) -> int:
    """Run the chat relay on the two ports given as arguments."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        ports = parse_ports(argv)
    except ValueError:
        program = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "chatroom"
        sys.stderr.write(USAGE.format(program))
        return 1
    try:
        server = ChatServer(ports)
    except OSError as exc:
        sys.stderr.write(f"listen error: {exc.strerror or exc}\n")
        return 1
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            return 0
        except OSError as exc:
            sys.stderr.write(f"select error: {exc.strerror or exc}\n")
            return 1
    return 0