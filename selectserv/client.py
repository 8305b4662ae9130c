"""A minimal client that connects and sends one request."""

from __future__ import annotations

import socket
import sys
from typing import Sequence

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_MESSAGE = "This is Request from one client\n"


def send_message(
    message: str | bytes = DEFAULT_MESSAGE,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> int:
    """Connect, send the message once, and return how many bytes went out."""
    payload = message.encode("utf-8") if isinstance(message, str) else bytes(message)
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.connect((host, port))
        return sock.send(payload)


def main(argv: Sequence[str] | None = None) -> int:
    """Send the default request to the local server."""
    try:
        send_message()
    except OSError as exc:
        print(f"\n Socket error: {exc} \n", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())