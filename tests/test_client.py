import socket

import pytest

from selectserv.client import send_message


@pytest.fixture
def listener():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    sock.settimeout(5)
    yield sock
    sock.close()


def _read_all(listener):
    conn, _ = listener.accept()
    with conn:
        conn.settimeout(5)
        data = b""
        while True:
            chunk = conn.recv(1024)
            if not chunk:
                return data
            data += chunk


def test_send_text_message(listener):
    message = "hello there\n"
    host, port = listener.getsockname()
    assert send_message(message, host, port) == len(message)
    assert _read_all(listener) == message.encode()


def test_send_bytes_message(listener):
    message = b"\x00\x01binary"
    host, port = listener.getsockname()
    assert send_message(message, host, port) == len(message)
    assert _read_all(listener) == message


def test_default_message(listener):
    expected = b"This is Request from one client\n"
    host, port = listener.getsockname()
    assert send_message(host=host, port=port) == len(expected)
    assert _read_all(listener) == expected


def test_refused_connection_raises():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    host, port = probe.getsockname()
    probe.close()
    with pytest.raises(ConnectionRefusedError):
        send_message("x", host, port)