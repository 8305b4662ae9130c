import socket
import threading

import pytest

from selectserv.echo_server import EchoServer


def _start(server):
    thread = threading.Thread(target=server.serve, daemon=True)
    thread.start()
    return thread


def _recv_exactly(sock, size):
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            break
        data += chunk
    return data


def test_address_reports_bound_host():
    with EchoServer(port=0, host="127.0.0.1") as server:
        host, port = server.address()
        assert host == "127.0.0.1"
        assert port > 0


def test_echo_round_trip():
    server = EchoServer(port=0, host="127.0.0.1", idle_timeout=1.0)
    address = server.address()
    thread = _start(server)
    with socket.create_connection(address, timeout=5) as client:
        client.sendall(b"ping")
        assert _recv_exactly(client, 4) == b"ping"
    thread.join(10)
    assert not thread.is_alive()


def test_payload_larger_than_buffer_is_echoed_intact():
    server = EchoServer(port=0, host="127.0.0.1", idle_timeout=1.0)
    address = server.address()
    thread = _start(server)
    payload = bytes(range(256)) * 2
    with socket.create_connection(address, timeout=5) as client:
        client.sendall(payload)
        assert _recv_exactly(client, len(payload)) == payload
    thread.join(10)
    assert not thread.is_alive()


def test_two_clients_each_get_their_own_echo():
    server = EchoServer(port=0, host="127.0.0.1", idle_timeout=1.0)
    address = server.address()
    thread = _start(server)
    with socket.create_connection(address, timeout=5) as first, \
            socket.create_connection(address, timeout=5) as second:
        first.sendall(b"first")
        second.sendall(b"second")
        assert _recv_exactly(second, 6) == b"second"
        assert _recv_exactly(first, 5) == b"first"
    thread.join(10)
    assert not thread.is_alive()


def test_idle_timeout_ends_server_and_closes_listener(capsys):
    server = EchoServer(port=0, host="127.0.0.1", idle_timeout=0.05)
    address = server.address()
    server.serve()
    out = capsys.readouterr().out
    assert "select() timed out.  End program." in out
    with pytest.raises(ConnectionRefusedError):
        socket.create_connection(address, timeout=2)


def test_closed_connection_is_reported(capsys):
    server = EchoServer(port=0, host="127.0.0.1", idle_timeout=1.0)
    address = server.address()
    thread = _start(server)
    with socket.create_connection(address, timeout=5) as client:
        client.sendall(b"bye")
        assert _recv_exactly(client, 3) == b"bye"
    thread.join(10)
    out = capsys.readouterr().out
    assert "Connection closed" in out
    assert "3 bytes received" in out