"""
Integration tests for the TCP transport over loopback sockets.
"""

import socket
import threading
import time

import pytest
from src.unscramble import messages
from src.unscramble.game_server import GameServer
from src.unscramble.tcp_server import GameTCPServer, SocketSink, serve_until_shutdown

WORD_LINE = messages.WORD_TO_UNSCRAMBLE % "nohtyp"


class LineClient(object):
    """Minimal blocking client speaking the line protocol."""

    def __init__(self, port):
        self.sock = socket.create_connection(("127.0.0.1", port), timeout=5)
        self.file = self.sock.makefile("r", encoding="utf-8")

    @property
    def label(self):
        """How the server names this client: host:port of our end."""
        host, port = self.sock.getsockname()[:2]
        return f"{host}:{port}"

    def send(self, line):
        self.sock.sendall((line + "\n").encode("utf-8"))

    def read_until(self, expected):
        """Read lines up to and including ``expected``."""
        lines = []
        while True:
            line = self.file.readline()
            assert line, f"Connection closed before {expected!r}; got {lines}"
            lines.append(line.rstrip("\n"))
            if lines[-1] == expected:
                return lines

    def at_eof(self):
        return self.file.readline() == ""

    def close(self):
        self.file.close()
        self.sock.close()


@pytest.fixture
def tcp_server(words):
    game_server = GameServer(words, capacity=2, max_rooms=1)
    server = GameTCPServer(("127.0.0.1", 0), game_server)
    thread = threading.Thread(target=serve_until_shutdown, args=(server,), daemon=True)
    thread.start()
    yield server
    game_server.shutdown()
    thread.join(timeout=5)
    assert not thread.is_alive()


def test_game_over_tcp(tcp_server):
    """Test a full round between two real clients."""
    alice = LineClient(tcp_server.port)
    alice.read_until(messages.CONNECTED)
    bob = LineClient(tcp_server.port)

    alice.read_until(WORD_LINE)
    bob_lines = bob.read_until(WORD_LINE)
    assert bob_lines[0] == messages.CONNECTED

    alice.send("pyhton")
    assert alice.read_until(messages.REMAINING_GUESSES % 4)[-2] == messages.WRONG_GUESS
    bob.read_until(messages.MISSED_GUESS % (alice.label, "pyhton"))

    alice.send("python")
    for client in (alice, bob):
        lines = client.read_until(messages.DISCONNECTED)
        assert any(line.startswith("Player ") and line.endswith("wins: python") for line in lines)
        assert client.at_eof()
        client.close()

    assert len(tcp_server.game_server.registry) == 0


def test_server_full_over_tcp(tcp_server):
    """Test that a client beyond the room limit is told and disconnected."""
    clients = [LineClient(tcp_server.port) for _ in range(2)]
    clients[1].read_until(WORD_LINE)

    late = LineClient(tcp_server.port)
    assert late.read_until(messages.DISCONNECTED) == [
        messages.CONNECTED,
        messages.SERVER_FULL,
        messages.DISCONNECTED,
    ]
    assert late.at_eof()

    for client in clients + [late]:
        client.close()


def test_shutdown_disconnects_clients(tcp_server):
    """Test that shutdown closes live connections."""
    alice = LineClient(tcp_server.port)
    alice.read_until(messages.NEW_USER % alice.label)

    tcp_server.game_server.shutdown()

    alice.read_until(messages.DISCONNECTED)
    assert alice.at_eof()
    alice.close()


def test_socket_sink_close_unblocks_stuck_writer():
    """Test that closing doesn't wait for a write to a peer that stopped reading."""
    left, right = socket.socketpair()
    sink = SocketSink(left, left.makefile("wb"))
    errors = []

    def flood():
        try:
            while True:
                sink.send_line("x" * 65536)
        except OSError as e:
            errors.append(e)

    writer = threading.Thread(target=flood, daemon=True)
    writer.start()
    time.sleep(0.2)  # let the writer fill the socket buffers and block

    closer = threading.Thread(target=sink.close, daemon=True)
    closer.start()
    closer.join(timeout=2)
    writer.join(timeout=2)

    assert not closer.is_alive()
    assert not writer.is_alive()
    assert errors
    right.close()
    left.close()
