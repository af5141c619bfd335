"""
Shared fixtures and test doubles for the unscramble server tests.
"""

import threading

import pytest

from src.unscramble.game_server import GameServer
from src.unscramble.session import MessageSink


class RecordingSink(MessageSink):
    """In-memory sink that records every line sent to it."""

    def __init__(self, fail=False):
        self.lines = []
        self.fail = fail
        self.closed = False
        self.close_calls = 0
        self._lock = threading.Lock()

    def send_line(self, line):
        if self.fail:
            raise OSError("Connection reset by peer")
        if self.closed:
            raise ValueError("I/O operation on closed sink")
        with self._lock:
            self.lines.append(line)

    def close(self):
        self.close_calls += 1
        self.closed = True

    def count(self, line):
        with self._lock:
            return self.lines.count(line)


class FixedWordProvider(object):
    """Word provider that always hands out the same pair."""

    def __init__(self, plain="python", scrambled="nohtyp"):
        self.plain = plain
        self.scrambled = scrambled
        self.calls = 0
        self._lock = threading.Lock()

    def next(self):
        with self._lock:
            self.calls += 1
        return self.plain, self.scrambled


@pytest.fixture
def make_sink():
    return RecordingSink


@pytest.fixture
def make_words():
    return FixedWordProvider


@pytest.fixture
def words():
    return FixedWordProvider()


@pytest.fixture
def game_server(words):
    """GameServer with two-player rooms, three rooms max and five guesses."""
    return GameServer(words, capacity=2, max_rooms=3, guesses=5)


@pytest.fixture
def join(game_server):
    """Connect a named player to the game server; returns (session, sink)."""
    def _join(name, fail=False):
        sink = RecordingSink(fail=fail)
        session = game_server.connect(name, sink, label=name)
        return session, sink
    return _join
