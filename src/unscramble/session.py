"""Session: one connected participant.

A session owns the outbound side of its connection (the *sink*) and the
per-player guess budget.  It knows which room it plays in, but only through a
weak reference: the room's lifetime is managed by the RoomAllocator, never by
its members.

"""
import threading
import weakref
from typing import Hashable, Optional

from loguru import logger


DEFAULT_GUESSES = 5


class MessageSink(object):
    """Write-only channel to the remote peer.

    The TCP transport provides ``SocketSink``; tests use an in-memory sink.

    """

    def send_line(self, line: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


def _default_label(handle: Hashable) -> str:
    if isinstance(handle, tuple) and len(handle) >= 2:
        return f"{handle[0]}:{handle[1]}"
    return str(handle)


class Session(object):
    """Represents one connected player.

    Attributes
    ----------
    handle : Hashable
        Stable connection handle, used as the registry key.
    label : str
        Human-readable name used in broadcasts and logs.
    sink : MessageSink
        Outbound channel.
    remaining_guesses : int
        Wrong guesses still allowed.  Only the owning Room decrements it.

    """

    def __init__(self, handle: Hashable, sink: MessageSink, label: Optional[str] = None,
                 guesses: int = DEFAULT_GUESSES):
        if guesses < 1:
            raise ValueError("Guess budget must be at least 1")
        self.handle = handle
        self.sink = sink
        self.label = label if label is not None else _default_label(handle)
        self.remaining_guesses = guesses
        self._room_ref = None
        self._joined = False
        self._closed = False
        self._lock = threading.Lock()

    def __repr__(self):
        return f"Session({self.label!r}, remaining_guesses={self.remaining_guesses})"

    @property
    def room(self):
        """The room this session plays in, or None."""
        ref = self._room_ref
        return ref() if ref is not None else None

    @property
    def closed(self) -> bool:
        return self._closed

    def join_room(self, room) -> None:
        """Attach the session to a room.  A session joins at most one room."""
        with self._lock:
            if self._joined:
                raise RuntimeError(f"Session '{self.label}' has already joined a room")
            self._joined = True
            self._room_ref = weakref.ref(room)

    def leave_room(self):
        """Detach from the current room and return it (None if detached)."""
        with self._lock:
            ref, self._room_ref = self._room_ref, None
        return ref() if ref is not None else None

    def consume_guess(self) -> int:
        """Use up one guess and return how many are left (never below 0)."""
        if self.remaining_guesses > 0:
            self.remaining_guesses -= 1
        return self.remaining_guesses

    def send(self, message: str) -> bool:
        """Send a single line to the peer.

        Transport failures only affect this session: they are logged and
        reported through the return value.

        """
        try:
            self.sink.send_line(message)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to send to {self.label}: {e}")
            return False
        return True

    def close(self) -> None:
        """Close the outbound sink.  Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            self.sink.close()
        except OSError as e:
            logger.warning(f"Error closing connection of {self.label}: {e}")
