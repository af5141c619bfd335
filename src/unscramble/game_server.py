from typing import Any, Dict, Hashable, List, Optional

from loguru import logger

from . import messages
from .room import CAPACITY
from .room_allocator import MAX_ROOMS, CapacityExceeded, RoomAllocator
from .session import DEFAULT_GUESSES, MessageSink, Session
from .session_registry import RegistryClosed, SessionRegistry
from .words import WordProvider, WordScrambler


class GameServer(object):
    """Represents the game server state.

    The model here is:
    - There is a set of connected sessions (the SessionRegistry).
    - There is an ordered directory of rooms (the RoomAllocator).
    - Each session is placed into exactly one room when it connects.
    - Each line a session sends is a guess for its room.

    The transport only talks to this class: ``connect`` when a connection is
    accepted, ``handle_line`` for every inbound line, ``disconnect`` when the
    connection ends, and ``shutdown`` to tear everything down.

    """
    def __init__(self, word_provider: Optional[WordProvider] = None, capacity: int = CAPACITY,
                 max_rooms: int = MAX_ROOMS, guesses: int = DEFAULT_GUESSES):
        """Initialize the GameServer with empty state."""
        if word_provider is None:
            word_provider = WordScrambler()
        self.registry = SessionRegistry(guesses=guesses)
        self.allocator = RoomAllocator(self.registry, word_provider,
                                       capacity=capacity, max_rooms=max_rooms)

    @property
    def shutdown_requested(self):
        return self.registry.shutdown_requested

    def connect(self, handle: Hashable, sink: MessageSink, label: Optional[str] = None) -> Optional[Session]:
        """Admit a new connection and place it into a room.

        Returns the session, or None if the connection was turned away
        (server full or shutting down), in which case it is already closed.

        """
        try:
            session = self.registry.admit(handle, sink, label=label)
        except RegistryClosed:
            logger.warning(f"Rejected connection from {label or handle}: server is shutting down")
            sink.close()
            return None

        session.send(messages.CONNECTED)
        try:
            room = self.allocator.allocate(session)
        except CapacityExceeded as e:
            logger.warning(f"Rejected {session.label}: {e}")
            session.send(messages.SERVER_FULL)
            self.registry.remove(session)
            return None

        # A shutdown between admit and allocate removed the session before it
        # had a room; later removals find the room through session.room.
        if session not in self.registry:
            room.remove_member(session)
            return None
        return session

    def handle_line(self, session: Session, line: str):
        """Route one inbound line to the session's room as a guess."""
        room = session.room
        if room is None:
            return None
        return room.submit_guess(session, line.rstrip("\r\n"))

    def disconnect(self, session: Session) -> bool:
        """Tear down a session whose connection ended.

        Safe to call for a session that was already removed.

        """
        return self.registry.remove(session)

    def shutdown(self):
        """Disconnect every session and signal the transport to stop."""
        self.registry.shutdown()

    def list_rooms(self) -> List[Dict[str, Any]]:
        """Snapshots of the live rooms, oldest first."""
        return [room.snapshot() for room in self.allocator.list_rooms()]

    def list_sessions(self) -> List[Dict[str, Any]]:
        """Label and remaining guesses of every live session."""
        return [
            {'label': s.label, 'remaining_guesses': s.remaining_guesses}
            for s in self.registry.list_sessions()
        ]
