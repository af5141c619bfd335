"""SessionRegistry: the process-wide set of live sessions."""
import threading
from typing import Dict, Hashable, List, Optional

from loguru import logger

from . import messages
from .session import DEFAULT_GUESSES, MessageSink, Session


class RegistryClosed(RuntimeError):
    """Raised when a connection is admitted after shutdown was requested."""


class SessionRegistry(object):
    """Represents the set of connected players.

    The model here is:
    - Every accepted connection gets exactly one Session, keyed by its
      connection handle.
    - A session is removed at most once; whoever removes it also notifies
      its room, sends the disconnect notice and closes the connection.
    - Once shutdown is requested no new sessions are admitted.

    """

    def __init__(self, guesses: int = DEFAULT_GUESSES):
        self.guesses = guesses
        self.shutdown_requested = threading.Event()
        self._closed = False
        self._sessions: Dict[Hashable, Session] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session):
        with self._lock:
            return self._sessions.get(session.handle) is session

    def get(self, handle: Hashable) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(handle)

    def list_sessions(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())

    def admit(self, handle: Hashable, sink: MessageSink, label: Optional[str] = None) -> Session:
        """Create and register a session for a new connection.

        Raises RuntimeError if the handle is already registered and
        RegistryClosed after shutdown.

        """
        session = Session(handle, sink, label=label, guesses=self.guesses)
        with self._lock:
            if self._closed:
                raise RegistryClosed("Server is shutting down")
            if handle in self._sessions:
                raise RuntimeError(f"Connection '{session.label}' is already registered")
            self._sessions[handle] = session
            count = len(self._sessions)
        logger.info(f"{session.label} connected ({count} sessions)")
        return session

    def remove(self, session: Session) -> bool:
        """Remove a session and close its connection.

        Idempotent: only the first call for a session does anything, later
        and concurrent calls return False.

        """
        with self._lock:
            if self._sessions.get(session.handle) is not session:
                return False
            del self._sessions[session.handle]
            count = len(self._sessions)

        room = session.room
        if room is not None:
            room.remove_member(session)
        session.send(messages.DISCONNECTED)
        session.close()
        logger.info(f"{session.label} disconnected ({count} sessions)")
        return True

    def shutdown(self) -> None:
        """Stop admitting sessions and remove every live one.

        Setting ``shutdown_requested`` is the signal for the transport to
        stop accepting connections.

        """
        logger.info("Shutting down session registry...")
        with self._lock:
            self._closed = True
            sessions = list(self._sessions.values())
        for session in sessions:
            self.remove(session)
        logger.info("All sessions removed")
        self.shutdown_requested.set()
