"""Room: a capacity-bounded group of sessions playing one round.

The room goes through three states:

- FILLING: fewer than ``capacity`` members, no word yet.
- ACTIVE: full, word assigned, guesses are evaluated.
- FINISHED: the word was guessed or everybody left.  Terminal; the room is
  removed from the directory and all remaining members are disconnected.

All membership changes and guess evaluations happen under a per-room lock.
The lock is re-entrant because tearing a room down from inside a guess
evaluation goes back through ``remove_member``.

"""
import threading
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from . import messages


CAPACITY = 2


class RoomState(Enum):
    FILLING = 'filling'
    ACTIVE = 'active'
    FINISHED = 'finished'


class GuessOutcome(Enum):
    """What ``Room.submit_guess`` did with a guess."""
    CORRECT = 'correct'
    WRONG = 'wrong'
    EXHAUSTED = 'exhausted'  # wrong, and it was the guesser's last one
    IGNORED = 'ignored'


class Room(object):
    """This class implements the guessing game played inside one room.

    Parameters
    ----------
    room_id : int
        Identifier assigned by the allocator, used in logs and the status API.
    allocator : RoomAllocator
        Directory that owns this room; asked to destroy it when it finishes.
    registry : SessionRegistry
        Used to disconnect members whose guess budget runs out.
    capacity : int, optional
        Number of members needed to start the round. Defaults to 2.

    """

    def __init__(self, room_id: int, allocator, registry, capacity: int = CAPACITY):
        if capacity < 1:
            raise ValueError("Room capacity must be at least 1")
        self.room_id = room_id
        self.capacity = capacity
        self.state = RoomState.FILLING
        self.word: Optional[Tuple[str, str]] = None
        self._members: List = []
        self._allocator = allocator
        self._registry = registry
        self._lock = threading.RLock()

    def __repr__(self):
        return f"Room({self.room_id}, state={self.state.value}, members={len(self._members)})"

    @property
    def members(self) -> tuple:
        """Current members in joining order."""
        with self._lock:
            return tuple(self._members)

    @property
    def is_full(self) -> bool:
        return len(self._members) >= self.capacity

    @property
    def is_open(self) -> bool:
        """Whether the room can still take a new member."""
        return self.state is RoomState.FILLING and not self.is_full

    def add_member(self, session) -> bool:
        """Add a session to the room.

        Returns False if the room can no longer take members (it filled up
        or started in the meantime).  Everybody in the room, the newcomer
        included, is told about the new user.

        """
        with self._lock:
            if not self.is_open:
                return False
            session.join_room(self)
            self._members.append(session)
            logger.info(f"{session.label} joined room {self.room_id} ({len(self._members)}/{self.capacity})")
            self.broadcast(messages.NEW_USER % session.label)
            return True

    def start_round(self, word_provider) -> bool:
        """Assign the word and announce its scrambled form.

        Only does something when the room is FILLING and exactly full, so a
        room gets its word at most once.  The room switches to ACTIVE after
        the announcement was written to every member, and guesses are only
        evaluated in ACTIVE, so nobody sees an outcome before the word.

        """
        with self._lock:
            if self.state is not RoomState.FILLING or len(self._members) != self.capacity:
                return False
            plain, scrambled = word_provider.next()
            self.word = (plain, scrambled)
            self.broadcast(messages.WORD_TO_UNSCRAMBLE % scrambled)
            self.state = RoomState.ACTIVE
            logger.info(f"Round started in room {self.room_id} (word: {plain})")
            return True

    def broadcast(self, message: str, excluded=None) -> int:
        """Send a message to all members except ``excluded``.

        A member whose connection fails doesn't stop delivery to the others.
        Returns the number of successful deliveries.

        """
        delivered = 0
        with self._lock:
            for member in list(self._members):
                if member is excluded:
                    continue
                if member.send(message):
                    delivered += 1
        return delivered

    def submit_guess(self, session, text: str) -> GuessOutcome:
        """Evaluate a guess from one of the members.

        A correct guess (exact, case-sensitive) ends the round: the win is
        announced to everybody and the room is destroyed, which disconnects
        every member including the winner.  A wrong guess costs one guess;
        a member who runs out is removed from the room and disconnected.

        """
        with self._lock:
            if session not in self._members:
                return GuessOutcome.IGNORED
            if self.state is RoomState.FILLING:
                session.send(messages.WAITING_FOR_PLAYERS)
                return GuessOutcome.IGNORED
            if self.state is not RoomState.ACTIVE:
                return GuessOutcome.IGNORED

            logger.debug(f"Room {self.room_id}: {session.label} guessed '{text}'")
            plain, _ = self.word
            if text == plain:
                self.broadcast(messages.PLAYER_WINS % (session.label, text))
                logger.info(f"{session.label} won room {self.room_id} with '{text}'")
                self.destroy()
                return GuessOutcome.CORRECT

            self.broadcast(messages.MISSED_GUESS % (session.label, text), excluded=session)
            session.send(messages.WRONG_GUESS)
            remaining = session.consume_guess()
            session.send(messages.REMAINING_GUESSES % remaining)
            if remaining > 0:
                return GuessOutcome.WRONG

            session.send(messages.ATTEMPTS_ENDED)
            logger.info(f"{session.label} ran out of guesses in room {self.room_id}")
            self.remove_member(session)
            self._registry.remove(session)
            return GuessOutcome.EXHAUSTED

    def remove_member(self, session) -> bool:
        """Remove a session without evaluating a guess.

        The remaining members are notified unless the room is already
        finished.  A room that becomes empty is destroyed.  Returns whether
        the session was a member.

        """
        with self._lock:
            if session not in self._members:
                return False
            self._members.remove(session)
            session.leave_room()
            if self.state is RoomState.FINISHED:
                return True
            logger.info(f"{session.label} left room {self.room_id}")
            self.broadcast(messages.CLIENT_DISCONNECTED % session.label)
            if not self._members:
                self.destroy()
            return True

    def destroy(self) -> None:
        """Finish the room and hand it to the allocator for teardown."""
        with self._lock:
            self._allocator.destroy_room(self)

    def finish(self) -> list:
        """Mark the room FINISHED and detach every member.

        Returns the detached sessions so the caller can disconnect them.
        Calling it again returns an empty list.

        """
        with self._lock:
            self.state = RoomState.FINISHED
            detached, self._members = self._members, []
            for member in detached:
                member.leave_room()
            return detached

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of the room for the status API."""
        with self._lock:
            return {
                'room_id': self.room_id,
                'state': self.state.value,
                'capacity': self.capacity,
                'members': [m.label for m in self._members],
                'scrambled_word': self.word[1] if self.word else None,
            }
