"""RoomAllocator: places sessions into rooms.

The allocator keeps the room directory, an ordered list of live rooms.  New
sessions always go to the most recently created room while it is still
filling; otherwise a new room is created.  Older rooms that lost a member are
never back-filled.  That keeps the policy trivial at the cost of some
half-empty rooms.

The directory lock is only held for list operations.  Room locks are taken
after it has been released, so a room tearing itself down (room lock, then
directory lock) can't deadlock with an allocation.

"""
import threading
from typing import List

from loguru import logger

from .room import CAPACITY, Room


MAX_ROOMS = 100


class CapacityExceeded(RuntimeError):
    """Raised when a new room is needed but ``max_rooms`` rooms exist.

    Attributes
    ----------
    max_rooms : int
        The configured limit.
    """

    def __init__(self, max_rooms: int):
        self.max_rooms = max_rooms
        super().__init__(f"The server is full! ({max_rooms} rooms in use)")


class RoomAllocator(object):
    """Owns the room directory and assigns sessions to rooms.

    Parameters
    ----------
    registry : SessionRegistry
        Registry used to disconnect the members of destroyed rooms.
    word_provider : WordProvider
        Source of the word for each round.
    capacity : int, optional
        Members per room. Defaults to 2.
    max_rooms : int, optional
        Maximum number of simultaneously existing rooms. Defaults to 100.

    """

    def __init__(self, registry, word_provider, capacity: int = CAPACITY, max_rooms: int = MAX_ROOMS):
        if max_rooms < 1:
            raise ValueError("max_rooms must be at least 1")
        self.registry = registry
        self.word_provider = word_provider
        self.capacity = capacity
        self.max_rooms = max_rooms
        self._rooms: List[Room] = []
        self._next_room_id = 1
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._rooms)

    def list_rooms(self) -> List[Room]:
        """Live rooms, oldest first."""
        with self._lock:
            return list(self._rooms)

    def _target_room(self) -> Room:
        """Newest open room, or a freshly created one."""
        with self._lock:
            room = self._rooms[-1] if self._rooms else None
            if room is not None and room.is_open:
                return room
            if len(self._rooms) >= self.max_rooms:
                raise CapacityExceeded(self.max_rooms)
            room = Room(self._next_room_id, self, self.registry, capacity=self.capacity)
            self._next_room_id += 1
            self._rooms.append(room)
            logger.info(f"Room {room.room_id} created ({len(self._rooms)}/{self.max_rooms} rooms)")
            return room

    def allocate(self, session) -> Room:
        """Place a session into a room and start the round once it is full.

        Raises CapacityExceeded if a new room would be needed and the
        directory is already at ``max_rooms``.

        """
        while True:
            room = self._target_room()
            # Another session may have filled the room since it was chosen.
            if room.add_member(session):
                break

        if room.is_full:
            room.start_round(self.word_provider)
        return room

    def destroy_room(self, room: Room) -> None:
        """Remove a room from the directory and disconnect its members.

        The members are detached without any broadcast in the room.

        """
        with self._lock:
            if room in self._rooms:
                self._rooms.remove(room)
                logger.info(f"Room {room.room_id} destroyed ({len(self._rooms)} rooms left)")
        for session in room.finish():
            self.registry.remove(session)
