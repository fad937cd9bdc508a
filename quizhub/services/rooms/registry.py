import threading
from typing import Dict, Optional

from quizhub.models import Room, coerce_int, generate_room_code


class RoomRegistry:
    """In-memory table of live rooms keyed by room code.

    Rooms are never evicted; they live for the lifetime of the process.
    Every room mutation happens while holding ``lock``.
    """

    def __init__(self, default_capacity: int = 2, code_length: int = 6):
        self.default_capacity = default_capacity
        self.code_length = code_length
        self._rooms: Dict[str, Room] = {}
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self):
        return iter(list(self._rooms.values()))

    def get(self, code) -> Optional[Room]:
        if not code:
            return None
        return self._rooms.get(code)

    def coerce_capacity(self, capacity) -> int:
        value = coerce_int(capacity, default=0)
        return value if value > 0 else self.default_capacity

    def create_room(self, capacity=None) -> Room:
        with self.lock:
            code = generate_room_code(self._rooms, length=self.code_length)
            room = Room(code=code, capacity=self.coerce_capacity(capacity))
            self._rooms[code] = room
            return room

    def set_capacity(self, code, capacity) -> Optional[Room]:
        """Overwrite a room's player limit.

        A limit below the current roster size is accepted; it only blocks
        further joins.
        """
        room = self.get(code)
        if room is None:
            return None
        with self.lock:
            room.capacity = self.coerce_capacity(capacity)
        return room
