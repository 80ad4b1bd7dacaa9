import logging
import time
from typing import Dict, List, Optional

from tiltboard.models import Room, new_id
from .errors import NotFound


class SessionRegistry:
    """Owns every live room. Other components only borrow references."""

    def __init__(self, physics, max_participants: int = 10, clock=time.time, logger=None):
        self.physics = physics
        self.max_participants = max_participants
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self._rooms: Dict[str, Room] = {}

    def __len__(self) -> int:
        return len(self._rooms)

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def participant_count(self) -> int:
        return sum(len(room.participants) for room in self._rooms.values())

    def create_room(self) -> Room:
        room_id = new_id()
        while room_id in self._rooms:
            room_id = new_id()
        now = self.clock()
        room = Room(id=room_id, max_participants=self.max_participants, created_at=now, last_activity_at=now)
        self._rooms[room_id] = room
        # Registered first so the tick callback can find it
        room.tick_handle = self.physics.start(self, room_id)
        self.logger.info(f"[room-create] room={room_id} capacity={room.max_participants}")
        return room

    def find_room(self, room_id) -> Optional[Room]:
        if not isinstance(room_id, str):
            return None
        return self._rooms.get(room_id)

    def get_room(self, room_id) -> Room:
        room = self.find_room(room_id)
        if room is None:
            raise NotFound('Session not found')
        return room

    def remove_room(self, room_id) -> Optional[Room]:
        room = self._rooms.pop(room_id, None) if isinstance(room_id, str) else None
        if room is None:
            return None
        room.closed = True
        for handle in (room.tick_handle, room.respawn_handle):
            if handle is not None:
                handle.cancel()
        room.tick_handle = None
        room.respawn_handle = None
        self.logger.info(f"[room-remove] room={room_id} participants={len(room.participants)}")
        return room
