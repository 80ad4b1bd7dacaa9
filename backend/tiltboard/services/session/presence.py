import logging
from typing import Any, Dict, List, Optional, Tuple

from tiltboard.models import PALETTE, ROLES, Participant, clamp_x, clamp_y, is_number
from .errors import CapacityExceeded, StaleIdentity, ValidationFailed


class PresenceTracker:
    """Per-room roster: join, leave and cursor moves."""

    def __init__(self, registry, move_threshold: float = 1.0, logger=None):
        self.registry = registry
        self.move_threshold = move_threshold
        self.logger = logger or logging.getLogger(__name__)

    def join(self, room_id, identity: str, username: Optional[str] = None,
             role: Optional[str] = None) -> Tuple[Participant, List[Dict[str, Any]]]:
        room = self.registry.get_room(room_id)
        role = role or 'controller'
        if role not in ROLES:
            raise ValidationFailed(f'Unknown role: {role}', surface=True)

        # A re-join from the same connection replaces the old record
        existing = room.find_participant(identity)
        occupied = len(room.participants) - (1 if existing is not None else 0)
        if occupied >= room.max_participants:
            raise CapacityExceeded()
        if existing is not None:
            room.participants.remove(existing)
            self.logger.info(f"[rejoin] room={room.id} participant={identity}")

        now = self.registry.clock()
        if not isinstance(username, str) or not username.strip():
            username = f'User {identity[:4]}'
        participant = Participant(
            id=identity,
            username=username.strip(),
            role=role,
            color=PALETTE[len(room.participants) % len(PALETTE)],
            last_update_at=now,
        )
        room.participants.append(participant)
        room.touch(now)
        self.logger.info(
            f"[join] room={room.id} participant={identity} role={role} roster={len(room.participants)}/{room.max_participants}"
        )
        return participant, room.roster()

    def move(self, room_id, identity: str, x, y) -> Optional[Tuple[float, float]]:
        """Apply a cursor update.

        Returns the stored position, or None when the update was dropped
        (malformed or below the movement threshold).
        """
        room = self.registry.get_room(room_id)
        if not (is_number(x) and is_number(y)):
            self.logger.debug(f"[move-drop] room={room.id} participant={identity} reason=non-numeric")
            return None
        participant = room.find_participant(identity)
        if participant is None:
            raise StaleIdentity(room.id, identity)

        now = self.registry.clock()
        room.touch(now)
        new_x, new_y = clamp_x(x), clamp_y(y)
        if abs(new_x - participant.x) <= self.move_threshold and abs(new_y - participant.y) <= self.move_threshold:
            return None
        participant.x = new_x
        participant.y = new_y
        participant.last_update_at = now
        return new_x, new_y

    def leave(self, room_id, identity: str) -> Optional[Participant]:
        room = self.registry.find_room(room_id)
        if room is None:
            return None
        participant = room.find_participant(identity)
        if participant is None:
            return None
        room.participants.remove(participant)
        room.touch(self.registry.clock())
        self.logger.info(f"[leave] room={room.id} participant={identity} roster={len(room.participants)}")
        return participant
