import logging
import threading
import time
from datetime import datetime, timezone

from .broadcast import BroadcastRouter
from .elements import ElementStore
from .physics import PhysicsEngine
from .presence import PresenceTracker
from .reaper import SessionReaper
from .registry import SessionRegistry


class SessionEngine:
    """All per-process session state, wired around one lock.

    Every inbound event, tick, respawn and sweep holds ``lock`` for its whole
    duration, so steps never interleave their mutations.
    """

    def __init__(self, socketio, scheduler, config=None, logger=None, clock=time.time):
        config = config or {}
        self.logger = logger or logging.getLogger(__name__)
        self.lock = threading.RLock()
        self.scheduler = scheduler
        self.router = BroadcastRouter(socketio, namespace=config.get('SOCKETIO_NAMESPACE', '/'))
        self.physics = PhysicsEngine(
            self.router,
            scheduler,
            lock=self.lock,
            tick_interval=int(config.get('TICK_INTERVAL_MS', 16)) / 1000.0,
            respawn_delay=float(config.get('RESPAWN_DELAY_SEC', 2)),
            clock=clock,
            logger=self.logger,
        )
        self.registry = SessionRegistry(
            self.physics,
            max_participants=int(config.get('MAX_PARTICIPANTS', 10)),
            clock=clock,
            logger=self.logger,
        )
        self.presence = PresenceTracker(
            self.registry,
            move_threshold=float(config.get('MOVE_THRESHOLD', 1)),
            logger=self.logger,
        )
        self.elements = ElementStore(self.registry, self.router, logger=self.logger)
        self.reaper = SessionReaper(
            self.registry,
            self.router,
            scheduler,
            ttl=float(config.get('SESSION_TTL_SEC', 24 * 60 * 60)),
            interval=float(config.get('REAPER_INTERVAL_SEC', 60 * 60)),
            lock=self.lock,
            logger=self.logger,
        )

    def create_room(self):
        with self.lock:
            return self.registry.create_room()

    def end_room(self, room_id) -> bool:
        """Administrative removal; subscribers are told the session ended."""
        with self.lock:
            room = self.registry.remove_room(room_id)
            if room is None:
                return False
            self.router.to_room(room.id, 'session-ended', {'sessionId': room.id})
            self.router.drop_room(room.id)
            return True

    def health(self):
        with self.lock:
            return {
                'status': 'healthy',
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'sessions': len(self.registry),
                'users': self.registry.participant_count(),
            }
