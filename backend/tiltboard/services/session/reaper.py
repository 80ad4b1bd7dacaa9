import logging
import threading
from typing import List, Optional


class SessionReaper:
    """Periodically retires rooms with no activity inside the TTL.

    Only ``last_activity_at`` counts: an empty room that saw a recent
    element edit stays.
    """

    def __init__(self, registry, router, scheduler, ttl: float = 24 * 60 * 60,
                 interval: float = 60 * 60, lock=None, logger=None):
        self.registry = registry
        self.router = router
        self.scheduler = scheduler
        self.ttl = ttl
        self.interval = interval
        self.lock = lock or threading.RLock()
        self.logger = logger or logging.getLogger(__name__)
        self._handle = None

    def start(self) -> None:
        if self._handle is None:
            self._handle = self.scheduler.every(self.interval, self.sweep)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def sweep(self, now: Optional[float] = None) -> List[str]:
        with self.lock:
            now = now if now is not None else self.registry.clock()
            expired = [room.id for room in self.registry.rooms() if now - room.last_activity_at > self.ttl]
            for room_id in expired:
                self.registry.remove_room(room_id)
                self.router.to_room(room_id, 'session-ended', {'sessionId': room_id})
                self.router.drop_room(room_id)
            if expired:
                self.logger.info(f"[reaper] removed={len(expired)} remaining={len(self.registry)}")
            return expired
