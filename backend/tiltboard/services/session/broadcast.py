from typing import Dict, List, Optional

from flask import request


class BroadcastRouter:
    """Fan-out of room deltas over Socket.IO rooms.

    Each connection is subscribed to at most one room; the Socket.IO room
    name is the session id.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace
        self._subscriptions: Dict[str, str] = {}

    def room_of(self, sid: str) -> Optional[str]:
        return self._subscriptions.get(sid)

    def subscribers(self, room_id: str) -> List[str]:
        return [sid for sid, rid in self._subscriptions.items() if rid == room_id]

    def subscribe(self, sid: str, room_id: str) -> Optional[str]:
        """Subscribe ``sid`` to ``room_id``; returns the room it left, if any."""
        previous = self._subscriptions.get(sid)
        server = self.socketio.server
        if previous and previous != room_id:
            server.leave_room(sid, previous, namespace=self.namespace)
        server.enter_room(sid, room_id, namespace=self.namespace)
        self._subscriptions[sid] = room_id
        return previous if previous != room_id else None

    def unsubscribe(self, sid: str, leave: bool = True) -> Optional[str]:
        # On disconnect the server drops the sid from its rooms itself
        room_id = self._subscriptions.pop(sid, None)
        if room_id and leave:
            self.socketio.server.leave_room(sid, room_id, namespace=self.namespace)
        return room_id

    def drop_room(self, room_id: str) -> None:
        for sid in self.subscribers(room_id):
            self._subscriptions.pop(sid, None)
        self.socketio.server.close_room(room_id, namespace=self.namespace)

    def to_room(self, room_id: str, event: str, payload, skip_sid: Optional[str] = None) -> None:
        self.socketio.emit(event, payload, to=room_id, namespace=self.namespace, skip_sid=skip_sid)

    def to_sender(self, event: str, payload, sid: Optional[str] = None) -> None:
        self.socketio.emit(event, payload, to=sid or request.sid, namespace=self.namespace)
