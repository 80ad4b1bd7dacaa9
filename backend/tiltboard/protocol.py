"""Socket.IO event names and typed inbound messages."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from tiltboard.services.session.errors import ValidationFailed

# Inbound
JOIN_SESSION = 'join-session'
LEAVE_SESSION = 'leave-session'
CURSOR_UPDATE = 'cursor-update'
CREATE_ELEMENT = 'create-element'
UPDATE_ELEMENT = 'update-element'
DELETE_ELEMENT = 'delete-element'
PING = 'ping'

# Outbound
CONNECTED = 'connected'
SESSION_JOINED = 'session-joined'
SESSION_LEFT = 'session-left'
USER_JOINED = 'user-joined'
USER_LEFT = 'user-left'
CURSOR_UPDATED = 'cursor-updated'
RECONNECT_REQUIRED = 'reconnect-required'
ERROR = 'error'
PONG = 'pong'


def _as_dict(data) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationFailed('Payload must be an object')
    return data


def _element_id(data: Dict[str, Any]) -> str:
    element_id = data.get('id')
    if not isinstance(element_id, str) or not element_id:
        raise ValidationFailed('id is required')
    return element_id


@dataclass(frozen=True)
class JoinSession:
    session_id: str
    username: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_payload(cls, data) -> 'JoinSession':
        data = _as_dict(data)
        session_id = data.get('sessionId')
        if not isinstance(session_id, str) or not session_id:
            raise ValidationFailed('sessionId is required', surface=True)
        # ``userType`` is what the first mobile client sent
        return cls(session_id, data.get('username'), data.get('role', data.get('userType')))


@dataclass(frozen=True)
class CursorUpdate:
    x: Any
    y: Any

    @classmethod
    def from_payload(cls, data) -> 'CursorUpdate':
        data = _as_dict(data)
        return cls(data.get('x'), data.get('y'))


@dataclass(frozen=True)
class CreateElement:
    attrs: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data) -> 'CreateElement':
        return cls(dict(_as_dict(data)))


@dataclass(frozen=True)
class UpdateElement:
    element_id: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data) -> 'UpdateElement':
        data = _as_dict(data)
        element_id = _element_id(data)
        return cls(element_id, {k: v for k, v in data.items() if k != 'id'})


@dataclass(frozen=True)
class DeleteElement:
    element_id: str

    @classmethod
    def from_payload(cls, data) -> 'DeleteElement':
        return cls(_element_id(_as_dict(data)))
