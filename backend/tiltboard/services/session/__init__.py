"""Session engine: rooms, presence, board elements, ball physics.

Everything here is in-memory and transport-agnostic apart from the
BroadcastRouter; HTTP routes and socket handlers reach it through
``get_engine()``.
"""

from flask import current_app

from .engine import SessionEngine
from .errors import CapacityExceeded, NotFound, SessionError, StaleIdentity, ValidationFailed

EXTENSION_KEY = 'tiltboard'


def get_engine() -> SessionEngine:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'EXTENSION_KEY',
    'SessionEngine',
    'get_engine',
    'SessionError',
    'NotFound',
    'CapacityExceeded',
    'ValidationFailed',
    'StaleIdentity',
]
