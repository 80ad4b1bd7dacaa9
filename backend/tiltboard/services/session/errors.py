class SessionError(Exception):
    """Base class for recoverable session-engine errors."""

    message = 'Session error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class NotFound(SessionError):
    message = 'Not found'


class CapacityExceeded(SessionError):
    message = 'Session is full'


class ValidationFailed(SessionError):
    """Malformed payload.

    ``surface`` tells the socket layer whether the sender should get an
    ``error`` event or the payload should just be dropped.
    """

    message = 'Invalid payload'

    def __init__(self, message=None, surface=False):
        super().__init__(message)
        self.surface = surface


class StaleIdentity(SessionError):
    """The connection is subscribed to a room whose roster no longer lists it."""

    message = 'Participant is no longer in the session'

    def __init__(self, room_id, identity):
        super().__init__()
        self.room_id = room_id
        self.identity = identity
