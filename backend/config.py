import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    PORT = int(os.environ.get('PORT', '3001'))
    # Public URL of the UI, added to the CORS allow-list when set
    PRODUCTION_URL = os.environ.get('PRODUCTION_URL')
    MAX_PARTICIPANTS = int(os.environ.get('MAX_PARTICIPANTS', '10'))
    # Physics tick period (ms), ~60 Hz
    TICK_INTERVAL_MS = int(os.environ.get('TICK_INTERVAL_MS', '16'))
    # Pause between a goal and the ball respawn (seconds)
    RESPAWN_DELAY_SEC = float(os.environ.get('RESPAWN_DELAY_SEC', '2'))
    # Idle rooms are reaped after this long (seconds)
    SESSION_TTL_SEC = int(os.environ.get('SESSION_TTL_SEC', str(24 * 60 * 60)))
    REAPER_INTERVAL_SEC = int(os.environ.get('REAPER_INTERVAL_SEC', str(60 * 60)))
    # Minimum per-axis cursor movement that triggers a broadcast
    MOVE_THRESHOLD = float(os.environ.get('MOVE_THRESHOLD', '1'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Run real background timers even when TESTING is set
    ENABLE_SCHEDULER_IN_TESTS = False
