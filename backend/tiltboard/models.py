from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import math
import time
import uuid

CANVAS_WIDTH = 1920
CANVAS_HEIGHT = 1080
CENTER_X = CANVAS_WIDTH / 2
CENTER_Y = CANVAS_HEIGHT / 2

BALL_RADIUS = 20
GOAL_WIDTH = 100
GOAL_HEIGHT = 150

ROLES = ('display', 'controller', 'viewer')
ELEMENT_KINDS = ('rect', 'circle', 'text', 'line', 'area')
PALETTE = (
    '#FF5252', '#4CAF50', '#2196F3', '#FFC107', '#9C27B0',
    '#00BCD4', '#FF9800', '#673AB7', '#795548', '#009688',
)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp_x(value: float) -> float:
    return clamp(value, 0, CANVAS_WIDTH)


def clamp_y(value: float) -> float:
    return clamp(value, 0, CANVAS_HEIGHT)


def is_number(value: Any) -> bool:
    """True for finite ints/floats. Booleans are not coordinates."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Participant:
    id: str
    username: str
    role: str
    color: str
    x: float = CENTER_X
    y: float = CENTER_Y
    last_update_at: float = field(default_factory=time.time)

    @property
    def is_display(self) -> bool:
        return self.role == 'display'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'color': self.color,
            'x': self.x,
            'y': self.y,
            'lastUpdateAt': self.last_update_at,
        }


@dataclass
class BoardElement:
    id: str
    kind: str
    x: float
    y: float
    width: float
    height: float
    color: str
    text: str
    created_by: str
    created_at: float
    updated_at: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'kind': self.kind,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'color': self.color,
            'text': self.text,
            'createdBy': self.created_by,
            'createdAt': self.created_at,
        }
        if self.updated_at is not None:
            data['updatedAt'] = self.updated_at
        return data


@dataclass
class Ball:
    x: float = CENTER_X
    y: float = CENTER_Y
    radius: float = BALL_RADIUS
    velocity_x: float = 0.0
    velocity_y: float = 0.0
    last_touched_by: Optional[str] = None
    last_touch_time: float = 0.0

    @property
    def speed(self) -> float:
        return math.hypot(self.velocity_x, self.velocity_y)

    def reset(self) -> None:
        self.x = CENTER_X
        self.y = CENTER_Y
        self.velocity_x = 0.0
        self.velocity_y = 0.0
        self.last_touched_by = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'x': self.x,
            'y': self.y,
            'radius': self.radius,
            'velocityX': self.velocity_x,
            'velocityY': self.velocity_y,
            'lastTouchedBy': self.last_touched_by,
            'lastTouchTime': self.last_touch_time,
        }


@dataclass(frozen=True)
class Goal:
    side: str
    x: float
    y: float
    width: float = GOAL_WIDTH
    height: float = GOAL_HEIGHT

    def overlaps_circle(self, cx: float, cy: float, radius: float) -> bool:
        # Bounding-box test of the circle against the goal rectangle
        return (
            cx - radius < self.x + self.width
            and cx + radius > self.x
            and cy - radius < self.y + self.height
            and cy + radius > self.y
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'side': self.side, 'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


def default_goals() -> List[Goal]:
    top = CENTER_Y - GOAL_HEIGHT / 2
    return [
        Goal(side='left', x=0, y=top),
        Goal(side='right', x=CANVAS_WIDTH - GOAL_WIDTH, y=top),
    ]


@dataclass
class GameState:
    in_play: bool = True
    last_goal_side: Optional[str] = None
    goal_message: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'inPlay': self.in_play,
            'lastGoalSide': self.last_goal_side,
            'goalMessage': self.goal_message,
        }


@dataclass
class Room:
    id: str
    max_participants: int
    created_at: float = field(default_factory=time.time)
    last_activity_at: float = 0.0
    participants: List[Participant] = field(default_factory=list)
    elements: Dict[str, BoardElement] = field(default_factory=dict)
    ball: Ball = field(default_factory=Ball)
    goals: List[Goal] = field(default_factory=default_goals)
    scores: Dict[str, int] = field(default_factory=dict)
    game_state: GameState = field(default_factory=GameState)
    tick_handle: Any = None
    respawn_handle: Any = None
    closed: bool = False

    def __post_init__(self):
        if not self.last_activity_at:
            self.last_activity_at = self.created_at

    def touch(self, now: Optional[float] = None) -> None:
        self.last_activity_at = now if now is not None else time.time()

    def find_participant(self, identity: str) -> Optional[Participant]:
        for p in self.participants:
            if p.id == identity:
                return p
        return None

    def roster(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.participants]

    def game_snapshot(self) -> Dict[str, Any]:
        return {
            'ball': self.ball.to_dict(),
            'scores': dict(self.scores),
            'gameState': self.game_state.to_dict(),
        }

    def summary(self) -> Dict[str, Any]:
        return {
            'sessionId': self.id,
            'userCount': len(self.participants),
            'maxUsers': self.max_participants,
            'createdAt': self.created_at,
        }
