"""Fixed-tick ball simulation for a room.

Each tick runs, in order: integration (friction, speed cap), wall bounces,
ball/cursor impulses, cursor/cursor repulsion, goal detection, and finally
a ``game-state-update`` broadcast. The tick is the display's animation
clock, so the broadcast goes out even when nothing moved.

Collision handling is coarse: every overlapping cursor
overwrites the ball velocity in roster order, and repulsion is a soft
offset rather than a physical response. Both loops are O(n^2) in room
size, which is bounded by the room capacity.
"""

import logging
import math
import threading
import time
from typing import List, Optional

from tiltboard.models import CANVAS_HEIGHT, CANVAS_WIDTH, Ball, Goal, Participant, Room, clamp_x, clamp_y

CURSOR_RADIUS = 15
BALL_SPEED_LIMIT = 15
FRICTION = 0.98
VELOCITY_EPSILON = 0.1
RESTITUTION = 0.8
REPULSION_FORCE = 0.5
REPULSION_DISTANCE = CURSOR_RADIUS * 2
# Impulse per unit of ball/cursor penetration, as a fraction of the speed limit
IMPULSE_FACTOR = 0.05
IMPULSE_CAP = 1.0


def limit_speed(ball: Ball, limit: float = BALL_SPEED_LIMIT) -> None:
    speed = ball.speed
    if speed > limit:
        ratio = limit / speed
        ball.velocity_x *= ratio
        ball.velocity_y *= ratio


def integrate(ball: Ball) -> None:
    ball.velocity_x *= FRICTION
    ball.velocity_y *= FRICTION
    if abs(ball.velocity_x) < VELOCITY_EPSILON:
        ball.velocity_x = 0.0
    if abs(ball.velocity_y) < VELOCITY_EPSILON:
        ball.velocity_y = 0.0
    limit_speed(ball)
    ball.x += ball.velocity_x
    ball.y += ball.velocity_y


def bounce_walls(ball: Ball) -> None:
    r = ball.radius
    if ball.x - r < 0:
        ball.x = r
        ball.velocity_x = abs(ball.velocity_x) * RESTITUTION
    elif ball.x + r > CANVAS_WIDTH:
        ball.x = CANVAS_WIDTH - r
        ball.velocity_x = -abs(ball.velocity_x) * RESTITUTION
    if ball.y - r < 0:
        ball.y = r
        ball.velocity_y = abs(ball.velocity_y) * RESTITUTION
    elif ball.y + r > CANVAS_HEIGHT:
        ball.y = CANVAS_HEIGHT - r
        ball.velocity_y = -abs(ball.velocity_y) * RESTITUTION


def collide_cursors(room: Room, now: float) -> Optional[str]:
    """Kick the ball away from every overlapping cursor; returns the last toucher."""
    ball = room.ball
    reach = ball.radius + CURSOR_RADIUS
    touched = None
    for participant in room.participants:
        if participant.is_display:
            continue
        dx = ball.x - participant.x
        dy = ball.y - participant.y
        distance = math.hypot(dx, dy)
        if distance >= reach:
            continue
        ball.last_touched_by = participant.id
        ball.last_touch_time = now
        touched = participant.id
        # atan2(0, 0) == 0: a cursor dead on the center pushes along +x
        angle = math.atan2(dy, dx)
        force = min((reach - distance) * IMPULSE_FACTOR, IMPULSE_CAP)
        ball.velocity_x = math.cos(angle) * force * BALL_SPEED_LIMIT
        ball.velocity_y = math.sin(angle) * force * BALL_SPEED_LIMIT
    limit_speed(ball)
    return touched


def repel_cursors(room: Room) -> List[Participant]:
    """Push crowded cursors apart; returns the participants that moved."""
    actors = [p for p in room.participants if not p.is_display]
    offsets = []
    for i, a in enumerate(actors):
        offset_x = offset_y = 0.0
        for j, b in enumerate(actors):
            if i == j:
                continue
            dx = a.x - b.x
            dy = a.y - b.y
            distance = math.hypot(dx, dy)
            if distance >= REPULSION_DISTANCE:
                continue
            if distance == 0:
                # Coincident cursors split along x, earlier joiner to the left
                ux, uy = (-1.0, 0.0) if i < j else (1.0, 0.0)
            else:
                ux, uy = dx / distance, dy / distance
            force = REPULSION_FORCE * (1 - distance / REPULSION_DISTANCE)
            offset_x += ux * force
            offset_y += uy * force
        if offset_x or offset_y:
            offsets.append((a, offset_x, offset_y))

    moved = []
    for participant, offset_x, offset_y in offsets:
        participant.x = clamp_x(participant.x + offset_x)
        participant.y = clamp_y(participant.y + offset_y)
        moved.append(participant)
    return moved


def find_goal(room: Room) -> Optional[Goal]:
    ball = room.ball
    for goal in room.goals:
        if goal.overlaps_circle(ball.x, ball.y, ball.radius):
            return goal
    return None


class PhysicsEngine:
    def __init__(self, router, scheduler, lock=None, tick_interval: float = 0.016,
                 respawn_delay: float = 2.0, clock=time.time, logger=None):
        self.router = router
        self.scheduler = scheduler
        self.lock = lock or threading.RLock()
        self.tick_interval = tick_interval
        self.respawn_delay = respawn_delay
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    def start(self, registry, room_id: str):
        """Schedule the recurring tick for ``room_id`` and return its handle."""
        handle = None

        def _tick():
            with self.lock:
                room = registry.find_room(room_id)
                if room is None or room.closed:
                    handle.cancel()
                    self.logger.debug(f"[tick-stop] room={room_id} reason=room-gone")
                    return
                self.step(room)

        handle = self.scheduler.every(self.tick_interval, _tick)
        return handle

    def step(self, room: Room) -> None:
        ball = room.ball
        integrate(ball)
        bounce_walls(ball)
        collide_cursors(room, self.clock())

        for participant in repel_cursors(room):
            self.router.to_room(room.id, 'cursor-updated', {
                'participantId': participant.id,
                'x': participant.x,
                'y': participant.y,
            })

        if room.game_state.in_play:
            goal = find_goal(room)
            if goal is not None:
                self.score_goal(room, goal)

        self.router.to_room(room.id, 'game-state-update', room.game_snapshot())

    def score_goal(self, room: Room, goal: Goal) -> None:
        state = room.game_state
        scorer = room.ball.last_touched_by
        state.in_play = False
        state.last_goal_side = goal.side
        if scorer:
            room.scores[scorer] = room.scores.get(scorer, 0) + 1
            participant = room.find_participant(scorer)
            name = participant.username if participant else 'Unknown player'
            state.goal_message = f'{name} scored in the {goal.side} goal!'
        else:
            state.goal_message = f'Goal in the {goal.side} goal!'

        self.logger.info(f"[goal] room={room.id} side={goal.side} scorer={scorer} scores={room.scores}")
        self.router.to_room(room.id, 'goal', {
            'goalSide': goal.side,
            'scoringParticipant': scorer,
            'message': state.goal_message,
            'scores': dict(room.scores),
        })

        if room.respawn_handle is not None:
            room.respawn_handle.cancel()
        room.respawn_handle = self.scheduler.after(self.respawn_delay, lambda: self.respawn(room))

    def respawn(self, room: Room) -> None:
        with self.lock:
            room.respawn_handle = None
            if room.closed:
                return
            room.ball.reset()
            room.game_state.in_play = True
            room.game_state.goal_message = ''
            self.logger.info(f"[resume] room={room.id}")
            self.router.to_room(room.id, 'game-resume', {'ball': room.ball.to_dict()})
