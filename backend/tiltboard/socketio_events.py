from flask import current_app, request
from flask_socketio import emit

from tiltboard import socketio
from tiltboard import protocol as ev
from tiltboard.protocol import CreateElement, CursorUpdate, DeleteElement, JoinSession, UpdateElement
from tiltboard.services.session import (
    CapacityExceeded, NotFound, SessionEngine, StaleIdentity, ValidationFailed, get_engine,
)


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _reject(engine: SessionEngine, exc: ValidationFailed) -> None:
    if exc.surface:
        engine.router.to_sender(ev.ERROR, {'message': exc.message})
    else:
        engine.logger.debug(f"[drop] sid={_get_sid()} reason={exc.message}")


def _subscribed_room(engine: SessionEngine, sid: str):
    room_id = engine.router.room_of(sid)
    if room_id is None:
        engine.logger.debug(f"[drop] sid={sid} reason=not-in-session")
    return room_id


def _depart(engine: SessionEngine, room_id: str, sid: str) -> None:
    if engine.presence.leave(room_id, sid) is not None:
        engine.router.to_room(room_id, ev.USER_LEFT, sid, skip_sid=sid)


def handle_connect(auth=None):
    emit(ev.CONNECTED, {'sid': _get_sid()})


def handle_disconnect(reason=None):
    engine = get_engine()
    sid = _get_sid()
    with engine.lock:
        # The server drops the sid from its rooms once this handler returns
        room_id = engine.router.unsubscribe(sid, leave=False)
        if room_id:
            _depart(engine, room_id, sid)
    engine.logger.info(f"[disconnect] sid={sid} room={room_id}")


def handle_join_session(data=None):
    engine = get_engine()
    sid = _get_sid()
    try:
        message = JoinSession.from_payload(data)
    except ValidationFailed as exc:
        _reject(engine, exc)
        return

    with engine.lock:
        try:
            participant, roster = engine.presence.join(message.session_id, sid, message.username, message.role)
        except NotFound as exc:
            engine.logger.warning(f"[join-reject] sid={sid} room={message.session_id} reason=not-found")
            engine.router.to_sender(ev.ERROR, {'message': exc.message})
            return
        except CapacityExceeded as exc:
            engine.logger.warning(f"[join-reject] sid={sid} room={message.session_id} reason=full")
            engine.router.to_sender(ev.ERROR, {'message': exc.message})
            return
        except ValidationFailed as exc:
            _reject(engine, exc)
            return

        room = engine.registry.get_room(message.session_id)
        previous = engine.router.subscribe(sid, room.id)
        if previous:
            _depart(engine, previous, sid)

        engine.router.to_sender(ev.SESSION_JOINED, {
            'sessionId': room.id,
            'participant': participant.to_dict(),
            'roster': roster,
            'elements': engine.elements.snapshot(room.id),
            'goals': [goal.to_dict() for goal in room.goals],
            **room.game_snapshot(),
        })
        engine.router.to_room(room.id, ev.USER_JOINED, participant.to_dict(), skip_sid=sid)


def handle_leave_session(data=None):
    engine = get_engine()
    sid = _get_sid()
    with engine.lock:
        room_id = engine.router.unsubscribe(sid)
        if room_id is None:
            return
        _depart(engine, room_id, sid)
        engine.router.to_sender(ev.SESSION_LEFT, {'sessionId': room_id})


def handle_cursor_update(data=None):
    engine = get_engine()
    sid = _get_sid()
    room_id = _subscribed_room(engine, sid)
    if room_id is None:
        return
    try:
        message = CursorUpdate.from_payload(data)
    except ValidationFailed as exc:
        _reject(engine, exc)
        return

    with engine.lock:
        try:
            position = engine.presence.move(room_id, sid, message.x, message.y)
        except StaleIdentity:
            engine.logger.info(f"[stale-identity] sid={sid} room={room_id}")
            engine.router.to_sender(ev.RECONNECT_REQUIRED, {'sessionId': room_id})
            return
        except NotFound as exc:
            engine.router.unsubscribe(sid)
            engine.router.to_sender(ev.ERROR, {'message': exc.message})
            return
        if position is None:
            return
        x, y = position
        engine.router.to_room(room_id, ev.CURSOR_UPDATED, {'participantId': sid, 'x': x, 'y': y})


def handle_create_element(data=None):
    engine = get_engine()
    sid = _get_sid()
    room_id = _subscribed_room(engine, sid)
    if room_id is None:
        return
    with engine.lock:
        try:
            message = CreateElement.from_payload(data)
            engine.elements.create(room_id, sid, message.attrs)
        except ValidationFailed as exc:
            _reject(engine, exc)
        except NotFound as exc:
            engine.router.to_sender(ev.ERROR, {'message': exc.message})


def handle_update_element(data=None):
    engine = get_engine()
    sid = _get_sid()
    room_id = _subscribed_room(engine, sid)
    if room_id is None:
        return
    with engine.lock:
        try:
            message = UpdateElement.from_payload(data)
            engine.elements.update(room_id, message.element_id, message.fields)
        except ValidationFailed as exc:
            _reject(engine, exc)
        except NotFound as exc:
            engine.router.to_sender(ev.ERROR, {'message': exc.message})


def handle_delete_element(data=None):
    engine = get_engine()
    sid = _get_sid()
    room_id = _subscribed_room(engine, sid)
    if room_id is None:
        return
    with engine.lock:
        try:
            message = DeleteElement.from_payload(data)
            engine.elements.delete(room_id, message.element_id)
        except ValidationFailed as exc:
            _reject(engine, exc)
        except NotFound as exc:
            engine.router.to_sender(ev.ERROR, {'message': exc.message})


def handle_ping(data=None):
    emit(ev.PONG, data or {})


def handle_unexpected_error(exc):
    event = getattr(request, 'event', None) or {}
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} event={event.get('message')}: {exc}")
    emit(ev.ERROR, {'message': 'Internal server error'})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(ev.JOIN_SESSION, handle_join_session, namespace=namespace)
    socketio.on_event(ev.LEAVE_SESSION, handle_leave_session, namespace=namespace)
    socketio.on_event(ev.CURSOR_UPDATE, handle_cursor_update, namespace=namespace)
    socketio.on_event(ev.CREATE_ELEMENT, handle_create_element, namespace=namespace)
    socketio.on_event(ev.UPDATE_ELEMENT, handle_update_element, namespace=namespace)
    socketio.on_event(ev.DELETE_ELEMENT, handle_delete_element, namespace=namespace)
    socketio.on_event(ev.PING, handle_ping, namespace=namespace)
    socketio.on_error_default(handle_unexpected_error)
