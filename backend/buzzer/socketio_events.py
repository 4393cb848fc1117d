import contextlib
import functools
from typing import Any, Dict, Iterable, Optional

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from buzzer import socketio
from buzzer.errors import IgnoredCommand, NoActiveRoom, RoomNotFound, UserFacingError
from buzzer.models import Room, normalize_room_code
from buzzer.services.rooms import rounds
from buzzer.services.rooms.rounds import Event


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _registry():
    return current_app.extensions['room_registry']


def _sessions():
    return current_app.extensions['room_sessions']


def _payload(data) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


def _broadcast(room: Room, events: Iterable[Event]) -> None:
    for event in events:
        emit(event.name, event.payload, to=room.code)


def _room_command(handler):
    """Report user-facing errors to the sender; drop ignored commands."""
    @functools.wraps(handler)
    def wrapper(*args, **kwargs):
        try:
            return handler(*args, **kwargs)
        except UserFacingError as exc:
            current_app.logger.info(f"[rejected] event={handler.__name__} sid={_get_sid()} reason={exc.message}")
            emit('errorMessage', exc.message)
        except IgnoredCommand as exc:
            current_app.logger.info(f"[ignored] event={handler.__name__} sid={_get_sid()} {type(exc).__name__}: {exc}")
    return wrapper


@contextlib.contextmanager
def _locked(room: Room, other_code: Optional[str]):
    """Hold ``room`` and the room at ``other_code`` (if live), locked in code order."""
    rooms_to_lock = {room.code: room}
    other = _registry().get(other_code) if other_code else None
    if other is not None:
        rooms_to_lock[other.code] = other
    with contextlib.ExitStack() as stack:
        for code in sorted(rooms_to_lock):
            stack.enter_context(rooms_to_lock[code].lock)
        yield


def _leave_current_room(sid: str) -> Optional[str]:
    """Leave whatever room ``sid`` is bound to; returns that room's code."""
    code = _sessions().unbind(sid)
    if code is None:
        return None
    leave_room(code)
    room = _registry().get(code)
    if room is None:
        return code
    with room.lock:
        events = rounds.leave(room, sid, _registry())
        current_app.logger.info(f"[room-leave] code={code} sid={sid} remaining={len(room.players)}")
        _broadcast(room, events)
    return code


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}" + (f" ({reason})" if reason else ""))
    _leave_current_room(sid)


@_room_command
def handle_create_room(data=None):
    sid = _get_sid()
    player = rounds.new_player(sid, _payload(data).get('name'), current_app.config.get('MAX_NAME_LENGTH', 20))

    # Create first so a failed create leaves the current room untouched
    code, room = _registry().create(player)
    _leave_current_room(sid)
    with room.lock:
        join_room(code)
        _sessions().bind(sid, code)
        current_app.logger.info(f"[room-create] code={code} sid={sid}")
        emit('roomJoined', room.to_dict())
        _broadcast(room, [rounds.room_update(room)])


@_room_command
def handle_join_room(data=None):
    sid = _get_sid()
    payload = _payload(data)
    code = normalize_room_code(payload.get('roomId'))
    room = _registry().get(code)
    if room is None:
        raise RoomNotFound()
    player = rounds.new_player(sid, payload.get('name'), current_app.config.get('MAX_NAME_LENGTH', 20))

    if _sessions().room_of(sid) == code:
        # Already a member; just resend the snapshot
        with room.lock:
            emit('roomJoined', room.to_dict())
        return

    with _locked(room, _sessions().room_of(sid)):
        # The last member may have left since the lookup above
        if room.closed:
            raise RoomNotFound()
        _leave_current_room(sid)
        events = rounds.join(room, player)
        join_room(code)
        _sessions().bind(sid, code)
        current_app.logger.info(f"[room-join] code={code} sid={sid} players={len(room.players)}")
        emit('roomJoined', room.to_dict())
        _broadcast(room, events)


@_room_command
def handle_leave_room(data=None):
    sid = _get_sid()
    code = _leave_current_room(sid)
    if code is None:
        raise NoActiveRoom(f"{sid} is not in a room")
    emit('roomLeft', {'roomId': code})


@_room_command
def handle_start_round(data=None):
    sid = _get_sid()
    room = _sessions().require_room(sid, _registry())
    with room.lock:
        events = rounds.start_round(room, sid)
        current_app.logger.info(f"[round-start] code={room.code}")
        _broadcast(room, events)


@_room_command
def handle_next_round(data=None):
    sid = _get_sid()
    room = _sessions().require_room(sid, _registry())
    with room.lock:
        events = rounds.next_round(room, sid)
        current_app.logger.info(f"[round-reset] code={room.code}")
        _broadcast(room, events)


@_room_command
def handle_press_button(data=None):
    sid = _get_sid()
    room = _sessions().require_room(sid, _registry())
    with room.lock:
        events = rounds.press_button(room, sid)
        current_app.logger.info(f"[round-end] code={room.code} winner={room.winner!r}")
        _broadcast(room, events)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('leaveRoom', handle_leave_room, namespace=namespace)
    socketio.on_event('startRound', handle_start_round, namespace=namespace)
    socketio.on_event('nextRound', handle_next_round, namespace=namespace)
    socketio.on_event('pressButton', handle_press_button, namespace=namespace)
