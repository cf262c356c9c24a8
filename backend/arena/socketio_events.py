from functools import wraps
from typing import Any, Dict

from flask import current_app, request
from flask_login import current_user
from flask_socketio import emit, join_room, leave_room

from arena import socketio, get_coordinator, room_channel, WS_NAMESPACE
from arena.services.room import ArenaError, ErrorKind, Result

# Socket context: sid -> {'account_id': ..., 'room_id': ...}
_sid_to_ctx: Dict[str, Dict[str, Any]] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _caller_account(data) -> str:
    if current_user and current_user.is_authenticated:
        return current_user.account_id
    account_id = (data or {}).get('account_id') if isinstance(data, dict) else None
    return str(account_id) if account_id else _get_sid()


def _rpc(requires_room: bool = True):
    """Turn a handler into an acknowledged RPC returning ``Result.to_dict()``.

    Handlers that need a room receive the socket context as first argument.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(data=None):
            ctx = _sid_to_ctx.get(_get_sid())
            if requires_room and not ctx:
                return Result.failure(ErrorKind.NOT_IN_ROOM).to_dict()
            try:
                result = fn(ctx, data) if requires_room else fn(data)
            except ArenaError as exc:
                result = Result.from_error(exc)
            return result.to_dict()
        return wrapper
    return decorator


def _release(sid: str) -> Result:
    """Drop the socket context; the account leaves the room only with its last socket."""
    ctx = _sid_to_ctx.pop(sid, None)
    if not ctx:
        return Result.success({'left': False})
    still_connected = any(
        other == ctx for other_sid, other in list(_sid_to_ctx.items()) if other_sid != sid
    )
    if still_connected:
        return Result.success({'left': False})
    return get_coordinator().leave(ctx['account_id'], ctx['room_id'])


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    ctx = _sid_to_ctx.get(_get_sid())
    if not ctx:
        return
    try:
        _release(_get_sid())
    except ArenaError as exc:
        current_app.logger.warning(f"[disconnect] room={ctx['room_id']} account={ctx['account_id']} error={exc}")


@_rpc(requires_room=False)
def handle_arena_join(data):
    data = data if isinstance(data, dict) else {}
    account_id = _caller_account(data)
    room_id = str(data['room_id']) if data.get('room_id') else None
    coordinator = get_coordinator()

    # Switching rooms leaves the previous one first
    previous = _sid_to_ctx.get(_get_sid())
    if previous and previous['room_id'] != room_id:
        _release(_get_sid())
        leave_room(room_channel(previous['room_id']))

    result = coordinator.join(account_id, room_id)
    if not result.ok:
        return result

    resolved = result.value['room_id']
    join_room(room_channel(resolved))
    _sid_to_ctx[_get_sid()] = {'account_id': account_id, 'room_id': resolved}
    if current_user and current_user.is_authenticated:
        coordinator.set_player_data(account_id, resolved, {'name': current_user.to_dict()['display_name']})

    from arena.services.room.scheduler import schedule_room_ticks
    schedule_room_ticks(current_app._get_current_object(), resolved)

    emit('joined', {'room_id': resolved, 'account_id': account_id})
    return Result.success({'room_id': resolved, 'account_id': account_id})


@_rpc()
def handle_arena_leave(ctx, data):
    result = _release(_get_sid())
    leave_room(room_channel(ctx['room_id']))
    emit('left', {'room_id': ctx['room_id']})
    return result


@_rpc()
def handle_set_player_data(ctx, data):
    return get_coordinator().set_player_data(ctx['account_id'], ctx['room_id'], data or {})


@_rpc()
def handle_update_position(ctx, data):
    return get_coordinator().update_position(ctx['account_id'], ctx['room_id'], data)


@_rpc()
def handle_fire_projectile(ctx, data):
    if not isinstance(data, dict):
        return Result.failure(ErrorKind.INVALID_REQUEST, 'projectile descriptor is required')
    projectile = dict(data)
    projectile.setdefault('ownerId', ctx['account_id'])
    return get_coordinator().fire_projectile(ctx['room_id'], projectile)


@_rpc()
def handle_player_hit(ctx, data):
    data = data if isinstance(data, dict) else {}
    target_id = data.get('target_id')
    if not target_id:
        return Result.failure(ErrorKind.INVALID_REQUEST, 'target_id is required')
    return get_coordinator().apply_damage(
        ctx['room_id'], str(target_id), data.get('attacker_id'), data.get('damage', 0)
    )


@_rpc()
def handle_player_died(ctx, data):
    data = data if isinstance(data, dict) else {}
    player_id = data.get('player_id')
    if not player_id:
        return Result.failure(ErrorKind.INVALID_REQUEST, 'player_id is required')
    killer_id = data.get('killer_id')
    return get_coordinator().resolve_death(ctx['room_id'], str(player_id), str(killer_id) if killer_id else None)


@_rpc()
def handle_spawn_powerup(ctx, data):
    coordinator = get_coordinator()
    if not coordinator.settings.allow_client_spawn:
        return Result.failure(ErrorKind.FORBIDDEN, 'client powerup spawning is disabled')
    return coordinator.spawn_powerup(ctx['room_id'])


@_rpc()
def handle_collect_powerup(ctx, data):
    powerup_id = data.get('powerup_id') if isinstance(data, dict) else data
    if not powerup_id:
        return Result.failure(ErrorKind.INVALID_REQUEST, 'powerup_id is required')
    return get_coordinator().collect_powerup(ctx['room_id'], str(powerup_id))


def handle_ping(data=None):
    emit('pong', data or {})


EVENTS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'arena_join': handle_arena_join,
    'arena_leave': handle_arena_leave,
    'set_player_data': handle_set_player_data,
    'update_position': handle_update_position,
    'fire_projectile': handle_fire_projectile,
    'player_hit': handle_player_hit,
    'player_died': handle_player_died,
    'spawn_powerup': handle_spawn_powerup,
    'collect_powerup': handle_collect_powerup,
    'ping': handle_ping,
}


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    for name, handler in EVENTS.items():
        socketio.on_event(name, handler, namespace=WS_NAMESPACE)

    if testing:
        for name, handler in EVENTS.items():
            socketio.on_event(name, handler, namespace='/')
