import threading
import time
from typing import Set

from arena import socketio, get_coordinator


_ticking_rooms: Set[str] = set()
_ticking_lock = threading.Lock()


def schedule_room_ticks(app, room_id: str) -> bool:
    """Start the periodic tick loop for ``room_id``.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single loop per room
    - The loop ends on its own once the room has been torn down
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False

    with _ticking_lock:
        if room_id in _ticking_rooms:
            app.logger.debug(f"[tick-skip] room={room_id} already scheduled")
            return False
        _ticking_rooms.add(room_id)

    coordinator = get_coordinator(app)
    interval_sec = coordinator.settings.tick_interval_ms / 1000.0
    app.logger.info(f"[tick-start] room={room_id} interval={coordinator.settings.tick_interval_ms}ms")

    def _worker(rid: str):
        try:
            hb = int(app.config.get('TICK_HEARTBEAT_SEC', 0))
        except (TypeError, ValueError):
            hb = 0
        last = time.monotonic()
        last_heartbeat = last
        ticks = 0
        try:
            while coordinator.store.has_room(rid):
                socketio.sleep(interval_sec)
                now = time.monotonic()
                delta_ms = int((now - last) * 1000)
                last = now
                coordinator.tick(delta_ms, rid)
                ticks += 1
                if hb > 0 and now - last_heartbeat >= hb:
                    last_heartbeat = now
                    app.logger.info(f"[tick-heartbeat] room={rid} ticks={ticks}")
        finally:
            with _ticking_lock:
                _ticking_rooms.discard(rid)
            app.logger.info(f"[tick-stop] room={rid} ticks={ticks}")

    socketio.start_background_task(_worker, room_id)
    return True


def is_ticking(room_id: str) -> bool:
    with _ticking_lock:
        return room_id in _ticking_rooms
