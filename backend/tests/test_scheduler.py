import dataclasses
import time

from arena import get_coordinator
from arena.services.room.scheduler import is_ticking, schedule_room_ticks


def _wait_for(predicate, timeout=3.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def test_scheduler_disabled_in_tests(flask_app):
    get_coordinator(flask_app).join('alice', 'QUIET')
    assert schedule_room_ticks(flask_app, 'QUIET') is False
    assert not is_ticking('QUIET')


def test_scheduler_ticks_until_room_is_torn_down(flask_app):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    coordinator = get_coordinator(flask_app)
    coordinator.settings = dataclasses.replace(coordinator.settings, tick_interval_ms=10)
    coordinator.join('alice', 'LOOP')

    assert schedule_room_ticks(flask_app, 'LOOP') is True
    # A second request for the same room is ignored
    assert schedule_room_ticks(flask_app, 'LOOP') is False

    assert _wait_for(lambda: (coordinator.store.get_room_state('LOOP') or {}).get('gameTime', 0) > 0)

    coordinator.leave('alice', 'LOOP')
    assert _wait_for(lambda: not is_ticking('LOOP'))
