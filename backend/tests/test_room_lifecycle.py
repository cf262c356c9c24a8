import threading

import pytest

from arena.services.room import ErrorKind, RoomFullError


def test_join_creates_initialized_room(coordinator, store, clock):
    result = coordinator.join('alice')
    assert result.ok
    room_id = result.value['room_id']

    state = store.get_room_state(room_id)
    assert state['initialized'] is True
    assert state['gameTime'] == 0
    assert state['powerups'] == []
    assert state['lastPowerupSpawn'] == clock.now_ms()
    assert len(state['obstacles']) == 30


def test_join_initializes_player_defaults(coordinator, store):
    room_id = coordinator.join('alice', 'ROOM1').value['room_id']
    assert room_id == 'ROOM1'

    player = store.get_user_state(room_id, 'alice')
    assert player['health'] == 100
    assert player['score'] == 0
    assert 100 <= player['x'] < 1900
    assert 100 <= player['y'] < 1900


def test_second_join_keeps_obstacle_layout(coordinator, store):
    coordinator.join('alice', 'ROOM1')
    first = store.get_room_state('ROOM1')['obstacles']

    coordinator.join('bob', 'ROOM1')
    second = store.get_room_state('ROOM1')['obstacles']

    assert second == first
    assert store.get_room_users('ROOM1') == ['alice', 'bob']


def test_ninth_join_is_rejected(coordinator, store):
    for i in range(8):
        assert coordinator.join(f'p{i}', 'FULL').ok

    result = coordinator.join('late', 'FULL')
    assert not result.ok
    assert result.error == ErrorKind.ROOM_FULL
    assert len(store.get_room_users('FULL')) == 8
    assert store.get_user_state('FULL', 'late') is None


def test_lifecycle_raises_room_full(coordinator):
    for i in range(8):
        coordinator.lifecycle.join(f'p{i}', 'FULL')
    with pytest.raises(RoomFullError):
        coordinator.lifecycle.join('late', 'FULL')


def test_member_can_rejoin_full_room(coordinator, store):
    for i in range(8):
        coordinator.join(f'p{i}', 'FULL')
    assert coordinator.join('p3', 'FULL').ok
    assert len(store.get_room_users('FULL')) == 8


def test_leave_removes_player_and_is_idempotent(coordinator, store):
    coordinator.join('alice', 'ROOM1')
    coordinator.join('bob', 'ROOM1')

    assert coordinator.leave('alice', 'ROOM1').value == {'left': True}
    assert store.get_user_state('ROOM1', 'alice') is None
    assert coordinator.leave('alice', 'ROOM1').value == {'left': False}
    assert store.get_room_users('ROOM1') == ['bob']


def test_last_leave_tears_room_down(coordinator, store):
    coordinator.join('alice', 'ROOM1')
    coordinator.leave('alice', 'ROOM1')
    assert not store.has_room('ROOM1')


def test_initialize_room_only_once(coordinator, store):
    coordinator.join('alice', 'ROOM1')
    assert coordinator.lifecycle.initialize_room('ROOM1') is False


def test_concurrent_first_joins_share_one_layout(coordinator, store):
    outcomes = []
    real_initialize = coordinator.lifecycle.initialize_room

    def recording_initialize(room_id):
        won = real_initialize(room_id)
        outcomes.append(won)
        return won

    coordinator.lifecycle.initialize_room = recording_initialize
    barrier = threading.Barrier(6)
    results = []

    def _join(account_id):
        barrier.wait()
        results.append(coordinator.join(account_id, 'RACE'))

    threads = [threading.Thread(target=_join, args=(f'p{i}',)) for i in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert all(r.ok for r in results)
    assert outcomes.count(True) == 1
    layouts = [coordinator.room_snapshot('RACE')['state']['obstacles'] for _ in range(3)]
    assert all(layout == layouts[0] for layout in layouts)
    assert len(layouts[0]) == 30


def test_set_player_data_updates_name(coordinator, store):
    coordinator.join('alice', 'ROOM1')
    result = coordinator.set_player_data('alice', 'ROOM1', {'name': '  Ace '})
    assert result.ok
    assert store.get_user_state('ROOM1', 'alice')['name'] == 'Ace'


def test_set_player_data_requires_name_and_membership(coordinator):
    coordinator.join('alice', 'ROOM1')
    assert coordinator.set_player_data('alice', 'ROOM1', {}).error == ErrorKind.INVALID_REQUEST
    assert coordinator.set_player_data('mallory', 'ROOM1', {'name': 'M'}).error == ErrorKind.NOT_IN_ROOM


def test_update_position_overwrites_and_clamps_health(coordinator, store):
    coordinator.join('alice', 'ROOM1')
    result = coordinator.update_position('alice', 'ROOM1', {'x': 5000, 'y': -20, 'angle': 1.5, 'health': 250})
    assert result.ok

    player = store.get_user_state('ROOM1', 'alice')
    assert (player['x'], player['y'], player['angle']) == (5000, -20, 1.5)
    assert player['health'] == 100

    coordinator.update_position('alice', 'ROOM1', {'health': -4})
    assert store.get_user_state('ROOM1', 'alice')['health'] == 0


def test_update_position_rejects_bad_health(coordinator):
    coordinator.join('alice', 'ROOM1')
    result = coordinator.update_position('alice', 'ROOM1', {'health': 'lots'})
    assert result.error == ErrorKind.INVALID_REQUEST


def test_update_position_rejects_infinite_health(coordinator, store):
    coordinator.join('alice', 'ROOM1')
    result = coordinator.update_position('alice', 'ROOM1', {'health': float('inf')})
    assert result.error == ErrorKind.INVALID_REQUEST
    assert store.get_user_state('ROOM1', 'alice')['health'] == 100


def test_racing_for_last_slot_admits_one(coordinator, store):
    for i in range(7):
        coordinator.join(f'p{i}', 'LAST')

    barrier = threading.Barrier(4)
    results = []

    def _join(account_id):
        barrier.wait()
        results.append(coordinator.join(account_id, 'LAST'))

    threads = [threading.Thread(target=_join, args=(f'late{i}',)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.ok) == 1
    assert [r.error for r in results if not r.ok] == [ErrorKind.ROOM_FULL] * 3
    assert len(store.get_room_users('LAST')) == 8


def test_room_locks_are_released_with_the_room(coordinator, store):
    for i in range(50):
        room_id = coordinator.join('alice', f'CYCLE{i}').value['room_id']
        coordinator.leave('alice', room_id)

    assert store.room_ids() == set()
    assert store._locks == {}


def test_calls_on_missing_rooms_leave_no_locks(coordinator, store):
    coordinator.tick(16, 'GHOST')
    coordinator.apply_damage('GHOST', 'bob', 'alice', 10)
    coordinator.collect_powerup('GHOST', 'powerup_1')
    assert coordinator.room_snapshot('GHOST') is None
    assert store._locks == {}


def test_recreated_room_gets_a_fresh_lock(coordinator, store):
    coordinator.join('alice', 'AGAIN')
    coordinator.leave('alice', 'AGAIN')
    assert coordinator.join('bob', 'AGAIN').ok
    assert coordinator.apply_damage('AGAIN', 'bob', None, 10).value['health'] == 90
    assert list(store._locks) == ['AGAIN']
