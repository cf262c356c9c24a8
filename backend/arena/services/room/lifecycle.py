import logging
import random
from typing import Any, Dict, Optional

from .clock import draw_point
from .errors import RoomFullError
from .obstacles import generate_obstacles
from .settings import ArenaSettings

POSITION_FIELDS = ('x', 'y', 'angle', 'health')


class RoomLifecycle:
    """Membership, capacity and one-time room setup."""

    def __init__(self, store, settings: ArenaSettings, clock, rng: random.Random, logger=None):
        self.store = store
        self.settings = settings
        self.clock = clock
        self.rng = rng
        self.logger = logger or logging.getLogger(__name__)

    def join(self, account_id: str, room_id: Optional[str] = None) -> str:
        """Join ``room_id`` (or a freshly allocated room) and return the room id.

        Raises RoomFullError without touching any state when the room is at
        capacity. Capacity check and membership insert run under the room
        lock so two concurrent joins cannot both take the last slot.
        """
        resolved = room_id or self.store.allocate_room_id()
        with self.store.room_lock(resolved, create=True):
            occupants = self.store.get_room_users(resolved)
            if account_id not in occupants and len(occupants) >= self.settings.max_players:
                self.logger.info(f"[join-reject] room={resolved} account={account_id} occupants={len(occupants)}")
                raise RoomFullError(f"room {resolved} is full", room_id=resolved)

            self.store.join_room(resolved, account_id)
            x, y = draw_point(self.rng, self.settings.spawn_min, self.settings.spawn_max)
            self.store.update_user_state(resolved, account_id, {
                'accountId': account_id,
                'x': x,
                'y': y,
                'angle': 0,
                'health': self.settings.max_health,
                'score': 0,
            })
            self.initialize_room(resolved)
        self.logger.info(f"[join] room={resolved} account={account_id}")
        return resolved

    def initialize_room(self, room_id: str) -> bool:
        """Set up obstacles and timers once; returns True only for the winning caller."""
        current = self.store.get_room_state(room_id) or {}
        if current.get('initialized'):
            return False
        obstacles = generate_obstacles(
            self.settings.obstacle_count, self.settings.spawn_min, self.settings.spawn_max, self.rng
        )
        won = self.store.update_room_state_if(
            room_id,
            lambda state: not state.get('initialized'),
            {
                'initialized': True,
                'gameTime': 0,
                'powerups': [],
                'obstacles': obstacles,
                'lastPowerupSpawn': self.clock.now_ms(),
            },
        )
        if won:
            self.logger.info(f"[room-init] room={room_id} obstacles={len(obstacles)}")
        return won

    def leave(self, account_id: str, room_id: str) -> bool:
        with self.store.room_lock(room_id):
            left = self.store.leave_room(room_id, account_id)
        if left:
            self.logger.info(f"[leave] room={room_id} account={account_id}")
        return left

    def set_player_data(self, account_id: str, room_id: str, name: str) -> Dict[str, Any]:
        with self.store.room_lock(room_id):
            return self.store.update_user_state(room_id, account_id, {'name': name})

    def update_position(self, account_id: str, room_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Overwrite the caller's position, heading and health; absent keys are kept."""
        partial = {k: data[k] for k in POSITION_FIELDS if data.get(k) is not None}
        if 'health' in partial:
            partial['health'] = max(0, min(self.settings.max_health, int(partial['health'])))
        with self.store.room_lock(room_id):
            return self.store.update_user_state(room_id, account_id, partial)
