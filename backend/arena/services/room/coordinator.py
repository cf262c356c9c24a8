"""Authoritative room coordinator.

Wires the lifecycle, combat, powerup and tick components to one store,
clock and random source, and exposes every client operation as a call
returning :class:`Result`. Store failures are logged here and re-raised to
the caller.
"""

import logging
import random
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .clock import SystemClock
from .combat import CombatResolver
from .errors import ErrorKind, Result, RoomFullError, StoreFailure
from .lifecycle import RoomLifecycle
from .obstacles import border_obstacles
from .powerups import PowerupSpawner
from .settings import ArenaSettings
from .store import MemoryStateStore
from .tick import TickHandler


class ArenaCoordinator:
    def __init__(
        self,
        settings: Optional[ArenaSettings] = None,
        store=None,
        clock=None,
        rng: Optional[random.Random] = None,
        logger=None,
    ):
        self.settings = settings or ArenaSettings()
        self.logger = logger or logging.getLogger(__name__)
        self.store = store if store is not None else MemoryStateStore(logger=self.logger)
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()

        self.lifecycle = RoomLifecycle(self.store, self.settings, self.clock, self.rng, self.logger)
        self.combat = CombatResolver(self.store, self.settings, self.logger)
        self.spawner = PowerupSpawner(self.store, self.settings, self.clock, self.rng, self.logger)
        self.ticker = TickHandler(self.store, self.spawner, self.settings, self.clock, self.logger)

    @contextmanager
    def _store_guard(self, op: str, room_id: Optional[str]):
        try:
            yield
        except StoreFailure as exc:
            self.logger.error(f"[store-fail] op={op} room={room_id} error={exc}")
            raise

    def _is_member(self, account_id: str, room_id: str) -> bool:
        return account_id in self.store.get_room_users(room_id)

    # ---- lifecycle ----

    def join(self, account_id: str, room_id: Optional[str] = None) -> Result:
        with self._store_guard('join', room_id):
            try:
                resolved = self.lifecycle.join(account_id, room_id)
            except RoomFullError as exc:
                return Result.from_error(exc)
        return Result.success({'room_id': resolved})

    def leave(self, account_id: str, room_id: str) -> Result:
        with self._store_guard('leave', room_id):
            left = self.lifecycle.leave(account_id, room_id)
        return Result.success({'left': left})

    def set_player_data(self, account_id: str, room_id: str, data: Dict[str, Any]) -> Result:
        name = (data or {}).get('name')
        if not isinstance(name, str) or not name.strip():
            return Result.failure(ErrorKind.INVALID_REQUEST, 'name is required')
        if not self._is_member(account_id, room_id):
            return Result.failure(ErrorKind.NOT_IN_ROOM)
        with self._store_guard('set_player_data', room_id):
            state = self.lifecycle.set_player_data(account_id, room_id, name.strip())
        return Result.success(state)

    def update_position(self, account_id: str, room_id: str, data: Dict[str, Any]) -> Result:
        if not isinstance(data, dict):
            return Result.failure(ErrorKind.INVALID_REQUEST, 'position payload must be an object')
        if not self._is_member(account_id, room_id):
            return Result.failure(ErrorKind.NOT_IN_ROOM)
        try:
            with self._store_guard('update_position', room_id):
                state = self.lifecycle.update_position(account_id, room_id, data)
        except (TypeError, ValueError, OverflowError):
            return Result.failure(ErrorKind.INVALID_REQUEST, 'health must be a number')
        return Result.success(state)

    # ---- combat ----

    def fire_projectile(self, room_id: str, projectile: Dict[str, Any]) -> Result:
        return self.combat.fire_projectile(room_id, projectile)

    def apply_damage(self, room_id: str, target_id: str, attacker_id: Optional[str], damage: Any) -> Result:
        try:
            damage = int(damage)
        except (TypeError, ValueError, OverflowError):
            return Result.failure(ErrorKind.INVALID_REQUEST, 'damage must be a number')
        with self._store_guard('apply_damage', room_id):
            return self.combat.apply_damage(room_id, target_id, attacker_id, damage)

    def resolve_death(self, room_id: str, player_id: str, killer_id: Optional[str] = None) -> Result:
        with self._store_guard('resolve_death', room_id):
            return self.combat.resolve_death(room_id, player_id, killer_id)

    # ---- powerups ----

    def spawn_powerup(self, room_id: str) -> Result:
        with self._store_guard('spawn_powerup', room_id):
            powerup = self.spawner.spawn(room_id)
        return Result.success(powerup)

    def collect_powerup(self, room_id: str, powerup_id: str) -> Result:
        with self._store_guard('collect_powerup', room_id):
            collected = self.spawner.collect(room_id, powerup_id)
        return Result.success(collected)

    # ---- tick ----

    def tick(self, delta_ms: int, room_id: str) -> Result:
        return self.ticker.tick(delta_ms, room_id)

    # ---- read models ----

    def room_snapshot(self, room_id: str) -> Optional[Dict[str, Any]]:
        """Room state with expired powerups purged first, plus its players."""
        if not self.store.has_room(room_id):
            return None
        with self._store_guard('room_snapshot', room_id):
            with self.store.room_lock(room_id):
                self.spawner.expire(room_id)
                state = self.store.get_room_state(room_id)
                players = self.store.get_all_user_states(room_id)
        if state is None:
            return None
        return {'room_id': room_id, 'state': state, 'players': players}

    def list_rooms(self) -> List[Dict[str, Any]]:
        rooms = []
        for room_id in sorted(self.store.room_ids()):
            rooms.append({
                'room_id': room_id,
                'players': len(self.store.get_room_users(room_id)),
                'max_players': self.settings.max_players,
            })
        return rooms

    def world(self) -> Dict[str, Any]:
        s = self.settings
        return {
            'world_size': s.world_size,
            'spawn_range': [s.spawn_min, s.spawn_max],
            'border_step': s.border_step,
            'border': border_obstacles(s.world_size, s.border_step),
            'powerup_types': list(s.powerup_types),
            'max_players': s.max_players,
        }
