import itertools
import logging
import random
from typing import Any, Dict, List, Optional

from .clock import draw_point
from .settings import ArenaSettings


class PowerupSpawner:
    """Owns membership of a room's shared powerup list."""

    def __init__(self, store, settings: ArenaSettings, clock, rng: random.Random, logger=None):
        self.store = store
        self.settings = settings
        self.clock = clock
        self.rng = rng
        self.logger = logger or logging.getLogger(__name__)
        self._counter = itertools.count(1)

    def _next_id(self, now: int) -> str:
        return f"powerup_{now}_{next(self._counter)}"

    def spawn(self, room_id: str) -> Dict[str, Any]:
        """Append a new powerup, stamp lastPowerupSpawn and broadcast it.

        The list and the timestamp are written in a single update.
        """
        with self.store.room_lock(room_id):
            state = self.store.get_room_state(room_id) or {}
            now = self.clock.now_ms()
            powerup_type = self.rng.choice(self.settings.powerup_types)
            x, y = draw_point(self.rng, self.settings.spawn_min, self.settings.spawn_max)
            powerup = {
                'id': self._next_id(now),
                'x': x,
                'y': y,
                'type': powerup_type,
                'createdAt': now,
            }
            powerups = list(state.get('powerups') or []) + [powerup]
            last_spawn = max(int(state.get('lastPowerupSpawn') or 0), now)
            self.store.update_room_state(room_id, {'powerups': powerups, 'lastPowerupSpawn': last_spawn})
        self.logger.info(f"[powerup-spawn] room={room_id} id={powerup['id']} type={powerup_type}")
        self.store.broadcast_to_room(room_id, 'powerupSpawned', powerup)
        return powerup

    def collect(self, room_id: str, powerup_id: str) -> Optional[Dict[str, Any]]:
        """Remove ``powerup_id`` and return it; unknown ids are a no-op."""
        with self.store.room_lock(room_id):
            state = self.store.get_room_state(room_id) or {}
            powerups = list(state.get('powerups') or [])
            remaining = [p for p in powerups if p.get('id') != powerup_id]
            if len(remaining) == len(powerups):
                return None
            self.store.update_room_state(room_id, {'powerups': remaining})
        collected = next(p for p in powerups if p.get('id') == powerup_id)
        self.logger.info(f"[powerup-collect] room={room_id} id={powerup_id}")
        return collected

    def expire(self, room_id: str, now: Optional[int] = None) -> List[Dict[str, Any]]:
        """Drop powerups older than the expiry window and return the survivors."""
        with self.store.room_lock(room_id):
            state = self.store.get_room_state(room_id)
            if state is None:
                return []
            now = self.clock.now_ms() if now is None else now
            powerups = list(state.get('powerups') or [])
            fresh = [
                p for p in powerups
                if now - int(p.get('createdAt') or 0) < self.settings.powerup_expiry_ms
            ]
            if len(fresh) != len(powerups):
                self.store.update_room_state(room_id, {'powerups': fresh})
                self.logger.info(f"[powerup-expire] room={room_id} removed={len(powerups) - len(fresh)}")
        return fresh
