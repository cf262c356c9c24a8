import logging

from .errors import ErrorKind, Result
from .settings import ArenaSettings


class TickHandler:
    """Time-driven room evolution, invoked by the scheduler once per interval."""

    def __init__(self, store, spawner, settings: ArenaSettings, clock, logger=None):
        self.store = store
        self.spawner = spawner
        self.settings = settings
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    def tick(self, delta_ms: int, room_id: str) -> Result:
        """Advance game time, spawn when due and purge expired powerups.

        Never raises: a failing step is logged with the room id and reported
        as TICK_FAILURE so the scheduler keeps running.
        """
        step = 'read'
        try:
            with self.store.room_lock(room_id):
                state = self.store.get_room_state(room_id)
                if state is None:
                    return Result.success({'room_id': room_id, 'skipped': True})

                step = 'advance'
                game_time = int(state.get('gameTime') or 0) + max(0, int(delta_ms))
                self.store.update_room_state(room_id, {'gameTime': game_time})

                step = 'spawn'
                now = self.clock.now_ms()
                spawned = None
                last_spawn = int(state.get('lastPowerupSpawn') or 0)
                if now - last_spawn > self.settings.powerup_spawn_interval_ms:
                    spawned = self.spawner.spawn(room_id)

                step = 'expire'
                powerups = self.spawner.expire(room_id, now)
        except Exception as exc:
            self.logger.exception(f"[tick-fail] room={room_id} step={step} error={exc}")
            return Result.failure(ErrorKind.TICK_FAILURE, f"tick failed at {step}: {exc}")

        return Result.success({
            'room_id': room_id,
            'gameTime': game_time,
            'spawned': spawned,
            'powerups': len(powerups),
        })
