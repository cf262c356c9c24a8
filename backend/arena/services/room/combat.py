import logging
from typing import Any, Dict, Optional

from .errors import ErrorKind, Result
from .settings import ArenaSettings


class CombatResolver:
    """Damage, death and kill credit for players in one room."""

    def __init__(self, store, settings: ArenaSettings, logger=None):
        self.store = store
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)

    def apply_damage(self, room_id: str, target_id: str, attacker_id: Optional[str], damage: int) -> Result:
        """Subtract ``damage`` from the target's health, clamped to [0, max].

        An unknown target (for example one that already left) is reported as
        TARGET_NOT_FOUND and nothing is written.
        """
        with self.store.room_lock(room_id):
            target = self.store.get_user_state(room_id, target_id)
            if not target:
                return Result.failure(ErrorKind.TARGET_NOT_FOUND, f"player {target_id} not found")
            current = target.get('health')
            if current is None:
                current = self.settings.max_health
            health = max(0, min(self.settings.max_health, int(current) - int(damage)))
            self.store.update_user_state(room_id, target_id, {'health': health})
        self.logger.debug(f"[hit] room={room_id} target={target_id} attacker={attacker_id} damage={damage} health={health}")
        return Result.success({'target_id': target_id, 'health': health})

    def resolve_death(self, room_id: str, player_id: str, killer_id: Optional[str]) -> Result:
        """Heal the victim to full and credit the killer with one point.

        A victim who already left is TARGET_NOT_FOUND; no state is recreated
        for them and nobody scores.
        """
        killer_score = None
        with self.store.room_lock(room_id):
            if self.store.get_user_state(room_id, player_id) is None:
                return Result.failure(ErrorKind.TARGET_NOT_FOUND, f"player {player_id} not found")
            self.store.update_user_state(room_id, player_id, {'health': self.settings.max_health})
            if killer_id and killer_id != player_id:
                killer = self.store.get_user_state(room_id, killer_id)
                if killer:
                    killer_score = int(killer.get('score') or 0) + 1
                    self.store.update_user_state(room_id, killer_id, {'score': killer_score})
        self.logger.info(f"[death] room={room_id} player={player_id} killer={killer_id} killer_score={killer_score}")
        return Result.success({
            'player_id': player_id,
            'health': self.settings.max_health,
            'killer_id': killer_id,
            'killer_score': killer_score,
        })

    def fire_projectile(self, room_id: str, projectile: Dict[str, Any]) -> Result:
        self.store.broadcast_to_room(room_id, 'projectileFired', projectile)
        return Result.success()
