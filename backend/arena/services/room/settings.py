from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple


def _split_types(raw) -> Tuple[str, ...]:
    if isinstance(raw, str):
        raw = raw.split(',')
    return tuple(t.strip() for t in raw if t and t.strip())


@dataclass(frozen=True)
class ArenaSettings:
    """Tunable room rules, passed explicitly to the coordinator."""
    max_players: int = 8
    obstacle_count: int = 30
    powerup_spawn_interval_ms: int = 10000
    powerup_expiry_ms: int = 30000
    powerup_types: Tuple[str, ...] = field(default=('health', 'speed'))
    spawn_min: int = 100
    spawn_max: int = 1900
    world_size: int = 2000
    border_step: int = 50
    max_health: int = 100
    tick_interval_ms: int = 1000
    allow_client_spawn: bool = False

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'ArenaSettings':
        """Build settings from a Flask config (or any mapping of ARENA_* keys)."""
        defaults = cls()
        types = _split_types(config.get('ARENA_POWERUP_TYPES', defaults.powerup_types))
        return cls(
            max_players=int(config.get('ARENA_MAX_PLAYERS', defaults.max_players)),
            obstacle_count=int(config.get('ARENA_OBSTACLE_COUNT', defaults.obstacle_count)),
            powerup_spawn_interval_ms=int(
                config.get('ARENA_POWERUP_SPAWN_INTERVAL_MS', defaults.powerup_spawn_interval_ms)
            ),
            powerup_expiry_ms=int(config.get('ARENA_POWERUP_EXPIRY_MS', defaults.powerup_expiry_ms)),
            powerup_types=types or defaults.powerup_types,
            spawn_min=int(config.get('ARENA_SPAWN_MIN', defaults.spawn_min)),
            spawn_max=int(config.get('ARENA_SPAWN_MAX', defaults.spawn_max)),
            world_size=int(config.get('ARENA_WORLD_SIZE', defaults.world_size)),
            border_step=int(config.get('ARENA_BORDER_STEP', defaults.border_step)),
            max_health=int(config.get('ARENA_MAX_HEALTH', defaults.max_health)),
            tick_interval_ms=int(config.get('ARENA_TICK_INTERVAL_MS', defaults.tick_interval_ms)),
            allow_client_spawn=bool(int(config.get('ARENA_ALLOW_CLIENT_SPAWN', 0) or 0)),
        )
