import random
from typing import Dict, List, Optional

from .clock import draw_point


def generate_obstacles(count: int, lo: int, hi: int, rng: Optional[random.Random] = None) -> List[Dict[str, int]]:
    """Draw ``count`` obstacle positions uniformly from the spawn range.

    Border walls are not part of the output; see :func:`border_obstacles`.
    """
    rng = rng or random.Random()
    obstacles = []
    for _ in range(count):
        x, y = draw_point(rng, lo, hi)
        obstacles.append({'x': x, 'y': y})
    return obstacles


def border_obstacles(world_size: int, step: int) -> List[Dict[str, int]]:
    """Walls along the four world edges, identical on every server and client."""
    walls = []
    for i in range(0, world_size, step):
        walls.append({'x': i, 'y': 0})
        walls.append({'x': i, 'y': world_size})
        walls.append({'x': 0, 'y': i})
        walls.append({'x': world_size, 'y': i})
    return walls
