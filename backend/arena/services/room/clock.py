import random
import time
from typing import Tuple


class SystemClock:
    """Wall clock in integer milliseconds."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class FixedClock:
    """Manually driven clock for tests and replays."""

    def __init__(self, now_ms: int = 0):
        self.current = int(now_ms)

    def now_ms(self) -> int:
        return self.current

    def advance(self, ms: int) -> int:
        self.current += int(ms)
        return self.current


def draw_point(rng: random.Random, lo: int, hi: int) -> Tuple[int, int]:
    """Independent uniform x and y draws in [lo, hi)."""
    span = max(1, hi - lo)
    x = lo + int(rng.random() * span)
    y = lo + int(rng.random() * span)
    return x, y
