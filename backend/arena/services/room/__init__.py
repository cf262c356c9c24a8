"""Arena room services: lifecycle, combat, powerups and the room tick.

Pure(ish) domain logic shared by the socket handlers, the HTTP routes and
the tick scheduler, keeping transport concerns out of the room rules.
"""

from .coordinator import ArenaCoordinator
from .errors import ArenaError, ErrorKind, Result, RoomFullError, StoreFailure
from .settings import ArenaSettings
from .store import MemoryStateStore

__all__ = [
    'ArenaCoordinator',
    'ArenaError',
    'ArenaSettings',
    'ErrorKind',
    'MemoryStateStore',
    'Result',
    'RoomFullError',
    'StoreFailure',
]
