"""Error kinds and the uniform result returned by every room operation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    ROOM_FULL = 'room_full'
    TARGET_NOT_FOUND = 'target_not_found'
    STORE_FAILURE = 'store_failure'
    TICK_FAILURE = 'tick_failure'
    INVALID_REQUEST = 'invalid_request'
    NOT_IN_ROOM = 'not_in_room'
    FORBIDDEN = 'forbidden'


class ArenaError(Exception):
    kind = ErrorKind.STORE_FAILURE

    def __init__(self, message: str = '', room_id: Optional[str] = None):
        super().__init__(message)
        self.room_id = room_id


class RoomFullError(ArenaError):
    kind = ErrorKind.ROOM_FULL


class StoreFailure(ArenaError):
    kind = ErrorKind.STORE_FAILURE


@dataclass(frozen=True)
class Result:
    value: Any = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> 'Result':
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: Optional[str] = None) -> 'Result':
        return cls(error=kind, message=message or kind.value.replace('_', ' '))

    @classmethod
    def from_error(cls, exc: ArenaError) -> 'Result':
        return cls.failure(exc.kind, str(exc) or None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ok': self.ok,
            'value': self.value,
            'error': self.error.value if self.error else None,
            'message': self.message,
        }
