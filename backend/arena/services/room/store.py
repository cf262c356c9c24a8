"""In-process state store: room-scoped and per-user state with broadcast.

Each room carries its own re-entrant lock, dropped when the room is torn
down; callers hold it across a read-modify-write so concurrent writers to
the same room never interleave. Rooms never share a lock.
"""

import copy
import logging
import random
import string
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

from .errors import StoreFailure

Broadcaster = Callable[[str, str, Any], None]


class _RoomRecord:
    __slots__ = ('state', 'users', 'members')

    def __init__(self):
        self.state: Dict[str, Any] = {}
        self.users: Dict[str, Dict[str, Any]] = {}
        self.members: List[str] = []


class MemoryStateStore:
    def __init__(self, broadcaster: Optional[Broadcaster] = None, logger=None):
        self._rooms: Dict[str, _RoomRecord] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        self._broadcaster = broadcaster
        self.logger = logger or logging.getLogger(__name__)

    # ---- locking ----

    @contextmanager
    def room_lock(self, room_id: str, create: bool = False) -> Iterator[None]:
        """Hold the room's lock for the duration of the block.

        Only a join (``create=True``) registers a lock for a room that does not
        exist yet; other callers on a missing room get a private lock, so ids
        that never become rooms leave nothing behind. If the room was torn
        down or recreated while waiting, the acquire is retried on the lock
        that is registered now.
        """
        while True:
            with self._registry_lock:
                lock = self._locks.get(room_id)
                if lock is None:
                    lock = threading.RLock()
                    if create or room_id in self._rooms:
                        self._locks[room_id] = lock
            with lock:
                with self._registry_lock:
                    current = self._locks.get(room_id)
                if current is not None and current is not lock:
                    continue
                yield
                return

    # ---- membership ----

    def allocate_room_id(self, length: int = 6) -> str:
        """Reserve an unused room code."""
        with self._registry_lock:
            while True:
                code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
                if code not in self._rooms:
                    self._rooms[code] = _RoomRecord()
                    self.logger.info(f"[room-create] room={code}")
                    return code

    def join_room(self, room_id: str, account_id: str) -> str:
        with self._registry_lock:
            record = self._rooms.get(room_id)
            if record is None:
                record = self._rooms[room_id] = _RoomRecord()
                self.logger.info(f"[room-create] room={room_id}")
            if account_id not in record.members:
                record.members.append(account_id)
        return room_id

    def leave_room(self, room_id: str, account_id: str) -> bool:
        with self.room_lock(room_id), self._registry_lock:
            record = self._rooms.get(room_id)
            if record is None or account_id not in record.members:
                return False
            record.members.remove(account_id)
            record.users.pop(account_id, None)
            if not record.members:
                self._rooms.pop(room_id, None)
                self._locks.pop(room_id, None)
                self.logger.info(f"[room-teardown] room={room_id} reason=empty")
            return True

    def get_room_users(self, room_id: str) -> List[str]:
        with self._registry_lock:
            record = self._rooms.get(room_id)
            return list(record.members) if record else []

    def has_room(self, room_id: str) -> bool:
        with self._registry_lock:
            return room_id in self._rooms

    def room_ids(self) -> Set[str]:
        with self._registry_lock:
            return set(self._rooms)

    # ---- room state ----

    def _record(self, room_id: str) -> _RoomRecord:
        record = self._rooms.get(room_id)
        if record is None:
            raise StoreFailure(f"room {room_id} does not exist", room_id=room_id)
        return record

    def get_room_state(self, room_id: str) -> Optional[Dict[str, Any]]:
        with self.room_lock(room_id):
            record = self._rooms.get(room_id)
            if record is None:
                return None
            return copy.deepcopy(record.state)

    def update_room_state(self, room_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        with self.room_lock(room_id):
            record = self._record(room_id)
            record.state.update(copy.deepcopy(partial))
            return copy.deepcopy(record.state)

    def update_room_state_if(
        self,
        room_id: str,
        predicate: Callable[[Dict[str, Any]], bool],
        partial: Dict[str, Any],
    ) -> bool:
        """Merge ``partial`` only when ``predicate(current_state)`` holds."""
        with self.room_lock(room_id):
            record = self._record(room_id)
            if not predicate(copy.deepcopy(record.state)):
                return False
            record.state.update(copy.deepcopy(partial))
            return True

    # ---- per-user state ----

    def get_user_state(self, room_id: str, account_id: str) -> Optional[Dict[str, Any]]:
        with self.room_lock(room_id):
            record = self._rooms.get(room_id)
            if record is None or account_id not in record.users:
                return None
            return copy.deepcopy(record.users[account_id])

    def update_user_state(self, room_id: str, account_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        with self.room_lock(room_id):
            record = self._record(room_id)
            current = record.users.setdefault(account_id, {})
            current.update(copy.deepcopy(partial))
            return copy.deepcopy(current)

    def get_all_user_states(self, room_id: str) -> Dict[str, Dict[str, Any]]:
        with self.room_lock(room_id):
            record = self._rooms.get(room_id)
            if record is None:
                return {}
            return {aid: copy.deepcopy(record.users.get(aid, {})) for aid in list(record.members)}

    # ---- broadcast ----

    def broadcast_to_room(self, room_id: str, event: str, payload: Any) -> None:
        if self._broadcaster is None:
            return
        self._broadcaster(room_id, event, payload)
