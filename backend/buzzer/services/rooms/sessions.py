import threading
from typing import Dict, Optional

from buzzer.errors import NoActiveRoom
from buzzer.models import Room


class SessionBinding:
    """Which room, if any, each live connection belongs to.

    A connection is bound to at most one room. Moving to another room is
    leave-then-join: the socket handlers leave the bound room before
    calling ``bind`` again.
    """

    def __init__(self):
        self._rooms_by_sid: Dict[str, str] = {}
        self._lock = threading.Lock()

    def bind(self, sid: str, code: str) -> None:
        with self._lock:
            self._rooms_by_sid[sid] = code

    def room_of(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._rooms_by_sid.get(sid)

    def unbind(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._rooms_by_sid.pop(sid, None)

    def require_room(self, sid: str, registry) -> Room:
        code = self.room_of(sid)
        if code is None:
            raise NoActiveRoom(f"{sid} is not in a room")
        room = registry.get(code)
        if room is None:
            raise NoActiveRoom(f"{sid} is bound to missing room {code}")
        return room

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms_by_sid)
