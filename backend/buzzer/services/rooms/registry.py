import logging
import threading
from typing import Dict, Optional, Tuple

from buzzer.errors import NoRoomsAvailable
from buzzer.models import Player, Room, generate_room_code, normalize_room_code


logger = logging.getLogger(__name__)


class RoomRegistry:
    """In-memory mapping of room code -> Room.

    Rooms are inserted by ``create`` and dropped by ``remove_if_empty``;
    there is no expiry. Callers holding a room lock may take the registry
    lock, never the other way round.
    """

    def __init__(self, code_length: int = 5, code_alphabet: str = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'):
        self.code_length = code_length
        self.code_alphabet = code_alphabet
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def create(self, host: Player) -> Tuple[str, Room]:
        with self._lock:
            if len(self._rooms) >= len(self.code_alphabet) ** self.code_length:
                raise NoRoomsAvailable()
            code = generate_room_code(self._rooms, self.code_length, self.code_alphabet)
            room = Room(code, host)
            self._rooms[code] = room
        logger.info(f"[registry-create] code={code} host={host.id}")
        return code, room

    def get(self, code) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(normalize_room_code(code))

    def remove_if_empty(self, code: str) -> bool:
        with self._lock:
            room = self._rooms.get(code)
            if room is None or room.players:
                return False
            del self._rooms[code]
            room.closed = True
        logger.info(f"[registry-remove] code={code}")
        return True

    def clear(self) -> None:
        """Drop every room; used at shutdown."""
        with self._lock:
            for room in self._rooms.values():
                room.closed = True
            self._rooms.clear()

    def __contains__(self, code) -> bool:
        with self._lock:
            return normalize_room_code(code) in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
