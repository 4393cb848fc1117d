import random
import threading
from typing import List, Optional


class RoomStatus:
    WAITING = 'waiting'
    RUNNING = 'running'
    ENDED = 'ended'


def sanitize_name(name, max_length=20):
    """Trim and truncate a display name; non-strings sanitize to ''."""
    if not isinstance(name, str):
        return ''
    return name.strip()[:max_length]


def normalize_room_code(code):
    if not isinstance(code, str):
        return ''
    return code.strip().upper()


_code_random = random.SystemRandom()


def generate_room_code(taken, length=5, alphabet='ABCDEFGHJKLMNPQRSTUVWXYZ23456789'):
    """Generate a short room code that is not in ``taken``."""
    while True:
        code = ''.join(_code_random.choice(alphabet) for _ in range(length))
        if code not in taken:
            return code


class Player:
    def __init__(self, id: str, name: str):
        self.id = id
        self.name = name

    def to_dict(self, host_id: Optional[str] = None):
        return {
            'id': self.id,
            'name': self.name,
            'isHost': self.id == host_id,
        }

    def __repr__(self):
        return f'<Player {self.id} {self.name!r}>'


class Room:
    def __init__(self, code: str, host: Player):
        self.code = code
        self.players: List[Player] = [host]
        self.host_id = host.id
        self.status = RoomStatus.WAITING
        self.winner: Optional[str] = None
        # Held for the whole of every state-machine operation on this room
        self.lock = threading.RLock()
        # Set once the registry drops the room
        self.closed = False

    def find_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def to_dict(self):
        return {
            'roomId': self.code,
            'players': [p.to_dict(self.host_id) for p in self.players],
            'hostId': self.host_id,
            'status': self.status,
            'winner': self.winner,
        }

    def __repr__(self):
        return f'<Room {self.code} status={self.status} players={len(self.players)}>'
