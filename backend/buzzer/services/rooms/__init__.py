"""Room domain services: registry, round state machine and session binding.

This package holds the room logic the socket handlers call into, keeping
transport concerns separated from the game rules.
"""

from .registry import RoomRegistry
from .sessions import SessionBinding
from . import rounds

__all__ = ['RoomRegistry', 'SessionBinding', 'rounds']
