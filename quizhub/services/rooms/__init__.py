"""Room domain services: registry, roster, board and Final Round.

This package contains the room state machine. It is imported by the
socket handlers, keeping transport concerns separated from core game
mechanics: services mutate rooms and return what changed, the caller
decides what to broadcast.
"""

from .errors import RoomError, RoomFull, RoomNotFound
from .registry import RoomRegistry

__all__ = ['RoomError', 'RoomFull', 'RoomNotFound', 'RoomRegistry']
