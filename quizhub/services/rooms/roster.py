from typing import List, Tuple

from quizhub.models import Player, Room
from .errors import RoomFull, RoomNotFound
from .registry import RoomRegistry


def join_room(registry: RoomRegistry, code, player_id: str, name) -> Tuple[Room, Player]:
    """Append a new player with score 0 to the room's roster.

    Raises RoomNotFound for an unknown code and RoomFull once the roster
    has reached the room's capacity. Neither error mutates any room.
    """
    with registry.lock:
        room = registry.get(code)
        if room is None:
            raise RoomNotFound(code)
        if room.is_full:
            raise RoomFull(code)
        player = Player(id=player_id, name=name)
        room.players.append(player)
        return room, player


def remove_session(registry: RoomRegistry, session_id: str) -> List[Room]:
    """Drop the session's player from every room it appears in.

    Returns the rooms whose roster actually changed.
    """
    changed = []
    with registry.lock:
        for room in registry:
            before = len(room.players)
            room.players = [p for p in room.players if p.id != session_id]
            if len(room.players) != before:
                changed.append(room)
    return changed
