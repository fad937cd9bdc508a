import math
import random
import string
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_room_code(existing=(), length=6):
    """Generate a short room code not already used by a live room."""
    while True:
        code = ''.join(random.choices(ROOM_CODE_ALPHABET, k=length))
        if code not in existing:
            return code


def coerce_int(value, default=0):
    """Convert a client-supplied number, falling back to ``default``."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return int(number)


@dataclass
class Player:
    id: str
    name: str
    score: int = 0
    # Taken once when a Final Round starts, cleared when it resolves
    score_before_final_round: Optional[int] = None

    def to_dict(self):
        data = {
            'id': self.id,
            'name': self.name,
            'score': self.score,
        }
        if self.score_before_final_round is not None:
            data['scoreBeforeFinalRound'] = self.score_before_final_round
        return data


@dataclass
class FinalRound:
    category: Optional[str] = None
    question: Optional[Dict[str, Any]] = None
    wagers: Dict[str, int] = field(default_factory=dict)
    answers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self):
        data = dict(self.question or {})
        if self.category is not None:
            data.setdefault('category', self.category)
        return data


@dataclass
class Room:
    code: str
    capacity: int
    players: List[Player] = field(default_factory=list)
    chat: List[Dict[str, Any]] = field(default_factory=list)
    board: List[Dict[str, Any]] = field(default_factory=list)
    scores: List[Any] = field(default_factory=list)
    current_question: Optional[Dict[str, Any]] = None
    final_round: Optional[FinalRound] = None

    @property
    def is_full(self):
        return len(self.players) >= self.capacity

    def find_player(self, player_id) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def roster(self):
        return [p.to_dict() for p in self.players]

    def to_dict(self):
        return {
            'code': self.code,
            'numPlayers': self.capacity,
            'players': self.roster(),
            'chat': list(self.chat),
            'board': self.board,
            'scores': self.scores,
            'currentQuestion': self.current_question,
            'finalQuestion': self.final_round.to_dict() if self.final_round else None,
        }
