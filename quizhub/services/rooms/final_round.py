"""Final Round coordination.

A room moves through the Final Round only on explicit events, there are
no timers:

    Idle -> CategoryRevealed -> InProgress -> Resolved -> Idle

"All wagers in" and "all answers in" are derived on every submission by
comparing the submitted keys against the *current* roster, so a player who
leaves mid-round cannot block the others. Scores are computed from the
snapshot taken when the round started, never from the live score.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from quizhub.models import FinalRound, Room, coerce_int


@dataclass
class PlayerResult:
    id: str
    name: str
    wager: int
    answer: str
    correct: bool
    score: int

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'wager': self.wager,
            'answer': self.answer,
            'correct': self.correct,
            'score': self.score,
        }


@dataclass
class FinalResults:
    correct_answer: str
    results: List[PlayerResult] = field(default_factory=list)

    def to_dict(self):
        return {
            'results': [r.to_dict() for r in self.results],
            'correctAnswer': self.correct_answer,
        }


def _slot(room: Room) -> FinalRound:
    if room.final_round is None:
        room.final_round = FinalRound()
    return room.final_round


def _all_in(room: Room, entries: Dict[str, Any]) -> bool:
    return all(p.id in entries for p in room.players)


def normalize_answer(value) -> str:
    if value is None:
        return ''
    return str(value).strip().lower()


def is_correct(answer, expected) -> bool:
    return normalize_answer(answer) == normalize_answer(expected)


def reveal_category(room: Room, category) -> FinalRound:
    final_round = _slot(room)
    final_round.category = category
    return final_round


def start_final_round(room: Room, question) -> Dict[str, Any]:
    """Store the question and snapshot every rostered player's score.

    The returned payload includes the answer text; every client receives
    it when the round starts.
    """
    question = dict(question or {})
    final_round = _slot(room)
    final_round.question = {**question, 'showAnswer': False}
    if question.get('category') is not None:
        final_round.category = question.get('category')
    final_round.wagers = {}
    final_round.answers = {}
    for player in room.players:
        if player.score_before_final_round is None:
            player.score_before_final_round = player.score or 0
    return {
        'category': question.get('category'),
        'question': question.get('question'),
        'answer': question.get('answer'),
        'media': question.get('media') or None,
        'showAnswer': False,
    }


def submit_wager(room: Room, player_id, wager) -> Optional[bool]:
    """Record or overwrite a wager.

    Returns whether every rostered player has wagered, or None when the
    player is not on the roster and nothing was recorded.
    """
    if room.find_player(player_id) is None:
        return None
    final_round = _slot(room)
    final_round.wagers[player_id] = coerce_int(wager)
    return _all_in(room, final_round.wagers)


def submit_answer(room: Room, player_id, answer) -> Optional[bool]:
    if room.find_player(player_id) is None:
        return None
    final_round = _slot(room)
    final_round.answers[player_id] = '' if answer is None else str(answer)
    return _all_in(room, final_round.answers)


def resolve(room: Room) -> Optional[FinalResults]:
    """Score the round for every current player and return to Idle.

    Returns None, changing nothing, when no Final Round question or no
    answer text is set.
    Wagers are not capped by the snapshot, so scores may go negative.
    """
    final_round = room.final_round
    if final_round is None or not final_round.question:
        return None
    expected = final_round.question.get('answer')
    if expected is None:
        return None

    outcome = FinalResults(correct_answer=expected)
    for player in room.players:
        base = player.score_before_final_round
        if base is None:
            base = player.score or 0
        wager = final_round.wagers.get(player.id, 0)
        answer = final_round.answers.get(player.id, '')
        correct = is_correct(answer, expected)
        player.score = base + wager if correct else base - wager
        outcome.results.append(PlayerResult(
            id=player.id,
            name=player.name,
            wager=wager,
            answer=answer,
            correct=correct,
            score=player.score,
        ))

    # Results are broadcast once and never kept server-side
    room.final_round = None
    for player in room.players:
        player.score_before_final_round = None
    return outcome
