from typing import Any, Dict, Optional

from quizhub.models import Room, coerce_int


def start_game(room: Room, board=None, scores=None) -> Room:
    room.board = board or []
    room.scores = scores or []
    return room


def update_scores(room: Room, scores) -> Room:
    room.scores = scores
    return room


def find_question(board, col, row) -> Optional[Dict[str, Any]]:
    """Return ``board[col].questions[row]`` or None when the indices miss."""
    if isinstance(col, bool) or isinstance(row, bool):
        return None
    if not isinstance(col, int) or not isinstance(row, int):
        return None
    if col < 0 or row < 0 or col >= len(board or []):
        return None
    column = board[col]
    questions = column.get('questions') if isinstance(column, dict) else None
    if not isinstance(questions, list) or row >= len(questions):
        return None
    question = questions[row]
    return question if isinstance(question, dict) else None


def reveal_cell(room: Room, col, row) -> Optional[Dict[str, Any]]:
    """Mark a board cell as asked. The flag is never cleared afterwards."""
    question = find_question(room.board, col, row)
    if question is None:
        return None
    question['asked'] = True
    return question


def open_modal(room: Room, question) -> Dict[str, Any]:
    room.current_question = {**(question or {}), 'showAnswer': False}
    return room.current_question


def reveal_modal_answer(room: Room) -> Optional[Dict[str, Any]]:
    if room.current_question is None:
        return None
    room.current_question['showAnswer'] = True
    return room.current_question


def close_modal(room: Room) -> None:
    room.current_question = None


def allocate_points(room: Room, player_id, points) -> bool:
    """Add points to a player's score. Returns False if no player matched."""
    player = room.find_player(player_id)
    if player is None:
        return False
    player.score = (player.score or 0) + coerce_int(points)
    return True


def add_chat_message(room: Room, sender, message):
    room.chat.append({'sender': sender, 'message': message})
    return room.chat
