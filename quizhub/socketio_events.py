import functools

from flask import current_app, request
from flask_socketio import join_room

from quizhub import socketio
from quizhub.services.rooms import RoomError, RoomRegistry
from quizhub.services.rooms import board, final_round, roster


def _registry() -> RoomRegistry:
    return current_app.extensions['room_registry']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _broadcast(code: str, event: str, *payload) -> None:
    """Send an event to every connection subscribed to the room channel."""
    socketio.emit(event, *payload, to=code,
                  namespace=current_app.config.get('SOCKETIO_NAMESPACE', '/'))


def _room_for(data, key='roomCode'):
    return _registry().get((data or {}).get(key))


# ---- Connection lifecycle ----

def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}")
    for room in roster.remove_session(_registry(), sid):
        current_app.logger.info(f"[player-left] room={room.code} sid={sid} remaining={len(room.players)}")
        _broadcast(room.code, 'updatePlayers', room.roster())


# ---- Rooms & roster ----

def handle_create_room(data):
    room = _registry().create_room((data or {}).get('numPlayers'))
    join_room(room.code)
    current_app.logger.info(f"[room-created] room={room.code} capacity={room.capacity}")
    return {'code': room.code}


def handle_update_room_limit(data):
    data = data or {}
    room = _registry().set_capacity(data.get('code'), data.get('numPlayers'))
    if room is None:
        return
    current_app.logger.info(f"[room-limit] room={room.code} capacity={room.capacity}")
    _broadcast(room.code, 'roomUpdated', room.to_dict())


def handle_join_room(data):
    data = data or {}
    code = data.get('code')
    try:
        room, player = roster.join_room(_registry(), code, _get_sid(), data.get('name'))
    except RoomError as exc:
        current_app.logger.warning(f"[join-rejected] room={code} reason={exc.message}")
        return exc.to_dict()
    join_room(room.code)
    current_app.logger.info(f"[player-joined] room={room.code} name={player.name}")
    _broadcast(room.code, 'updatePlayers', room.roster())
    return {'code': room.code, 'player': player.to_dict(), 'roomPlayers': room.roster()}


def handle_chat_message(data):
    data = data or {}
    room = _room_for(data, key='code')
    if room is None:
        return
    chat = board.add_chat_message(room, data.get('sender'), data.get('message'))
    _broadcast(room.code, 'chatUpdate', list(chat))


# ---- Board ----

def handle_start_game(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        return
    board.start_game(room, data.get('boardPlayable'), data.get('scores'))
    current_app.logger.info(f"[game-started] room={room.code} categories={len(room.board)}")
    _broadcast(room.code, 'gameStarted', {'boardPlayable': room.board, 'scores': room.scores})


def handle_select_question(data):
    room = _room_for(data)
    if room is None:
        return
    _broadcast(room.code, 'questionSelected', (data or {}).get('question'))


def handle_cell_clicked(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        return
    col, row = data.get('colIndex'), data.get('rowIndex')
    question = board.reveal_cell(room, col, row)
    if question is None:
        return
    _broadcast(room.code, 'cellClicked', {'colIndex': col, 'rowIndex': row, 'question': question})


def handle_update_scores(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        return
    board.update_scores(room, data.get('scores'))
    _broadcast(room.code, 'updateScores', room.scores)


def handle_open_question_modal(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        return
    modal = board.open_modal(room, data.get('question'))
    _broadcast(room.code, 'updateQuestionModal', modal)


def handle_reveal_answer(data):
    room = _room_for(data)
    if room is None:
        return
    modal = board.reveal_modal_answer(room)
    if modal is None:
        return
    _broadcast(room.code, 'updateQuestionModal', modal)


def handle_close_question_modal(data):
    room = _room_for(data)
    if room is None:
        return
    board.close_modal(room)
    _broadcast(room.code, 'updateQuestionModal', None)


def handle_allocate_points(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        return
    if not board.allocate_points(room, data.get('playerId'), data.get('points')):
        current_app.logger.debug(f"[points-miss] room={room.code} player={data.get('playerId')}")
    _broadcast(room.code, 'updatePlayers', room.roster())


def handle_daily_double(data):
    data = data or {}
    code = data.get('roomCode')
    if not code:
        return
    _broadcast(code, 'dailyDoubleActivated', {'playerId': data.get('playerId'), 'wager': data.get('wager')})


def handle_advance_stage(data):
    data = data or {}
    code = data.get('roomCode')
    if not code:
        return
    _broadcast(code, 'stageAdvanced', {
        'currentStage': data.get('currentStage'),
        'boardPlayable': data.get('boardPlayable'),
    })


# ---- Final Round ----

def handle_reveal_final_category(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        current_app.logger.debug(f"[final-category] room={data.get('roomCode')} does not exist")
        return
    final_round.reveal_category(room, data.get('category'))
    current_app.logger.info(f"[final-category] room={room.code} category={data.get('category')}")
    _broadcast(room.code, 'finalJeopardyCategory', {'category': data.get('category')})


def handle_start_final_round(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        return
    payload = final_round.start_final_round(room, data.get('question'))
    current_app.logger.info(f"[final-start] room={room.code} players={len(room.players)}")
    _broadcast(room.code, 'finalJeopardyStarted', payload)


def handle_submit_final_wager(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        return
    all_submitted = final_round.submit_wager(room, data.get('playerId'), data.get('wager'))
    if all_submitted is None:
        current_app.logger.debug(f"[final-wager] room={room.code} ignored unknown player={data.get('playerId')}")
        return
    current_app.logger.debug(f"[final-wager] room={room.code} wagers={room.final_round.wagers} all={all_submitted}")
    _broadcast(room.code, 'updateFinalWagers', {
        'finalWagers': dict(room.final_round.wagers),
        'allSubmitted': all_submitted,
    })


def handle_submit_final_answer(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        return
    player_id = data.get('playerId')
    all_answered = final_round.submit_answer(room, player_id, data.get('answer'))
    if all_answered is None:
        current_app.logger.debug(f"[final-answer] room={room.code} ignored unknown player={player_id}")
        return
    current_app.logger.debug(f"[final-answer] room={room.code} player={player_id} all={all_answered}")
    _broadcast(room.code, 'finalAnswerUpdate', {
        'playerId': player_id,
        'status': 'submitted',
        'allAnswered': all_answered,
    })
    if all_answered:
        _broadcast(room.code, 'enableRevealAnswer')


def handle_reveal_final_results(data):
    data = data or {}
    room = _room_for(data)
    if room is None:
        current_app.logger.debug(f"[final-results] room={data.get('roomCode')} not found")
        return
    outcome = final_round.resolve(room)
    if outcome is None:
        current_app.logger.debug(f"[final-results] room={room.code} has no final question")
        return
    for result in outcome.results:
        current_app.logger.info(
            f"[final-results] room={room.code} player={result.name} wager={result.wager} "
            f"correct={result.correct} score={result.score}"
        )
    _broadcast(room.code, 'finalResults', outcome.to_dict())


EVENT_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'createRoom': handle_create_room,
    'updateRoomLimit': handle_update_room_limit,
    'joinRoom': handle_join_room,
    'chatMessage': handle_chat_message,
    'startGame': handle_start_game,
    'selectQuestion': handle_select_question,
    'cellClicked': handle_cell_clicked,
    'updateScores': handle_update_scores,
    'openQuestionModal': handle_open_question_modal,
    'revealAnswer': handle_reveal_answer,
    'allocatePoints': handle_allocate_points,
    'dailyDouble': handle_daily_double,
    'closeQuestionModal': handle_close_question_modal,
    'advanceStage': handle_advance_stage,
    'revealFinalCategory': handle_reveal_final_category,
    'submitFinalWager': handle_submit_final_wager,
    'startFinalJeopardy': handle_start_final_round,
    'submitFinalAnswer': handle_submit_final_answer,
    'revealFinalResults': handle_reveal_final_results,
}


def _serialized(handler):
    """Run a handler to completion while holding the room registry lock."""

    @functools.wraps(handler)
    def wrapper(*args, **kwargs):
        with _registry().lock:
            return handler(*args, **kwargs)

    return wrapper


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register every room event handler on the given namespace."""
    for event, handler in EVENT_HANDLERS.items():
        socketio.on_event(event, _serialized(handler), namespace=namespace)
