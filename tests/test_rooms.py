import threading

import pytest

from quizhub.models import ROOM_CODE_ALPHABET, coerce_int
from quizhub.services.rooms import RoomFull, RoomNotFound, board, roster


def make_board():
    return [
        {'category': 'Geography', 'questions': [
            {'question': 'Capital of France', 'answer': 'Paris', 'value': 200, 'asked': False},
            {'question': 'Longest river', 'answer': 'Nile', 'value': 400, 'asked': False},
        ]},
        {'category': 'Science', 'questions': [
            {'question': 'H2O', 'answer': 'Water', 'value': 200, 'asked': False},
        ]},
    ]


def test_create_room_code_shape(rooms):
    room = rooms.create_room(3)
    assert len(room.code) == 6
    assert all(ch in ROOM_CODE_ALPHABET for ch in room.code)
    assert room.capacity == 3
    assert room.players == [] and room.chat == [] and room.board == []
    assert room.current_question is None and room.final_round is None
    assert rooms.get(room.code) is room


@pytest.mark.parametrize('capacity', [None, 0, -3, 'lots', '', float('nan')])
def test_create_room_falls_back_to_default_capacity(rooms, capacity):
    assert rooms.create_room(capacity).capacity == 2


def test_create_room_accepts_numeric_strings(rooms):
    assert rooms.create_room('5').capacity == 5


def test_room_codes_do_not_collide(rooms, monkeypatch):
    draws = iter(['AAAAAA', 'AAAAAA', 'BBBBBB'])
    monkeypatch.setattr('quizhub.models.random.choices', lambda alphabet, k: list(next(draws)))
    first = rooms.create_room()
    second = rooms.create_room()
    assert (first.code, second.code) == ('AAAAAA', 'BBBBBB')


def test_set_capacity_below_roster_blocks_joins(rooms):
    room = rooms.create_room(3)
    roster.join_room(rooms, room.code, 'a', 'Alice')
    roster.join_room(rooms, room.code, 'b', 'Bob')
    assert rooms.set_capacity(room.code, 1) is room
    assert room.capacity == 1
    assert len(room.players) == 2
    with pytest.raises(RoomFull):
        roster.join_room(rooms, room.code, 'c', 'Carol')


def test_set_capacity_unknown_room(rooms):
    assert rooms.set_capacity('NOPE00', 4) is None
    assert len(rooms) == 0


@pytest.mark.parametrize('capacity', [1, 2, 5])
def test_join_until_full(rooms, capacity):
    room = rooms.create_room(capacity)
    for i in range(capacity):
        _, player = roster.join_room(rooms, room.code, f'sid-{i}', f'P{i}')
        assert player.score == 0
    with pytest.raises(RoomFull) as excinfo:
        roster.join_room(rooms, room.code, 'late', 'Late')
    assert excinfo.value.to_dict() == {'error': 'Room is full'}
    assert len(room.players) == capacity


def test_join_unknown_room_mutates_nothing(rooms):
    room = rooms.create_room(2)
    with pytest.raises(RoomNotFound) as excinfo:
        roster.join_room(rooms, 'ZZZZZZ', 'a', 'Alice')
    assert excinfo.value.to_dict() == {'error': 'Room not found'}
    assert room.players == []
    assert len(rooms) == 1


def test_remove_session_only_touches_matching_rooms(rooms):
    first = rooms.create_room(2)
    second = rooms.create_room(2)
    roster.join_room(rooms, first.code, 'a', 'Alice')
    roster.join_room(rooms, second.code, 'b', 'Bob')

    assert roster.remove_session(rooms, 'a') == [first]
    assert first.players == []
    assert [p.id for p in second.players] == ['b']

    assert roster.remove_session(rooms, 'a') == []
    assert roster.remove_session(rooms, 'ghost') == []
    assert [p.id for p in second.players] == ['b']


def test_reveal_cell_sets_asked_once(rooms):
    room = rooms.create_room()
    board.start_game(room, make_board(), [])
    question = board.reveal_cell(room, 0, 1)
    assert question['answer'] == 'Nile'
    assert question['asked'] is True
    assert board.reveal_cell(room, 0, 1)['asked'] is True
    assert room.board[0]['questions'][1]['asked'] is True
    assert room.board[0]['questions'][0]['asked'] is False


@pytest.mark.parametrize('col,row', [(5, 0), (1, 3), (-1, 0), (None, 0), ('0', '0'), (True, 0)])
def test_reveal_cell_miss_is_noop(rooms, col, row):
    room = rooms.create_room()
    board.start_game(room, make_board(), [])
    assert board.reveal_cell(room, col, row) is None
    assert not any(q['asked'] for c in room.board for q in c['questions'])


def test_reveal_cell_on_empty_board(rooms):
    room = rooms.create_room()
    assert board.reveal_cell(room, 0, 0) is None


def test_start_game_replaces_board_and_scores(rooms):
    room = rooms.create_room()
    board.start_game(room, make_board(), [{'id': 'a', 'score': 0}])
    board.start_game(room, None, None)
    assert room.board == [] and room.scores == []


def test_modal_lifecycle(rooms):
    room = rooms.create_room()
    assert board.reveal_modal_answer(room) is None

    modal = board.open_modal(room, {'question': 'H2O', 'answer': 'Water'})
    assert modal == {'question': 'H2O', 'answer': 'Water', 'showAnswer': False}
    assert board.reveal_modal_answer(room)['showAnswer'] is True

    replaced = board.open_modal(room, {'question': 'Nile?', 'answer': 'Yes'})
    assert replaced['showAnswer'] is False

    board.close_modal(room)
    assert room.current_question is None
    assert board.reveal_modal_answer(room) is None


def test_allocate_points(rooms):
    room = rooms.create_room()
    roster.join_room(rooms, room.code, 'a', 'Alice')
    assert board.allocate_points(room, 'a', 400) is True
    assert board.allocate_points(room, 'a', '-600') is True
    assert board.allocate_points(room, 'a', 'oops') is True
    assert room.players[0].score == -200
    assert board.allocate_points(room, 'ghost', 100) is False


def test_chat_log_is_append_only(rooms):
    room = rooms.create_room()
    board.add_chat_message(room, 'Alice', 'hi')
    chat = board.add_chat_message(room, 'Bob', 'hello')
    assert chat == [{'sender': 'Alice', 'message': 'hi'}, {'sender': 'Bob', 'message': 'hello'}]


@pytest.mark.parametrize('value,expected', [
    (200, 200), ('200', 200), (12.9, 12), (None, 0), ('abc', 0), (True, 0), ([], 0),
])
def test_coerce_int(value, expected):
    assert coerce_int(value) == expected


def test_concurrent_joins_never_overfill(rooms):
    threads = 8
    largest = 0
    for _ in range(50):
        room = rooms.create_room(1)
        barrier = threading.Barrier(threads)

        def _join(i):
            barrier.wait()
            try:
                roster.join_room(rooms, room.code, f'sid-{i}', f'P{i}')
            except RoomFull:
                pass

        workers = [threading.Thread(target=_join, args=(i,)) for i in range(threads)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()
        largest = max(largest, len(room.players))
    assert largest == 1
