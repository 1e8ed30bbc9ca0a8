"""Unit tests for src/services/othello_service.py"""

import random
from typing import Type

import pytest

from src.api.models import (
    CancelQueueCommand,
    Event,
    InvalidEvent,
    JoinQueueCommand,
    JoinRoomCommand,
    MatchFoundEvent,
    MessageEvent,
    PlaceCommand,
    QueueCancelledEvent,
    QueueJoinedEvent,
    RestartCommand,
    RoomFullEvent,
    RoomJoinedEvent,
    StateEvent,
)
from src.core.shared_types import Color, InvalidReason, NoticeType, Status
from src.othello.board import Board
from src.services.matchmaking import MatchmakingQueue
from src.services.othello_service import Notification, OthelloService
from src.services.registry import SessionRegistry
from tests.boards import LAST_MOVE_ROWS, PASS_ROWS

ROOM = "lobby"


def _events_of(
    notifications: list[Notification], event_type: Type[Event]
) -> list[Notification]:
    return [n for n in notifications if isinstance(n.event, event_type)]


def _only(notifications: list[Notification], event_type: Type[Event]) -> Notification:
    found = _events_of(notifications, event_type)
    assert len(found) == 1, f"expected one {event_type.__name__}, got {notifications}"
    return found[0]


@pytest.fixture
def seated(service: OthelloService) -> OthelloService:
    """alice (black) and bob (white) sitting in ROOM"""
    service.join_room("alice", ROOM)
    service.join_room("bob", ROOM)
    return service


def _seated(registry: SessionRegistry, room_id: str) -> list[str]:
    with registry.session(room_id) as game:
        return [game.players[color] for color in Color if color in game.players]


def _set_board(registry: SessionRegistry, rows: list[str]) -> None:
    with registry.session(ROOM) as game:
        game.board = Board.from_rows(rows)
        game.turn = Color.BLACK


# --- SERVICE - MATCHMAKING ----
def test_first_in_queue_waits(service: OthelloService) -> None:
    notifications = service.join_queue("p1")
    assert notifications == [Notification(("p1",), QueueJoinedEvent())]
    assert service.queue.waiting() == ["p1"]


def test_duplicate_queue_join_is_ignored(service: OthelloService) -> None:
    service.join_queue("p1")
    assert service.join_queue("p1") == []
    assert service.queue.waiting() == ["p1"]


def test_two_in_queue_get_matched(service: OthelloService) -> None:
    service.join_queue("p1")
    notifications = service.join_queue("p2")

    assert _only(notifications, QueueJoinedEvent).recipients == ("p2",)
    found = _events_of(notifications, MatchFoundEvent)
    assert sorted(n.recipients for n in found) == [("p1",), ("p2",)]
    room_ids = {n.event.room_id for n in found}
    colors = {n.event.color for n in found}
    assert len(room_ids) == 1
    assert colors == {Color.BLACK, Color.WHITE}

    room_id = room_ids.pop()
    assert service.queue.waiting() == []
    assert sorted(_seated(service.registry, room_id)) == ["p1", "p2"]
    assert service.registry.room_of("p1") == room_id

    state = _only(notifications, StateEvent)
    assert set(state.recipients) == {"p1", "p2"}
    assert state.event.message == "Match found"
    assert state.event.turn == Color.BLACK
    assert state.event.board == Board.initial().to_grid()


def test_match_found_color_matches_binding(service: OthelloService) -> None:
    service.join_queue("p1")
    notifications = service.join_queue("p2")
    for notification in _events_of(notifications, MatchFoundEvent):
        (participant,) = notification.recipients
        with service.registry.session(notification.event.room_id) as game:
            assert game.color_of(participant) == notification.event.color


def test_match_gets_a_fresh_room_when_its_id_is_taken() -> None:
    twin = MatchmakingQueue(rng=random.Random(7))
    twin.enqueue("p1")
    twin.enqueue("p2")
    taken = twin.pop_pair().room_id

    service = OthelloService(queue=MatchmakingQueue(rng=random.Random(7)))
    service.join_room("squatter", taken)
    service.join_queue("p1")
    notifications = service.join_queue("p2")

    found = _events_of(notifications, MatchFoundEvent)
    room_ids = {n.event.room_id for n in found}
    assert len(found) == 2
    assert len(room_ids) == 1
    room_id = room_ids.pop()
    assert room_id != taken
    assert room_id.startswith("q-")
    assert sorted(_seated(service.registry, room_id)) == ["p1", "p2"]
    assert _seated(service.registry, taken) == ["squatter"]


def test_cancel_queue(service: OthelloService) -> None:
    service.join_queue("p1")
    notifications = service.cancel_queue("p1")
    assert notifications == [Notification(("p1",), QueueCancelledEvent())]
    assert service.queue.waiting() == []

    # cancelled participant cannot be paired anymore
    assert _events_of(service.join_queue("p2"), MatchFoundEvent) == []


def test_cancel_queue_when_not_waiting_is_acknowledged(service: OthelloService) -> None:
    assert service.cancel_queue("p1") == [Notification(("p1",), QueueCancelledEvent())]


def test_matched_player_leaves_previous_room(seated: OthelloService) -> None:
    seated.join_queue("alice")
    notifications = seated.join_queue("carol")

    left = _only(notifications, MessageEvent)
    assert left.recipients == ("bob",)
    assert left.event.type == NoticeType.LEFT
    assert left.event.color == Color.BLACK
    assert seated.registry.room_of("alice") != ROOM


# --- SERVICE - ROOMS ----
def test_join_room(service: OthelloService) -> None:
    notifications = service.join_room("alice", ROOM)

    joined = _only(notifications, RoomJoinedEvent)
    assert joined.recipients == ("alice",)
    assert joined.event == RoomJoinedEvent(room_id=ROOM, color=Color.BLACK)

    state = _only(notifications, StateEvent)
    assert state.recipients == ("alice",)
    assert state.event.message == "BLACK joined"


def test_second_join_gets_white_and_both_see_state(service: OthelloService) -> None:
    service.join_room("alice", ROOM)
    notifications = service.join_room("bob", ROOM)

    assert _only(notifications, RoomJoinedEvent).event.color == Color.WHITE
    state = _only(notifications, StateEvent)
    assert state.recipients == ("alice", "bob")
    assert state.event.message == "WHITE joined"


def test_join_room_with_requested_color(service: OthelloService) -> None:
    notifications = service.join_room("alice", ROOM, Color.WHITE)
    assert _only(notifications, RoomJoinedEvent).event.color == Color.WHITE
    notifications = service.join_room("bob", ROOM)
    assert _only(notifications, RoomJoinedEvent).event.color == Color.BLACK


def test_third_join_is_rejected(seated: OthelloService) -> None:
    notifications = seated.join_room("carol", ROOM)
    assert notifications == [Notification(("carol",), RoomFullEvent())]
    assert seated.registry.room_of("carol") is None


def test_rejoining_same_room_keeps_color(seated: OthelloService) -> None:
    notifications = seated.join_room("bob", ROOM)
    assert _only(notifications, RoomJoinedEvent).event.color == Color.WHITE
    assert _seated(seated.registry, ROOM) == ["alice", "bob"]


def test_joining_another_room_leaves_the_first(seated: OthelloService) -> None:
    notifications = seated.join_room("alice", "elsewhere")

    left = _only(notifications, MessageEvent)
    assert left.recipients == ("bob",)
    assert left.event == MessageEvent(type=NoticeType.LEFT, color=Color.BLACK)
    assert seated.registry.room_of("alice") == "elsewhere"
    assert _seated(seated.registry, ROOM) == ["bob"]


def test_full_room_keeps_the_current_seat(seated: OthelloService) -> None:
    seated.join_room("carol", "busy")
    seated.join_room("dave", "busy")

    notifications = seated.join_room("alice", "busy")

    assert notifications == [Notification(("alice",), RoomFullEvent())]
    assert seated.registry.room_of("alice") == ROOM
    with seated.registry.session(ROOM) as game:
        assert game.status == Status.IN_PROGRESS
        assert game.result is None
        assert game.players == {Color.BLACK: "alice", Color.WHITE: "bob"}
    assert _seated(seated.registry, "busy") == ["carol", "dave"]


# --- SERVICE - MOVES ----
def test_place(seated: OthelloService) -> None:
    notifications = seated.place("alice", 2, 3)

    state = _only(notifications, StateEvent)
    assert state.recipients == ("alice", "bob")
    assert state.event.turn == Color.WHITE
    assert state.event.score.black == 4
    assert state.event.score.white == 1
    assert state.event.last_move is not None
    assert (state.event.last_move.r, state.event.last_move.c) == (2, 3)
    assert state.event.last_move.flips == [(3, 3)]
    assert state.event.result is None


@pytest.mark.parametrize(
    "player, row, col, reason",
    [
        ("bob", 2, 4, InvalidReason.NOT_YOUR_TURN),
        ("alice", 0, 0, InvalidReason.INVALID_MOVE),
        ("alice", 3, 3, InvalidReason.INVALID_MOVE),
        ("alice", 8, 2, InvalidReason.INVALID_MOVE),
        ("alice", -1, -1, InvalidReason.INVALID_MOVE),
        ("carol", 2, 3, InvalidReason.NO_ACTIVE_SESSION),
    ],
)
def test_rejected_place_only_reaches_requester(
    seated: OthelloService, player: str, row: int, col: int, reason: InvalidReason
) -> None:
    notifications = seated.place(player, row, col)
    assert notifications == [Notification((player,), InvalidEvent(reason=reason))]
    with seated.registry.session(ROOM) as game:
        assert game.board == Board.initial()
        assert game.turn == Color.BLACK


def test_pass_is_announced_to_the_room(seated: OthelloService) -> None:
    _set_board(seated.registry, PASS_ROWS)
    notifications = seated.place("alice", 0, 2)

    notice = _only(notifications, MessageEvent)
    assert notice.recipients == ("alice", "bob")
    assert notice.event == MessageEvent(type=NoticeType.PASS, color=Color.WHITE)
    assert _only(notifications, StateEvent).event.turn == Color.BLACK
    # pass notice comes before the state it explains
    assert isinstance(notifications[-1].event, StateEvent)


def test_game_over_is_broadcast(seated: OthelloService) -> None:
    _set_board(seated.registry, LAST_MOVE_ROWS)
    notifications = seated.place("alice", 0, 2)

    state = _only(notifications, StateEvent)
    assert state.event.result is not None
    assert state.event.result.winner == "black"
    assert not state.event.result.draw
    assert seated.place("bob", 5, 5) == [
        Notification(("bob",), InvalidEvent(reason=InvalidReason.NOT_YOUR_TURN))
    ]


# --- SERVICE - RESTART ----
def test_restart_after_the_end(seated: OthelloService) -> None:
    _set_board(seated.registry, LAST_MOVE_ROWS)
    seated.place("alice", 0, 2)

    notifications = seated.restart("bob")
    state = _only(notifications, StateEvent)
    assert state.recipients == ("alice", "bob")
    assert state.event.message == "Game start"
    assert state.event.board == Board.initial().to_grid()
    assert state.event.turn == Color.BLACK
    assert state.event.result is None
    assert state.event.last_move is None
    with seated.registry.session(ROOM) as game:
        assert game.players == {Color.BLACK: "alice", Color.WHITE: "bob"}


def test_restart_without_room(service: OthelloService) -> None:
    assert service.restart("alice") == [
        Notification(("alice",), InvalidEvent(reason=InvalidReason.NO_ACTIVE_SESSION))
    ]


# --- SERVICE - DISCONNECT ----
def test_disconnect_of_turn_holder_forfeits(seated: OthelloService) -> None:
    notifications = seated.disconnect("alice")

    notice = _only(notifications, MessageEvent)
    assert notice.recipients == ("bob",)
    assert notice.event == MessageEvent(type=NoticeType.LEFT, color=Color.BLACK)

    state = _only(notifications, StateEvent)
    assert state.recipients == ("bob",)
    assert state.event.result is not None
    assert state.event.result.winner == "white"
    assert state.event.result.reason == "opponent left"

    # the game is over: nothing can be placed anymore
    assert seated.place("bob", 2, 4) == [
        Notification(("bob",), InvalidEvent(reason=InvalidReason.NOT_YOUR_TURN))
    ]
    assert seated.place("alice", 2, 3) == [
        Notification(
            ("alice",), InvalidEvent(reason=InvalidReason.NO_ACTIVE_SESSION)
        )
    ]


def test_disconnect_after_the_end_keeps_result(seated: OthelloService) -> None:
    _set_board(seated.registry, LAST_MOVE_ROWS)
    seated.place("alice", 0, 2)

    notifications = seated.disconnect("bob")
    assert _only(notifications, MessageEvent).event.type == NoticeType.LEFT
    assert _events_of(notifications, StateEvent) == []
    with seated.registry.session(ROOM) as game:
        assert game.result is not None
        assert game.result.winner == Color.BLACK


def test_disconnect_removes_from_queue(service: OthelloService) -> None:
    service.join_queue("p1")
    assert service.disconnect("p1") == []
    assert service.queue.waiting() == []


def test_disconnect_of_unknown_participant(service: OthelloService) -> None:
    assert service.disconnect("ghost") == []


def test_freed_seat_can_be_taken(seated: OthelloService) -> None:
    seated.disconnect("alice")
    notifications = seated.join_room("carol", ROOM)
    assert _only(notifications, RoomJoinedEvent).event.color == Color.BLACK


# --- SERVICE - DISPATCH ----
@pytest.mark.parametrize(
    "command, expected_type",
    [
        (JoinQueueCommand(), QueueJoinedEvent),
        (CancelQueueCommand(), QueueCancelledEvent),
        (JoinRoomCommand(room_id=ROOM), RoomJoinedEvent),
        (PlaceCommand(r=2, c=3), InvalidEvent),
        (RestartCommand(), InvalidEvent),
    ],
)
def test_handle_dispatches_commands(
    service: OthelloService, command, expected_type: Type[Event]
) -> None:
    notifications = service.handle("alice", command)
    assert isinstance(notifications[0].event, expected_type)
    assert notifications[0].recipients == ("alice",)
