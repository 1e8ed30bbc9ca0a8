"""Orchestration of participant commands to the matchmaking queue and running games (and the notifications that result)."""

import logging
from dataclasses import dataclass
from typing import Optional

from src.api.models import (
    CancelQueueCommand,
    Command,
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
from src.core.exceptions import (
    IllegalMoveError,
    NoActiveSessionError,
    NotYourTurnError,
)
from src.core.shared_types import Color, InvalidReason, NoticeType
from src.othello.game import Game
from src.othello.square import Square
from src.services.matchmaking import MatchmakingQueue
from src.services.registry import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """An event and who should receive it. Delivery is up to the transport."""

    recipients: tuple[str, ...]
    event: Event


class OthelloService:
    """
    Coordination of participants and games.
    ----

    `handle` takes one command from one participant and returns every notification it causes.
    The service keeps no game state itself: games live in the registry, waiting participants in the queue.
    """

    def __init__(
        self,
        registry: Optional[SessionRegistry] = None,
        queue: Optional[MatchmakingQueue] = None,
    ) -> None:
        self.registry = registry or SessionRegistry()
        self.queue = queue or MatchmakingQueue()

    # -- Dispatch --
    def handle(self, participant_id: str, command: Command) -> list[Notification]:
        """Single entrypoint for participant commands."""
        match command:
            case JoinQueueCommand():
                return self.join_queue(participant_id)
            case CancelQueueCommand():
                return self.cancel_queue(participant_id)
            case JoinRoomCommand():
                return self.join_room(participant_id, command.room_id, command.color)
            case PlaceCommand():
                return self.place(participant_id, command.r, command.c)
            case RestartCommand():
                return self.restart(participant_id)
        raise TypeError(f"Unsupported command: {command!r}")

    # -- Matchmaking --
    def join_queue(self, participant_id: str) -> list[Notification]:
        """Wait for an opponent. Duplicate requests are ignored."""
        if not self.queue.enqueue(participant_id):
            return []

        notifications = [self._to(participant_id, QueueJoinedEvent())]
        match = self.queue.pop_pair()
        if match is None:
            return notifications

        room_id = match.room_id
        while not self.registry.create_session(room_id):
            room_id = self.queue.new_room_id()

        # both players might still be sitting in an older room
        for player in match.colors:
            notifications.extend(self._leave_room(player))

        with self.registry.session(room_id) as game:
            for player, color in match.colors.items():
                self.registry.bind_participant(room_id, player, color)
                notifications.append(
                    self._to(player, MatchFoundEvent(room_id=room_id, color=color))
                )
            notifications.append(self._state(game, message="Match found"))
        return notifications

    def cancel_queue(self, participant_id: str) -> list[Notification]:
        """Stop waiting. Always acknowledged, also when the participant was not waiting."""
        self.queue.cancel(participant_id)
        return [self._to(participant_id, QueueCancelledEvent())]

    # -- Rooms --
    def join_room(
        self, participant_id: str, room_id: str, color: Optional[Color] = None
    ) -> list[Notification]:
        """
        Take a seat in a named room (which gets created if it doesn't exist yet).

        A full room rejects the request before anything else happens, so a seat held elsewhere is kept.
        """
        self.registry.ensure_session(room_id)
        previous = self.registry.room_of(participant_id)
        switching = previous not in (None, room_id)
        rooms = (room_id, previous) if switching else (room_id,)

        with self.registry.sessions(*rooms) as (game, *_):
            if game.is_full and game.color_of(participant_id) is None:
                logger.debug("Room %s is full, rejected %s", room_id, participant_id)
                return [self._to(participant_id, RoomFullEvent())]

            notifications: list[Notification] = []
            if switching:
                notifications.extend(self._leave_room(participant_id))
            assigned = self.registry.bind_participant(room_id, participant_id, color)

            logger.info("%s joined room %s as %s", participant_id, room_id, assigned)
            notifications.append(
                self._to(participant_id, RoomJoinedEvent(room_id=room_id, color=assigned))
            )
            notifications.append(
                self._state(game, message=f"{assigned.name} joined")
            )
        return notifications

    # -- Game commands --
    def place(self, participant_id: str, row: int, col: int) -> list[Notification]:
        """Attempt a placement in the participant's current room."""
        room_id = self.registry.room_of(participant_id)
        if room_id is None:
            return [self._invalid(participant_id, InvalidReason.NO_ACTIVE_SESSION)]

        try:
            with self.registry.session(room_id) as game:
                outcome = game.make_move(participant_id, Square(row, col))
                notifications: list[Notification] = []
                if outcome.passed is not None:
                    notifications.append(
                        self._to_room(
                            game,
                            MessageEvent(type=NoticeType.PASS, color=outcome.passed),
                        )
                    )
                if outcome.result is not None:
                    logger.info("Game in room %s finished: %s", room_id, outcome.result)
                notifications.append(self._state(game))
                return notifications
        except NotYourTurnError as error:
            logger.debug("Rejected move by %s: %s", participant_id, error)
            return [self._invalid(participant_id, InvalidReason.NOT_YOUR_TURN)]
        except IllegalMoveError as error:
            logger.debug("Rejected move by %s: %s", participant_id, error)
            return [self._invalid(participant_id, InvalidReason.INVALID_MOVE)]
        except NoActiveSessionError:
            return [self._invalid(participant_id, InvalidReason.NO_ACTIVE_SESSION)]

    def restart(self, participant_id: str) -> list[Notification]:
        """Fresh board for the participant's room. Everybody keeps their seat."""
        room_id = self.registry.room_of(participant_id)
        if room_id is None:
            return [self._invalid(participant_id, InvalidReason.NO_ACTIVE_SESSION)]

        with self.registry.session(room_id) as game:
            game.restart()
            logger.info("Room %s restarted by %s", room_id, participant_id)
            return [self._state(game, message="Game start")]

    # -- Lifecycle --
    def disconnect(self, participant_id: str) -> list[Notification]:
        """Connection is gone: leave the queue, leave the room (forfeiting a running game)."""
        self.queue.cancel(participant_id)
        return self._leave_room(participant_id)

    # -- Internal helpers --
    def _leave_room(self, participant_id: str) -> list[Notification]:
        """Give up the seat the participant holds, if any. The remaining player wins a running game."""
        room_id = self.registry.room_of(participant_id)
        if room_id is None:
            return []

        with self.registry.session(room_id) as game:
            color = game.color_of(participant_id)
            self.registry.unbind_participant(participant_id)
            if color is None:
                return []

            notifications = [
                self._to_room(game, MessageEvent(type=NoticeType.LEFT, color=color))
            ]
            if game.forfeit(color) is not None:
                logger.info(
                    "%s left room %s, %s wins by forfeit",
                    participant_id,
                    room_id,
                    color.opponent,
                )
                notifications.append(self._state(game))
            return notifications

    def _state(self, game: Game, message: Optional[str] = None) -> Notification:
        """Current game state for everybody in the room. Call while holding the room's lock."""
        event = StateEvent.from_model(game.to_model(), message=message)
        return self._to_room(game, event)

    def _to_room(self, game: Game, event: Event) -> Notification:
        recipients = tuple(
            game.players[color] for color in Color if color in game.players
        )
        return Notification(recipients=recipients, event=event)

    def _to(self, participant_id: str, event: Event) -> Notification:
        return Notification(recipients=(participant_id,), event=event)

    def _invalid(self, participant_id: str, reason: InvalidReason) -> Notification:
        return self._to(participant_id, InvalidEvent(reason=reason))
