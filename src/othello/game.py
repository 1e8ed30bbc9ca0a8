"""
The Game class is the entrypoint into the domain layer for the service layer.
It owns the state of a single match (board, whose turn it is, how it ended) and enforces turn order on top of the
placement rules in rules.py.
"""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    NotYourTurnError,
    RoomFullError,
)
from src.core.models import GameModel, LastMoveModel, ResultModel
from src.core.shared_types import FIRST_COLOR, Color, Status
from src.othello import rules
from src.othello.board import Board
from src.othello.rules import Move
from src.othello.square import Square

FORFEIT_REASON = "opponent left"


@dataclass(frozen=True)
class Result:
    """How a game ended. No winner means a draw."""

    winner: Optional[Color]
    reason: Optional[str] = None

    @property
    def is_draw(self) -> bool:
        return self.winner is None

    def to_model(self) -> ResultModel:
        return ResultModel(
            winner=self.winner.value if self.winner else None,
            draw=self.is_draw,
            reason=self.reason,
        )


@dataclass(frozen=True)
class PlayedMove:
    move: Move
    color: Color

    def to_model(self) -> LastMoveModel:
        return LastMoveModel(
            row=self.move.square.row,
            col=self.move.square.col,
            flips=[flip.to_pair() for flip in self.move.flips],
            color=self.color.value,
        )


@dataclass(frozen=True)
class MoveOutcome:
    """What happened after an accepted move. `passed` names the color that has to sit out its turn."""

    played: PlayedMove
    passed: Optional[Color] = None
    result: Optional[Result] = None


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    turn: Color
    status: Status
    players: dict[Color, str] = field(default_factory=dict)
    last_move: Optional[PlayedMove] = None
    result: Optional[Result] = None

    @classmethod
    def new_game(cls) -> Self:
        """Fresh board, first color to move, nobody seated yet."""
        return cls(board=Board.initial(), turn=FIRST_COLOR, status=Status.IN_PROGRESS)

    @property
    def is_over(self) -> bool:
        return self.status != Status.IN_PROGRESS

    @property
    def is_full(self) -> bool:
        return len(self.players) >= len(Color)

    def color_of(self, player: str) -> Optional[Color]:
        return next(
            (color for color, name in self.players.items() if name == player), None
        )

    def register_player(self, player: str, color: Optional[Color] = None) -> Color:
        """
        Seat a player
        ----

        * Already seated? Keep your color.
        * Requested color free? You get it.
        * Otherwise you get whichever color is still free (first color if both are).
        """
        existing = self.color_of(player)
        if existing is not None:
            return existing

        if self.is_full:
            raise RoomFullError("Both colors are already taken.")

        if color is not None and color not in self.players:
            assigned = color
        else:
            assigned = next(
                free for free in (FIRST_COLOR, FIRST_COLOR.opponent) if free not in self.players
            )
        self.players[assigned] = player
        return assigned

    def unregister_player(self, player: str) -> Optional[Color]:
        """Free the player's seat. Returns the color they held."""
        color = self.color_of(player)
        if color is not None:
            del self.players[color]
        return color

    def legal_moves(self, player: str) -> list[Move]:
        """Placements the player may make right now (empty when it's not their turn)."""
        if self.is_over or self.color_of(player) != self.turn:
            return []
        return rules.legal_moves(self.board, self.turn)

    def make_move(self, player: str, square: Square) -> MoveOutcome:
        """
        Attempt a placement
        -----

        1. game must be in progress and it must be your turn
        2. the placement must flip at least one stone
        3. update the board and remember the move
        4. opponent can move? their turn. Otherwise you go again (they pass). Neither can move? game over.
        """
        color = self.color_of(player)
        if self.is_over or color != self.turn:
            raise NotYourTurnError(
                f"It is not your turn. status: {self.status}, turn: {self.turn}"
            )

        flips = rules.find_flips(self.board, color, square)
        if not flips:
            raise IllegalMoveError(f"Move not allowed: {square}")

        played = PlayedMove(Move(square, flips), color)
        self.board = self.board.with_move_applied(color, square, flips)
        self.last_move = played

        return self._advance_turn(played)

    def restart(self) -> None:
        """Back to the opening position. Seated players keep their colors."""
        self.board = Board.initial()
        self.turn = FIRST_COLOR
        self.status = Status.IN_PROGRESS
        self.last_move = None
        self.result = None

    def forfeit(self, color: Color) -> Optional[Result]:
        """The player with `color` left: the other color wins. No-op once the game is over."""
        if self.is_over:
            return None
        self.result = Result(winner=color.opponent, reason=FORFEIT_REASON)
        self._change_status(Status.FORFEITED)
        return self.result

    def score(self) -> dict[Color, int]:
        return rules.score(self.board)

    def to_model(self) -> GameModel:
        """Encode into the format the Service layer uses"""
        return GameModel(
            board=self.board.to_grid(),
            turn=self.turn.value,
            status=self.status.value,
            last_move=self.last_move.to_model() if self.last_move else None,
            result=self.result.to_model() if self.result else None,
            score={color.value: count for color, count in self.score().items()},
            registered_players={
                color.value: player for color, player in self.players.items()
            },
        )

    # -- PRIVATE HELPERS ---
    def _advance_turn(self, played: PlayedMove) -> MoveOutcome:
        """NOTE the board has already been updated at this point."""
        mover = played.color
        opponent = mover.opponent

        if rules.has_legal_move(self.board, opponent):
            self.turn = opponent
            return MoveOutcome(played)

        if rules.has_legal_move(self.board, mover):
            # opponent is stuck: mover goes again
            return MoveOutcome(played, passed=opponent)

        self.result = Result(winner=rules.winner(self.board))
        self._change_status(Status.FINISHED)
        return MoveOutcome(played, result=self.result)

    def _change_status(self, new_status: Status) -> None:
        if self.status != Status.IN_PROGRESS and new_status != Status.IN_PROGRESS:
            raise GameStateError(f"Game already ended. status: {self.status}")
        self.status = new_status
