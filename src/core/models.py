"""
Boundary layer data model(s).

These objects are how the Service reads a game: the domain layer (Game) produces them,
and the API layer turns them into outbound events.
(Decouples the domain objects from what actually travels across the boundary)
"""

from dataclasses import dataclass
from typing import Optional

# Type aliases to make GameModel easier to read
StoneColor = str
ParticipantId = str


@dataclass
class LastMoveModel:
    row: int
    col: int
    flips: list[tuple[int, int]]
    color: StoneColor


@dataclass
class ResultModel:
    winner: Optional[StoneColor]
    draw: bool
    reason: Optional[str]


@dataclass
class GameModel:
    """Transport-safe snapshot of a single Othello game."""

    board: list[list[int]]
    turn: StoneColor
    status: str
    last_move: Optional[LastMoveModel]
    result: Optional[ResultModel]
    score: dict[StoneColor, int]
    registered_players: dict[StoneColor, ParticipantId]
