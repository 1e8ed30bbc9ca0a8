"""
Placement and flipping rules

Key idea: a placement is legal when at least one ray cast from it crosses an unbroken line of opponent stones
and lands on one of your own. Everything else (turn order, passing, the end of the game) is built on top by Game.
"""

from dataclasses import dataclass
from typing import Optional

from src.core.shared_types import Color
from src.othello.board import Board, Stone
from src.othello.square import Square, Vector, all_squares

# The 8 compass directions as (row, col) steps: N, NE, E, SE, S, SW, W, NW
DIRECTIONS: list[Vector] = [
    (-1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, -1),
]


@dataclass(frozen=True)
class Move:
    """A candidate placement together with the opponent stones it would turn over."""

    square: Square
    flips: tuple[Square, ...]

    @property
    def is_legal(self) -> bool:
        return len(self.flips) > 0


# --- RAYCASTING ---
def flips_along(
    board: Board, color: Color, square: Square, direction: Vector
) -> list[Square]:
    """
    Walk from `square` in one direction, collecting opponent stones.
    ---

    The collected stones only count when the walk ends on a stone of `color`.
    Running off the board or into an empty square throws the whole line away.
    """
    own = Stone.of(color)
    opponent = Stone.of(color.opponent)

    line: list[Square] = []
    current = square.shifted(direction)
    while current.is_within_bounds() and board.stone(current) == opponent:
        line.append(current)
        current = current.shifted(direction)

    if current.is_within_bounds() and board.stone(current) == own:
        return line
    return []


def find_flips(board: Board, color: Color, square: Square) -> tuple[Square, ...]:
    """All stones flipped by placing `color` on `square`. Empty for illegal placements."""
    if not square.is_within_bounds() or not board.is_empty(square):
        return ()

    flips: list[Square] = []
    for direction in DIRECTIONS:
        flips.extend(flips_along(board, color, square, direction))
    return tuple(flips)


# --- MOVE GENERATION ---
def legal_moves(board: Board, color: Color) -> list[Move]:
    """Every legal placement for `color`, in row-major order."""
    moves: list[Move] = []
    for square in all_squares():
        flips = find_flips(board, color, square)
        if flips:
            moves.append(Move(square, flips))
    return moves


def has_legal_move(board: Board, color: Color) -> bool:
    return any(find_flips(board, color, square) for square in all_squares())


# --- SCORING / END OF GAME ---
def score(board: Board) -> dict[Color, int]:
    return {color: board.count(color) for color in Color}


def is_terminal(board: Board) -> bool:
    """The game is over when neither side can move (a full board is just one way to get there)."""
    return not any(has_legal_move(board, color) for color in Color)


def winner(board: Board) -> Optional[Color]:
    """Color with strictly more stones. None means a draw."""
    counts = score(board)
    if counts[Color.BLACK] == counts[Color.WHITE]:
        return None
    return Color.BLACK if counts[Color.BLACK] > counts[Color.WHITE] else Color.WHITE
