"""The board only knows where the stones are. All rules that decide where they may go live in rules.py"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional

from src.core.shared_types import Color
from src.othello.square import BOARD_DIMENSIONS, Square, all_squares


class Stone(IntEnum):
    """Content of a single cell. The integer values double as the wire format of the board."""

    EMPTY = 0
    BLACK = 1
    WHITE = 2

    @classmethod
    def of(cls, color: Color) -> Stone:
        return cls.BLACK if color == Color.BLACK else cls.WHITE

    @property
    def color(self) -> Optional[Color]:
        if self == Stone.EMPTY:
            return None
        return Color.BLACK if self == Stone.BLACK else Color.WHITE


TEXT_TO_STONE: dict[str, Stone] = {
    ".": Stone.EMPTY,
    "B": Stone.BLACK,
    "W": Stone.WHITE,
}

STONE_TO_TEXT: dict[Stone, str] = {value: key for key, value in TEXT_TO_STONE.items()}

Grid = tuple[tuple[Stone, ...], ...]


@dataclass(frozen=True)
class Board:
    cells: Grid

    @classmethod
    def empty(cls) -> Board:
        rows, cols = BOARD_DIMENSIONS
        return cls(tuple(tuple(Stone.EMPTY for _ in range(cols)) for _ in range(rows)))

    @classmethod
    def initial(cls) -> Board:
        """
        Standard opening position: the four center squares are taken, same colors diagonally opposed.

        ........
        ........
        ........
        ...WB...
        ...BW...
        ........
        ........
        ........
        """
        return cls.empty()._with_stones(
            {
                Square(3, 3): Stone.WHITE,
                Square(4, 4): Stone.WHITE,
                Square(3, 4): Stone.BLACK,
                Square(4, 3): Stone.BLACK,
            }
        )

    @classmethod
    def from_rows(cls, rows: Iterable[str]) -> Board:
        """Construct a board from a text diagram: one string per row, '.' for empty, 'B' for black, 'W' for white.

        Whitespace inside a row is ignored, so rows may be written as ". . B W . . . ." for readability.
        """
        parsed = [
            tuple(TEXT_TO_STONE[character] for character in row if not character.isspace())
            for row in rows
        ]
        if len(parsed) != BOARD_DIMENSIONS[0] or any(
            len(row) != BOARD_DIMENSIONS[1] for row in parsed
        ):
            raise ValueError(
                f"Board diagram must be {BOARD_DIMENSIONS[0]}x{BOARD_DIMENSIONS[1]}."
            )
        return cls(tuple(parsed))

    def to_rows(self) -> list[str]:
        return ["".join(STONE_TO_TEXT[stone] for stone in row) for row in self.cells]

    def to_grid(self) -> list[list[int]]:
        """Wire format: nested lists of 0 (empty), 1 (black), 2 (white)."""
        return [[int(stone) for stone in row] for row in self.cells]

    def stone(self, square: Square) -> Stone:
        return self.cells[square.row][square.col]

    def is_empty(self, square: Square) -> bool:
        return self.stone(square) == Stone.EMPTY

    def empty_squares(self) -> list[Square]:
        return [square for square in all_squares() if self.is_empty(square)]

    def count(self, color: Color) -> int:
        stone = Stone.of(color)
        return sum(row.count(stone) for row in self.cells)

    def with_move_applied(
        self, color: Color, square: Square, flips: Iterable[Square]
    ) -> Board:
        """
        New board with `color` placed on `square` and on every square in `flips`.

        NOTE: no legality checks happen here, the caller computed `flips` for this exact board and color.
        """
        stone = Stone.of(color)
        changes = {flip: stone for flip in flips}
        changes[square] = stone
        return self._with_stones(changes)

    def _with_stones(self, changes: dict[Square, Stone]) -> Board:
        return Board(
            tuple(
                tuple(
                    changes.get(Square(row_idx, col_idx), stone)
                    for col_idx, stone in enumerate(row)
                )
                for row_idx, row in enumerate(self.cells)
            )
        )
