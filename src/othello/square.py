"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# (rows, columns)
BOARD_DIMENSIONS = (8, 8)

Vector = tuple[int, int]


@dataclass(frozen=True)
class Square:
    row: int
    col: int

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_DIMENSIONS[0]) and (
            0 <= self.col < BOARD_DIMENSIONS[1]
        )

    def shifted(self, direction: Vector) -> Square:
        """The neighbouring square one step along `direction` (may be off the board)."""
        dr, dc = direction
        return Square(self.row + dr, self.col + dc)

    def to_pair(self) -> tuple[int, int]:
        return (self.row, self.col)


def all_squares() -> list[Square]:
    """Row-major listing of every square on the board."""
    return [
        Square(row, col)
        for row in range(BOARD_DIMENSIONS[0])
        for col in range(BOARD_DIMENSIONS[1])
    ]
