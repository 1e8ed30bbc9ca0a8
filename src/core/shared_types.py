"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    FINISHED = "finished"
    FORFEITED = "forfeited"


class Color(StrEnum):
    BLACK = "black"
    WHITE = "white"

    @property
    def opponent(self) -> "Color":
        return Color.WHITE if self == Color.BLACK else Color.BLACK


# Black always opens the game (and re-opens it after a restart)
FIRST_COLOR = Color.BLACK


class NoticeType(StrEnum):
    """Side-channel notices sent to a room next to the regular state broadcast."""

    PASS = "pass"
    LEFT = "left"


class InvalidReason(StrEnum):
    NOT_YOUR_TURN = "Not your turn"
    INVALID_MOVE = "Invalid move"
    NO_ACTIVE_SESSION = "No active session"
    MALFORMED_COMMAND = "Malformed command"
