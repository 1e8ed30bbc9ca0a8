"""
Custom exceptions.

Every error the domain/service layers raise derives from GameError, so the layer above only needs to catch one type.
None of these are fatal: they reject the command that caused them and leave the game state as it was.
"""


class GameError(Exception):
    """Root of all game related errors."""


class GameStateError(GameError):
    """The game is not in a state that allows the request."""


class NotYourTurnError(GameError):
    """A player tried to move while it was not their turn (or the game is over)."""


class IllegalMoveError(GameError):
    """The placement would not flip a single stone."""


class RoomFullError(GameError):
    """Both colors in the room are already taken."""


class NoActiveSessionError(GameError):
    """The participant is not seated in any game (or the room does not exist)."""


class InvalidRequestError(GameError):
    """Incoming command could not be parsed/validated."""
