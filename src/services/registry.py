"""In-memory registry of running games and of which participant sits in which room."""

import logging
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from src.core.exceptions import NoActiveSessionError
from src.core.shared_types import Color
from src.othello.game import Game

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    game: Game
    # Serializes every read-modify-write on this one game
    lock: threading.RLock = field(default_factory=threading.RLock)


class SessionRegistry:
    """
    Owns every Game
    ----

    Callers never hold on to a Game: they go through `session(room_id)`, which hands out the game only while its lock is held.
    Participant bindings (participant -> room) live here as well, so nothing about a game is tied to a connection object.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SessionEntry] = {}
        self._bindings: dict[str, str] = {}
        self._lock = threading.Lock()

    # --- SESSIONS ---
    def ensure_session(self, room_id: str) -> bool:
        """Create the room's game on first use. Returns True if it was just created."""
        with self._lock:
            if room_id in self._sessions:
                return False
            self._sessions[room_id] = SessionEntry(Game.new_game())
        logger.info("Created room %s", room_id)
        return True

    def create_session(self, room_id: str) -> bool:
        """Store a brand new game, unless the identifier is already in use (then nothing happens and False is returned)."""
        with self._lock:
            if room_id in self._sessions:
                logger.warning("Room %s already exists, not created", room_id)
                return False
            self._sessions[room_id] = SessionEntry(Game.new_game())
        logger.info("Created room %s", room_id)
        return True

    def has_session(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._sessions

    @contextmanager
    def session(self, room_id: str) -> Iterator[Game]:
        """Exclusive access to a room's game for the duration of the `with` block."""
        entry = self._entry(room_id)
        with entry.lock:
            yield entry.game

    @contextmanager
    def sessions(self, *room_ids: str) -> Iterator[list[Game]]:
        """
        Exclusive access to several games at once, yielded in the order the rooms were given.

        Locks are always taken in sorted room order, so two callers locking the same rooms cannot deadlock.
        """
        entries = {room_id: self._entry(room_id) for room_id in room_ids}
        with ExitStack() as stack:
            for room_id in sorted(entries):
                stack.enter_context(entries[room_id].lock)
            yield [entries[room_id].game for room_id in room_ids]

    # --- PARTICIPANT BINDINGS ---
    def bind_participant(
        self, room_id: str, participant_id: str, requested_color: Optional[Color] = None
    ) -> Color:
        """
        Seat a participant in a room.

        Raises RoomFullError (from the Game) when both colors are taken. Nothing changes in that case.
        """
        entry = self._entry(room_id)
        with entry.lock:
            color = entry.game.register_player(participant_id, requested_color)
            with self._lock:
                self._bindings[participant_id] = room_id
        return color

    def unbind_participant(self, participant_id: str) -> Optional[tuple[str, Color]]:
        """Free the participant's seat. Returns (room_id, color) they held, or None if they were not seated."""
        with self._lock:
            room_id = self._bindings.pop(participant_id, None)
            entry = self._sessions.get(room_id) if room_id is not None else None
        if entry is None:
            return None
        with entry.lock:
            color = entry.game.unregister_player(participant_id)
        if color is None:
            return None
        return room_id, color

    def room_of(self, participant_id: str) -> Optional[str]:
        with self._lock:
            return self._bindings.get(participant_id)

    # -- Internal helpers --
    def _entry(self, room_id: str) -> SessionEntry:
        with self._lock:
            entry = self._sessions.get(room_id)
        if entry is None:
            raise NoActiveSessionError(f"Room {room_id!r} not found.")
        return entry
