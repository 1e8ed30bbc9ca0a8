"""
Matchmaking queue (in-memory).
First come, first served: the two participants that waited longest get paired into a new room.
"""

import logging
import random
import string
import threading
from dataclasses import dataclass
from typing import Optional

from src.core.shared_types import FIRST_COLOR, Color

logger = logging.getLogger(__name__)

ROOM_ID_ALPHABET = string.digits + string.ascii_lowercase
ROOM_ID_LENGTH = 6


@dataclass(frozen=True)
class Match:
    room_id: str
    colors: dict[str, Color]  # participant id -> assigned color


class MatchmakingQueue:
    """FIFO of waiting participants. Every method is atomic, so a pair is always taken out as one unit."""

    def __init__(
        self, rng: Optional[random.Random] = None, room_id_prefix: str = "q-"
    ) -> None:
        self._rng = rng or random.Random()
        self._room_id_prefix = room_id_prefix
        self._waiting: list[str] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._waiting)

    def __contains__(self, participant_id: object) -> bool:
        with self._lock:
            return participant_id in self._waiting

    def waiting(self) -> list[str]:
        """Snapshot of the queue, oldest first."""
        with self._lock:
            return list(self._waiting)

    def enqueue(self, participant_id: str) -> bool:
        """Add to the back of the queue. Returns False (and does nothing) if already waiting."""
        with self._lock:
            if participant_id in self._waiting:
                return False
            self._waiting.append(participant_id)
            return True

    def cancel(self, participant_id: str) -> bool:
        """Remove from the queue. Returns True if the participant was waiting."""
        with self._lock:
            if participant_id not in self._waiting:
                return False
            self._waiting.remove(participant_id)
            return True

    def pop_pair(self) -> Optional[Match]:
        """
        Take the two oldest participants out of the queue, if there are two.

        Colors come from a coin flip, so being first in the queue does not mean playing first.
        """
        with self._lock:
            if len(self._waiting) < 2:
                return None
            first = self._waiting.pop(0)
            second = self._waiting.pop(0)
            room_id = self._draw_room_id()
            heads = self._rng.random() < 0.5

        if heads:
            colors = {first: FIRST_COLOR, second: FIRST_COLOR.opponent}
        else:
            colors = {first: FIRST_COLOR.opponent, second: FIRST_COLOR}
        logger.info("Paired %s and %s into room %s", first, second, room_id)
        return Match(room_id=room_id, colors=colors)

    def new_room_id(self) -> str:
        """Another random room identifier, for when the one a match came with is already taken."""
        with self._lock:
            return self._draw_room_id()

    def _draw_room_id(self) -> str:
        suffix = "".join(self._rng.choice(ROOM_ID_ALPHABET) for _ in range(ROOM_ID_LENGTH))
        return f"{self._room_id_prefix}{suffix}"
