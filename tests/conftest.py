"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

import random

import pytest

from src.services.matchmaking import MatchmakingQueue
from src.services.othello_service import OthelloService
from src.services.registry import SessionRegistry


@pytest.fixture
def rng() -> random.Random:
    """Seeded source of randomness so pairing outcomes are reproducible."""
    return random.Random(1234)


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def queue(rng: random.Random) -> MatchmakingQueue:
    return MatchmakingQueue(rng=rng)


@pytest.fixture
def service(registry: SessionRegistry, queue: MatchmakingQueue) -> OthelloService:
    return OthelloService(registry=registry, queue=queue)
