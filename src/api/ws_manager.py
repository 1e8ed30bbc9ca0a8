"""
WebSocket manager: open connections by participant id, delivery of service notifications.
"""

import logging
from typing import Iterable

from fastapi import WebSocket

from src.services.othello_service import Notification

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self) -> None:
        self._by_participant: dict[str, WebSocket] = {}

    def connect(self, participant_id: str, ws: WebSocket) -> None:
        self._by_participant[participant_id] = ws

    def disconnect(self, participant_id: str) -> None:
        self._by_participant.pop(participant_id, None)

    async def send_to_participant(self, participant_id: str, payload: dict) -> bool:
        ws = self._by_participant.get(participant_id)
        if ws is None:
            return False
        try:
            await ws.send_json(payload)
            return True
        except Exception as e:
            logger.warning("send_to_participant %s: %s", participant_id, e)
            return False

    async def deliver(self, notifications: Iterable[Notification]) -> None:
        """Send every notification, in order, to each of its recipients."""
        for notification in notifications:
            payload = notification.event.to_wire()
            for participant_id in notification.recipients:
                await self.send_to_participant(participant_id, payload)
