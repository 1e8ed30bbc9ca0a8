"""
Othello session server: HTTP + WebSocket entrypoint.

The websocket loop only translates: JSON frames in -> commands for the service, notifications out -> JSON frames.
"""

import json
import logging
from typing import Optional
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from src.api.models import InvalidEvent, parse_command
from src.api.ws_manager import ConnectionManager
from src.core.config import get_settings
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import InvalidReason
from src.services.matchmaking import MatchmakingQueue
from src.services.othello_service import OthelloService

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def create_app(service: Optional[OthelloService] = None) -> FastAPI:
    """Build the application around a service (a fresh one unless supplied, e.g. by tests)."""
    service = service or OthelloService(
        queue=MatchmakingQueue(room_id_prefix=settings.room_id_prefix)
    )
    manager = ConnectionManager()

    app = FastAPI(title="Othello server")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "Othello server up"

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket) -> None:
        await ws.accept()
        participant_id = str(uuid4())
        manager.connect(participant_id, ws)
        logger.info("WS: %s connected from %s", participant_id, ws.client)
        try:
            while True:
                raw = await ws.receive_text()
                await handle_frame(service, manager, participant_id, raw)
        except WebSocketDisconnect as e:
            logger.info("WS: %s disconnected code=%s", participant_id, e.code)
        except Exception as e:
            logger.exception("WS: error participant_id=%s: %s", participant_id, e)
        finally:
            manager.disconnect(participant_id)
            await manager.deliver(service.disconnect(participant_id))

    return app


async def handle_frame(
    service: OthelloService,
    manager: ConnectionManager,
    participant_id: str,
    raw: str,
) -> None:
    """One inbound text frame. Anything unreadable is answered with `invalid` and otherwise ignored."""
    try:
        command = parse_command(json.loads(raw))
    except (json.JSONDecodeError, InvalidRequestError) as e:
        logger.warning("WS: malformed command from %s: %s", participant_id, e)
        await manager.send_to_participant(
            participant_id,
            InvalidEvent(reason=InvalidReason.MALFORMED_COMMAND).to_wire(),
        )
        return

    logger.debug("WS: %s from %s", command.type, participant_id)
    await manager.deliver(service.handle(participant_id, command))


app = create_app()


def main() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
