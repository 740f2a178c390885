from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from tycoon.exceptions import (
    InvalidActionError,
    NotYourTurnError,
    PlayerNotInRoomError,
    RoomNotFoundError,
    RoomStateError,
    TycoonError,
)
from tycoon.rules import parse_action
from tycoon.snapshot import serialize_state

from .registry import RoomRegistry
from .schemas import (
    ActionRequest,
    ActionResponse,
    CreateRoomRequest,
    JoinRoomRequest,
    RoomTicket,
    StartGameRequest,
    UndoRequest,
)
from .settings import ServerSettings, get_server_settings

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    RoomNotFoundError: 404,
    PlayerNotInRoomError: 403,
    NotYourTurnError: 403,
    RoomStateError: 400,
    InvalidActionError: 400,
}


def _http_error(exc: TycoonError) -> HTTPException:
    status = next((code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)), 400)
    return HTTPException(status_code=status, detail=str(exc))


def _registry(request: Request) -> RoomRegistry:
    return request.app.state.registry


def create_app(settings: Optional[ServerSettings] = None) -> FastAPI:
    """Build the room server app."""
    settings = settings or get_server_settings()
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting Tycoon room server (CORS origins: {settings.origin_list})")
        yield
        logger.info("Shutting down Tycoon room server")

    app = FastAPI(title="Tycoon Room Server", version="0.1.0", lifespan=lifespan)
    app.state.registry = RoomRegistry(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origin_list,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/")
    async def root():
        return {"ok": True, "message": "Tycoon game API"}

    @app.post("/api/room/create", response_model=RoomTicket)
    async def create_room(req: CreateRoomRequest, request: Request):
        code, player = await _registry(request).create_room(req.player_name)
        return RoomTicket(room_code=code, player_id=player.id, player_index=player.index)

    @app.post("/api/room/join", response_model=RoomTicket)
    async def join_room(req: JoinRoomRequest, request: Request):
        try:
            code, player = await _registry(request).join_room(req.room_code, req.player_name)
        except TycoonError as exc:
            raise _http_error(exc)
        return RoomTicket(room_code=code, player_id=player.id, player_index=player.index)

    @app.get("/api/room/{room_code}")
    async def get_room(room_code: str, request: Request, player_id: Optional[str] = None):
        try:
            return await _registry(request).view_room(room_code, player_id)
        except TycoonError as exc:
            raise _http_error(exc)

    @app.post("/api/room/{room_code}/start")
    async def start_game(room_code: str, req: StartGameRequest, request: Request) -> Dict[str, Any]:
        try:
            state = await _registry(request).start_game(room_code, req.player_id)
        except TycoonError as exc:
            raise _http_error(exc)
        return serialize_state(state)

    @app.post("/api/room/{room_code}/action", response_model=ActionResponse)
    async def submit_action(room_code: str, req: ActionRequest, request: Request):
        registry = _registry(request)
        try:
            action = parse_action({**req.payload, "type": req.type})
            first = None
            if req.apply_first is not None:
                first = parse_action({**req.apply_first.payload, "type": req.apply_first.type})
            result = await registry.submit_action(room_code, req.player_id, action, first)
            room = await registry.get_room(room_code)
        except TycoonError as exc:
            raise _http_error(exc)
        return ActionResponse(
            accepted=result.accepted,
            reason=result.reason,
            game_state=serialize_state(result.state),
            game_log=[e.to_dict() for e in room.log.get_events()],
        )

    @app.post("/api/room/{room_code}/undo")
    async def undo(room_code: str, req: UndoRequest, request: Request) -> Dict[str, Any]:
        try:
            state = await _registry(request).undo(room_code, req.player_id)
        except TycoonError as exc:
            raise _http_error(exc)
        return serialize_state(state)

    return app


app = create_app()


def main() -> None:
    import uvicorn

    settings = get_server_settings()
    uvicorn.run("server.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
