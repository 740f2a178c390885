from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CreateRoomRequest(BaseModel):
    player_name: Optional[str] = None


class JoinRoomRequest(BaseModel):
    room_code: str
    player_name: Optional[str] = None


class RoomTicket(BaseModel):
    room_code: str
    player_id: str
    player_index: int


class StartGameRequest(BaseModel):
    player_id: str


class ActionPayload(BaseModel):
    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)


class ActionRequest(BaseModel):
    player_id: str
    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    apply_first: Optional[ActionPayload] = None


class UndoRequest(BaseModel):
    player_id: str


class LogEntry(BaseModel):
    id: str
    type: str
    player_index: Optional[int] = None
    message: str
    timestamp: float


class ActionResponse(BaseModel):
    accepted: bool
    reason: Optional[str] = None
    game_state: Dict[str, Any]
    game_log: List[LogEntry] = Field(default_factory=list)
