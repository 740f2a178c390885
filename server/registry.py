"""
In-memory registry of multiplayer rooms.

A room collects players, then hosts one game. Every mutation of a room
happens under that room's lock.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from tycoon import GameConfig, GameState, init_game
from tycoon.events import EventLog, EventType
from tycoon.exceptions import (
    NotYourTurnError,
    PlayerNotInRoomError,
    RoomNotFoundError,
    RoomStateError,
)
from tycoon.game import Phase, clear_last_auction_result
from tycoon.messages import format_action_message, format_auction_result
from tycoon.rules import ActionResult, GameAction, resolve_action
from tycoon.scoring import get_winner
from tycoon.snapshot import serialize_state

from server.settings import ServerSettings, get_server_settings

logger = logging.getLogger(__name__)

# Not written to the game log
QUIET_ACTIONS = ("endTurn", "placeBid", "passAuction")

ROOM_CODE_LENGTH = 6


@dataclass
class RoomPlayer:
    id: str
    name: str
    index: int


@dataclass
class UndoSlot:
    """State before the last accepted submission, and who made it."""

    state: GameState
    player_index: int
    log_length: int


@dataclass
class Room:
    code: str
    players: List[RoomPlayer] = field(default_factory=list)
    game_state: Optional[GameState] = None
    log: EventLog = field(default_factory=EventLog)
    status: str = "waiting"
    undo_slot: Optional[UndoSlot] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def find_player(self, player_id: str) -> Optional[RoomPlayer]:
        return next((p for p in self.players if p.id == player_id), None)

    def view(self) -> Dict[str, Any]:
        """Public view of the room, as served to clients."""
        return {
            "room_code": self.code,
            "players": [{"name": p.name, "index": p.index} for p in self.players],
            "status": self.status,
            "game_state": serialize_state(self.game_state) if self.game_state else None,
            "game_log": [e.to_dict() for e in self.log.get_events()],
            "undo_player_index": self.undo_slot.player_index if self.undo_slot else None,
        }


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class RoomRegistry:
    """In-memory registry of rooms."""

    def __init__(self, settings: Optional[ServerSettings] = None):
        self.settings = settings or get_server_settings()
        self._rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()

    def _clean_name(self, name: Optional[str], default: str) -> str:
        return (name or "").strip()[: self.settings.name_max_length].strip() or default

    async def create_room(self, player_name: Optional[str]) -> Tuple[str, RoomPlayer]:
        """Open a room with its creator as host (index 0)."""
        host = RoomPlayer(
            id=secrets.token_hex(12),
            name=self._clean_name(player_name, "Player 1"),
            index=0,
        )
        async with self._lock:
            code = secrets.token_hex(ROOM_CODE_LENGTH // 2).upper()
            while code in self._rooms:
                code = secrets.token_hex(ROOM_CODE_LENGTH // 2).upper()
            self._rooms[code] = Room(code=code, players=[host])
        logger.info(f"Room {code} created by {host.name}")
        return code, host

    async def get_room(self, code: str) -> Room:
        room = self._rooms.get(normalize_code(code))
        if room is None:
            raise RoomNotFoundError(f"Room {code!r} not found")
        return room

    async def join_room(self, code: str, player_name: Optional[str]) -> Tuple[str, RoomPlayer]:
        """Add a player to a waiting room."""
        code = normalize_code(code)
        if len(code) != ROOM_CODE_LENGTH:
            raise RoomStateError("Invalid room code")
        room = await self.get_room(code)
        async with room.lock:
            if room.status != "waiting":
                raise RoomStateError("Game already started")
            if len(room.players) >= self.settings.max_players:
                raise RoomStateError("Room is full")
            player = RoomPlayer(
                id=secrets.token_hex(12),
                name=self._clean_name(player_name, "Player"),
                index=len(room.players),
            )
            room.players.append(player)
        logger.info(f"{player.name} joined room {code} as player {player.index}")
        return code, player

    async def view_room(self, code: str, player_id: Optional[str] = None) -> Dict[str, Any]:
        room = await self.get_room(code)
        if player_id and room.find_player(player_id) is None:
            raise PlayerNotInRoomError("Player not in room")
        return room.view()

    async def start_game(self, code: str, player_id: str) -> GameState:
        """Deal a new game for the room's players. Host only."""
        room = await self.get_room(code)
        async with room.lock:
            if room.status != "waiting":
                raise RoomStateError("Game already started")
            host = room.find_player(player_id)
            if host is None or host.index != 0:
                raise PlayerNotInRoomError("Only host can start")
            if len(room.players) < self.settings.min_players:
                raise RoomStateError(f"Need at least {self.settings.min_players} players")

            names = [p.name for p in sorted(room.players, key=lambda p: p.index)]
            room.game_state = init_game(len(names), names, GameConfig(seed=self.settings.seed))
            room.status = "playing"
            room.undo_slot = None
            room.log.clear()
            room.log.log(EventType.GAME_START, message=f"Game started with {len(names)} players")
        logger.info(f"Room {room.code} started a {len(names)}-player game")
        return room.game_state

    def _apply(self, room: Room, player: RoomPlayer, state: GameState, action: GameAction) -> ActionResult:
        result = resolve_action(state, action)
        if not result.accepted:
            return result
        if action.type not in QUIET_ACTIONS:
            room.log.log(
                EventType.ACTION,
                player.index,
                format_action_message(action, result.state, state),
                action=action.type,
            )
        message = format_auction_result(result.state)
        if message is not None:
            winner = result.state.last_auction_result.winner_index
            room.log.log(EventType.AUCTION_WON, winner, message)
            result = ActionResult(clear_last_auction_result(result.state), True)
        if result.state.phase == Phase.GAMEOVER and state.phase != Phase.GAMEOVER:
            winner = get_winner(result.state)
            room.log.log(
                EventType.GAME_END,
                winner,
                f"Game over: {result.state.players[winner].name} wins",
            )
        return result

    async def submit_action(
        self,
        code: str,
        player_id: str,
        action: GameAction,
        apply_first: Optional[GameAction] = None,
    ) -> ActionResult:
        """
        Apply an action for the player whose turn it is.

        ``apply_first`` is applied before ``action`` as part of the same
        submission. The returned result describes the main action.

        Raises:
            RoomStateError: The game has not started
            PlayerNotInRoomError: Unknown player token
            NotYourTurnError: The game is waiting for someone else
        """
        room = await self.get_room(code)
        async with room.lock:
            if room.status != "playing" or room.game_state is None:
                raise RoomStateError("Game not started")
            player = room.find_player(player_id)
            if player is None:
                raise PlayerNotInRoomError("Player not found in room")
            before = room.game_state
            if before.current_player_index != player.index:
                logger.warning(f"Room {room.code}: {player.name} acted out of turn")
                raise NotYourTurnError("Not your turn")

            log_length = len(room.log)
            state = before
            accepted_any = False
            if apply_first is not None:
                first = self._apply(room, player, state, apply_first)
                state = first.state
                accepted_any = first.accepted
            result = self._apply(room, player, state, action)
            if result.accepted or accepted_any:
                room.undo_slot = UndoSlot(before, player.index, log_length)
            room.game_state = result.state
        return result

    async def undo(self, code: str, player_id: str) -> GameState:
        """Revert the last accepted submission. Only its author may undo, once."""
        room = await self.get_room(code)
        async with room.lock:
            player = room.find_player(player_id)
            if player is None:
                raise PlayerNotInRoomError("Player not found in room")
            slot = room.undo_slot
            if slot is None:
                raise RoomStateError("Nothing to undo")
            if slot.player_index != player.index:
                raise NotYourTurnError("Only the player who made the last move can undo")
            room.game_state = slot.state
            room.log.truncate(slot.log_length)
            room.log.log(EventType.UNDO, player.index, f"{player.name} undid their last action")
            room.undo_slot = None
        logger.info(f"Room {room.code}: {player.name} undid their last action")
        return room.game_state
