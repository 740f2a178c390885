"""
Room game log.

Entries carry ids of the form ``log-N``. Numbering never restarts within
a log, so ids stay unique after an undo truncates the tail.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class EventType(Enum):
    GAME_START = "game_start"
    ACTION = "action"
    AUCTION_WON = "auction_won"
    UNDO = "undo"
    GAME_END = "game_end"


@dataclass
class GameEvent:
    """One line of a room's game log. ``player_index`` is None for system lines."""

    event_type: EventType
    player_index: Optional[int] = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    id: str = ""
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Wire form served to clients; ``details`` stays server side."""
        return {
            "id": self.id,
            "type": self.event_type.value,
            "player_index": self.player_index,
            "message": self.message,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        who = "system" if self.player_index is None else f"player {self.player_index}"
        return f"GameEvent({self.id}, {who}, {self.message!r})"


class EventLog:
    """Append-only game log with truncation for undo."""

    def __init__(self):
        self._entries: List[GameEvent] = []
        self._next_id = 1

    def log(
        self,
        event_type: EventType,
        player_index: Optional[int] = None,
        message: str = "",
        **details: Any,
    ) -> GameEvent:
        event = GameEvent(
            event_type,
            player_index,
            message,
            details,
            id=f"log-{self._next_id}",
        )
        self._next_id += 1
        self._entries.append(event)
        return event

    def get_events(self) -> List[GameEvent]:
        return list(self._entries)

    def truncate(self, length: int) -> None:
        """Keep only the first ``length`` entries."""
        del self._entries[length:]

    def clear(self) -> None:
        self._entries = []

    def __iter__(self) -> Iterator[GameEvent]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
