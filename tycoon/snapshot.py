"""
Snapshot serialization of GameState.

Produces a plain JSON-compatible dict (enums as values, tuples as lists)
and reads it back. The round trip is exact, including deck order and the
reshuffle seed, so a stored snapshot resumes the same game.
"""

from typing import Any, Dict

from pydantic import TypeAdapter

from tycoon.game import GameState

_state_adapter: TypeAdapter = TypeAdapter(GameState)


def serialize_state(state: GameState) -> Dict[str, Any]:
    """Serialize a GameState into a JSON-compatible dict."""
    return _state_adapter.dump_python(state, mode="json")


def deserialize_state(data: Dict[str, Any]) -> GameState:
    """Rebuild a GameState from ``serialize_state`` output."""
    return _state_adapter.validate_python(data)
