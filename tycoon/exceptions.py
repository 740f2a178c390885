"""
Custom exception hierarchy for the Tycoon engine and room service.

Provides typed errors that can be handled consistently across
the core engine, the room registry, and the API layer.
"""


class TycoonError(Exception):
    """Base exception for all game-related errors."""


class IllegalActionError(TycoonError):
    """Action is well formed but not legal in the current state."""


class InvalidActionError(TycoonError):
    """Action payload could not be parsed into a known action."""


class RoomNotFoundError(TycoonError):
    """Room does not exist."""


class RoomStateError(TycoonError):
    """Room is not in a state that allows the request (full, started, ...)."""


class PlayerNotInRoomError(TycoonError):
    """Player token is not registered in the room, or lacks the required role."""


class NotYourTurnError(TycoonError):
    """Submitting player is not the one the game is waiting for."""
