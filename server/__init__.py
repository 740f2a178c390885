"""
Server package exposing the FastAPI app and the room registry.
"""

from .app import app, create_app  # noqa: F401
from .registry import RoomRegistry  # noqa: F401
