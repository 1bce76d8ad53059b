"""
State Layer - Runtime Data Models

Defines the per-conversation dialog stack and its frames.
"""

from smartthings_dialogs.state.models import (
    Frame,
    SessionState,
)

__all__ = [
    "Frame",
    "SessionState",
]
