"""
API Layer - Request/Response Schemas

Pydantic models for API responses that are not shared with the engine.
Inbound messages use `Activity` and turn replies use `TurnReply` directly.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class FrameRead(BaseModel):
    flow_id: str
    step_index: int


class ConversationRead(BaseModel):
    """Snapshot of one conversation's dialog stack, bottom frame first."""
    conversation_id: str
    depth: int
    active_flow: Optional[str] = None
    stack: list[FrameRead]
    updated_at: datetime
    debug: Optional[dict[str, Any]] = None
