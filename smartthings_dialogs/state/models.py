"""
State Layer - Runtime Data Models

This module defines the runtime state that tracks a conversation's position
across turns. It implements a Call Stack pattern: every active flow instance
is a Frame, and the most recently begun Frame is the one receiving input.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Frame(BaseModel):
    """
    Represents a single item on the call stack.

    The flow's step list is never copied here, only the position and the
    flow-owned state. No other frame reads `state`.
    """

    flow_id: str
    step_index: int = 0
    state: Dict[str, Any] = Field(default_factory=dict)


class SessionState(BaseModel):
    """
    The durable state for a single conversation.
    """

    session_id: str
    stack: List[Frame] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def active_frame(self) -> Optional[Frame]:
        if not self.stack:
            return None
        return self.stack[-1]

    @property
    def depth(self) -> int:
        return len(self.stack)
