"""
Schemas - Turn Results

This module defines what the dialog stack reports back after resuming,
beginning or ending a flow. The router only looks at `status` to decide
whether the main flow must be (re)started.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class DialogTurnStatus(str, Enum):
    """
    Outcome of running the stack for one tick.

    EMPTY: There was no active frame; the caller must begin a flow.
    WAITING: A step suspended and is waiting for the next user message.
    COMPLETE: The last frame ended; the stack is now empty.
    CANCELLED: The interrupt layer cleared the stack.
    """
    EMPTY = "EMPTY"
    WAITING = "WAITING"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"


class DialogTurnResult(BaseModel):
    """
    Named "DialogTurnResult" because it is the result of one dialog turn,
    not of a single step.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: DialogTurnStatus
    result: Optional[Any] = None
