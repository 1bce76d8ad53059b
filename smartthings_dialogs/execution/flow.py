"""
Flow Contract.

A Flow is a registered, read-only definition. Its per-conversation data
lives in the Frame at the top of the stack, which every method reads
through `dc.active_frame`.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..schemas.decisions import DialogTurnResult, DialogTurnStatus

if TYPE_CHECKING:
    from .engine import DialogContext


def waiting() -> DialogTurnResult:
    return DialogTurnResult(status=DialogTurnStatus.WAITING)


class Flow(ABC):
    def __init__(self, flow_id: str):
        self.id = flow_id

    @abstractmethod
    async def begin(self, dc: "DialogContext", options: Any = None) -> DialogTurnResult:
        """Called right after the frame is pushed."""
        pass

    @abstractmethod
    async def continue_turn(self, dc: "DialogContext") -> DialogTurnResult:
        """Called when a new user message arrives while this frame is active."""
        pass

    async def resume(self, dc: "DialogContext", result: Any = None) -> DialogTurnResult:
        """Called when a child flow ended and this frame is active again."""
        return await dc.end_dialog(result)

    async def reprompt(self, dc: "DialogContext") -> None:
        """Re-issue whatever this frame is waiting on. No state change."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id!r})"
