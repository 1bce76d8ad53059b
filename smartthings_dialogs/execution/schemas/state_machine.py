"""
Transition Types - Step Outcome Definitions

What a waterfall step asks the engine to do once it returns. Steps never
touch the stack directly; they return a StepOutcome and the WaterfallFlow
translates it into stack operations.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from ...domain.models import PromptSpec


class StateMachineTransition(Enum):
    """
    Strict State Machine terminology describing what happens to the frame.
    """

    HOLD = auto()  # Suspend on a prompt; the index stays on the current step.
    ADVANCE = auto()  # Move to the next step immediately with a value.
    PUSH = auto()  # A child flow frame is pushed onto the stack.
    POP = auto()  # The frame is popped; its value goes to the parent.
    REPLACE = auto()  # The frame is popped and a new flow pushed in its place.


@dataclass
class StepOutcome:
    transition: StateMachineTransition
    value: Any = None
    prompt: Optional[PromptSpec] = None
    flow_id: Optional[str] = None
    options: Any = None
    # PUSH only: re-run the delegating step with the child's result.
    rerun_step: bool = False
