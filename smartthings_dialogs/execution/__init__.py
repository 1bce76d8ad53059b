"""
Execution Layer - Dialog Stack and Flow Execution

Defines the DialogContext (per-turn stack operations), the WaterfallFlow
step runner, the interrupt layer every flow is composed with, and the
OAuth sign-in flow.
"""

from smartthings_dialogs.execution.engine import DialogContext, FlowSet
from smartthings_dialogs.execution.exceptions import DialogStackOverflowError, FlowNotFoundError
from smartthings_dialogs.execution.flow import Flow
from smartthings_dialogs.execution.interrupts import InterruptAction, InterruptibleFlow, InterruptLayer
from smartthings_dialogs.execution.sign_in import SIGN_IN_FLOW, SignInFlow
from smartthings_dialogs.execution.turn import TurnContext
from smartthings_dialogs.execution.waterfall import Step, StepContext, WaterfallFlow


__all__ = [
    "DialogContext",
    "DialogStackOverflowError",
    "Flow",
    "FlowNotFoundError",
    "FlowSet",
    "InterruptAction",
    "InterruptibleFlow",
    "InterruptLayer",
    "SIGN_IN_FLOW",
    "SignInFlow",
    "Step",
    "StepContext",
    "TurnContext",
    "WaterfallFlow",
]
