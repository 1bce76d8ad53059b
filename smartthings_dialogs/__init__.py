"""
SmartThings Dialogs

A conversational front end for SmartThings: a per-conversation stack of
waterfall flows (authorize, query, occupancy, sign-in) driven by an intent
recognizer, with cancel and help available from any flow.
"""

from smartthings_dialogs.domain import (
    AuthorizationResult,
    AuthorizeDetails,
    Intent,
    PromptSpec,
    PromptType,
    QueryDetails,
)
from smartthings_dialogs.state import (
    Frame,
    SessionState,
)
from smartthings_dialogs.schemas import Activity, DialogTurnResult, DialogTurnStatus, TurnReply
from smartthings_dialogs.execution import DialogContext, FlowSet, StepContext, WaterfallFlow

__all__ = [
    # Domain Layer
    "AuthorizationResult",
    "AuthorizeDetails",
    "Intent",
    "PromptSpec",
    "PromptType",
    "QueryDetails",
    # State Layer
    "Frame",
    "SessionState",
    # Schemas
    "Activity",
    "DialogTurnResult",
    "DialogTurnStatus",
    "TurnReply",
    # Execution Layer
    "DialogContext",
    "FlowSet",
    "StepContext",
    "WaterfallFlow",
]
