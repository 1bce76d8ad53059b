"""
Schemas - Turn Results and Activities

Defines the models exchanged between the router, the dialog stack and
the channel adapter.
"""

from smartthings_dialogs.schemas.activities import (
    Activity,
    Card,
    CardButton,
    CardField,
    InputHint,
    OutboundActivity,
    TurnReply,
)
from smartthings_dialogs.schemas.decisions import DialogTurnResult, DialogTurnStatus

__all__ = [
    "Activity",
    "Card",
    "CardButton",
    "CardField",
    "DialogTurnResult",
    "DialogTurnStatus",
    "InputHint",
    "OutboundActivity",
    "TurnReply",
]
