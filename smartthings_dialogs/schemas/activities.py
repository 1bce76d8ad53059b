"""
Schemas - Inbound and Outbound Activities

The engine receives one Activity per user message and answers with a list
of OutboundActivity objects. Cards are plain payloads: the channel adapter
decides how to render them.
"""
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class InputHint(str, Enum):
    ACCEPTING_INPUT = "acceptingInput"
    EXPECTING_INPUT = "expectingInput"
    IGNORING_INPUT = "ignoringInput"


class Activity(BaseModel):
    """A single inbound user message."""
    conversation_id: str
    user_id: str
    text: Optional[str] = None
    # Button clicks and token responses arrive here instead of in `text`.
    value: Optional[Dict[str, Any]] = None


class CardField(BaseModel):
    label: str
    value: str


class CardButton(BaseModel):
    title: str
    value: str
    style: Optional[Literal["primary", "danger"]] = None
    url: Optional[str] = None


class Card(BaseModel):
    """
    Interactive card: a text section, label/value fields and an actions block.
    """
    text: str
    title: Optional[str] = None
    fields: List[CardField] = Field(default_factory=list)
    actions: List[CardButton] = Field(default_factory=list)


class OutboundActivity(BaseModel):
    type: Literal["message", "typing"] = "message"
    text: Optional[str] = None
    card: Optional[Card] = None
    input_hint: Optional[InputHint] = None


class TurnReply(BaseModel):
    """Everything the router produced for one inbound Activity."""
    conversation_id: str
    status: str
    active_flow: Optional[str] = None
    depth: int = 0
    activities: List[OutboundActivity] = Field(default_factory=list)
