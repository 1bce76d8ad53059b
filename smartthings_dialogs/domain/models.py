"""
Domain Layer - Static Data Models

This module defines the vocabulary shared by every flow: the closed set of
intents the router understands, the prompt requests a step can suspend on,
and the typed option objects threaded through the authorization, query and
main flows.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Intent(str, Enum):
    """
    Closed set of intents the router dispatches on.

    Every member must have an entry in the main flow's INTENT_ROUTES table;
    this is checked when the module is imported.
    """

    AUTHORIZE = "Authorize"
    QUERY_STATE = "QueryState"
    CHECK_OCCUPANCY = "CheckOccupancy"
    QNA = "QnA"
    CANCEL = "Cancel"
    HELP = "Help"
    NONE = "None"


class PromptType(str, Enum):
    """
    - text: any non-empty utterance is accepted
    - choice: one of a fixed list of labels
    - confirm: yes / no
    """

    TEXT = "text"
    CHOICE = "choice"
    CONFIRM = "confirm"


class PromptSpec(BaseModel):
    """
    A request to suspend the current step and ask the user something.

    Stored in the frame while the step waits, so it must stay serializable.

    Attributes:
        type: PromptType
        prompt: Text sent when the prompt is first issued (and on help).
        retry_prompt: Text sent when the answer does not validate.
            Falls back to `prompt` when missing.
        choices: Labels for choice prompts, in display order.
    """

    type: PromptType
    prompt: str
    retry_prompt: Optional[str] = None
    choices: List[str] = Field(default_factory=list)


class FoundChoice(BaseModel):
    """Result of a choice prompt: the zero-based index and the chosen label."""

    index: int
    value: str


class MainOptions(BaseModel):
    restart_msg: Optional[str] = None


class QueryDetails(BaseModel):
    """
    Room and capability extracted from the utterance. Immutable once built.
    """

    model_config = ConfigDict(frozen=True)

    room: Optional[str] = None
    capability: Optional[str] = None


class AuthorizeDetails(BaseModel):
    """Choices collected by the authorization flow so far."""

    installation_context: Optional[FoundChoice] = None
    auth_type: Optional[FoundChoice] = None


class AuthorizationResult(BaseModel):
    """
    Outcome of a successful authorization.

    Lives only as a flow return value. The token is a SecretStr so that a
    serialized session never carries the raw value.
    """

    token: SecretStr
    connection_name: str
    installation_context: FoundChoice
    auth_type: FoundChoice
