"""
Recognizer Interface.

Defines the contract for the "Intent Recognizer" - the external collaborator
that maps raw utterance text to an intent plus structured entities. The
entity payload follows the LUIS shape (values keyed by entity name, with the
matched source text under `$instance`), whichever adapter produced it.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..domain.models import Intent

ROOM_ENTITY = "SmartThings_Entities"
CAPABILITY_ENTITY = "SmartThings_Capability"


class IntentScore(BaseModel):
    intent: Intent
    score: float


class RecognizerResult(BaseModel):
    text: str
    intents: List[IntentScore] = Field(default_factory=list)
    entities: Dict[str, Any] = Field(default_factory=dict)

    @property
    def top_intent(self) -> Intent:
        return top_intent(self)


class IntentRecognizer(ABC):
    @property
    @abstractmethod
    def configured(self) -> bool:
        """False when the adapter lacks credentials; the router then skips recognition."""
        pass

    @abstractmethod
    async def recognize(self, text: str) -> RecognizerResult:
        pass


def top_intent(result: Optional[RecognizerResult], min_score: float = 0.0) -> Intent:
    """
    Returns the highest scoring intent, or Intent.NONE when there is no
    result or the best score is below `min_score`.
    """
    if not result or not result.intents:
        return Intent.NONE
    best = max(result.intents, key=lambda scored: scored.score)
    if best.score < min_score:
        return Intent.NONE
    return best.intent


def _instance_text(entities: Dict[str, Any], name: str) -> Optional[str]:
    instances = entities.get("$instance", {}).get(name) or []
    if instances and instances[0].get("text"):
        return instances[0]["text"]
    return None


def get_room(result: RecognizerResult) -> Optional[str]:
    """
    The room is the first list-entity match whose canonical kind is 'Room';
    the user's own wording is taken from `$instance`.
    """
    values = result.entities.get(ROOM_ENTITY) or []
    if not values:
        return None
    first = values[0]
    kind = first[0] if isinstance(first, list) and first else first
    if kind != "Room":
        return None
    return _instance_text(result.entities, ROOM_ENTITY)


def get_capability(result: RecognizerResult) -> Optional[str]:
    values = result.entities.get(CAPABILITY_ENTITY) or []
    if not values:
        return None
    first = values[0]
    # List entities resolve to a list of canonical names.
    if isinstance(first, list):
        return first[0] if first else None
    return first
