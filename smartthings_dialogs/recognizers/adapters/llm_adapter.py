import logging
from typing import Optional

from pydantic import BaseModel, Field

from ..interface import (
    CAPABILITY_ENTITY,
    ROOM_ENTITY,
    IntentRecognizer,
    IntentScore,
    RecognizerResult,
)
from ..prompts import Template, render
from ...domain.models import Intent
from ...infrastructure.smartthings.models import CAPABILITY_ATTRIBUTES
from ...llm.interface import LLMProvider

logger = logging.getLogger(__name__)

INTENT_DESCRIPTIONS = {
    Intent.AUTHORIZE: "connect or authorize a SmartThings account or location",
    Intent.QUERY_STATE: "ask for a sensor reading in a room (temperature, humidity, ...)",
    Intent.CHECK_OCCUPANCY: "ask whether a room is occupied or in use",
    Intent.QNA: "general questions or chit-chat about the bot or SmartThings",
    Intent.CANCEL: "stop or cancel what is going on",
    Intent.HELP: "ask for help using the bot",
    Intent.NONE: "anything else",
}


class IntentPrediction(BaseModel):
    intent: Intent
    confidence: float = Field(..., ge=0.0, le=1.0)
    room: Optional[str] = Field(None, description="Room name as written by the user.")
    capability: Optional[str] = Field(None, description="SmartThings capability id.")


class LLMIntentRecognizer(IntentRecognizer):
    """
    Asks an LLM to classify the utterance into the closed Intent set and
    rebuilds a LUIS-shaped entity payload so the flows stay adapter agnostic.
    """

    def __init__(self, llm_provider: Optional[LLMProvider], temperature: float = 0.0):
        self.llm = llm_provider
        self.temperature = temperature

    @property
    def configured(self) -> bool:
        return self.llm is not None

    async def recognize(self, text: str) -> RecognizerResult:
        if self.llm is None:
            raise RuntimeError("LLM recognizer has no provider.")

        system_prompt = render(
            Template.INTENT_RECOGNITION,
            intents=[(i.value, d) for i, d in INTENT_DESCRIPTIONS.items()],
            capabilities=sorted(CAPABILITY_ATTRIBUTES),
        )
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": text},
        ]

        try:
            prediction = await self.llm.generate_structured_output(
                messages=messages,
                response_model=IntentPrediction,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.error(f"Intent recognition failed: {e}")
            return RecognizerResult(text=text)

        return self._to_result(text, prediction)

    def _to_result(self, text: str, prediction: IntentPrediction) -> RecognizerResult:
        entities: dict = {"$instance": {}}
        if prediction.room:
            entities[ROOM_ENTITY] = [["Room"]]
            entities["$instance"][ROOM_ENTITY] = [{"text": prediction.room}]
        if prediction.capability:
            entities[CAPABILITY_ENTITY] = [[prediction.capability]]
            entities["$instance"][CAPABILITY_ENTITY] = [{"text": prediction.capability}]

        return RecognizerResult(
            text=text,
            intents=[IntentScore(intent=prediction.intent, score=prediction.confidence)],
            entities=entities,
        )
