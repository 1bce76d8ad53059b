"""
Turn Context.

Wraps the inbound Activity for the duration of one turn and buffers every
outbound activity the flows produce. The router hands the buffer back to
the channel adapter once the turn is over.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from ..recognizers.interface import RecognizerResult
from ..schemas.activities import Activity, Card, InputHint, OutboundActivity

logger = logging.getLogger(__name__)


class TurnContext:
    def __init__(self, activity: Activity, recognized: Optional[RecognizerResult] = None):
        self.activity = activity
        # Recognizer output for this turn's text, when the router ran one.
        self.recognized = recognized
        self.responses: List[OutboundActivity] = []

    @property
    def text(self) -> str:
        return (self.activity.text or "").strip()

    @property
    def value(self) -> Optional[Dict[str, Any]]:
        return self.activity.value

    @property
    def user_id(self) -> str:
        return self.activity.user_id

    @property
    def conversation_id(self) -> str:
        return self.activity.conversation_id

    def send_activity(
        self,
        content: Union[str, Card, OutboundActivity],
        input_hint: Optional[InputHint] = InputHint.IGNORING_INPUT,
    ) -> OutboundActivity:
        if isinstance(content, OutboundActivity):
            outbound = content
        elif isinstance(content, Card):
            outbound = OutboundActivity(text=content.text, card=content, input_hint=input_hint)
        else:
            outbound = OutboundActivity(text=content, input_hint=input_hint)

        self.responses.append(outbound)
        logger.debug(f"[{self.conversation_id}] -> {outbound.text!r}")
        return outbound

    def send_typing(self) -> OutboundActivity:
        return self.send_activity(OutboundActivity(type="typing"))

    @property
    def messages(self) -> List[str]:
        """Texts of the message activities sent so far."""
        return [a.text for a in self.responses if a.type == "message" and a.text]
