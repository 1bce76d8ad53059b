"""
Global Interrupt Layer.

Cancel and help are handled the same way whatever flow is active. Instead
of every flow inheriting from a cancel-and-help base class, FlowSet wraps
each registered flow in an InterruptibleFlow that checks for interrupts
before handing the turn to the wrapped flow.
"""

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, FrozenSet, Optional

from ..domain.models import Intent
from ..recognizers.interface import top_intent
from ..schemas.activities import InputHint
from ..schemas.decisions import DialogTurnResult
from .flow import Flow, waiting
from .turn import TurnContext

if TYPE_CHECKING:
    from .engine import DialogContext

logger = logging.getLogger(__name__)

CANCEL_UTTERANCES = frozenset({"cancel", "quit", "stop", "exit", "never mind", "nevermind"})
HELP_UTTERANCES = frozenset({"help", "?"})

CANCEL_MESSAGE = "Cancelling..."
HELP_MESSAGE = (
    "I can connect a SmartThings location, or tell you what's going on in a room. "
    "Try \"What's the temperature in Apollo?\" or \"Is Apollo occupied?\". "
    "Say \"cancel\" at any time to start over."
)


class InterruptAction(Enum):
    CANCEL = auto()
    HELP = auto()


class InterruptLayer:
    """
    Decides whether a turn is a meta-command. Exact utterances always win;
    a recognized Cancel/Help intent counts only above `min_score`.
    """

    def __init__(
        self,
        cancel_utterances: FrozenSet[str] = CANCEL_UTTERANCES,
        help_utterances: FrozenSet[str] = HELP_UTTERANCES,
        min_score: float = 0.7,
        cancel_message: str = CANCEL_MESSAGE,
        help_message: str = HELP_MESSAGE,
    ):
        self.cancel_utterances = cancel_utterances
        self.help_utterances = help_utterances
        self.min_score = min_score
        self.cancel_message = cancel_message
        self.help_message = help_message

    def check(self, turn: TurnContext) -> Optional[InterruptAction]:
        text = turn.text.lower()
        if text in self.cancel_utterances:
            return InterruptAction.CANCEL
        if text in self.help_utterances:
            return InterruptAction.HELP

        recognized = turn.recognized
        if recognized is None or recognized.text.strip().lower() != text:
            return None
        intent = top_intent(recognized, self.min_score)
        if intent == Intent.CANCEL:
            return InterruptAction.CANCEL
        if intent == Intent.HELP:
            return InterruptAction.HELP
        return None


class InterruptibleFlow(Flow):
    def __init__(self, inner: Flow, layer: InterruptLayer):
        super().__init__(inner.id)
        self.inner = inner
        self.layer = layer

    async def begin(self, dc: "DialogContext", options: Any = None) -> DialogTurnResult:
        return await self.inner.begin(dc, options)

    async def continue_turn(self, dc: "DialogContext") -> DialogTurnResult:
        action = self.layer.check(dc.turn)

        if action == InterruptAction.CANCEL:
            logger.info(f"Cancel requested while in '{self.id}'")
            dc.turn.send_activity(self.layer.cancel_message)
            return dc.cancel_all()

        if action == InterruptAction.HELP:
            logger.info(f"Help requested while in '{self.id}'")
            dc.turn.send_activity(self.layer.help_message, InputHint.EXPECTING_INPUT)
            await self.inner.reprompt(dc)
            return waiting()

        return await self.inner.continue_turn(dc)

    async def resume(self, dc: "DialogContext", result: Any = None) -> DialogTurnResult:
        return await self.inner.resume(dc, result)

    async def reprompt(self, dc: "DialogContext") -> None:
        await self.inner.reprompt(dc)
