"""
Main Flow - Top-level Dispatch

Asks the user what they want, recognizes the answer, and hands off to the
flow registered for the intent in INTENT_ROUTES. When the child returns,
the final step reports any authorization and restarts itself so the
conversation never runs out of stack.
"""

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, Optional

import httpx

from ..domain.models import AuthorizationResult, AuthorizeDetails, Intent, MainOptions, PromptSpec, PromptType, QueryDetails
from ..execution.waterfall import StepContext, WaterfallFlow
from ..execution.schemas.state_machine import StepOutcome
from ..infrastructure.smartthings.client import DeviceApiError, SmartThingsClient
from ..recognizers.interface import IntentRecognizer, RecognizerResult, get_capability, get_room, top_intent
from ..schemas.activities import InputHint
from ..services.qna import QnAService
from .authorize import AUTHORIZE_FLOW
from .occupancy import OCCUPANCY_FLOW
from .query import QUERY_FLOW

logger = logging.getLogger(__name__)

MAIN_FLOW = "main"

GREETING = "What can I help you with today?\nSay something like \"What's going on in Apollo right now?\""
RESTART_GREETING = "What else can I do for you?"
RECOGNIZER_NOT_CONFIGURED = (
    "NOTE: Intent recognition is not configured. To enable all capabilities, "
    "add `LUIS_APP_ID`, `LUIS_API_KEY` and `LUIS_API_HOSTNAME` to the .env file."
)
NO_ANSWER = "Sorry, I don't know the answer to that one."

Route = Callable[["MainFlow", StepContext, RecognizerResult, Intent], Awaitable[StepOutcome]]


# ==============================================================================
# Intent Routes
# ==============================================================================

async def route_authorize(flow: "MainFlow", step: StepContext, recognized: RecognizerResult, intent: Intent) -> StepOutcome:
    return step.begin_dialog(AUTHORIZE_FLOW, AuthorizeDetails())


async def route_query_state(flow: "MainFlow", step: StepContext, recognized: RecognizerResult, intent: Intent) -> StepOutcome:
    details = QueryDetails(room=get_room(recognized), capability=get_capability(recognized))
    logger.info(f"Extracted query details: {details.model_dump()}")

    if not details.room or not details.capability:
        step.turn.send_activity(
            "I need both a room and what to measure, for example \"What's the temperature in Apollo?\""
        )
        return step.next(None)
    return step.begin_dialog(QUERY_FLOW, details)


async def route_check_occupancy(flow: "MainFlow", step: StepContext, recognized: RecognizerResult, intent: Intent) -> StepOutcome:
    room = get_room(recognized)
    if not room:
        step.turn.send_activity("Which room should I check? Try \"Is Apollo occupied?\"")
        return step.next(None)
    return step.begin_dialog(OCCUPANCY_FLOW, QueryDetails(room=room))


async def route_qna(flow: "MainFlow", step: StepContext, recognized: RecognizerResult, intent: Intent) -> StepOutcome:
    answer: Optional[str] = None
    if flow.qna is not None and flow.qna.configured:
        try:
            answers = await flow.qna.get_answers(recognized.text)
        except httpx.HTTPError as e:
            logger.error(f"QnA lookup failed: {e}")
            answers = []
        if answers:
            answer = answers[0].answer

    step.turn.send_activity(answer or NO_ANSWER)
    return step.next(None)


async def route_not_understood(flow: "MainFlow", step: StepContext, recognized: RecognizerResult, intent: Intent) -> StepOutcome:
    logger.info(f"Unhandled intent {intent.value} for '{recognized.text}'")
    message = f"Sorry, I didn't get that. Please try asking in a different way (intent was {intent.value})"
    step.turn.send_activity(message)
    return step.next(None)


INTENT_ROUTES: Dict[Intent, Route] = {
    Intent.AUTHORIZE: route_authorize,
    Intent.QUERY_STATE: route_query_state,
    Intent.CHECK_OCCUPANCY: route_check_occupancy,
    Intent.QNA: route_qna,
    # Cancel and help are normally claimed by the interrupt layer first.
    Intent.CANCEL: route_not_understood,
    Intent.HELP: route_not_understood,
    Intent.NONE: route_not_understood,
}


def _validate_routes():
    """Every Intent needs a route. Fails fast at import."""
    missing = [intent.value for intent in Intent if intent not in INTENT_ROUTES]
    if missing:
        raise RuntimeError(f"Intents without a route: {', '.join(missing)}")


_validate_routes()


# ==============================================================================
# Flow
# ==============================================================================

class MainFlow(WaterfallFlow):
    def __init__(
        self,
        recognizer: IntentRecognizer,
        client: SmartThingsClient,
        qna: Optional[QnAService] = None,
        min_score: float = 0.0,
        flow_id: str = MAIN_FLOW,
    ):
        super().__init__(
            flow_id,
            [self.intro_step, self.act_step, self.final_step],
            options_model=MainOptions,
        )
        self.recognizer = recognizer
        self.client = client
        self.qna = qna
        self.min_score = min_score

    async def intro_step(self, step: StepContext) -> StepOutcome:
        """Prompts for a command, or skips straight on when recognition is off."""
        if not self.recognizer.configured:
            step.turn.send_activity(RECOGNIZER_NOT_CONFIGURED)
            return step.next(None)

        options: MainOptions = step.options
        return step.prompt(PromptSpec(type=PromptType.TEXT, prompt=options.restart_msg or GREETING))

    async def act_step(self, step: StepContext) -> StepOutcome:
        if not self.recognizer.configured:
            # Without a recognizer the only thing we can do is authorize.
            return step.begin_dialog(AUTHORIZE_FLOW, AuthorizeDetails())

        text = step.result or ""
        recognized = step.turn.recognized
        if recognized is None or recognized.text != text:
            try:
                recognized = await self.recognizer.recognize(text)
            except httpx.HTTPError as e:
                logger.error(f"Recognizer call failed: {e}")
                recognized = RecognizerResult(text=text)

        intent = top_intent(recognized, self.min_score)
        logger.info(f"Top intent {intent.value} for '{text}'")
        return await INTENT_ROUTES[intent](self, step, recognized, intent)

    async def final_step(self, step: StepContext) -> StepOutcome:
        """Reports a completed authorization, then restarts the main flow."""
        result = step.result
        if isinstance(result, AuthorizationResult):
            try:
                locations = await self.client.list_locations(result.token.get_secret_value())
            except DeviceApiError as e:
                logger.error(f"Could not list locations after authorization: {e}")
                locations = []

            if locations:
                message = f"I connected your SmartThings location {locations[0].name}."
            else:
                message = "You're signed in, but I couldn't find a SmartThings location on your account."
            step.turn.send_activity(message, InputHint.IGNORING_INPUT)

        return step.replace_dialog(self.id, MainOptions(restart_msg=RESTART_GREETING))
