"""
Query Flow

Reports the average reading of a capability across the devices in a room.
"""

import logging

from ..domain.models import QueryDetails
from ..execution.sign_in import SIGN_IN_FLOW
from ..execution.waterfall import StepContext, WaterfallFlow
from ..execution.schemas.state_machine import StepOutcome
from ..infrastructure.oauth import TokenResponse
from ..infrastructure.smartthings.client import DeviceApiError, SmartThingsClient
from ..services.device_queries import average_reading
from ..services.exceptions import (
    DeviceLookupError,
    NoDevicesFoundError,
    NoLocationError,
    PartialFailureError,
    RoomNotFoundError,
)
from .cards import average_reading_card

logger = logging.getLogger(__name__)

QUERY_FLOW = "query"

LOGIN_FAILED = "We couldn't log you in. Please try again later."
API_FAILED = "Something went wrong talking to SmartThings. Please try again later."


def lookup_failure_message(error: Exception) -> str:
    """Plain-language message for a failed room lookup or aggregation."""
    if isinstance(error, RoomNotFoundError):
        return f"I couldn't find a room called {error.room}."
    if isinstance(error, NoDevicesFoundError):
        return f"I didn't find any {error.capability} devices in {error.room}."
    if isinstance(error, PartialFailureError):
        return "I couldn't get a reading from any of the devices in that room. Please try again later."
    if isinstance(error, NoLocationError):
        return "Your SmartThings account doesn't have any locations yet."
    return API_FAILED


class QueryFlow(WaterfallFlow):
    def __init__(self, client: SmartThingsClient, flow_id: str = QUERY_FLOW):
        super().__init__(
            flow_id,
            [self.sign_in_step, self.process_step],
            options_model=QueryDetails,
        )
        self.client = client

    async def sign_in_step(self, step: StepContext) -> StepOutcome:
        # Ask for the token every time instead of keeping one: it may have
        # expired since the last turn, and the identity service refreshes it.
        return step.begin_dialog(SIGN_IN_FLOW)

    async def process_step(self, step: StepContext) -> StepOutcome:
        token = step.result
        if not isinstance(token, TokenResponse):
            step.turn.send_activity(LOGIN_FAILED)
            return step.end_dialog()

        details: QueryDetails = step.options
        try:
            report = await average_reading(
                self.client,
                token.token.get_secret_value(),
                details.room,
                details.capability,
            )
        except (DeviceLookupError, DeviceApiError) as e:
            logger.warning(f"Query for {details.capability} in '{details.room}' failed: {e}")
            step.turn.send_activity(lookup_failure_message(e))
            return step.end_dialog()

        step.turn.send_activity(average_reading_card(report))
        return step.end_dialog()
