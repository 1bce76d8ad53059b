"""
Occupancy Flow

Tells the user whether a room looks occupied, based on its motion sensors.
"""

import logging

from ..domain.models import QueryDetails
from ..execution.sign_in import SIGN_IN_FLOW
from ..execution.waterfall import StepContext, WaterfallFlow
from ..execution.schemas.state_machine import StepOutcome
from ..infrastructure.oauth import TokenResponse
from ..infrastructure.smartthings.client import DeviceApiError, SmartThingsClient
from ..services.device_queries import OCCUPANCY_CAPABILITY, room_occupancy
from ..services.exceptions import DeviceLookupError
from .cards import occupancy_card
from .query import LOGIN_FAILED, lookup_failure_message

logger = logging.getLogger(__name__)

OCCUPANCY_FLOW = "occupancy"


class OccupancyFlow(WaterfallFlow):
    def __init__(
        self,
        client: SmartThingsClient,
        capability: str = OCCUPANCY_CAPABILITY,
        flow_id: str = OCCUPANCY_FLOW,
    ):
        super().__init__(
            flow_id,
            [self.sign_in_step, self.check_step],
            options_model=QueryDetails,
        )
        self.client = client
        self.capability = capability

    async def sign_in_step(self, step: StepContext) -> StepOutcome:
        return step.begin_dialog(SIGN_IN_FLOW)

    async def check_step(self, step: StepContext) -> StepOutcome:
        token = step.result
        if not isinstance(token, TokenResponse):
            step.turn.send_activity(LOGIN_FAILED)
            return step.end_dialog()

        details: QueryDetails = step.options
        try:
            report = await room_occupancy(
                self.client,
                token.token.get_secret_value(),
                details.room,
                self.capability,
            )
        except (DeviceLookupError, DeviceApiError) as e:
            logger.warning(f"Occupancy check for '{details.room}' failed: {e}")
            step.turn.send_activity(lookup_failure_message(e))
            return step.end_dialog()

        step.turn.send_activity(occupancy_card(report))
        return step.end_dialog()
