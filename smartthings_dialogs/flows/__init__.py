"""
Flows - Concrete Conversations

Builds the process-wide FlowSet: the main dispatcher, its child flows and
the shared sign-in flow, each composed with the interrupt layer.
"""

from typing import Optional

from smartthings_dialogs.execution.engine import FlowSet
from smartthings_dialogs.execution.interrupts import InterruptLayer
from smartthings_dialogs.execution.sign_in import SIGN_IN_FLOW, SignInFlow
from smartthings_dialogs.flows.authorize import AUTHORIZE_FLOW, AuthorizeFlow
from smartthings_dialogs.flows.main import INTENT_ROUTES, MAIN_FLOW, MainFlow
from smartthings_dialogs.flows.occupancy import OCCUPANCY_FLOW, OccupancyFlow
from smartthings_dialogs.flows.query import QUERY_FLOW, QueryFlow
from smartthings_dialogs.infrastructure.oauth import TokenProvider
from smartthings_dialogs.infrastructure.smartthings.client import SmartThingsClient
from smartthings_dialogs.recognizers.interface import IntentRecognizer
from smartthings_dialogs.services.qna import QnAService


def build_flow_set(
    recognizer: IntentRecognizer,
    client: SmartThingsClient,
    token_provider: TokenProvider,
    connection_name: str,
    qna: Optional[QnAService] = None,
    interrupts: Optional[InterruptLayer] = None,
    oauth_timeout_ms: int = 300_000,
    min_score: float = 0.0,
) -> FlowSet:
    flows = FlowSet(interrupts if interrupts is not None else InterruptLayer())
    flows.add(MainFlow(recognizer, client, qna=qna, min_score=min_score))
    flows.add(AuthorizeFlow(connection_name))
    flows.add(QueryFlow(client))
    flows.add(OccupancyFlow(client))
    flows.add(SignInFlow(token_provider, connection_name, timeout_ms=oauth_timeout_ms))
    return flows


__all__ = [
    "AUTHORIZE_FLOW",
    "INTENT_ROUTES",
    "MAIN_FLOW",
    "OCCUPANCY_FLOW",
    "QUERY_FLOW",
    "SIGN_IN_FLOW",
    "build_flow_set",
]
