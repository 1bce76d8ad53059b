import logging
from typing import Dict, Optional

import httpx

from ..interface import IntentRecognizer, IntentScore, RecognizerResult
from ...domain.models import Intent

logger = logging.getLogger(__name__)

# LUIS app intent names -> router intents. Anything missing maps to NONE.
LUIS_INTENTS: Dict[str, Intent] = {
    "SmartThings_Authorize": Intent.AUTHORIZE,
    "SmartThings_QueryState": Intent.QUERY_STATE,
    "SmartThings_CheckOccupancy": Intent.CHECK_OCCUPANCY,
    "q_SmartThings": Intent.QNA,
    "Utilities_Cancel": Intent.CANCEL,
    "Utilities_Help": Intent.HELP,
    "Cancel": Intent.CANCEL,
    "Help": Intent.HELP,
}


class LuisRecognizer(IntentRecognizer):
    """
    Calls the LUIS v3 prediction endpoint and folds its intents into the
    closed Intent set.
    """

    def __init__(
        self,
        app_id: Optional[str],
        api_key: Optional[str],
        hostname: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.app_id = app_id
        self.api_key = api_key
        self.hostname = hostname
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.app_id and self.api_key and self.hostname)

    @property
    def endpoint(self) -> str:
        host = self.hostname or ""
        if not host.startswith("http"):
            host = f"https://{host}"
        return f"{host}/luis/prediction/v3.0/apps/{self.app_id}/slots/production/predict"

    async def recognize(self, text: str) -> RecognizerResult:
        if not self.configured:
            raise RuntimeError("LUIS is not configured.")

        params = {
            "subscription-key": self.api_key,
            "verbose": "true",
            "show-all-intents": "true",
            "query": text,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.endpoint, params=params)
            response.raise_for_status()
            prediction = response.json().get("prediction", {})

        return self._to_result(text, prediction)

    def _to_result(self, text: str, prediction: dict) -> RecognizerResult:
        scores: Dict[Intent, float] = {}
        for name, data in (prediction.get("intents") or {}).items():
            intent = LUIS_INTENTS.get(name, Intent.NONE)
            score = float(data.get("score", 0.0))
            if score > scores.get(intent, -1.0):
                scores[intent] = score

        logger.debug(f"LUIS top intent for '{text}': {prediction.get('topIntent')}")

        return RecognizerResult(
            text=text,
            intents=[IntentScore(intent=i, score=s) for i, s in scores.items()],
            entities=prediction.get("entities") or {},
        )
