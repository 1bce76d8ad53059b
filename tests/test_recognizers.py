"""Tests for intent recognizers and entity helpers."""

from typing import List, Type

import httpx
import pytest

from smartthings_dialogs.domain.models import Intent
from smartthings_dialogs.llm.interface import LLMProvider
from smartthings_dialogs.recognizers.adapters.llm_adapter import IntentPrediction, LLMIntentRecognizer
from smartthings_dialogs.recognizers.adapters.luis_adapter import LuisRecognizer
from smartthings_dialogs.recognizers.interface import (
    IntentScore,
    RecognizerResult,
    get_capability,
    get_room,
    top_intent,
)
from tests.mocks import luis_entities

LUIS_PREDICTION = {
    "query": "what's the temperature in apollo",
    "prediction": {
        "topIntent": "SmartThings_QueryState",
        "intents": {
            "SmartThings_QueryState": {"score": 0.93},
            "Utilities_Cancel": {"score": 0.02},
            "Some_Unmapped_Intent": {"score": 0.04},
        },
        "entities": {
            "SmartThings_Entities": [["Room"]],
            "SmartThings_Capability": [["temperatureMeasurement"]],
            "$instance": {"SmartThings_Entities": [{"text": "apollo"}]},
        },
    },
}


class FakeLLM(LLMProvider):
    def __init__(self, prediction=None, error=None):
        self.prediction = prediction
        self.error = error
        self.messages: List[dict] = []

    async def generate_structured_output(self, messages: List[dict], response_model: Type, temperature: float = 0.0):
        self.messages = messages
        if self.error:
            raise self.error
        return self.prediction


class TestEntityHelpers:
    def test_top_intent(self) -> None:
        result = RecognizerResult(text="x", intents=[
            IntentScore(intent=Intent.QNA, score=0.4),
            IntentScore(intent=Intent.AUTHORIZE, score=0.8),
        ])
        assert top_intent(result) == Intent.AUTHORIZE
        assert top_intent(result, min_score=0.9) == Intent.NONE
        assert top_intent(None) == Intent.NONE

    def test_room_and_capability(self) -> None:
        result = RecognizerResult(text="x", entities=luis_entities("Apollo", "temperatureMeasurement"))
        assert get_room(result) == "Apollo"
        assert get_capability(result) == "temperatureMeasurement"

    def test_room_requires_room_kind(self) -> None:
        entities = luis_entities("Apollo")
        entities["SmartThings_Entities"] = [["Device"]]
        assert get_room(RecognizerResult(text="x", entities=entities)) is None

    def test_missing_entities(self) -> None:
        result = RecognizerResult(text="x")
        assert get_room(result) is None
        assert get_capability(result) is None


class TestLuisRecognizer:
    def test_configured_needs_all_credentials(self) -> None:
        assert not LuisRecognizer("app", None, "westus.api.cognitive.microsoft.com").configured
        assert LuisRecognizer("app", "key", "westus.api.cognitive.microsoft.com").configured

    @pytest.mark.asyncio
    async def test_unconfigured_raises(self) -> None:
        with pytest.raises(RuntimeError):
            await LuisRecognizer(None, None, None).recognize("hi")

    @pytest.mark.asyncio
    async def test_maps_prediction(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=LUIS_PREDICTION)

        recognizer = LuisRecognizer(
            "app-1", "key-1", "westus.api.cognitive.microsoft.com", transport=httpx.MockTransport(handler)
        )
        result = await recognizer.recognize("what's the temperature in apollo")

        assert result.top_intent == Intent.QUERY_STATE
        assert get_room(result) == "apollo"
        assert get_capability(result) == "temperatureMeasurement"
        assert {s.intent for s in result.intents} == {Intent.QUERY_STATE, Intent.CANCEL, Intent.NONE}

        request = seen[0]
        assert request.url.path == "/luis/prediction/v3.0/apps/app-1/slots/production/predict"
        assert request.url.params["subscription-key"] == "key-1"
        assert request.url.params["query"] == "what's the temperature in apollo"


class TestLLMIntentRecognizer:
    @pytest.mark.asyncio
    async def test_prediction_becomes_luis_shaped_result(self) -> None:
        llm = FakeLLM(IntentPrediction(
            intent=Intent.QUERY_STATE, confidence=0.8, room="Apollo", capability="relativeHumidityMeasurement"
        ))
        result = await LLMIntentRecognizer(llm).recognize("how humid is apollo")

        assert result.top_intent == Intent.QUERY_STATE
        assert get_room(result) == "Apollo"
        assert get_capability(result) == "relativeHumidityMeasurement"
        assert "relativeHumidityMeasurement" in llm.messages[0]["content"]
        assert llm.messages[1] == {"role": "user", "content": "how humid is apollo"}

    @pytest.mark.asyncio
    async def test_provider_failure_yields_empty_result(self) -> None:
        result = await LLMIntentRecognizer(FakeLLM(error=ValueError("boom"))).recognize("hello")

        assert result.intents == []
        assert top_intent(result) == Intent.NONE

    def test_configured_needs_provider(self) -> None:
        assert not LLMIntentRecognizer(None).configured
