"""Tests for the query and occupancy flows, driven through the router."""

import httpx
import pytest

from smartthings_dialogs.domain.models import Intent
from smartthings_dialogs.flows import build_flow_set
from smartthings_dialogs.flows.main import RESTART_GREETING
from smartthings_dialogs.flows.occupancy import OccupancyFlow
from smartthings_dialogs.flows.query import LOGIN_FAILED, QueryFlow
from smartthings_dialogs.infrastructure.oauth import TokenServiceClient
from smartthings_dialogs.services.chat import ChatService
from tests.mocks import CONNECTION, USER_ID, Conversation, texts

TEMPERATURE = "temperatureMeasurement"


async def ask(conversation, recognizer, text, intent=Intent.QUERY_STATE, room="Apollo", capability=TEMPERATURE):
    recognizer.add(text, intent, room=room, capability=capability)
    await conversation.send("hi")
    return await conversation.send(text)


def cards(reply):
    return [a.card for a in reply.activities if a.card is not None]


class TestQueryFlow:
    """Average readings across a room's devices."""

    def test_step_counts(self, client) -> None:
        assert QueryFlow(client).step_count == 2
        assert OccupancyFlow(client).step_count == 2

    @pytest.mark.asyncio
    async def test_average_reading(self, conversation, recognizer, tokens, fake_api) -> None:
        tokens.add_token(USER_ID, CONNECTION, "tok-1")

        reply = await ask(conversation, recognizer, "what's the temperature in apollo")

        assert texts(reply) == ["Average reading in Apollo is 21C", RESTART_GREETING]
        assert [f.label for f in cards(reply)[0].fields] == ["Apollo Sensor 1", "Apollo Sensor 2"]
        assert reply.depth == 1
        # Devices outside the room are never queried.
        assert len(fake_api.status_requests) == 2
        assert all(r.headers["Authorization"] == "Bearer tok-1" for r in fake_api.requests)

    @pytest.mark.asyncio
    async def test_average_rounds_half_up(self, conversation, recognizer, tokens, fake_api) -> None:
        tokens.add_token(USER_ID, CONNECTION, "tok-1")
        fake_api.statuses[("temp-2", TEMPERATURE)] = {"temperature": {"value": 21, "unit": "C"}}

        reply = await ask(conversation, recognizer, "how warm is apollo")

        assert texts(reply)[0] == "Average reading in Apollo is 21C"

    @pytest.mark.asyncio
    async def test_partial_failure_is_reported(self, conversation, recognizer, tokens, fake_api) -> None:
        tokens.add_token(USER_ID, CONNECTION, "tok-1")
        fake_api.failing.add("temp-2")

        reply = await ask(conversation, recognizer, "what's the temperature in apollo")

        card = cards(reply)[0]
        assert card.text == "Average reading in Apollo is 20C\nI couldn't read Apollo Sensor 2."
        assert ("Apollo Sensor 2", "unavailable") in [(f.label, f.value) for f in card.fields]

    @pytest.mark.asyncio
    async def test_all_devices_failing(self, conversation, recognizer, tokens, fake_api) -> None:
        tokens.add_token(USER_ID, CONNECTION, "tok-1")
        fake_api.failing.update({"temp-1", "temp-2"})

        reply = await ask(conversation, recognizer, "what's the temperature in apollo")

        assert texts(reply)[0] == (
            "I couldn't get a reading from any of the devices in that room. Please try again later."
        )

    @pytest.mark.asyncio
    async def test_room_without_devices(self, conversation, recognizer, tokens) -> None:
        tokens.add_token(USER_ID, CONNECTION, "tok-1")

        reply = await ask(conversation, recognizer, "temperature in gemini", room="Gemini")

        assert texts(reply) == [
            "I didn't find any temperatureMeasurement devices in Gemini.",
            RESTART_GREETING,
        ]

    @pytest.mark.asyncio
    async def test_unknown_room(self, conversation, recognizer, tokens) -> None:
        tokens.add_token(USER_ID, CONNECTION, "tok-1")

        reply = await ask(conversation, recognizer, "temperature on mars", room="Mars")

        assert texts(reply)[0] == "I couldn't find a room called Mars."

    @pytest.mark.asyncio
    async def test_missing_capability_asks_for_details(self, conversation, recognizer, fake_api) -> None:
        reply = await ask(conversation, recognizer, "what about apollo", capability=None)

        assert texts(reply)[0].startswith("I need both a room and what to measure")
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_sign_in_then_reading(self, conversation, recognizer, tokens) -> None:
        reply = await ask(conversation, recognizer, "what's the temperature in apollo")

        assert reply.active_flow == "sign_in"
        assert reply.depth == 3
        assert len(cards(reply)) == 1

        tokens.add_magic_code(USER_ID, CONNECTION, "654321", "tok-2")
        reply = await conversation.send("654321")

        assert texts(reply) == ["Average reading in Apollo is 21C", RESTART_GREETING]

    @pytest.mark.asyncio
    async def test_sign_in_timeout_fails_login(self, conversation, recognizer, session_repo) -> None:
        await ask(conversation, recognizer, "what's the temperature in apollo")
        session = conversation.session
        session.active_frame.state["expires_at"] = "2000-01-01T00:00:00+00:00"
        session_repo.save(session)

        reply = await conversation.send("654321")

        assert texts(reply) == [LOGIN_FAILED, RESTART_GREETING]
        assert reply.depth == 1

    @pytest.mark.asyncio
    async def test_token_service_outage_fails_login(self, recognizer, client, session_repo) -> None:
        unavailable = TokenServiceClient(
            "https://token.test", "app-token", transport=httpx.MockTransport(lambda request: httpx.Response(503))
        )
        flows = build_flow_set(recognizer, client, unavailable, CONNECTION)
        conversation = Conversation(ChatService(session_repo, flows, recognizer))

        reply = await ask(conversation, recognizer, "temp in apollo")

        assert texts(reply) == [LOGIN_FAILED, RESTART_GREETING]
        assert reply.depth == 1

    @pytest.mark.asyncio
    async def test_api_error_is_reported(self, conversation, recognizer, tokens, fake_api) -> None:
        tokens.add_token(USER_ID, CONNECTION, "tok-1")
        fake_api.locations = None

        reply = await ask(conversation, recognizer, "what's the temperature in apollo")

        assert texts(reply)[0] == "Something went wrong talking to SmartThings. Please try again later."


class TestOccupancyFlow:
    """Occupancy from motion sensors."""

    @pytest.mark.asyncio
    async def test_occupied_room(self, conversation, recognizer, tokens) -> None:
        tokens.add_token(USER_ID, CONNECTION, "tok-1")

        reply = await ask(conversation, recognizer, "is apollo in use", Intent.CHECK_OCCUPANCY, capability=None)

        assert texts(reply) == [
            "Apollo looks occupied right now (1 of 1 motion sensors active).",
            RESTART_GREETING,
        ]

    @pytest.mark.asyncio
    async def test_free_room(self, conversation, recognizer, tokens) -> None:
        tokens.add_token(USER_ID, CONNECTION, "tok-1")

        reply = await ask(
            conversation, recognizer, "is gemini free", Intent.CHECK_OCCUPANCY, room="Gemini", capability=None
        )

        assert texts(reply)[0] == "Gemini looks free right now (no motion on 1 sensors)."

    @pytest.mark.asyncio
    async def test_missing_room_asks_for_one(self, conversation, recognizer) -> None:
        reply = await ask(conversation, recognizer, "is it busy", Intent.CHECK_OCCUPANCY, room=None, capability=None)

        assert texts(reply)[0] == "Which room should I check? Try \"Is Apollo occupied?\""
