"""Tests for the global cancel/help layer."""

import pytest

from smartthings_dialogs.domain.models import AuthorizeDetails, Intent
from smartthings_dialogs.execution.interrupts import (
    CANCEL_MESSAGE,
    HELP_MESSAGE,
    InterruptAction,
    InterruptLayer,
)
from smartthings_dialogs.execution.turn import TurnContext
from smartthings_dialogs.flows.authorize import AUTHORIZE_FLOW
from smartthings_dialogs.flows.main import GREETING
from smartthings_dialogs.recognizers.interface import IntentScore, RecognizerResult
from smartthings_dialogs.schemas.activities import Activity
from smartthings_dialogs.schemas.decisions import DialogTurnStatus
from smartthings_dialogs.state.models import SessionState
from tests.mocks import texts

INSTALLATION_PROMPT = (
    "Who should be able to access this SmartThings location? "
    "(1) Everybody in this workspace, (2) Only full members, or (3) Just me"
)


def turn(text, intent=None, score=0.9, recognized_text=None) -> TurnContext:
    recognized = None
    if intent is not None:
        recognized = RecognizerResult(
            text=recognized_text if recognized_text is not None else text,
            intents=[IntentScore(intent=intent, score=score)],
        )
    return TurnContext(Activity(conversation_id="conv-1", user_id="user-1", text=text), recognized)


class TestInterruptLayer:
    """Tests for interrupt detection."""

    @pytest.mark.parametrize("text", ["cancel", "Cancel", "  QUIT ", "never mind"])
    def test_cancel_utterances(self, text) -> None:
        assert InterruptLayer().check(turn(text)) == InterruptAction.CANCEL

    @pytest.mark.parametrize("text", ["help", "?"])
    def test_help_utterances(self, text) -> None:
        assert InterruptLayer().check(turn(text)) == InterruptAction.HELP

    def test_recognized_cancel_intent_above_threshold(self) -> None:
        layer = InterruptLayer(min_score=0.7)
        assert layer.check(turn("forget about it", Intent.CANCEL, 0.8)) == InterruptAction.CANCEL
        assert layer.check(turn("forget about it", Intent.CANCEL, 0.5)) is None

    def test_recognition_for_other_text_is_ignored(self) -> None:
        layer = InterruptLayer()
        assert layer.check(turn("1", Intent.HELP, 0.99, recognized_text="help me out")) is None

    def test_ordinary_text_is_not_an_interrupt(self) -> None:
        assert InterruptLayer().check(turn("just me", Intent.NONE)) is None


class TestInterruptsOnStack:
    """Cancel and help behave the same at any depth."""

    @pytest.mark.asyncio
    async def test_cancel_clears_stack(self, flows, make_dc) -> None:
        session = SessionState(session_id="conv-1")
        await make_dc(flows, text="start", session=session).begin_dialog(AUTHORIZE_FLOW, AuthorizeDetails())
        assert session.depth == 1

        dc = make_dc(flows, text="cancel", session=session)
        result = await dc.continue_dialog()

        assert result.status == DialogTurnStatus.CANCELLED
        assert session.depth == 0
        assert dc.turn.messages == [CANCEL_MESSAGE]

    @pytest.mark.asyncio
    async def test_help_reprompts_without_moving(self, flows, make_dc) -> None:
        session = SessionState(session_id="conv-1")
        await make_dc(flows, text="start", session=session).begin_dialog(AUTHORIZE_FLOW, AuthorizeDetails())
        before = session.model_dump()

        dc = make_dc(flows, text="help", session=session)
        result = await dc.continue_dialog()

        assert result.status == DialogTurnStatus.WAITING
        assert session.model_dump() == before
        assert dc.turn.messages == [HELP_MESSAGE, INSTALLATION_PROMPT]

    @pytest.mark.asyncio
    async def test_cancel_during_sign_in_restarts_main(self, conversation, recognizer) -> None:
        recognizer.add("connect my account", Intent.AUTHORIZE)
        await conversation.send("hi")
        await conversation.send("connect my account")
        await conversation.send("1")
        await conversation.send("2")
        await conversation.send("yes")
        assert conversation.session.depth == 3

        reply = await conversation.send("cancel")

        assert texts(reply) == [CANCEL_MESSAGE, GREETING]
        assert reply.depth == 1
        assert reply.active_flow == "main"
