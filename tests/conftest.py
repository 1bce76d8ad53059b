"""Common fixtures: fake SmartThings API, scripted recognizer and a chat service."""

from typing import Any, Dict, Optional

import httpx
import pytest

from smartthings_dialogs.execution.engine import DialogContext, FlowSet
from smartthings_dialogs.execution.turn import TurnContext
from smartthings_dialogs.flows import build_flow_set
from smartthings_dialogs.infrastructure.oauth import InMemoryTokenProvider
from smartthings_dialogs.infrastructure.smartthings.client import SmartThingsClient
from smartthings_dialogs.repositories.session import InMemorySessionRepository
from smartthings_dialogs.schemas.activities import Activity
from smartthings_dialogs.services.chat import ChatService
from smartthings_dialogs.state.models import SessionState
from tests.mocks import (
    API_URL,
    CONNECTION,
    CONVERSATION_ID,
    USER_ID,
    Conversation,
    FakeRecognizer,
    FakeSmartThings,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_api() -> FakeSmartThings:
    return FakeSmartThings()


@pytest.fixture
def client(fake_api: FakeSmartThings) -> SmartThingsClient:
    return SmartThingsClient(API_URL, transport=httpx.MockTransport(fake_api.handler))


@pytest.fixture
def tokens() -> InMemoryTokenProvider:
    return InMemoryTokenProvider()


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def flows(recognizer, client, tokens) -> FlowSet:
    return build_flow_set(recognizer, client, tokens, CONNECTION)


@pytest.fixture
def session_repo() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def chat(session_repo, flows, recognizer) -> ChatService:
    return ChatService(session_repository=session_repo, flows=flows, recognizer=recognizer)


@pytest.fixture
def conversation(chat) -> Conversation:
    return Conversation(chat)


@pytest.fixture
def make_dc():
    """Factory for a DialogContext over a fresh session and a single text turn."""

    def _make(flow_set: FlowSet, text: Optional[str] = None, session: Optional[SessionState] = None,
              value: Optional[Dict[str, Any]] = None, max_depth: int = 16) -> DialogContext:
        activity = Activity(conversation_id=CONVERSATION_ID, user_id=USER_ID, text=text, value=value)
        return DialogContext(
            flow_set,
            session if session is not None else SessionState(session_id=CONVERSATION_ID),
            TurnContext(activity),
            max_depth=max_depth,
        )

    return _make
