"""
Dependency Injection Wiring (Composition Root).

This module acts as the central "container" for the application's services.
It is responsible for:
1. Instantiating the core Singleton services (Recognizer, API clients, Repositories).
2. Wiring them together (e.g., injecting the clients into the FlowSet and the
   FlowSet into the ChatService).
3. Managing the lifecycle of these objects using @lru_cache to ensure
   they are created only once per application process.

By consolidating construction logic here, we keep the API layer (main.py)
clean and strictly focused on routing, while allowing for easy dependency
overrides during testing.
"""

import logging
from functools import lru_cache
from fastapi import Depends

from ..config import settings
from ..execution.engine import FlowSet
from ..execution.interrupts import InterruptLayer
from ..flows import build_flow_set
from ..infrastructure.oauth import InMemoryTokenProvider, TokenProvider, TokenServiceClient
from ..infrastructure.smartthings.client import SmartThingsClient
from ..llm.adapters.openai_adapter import OpenAIAdapter
from ..recognizers.adapters.llm_adapter import LLMIntentRecognizer
from ..recognizers.adapters.luis_adapter import LuisRecognizer
from ..recognizers.interface import IntentRecognizer
from ..repositories.session import SessionRepository, InMemorySessionRepository, SqlSessionRepository
from ..services.chat import ChatService
from ..services.qna import QnAMakerService, QnAService

from ..infrastructure.database.connection import get_engine, init_db

logger = logging.getLogger(__name__)


# Intent Recognizer (Singleton)
@lru_cache()
def get_recognizer() -> IntentRecognizer:
    if settings.RECOGNIZER_PROVIDER == "openai":
        llm = OpenAIAdapter(
            api_key=settings.OPENAI_API_KEY,
            model_name=settings.OPENAI_MODEL
        ) if settings.OPENAI_API_KEY else None
        return LLMIntentRecognizer(llm, temperature=settings.LLM_TEMPERATURE)

    return LuisRecognizer(
        app_id=settings.LUIS_APP_ID,
        api_key=settings.LUIS_API_KEY,
        hostname=settings.LUIS_API_HOSTNAME,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

# QnA Knowledge Base (Singleton)
@lru_cache()
def get_qna_service() -> QnAService:
    return QnAMakerService(
        knowledge_base_id=settings.QNA_KNOWLEDGEBASE_ID,
        endpoint_key=settings.QNA_ENDPOINT_KEY,
        host=settings.QNA_ENDPOINT_HOSTNAME,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

# Remote Device API (Singleton)
# Holds a pooled httpx client; closed on application shutdown.
@lru_cache()
def get_smartthings_client() -> SmartThingsClient:
    return SmartThingsClient(
        base_url=settings.SMARTTHINGS_API_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS
    )

# User Token Store (Singleton)
@lru_cache()
def get_token_provider() -> TokenProvider:
    if settings.TOKEN_PROVIDER == "memory":
        logger.warning("Using the in-memory token store; sign-in links will not work.")
        return InMemoryTokenProvider()
    return TokenServiceClient(
        base_url=settings.TOKEN_SERVICE_URL,
        app_token=settings.TOKEN_SERVICE_APP_TOKEN,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

# Global Cancel/Help layer (Singleton)
@lru_cache()
def get_interrupt_layer() -> InterruptLayer:
    return InterruptLayer()

# The Flow Registry (Singleton)
@lru_cache()
def get_flow_set(
    recognizer: IntentRecognizer = Depends(get_recognizer),
    client: SmartThingsClient = Depends(get_smartthings_client),
    tokens: TokenProvider = Depends(get_token_provider),
    qna: QnAService = Depends(get_qna_service),
    interrupts: InterruptLayer = Depends(get_interrupt_layer)
) -> FlowSet:
    return build_flow_set(
        recognizer=recognizer,
        client=client,
        token_provider=tokens,
        connection_name=settings.OAUTH_CONNECTION_NAME,
        qna=qna,
        interrupts=interrupts,
        oauth_timeout_ms=settings.OAUTH_TIMEOUT_MS,
        min_score=settings.LUIS_MIN_SCORE,
    )

# Session Repository (Singleton)
# Note: In-memory storage must be a singleton so data persists across requests!
@lru_cache()
def get_session_repository() -> SessionRepository:
    if settings.SESSION_STORE == "sql":
        engine = get_engine(settings.DATABASE_URL)
        init_db(engine)
        return SqlSessionRepository(engine)
    return InMemorySessionRepository()

# The Chat Service (Singleton Service)
@lru_cache()
def get_chat_service(
    session_repo: SessionRepository = Depends(get_session_repository),
    flows: FlowSet = Depends(get_flow_set),
    recognizer: IntentRecognizer = Depends(get_recognizer)
) -> ChatService:
    """
    Injects all necessary components into the ChatService.
    """
    return ChatService(
        session_repository=session_repo,
        flows=flows,
        recognizer=recognizer,
        max_depth=settings.MAX_STACK_DEPTH
    )
