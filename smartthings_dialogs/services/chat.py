"""
Chat Service - Top-level Router

This service is the entry point for every inbound message. It loads the
conversation's dialog stack, runs recognition once, resumes the active
flow, starts the main flow when nothing is running, and saves the stack
back. Messages for the same conversation are processed one at a time.
"""

import asyncio
import logging
from typing import Dict, Optional

import httpx

from ..execution.engine import DEFAULT_MAX_DEPTH, DialogContext, FlowSet
from ..execution.turn import TurnContext
from ..flows.main import MAIN_FLOW
from ..recognizers.interface import IntentRecognizer
from ..repositories.session import SessionRepository
from ..schemas.activities import Activity, TurnReply
from ..schemas.decisions import DialogTurnStatus
from ..state.models import SessionState

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(
        self,
        session_repository: SessionRepository,
        flows: FlowSet,
        recognizer: IntentRecognizer,
        default_flow: str = MAIN_FLOW,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.session_repo = session_repository
        self.flows = flows
        self.recognizer = recognizer
        self.default_flow = default_flow
        self.max_depth = max_depth
        # A lock lives only while a turn for its conversation holds or awaits it.
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    def get_session(self, conversation_id: str) -> Optional[SessionState]:
        return self.session_repo.get(conversation_id)

    def delete_session(self, conversation_id: str) -> bool:
        return self.session_repo.delete(conversation_id)

    async def process_activity(self, activity: Activity) -> TurnReply:
        """
        The Core Loop:
        1. Load (or create) the conversation's session
        2. Send a typing indicator and recognize the text
        3. Resume the stack; begin the main flow if it is empty or was cancelled
        4. Save the session
        """
        key = activity.conversation_id
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                return await self._process(activity)
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                del self._locks[key]

    async def _process(self, activity: Activity) -> TurnReply:
        session = self.session_repo.get_or_create(activity.conversation_id)
        turn = TurnContext(activity)
        turn.send_typing()

        turn.recognized = await self._recognize(turn)

        dc = DialogContext(self.flows, session, turn, max_depth=self.max_depth)
        result = await dc.continue_dialog()

        if result.status in (DialogTurnStatus.EMPTY, DialogTurnStatus.CANCELLED):
            logger.info(f"Starting '{self.default_flow}' for conversation {session.session_id}")
            result = await dc.begin_dialog(self.default_flow)

        self.session_repo.save(session)

        active = session.active_frame
        return TurnReply(
            conversation_id=session.session_id,
            status=result.status.value,
            active_flow=active.flow_id if active else None,
            depth=session.depth,
            activities=turn.responses,
        )

    async def _recognize(self, turn: TurnContext):
        if not self.recognizer.configured or not turn.text:
            return None
        try:
            return await self.recognizer.recognize(turn.text)
        except httpx.HTTPError as e:
            # Flows fall back to their own handling when there is no result.
            logger.warning(f"Recognition failed for conversation {turn.conversation_id}: {e}")
            return None
