"""
Sign-in Flow - OAuth Prompt

Delegated to by any step that needs a token. The flow ends with a
TokenResponse as soon as the identity service has one for the user (which
may be immediately, in the same tick it began), or with None once the
timeout has passed. It never raises for a failed or abandoned sign-in: an
unreachable token service also ends the flow with None.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Optional

import httpx

from ..infrastructure.oauth import TokenProvider, TokenResponse
from ..schemas.activities import Card, CardButton, InputHint
from ..schemas.decisions import DialogTurnResult
from .flow import Flow, waiting

if TYPE_CHECKING:
    from .engine import DialogContext

logger = logging.getLogger(__name__)

SIGN_IN_FLOW = "sign_in"
MAGIC_CODE = re.compile(r"^\d{6}$")
DEFAULT_TIMEOUT_MS = 300_000


class SignInFlow(Flow):
    def __init__(
        self,
        token_provider: TokenProvider,
        connection_name: str,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        flow_id: str = SIGN_IN_FLOW,
        title: str = "Sign In",
        text: str = "Powered by SmartThings",
        retry_text: str = "Please sign in with the button above, then send me the code you were given.",
    ):
        super().__init__(flow_id)
        self.token_provider = token_provider
        self.connection_name = connection_name
        self.timeout_ms = timeout_ms
        self.title = title
        self.text = text
        self.retry_text = retry_text

    async def begin(self, dc: "DialogContext", options: Any = None) -> DialogTurnResult:
        expires_at = datetime.now(timezone.utc) + timedelta(milliseconds=self.timeout_ms)
        dc.active_frame.state = {"expires_at": expires_at.isoformat()}

        try:
            token = await self.token_provider.get_user_token(dc.turn.user_id, self.connection_name)
            if token is not None:
                logger.info(f"User {dc.turn.user_id} already signed in to {self.connection_name}")
                return await dc.end_dialog(token)
            await self._send_sign_in_card(dc)
        except httpx.HTTPError as e:
            logger.warning(f"Token service unavailable for user {dc.turn.user_id}: {e}")
            return await dc.end_dialog(None)

        return waiting()

    async def continue_turn(self, dc: "DialogContext") -> DialogTurnResult:
        if self._expired(dc):
            logger.warning(f"Sign-in timed out for user {dc.turn.user_id}")
            return await dc.end_dialog(None)

        try:
            token = await self._recognize_token(dc)
        except httpx.HTTPError as e:
            logger.warning(f"Token service unavailable for user {dc.turn.user_id}: {e}")
            return await dc.end_dialog(None)
        if token is not None:
            return await dc.end_dialog(token)

        dc.turn.send_activity(self.retry_text, InputHint.EXPECTING_INPUT)
        return waiting()

    async def reprompt(self, dc: "DialogContext") -> None:
        try:
            await self._send_sign_in_card(dc)
        except httpx.HTTPError as e:
            logger.warning(f"Could not refresh sign-in card for user {dc.turn.user_id}: {e}")
            dc.turn.send_activity(self.retry_text, InputHint.EXPECTING_INPUT)

    def _expired(self, dc: "DialogContext") -> bool:
        """
        Expiry is evaluated lazily, on the next turn that reaches this frame.
        A user who never replies leaves the frame on the stack until then.
        """
        raw = dc.active_frame.state.get("expires_at")
        if raw is None:
            return True
        return datetime.now(timezone.utc) > datetime.fromisoformat(raw)

    async def _recognize_token(self, dc: "DialogContext") -> Optional[TokenResponse]:
        value = dc.turn.value or {}
        if value.get("token"):
            return TokenResponse(connection_name=self.connection_name, token=value["token"])

        if MAGIC_CODE.match(dc.turn.text):
            return await self.token_provider.get_user_token(
                dc.turn.user_id, self.connection_name, magic_code=dc.turn.text
            )
        return None

    async def _send_sign_in_card(self, dc: "DialogContext") -> None:
        url = await self.token_provider.get_sign_in_url(dc.turn.user_id, self.connection_name)
        card = Card(
            title=self.title,
            text=self.text,
            actions=[CardButton(title=self.title, value="signin", style="primary", url=url)],
        )
        dc.turn.send_activity(card, InputHint.EXPECTING_INPUT)
