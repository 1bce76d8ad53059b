"""
OAuth Token Provider.

The sign-in flow never stores tokens. It asks a TokenProvider for the
user's current token every time it needs one, and the provider (an external
identity service) owns refresh and expiry.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional, Tuple

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr

logger = logging.getLogger(__name__)


class TokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    connection_name: str = Field(alias="connectionName")
    token: SecretStr
    expiration: Optional[datetime] = None


class TokenProvider(ABC):
    @abstractmethod
    async def get_user_token(
        self, user_id: str, connection_name: str, magic_code: Optional[str] = None
    ) -> Optional[TokenResponse]:
        """Returns the user's token, redeeming `magic_code` if given. None if not signed in."""
        pass

    @abstractmethod
    async def get_sign_in_url(self, user_id: str, connection_name: str) -> str:
        pass


class InMemoryTokenProvider(TokenProvider):
    """
    Development/testing stand-in for the identity service.
    Magic codes are registered with `add_magic_code`; redeeming one signs the user in.
    """

    def __init__(self):
        self._tokens: Dict[Tuple[str, str], TokenResponse] = {}
        self._codes: Dict[Tuple[str, str, str], str] = {}

    def add_token(self, user_id: str, connection_name: str, token: str):
        self._tokens[(user_id, connection_name)] = TokenResponse(
            connection_name=connection_name, token=token
        )

    def add_magic_code(self, user_id: str, connection_name: str, code: str, token: str):
        self._codes[(user_id, connection_name, code)] = token

    async def get_user_token(
        self, user_id: str, connection_name: str, magic_code: Optional[str] = None
    ) -> Optional[TokenResponse]:
        if magic_code:
            token = self._codes.pop((user_id, connection_name, magic_code), None)
            if token:
                self.add_token(user_id, connection_name, token)
        return self._tokens.get((user_id, connection_name))

    async def get_sign_in_url(self, user_id: str, connection_name: str) -> str:
        return f"https://example.invalid/signin?user={user_id}&connection={connection_name}"


class TokenServiceClient(TokenProvider):
    """
    Client for a Bot Framework style user token service.
    A 404 from GetToken means the user is not signed in.
    """

    def __init__(
        self,
        base_url: str,
        app_token: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.app_token = app_token
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.app_token}"} if self.app_token else {}
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def get_user_token(
        self, user_id: str, connection_name: str, magic_code: Optional[str] = None
    ) -> Optional[TokenResponse]:
        params = {"userId": user_id, "connectionName": connection_name}
        if magic_code:
            params["code"] = magic_code

        async with self._client() as client:
            response = await client.get("/api/usertoken/GetToken", params=params)

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return TokenResponse.model_validate(response.json())

    async def get_sign_in_url(self, user_id: str, connection_name: str) -> str:
        # The state parameter correlates the browser sign-in with this user.
        state = f"{user_id}:{connection_name}:{uuid.uuid4().hex}"
        async with self._client() as client:
            response = await client.get("/api/botsignin/GetSignInUrl", params={"state": state})
        response.raise_for_status()
        return response.text.strip().strip('"')

