"""SmartThings REST API client.

Stateless request/response wrapper around the four lookups the flows need:
locations, rooms, devices by capability and per-device capability status.
The bearer token is passed on every call and never kept on the client.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .models import CapabilityStatus, Device, ItemsEnvelope, Location, Room

logger = logging.getLogger(__name__)


class DeviceApiError(Exception):
    """Raised when a SmartThings request fails or returns an unexpected body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SmartThingsClient:
    """Async client for the SmartThings v1 REST API.

    Example:
        client = SmartThingsClient("https://api.smartthings.com/v1")
        locations = await client.list_locations(token)
        rooms = await client.list_rooms(token, locations[0].location_id)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, token: str, params: Optional[Dict[str, str]] = None) -> Any:
        client = self._get_client()
        try:
            response = await client.get(
                path,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"SmartThings GET {path} failed with {e.response.status_code}")
            raise DeviceApiError(f"GET {path} returned {e.response.status_code}", e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error(f"SmartThings GET {path} failed: {e}")
            raise DeviceApiError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            raise DeviceApiError(f"GET {path} returned invalid JSON") from e

    async def _get_items(self, path: str, token: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        body = await self._get(path, token, params)
        try:
            return ItemsEnvelope.model_validate(body).items
        except ValidationError as e:
            raise DeviceApiError(f"GET {path} returned an unexpected envelope") from e

    async def list_locations(self, token: str) -> List[Location]:
        items = await self._get_items("/locations", token)
        return [Location.model_validate(item) for item in items]

    async def list_rooms(self, token: str, location_id: str) -> List[Room]:
        items = await self._get_items(f"/locations/{location_id}/rooms", token)
        return [Room.model_validate(item) for item in items]

    async def list_devices(self, token: str, capability: str) -> List[Device]:
        items = await self._get_items("/devices", token, params={"capability": capability})
        return [Device.model_validate(item) for item in items]

    async def get_capability_status(self, token: str, device_id: str, capability: str) -> CapabilityStatus:
        body = await self._get(
            f"/devices/{device_id}/components/main/capabilities/{capability}/status",
            token,
        )
        try:
            return CapabilityStatus(capability=capability, attributes=body)
        except ValidationError as e:
            raise DeviceApiError(f"Status for device {device_id} could not be parsed") from e
