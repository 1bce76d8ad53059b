"""Tests for room lookup and device aggregation."""

import httpx
import pytest

from smartthings_dialogs.infrastructure.smartthings.client import DeviceApiError, SmartThingsClient
from smartthings_dialogs.infrastructure.smartthings.models import CapabilityStatus, Device, Room
from smartthings_dialogs.services.device_queries import (
    average_reading,
    collect_statuses,
    find_room,
    resolve_room,
    room_occupancy,
    round_half_up,
)
from smartthings_dialogs.services.exceptions import (
    NoDevicesFoundError,
    NoLocationError,
    PartialFailureError,
    RoomNotFoundError,
)
from tests.mocks import API_URL

TEMPERATURE = "temperatureMeasurement"


def rooms(*names):
    return [Room(room_id=f"room-{i}", name=name) for i, name in enumerate(names)]


# =============================================================================
# Room resolution
# =============================================================================


class TestResolveRoom:
    """Tests for matching a spoken room name to a room."""

    def test_exact_match_wins_over_substring(self) -> None:
        room = resolve_room(rooms("Apollo Annex", "Apollo"), "apollo")
        assert room.name == "Apollo"

    def test_first_substring_match(self) -> None:
        room = resolve_room(rooms("Gemini", "Apollo Annex", "Apollo West"), "apol")
        assert room.name == "Apollo Annex"

    def test_no_match_raises(self) -> None:
        with pytest.raises(RoomNotFoundError) as exc:
            resolve_room(rooms("Gemini"), "Mars")
        assert exc.value.room == "Mars"

    @pytest.mark.asyncio
    async def test_no_locations_raises(self, client, fake_api) -> None:
        fake_api.locations = []
        with pytest.raises(NoLocationError):
            await find_room(client, "tok", "Apollo")


# =============================================================================
# Aggregation
# =============================================================================


class TestRoundHalfUp:
    @pytest.mark.parametrize("value,expected", [(20.5, 21), (21.4, 21), (21.5, 22), (-0.5, 0), (-1.5, -1)])
    def test_rounding(self, value, expected) -> None:
        assert round_half_up(value) == expected


class TestAverageReading:
    """Tests for average_reading."""

    @pytest.mark.asyncio
    async def test_average_of_room_devices(self, client) -> None:
        report = await average_reading(client, "tok", "Apollo", TEMPERATURE)

        assert report.value == 21
        assert report.unit == "C"
        assert report.message == "Average reading in Apollo is 21C"
        assert report.result.failed == []

    @pytest.mark.asyncio
    async def test_zero_devices_raises(self, client) -> None:
        with pytest.raises(NoDevicesFoundError):
            await average_reading(client, "tok", "Gemini", TEMPERATURE)

    @pytest.mark.asyncio
    async def test_failed_device_is_excluded(self, client, fake_api) -> None:
        fake_api.failing.add("temp-1")

        report = await average_reading(client, "tok", "Apollo", TEMPERATURE)

        assert report.value == 22
        assert report.result.failed_names == ["Apollo Sensor 1"]

    @pytest.mark.asyncio
    async def test_non_numeric_reading_counts_as_failure(self, client, fake_api) -> None:
        fake_api.statuses[("temp-2", TEMPERATURE)] = {"temperature": {"value": "n/a"}}

        report = await average_reading(client, "tok", "Apollo", TEMPERATURE)

        assert report.value == 20
        assert report.result.failed_names == ["Apollo Sensor 2"]

    @pytest.mark.asyncio
    async def test_every_device_failing_raises(self, client, fake_api) -> None:
        fake_api.failing.update({"temp-1", "temp-2"})

        with pytest.raises(PartialFailureError) as exc:
            await average_reading(client, "tok", "Apollo", TEMPERATURE)
        assert len(exc.value.failed) == 2

    @pytest.mark.asyncio
    async def test_statuses_pair_with_devices(self, client) -> None:
        devices = [Device(device_id="temp-2", label="B"), Device(device_id="temp-1", label="A")]

        result = await collect_statuses(client, "tok", devices, TEMPERATURE)

        assert [(r.device.label, r.state.value) for r in result.succeeded] == [("B", 22), ("A", 20)]


class TestRoomOccupancy:
    @pytest.mark.asyncio
    async def test_active_motion_means_occupied(self, client) -> None:
        report = await room_occupancy(client, "tok", "Apollo")
        assert report.occupied
        assert (report.active, report.total) == (1, 1)

    @pytest.mark.asyncio
    async def test_inactive_motion_means_free(self, client) -> None:
        report = await room_occupancy(client, "tok", "gemini")
        assert not report.occupied


# =============================================================================
# API client and models
# =============================================================================


class TestSmartThingsClient:
    @pytest.mark.asyncio
    async def test_http_error_becomes_device_api_error(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"error": "unauthorized"}))
        client = SmartThingsClient(API_URL, transport=transport)

        with pytest.raises(DeviceApiError) as exc:
            await client.list_locations("bad-token")
        assert exc.value.status_code == 401
        await client.aclose()

    @pytest.mark.asyncio
    async def test_devices_filtered_by_capability_param(self, client, fake_api) -> None:
        devices = await client.list_devices("tok", "motionSensor")

        assert [d.display_name for d in devices] == ["Apollo Motion", "Gemini Motion"]
        assert fake_api.requests[-1].url.params["capability"] == "motionSensor"


class TestCapabilityStatus:
    def test_reading_uses_mapped_attribute(self) -> None:
        status = CapabilityStatus(
            capability=TEMPERATURE,
            attributes={"temperature": {"value": 19, "unit": "C"}, "range": {"value": None}},
        )
        assert status.reading().value == 19

    def test_unknown_capability_with_single_attribute(self) -> None:
        status = CapabilityStatus(capability="airQualitySensor", attributes={"airQuality": {"value": 3}})
        assert status.reading().value == 3

    def test_ambiguous_payload_raises(self) -> None:
        status = CapabilityStatus(capability="airQualitySensor", attributes={"a": {}, "b": {}})
        with pytest.raises(KeyError):
            status.reading()
