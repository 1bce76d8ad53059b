"""
Device Queries - Aggregation over the SmartThings API

Looks up the room the user asked about, fans out one status request per
matching device, and folds the results into something a flow can report.
A failed status request never aborts the others: every aggregation returns
which devices succeeded and which failed, and only an aggregation with no
usable reading at all is an error.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from numbers import Real
from typing import List, Optional, Sequence, Tuple

from ..infrastructure.smartthings.client import SmartThingsClient
from ..infrastructure.smartthings.models import AttributeState, CapabilityStatus, Device, Room
from .exceptions import NoDevicesFoundError, NoLocationError, PartialFailureError, RoomNotFoundError

logger = logging.getLogger(__name__)

OCCUPANCY_CAPABILITY = "motionSensor"
ACTIVE_VALUES = frozenset({"active", "present", "detected"})


@dataclass
class DeviceReading:
    device: Device
    status: CapabilityStatus
    state: AttributeState


@dataclass
class DeviceFailure:
    device: Device
    error: str


@dataclass
class AggregationResult:
    succeeded: List[DeviceReading] = field(default_factory=list)
    failed: List[DeviceFailure] = field(default_factory=list)

    @property
    def failed_names(self) -> List[str]:
        return [f.device.display_name for f in self.failed]


@dataclass
class AverageReading:
    room: Room
    capability: str
    value: int
    unit: Optional[str]
    result: AggregationResult

    @property
    def message(self) -> str:
        return f"Average reading in {self.room.name} is {self.value}{self.unit or ''}"


@dataclass
class OccupancyReport:
    room: Room
    active: int
    total: int
    result: AggregationResult

    @property
    def occupied(self) -> bool:
        return self.active > 0

    @property
    def message(self) -> str:
        if self.occupied:
            return (
                f"{self.room.name} looks occupied right now "
                f"({self.active} of {self.total} motion sensors active)."
            )
        return f"{self.room.name} looks free right now (no motion on {self.total} sensors)."


def failure_note(result: AggregationResult) -> Optional[str]:
    if not result.failed:
        return None
    return f"I couldn't read {', '.join(result.failed_names)}."


# ==============================================================================
# Lookups
# ==============================================================================

def resolve_room(rooms: Sequence[Room], name: str) -> Room:
    """
    An exact (case-insensitive) name match wins; otherwise the first room
    whose name contains `name`.
    """
    wanted = name.strip().lower()
    for room in rooms:
        if room.name.lower() == wanted:
            return room
    for room in rooms:
        if wanted in room.name.lower():
            return room
    raise RoomNotFoundError(name)


async def find_room(client: SmartThingsClient, token: str, room_name: str) -> Room:
    locations = await client.list_locations(token)
    if not locations:
        raise NoLocationError("The account has no SmartThings locations.")

    # Only the first location is considered.
    location = locations[0]
    rooms = await client.list_rooms(token, location.location_id)
    room = resolve_room(rooms, room_name)
    logger.info(f"Resolved room '{room_name}' to '{room.name}' ({room.room_id})")
    return room


async def devices_in_room(
    client: SmartThingsClient, token: str, room: Room, capability: str
) -> List[Device]:
    devices = await client.list_devices(token, capability)
    return [d for d in devices if d.room_id == room.room_id]


async def collect_statuses(
    client: SmartThingsClient, token: str, devices: Sequence[Device], capability: str
) -> AggregationResult:
    """
    Fetches every device's status concurrently. Order of completion is not
    significant; results are paired back with their device.
    """
    outcomes = await asyncio.gather(
        *(client.get_capability_status(token, d.device_id, capability) for d in devices),
        return_exceptions=True,
    )

    result = AggregationResult()
    for device, outcome in zip(devices, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning(f"Status fetch failed for {device.device_id}: {outcome}")
            result.failed.append(DeviceFailure(device=device, error=str(outcome)))
            continue
        try:
            state = outcome.reading()
        except KeyError as e:
            result.failed.append(DeviceFailure(device=device, error=str(e)))
            continue
        result.succeeded.append(DeviceReading(device=device, status=outcome, state=state))
    return result


# ==============================================================================
# Aggregations
# ==============================================================================

def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


async def _room_statuses(
    client: SmartThingsClient, token: str, room_name: str, capability: str
) -> Tuple[Room, AggregationResult]:
    room = await find_room(client, token, room_name)
    devices = await devices_in_room(client, token, room, capability)
    if not devices:
        raise NoDevicesFoundError(room.name, capability)
    result = await collect_statuses(client, token, devices, capability)
    return room, result


async def average_reading(
    client: SmartThingsClient, token: str, room_name: str, capability: str
) -> AverageReading:
    room, result = await _room_statuses(client, token, room_name, capability)

    numeric: List[DeviceReading] = []
    for reading in list(result.succeeded):
        value = reading.state.value
        if isinstance(value, Real) and not isinstance(value, bool):
            numeric.append(reading)
        else:
            result.succeeded.remove(reading)
            result.failed.append(DeviceFailure(device=reading.device, error=f"non-numeric reading {value!r}"))

    if not numeric:
        raise PartialFailureError(result.failed)

    mean = sum(r.state.value for r in numeric) / len(numeric)
    return AverageReading(
        room=room,
        capability=capability,
        value=round_half_up(mean),
        unit=numeric[0].state.unit,
        result=result,
    )


async def room_occupancy(
    client: SmartThingsClient, token: str, room_name: str, capability: str = OCCUPANCY_CAPABILITY
) -> OccupancyReport:
    room, result = await _room_statuses(client, token, room_name, capability)
    if not result.succeeded:
        raise PartialFailureError(result.failed)

    active = sum(1 for r in result.succeeded if str(r.state.value).lower() in ACTIVE_VALUES)
    return OccupancyReport(room=room, active=active, total=len(result.succeeded), result=result)
