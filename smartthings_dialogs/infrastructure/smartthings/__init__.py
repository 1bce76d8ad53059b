from .client import DeviceApiError, SmartThingsClient
from .models import (
    CAPABILITY_ATTRIBUTES,
    AttributeState,
    CapabilityStatus,
    Device,
    Location,
    Room,
)

__all__ = [
    "CAPABILITY_ATTRIBUTES",
    "AttributeState",
    "CapabilityStatus",
    "Device",
    "DeviceApiError",
    "Location",
    "Room",
    "SmartThingsClient",
]
