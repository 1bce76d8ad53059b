"""
Service Layer Exceptions

Device lookups that cannot produce an answer. Flows catch these and turn
them into chat messages.
"""


class DeviceLookupError(Exception):
    """Base class for lookups that found nothing to report."""
    pass


class NoLocationError(DeviceLookupError):
    """Raised when the account has no SmartThings locations."""
    pass


class RoomNotFoundError(DeviceLookupError):
    """Raised when no room name contains the requested name."""

    def __init__(self, room: str):
        super().__init__(f"No room matching '{room}'")
        self.room = room


class NoDevicesFoundError(DeviceLookupError):
    """Raised when the matched room has no device with the capability."""

    def __init__(self, room: str, capability: str):
        super().__init__(f"No '{capability}' devices in '{room}'")
        self.room = room
        self.capability = capability


class PartialFailureError(DeviceLookupError):
    """Raised when every status fetch of an aggregation failed."""

    def __init__(self, failed: list):
        super().__init__(f"{len(failed)} device status request(s) failed")
        self.failed = failed
