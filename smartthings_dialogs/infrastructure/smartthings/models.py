"""
SmartThings API response models.

Only the fields the flows read are declared; everything else in the JSON
envelopes is ignored.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Capability id -> attribute holding its reading in a status payload.
CAPABILITY_ATTRIBUTES: Dict[str, str] = {
    "temperatureMeasurement": "temperature",
    "relativeHumidityMeasurement": "humidity",
    "illuminanceMeasurement": "illuminance",
    "carbonDioxideMeasurement": "carbonDioxide",
    "motionSensor": "motion",
    "presenceSensor": "presence",
    "contactSensor": "contact",
    "switch": "switch",
    "battery": "battery",
}


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Location(_ApiModel):
    location_id: str = Field(alias="locationId")
    name: str


class Room(_ApiModel):
    room_id: str = Field(alias="roomId")
    location_id: Optional[str] = Field(None, alias="locationId")
    name: str


class Device(_ApiModel):
    device_id: str = Field(alias="deviceId")
    name: Optional[str] = None
    label: Optional[str] = None
    room_id: Optional[str] = Field(None, alias="roomId")

    @property
    def display_name(self) -> str:
        return self.label or self.name or self.device_id


class AttributeState(_ApiModel):
    value: Any = None
    unit: Optional[str] = None
    timestamp: Optional[str] = None


class CapabilityStatus(_ApiModel):
    """
    Status of one capability on one device, keyed by attribute name
    (e.g. {"temperature": {"value": 21, "unit": "C"}}).
    """

    capability: str
    attributes: Dict[str, AttributeState] = Field(default_factory=dict)

    def reading(self) -> AttributeState:
        """
        The attribute carrying this capability's reading. Unknown
        capabilities fall back to the payload's only attribute.
        """
        name = CAPABILITY_ATTRIBUTES.get(self.capability)
        if name and name in self.attributes:
            return self.attributes[name]
        if len(self.attributes) == 1:
            return next(iter(self.attributes.values()))
        raise KeyError(f"No reading attribute for capability '{self.capability}'")


class ItemsEnvelope(_ApiModel):
    items: List[Dict[str, Any]] = Field(default_factory=list)
