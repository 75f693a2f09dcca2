"""
Data shapes for the Alexa Smart Home messages the bridge produces and consumes.

Discovery endpoints, StateReports, ChangeReports and detection events are
produced by capability adapters; directives arrive from the transport. None of
these carry behaviour beyond serialisation to the wire shape.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..exceptions import InvalidDirectiveError
from ..utils.time import to_iso8601

# Interface namespaces
NS_ALEXA = "Alexa"
NS_DISCOVERY = "Alexa.Discovery"
NS_ENDPOINT_HEALTH = "Alexa.EndpointHealth"
NS_SECURITY_PANEL = "Alexa.SecurityPanelController"
NS_THERMOSTAT = "Alexa.ThermostatController"
NS_TEMPERATURE_SENSOR = "Alexa.TemperatureSensor"
NS_RANGE = "Alexa.RangeController"
NS_MOTION_SENSOR = "Alexa.MotionSensor"
NS_OBJECT_DETECTION = "Alexa.SmartVision.ObjectDetectionSensor"
NS_DATA_CONTROLLER = "Alexa.DataController"
NS_RTC_SESSION = "Alexa.RTCSessionController"


class ChangeCause(str, Enum):
    """Why a property in a ChangeReport changed."""
    PHYSICAL_INTERACTION = "PHYSICAL_INTERACTION"
    RULE_TRIGGER = "RULE_TRIGGER"
    PERIODIC_POLL = "PERIODIC_POLL"
    APP_INTERACTION = "APP_INTERACTION"


class DisplayCategory(str, Enum):
    """Display categories used by the supported device types."""
    CAMERA = "CAMERA"
    SECURITY_PANEL = "SECURITY_PANEL"
    THERMOSTAT = "THERMOSTAT"
    TEMPERATURE_SENSOR = "TEMPERATURE_SENSOR"


class Property(BaseModel):
    """A single reportable property sample."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    namespace: str
    name: str
    value: Any
    instance: Optional[str] = None
    time_of_sample: str = Field(default_factory=to_iso8601)
    uncertainty_in_milliseconds: int = 0

    def matches(self, other: "Property") -> bool:
        """True when both samples describe the same property slot."""
        return (
            self.namespace == other.namespace
            and self.name == other.name
            and self.instance == other.instance
        )

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        if self.instance is None:
            del data["instance"]
        return data


@dataclass
class DiscoveryEndpoint:
    """Capabilities and display categories for one device."""
    display_categories: list[str] = field(default_factory=list)
    capabilities: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "displayCategories": list(self.display_categories),
            "capabilities": list(self.capabilities),
        }


@dataclass
class StateReport:
    """Full snapshot of a device's reportable properties."""
    properties: list[Property] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"context": {"properties": [p.to_dict() for p in self.properties]}}


@dataclass
class ChangeReport:
    """
    Changed properties with a cause, plus the other reportable properties.

    ``context`` must never repeat a property listed in ``changed``; use
    ``from_snapshot`` to derive it from a full property snapshot.
    """
    cause: ChangeCause
    changed: list[Property]
    context: list[Property] = field(default_factory=list)

    @classmethod
    def from_snapshot(
        cls,
        cause: ChangeCause,
        changed: list[Property],
        snapshot: list[Property],
    ) -> "ChangeReport":
        context = [
            prop for prop in snapshot
            if not any(prop.matches(c) for c in changed)
        ]
        return cls(cause=cause, changed=changed, context=context)

    @property
    def changed_names(self) -> list[str]:
        return [p.name for p in self.changed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": {
                "payload": {
                    "change": {
                        "cause": {"type": self.cause.value},
                        "properties": [p.to_dict() for p in self.changed],
                    }
                }
            },
            "context": {"properties": [p.to_dict() for p in self.context]},
        }


@dataclass
class EventReport:
    """An interface-specific event such as an object detection."""
    namespace: str
    name: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": {
                "header": {"namespace": self.namespace, "name": self.name},
                "payload": self.payload,
            }
        }


Report = Union[StateReport, ChangeReport, EventReport]


class DirectiveHeader(BaseModel):
    """Directive header; unknown fields are kept and echoed back."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    namespace: str
    name: str
    message_id: str = ""
    correlation_token: Optional[str] = None
    payload_version: str = "3"
    instance: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Directive(BaseModel):
    """Inbound command envelope. Read-only input to handlers."""

    model_config = ConfigDict(extra="allow")

    header: DirectiveHeader
    endpoint: dict[str, Any] = Field(default_factory=dict)
    payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def key(self) -> str:
        return directive_key(self.header.namespace, self.header.name)

    @property
    def endpoint_id(self) -> Optional[str]:
        return self.endpoint.get("endpointId")

    @classmethod
    def parse(cls, raw: Mapping[str, Any]) -> "Directive":
        """
        Parse a raw envelope, accepting either the bare directive or the
        ``{"directive": {...}}`` wrapper the Alexa cloud sends.
        """
        body = raw.get("directive", raw) if isinstance(raw, Mapping) else raw
        try:
            return cls.model_validate(body)
        except ValidationError as e:
            raise InvalidDirectiveError(str(e)) from e


def directive_key(namespace: str, name: str) -> str:
    """Routing key for a namespace/name pair, e.g. ``Alexa.RangeController/SetRangeValue``."""
    return f"{namespace}/{name}"
