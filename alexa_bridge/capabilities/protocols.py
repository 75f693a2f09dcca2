"""
Protocol definitions for the devices the bridge translates.

Devices are owned by the external device registry. The bridge only reads
their properties and invokes their commands, so everything here describes
that contract: device types, the capability tags a device may expose, the
state and command shapes of each capability, and the event details that
accompany device notifications.

A device is polymorphic over capabilities: check ``interfaces`` membership
before touching a capability-specific attribute.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable


class DeviceType(str, Enum):
    """Classification of devices in the registry."""
    CAMERA = "Camera"
    SECURITY_SYSTEM = "SecuritySystem"
    THERMOSTAT = "Thermostat"
    SENSOR = "Sensor"
    LIGHT = "Light"
    SWITCH = "Switch"
    LOCK = "Lock"


class DeviceInterface(str, Enum):
    """Capability tags a device may expose, in any combination."""
    SECURITY_SYSTEM = "SecuritySystem"
    FLOOD_SENSOR = "FloodSensor"
    TEMPERATURE_SETTING = "TemperatureSetting"
    THERMOMETER = "Thermometer"
    ON_OFF = "OnOff"
    PAN_TILT_ZOOM = "PanTiltZoom"
    OBJECT_DETECTOR = "ObjectDetector"
    MOTION_SENSOR = "MotionSensor"
    RTC_SIGNALING_CHANNEL = "RTCSignalingChannel"


# Security system

class SecuritySystemMode(str, Enum):
    AWAY_ARMED = "AwayArmed"
    HOME_ARMED = "HomeArmed"
    NIGHT_ARMED = "NightArmed"
    DISARMED = "Disarmed"


@dataclass
class SecuritySystemState:
    """State for security panels."""
    mode: SecuritySystemMode = SecuritySystemMode.DISARMED
    triggered: bool = False
    supported_modes: list[SecuritySystemMode] = field(default_factory=list)


# Thermostat

class ThermostatMode(str, Enum):
    OFF = "Off"
    COOL = "Cool"
    HEAT = "Heat"
    HEAT_COOL = "HeatCool"
    AUTO = "Auto"
    FAN_ONLY = "FanOnly"
    ECO = "Eco"
    DRY = "Dry"
    EMERGENCY_HEAT = "EmergencyHeat"
    ON = "On"


class TemperatureUnit(str, Enum):
    C = "C"
    F = "F"


# A single setpoint, or a (low, high) pair in any order
Setpoint = Union[float, tuple[float, float], list[float]]


@dataclass
class TemperatureSettingState:
    """State for thermostats."""
    mode: ThermostatMode = ThermostatMode.OFF
    available_modes: list[ThermostatMode] = field(default_factory=list)
    setpoint: Optional[Setpoint] = None


@dataclass
class TemperatureCommand:
    """Argument to ``set_temperature``; unset fields are left unchanged."""
    mode: Optional[ThermostatMode] = None
    setpoint: Optional[Setpoint] = None


# Pan/tilt/zoom

@dataclass
class PanTiltZoomCapabilities:
    """Which PTZ axes a camera supports."""
    pan: bool = False
    tilt: bool = False
    zoom: bool = False


class PanTiltZoomMovement(str, Enum):
    ABSOLUTE = "absolute"
    RELATIVE = "relative"


@dataclass
class PanTiltZoomCommand:
    """
    Argument to ``ptz_command``.

    pan and tilt are in [-1, 1], zoom in [0, 1] for absolute movement.
    """
    pan: Optional[float] = None
    tilt: Optional[float] = None
    zoom: Optional[float] = None
    movement: PanTiltZoomMovement = PanTiltZoomMovement.ABSOLUTE


# Object detection

@dataclass
class ObjectDetectionTypes:
    classes: list[str] = field(default_factory=list)


@dataclass
class ObjectDetectionResult:
    class_name: str
    id: Optional[str] = None
    score: Optional[float] = None


@dataclass
class ObjectsDetected:
    """Payload of an ObjectDetector event."""
    detections: list[ObjectDetectionResult] = field(default_factory=list)
    detection_id: Optional[str] = None
    event_id: Optional[str] = None
    timestamp: Optional[float] = None  # epoch ms


# Events

@dataclass
class EventDetails:
    """Metadata delivered with every device notification."""
    event_interface: DeviceInterface
    property: Optional[str] = None
    event_time: Optional[float] = None  # epoch ms
    event_id: Optional[str] = None


# Signaling

@dataclass
class RTCSessionDescription:
    type: str
    sdp: str


@dataclass
class RTCSignalingOptions:
    offer: Optional[RTCSessionDescription] = None
    disable_trickle: bool = True
    proxy: bool = False


SendIceCandidate = Callable[[dict[str, Any]], Awaitable[None]]


@runtime_checkable
class RTCSignalingSession(Protocol):
    """The caller side of a signaling exchange, handed to the device."""

    async def get_options(self) -> RTCSignalingOptions:
        ...

    async def create_local_description(
        self,
        type: str,
        setup: Optional[dict[str, Any]] = None,
        send_ice_candidate: Optional[SendIceCandidate] = None,
    ) -> RTCSessionDescription:
        ...

    async def set_remote_description(
        self,
        description: RTCSessionDescription,
        setup: Optional[dict[str, Any]] = None,
    ) -> None:
        ...

    async def add_ice_candidate(self, candidate: dict[str, Any]) -> None:
        ...


@runtime_checkable
class RTCSessionControl(Protocol):
    """Device-native handle for a started signaling session."""

    async def set_playback(self, audio: bool, video: bool) -> None:
        ...

    async def end_session(self) -> None:
        ...


# Devices

@runtime_checkable
class Device(Protocol):
    """
    Protocol for devices supplied by the external registry.

    Capability-specific attributes and commands are only present when the
    matching ``DeviceInterface`` is in ``interfaces``:

    - SECURITY_SYSTEM: ``security_system_state``, ``arm_security_system(mode)``,
      ``disarm_security_system()``
    - FLOOD_SENSOR: ``flooded``
    - TEMPERATURE_SETTING: ``temperature_setting``, ``set_temperature(command)``
    - THERMOMETER: ``temperature``, ``temperature_unit``
    - PAN_TILT_ZOOM: ``ptz_capabilities``, ``ptz_command(command)``
    - OBJECT_DETECTOR: ``get_object_types()``,
      ``get_detection_input(detection_id, event_id)``
    - MOTION_SENSOR: ``motion_detected``
    - RTC_SIGNALING_CHANNEL: ``start_rtc_signaling_session(session)``
    """

    @property
    def id(self) -> str:
        ...

    @property
    def name(self) -> str:
        ...

    @property
    def type(self) -> DeviceType:
        ...

    @property
    def interfaces(self) -> set[DeviceInterface]:
        ...


@runtime_checkable
class EventListenerRegister(Protocol):
    def remove_listener(self) -> None:
        ...


EventCallback = Callable[[Any, EventDetails, Any], Any]


@runtime_checkable
class ListenableDevice(Protocol):
    """Event subscription primitive supplied by the registry."""

    def listen(self, interface: DeviceInterface, callback: EventCallback) -> EventListenerRegister:
        ...


@runtime_checkable
class MediaResolver(Protocol):
    """Converts an opaque media handle into a retrievable URL."""

    async def convert_to_url(self, media: Any, mime_type: str) -> str:
        ...


def has_interface(device: Any, interface: DeviceInterface) -> bool:
    """True when the device exposes the capability tag."""
    return interface in getattr(device, "interfaces", ())
