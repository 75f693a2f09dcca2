"""Shared fixtures: fake devices, a collecting response sink, directive builders."""

from types import SimpleNamespace
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from alexa_bridge.capabilities.protocols import (
    DeviceInterface,
    DeviceType,
    ObjectDetectionTypes,
    PanTiltZoomCapabilities,
    SecuritySystemMode,
    SecuritySystemState,
    TemperatureSettingState,
    TemperatureUnit,
    ThermostatMode,
)
from alexa_bridge.capabilities.state_tracker import DeviceStateTracker, reset_state_tracker


# ---------------------------------------------------------------------------
# Response sink
# ---------------------------------------------------------------------------


class CollectingSink:
    """Response sink that keeps every message it is sent."""

    def __init__(self):
        self.messages: list[dict[str, Any]] = []

    async def send(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def last(self) -> dict[str, Any]:
        return self.messages[-1]


# ---------------------------------------------------------------------------
# Fake devices
# ---------------------------------------------------------------------------


def _security_panel(
    mode: SecuritySystemMode = SecuritySystemMode.DISARMED,
    triggered: bool = False,
    flooded: Optional[bool] = None,
    device_id: str = "panel-1",
):
    interfaces = {DeviceInterface.SECURITY_SYSTEM}
    if flooded is not None:
        interfaces.add(DeviceInterface.FLOOD_SENSOR)
    return SimpleNamespace(
        id=device_id,
        name="Alarm Panel",
        type=DeviceType.SECURITY_SYSTEM,
        interfaces=interfaces,
        security_system_state=SecuritySystemState(
            mode=mode,
            triggered=triggered,
            supported_modes=list(SecuritySystemMode),
        ),
        flooded=bool(flooded),
        arm_security_system=AsyncMock(),
        disarm_security_system=AsyncMock(),
    )


def _thermostat(
    mode: ThermostatMode = ThermostatMode.HEAT,
    setpoint: Any = 21.0,
    available_modes: Optional[list[ThermostatMode]] = None,
    temperature: float = 20.5,
    thermometer: bool = True,
    device_id: str = "thermostat-1",
):
    interfaces = {DeviceInterface.TEMPERATURE_SETTING, DeviceInterface.ON_OFF}
    if thermometer:
        interfaces.add(DeviceInterface.THERMOMETER)
    setting = TemperatureSettingState(
        mode=mode,
        available_modes=available_modes if available_modes is not None else [
            ThermostatMode.OFF,
            ThermostatMode.HEAT,
            ThermostatMode.COOL,
            ThermostatMode.AUTO,
        ],
        setpoint=setpoint,
    )

    async def apply(command):
        if command.mode is not None:
            setting.mode = command.mode
        if command.setpoint is not None:
            setting.setpoint = command.setpoint

    return SimpleNamespace(
        id=device_id,
        name="Hallway",
        type=DeviceType.THERMOSTAT,
        interfaces=interfaces,
        temperature_setting=setting,
        temperature=temperature,
        temperature_unit=TemperatureUnit.C,
        set_temperature=AsyncMock(side_effect=apply),
    )


def _session_control():
    control = MagicMock()
    control.set_playback = AsyncMock()
    control.end_session = AsyncMock()
    return control


def _camera(
    interfaces: Optional[set[DeviceInterface]] = None,
    ptz: Optional[PanTiltZoomCapabilities] = None,
    classes: Optional[list[str]] = None,
    motion_detected: bool = False,
    device_id: str = "camera-1",
):
    if interfaces is None:
        interfaces = {
            DeviceInterface.RTC_SIGNALING_CHANNEL,
            DeviceInterface.OBJECT_DETECTOR,
            DeviceInterface.PAN_TILT_ZOOM,
            DeviceInterface.MOTION_SENSOR,
        }
    control = _session_control()
    return SimpleNamespace(
        id=device_id,
        name="Driveway",
        type=DeviceType.CAMERA,
        interfaces=set(interfaces),
        ptz_capabilities=ptz if ptz is not None else PanTiltZoomCapabilities(pan=True, tilt=True, zoom=True),
        motion_detected=motion_detected,
        get_object_types=AsyncMock(
            return_value=ObjectDetectionTypes(
                classes=classes if classes is not None else ["Person", "car", "ring", "motion"]
            )
        ),
        get_detection_input=AsyncMock(return_value="media-handle"),
        ptz_command=AsyncMock(),
        start_rtc_signaling_session=AsyncMock(return_value=control),
        session_control=control,
    )


# ---------------------------------------------------------------------------
# Directive envelopes
# ---------------------------------------------------------------------------


def _directive(
    namespace: str,
    name: str,
    payload: Optional[dict[str, Any]] = None,
    *,
    instance: Optional[str] = None,
    endpoint_id: str = "device-1",
) -> dict[str, Any]:
    header = {
        "namespace": namespace,
        "name": name,
        "messageId": "incoming-message-id",
        "correlationToken": "token-123",
        "payloadVersion": "3",
    }
    if instance is not None:
        header["instance"] = instance
    return {
        "directive": {
            "header": header,
            "endpoint": {"endpointId": endpoint_id, "scope": {"type": "BearerToken", "token": "t"}},
            "payload": payload or {},
        }
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_singletons():
    reset_state_tracker()
    yield
    reset_state_tracker()


@pytest.fixture
def tracker():
    return DeviceStateTracker()


@pytest.fixture
def sink():
    return CollectingSink()


@pytest.fixture
def make_security_panel():
    return _security_panel


@pytest.fixture
def make_thermostat():
    return _thermostat


@pytest.fixture
def make_camera():
    return _camera


@pytest.fixture
def make_directive():
    return _directive
