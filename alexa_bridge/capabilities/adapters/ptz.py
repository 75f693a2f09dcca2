"""
RangeController discovery blocks and value mapping for pan/tilt/zoom.

The numeric domains, precisions and presets are fixed by the Alexa camera
contract. A device only decides whether an axis exists.
"""

from dataclasses import dataclass
from typing import Any, Optional

from ...alexa.models import NS_RANGE
from ...exceptions import UnsupportedAxisError
from ..protocols import PanTiltZoomCapabilities, PanTiltZoomCommand, PanTiltZoomMovement

INSTANCE_PAN = "Camera.Pan"
INSTANCE_TILT = "Camera.Tilt"
INSTANCE_ZOOM = "Camera.Zoom"


@dataclass(frozen=True)
class AxisRange:
    """Alexa-side range for one PTZ axis."""
    axis: str
    instance: str
    minimum: float
    maximum: float
    precision: float
    # Divisor that maps the Alexa range onto the device command domain
    scale: float
    signed: bool


PAN = AxisRange("pan", INSTANCE_PAN, -200, 200, 0.1, 200.0, True)
TILT = AxisRange("tilt", INSTANCE_TILT, -200, 200, 1, 200.0, True)
ZOOM = AxisRange("zoom", INSTANCE_ZOOM, 0, 100, 1, 100.0, False)

AXES_BY_INSTANCE = {axis.instance: axis for axis in (PAN, TILT, ZOOM)}


def _text(text: str) -> dict[str, Any]:
    return {"@type": "text", "value": {"text": text, "locale": "en-US"}}


def _asset(asset_id: str) -> dict[str, Any]:
    return {"@type": "asset", "value": {"assetId": asset_id}}


def _preset(range_value: float, *names: dict[str, Any]) -> dict[str, Any]:
    return {
        "rangeValue": range_value,
        "presetResources": {"friendlyNames": list(names)},
    }


def _range_capability(
    axis: AxisRange,
    friendly_names: list[str],
    presets: list[dict[str, Any]],
) -> dict[str, Any]:
    return {
        "type": "AlexaInterface",
        "interface": NS_RANGE,
        "version": "3",
        "instance": axis.instance,
        "capabilityResources": {
            "friendlyNames": [_text(name) for name in friendly_names],
        },
        "properties": {
            "supported": [{"name": "rangeValue"}],
            "retrievable": True,
            "proactivelyReported": True,
        },
        "configuration": {
            "supportedRange": {
                "minimumValue": axis.minimum,
                "maximumValue": axis.maximum,
                "precision": axis.precision,
            },
            "unitOfMeasure": "Alexa.Unit.Percent",
            "presets": presets,
        },
    }


def _signed_presets(low_gesture: str, low_text: str, high_gesture: str, high_text: str) -> list[dict[str, Any]]:
    return [
        _preset(
            -200,
            _asset("Alexa.Value.Minimum"),
            _asset("Alexa.Value.Low"),
            _asset(low_gesture),
            _text(low_text),
        ),
        _preset(0, _asset("Alexa.Value.Medium"), _text("Center")),
        _preset(
            200,
            _asset("Alexa.Value.Maximum"),
            _asset("Alexa.Value.High"),
            _asset(high_gesture),
            _text(high_text),
        ),
    ]


def pan_capability(capabilities: PanTiltZoomCapabilities) -> dict[str, Any]:
    """RangeController block for Camera.Pan. Raises if pan is unsupported."""
    if not capabilities.pan:
        raise UnsupportedAxisError("pan")
    return _range_capability(
        PAN,
        ["Camera Pan", "Camera Rotation", "Rotation"],
        _signed_presets("Alexa.Gesture.SwipeLeft", "Far Left", "Alexa.Gesture.SwipeRight", "Far Right"),
    )


def tilt_capability(capabilities: PanTiltZoomCapabilities) -> dict[str, Any]:
    """RangeController block for Camera.Tilt. Raises if tilt is unsupported."""
    if not capabilities.tilt:
        raise UnsupportedAxisError("tilt")
    return _range_capability(
        TILT,
        ["Camera Tilt", "Tilt"],
        _signed_presets("Alexa.Gesture.SwipeDown", "Far Down", "Alexa.Gesture.SwipeUp", "Far Up"),
    )


def zoom_capability(capabilities: PanTiltZoomCapabilities) -> dict[str, Any]:
    """RangeController block for Camera.Zoom. Raises if zoom is unsupported."""
    if not capabilities.zoom:
        raise UnsupportedAxisError("zoom")
    return _range_capability(
        ZOOM,
        ["Camera Zoom", "Zoom"],
        [
            _preset(100, _asset("Alexa.Value.Maximum"), _asset("Alexa.Value.High"), _text("Far In")),
            _preset(0, _asset("Alexa.Value.Minimum"), _asset("Alexa.Value.Low"), _text("Far Back")),
        ],
    )


def range_capabilities(capabilities: PanTiltZoomCapabilities) -> list[dict[str, Any]]:
    """RangeController blocks for every supported axis, pan first."""
    blocks = []
    if capabilities.pan:
        blocks.append(pan_capability(capabilities))
    if capabilities.tilt:
        blocks.append(tilt_capability(capabilities))
    if capabilities.zoom:
        blocks.append(zoom_capability(capabilities))
    return blocks


def to_device_value(axis: AxisRange, range_value: float) -> float:
    """
    Map an absolute Alexa rangeValue onto the device domain.

    Zoom takes the magnitude over 100; pan and tilt keep their sign over 200.
    """
    value = abs(range_value) / axis.scale
    if axis.signed and range_value < 0:
        value = -value
    return value


def to_device_delta(axis: AxisRange, range_delta: float) -> float:
    """Map a rangeValueDelta onto a relative device movement, sign preserved."""
    return range_delta / axis.scale


def ptz_command(
    instance: str,
    range_value: float,
    *,
    relative: bool = False,
) -> Optional[PanTiltZoomCommand]:
    """Device command for a RangeController instance, or None for unknown instances."""
    axis = AXES_BY_INSTANCE.get(instance)
    if axis is None:
        return None
    if relative:
        value = to_device_delta(axis, range_value)
        movement = PanTiltZoomMovement.RELATIVE
    else:
        value = to_device_value(axis, range_value)
        movement = PanTiltZoomMovement.ABSOLUTE
    command = PanTiltZoomCommand(movement=movement)
    setattr(command, axis.axis, value)
    return command


def clamp_range_value(instance: str, range_value: float) -> float:
    """Clamp a rangeValue into the instance's Alexa range."""
    axis = AXES_BY_INSTANCE[instance]
    return max(axis.minimum, min(axis.maximum, range_value))
