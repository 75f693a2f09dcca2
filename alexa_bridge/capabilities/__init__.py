"""
Capability system for translating devices into Alexa messages.

This module provides:
- Protocol definitions for devices and their capabilities
- Capability adapters per device category
- Registry resolving a device to its adapter
- State tracker used for change detection
"""

from .adapters import CameraAdapter, CapabilityAdapter, SecuritySystemAdapter, ThermostatAdapter
from .flood import FloodSensorLink
from .protocols import (
    Device,
    DeviceInterface,
    DeviceType,
    EventDetails,
    MediaResolver,
    ObjectDetectionResult,
    ObjectDetectionTypes,
    ObjectsDetected,
    PanTiltZoomCapabilities,
    PanTiltZoomCommand,
    PanTiltZoomMovement,
    SecuritySystemMode,
    SecuritySystemState,
    TemperatureCommand,
    TemperatureSettingState,
    TemperatureUnit,
    ThermostatMode,
    has_interface,
)
from .registry import AdapterRegistry, create_adapter_registry
from .state_tracker import DeviceStateTracker, get_state_tracker, reset_state_tracker

__all__ = [
    # Protocols
    "Device",
    "DeviceInterface",
    "DeviceType",
    "EventDetails",
    "MediaResolver",
    "has_interface",
    # State types
    "ObjectDetectionResult",
    "ObjectDetectionTypes",
    "ObjectsDetected",
    "PanTiltZoomCapabilities",
    "PanTiltZoomCommand",
    "PanTiltZoomMovement",
    "SecuritySystemMode",
    "SecuritySystemState",
    "TemperatureCommand",
    "TemperatureSettingState",
    "TemperatureUnit",
    "ThermostatMode",
    # Adapters
    "CapabilityAdapter",
    "CameraAdapter",
    "SecuritySystemAdapter",
    "ThermostatAdapter",
    "FloodSensorLink",
    # Registry
    "AdapterRegistry",
    "create_adapter_registry",
    # State
    "DeviceStateTracker",
    "get_state_tracker",
    "reset_state_tracker",
]
