"""
Registry mapping device categories to their capability adapters.

Populated once at startup; every component that needs to describe or report
on a device resolves its adapter here.
"""

import logging
from typing import Any, Optional

from ..config import BridgeSettings
from ..exceptions import DuplicateAdapterError
from .adapters import CameraAdapter, CapabilityAdapter, SecuritySystemAdapter, ThermostatAdapter
from .protocols import DeviceType, MediaResolver
from .state_tracker import DeviceStateTracker

logger = logging.getLogger("alexa_bridge.capabilities.registry")


class AdapterRegistry:
    """
    Central registry of capability adapters keyed by device type.

    Exactly one adapter per type; a second registration is an error.
    """

    def __init__(self) -> None:
        self._adapters: dict[DeviceType, CapabilityAdapter] = {}

    def register(self, device_type: DeviceType, adapter: CapabilityAdapter) -> None:
        """Register the adapter for a device type."""
        if device_type in self._adapters:
            raise DuplicateAdapterError(device_type.value)
        self._adapters[device_type] = adapter
        logger.info(
            "Registered adapter: %s -> %s",
            device_type.value,
            type(adapter).__name__,
        )

    def get(self, device_type: Optional[DeviceType]) -> Optional[CapabilityAdapter]:
        """Adapter for a device type, or None if the category is unsupported."""
        if device_type is None:
            return None
        return self._adapters.get(device_type)

    def for_device(self, device: Any) -> Optional[CapabilityAdapter]:
        """Adapter for a device's type."""
        return self.get(getattr(device, "type", None))

    def list_types(self) -> list[DeviceType]:
        """Return all device types with an adapter."""
        return list(self._adapters.keys())

    def __contains__(self, device_type: DeviceType) -> bool:
        return device_type in self._adapters


def create_adapter_registry(
    tracker: Optional[DeviceStateTracker] = None,
    config: Optional[BridgeSettings] = None,
    media_resolver: Optional[MediaResolver] = None,
) -> AdapterRegistry:
    """
    Build a registry with the built-in adapters.

    All adapters share the given state tracker (the process-wide one if None).
    """
    registry = AdapterRegistry()
    registry.register(
        DeviceType.CAMERA,
        CameraAdapter(tracker, config, media_resolver=media_resolver),
    )
    registry.register(DeviceType.SECURITY_SYSTEM, SecuritySystemAdapter(tracker, config))
    registry.register(DeviceType.THERMOSTAT, ThermostatAdapter(tracker, config))
    return registry
