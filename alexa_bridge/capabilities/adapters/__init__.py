"""
Capability adapters, one per device category.

Import implementations here to make them available.
"""

from .base import CapabilityAdapter
from .camera import CameraAdapter
from .security_system import SecuritySystemAdapter
from .thermostat import ThermostatAdapter

__all__ = [
    "CapabilityAdapter",
    "CameraAdapter",
    "SecuritySystemAdapter",
    "ThermostatAdapter",
]
