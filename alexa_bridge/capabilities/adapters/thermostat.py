"""
Thermostat adapter.

Maps TemperatureSetting onto Alexa.ThermostatController and Thermometer onto
Alexa.TemperatureSensor. A device setpoint is either a single number (heat,
cool, off...) or a low/high pair in auto/heat-cool modes.
"""

import logging
from typing import Any, Optional

from ...alexa.models import (
    NS_TEMPERATURE_SENSOR,
    NS_THERMOSTAT,
    ChangeCause,
    ChangeReport,
    DiscoveryEndpoint,
    DisplayCategory,
    Property,
    StateReport,
)
from ...utils.time import to_iso8601
from ..protocols import (
    DeviceInterface,
    EventDetails,
    Setpoint,
    TemperatureSettingState,
    TemperatureUnit,
    ThermostatMode,
    has_interface,
)
from .base import CapabilityAdapter

logger = logging.getLogger("alexa_bridge.capabilities.adapters.thermostat")

ALEXA_THERMOSTAT_MODES: dict[ThermostatMode, str] = {
    ThermostatMode.HEAT: "HEAT",
    ThermostatMode.COOL: "COOL",
    ThermostatMode.AUTO: "AUTO",
    ThermostatMode.HEAT_COOL: "AUTO",
    ThermostatMode.ECO: "ECO",
    ThermostatMode.EMERGENCY_HEAT: "EM_HEAT",
    ThermostatMode.OFF: "OFF",
}

# Modes in which the device holds a low/high setpoint pair
DUAL_SETPOINT_MODES = frozenset((ThermostatMode.AUTO, ThermostatMode.HEAT_COOL))

ALEXA_TEMPERATURE_SCALES: dict[TemperatureUnit, str] = {
    TemperatureUnit.C: "CELSIUS",
    TemperatureUnit.F: "FAHRENHEIT",
}

_SETPOINT_NAMES = ("targetSetpoint", "lowerSetpoint", "upperSetpoint")


def to_alexa_mode(mode: ThermostatMode) -> Optional[str]:
    return ALEXA_THERMOSTAT_MODES.get(mode)


def to_device_mode(
    alexa_mode: str,
    available_modes: list[ThermostatMode],
) -> Optional[ThermostatMode]:
    """
    Device mode for an Alexa thermostatMode, restricted to what the device offers.

    Returns None for unknown modes and for modes the device cannot enter.
    """
    for mode, name in ALEXA_THERMOSTAT_MODES.items():
        if name == alexa_mode and mode in available_modes:
            return mode
    return None


def split_setpoint(
    setpoint: Optional[Setpoint],
) -> tuple[Optional[float], Optional[float], Optional[float]]:
    """
    Split a device setpoint into (target, lower, upper).

    A pair is re-sorted so reversed input still yields lower <= upper.
    """
    if setpoint is None:
        return None, None, None
    if isinstance(setpoint, (int, float)):
        return float(setpoint), None, None
    first, second = setpoint[0], setpoint[1]
    return None, min(first, second), max(first, second)


class ThermostatAdapter(CapabilityAdapter):
    """Adapter for devices of type Thermostat."""

    def _setpoint_value(self, value: float) -> dict[str, Any]:
        return {"value": value, "scale": self.config.thermostat.setpoint_scale}

    def _thermostat_properties(
        self,
        device: Any,
        time_of_sample: Optional[str] = None,
    ) -> list[Property]:
        setting: TemperatureSettingState = device.temperature_setting
        time_of_sample = time_of_sample or to_iso8601()
        target, lower, upper = split_setpoint(setting.setpoint)

        properties = [
            Property(
                namespace=NS_THERMOSTAT,
                name="thermostatMode",
                value=to_alexa_mode(setting.mode),
                time_of_sample=time_of_sample,
            )
        ]
        for name, value in zip(_SETPOINT_NAMES, (target, lower, upper)):
            if value is None:
                continue
            properties.append(
                Property(
                    namespace=NS_THERMOSTAT,
                    name=name,
                    value=self._setpoint_value(value),
                    time_of_sample=time_of_sample,
                )
            )
        return properties

    def _temperature_property(self, device: Any, time_of_sample: Optional[str] = None) -> Property:
        return Property(
            namespace=NS_TEMPERATURE_SENSOR,
            name="temperature",
            value={
                "value": device.temperature,
                "scale": ALEXA_TEMPERATURE_SCALES.get(device.temperature_unit, "CELSIUS"),
            },
            time_of_sample=time_of_sample or to_iso8601(),
        )

    def _snapshot(self, device: Any) -> list[Property]:
        properties = []
        if has_interface(device, DeviceInterface.TEMPERATURE_SETTING):
            properties.extend(self._thermostat_properties(device))
        if has_interface(device, DeviceInterface.THERMOMETER):
            properties.append(self._temperature_property(device))
        return properties

    def _track(self, device: Any, properties: list[Property]) -> dict[str, Any]:
        """Record thermostat values; returns the names whose values changed."""
        values: dict[str, Any] = {name: None for name in _SETPOINT_NAMES}
        for prop in properties:
            if prop.namespace == NS_THERMOSTAT:
                values[prop.name] = prop.value
        return self.tracker.update(device.id, values)

    async def discover(self, device: Any) -> Optional[DiscoveryEndpoint]:
        has_setting = has_interface(device, DeviceInterface.TEMPERATURE_SETTING)
        has_thermometer = has_interface(device, DeviceInterface.THERMOMETER)
        if not has_setting and not has_thermometer:
            return None

        capabilities: list[dict[str, Any]] = []
        display_categories: list[str] = []

        if has_setting:
            setting: TemperatureSettingState = device.temperature_setting
            supported_modes: list[str] = []
            for mode in setting.available_modes:
                name = to_alexa_mode(mode)
                if name is not None and name not in supported_modes:
                    supported_modes.append(name)

            display_categories.append(DisplayCategory.THERMOSTAT.value)
            capabilities.append(
                {
                    "type": "AlexaInterface",
                    "interface": NS_THERMOSTAT,
                    "version": "3.2",
                    "properties": {
                        "supported": [
                            {"name": "targetSetpoint"},
                            {"name": "lowerSetpoint"},
                            {"name": "upperSetpoint"},
                            {"name": "thermostatMode"},
                        ],
                        "proactivelyReported": True,
                        "retrievable": True,
                    },
                    "configuration": {
                        "supportedModes": supported_modes,
                    },
                }
            )

        if has_thermometer:
            display_categories.append(DisplayCategory.TEMPERATURE_SENSOR.value)
            capabilities.append(
                {
                    "type": "AlexaInterface",
                    "interface": NS_TEMPERATURE_SENSOR,
                    "version": "3",
                    "properties": {
                        "supported": [{"name": "temperature"}],
                        "proactivelyReported": True,
                        "retrievable": True,
                    },
                }
            )

        return DiscoveryEndpoint(
            display_categories=display_categories,
            capabilities=capabilities,
        )

    async def send_report(self, device: Any) -> StateReport:
        properties = self._snapshot(device)
        if has_interface(device, DeviceInterface.TEMPERATURE_SETTING):
            self._track(device, properties)
        return StateReport(properties=properties)

    async def send_event(
        self,
        device: Any,
        details: EventDetails,
        data: Any,
    ) -> Optional[ChangeReport]:
        time_of_sample = to_iso8601(details.event_time)

        if details.event_interface == DeviceInterface.TEMPERATURE_SETTING:
            properties = self._thermostat_properties(device, time_of_sample)
            changed_names = self._track(device, properties)
            if not changed_names:
                logger.debug("Thermostat setting unchanged for %s", device.id)
                return None

            changed = [p for p in properties if p.name in changed_names]
            if not changed:
                # Only a setpoint disappeared; report the whole setting.
                changed = properties
            return ChangeReport.from_snapshot(
                ChangeCause.RULE_TRIGGER,
                changed,
                self._snapshot(device),
            )

        if details.event_interface == DeviceInterface.THERMOMETER:
            return ChangeReport.from_snapshot(
                ChangeCause.PERIODIC_POLL,
                [self._temperature_property(device, time_of_sample)],
                self._snapshot(device),
            )

        logger.debug("Ignoring %s event from %s", details.event_interface.value, device.id)
        return None
