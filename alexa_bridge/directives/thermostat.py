"""
Alexa.ThermostatController directive handlers.

Setpoint directives are validated against the device's current mode before
any command is sent:

- all three of targetSetpoint, lowerSetpoint and upperSetpoint together is
  never accepted (TRIPLE_SETPOINTS_UNSUPPORTED)
- lower/upper setpoints are only accepted in auto or heat-cool mode
  (DUAL_SETPOINTS_UNSUPPORTED)
- a single target or a delta is only applied outside those modes
"""

import logging
from typing import Any, Optional

from ..alexa.models import NS_THERMOSTAT, Directive
from ..alexa.responses import build_error_response, build_response
from ..capabilities.adapters.thermostat import DUAL_SETPOINT_MODES, ThermostatAdapter, to_device_mode
from ..capabilities.protocols import TemperatureCommand, TemperatureSettingState
from ..capabilities.registry import AdapterRegistry
from ..config import BridgeSettings, settings as default_settings
from .router import DirectiveRouter, ResponseSink

logger = logging.getLogger("alexa_bridge.directives.thermostat")

# https://developer.amazon.com/en-US/docs/alexa/device-apis/alexa-errorresponse.html#error-types
TRIPLE_SETPOINTS_UNSUPPORTED = "TRIPLE_SETPOINTS_UNSUPPORTED"
DUAL_SETPOINTS_UNSUPPORTED = "DUAL_SETPOINTS_UNSUPPORTED"
UNSUPPORTED_THERMOSTAT_MODE = "UNSUPPORTED_THERMOSTAT_MODE"


def thermostat_error_response(directive: Directive, error_type: str, message: str) -> dict[str, Any]:
    return build_error_response(directive, error_type, message, namespace=NS_THERMOSTAT)


class ThermostatHandlers:
    """SetTargetTemperature, AdjustTargetTemperature and SetThermostatMode."""

    def __init__(self, adapters: AdapterRegistry, config: Optional[BridgeSettings] = None):
        self.adapters = adapters
        self.config = config if config is not None else default_settings

    def register(self, router: DirectiveRouter) -> None:
        router.register(NS_THERMOSTAT, "SetTargetTemperature", self.set_temperature)
        router.register(NS_THERMOSTAT, "AdjustTargetTemperature", self.set_temperature)
        router.register(NS_THERMOSTAT, "SetThermostatMode", self.set_mode)

    def _thermostat_adapter(self, directive: Directive, device: Any) -> Optional[ThermostatAdapter]:
        adapter = self.adapters.for_device(device)
        if not isinstance(adapter, ThermostatAdapter):
            logger.debug("No thermostat adapter for %s, dropping %s", device.id, directive.key)
            return None
        return adapter

    def _to_device_scale(self, temperature: dict[str, Any], *, delta: bool = False) -> float:
        """Convert an Alexa temperature into the scale the device uses for setpoints."""
        value = float(temperature["value"])
        scale = temperature.get("scale", self.config.thermostat.setpoint_scale)
        device_scale = self.config.thermostat.setpoint_scale
        if scale == device_scale:
            return value
        if scale == "FAHRENHEIT" and device_scale == "CELSIUS":
            return value * 5 / 9 if delta else (value - 32) * 5 / 9
        if scale == "CELSIUS" and device_scale == "FAHRENHEIT":
            return value * 9 / 5 if delta else value * 9 / 5 + 32
        logger.warning("Cannot convert %s to %s, using value as-is", scale, device_scale)
        return value

    async def set_temperature(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        adapter = self._thermostat_adapter(directive, device)
        if adapter is None:
            return

        payload = directive.payload
        target = payload.get("targetSetpoint")
        lower = payload.get("lowerSetpoint")
        upper = payload.get("upperSetpoint")
        delta = payload.get("targetSetpointDelta")

        setting: TemperatureSettingState = device.temperature_setting
        dual_mode = setting.mode in DUAL_SETPOINT_MODES

        if target is not None and lower is not None and upper is not None:
            await sink.send(
                thermostat_error_response(
                    directive,
                    TRIPLE_SETPOINTS_UNSUPPORTED,
                    "The thermostat doesn't support triple setpoints in the current mode.",
                )
            )
            return

        if not dual_mode and (lower is not None or upper is not None):
            await sink.send(
                thermostat_error_response(
                    directive,
                    DUAL_SETPOINTS_UNSUPPORTED,
                    "The thermostat doesn't support dual setpoints in the current mode.",
                )
            )
            return

        if target is not None and not dual_mode:
            await device.set_temperature(
                TemperatureCommand(setpoint=self._to_device_scale(target))
            )

        if delta is not None and not dual_mode:
            current = device.temperature_setting.setpoint
            if isinstance(current, (int, float)):
                await device.set_temperature(
                    TemperatureCommand(setpoint=current + self._to_device_scale(delta, delta=True))
                )
            else:
                logger.debug("No single setpoint to adjust on %s", device.id)

        if lower is not None and upper is not None and dual_mode:
            await device.set_temperature(
                TemperatureCommand(
                    setpoint=(self._to_device_scale(lower), self._to_device_scale(upper))
                )
            )

        report = await adapter.set_state(device, payload)
        await sink.send(build_response(directive, properties=report.properties))

    async def set_mode(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        adapter = self._thermostat_adapter(directive, device)
        if adapter is None:
            return

        requested = (directive.payload.get("thermostatMode") or {}).get("value")
        setting: TemperatureSettingState = device.temperature_setting
        mode = to_device_mode(requested, setting.available_modes) if requested else None

        if mode is None:
            await sink.send(
                thermostat_error_response(
                    directive,
                    UNSUPPORTED_THERMOSTAT_MODE,
                    "The thermostat doesn't support the specified mode.",
                )
            )
            return

        await device.set_temperature(TemperatureCommand(mode=mode))

        report = await adapter.set_state(device, directive.payload)
        await sink.send(build_response(directive, properties=report.properties))
