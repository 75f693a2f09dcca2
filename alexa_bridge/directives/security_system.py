"""
Alexa.SecurityPanelController directive handlers.
"""

import logging
from typing import Any, Optional

from ..alexa.models import NS_SECURITY_PANEL, Directive, Property
from ..alexa.responses import build_error_response, build_response
from ..capabilities.adapters.security_system import (
    SecuritySystemAdapter,
    arm_state_property,
    from_arm_state,
)
from ..capabilities.protocols import SecuritySystemMode
from ..capabilities.registry import AdapterRegistry
from ..config import BridgeSettings, settings as default_settings
from .router import DirectiveRouter, ResponseSink

logger = logging.getLogger("alexa_bridge.directives.security_system")


def _with_arm_state(properties: list[Property], mode: SecuritySystemMode) -> list[Property]:
    """Replace the reported armState with the one just commanded."""
    commanded = arm_state_property(mode)
    return [commanded] + [p for p in properties if not p.matches(commanded)]


class SecurityPanelHandlers:
    """Arm and Disarm."""

    def __init__(self, adapters: AdapterRegistry, config: Optional[BridgeSettings] = None):
        self.adapters = adapters
        self.config = config if config is not None else default_settings

    def register(self, router: DirectiveRouter) -> None:
        router.register(NS_SECURITY_PANEL, "Arm", self.arm)
        router.register(NS_SECURITY_PANEL, "Disarm", self.disarm)

    def _panel_adapter(self, directive: Directive, device: Any) -> Optional[SecuritySystemAdapter]:
        adapter = self.adapters.for_device(device)
        if not isinstance(adapter, SecuritySystemAdapter):
            logger.debug("No security panel adapter for %s, dropping %s", device.id, directive.key)
            return None
        return adapter

    async def arm(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        adapter = self._panel_adapter(directive, device)
        if adapter is None:
            return

        arm_state = directive.payload.get("armState")
        mode = from_arm_state(arm_state) if arm_state else None
        if mode is None:
            await sink.send(
                build_error_response(
                    directive,
                    "INVALID_VALUE",
                    f"Unsupported arm state: {arm_state}",
                )
            )
            return

        await device.arm_security_system(mode)
        report = await adapter.set_state(device, directive.payload)

        await sink.send(
            build_response(
                directive,
                namespace=NS_SECURITY_PANEL,
                name="Arm.Response",
                payload={"exitDelayInSeconds": self.config.security.exit_delay_seconds},
                properties=_with_arm_state(report.properties, mode),
            )
        )

    async def disarm(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        adapter = self._panel_adapter(directive, device)
        if adapter is None:
            return

        await device.disarm_security_system()
        report = await adapter.set_state(device, directive.payload)

        await sink.send(
            build_response(
                directive,
                properties=_with_arm_state(report.properties, SecuritySystemMode.DISARMED),
            )
        )
