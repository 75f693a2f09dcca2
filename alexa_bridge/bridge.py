"""
Bridge facade.

Wires the state tracker, adapter registry, directive router and signaling
session cache together, and exposes the three entry points the host uses:
discovery, device events, and inbound directives. The host owns transport
and the device registry; it hands devices and a response sink in.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from .alexa.models import NS_ALEXA, Directive, StateReport
from .alexa.responses import build_discovery_response, stamp_report
from .capabilities.flood import FloodSensorLink
from .capabilities.protocols import EventDetails, MediaResolver
from .capabilities.registry import AdapterRegistry, create_adapter_registry
from .capabilities.state_tracker import DeviceStateTracker, get_state_tracker
from .config import BridgeSettings, settings as default_settings
from .directives import create_router
from .directives.router import DirectiveRouter, ResponseSink
from .directives.signaling import SessionCache, SignalingBridge

logger = logging.getLogger("alexa_bridge.bridge")

_BASE_INTERFACE = {
    "type": "AlexaInterface",
    "interface": NS_ALEXA,
    "version": "3",
}


class AlexaBridge:
    """
    Translation and dispatch layer between the device graph and Alexa.

    Usage:
        bridge = AlexaBridge(media_resolver=resolver)
        discovery = await bridge.discover(registry_devices)
        await bridge.handle_event(device, details, data, sink)
        await bridge.handle_directive(request_body, device, sink)
        await bridge.close()
    """

    def __init__(
        self,
        config: Optional[BridgeSettings] = None,
        tracker: Optional[DeviceStateTracker] = None,
        media_resolver: Optional[MediaResolver] = None,
        adapters: Optional[AdapterRegistry] = None,
    ):
        self.config = config if config is not None else default_settings
        self.tracker = tracker if tracker is not None else get_state_tracker()
        self.adapters = adapters if adapters is not None else create_adapter_registry(
            self.tracker,
            self.config,
            media_resolver=media_resolver,
        )
        self.sessions = SessionCache()
        self.signaling = SignalingBridge(self.sessions)
        self.router: DirectiveRouter = create_router(self.adapters, self.signaling, self.config)

    # --- Discovery ---

    async def discover_endpoint(self, device: Any) -> Optional[dict[str, Any]]:
        """Discovery endpoint for one device, or None if it cannot be exposed."""
        adapter = self.adapters.for_device(device)
        if adapter is None:
            return None

        endpoint = await adapter.discover(device)
        if endpoint is None:
            logger.debug("Device %s not applicable for discovery", device.id)
            return None

        return {
            "endpointId": device.id,
            "manufacturerName": self.config.manufacturer_name,
            "friendlyName": device.name,
            "description": f"{device.type.value} {device.name}",
            "displayCategories": endpoint.display_categories,
            "capabilities": [*endpoint.capabilities, dict(_BASE_INTERFACE)],
        }

    async def discover(
        self,
        devices: Iterable[Any],
        directive: Optional[Directive] = None,
    ) -> dict[str, Any]:
        """Discover.Response covering every applicable device."""
        endpoints = []
        for device in devices:
            endpoint = await self.discover_endpoint(device)
            if endpoint is not None:
                endpoints.append(endpoint)
        logger.info("Discovered %d endpoints", len(endpoints))
        return build_discovery_response(endpoints, directive)

    # --- Reports and events ---

    async def report_state(self, device: Any) -> Optional[StateReport]:
        adapter = self.adapters.for_device(device)
        if adapter is None:
            return None
        return await adapter.send_report(device)

    async def handle_event(
        self,
        device: Any,
        details: EventDetails,
        data: Any,
        sink: ResponseSink,
    ) -> Optional[dict[str, Any]]:
        """
        Translate a device event and deliver the stamped report.

        Events for one device must arrive in the order the device produced
        them; change detection depends on it.
        """
        adapter = self.adapters.for_device(device)
        if adapter is None:
            return None

        report = await adapter.send_event(device, details, data)
        if report is None:
            return None

        message = stamp_report(report, device.id)
        await sink.send(message)
        return message

    def link_flood_sensors(
        self,
        panel: Any,
        flood_devices: Iterable[Any],
        sink: ResponseSink,
    ) -> FloodSensorLink:
        """Feed flood sensors into a panel's waterAlarm and report changes."""
        async def forward(device: Any, details: EventDetails, flooded: bool) -> None:
            await self.handle_event(device, details, flooded, sink)

        link = FloodSensorLink(panel, on_event=forward)
        link.relink(flood_devices)
        return link

    # --- Directives ---

    async def handle_directive(
        self,
        directive: Union[Directive, Mapping[str, Any]],
        device: Any,
        sink: ResponseSink,
    ) -> bool:
        """Dispatch a directive; False when no handler exists for it."""
        return await self.router.dispatch(directive, device, sink)

    async def close(self) -> None:
        """End signaling sessions whose disconnect never arrived."""
        await self.signaling.close_all()
