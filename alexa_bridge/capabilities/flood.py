"""
Links flood sensors to a security panel's waterAlarm.

A panel device that exposes FloodSensor gets its ``flooded`` flag from the
flood-sensor devices configured for it. Any sensor reporting water raises the
flag; it drops once every linked sensor is dry.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

from .protocols import DeviceInterface, EventDetails, EventListenerRegister, has_interface

logger = logging.getLogger("alexa_bridge.capabilities.flood")

PanelEventCallback = Callable[[Any, EventDetails, bool], Optional[Awaitable[None]]]


class FloodSensorLink:
    """Subscribes a security panel to a set of flood-sensor devices."""

    def __init__(self, panel: Any, on_event: Optional[PanelEventCallback] = None):
        self.panel = panel
        self._on_event = on_event
        self._listeners: list[EventListenerRegister] = []
        self._flooded: dict[str, bool] = {}

    @property
    def linked_count(self) -> int:
        return len(self._listeners)

    def relink(self, flood_devices: Iterable[Any]) -> int:
        """
        Replace the current subscriptions with the given devices.

        Devices that are missing or do not expose FloodSensor are skipped.
        Returns the number of devices now linked.
        """
        self.close()
        for device in flood_devices:
            if device is None:
                continue
            if not has_interface(device, DeviceInterface.FLOOD_SENSOR):
                logger.warning("Skipping %s: not a flood sensor", getattr(device, "id", device))
                continue
            self._listeners.append(device.listen(DeviceInterface.FLOOD_SENSOR, self._on_flood))
        logger.info("Linked %d flood sensors to %s", len(self._listeners), self.panel.id)
        return len(self._listeners)

    async def _on_flood(self, source: Any, details: EventDetails, data: Any) -> None:
        source_id = getattr(source, "id", "unknown")
        if data:
            logger.info("Flood alarm triggered by %s on %s", details.event_interface.value, source_id)
        else:
            logger.info("Flood cleared on %s", source_id)

        self._flooded[source_id] = bool(data)
        self.panel.flooded = any(self._flooded.values())

        if self._on_event is None:
            return
        result = self._on_event(
            self.panel,
            EventDetails(
                event_interface=DeviceInterface.FLOOD_SENSOR,
                property="flooded",
                event_time=details.event_time,
                event_id=details.event_id,
            ),
            self.panel.flooded,
        )
        if inspect.isawaitable(result):
            await result

    def close(self) -> None:
        """Remove every subscription."""
        for listener in self._listeners:
            listener.remove_listener()
        self._listeners = []
        self._flooded.clear()
