"""
Camera directive handlers: PTZ range control and object detection classes.

Alexa, set Test Camera Pan to 20%
Alexa, set Test Camera Tilt to 20%
Alexa, set Test Camera Zoom to 100
"""

import logging
from typing import Any

from ..alexa.models import NS_OBJECT_DETECTION, NS_RANGE, Directive
from ..alexa.responses import build_response
from ..capabilities.adapters.camera import CameraAdapter
from ..capabilities.adapters.ptz import clamp_range_value, ptz_command
from ..capabilities.registry import AdapterRegistry
from .router import DirectiveRouter, ResponseSink

logger = logging.getLogger("alexa_bridge.directives.camera")


class CameraHandlers:
    """SetRangeValue, AdjustRangeValue and SetObjectDetectionClasses."""

    def __init__(self, adapters: AdapterRegistry):
        self.adapters = adapters

    def register(self, router: DirectiveRouter) -> None:
        router.register(NS_RANGE, "SetRangeValue", self.set_range_value)
        router.register(NS_RANGE, "AdjustRangeValue", self.adjust_range_value)
        router.register(NS_OBJECT_DETECTION, "SetObjectDetectionClasses", self.set_object_detection_classes)

    def _camera_adapter(self, directive: Directive, device: Any) -> CameraAdapter | None:
        adapter = self.adapters.for_device(device)
        if not isinstance(adapter, CameraAdapter):
            logger.debug("No camera adapter for %s, dropping %s", device.id, directive.key)
            return None
        return adapter

    async def set_range_value(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        adapter = self._camera_adapter(directive, device)
        if adapter is None:
            return

        instance = directive.header.instance
        range_value = directive.payload["rangeValue"]
        command = ptz_command(instance, range_value)
        if command is None:
            logger.debug("Unknown range instance %s on %s", instance, device.id)
            return

        await device.ptz_command(command)
        adapter.record_range_value(device, instance, range_value)

        report = await adapter.set_state(device, directive.payload)
        await sink.send(build_response(directive, properties=report.properties))

    async def adjust_range_value(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        adapter = self._camera_adapter(directive, device)
        if adapter is None:
            return

        instance = directive.header.instance
        range_delta = directive.payload["rangeValueDelta"]
        command = ptz_command(instance, range_delta, relative=True)
        if command is None:
            logger.debug("Unknown range instance %s on %s", instance, device.id)
            return

        await device.ptz_command(command)

        # Positions not yet commanded through Alexa are assumed to start at 0.
        previous = adapter.tracker.get(device.id, instance, 0)
        adapter.record_range_value(device, instance, clamp_range_value(instance, previous + range_delta))

        report = await adapter.set_state(device, directive.payload)
        await sink.send(build_response(directive, properties=report.properties))

    async def set_object_detection_classes(
        self,
        directive: Directive,
        device: Any,
        sink: ResponseSink,
    ) -> None:
        adapter = self._camera_adapter(directive, device)
        if adapter is None:
            return

        classes = await adapter.detection_classes(device)
        await sink.send(
            build_response(
                directive,
                properties=[adapter.detection_classes_property(classes)],
            )
        )
