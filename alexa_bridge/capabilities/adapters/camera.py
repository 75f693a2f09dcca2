"""
Camera adapter.

A camera is only discoverable when it can run a real-time signaling session.
On top of Alexa.RTCSessionController it may add object detection (with the
matching DataController), one RangeController per supported PTZ axis, and a
motion sensor.
"""

import logging
from typing import Any, Optional

from ...alexa.models import (
    NS_DATA_CONTROLLER,
    NS_MOTION_SENSOR,
    NS_OBJECT_DETECTION,
    NS_RANGE,
    NS_RTC_SESSION,
    ChangeCause,
    ChangeReport,
    DiscoveryEndpoint,
    DisplayCategory,
    EventReport,
    Property,
    StateReport,
)
from ...config import BridgeSettings
from ...utils.time import to_iso8601
from ..protocols import (
    DeviceInterface,
    EventDetails,
    MediaResolver,
    ObjectsDetected,
    has_interface,
)
from ..state_tracker import DeviceStateTracker
from .base import CapabilityAdapter
from .ptz import AXES_BY_INSTANCE, range_capabilities

logger = logging.getLogger("alexa_bridge.capabilities.adapters.camera")


def _detection_state(detected: bool) -> str:
    return "DETECTED" if detected else "NOT_DETECTED"


class CameraAdapter(CapabilityAdapter):
    """Adapter for devices of type Camera."""

    def __init__(
        self,
        tracker: Optional[DeviceStateTracker] = None,
        config: Optional[BridgeSettings] = None,
        media_resolver: Optional[MediaResolver] = None,
    ):
        super().__init__(tracker, config)
        self.media_resolver = media_resolver

    # --- Object classes ---

    def _ignored_classes(self) -> set[str]:
        return {c.lower() for c in self.config.camera.ignored_detection_classes}

    def filter_classes(self, classes: list[str]) -> list[str]:
        """Drop reserved pseudo-classes and normalise to lower case."""
        ignored = self._ignored_classes()
        return [c.lower() for c in classes if c.lower() not in ignored]

    async def detection_classes(self, device: Any) -> list[str]:
        """Object classes the device can detect, as Alexa will accept them."""
        types = await device.get_object_types()
        return self.filter_classes(types.classes)

    def detection_classes_property(self, classes: list[str]) -> Property:
        return Property(
            namespace=NS_OBJECT_DETECTION,
            name="objectDetectionClasses",
            value=[{"imageNetClass": c} for c in classes],
        )

    # --- Range values ---

    def record_range_value(self, device: Any, instance: str, range_value: float) -> None:
        """Remember the last commanded rangeValue for a PTZ instance."""
        self.tracker.set(device.id, instance, range_value)

    def range_value_property(self, instance: str, range_value: float) -> Property:
        return Property(
            namespace=NS_RANGE,
            instance=instance,
            name="rangeValue",
            value=range_value,
        )

    def _range_properties(self, device: Any) -> list[Property]:
        capabilities = device.ptz_capabilities
        properties = []
        for instance, axis in AXES_BY_INSTANCE.items():
            if not getattr(capabilities, axis.axis, False):
                continue
            if not self.tracker.has(device.id, instance):
                continue
            properties.append(
                self.range_value_property(instance, self.tracker.get(device.id, instance))
            )
        return properties

    # --- Adapter contract ---

    async def discover(self, device: Any) -> Optional[DiscoveryEndpoint]:
        if not has_interface(device, DeviceInterface.RTC_SIGNALING_CHANNEL):
            return None

        capabilities: list[dict[str, Any]] = [
            {
                "type": "AlexaInterface",
                "interface": NS_RTC_SESSION,
                "version": "3",
                "configuration": {
                    "isFullDuplexAudioSupported": self.config.camera.full_duplex_audio,
                },
            }
        ]

        if has_interface(device, DeviceInterface.OBJECT_DETECTOR):
            classes = await self.detection_classes(device)
            capabilities.append(
                {
                    "type": "AlexaInterface",
                    "interface": NS_OBJECT_DETECTION,
                    "version": "1.0",
                    "properties": {
                        "supported": [{"name": "objectDetectionClasses"}],
                        "proactivelyReported": True,
                        "retrievable": True,
                    },
                    "configuration": {
                        "objectDetectionConfiguration": [
                            {"imageNetClass": c} for c in classes
                        ],
                    },
                }
            )
            capabilities.append(
                {
                    "type": "AlexaInterface",
                    "interface": NS_DATA_CONTROLLER,
                    "instance": "Camera.SmartVisionData",
                    "version": "1.0",
                    "configuration": {
                        "targetCapability": {
                            "name": NS_OBJECT_DETECTION,
                            "version": "1.0",
                        },
                        "dataRetrievalSchema": {
                            "type": "JSON",
                            "schema": "SmartVisionData",
                        },
                        "supportedAccess": ["BY_IDENTIFIER", "BY_TIMESTAMP_RANGE"],
                    },
                }
            )

        if has_interface(device, DeviceInterface.PAN_TILT_ZOOM):
            capabilities.extend(range_capabilities(device.ptz_capabilities))

        if has_interface(device, DeviceInterface.MOTION_SENSOR):
            capabilities.append(
                {
                    "type": "AlexaInterface",
                    "interface": NS_MOTION_SENSOR,
                    "version": "3",
                    "properties": {
                        "supported": [{"name": "detectionState"}],
                        "proactivelyReported": True,
                        "retrievable": True,
                    },
                }
            )

        return DiscoveryEndpoint(
            display_categories=[DisplayCategory.CAMERA.value],
            capabilities=capabilities,
        )

    async def send_report(self, device: Any) -> StateReport:
        properties = []

        if has_interface(device, DeviceInterface.OBJECT_DETECTOR):
            classes = await self.detection_classes(device)
            properties.append(self.detection_classes_property(classes))

        if has_interface(device, DeviceInterface.MOTION_SENSOR):
            properties.append(
                Property(
                    namespace=NS_MOTION_SENSOR,
                    name="detectionState",
                    value=_detection_state(bool(device.motion_detected)),
                )
            )

        if has_interface(device, DeviceInterface.PAN_TILT_ZOOM):
            properties.extend(self._range_properties(device))

        return StateReport(properties=properties)

    async def send_event(
        self,
        device: Any,
        details: EventDetails,
        data: Any,
    ) -> Optional[ChangeReport | EventReport]:
        if details.event_interface == DeviceInterface.OBJECT_DETECTOR:
            return await self._object_detection_event(device, data)

        if details.event_interface == DeviceInterface.MOTION_SENSOR:
            return await self._motion_event(device, details, bool(data))

        logger.debug("Ignoring %s event from %s", details.event_interface.value, device.id)
        return None

    async def _motion_event(
        self,
        device: Any,
        details: EventDetails,
        detected: bool,
    ) -> Optional[ChangeReport]:
        if not self.tracker.update(device.id, {"motion": detected}):
            logger.debug("Motion state unchanged for %s", device.id)
            return None

        changed = Property(
            namespace=NS_MOTION_SENSOR,
            name="detectionState",
            value=_detection_state(detected),
            time_of_sample=to_iso8601(details.event_time),
            uncertainty_in_milliseconds=self.config.camera.detection_uncertainty_ms,
        )
        snapshot = await self.send_report(device)
        return ChangeReport.from_snapshot(
            ChangeCause.PHYSICAL_INTERACTION,
            [changed],
            snapshot.properties,
        )

    async def _object_detection_event(
        self,
        device: Any,
        detected: ObjectsDetected,
    ) -> Optional[EventReport]:
        ignored = self._ignored_classes()
        detections = [
            d for d in detected.detections
            if d.class_name.lower() not in ignored
        ]
        if not detections:
            logger.debug("No reportable detections from %s", device.id)
            return None

        frame_image_uri = await self._frame_image_uri(device, detected)
        time_of_sample = to_iso8601(detected.timestamp)

        events = []
        for detection in detections:
            event: dict[str, Any] = {
                "eventIdentifier": detected.event_id,
                "imageNetClass": detection.class_name.lower(),
                "timeOfSample": time_of_sample,
                "uncertaintyInMilliseconds": self.config.camera.detection_uncertainty_ms,
            }
            if detection.id:
                event["objectIdentifier"] = detection.id
            if frame_image_uri:
                event["frameImageUri"] = frame_image_uri
            events.append(event)

        return EventReport(
            namespace=NS_OBJECT_DETECTION,
            name="ObjectDetection",
            payload={"events": events},
        )

    async def _frame_image_uri(self, device: Any, detected: ObjectsDetected) -> Optional[str]:
        """Best-effort snapshot URL; any failure just omits the image."""
        if self.media_resolver is None:
            return None
        try:
            media = await device.get_detection_input(detected.detection_id, detected.event_id)
            return await self.media_resolver.convert_to_url(
                media,
                self.config.camera.snapshot_mime_type,
            )
        except Exception as e:
            logger.debug("No snapshot for detection %s on %s: %s", detected.event_id, device.id, e)
            return None
