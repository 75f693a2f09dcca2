"""Tests for the AlexaBridge facade: discovery, events, flood linking, shutdown."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from alexa_bridge import AlexaBridge, BridgeSettings
from alexa_bridge.capabilities.protocols import (
    DeviceInterface,
    DeviceType,
    EventDetails,
    ObjectDetectionResult,
    ObjectsDetected,
    SecuritySystemMode,
    SecuritySystemState,
)


@pytest.fixture
def bridge(tracker):
    return AlexaBridge(config=BridgeSettings(manufacturer_name="Acme"), tracker=tracker)


# ---------------------------------------------------------------------------
# TestDiscovery
# ---------------------------------------------------------------------------


class TestDiscovery:
    @pytest.mark.asyncio
    async def test_discover_applicable_devices(self, bridge, make_camera, make_security_panel, make_thermostat):
        light = SimpleNamespace(id="light-1", name="Lamp", type=DeviceType.LIGHT, interfaces={DeviceInterface.ON_OFF})
        mute_camera = make_camera(interfaces={DeviceInterface.MOTION_SENSOR}, device_id="camera-2")

        response = await bridge.discover(
            [make_camera(), make_security_panel(), make_thermostat(), light, mute_camera]
        )

        header = response["event"]["header"]
        assert header["namespace"] == "Alexa.Discovery"
        assert header["name"] == "Discover.Response"
        endpoints = response["event"]["payload"]["endpoints"]
        assert [e["endpointId"] for e in endpoints] == ["camera-1", "panel-1", "thermostat-1"]

    @pytest.mark.asyncio
    async def test_endpoint_shape(self, bridge, make_security_panel):
        endpoint = await bridge.discover_endpoint(make_security_panel())

        assert endpoint["endpointId"] == "panel-1"
        assert endpoint["manufacturerName"] == "Acme"
        assert endpoint["friendlyName"] == "Alarm Panel"
        assert endpoint["description"] == "SecuritySystem Alarm Panel"
        assert endpoint["displayCategories"] == ["SECURITY_PANEL"]
        assert endpoint["capabilities"][-1] == {"type": "AlexaInterface", "interface": "Alexa", "version": "3"}

    @pytest.mark.asyncio
    async def test_report_state_unsupported_category(self, bridge):
        lock = SimpleNamespace(id="lock-1", type=DeviceType.LOCK, interfaces=set())
        assert await bridge.report_state(lock) is None


# ---------------------------------------------------------------------------
# TestHandleEvent
# ---------------------------------------------------------------------------


class TestHandleEvent:
    @pytest.mark.asyncio
    async def test_change_report_delivered(self, bridge, sink, make_security_panel):
        panel = make_security_panel(mode=SecuritySystemMode.AWAY_ARMED, triggered=True)
        details = EventDetails(
            event_interface=DeviceInterface.SECURITY_SYSTEM,
            property="securitySystemState",
            event_time=0,
        )

        message = await bridge.handle_event(panel, details, panel.security_system_state, sink)

        assert sink.messages == [message]
        assert message["event"]["header"]["name"] == "ChangeReport"
        assert message["event"]["endpoint"] == {"endpointId": "panel-1"}
        change = message["event"]["payload"]["change"]
        assert change["cause"]["type"] == "RULE_TRIGGER"
        assert change["properties"][0]["timeOfSample"] == "1970-01-01T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_nothing_to_report(self, bridge, sink, make_camera):
        details = EventDetails(event_interface=DeviceInterface.OBJECT_DETECTOR)
        detected = ObjectsDetected(detections=[ObjectDetectionResult(class_name="ring")])

        assert await bridge.handle_event(make_camera(), details, detected, sink) is None
        assert sink.messages == []

    @pytest.mark.asyncio
    async def test_object_detection_uses_resolver(self, tracker, sink, make_camera):
        resolver = MagicMock()
        resolver.convert_to_url = AsyncMock(return_value="https://media.example/a.jpg")
        bridge = AlexaBridge(tracker=tracker, media_resolver=resolver)
        details = EventDetails(event_interface=DeviceInterface.OBJECT_DETECTOR)
        detected = ObjectsDetected(
            detections=[ObjectDetectionResult(class_name="person")],
            event_id="evt-9",
            timestamp=0,
        )

        message = await bridge.handle_event(make_camera(), details, detected, sink)

        assert message["event"]["header"]["namespace"] == "Alexa.SmartVision.ObjectDetectionSensor"
        [event] = message["event"]["payload"]["events"]
        assert event["frameImageUri"] == "https://media.example/a.jpg"
        resolver.convert_to_url.assert_awaited_once_with("media-handle", "image/jpeg")

    @pytest.mark.asyncio
    async def test_unsupported_category_ignored(self, bridge, sink):
        lock = SimpleNamespace(id="lock-1", type=DeviceType.LOCK, interfaces=set())
        details = EventDetails(event_interface=DeviceInterface.ON_OFF)

        assert await bridge.handle_event(lock, details, True, sink) is None


# ---------------------------------------------------------------------------
# TestFloodLinking
# ---------------------------------------------------------------------------


class TestFloodLinking:
    @pytest.mark.asyncio
    async def test_flood_reported_on_panel(self, bridge, sink, make_security_panel):
        panel = make_security_panel(flooded=False)
        callbacks = []
        sensor = SimpleNamespace(
            id="basement-leak",
            interfaces={DeviceInterface.FLOOD_SENSOR},
            listen=MagicMock(side_effect=lambda interface, cb: callbacks.append(cb) or MagicMock()),
        )

        link = bridge.link_flood_sensors(panel, [sensor], sink)
        await callbacks[0](
            sensor,
            EventDetails(event_interface=DeviceInterface.FLOOD_SENSOR, property="flooded", event_time=0),
            True,
        )

        assert link.linked_count == 1
        assert panel.flooded is True
        message = sink.last
        assert message["event"]["endpoint"] == {"endpointId": "panel-1"}
        [changed] = message["event"]["payload"]["change"]["properties"]
        assert changed["name"] == "waterAlarm"
        assert changed["value"] == {"value": "ALARM"}


# ---------------------------------------------------------------------------
# TestDirectivesAndShutdown
# ---------------------------------------------------------------------------


class TestDirectivesAndShutdown:
    @pytest.mark.asyncio
    async def test_handle_directive_and_close(self, bridge, sink, make_camera, make_directive):
        camera = make_camera()
        directive = make_directive(
            "Alexa.RTCSessionController",
            "InitiateSessionWithOffer",
            {"sessionId": "s-1", "offer": {"format": "SDP", "value": "v=0"}},
        )

        assert await bridge.handle_directive(directive, camera, sink) is True
        assert "s-1" in bridge.sessions

        await bridge.close()

        camera.session_control.end_session.assert_awaited_once()
        assert len(bridge.sessions) == 0

    @pytest.mark.asyncio
    async def test_security_state_tracked_through_directive(self, bridge, sink, make_security_panel, make_directive):
        panel = make_security_panel()

        await bridge.handle_directive(
            make_directive("Alexa.SecurityPanelController", "Arm", {"armState": "ARMED_NIGHT"}),
            panel,
            sink,
        )
        panel.security_system_state = SecuritySystemState(
            mode=SecuritySystemMode.NIGHT_ARMED,
            supported_modes=list(SecuritySystemMode),
        )
        details = EventDetails(event_interface=DeviceInterface.SECURITY_SYSTEM, property="securitySystemState")

        message = await bridge.handle_event(panel, details, panel.security_system_state, sink)

        change = message["event"]["payload"]["change"]
        assert change["properties"][0]["value"] == "ARMED_NIGHT"
