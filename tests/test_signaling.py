"""Tests for the RTC signaling bridge.

Covers:
- Offer handling and answer delivery (no trickle ICE)
- Session cache lifecycle: initiate, connect, disconnect, restart
- Concurrent disconnects ending a session exactly once
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from alexa_bridge.alexa.models import NS_RTC_SESSION, Directive
from alexa_bridge.capabilities.protocols import DeviceInterface, RTCSessionDescription
from alexa_bridge.directives.router import DirectiveRouter
from alexa_bridge.directives.signaling import (
    AlexaSignalingSession,
    SessionCache,
    SessionState,
    SignalingBridge,
)
from alexa_bridge.exceptions import InvalidDirectiveError, SignalingUsageError

OFFER_SDP = "v=0\r\no=- 1 1 IN IP4 0.0.0.0\r\n"
ANSWER_SDP = "v=0\r\no=- 2 2 IN IP4 0.0.0.0\r\n"


def _initiate(make_directive, session_id="session-1"):
    return make_directive(
        NS_RTC_SESSION,
        "InitiateSessionWithOffer",
        {"sessionId": session_id, "offer": {"format": "SDP", "value": OFFER_SDP}},
    )


def _disconnect(make_directive, session_id="session-1"):
    return make_directive(NS_RTC_SESSION, "SessionDisconnected", {"sessionId": session_id})


def _answering_camera(make_camera):
    """Camera whose native session answers the offer immediately."""
    camera = make_camera()
    control = camera.session_control

    async def start(session):
        options = await session.get_options()
        assert options.offer.sdp == OFFER_SDP
        await session.set_remote_description(RTCSessionDescription(type="answer", sdp=ANSWER_SDP))
        return control

    camera.start_rtc_signaling_session = AsyncMock(side_effect=start)
    return camera


@pytest.fixture
def bridge():
    return SignalingBridge(SessionCache())


@pytest.fixture
def router(bridge):
    router = DirectiveRouter()
    bridge.register(router)
    return router


# ---------------------------------------------------------------------------
# TestAlexaSignalingSession
# ---------------------------------------------------------------------------


class TestAlexaSignalingSession:
    """Test the caller-side session handed to the camera."""

    def _session(self, make_directive, sink):
        return AlexaSignalingSession(Directive.parse(_initiate(make_directive)), sink)

    @pytest.mark.asyncio
    async def test_options_disable_trickle(self, make_directive, sink):
        options = await self._session(make_directive, sink).get_options()

        assert options.offer == RTCSessionDescription(type="offer", sdp=OFFER_SDP)
        assert options.disable_trickle is True
        assert options.proxy is False

    @pytest.mark.asyncio
    async def test_local_description_is_the_offer(self, make_directive, sink):
        description = await self._session(make_directive, sink).create_local_description("offer")
        assert description.sdp == OFFER_SDP

    @pytest.mark.asyncio
    async def test_answer_type_rejected(self, make_directive, sink):
        with pytest.raises(SignalingUsageError):
            await self._session(make_directive, sink).create_local_description("answer")

    @pytest.mark.asyncio
    async def test_trickle_callback_rejected(self, make_directive, sink):
        with pytest.raises(SignalingUsageError):
            await self._session(make_directive, sink).create_local_description(
                "offer",
                send_ice_candidate=AsyncMock(),
            )

    @pytest.mark.asyncio
    async def test_ice_candidates_rejected(self, make_directive, sink):
        with pytest.raises(SignalingUsageError):
            await self._session(make_directive, sink).add_ice_candidate({"candidate": "a=candidate:1"})

    @pytest.mark.asyncio
    async def test_answer_sent_to_alexa(self, make_directive, sink):
        session = self._session(make_directive, sink)

        await session.set_remote_description(RTCSessionDescription(type="answer", sdp=ANSWER_SDP))

        event = sink.last["event"]
        assert event["header"]["namespace"] == NS_RTC_SESSION
        assert event["header"]["name"] == "AnswerGeneratedForSession"
        assert event["header"]["correlationToken"] == "token-123"
        assert event["payload"] == {"answer": {"format": "SDP", "value": ANSWER_SDP}}
        assert session.state == SessionState.ANSWERED


# ---------------------------------------------------------------------------
# TestSessionLifecycle
# ---------------------------------------------------------------------------


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_initiate_caches_session(self, bridge, router, sink, make_camera, make_directive):
        camera = _answering_camera(make_camera)

        await router.dispatch(_initiate(make_directive), camera, sink)

        assert "session-1" in bridge.sessions
        assert bridge.sessions.get("session-1").state == SessionState.ANSWERED
        camera.session_control.set_playback.assert_awaited_once_with(audio=True, video=False)
        assert sink.last["event"]["header"]["name"] == "AnswerGeneratedForSession"

    @pytest.mark.asyncio
    async def test_disconnect_ends_session_once(self, bridge, router, sink, make_camera, make_directive):
        camera = _answering_camera(make_camera)
        await router.dispatch(_initiate(make_directive), camera, sink)

        await router.dispatch(_disconnect(make_directive), camera, sink)
        await router.dispatch(_disconnect(make_directive), camera, sink)

        camera.session_control.end_session.assert_awaited_once()
        assert "session-1" not in bridge.sessions
        names = [m["event"]["header"]["name"] for m in sink.messages]
        assert names == ["AnswerGeneratedForSession", "SessionDisconnected", "SessionDisconnected"]

    @pytest.mark.asyncio
    async def test_concurrent_disconnects(self, bridge, router, sink, make_camera, make_directive):
        camera = _answering_camera(make_camera)
        await router.dispatch(_initiate(make_directive), camera, sink)

        await asyncio.gather(
            router.dispatch(_disconnect(make_directive), camera, sink),
            router.dispatch(_disconnect(make_directive), camera, sink),
        )

        camera.session_control.end_session.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_disconnect_unknown_session(self, router, sink, make_camera, make_directive):
        await router.dispatch(_disconnect(make_directive, "never-started"), make_camera(), sink)

        assert sink.last["event"]["header"]["name"] == "SessionDisconnected"
        assert sink.last["event"]["payload"] == {"sessionId": "never-started"}

    @pytest.mark.asyncio
    async def test_connected_marks_session(self, bridge, router, sink, make_camera, make_directive):
        camera = _answering_camera(make_camera)
        await router.dispatch(_initiate(make_directive), camera, sink)

        await router.dispatch(
            make_directive(NS_RTC_SESSION, "SessionConnected", {"sessionId": "session-1"}),
            camera,
            sink,
        )

        assert bridge.sessions.get("session-1").state == SessionState.CONNECTED
        assert sink.last["event"]["header"]["name"] == "SessionConnected"

    @pytest.mark.asyncio
    async def test_restart_ends_previous_handle(self, bridge, router, sink, make_camera, make_directive):
        first = _answering_camera(make_camera)
        second = _answering_camera(make_camera)

        await router.dispatch(_initiate(make_directive), first, sink)
        await router.dispatch(_initiate(make_directive), second, sink)

        first.session_control.end_session.assert_awaited_once()
        second.session_control.end_session.assert_not_awaited()
        assert bridge.sessions.get("session-1").control is second.session_control

    @pytest.mark.asyncio
    async def test_missing_session_id(self, router, sink, make_camera, make_directive):
        directive = make_directive(NS_RTC_SESSION, "InitiateSessionWithOffer", {"offer": {"value": OFFER_SDP}})

        with pytest.raises(InvalidDirectiveError):
            await router.dispatch(directive, make_camera(), sink)

    @pytest.mark.asyncio
    async def test_camera_without_signaling(self, bridge, router, sink, make_camera, make_directive):
        camera = make_camera(interfaces={DeviceInterface.OBJECT_DETECTOR})

        await router.dispatch(_initiate(make_directive), camera, sink)

        camera.start_rtc_signaling_session.assert_not_awaited()
        assert len(bridge.sessions) == 0

    @pytest.mark.asyncio
    async def test_close_all(self, bridge, router, sink, make_camera, make_directive):
        cameras = [_answering_camera(make_camera) for _ in range(2)]
        for i, camera in enumerate(cameras):
            await router.dispatch(_initiate(make_directive, f"session-{i}"), camera, sink)

        assert await bridge.close_all() == 2

        for camera in cameras:
            camera.session_control.end_session.assert_awaited_once()
        assert len(bridge.sessions) == 0

    @pytest.mark.asyncio
    async def test_failed_playback_ends_native_session(self, bridge, router, sink, make_camera, make_directive):
        camera = _answering_camera(make_camera)
        camera.session_control.set_playback.side_effect = RuntimeError("audio unavailable")

        with pytest.raises(RuntimeError, match="audio unavailable"):
            await router.dispatch(_initiate(make_directive), camera, sink)

        camera.session_control.end_session.assert_awaited_once()
        assert "session-1" not in bridge.sessions

        await router.dispatch(_disconnect(make_directive), camera, sink)
        assert await bridge.close_all() == 0
        camera.session_control.end_session.assert_awaited_once()
