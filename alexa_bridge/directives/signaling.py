"""
Real-time signaling bridge for Alexa.RTCSessionController.

Alexa sends a complete SDP offer and expects a complete answer back; there is
no trickle ICE. An InitiateSessionWithOffer directive starts a native
signaling session on the camera, the camera answers through
``AlexaSignalingSession.set_remote_description``, and the session handle is
cached by Alexa's sessionId until SessionDisconnected tears it down.

Session lifecycle:
    CREATED -> ANSWERED -> CONNECTED -> DISCONNECTED

A session whose disconnect never arrives stays in the cache until
``SignalingBridge.close_all``.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Optional

from ..alexa.models import NS_RTC_SESSION, Directive
from ..alexa.responses import build_response
from ..capabilities.protocols import (
    DeviceInterface,
    RTCSessionControl,
    RTCSessionDescription,
    RTCSignalingOptions,
    SendIceCandidate,
    has_interface,
)
from ..exceptions import InvalidDirectiveError, SignalingUsageError
from .router import DirectiveRouter, ResponseSink

logger = logging.getLogger("alexa_bridge.directives.signaling")


class SessionState(str, Enum):
    CREATED = "created"
    ANSWERED = "answered"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class AlexaSignalingSession:
    """
    The Alexa side of a signaling exchange, handed to the camera.

    The camera reads the offer from ``get_options`` and delivers its answer via
    ``set_remote_description``, which is sent back to Alexa as
    AnswerGeneratedForSession.
    """

    def __init__(self, directive: Directive, sink: ResponseSink):
        self.directive = directive
        self.sink = sink
        self.state = SessionState.CREATED

    @property
    def offer_sdp(self) -> str:
        return self.directive.payload["offer"]["value"]

    async def get_options(self) -> RTCSignalingOptions:
        return RTCSignalingOptions(
            offer=RTCSessionDescription(type="offer", sdp=self.offer_sdp),
            disable_trickle=True,
            proxy=False,
        )

    async def create_local_description(
        self,
        type: str,
        setup: Optional[dict[str, Any]] = None,
        send_ice_candidate: Optional[SendIceCandidate] = None,
    ) -> RTCSessionDescription:
        if type != "offer":
            raise SignalingUsageError("Alexa only supports RTC offer")
        if send_ice_candidate:
            raise SignalingUsageError("Alexa does not support trickle ICE")
        return RTCSessionDescription(type=type, sdp=self.offer_sdp)

    async def add_ice_candidate(self, candidate: dict[str, Any]) -> None:
        raise SignalingUsageError("Alexa does not support trickle ICE")

    async def set_remote_description(
        self,
        description: RTCSessionDescription,
        setup: Optional[dict[str, Any]] = None,
    ) -> None:
        await self.sink.send(
            build_response(
                self.directive,
                namespace=NS_RTC_SESSION,
                name="AnswerGeneratedForSession",
                payload={"answer": {"format": "SDP", "value": description.sdp}},
            )
        )
        self.state = SessionState.ANSWERED


@dataclass
class SignalingSession:
    """A cached session: Alexa's sessionId plus the device-native handle."""
    session_id: str
    control: RTCSessionControl
    signaling: AlexaSignalingSession

    @property
    def state(self) -> SessionState:
        return self.signaling.state

    @state.setter
    def state(self, value: SessionState) -> None:
        self.signaling.state = value


@dataclass
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class SessionCache:
    """
    sessionId -> SignalingSession.

    ``guard(session_id)`` serialises check-then-act sequences on one key;
    different keys never wait on each other.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SignalingSession] = {}
        self._locks: dict[str, _KeyLock] = {}

    @asynccontextmanager
    async def guard(self, session_id: str) -> AsyncIterator[None]:
        entry = self._locks.get(session_id)
        if entry is None:
            entry = self._locks[session_id] = _KeyLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[session_id]

    def get(self, session_id: str) -> Optional[SignalingSession]:
        return self._sessions.get(session_id)

    def put(self, session: SignalingSession) -> Optional[SignalingSession]:
        """Store a session, returning any session it replaced."""
        previous = self._sessions.get(session.session_id)
        self._sessions[session.session_id] = session
        return previous

    def pop(self, session_id: str) -> Optional[SignalingSession]:
        return self._sessions.pop(session_id, None)

    def session_ids(self) -> list[str]:
        return list(self._sessions.keys())

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


def _session_id(directive: Directive) -> Optional[str]:
    return directive.payload.get("sessionId")


class SignalingBridge:
    """Handlers for InitiateSessionWithOffer, SessionConnected and SessionDisconnected."""

    def __init__(self, sessions: Optional[SessionCache] = None):
        self.sessions = sessions if sessions is not None else SessionCache()

    def register(self, router: DirectiveRouter) -> None:
        router.register(NS_RTC_SESSION, "InitiateSessionWithOffer", self.initiate_session)
        router.register(NS_RTC_SESSION, "SessionConnected", self.session_connected)
        router.register(NS_RTC_SESSION, "SessionDisconnected", self.session_disconnected)

    async def initiate_session(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        session_id = _session_id(directive)
        if not session_id:
            raise InvalidDirectiveError("InitiateSessionWithOffer without sessionId")

        if not has_interface(device, DeviceInterface.RTC_SIGNALING_CHANNEL):
            logger.debug("%s cannot start signaling sessions, dropping %s", device.id, session_id)
            return

        async with self.sessions.guard(session_id):
            signaling = AlexaSignalingSession(directive, sink)
            control = await device.start_rtc_signaling_session(signaling)
            session = SignalingSession(session_id=session_id, control=control, signaling=signaling)

            previous = self.sessions.put(session)
            if previous is not None:
                logger.warning("Session %s restarted, ending previous handle", session_id)
                previous.state = SessionState.DISCONNECTED
                await previous.control.end_session()

            # The native session is live from here on; a failed playback
            # setup must not leave it running without a cache entry.
            try:
                await control.set_playback(audio=True, video=False)
            except Exception:
                logger.warning("Playback setup failed for session %s, ending it", session_id)
                self.sessions.pop(session_id)
                session.state = SessionState.DISCONNECTED
                await control.end_session()
                raise

        logger.info("Started signaling session %s on %s", session_id, device.id)

    async def session_connected(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        session = self.sessions.get(_session_id(directive) or "")
        if session is not None:
            session.state = SessionState.CONNECTED

        await sink.send(
            build_response(
                directive,
                namespace=NS_RTC_SESSION,
                name="SessionConnected",
                payload=dict(directive.payload),
            )
        )

    async def session_disconnected(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        session_id = _session_id(directive)

        if session_id:
            async with self.sessions.guard(session_id):
                session = self.sessions.pop(session_id)
                if session is not None:
                    session.state = SessionState.DISCONNECTED
                    await session.control.end_session()
                    logger.info("Ended signaling session %s", session_id)
                else:
                    logger.debug("No signaling session %s to end", session_id)

        await sink.send(
            build_response(
                directive,
                namespace=NS_RTC_SESSION,
                name="SessionDisconnected",
                payload=dict(directive.payload),
            )
        )

    async def close_all(self) -> int:
        """End every cached session (shutdown). Returns how many were ended."""
        ended = 0
        for session_id in self.sessions.session_ids():
            async with self.sessions.guard(session_id):
                session = self.sessions.pop(session_id)
                if session is None:
                    continue
                session.state = SessionState.DISCONNECTED
                await session.control.end_session()
                ended += 1
        if ended:
            logger.info("Ended %d orphaned signaling sessions", ended)
        return ended
