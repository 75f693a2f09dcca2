"""
Directive dispatch and per-category directive handlers.
"""

from typing import Optional

from ..capabilities.registry import AdapterRegistry
from ..config import BridgeSettings
from .camera import CameraHandlers
from .reporting import ReportStateHandler
from .router import DirectiveHandler, DirectiveRouter, ResponseSink
from .security_system import SecurityPanelHandlers
from .signaling import AlexaSignalingSession, SessionCache, SessionState, SignalingBridge
from .thermostat import ThermostatHandlers


def create_router(
    adapters: AdapterRegistry,
    signaling: Optional[SignalingBridge] = None,
    config: Optional[BridgeSettings] = None,
) -> DirectiveRouter:
    """Build a router with every built-in handler registered."""
    router = DirectiveRouter()
    ReportStateHandler(adapters).register(router)
    SecurityPanelHandlers(adapters, config).register(router)
    ThermostatHandlers(adapters, config).register(router)
    CameraHandlers(adapters).register(router)
    (signaling if signaling is not None else SignalingBridge()).register(router)
    return router


__all__ = [
    "AlexaSignalingSession",
    "CameraHandlers",
    "DirectiveHandler",
    "DirectiveRouter",
    "ReportStateHandler",
    "ResponseSink",
    "SecurityPanelHandlers",
    "SessionCache",
    "SessionState",
    "SignalingBridge",
    "ThermostatHandlers",
    "create_router",
]
