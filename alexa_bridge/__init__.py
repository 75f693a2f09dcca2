"""
Alexa Smart Home bridge for a heterogeneous device graph.

Translates device capabilities into Discovery, StateReport and ChangeReport
messages, and routes Alexa directives back to device commands.
"""

import logging

from .bridge import AlexaBridge
from .config import BridgeSettings, settings

__all__ = ["AlexaBridge", "BridgeSettings", "settings", "setup_logging"]


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for hosts that don't configure it themselves."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
