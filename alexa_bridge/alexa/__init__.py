"""
Alexa Smart Home message shapes and the response builder.
"""

from .models import (
    ChangeCause,
    ChangeReport,
    Directive,
    DirectiveHeader,
    DiscoveryEndpoint,
    DisplayCategory,
    EventReport,
    Property,
    Report,
    StateReport,
    directive_key,
)
from .responses import (
    build_change_report,
    build_discovery_response,
    build_error_response,
    build_event,
    build_response,
    build_state_report,
    create_message_id,
    stamp_report,
)

__all__ = [
    # Models
    "ChangeCause",
    "ChangeReport",
    "Directive",
    "DirectiveHeader",
    "DiscoveryEndpoint",
    "DisplayCategory",
    "EventReport",
    "Property",
    "Report",
    "StateReport",
    "directive_key",
    # Builders
    "build_change_report",
    "build_discovery_response",
    "build_error_response",
    "build_event",
    "build_response",
    "build_state_report",
    "create_message_id",
    "stamp_report",
]
