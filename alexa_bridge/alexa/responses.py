"""
Response builder.

Every outbound envelope gets a freshly generated messageId and the header
namespace/name Alexa expects for it. Directive headers are copied, never
mutated, so a handler can still read the directive after responding.
"""

import logging
from typing import Any, Iterable, Optional, Union
from uuid import uuid4

from ..config import settings
from .models import (
    NS_ALEXA,
    NS_DISCOVERY,
    ChangeReport,
    Directive,
    EventReport,
    Property,
    StateReport,
)

logger = logging.getLogger("alexa_bridge.alexa.responses")


def create_message_id() -> str:
    """Generate a new message identifier."""
    return str(uuid4())


def _response_header(directive: Directive, namespace: str, name: str) -> dict[str, Any]:
    header = directive.header.to_dict()
    header["namespace"] = namespace
    header["name"] = name
    header["messageId"] = create_message_id()
    return header


def _event_header(namespace: str, name: str) -> dict[str, Any]:
    return {
        "namespace": namespace,
        "name": name,
        "messageId": create_message_id(),
        "payloadVersion": settings.payload_version,
    }


def _context(properties: Iterable[Property]) -> dict[str, Any]:
    return {"properties": [p.to_dict() for p in properties]}


def build_response(
    directive: Directive,
    *,
    namespace: str = NS_ALEXA,
    name: str = "Response",
    payload: Optional[dict[str, Any]] = None,
    properties: Optional[Iterable[Property]] = None,
) -> dict[str, Any]:
    """
    Build the response envelope for a directive.

    Args:
        directive: The directive being answered
        namespace: Response namespace, "Alexa" unless the interface defines its own
        name: Response name, e.g. "Response" or "Arm.Response"
        payload: Response payload (defaults to empty)
        properties: Context properties; omitted from the envelope when None
    """
    data: dict[str, Any] = {
        "event": {
            "header": _response_header(directive, namespace, name),
            "endpoint": dict(directive.endpoint),
            "payload": payload if payload is not None else {},
        }
    }
    if properties is not None:
        data["context"] = _context(properties)
    return data


def build_error_response(
    directive: Directive,
    error_type: str,
    message: str,
    *,
    namespace: str = NS_ALEXA,
) -> dict[str, Any]:
    """Build an ErrorResponse carrying a protocol error code."""
    logger.info("Error response %s for %s: %s", error_type, directive.key, message)
    return build_response(
        directive,
        namespace=namespace,
        name="ErrorResponse",
        payload={"type": error_type, "message": message},
    )


def build_state_report(directive: Directive, report: StateReport) -> dict[str, Any]:
    """Answer a ReportState directive."""
    return build_response(
        directive,
        name="StateReport",
        properties=report.properties,
    )


def build_change_report(report: ChangeReport, endpoint_id: str) -> dict[str, Any]:
    """Stamp a proactive ChangeReport for an endpoint."""
    data = report.to_dict()
    data["event"]["header"] = _event_header(NS_ALEXA, "ChangeReport")
    data["event"]["endpoint"] = {"endpointId": endpoint_id}
    return data


def build_event(report: EventReport, endpoint_id: str) -> dict[str, Any]:
    """Stamp an interface-specific event (e.g. ObjectDetection) for an endpoint."""
    data = report.to_dict()
    data["event"]["header"] = _event_header(report.namespace, report.name)
    data["event"]["endpoint"] = {"endpointId": endpoint_id}
    return data


def stamp_report(report: Union[ChangeReport, EventReport], endpoint_id: str) -> dict[str, Any]:
    """Stamp whichever event-driven report an adapter produced."""
    if isinstance(report, ChangeReport):
        return build_change_report(report, endpoint_id)
    return build_event(report, endpoint_id)


def build_discovery_response(
    endpoints: list[dict[str, Any]],
    directive: Optional[Directive] = None,
) -> dict[str, Any]:
    """Wrap discovered endpoints in a Discover.Response envelope."""
    if directive is not None:
        header = _response_header(directive, NS_DISCOVERY, "Discover.Response")
    else:
        header = _event_header(NS_DISCOVERY, "Discover.Response")
    return {
        "event": {
            "header": header,
            "payload": {"endpoints": endpoints},
        }
    }
