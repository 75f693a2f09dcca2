"""
Alexa/ReportState handler.
"""

import logging
from typing import Any

from ..alexa.models import NS_ALEXA, Directive
from ..alexa.responses import build_state_report
from ..capabilities.registry import AdapterRegistry
from .router import DirectiveRouter, ResponseSink

logger = logging.getLogger("alexa_bridge.directives.reporting")


class ReportStateHandler:
    """Answers ReportState with the adapter's full StateReport."""

    def __init__(self, adapters: AdapterRegistry):
        self.adapters = adapters

    def register(self, router: DirectiveRouter) -> None:
        router.register(NS_ALEXA, "ReportState", self.report_state)

    async def report_state(self, directive: Directive, device: Any, sink: ResponseSink) -> None:
        adapter = self.adapters.for_device(device)
        if adapter is None:
            logger.debug("No adapter for %s, dropping %s", device.id, directive.key)
            return

        report = await adapter.send_report(device)
        await sink.send(build_state_report(directive, report))
