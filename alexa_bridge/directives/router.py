"""
Directive dispatch.

Routes an inbound directive to the single handler registered for its
namespace/name pair. Directives nobody registered for are dropped: many
directives are optional per device category, so an unhandled one is not an
error.
"""

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Union, runtime_checkable

from ..alexa.models import Directive, directive_key
from ..exceptions import DuplicateHandlerError

logger = logging.getLogger("alexa_bridge.directives.router")


@runtime_checkable
class ResponseSink(Protocol):
    """Where handlers deliver their response envelopes (the transport)."""

    async def send(self, message: dict[str, Any]) -> None:
        ...


# Handler signature: async def handler(directive, device, sink) -> None
DirectiveHandler = Callable[[Directive, Any, ResponseSink], Awaitable[None]]


class DirectiveRouter:
    """
    Maps ``Namespace/Name`` keys to directive handlers.

    Handlers run independently; the router never serialises directives for
    different devices or sessions.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, DirectiveHandler] = {}

    def register(self, namespace: str, name: str, handler: DirectiveHandler) -> None:
        """Register the handler for a directive. One handler per key."""
        key = directive_key(namespace, name)
        if key in self._handlers:
            raise DuplicateHandlerError(key)
        self._handlers[key] = handler
        logger.info("Registered directive handler: %s", key)

    def handler(self, namespace: str, name: str) -> Callable[[DirectiveHandler], DirectiveHandler]:
        """
        Decorator form of ``register``.

        Usage:
            @router.handler("Alexa", "ReportState")
            async def report_state(directive, device, sink):
                ...
        """
        def decorator(func: DirectiveHandler) -> DirectiveHandler:
            self.register(namespace, name, func)
            return func
        return decorator

    def get(self, key: str) -> Optional[DirectiveHandler]:
        return self._handlers.get(key)

    def list_keys(self) -> list[str]:
        """Return all registered directive keys."""
        return list(self._handlers.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._handlers

    async def dispatch(
        self,
        directive: Union[Directive, Mapping[str, Any]],
        device: Any,
        sink: ResponseSink,
    ) -> bool:
        """
        Run the handler registered for the directive.

        Returns False when no handler is registered. Exceptions raised by the
        handler (e.g. a failed device command) propagate to the caller.
        """
        if not isinstance(directive, Directive):
            directive = Directive.parse(directive)

        handler = self._handlers.get(directive.key)
        if handler is None:
            logger.debug("Unsupported directive dropped: %s", directive.key)
            return False

        logger.info(
            "Dispatching %s to %s",
            directive.key,
            getattr(device, "id", directive.endpoint_id),
        )
        await handler(directive, device, sink)
        return True
