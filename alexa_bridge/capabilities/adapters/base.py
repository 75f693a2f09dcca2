"""
Base class for capability adapters.
"""

from typing import Any, Optional

from ...alexa.models import ChangeReport, DiscoveryEndpoint, EventReport, StateReport
from ...config import BridgeSettings, settings as default_settings
from ..protocols import EventDetails
from ..state_tracker import DeviceStateTracker, get_state_tracker


class CapabilityAdapter:
    """
    Translates one device category to and from the Alexa message shapes.

    ``discover`` and ``send_event`` return None when the device or event is not
    applicable; callers treat that as "nothing to say", never as an error.
    """

    def __init__(
        self,
        tracker: Optional[DeviceStateTracker] = None,
        config: Optional[BridgeSettings] = None,
    ):
        self.tracker = tracker if tracker is not None else get_state_tracker()
        self.config = config if config is not None else default_settings

    async def discover(self, device: Any) -> Optional[DiscoveryEndpoint]:
        raise NotImplementedError

    async def send_report(self, device: Any) -> StateReport:
        raise NotImplementedError

    async def send_event(
        self,
        device: Any,
        details: EventDetails,
        data: Any,
    ) -> Optional[ChangeReport | EventReport]:
        raise NotImplementedError

    async def set_state(self, device: Any, payload: dict[str, Any]) -> StateReport:
        """
        Report the state that results from a directive.

        Directive handlers call this after the device command completes so the
        response context reflects post-command state.
        """
        return await self.send_report(device)
