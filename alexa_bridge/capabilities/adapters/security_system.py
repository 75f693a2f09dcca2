"""
Security panel adapter.

Maps a device's SecuritySystem (and optional FloodSensor) capabilities onto
Alexa.SecurityPanelController: armState, burglaryAlarm and waterAlarm.
"""

import logging
from typing import Any, Optional

from ...alexa.models import (
    NS_SECURITY_PANEL,
    ChangeCause,
    ChangeReport,
    DiscoveryEndpoint,
    DisplayCategory,
    Property,
    StateReport,
)
from ...utils.time import to_iso8601
from ..protocols import (
    DeviceInterface,
    EventDetails,
    SecuritySystemMode,
    SecuritySystemState,
    has_interface,
)
from .base import CapabilityAdapter

logger = logging.getLogger("alexa_bridge.capabilities.adapters.security_system")

ARM_STATES: dict[SecuritySystemMode, str] = {
    SecuritySystemMode.AWAY_ARMED: "ARMED_AWAY",
    SecuritySystemMode.HOME_ARMED: "ARMED_STAY",
    SecuritySystemMode.NIGHT_ARMED: "ARMED_NIGHT",
    SecuritySystemMode.DISARMED: "DISARMED",
}
_MODES_BY_ARM_STATE = {v: k for k, v in ARM_STATES.items()}


def to_arm_state(mode: SecuritySystemMode) -> Optional[str]:
    """Alexa armState for a device mode."""
    return ARM_STATES.get(mode)


def from_arm_state(arm_state: str) -> Optional[SecuritySystemMode]:
    """Device mode for an Alexa armState."""
    return _MODES_BY_ARM_STATE.get(arm_state)


def _alarm_value(active: bool) -> dict[str, str]:
    return {"value": "ALARM" if active else "OK"}


def arm_state_property(mode: SecuritySystemMode, time_of_sample: Optional[str] = None) -> Property:
    arm_state = to_arm_state(mode)
    if arm_state is None:
        logger.warning("No armState for security system mode %r", mode)
    return Property(
        namespace=NS_SECURITY_PANEL,
        name="armState",
        value=arm_state,
        time_of_sample=time_of_sample or to_iso8601(),
    )


def _alarm_property(name: str, active: bool, time_of_sample: Optional[str] = None) -> Property:
    return Property(
        namespace=NS_SECURITY_PANEL,
        name=name,
        value=_alarm_value(active),
        time_of_sample=time_of_sample or to_iso8601(),
    )


class SecuritySystemAdapter(CapabilityAdapter):
    """Adapter for devices of type SecuritySystem."""

    async def discover(self, device: Any) -> Optional[DiscoveryEndpoint]:
        if not has_interface(device, DeviceInterface.SECURITY_SYSTEM):
            return None

        supported = [{"name": "armState"}, {"name": "burglaryAlarm"}]
        if has_interface(device, DeviceInterface.FLOOD_SENSOR):
            supported.append({"name": "waterAlarm"})

        state: SecuritySystemState = device.security_system_state
        arm_states = [
            {"value": to_arm_state(mode)}
            for mode in state.supported_modes
            if to_arm_state(mode) is not None
        ]

        return DiscoveryEndpoint(
            display_categories=[DisplayCategory.SECURITY_PANEL.value],
            capabilities=[
                {
                    "type": "AlexaInterface",
                    "interface": NS_SECURITY_PANEL,
                    "version": "3",
                    "properties": {
                        "supported": supported,
                        "proactivelyReported": True,
                        "retrievable": True,
                    },
                    "configuration": {
                        "supportedArmStates": arm_states,
                        "supportedAuthorizationTypes": [],
                    },
                }
            ],
        )

    def _snapshot(self, device: Any) -> list[Property]:
        properties = []
        if has_interface(device, DeviceInterface.SECURITY_SYSTEM):
            state: SecuritySystemState = device.security_system_state
            properties.append(arm_state_property(state.mode))
            properties.append(_alarm_property("burglaryAlarm", state.triggered))
        if has_interface(device, DeviceInterface.FLOOD_SENSOR):
            properties.append(_alarm_property("waterAlarm", bool(device.flooded)))
        return properties

    async def send_report(self, device: Any) -> StateReport:
        if has_interface(device, DeviceInterface.SECURITY_SYSTEM):
            state: SecuritySystemState = device.security_system_state
            self.tracker.set(device.id, "mode", state.mode)
            self.tracker.set(device.id, "triggered", state.triggered)
        return StateReport(properties=self._snapshot(device))

    def _diff_security_state(
        self,
        device: Any,
        state: SecuritySystemState,
        time_of_sample: str,
    ) -> tuple[Optional[Property], Optional[ChangeCause]]:
        """
        Pick the single property to report for a securitySystemState event.

        Both tracked values are updated whenever they differ. When mode and
        triggered change together, a newly raised alarm is reported as
        burglaryAlarm (RULE_TRIGGER) and the new armState travels only in the
        report context; otherwise the mode change is reported as armState
        (PHYSICAL_INTERACTION). Returns (None, None) when nothing changed.
        """
        last_mode = self.tracker.get(device.id, "mode")
        last_triggered = self.tracker.get(device.id, "triggered")

        # First event for this device: assume the alarm flag flipped so that
        # something is always reported.
        if last_mode is None and last_triggered is None:
            last_triggered = not state.triggered

        mode_changed = state.mode != last_mode
        triggered_changed = state.triggered != last_triggered

        if mode_changed:
            self.tracker.set(device.id, "mode", state.mode)
        if triggered_changed:
            self.tracker.set(device.id, "triggered", state.triggered)

        # An alarm going off outranks a simultaneous mode change.
        if triggered_changed and (state.triggered or not mode_changed):
            return (
                _alarm_property("burglaryAlarm", state.triggered, time_of_sample),
                ChangeCause.RULE_TRIGGER,
            )
        if mode_changed:
            return arm_state_property(state.mode, time_of_sample), ChangeCause.PHYSICAL_INTERACTION
        return None, None

    async def send_event(
        self,
        device: Any,
        details: EventDetails,
        data: Any,
    ) -> Optional[ChangeReport]:
        time_of_sample = to_iso8601(details.event_time)
        changed: Optional[Property] = None
        cause: Optional[ChangeCause] = None

        if (
            details.event_interface == DeviceInterface.SECURITY_SYSTEM
            and details.property == "securitySystemState"
        ):
            changed, cause = self._diff_security_state(device, data, time_of_sample)
        elif details.event_interface == DeviceInterface.FLOOD_SENSOR:
            changed = _alarm_property("waterAlarm", bool(data), time_of_sample)
            cause = ChangeCause.RULE_TRIGGER

        if changed is None or cause is None:
            logger.debug(
                "No change to report for %s (%s)",
                device.id,
                details.event_interface.value,
            )
            return None

        return ChangeReport.from_snapshot(cause, [changed], self._snapshot(device))
