"""
Last-observed property values per device.

Capability adapters use this to decide whether a dimension changed and which
cause to report. Entries are created on first observation and overwritten on
each new one; they are never evicted, which is safe only as long as the host
registry never reuses a device id within a process lifetime.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger("alexa_bridge.capabilities.state_tracker")

_MISSING = object()


class DeviceStateTracker:
    """
    Keyed store of (device id, property name) -> last value.

    Reads and writes never suspend, so each one is atomic with respect to
    other coroutines on the loop; last writer wins.
    """

    def __init__(self) -> None:
        self._values: dict[tuple[str, str], Any] = {}

    def get(self, device_id: str, prop: str, default: Any = None) -> Any:
        """Last value seen for the property, or ``default`` if never observed."""
        return self._values.get((device_id, prop), default)

    def has(self, device_id: str, prop: str) -> bool:
        return self._values.get((device_id, prop), _MISSING) is not _MISSING

    def set(self, device_id: str, prop: str, value: Any) -> None:
        """Record the latest observed value."""
        self._values[(device_id, prop)] = value
        logger.debug("Tracked %s.%s = %r", device_id, prop, value)

    def update(self, device_id: str, values: dict[str, Any]) -> dict[str, Any]:
        """
        Record several values and return the ones that differ from what was tracked.

        Properties seen for the first time count as changed.
        """
        changed = {}
        for prop, value in values.items():
            previous = self._values.get((device_id, prop), _MISSING)
            if previous is _MISSING or previous != value:
                changed[prop] = value
            self._values[(device_id, prop)] = value
        return changed

    def clear(self) -> None:
        """Forget everything (mainly for testing)."""
        self._values.clear()
        logger.info("State tracker cleared")

    @property
    def size(self) -> int:
        """Number of tracked (device, property) entries."""
        return len(self._values)


# Module-level singleton
_state_tracker: Optional[DeviceStateTracker] = None


def get_state_tracker() -> DeviceStateTracker:
    """Get or create the process-wide state tracker."""
    global _state_tracker
    if _state_tracker is None:
        _state_tracker = DeviceStateTracker()
    return _state_tracker


def reset_state_tracker() -> None:
    """Reset the state tracker singleton (mainly for testing)."""
    global _state_tracker
    _state_tracker = None
