"""Tests for the per-device state tracker."""

from alexa_bridge.capabilities.state_tracker import (
    DeviceStateTracker,
    get_state_tracker,
    reset_state_tracker,
)


class TestDeviceStateTracker:
    """Test get/set/update semantics."""

    def test_default_when_never_observed(self):
        tracker = DeviceStateTracker()
        assert tracker.get("d1", "mode") is None
        assert tracker.get("d1", "mode", 0) == 0
        assert not tracker.has("d1", "mode")

    def test_set_then_get(self):
        tracker = DeviceStateTracker()
        tracker.set("d1", "mode", "Heat")
        assert tracker.get("d1", "mode") == "Heat"
        assert tracker.has("d1", "mode")
        assert tracker.size == 1

    def test_tracked_none_counts_as_present(self):
        tracker = DeviceStateTracker()
        tracker.set("d1", "lowerSetpoint", None)
        assert tracker.has("d1", "lowerSetpoint")

    def test_devices_are_isolated(self):
        tracker = DeviceStateTracker()
        tracker.set("d1", "mode", "Heat")
        assert tracker.get("d2", "mode") is None

    def test_update_first_seen_is_changed(self):
        tracker = DeviceStateTracker()
        assert tracker.update("d1", {"mode": "Heat", "target": 21}) == {"mode": "Heat", "target": 21}

    def test_update_returns_only_differences(self):
        tracker = DeviceStateTracker()
        tracker.update("d1", {"mode": "Heat", "target": 21})
        assert tracker.update("d1", {"mode": "Heat", "target": 22}) == {"target": 22}
        assert tracker.update("d1", {"mode": "Heat", "target": 22}) == {}

    def test_clear(self):
        tracker = DeviceStateTracker()
        tracker.set("d1", "mode", "Heat")
        tracker.clear()
        assert tracker.size == 0


class TestStateTrackerSingleton:
    def test_same_instance_until_reset(self):
        first = get_state_tracker()
        assert get_state_tracker() is first
        reset_state_tracker()
        assert get_state_tracker() is not first
