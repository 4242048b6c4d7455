"""Tests for the notification center."""

import pytest

from pathwise.core.notifications import (
    DEFAULT_DURATION_MS,
    ERROR_DURATION_MS,
    WARNING_DURATION_MS,
    NotificationAction,
    NotificationCenter,
    NotificationType,
)


@pytest.fixture
def center():
    return NotificationCenter()


class TestNotificationCenter:
    def test_show_helpers_set_type_and_duration(self, center):
        success = center.show_success("Saved")
        error = center.show_error("Save Failed", "Try again")
        warning = center.show_warning("Loading Issue")
        info = center.show_info("Heads up")

        assert (success.type, success.duration) == (NotificationType.SUCCESS, DEFAULT_DURATION_MS)
        assert (error.type, error.duration) == (NotificationType.ERROR, ERROR_DURATION_MS)
        assert (warning.type, warning.duration) == (NotificationType.WARNING, WARNING_DURATION_MS)
        assert info.type == NotificationType.INFO
        assert [n.title for n in center.pending()] == [
            "Saved",
            "Save Failed",
            "Loading Issue",
            "Heads up",
        ]

    def test_ids_are_unique_base36(self, center):
        ids = {center.show_info(f"n{i}").id for i in range(50)}

        assert len(ids) == 50
        for notification_id in ids:
            assert len(notification_id) == 9
            assert notification_id.isalnum() and notification_id == notification_id.lower()

    def test_remove_and_clear(self, center):
        first = center.show_info("a")
        center.show_info("b")

        center.remove(first.id)
        assert [n.title for n in center.pending()] == ["b"]

        center.clear_all()
        assert center.pending() == []

    def test_to_dict(self, center):
        notification = center.show_error(
            "Connection Issue", "Having trouble", action=NotificationAction("Retry", lambda: None)
        )

        data = notification.to_dict()

        assert data["type"] == "error"
        assert data["action"] == "Retry"
        assert data["duration"] == ERROR_DURATION_MS


class TestTriggerAction:
    def test_runs_callback_and_dismisses(self, center):
        calls = []
        notification = center.show_warning(
            "Connection Issue",
            action=NotificationAction("Retry", lambda: calls.append("retried") or "done"),
        )

        assert center.trigger_action(notification.id) == "done"
        assert calls == ["retried"]
        assert center.get(notification.id) is None

    def test_action_not_run_on_creation(self, center):
        calls = []
        center.show_warning("x", action=NotificationAction("Retry", lambda: calls.append(1)))
        assert calls == []

    def test_unknown_or_without_action(self, center):
        plain = center.show_info("no action")

        with pytest.raises(KeyError):
            center.trigger_action("missing")
        with pytest.raises(KeyError):
            center.trigger_action(plain.id)
