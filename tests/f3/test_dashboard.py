"""Tests for the dashboard loader."""

import asyncio

import httpx
import pytest

from fakes import make_api_error
from pathwise.core.dashboard import load_dashboard
from pathwise.core.errors import PathwiseError


class TestLoadDashboard:
    def test_no_roadmap(self, store, learner):
        dashboard = asyncio.run(load_dashboard(store, learner))

        assert dashboard.to_dict() == {
            "roadmap": None,
            "progress": None,
            "recent_completions": [],
            "stats": None,
        }

    def test_stats(self, store, seeded):
        store.tables["user_progress"][0].update(
            completed_lessons=1, total_time_spent=90, average_accuracy=82.5
        )
        store.insert(
            "lesson_completions",
            {
                "user_id": seeded.user.id,
                "lesson_id": seeded.lessons[0]["id"],
                "score": 83,
                "completed_at": "2026-03-01T09:00:00+00:00",
            },
        )

        dashboard = asyncio.run(load_dashboard(store, seeded.user))
        stats = dashboard.stats()

        assert stats == {
            "completion_percentage": 33,
            "completed_lessons": 1,
            "total_lessons": 3,
            "current_week": 1,
            "total_weeks": 2,
            "week_progress": 50,
            "time_spent": "1h 30m",
            "average_accuracy": 83,
        }
        assert dashboard.recent_completions[0].lesson_title == "Variables"

    def test_progress_failure_degrades(self, store, seeded):
        store.fail("user_progress", "select", make_api_error("boom"))

        dashboard = asyncio.run(load_dashboard(store, seeded.user))

        assert dashboard.roadmap.id == seeded.roadmap["id"]
        assert dashboard.progress is None
        assert dashboard.stats() is None

    def test_completions_failure_degrades(self, store, seeded):
        store.fail("lesson_completions", "select", httpx.ConnectError("down"))

        dashboard = asyncio.run(load_dashboard(store, seeded.user))

        assert dashboard.progress is not None
        assert dashboard.recent_completions == []

    def test_roadmap_failure_raises(self, store, seeded):
        store.fail("roadmaps", "select", httpx.ReadTimeout("slow"))

        with pytest.raises(PathwiseError) as exc_info:
            asyncio.run(load_dashboard(store, seeded.user))

        assert exc_info.value.message == "Request timeout"
