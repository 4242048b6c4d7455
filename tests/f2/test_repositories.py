"""Tests for the per-table repository functions."""

import pytest

from fakes import make_api_error
from pathwise.store import (
    completions_repository,
    lessons_repository,
    profiles_repository,
    progress_repository,
    roadmaps_repository,
)
from pathwise.store.client import StoreError
from pathwise.store.models import UserProgress


@pytest.fixture
def roadmap(store):
    return store.insert(
        "roadmaps",
        {
            "user_id": "u1",
            "title": "Learning Roadmap: Python",
            "goal": "Python",
            "weeks": [{"title": "Week 1"}],
            "questions": [],
            "answers": {},
        },
    )


def _lesson_row(roadmap_id, week, index, title):
    return {
        "roadmap_id": roadmap_id,
        "week_number": week,
        "title": title,
        "lesson_objective": "",
        "estimated_time": "1 hour",
        "order_index": index,
    }


class TestProfiles:
    def test_get_missing(self, store):
        assert profiles_repository.get_profile(store, "nobody") is None

    def test_upsert_creates_then_updates(self, store):
        profiles_repository.upsert_profile(store, "u1", "a@example.com", {"goal": "Rust"})
        profile = profiles_repository.upsert_profile(
            store, "u1", "a@example.com", {"full_name": "Ada"}
        )

        assert profile.goal == "Rust"
        assert profile.full_name == "Ada"
        assert len(store.tables["profiles"]) == 1

    def test_list_learners_newest_first(self, store):
        store.add_user("old@example.com")
        store.add_user("admin@example.com", is_admin=True)
        store.add_user("new@example.com")

        learners = profiles_repository.list_learner_profiles(store)

        assert [p.email for p in learners] == ["new@example.com", "old@example.com"]

    def test_errors_surface_as_store_error(self, store):
        store.fail("profiles", "select", make_api_error("boom"))
        with pytest.raises(StoreError):
            profiles_repository.get_profile(store, "u1")


class TestRoadmaps:
    def test_insert_returns_row(self, store):
        created = roadmaps_repository.insert_roadmap(
            store, "u1", "Title", "Goal", [{"title": "W1"}], [{"question": "Q"}], {"Q": "A"}
        )

        assert created.id
        assert created.total_weeks == 1
        assert created.answers == {"Q": "A"}

    def test_insert_without_returned_row(self, store):
        store.insert_returns_nothing["roadmaps"] = True
        assert roadmaps_repository.insert_roadmap(store, "u1", "T", "G", [], [], {}) is None

    def test_latest_roadmap(self, store):
        store.insert("roadmaps", {"user_id": "u1", "title": "old", "goal": "g"})
        store.insert("roadmaps", {"user_id": "u2", "title": "other", "goal": "g"})
        store.insert("roadmaps", {"user_id": "u1", "title": "new", "goal": "g"})

        assert roadmaps_repository.get_latest_roadmap(store, "u1").title == "new"
        assert roadmaps_repository.get_latest_roadmap(store, "u3") is None

    def test_update_weeks(self, store, roadmap):
        roadmaps_repository.update_roadmap_weeks(store, roadmap["id"], [{"title": "A"}, {"title": "B"}])
        assert roadmaps_repository.get_roadmap(store, roadmap["id"]).total_weeks == 2

    def test_delete_cascades(self, store, roadmap):
        store.insert("lessons", _lesson_row(roadmap["id"], 1, 0, "L"))
        store.insert("user_progress", {"user_id": "u1", "roadmap_id": roadmap["id"]})

        roadmaps_repository.delete_roadmap(store, roadmap["id"])

        assert roadmaps_repository.get_roadmap(store, roadmap["id"]) is None
        assert store.tables["lessons"] == []
        assert store.tables["user_progress"] == []


class TestLessons:
    def test_list_ordered_by_week_then_position(self, store, roadmap):
        lessons_repository.insert_lessons(
            store,
            [
                _lesson_row(roadmap["id"], 2, 0, "C"),
                _lesson_row(roadmap["id"], 1, 1, "B"),
                _lesson_row(roadmap["id"], 1, 0, "A"),
            ],
        )

        lessons = lessons_repository.list_lessons(store, roadmap["id"])

        assert [lesson.title for lesson in lessons] == ["A", "B", "C"]

    def test_insert_nothing(self, store):
        assert lessons_repository.insert_lessons(store, []) == 0
        assert store.calls == []

    def test_delete_for_roadmap(self, store, roadmap):
        lessons_repository.insert_lessons(store, [_lesson_row(roadmap["id"], 1, 0, "A")])
        store.insert("lessons", _lesson_row("other", 1, 0, "Keep"))

        lessons_repository.delete_lessons_for_roadmap(store, roadmap["id"])

        assert [row["title"] for row in store.tables["lessons"]] == ["Keep"]

    def test_set_content(self, store, roadmap):
        row = store.insert("lessons", _lesson_row(roadmap["id"], 1, 0, "A"))

        lessons_repository.set_lesson_content(store, row["id"], {"title": "A"})

        assert lessons_repository.get_lesson(store, row["id"]).content == {"title": "A"}


class TestProgress:
    def test_insert_zeroed(self, store, roadmap):
        progress_repository.insert_progress(store, "u1", roadmap["id"], 7)

        progress = progress_repository.get_progress(store, "u1", roadmap["id"])

        assert progress.total_lessons == 7
        assert progress.completed_lessons == 0
        assert progress.current_week == 1

    def test_update_counters(self, store, roadmap):
        progress_repository.insert_progress(store, "u1", roadmap["id"], 4)
        progress = progress_repository.get_progress(store, "u1", roadmap["id"])
        progress.completed_lessons = 2
        progress.total_time_spent = 60
        progress.average_accuracy = 85.0

        progress_repository.update_progress_counters(store, progress)

        stored = progress_repository.get_progress(store, "u1", roadmap["id"])
        assert (stored.completed_lessons, stored.total_time_spent, stored.average_accuracy) == (
            2,
            60,
            85.0,
        )

    def test_reset_for_roadmap(self, store, roadmap):
        store.insert(
            "user_progress",
            {
                "user_id": "u1",
                "roadmap_id": roadmap["id"],
                "total_lessons": 3,
                "completed_lessons": 3,
                "total_time_spent": 90,
                "average_accuracy": 70,
                "current_week": 2,
            },
        )

        progress_repository.reset_progress_for_roadmap(store, roadmap["id"], 5)

        progress = progress_repository.get_progress(store, "u1", roadmap["id"])
        assert isinstance(progress, UserProgress)
        assert progress.total_lessons == 5
        assert progress.completed_lessons == 0
        assert progress.current_week == 1

    def test_list_for_user(self, store):
        store.insert("user_progress", {"user_id": "u1", "roadmap_id": "r1"})
        store.insert("user_progress", {"user_id": "u1", "roadmap_id": "r2"})
        store.insert("user_progress", {"user_id": "u2", "roadmap_id": "r3"})

        assert len(progress_repository.list_progress_for_user(store, "u1")) == 2


class TestCompletions:
    def test_upsert_overwrites(self, store, roadmap):
        lesson = store.insert("lessons", _lesson_row(roadmap["id"], 1, 0, "A"))

        completions_repository.upsert_completion(store, "u1", lesson["id"], 50, 30, ["a"])
        completions_repository.upsert_completion(store, "u1", lesson["id"], 100, 30, {})

        completion = completions_repository.get_completion(store, "u1", lesson["id"])
        assert completion.score == 100
        assert len(store.tables["lesson_completions"]) == 1

    def test_recent_completions_join_titles_and_filter_roadmap(self, store, roadmap):
        mine = [store.insert("lessons", _lesson_row(roadmap["id"], 1, i, f"L{i}")) for i in range(7)]
        other = store.insert("lessons", _lesson_row("other-roadmap", 1, 0, "Elsewhere"))
        for index, lesson in enumerate(mine + [other]):
            store.insert(
                "lesson_completions",
                {
                    "user_id": "u1",
                    "lesson_id": lesson["id"],
                    "score": 80,
                    "completed_at": f"2026-02-01T10:00:{index:02d}+00:00",
                },
            )

        recent = completions_repository.list_recent_completions(store, "u1", roadmap["id"])

        assert len(recent) == 5
        assert recent[0].lesson_title == "L6"
        assert all(c.lesson_title != "Elsewhere" for c in recent)

    def test_list_completions(self, store):
        store.insert("lesson_completions", {"user_id": "u1", "lesson_id": "l1", "score": 90})
        store.insert("lesson_completions", {"user_id": "u2", "lesson_id": "l1", "score": 10})

        completions = completions_repository.list_completions(store, "u1")

        assert [c.score for c in completions] == [90]
        assert completions[0].lesson_title is None
