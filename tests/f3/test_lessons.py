"""Tests for lesson loading, listing and completion."""

import asyncio

import pytest

from fakes import LESSON_REPLY, make_api_error
from pathwise.core import lessons
from pathwise.core.errors import NotFoundError, PathwiseError
from pathwise.core.notifications import NotificationCenter
from pathwise.db.content_cache import cache_lesson_content, get_cached_lesson_content
from pathwise.llm.client import LLMUnavailableError
from pathwise.store.models import Lesson


def _load(store, lesson_id, user=None, llm=None, notifications=None):
    return asyncio.run(
        lessons.load_lesson(store, lesson_id, user, llm=llm, notifications=notifications)
    )


def _lesson(seeded, index):
    return Lesson.from_row(seeded.lessons[index])


class TestNeighbor:
    def test_navigation(self, seeded):
        ordered = [Lesson.from_row(row) for row in seeded.lessons]
        first, second, third = ordered

        assert lessons.neighbor(ordered, first.id, "prev") is None
        assert lessons.neighbor(ordered, first.id, "next") == second
        assert lessons.neighbor(ordered, third.id, "prev") == second
        assert lessons.neighbor(ordered, third.id, "next") is None
        assert lessons.neighbor(ordered, "unknown", "next") is None


class TestLoadLesson:
    def test_generates_caches_and_persists(self, store, seeded, llm):
        lesson_id = seeded.lessons[1]["id"]

        view = _load(store, lesson_id, seeded.user, llm)

        assert view.content == LESSON_REPLY
        assert view.completed is False
        assert get_cached_lesson_content(lesson_id) == LESSON_REPLY
        stored = next(row for row in store.tables["lessons"] if row["id"] == lesson_id)
        assert stored["content"] == LESSON_REPLY

        data = view.to_dict()
        assert data["position"] == 2
        assert data["total"] == 3
        assert data["previous_id"] == seeded.lessons[0]["id"]
        assert data["next_id"] == seeded.lessons[2]["id"]

    def test_cache_hit_skips_generation(self, store, seeded, llm):
        lesson_id = seeded.lessons[0]["id"]
        cache_lesson_content(lesson_id, {"title": "Cached"})

        view = _load(store, lesson_id, llm=llm)

        assert view.content == {"title": "Cached"}
        llm.generate_json.assert_not_called()

    def test_stored_content_used_and_cached(self, store, seeded, llm):
        row = seeded.lessons[0]
        store.tables["lessons"][0]["content"] = {"title": "From row"}

        view = _load(store, row["id"], llm=llm)

        assert view.content == {"title": "From row"}
        assert get_cached_lesson_content(row["id"]) == {"title": "From row"}
        llm.generate_json.assert_not_called()

    def test_persist_failure_is_not_fatal(self, store, seeded, llm):
        store.fail("lessons", "update", make_api_error("read only"))

        view = _load(store, seeded.lessons[0]["id"], llm=llm)

        assert view.content == LESSON_REPLY

    def test_not_found(self, store, seeded, llm):
        notifications = NotificationCenter()

        with pytest.raises(NotFoundError) as exc_info:
            _load(store, "missing", llm=llm, notifications=notifications)

        assert exc_info.value.message == "Lesson not found"
        notification = notifications.pending()[0]
        assert notification.title == "Loading Failed"
        assert notification.action.label == "Retry"

    def test_generation_failure(self, store, seeded, llm):
        llm.generate_json.side_effect = LLMUnavailableError("AI service is temporarily unavailable.")
        notifications = NotificationCenter()

        with pytest.raises(LLMUnavailableError):
            _load(store, seeded.lessons[0]["id"], llm=llm, notifications=notifications)

        assert get_cached_lesson_content(seeded.lessons[0]["id"]) is None
        assert notifications.pending()[0].title == "Loading Failed"

    def test_completed_flag(self, store, seeded, llm):
        lesson_id = seeded.lessons[0]["id"]
        store.insert(
            "lesson_completions",
            {"user_id": seeded.user.id, "lesson_id": lesson_id, "score": 100},
        )

        assert _load(store, lesson_id, seeded.user, llm).completed is True


class TestIsCompleted:
    def test_error_means_not_completed(self, store, seeded):
        store.fail("lesson_completions", "select", make_api_error("boom"))
        assert asyncio.run(lessons.is_completed(store, seeded.user, "x")) is False


class TestListLessons:
    def test_grouped_by_week_with_completion(self, store, seeded):
        store.insert(
            "lesson_completions",
            {"user_id": seeded.user.id, "lesson_id": seeded.lessons[0]["id"], "score": 80},
        )

        overview = asyncio.run(lessons.list_lessons(store, seeded.user))

        assert [w.week_number for w in overview.weeks] == [1, 2]
        assert overview.weeks[0].completed_count == 1
        data = overview.to_dict()
        first = data["weeks"][0]["lessons"][0]
        assert (first["completed"], first["score"]) == (True, 80)
        assert data["weeks"][1]["lessons"][0]["completed"] is False

    def test_no_roadmap(self, store, learner):
        overview = asyncio.run(lessons.list_lessons(store, learner))
        assert overview.to_dict() == {"roadmap": None, "weeks": []}


class TestMarkComplete:
    def test_records_full_score(self, store, seeded):
        notifications = NotificationCenter()

        progress = asyncio.run(
            lessons.mark_complete(store, seeded.user, _lesson(seeded, 0), notifications)
        )

        assert (progress.completed_lessons, progress.total_time_spent) == (1, 30)
        assert progress.average_accuracy == 100
        completion = store.tables["lesson_completions"][0]
        assert (completion["score"], completion["time_spent"], completion["answers"]) == (
            100,
            30,
            {},
        )
        assert store.tables["user_progress"][0]["completed_lessons"] == 1
        assert [n.title for n in notifications.pending()] == ["Lesson Completed"]

    def test_without_progress_record(self, store, seeded):
        store.tables["user_progress"] = []

        progress = asyncio.run(lessons.mark_complete(store, seeded.user, _lesson(seeded, 0)))

        assert progress is None
        assert len(store.tables["lesson_completions"]) == 1

    def test_save_failure(self, store, seeded):
        store.fail("lesson_completions", "upsert", make_api_error("boom"))
        notifications = NotificationCenter()

        with pytest.raises(PathwiseError) as exc_info:
            asyncio.run(
                lessons.mark_complete(store, seeded.user, _lesson(seeded, 0), notifications)
            )

        assert exc_info.value.message == "Failed to mark lesson as complete. Please try again."
        assert exc_info.value.title == "Save Failed"
        assert [n.title for n in notifications.pending()] == ["Save Failed"]


class TestCompleteTest:
    def test_scores_and_records(self, store, seeded, lesson_content):
        notifications = NotificationCenter()

        result = asyncio.run(
            lessons.complete_test(
                store,
                seeded.user,
                _lesson(seeded, 0),
                lesson_content,
                [" DEF", "something else"],
                notifications,
            )
        )

        assert result.score == 50
        assert result.passed is False
        assert result.message == "You scored 50%! Consider reviewing the material."
        assert result.total_questions == 2
        completion = store.tables["lesson_completions"][0]
        assert completion["answers"] == [" DEF", "something else"]
        progress = store.tables["user_progress"][0]
        assert (progress["completed_lessons"], progress["average_accuracy"]) == (1, 50)
        assert notifications.pending()[0].message == result.message

    def test_passing(self, store, seeded, lesson_content):
        result = asyncio.run(
            lessons.complete_test(
                store, seeded.user, _lesson(seeded, 0), lesson_content, ["def", "binds x to 1"]
            )
        )
        assert result.passed is True
        assert result.to_dict()["score"] == 100

    def test_save_failure(self, store, seeded, lesson_content):
        store.fail("user_progress", "update", make_api_error("boom"))

        with pytest.raises(PathwiseError) as exc_info:
            asyncio.run(
                lessons.complete_test(store, seeded.user, _lesson(seeded, 0), lesson_content, [])
            )

        assert exc_info.value.message == "Failed to save test results. Please try again."
