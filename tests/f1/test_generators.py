"""Tests for question, roadmap and lesson content generation."""

from unittest.mock import MagicMock

import pytest

from fakes import LESSON_REPLY, ROADMAP_REPLY
from pathwise.core.lesson_content_generator import (
    LessonContent,
    build_lesson_prompt,
    generate_lesson_content,
)
from pathwise.core.question_generator import build_questions_prompt, generate_questions
from pathwise.core.roadmap_generator import (
    alter_roadmap_weeks,
    build_roadmap_prompt,
    format_answers,
    generate_roadmap,
    lessons_from_weeks,
)
from pathwise.llm.client import LLMResponseError, LLMUnavailableError
from pathwise.store.models import Lesson


def _lesson():
    return Lesson(
        id="lesson-1",
        roadmap_id="roadmap-1",
        week_number=1,
        title="Variables",
        lesson_objective="Store values",
        estimated_time="1 hour",
    )


class TestQuestionGenerator:
    def test_prompt_mentions_goal_and_count(self):
        prompt = build_questions_prompt("Learn Rust")
        assert "Generate 5 specific questions" in prompt
        assert "Learn Rust" in prompt

    def test_generate_questions(self, llm):
        questions = generate_questions("Learn Python", client=llm, timeout=3)

        assert len(questions) == 2
        assert questions[0].question == "What is your current experience level?"
        assert questions[0].options == ["Beginner", "Advanced"]
        assert llm.generate_json.call_args.kwargs["timeout"] == 3

    def test_malformed_entries_skipped(self):
        client = MagicMock()
        client.generate_json.return_value = [
            {"question": "Kept?", "options": ["yes", 2]},
            {"options": ["no question"]},
            "Plain question?",
            42,
        ]

        questions = generate_questions("goal", client=client, timeout=1)

        assert [q.question for q in questions] == ["Kept?", "Plain question?"]
        assert questions[0].options == ["yes", "2"]
        assert questions[1].to_dict() == {"question": "Plain question?", "options": []}

    def test_non_array_rejected(self):
        client = MagicMock()
        client.generate_json.return_value = {"question": "x"}

        with pytest.raises(LLMResponseError) as exc_info:
            generate_questions("goal", client=client, timeout=1)
        assert exc_info.value.message == "Invalid questions format received from AI"

    def test_client_errors_propagate(self):
        client = MagicMock()
        client.generate_json.side_effect = LLMUnavailableError("down")

        with pytest.raises(LLMUnavailableError):
            generate_questions("goal", client=client, timeout=1)


class TestRoadmapGenerator:
    def test_answers_one_per_line(self):
        text = format_answers({"Level?": "Beginner", "Hours?": "5"})
        assert text == "Level?: Beginner\nHours?: 5"

    def test_prompt(self):
        prompt = build_roadmap_prompt("Learn SQL", {"Level?": "Beginner"})
        assert "8-week learning roadmap for: Learn SQL" in prompt
        assert "Level?: Beginner" in prompt

    def test_generate_roadmap(self, llm):
        weeks = generate_roadmap("Learn Python", {"Level?": "Beginner"}, client=llm, timeout=2)
        assert weeks == ROADMAP_REPLY

    def test_non_array_rejected(self):
        client = MagicMock()
        client.generate_json.return_value = {"weeks": []}

        with pytest.raises(LLMResponseError) as exc_info:
            generate_roadmap("goal", {}, client=client, timeout=1)
        assert exc_info.value.message == "Invalid roadmap format received from AI"

    @pytest.mark.parametrize(
        "reply",
        [
            [],
            [{"title": "Week 1", "topics": ["Intro", "Vars"]}],
            [{"title": "Week 1", "topics": "Intro, Vars"}],
            ["Week 1"],
        ],
    )
    def test_reply_without_usable_topics_rejected(self, reply):
        client = MagicMock()
        client.generate_json.return_value = reply

        with pytest.raises(LLMResponseError) as exc_info:
            generate_roadmap("goal", {}, client=client, timeout=1)
        assert exc_info.value.message == "Invalid roadmap format received from AI"

    def test_alter_sends_request_as_answer(self, llm):
        alter_roadmap_weeks("Learn Python", "More projects please", client=llm, timeout=1)

        prompt = llm.generate_json.call_args.args[0]
        assert "alterRequest: More projects please" in prompt
        assert "Learn Python" in prompt


class TestLessonsFromWeeks:
    def test_flattens_topics(self):
        rows = lessons_from_weeks("r1", ROADMAP_REPLY)

        assert [(r["week_number"], r["order_index"], r["title"]) for r in rows] == [
            (1, 0, "Variables"),
            (1, 1, "Loops"),
            (2, 0, "Functions"),
        ]
        assert rows[0] == {
            "roadmap_id": "r1",
            "week_number": 1,
            "title": "Variables",
            "lesson_objective": "Store values",
            "estimated_time": "1 hour",
            "order_index": 0,
        }

    def test_week_without_topics_contributes_nothing(self):
        weeks = [{"title": "Week 1"}, {"title": "Week 2", "topics": [{"title": "Only"}]}]

        rows = lessons_from_weeks("r1", weeks)

        assert len(rows) == 1
        assert rows[0]["week_number"] == 2
        assert rows[0]["lesson_objective"] == ""

    def test_empty(self):
        assert lessons_from_weeks("r1", []) == []

    def test_string_topics_skipped(self):
        weeks = [{"title": "Week 1", "topics": ["Intro", {"title": "Vars"}, None]}]

        rows = lessons_from_weeks("r1", weeks)

        assert [(r["title"], r["order_index"]) for r in rows] == [("Vars", 1)]

    def test_topics_not_a_list_skipped(self):
        weeks = [
            {"title": "Week 1", "topics": "Intro, Vars"},
            {"title": "Week 2", "topics": [{"title": "Loops", "estimatedTime": None}]},
            "Week 3",
        ]

        rows = lessons_from_weeks("r1", weeks)

        assert len(rows) == 1
        assert (rows[0]["week_number"], rows[0]["estimated_time"]) == (2, "")


class TestLessonContentGenerator:
    def test_prompt_fields(self):
        prompt = build_lesson_prompt(_lesson())
        assert "Title: Variables" in prompt
        assert "Objective: Store values" in prompt
        assert "Time: 1 hour" in prompt

    def test_generate(self, llm):
        content = generate_lesson_content(_lesson(), client=llm, timeout=4)
        assert content == LESSON_REPLY

    @pytest.mark.parametrize("reply", [[], {}, ["not", "an", "object"]])
    def test_non_object_rejected(self, reply):
        client = MagicMock()
        client.generate_json.return_value = reply

        with pytest.raises(LLMResponseError) as exc_info:
            generate_lesson_content(_lesson(), client=client, timeout=1)
        assert exc_info.value.message == "Invalid lesson content format received from AI"

    def test_typed_view(self):
        content = LessonContent.from_dict(LESSON_REPLY)

        assert content.title == "Variables"
        assert content.key_concepts == ["assignment", "names"]
        assert len(content.assessment_questions) == 2
        assert content.assessment_questions[0].type == "multiple-choice"
        assert content.assessment_questions[1].type == "open-ended"
        assert content.assessment_questions[1].options is None

    def test_unknown_question_type_inferred(self):
        content = LessonContent.from_dict(
            {"assessmentQuestions": [{"question": "Q", "type": "essay", "answer": "A"}]}
        )
        assert content.assessment_questions[0].type == "open-ended"

    def test_null_answer_becomes_empty(self):
        content = LessonContent.from_dict(
            {"assessmentQuestions": [{"question": "Q", "answer": None, "explanation": None}]}
        )
        question = content.assessment_questions[0]
        assert (question.answer, question.explanation) == ("", "")
