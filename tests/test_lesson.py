"""Tests for lesson parsing and assessment scoring."""

import json

import pytest

from tutorchat.tutor.lesson import (
    MCQ,
    Lesson,
    LessonFormatError,
    parse_lesson_content,
    score_assessment,
)

GENERATED = {
    "subject": "Science",
    "slides": [
        {
            "heading": "What is Photosynthesis?",
            "body": "Plants turn $CO_2$ and $H_2O$ into sugar.",
            "keyTerms": [{"term": "Chlorophyll", "definition": "Green pigment"}],
            "visualPrompt": "A leaf in sunlight",
        }
    ],
    "mcqs": [
        {
            "question": "What gas do plants absorb?",
            "options": ["O2", "CO2", "N2", "He"],
            "correctIndex": 1,
            "explanation": "Plants take in carbon dioxide.",
        }
    ],
}


class TestParseLessonContent:
    def test_plain_json(self):
        lesson = parse_lesson_content(json.dumps(GENERATED), "Photosynthesis", 7)
        assert lesson.topic == "Photosynthesis"
        assert lesson.grade_level == 7
        assert lesson.subject == "Science"
        assert lesson.slides[0].key_terms[0].term == "Chlorophyll"
        assert lesson.mcqs[0].correct_index == 1

    def test_code_fences_stripped(self):
        content = "```json\n" + json.dumps(GENERATED) + "\n```"
        lesson = parse_lesson_content(content, "Photosynthesis", 7)
        assert lesson.slides[0].heading == "What is Photosynthesis?"

    def test_subject_defaults_to_general(self):
        data = dict(GENERATED, subject=None)
        assert parse_lesson_content(json.dumps(data), "t", 8).subject == "General"

    def test_invalid_json(self):
        with pytest.raises(LessonFormatError):
            parse_lesson_content("Sure! Here is your lesson:", "t", 8)

    def test_non_object(self):
        with pytest.raises(LessonFormatError):
            parse_lesson_content("[]", "t", 8)

    def test_no_slides(self):
        with pytest.raises(LessonFormatError):
            parse_lesson_content(json.dumps({"subject": "Science", "mcqs": []}), "t", 8)

    def test_bad_correct_index(self):
        data = dict(GENERATED, mcqs=[{"question": "q", "options": [], "correctIndex": "first"}])
        with pytest.raises(LessonFormatError):
            parse_lesson_content(json.dumps(data), "t", 8)

    def test_wire_shape(self):
        lesson = parse_lesson_content(json.dumps(GENERATED), "Photosynthesis", 7)
        d = lesson.to_dict()
        assert d["slides"] == GENERATED["slides"]
        assert d["mcqs"] == GENERATED["mcqs"]
        assert d["grade_level"] == 7
        assert Lesson.from_dict(d) == lesson


class TestScoreAssessment:
    def _mcqs(self):
        return [MCQ("q", ["a", "b"], correct_index=i % 2) for i in range(3)]

    def test_all_correct(self):
        assert score_assessment(self._mcqs(), [0, 1, 0]) == 3

    def test_unanswered_not_counted(self):
        assert score_assessment(self._mcqs(), [0, None, 1]) == 1

    def test_short_answer_list(self):
        assert score_assessment(self._mcqs(), [0]) == 1
