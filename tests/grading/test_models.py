"""Tests for grading value objects and provider verdict validation."""

import unittest

from pydantic import ValidationError

from grading.models import (
    AIGradingResult,
    AIRubricVerdict,
    BreakdownItem,
    LongQuestion,
    MCQQuestion,
    ShortQuestion,
    band_for_score,
    parse_questions,
)


def item(question_type, score):
    return BreakdownItem(
        id="q1",
        type=question_type,
        prompt="prompt",
        user_answer="answer",
        score=score,
        feedback="feedback",
    )


class TestAIGradingResult(unittest.TestCase):
    def test_score_is_clamped(self):
        self.assertEqual(AIGradingResult(id="q1", score=1.4).score, 1.0)
        self.assertEqual(AIGradingResult(id="q1", score=-0.2).score, 0.0)

    def test_score_rounded_to_two_places(self):
        self.assertEqual(AIGradingResult(id="q1", score=0.777).score, 0.78)

    def test_band_defaults_from_score(self):
        self.assertEqual(AIGradingResult(id="q1", score=0.78).band, "mostly_correct")
        self.assertEqual(AIGradingResult(id="q1", score=0.95).band, "correct")

    def test_explicit_band_kept(self):
        result = AIGradingResult(id="q1", score=0.5, band="partial", why="half right")
        self.assertEqual(result.band, "partial")
        self.assertEqual(result.why, "half right")

    def test_numeric_id_becomes_text(self):
        self.assertEqual(AIGradingResult.model_validate({"id": 3, "score": 1}).id, "3")

    def test_invalid_entries_rejected(self):
        for entry in (
            {"score": 0.5},
            {"id": "q1"},
            {"id": "q1", "score": "high"},
            {"id": "q1", "score": 0.5, "band": "great"},
            {"id": "", "score": 0.5},
        ):
            with self.subTest(entry=entry):
                with self.assertRaises(ValidationError):
                    AIGradingResult.model_validate(entry)

    def test_non_finite_score_rejected(self):
        for score in (float("nan"), float("inf")):
            with self.subTest(score=score):
                with self.assertRaises(ValidationError):
                    AIGradingResult(id="q1", score=score)

    def test_band_thresholds(self):
        self.assertEqual(band_for_score(0.90), "correct")
        self.assertEqual(band_for_score(0.70), "mostly_correct")
        self.assertEqual(band_for_score(0.30), "partial")
        self.assertEqual(band_for_score(0.29), "incorrect")


class TestAIRubricVerdict(unittest.TestCase):
    def test_criteria_clamped(self):
        verdict = AIRubricVerdict(id="q1", coverage=2.5, accuracy=-1, clarity=1.5)
        self.assertEqual(verdict.coverage, 2.0)
        self.assertEqual(verdict.accuracy, 0.0)
        self.assertEqual(verdict.conciseness, 0.0)

    def test_nan_criterion_rejected(self):
        with self.assertRaises(ValidationError):
            AIRubricVerdict.model_validate({"id": "q1", "coverage": float("nan")})


class TestBreakdownItem(unittest.TestCase):
    def test_correct_is_derived_from_score(self):
        self.assertTrue(item("short", 0.90).correct)
        self.assertFalse(item("short", 0.85).correct)
        self.assertTrue(item("mcq", 1.0).correct)
        self.assertFalse(item("mcq", 0.0).correct)
        self.assertTrue(item("long", 0.95).correct)

    def test_score_out_of_range(self):
        with self.assertRaises(ValueError):
            item("short", 1.2)

    def test_to_dict_omits_empty_optionals(self):
        data = item("short", 0.85).to_dict()
        self.assertFalse(data["correct"])
        self.assertNotIn("improvement", data)
        self.assertNotIn("criteria", data)


class TestParseQuestions(unittest.TestCase):
    def test_discriminates_on_type(self):
        questions = parse_questions(
            [
                {"id": "q1", "type": "mcq", "prompt": "2+2?", "options": ["3", "4"], "answer": "4"},
                {"id": "q2", "type": "short", "prompt": "Capital of France?", "answer": "Paris"},
                {"id": "q3", "type": "long", "prompt": "Explain osmosis"},
            ]
        )
        self.assertIsInstance(questions[0], MCQQuestion)
        self.assertIsInstance(questions[1], ShortQuestion)
        self.assertIsInstance(questions[2], LongQuestion)
        self.assertEqual(questions[1].reference, "Paris")
        self.assertIsNone(questions[2].reference)

    def test_blank_reference_is_none(self):
        (question,) = parse_questions([{"id": "q1", "type": "short", "prompt": "p", "answer": "  "}])
        self.assertIsNone(question.reference)

    def test_duplicate_ids_rejected(self):
        with self.assertRaises(ValidationError):
            parse_questions(
                [
                    {"id": "q1", "type": "short", "prompt": "a"},
                    {"id": "q1", "type": "short", "prompt": "b"},
                ]
            )

    def test_unknown_type_rejected(self):
        with self.assertRaises(ValidationError):
            parse_questions([{"id": "q1", "type": "essay", "prompt": "a"}])


if __name__ == "__main__":
    unittest.main()
