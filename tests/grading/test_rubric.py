"""Tests for the weighted rubric scorer."""

import unittest

from grading.rubric import (
    RUBRIC_WEIGHTS,
    CriteriaScores,
    apply_rubric,
    calculate_rubric_score,
    check_concept_hits,
    concept_coverage_ratio,
    extract_concepts,
    extract_expected_concepts,
    score_with_criteria,
)


class TestConceptExtraction(unittest.TestCase):
    def test_drops_stopwords_and_short_tokens(self):
        self.assertEqual(
            extract_concepts("What is the role of ATP in a cell?"),
            ["role", "atp", "cell"],
        )

    def test_expected_concepts_merge_prompt_and_reference(self):
        concepts = extract_expected_concepts(
            "What is photosynthesis?",
            "Plants convert sunlight into chemical energy",
        )
        self.assertEqual(
            concepts,
            ["photosynthesis", "plants", "convert", "sunlight", "into", "chemical", "energy"],
        )

    def test_hits(self):
        hits = check_concept_hits(["sunlight", "chlorophyll"], "Sunlight is absorbed")
        self.assertEqual([(hit.concept, hit.hit) for hit in hits], [("sunlight", True), ("chlorophyll", False)])
        self.assertEqual(concept_coverage_ratio(hits), 0.5)
        self.assertEqual(concept_coverage_ratio([]), 0.0)


class TestRubricScore(unittest.TestCase):
    def test_weights_sum_to_one(self):
        self.assertAlmostEqual(sum(RUBRIC_WEIGHTS.values()), 1.0)

    def test_weighted_score(self):
        self.assertEqual(calculate_rubric_score(CriteriaScores(2, 2, 2, 2)), 1.0)
        self.assertEqual(calculate_rubric_score(CriteriaScores(0, 0, 0, 0)), 0.0)
        self.assertEqual(calculate_rubric_score(CriteriaScores(1, 1, 1, 1)), 0.5)
        self.assertEqual(calculate_rubric_score(CriteriaScores(2, 0, 0, 0)), 0.4)

    def test_model_criteria_are_clamped(self):
        result = score_with_criteria(CriteriaScores(3, -1, 2, 2), [])
        self.assertEqual(result.criteria.coverage, 2.0)
        self.assertEqual(result.criteria.accuracy, 0.0)
        self.assertEqual(result.score, 0.65)


class TestApplyRubric(unittest.TestCase):
    def test_heuristic_criteria_and_feedback(self):
        result = apply_rubric(
            "What is photosynthesis?",
            "Photosynthesis is how plants turn sunlight into energy",
            "Plants convert sunlight into chemical energy",
        )

        self.assertEqual(result.criteria.coverage, 1.4)
        self.assertEqual(result.criteria.accuracy, 1.0)
        self.assertEqual(result.criteria.clarity, 1.5)
        self.assertEqual(result.criteria.conciseness, 2.0)
        self.assertAlmostEqual(result.score, 0.67, delta=0.01)
        self.assertEqual(result.missing_concepts, ["convert", "chemical"])
        self.assertEqual(
            result.feedback,
            "You covered 5/7 key concepts. Strengths: clear and organized, concise. "
            "Areas to improve: concept coverage, factual accuracy.",
        )
        self.assertEqual(
            result.improvement,
            "To reach full credit, add these missing concepts: convert, chemical.",
        )

    def test_long_missing_list_is_truncated(self):
        result = apply_rubric(
            "Explain mitochondria ribosomes nucleus membrane cytoplasm",
            "I am not sure",
        )
        self.assertEqual(
            result.improvement,
            "To reach full credit, add these missing concepts: "
            "explain, mitochondria, ribosomes (and 3 more).",
        )
        self.assertEqual(result.criteria.clarity, 1.0)

    def test_verbose_answer_loses_conciseness(self):
        answer = "Photosynthesis converts sunlight. " * 10
        result = apply_rubric("Define photosynthesis", answer)
        self.assertEqual(result.criteria.conciseness, 1.0)

    def test_full_marks_feedback(self):
        hits = check_concept_hits(["osmosis"], "Osmosis moves water")
        result = score_with_criteria(CriteriaScores(2, 2, 2, 2), hits)

        self.assertEqual(result.score, 1.0)
        self.assertTrue(result.feedback.endswith("Excellent work overall!"))
        self.assertEqual(
            result.improvement,
            "You've covered all key concepts. Focus on refining clarity and precision.",
        )


if __name__ == "__main__":
    unittest.main()
