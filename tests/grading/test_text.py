"""Tests for normalisation and similarity helpers."""

import unittest

from grading.text import jaccard, loose_equals, normalize, round_half_up


class TestNormalize(unittest.TestCase):
    def test_case_and_punctuation(self):
        self.assertEqual(normalize("  Paris.  "), "paris")
        self.assertEqual(normalize("Cell-membrane,  transport!"), "cell membrane transport")
        self.assertEqual(normalize(None), "")

    def test_loose_equality(self):
        self.assertTrue(loose_equals("Paris.", "paris"))
        self.assertFalse(loose_equals("Paris", "Lyon"))


class TestJaccard(unittest.TestCase):
    def test_both_empty(self):
        self.assertEqual(jaccard("", "  ?? "), 1.0)

    def test_one_empty(self):
        self.assertEqual(jaccard("", "something"), 0.0)

    def test_partial_overlap(self):
        self.assertAlmostEqual(jaccard("red green blue", "red green"), 2 / 3)

    def test_word_order_ignored(self):
        self.assertEqual(jaccard("energy sunlight", "Sunlight, energy"), 1.0)


class TestRoundHalfUp(unittest.TestCase):
    def test_halves_round_up(self):
        self.assertEqual(round_half_up(87.5), 88.0)
        self.assertEqual(round_half_up(0.5), 1.0)
        self.assertEqual(round_half_up(0.125, 2), 0.13)

    def test_plain_rounding(self):
        self.assertEqual(round_half_up(87.666, 0), 88.0)
        self.assertEqual(round_half_up(0.784, 2), 0.78)


if __name__ == "__main__":
    unittest.main()
