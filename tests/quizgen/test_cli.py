"""Tests for the quizcore command-line entry point."""

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml

from ai_router.config import RouterSettings
from quizgen.cli import load_document, main


def run_cli(argv, settings=None):
    stdout = io.StringIO()
    with patch("quizgen.cli.setup_logging"), contextlib.redirect_stdout(stdout):
        code = main(argv, settings or RouterSettings(_env_file=None))
    return code, stdout.getvalue()


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_health(self):
        code, out = run_cli(["health"])

        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["grading"]["short"]["default_model"], "gpt-4o-mini")

    def test_grade_yaml_without_model_calls(self):
        quiz = self.dir / "quiz.yaml"
        quiz.write_text(
            yaml.safe_dump(
                {
                    "questions": [
                        {"id": "q1", "type": "short", "prompt": "Capital of France?", "answer": "Paris"},
                        {"id": "q2", "type": "mcq", "prompt": "2+2?", "options": ["3", "4"], "answer": "4"},
                    ]
                }
            ),
            encoding="utf-8",
        )
        answers = self.dir / "answers.json"
        answers.write_text(json.dumps({"q1": "paris", "q2": "3"}), encoding="utf-8")

        code, out = run_cli(["grade", str(quiz), str(answers)])

        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertTrue(payload["success"])
        self.assertEqual(payload["percent"], 50)
        self.assertEqual(payload["letter"], "F")
        self.assertEqual(payload["breakdown"][0]["correct"], True)

    def test_grade_rejects_invalid_quiz_file(self):
        answers = self.dir / "answers.json"
        answers.write_text(json.dumps({"q1": "paris"}), encoding="utf-8")
        for name, questions in (
            (
                "duplicate_id",
                [
                    {"id": "q1", "type": "short", "prompt": "Capital of France?", "answer": "Paris"},
                    {"id": "q1", "type": "short", "prompt": "Capital of Spain?", "answer": "Madrid"},
                ],
            ),
            ("unknown_type", [{"id": "q1", "type": "essay", "prompt": "Discuss."}]),
        ):
            with self.subTest(name=name):
                quiz = self.dir / f"{name}.json"
                quiz.write_text(json.dumps({"questions": questions}), encoding="utf-8")

                with self.assertLogs("quizgen.cli", level="ERROR"):
                    code, out = run_cli(["grade", str(quiz), str(answers)])

                self.assertEqual(code, 2)
                payload = json.loads(out)
                self.assertFalse(payload["success"])
                self.assertEqual(payload["error"]["code"], "SCHEMA_INVALID")

    def test_generate_rejects_short_notes(self):
        notes = self.dir / "notes.md"
        notes.write_text("tiny", encoding="utf-8")

        with contextlib.redirect_stderr(io.StringIO()) as err:
            code, _ = run_cli(["generate", str(notes)])

        self.assertEqual(code, 2)
        self.assertIn("at least 20 characters", err.getvalue())

    def test_load_document_formats(self):
        yaml_path = self.dir / "c.yml"
        yaml_path.write_text("question_type: typing\nquestion_count: 3\n", encoding="utf-8")
        json_path = self.dir / "c.json"
        json_path.write_text('{"question_type": "mcq"}', encoding="utf-8")

        self.assertEqual(load_document(yaml_path), {"question_type": "typing", "question_count": 3})
        self.assertEqual(load_document(json_path), {"question_type": "mcq"})


if __name__ == "__main__":
    unittest.main()
