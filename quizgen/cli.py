"""quizcore CLI: generate quizzes, grade attempts, inspect router config.

Usage:
    quizcore generate notes.md --type hybrid --count 6 --mcq 3 --typing 3
    quizcore grade quiz.yaml answers.yaml
    quizcore health
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ai_router.config import RouterSettings, get_settings
from ai_router.errors import ErrorCode
from ai_router.health import router_health
from ai_router.logs import setup_logging
from ai_router.model_router import ModelRouter
from ai_router.orchestrator import AIRouter
from grading.cascade import GradingCascade
from grading.models import GradingBatchError

from .generator import QuizGenerator
from .quiz_config import QuizInputError

logger = logging.getLogger(__name__)


def load_document(path: Path) -> Any:
    """Read a JSON or YAML file."""
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _config_from_args(args: argparse.Namespace) -> dict[str, Any]:
    config: dict[str, Any] = {}
    if args.config:
        config.update(load_document(Path(args.config)) or {})
    for key, value in (
        ("question_type", args.type),
        ("question_count", args.count),
        ("coverage", args.coverage),
        ("difficulty", args.difficulty),
    ):
        if value is not None:
            config[key] = value
    if args.mcq is not None or args.typing is not None:
        config["question_counts"] = {"mcq": args.mcq or 0, "typing": args.typing or 0}
    return config


async def run_generate(args: argparse.Namespace, router: AIRouter) -> int:
    notes = Path(args.notes).read_text(encoding="utf-8")
    result = await QuizGenerator(router).generate(notes, _config_from_args(args))
    emit(result.to_dict())
    return 0 if result.success else 1


async def run_grade(args: argparse.Namespace, router: AIRouter) -> int:
    quiz = load_document(Path(args.quiz))
    answers = load_document(Path(args.answers)) or {}
    questions = quiz.get("questions", []) if isinstance(quiz, dict) else quiz
    responses = answers.get("responses", answers)

    try:
        output = await GradingCascade(router).grade_submission(questions, responses)
    except ValidationError as exc:
        logger.error("Invalid quiz file %s: %s", args.quiz, exc.errors()[:1])
        emit(
            {
                "success": False,
                "error": {
                    "code": ErrorCode.SCHEMA_INVALID.value,
                    "message": f"Invalid quiz file: {exc.error_count()} problem(s) found",
                },
            }
        )
        return 2
    except GradingBatchError as exc:
        logger.error("Grading failed: %s", exc)
        emit({"success": False, "error": {"code": exc.code.value, "message": str(exc)}})
        return 1
    emit({"success": True, **output.to_dict()})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quizcore",
        description="Quiz generation and grading through the AI router",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a quiz from a notes file")
    gen.add_argument("notes", help="Path to a text/markdown notes file")
    gen.add_argument("--config", help="JSON or YAML quiz config file")
    gen.add_argument("--type", choices=["mcq", "typing", "hybrid"])
    gen.add_argument("--count", type=int)
    gen.add_argument("--coverage", choices=["key_concepts", "broad_sample"])
    gen.add_argument("--difficulty", choices=["low", "medium", "high"])
    gen.add_argument("--mcq", type=int, help="MCQ count for hybrid quizzes")
    gen.add_argument("--typing", type=int, help="Short-answer count for hybrid quizzes")

    grade = sub.add_parser("grade", help="Grade an attempt")
    grade.add_argument("quiz", help="JSON or YAML file with the questions")
    grade.add_argument("answers", help="JSON or YAML file mapping question id to answer")

    sub.add_parser("health", help="Show the configured model routing")
    return parser


def main(argv: list[str] | None = None, settings: RouterSettings | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = settings or get_settings()
    setup_logging(settings.log_level, verbose=args.verbose)

    if args.command == "health":
        emit(router_health(settings))
        return 0

    router = AIRouter(ModelRouter(settings), settings)
    handler = run_generate if args.command == "generate" else run_grade
    try:
        return asyncio.run(handler(args, router))
    except QuizInputError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
