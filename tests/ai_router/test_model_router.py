"""Tests for the LiteLLM request executor."""

import asyncio
import unittest
from types import SimpleNamespace

from ai_router.config import RouterSettings
from ai_router.errors import ProviderCallError
from ai_router.model_router import ModelRouter, ProviderResponse


class TestModelRouter(unittest.TestCase):
    def test_dry_run_captures_call(self) -> None:
        captured: dict[str, object] = {}

        async def fake_completion(**kwargs: object) -> dict[str, object]:
            captured.update(kwargs)
            return {
                "model": kwargs["model"],
                "choices": [{"message": {"content": '{"ok": true}'}, "finish_reason": "stop"}],
                "usage": {"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7},
            }

        settings = RouterSettings(
            _env_file=None,
            openai_api_key="sk-test",
            openai_base_url="http://localhost:4000",
            router_timeout_ms=15000,
        )
        router = ModelRouter(settings, completion_fn=fake_completion)
        response = asyncio.run(
            router.complete(
                {
                    "model": "gpt-4o-mini",
                    "messages": [{"role": "user", "content": "ping"}],
                    "max_tokens": 32,
                }
            )
        )

        self.assertEqual('{"ok": true}', response.content)
        self.assertEqual("stop", response.finish_reason)
        self.assertEqual(7, response.usage["total_tokens"] if response.usage else -1)
        self.assertGreaterEqual(response.latency_ms, 0)
        self.assertEqual(15.0, captured["timeout"])
        self.assertEqual("sk-test", captured["api_key"])
        self.assertEqual("http://localhost:4000", captured["api_base"])
        self.assertEqual(32, captured["max_tokens"])

    def test_omits_unset_credentials(self) -> None:
        captured: dict[str, object] = {}

        async def fake_completion(**kwargs: object) -> dict[str, object]:
            captured.update(kwargs)
            return {"choices": [{"message": {"content": "{}"}}]}

        router = ModelRouter(RouterSettings(_env_file=None), completion_fn=fake_completion)
        response = asyncio.run(router.complete({"model": "gpt-4o-mini", "messages": []}))

        self.assertNotIn("api_key", captured)
        self.assertNotIn("api_base", captured)
        self.assertIsNone(response.usage)
        self.assertIsNone(response.finish_reason)
        self.assertEqual("gpt-4o-mini", response.model)

    def test_list_content_is_joined(self) -> None:
        async def fake_completion(**kwargs: object) -> dict[str, object]:
            return {
                "choices": [
                    {"message": {"content": [{"type": "text", "text": '{"a":'}, {"text": "1}"}]}}
                ]
            }

        router = ModelRouter(RouterSettings(_env_file=None), completion_fn=fake_completion)
        response = asyncio.run(router.complete({"model": "gpt-5-mini", "messages": []}))
        self.assertEqual('{"a":\n1}', response.content)

    def test_from_raw_reads_attribute_style_response(self) -> None:
        raw = SimpleNamespace(
            model="gpt-5-mini-2025-08-07",
            choices=[
                SimpleNamespace(
                    message=SimpleNamespace(content='{"ok": 1}'),
                    finish_reason="length",
                )
            ],
            usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3, total_tokens=None),
        )

        response = ProviderResponse.from_raw(raw, model="gpt-5-mini", latency_ms=250)

        self.assertEqual("gpt-5-mini-2025-08-07", response.model)
        self.assertEqual('{"ok": 1}', response.content)
        self.assertEqual("length", response.finish_reason)
        self.assertEqual(
            {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15}, response.usage
        )
        self.assertIs(raw, response.raw)

    def test_from_raw_handles_missing_choices_and_zero_usage(self) -> None:
        raw = {"choices": [], "usage": {"prompt_tokens": 0, "completion_tokens": 0}}

        response = ProviderResponse.from_raw(raw, model="gpt-4o-mini", latency_ms=5)

        self.assertEqual("", response.content)
        self.assertIsNone(response.finish_reason)
        self.assertIsNone(response.usage)
        self.assertEqual("gpt-4o-mini", response.model)

    def test_transport_failure_is_wrapped(self) -> None:
        cause = ConnectionError("connection refused")

        async def fake_completion(**kwargs: object) -> dict[str, object]:
            raise cause

        router = ModelRouter(RouterSettings(_env_file=None), completion_fn=fake_completion)
        with self.assertRaises(ProviderCallError) as ctx:
            asyncio.run(router.complete({"model": "gpt-5-mini", "messages": []}))

        self.assertIs(ctx.exception.cause, cause)
        self.assertEqual("gpt-5-mini", ctx.exception.model)
        self.assertGreaterEqual(ctx.exception.latency_ms, 0)


if __name__ == "__main__":
    unittest.main()
