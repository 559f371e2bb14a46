from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

import litellm

from .config import RouterSettings
from .errors import ProviderCallError

CompletionFn = Callable[..., Awaitable[Any]]

USAGE_KEYS = ("prompt_tokens", "completion_tokens", "total_tokens")


def read_field(obj: Any, key: str, default: Any = None) -> Any:
    """Field access that works on LiteLLM objects and plain dicts alike."""
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return default if obj is None else getattr(obj, key, default)


@dataclass
class ProviderResponse:
    model: str
    content: str
    finish_reason: str | None
    latency_ms: int
    raw: Any
    usage: dict[str, int] | None = None

    @classmethod
    def from_raw(cls, raw: Any, *, model: str, latency_ms: int) -> ProviderResponse:
        """Flatten a chat completion into text, finish reason and token usage."""
        choices = read_field(raw, "choices") or [None]
        choice = choices[0]
        message_content = read_field(read_field(choice, "message"), "content")
        if isinstance(message_content, list):
            # Multi-part messages: keep the text parts only
            text = "\n".join(
                str(part_text)
                for part_text in (read_field(part, "text") for part in message_content)
                if part_text
            ).strip()
        else:
            text = "" if message_content is None else str(message_content)

        finish_reason = read_field(choice, "finish_reason")
        return cls(
            model=str(read_field(raw, "model") or model),
            content=text,
            finish_reason=str(finish_reason) if finish_reason else None,
            latency_ms=latency_ms,
            raw=raw,
            usage=cls._usage_from(read_field(raw, "usage")),
        )

    @staticmethod
    def _usage_from(usage: Any) -> dict[str, int] | None:
        if usage is None:
            return None
        prompt = int(read_field(usage, "prompt_tokens") or 0)
        completion = int(read_field(usage, "completion_tokens") or 0)
        total = int(read_field(usage, "total_tokens") or prompt + completion)
        counts = dict(zip(USAGE_KEYS, (prompt, completion, total)))
        return counts if any(counts.values()) else None


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class ModelRouter:
    """
    Thin LiteLLM wrapper: exactly one provider call per ``complete``.

    The completion function is injected so a single client is built once
    and handed down, and so tests can substitute a fake.
    """

    def __init__(
        self,
        settings: RouterSettings | None = None,
        completion_fn: CompletionFn | None = None,
    ) -> None:
        self.settings = settings or RouterSettings()
        self._completion_fn = completion_fn

    def _resolve_completion_fn(self) -> CompletionFn:
        if self._completion_fn is not None:
            return self._completion_fn
        return litellm.acompletion

    def _transport_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"timeout": self.settings.timeout_seconds}
        if self.settings.openai_api_key:
            kwargs["api_key"] = self.settings.openai_api_key
        if self.settings.openai_base_url:
            kwargs["api_base"] = self.settings.openai_base_url
        return kwargs

    async def complete(self, params: Mapping[str, Any]) -> ProviderResponse:
        """
        Issue one chat completion.

        Raises:
            ProviderCallError: wrapping whatever the transport raised, with
                the wall-clock latency up to the failure.
        """
        request: dict[str, Any] = {**self._transport_kwargs(), **dict(params)}
        model = str(request.get("model", ""))

        started = time.monotonic()
        try:
            raw_response = await self._resolve_completion_fn()(**request)
        except Exception as exc:
            raise ProviderCallError(exc, model=model, latency_ms=_elapsed_ms(started)) from exc
        latency_ms = _elapsed_ms(started)

        return ProviderResponse.from_raw(raw_response, model=model, latency_ms=latency_ms)
