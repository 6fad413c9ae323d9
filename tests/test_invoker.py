"""
Unit Tests — LLM Invoker
========================
Retry on transient overload with exponential backoff, driven by a fake clock.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from code_analyzer.core.constants import FINISH_LENGTH_TRUNCATED
from code_analyzer.core.errors import CompletionError, UpstreamError
from code_analyzer.llm.client import CompletionResult
from code_analyzer.llm.invoker import LLMInvoker, is_transient_overload
from code_analyzer.llm.provider import GenerationConfig


OVERLOADED = CompletionError(
    "HTTP 503: The model is overloaded. Please try again later. (UNAVAILABLE)",
    status_code=503,
)


class FakeClock:
    def __init__(self):
        self.delays = []

    async def sleep(self, seconds):
        self.delays.append(seconds)


def _make_invoker(side_effect, clock):
    backend = AsyncMock()
    backend.complete = AsyncMock(side_effect=side_effect)
    invoker = LLMInvoker(
        backend,
        GenerationConfig(max_output_tokens=8000, temperature=0.3),
        max_retries=5,
        base_delay=5.0,
        sleep=clock.sleep,
    )
    return invoker, backend


def test_two_transient_failures_then_success():
    clock = FakeClock()
    ok = CompletionResult(text='{"bugs": []}')
    invoker, backend = _make_invoker([OVERLOADED, OVERLOADED, ok], clock)

    result = asyncio.run(invoker.invoke("prompt"))

    assert result is ok
    assert backend.complete.await_count == 3
    assert clock.delays == [5.0, 10.0]


def test_six_transient_failures_exhaust_retries():
    clock = FakeClock()
    invoker, backend = _make_invoker([OVERLOADED] * 6, clock)

    with pytest.raises(UpstreamError) as exc:
        asyncio.run(invoker.invoke("prompt"))

    assert backend.complete.await_count == 6
    assert clock.delays == [5.0, 10.0, 20.0, 40.0, 80.0]
    assert exc.value.attempts == 6
    assert exc.value.__cause__ is OVERLOADED


def test_non_transient_error_is_not_retried():
    clock = FakeClock()
    fatal = CompletionError("HTTP 400: API key not valid (INVALID_ARGUMENT)", status_code=400)
    invoker, backend = _make_invoker([fatal], clock)

    with pytest.raises(UpstreamError) as exc:
        asyncio.run(invoker.invoke("prompt"))

    assert backend.complete.await_count == 1
    assert clock.delays == []
    assert exc.value.__cause__ is fatal
    assert "API key not valid" in str(exc.value)


def test_generation_config_is_forwarded():
    clock = FakeClock()
    invoker, backend = _make_invoker([CompletionResult(text="{}")], clock)

    asyncio.run(invoker.invoke("hello"))

    backend.complete.assert_awaited_once_with("hello", max_output_tokens=8000, temperature=0.3)


def test_truncated_result_is_returned_not_raised():
    clock = FakeClock()
    truncated = CompletionResult(text='{"bugs": [', finish_reason=FINISH_LENGTH_TRUNCATED)
    invoker, _ = _make_invoker([truncated], clock)

    result = asyncio.run(invoker.invoke("prompt"))

    assert result.truncated


def test_backoff_schedule():
    invoker, _ = _make_invoker([], FakeClock())
    assert [invoker.backoff_delay(n) for n in range(5)] == [5.0, 10.0, 20.0, 40.0, 80.0]


@pytest.mark.parametrize("message, expected", [
    ("HTTP 503: backend error", True),
    ("The model is OVERLOADED", True),
    ("Service Unavailable", True),
    ("HTTP 429: quota exceeded", False),
    ("Request to gemini timed out", False),
])
def test_transient_classification(message, expected):
    assert is_transient_overload(RuntimeError(message)) is expected
