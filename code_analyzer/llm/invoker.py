"""
LLM Invoker
===========
Sends one completion request, riding out transient overload.

Retry Policy:
    - Retry only when the error message signals overload
      ("503", "overloaded", "service unavailable", case-insensitive)
    - Up to max_retries extra attempts after the first one
    - Delay before retry n (0-based) is base_delay * 2**n → 5s, 10s, 20s, 40s, 80s
    - Any other error is raised at once as UpstreamError
    - After the last retry the final error is raised as UpstreamError

Truncation:
    A "length-truncated" finish reason is returned, not raised. The caller
    decides whether the partial JSON is usable.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from code_analyzer.core.constants import TRANSIENT_MARKERS
from code_analyzer.core.errors import UpstreamError
from code_analyzer.llm.client import CompletionResult
from code_analyzer.llm.provider import GenerationConfig

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def is_transient_overload(error: BaseException) -> bool:
    """True when the error message marks a temporary upstream overload."""
    message = str(error).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


class LLMInvoker:
    """
    Retrying wrapper around a completion backend.

    The backend is any object with
    ``async complete(prompt, max_output_tokens, temperature) -> CompletionResult``.
    """

    def __init__(
        self,
        backend,
        generation: GenerationConfig,
        max_retries: int = 5,
        base_delay: float = 5.0,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self.backend = backend
        self.generation = generation
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep or asyncio.sleep

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt ``attempt`` (0-based)."""
        return self.base_delay * (2 ** attempt)

    async def invoke(self, prompt: str) -> CompletionResult:
        """
        Run one completion with bounded retry on transient overload.

        Parameters
        ----------
        prompt : str
            Full prompt text.

        Returns
        -------
        CompletionResult
            The first successful completion.

        Raises
        ------
        UpstreamError
            Non-retryable failure, or retries exhausted.
        """
        for attempt in range(self.max_retries + 1):
            try:
                return await self.backend.complete(
                    prompt,
                    max_output_tokens=self.generation.max_output_tokens,
                    temperature=self.generation.temperature,
                )
            except Exception as e:
                if not is_transient_overload(e):
                    logger.error("Completion failed (not retryable): %s", e)
                    raise UpstreamError(str(e), attempts=attempt + 1) from e

                if attempt >= self.max_retries:
                    logger.error(
                        "Completion still overloaded after %d attempts: %s",
                        attempt + 1, e,
                    )
                    raise UpstreamError(
                        f"Upstream overloaded after {attempt + 1} attempts: {e}",
                        attempts=attempt + 1,
                    ) from e

                delay = self.backoff_delay(attempt)
                logger.warning(
                    "Model overloaded, retrying in %.0fs (retry %d/%d): %s",
                    delay, attempt + 1, self.max_retries, e,
                )
                await self._sleep(delay)

        # Only reached when max_retries is negative
        raise UpstreamError("No completion attempt was made", attempts=0)
