"""
Errors
======
Exception hierarchy shared by every analysis layer.

    AnalysisError
    ├── ValidationError       — bad caller input (empty / oversized code)
    ├── UpstreamError         — retries exhausted or a non-retryable upstream failure
    └── MalformedOutputError  — no JSON, unrepairable JSON, or an unusable root

CompletionError is raised by the transport client; the invoker turns it into
UpstreamError once it decides not to retry.
"""
from typing import Optional

from code_analyzer.core.constants import FINISH_LENGTH_TRUNCATED, SNIPPET_LENGTH


class AnalysisError(Exception):
    """Base class for all analysis failures."""


class ValidationError(AnalysisError):
    """The caller supplied an invalid request."""


class UpstreamError(AnalysisError):
    """The completion service could not produce a response."""

    def __init__(self, message: str, attempts: int = 1) -> None:
        super().__init__(message)
        self.attempts = attempts


class MalformedOutputError(AnalysisError):
    """The model answered, but no usable JSON could be recovered."""

    def __init__(
        self,
        message: str,
        reason: str,
        snippet: str = "",
        finish_reason: Optional[str] = None,
    ) -> None:
        if finish_reason == FINISH_LENGTH_TRUNCATED:
            message = f"{message} (response hit the output token limit)"
        super().__init__(message)
        self.reason = reason
        self.snippet = snippet[:SNIPPET_LENGTH]
        self.finish_reason = finish_reason


class CompletionError(Exception):
    """Transport-level failure talking to the completion endpoint."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
