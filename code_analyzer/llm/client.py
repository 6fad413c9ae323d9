"""
Gemini Client
=============
Asynchronous REST client for Gemini's generateContent endpoint.

Response Handling:
    - Text is the concatenation of every part of the first candidate
    - finishReason STOP → "normal", MAX_TOKENS → "length-truncated",
      anything else is passed through lower-cased
    - A truncated response is NOT an error here; the extractor decides
      whether enough JSON survived

Error Handling:
    - Non-2xx responses raise CompletionError("HTTP <status>: <message>")
      so the invoker can recognise overload from the message text
    - Timeouts and connection failures raise CompletionError as well
    - Retrying is the invoker's job; this client makes exactly one request
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from code_analyzer.core.constants import FINISH_NORMAL, FINISH_LENGTH_TRUNCATED
from code_analyzer.core.errors import CompletionError
from code_analyzer.llm.provider import ProviderConfig

logger = logging.getLogger(__name__)

_FINISH_REASONS = {
    "STOP": FINISH_NORMAL,
    "MAX_TOKENS": FINISH_LENGTH_TRUNCATED,
}


# ---------------------------------------------------------------------------
# Completion Result
# ---------------------------------------------------------------------------
@dataclass
class CompletionResult:
    """Raw model output plus the normalised finish reason."""
    text: str
    finish_reason: str = FINISH_NORMAL

    @property
    def truncated(self) -> bool:
        return self.finish_reason == FINISH_LENGTH_TRUNCATED


def normalize_finish_reason(reason: Optional[str]) -> str:
    if not reason:
        return FINISH_NORMAL
    return _FINISH_REASONS.get(reason.upper(), reason.lower())


def parse_generate_content(data: dict) -> CompletionResult:
    """
    Pull text and finish reason out of a generateContent response body.

    Raises
    ------
    CompletionError
        If the body has no candidates (e.g. the prompt was blocked).
    """
    candidates = data.get("candidates") or []
    if not candidates:
        feedback = data.get("promptFeedback") or {}
        block_reason = feedback.get("blockReason", "no candidates returned")
        raise CompletionError(f"Empty completion: {block_reason}")

    candidate = candidates[0] or {}
    parts = (candidate.get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    return CompletionResult(
        text=text,
        finish_reason=normalize_finish_reason(candidate.get("finishReason")),
    )


def _error_message(resp: httpx.Response) -> str:
    try:
        error = resp.json().get("error") or {}
        message = error.get("message") or resp.reason_phrase
        status = error.get("status")
    except (ValueError, AttributeError):
        message, status = resp.text[:200] or resp.reason_phrase, None
    detail = f"{message} ({status})" if status else message
    return f"HTTP {resp.status_code}: {detail}"


# ---------------------------------------------------------------------------
# Gemini Client
# ---------------------------------------------------------------------------
class GeminiClient:
    """
    Async HTTP client for the Gemini REST API.

    Usage:
        client = GeminiClient(provider)
        result = await client.complete("Analyse...", max_output_tokens=8000, temperature=0.3)
        await client.close()
    """

    def __init__(
        self,
        provider: ProviderConfig,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.provider = provider
        self._http = http

    async def _get_http(self) -> httpx.AsyncClient:
        """Lazy-initialise the HTTP client."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(self.provider.timeout_seconds)
            )
        return self._http

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http and not self._http.is_closed:
            await self._http.aclose()
            self._http = None

    async def complete(
        self,
        prompt: str,
        max_output_tokens: int,
        temperature: float,
    ) -> CompletionResult:
        """
        Send one prompt and return the model's text.

        Parameters
        ----------
        prompt : str
            Full user prompt.
        max_output_tokens : int
            Output budget for this call.
        temperature : float
            Sampling temperature.

        Returns
        -------
        CompletionResult
            Text plus normalised finish reason.

        Raises
        ------
        CompletionError
            On HTTP errors, timeouts, transport failures or an empty body.
        """
        http = await self._get_http()
        url = f"{self.provider.base_url}/models/{self.provider.model}:generateContent"
        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": prompt}]}
            ],
            "generationConfig": {
                "maxOutputTokens": max_output_tokens,
                "temperature": temperature,
            },
        }

        try:
            resp = await http.post(
                url, json=payload, params={"key": self.provider.api_key}
            )
        except httpx.TimeoutException as e:
            raise CompletionError(f"Request to {self.provider.name} timed out") from e
        except httpx.HTTPError as e:
            raise CompletionError(f"Request to {self.provider.name} failed: {e}") from e

        if resp.is_error:
            raise CompletionError(_error_message(resp), status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise CompletionError("Completion response is not valid JSON") from e

        result = parse_generate_content(data)
        logger.debug(
            "Completion from %s (%s, %d chars): %r",
            self.provider.model, result.finish_reason, len(result.text), result.text[:500],
        )
        return result
