"""
LLM Provider Configuration
==========================
Connection and generation settings for the completion endpoint.

Generation Config:
    - max_output_tokens bounds the answer; the model also spends "thinking"
      tokens from this budget, so overly long answers come back truncated
      with finish reason MAX_TOKENS
    - temperature is kept low so repeated runs give comparable JSON
"""
import logging
from dataclasses import dataclass

from code_analyzer.core.config import AnalyzerSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderConfig:
    """Configuration for the Gemini REST provider."""
    name: str
    api_key: str
    base_url: str
    model: str
    timeout_seconds: float = 120.0


@dataclass(frozen=True)
class GenerationConfig:
    """Fixed per-call generation parameters."""
    max_output_tokens: int = 8000
    temperature: float = 0.3


def gemini_provider(settings: AnalyzerSettings) -> ProviderConfig:
    """Build the Gemini provider config from settings."""
    if not settings.api_key:
        raise ValueError(
            "GOOGLE_API_KEY is not set. Add it to your environment or .env file."
        )
    if len(settings.api_key) < 20:
        logger.warning("GOOGLE_API_KEY looks too short; check that the full key is set")
    return ProviderConfig(
        name="gemini",
        api_key=settings.api_key,
        base_url=settings.base_url.rstrip("/"),
        model=settings.model,
        timeout_seconds=settings.http_timeout,
    )


def generation_config(settings: AnalyzerSettings) -> GenerationConfig:
    return GenerationConfig(
        max_output_tokens=settings.max_output_tokens,
        temperature=settings.temperature,
    )
