"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    GOOGLE_API_KEY             — Gemini API key (GEMINI_API_KEY is accepted as a fallback)
    GEMINI_MODEL               — Model name (default: gemini-2.5-flash)
    GEMINI_BASE_URL            — REST base URL for the Generative Language API
    MAX_OUTPUT_TOKENS          — Output budget per completion (default: 8000)
    TEMPERATURE                — Sampling temperature (default: 0.3)
    MAX_CHUNK_SIZE             — Characters of code sent per prompt (default: 1000)
    MAX_RETRIES                — Extra attempts on transient overload (default: 5)
    RETRY_BASE_DELAY_SECONDS   — Backoff base, doubled per attempt (default: 5)
    INITIAL_CALL_DELAY_SECONDS — Wait before the first call of a full analysis (default: 3)
    INTER_CALL_DELAY_SECONDS   — Wait between calls of a full analysis (default: 5)
    MAX_CODE_LENGTH            — Largest accepted input, in characters (default: 50000)
    HTTP_TIMEOUT_SECONDS       — Transport timeout for one completion call (default: 120)
    LOG_DIR                    — Directory for the daily log file (default: logs)
    LOG_TO_FILE                — Write the daily log file at all (default: true)

Backoff Philosophy:
    The upstream model answers "503 / overloaded" under load. Those errors
    clear on their own, so the invoker waits 5s, 10s, 20s, 40s, 80s before
    giving up. Every other error is surfaced immediately.

Pacing:
    A full analysis makes three calls in a row. The fixed pre-call and
    between-call delays keep a single request under the upstream rate limit.
"""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)

# Generation config — bounded output, low temperature for repeatable JSON
MAX_OUTPUT_TOKENS = int(os.getenv("MAX_OUTPUT_TOKENS", 8000))
TEMPERATURE = float(os.getenv("TEMPERATURE", 0.3))

# Input budget
MAX_CHUNK_SIZE = int(os.getenv("MAX_CHUNK_SIZE", 1000))
MAX_CODE_LENGTH = int(os.getenv("MAX_CODE_LENGTH", 50000))
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "javascript")

# Retry / backoff
MAX_RETRIES = int(os.getenv("MAX_RETRIES", 5))
RETRY_BASE_DELAY_SECONDS = float(os.getenv("RETRY_BASE_DELAY_SECONDS", 5.0))

# Pacing between the three calls of a full analysis
INITIAL_CALL_DELAY_SECONDS = float(os.getenv("INITIAL_CALL_DELAY_SECONDS", 3.0))
INTER_CALL_DELAY_SECONDS = float(os.getenv("INTER_CALL_DELAY_SECONDS", 5.0))

# Transport timeout in seconds — enforced by httpx, not by the retry loop
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", 120.0))

# Logging: console always, a daily file under LOG_DIR unless LOG_TO_FILE is off
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class AnalyzerSettings:
    """Immutable snapshot of the configuration, built once at startup."""
    api_key: str = ""
    model: str = GEMINI_MODEL
    base_url: str = GEMINI_BASE_URL
    max_output_tokens: int = MAX_OUTPUT_TOKENS
    temperature: float = TEMPERATURE
    max_chunk_size: int = MAX_CHUNK_SIZE
    max_code_length: int = MAX_CODE_LENGTH
    default_language: str = DEFAULT_LANGUAGE
    max_retries: int = MAX_RETRIES
    retry_base_delay: float = RETRY_BASE_DELAY_SECONDS
    initial_call_delay: float = INITIAL_CALL_DELAY_SECONDS
    inter_call_delay: float = INTER_CALL_DELAY_SECONDS
    http_timeout: float = HTTP_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "AnalyzerSettings":
        return cls(api_key=GOOGLE_API_KEY or "")
