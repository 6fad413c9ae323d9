"""
Analysis Orchestrator
=====================
Runs the three analyses (bugs → function docs → API docs) against one input.

Sequencing:
    - Calls run one after another, never concurrently
    - PacingPolicy waits initial_delay before the first call and
      min_interval between later calls to stay under the upstream rate limit
    - Waits go through an injectable sleep so tests can use a fake clock

Fault Tolerance:
    - A failing analysis becomes {"error": message} in its slot
    - The batch itself only fails on invalid input (ValidationError),
      raised before any upstream call is made

Construction:
    build_orchestrator(settings) wires client → invoker → service → orchestrator
    once at startup; nothing is held in module-level globals.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from code_analyzer.core.config import AnalyzerSettings
from code_analyzer.core.errors import ValidationError
from code_analyzer.llm.client import GeminiClient
from code_analyzer.llm.invoker import LLMInvoker, Sleep
from code_analyzer.llm.provider import gemini_provider, generation_config
from code_analyzer.models.analysis_request import AnalysisRequest
from code_analyzer.models.api_documentation import ApiDocResult
from code_analyzer.models.bug_report import BugDetectionResult
from code_analyzer.models.documentation import DocumentationResult
from code_analyzer.models.full_analysis import AnalysisFailure, FullAnalysisResult
from code_analyzer.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PacingPolicy:
    """Fixed waits around the calls of a full analysis (seconds)."""
    initial_delay: float = 3.0
    min_interval: float = 5.0

    def delay_before(self, call_index: int) -> float:
        return self.initial_delay if call_index == 0 else self.min_interval


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class AnalysisOrchestrator:
    """
    Coordinates the analysis entry points exposed to callers.

    Usage:
        orchestrator = build_orchestrator(AnalyzerSettings.from_env())
        result = await orchestrator.full_analysis(code, "javascript")
        await orchestrator.close()
    """

    def __init__(
        self,
        service: AnalysisService,
        pacing: Optional[PacingPolicy] = None,
        sleep: Optional[Sleep] = None,
        max_code_length: Optional[int] = None,
        default_language: Optional[str] = None,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> None:
        self.service = service
        self.pacing = pacing or PacingPolicy()
        self._sleep = sleep or asyncio.sleep
        self._context = {}
        if max_code_length is not None:
            self._context["max_code_length"] = max_code_length
        if default_language is not None:
            self._context["default_language"] = default_language
        self._on_close = on_close

    async def close(self) -> None:
        if self._on_close is not None:
            await self._on_close()

    def validate(self, code, language=None) -> AnalysisRequest:
        """
        Build a validated request.

        Raises
        ------
        ValidationError
            If code is missing, blank, not a string, or too long.
        """
        try:
            return AnalysisRequest.model_validate(
                {"code": code, "language": language}, context=self._context
            )
        except PydanticValidationError as e:
            message = "; ".join(
                err["msg"].removeprefix("Value error, ") for err in e.errors()
            )
            raise ValidationError(message) from e

    # -----------------------------------------------------------------------
    # Full analysis
    # -----------------------------------------------------------------------
    async def full_analysis(self, code, language=None) -> FullAnalysisResult:
        """
        Run bug analysis, function docs and API docs in sequence.

        Parameters
        ----------
        code : str
            Source code to analyse.
        language : str, optional
            Language tag; defaults to the configured default.

        Returns
        -------
        FullAnalysisResult
            Every slot filled, either with a report or an AnalysisFailure.

        Raises
        ------
        ValidationError
            If the request is invalid. No upstream call is made.
        """
        request = self.validate(code, language)

        steps: List[Tuple[str, Callable]] = [
            ("Code analysis", self.service.analyze_code),
            ("Function documentation", self.service.document_functions),
            ("API documentation", self.service.document_api),
        ]
        results = []

        for index, (label, step) in enumerate(steps):
            await self._sleep(self.pacing.delay_before(index))
            try:
                results.append(await step(request.code, request.language))
                logger.info("%s completed", label)
            except Exception as e:
                logger.error("%s failed: %s", label, e)
                results.append(AnalysisFailure(error=str(e) or f"{label} failed"))

        result = FullAnalysisResult(
            analysis=results[0],
            documentation=results[1],
            api_documentation=results[2],
            timestamp=_now_iso(),
        )
        if result.failed_count:
            logger.warning("Full analysis finished with %d failed step(s)", result.failed_count)
        return result

    # -----------------------------------------------------------------------
    # Single analyses
    # -----------------------------------------------------------------------
    async def detect_bugs(self, code, language=None) -> BugDetectionResult:
        """Bug detection only; errors propagate."""
        request = self.validate(code, language)
        report = await self.service.analyze_code(request.code, request.language)
        return BugDetectionResult(
            bugs=report.bugs,
            code_quality=report.code_quality,
            note=report.note,
            timestamp=_now_iso(),
        )

    async def generate_docs(self, code, language=None) -> DocumentationResult:
        """Function documentation only; errors propagate."""
        request = self.validate(code, language)
        report = await self.service.document_functions(request.code, request.language)
        return DocumentationResult(**report.model_dump(), timestamp=_now_iso())

    async def generate_api_docs(self, code, language=None) -> ApiDocResult:
        """API documentation only; errors propagate."""
        request = self.validate(code, language)
        report = await self.service.document_api(request.code, request.language)
        return ApiDocResult(**report.model_dump(), timestamp=_now_iso())


def build_orchestrator(
    settings: AnalyzerSettings,
    sleep: Optional[Sleep] = None,
) -> AnalysisOrchestrator:
    """
    Construct the full analysis stack from immutable settings.

    Raises
    ------
    ValueError
        If no API key is configured.
    """
    client = GeminiClient(gemini_provider(settings))
    invoker = LLMInvoker(
        client,
        generation_config(settings),
        max_retries=settings.max_retries,
        base_delay=settings.retry_base_delay,
        sleep=sleep,
    )
    service = AnalysisService(invoker, max_chunk_size=settings.max_chunk_size)
    logger.info("Analyzer ready (model: %s)", settings.model)
    return AnalysisOrchestrator(
        service,
        pacing=PacingPolicy(
            initial_delay=settings.initial_call_delay,
            min_interval=settings.inter_call_delay,
        ),
        sleep=sleep,
        max_code_length=settings.max_code_length,
        default_language=settings.default_language,
        on_close=client.close,
    )
