"""
Analysis Service
================
Runs one analysis end to end:

    code → chunker → prompt → invoker → extractor → (repair) → json → normalizer

Recovery Ladder:
    1. Extract the first complete JSON span and parse it
    2. Span found but unparsable → try repair on the span
    3. Span never closes (truncated) → try repair on the partial span
    4. Repair fails / no JSON at all → MalformedOutputError

    The finish reason travels with the error, so a caller can tell
    "response cut off at the token limit" from "model wrote invalid JSON".
"""
import json
import logging
from typing import Any

from code_analyzer.core.constants import (
    VARIANT_BUGS,
    VARIANT_DOCUMENTATION,
    VARIANT_API_DOCS,
    NO_JSON_FOUND,
    UNTERMINATED,
    UNREPAIRABLE,
    EMPTY_RESPONSE,
)
from code_analyzer.core.errors import MalformedOutputError
from code_analyzer.llm.client import CompletionResult
from code_analyzer.llm.invoker import LLMInvoker
from code_analyzer.llm.prompts import build_prompt
from code_analyzer.models.api_documentation import ApiDocReport
from code_analyzer.models.bug_report import BugReport
from code_analyzer.models.documentation import DocumentationReport
from code_analyzer.parser.chunker import prepare_code, truncation_note
from code_analyzer.parser.json_extractor import extract_json
from code_analyzer.parser.normalizer import NormalizedReport, normalize
from code_analyzer.parser.repair import repair_json

logger = logging.getLogger(__name__)


def parse_model_output(completion: CompletionResult) -> Any:
    """
    Recover a parsed JSON value from a raw completion.

    Raises
    ------
    MalformedOutputError
        When no JSON can be found or repaired.
    """
    text = completion.text or ""
    finish_reason = completion.finish_reason

    if not text.strip():
        raise MalformedOutputError(
            "Empty response from model",
            reason=EMPTY_RESPONSE,
            finish_reason=finish_reason,
        )

    extraction = extract_json(text)

    if extraction.error == NO_JSON_FOUND:
        raise MalformedOutputError(
            "No JSON found in model response",
            reason=NO_JSON_FOUND,
            snippet=text,
            finish_reason=finish_reason,
        )

    if extraction.ok:
        try:
            return json.loads(extraction.text)
        except ValueError as e:
            # JSONDecodeError, or an integer literal past the int-conversion digit limit
            logger.warning("Extracted JSON does not parse (%s), attempting repair", e)
    else:
        logger.warning(
            "JSON is unterminated (finish reason: %s), attempting repair", finish_reason
        )

    repaired = repair_json(extraction.text)
    if repaired.ok:
        return repaired.value

    reason = UNTERMINATED if extraction.error == UNTERMINATED else UNREPAIRABLE
    raise MalformedOutputError(
        f"Could not parse model JSON: {repaired.error}",
        reason=reason,
        snippet=extraction.text,
        finish_reason=finish_reason,
    )


class AnalysisService:
    """
    Per-variant analysis pipeline on top of a retrying invoker.

    Usage:
        service = AnalysisService(invoker, max_chunk_size=1000)
        report = await service.analyze_code(code, "python")
    """

    def __init__(self, invoker: LLMInvoker, max_chunk_size: int = 1000) -> None:
        self.invoker = invoker
        self.max_chunk_size = max_chunk_size

    async def run(self, variant: str, code: str, language: str) -> NormalizedReport:
        """
        Execute one analysis variant.

        Raises
        ------
        UpstreamError
            The model could not be reached.
        MalformedOutputError
            The model's answer held no usable JSON.
        """
        prepared = prepare_code(code, self.max_chunk_size)
        prompt = build_prompt(variant, prepared.text, language)

        logger.info(
            "Running %s analysis (%s, %d chars of code)", variant, language, len(prepared.text)
        )
        completion = await self.invoker.invoke(prompt)
        value = parse_model_output(completion)
        report = normalize(value, variant)

        if prepared.truncated:
            report.note = truncation_note(prepared.chunk_count)
        return report

    async def analyze_code(self, code: str, language: str) -> BugReport:
        """Find bugs, quality issues and suggestions."""
        return await self.run(VARIANT_BUGS, code, language)

    async def document_functions(self, code: str, language: str) -> DocumentationReport:
        """Describe every function in the code."""
        return await self.run(VARIANT_DOCUMENTATION, code, language)

    async def document_api(self, code: str, language: str) -> ApiDocReport:
        """Describe every HTTP endpoint defined in the code."""
        return await self.run(VARIANT_API_DOCS, code, language)
