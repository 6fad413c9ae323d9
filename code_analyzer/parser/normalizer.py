"""
Output Normalizer
=================
Maps whatever JSON shape the model chose onto one of the three report schemas.

Normalisation Rules (all variants):
    - Bare array root → wrapped under the primary field
      (bugs / functions / endpoints)
    - Missing or non-list sequences → []
    - List entries of the wrong shape are dropped (objects) or stringified (strings)
    - Any other root type (string, number, null) → MalformedOutputError

Quality Score (bug variant):
    The model's codeQuality.score is trusted when it is a finite number in
    [0, 100]. Otherwise it is derived from the bug list:
        100 − 20 × (high | critical) − 10 × medium − 5 × (everything else)
    clamped to [0, 100].
"""
import json
import logging
import math
from typing import Any, Dict, List, Union

from code_analyzer.core.constants import (
    SEVERITIES,
    DEFAULT_SEVERITY,
    SCORE_MAX,
    SCORE_MIN,
    PENALTY_SEVERE,
    PENALTY_MEDIUM,
    PENALTY_OTHER,
    PRIMARY_FIELDS,
    VARIANT_BUGS,
    VARIANT_DOCUMENTATION,
    VARIANT_API_DOCS,
    INVALID_ROOT,
)
from code_analyzer.core.errors import MalformedOutputError
from code_analyzer.models.bug_report import Bug, BugReport, CodeQuality
from code_analyzer.models.documentation import DocumentationReport, FunctionDoc, ParameterDoc
from code_analyzer.models.api_documentation import ApiDocReport, Endpoint, EndpointParameter

logger = logging.getLogger(__name__)

NormalizedReport = Union[BugReport, DocumentationReport, ApiDocReport]


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------
def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_dicts(value: Any) -> List[dict]:
    return [item for item in _as_list(value) if isinstance(item, dict)]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _as_texts(value: Any) -> List[str]:
    return [_as_text(item) for item in _as_list(value) if item is not None]


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _severity_of(raw: Any) -> str:
    severity = _as_text(raw).strip().lower()
    return severity if severity in SEVERITIES else DEFAULT_SEVERITY


# ---------------------------------------------------------------------------
# Quality score
# ---------------------------------------------------------------------------
def is_valid_score(score: Any) -> bool:
    """True when score is a finite number in [0, 100]."""
    # Range check first: math.isfinite overflows on huge ints, NaN fails any comparison
    return _is_number(score) and SCORE_MIN <= score <= SCORE_MAX and math.isfinite(score)


def derive_quality_score(bugs: List[Bug]) -> int:
    """
    Compute a quality score from bug severities.

    high / critical cost 20 points, medium 10, anything else 5.
    """
    severe = sum(1 for b in bugs if b.severity in ("high", "critical"))
    medium = sum(1 for b in bugs if b.severity == "medium")
    other = len(bugs) - severe - medium

    score = SCORE_MAX - severe * PENALTY_SEVERE - medium * PENALTY_MEDIUM - other * PENALTY_OTHER
    return max(SCORE_MIN, min(SCORE_MAX, score))


# ---------------------------------------------------------------------------
# Variant builders
# ---------------------------------------------------------------------------
def _build_bug(raw: dict) -> Bug:
    fix = raw.get("fix")
    if fix is None:
        fix = raw.get("suggestion")
    return Bug(
        line=_as_int(raw.get("line")),
        severity=_severity_of(raw.get("severity")),
        message=_as_text(raw.get("message")),
        fix=_as_text(fix),
    )


def normalize_bug_report(data: Dict[str, Any]) -> BugReport:
    bugs = [_build_bug(item) for item in _as_dicts(data.get("bugs"))]

    quality = data.get("codeQuality")
    if not isinstance(quality, dict):
        quality = {}

    score = quality.get("score")
    if is_valid_score(score):
        score = int(round(score))
        logger.debug("Using model-supplied quality score: %d", score)
    else:
        score = derive_quality_score(bugs)
        logger.info(
            "Derived quality score %d from %d bug(s) (model score: %r)",
            score, len(bugs), quality.get("score"),
        )

    return BugReport(
        bugs=bugs,
        code_quality=CodeQuality(score=score, issues=_as_texts(quality.get("issues"))),
        suggestions=_as_texts(data.get("suggestions")),
    )


def _build_function(raw: dict) -> FunctionDoc:
    return FunctionDoc(
        name=_as_text(raw.get("name")),
        description=_as_text(raw.get("description")),
        parameters=[
            ParameterDoc(
                name=_as_text(p.get("name")),
                type=_as_text(p.get("type")),
                description=_as_text(p.get("description")),
            )
            for p in _as_dicts(raw.get("parameters"))
        ],
        returns=_as_text(raw.get("returns")),
        example=_as_text(raw.get("example")),
    )


def normalize_documentation(data: Dict[str, Any]) -> DocumentationReport:
    return DocumentationReport(
        functions=[_build_function(item) for item in _as_dicts(data.get("functions"))]
    )


def _as_required(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "required")
    return bool(value)


def _build_endpoint(raw: dict) -> Endpoint:
    responses = raw.get("responses")
    if not isinstance(responses, dict):
        responses = {}
    return Endpoint(
        method=_as_text(raw.get("method")).upper(),
        path=_as_text(raw.get("path")),
        description=_as_text(raw.get("description")),
        parameters=[
            EndpointParameter(
                name=_as_text(p.get("name")),
                type=_as_text(p.get("type")),
                required=_as_required(p.get("required")),
            )
            for p in _as_dicts(raw.get("parameters"))
        ],
        responses={str(status): _as_text(text) for status, text in responses.items()},
    )


def normalize_api_docs(data: Dict[str, Any]) -> ApiDocReport:
    return ApiDocReport(
        endpoints=[_build_endpoint(item) for item in _as_dicts(data.get("endpoints"))]
    )


_BUILDERS = {
    VARIANT_BUGS: normalize_bug_report,
    VARIANT_DOCUMENTATION: normalize_documentation,
    VARIANT_API_DOCS: normalize_api_docs,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def normalize(value: Any, variant: str) -> NormalizedReport:
    """
    Coerce a parsed JSON value into the report schema of ``variant``.

    Parameters
    ----------
    value : Any
        Result of json.loads on the extracted span.
    variant : str
        One of VARIANT_BUGS, VARIANT_DOCUMENTATION, VARIANT_API_DOCS.

    Returns
    -------
    BugReport | DocumentationReport | ApiDocReport
        A schema-total report.

    Raises
    ------
    MalformedOutputError
        If the root is neither an object nor an array.
    """
    if variant not in _BUILDERS:
        raise ValueError(f"Unknown report variant: {variant}")

    if isinstance(value, list):
        logger.warning(
            "Model returned a bare array for %s, wrapping under %r",
            variant, PRIMARY_FIELDS[variant],
        )
        value = {PRIMARY_FIELDS[variant]: value}

    if not isinstance(value, dict):
        raise MalformedOutputError(
            f"Expected a JSON object or array, got {type(value).__name__}",
            reason=INVALID_ROOT,
            snippet=_as_text(value),
        )

    return _BUILDERS[variant](value)
