"""
JSON Repair
===========
Best-effort recovery of JSON that was cut off by the output token limit.

Strategy:
    - Replay the candidate through the extractor's scanner
    - Append a closer for every `{` / `[` still open, innermost first
    - Parse the result; success and failure are both returned, never raised

Assumptions:
    Truncation happened right after a complete value. Dangling partial
    tokens (an unterminated string, a trailing comma, a half-written key)
    are not stripped, so such input comes back with ok=False.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any

from code_analyzer.parser.json_extractor import JsonScanner

logger = logging.getLogger(__name__)

_CLOSERS = {"{": "}", "[": "]"}


@dataclass
class RepairResult:
    """Outcome of a repair attempt."""
    ok: bool
    text: str
    value: Any = None
    error: str = ""


def missing_closers(text: str) -> str:
    """Closing delimiters needed to balance text, innermost first."""
    scanner = JsonScanner()
    for char in text:
        scanner.feed(char)
    return "".join(_CLOSERS[opener] for opener in reversed(scanner.open_stack))


def repair_json(text: str) -> RepairResult:
    """
    Append missing closing delimiters and try to parse the result.

    Parameters
    ----------
    text : str
        Unbalanced or otherwise unparsable JSON candidate.

    Returns
    -------
    RepairResult
        ok=True with the parsed value, or ok=False with the parser error.
    """
    suffix = missing_closers(text)
    repaired = text + suffix

    try:
        value = json.loads(repaired)
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning("JSON repair failed after appending %r: %s", suffix, e)
        return RepairResult(ok=False, text=repaired, error=str(e))

    logger.warning("JSON repaired by appending %d closer(s): %r", len(suffix), suffix)
    return RepairResult(ok=True, text=repaired, value=value)
