"""
JSON Extractor
==============
Isolates the first complete JSON object or array inside a model response.

Models wrap their JSON in prose and markdown fences, and string values
routinely contain braces and brackets ("use `{}` here"). A regex cannot
balance nested structures, so the span is found with an explicit scanner:

Scanner States:
    OUTSIDE  — structural characters; `{ } [ ]` move the depth counters
    STRING   — inside a "..." literal; delimiters are ignored
    ESCAPE   — the character after a backslash inside a string

Termination:
    - The span opens at the first `{` or `[` of the response
    - It closes where the depth counter of that opening delimiter returns to 0
    - The other delimiter's counter is tracked but never ends the span
    - No closing position means the response was cut off → UNTERMINATED

Offsets:
    Fence markers are removed before scanning, but an index map is kept so
    ``start`` / ``end`` always point into the raw response text.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from code_analyzer.core.constants import NO_JSON_FOUND, UNTERMINATED

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

OUTSIDE = "outside-string"
STRING = "inside-string"
ESCAPE = "inside-escape"


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------
@dataclass
class JsonScanner:
    """
    Character-at-a-time JSON structure tracker.

    Keeps independent brace / bracket depths plus a stack of the delimiters
    that are still open, so callers can both detect balance and know the
    order in which missing closers must be appended.
    """
    state: str = OUTSIDE
    brace_depth: int = 0
    bracket_depth: int = 0
    open_stack: List[str] = field(default_factory=list)

    def feed(self, char: str) -> None:
        if self.state == ESCAPE:
            self.state = STRING
            return

        if self.state == STRING:
            if char == "\\":
                self.state = ESCAPE
            elif char == '"':
                self.state = OUTSIDE
            return

        if char == '"':
            self.state = STRING
        elif char == "{":
            self.brace_depth += 1
            self.open_stack.append("{")
        elif char == "}":
            self.brace_depth -= 1
            self._pop("{")
        elif char == "[":
            self.bracket_depth += 1
            self.open_stack.append("[")
        elif char == "]":
            self.bracket_depth -= 1
            self._pop("[")

    def _pop(self, opener: str) -> None:
        # Mismatched closers leave the stack alone; only depth counters move
        if self.open_stack and self.open_stack[-1] == opener:
            self.open_stack.pop()

    def depth_of(self, opener: str) -> int:
        return self.brace_depth if opener == "{" else self.bracket_depth

    @property
    def in_string(self) -> bool:
        return self.state != OUTSIDE


# ---------------------------------------------------------------------------
# Extraction Result
# ---------------------------------------------------------------------------
@dataclass
class ExtractionResult:
    """
    Outcome of scanning a response for JSON.

    On success ``text`` is the complete JSON span. On UNTERMINATED ``text``
    holds the partial candidate (opening delimiter to end of input) so it can
    be handed to the repairer. ``start`` / ``end`` index the raw response.
    """
    text: str = ""
    start: int = -1
    end: int = -1
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def strip_code_fences(raw: str) -> Tuple[str, List[int]]:
    """
    Remove markdown fence markers.

    Returns the cleaned text and a list mapping every cleaned index to its
    index in ``raw``.
    """
    pieces: List[str] = []
    index_map: List[int] = []
    cursor = 0
    for match in _FENCE_RE.finditer(raw):
        pieces.append(raw[cursor:match.start()])
        index_map.extend(range(cursor, match.start()))
        cursor = match.end()
    pieces.append(raw[cursor:])
    index_map.extend(range(cursor, len(raw)))
    return "".join(pieces), index_map


def _find_json_start(text: str) -> int:
    """Index of the first `{` or `[`, whichever comes first; -1 if neither."""
    positions = [pos for pos in (text.find("{"), text.find("[")) if pos != -1]
    return min(positions) if positions else -1


def extract_json(raw: str) -> ExtractionResult:
    """
    Find the first syntactically complete JSON object or array in raw text.

    Parameters
    ----------
    raw : str
        Raw model response, possibly wrapped in prose or code fences.

    Returns
    -------
    ExtractionResult
        The JSON span, or an error of NO_JSON_FOUND / UNTERMINATED.
    """
    cleaned, index_map = strip_code_fences(raw or "")

    start = _find_json_start(cleaned)
    if start == -1:
        logger.warning("No JSON delimiter in response: %r", cleaned[:200])
        return ExtractionResult(error=NO_JSON_FOUND)

    opener = cleaned[start]
    scanner = JsonScanner()

    for pos in range(start, len(cleaned)):
        scanner.feed(cleaned[pos])
        if pos > start and not scanner.in_string and scanner.depth_of(opener) == 0:
            return ExtractionResult(
                text=cleaned[start:pos + 1],
                start=index_map[start],
                end=index_map[pos] + 1,
            )

    logger.warning(
        "JSON starting at offset %d never closes (%d chars scanned)",
        index_map[start], len(cleaned) - start,
    )
    return ExtractionResult(
        text=cleaned[start:],
        start=index_map[start],
        end=len(raw),
        error=UNTERMINATED,
    )
