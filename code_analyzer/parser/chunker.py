"""
Code Chunker
============
Keeps prompt input inside a fixed character budget.

Splitting Rules:
    - Text within the budget is returned untouched as a single chunk
    - Otherwise whole lines are accumulated until the next line would overflow
    - Split points never fall inside a line; a single over-long line becomes
      its own chunk
    - Chunks are stripped of surrounding whitespace

Prefix-Only Analysis:
    Only the first chunk is sent to the model, followed by a "// ..." marker.
    The caller records how many chunks existed in the result's `note` so the
    user knows the analysis covered a prefix of the code.
"""
import logging
from dataclasses import dataclass
from typing import List

from code_analyzer.core.constants import TRUNCATION_MARKER

logger = logging.getLogger(__name__)


@dataclass
class PreparedCode:
    """Code ready to be embedded in a prompt."""
    text: str
    chunk_count: int

    @property
    def truncated(self) -> bool:
        return self.chunk_count > 1


def split_into_chunks(text: str, max_chunk_size: int) -> List[str]:
    """
    Split text into line-aligned chunks of at most max_chunk_size characters.

    Parameters
    ----------
    text : str
        Source code to split.
    max_chunk_size : int
        Character budget per chunk.

    Returns
    -------
    list[str]
        Ordered chunks. ``[text]`` when the text already fits.
    """
    if len(text) <= max_chunk_size:
        return [text]

    chunks: List[str] = []
    current = ""

    for line in text.split("\n"):
        candidate = current + line + "\n"
        if len(candidate) > max_chunk_size and current.strip():
            chunks.append(current.strip())
            current = line + "\n"
        else:
            current = candidate

    if current.strip():
        chunks.append(current.strip())

    return chunks


def prepare_code(code: str, max_chunk_size: int) -> PreparedCode:
    """Return the first chunk of code (with a truncation marker when split)."""
    chunks = split_into_chunks(code, max_chunk_size)
    if len(chunks) <= 1:
        return PreparedCode(text=code, chunk_count=1)

    logger.info(
        "Code is %d chars, split into %d chunks; analysing the first one only",
        len(code), len(chunks),
    )
    return PreparedCode(text=chunks[0] + TRUNCATION_MARKER, chunk_count=len(chunks))


def truncation_note(chunk_count: int) -> str:
    return (
        f"Code is too large ({chunk_count} chunks); only the first chunk was analysed."
    )
