"""
Command-line entry point.

    python main.py path/to/source.js [language]

Runs the full analysis (bugs, function docs, API docs) on one file and
prints the aggregate result as JSON on stdout.
"""
import asyncio
import logging
import os
import sys

from code_analyzer.agents.orchestrator import build_orchestrator
from code_analyzer.core.config import LOG_TO_FILE, AnalyzerSettings
from code_analyzer.core.errors import ValidationError
from code_analyzer.utils.logging_config import setup_logging

setup_logging(level=logging.INFO, to_file=LOG_TO_FILE)
logger = logging.getLogger("main")

_EXTENSION_LANGUAGES = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
}


async def run(path: str, language: str | None) -> int:
    with open(path, "r", encoding="utf-8") as f:
        code = f.read()

    if language is None:
        language = _EXTENSION_LANGUAGES.get(os.path.splitext(path)[1].lower())

    orchestrator = build_orchestrator(AnalyzerSettings.from_env())
    try:
        result = await orchestrator.full_analysis(code, language)
    except ValidationError as e:
        logger.error("Invalid input: %s", e)
        return 2
    finally:
        await orchestrator.close()

    print(result.model_dump_json(by_alias=True, exclude_none=True, indent=2))
    return 1 if result.failed_count == 3 else 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__.strip(), file=sys.stderr)
        sys.exit(2)
    lang = sys.argv[2] if len(sys.argv) > 2 else None
    sys.exit(asyncio.run(run(sys.argv[1], lang)))
