"""
Unit Tests — Analysis Service
=============================
The per-variant pipeline with a scripted invoker: extraction, repair,
truncation attribution and the chunking note.
"""
import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from code_analyzer.core.constants import (
    FINISH_LENGTH_TRUNCATED,
    NO_JSON_FOUND,
    UNTERMINATED,
    UNREPAIRABLE,
    EMPTY_RESPONSE,
)
from code_analyzer.core.errors import MalformedOutputError
from code_analyzer.llm.client import CompletionResult
from code_analyzer.llm.invoker import LLMInvoker
from code_analyzer.models.bug_report import BugReport
from code_analyzer.services.analysis_service import AnalysisService, parse_model_output


def _service(*completions, max_chunk_size=1000):
    invoker = MagicMock(spec=LLMInvoker)
    invoker.invoke = AsyncMock(side_effect=list(completions))
    return AnalysisService(invoker, max_chunk_size=max_chunk_size), invoker


BUG_RESPONSE = (
    "Here is my review of your code.\n"
    "```json\n"
    + json.dumps({
        "bugs": [{"line": 4, "severity": "high", "message": "Uses `{}` as map", "fix": "Use new Map()"}],
        "codeQuality": {"score": 70, "issues": ["No tests"]},
        "suggestions": ["Add JSDoc"],
    }, indent=2)
    + "\n```\nHope this helps!"
)


# ===========================================================================
# 1. Happy paths
# ===========================================================================
def test_analyze_code_from_fenced_prose():
    service, invoker = _service(CompletionResult(text=BUG_RESPONSE))

    report = asyncio.run(service.analyze_code("const a = {};", "javascript"))

    assert isinstance(report, BugReport)
    assert report.bugs[0].message == "Uses `{}` as map"
    assert report.code_quality.score == 70
    assert report.suggestions == ["Add JSDoc"]
    assert report.note is None
    prompt = invoker.invoke.await_args.args[0]
    assert "```javascript\nconst a = {};\n```" in prompt


def test_document_functions_bare_array():
    text = '[{"name": "add", "description": "Adds", "parameters": [], "returns": "number"}]'
    service, _ = _service(CompletionResult(text=text))

    report = asyncio.run(service.document_functions("function add(a, b) {}", "javascript"))

    assert report.functions[0].name == "add"


def test_document_api():
    text = 'Endpoints: {"endpoints": [{"method": "get", "path": "/users"}]}'
    service, _ = _service(CompletionResult(text=text))

    report = asyncio.run(service.document_api("app.get('/users', h)", "javascript"))

    assert report.endpoints[0].method == "GET"


def test_truncated_response_is_repaired():
    text = '{"bugs":[{"line":1,"severity":"medium","message":"x"}'
    service, _ = _service(CompletionResult(text=text, finish_reason=FINISH_LENGTH_TRUNCATED))

    report = asyncio.run(service.analyze_code("x = 1", "python"))

    assert len(report.bugs) == 1
    assert report.code_quality.score == 90


def test_large_code_sends_first_chunk_and_sets_note():
    code = "\n".join(f"let line{i} = {i};" for i in range(200))
    service, invoker = _service(CompletionResult(text='{"bugs": []}'), max_chunk_size=200)

    report = asyncio.run(service.analyze_code(code, "javascript"))

    prompt = invoker.invoke.await_args.args[0]
    assert "let line0 = 0;" in prompt
    assert "let line199 = 199;" not in prompt
    assert "// ..." in prompt
    assert report.note is not None
    assert "chunks" in report.note


# ===========================================================================
# 2. Failure attribution
# ===========================================================================
def test_no_json_raises_malformed():
    with pytest.raises(MalformedOutputError) as exc:
        parse_model_output(CompletionResult(text="I cannot help with that."))
    assert exc.value.reason == NO_JSON_FOUND
    assert exc.value.snippet == "I cannot help with that."


def test_empty_response_raises_malformed():
    with pytest.raises(MalformedOutputError) as exc:
        parse_model_output(CompletionResult(text="   ", finish_reason=FINISH_LENGTH_TRUNCATED))
    assert exc.value.reason == EMPTY_RESPONSE
    assert "token limit" in str(exc.value)


def test_unrepairable_truncation_reports_finish_reason():
    completion = CompletionResult(
        text='{"bugs": [{"line": 1, "message": "cut off mid-str',
        finish_reason=FINISH_LENGTH_TRUNCATED,
    )
    with pytest.raises(MalformedOutputError) as exc:
        parse_model_output(completion)
    assert exc.value.reason == UNTERMINATED
    assert exc.value.finish_reason == FINISH_LENGTH_TRUNCATED
    assert "token limit" in str(exc.value)


def test_complete_but_invalid_json_is_unrepairable():
    with pytest.raises(MalformedOutputError) as exc:
        parse_model_output(CompletionResult(text='{"bugs": [1, 2,], }'))
    assert exc.value.reason == UNREPAIRABLE
    assert exc.value.finish_reason != FINISH_LENGTH_TRUNCATED


def test_service_propagates_malformed_output():
    service, _ = _service(CompletionResult(text="no json here"))
    with pytest.raises(MalformedOutputError):
        asyncio.run(service.analyze_code("x", "python"))


def test_oversized_integer_literal_is_unrepairable():
    # json.loads raises ValueError past the interpreter's int digit limit
    text = '{"bugs": [], "codeQuality": {"score": ' + "9" * 5000 + "}}"
    with pytest.raises(MalformedOutputError) as exc:
        parse_model_output(CompletionResult(text=text))
    assert exc.value.reason == UNREPAIRABLE


def test_huge_model_score_falls_back_to_derived_score():
    text = json.dumps({"bugs": [{"line": 3, "severity": "high"}], "codeQuality": {"score": 10**30}})
    service, _ = _service(CompletionResult(text=text))

    report = asyncio.run(service.analyze_code("x = 1", "python"))

    assert report.code_quality.score == 80
