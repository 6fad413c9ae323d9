"""
Unit Tests — JSON Extractor
===========================
Span recovery from noisy model output: prose, fences, nested structures,
delimiters and escaped quotes inside strings, and truncated responses.
"""
import json

import pytest

from code_analyzer.core.constants import NO_JSON_FOUND, UNTERMINATED
from code_analyzer.parser.json_extractor import (
    JsonScanner,
    extract_json,
    strip_code_fences,
)


NESTED_VALUES = [
    {"a": "}}}"},
    {"bugs": [{"line": 3, "message": "missing `}` after block {"}]},
    {"x": {"y": {"z": [1, [2, [3, {"w": "]]]"}]]]}}, "tail": True},
    {"quote": "she said \"}\" and left", "list": ["[", "]", "{", "}"]},
    {"path": "C:\\dir\\", "next": "}"},
    [{"line": 1}, {"line": 2, "fix": "wrap in [ ]"}],
    [[[]], {"k": [[{}]]}],
]


# ===========================================================================
# 1. Span recovery
# ===========================================================================
class TestExtraction:

    @pytest.mark.parametrize("value", NESTED_VALUES)
    def test_recovers_exact_span_from_prose(self, value):
        serialized = json.dumps(value)
        raw = f"Sure! Here is the analysis you asked for:\n{serialized}\nLet me know {{if}} you need more."
        result = extract_json(raw)
        assert result.ok
        assert result.text == serialized
        assert raw[result.start:result.end] == serialized
        assert json.loads(result.text) == value

    @pytest.mark.parametrize("value", NESTED_VALUES)
    def test_recovers_span_from_fenced_block(self, value):
        serialized = json.dumps(value, indent=2)
        raw = f"Result:\n```json\n{serialized}\n```\nDone."
        result = extract_json(raw)
        assert result.ok
        assert result.text == serialized

    def test_braces_inside_string_do_not_end_span(self):
        raw = 'The answer is {"a": "}}}"} and nothing else.'
        result = extract_json(raw)
        assert result.text == '{"a": "}}}"}'

    def test_stops_at_outer_object_not_nested_one(self):
        raw = 'x {"outer": {"inner": {"deep": 1}}, "after": 2} then {"second": 3}'
        result = extract_json(raw)
        assert result.text == '{"outer": {"inner": {"deep": 1}}, "after": 2}'

    def test_escaped_backslash_before_closing_quote(self):
        raw = r'{"p": "C:\\", "q": "}"} trailing'
        result = extract_json(raw)
        assert result.text == r'{"p": "C:\\", "q": "}"}'

    def test_array_root(self):
        raw = 'Found: [1, [2, 3], {"a": "]"}] end'
        result = extract_json(raw)
        assert result.text == '[1, [2, 3], {"a": "]"}]'

    def test_earliest_delimiter_wins(self):
        raw = 'Items [see below] {"a": 1}'
        result = extract_json(raw)
        assert result.text == "[see below]"

    def test_object_before_array(self):
        raw = 'noise {"bugs": [1, 2]} [3]'
        result = extract_json(raw)
        assert result.text == '{"bugs": [1, 2]}'

    def test_offsets_point_into_raw_text_with_fences(self):
        raw = '```json\n{"a": 1}\n```'
        result = extract_json(raw)
        assert result.text == '{"a": 1}'
        assert (result.start, result.end) == (8, 16)
        assert raw[result.start:result.end] == '{"a": 1}'

    def test_uppercase_fence_is_stripped(self):
        result = extract_json('```JSON\n{"ok": true}\n```')
        assert result.text == '{"ok": true}'


# ===========================================================================
# 2. Failures
# ===========================================================================
class TestExtractionFailures:

    def test_no_json_found(self):
        result = extract_json("I could not analyse this code, sorry.")
        assert not result.ok
        assert result.error == NO_JSON_FOUND

    def test_empty_input(self):
        assert extract_json("").error == NO_JSON_FOUND

    def test_unterminated_keeps_partial_candidate(self):
        raw = 'Here you go: {"bugs": [{"line": 1, "message": "x"}'
        result = extract_json(raw)
        assert result.error == UNTERMINATED
        assert result.text == '{"bugs": [{"line": 1, "message": "x"}'
        assert result.end == len(raw)

    def test_unterminated_string_is_unterminated(self):
        result = extract_json('{"message": "never closes }')
        assert result.error == UNTERMINATED


# ===========================================================================
# 3. Scanner and fence helpers
# ===========================================================================
class TestScanner:

    def test_depth_counters_are_independent(self):
        scanner = JsonScanner()
        for char in '{"a": [1, {"b": [':
            scanner.feed(char)
        assert scanner.brace_depth == 2
        assert scanner.bracket_depth == 2
        assert scanner.open_stack == ["{", "[", "{", "["]

    def test_string_state_tracks_escapes(self):
        scanner = JsonScanner()
        for char in '"a\\"':
            scanner.feed(char)
        assert scanner.in_string

    def test_strip_code_fences_index_map(self):
        cleaned, index_map = strip_code_fences("```json\nAB\n```")
        assert cleaned == "AB\n"
        assert [index_map[i] for i in range(len(cleaned))] == [8, 9, 10]
