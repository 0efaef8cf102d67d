"""Tests for tolerant JSON extraction from model output."""

import pytest

from app.services.json_parser import _extract_balanced, _strip_markdown_fences, parse_json_response


class TestStripMarkdownFences:
    def test_strips_json_fence(self):
        assert _strip_markdown_fences('```json\n{"key": "value"}\n```') == '{"key": "value"}'

    def test_strips_plain_fence(self):
        assert _strip_markdown_fences('```\n{"key": "value"}\n```') == '{"key": "value"}'

    def test_handles_fence_with_extra_text(self):
        text = 'Here is the JSON:\n```JSON\n{"key": "value"}\n```\nDone!'
        assert _strip_markdown_fences(text) == '{"key": "value"}'

    def test_handles_no_fence(self):
        assert _strip_markdown_fences('{"key": "value"}') == '{"key": "value"}'


class TestExtractBalanced:
    def test_ignores_brackets_inside_strings(self):
        text = 'noise {"a": "}{", "b": [1]} trailing'
        assert _extract_balanced(text, "{", "}") == '{"a": "}{", "b": [1]}'

    def test_unbalanced_returns_none(self):
        assert _extract_balanced('{"a": 1', "{", "}") is None


class TestParseJsonResponse:
    def test_plain_json(self):
        assert parse_json_response('{"a": 1}', "test") == {"a": 1}

    def test_array_with_objects_keeps_array(self):
        assert parse_json_response('result: [{"a": 1}, {"a": 2}]', "test") == [{"a": 1}, {"a": 2}]

    def test_trailing_commas(self):
        assert parse_json_response('{"items": [1, 2, 3,], "name": "x",}', "test") == {
            "items": [1, 2, 3],
            "name": "x",
        }

    def test_arabic_content_survives(self):
        assert parse_json_response('```json\n{"title": "الفارس"}\n```', "test") == {"title": "الفارس"}

    @pytest.mark.parametrize("text", ["", "no json here", "{broken"])
    def test_unparseable_returns_none(self, text):
        assert parse_json_response(text, "test") is None
