"""
Unit tests for jobswipe/common/json_utils.py

Compatibility responses come back as JSON, fenced JSON, JSON inside prose or
slightly malformed JSON.
"""

import pytest

from jobswipe.common.json_utils import _extract_json_object, _strip_markdown_blocks, parse_llm_json


class TestValidJsonParsing:

    def test_parses_simple_object(self):
        assert parse_llm_json('{"score": 82, "explanation": "ok"}') == {"score": 82, "explanation": "ok"}

    def test_handles_cyrillic(self):
        result = parse_llm_json('{"explanation": "Опыт совпадает"}')
        assert result["explanation"] == "Опыт совпадает"


class TestMarkdownExtraction:

    def test_strips_json_fence(self):
        assert parse_llm_json('```json\n{"score": 70}\n```') == {"score": 70}

    def test_strips_plain_fence(self):
        assert parse_llm_json('```\n{"score": 70}\n```') == {"score": 70}

    def test_extracts_object_from_prose(self):
        text = 'Вот оценка: {"score": 64, "explanation": "Частично"} Надеюсь, помог.'
        assert parse_llm_json(text)["score"] == 64


class TestRepair:

    def test_repairs_single_quotes(self):
        assert parse_llm_json("{'score': 55}") == {"score": 55}

    def test_repairs_trailing_comma(self):
        assert parse_llm_json('{"score": 55,}') == {"score": 55}

    def test_unwraps_single_item_list(self):
        assert parse_llm_json('[{"score": 40}]') == {"score": 40}


class TestErrors:

    def test_empty_input_raises(self):
        with pytest.raises(ValueError, match="Empty input"):
            parse_llm_json("   ")

    def test_prose_without_object_raises(self):
        with pytest.raises(ValueError):
            parse_llm_json("Совместимость примерно семьдесят процентов")


class TestHelpers:

    def test_strip_markdown_blocks(self):
        assert _strip_markdown_blocks('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_extract_json_object_without_braces_returns_input(self):
        assert _extract_json_object("no braces") == "no braces"

    def test_fence_inside_prose(self):
        text = 'Вот оценка:\n```json\n{"score": 61}\n```\nУдачи!'
        assert parse_llm_json(text) == {"score": 61}
