"""Tests for structured-output recovery from LLM responses."""

import json

import pytest

from component_forge.models import ExtractionStrategy, FailureKind, ParseStrategy
from component_forge.utils.json_parsing import (
    PREVIEW_LENGTH,
    extract_balanced,
    extract_by_pattern,
    iter_candidates,
    normalize,
    parse_json_from_response,
    parse_structured,
    repair,
    select_candidate,
)


class TestNormalize:
    def test_trims_whitespace(self):
        assert normalize('  \n{"a": 1}\n\t') == '{"a": 1}'

    def test_strips_json_fence(self):
        assert normalize('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fence(self):
        assert normalize("```\n[1, 2]\n```") == "[1, 2]"

    def test_keeps_surrounding_prose(self):
        text = 'Here is the JSON:\n```json\n{"a": 1}\n```'
        assert normalize(text) == 'Here is the JSON:\n\n{"a": 1}'

    def test_empty_and_none(self):
        assert normalize("") == ""
        assert normalize(None) == ""
        assert normalize("   ") == ""

    @pytest.mark.parametrize(
        "text",
        [
            '```json\n{"a": 1}\n```',
            "  ``` ```json ``` ",
            "````json\n[1]\n````",
            "plain text",
            "Sorry, I can't help with that.",
            '\n\n```js\n{a: 1}\n```\n\nthanks',
        ],
    )
    def test_idempotent(self, text):
        once = normalize(text)
        assert normalize(once) == once


class TestExtractBalanced:
    def test_object_in_prose(self):
        text = 'Result: {"a": {"b": [1, 2]}} trailing words'
        candidate = extract_balanced(text, "{")
        assert candidate.text == '{"a": {"b": [1, 2]}}'
        assert candidate.strategy == ExtractionStrategy.brace_balance
        assert text[candidate.span[0]:candidate.span[1]] == candidate.text

    def test_array(self):
        candidate = extract_balanced("items: [1, [2, 3]] done", "[")
        assert candidate.text == "[1, [2, 3]]"

    def test_braces_inside_strings_ignored(self):
        text = '{"template": "use {name} and }", "ok": true}'
        candidate = extract_balanced(text, "{")
        assert json.loads(candidate.text) == {"template": "use {name} and }", "ok": True}

    def test_escaped_quote_inside_string(self):
        text = 'x {"say": "he said \\"}\\" loudly"} y'
        candidate = extract_balanced(text, "{")
        assert json.loads(candidate.text) == {"say": 'he said "}" loudly'}

    def test_single_quoted_strings_ignored(self):
        candidate = extract_balanced("{text: 'a } b'}", "{")
        assert candidate.text == "{text: 'a } b'}"

    def test_no_opener(self):
        assert extract_balanced("no braces here", "{") is None

    def test_truncated_returns_none(self):
        assert extract_balanced('{"a": {"b": 1', "{") is None

    def test_invalid_open_char(self):
        assert extract_balanced("(1)", "(") is None

    def test_wrapped_in_fence_is_valid_json(self):
        text = 'Sure!\n```json\n{"name": "Acme", "tags": ["a", "b"]}\n```\nAnything else?'
        candidate = extract_balanced(text, "{")
        assert json.loads(candidate.text) == {"name": "Acme", "tags": ["a", "b"]}


class TestExtractByPattern:
    def test_fenced_json_block(self):
        candidate = extract_by_pattern('text\n```json\n{"a": 1}\n```\nmore')
        assert candidate.text == '{"a": 1}'
        assert candidate.strategy == ExtractionStrategy.fenced_block

    def test_plain_fenced_block(self):
        candidate = extract_by_pattern("```\n[1, 2]\n```")
        assert candidate.text == "[1, 2]"
        assert candidate.strategy == ExtractionStrategy.fenced_block

    def test_prefix_pattern(self):
        candidate = extract_by_pattern('Here\'s the JSON: {"a": 1}')
        assert candidate.text == '{"a": 1}'
        assert candidate.strategy == ExtractionStrategy.prefix_pattern

    def test_bullet_pattern(self):
        candidate = extract_by_pattern('Answer\n- {"a": 1}\n\nbye')
        assert candidate.text == '{"a": 1}'
        assert candidate.strategy == ExtractionStrategy.bullet_pattern

    def test_greedy_object(self):
        candidate = extract_by_pattern('see {"a": {"b": 1}} ok')
        assert candidate.text == '{"a": {"b": 1}}'
        assert candidate.strategy == ExtractionStrategy.greedy_object

    def test_array_fallback(self):
        candidate = extract_by_pattern("values [1, 2, 3] end")
        assert candidate.text == "[1, 2, 3]"
        assert candidate.strategy == ExtractionStrategy.array_pattern

    def test_implausible_fence_skipped(self):
        candidate = extract_by_pattern('```\nnot json\n```\nthen {"a": 1}')
        assert candidate.text == '{"a": 1}'

    def test_no_match(self):
        assert extract_by_pattern("nothing to see") is None
        assert extract_by_pattern("") is None


class TestRepair:
    def test_trailing_commas(self):
        assert json.loads(repair('{"a": [1, 2,], "b": 3,}')) == {"a": [1, 2], "b": 3}

    def test_comments(self):
        text = '{\n  // name\n  "a": 1, /* inline */ "b": 2\n}'
        assert json.loads(repair(text)) == {"a": 1, "b": 2}

    def test_bare_keys(self):
        assert json.loads(repair("{name: 1, other_key: 2}")) == {"name": 1, "other_key": 2}

    def test_single_quoted_values(self):
        assert json.loads(repair("{\"a\": 'x', \"b\": 'it\\'s'}")) == {"a": "x", "b": "it's"}

    def test_single_quoted_value_with_double_quote(self):
        assert json.loads(repair("{a: 'say \"hi\"'}")) == {"a": 'say "hi"'}

    def test_leaves_string_contents_alone(self):
        text = '{"url": "https://example.org/a", "note": "a, }", "q": "it\'s {x: 1}"}'
        assert json.loads(repair(text)) == json.loads(text)

    def test_empty(self):
        assert repair("") == ""

    @pytest.mark.parametrize(
        "value",
        [
            {"a": 1, "b": [1, 2, {"c": None}]},
            {"text": "don't // stop, }", "n": -1.5e3},
            [{"k": "v"}, "x", True, False],
            {"nested": {"key: value": "a, b]"}},
            "just a string",
            42,
        ],
    )
    def test_valid_json_unchanged_in_meaning(self, value):
        text = json.dumps(value)
        assert json.loads(repair(text)) == value


class TestParseStructured:
    def test_fenced_with_trailing_comma(self):
        raw = 'Here is the JSON:\n```json\n{"a":1, "b":[1,2,]}\n```'
        result = parse_structured(raw)
        assert result.success
        assert result.data == {"a": 1, "b": [1, 2]}
        assert result.strategy_used == ParseStrategy.repaired_json

    def test_bare_key_single_quote(self):
        result = parse_structured("{name: 'Bob', age: 30}")
        assert result.success
        assert result.data == {"name": "Bob", "age": 30}
        assert result.strategy_used == ParseStrategy.repaired_json

    def test_no_json(self):
        result = parse_structured("Sorry, I can't help with that.")
        assert not result.success
        assert result.data is None
        assert result.error
        assert result.error_kind == FailureKind.parse
        assert result.raw_response_preview == "Sorry, I can't help with that."

    def test_already_parsed_passes_through(self):
        data = {"hero": {"headline": "Buy Now"}}
        result = parse_structured(data)
        assert result.success
        assert result.data is data
        assert result.strategy_used is None

    def test_list_passes_through(self):
        result = parse_structured([1, 2])
        assert result.success and result.data == [1, 2]

    def test_truncated_input_fails(self):
        raw = '{"a": {"b": 1'
        assert extract_balanced(raw, "{") is None
        assert extract_by_pattern(raw) is None
        result = parse_structured(raw)
        assert not result.success

    def test_strict_json(self):
        result = parse_structured('{"a": 1}')
        assert result.strategy_used == ParseStrategy.strict_json
        assert result.extraction_strategy == ExtractionStrategy.brace_balance

    def test_permissive_parser_fallback(self):
        result = parse_structured("{a: undefined, b: 0x1F, c: .5}")
        assert result.success
        assert result.data == {"a": None, "b": 31, "c": 0.5}
        assert result.strategy_used == ParseStrategy.sandbox_eval

    def test_code_is_never_executed(self):
        result = parse_structured("{a: __import__('os').getcwd()}")
        assert not result.success

    def test_failed_candidate_is_terminal(self):
        result = parse_structured("{oops} then [1, 2]")
        assert not result.success
        assert result.error_kind == FailureKind.parse
        assert result.data is None

    def test_later_fenced_block_not_used(self):
        raw = '{oops: ] bad} later ```json\n{"a": 1}\n```'
        assert select_candidate(raw).strategy == ExtractionStrategy.brace_balance
        result = parse_structured(raw)
        assert not result.success
        assert result.error_kind == FailureKind.parse

    def test_oversized_integer_fails_cleanly(self):
        result = parse_structured('{"n": ' + "1" * 5000 + "}")
        assert not result.success
        assert result.error_kind == FailureKind.parse

    def test_whole_text_number(self):
        result = parse_structured(" 42 ")
        assert result.success
        assert result.data == 42
        assert result.extraction_strategy == ExtractionStrategy.whole_text

    def test_empty_response(self):
        result = parse_structured("   ")
        assert not result.success
        assert result.error == "Empty response"
        assert result.error_kind == FailureKind.extraction

    def test_non_string_input(self):
        result = parse_structured(None)
        assert not result.success
        assert "NoneType" in result.error

    def test_preview_truncated(self):
        result = parse_structured("x" * (PREVIEW_LENGTH + 500))
        assert len(result.raw_response_preview) == PREVIEW_LENGTH

    def test_deterministic(self):
        raw = "Output:\n- {title: 'A', items: ['x', 'y',],}\n\nDone"
        first = parse_structured(raw)
        second = parse_structured(raw)
        assert first.success
        assert first.data == second.data == {"title": "A", "items": ["x", "y"]}
        assert first.strategy_used == second.strategy_used

    def test_candidates_ordered_object_first(self):
        strategies = [c.strategy for c in iter_candidates('[1] {"a": 1}')]
        assert strategies[0] == ExtractionStrategy.brace_balance
        assert strategies[1] == ExtractionStrategy.brace_balance
        assert strategies[-1] == ExtractionStrategy.whole_text


class TestParseJsonFromResponse:
    def test_direct_dict(self):
        assert parse_json_from_response('{"key": "value"}') == {"key": "value"}

    def test_direct_array(self):
        assert parse_json_from_response("[1, 2, 3]") == [1, 2, 3]

    def test_markdown_fenced_json(self):
        text = '```json\n{"key": "value"}\n```'
        assert parse_json_from_response(text) == {"key": "value"}

    def test_markdown_fenced_no_lang(self):
        assert parse_json_from_response("```\n[1, 2]\n```") == [1, 2]

    def test_json_embedded_in_text(self):
        text = 'Here is the result:\n{"name": "test", "value": 42}\nEnd of result.'
        assert parse_json_from_response(text) == {"name": "test", "value": 42}

    def test_object_preferred_over_enclosing_array(self):
        text = 'The entities are:\n[{"name": "Alice"}, {"name": "Bob"}]\nThat is all.'
        assert parse_json_from_response(text) == {"name": "Alice"}

    def test_array_of_scalars_in_text(self):
        assert parse_json_from_response("Scores: [3, 4, 5] overall") == [3, 4, 5]

    def test_empty_string(self):
        assert parse_json_from_response("") is None

    def test_none_input(self):
        assert parse_json_from_response(None) is None

    def test_no_json(self):
        assert parse_json_from_response("This is just plain text.") is None

    def test_invalid_json(self):
        assert parse_json_from_response("{invalid json}") is None

    def test_scalar_is_not_returned(self):
        assert parse_json_from_response("7") is None

    def test_multiple_json_objects_picks_first(self):
        assert parse_json_from_response('{"a": 1} and {"b": 2}') == {"a": 1}
