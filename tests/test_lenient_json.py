"""Tests for the permissive object-literal parser."""

import math

import pytest

from component_forge.utils.lenient_json import MAX_DEPTH, LenientJSONError, parse_lenient


class TestParseLenient:
    def test_strict_json(self):
        assert parse_lenient('{"a": [1, 2.5, "x", true, null]}') == {"a": [1, 2.5, "x", True, None]}

    def test_bare_and_single_quoted_keys(self):
        assert parse_lenient("{name: 'Bob', 'age': 30, $id: 1}") == {"name": "Bob", "age": 30, "$id": 1}

    def test_trailing_commas(self):
        assert parse_lenient("{a: [1, 2,], b: 3,}") == {"a": [1, 2], "b": 3}

    def test_comments(self):
        text = "{\n  // heading\n  a: 1, /* note */ b: 2\n}"
        assert parse_lenient(text) == {"a": 1, "b": 2}

    def test_special_literals(self):
        data = parse_lenient("[undefined, NaN, Infinity, -Infinity, false]")
        assert data[0] is None
        assert math.isnan(data[1])
        assert data[2] == float("inf")
        assert data[3] == float("-inf")
        assert data[4] is False

    def test_numbers(self):
        assert parse_lenient("[0x1f, +5, -3, .5, 1e3, -2.5E-1]") == [31, 5, -3, 0.5, 1000.0, -0.25]

    def test_string_escapes(self):
        assert parse_lenient(r"'it\'s é \x41 \n'") == "it's é A \n"

    def test_double_quote_inside_single_quotes(self):
        assert parse_lenient("'say \"hi\"'") == 'say "hi"'

    def test_empty_containers(self):
        assert parse_lenient("{ }") == {}
        assert parse_lenient("[]") == []

    @pytest.mark.parametrize(
        "text",
        [
            "Sorry, I can't help",
            "{a: foo}",
            "{a: 1} extra",
            "{a: 1",
            "[1, 2",
            "'unterminated",
            "{a 1}",
            "",
            "   ",
            "{a: 1 b: 2}",
            "process.exit()",
        ],
    )
    def test_rejects(self, text):
        with pytest.raises(LenientJSONError):
            parse_lenient(text)

    def test_error_carries_position(self):
        with pytest.raises(LenientJSONError) as exc_info:
            parse_lenient("{a: oops}")
        assert exc_info.value.pos == 4
        assert "position 4" in str(exc_info.value)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_lenient("nope")

    def test_depth_limit(self):
        text = "[" * (MAX_DEPTH + 1) + "]" * (MAX_DEPTH + 1)
        with pytest.raises(LenientJSONError, match="Nesting too deep"):
            parse_lenient(text)

    def test_depth_at_limit(self):
        text = "[" * MAX_DEPTH + "]" * MAX_DEPTH
        data = parse_lenient(text)
        assert isinstance(data, list)
