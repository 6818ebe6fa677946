"""Tests for the lexical rules shared by encoder and decoder."""

import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from toon_codec.errors import InvalidLiteralError, NonFiniteNumberError
from toon_codec.primitives import (
    encode_key,
    encode_number,
    format_array_header,
    parse_primitive,
    parse_string_literal,
)
from toon_codec.string_utils import (
    escape_string,
    find_unquoted_colon,
    is_disallowed_key,
    is_safe_unquoted,
    is_valid_key_token,
    looks_like_number,
    split_by_delimiter,
    unescape_string,
)


class TestKeyTokens:
    """Bare key grammar."""

    @pytest.mark.parametrize("key", ["a", "_", "_private", "camelCase", "snake_case_2", "A1"])
    def test_valid(self, key):
        assert is_valid_key_token(key)
        assert encode_key(key) == key

    @pytest.mark.parametrize(
        "key", ["", "1a", "a-b", "a b", "a.b", "a,b", "a:b", "a[0]", "{a}", 'a"', "über", "🚀"]
    )
    def test_invalid(self, key):
        assert not is_valid_key_token(key)
        assert encode_key(key).startswith('"')

    def test_quoted_key_escapes(self):
        assert encode_key('say "hi"') == '"say \\"hi\\""'

    @pytest.mark.parametrize("key", ["abc\n", "a\n", "_\n"])
    def test_trailing_newline_is_not_bare(self, key):
        assert not is_valid_key_token(key)
        assert encode_key(key) == f'"{key[:-1]}\\n"'


class TestDisallowedKeys:
    """Blocked key set."""

    @pytest.mark.parametrize("key", ["__proto__", "constructor", "prototype"])
    def test_blocked(self, key):
        assert is_disallowed_key(key)

    @pytest.mark.parametrize("key", ["proto", "Constructor", "__proto", "prototypes"])
    def test_allowed(self, key):
        assert not is_disallowed_key(key)


class TestQuotingPolicy:
    """When strings must be quoted."""

    @pytest.mark.parametrize(
        "value",
        [
            "hello",
            "hello world",
            "True",
            "2024-01-15",
            "user@example.com",
            "a.b",
            "münchen",
            "To the moon 🌕",
            "1.2.3",
            "x-1",
        ],
    )
    def test_safe(self, value):
        assert is_safe_unquoted(value)

    @pytest.mark.parametrize(
        "value",
        [
            "",
            " lead",
            "trail ",
            "true",
            "false",
            "null",
            "0",
            "-1",
            "+1",
            "007",
            "1.5",
            "1.",
            ".5",
            "1e10",
            "-2.5E-3",
            "a,b",
            "a:b",
            'a"b',
            "a\\b",
            "a[b",
            "a]b",
            "a{b",
            "a}b",
            "a\nb",
            "a\tb",
            "a\x00b",
            "a\x7fb",
            "-x",
            "-",
        ],
    )
    def test_unsafe(self, value):
        assert not is_safe_unquoted(value)

    def test_delimiter_dependent(self):
        assert not is_safe_unquoted("a|b", "|")
        assert is_safe_unquoted("a|b", ",")
        assert is_safe_unquoted("a,b", "|")
        assert not is_safe_unquoted("a\tb", "\t")

    @pytest.mark.parametrize("value", ["1", "-1", "+1", "1.5", "1.", ".5", "1e5", "1E-5", "007"])
    def test_numeric_grammar(self, value):
        assert looks_like_number(value)

    @pytest.mark.parametrize(
        "value",
        ["1a", "1_000", "0x10", "inf", "nan", "Infinity", "--1", "1e", ".", "1\n", "١٢", "٣.٥"],
    )
    def test_not_numeric(self, value):
        assert not looks_like_number(value)


class TestEscaping:
    """Escape table and its inverse."""

    def test_escape_table(self):
        assert escape_string('a\\b"c\nd\re\tf') == 'a\\\\b\\"c\\nd\\re\\tf'

    def test_escape_other_controls(self):
        assert escape_string("\x00\x1f\x7f") == "\\u0000\\u001f\\u007f"

    def test_escape_keeps_unicode(self):
        assert escape_string("🚀 ü") == "🚀 ü"

    def test_unescape_table(self):
        assert unescape_string('a\\\\b\\"c\\nd\\re\\tf') == 'a\\b"c\nd\re\tf'

    def test_unescape_unicode(self):
        assert unescape_string("\\u0041\\u00e9") == "Aé"

    def test_unescape_rejects_unknown(self):
        with pytest.raises(InvalidLiteralError, match="Invalid escape sequence"):
            unescape_string("\\b")

    def test_unescape_rejects_bad_hex(self):
        with pytest.raises(InvalidLiteralError, match="Invalid unicode escape"):
            unescape_string("\\u00zz")

    def test_unescape_rejects_trailing_backslash(self):
        with pytest.raises(InvalidLiteralError, match="Backslash at end"):
            unescape_string("abc\\")


class TestNumbers:
    """Number rendering and parsing."""

    def test_render(self):
        assert encode_number(1) == "1"
        assert encode_number(1.0) == "1"
        assert encode_number(-0.0) == "-0"
        assert encode_number(0.0) == "0"
        assert encode_number(0.30000000000000004) == "0.30000000000000004"
        assert encode_number(1e100) == "1e+100"

    def test_render_rejects_non_finite(self):
        with pytest.raises(NonFiniteNumberError):
            encode_number(float("inf"))

    def test_parse(self):
        assert parse_primitive("12") == 12
        assert parse_primitive("-0.0") == 0.0
        assert parse_primitive("1e+100") == 1e100
        assert parse_primitive("1_000") == "1_000"


class TestParsePrimitive:
    """Token classification."""

    def test_literals(self):
        assert parse_primitive("true") is True
        assert parse_primitive("false") is False
        assert parse_primitive("null") is None

    def test_bare_string(self):
        assert parse_primitive("hello there") == "hello there"
        assert parse_primitive('he said "hi"') == 'he said "hi"'

    def test_quoted(self):
        assert parse_primitive('"null"') == "null"
        assert parse_string_literal('"a\\nb"') == "a\nb"

    def test_empty(self):
        with pytest.raises(InvalidLiteralError, match="Empty value"):
            parse_primitive("")


class TestScanning:
    """Quote-aware scanning helpers."""

    def test_find_unquoted_colon(self):
        assert find_unquoted_colon("a: b") == 1
        assert find_unquoted_colon('"a:b": c') == 5
        assert find_unquoted_colon('"a\\":b": c') == 7
        assert find_unquoted_colon("abc") == -1

    def test_split_by_delimiter(self):
        assert split_by_delimiter('1,"a,b", c', ",") == ["1", '"a,b"', "c"]
        assert split_by_delimiter('"x\\"|y"|z', "|") == ['"x\\"|y"', "z"]
        assert split_by_delimiter("a\tb", "\t") == ["a", "b"]


class TestArrayHeader:
    """Header formatting."""

    def test_list_header(self):
        assert format_array_header(3) == "[3]:"
        assert format_array_header(3, key="items") == "items[3]:"

    def test_tabular_header(self):
        assert format_array_header(2, key="users", fields=["id", "name"]) == "users[2]{id,name}:"

    def test_delimiter_marker(self):
        assert format_array_header(2, fields=["a", "b"], delimiter="|") == "[2|]{a|b}:"

    def test_quoted_names(self):
        assert format_array_header(1, key="my list", fields=["a b"]) == '"my list"[1]{"a b"}:'
