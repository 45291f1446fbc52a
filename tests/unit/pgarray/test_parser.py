"""Tests for the array literal parser."""

import pytest

from pgarray.errors import MalformedArrayError, UnterminatedArrayError
from pgarray.parser import BRACE_GRAMMAR, BRACKET_GRAMMAR, ArrayLiteralParser, parse_array


class TestBraceGrammar:
    """Parsing the brace-delimited catalog output format."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("{}", []),
            ("{1}", ["1"]),
            ("{1,2,3}", ["1", "2", "3"]),
            ("{{1,2},{3,4}}", [["1", "2"], ["3", "4"]]),
            ("{{{a}}}", [[["a"]]]),
            ("{{},{}}", [[], []]),
            ("{a b,c}", ["a b", "c"]),
        ],
    )
    def test_parses_structure(self, text, expected):
        """Unquoted tokens and nesting map to nested lists of strings."""
        assert parse_array(text) == expected

    def test_unquoted_null_is_none(self):
        """An unquoted NULL token is the null value."""
        assert parse_array("{1,NULL,3}", int) == [1, None, 3]

    def test_quoted_null_is_string(self):
        """A quoted NULL is the four-character string."""
        assert parse_array('{1,"NULL",3}') == ["1", "NULL", "3"]

    def test_quoted_null_goes_through_converter(self):
        """Quoted NULL is an ordinary token, so the converter sees it."""
        seen = []

        def converter(value):
            seen.append(value)
            return value.lower()

        assert parse_array('{"NULL"}', converter) == ["null"]
        assert seen == ["NULL"]

    def test_escaped_quote_and_embedded_comma(self):
        """Backslash escapes and separators inside quotes are preserved."""
        assert parse_array('{"a\\"b","c,d"}') == ['a"b', "c,d"]

    def test_escaped_backslash(self):
        """A doubled backslash inside quotes yields one backslash."""
        assert parse_array('{"a\\\\b"}') == ["a\\b"]

    def test_quoted_empty_string(self):
        """A quoted empty element is kept as an empty string."""
        assert parse_array('{"",a,""}') == ["", "a", ""]

    def test_quoted_braces_are_literal(self):
        """Delimiters inside quotes do not open or close arrays."""
        assert parse_array('{"{x}","}"}') == ["{x}", "}"]

    def test_dimension_prefix_is_discarded(self):
        """Leading dimension bounds are recognized and skipped."""
        assert parse_array("[0:1]={5,6}", int) == [5, 6]
        assert parse_array("[1:2][1:1]={{1},{2}}", int) == [[1], [2]]

    def test_converter_applied_to_nested_elements(self):
        """The converter runs on every scalar at every depth."""
        assert parse_array("{{1,2},{3,NULL}}", int) == [[1, 2], [3, None]]

    def test_converter_errors_propagate_unwrapped(self):
        """Conversion failures reach the caller as-is."""
        with pytest.raises(ValueError) as exc_info:
            parse_array("{1,x}", int)
        assert not isinstance(exc_info.value, MalformedArrayError)

    def test_bracket_characters_are_plain_text(self):
        """Square brackets are ordinary characters in the brace grammar."""
        assert parse_array("{[1],2}") == ["[1]", "2"]


class TestBracketGrammar:
    """Parsing the bracket-delimited Redshift format."""

    def test_parses_nested(self):
        """Square brackets delimit arrays."""
        assert parse_array("[[1,2],[3,4]]", int, BRACKET_GRAMMAR) == [[1, 2], [3, 4]]

    def test_null_and_quoted(self):
        """NULL and quoting rules match the brace grammar."""
        assert parse_array('[NULL,"NULL","a,b"]', grammar=BRACKET_GRAMMAR) == [
            None,
            "NULL",
            "a,b",
        ]

    def test_braces_are_plain_text(self):
        """Curly braces are ordinary characters in the bracket grammar."""
        assert parse_array("[{a},b]", grammar=BRACKET_GRAMMAR) == ["{a}", "b"]

    def test_closing_quote_must_precede_bracket(self):
        """A closing quote followed by a brace is malformed in the bracket grammar."""
        with pytest.raises(MalformedArrayError):
            parse_array('["a"}', grammar=BRACKET_GRAMMAR)

    def test_brace_input_is_rejected(self):
        """Brace input does not start with the bracket opening delimiter."""
        with pytest.raises(MalformedArrayError):
            parse_array("{1,2}", grammar=BRACKET_GRAMMAR)


class TestMalformedInput:
    """Structural errors are reported with the right error type."""

    @pytest.mark.parametrize("text", ["{1,2", "{{1,2}", '{"abc', '{"abc\\', "{"])
    def test_unterminated(self, text):
        """Input that ends mid-structure is unterminated."""
        with pytest.raises(UnterminatedArrayError):
            parse_array(text)

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "1,2}",
            "abc",
            "{1,2}x",
            "{1}{2}",
            '{a"b"}',
            '{"a"b}',
            '{"a"',
            "{a{1}}",
        ],
    )
    def test_malformed(self, text):
        """Structural violations are malformed."""
        with pytest.raises(MalformedArrayError):
            parse_array(text)

    def test_error_reports_position(self):
        """The error carries the position where the problem was detected."""
        with pytest.raises(MalformedArrayError) as exc_info:
            parse_array("{1,2}x")
        assert exc_info.value.position == 5
        assert "position 5" in str(exc_info.value)

    def test_missing_opening_delimiter_message(self):
        """A missing opening delimiter names the expected character."""
        with pytest.raises(MalformedArrayError, match="doesn't start with {"):
            parse_array("1,2}")


class TestParserInstance:
    """Parser object lifecycle."""

    def test_single_use(self):
        """A parser instance cannot be reused."""
        parser = ArrayLiteralParser("{1}")
        assert parser.parse() == ["1"]
        with pytest.raises(RuntimeError):
            parser.parse()

    def test_grammar_property(self):
        """The grammar in use is exposed."""
        assert ArrayLiteralParser("{}").grammar is BRACE_GRAMMAR
        assert BRACKET_GRAMMAR.specials == frozenset({"[", "]", '"', ","})
