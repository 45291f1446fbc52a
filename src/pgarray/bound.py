"""Bound-parameter text for arrays sent out-of-band in prepared statements.

The text format always uses brace nesting, whatever the SQL dialect, and
double-quotes every string-like member:

    >>> bound_variable_array(['a"b', None, 1.5])
    '{"a\\\\"b",NULL,1.5}'
"""

import re
from functools import partial
from typing import Any, Callable, Optional

from pgarray.literal import Raw, blob_literal, bound_variable_arg, float_token, literal_value
from pgarray.value import ElementKind, classify_element, element_sequence

_MEMBER_ESCAPE = re.compile(r'(["\\])')

# Strips the outer quote markers of a blob literal.
_BLOB_RANGE = slice(1, -1)


def quote_array_member(text: str) -> str:
    """Quote a string as an array member, escaping embedded quotes and backslashes."""
    return '"' + _MEMBER_ESCAPE.sub(r"\\\1", text) + '"'


class BoundVariableFormatter:
    """Format arrays as bound-parameter text.

    Args:
        literal: Scalar literalization used when a member has no text form
            of its own. Defaults to postgres literals.
        bound_arg: Converts a scalar to its bound-parameter form; a str
            result is quoted as a member.
        blob_literal: Renders binary payloads as a quoted SQL literal.
    """

    def __init__(
        self,
        literal: Optional[Callable[[Any], str]] = None,
        bound_arg: Optional[Callable[[Any], Any]] = None,
        blob_literal: Callable[[Any], str] = blob_literal,
    ) -> None:
        self._literal = literal or partial(literal_value, dialect="postgres")
        self._bound_arg = bound_arg or bound_variable_arg
        self._blob_literal = blob_literal

    def format(self, value: Any) -> str:
        """Return the bound-parameter text for an ArrayValue or plain sequence."""
        return self._format_array(element_sequence(value))

    def _format_array(self, elements) -> str:
        return "{" + ",".join(self._format_member(element) for element in elements) + "}"

    def _format_member(self, member: Any) -> str:
        kind = classify_element(member)
        if kind is ElementKind.ARRAY:
            return self._format_array(element_sequence(member))
        if kind is ElementKind.NULL:
            return "NULL"
        if isinstance(member, (bytes, bytearray, memoryview)):
            return quote_array_member(self._blob_literal(member)[_BLOB_RANGE].replace("''", "'"))
        if isinstance(member, Raw):
            return str(member)
        if isinstance(member, str):
            return quote_array_member(member)
        if isinstance(member, float):
            token = float_token(member)
            if token is not None:
                return f'"{token}"'
            return self._literal(member)

        text = self._bound_arg(member)
        if isinstance(text, str):
            return quote_array_member(text)
        return self._literal(member)


_DEFAULT_FORMATTER = BoundVariableFormatter()


def bound_variable_array(value: Any) -> str:
    """Format an array as bound-parameter text with the default formatter."""
    return _DEFAULT_FORMATTER.format(value)
