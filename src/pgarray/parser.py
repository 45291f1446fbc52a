"""Stack-based parser for array literals returned by the database.

The parser handles the catalog output format only: a delimited, comma
separated list of unquoted tokens, double-quoted strings (backslash escapes
the next character) and nested arrays. It does not accept every form of
input the server accepts, and it does not reject every invalid form.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from pgarray.errors import MalformedArrayError, UnterminatedArrayError

Converter = Callable[[str], Any]

NULL_MARKER = "NULL"

# Dimension decoration, e.g. "[0:1][1:3]=" before the opening delimiter.
_DIMENSION_PREFIX = re.compile(r"(?:\[\d+:\d+\])+=")


@dataclass(frozen=True)
class ArrayGrammar:
    """Delimiters for one array literal syntax."""

    name: str
    open: str
    close: str
    quote: str = '"'
    separator: str = ","
    escape: str = "\\"

    @property
    def specials(self) -> frozenset:
        """Characters that end an unquoted token."""
        return frozenset((self.open, self.close, self.quote, self.separator))


BRACE_GRAMMAR = ArrayGrammar(name="brace", open="{", close="}")
BRACKET_GRAMMAR = ArrayGrammar(name="bracket", open="[", close="]")


class ArrayLiteralParser:
    """Single-use scanner turning an array literal into nested lists.

    State is a stack of open containers plus one buffer of characters
    recorded for the next scalar token. The buffer is flushed into the
    top container at every separator and closing delimiter.
    """

    def __init__(
        self,
        source: str,
        converter: Optional[Converter] = None,
        grammar: ArrayGrammar = BRACE_GRAMMAR,
    ) -> None:
        self._source = source
        self._length = len(source)
        self._converter = converter
        self._grammar = grammar
        self._specials = grammar.specials
        self._pos = 0
        self._stack: List[list] = [[]]
        self._recorded: List[str] = []
        self._used = False

    @property
    def grammar(self) -> ArrayGrammar:
        return self._grammar

    def parse(self) -> list:
        """Parse the source and return the top-level list.

        Raises:
            MalformedArrayError: On structural violations.
            UnterminatedArrayError: If the input ends inside an array or a
                quoted element.
        """
        if self._used:
            raise RuntimeError("ArrayLiteralParser instances are single-use")
        self._used = True

        grammar = self._grammar
        source = self._source
        if not source:
            raise MalformedArrayError("invalid array, empty string", 0)

        prefix = _DIMENSION_PREFIX.match(source)
        if prefix:
            self._pos = prefix.end()
        if self._pos >= self._length or source[self._pos] != grammar.open:
            raise MalformedArrayError(
                f"invalid array, doesn't start with {grammar.open}", self._pos
            )
        self._pos += 1

        while self._pos < self._length:
            char = source[self._pos]
            if char == grammar.separator:
                self._pos += 1
                self._new_entry()
            elif char == grammar.quote:
                self._read_quoted()
                self._new_entry(include_empty=True)
            elif char == grammar.open:
                if self._recorded:
                    raise MalformedArrayError(
                        "invalid array, opening delimiter with existing recorded data",
                        self._pos,
                    )
                self._pos += 1
                nested: list = []
                self._stack[-1].append(nested)
                self._stack.append(nested)
            elif char == grammar.close:
                self._pos += 1
                self._new_entry()
                if len(self._stack) == 1:
                    if self._pos < self._length:
                        raise MalformedArrayError(
                            "invalid array, trailing input after closing delimiter",
                            self._pos,
                        )
                    return self._stack.pop()
                self._stack.pop()
            else:
                self._read_unquoted()

        raise UnterminatedArrayError(
            f"invalid array, input ended with {len(self._stack)} unclosed array(s)",
            self._pos,
        )

    def _new_entry(self, include_empty: bool = False) -> None:
        """Move the recorded token into the current container.

        An empty buffer is only flushed for an explicit quoted element, and
        only an unquoted NULL token becomes None.
        """
        if not self._recorded and not include_empty:
            return
        entry: Any = "".join(self._recorded)
        self._recorded = []
        if entry == NULL_MARKER and not include_empty:
            entry = None
        elif self._converter is not None:
            entry = self._converter(entry)
        self._stack[-1].append(entry)

    def _read_unquoted(self) -> None:
        source = self._source
        start = self._pos
        end = start
        while end < self._length and source[end] not in self._specials:
            end += 1
        self._recorded.append(source[start:end])
        self._pos = end

    def _read_quoted(self) -> None:
        grammar = self._grammar
        source = self._source
        start = self._pos
        if self._recorded:
            raise MalformedArrayError(
                "invalid array, opening quote with existing recorded data", start
            )
        self._pos += 1

        while self._pos < self._length:
            char = source[self._pos]
            if char == grammar.escape:
                if self._pos + 1 >= self._length:
                    break
                self._recorded.append(source[self._pos + 1])
                self._pos += 2
            elif char == grammar.quote:
                self._pos += 1
                following = source[self._pos : self._pos + 1]
                if following not in (grammar.separator, grammar.close):
                    raise MalformedArrayError(
                        "invalid array, closing quote not followed by "
                        f"'{grammar.separator}' or '{grammar.close}'",
                        self._pos,
                    )
                return
            else:
                end = self._pos
                while end < self._length and source[end] not in (grammar.quote, grammar.escape):
                    end += 1
                self._recorded.append(source[self._pos : end])
                self._pos = end

        raise UnterminatedArrayError("invalid array, unterminated quoted element", start)


def parse_array(
    source: str,
    converter: Optional[Converter] = None,
    grammar: ArrayGrammar = BRACE_GRAMMAR,
) -> list:
    """Parse an array literal into nested lists.

    Example:
        >>> parse_array("{1,NULL,3}", int)
        [1, None, 3]
        >>> parse_array('[a,"b,c"]', grammar=BRACKET_GRAMMAR)
        ['a', 'b,c']
    """
    return ArrayLiteralParser(source, converter, grammar).parse()
