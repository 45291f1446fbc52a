"""Typed array values and the element classification used by serializers."""

from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional, Sequence

from pgarray.errors import InvalidValueError
from pgarray.parser import BRACE_GRAMMAR, ArrayGrammar, ArrayLiteralParser, Converter


class ElementKind(str, Enum):
    """Closed set of element shapes an array may contain."""

    NULL = "null"
    ARRAY = "array"
    SCALAR = "scalar"


def is_array_like(value: Any) -> bool:
    """Return True for values treated as nested arrays (lists, tuples, ArrayValue)."""
    return isinstance(value, (ArrayValue, list, tuple))


def classify_element(value: Any) -> ElementKind:
    """Classify an element as null, nested array or scalar."""
    if value is None:
        return ElementKind.NULL
    if is_array_like(value):
        return ElementKind.ARRAY
    return ElementKind.SCALAR


class ArrayValue:
    """An ordered sequence of elements with an optional element type.

    The element type is the underlying scalar type ("int4", not "int4[]").
    When present it is used to cast the array during serialization on
    dialects that support casts. Elements are scalars, None, or nested
    ArrayValues; nested lists and tuples are copied into ArrayValues on
    construction. The value is never mutated after construction.
    """

    __slots__ = ("_elements", "_element_type")

    def __init__(self, elements: Iterable[Any] = (), element_type: Optional[str] = None) -> None:
        if isinstance(elements, ArrayValue):
            elements = elements._elements
        elif isinstance(elements, (str, bytes, bytearray, memoryview)):
            raise InvalidValueError(f"invalid value for array type: {elements!r}")
        # Nested lists and tuples are frozen into ArrayValues.
        self._elements: tuple = tuple(
            ArrayValue(element) if isinstance(element, (list, tuple)) else element
            for element in elements
        )
        self._element_type = str(element_type) if element_type is not None else None

    @property
    def element_type(self) -> Optional[str]:
        return self._element_type

    @property
    def elements(self) -> tuple:
        """The top-level elements, as stored."""
        return self._elements

    def with_type(self, element_type: Optional[str]) -> "ArrayValue":
        """Return a copy of this value tagged with another element type."""
        return ArrayValue(self._elements, element_type)

    def to_list(self) -> List[Any]:
        """Return the elements as nested plain lists."""
        return [_plain(element) for element in self._elements]

    def is_empty(self) -> bool:
        return not self._elements

    def __iter__(self) -> Iterator[Any]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __getitem__(self, index):
        return self._elements[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ArrayValue):
            return self.to_list() == other.to_list()
        if isinstance(other, (list, tuple)):
            return self.to_list() == [_plain(element) for element in other]
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._element_type is None:
            return f"ArrayValue({self.to_list()!r})"
        return f"ArrayValue({self.to_list()!r}, element_type={self._element_type!r})"


def _plain(value: Any) -> Any:
    if is_array_like(value):
        return [_plain(element) for element in value]
    return value


def pg_array(value: Any, element_type: Optional[str] = None) -> ArrayValue:
    """Wrap a plain sequence (or retag an ArrayValue) as an ArrayValue.

    An existing ArrayValue is returned unchanged when no element type is
    given or when the type already matches.

    Raises:
        InvalidValueError: If value is neither an ArrayValue nor a list/tuple.
    """
    if isinstance(value, ArrayValue):
        if element_type is None or value.element_type == element_type:
            return value
        return value.with_type(element_type)
    if isinstance(value, (list, tuple)):
        return ArrayValue(value, element_type)
    raise InvalidValueError(f"invalid value for array type: {value!r}")


class ArrayCreator:
    """Callable that parses catalog text into an ArrayValue of one array kind."""

    def __init__(
        self,
        array_type: str,
        converter: Optional[Converter] = None,
        grammar: ArrayGrammar = BRACE_GRAMMAR,
    ) -> None:
        self.type = array_type
        self.converter = converter
        self.grammar = grammar

    def __call__(self, text: str) -> ArrayValue:
        elements = ArrayLiteralParser(text, self.converter, self.grammar).parse()
        return ArrayValue(elements, self.type)

    def __repr__(self) -> str:
        return f"ArrayCreator(type={self.type!r}, grammar={self.grammar.name!r})"


def element_sequence(value: Any) -> Sequence[Any]:
    """Return the elements of an ArrayValue or plain sequence."""
    if isinstance(value, ArrayValue):
        return value.elements
    if isinstance(value, (list, tuple)):
        return value
    raise InvalidValueError(f"invalid value for array type: {value!r}")
