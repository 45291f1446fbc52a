"""Inline SQL literal rendering for array values."""

from functools import partial
from typing import Any, Callable, List, Optional, Sequence, Union

from pgarray.dialect import EMPTY_ARRAY_LITERAL, ArrayDialect, get_dialect
from pgarray.literal import literal_value, scalar_auto_param_type
from pgarray.value import ArrayValue, ElementKind, classify_element, element_sequence

ScalarLiteral = Callable[[Any], str]
ScalarAutoParam = Callable[[Any], Union[str, bool, None]]


class ArrayLiteralSerializer:
    """Render arrays as constructor literals for one dialect.

    Scalar elements are rendered by the `literal` callable, which defaults
    to literal_value() for the same dialect. Callers that own a richer
    literalization routine pass it in.

    Example:
        >>> ArrayLiteralSerializer("postgres").literal(ArrayValue([1, 2], "int4"))
        'ARRAY[1,2]::int4[]'
        >>> ArrayLiteralSerializer("redshift").literal(ArrayValue([[1, 2], [3, 4]]))
        'ARRAY((1,2),(3,4))'
    """

    def __init__(
        self,
        dialect: Union[str, ArrayDialect, None] = None,
        literal: Optional[ScalarLiteral] = None,
        auto_param_type: Optional[ScalarAutoParam] = None,
    ) -> None:
        self.dialect = get_dialect(dialect)
        self._literal = literal or partial(literal_value, dialect=self.dialect)
        self._auto_param_type = auto_param_type or scalar_auto_param_type

    def literal(self, value: Any) -> str:
        """Return the SQL literal for an ArrayValue or plain sequence."""
        sql: List[str] = []
        self.literal_append(sql, value)
        return "".join(sql)

    def literal_append(self, sql: List[str], value: Any) -> None:
        """Append the SQL literal for value to the sql buffer."""
        elements = element_sequence(value)
        element_type = value.element_type if isinstance(value, ArrayValue) else None
        if not elements and element_type:
            sql.append(EMPTY_ARRAY_LITERAL)
        else:
            sql.append("ARRAY")
            self._append_elements(sql, elements)
        sql.append(self.dialect.cast_suffix(element_type))

    def _append_elements(self, sql: List[str], elements: Sequence[Any]) -> None:
        sql.append(self.dialect.constructor_open)
        for index, element in enumerate(elements):
            if index:
                sql.append(",")
            if classify_element(element) is ElementKind.ARRAY:
                self._append_elements(sql, element_sequence(element))
            else:
                sql.append(self._literal(element))
        sql.append(self.dialect.constructor_close)

    def auto_param_type(self, value: Any) -> Optional[str]:
        """Return the placeholder cast (e.g. "::int4[]") if value can be a bind parameter.

        Only typed ArrayValues whose elements are all NULL or themselves
        parameterizable qualify, and never on dialects without array casts.
        """
        if not isinstance(value, ArrayValue) or not value.element_type:
            return None
        if not self.dialect.supports_auto_param:
            return None
        if all(self._element_auto_param(element) for element in value):
            return f"::{value.element_type}[]"
        return None

    def _element_auto_param(self, element: Any) -> bool:
        kind = classify_element(element)
        if kind is ElementKind.NULL:
            return True
        if kind is ElementKind.ARRAY:
            return all(self._element_auto_param(item) for item in element_sequence(element))
        return bool(self._auto_param_type(element))


def array_literal(value: Any, dialect: Union[str, ArrayDialect, None] = None) -> str:
    """Render an array as an inline SQL literal using default scalar literals."""
    return ArrayLiteralSerializer(dialect).literal(value)


def array_auto_param_type(
    value: Any, dialect: Union[str, ArrayDialect, None] = None
) -> Optional[str]:
    """Return the placeholder cast for value, or None when it must be inlined."""
    return ArrayLiteralSerializer(dialect).auto_param_type(value)
