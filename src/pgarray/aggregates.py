"""Dialect-aware SQL for aggregate functions.

These generators only read the dialect tag; they do not touch the array
registry. Expressions are column names (rendered as quoted identifiers) or
Raw SQL fragments. Ordering terms may be (expression, "ASC"|"DESC") pairs.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from sqlglot import exp

from pgarray.dialect import ArrayDialect, get_dialect
from pgarray.errors import ConfigurationError
from pgarray.literal import Raw, literal_value

Expression = Union[str, Raw]
OrderTerm = Union[Expression, Tuple[Expression, str]]

_DIRECTIONS = {"ASC", "DESC"}


def _expr_sql(expr: Expression, dialect: ArrayDialect) -> str:
    if isinstance(expr, Raw):
        return str(expr)
    return exp.to_identifier(expr, quoted=True).sql(dialect=dialect.name)


def _order_sql(terms: Tuple[OrderTerm, ...], dialect: ArrayDialect) -> str:
    rendered = []
    for term in terms:
        if isinstance(term, tuple):
            expr, direction = term
            direction = direction.upper()
            if direction not in _DIRECTIONS:
                raise ConfigurationError(f"invalid sort direction: {direction!r}")
            rendered.append(f"{_expr_sql(expr, dialect)} {direction}")
        else:
            rendered.append(_expr_sql(term, dialect))
    return ", ".join(rendered)


@dataclass(frozen=True)
class Median:
    """Median of an expression."""

    expr: Expression


@dataclass(frozen=True)
class StringAgg:
    """Aggregate string concatenation of an expression."""

    expr: Expression
    separator: Optional[str] = None
    order_terms: Tuple[OrderTerm, ...] = ()
    is_distinct: bool = False

    def order(self, *terms: OrderTerm) -> "StringAgg":
        """Return a copy ordered by terms; no terms removes the ordering."""
        return replace(self, order_terms=tuple(terms))

    def distinct(self) -> "StringAgg":
        """Return a copy that aggregates distinct values."""
        return replace(self, is_distinct=True)


def median_sql(median: Union[Median, Expression], dialect: Union[str, ArrayDialect]) -> str:
    """Render a median aggregate.

    Example:
        >>> median_sql("revenue", "redshift")
        'median("revenue")'
    """
    resolved = get_dialect(dialect)
    expr = median.expr if isinstance(median, Median) else median
    if resolved.name == "postgres":
        return f"percentile_disc(0.5) WITHIN GROUP (ORDER BY {_expr_sql(expr, resolved)})"
    if resolved.name == "redshift":
        return f"median({_expr_sql(expr, resolved)})"
    raise ConfigurationError(f"median is not implemented on {resolved.name}")


def string_agg_sql(agg: StringAgg, dialect: Union[str, ArrayDialect]) -> str:
    """Render a string aggregation.

    Redshift uses LISTAGG ... WITHIN GROUP, which requires an ordering and
    does not support DISTINCT here.

    Raises:
        ConfigurationError: For DISTINCT on Redshift.
    """
    resolved = get_dialect(dialect)
    expr = _expr_sql(agg.expr, resolved)
    separator = literal_value(agg.separator if agg.separator is not None else ",", resolved)

    if resolved.name == "redshift":
        if agg.is_distinct:
            raise ConfigurationError("string_agg with distinct is not implemented on redshift")
        order = _order_sql(agg.order_terms, resolved) if agg.order_terms else "1"
        return f"listagg({expr}, {separator}) WITHIN GROUP (ORDER BY {order})"

    distinct = "DISTINCT " if agg.is_distinct else ""
    order = f" ORDER BY {_order_sql(agg.order_terms, resolved)}" if agg.order_terms else ""
    return f"string_agg({distinct}{expr}, {separator}{order})"
