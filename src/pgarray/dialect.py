"""Dialect strategies for array literal syntax.

Two dialects are supported:
- "postgres": catalog output uses brace nesting ({1,2}), constructor literals
  use ARRAY[...] and carry a ::type[] cast.
- "redshift": catalog output uses bracket nesting ([1,2]), constructor literals
  use ARRAY(...) and never carry a cast.

Example:
    >>> get_dialect("PG").name
    'postgres'
    >>> REDSHIFT.cast_suffix("int4")
    ''
"""

from typing import Optional, Union

from pgarray.errors import ConfigurationError
from pgarray.parser import BRACE_GRAMMAR, BRACKET_GRAMMAR, ArrayGrammar

# Alias mappings: user-friendly names -> canonical dialect ID
DIALECT_ALIASES: dict[str, str] = {
    "postgresql": "postgres",
    "postgres": "postgres",
    "pg": "postgres",
    "redshift": "redshift",
    "rs": "redshift",
}

SUPPORTED_DIALECTS = frozenset({"postgres", "redshift"})

EMPTY_ARRAY_LITERAL = "'{}'"


def normalize_dialect(value: str) -> str:
    """Normalize a dialect value to its canonical form.

    Unknown values pass through lowercased and stripped; validation happens
    in get_dialect().
    """
    cleaned = value.strip().lower()
    return DIALECT_ALIASES.get(cleaned, cleaned)


class ArrayDialect:
    """Array syntax strategy for one SQL dialect."""

    name: str = "unspecified"
    grammar: ArrayGrammar = BRACE_GRAMMAR
    constructor_open: str = "["
    constructor_close: str = "]"
    supports_array_cast: bool = True
    supports_auto_param: bool = True

    def cast_suffix(self, element_type: Optional[str]) -> str:
        """Return the ::type[] suffix for an element type, or an empty string."""
        if element_type and self.supports_array_cast:
            return f"::{element_type}[]"
        return ""

    def column_default_sql(self, literal: str, column_type: str) -> str:
        """Render a DEFAULT clause for an array-valued column default."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class PostgresArrayDialect(ArrayDialect):
    """PostgreSQL: brace catalog output, ARRAY[...] constructor, casts."""

    name = "postgres"
    grammar = BRACE_GRAMMAR
    constructor_open = "["
    constructor_close = "]"
    supports_array_cast = True
    supports_auto_param = True

    def column_default_sql(self, literal: str, column_type: str) -> str:
        return f" DEFAULT ({literal}::{column_type})"


class RedshiftArrayDialect(ArrayDialect):
    """Redshift: bracket catalog output, ARRAY(...) constructor, no casts."""

    name = "redshift"
    grammar = BRACKET_GRAMMAR
    constructor_open = "("
    constructor_close = ")"
    supports_array_cast = False
    supports_auto_param = False

    def column_default_sql(self, literal: str, column_type: str) -> str:
        return f" DEFAULT ({literal})"


POSTGRES = PostgresArrayDialect()
REDSHIFT = RedshiftArrayDialect()

_DIALECTS: dict[str, ArrayDialect] = {
    POSTGRES.name: POSTGRES,
    REDSHIFT.name: REDSHIFT,
}


def get_dialect(dialect: Union[str, ArrayDialect, None]) -> ArrayDialect:
    """Resolve a dialect name (or alias) to its strategy object.

    Args:
        dialect: A dialect name such as "postgresql" or "redshift", an
            ArrayDialect instance (returned as-is), or None for postgres.

    Raises:
        ConfigurationError: If the name is not a supported dialect.
    """
    if isinstance(dialect, ArrayDialect):
        return dialect
    if dialect is None:
        return POSTGRES
    normalized = normalize_dialect(dialect)
    try:
        return _DIALECTS[normalized]
    except KeyError:
        allowed_list = ", ".join(sorted(SUPPORTED_DIALECTS))
        raise ConfigurationError(
            f"Unsupported array dialect: '{dialect}'. Allowed values: {allowed_list}"
        ) from None
