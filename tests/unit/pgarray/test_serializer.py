"""Tests for inline array literal serialization."""

import datetime
from decimal import Decimal

import pytest

from pgarray.serializer import ArrayLiteralSerializer, array_auto_param_type, array_literal
from pgarray.value import ArrayValue


class TestPostgresLiterals:
    """ARRAY[...] constructor literals with casts."""

    def test_typed_array_gets_cast(self):
        """A type tag appends a ::type[] cast."""
        assert array_literal(ArrayValue([1, 2, 3], "int4"), "postgres") == "ARRAY[1,2,3]::int4[]"

    def test_untyped_array_has_no_cast(self):
        """Without a type tag no cast is appended."""
        assert array_literal([1, 2], "postgres") == "ARRAY[1,2]"

    def test_nested_uses_brackets(self):
        """Nested arrays use bracket nesting inside the constructor."""
        assert array_literal([[1, 2], [3, 4]], "postgres") == "ARRAY[[1,2],[3,4]]"

    def test_nested_array_values_have_no_inner_cast(self):
        """Nested ArrayValues render as plain nesting."""
        value = ArrayValue([ArrayValue([1], "int4"), ArrayValue([2], "int4")], "int4")
        assert array_literal(value, "postgres") == "ARRAY[[1],[2]]::int4[]"

    def test_empty_typed_array(self):
        """An empty typed array renders as '{}' with a cast."""
        assert array_literal(ArrayValue([], "decimal"), "postgres") == "'{}'::decimal[]"

    def test_empty_untyped_array(self):
        """An empty untyped array falls back to the constructor."""
        assert array_literal([], "postgres") == "ARRAY[]"

    def test_scalars_are_literalized(self):
        """Strings are quoted, NULL and booleans use keywords."""
        value = ArrayValue(["a", None, True], "text")
        assert array_literal(value, "postgres") == "ARRAY['a',NULL,TRUE]::text[]"

    def test_string_quotes_are_escaped(self):
        """Embedded single quotes are doubled."""
        assert array_literal(["it's"], "postgres") == "ARRAY['it''s']"

    def test_decimal_and_date(self):
        """Decimals render as numbers, dates as quoted ISO text."""
        value = [Decimal("1.50"), datetime.date(2024, 1, 2)]
        assert array_literal(value, "postgres") == "ARRAY[1.50,'2024-01-02']"

    def test_source_is_not_mutated(self):
        """Serializing does not change the value."""
        value = ArrayValue([[1], [2]], "int4")
        array_literal(value, "postgres")
        assert value.to_list() == [[1], [2]]
        assert value.element_type == "int4"


class TestRedshiftLiterals:
    """ARRAY(...) constructor literals without casts."""

    def test_typed_array_has_no_cast(self):
        """The type tag never produces a cast."""
        assert array_literal(ArrayValue([1, 2, 3], "int4"), "redshift") == "ARRAY(1,2,3)"

    def test_nested_uses_parentheses(self):
        """Nested arrays use parenthesized nesting."""
        assert array_literal([[1, 2], [3, 4]], "redshift") == "ARRAY((1,2),(3,4))"

    def test_empty_typed_array(self):
        """An empty typed array renders as '{}' with no cast."""
        assert array_literal(ArrayValue([], "decimal"), "redshift") == "'{}'"


class TestCustomScalarLiteral:
    """Callers can supply their own scalar literalization."""

    def test_literal_callable_is_used(self):
        """Scalar elements are delegated to the given callable."""
        serializer = ArrayLiteralSerializer("postgres", literal=lambda value: f"<{value}>")
        assert serializer.literal([1, [2]]) == "ARRAY[<1>,[<2>]]"

    def test_literal_append_extends_buffer(self):
        """literal_append writes into an existing buffer."""
        sql = ["SELECT "]
        ArrayLiteralSerializer("redshift").literal_append(sql, [1])
        assert "".join(sql) == "SELECT ARRAY(1)"


class TestAutoParamType:
    """Eligibility for automatic bind-parameter substitution."""

    def test_typed_scalars_are_eligible(self):
        """A typed array of parameterizable scalars reports its cast."""
        assert array_auto_param_type(ArrayValue([1, None, 3], "int4"), "postgres") == "::int4[]"

    def test_nested_elements_are_checked(self):
        """Nested arrays are eligible when all their elements are."""
        value = ArrayValue([[1, 2], [None, 4]], "int4")
        assert array_auto_param_type(value, "postgres") == "::int4[]"

    def test_untyped_is_not_eligible(self):
        """Without a type tag there is no cast to attach."""
        assert array_auto_param_type(ArrayValue([1]), "postgres") is None
        assert array_auto_param_type([1], "postgres") is None

    def test_unparameterizable_element(self):
        """An element with no placeholder type blocks auto-parameterization."""
        value = ArrayValue([1, object()], "int4")
        assert array_auto_param_type(value, "postgres") is None

    def test_redshift_is_never_eligible(self):
        """Redshift has no parameterized array cast syntax."""
        assert array_auto_param_type(ArrayValue([1], "int4"), "redshift") is None

    @pytest.mark.parametrize("dialect", ["postgres", "postgresql", "pg"])
    def test_dialect_aliases(self, dialect):
        """Dialect aliases resolve to postgres."""
        assert array_auto_param_type(ArrayValue(["a"], "text"), dialect) == "::text[]"
