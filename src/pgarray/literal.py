"""Scalar literalization shared by the array serializers.

Scalars are turned into sqlglot literal nodes so string quoting follows the
target dialect. Temporal values and non-finite floats become string
literals; binary payloads are rendered here as hex bytea literals.
"""

import datetime
import math
import uuid
from decimal import Decimal
from typing import Any, Optional, Union

from sqlglot import exp

from pgarray.dialect import get_dialect
from pgarray.errors import InvalidValueError
from pgarray.value import ArrayValue

_INT4_MIN = -(2**31)
_INT4_MAX = 2**31 - 1
_INT8_MIN = -(2**63)
_INT8_MAX = 2**63 - 1

_BINARY_TYPES = (bytes, bytearray, memoryview)


class Raw(str):
    """SQL text that is emitted verbatim, never quoted or escaped."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Raw({str.__repr__(self)})"


def float_token(value: float) -> Optional[str]:
    """Return the quoted-token spelling of a non-finite float, else None."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return None


def _to_exp_literal(value: Any) -> exp.Expression:
    """Convert a Python scalar to a sqlglot literal expression."""
    if value is None:
        return exp.Null()
    if isinstance(value, bool):
        return exp.Boolean(this=value)
    if isinstance(value, int):
        return exp.Literal.number(str(value))
    if isinstance(value, float):
        special = float_token(value)
        if special is not None:
            return exp.Literal.string(special)
        return exp.Literal.number(repr(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            return exp.Literal.string("NaN" if value.is_nan() else str(value))
        return exp.Literal.number(str(value))
    if isinstance(value, str):
        return exp.Literal.string(value)
    if isinstance(value, datetime.datetime):
        return exp.Literal.string(value.isoformat(sep=" "))
    if isinstance(value, (datetime.date, datetime.time)):
        return exp.Literal.string(value.isoformat())
    if isinstance(value, uuid.UUID):
        return exp.Literal.string(str(value))
    raise InvalidValueError(f"cannot literalize value of type {type(value).__name__}: {value!r}")


def blob_literal(value: Union[bytes, bytearray, memoryview]) -> str:
    """Render a binary payload as a hex-format bytea string literal."""
    return "'\\x" + bytes(value).hex() + "'"


def literal_value(value: Any, dialect: Any = "postgres") -> str:
    """Render a value as an inline SQL literal for the given dialect.

    Arrays (ArrayValue or plain lists/tuples) are delegated to the array
    serializer; everything else is a scalar.
    """
    resolved = get_dialect(dialect)
    if isinstance(value, (ArrayValue, list, tuple)):
        from pgarray.serializer import array_literal

        return array_literal(value, resolved)
    if isinstance(value, Raw):
        return str(value)
    if isinstance(value, _BINARY_TYPES):
        return blob_literal(value)
    return _to_exp_literal(value).sql(dialect=resolved.name)


def bound_variable_arg(value: Any) -> Any:
    """Prepare a value for out-of-band parameter binding.

    Arrays become their bound-parameter text, temporal, decimal and UUID
    values become their text input form. Other values are returned as-is.
    """
    if isinstance(value, (ArrayValue, list, tuple)):
        from pgarray.bound import bound_variable_array

        return bound_variable_array(value)
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (Decimal, uuid.UUID)):
        return str(value)
    return value


def scalar_auto_param_type(value: Any) -> Union[str, bool, None]:
    """Return the placeholder cast for a scalar, True when none is needed.

    None means the value cannot be automatically parameterized.
    """
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        if _INT4_MIN <= value <= _INT4_MAX:
            return "::int4"
        if _INT8_MIN <= value <= _INT8_MAX:
            return "::int8"
        return "::numeric"
    if isinstance(value, float):
        return "::double precision"
    if isinstance(value, Decimal):
        return "::numeric"
    if isinstance(value, str):
        return True
    if isinstance(value, _BINARY_TYPES):
        return "::bytea"
    if isinstance(value, datetime.datetime):
        return "::timestamptz" if value.tzinfo is not None else "::timestamp"
    if isinstance(value, datetime.date):
        return "::date"
    if isinstance(value, datetime.time):
        return "::time"
    if isinstance(value, uuid.UUID):
        return "::uuid"
    return None
