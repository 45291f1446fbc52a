"""Scalar conversion procs and scalar typecasts.

Conversion procs turn the text the database returns for a scalar OID into a
Python value; they are what array parsing applies to each element. Scalar
typecasts coerce application values (already Python objects or strings)
when a plain list is cast to a registered array type.
"""

from __future__ import annotations

import datetime
import re
from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from pgarray.errors import FrozenRegistryError

Converter = Callable[[str], Any]

_TZ_HOURS_ONLY = re.compile(r"(\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?[+-]\d{2})$")
_SHORT_FRACTION = re.compile(r"(:\d{2})\.(\d{1,5})(?!\d)")
_BYTEA_ESCAPE = re.compile(r"\\\\|\\([0-7]{3})")

_TRUE_TEXT = frozenset({"t", "true", "y", "yes", "on", "1"})
_FALSE_TEXT = frozenset({"f", "false", "n", "no", "off", "0"})


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in _TRUE_TEXT:
        return True
    if lowered in _FALSE_TEXT:
        return False
    raise ValueError(f"invalid boolean text: {text!r}")


def _parse_bytea(text: str) -> bytes:
    if text.startswith("\\x"):
        return bytes.fromhex(text[2:])

    def _unescape(match: re.Match) -> str:
        if match.group(1) is None:
            return "\\"
        return chr(int(match.group(1), 8))

    return _BYTEA_ESCAPE.sub(_unescape, text).encode("latin-1")


def _pad_fraction(match: re.Match) -> str:
    return f"{match.group(1)}.{match.group(2).ljust(6, '0')}"


def _normalize_iso(text: str) -> str:
    # The server trims trailing zeros from fractions (".12") and prints whole-hour
    # offsets as "+05"; fromisoformat before 3.11 wants ".120000" and "+05:00".
    text = _SHORT_FRACTION.sub(_pad_fraction, text)
    return _TZ_HOURS_ONLY.sub(r"\1:00", text)


def _parse_date(text: str) -> Any:
    if text in ("infinity", "-infinity"):
        return text
    return datetime.date.fromisoformat(text)


def _parse_time(text: str) -> datetime.time:
    return datetime.time.fromisoformat(_normalize_iso(text))


def _parse_timestamp(text: str) -> Any:
    if text in ("infinity", "-infinity"):
        return text
    return datetime.datetime.fromisoformat(_normalize_iso(text))


# Scalar OID -> converter. Text-like types (text, varchar, name, uuid, ...)
# have no entry and stay as strings.
DEFAULT_CONVERSION_PROCS: Dict[int, Converter] = {
    16: _parse_bool,
    17: _parse_bytea,
    20: int,
    21: int,
    23: int,
    26: int,
    700: float,
    701: float,
    1700: Decimal,
    1082: _parse_date,
    1083: _parse_time,
    1114: _parse_timestamp,
    1184: _parse_timestamp,
    1266: _parse_time,
}


class ConversionProcs:
    """Mutable-until-frozen table of OID -> text converter."""

    def __init__(self, procs: Optional[Mapping[int, Converter]] = None) -> None:
        self._procs: Dict[int, Converter] = dict(procs or {})
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add(self, oid: int, proc: Converter) -> None:
        """Install a converter for an OID, replacing any previous one."""
        if self._frozen:
            raise FrozenRegistryError(f"cannot add conversion proc for OID {oid}: table is frozen")
        self._procs[int(oid)] = proc

    def discard(self, oid: int) -> None:
        """Remove the converter for an OID if one is installed."""
        if self._frozen:
            raise FrozenRegistryError(
                f"cannot remove conversion proc for OID {oid}: table is frozen"
            )
        self._procs.pop(int(oid), None)

    def get(self, oid: Optional[int]) -> Optional[Converter]:
        if oid is None:
            return None
        return self._procs.get(int(oid))

    def convert(self, oid: int, text: Optional[str]) -> Any:
        """Convert database text for an OID; unknown OIDs return the text unchanged."""
        if text is None:
            return None
        proc = self.get(oid)
        if proc is None:
            return text
        return proc(text)

    def freeze(self) -> None:
        self._frozen = True

    def __contains__(self, oid: object) -> bool:
        return oid in self._procs

    def __iter__(self) -> Iterator[int]:
        return iter(self._procs)

    def __len__(self) -> int:
        return len(self._procs)


def default_conversion_procs() -> ConversionProcs:
    """Return a fresh table seeded with the built-in scalar converters."""
    return ConversionProcs(DEFAULT_CONVERSION_PROCS)


def _cast_integer(value: Any) -> int:
    if isinstance(value, str):
        return int(value.strip())
    return int(value)


def _cast_float(value: Any) -> float:
    return float(value)


def _cast_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(str(value).strip())


def _cast_string(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _cast_boolean(value: Any) -> bool:
    if isinstance(value, str):
        return _parse_bool(value)
    return bool(value)


def _cast_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def _cast_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    return datetime.datetime.fromisoformat(_normalize_iso(str(value)))


def _cast_time(value: Any) -> datetime.time:
    if isinstance(value, datetime.datetime):
        return value.timetz()
    if isinstance(value, datetime.time):
        return value
    return datetime.time.fromisoformat(_normalize_iso(str(value)))


def _cast_blob(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


SCALAR_TYPECASTS: Dict[str, Callable[[Any], Any]] = {
    "integer": _cast_integer,
    "float": _cast_float,
    "decimal": _cast_decimal,
    "string": _cast_string,
    "boolean": _cast_boolean,
    "date": _cast_date,
    "datetime": _cast_datetime,
    "time": _cast_time,
    "blob": _cast_blob,
}


def typecast_scalar(kind: str, value: Any) -> Any:
    """Apply the named scalar typecast; None passes through.

    Raises:
        KeyError: If no typecast exists for kind.
    """
    if value is None:
        return None
    return SCALAR_TYPECASTS[kind](value)
