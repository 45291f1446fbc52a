"""Environment-driven settings for the array subsystem."""

import os
from dataclasses import dataclass
from typing import Optional


def get_env_str(name: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """Get an environment variable as a string."""
    value = os.getenv(name)
    if value is None:
        if required:
            raise KeyError(f"Environment variable '{name}' is required but not set.")
        return default
    return value


def get_env_float(
    name: str, default: Optional[float] = None, required: bool = False
) -> Optional[float]:
    """Get an environment variable as a float."""
    value = os.getenv(name)
    if value is None:
        if required:
            raise KeyError(f"Environment variable '{name}' is required but not set.")
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable '{name}' must be a float, got '{value}'.")


def get_env_bool(
    name: str, default: Optional[bool] = None, required: bool = False
) -> Optional[bool]:
    """Get an environment variable as a boolean.

    Truthy: true, 1, yes, on
    Falsey: false, 0, no, off, (empty string)
    """
    value = os.getenv(name)
    if value is None:
        if required:
            raise KeyError(f"Environment variable '{name}' is required but not set.")
        return default

    val_lower = value.lower()
    if val_lower in ("true", "1", "yes", "on"):
        return True
    if val_lower in ("false", "0", "no", "off", ""):
        return False

    raise ValueError(f"Environment variable '{name}' must be a boolean, got '{value}'.")


@dataclass(frozen=True)
class ArraySettings:
    """Runtime settings for an ArrayDatabase.

    Attributes:
        dialect: Canonical dialect name ("postgres" or "redshift").
        catalog_timeout: Seconds allowed for a catalog snapshot fetch.
        trace_catalog: Emit OTEL spans around catalog fetches.
    """

    dialect: str = "postgres"
    catalog_timeout: float = 10.0
    trace_catalog: bool = False

    @classmethod
    def from_env(cls) -> "ArraySettings":
        """Build settings from ARRAY_* environment variables.

        Raises:
            ValueError: If ARRAY_DIALECT names an unsupported dialect or a
                numeric/boolean variable cannot be parsed.
        """
        from pgarray.dialect import SUPPORTED_DIALECTS, normalize_dialect

        raw_dialect = get_env_str("ARRAY_DIALECT")
        dialect = "postgres"
        if raw_dialect is not None:
            dialect = normalize_dialect(raw_dialect)
            if dialect not in SUPPORTED_DIALECTS:
                allowed_list = ", ".join(sorted(SUPPORTED_DIALECTS))
                raise ValueError(
                    f"Invalid dialect for ARRAY_DIALECT: '{raw_dialect}'. "
                    f"Allowed values: {allowed_list}"
                )

        timeout = get_env_float("ARRAY_CATALOG_TIMEOUT", 10.0)
        if timeout is not None and timeout <= 0:
            raise ValueError(f"ARRAY_CATALOG_TIMEOUT must be positive, got {timeout}.")

        return cls(
            dialect=dialect,
            catalog_timeout=timeout,
            trace_catalog=bool(get_env_bool("ARRAY_TRACE_CATALOG", False)),
        )
