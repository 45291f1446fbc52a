"""Error taxonomy for array parsing, serialization and type registration."""

from typing import Optional


class ArrayError(Exception):
    """Base class for all array subsystem errors."""


class MalformedArrayError(ArrayError, ValueError):
    """Raised when an array literal violates the literal grammar."""

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        self.position = position
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class UnterminatedArrayError(ArrayError, ValueError):
    """Raised when input ends while an array or quoted element is still open."""

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        self.position = position
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class UnknownTypeError(ArrayError, KeyError):
    """Raised when resolving an array type that was never registered."""

    def __str__(self) -> str:
        # KeyError repr()s its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class ConfigurationError(ArrayError, ValueError):
    """Raised for conflicting or unsupported configuration."""


class CatalogLookupError(ArrayError, LookupError):
    """Raised when the database catalog cannot resolve a type."""


class FrozenRegistryError(ArrayError, RuntimeError):
    """Raised when registering into a frozen type registry."""


class InvalidValueError(ArrayError, TypeError):
    """Raised when a value cannot be treated as an array."""
