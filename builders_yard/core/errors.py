"""Exception hierarchy for BuildersYard."""
from __future__ import annotations

from typing import Any, Optional


class BuildersYardError(Exception):
    """Base class for every error raised by the core."""


class ValidationError(BuildersYardError, ValueError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class RangeError(ValidationError):
    """A numeric value fell outside its configured inclusive bounds."""

    def __init__(self, field: str, value: Any, bound: str, limit: float, unit: str = ""):
        suffix = " %s" % unit if unit else ""
        if bound == "min":
            message = "%s must be at least %s%s (got %s)" % (field, limit, suffix, value)
        else:
            message = "%s must be at most %s%s (got %s)" % (field, limit, suffix, value)
        super().__init__(field, message)
        self.value = value
        self.bound = bound
        self.limit = limit


class DecodeError(BuildersYardError):
    pass


class MissingFieldError(DecodeError):
    def __init__(self, key: str, tag: Optional[str] = None):
        where = " for %s" % tag if tag else ""
        super().__init__("Specification key '%s' is missing%s" % (key, where))
        self.key = key
        self.tag = tag


class TypeMismatchError(DecodeError):
    def __init__(self, key: str, value: Any, expected: str):
        super().__init__("Specification key '%s' expects %s, got %r" % (key, expected, value))
        self.key = key
        self.value = value
        self.expected = expected


class UnknownTagError(BuildersYardError, KeyError):
    def __init__(self, tag: Any):
        super().__init__("Unknown material tag: %r" % (tag,))
        self.tag = tag

    def __str__(self) -> str:
        return self.args[0]


class ConfigError(BuildersYardError, ValueError):
    """The configuration file or one of its sections is malformed."""


class InsertVerificationFailed(BuildersYardError):
    pass


class NonPositiveQuantityError(BuildersYardError, ValueError):
    def __init__(self, quantity: Any):
        super().__init__("Quantity must be a positive integer (got %r)" % (quantity,))
        self.quantity = quantity


class NotFoundError(BuildersYardError):
    pass


class ExchangeFormatError(BuildersYardError):
    pass
