"""Field validation."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import CanisterError, ValidationResponse
from .text import str_len


@dataclass
class Length:
    """A minimum and maximum length."""

    min: int = 0
    max: int = 0


class ValidationType:
    """Base for the kinds of validation a field can carry."""


@dataclass
class NoValidation(ValidationType):
    """A field that is always valid."""

    def __str__(self) -> str:
        return "None"


@dataclass
class StringLength(ValidationType):
    """A string whose grapheme length must lie between ``min`` and ``max``."""

    value: str
    min: int
    max: int

    def __str__(self) -> str:
        return f"StringLength - value: {self.value}, min: {self.min}, max: {self.max}"


@dataclass
class Count(ValidationType):
    """A count that must lie between ``min`` and ``max``."""

    value: int
    min: int
    max: int

    def __str__(self) -> str:
        return f"Count - value: {self.value}, min: {self.min}, max: {self.max}"


@dataclass
class ValidateField:
    """A validation paired with the name of the field it applies to."""

    validation_type: ValidationType = field(default_factory=NoValidation)
    field: str = ""


def _check(item: ValidateField) -> ValidationResponse | None:
    name = item.field
    match item.validation_type:
        case StringLength(value, low, high):
            length = str_len(value)
            if length < low:
                return ValidationResponse(name, f"Minimum required length is {low}")
            if length > high:
                return ValidationResponse(name, f"Maximum length is {high}")
        case Count(value, low, high):
            if value < low:
                return ValidationResponse(name, f"Minimum size length is {low}")
            if value > high:
                return ValidationResponse(name, f"Maximum size is {high}")
    return None


class Validator:
    """Validates a list of fields and reports every failure at once."""

    def __init__(self, fields: list[ValidateField]) -> None:
        self.fields = list(fields)

    def validate(self) -> None:
        """Raise a validation ``CanisterError`` if any field fails."""
        errors = [r for r in map(_check, self.fields) if r is not None]
        if errors:
            raise CanisterError.validation_response(errors)