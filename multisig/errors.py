"""Error values raised by the multisig canister."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """The category of a canister error."""

    NOT_IMPLEMENTED = "NotImplemented"
    INTERNAL = "Internal"
    UNAUTHORIZED = "Unauthorized"
    NOT_FOUND = "NotFound"
    BAD_REQUEST = "BadRequest"
    UNSUPPORTED = "Unsupported"
    DUPLICATE = "Duplicate"
    VALIDATION_ERROR = "ValidationError"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    SERIALIZE_ERROR = "SerializeError"
    DESERIALIZE_ERROR = "DeserializeError"

    def __str__(self) -> str:
        return self.value


@dataclass
class ValidationResponse:
    """A single failed field validation."""

    field: str = ""
    message: str = ""


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _optional(text: str | None) -> str:
    return "None" if text is None else f"Some({_quote(text)})"


class Trap(Exception):
    """The canister aborted the current call."""


class CanisterError(Exception):
    """An error returned by a canister call, built up with chained ``add_*`` calls."""

    def __init__(
        self,
        kind: ErrorKind,
        validation_errors: list[ValidationResponse] | None = None,
        timestamp: int | None = None,
    ) -> None:
        super().__init__(kind.value)
        self.kind = kind
        self.validation_errors: list[ValidationResponse] = list(validation_errors or [])
        self.timestamp = time.time_ns() if timestamp is None else timestamp
        self.tag: str | None = None
        self.message: str | None = None
        self.method_name: str | None = None
        self.info: list[str] | None = None

    @classmethod
    def internal(cls) -> CanisterError:
        return cls(ErrorKind.INTERNAL)

    @classmethod
    def not_implemented(cls) -> CanisterError:
        return cls(ErrorKind.NOT_IMPLEMENTED)

    @classmethod
    def unauthorized(cls) -> CanisterError:
        return cls(ErrorKind.UNAUTHORIZED)

    @classmethod
    def not_found(cls) -> CanisterError:
        return cls(ErrorKind.NOT_FOUND)

    @classmethod
    def bad_request(cls) -> CanisterError:
        return cls(ErrorKind.BAD_REQUEST)

    @classmethod
    def unsupported(cls) -> CanisterError:
        return cls(ErrorKind.UNSUPPORTED)

    @classmethod
    def duplicate(cls) -> CanisterError:
        return cls(ErrorKind.DUPLICATE)

    @classmethod
    def insufficient_balance(cls) -> CanisterError:
        return cls(ErrorKind.INSUFFICIENT_BALANCE)

    @classmethod
    def serialize(cls) -> CanisterError:
        return cls(ErrorKind.SERIALIZE_ERROR)

    @classmethod
    def deserialize(cls) -> CanisterError:
        return cls(ErrorKind.DESERIALIZE_ERROR)

    @classmethod
    def validation_response(
        cls, validation_errors: list[ValidationResponse]
    ) -> CanisterError:
        return cls(ErrorKind.VALIDATION_ERROR, validation_errors)

    def add_tag(self, tag: str) -> CanisterError:
        self.tag = tag
        return self

    def add_message(self, message: str) -> CanisterError:
        self.message = message
        return self

    def add_info(self, info: str) -> CanisterError:
        if self.info is None:
            self.info = []
        self.info.append(info)
        return self

    def add_method_name(self, method_name: str) -> CanisterError:
        self.method_name = method_name
        return self

    def _kind_repr(self) -> str:
        if self.kind is not ErrorKind.VALIDATION_ERROR:
            return self.kind.value
        responses = ", ".join(
            f"ValidationResponse {{ field: {_quote(r.field)}, message: {_quote(r.message)} }}"
            for r in self.validation_errors
        )
        return f"ValidationError([{responses}])"

    def __str__(self) -> str:
        if self.info is None:
            info = "None"
        else:
            info = "Some([" + ", ".join(_quote(i) for i in self.info) + "])"
        return (
            f"Error: tag: {_optional(self.tag)}, message: {_optional(self.message)}, "
            f"method_name: {_optional(self.method_name)}, "
            f"error_type: {self._kind_repr()}, info: {info}"
        )