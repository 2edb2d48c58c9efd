"""Error kinds and stage results for exercise acquisition.

Each stage (validation, generation, acquisition) returns a ``StageResult``
instead of raising, so the HTTP boundary can map ``error.kind`` to a status
code from a table. The exception classes are still real exceptions so a
cause can be chained onto them and logged with its traceback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    REQUEST_VALIDATION = "request_validation"
    MISSING_CREDENTIAL = "missing_credential"
    AUTH_REQUIRED = "auth_required"
    PROVIDER = "provider"
    INVALID_JSON = "invalid_json"
    SCHEMA_VIOLATION = "schema_violation"
    GENERATION_FAILED = "generation_failed"


class AcquisitionError(Exception):
    """Base class for every failure the acquisition core reports."""

    kind: ErrorKind = ErrorKind.GENERATION_FAILED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RequestValidationError(AcquisitionError):
    kind = ErrorKind.REQUEST_VALIDATION

    def __init__(self, message: str, details: list[dict] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class MissingCredentialError(AcquisitionError):
    kind = ErrorKind.MISSING_CREDENTIAL


class AuthRequiredError(AcquisitionError):
    kind = ErrorKind.AUTH_REQUIRED


class ProviderError(AcquisitionError):
    """The LLM backend failed (network error, non-2xx, unusable payload)."""

    kind = ErrorKind.PROVIDER


class InvalidJsonError(AcquisitionError):
    kind = ErrorKind.INVALID_JSON


@dataclass
class Violation:
    """A single schema violation: dotted field path and message."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class SchemaViolationError(AcquisitionError):
    kind = ErrorKind.SCHEMA_VIOLATION

    def __init__(self, violations: list[Violation]) -> None:
        summary = "; ".join(str(v) for v in violations)
        super().__init__(f"Exercise validation failed: {summary}")
        self.violations = violations


class GenerationFailedError(AcquisitionError):
    """Wraps any failure downstream of credential resolution."""

    kind = ErrorKind.GENERATION_FAILED

    def __init__(self, cause: AcquisitionError) -> None:
        super().__init__(f"Generation failed: {cause.message}")
        self.cause = cause
        self.__cause__ = cause


@dataclass
class StageResult(Generic[T]):
    """Either a value or an error, never both."""

    value: T | None = None
    error: AcquisitionError | None = field(default=None)

    @classmethod
    def success(cls, value: T) -> StageResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: AcquisitionError) -> StageResult[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the carried error if there is one."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
