"""Result<T> pattern — domain functions return this instead of raising exceptions for normal flow."""
from __future__ import annotations
from enum import Enum
from typing import TypeVar, Generic, Optional

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_CONTENT = "INVALID_CONTENT"
    GENERATOR_ERROR = "GENERATOR_ERROR"
    UNSUPPORTED = "UNSUPPORTED"


class Result(Generic[T]):
    def __init__(
        self,
        is_success: bool,
        value: Optional[T] = None,
        error: Optional[str] = None,
        error_kind: Optional[ErrorKind] = None,
    ):
        self.is_success = is_success
        self.value = value
        self.error = error
        self.error_kind = error_kind

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(is_success=True, value=value)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.INVALID_CONTENT) -> "Result[T]":
        return cls(is_success=False, error=error, error_kind=kind)

    @classmethod
    def not_found(cls, error: str) -> "Result[T]":
        return cls.fail(error, ErrorKind.NOT_FOUND)

    def propagate(self) -> "Result":
        """Re-wrap a failure so it can be returned from a function with a different T."""
        return Result(is_success=False, error=self.error, error_kind=self.error_kind)

    def __repr__(self) -> str:
        if self.is_success:
            return f"Result.ok({self.value!r})"
        return f"Result.fail({self.error!r}, {self.error_kind})"
