"""Service result types.

Commands and queries never raise domain errors to their callers; they
return a ServiceResult carrying either the value or the error kind.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from catalog_api.domain.exceptions import DomainError

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """Result of a catalog service operation.

    Attributes:
        value: Operation result on success.
        success: Whether the operation succeeded.
        error: Human-readable error message on failure.
        error_code: Machine-readable error kind (e.g. ``NOT_FOUND``).
        details: Structured error context.
    """

    value: T | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, value: T) -> "ServiceResult[T]":
        """Build a successful result."""
        return cls(value=value)

    @classmethod
    def failure(cls, error: DomainError) -> "ServiceResult[T]":
        """Build a failed result from a domain error.

        Args:
            error: The raised domain error.

        Returns:
            ServiceResult with the error's code, message and details.
        """
        return cls(
            success=False,
            error=error.message,
            error_code=error.error_code,
            details=dict(error.details),
        )
