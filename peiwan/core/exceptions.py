"""
Domain exceptions raised by the settlement services.

Exception Hierarchy:
    PeiwanError (base)
    ├── NotFoundError - gift, order, withdrawal, account or config row missing
    ├── InvalidStateError - entity state forbids the operation
    ├── InsufficientBalanceError - withdrawal exceeds available balance
    └── ValidationError - argument outside the accepted range

Services raise these and never swallow them. The HTTP layer renders
``to_dict()`` with the status code from ``HTTP_STATUS_BY_ERROR``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class PeiwanError(Exception):
    """
    Base exception for all business-rule failures.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context
    """

    default_error_code: str = "PEIWAN_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class NotFoundError(PeiwanError):
    default_error_code: str = "NOT_FOUND"


class InvalidStateError(PeiwanError):
    """
    Raised when an entity is in a state that forbids the operation, e.g.
    completing an order that is already completed or processing a
    withdrawal that was already approved.
    """

    default_error_code: str = "INVALID_STATE"


class InsufficientBalanceError(PeiwanError):
    """
    Raised when an account cannot cover a withdrawal.

    Stores the account owner, required amount and available balance for
    detailed error reporting.
    """

    default_error_code: str = "INSUFFICIENT_BALANCE"

    def __init__(self, user_id: int, *, required: Decimal, available: Decimal):
        self.user_id = user_id
        self.required = required
        self.available = available
        super().__init__(
            f"可用余额不足: 需要 {required:.2f}, 可用 {available:.2f}",
            details={
                "user_id": user_id,
                "required": str(required),
                "available": str(available),
            },
        )


class ValidationError(PeiwanError):
    default_error_code: str = "VALIDATION_ERROR"


HTTP_STATUS_BY_ERROR: dict[type[PeiwanError], int] = {
    NotFoundError: 404,
    InvalidStateError: 409,
    InsufficientBalanceError: 400,
    ValidationError: 422,
}


def http_status_for(exc: PeiwanError) -> int:
    for error_type in type(exc).__mro__:
        status_code = HTTP_STATUS_BY_ERROR.get(error_type)
        if status_code is not None:
            return status_code
    return 400
