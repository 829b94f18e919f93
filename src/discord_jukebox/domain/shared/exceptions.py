"""Exception hierarchy shared by every layer.

Each error carries a readable ``message`` and a stable ``code`` taken from
its class, so callers can branch on the code instead of the text.
"""

from __future__ import annotations

from typing import ClassVar


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    code: ClassVar[str] = "DOMAIN_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """A value handed to the domain is out of range."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class BusinessRuleViolationError(DomainError):
    code = "BUSINESS_RULE_VIOLATION"

    def __init__(self, rule: str, message: str | None = None) -> None:
        super().__init__(message or f"Business rule violated: {rule}")
        self.rule = rule


class InvalidOperationError(DomainError):
    """The session's state (or its being closed) forbids the operation."""

    code = "INVALID_OPERATION"

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        super().__init__(message or f"Cannot {operation} while {current_state}")
        self.operation = operation
        self.current_state = current_state
