"""
Shared Domain Kernel

Contains exceptions, constrained types and messages shared across layers.
"""

from discord_jukebox.domain.shared.exceptions import (
    BusinessRuleViolationError,
    DomainError,
    InvalidOperationError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "BusinessRuleViolationError",
    "InvalidOperationError",
]
