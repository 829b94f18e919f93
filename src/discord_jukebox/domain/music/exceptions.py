"""Exceptions specific to the music bounded context."""

from __future__ import annotations

from ..shared.exceptions import BusinessRuleViolationError, DomainError
from ..shared.messages import ErrorMessages
from .value_objects import ExtractionAttempt, ExtractionErrorKind


class QueueFullError(BusinessRuleViolationError):
    """Raised when a push would exceed the queue capacity."""

    code = "QUEUE_FULL"

    def __init__(self, capacity: int) -> None:
        super().__init__(
            rule="MAX_QUEUE_SIZE",
            message=ErrorMessages.QUEUE_FULL.format(capacity=capacity),
        )
        self.capacity = capacity


class ExtractionFailedError(DomainError):
    """Raised when every stream backend failed for one URL.

    ``detail`` is the stable user-facing message for ``kind``; the raw backend
    errors are only kept on ``attempts`` for logging.
    """

    code = "EXTRACTION_FAILED"

    def __init__(
        self,
        kind: ExtractionErrorKind,
        detail: str,
        attempts: tuple[ExtractionAttempt, ...] = (),
    ) -> None:
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.attempts = attempts


class JoinFailedError(DomainError):
    """Raised when the voice transport could not be attached."""

    code = "JOIN_FAILED"

    def __init__(self, channel_id: int, reason: str) -> None:
        super().__init__(reason)
        self.channel_id = channel_id
        self.reason = reason


class SinkError(DomainError):
    """Raised when the voice sink refuses a stream."""

    code = "SINK_ERROR"
