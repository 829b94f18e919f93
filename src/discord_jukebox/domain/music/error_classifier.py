"""Maps raw backend failure text onto the closed set of extraction error kinds."""

from __future__ import annotations

import re
from typing import Final

from discord_jukebox.domain.music.value_objects import ExtractionErrorKind
from discord_jukebox.domain.shared.messages import ExtractionMessages

# Evaluated top to bottom; the first kind with a matching marker wins.
# Age and privacy markers are checked before the generic access-denial
# markers because YouTube words both as "Sign in to confirm ...".
_RULES: Final[tuple[tuple[ExtractionErrorKind, re.Pattern[str]], ...]] = (
    (
        ExtractionErrorKind.RATE_LIMITED,
        re.compile(r"\b429\b|too many requests|rate[- ]limit", re.IGNORECASE),
    ),
    (
        ExtractionErrorKind.AGE_RESTRICTED,
        re.compile(
            r"confirm your age|age[- ]restricted|inappropriate for some users",
            re.IGNORECASE,
        ),
    ),
    (
        ExtractionErrorKind.PRIVATE,
        re.compile(r"private video|video is private", re.IGNORECASE),
    ),
    (
        ExtractionErrorKind.BLOCKED,
        re.compile(
            r"\b410\b|\b403\b|forbidden|sign in to confirm|not a bot|blocked",
            re.IGNORECASE,
        ),
    ),
    (
        ExtractionErrorKind.UNAVAILABLE,
        re.compile(
            r"video unavailable|not available|has been removed|"
            r"no longer available|does not exist",
            re.IGNORECASE,
        ),
    ),
)

_MESSAGES: Final[dict[ExtractionErrorKind, str]] = {
    ExtractionErrorKind.BLOCKED: ExtractionMessages.BLOCKED,
    ExtractionErrorKind.AGE_RESTRICTED: ExtractionMessages.AGE_RESTRICTED,
    ExtractionErrorKind.PRIVATE: ExtractionMessages.PRIVATE,
    ExtractionErrorKind.UNAVAILABLE: ExtractionMessages.UNAVAILABLE,
    ExtractionErrorKind.RATE_LIMITED: ExtractionMessages.RATE_LIMITED,
    ExtractionErrorKind.UNKNOWN: ExtractionMessages.UNKNOWN,
}


def classify(raw_error: str) -> ExtractionErrorKind:
    """Classify concatenated raw backend error text."""
    if not raw_error:
        return ExtractionErrorKind.UNKNOWN
    for kind, pattern in _RULES:
        if pattern.search(raw_error):
            return kind
    return ExtractionErrorKind.UNKNOWN


def describe(kind: ExtractionErrorKind) -> str:
    """Stable human-readable message for an error kind."""
    return _MESSAGES[kind]
