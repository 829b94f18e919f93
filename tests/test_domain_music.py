"""
Unit Tests for Domain Music Layer

Tests for:
- Value Objects: PlaybackState, SinkEvent, ExtractionAttempt
- Entities: Track, QueueItem
- TrackQueue capacity and FIFO order
- Error classification
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from discord_jukebox.domain.music.entities import QueueItem, Track
from discord_jukebox.domain.music.error_classifier import classify, describe
from discord_jukebox.domain.music.exceptions import ExtractionFailedError, QueueFullError
from discord_jukebox.domain.music.queue import TrackQueue
from discord_jukebox.domain.music.value_objects import (
    ExtractionAttempt,
    ExtractionErrorKind,
    PlaybackState,
    SinkEvent,
    SinkEventKind,
)
from discord_jukebox.domain.shared.exceptions import BusinessRuleViolationError, ValidationError
from discord_jukebox.domain.shared.messages import ExtractionMessages
from discord_jukebox.domain.shared.validators import clamp_unit, validate_discord_snowflake

# =============================================================================
# PlaybackState Tests
# =============================================================================


class TestPlaybackState:
    """Unit tests for PlaybackState transitions."""

    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (PlaybackState.IDLE, PlaybackState.LOADING),
            (PlaybackState.LOADING, PlaybackState.PLAYING),
            (PlaybackState.LOADING, PlaybackState.IDLE),
            (PlaybackState.PLAYING, PlaybackState.PAUSED),
            (PlaybackState.PLAYING, PlaybackState.IDLE),
            (PlaybackState.PAUSED, PlaybackState.PLAYING),
            (PlaybackState.PAUSED, PlaybackState.IDLE),
        ],
    )
    def test_valid_transitions(self, source, target):
        assert source.can_transition_to(target) is True

    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (PlaybackState.IDLE, PlaybackState.PLAYING),
            (PlaybackState.IDLE, PlaybackState.PAUSED),
            (PlaybackState.LOADING, PlaybackState.PAUSED),
            (PlaybackState.PAUSED, PlaybackState.LOADING),
            (PlaybackState.PLAYING, PlaybackState.LOADING),
        ],
    )
    def test_invalid_transitions(self, source, target):
        assert source.can_transition_to(target) is False

    def test_active_states(self):
        """Only PLAYING and PAUSED hold a live stream in the sink."""
        assert PlaybackState.PLAYING.is_active
        assert PlaybackState.PAUSED.is_active
        assert not PlaybackState.LOADING.is_active
        assert not PlaybackState.IDLE.is_active


class TestSinkEvent:
    def test_terminal_kinds(self):
        assert SinkEvent(SinkEventKind.ENDED, "a").is_terminal
        assert SinkEvent(SinkEventKind.ERRORED, "a", "ffmpeg died").is_terminal
        assert not SinkEvent(SinkEventKind.STARTED, "a").is_terminal

    def test_attempt_str(self):
        attempt = ExtractionAttempt(backend="yt-dlp", raw_error="HTTP Error 403")
        assert str(attempt) == "yt-dlp: HTTP Error 403"


# =============================================================================
# Track / QueueItem Entity Tests
# =============================================================================


class TestTrack:
    """Unit tests for the Track value object."""

    def test_create_track(self, sample_track):
        assert sample_track.title == "Test Song 1"
        assert sample_track.duration_seconds == 180
        assert sample_track.requested_by == ""

    def test_track_is_frozen(self, sample_track):
        with pytest.raises(PydanticValidationError):
            sample_track.title = "Other"

    def test_rejects_non_http_url(self):
        with pytest.raises(PydanticValidationError):
            Track(title="x", source_url="ftp://example.com/a.mp3")

    def test_rejects_empty_title(self):
        with pytest.raises(PydanticValidationError):
            Track(title="", source_url="https://example.com/a")

    def test_rejects_negative_duration(self):
        with pytest.raises(PydanticValidationError):
            Track(title="x", source_url="https://example.com/a", duration_ms=-1)

    @pytest.mark.parametrize(
        ("duration_ms", "expected"),
        [
            (0, "Live"),
            (59_000, "0:59"),
            (185_000, "3:05"),
            (3_725_000, "1:02:05"),
        ],
    )
    def test_duration_formatted(self, duration_ms, expected):
        track = Track(title="x", source_url="https://example.com/a", duration_ms=duration_ms)
        assert track.duration_formatted == expected

    def test_with_requester_returns_copy(self, sample_track):
        tagged = sample_track.with_requester("alice")

        assert tagged.requested_by == "alice"
        assert sample_track.requested_by == ""
        assert tagged.source_url == sample_track.source_url


class TestQueueItem:
    def test_items_get_distinct_ids(self, sample_track):
        first = QueueItem(track=sample_track)
        second = QueueItem(track=sample_track)

        assert first.id != second.id
        assert first.title == sample_track.title
        assert first.source_url == sample_track.source_url

    def test_enqueued_at_is_utc(self, sample_track):
        item = QueueItem(track=sample_track)
        assert item.enqueued_at.tzinfo is not None

    def test_with_error_keeps_identity(self, sample_track):
        item = QueueItem(track=sample_track)
        failed = item.with_error(ExtractionMessages.BLOCKED)

        assert failed.id == item.id
        assert failed.last_error == ExtractionMessages.BLOCKED
        assert item.last_error is None


# =============================================================================
# TrackQueue Tests
# =============================================================================


class TestTrackQueue:
    """Unit tests for the bounded FIFO."""

    def test_non_positive_capacity_rejected(self):
        with pytest.raises(ValidationError):
            TrackQueue(0)

    def test_fifo_order(self, make_track):
        queue = TrackQueue(5)
        for n in (1, 2, 3):
            queue.push(make_track(n))

        titles = [queue.pop_front().title for _ in range(3)]

        assert titles == ["Test Song 1", "Test Song 2", "Test Song 3"]
        assert queue.pop_front() is None

    def test_push_when_full_raises_and_leaves_queue(self, make_track):
        queue = TrackQueue(2)
        queue.push(make_track(1))
        queue.push(make_track(2))

        with pytest.raises(QueueFullError) as exc_info:
            queue.push(make_track(3))

        assert exc_info.value.capacity == 2
        assert isinstance(exc_info.value, BusinessRuleViolationError)
        assert len(queue) == 2
        assert queue.is_full

    def test_position_of(self, make_track):
        queue = TrackQueue(5)
        first = queue.push(make_track(1))
        second = queue.push(make_track(2))

        assert queue.position_of(first.id) == 1
        assert queue.position_of(second.id) == 2
        assert queue.position_of("missing") is None

    def test_peek_all_returns_copy(self, make_track):
        queue = TrackQueue(5)
        queue.push(make_track(1))

        snapshot = queue.peek_all()
        snapshot.clear()

        assert len(queue) == 1

    def test_clear_returns_count(self, make_track):
        queue = TrackQueue(5)
        queue.push(make_track(1))
        queue.push(make_track(2))

        assert queue.clear() == 2
        assert len(queue) == 0
        assert queue.clear() == 0

    def test_total_duration(self, make_track):
        queue = TrackQueue(5)
        queue.push(make_track(1, duration_ms=60_000))
        queue.push(make_track(2, duration_ms=90_000))

        assert queue.total_duration_ms == 150_000


# =============================================================================
# Error Classification Tests
# =============================================================================


class TestClassify:
    """Raw backend text maps onto the closed set of kinds."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("HTTP Error 429: Too Many Requests", ExtractionErrorKind.RATE_LIMITED),
            ("you are being rate-limited", ExtractionErrorKind.RATE_LIMITED),
            ("Sign in to confirm your age", ExtractionErrorKind.AGE_RESTRICTED),
            ("This video may be inappropriate for some users", ExtractionErrorKind.AGE_RESTRICTED),
            ("Private video. Sign in if you've been granted access", ExtractionErrorKind.PRIVATE),
            ("Sign in to confirm you're not a bot", ExtractionErrorKind.BLOCKED),
            ("HTTP Error 403: Forbidden", ExtractionErrorKind.BLOCKED),
            ("HTTP Error 410: Gone", ExtractionErrorKind.BLOCKED),
            ("Video unavailable", ExtractionErrorKind.UNAVAILABLE),
            ("This video has been removed by the uploader", ExtractionErrorKind.UNAVAILABLE),
            ("Unable to extract player response", ExtractionErrorKind.UNKNOWN),
            ("", ExtractionErrorKind.UNKNOWN),
        ],
    )
    def test_classify(self, raw, expected):
        assert classify(raw) is expected

    def test_rate_limit_wins_over_blocked(self):
        assert classify("403 Forbidden; then 429 Too Many Requests") is ExtractionErrorKind.RATE_LIMITED

    def test_every_kind_has_a_message(self):
        for kind in ExtractionErrorKind:
            assert describe(kind)

    def test_extraction_failed_error_carries_kind(self):
        attempts = (ExtractionAttempt("yt-dlp", "403"),)
        error = ExtractionFailedError(
            ExtractionErrorKind.BLOCKED, describe(ExtractionErrorKind.BLOCKED), attempts
        )

        assert error.kind is ExtractionErrorKind.BLOCKED
        assert error.detail == ExtractionMessages.BLOCKED
        assert error.attempts == attempts
        assert error.code == "EXTRACTION_FAILED"


# =============================================================================
# Shared helpers
# =============================================================================


class TestSharedHelpers:
    def test_clamp_unit(self):
        assert clamp_unit(1.5) == 1.0
        assert clamp_unit(-1) == 0.0
        assert clamp_unit(0.25) == 0.25

    def test_validate_snowflake(self):
        assert validate_discord_snowflake(123) == 123
        with pytest.raises(ValueError):
            validate_discord_snowflake(0)
        with pytest.raises(ValueError):
            validate_discord_snowflake(2**64)
