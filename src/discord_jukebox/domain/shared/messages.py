"""Centralized message constants for error messages, logging, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    # Queue Errors
    INVALID_QUEUE_CAPACITY = "Queue capacity must be positive"
    QUEUE_FULL = "The queue is full (max {capacity} tracks)."

    # Session Errors
    SESSION_CLOSED = "This playback session has been stopped"
    NO_PENDING_START = "No pending start for queue item {item_id}"

    # Stream Errors
    STREAM_NEEDS_ONE_SOURCE = "An audio stream needs exactly one of url or pipe"
    NO_STREAM_BACKENDS = "No stream backends configured"
    NO_STREAM_URL_IN_INFO = "No playable audio URL in extraction result"
    UNSUPPORTED_URL = "Unsupported URL: {url}"
    PIPE_PRODUCED_NO_DATA = "yt-dlp exited before producing audio (code {code}): {stderr}"
    PIPE_BINARY_MISSING = "yt-dlp executable not found: {binary}"
    BACKEND_TIMED_OUT = "timed out after {seconds:g}s"

    # Voice Errors
    GUILD_NOT_FOUND = "Guild {guild_id} not found"
    CHANNEL_NOT_VOICE = "Channel {channel_id} is not a voice channel"
    VOICE_CONNECT_TIMEOUT = "Timed out connecting to voice channel {channel_id}"
    VOICE_NO_PERMISSION = "Missing permission to join voice channel {channel_id}"
    VOICE_CLIENT_ERROR = "Voice client error: {error}"
    SINK_NOT_CONNECTED = "Voice connection for guild {guild_id} is gone"

    # Configuration Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"
    FFMPEG_REQUIRED = "ffmpeg was not found on PATH; voice playback needs it"


class ExtractionMessages:
    """One stable, user-facing message per extraction failure kind."""

    BLOCKED = (
        "YouTube blocked access to this video. "
        "Try a cover version, a topic channel upload, or a different search term."
    )
    AGE_RESTRICTED = "This video is age-restricted and can't be played."
    PRIVATE = "This video is private."
    UNAVAILABLE = "This video is unavailable or has been removed."
    RATE_LIMITED = "YouTube is rate limiting requests right now. Try again in a minute."
    UNKNOWN = "Couldn't get an audio stream for this track."
    PLAYBACK_FAILED = "The voice connection refused to play this track."


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Search Resolution
    RESOLVER_EMPTY_QUERY = "Ignoring empty query"
    RESOLVER_METADATA_HIT = "Metadata backend %s resolved %s"
    RESOLVER_METADATA_EMPTY = "Metadata backend %s returned nothing for %s"
    RESOLVER_METADATA_TIMEOUT = "Metadata backend %s timed out after %ss for %s"
    RESOLVER_METADATA_FAILED = "Metadata backend %s failed for %s: %r"
    RESOLVER_SEARCH_HIT = "Search backend %s returned %d result(s) for %r"
    RESOLVER_SEARCH_EMPTY = "Search backend %s returned no results for %r"
    RESOLVER_SEARCH_TIMEOUT = "Search backend %s timed out after %ss for %r"
    RESOLVER_SEARCH_FAILED = "Search backend %s failed for %r: %r"
    RESOLVER_NOT_FOUND = "No track found for %r"

    # Stream Extraction
    EXTRACTION_ATTEMPT = "Opening stream for %s via %s"
    EXTRACTION_SUCCEEDED = "Stream for %s opened via %s"
    EXTRACTION_BACKEND_FAILED = "Stream backend %s failed for %s: %s"
    EXTRACTION_EXHAUSTED = "All stream backends failed for %s (%s): %s"

    # yt-dlp
    YTDLP_POT_CONFIGURED = "bgutil-ytdlp-pot-provider configured (server=%s)"
    YTDLP_COOKIES_CONFIGURED = "yt-dlp cookie file configured (%s)"
    YTDLP_COOKIES_MISSING = "yt-dlp cookie file %s does not exist, ignoring"
    YTDLP_FAILED_PARSE = "Failed to parse yt-dlp entry"
    YTDLP_PIPE_STARTED = "yt-dlp pipe started (pid=%s) for %s"
    YTDLP_PIPE_KILLED = "Killed yt-dlp pipe (pid=%s)"

    # ytmusicapi / oEmbed
    YTMUSIC_SKIPPED_RESULT = "Skipping ytmusic result without videoId"
    OEMBED_HTTP_STATUS = "oEmbed returned HTTP %s for %s"

    # Suggestion Cache
    CACHE_HIT = "Cache hit for '%s'"
    CACHE_EXPIRED_CLEANED = "Cleaned %d expired cache entries"
    SUGGESTION_FAILED = "Suggestion lookup failed for %r: %r"

    # Session Lifecycle
    SESSION_CREATED = "Created playback session for guild %s"
    SESSION_REMOVED = "Removed playback session for guild %s"
    SESSION_STALE_REPLACED = "Replacing stopped session for guild %s"
    SESSION_STATE_CHANGED = "Guild %s: %s -> %s"
    SESSION_STOPPED = "Stopped session for guild %s (%d queued tracks cleared)"
    SESSION_TEARDOWN_FAILED = "Error tearing down voice for guild %s"
    SESSION_CLOSE_ALL = "Stopping %d playback session(s)"

    # Playback
    PLAYBACK_LOADING = "Loading '%s' in guild %s"
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_SKIPPED = "Skipped '%s' in guild %s"
    PLAYBACK_SKIPPED_WHILE_LOADING = "Discarding '%s' in guild %s, skipped while loading"
    PLAYBACK_DISCARDED_AFTER_STOP = "Discarding stream for '%s' in guild %s, session stopped"
    PLAYBACK_EXTRACTION_FAILED = "Could not play '%s' in guild %s: %s"
    PLAYBACK_SINK_FAILED = "Voice sink rejected '%s' in guild %s"
    PLAYBACK_UNEXPECTED_ERROR = "Unexpected error loading '%s' in guild %s"
    PLAYBACK_VOLUME_SET = "Volume set to %.2f in guild %s"
    PLAYBACK_QUEUE_EXHAUSTED = "Queue exhausted in guild %s"

    # Sink Events
    SINK_EVENT = "Sink event %s for item %s in guild %s"
    SINK_EVENT_IGNORED = "Ignoring sink event %s for stale item %s in guild %s"
    SINK_ERROR = "Sink reported error for '%s' in guild %s: %s"

    # Queue Operations
    QUEUE_ENQUEUED = "Enqueued '%s' at position %s in guild %s"
    QUEUE_FULL = "Queue full in guild %s (capacity %s)"

    # Voice Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_MOVED = "Moved to voice channel %s"
    VOICE_JOIN_FAILED = "Could not join voice channel %s in guild %s: %s"
    VOICE_STALE_CLEANUP = "Found stale voice client in guild %s, cleaning up"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"
    VOICE_TRACK_ENDED = "Voice track ended in guild %s (error: %s)"
    VOICE_CALLBACK_FAILED = "Could not deliver sink event for guild %s: %r"
    VOICE_STREAM_CLOSE_FAILED = "Error closing audio stream: %r"

    # Application Lifecycle
    BOT_STARTING = "Starting discord-jukebox in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_TIMEOUT = "Shutdown did not finish within %ss"
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    CONTAINER_OEMBED_CLOSE_FAILED = "Failed closing oEmbed session: %r"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"
    BOT_SLASH_COMMAND_ERROR = "Slash command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    BOT_LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"
    BOT_BINARY_FOUND = "%s available at %s"
    BOT_PIPE_BINARY_MISSING = "%s not found on PATH; the pipe stream fallback will fail"
    BOT_BACKENDS = "Stream backends: %s"
    BOT_GUILD_REJECTED = "Rejected /%s from guild %s (not in DISCORD__GUILD_IDS)"
    BOT_GUILD_REMOVED = "Removed from guild %s, stopping its session"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord interactions.
    """

    # Play
    PLAY_NOW_PLAYING = "🎵 Now playing: **{title}** `[{duration}]`"
    PLAY_QUEUED = "➕ Added to queue: **{title}** `[{duration}]` (Position: {position})"
    PLAY_STARTING = "⏳ Loading **{title}**, it will start shortly."
    PLAY_FAILED = "❌ Couldn't play **{title}**: {reason}"
    PLAY_CANCELLED = "⏹️ **{title}** was skipped or stopped before it started."
    PLAY_NOT_FOUND = "❌ No results found for: {query}"

    # Controls
    ACTION_PAUSED = "⏸️ Paused playback."
    ACTION_RESUMED = "▶️ Resumed playback."
    ACTION_SKIPPED = "⏭️ Skipped: **{title}**"
    ACTION_STOPPED = "⏹️ Stopped playback and cleared the queue."
    ACTION_VOLUME_SET = "🔊 Volume set to {percent}%."

    # Errors
    ERROR_OCCURRED = "❌ Something went wrong running that command. Please try again."
    ERROR_COULD_NOT_JOIN_VOICE = "❌ I couldn't join your voice channel."
    ERROR_QUEUE_FULL = "❌ The queue is full (max {capacity} tracks)."
    ERROR_SESSION_CLOSING = "❌ Playback is shutting down, try again in a moment."

    # State
    STATE_NOTHING_PLAYING = "Nothing is playing."
    STATE_NOT_PLAYING = "Nothing is playing right now."
    STATE_NOT_PAUSED = "Playback is not paused."
    STATE_NOTHING_TO_SKIP = "There is nothing to skip."
    STATE_QUEUE_EMPTY = "Queue is empty."
    STATE_NEED_TO_BE_IN_VOICE = "You need to be in a voice channel first."
    STATE_SERVER_ONLY = "This command can only be used in a server."
    STATE_GUILD_NOT_ALLOWED = "This bot is not enabled for this server."

    # Queue Embed
    EMBED_QUEUE = "📋 Queue ({total} tracks)"
    EMBED_NOW_PLAYING_FIELD = "🎵 Now Playing"
    EMBED_UP_NEXT_FIELD = "Up Next"
    EMBED_QUEUE_MORE = "... and {count} more"
    EMBED_QUEUE_FOOTER = "Total duration: {duration} · Volume: {volume}%"
