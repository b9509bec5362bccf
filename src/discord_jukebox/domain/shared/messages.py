"""Centralized message constants for error messages, logging, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Validation
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"
    EMPTY_SEARCH_QUERY = "Search query cannot be empty"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    UNSUPPORTED_VOICE_PCM = (
        "Discord voice needs s16le 48000 Hz stereo PCM, "
        "got {pcm_format} {sample_rate} Hz {channels} ch"
    )

    # Resolution
    EXTRACTOR_SPAWN_FAILED = "Could not start {command}: {error}"
    EXTRACTOR_TIMED_OUT = "{command} did not finish within {timeout}s"
    METADATA_API_FAILED = "Metadata API request failed: {error}"

    # Acquisition
    DOWNLOADER_SPAWN_FAILED = "Could not start downloader {command}: {error}"
    TRANSCODER_SPAWN_FAILED = "Could not start transcoder {command}: {error}"
    DOWNLOADER_NOT_READY = "Downloader produced no output within {timeout}s"
    CACHED_MEDIA_MISSING = "Download finished but {path} does not exist"
    SINK_REFUSED_STREAM = "Voice connection refused the stream"
    TRACK_UNEXPECTED_ERROR = "Unexpected error while starting the track"

    # Startup
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"
    DIRECTORY_NOT_WRITABLE = "{path}: Is not writable"
    DIRECTORY_IS_FILE = "{path}: Is not a directory"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Directory bootstrap
    DIRECTORY_OK = "%s: OK"
    DIRECTORY_CREATED = "%s: Created"
    DIRECTORIES_READY = "Directories setup complete"

    # Queue store
    QUEUE_ADDED = "Added %d track(s) to queue in guild %s (from_url=%s)"
    QUEUE_CONSUMED = "Consumed '%s' from queue in guild %s (%d left)"
    QUEUE_CLEARED = "Cleared %d track(s) from queue in guild %s"
    QUEUE_STATUS_SET = "Playing status for guild %s set to %s"
    QUEUE_DISCARDED = "Discarded queue for guild %s"

    # Resolution
    RESOLVE_STARTED = "Resolving %s for guild %s"
    RESOLVE_NATIVE_VIDEO = "Resolving YouTube video %s through the Data API"
    RESOLVE_NATIVE_PLAYLIST = "Resolving YouTube playlist %s through the Data API"
    RESOLVE_NO_API_KEY = "No YouTube API key configured, using %s for %s"
    RESOLVE_GENERIC = "Extracting %s with %s"
    RESOLVE_DONE = "Resolved %d track(s) for %s"
    EXTRACTOR_LINE_DROPPED = "Dropped unparsable extractor line (%d bytes)"
    EXTRACTOR_EXIT_CODE = "%s exited with code %s for %s"
    API_REQUEST = "YouTube API GET %s %s"
    API_ITEM_DROPPED = "Dropped playlist item without a video id: %s"
    API_PAGE_LIMIT = "Stopped paging playlist %s after %d page(s)"

    # Acquisition
    ACQUIRE_STARTED = "Acquiring stream for '%s' (%s)"
    ACQUIRE_READY = "Downloader ready for '%s'"
    ACQUIRE_DOWNLOADER_EOF = "Downloader closed stderr before any output for '%s'"
    ACQUIRE_DONE = "Stream pipeline running for '%s' (pids %s)"
    ACQUIRE_FAILED = "Acquisition failed for '%s': %s"
    STREAM_EXHAUSTED = "Stream exhausted after %d frame(s)"
    STREAM_REAPED = "Reaped %s (pid %s, exit code %s)"
    STREAM_REAP_FAILED = "Failed to reap pid %s: %r"
    CACHE_HIT = "Loaded '%s' from media cache"
    CACHE_MISS = "Downloading '%s' into media cache"

    # Engine
    ENGINE_WORKER_STARTED = "Started playback worker for guild %s"
    ENGINE_WORKER_STOPPED = "Stopped playback worker for guild %s"
    ENGINE_WORKER_ERROR = "Playback worker for guild %s failed handling %s"
    ENGINE_ADVANCE = "Advancing guild %s (%s)"
    ENGINE_TRACK_STARTED = "Started playing '%s' in guild %s"
    ENGINE_TRACK_FAILED = "Cannot play '%s' in guild %s: %s"
    ENGINE_QUEUE_FINISHED = "Queue finished in guild %s"
    ENGINE_STALE_TRACK_END = "Ignoring stale track end in guild %s (token %s, current %s)"
    ENGINE_SKIP = "Skipping current track in guild %s"
    ENGINE_SESSION_TORN_DOWN = "Tore down session for guild %s"
    ENGINE_TEARDOWN_NOOP = "Session for guild %s already torn down"
    ENGINE_TRACK_ERROR = "Unexpected error starting '%s' in guild %s"
    ENGINE_VOICE_LOST = "Voice connection lost in guild %s, dropping the session"

    # Voice
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    VOICE_UNSUPPORTED_FORMAT = "Voice connection needs s16le PCM, got %s"
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"
    PLAYBACK_STARTED = "Handed stream to voice client in guild %s (token %s)"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_FAILED_START = "Failed to start playback: %s"
    TRACK_ENDED = "Track ended in guild %s (token %s, error: %s)"
    PLAYBACK_NO_CALLBACK = "No track end callback set for guild %s"
    PLAYBACK_CALLBACK_ERROR = "Error in track end callback for guild %s: %s"

    # Commands
    ENQUEUE_FAILED = "Failed to queue %r in guild %s: %s"

    # Notifier
    NOTIFY_NO_CHANNEL = "No text channel remembered for guild %s, dropping '%s'"
    NOTIFY_SEND_FAILED = "Failed to send notification to guild %s: %r"

    # Bot lifecycle
    BOT_STARTING = "Starting bot in {environment} mode"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_YTDLP_VERSION = "Using yt-dlp %s"
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Keyboard interrupt received"
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_CONTAINER_INITIALIZED = "Container initialized"
    BOT_CONTAINER_INIT_FAILED = "Container initialization failed: %s"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_READY = "Logged in as %s (ID: %s)"
    BOT_CONNECTED_GUILDS = "Connected to %d guilds"
    BOT_SLASH_COMMAND_ERROR = "Slash command error in %s: %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message"
    BOT_SYNCED_GUILD = "Synced %d commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %d commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync globally: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error shutting down container: %s"
    BOT_VOICE_DISCONNECT_FAILED = "Voice disconnect during shutdown failed: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.0fs"
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord interactions.
    """

    # Engine notifications
    NOW_PLAYING = "Playing now {title}"
    CANNOT_PLAY = "Cannot play {title}"
    QUEUE_FINISHED = "Queue finished"
    LEFT_VOICE_CHANNEL = "Left voice channel"

    # Command replies
    JOINED = "Joined"
    CANNOT_JOIN = "Cannot join"
    SONGS_ADDED = "{count} songs added"
    SONG_ADDED = "1 song added"
    NOTHING_FOUND = "Nothing found for {query}"
    ERROR_ADDING = "Error adding to the playlist"
    SONG_SKIPPED = "Song skipped"
    QUEUE_ENDED = "Queue ended"
    NOTHING_TO_PLAY = "Nothing to play"

    # Guards
    STATE_SERVER_ONLY = "This command can only be used in a server."
    STATE_VERIFY_VOICE_FAILED = "Could not verify your voice state."
    STATE_NEED_TO_BE_IN_VOICE = "No channel found"

    ERROR_OCCURRED = "There is an error: {error}"
