"""
Configuration management for droplist
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


@dataclass
class DriveConfig:
    """Configuration for the shared-folder source."""

    tracks_folder_name: str = ""  # Empty = play the root folder directly
    artist_folder_name: str = "artist"
    api_key: Optional[str] = None  # Enables direct media URLs instead of the proxy
    proxy_path: str = "/api/drive-file"
    request_timeout: float = 15.0
    subfolder_timeout: float = 5.0
    user_agent: str = DEFAULT_USER_AGENT

    def validate(self) -> None:
        """Validate drive configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.request_timeout <= 0 or self.subfolder_timeout <= 0:
            raise ValueError("Timeouts must be positive")
        if not self.proxy_path.startswith("/"):
            raise ValueError(f"proxy_path must be an absolute path, got {self.proxy_path!r}")


@dataclass
class QueueConfig:
    """Configuration for shuffle navigation."""

    recent_history_window: int = 2  # Recent indices avoided when regenerating
    recent_history_limit: int = 5  # Max length of the recency history

    def validate(self) -> None:
        """Validate queue configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.recent_history_window < 0:
            raise ValueError("recent_history_window must be >= 0")
        if self.recent_history_limit < 1:
            raise ValueError("recent_history_limit must be >= 1")


@dataclass
class CacheConfig:
    """Configuration for duration probing and image caching."""

    probe_batch_size: int = 3
    probe_batch_delay: float = 0.1  # seconds between batches
    probe_timeout: float = 10.0  # seconds per probe
    probe_prefix_bytes: int = 256 * 1024  # bytes fetched from remote files
    image_max_size: int = 512  # pixels, longest edge of cached artist images
    duration_cache_file: Optional[str] = None  # default: <data dir>/durations.json

    def validate(self) -> None:
        """Validate cache configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.probe_batch_size < 1:
            raise ValueError("probe_batch_size must be >= 1")
        if self.probe_batch_delay < 0:
            raise ValueError("probe_batch_delay must be >= 0")
        if self.probe_timeout <= 0:
            raise ValueError("probe_timeout must be positive")
        if self.image_max_size < 16:
            raise ValueError("image_max_size must be >= 16")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # default: <data dir>/droplist.log
    console_output: bool = False  # Also log to stderr


@dataclass
class Config:
    """Main configuration object."""

    drive: DriveConfig = field(default_factory=DriveConfig)
    queue: QueueConfig = field(default_factory=QueueConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "droplist"
    return Path.home() / ".config" / "droplist"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in the project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/droplist (or ~/.config/droplist)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "droplist"
    return Path.home() / ".local" / "share" / "droplist"


def get_duration_cache_path(config: Config) -> Path:
    """Get the path of the persisted duration cache."""
    if config.cache.duration_cache_file:
        return Path(config.cache.duration_cache_file).expanduser()
    return get_data_dir() / "durations.json"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# droplist configuration

[drive]
# Subfolder holding the tracks (leave empty to play the shared folder itself)
tracks_folder_name = ""

# Subfolder holding artist images, matched to tracks by artist name
artist_folder_name = "artist"

# API key for direct media URLs (optional, otherwise the local proxy is used)
# api_key = "your-api-key-here"

# Path of the local byte-range proxy
proxy_path = "/api/drive-file"

# Request timeouts in seconds
request_timeout = 15.0
subfolder_timeout = 5.0

[queue]
# Recently played tracks avoided when a new shuffle order is generated
recent_history_window = 2

# Number of recently played tracks remembered
recent_history_limit = 5

[cache]
# Duration probes run in batches of this size
probe_batch_size = 3

# Delay between probe batches in seconds
probe_batch_delay = 0.1

# Give up on a single probe after this many seconds
probe_timeout = 10.0

# Longest edge of cached artist images in pixels
image_max_size = 512

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Also log to stderr
console_output = false
"""


def _load_section(section_cls, data: dict, default):
    """Build a config section from TOML data, falling back to defaults.

    Unknown keys are ignored. Invalid values produce a warning and the
    default section.
    """
    known = {k: v for k, v in data.items() if k in section_cls.__dataclass_fields__}
    try:
        section = section_cls(**{**default.__dict__, **known})
        validate = getattr(section, "validate", None)
        if validate:
            validate()
        return section
    except (TypeError, ValueError) as e:
        print(f"Warning: Invalid [{section_cls.__name__}] configuration: {e}")
        print("Using default values for this section.")
        return default


def _apply_env_overrides(config: Config) -> None:
    """Environment variables override TOML values."""
    api_key = os.environ.get("DROPLIST_API_KEY") or os.environ.get("GOOGLE_API_KEY")
    if api_key:
        config.drive.api_key = api_key

    tracks_folder = os.environ.get("DROPLIST_TRACKS_FOLDER")
    if tracks_folder is not None:
        config.drive.tracks_folder_name = tracks_folder.strip()

    artist_folder = os.environ.get("DROPLIST_ARTIST_FOLDER")
    if artist_folder:
        config.drive.artist_folder_name = artist_folder.strip()


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - DROPLIST_API_KEY (or GOOGLE_API_KEY)
    - DROPLIST_TRACKS_FOLDER
    - DROPLIST_ARTIST_FOLDER
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
            print(f"Created default configuration at: {config_path}")
        except OSError as e:
            print(f"Could not write default configuration to {config_path}: {e}")
        config = Config()
        _apply_env_overrides(config)
        return config

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        config = Config()
        _apply_env_overrides(config)
        return config

    config = Config()
    if "drive" in toml_data:
        config.drive = _load_section(DriveConfig, toml_data["drive"], config.drive)
    if "queue" in toml_data:
        config.queue = _load_section(QueueConfig, toml_data["queue"], config.queue)
    if "cache" in toml_data:
        config.cache = _load_section(CacheConfig, toml_data["cache"], config.cache)
    if "logging" in toml_data:
        logging_data = dict(toml_data["logging"])
        if logging_data.get("log_file"):
            logging_data["log_file"] = str(Path(logging_data["log_file"]).expanduser())
        if "level" in logging_data:
            logging_data["level"] = str(logging_data["level"]).upper()
        config.logging = _load_section(LoggingConfig, logging_data, config.logging)

    _apply_env_overrides(config)
    return config


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
