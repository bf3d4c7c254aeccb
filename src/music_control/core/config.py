"""
Configuration management for Music Control
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


DEFAULT_HISTORY_LENGTH = 20


@dataclass
class RedisConfig:
    """Configuration for the shared key-value store."""

    url: str = ""


@dataclass
class StreamsConfig:
    """Configuration for per-stream playback behaviour."""

    # Recently played tracks excluded from random selection
    history_length: int = DEFAULT_HISTORY_LENGTH
    # Public root that track ids are appended to when building playable URLs
    music_root: str = ""

    def validate(self) -> None:
        """Validate stream configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.history_length < 1:
            raise ValueError(
                f"history_length must be at least 1, got {self.history_length}"
            )
        if not self.music_root:
            raise ValueError("music_root is required")


@dataclass
class StorageConfig:
    """Configuration for uploaded audio storage."""

    media_dir: str = field(
        default_factory=lambda: str(Path.home() / ".local" / "share" / "music-control" / "media")
    )


@dataclass
class WebConfig:
    """Configuration for the HTTP API."""

    bind: str = "0.0.0.0:8080"
    password: str = ""  # Basic auth disabled when empty
    realm: str = "PonyFest Music Control"
    allowed_origins: List[str] = field(default_factory=list)  # Empty: any origin
    ping_interval_seconds: float = 45.0

    @property
    def host(self) -> str:
        return self.bind.rsplit(":", 1)[0] or "0.0.0.0"

    @property
    def port(self) -> int:
        return int(self.bind.rsplit(":", 1)[1])


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/music-control/music-control.log)
    )
    console_output: bool = True


@dataclass
class Config:
    """Main configuration object."""

    redis: RedisConfig = field(default_factory=RedisConfig)
    streams: StreamsConfig = field(default_factory=StreamsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """Validate the settings the service cannot start without.

        Raises:
            ValueError: If a required value is missing or invalid
        """
        if not self.redis.url:
            raise ValueError("redis url is required (set REDIS_URL or [redis] url)")
        self.streams.validate()
        try:
            self.web.port
        except (IndexError, ValueError) as e:
            raise ValueError(f"invalid bind address {self.web.bind!r}") from e


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "music-control"
    return Path.home() / ".config" / "music-control"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "music-control"
    return Path.home() / ".local" / "share" / "music-control"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

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
    1. MUSIC_CONTROL_CONFIG environment variable
    2. Project root (detected via pyproject.toml) - for development
    3. Current working directory
    4. XDG_CONFIG_HOME/music-control (or ~/.config/music-control)
    """
    explicit = os.environ.get("MUSIC_CONTROL_CONFIG")
    if explicit:
        return Path(explicit).expanduser()

    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def _normalize_music_root(root: str) -> str:
    """Track URLs are built as root + id, so the root must end with a slash."""
    if root and not root.endswith("/"):
        return root + "/"
    return root


def _parse_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def _apply_toml(config: Config, toml_data: dict) -> None:
    """Overlay parsed TOML sections onto a default Config."""
    if "redis" in toml_data:
        config.redis = RedisConfig(url=toml_data["redis"].get("url", config.redis.url))

    if "streams" in toml_data:
        streams_data = toml_data["streams"]
        config.streams = StreamsConfig(
            history_length=streams_data.get(
                "history_length", config.streams.history_length
            ),
            music_root=streams_data.get("music_root", config.streams.music_root),
        )

    if "storage" in toml_data:
        media_dir = toml_data["storage"].get("media_dir", config.storage.media_dir)
        config.storage = StorageConfig(media_dir=str(Path(media_dir).expanduser()))

    if "web" in toml_data:
        web_data = toml_data["web"]
        config.web = WebConfig(
            bind=web_data.get("bind", config.web.bind),
            password=web_data.get("password", config.web.password),
            realm=web_data.get("realm", config.web.realm),
            allowed_origins=web_data.get(
                "allowed_origins", config.web.allowed_origins
            ),
            ping_interval_seconds=web_data.get(
                "ping_interval_seconds", config.web.ping_interval_seconds
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level),
            log_file=logging_data.get("log_file"),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )


def _apply_env(config: Config) -> None:
    """Environment variables override TOML values."""
    if os.environ.get("REDIS_URL"):
        config.redis.url = os.environ["REDIS_URL"]
    if os.environ.get("MUSIC_ROOT"):
        config.streams.music_root = os.environ["MUSIC_ROOT"]
    if os.environ.get("MEDIA_DIR"):
        config.storage.media_dir = os.environ["MEDIA_DIR"]
    if os.environ.get("BIND"):
        config.web.bind = os.environ["BIND"]
    if os.environ.get("MUSIC_CONTROL_PASSWORD"):
        config.web.password = os.environ["MUSIC_CONTROL_PASSWORD"]
    if os.environ.get("ALLOWED_ORIGINS"):
        config.web.allowed_origins = _parse_origins(os.environ["ALLOWED_ORIGINS"])
    if os.environ.get("LOG_LEVEL"):
        config.logging.level = os.environ["LOG_LEVEL"].upper()


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, then apply environment overrides.

    A missing file is not an error: defaults plus environment are used.

    Environment variables override TOML values:
    - REDIS_URL
    - MUSIC_ROOT
    - MEDIA_DIR
    - BIND
    - MUSIC_CONTROL_PASSWORD
    - ALLOWED_ORIGINS (comma separated)
    - LOG_LEVEL

    Raises:
        ValueError: If the TOML file exists but cannot be parsed
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config = Config()
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid configuration file {path}: {e}") from e
        _apply_toml(config, toml_data)

    _apply_env(config)
    config.streams.music_root = _normalize_music_root(config.streams.music_root)
    return config
