"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Key-value store access (Redis)
- Logging (Loguru)

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

from .config import (
    Config,
    LoggingConfig,
    RedisConfig,
    StorageConfig,
    StreamsConfig,
    WebConfig,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
)
from .output import setup_loguru
from .store import PipelineProtocol, Store, StoreError, connect_store, store_errors
