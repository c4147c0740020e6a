"""Configuration management for langprofile.

Loads config from ~/.langprofile/config.json, environment variables, or defaults.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from langprofile.updater.dedup import DEFAULT_NOTIFICATION_KEY

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _default_config_dir() -> Path:
    """Return the default langprofile config directory."""
    return Path.home() / ".langprofile"


@dataclass
class StorageConfig:
    """Signal store settings."""

    backend: str = "sqlite"     # "sqlite" or "memory"
    database: str = ""


@dataclass
class UpdaterConfig:
    """Profile updater settings."""

    default_notification_key: str = DEFAULT_NOTIFICATION_KEY
    suppress_replays: bool = False
    replay_cache_size: int = 256


@dataclass
class ProfileConfig:
    """Root configuration for langprofile."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    updater: UpdaterConfig = field(default_factory=UpdaterConfig)
    frequent_min_share: float = 0.1

    config_dir: Path = field(default_factory=_default_config_dir)

    def __post_init__(self) -> None:
        """Set computed defaults after initialization."""
        if not self.storage.database:
            self.storage.database = str(self.config_dir / "profile.db")

    @property
    def database_path(self) -> Path:
        """Return the resolved database path."""
        return Path(self.storage.database)


def _load_env_overrides(config: ProfileConfig) -> None:
    """Override config values from environment variables."""
    if database := os.getenv("LANGPROFILE_DATABASE"):
        config.storage.database = database
    if backend := os.getenv("LANGPROFILE_BACKEND"):
        config.storage.backend = backend
    if suppress := os.getenv("LANGPROFILE_SUPPRESS_REPLAYS"):
        config.updater.suppress_replays = suppress.strip().lower() in _TRUE_VALUES


def _dict_to_config(data: dict, config_dir: Path | None = None) -> ProfileConfig:
    """Convert a JSON dict to a ProfileConfig."""
    config = ProfileConfig(config_dir=config_dir or _default_config_dir())

    if storage := data.get("storage"):
        config.storage.backend = storage.get("backend", config.storage.backend)
        config.storage.database = storage.get("database", config.storage.database)

    if updater := data.get("updater"):
        config.updater.default_notification_key = updater.get(
            "default_notification_key", config.updater.default_notification_key
        )
        config.updater.suppress_replays = updater.get(
            "suppress_replays", config.updater.suppress_replays
        )
        config.updater.replay_cache_size = updater.get(
            "replay_cache_size", config.updater.replay_cache_size
        )

    if profile := data.get("profile"):
        config.frequent_min_share = profile.get("frequent_min_share", config.frequent_min_share)

    return config


def _config_to_dict(config: ProfileConfig) -> dict:
    """Convert a ProfileConfig to a JSON-serializable dict."""
    return {
        "storage": {
            "backend": config.storage.backend,
            "database": config.storage.database,
        },
        "updater": {
            "default_notification_key": config.updater.default_notification_key,
            "suppress_replays": config.updater.suppress_replays,
            "replay_cache_size": config.updater.replay_cache_size,
        },
        "profile": {
            "frequent_min_share": config.frequent_min_share,
        },
    }


def load_config(config_path: Path | None = None) -> ProfileConfig:
    """Load langprofile configuration from file, env vars, and defaults.

    Priority: env vars > config file > defaults.
    Creates default config file if it doesn't exist.
    """
    config_dir = config_path.parent if config_path else _default_config_dir()
    config_file = config_path or (config_dir / "config.json")

    if config_file.exists():
        with open(config_file) as f:
            data = json.load(f)
        config = _dict_to_config(data, config_dir)
    else:
        config = ProfileConfig(config_dir=config_dir)
        config.config_dir.mkdir(parents=True, exist_ok=True)
        save_config(config, config_file)

    _load_env_overrides(config)
    return config


def save_config(config: ProfileConfig, config_path: Path | None = None) -> None:
    """Save configuration to JSON file."""
    config_file = config_path or (config.config_dir / "config.json")
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w") as f:
        json.dump(_config_to_dict(config), f, indent=2)
