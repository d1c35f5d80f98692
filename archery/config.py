"""Tournament manager configuration."""

import os
from functools import lru_cache
from pathlib import Path

from .schemas import TournamentConfig
from .utils import load_json_safe

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'tournament_config.json'


@lru_cache(maxsize=1)
def get_config() -> TournamentConfig:
    """
    Load configuration from data/tournament_config.json.

    The path can be overridden with the ``ARCHERY_CONFIG`` environment
    variable. A missing or invalid file falls back to the defaults.
    Configuration is cached after first load.

    Example:
        from archery.config import get_config
        config = get_config()
        print(f"Store backend: {config.store_backend}")
    """
    config_path = Path(os.environ.get('ARCHERY_CONFIG', DEFAULT_CONFIG_PATH))
    return load_json_safe(config_path, default=TournamentConfig(), schema=TournamentConfig)


def get_admin_password() -> str:
    """Shared admin secret; ``ARCHERY_ADMIN_PASSWORD`` takes precedence over the file."""
    return os.environ.get('ARCHERY_ADMIN_PASSWORD') or get_config().admin_password


def get_store_backend() -> str:
    """Get the configured store backend (file, http or memory)."""
    return get_config().store_backend


def get_data_dir() -> Path:
    """Get the directory used by the JSON file store."""
    return Path(get_config().data_dir)


def get_backup_dir() -> Path:
    """Get the directory backups are written to."""
    return Path(get_config().backup_dir)


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
