"""CLI package for carddav_sync."""

from carddav_sync.cli.main import (
    DEFAULT_CONFIG_FILE,
    build_adapter,
    cli,
    get_config_dir,
)
from carddav_sync.utils import DEFAULT_CONFIG_DIR

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_CONFIG_FILE",
    "build_adapter",
    "cli",
    "get_config_dir",
]
