"""
carddav_sync.config - Configuration management module

Contains configuration loading, validation, and default settings.
"""

from carddav_sync.config.connection import ConnectionConfig
from carddav_sync.config.loader import ConfigError, ConfigLoader

__all__ = [
    "ConfigError",
    "ConfigLoader",
    "ConnectionConfig",
]
