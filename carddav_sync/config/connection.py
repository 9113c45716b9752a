"""
Server connection settings.

Turns the flat configuration dictionary (YAML file merged with CLI
overrides) into a typed ConnectionConfig and builds the client objects
from it.

Configuration keys:

    url: https://dav.example.com/
    username: me
    password: secret            # or
    password_env: CARDDAV_PASSWORD
    timeout: 30
    verify_ssl: true
    id_max_attempts: 10
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from carddav_sync.carddav.adapter import CardDAVAdapter
from carddav_sync.carddav.ids import DEFAULT_MAX_ATTEMPTS
from carddav_sync.config.loader import ConfigError
from carddav_sync.dav.client import DEFAULT_TIMEOUT, WebDAVClient

logger = logging.getLogger(__name__)


@dataclass
class ConnectionConfig:
    """
    Connection settings for one CardDAV server.

    Attributes:
        url: Server base URL
        username: Basic auth user name, or None for no auth
        password: Basic auth password
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify TLS certificates
        id_max_attempts: Retry cap for new resource ids
    """

    url: str
    username: str | None = None
    password: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    id_max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConnectionConfig:
        """
        Create a ConnectionConfig from a configuration dictionary.

        The password is read from ``password`` or, if absent, from the
        environment variable named by ``password_env``.

        Raises:
            ConfigError: If no server url is configured or the
                         password variable is not set
        """
        url = data.get("url")
        if not url:
            raise ConfigError(
                "No server url configured. Set 'url' in config.yaml or pass --url."
            )

        password = data.get("password")
        password_env = data.get("password_env")
        if password is None and password_env:
            password = os.environ.get(password_env)
            if password is None:
                raise ConfigError(
                    f"Environment variable {password_env} (password_env) is not set"
                )

        return cls(
            url=url,
            username=data.get("username"),
            password=password,
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            verify_ssl=data.get("verify_ssl", True),
            id_max_attempts=data.get("id_max_attempts", DEFAULT_MAX_ATTEMPTS),
        )

    def create_client(self) -> WebDAVClient:
        return WebDAVClient(
            self.url,
            username=self.username,
            password=self.password,
            timeout=self.timeout,
            verify=self.verify_ssl,
        )

    def create_adapter(self) -> CardDAVAdapter:
        logger.debug(f"Connecting to {self.url} as {self.username or 'anonymous'}")
        return CardDAVAdapter(self.create_client(), id_max_attempts=self.id_max_attempts)
