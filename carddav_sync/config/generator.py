"""
Configuration file generator for CardDAV synchronization.

Generates a default configuration file documenting every option.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def generate_default_config() -> str:
    """
    Generate default YAML configuration with all options documented.

    Returns:
        String containing YAML configuration with comments
    """
    return """# CardDAV Sync Configuration
# ==========================
#
# Default options for carddav-sync. CLI arguments always override these.
#
# To use this configuration:
#   1. Save as ~/.carddav-sync/config.yaml (or custom location)
#   2. Uncomment and modify options as needed
#   3. Run carddav-sync commands normally

# Server
# ------

# Base URL of the CardDAV server; address book URIs are resolved against it
# url: https://dav.example.com/

# Basic auth credentials
# username: me

# Either store the password here (file is created with 0600 permissions)...
# password: secret
# ...or name an environment variable holding it
# password_env: CARDDAV_SYNC_PASSWORD

# Request timeout in seconds
# Default: 30
# timeout: 30

# Verify TLS certificates
# Default: true
# verify_ssl: true


# Sync Behavior
# -------------

# Maximum number of candidate ids probed when naming a new contact
# Default: 10
# id_max_attempts: 10


# Logging Options
# ---------------

# Enable verbose output with detailed logging
# Default: false
# verbose: false

# Directory for log files
# log_dir: /path/to/logs

# Number of log files to keep (0 disables cleanup)
# Default: 10
# log_retention_count: 10
"""


def save_config_file(
    config_path: Path, overwrite: bool = False
) -> tuple[bool, str | None]:
    """
    Save default configuration file to specified path.

    Creates parent directories if they don't exist and saves
    the configuration with secure permissions.

    Args:
        config_path: Path where the config file should be saved
        overwrite: If True, overwrite existing file. If False, fail if file exists.

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    try:
        config_path = config_path.expanduser().resolve()

        if config_path.exists() and not overwrite:
            return (
                False,
                f"Configuration file already exists: {config_path}\n"
                "Use --force to overwrite.",
            )

        config_path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)
        config_path.write_text(generate_default_config(), encoding="utf-8")

        # Readable/writable by owner only, it may hold a password
        config_path.chmod(0o600)

        logger.info(f"Created configuration file: {config_path}")
        return (True, None)

    except OSError as e:
        error_msg = f"Failed to create configuration file: {e}"
        logger.error(error_msg)
        return (False, error_msg)
