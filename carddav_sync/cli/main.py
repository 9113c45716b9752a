"""
Command-line interface for carddav_sync.

Provides CLI commands for inspecting change tags, synchronizing an address
book and naming new contacts on a CardDAV server.

Usage:
    # Show help
    carddav-sync --help

    # Write a default config file
    carddav-sync init-config

    # Change detection
    carddav-sync ctag /addressbooks/me/default/
    carddav-sync etags /addressbooks/me/default/

    # Initial and incremental sync
    carddav-sync sync /addressbooks/me/default/
    carddav-sync sync /addressbooks/me/default/ --token <token>

    # Fetch cards, allocate a new card URI
    carddav-sync vcards /addressbooks/me/default/
    carddav-sync new-uri /addressbooks/me/default/
"""

import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from carddav_sync import __version__
from carddav_sync.carddav.adapter import CardDAVAdapter
from carddav_sync.config.connection import ConnectionConfig
from carddav_sync.config.generator import save_config_file
from carddav_sync.config.loader import ConfigError, ConfigLoader
from carddav_sync.errors import CardDAVSyncError
from carddav_sync.utils import DEFAULT_CONFIG_DIR, resolve_config_dir
from carddav_sync.utils.logging import cleanup_old_logs, setup_logging

# Default configuration file
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"

logger = logging.getLogger(__name__)


def get_config_dir(config_dir: str | None) -> Path:
    """Get the configuration directory path."""
    return resolve_config_dir(config_dir)


def get_config_file(config_file: str | None, config_dir: Path | None = None) -> Path:
    """Get the configuration file path."""
    if config_file:
        return Path(config_file)
    if config_dir is not None:
        return config_dir / "config.yaml"
    return DEFAULT_CONFIG_FILE


def build_adapter(config: dict[str, Any]) -> CardDAVAdapter:
    """Create a CardDAVAdapter from the merged configuration."""
    return ConnectionConfig.from_dict(config).create_adapter()


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


def _adapter(ctx: click.Context) -> CardDAVAdapter:
    try:
        return build_adapter(ctx.obj["config"])
    except ConfigError as e:
        _fail(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="carddav-sync")
@click.option(
    "--verbose", "-v", is_flag=True, help="Enable verbose output with detailed logging."
)
@click.option(
    "--config-dir",
    "-c",
    type=click.Path(exists=False, file_okay=False, dir_okay=True),
    envvar="CARDDAV_SYNC_CONFIG_DIR",
    help="Configuration directory path (default: ~/.carddav-sync).",
)
@click.option(
    "--config-file",
    "-f",
    type=click.Path(exists=False, file_okay=True, dir_okay=False),
    envvar="CARDDAV_SYNC_CONFIG_FILE",
    help="Configuration file path (default: <config-dir>/config.yaml).",
)
@click.option("--url", help="CardDAV server base URL (overrides config).")
@click.option("--username", "-u", help="User name (overrides config).")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_dir: str | None,
    config_file: str | None,
    url: str | None,
    username: str | None,
) -> None:
    """
    CardDAV Address Book Sync.

    Detects changes and fetches contacts from a CardDAV server using
    sync-collection, with a full-listing fallback for servers that reject
    initial token-less syncs.
    """
    ctx.ensure_object(dict)

    resolved_config_dir = get_config_dir(config_dir)
    resolved_config_file = get_config_file(config_file, resolved_config_dir)

    ctx.obj["config_dir"] = resolved_config_dir
    ctx.obj["config_file"] = resolved_config_file

    config: dict[str, Any] = {}
    try:
        loader = ConfigLoader(config_dir=resolved_config_dir)
        config = loader.load_from_file(resolved_config_file)
        if config:
            loader.validate(config)
    except ConfigError as e:
        # Show error but don't fail - allow CLI to work without config file
        click.echo(
            click.style(f"Warning: Configuration error: {e}", fg="yellow"), err=True
        )
        config = {}

    # CLI arguments take precedence over the config file
    if url:
        config["url"] = url
    if username:
        config["username"] = username
    ctx.obj["config"] = config

    effective_verbose = verbose or config.get("verbose", False)
    ctx.obj["verbose"] = effective_verbose

    log_dir = Path(config["log_dir"]) if config.get("log_dir") else None
    setup_logging(verbose=effective_verbose, log_dir=log_dir, enable_file_logging=True)

    log_retention = config.get("log_retention_count", 10)
    if log_retention > 0:
        cleanup_old_logs(log_dir=log_dir, keep_count=log_retention)


# =============================================================================
# Config Command
# =============================================================================


@cli.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite existing configuration file if it exists.",
)
@click.pass_context
def init_config_command(ctx: click.Context, force: bool) -> None:
    """
    Generate a default configuration file.

    Creates a configuration file with all available options documented
    and commented out.
    """
    config_file = ctx.obj["config_file"]

    click.echo(f"Creating configuration file: {config_file}")

    success, error = save_config_file(config_file, overwrite=force)

    if success:
        click.echo(click.style("Configuration file created successfully!", fg="green"))
        click.echo(f"\nLocation: {config_file}")
        click.echo("\nNext steps:")
        click.echo("1. Set url and username (and a password source) in the file")
        click.echo("2. Run 'carddav-sync sync <address-book-uri>'")
    else:
        logger.error(f"Failed to create configuration file: {error}")
        _fail(str(error))


# =============================================================================
# Change Tag Commands
# =============================================================================


@cli.command("ctag")
@click.argument("uri")
@click.pass_context
def ctag_command(ctx: click.Context, uri: str) -> None:
    """Print the CTag of an address book."""
    adapter = _adapter(ctx)
    try:
        ctag = adapter.get_ctag(uri)
    except CardDAVSyncError as e:
        _fail(str(e))

    if ctag is None:
        _fail(f"Server returned no ctag for {uri}")
    click.echo(ctag)


@cli.command("etags")
@click.argument("uri")
@click.pass_context
def etags_command(ctx: click.Context, uri: str) -> None:
    """Print the ETag of every card in an address book."""
    adapter = _adapter(ctx)
    try:
        etags = adapter.get_etags(uri)
    except CardDAVSyncError as e:
        _fail(str(e))

    for href, etag in sorted(etags.items()):
        click.echo(f"{etag}\t{href}")


# =============================================================================
# Sync Command
# =============================================================================


@cli.command("sync")
@click.argument("uri")
@click.option("--token", "-t", help="Sync-token from the previous run.")
@click.option(
    "--depth",
    "-d",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="sync-level of the request.",
)
@click.pass_context
def sync_command(ctx: click.Context, uri: str, token: str | None, depth: int) -> None:
    """
    Synchronize an address book.

    Without --token an initial sync is requested. The new sync-token is
    printed last; pass it with --token on the next run.
    """
    adapter = _adapter(ctx)

    try:
        result = adapter.get_sync_collection(uri, token, depth)
    except CardDAVSyncError as e:
        logger.error(f"Sync failed: {e}")
        _fail(str(e))

    changed = result.successes()
    removed = result.removed()

    click.echo(f"Outcome: {result.outcome.value}")
    if result.is_full_snapshot:
        click.echo(
            click.style(
                "Server rejected the initial sync; result is a full snapshot.",
                fg="yellow",
            )
        )
    click.echo(f"Changed: {len(changed)}")
    click.echo(f"Removed: {len(removed)}")
    if ctx.obj.get("verbose"):
        for href in sorted(changed):
            click.echo(f"  + {href}")
        for href in sorted(removed):
            click.echo(f"  - {href}")
    click.echo(f"Sync token: {result.sync_token}")


# =============================================================================
# vCard Commands
# =============================================================================


@cli.command("vcards")
@click.argument("uri")
@click.argument("hrefs", nargs=-1)
@click.pass_context
def vcards_command(ctx: click.Context, uri: str, hrefs: tuple[str, ...]) -> None:
    """
    Print vCards from an address book.

    With no HREFS every card in the address book is fetched.
    """
    adapter = _adapter(ctx)
    try:
        vcards = adapter.get_vcards(uri, list(hrefs))
    except CardDAVSyncError as e:
        _fail(str(e))

    for href, card in vcards.items():
        click.echo(f"# {href}")
        click.echo(card.serialize())


@cli.command("new-uri")
@click.argument("base_uri")
@click.pass_context
def new_uri_command(ctx: click.Context, base_uri: str) -> None:
    """Print an unused resource URI under BASE_URI."""
    adapter = _adapter(ctx)
    try:
        click.echo(adapter.generate_vcard_uri(base_uri))
    except CardDAVSyncError as e:
        _fail(str(e))
