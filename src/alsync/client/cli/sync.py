"""Sync command for the alsync CLI.

Commands:
- alsync: Watch mapped files and upload them to their code slots
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from alsync.client.cli.output import setup_logging
from alsync.core.config import (
    DEFAULT_CONFIG_FILE,
    ConfigError,
    ServerConfig,
    load_sync_config,
)


@click.command()
@click.option("--once", is_flag=True, help="Upload every mapping once and exit.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Mappings file.",
)
@click.option(
    "--env-file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=".env",
    show_default=True,
    help="Dotenv file holding AL_AUTH and friends.",
)
@click.option("--no-verify", is_flag=True, help="Don't read slots back after uploading.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output.")
@click.version_option(package_name="alsync")
def sync(
    once: bool,
    config_path: Path,
    env_file: Path,
    no_verify: bool,
    verbose: bool,
) -> None:
    """Upload local scripts to Adventure Land code slots.

    Watches the files listed in the config and uploads each one when it
    changes. Use --once to upload everything a single time and exit.
    """
    from alsync.client.api import HTTPClient
    from alsync.client.sync import Syncer, run_watch

    setup_logging(verbose)
    load_dotenv(env_file)

    try:
        server_config = ServerConfig.from_env()
        sync_config = load_sync_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    with HTTPClient(server_config) as client:
        syncer = Syncer(client, verify=not no_verify)

        if once:
            results = syncer.sync_all(sync_config.mappings)
            failed = len(sync_config.mappings) - len(results)
            summary = f"\nSync complete: {len(results)} uploaded"
            if failed:
                summary += click.style(f", {failed} failed", fg="red")
            click.echo(summary)
            return

        click.echo(f"Watching {len(sync_config.mappings)} file(s) on {server_config.save_url}")
        if not no_verify:
            click.echo(f"Verify via {server_config.verify_url}")
        click.echo("Press Ctrl+C to stop.\n")

        run_watch(syncer, sync_config)
