"""Command-line interface for alsync.

This module provides the main CLI entry point.
"""

from __future__ import annotations

import sys

import click

from alsync.client.cli.output import setup_logging
from alsync.client.cli.sync import sync

cli = sync


def main() -> None:
    """Entry point for the CLI."""
    try:
        cli()
    except Exception as e:
        click.echo(f"Fatal: {e}", err=True)
        sys.exit(1)


__all__ = [
    "cli",
    "main",
    "setup_logging",
]
