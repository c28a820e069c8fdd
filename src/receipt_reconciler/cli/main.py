#!/usr/bin/env python3
"""
Main CLI Entry Point for Receipt Reconciler

Provides the command-line interface for reviewing parsed receipts against a
product catalog.
"""

import logging
import os

import click

from ..core.config import get_config


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Receipt Reconciler - Fiscal Receipt to Product Catalog Matching

    Associates parsed receipt lines with catalog products by barcode and
    confidence scoring, then exports the confirmed purchase.
    """
    ctx.ensure_object(dict)

    if config_env:
        os.environ["RECONCILER_ENV"] = config_env

    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    try:
        ctx.obj["config"] = get_config()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("receipt_reconciler").setLevel(logging.DEBUG)
        click.echo("Debug logging enabled")

    if verbose:
        click.echo(f"Environment: {ctx.obj['config'].environment.value}")
        click.echo(f"Data directory: {ctx.obj['config'].data_dir}")


def _setting_label(name: str) -> str:
    """Turn a config field name into a display label."""
    return name.replace("_", " ").title()


@main.command()
def version() -> None:
    """Show version information."""
    from receipt_reconciler import __author__, __version__

    click.echo(f"Receipt Reconciler v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    click.echo("Current Configuration:")
    for name, value in ctx.obj["config"].to_dict().items():
        if isinstance(value, dict):
            click.echo(f"  {_setting_label(name)}:")
            for nested_name, nested_value in value.items():
                click.echo(f"    {_setting_label(nested_name)}: {nested_value}")
        else:
            click.echo(f"  {_setting_label(name)}: {value}")


from .reconcile import reconcile  # noqa: E402

main.add_command(reconcile)


if __name__ == "__main__":
    main()
