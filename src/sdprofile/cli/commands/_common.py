"""Helpers shared by CLI commands."""

import logging
from pathlib import Path

import click

from sdprofile.exceptions import format_error_for_display
from sdprofile.models import AppConfig, ControllerKind, PreflightReport

logger = logging.getLogger(__name__)

CONTROLLER_CHOICE = click.Choice([ControllerKind.KEYPAD.value, ControllerKind.ENCODER.value], case_sensitive=False)


def load_config(ctx: click.Context) -> AppConfig:
    """Load the configuration selected by --config-file, or the default one."""
    config_path = (ctx.obj or {}).get("config_path")
    try:
        return AppConfig.load_or_default(config_path)
    except Exception as e:
        fail(ctx, e)


def fail(ctx: click.Context, error: Exception) -> None:
    """Print an error without a traceback and exit with status 1."""
    logger.error(f"Command failed: {error!r}")

    user_message, recovery_hint = format_error_for_display(error)
    click.echo(f"ERROR: {user_message}", err=True)
    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)

    log_path: Path | None = (ctx.obj or {}).get("log_path")
    if log_path is not None:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)
    ctx.exit(1)


def echo_report(report: PreflightReport) -> None:
    click.echo(f"Preflight: {report.summary}")
    for issue in report.issues:
        click.echo(f"  {issue}")
