"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from sdprofile import __version__
from sdprofile.models.config import DEFAULT_CONFIG_DIR

from .commands import config, create, inspect, templates, transfer, validate

logger = logging.getLogger(__name__)


def resolve_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    """Where log records go for the given flags."""
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "sdprofile-debug.log"
    return DEFAULT_CONFIG_DIR / "logs" / "sdprofile.log"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging in the current directory
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)
    """
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Explicit level only applies to a custom log file
    if log_file:
        level = getattr(logging, log_level.upper())

    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Keeps last 5 files, max 10MB each
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")


@click.group()
@click.pass_context
@click.version_option(version=__version__, prog_name="sdprofile")
@click.option(
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (default: ~/.sdprofile/config.json)",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v: INFO, -vv: DEBUG)")
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug mode (DEBUG level, logs to ./sdprofile-debug.log)",
)
@click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Custom log file path")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Log level for file logging (default: INFO)",
)
def cli(
    ctx,
    config_file: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str,
):
    """
    Stream Deck profile manager.

    Inspect, validate and create .streamDeckProfile archives, and copy or
    move actions between them.

    \b
    Examples:
      # List supported devices
      sdprofile templates

      # Show pages and actions of a profile
      sdprofile inspect Gaming.streamDeckProfile

      # Check a profile before importing it
      sdprofile validate Gaming.streamDeckProfile

      # Create an empty Stream Deck XL profile
      sdprofile create sdxl Empty.streamDeckProfile --name "My XL"

      # Copy key 0,0 of Gaming into a new profile
      sdprofile transfer Gaming.streamDeckProfile Out.streamDeckProfile --from 0,0 --to 1,1
    """
    setup_logging(verbose, debug, log_file, log_level)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_file
    ctx.obj["log_path"] = resolve_log_path(debug, log_file)


cli.add_command(templates)
cli.add_command(inspect)
cli.add_command(validate)
cli.add_command(create)
cli.add_command(transfer)
cli.add_command(config)


def main() -> None:
    """Console script entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        click.echo("\nInterrupted.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
