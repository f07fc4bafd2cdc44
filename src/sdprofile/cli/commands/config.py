"""
Config commands.

Commands:
    - config show                 # Display configuration
    - config path                 # Print the config file location
    - config set --option VALUE   # Update and save configuration
    - config check                # Validate the config file
    - config reset                # Restore defaults
"""

from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from sdprofile.models import AppConfig, ProfileTemplates
from sdprofile.models.config import DEFAULT_CONFIG_PATH
from sdprofile.utils import PydanticPersistence

from ._common import fail, load_config


def _config_path(ctx: click.Context) -> Path:
    return (ctx.obj or {}).get("config_path") or DEFAULT_CONFIG_PATH


@click.group(name="config")
def config():
    """Configure sdprofile settings."""
    pass


@config.command(name="show")
@click.pass_context
def show(ctx):
    """Display the current configuration."""
    current = load_config(ctx)
    for name, value in current.model_dump(mode="json").items():
        click.echo(f"{name}: {value if value is not None else '(default)'}")


@config.command(name="path")
@click.pass_context
def path(ctx):
    """Print the configuration file location."""
    click.echo(str(_config_path(ctx)))


@config.command(name="check")
@click.pass_context
def check(ctx):
    """Check the configuration file for errors (exit status 1 if invalid)."""
    config_path = _config_path(ctx)
    is_valid, error = PydanticPersistence.validate_json(config_path, AppConfig)
    if not is_valid:
        click.echo(f"ERROR: {error}", err=True)
        ctx.exit(1)
    click.echo(f"{config_path}: OK")


@config.command(name="set")
@click.pass_context
@click.option("--work-dir", type=click.Path(file_okay=False, path_type=Path), default=None, help="Working directory root")
@click.option("--plugin-root", type=click.Path(file_okay=False, path_type=Path), default=None, help="Installed plugins folder")
@click.option("--history-depth", type=int, default=None, help="Undo/redo stack capacity")
@click.option("--max-pages", type=int, default=None, help="Maximum visible pages per profile")
@click.option("--lock-source/--unlock-source", "lock_source_profile", default=None, help="Copy instead of move into the target")
@click.option(
    "--default-template",
    type=click.Choice([t.id for t in ProfileTemplates.ALL]),
    default=None,
    help="Template for new empty profiles",
)
def set_values(
    ctx,
    work_dir: Optional[Path],
    plugin_root: Optional[Path],
    history_depth: Optional[int],
    max_pages: Optional[int],
    lock_source_profile: Optional[bool],
    default_template: Optional[str],
):
    """Update configuration values and save."""
    updates = {
        "work_dir": work_dir,
        "plugin_root": plugin_root,
        "history_depth": history_depth,
        "max_pages": max_pages,
        "lock_source_profile": lock_source_profile,
        "default_template": default_template,
    }
    updates = {name: value for name, value in updates.items() if value is not None}
    if not updates:
        click.echo("Nothing to update.")
        return

    current = load_config(ctx)
    try:
        updated = AppConfig.model_validate({**current.model_dump(), **updates})
        updated.save(_config_path(ctx))
    except (ValidationError, OSError) as e:
        fail(ctx, e)

    for name in updates:
        click.echo(f"Set {name} = {getattr(updated, name)}")


@config.command(name="reset")
@click.pass_context
@click.confirmation_option(prompt="Reset configuration to defaults?")
def reset(ctx):
    """Restore the default configuration."""
    try:
        AppConfig().save(_config_path(ctx))
    except OSError as e:
        fail(ctx, e)
    click.echo("Configuration reset to defaults.")
