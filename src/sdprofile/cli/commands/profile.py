"""Commands that read or create a single profile archive."""

from pathlib import Path

import click

from sdprofile.models import ControllerKind, ProfileArchive, ProfileTemplates, action_uuid, plugin_uuid
from sdprofile.services import (
    ImageCacheService,
    PluginCatalogService,
    PreflightValidator,
    ProfileArchiveService,
)

from ._common import echo_report, fail, load_config

PROFILE_PATH = click.Path(exists=True, dir_okay=False, path_type=Path)


def _load(ctx: click.Context, path: Path) -> ProfileArchive:
    service = ProfileArchiveService(load_config(ctx))
    try:
        return service.load_profile(path)
    except Exception as e:
        fail(ctx, e)


@click.command()
@click.pass_context
@click.argument("profile_path", type=PROFILE_PATH)
@click.option("--plugins", is_flag=True, help="Show whether each action's plugin is installed")
@click.option("--images", is_flag=True, help="Show the image file each action displays")
def inspect(ctx, profile_path: Path, plugins: bool, images: bool):
    """Show the pages and actions of a profile."""
    archive = _load(ctx, profile_path)
    config = load_config(ctx)
    catalog = PluginCatalogService(config.plugin_root) if plugins else None
    image_cache = ImageCacheService() if images else None

    click.echo(f"Name:     {archive.display_name}")
    click.echo(f"Device:   {archive.template.label} ({archive.template.id})")
    click.echo(f"Pages:    {len(archive.page_order)}")
    click.echo()

    for state in archive.pages_in_order():
        marker = "*" if state.id == archive.active_page_id else " "
        title = state.display_name or "(unnamed)"
        click.echo(f"{marker} Page {state.id}  {title}")

        for controller in (ControllerKind.KEYPAD, ControllerKind.ENCODER):
            actions = archive.get_actions(controller, state.id)
            for coordinate in sorted(actions):
                action = actions[coordinate]
                presentation = archive.describe_action(action)
                click.echo(f"    {controller.slot_label} {coordinate:<6} {presentation.display_name}")

                if catalog is not None:
                    definition = catalog.resolve_action(plugin_uuid(action), action_uuid(action))
                    click.echo(f"        plugin: {definition.availability.value} ({definition.message})")
                if image_cache is not None and presentation.image_reference:
                    image = image_cache.get_action_image(archive, action, state.id)
                    click.echo(f"        image:  {image if image is not None else 'missing'}")

    click.echo()
    echo_report(PreflightValidator().validate(archive))


@click.command()
@click.pass_context
@click.argument("profile_path", type=PROFILE_PATH)
def validate(ctx, profile_path: Path):
    """Run preflight checks on a profile (exit status 1 on errors)."""
    archive = _load(ctx, profile_path)
    report = PreflightValidator().validate(archive)
    echo_report(report)
    if report.error_count > 0:
        ctx.exit(1)


@click.command()
@click.pass_context
@click.argument("template_id", type=click.Choice([t.id for t in ProfileTemplates.ALL]))
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--name", default="Untitled Profile", show_default=True, help="Profile name")
def create(ctx, template_id: str, output_path: Path, name: str):
    """Create an empty profile for a device."""
    service = ProfileArchiveService(load_config(ctx))
    template = ProfileTemplates.get(template_id)
    try:
        archive = service.create_empty_profile(template, name)
        service.save_profile(archive, output_path)
    except Exception as e:
        fail(ctx, e)

    click.echo(f"Created {output_path} ({template.label}).")
