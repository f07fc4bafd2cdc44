"""Copy or move one action from a source profile into a target profile."""

import logging
from pathlib import Path
from typing import Optional

import click

from sdprofile.models import ControllerKind, PaneSide, ProfileTemplates
from sdprofile.services import WorkspaceService

from ._common import CONTROLLER_CHOICE, echo_report, fail, load_config

logger = logging.getLogger(__name__)


@click.command()
@click.pass_context
@click.argument("source_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--target",
    "target_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Profile to add the action to (default: a new empty profile)",
)
@click.option(
    "--template",
    "template_id",
    type=click.Choice([t.id for t in ProfileTemplates.ALL]),
    default=None,
    help="Device for the new empty target (default: the source's device)",
)
@click.option("--from", "from_coordinate", required=True, help='Source slot as "column,row"')
@click.option("--to", "to_coordinate", default=None, help="Target slot (default: same as --from)")
@click.option("--source-page", default=None, help="Source page id (default: active page)")
@click.option("--target-page", default=None, help="Target page id (default: active page)")
@click.option(
    "--controller",
    type=CONTROLLER_CHOICE,
    default=ControllerKind.KEYPAD.value,
    show_default=True,
    help="Slot kind",
)
@click.option(
    "--move/--copy",
    default=False,
    help="Remove the action from the source (only affects the in-memory source, which is not saved)",
)
def transfer(
    ctx,
    source_path: Path,
    output_path: Path,
    target_path: Optional[Path],
    template_id: Optional[str],
    from_coordinate: str,
    to_coordinate: Optional[str],
    source_page: Optional[str],
    target_page: Optional[str],
    controller: str,
    move: bool,
):
    """
    Place the action at SOURCE_PATH's --from slot into a target profile and save it as OUTPUT_PATH.

    Referenced images and folder pages are copied along with the action and
    the target's RequiredPlugins is updated.
    """
    kind = ControllerKind.from_json(controller)
    workspace = WorkspaceService(load_config(ctx))
    workspace.set_source_lock(not move)

    def check(ok: bool) -> None:
        if not ok:
            click.echo(f"ERROR: {workspace.status}", err=True)
            ctx.exit(1)

    check(workspace.load_profile_from_path(PaneSide.LEFT, source_path))
    if target_path is not None:
        check(workspace.load_profile_from_path(PaneSide.RIGHT, target_path))
    else:
        check(workspace.create_empty_target(template_id))

    if source_page:
        workspace.select_page(PaneSide.LEFT, source_page)
    if target_page:
        workspace.select_page(PaneSide.RIGHT, target_page)

    if not workspace.begin_drag(PaneSide.LEFT, kind, from_coordinate):
        fail(ctx, ValueError(f"No {kind.slot_label} action at {from_coordinate} on the source page."))

    check(workspace.drop_action(PaneSide.RIGHT, kind, to_coordinate or from_coordinate))
    click.echo(workspace.status)

    check(workspace.save_profile(PaneSide.RIGHT, output_path))
    click.echo(workspace.status)

    report = workspace.get_preflight_report(PaneSide.RIGHT)
    if report is not None:
        echo_report(report)
    logger.info(f"Transfer complete source={source_path.name} output={output_path.name}")
