"""List supported device templates."""

import click

from sdprofile.models import ProfileTemplates


@click.command()
def templates():
    """List supported Stream Deck devices."""
    for template in ProfileTemplates.ALL:
        layout = f"{template.columns}x{template.rows} keys"
        if template.dials:
            layout += f", {template.dials} dials"
        click.echo(f"{template.id:<10} {template.label:<20} {template.device_model:<10} {layout}")
