"""Plugin metadata resolved for an action."""

from pathlib import Path

from pydantic import BaseModel, Field

from .enums import PluginRenderAvailability


class PluginActionDefinition(BaseModel):
    """What the locally installed plugin says about one action."""

    availability: PluginRenderAvailability = PluginRenderAvailability.PLUGIN_MISSING
    plugin_uuid: str = ""
    plugin_folder_path: Path | None = None
    layout_path: str | None = Field(default=None, description="Encoder layout declared by the plugin")
    encoder_icon_path: str | None = Field(default=None, description="Encoder icon declared by the plugin")
    message: str = ""
