"""Manifest models for the archive's JSON files.

Field names follow Python conventions; aliases carry the exact key names the
Stream Deck application writes. Keys this package does not know about are
kept (`extra="allow"`) and written back on save.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from .enums import ControllerKind


class ManifestModel(BaseModel):
    """Base for manifest models: alias-keyed, tolerant of unknown keys."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_json(self) -> str:
        """Compact JSON in the archive's key naming; non-ASCII left unescaped."""
        return self.model_dump_json(by_alias=True)


class PackageManifest(ManifestModel):
    """`package.json` at the container root."""

    app_version: str | None = Field(default=None, alias="AppVersion")
    device_model: str | None = Field(default=None, alias="DeviceModel")
    device_settings: Any = Field(default=None, alias="DeviceSettings")
    format_version: int | None = Field(default=None, alias="FormatVersion")
    os_type: str | None = Field(default=None, alias="OSType")
    os_version: str | None = Field(default=None, alias="OSVersion")
    required_plugins: list[str] | None = Field(default=None, alias="RequiredPlugins")


class DeviceManifest(ManifestModel):
    model: str | None = Field(default=None, alias="Model")
    uuid: str | None = Field(default=None, alias="UUID")


class PagesManifest(ManifestModel):
    """The three page references: current, default and the listed order."""

    current: str | None = Field(default=None, alias="Current")
    default: str | None = Field(default=None, alias="Default")
    pages: list[str] | None = Field(default=None, alias="Pages")


class RootProfileManifest(ManifestModel):
    """`manifest.json` inside the `.sdProfile` root folder."""

    device: DeviceManifest | None = Field(default=None, alias="Device")
    name: str | None = Field(default=None, alias="Name")
    pages: PagesManifest | None = Field(default=None, alias="Pages")
    version: str | None = Field(default=None, alias="Version")


class ControllerManifest(ManifestModel):
    """One controller block of a page manifest."""

    actions: dict[str, Any] | None = Field(default=None, alias="Actions")
    type: str = Field(default=ControllerKind.KEYPAD.value, alias="Type")

    @model_serializer(mode="wrap")
    def _omit_null_actions(self, handler):
        data = handler(self)
        if self.actions is None:
            data.pop("Actions", None)
            data.pop("actions", None)
        return data

    @property
    def kind(self) -> ControllerKind:
        return ControllerKind.from_json(self.type)


class PageManifest(ManifestModel):
    """`manifest.json` inside one page folder."""

    controllers: list[ControllerManifest] = Field(default_factory=list, alias="Controllers")
    icon: str | None = Field(default="", alias="Icon")
    name: str | None = Field(default="", alias="Name")

    def actions_for(self, kind: ControllerKind) -> dict[str, Any]:
        """Actions of the first controller block of the given kind (copy of the mapping)."""
        for controller in self.controllers:
            if controller.type == kind.value:
                return dict(controller.actions or {})
        return {}
