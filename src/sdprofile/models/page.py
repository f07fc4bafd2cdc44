"""Page state: one page's manifest plus its two coordinate-keyed action maps."""

from typing import Any

from pydantic import BaseModel, Field

from .enums import ControllerKind
from .manifests import ControllerManifest, PageManifest
from .template import ProfileTemplate


def normalize_page_id(value: str | None) -> str:
    """Trim and lowercase a page id. Page ids compare case-insensitively."""
    return (value or "").strip().lower()


def unique_page_ids(values) -> list[str]:
    """Normalize ids, dropping blanks and case-insensitive duplicates (first wins)."""
    seen: set[str] = set()
    output: list[str] = []
    for value in values:
        normalized = normalize_page_id(value)
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        output.append(normalized)
    return output


class ProfilePageState(BaseModel):
    """
    One page of a profile.

    Keypad and encoder actions are keyed by "column,row". The manifest's
    controller blocks are a projection of those maps, regenerated by
    `rebuild_controllers` whenever actions change.
    """

    id: str = Field(description="Normalized page id")
    manifest: PageManifest = Field(default_factory=PageManifest)
    keypad_actions: dict[str, Any] = Field(default_factory=dict)
    encoder_actions: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def empty(cls, page_id: str, template: ProfileTemplate) -> "ProfilePageState":
        """Create a page with no actions and controller blocks for the template."""
        state = cls(id=normalize_page_id(page_id))
        state.rebuild_controllers(template)
        return state

    @classmethod
    def from_manifest(cls, page_id: str, manifest: PageManifest) -> "ProfilePageState":
        return cls(
            id=normalize_page_id(page_id),
            manifest=manifest,
            keypad_actions=manifest.actions_for(ControllerKind.KEYPAD),
            encoder_actions=manifest.actions_for(ControllerKind.ENCODER),
        )

    def actions(self, kind: ControllerKind) -> dict[str, Any] | None:
        """Live action map for a controller kind; None for kinds that hold no actions."""
        if kind is ControllerKind.KEYPAD:
            return self.keypad_actions
        if kind is ControllerKind.ENCODER:
            return self.encoder_actions
        return None

    @property
    def has_actions(self) -> bool:
        return bool(self.keypad_actions) or bool(self.encoder_actions)

    @property
    def display_name(self) -> str:
        return (self.manifest.name or "").strip()

    def controllers_for(self, template: ProfileTemplate) -> list[ControllerManifest]:
        """Controller blocks for this page in the template's controller order."""
        controllers = []
        for kind in template.controller_order:
            actions = self.actions(kind)
            controllers.append(
                ControllerManifest(type=kind.value, actions=dict(actions) if actions is not None else None)
            )
        return controllers

    def rebuild_controllers(self, template: ProfileTemplate) -> None:
        self.manifest.controllers = self.controllers_for(template)
