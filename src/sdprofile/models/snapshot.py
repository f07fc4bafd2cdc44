"""Serialized archive state used for undo/redo and pane cloning.

Every manifest and action document is held as JSON text so a snapshot never
shares a mutable object with the archive it was taken from.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .enums import WorkspaceLayoutMode


class PageStateSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    manifest_json: str = "{}"
    keypad_actions_json: dict[str, str] = Field(default_factory=dict)
    encoder_actions_json: dict[str, str] = Field(default_factory=dict)


class ProfileArchiveSnapshot(BaseModel):
    """Text-only copy of a ProfileArchive."""

    model_config = ConfigDict(frozen=True)

    archive_id: str
    source_path: Path | None = None
    extracted_root: Path
    template_id: str
    name: str = ""
    profile_root_name: str = ""
    active_page_id: str = ""
    page_order: tuple[str, ...] = ()
    page_states: dict[str, PageStateSnapshot] = Field(default_factory=dict)
    package_manifest_json: str = "{}"
    profile_manifest_json: str = "{}"


class WorkspaceHistorySnapshot(BaseModel):
    """
    Undo/redo entry: both panes plus the view state around them.

    When both panes show one profile (`shared_profile`) only `left_profile`
    is stored and restore binds the same archive to both panes.
    """

    model_config = ConfigDict(frozen=True)

    left_profile: ProfileArchiveSnapshot | None = None
    right_profile: ProfileArchiveSnapshot | None = None
    layout_mode: WorkspaceLayoutMode = WorkspaceLayoutMode.DUAL_PROFILE
    shared_profile: bool = False
    left_view_page_id: str = ""
    right_view_page_id: str = ""
    lock_source_profile: bool = True
