"""Data models for the Stream Deck profile manager."""

from .action import (
    ActionDocument,
    ActionPresentation,
    action_uuid,
    clone_action,
    describe_action,
    folder_profile_id,
    image_reference,
    plugin_uuid,
    referenced_image_paths,
)
from .archive import ProfileArchive
from .config import AppConfig
from .drag import DragContext
from .enums import (
    ControllerKind,
    PaneSide,
    PluginRenderAvailability,
    PreflightSeverity,
    WorkspaceLayoutMode,
)
from .manifests import (
    ControllerManifest,
    DeviceManifest,
    PackageManifest,
    PageManifest,
    PagesManifest,
    RootProfileManifest,
)
from .page import ProfilePageState, normalize_page_id, unique_page_ids
from .plugin import PluginActionDefinition
from .preflight import PreflightIssue, PreflightReport
from .snapshot import PageStateSnapshot, ProfileArchiveSnapshot, WorkspaceHistorySnapshot
from .template import ZERO_UUID, ProfileTemplate, ProfileTemplates

__all__ = [
    # Actions
    "ActionDocument",
    "ActionPresentation",
    "action_uuid",
    "clone_action",
    "describe_action",
    "folder_profile_id",
    "image_reference",
    "plugin_uuid",
    "referenced_image_paths",
    # Models
    "AppConfig",
    "DragContext",
    "PageStateSnapshot",
    "PluginActionDefinition",
    "PreflightIssue",
    "PreflightReport",
    "ProfileArchive",
    "ProfileArchiveSnapshot",
    "ProfilePageState",
    "ProfileTemplate",
    "ProfileTemplates",
    "WorkspaceHistorySnapshot",
    "ZERO_UUID",
    # Manifests
    "ControllerManifest",
    "DeviceManifest",
    "PackageManifest",
    "PageManifest",
    "PagesManifest",
    "RootProfileManifest",
    # Enums
    "ControllerKind",
    "PaneSide",
    "PluginRenderAvailability",
    "PreflightSeverity",
    "WorkspaceLayoutMode",
    # Helpers
    "normalize_page_id",
    "unique_page_ids",
]
