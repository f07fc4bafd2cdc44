"""In-memory model of one extracted profile archive."""

import logging
import uuid
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr, model_validator

from sdprofile.utils.filesystem import (
    FileSystem,
    LocalFileSystem,
    find_child_ignore_case,
    resolve_case_insensitive_path,
)

from .action import (
    ActionDocument,
    ActionPresentation,
    describe_action,
    dumps_action,
    folder_profile_id,
    loads_action,
    plugin_uuid,
)
from .enums import ControllerKind
from .manifests import PackageManifest, PageManifest, RootProfileManifest
from .page import ProfilePageState, normalize_page_id, unique_page_ids
from .snapshot import PageStateSnapshot, ProfileArchiveSnapshot
from .template import ProfileTemplate, ProfileTemplates

logger = logging.getLogger(__name__)

UNTITLED_PROFILE_NAME = "Untitled Profile"

# Shared by every archive that is not given its own filesystem
DEFAULT_FILESYSTEM = LocalFileSystem()


class ProfileArchive(BaseModel):
    """
    One profile: its template, pages, actions and the two archive-level manifests.

    Construction normalizes page ids and repairs the page set so that:
    - every key of `page_states` is a normalized id
    - `active_page_id` names an existing page (an empty working page is
      synthesized if there is none)
    - `page_order` holds only existing pages, without duplicates, includes
      the active page and is never empty

    Operations on page ids that do not exist are no-ops that report failure
    through their return value rather than raising.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Identity of this archive")
    source_path: Path | None = Field(default=None, description="Archive file the profile was loaded from")
    extracted_root: Path = Field(description="Directory the archive was unpacked into")
    template: ProfileTemplate
    name: str = Field(default="", description="Profile name from the root manifest")
    profile_root_name: str = Field(description="Current '.sdProfile' folder name on disk")
    active_page_id: str = ""
    page_order: list[str] = Field(default_factory=list, description="Visible pages, in page strip order")
    page_states: dict[str, ProfilePageState] = Field(default_factory=dict)
    package_manifest: PackageManifest = Field(default_factory=PackageManifest)
    profile_manifest: RootProfileManifest = Field(default_factory=RootProfileManifest)

    _filesystem: FileSystem = PrivateAttr(default=DEFAULT_FILESYSTEM)

    def __init__(self, filesystem: FileSystem | None = None, **data: Any):
        super().__init__(**data)
        if filesystem is not None:
            self._filesystem = filesystem

    @model_validator(mode="after")
    def _normalize_pages(self) -> "ProfileArchive":
        states: dict[str, ProfilePageState] = {}
        for raw_id, state in self.page_states.items():
            page_id = normalize_page_id(raw_id)
            state.id = page_id
            states[page_id] = state

        order = unique_page_ids(self.page_order)
        active = normalize_page_id(self.active_page_id)

        if active not in states:
            fallback = next((page_id for page_id in order if page_id in states), None)
            if fallback is None and states:
                fallback = sorted(states)[0]
            if fallback is None:
                fallback = normalize_page_id(self.template.working_page_id)
                states[fallback] = ProfilePageState.empty(fallback, self.template)
            active = fallback

        final_order = [page_id for page_id in order if page_id in states]
        if active not in final_order:
            final_order.append(active)

        self.page_states = states
        self.page_order = final_order
        self.active_page_id = active
        return self

    @property
    def filesystem(self) -> FileSystem:
        return self._filesystem

    # =================================================================
    # Naming and paths
    # =================================================================

    @property
    def display_name(self) -> str:
        trimmed = self.name.strip()
        if trimmed:
            return trimmed
        if self.source_path is not None:
            return Path(self.source_path).stem
        return UNTITLED_PROFILE_NAME

    @property
    def profile_root_path(self) -> Path:
        return self.extracted_root / "Profiles" / self.profile_root_name

    @property
    def pages_root_path(self) -> Path:
        return self.profile_root_path / "Profiles"

    @staticmethod
    def page_folder_name(page_id: str) -> str:
        """On-disk folder name of a page (uppercased id)."""
        return normalize_page_id(page_id).upper()

    def existing_page_directory(self, page_id: str) -> Path | None:
        """Existing folder for a page, matched ignoring case."""
        return find_child_ignore_case(self._filesystem, self.pages_root_path, page_id.strip())

    def page_directory(self, page_id: str, prefer_existing: bool = True) -> Path:
        if prefer_existing:
            existing = self.existing_page_directory(page_id)
            if existing is not None:
                return existing
        return self.pages_root_path / self.page_folder_name(page_id)

    # =================================================================
    # Pages
    # =================================================================

    @property
    def all_page_ids(self) -> list[str]:
        """Visible pages in order, then every other loaded page sorted by id."""
        ids = list(self.page_order)
        ids.extend(page_id for page_id in sorted(self.page_states) if page_id not in ids)
        return ids

    def pages_in_order(self) -> list[ProfilePageState]:
        return [self.page_states[page_id] for page_id in self.all_page_ids if page_id in self.page_states]

    def get_page(self, page_id: str | None) -> ProfilePageState | None:
        return self.page_states.get(normalize_page_id(page_id))

    def has_page(self, page_id: str | None) -> bool:
        return normalize_page_id(page_id) in self.page_states

    def set_active_page(self, page_id: str) -> bool:
        """Make a page active. Returns False (no change) if the page does not exist."""
        normalized = normalize_page_id(page_id)
        if normalized not in self.page_states:
            return False
        self.active_page_id = normalized
        return True

    def create_page(self) -> str:
        """Add an empty page at the end of the order and make it active."""
        new_id = str(uuid.uuid4()).lower()
        while new_id in self.page_states:
            new_id = str(uuid.uuid4()).lower()

        self.page_states[new_id] = ProfilePageState.empty(new_id, self.template)
        if new_id not in self.page_order:
            self.page_order.append(new_id)
        self.active_page_id = new_id
        logger.debug(f"Created page {new_id} in {self.display_name}")
        return new_id

    def visible_page_ids(self) -> list[str]:
        return unique_page_ids(self.page_order) if self.page_order else [normalize_page_id(self.active_page_id)]

    def remove_page(self, page_id: str) -> bool:
        """
        Remove a page.

        Refused (returns False) when the page does not exist or when it would
        leave no visible page.
        """
        normalized = normalize_page_id(page_id)
        if normalized not in self.page_states:
            return False
        if len(self.visible_page_ids()) <= 1:
            return False

        del self.page_states[normalized]

        next_order = [pid for pid in unique_page_ids(self.page_order) if pid != normalized]
        if not next_order:
            next_order = sorted(self.page_states)
        self.page_order = next_order

        if self.active_page_id == normalized:
            if next_order:
                self.active_page_id = next_order[0]
            elif self.page_states:
                self.active_page_id = sorted(self.page_states)[0]
            else:
                fallback = normalize_page_id(self.template.working_page_id)
                self.page_states[fallback] = ProfilePageState.empty(fallback, self.template)
                self.page_order = [fallback]
                self.active_page_id = fallback

        logger.debug(f"Removed page {normalized} from {self.display_name}")
        return True

    def update_page_name(self, value: str, page_id: str | None = None) -> None:
        state = self._upsert_page(self._resolve_page_id(page_id))
        state.manifest.name = value

    def update_controllers_for_all_pages(self) -> None:
        """Regenerate every page's controller blocks for the current template."""
        for state in self.page_states.values():
            state.rebuild_controllers(self.template)

    # =================================================================
    # Actions
    # =================================================================

    def get_action(
        self, controller: ControllerKind, coordinate: str, page_id: str | None = None
    ) -> ActionDocument | None:
        state = self.page_states.get(self._resolve_page_id(page_id))
        if state is None:
            return None
        actions = state.actions(controller)
        if actions is None:
            return None
        return actions.get(coordinate)

    def set_action(
        self,
        action: ActionDocument | None,
        controller: ControllerKind,
        coordinate: str,
        page_id: str | None = None,
    ) -> None:
        """
        Place an action in a slot, or clear the slot when action is None or empty.

        A missing page is created (and appended to the order). The page's
        controller blocks are regenerated afterwards.
        """
        if controller is ControllerKind.NEO:
            return

        state = self._upsert_page(self._resolve_page_id(page_id))
        actions = state.actions(controller)
        if action:
            actions[coordinate] = action
        else:
            actions.pop(coordinate, None)
        state.rebuild_controllers(self.template)

    def remove_action(self, controller: ControllerKind, coordinate: str, page_id: str | None = None) -> bool:
        """Clear a slot. Returns True if an action was removed."""
        if self.get_action(controller, coordinate, page_id) is None:
            return False
        self.set_action(None, controller, coordinate, page_id)
        return True

    def replace_actions(
        self, keypad: dict[str, ActionDocument], encoder: dict[str, ActionDocument], page_id: str
    ) -> None:
        state = self._upsert_page(normalize_page_id(page_id))
        state.keypad_actions = dict(keypad)
        state.encoder_actions = dict(encoder)
        state.rebuild_controllers(self.template)

    def get_actions(self, kind: ControllerKind, page_id: str | None = None) -> dict[str, ActionDocument]:
        """Live action map of a page; empty for missing pages or NEO."""
        state = self.page_states.get(self._resolve_page_id(page_id))
        if state is None:
            return {}
        actions = state.actions(kind)
        return actions if actions is not None else {}

    def all_actions(self) -> list[ActionDocument]:
        actions: list[ActionDocument] = []
        for state in self.page_states.values():
            actions.extend(state.keypad_actions.values())
            actions.extend(state.encoder_actions.values())
        return actions

    def referenced_plugin_uuids(self) -> set[str]:
        return {uuid_ for action in self.all_actions() if (uuid_ := plugin_uuid(action))}

    def referenced_folder_ids(self) -> list[str]:
        """Normalized page ids targeted by folder actions anywhere in the profile."""
        return unique_page_ids(
            folder_id for action in self.all_actions() if (folder_id := folder_profile_id(action))
        )

    def add_required_plugin(self, plugin: str | None) -> None:
        """Merge a plugin uuid into the package's RequiredPlugins (kept sorted)."""
        if not plugin:
            return
        required = set(self.package_manifest.required_plugins or [])
        required.add(plugin)
        self.package_manifest.required_plugins = sorted(required)

    def describe_action(self, action: ActionDocument) -> ActionPresentation:
        return describe_action(action)

    # =================================================================
    # Assets
    # =================================================================

    def resolve_image_path(self, reference: str, page_id: str | None = None) -> Path | None:
        """
        Find the file an action's image reference points at.

        Candidates, in order: the page's folder, the profile root, the
        extraction root, then `Profiles/<PAGE>/<ref>` and `Profiles/<page>/<ref>`
        under the profile root for the given page and then for every known
        page. Each candidate is resolved ignoring case; the first existing
        file wins.
        """
        normalized = reference.replace("\\", "/")
        resolved_page = self._resolve_page_id(page_id)
        profile_root = self.profile_root_path

        candidates: list[tuple[Path, str]] = [
            (self.page_directory(resolved_page), normalized),
            (profile_root, normalized),
            (self.extracted_root, normalized),
            (profile_root, f"Profiles/{self.page_folder_name(resolved_page)}/{normalized}"),
            (profile_root, f"Profiles/{resolved_page}/{normalized}"),
        ]
        for other_id in self.all_page_ids:
            candidates.append((profile_root, f"Profiles/{self.page_folder_name(other_id)}/{normalized}"))
            candidates.append((profile_root, f"Profiles/{other_id}/{normalized}"))

        seen: set[tuple[Path, str]] = set()
        for base, relative in candidates:
            if (base, relative) in seen:
                continue
            seen.add((base, relative))
            resolved = resolve_case_insensitive_path(self._filesystem, base, relative)
            if resolved is not None and self._filesystem.is_file(resolved):
                return resolved
        return None

    # =================================================================
    # Snapshots
    # =================================================================

    def snapshot(self) -> ProfileArchiveSnapshot:
        """Capture the archive as JSON text."""
        pages = {
            page_id: PageStateSnapshot(
                id=state.id,
                manifest_json=state.manifest.to_json(),
                keypad_actions_json={k: dumps_action(v) for k, v in state.keypad_actions.items()},
                encoder_actions_json={k: dumps_action(v) for k, v in state.encoder_actions.items()},
            )
            for page_id, state in self.page_states.items()
        }
        return ProfileArchiveSnapshot(
            archive_id=self.id,
            source_path=self.source_path,
            extracted_root=self.extracted_root,
            template_id=self.template.id,
            name=self.name,
            profile_root_name=self.profile_root_name,
            active_page_id=self.active_page_id,
            page_order=tuple(self.page_order),
            page_states=pages,
            package_manifest_json=self.package_manifest.to_json(),
            profile_manifest_json=self.profile_manifest.to_json(),
        )

    @classmethod
    def restore(
        cls, snapshot: ProfileArchiveSnapshot, filesystem: FileSystem | None = None
    ) -> "ProfileArchive":
        """Rebuild an independent archive from a snapshot, keeping its identity."""
        package_manifest = PackageManifest.model_validate_json(snapshot.package_manifest_json)
        template = ProfileTemplates.get(snapshot.template_id) or ProfileTemplates.get_by_device_model(
            package_manifest.device_model
        )

        page_states = {}
        for page_id, page in snapshot.page_states.items():
            page_states[page_id] = ProfilePageState(
                id=page.id,
                manifest=PageManifest.model_validate_json(page.manifest_json),
                keypad_actions={k: loads_action(v) for k, v in page.keypad_actions_json.items()},
                encoder_actions={k: loads_action(v) for k, v in page.encoder_actions_json.items()},
            )

        return cls(
            filesystem=filesystem,
            id=snapshot.archive_id,
            source_path=snapshot.source_path,
            extracted_root=snapshot.extracted_root,
            template=template,
            name=snapshot.name,
            profile_root_name=snapshot.profile_root_name,
            active_page_id=snapshot.active_page_id,
            page_order=list(snapshot.page_order),
            page_states=page_states,
            package_manifest=package_manifest,
            profile_manifest=RootProfileManifest.model_validate_json(snapshot.profile_manifest_json),
        )

    def clone(self) -> "ProfileArchive":
        """Independent deep copy with a new identity."""
        copy = ProfileArchive.restore(self.snapshot(), filesystem=self._filesystem)
        copy.id = str(uuid.uuid4())
        return copy

    # =================================================================
    # Internal
    # =================================================================

    def _resolve_page_id(self, page_id: str | None) -> str:
        return normalize_page_id(page_id if page_id is not None else self.active_page_id)

    def _upsert_page(self, page_id: str) -> ProfilePageState:
        state = self.page_states.get(page_id)
        if state is None:
            state = ProfilePageState.empty(page_id, self.template)
            self.page_states[page_id] = state
            if page_id not in self.page_order:
                self.page_order.append(page_id)
        return state
