"""Two-pane workspace: edits, drag and drop between profiles, undo/redo."""

import logging
from collections import deque
from pathlib import Path
from threading import RLock

from sdprofile.models import (
    AppConfig,
    ControllerKind,
    DragContext,
    PaneSide,
    PreflightReport,
    ProfileArchive,
    ProfileTemplates,
    WorkspaceHistorySnapshot,
    WorkspaceLayoutMode,
    clone_action,
    folder_profile_id,
    normalize_page_id,
    plugin_uuid,
    unique_page_ids,
)
from sdprofile.models.action import ActionDocument, parse_coordinate
from sdprofile.models.archive import UNTITLED_PROFILE_NAME
from sdprofile.protocols import WorkspaceEvent, WorkspaceObserver
from sdprofile.utils.observer import ObserverManager

from .archive_service import ProfileArchiveService, is_profile_file
from .preflight_service import PreflightValidator

logger = logging.getLogger(__name__)


class WorkspaceService:
    """
    Holds a source (left) and target (right) profile and every edit made to them.

    Each pane is bound to a ProfileArchive and shows one page of it (the
    pane's view page, which can differ from the archive's active page). In
    single profile mode both panes are bound to the same archive instance
    and show two of its pages.

    Every mutation first pushes a snapshot of the whole workspace on the
    undo stack; refused operations and no-ops push nothing. Mutators are
    serialized by a re-entrant lock.

    The outcome of each operation is described in `status`; observers are
    told about changes through `on_workspace_event`.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        archive_service: ProfileArchiveService | None = None,
        validator: PreflightValidator | None = None,
    ):
        """
        Initialize the workspace.

        Args:
            config: Application configuration (history depth, page limit,
                    default source lock and template)
            archive_service: Service used to load, create and save profiles
            validator: Preflight validator run after each change
        """
        self.config = config or AppConfig()
        self._archive_service = archive_service or ProfileArchiveService(self.config)
        self._validator = validator or PreflightValidator()

        self._lock = RLock()
        self._observers = ObserverManager[WorkspaceObserver](observer_type_name="workspace")

        self._profiles: dict[PaneSide, ProfileArchive | None] = {PaneSide.LEFT: None, PaneSide.RIGHT: None}
        self._view_page_ids: dict[PaneSide, str] = {PaneSide.LEFT: "", PaneSide.RIGHT: ""}
        self._preflight_reports: dict[PaneSide, PreflightReport | None] = {
            PaneSide.LEFT: None,
            PaneSide.RIGHT: None,
        }
        self._folder_navigation: dict[PaneSide, list[str]] = {PaneSide.LEFT: [], PaneSide.RIGHT: []}

        self._undo_stack: deque[WorkspaceHistorySnapshot] = deque(maxlen=self.config.history_depth)
        self._redo_stack: deque[WorkspaceHistorySnapshot] = deque(maxlen=self.config.history_depth)
        self._is_applying_history = False

        self.layout_mode = WorkspaceLayoutMode.DUAL_PROFILE
        self.lock_source_profile = self.config.lock_source_profile
        self.drag_context: DragContext | None = None
        self.status = "Open source and target profiles."

    # =================================================================
    # Observer Management
    # =================================================================

    def register_observer(self, observer: WorkspaceObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: WorkspaceObserver) -> None:
        self._observers.unregister(observer)

    def _notify(self, event: WorkspaceEvent, side: PaneSide | None = None) -> None:
        self._observers.notify("on_workspace_event", event, side)

    # =================================================================
    # Queries
    # =================================================================

    @property
    def archive_service(self) -> ProfileArchiveService:
        return self._archive_service

    @property
    def is_single_profile_mode(self) -> bool:
        return self.layout_mode is WorkspaceLayoutMode.SINGLE_PROFILE

    @property
    def is_shared_profile_view(self) -> bool:
        left = self._profiles[PaneSide.LEFT]
        return left is not None and left is self._profiles[PaneSide.RIGHT]

    @property
    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    def get_profile(self, side: PaneSide) -> ProfileArchive | None:
        return self._profiles[side]

    def get_view_page_id(self, side: PaneSide) -> str:
        """Page the pane currently shows ("" when no profile is bound)."""
        with self._lock:
            self._ensure_pane_view_page(side, update_active_page=False)
            return self._view_page_ids[side]

    def get_preflight_report(self, side: PaneSide) -> PreflightReport | None:
        return self._preflight_reports[side]

    # =================================================================
    # Source lock and layout
    # =================================================================

    def set_source_lock(self, locked: bool) -> None:
        """When locked, dragging from the source pane to the target pane copies instead of moving."""
        with self._lock:
            if self.lock_source_profile == locked:
                return

            self._record_history_snapshot()
            self.lock_source_profile = locked
            if self.is_single_profile_mode and self.is_shared_profile_view:
                self.status = "Source lock updated (single profile mode always moves actions)."
            elif locked:
                self.status = "Source lock enabled: drag to target copies."
            else:
                self.status = "Source lock disabled: drag to target moves."
            logger.info(f"Source lock updated lock={locked}")
            self._notify(WorkspaceEvent.SOURCE_LOCK_CHANGED)

    def split_profile_view(self, anchor_side: PaneSide) -> None:
        """Toggle single profile mode around the profile in anchor_side."""
        with self._lock:
            if self._profiles[anchor_side] is None:
                self.status = "Load a profile first."
                return

            self._record_history_snapshot()

            if self.is_single_profile_mode and self.is_shared_profile_view:
                self.disable_single_profile_mode(anchor_side, clone_shared_profile=True, update_status=False)
                self.status = "Single profile mode disabled."
                logger.info(f"Disabled single profile mode keep={anchor_side.value}")
            else:
                self.enable_single_profile_mode(anchor_side)
                self.status = "Single profile mode enabled."
                logger.info(f"Enabled single profile mode anchor={anchor_side.value}")
            self._notify(WorkspaceEvent.LAYOUT_CHANGED)

    def enable_single_profile_mode(self, anchor_side: PaneSide) -> None:
        """
        Show the anchor pane's profile in both panes.

        The anchor keeps its page; the other pane shows the first other page
        of the profile (or the same page if there is only one).
        """
        with self._lock:
            anchor_profile = self._profiles[anchor_side]
            if anchor_profile is None:
                return

            anchor_page_id = self._resolve_pane_page_id(anchor_profile, self.get_view_page_id(anchor_side))
            other_side = anchor_side.opposite
            other_page_id = next(
                (page_id for page_id in anchor_profile.all_page_ids if page_id != anchor_page_id),
                anchor_page_id,
            )

            self._set_profile_for_pane(anchor_side, anchor_profile, anchor_page_id)
            self._set_profile_for_pane(other_side, anchor_profile, other_page_id)
            self.layout_mode = WorkspaceLayoutMode.SINGLE_PROFILE

            self._set_pane_view_page(anchor_side, anchor_page_id, update_active_page=True)
            self._set_pane_view_page(other_side, other_page_id, update_active_page=False)

            self._reset_folder_navigation(PaneSide.LEFT)
            self._reset_folder_navigation(PaneSide.RIGHT)
            self.drag_context = None
            self._refresh_preflight_reports()

    def disable_single_profile_mode(
        self, keep_side: PaneSide, clone_shared_profile: bool = True, update_status: bool = True
    ) -> None:
        """
        Return to two independent panes.

        If both panes share one archive and clone_shared_profile is set, the
        pane that is not kept gets an independent copy of it.
        """
        with self._lock:
            shared = self._profiles[PaneSide.LEFT]
            if clone_shared_profile and self.is_shared_profile_view and shared is not None:
                clone = shared.clone()
                keep_page_id = self.get_view_page_id(keep_side)
                other_side = keep_side.opposite
                other_page_id = self.get_view_page_id(other_side)

                self._set_profile_for_pane(keep_side, shared, keep_page_id)
                self._set_profile_for_pane(other_side, clone, other_page_id)

            self.layout_mode = WorkspaceLayoutMode.DUAL_PROFILE
            for side in PaneSide:
                page_id = self.get_view_page_id(side)
                if page_id:
                    self._set_pane_view_page(side, page_id, update_active_page=True)

            self._reset_folder_navigation(PaneSide.LEFT)
            self._reset_folder_navigation(PaneSide.RIGHT)
            self.drag_context = None

            if update_status:
                self.status = "Single profile mode disabled."

    # =================================================================
    # History
    # =================================================================

    def undo(self) -> bool:
        with self._lock:
            if not self._undo_stack:
                self.status = "Nothing to undo."
                return False

            previous = self._undo_stack.pop()
            self._redo_stack.append(self._capture_history_snapshot())
            self._apply_history_snapshot(previous)
            self.status = "Undo complete."
            logger.info("Undo applied.")
            self._notify(WorkspaceEvent.UNDONE)
            return True

    def redo(self) -> bool:
        with self._lock:
            if not self._redo_stack:
                self.status = "Nothing to redo."
                return False

            following = self._redo_stack.pop()
            self._undo_stack.append(self._capture_history_snapshot())
            self._apply_history_snapshot(following)
            self.status = "Redo complete."
            logger.info("Redo applied.")
            self._notify(WorkspaceEvent.REDONE)
            return True

    def _capture_history_snapshot(self) -> WorkspaceHistorySnapshot:
        left = self._profiles[PaneSide.LEFT]
        right = self._profiles[PaneSide.RIGHT]
        shared = self.is_shared_profile_view

        return WorkspaceHistorySnapshot(
            left_profile=left.snapshot() if left is not None else None,
            right_profile=right.snapshot() if right is not None and not shared else None,
            layout_mode=self.layout_mode,
            shared_profile=shared,
            left_view_page_id=self._view_page_ids[PaneSide.LEFT],
            right_view_page_id=self._view_page_ids[PaneSide.RIGHT],
            lock_source_profile=self.lock_source_profile,
        )

    def _record_history_snapshot(self) -> None:
        """Push the current state before a mutation; invalidates redo."""
        if self._is_applying_history:
            return
        self._undo_stack.append(self._capture_history_snapshot())
        self._redo_stack.clear()

    def _apply_history_snapshot(self, snapshot: WorkspaceHistorySnapshot) -> None:
        self._is_applying_history = True
        try:
            filesystem = self._archive_service.filesystem
            if snapshot.shared_profile and snapshot.left_profile is not None:
                shared = ProfileArchive.restore(snapshot.left_profile, filesystem=filesystem)
                self._profiles[PaneSide.LEFT] = shared
                self._profiles[PaneSide.RIGHT] = shared
                self.layout_mode = WorkspaceLayoutMode.SINGLE_PROFILE
            else:
                for side, archive_snapshot in (
                    (PaneSide.LEFT, snapshot.left_profile),
                    (PaneSide.RIGHT, snapshot.right_profile),
                ):
                    self._profiles[side] = (
                        ProfileArchive.restore(archive_snapshot, filesystem=filesystem)
                        if archive_snapshot is not None
                        else None
                    )
                self.layout_mode = snapshot.layout_mode

            self._view_page_ids[PaneSide.LEFT] = snapshot.left_view_page_id
            self._view_page_ids[PaneSide.RIGHT] = snapshot.right_view_page_id
            self._ensure_pane_view_page(PaneSide.LEFT, update_active_page=False)
            self._ensure_pane_view_page(PaneSide.RIGHT, update_active_page=False)

            if self.is_single_profile_mode and not self.is_shared_profile_view:
                self.layout_mode = WorkspaceLayoutMode.DUAL_PROFILE

            left = self._profiles[PaneSide.LEFT]
            right = self._profiles[PaneSide.RIGHT]
            if left is not None:
                left.set_active_page(self._view_page_ids[PaneSide.LEFT])
            if right is not None and right is not left:
                right.set_active_page(self._view_page_ids[PaneSide.RIGHT])

            self.lock_source_profile = snapshot.lock_source_profile
            self._reset_folder_navigation(PaneSide.LEFT)
            self._reset_folder_navigation(PaneSide.RIGHT)
            self.drag_context = None
            self._refresh_preflight_reports()
        finally:
            self._is_applying_history = False

    # =================================================================
    # Profiles
    # =================================================================

    def load_profile_from_path(self, side: PaneSide, profile_path: Path | str) -> bool:
        """
        Load a .streamDeckProfile file into a pane.

        A failed load leaves both panes unchanged and reports the reason in
        `status`.
        """
        with self._lock:
            if not str(profile_path).strip():
                self.status = "Invalid profile path."
                return False

            profile_path = Path(profile_path)
            if not is_profile_file(profile_path):
                self.status = "Only .streamDeckProfile files are supported."
                logger.info(f"Ignored non-profile file side={side.value} path={profile_path}")
                return False

            try:
                archive = self._archive_service.load_profile(profile_path)
            except Exception as e:
                self.status = f"Failed to load profile: {e}"
                logger.error(f"Failed loading profile side={side.value} file={profile_path} error={e}")
                return False

            self._bind_loaded_profile(side, archive)
            self.status = f"Loaded {profile_path.name}."
            logger.info(f"Loaded profile side={side.value} file={profile_path.name}")
            self._notify(WorkspaceEvent.PROFILE_LOADED, side)
            return True

    def set_profile(self, side: PaneSide, archive: ProfileArchive, page_id: str | None = None) -> None:
        """Bind an already loaded archive to a pane."""
        with self._lock:
            self._bind_loaded_profile(side, archive, page_id)
            self.status = f"Loaded {archive.display_name}."
            logger.info(f"Bound profile side={side.value} name={archive.display_name}")
            self._notify(WorkspaceEvent.PROFILE_LOADED, side)

    def _bind_loaded_profile(self, side: PaneSide, archive: ProfileArchive, page_id: str | None = None) -> None:
        self._record_history_snapshot()
        self._set_profile_for_pane(side, archive, page_id if page_id is not None else archive.active_page_id)
        self._ensure_layout_mode_validity()
        self._ensure_pane_view_page(PaneSide.LEFT, update_active_page=False)
        self._ensure_pane_view_page(PaneSide.RIGHT, update_active_page=False)
        self._refresh_after_edit(side)

    def create_empty_target(self, template_id: str | None = None) -> bool:
        """
        Put a new empty profile in the target pane.

        The template defaults to the target's, then the source's, then the
        configured default template.
        """
        with self._lock:
            template = ProfileTemplates.get(template_id) if template_id else None
            if template is None:
                for side in (PaneSide.RIGHT, PaneSide.LEFT):
                    profile = self._profiles[side]
                    if profile is not None:
                        template = profile.template
                        break
            if template is None:
                template = ProfileTemplates.get(self.config.default_template) or ProfileTemplates.fallback()

            try:
                archive = self._archive_service.create_empty_profile(template)
            except Exception as e:
                self.status = f"Failed to create target profile: {e}"
                logger.error(f"Failed creating empty target error={e}")
                return False

            self._record_history_snapshot()
            self._set_profile_for_pane(PaneSide.RIGHT, archive, archive.active_page_id)
            self._ensure_layout_mode_validity()
            self._refresh_preflight(PaneSide.RIGHT)
            self.status = f"Created empty target profile ({template.label})."
            logger.info(f"Created empty target template={template.id}")
            self._notify(WorkspaceEvent.PROFILE_CREATED, PaneSide.RIGHT)
            return True

    def save_profile(self, side: PaneSide, output_path: Path | str) -> bool:
        """Save a pane's profile; failures are reported in `status`."""
        with self._lock:
            profile = self._profiles[side]
            if profile is None:
                self.status = f"No {side.role} profile loaded."
                return False

            output_path = Path(output_path)
            try:
                self._archive_service.save_profile(profile, output_path)
            except Exception as e:
                self.status = f"Failed to save profile: {e}"
                logger.error(f"Failed saving profile side={side.value} error={e}")
                return False

            self._refresh_preflight(side)
            report = self._preflight_reports[side]
            if report is not None and report.error_count > 0:
                self.status = f"Saved {output_path.name} with {report.error_count} preflight error(s)."
            else:
                self.status = f"Saved {output_path.name}."
            logger.info(f"Saved profile side={side.value} file={output_path.name}")
            self._notify(WorkspaceEvent.PROFILE_SAVED, side)
            return True

    def close_profile(self, side: PaneSide) -> None:
        with self._lock:
            profile = self._profiles[side]
            if profile is None:
                self.status = f"No {side.role} profile loaded."
                return

            self._record_history_snapshot()
            self._profiles[side] = None
            self._view_page_ids[side] = ""
            self._preflight_reports[side] = None
            self._reset_folder_navigation(side)

            if self.drag_context is not None and self.drag_context.source_side is side:
                self.drag_context = None

            self._ensure_layout_mode_validity()
            self.status = f"Closed {side.role} profile."
            logger.info(f"Closed profile side={side.value} previous={profile.display_name}")
            self._notify(WorkspaceEvent.PROFILE_CLOSED, side)

    # =================================================================
    # Profile edits
    # =================================================================

    def update_template(self, side: PaneSide, template_id: str) -> bool:
        """
        Switch a pane's profile to another device template.

        Actions outside the new key grid or encoder slots are dropped and the
        controller blocks of every page are regenerated.
        """
        with self._lock:
            template = ProfileTemplates.get(template_id)
            profile = self._profiles[side]
            if template is None or profile is None or profile.template.id == template.id:
                return False

            self._record_history_snapshot()
            profile.template = template
            profile.package_manifest.device_model = template.device_model
            self._prune_actions(profile)
            profile.update_controllers_for_all_pages()
            self._refresh_after_edit(side)
            self.status = f"Set {side.role} template to {template.label}."
            logger.info(f"Changed template side={side.value} template={template.id}")
            self._notify(WorkspaceEvent.TEMPLATE_CHANGED, side)
            return True

    @staticmethod
    def _prune_actions(profile: ProfileArchive) -> None:
        template = profile.template
        for page_id in profile.all_page_ids:
            keypad = {
                coordinate: action
                for coordinate, action in profile.get_actions(ControllerKind.KEYPAD, page_id).items()
                if (parsed := parse_coordinate(coordinate)) is not None and template.contains_key(*parsed)
            }
            encoder = {
                coordinate: action
                for coordinate, action in profile.get_actions(ControllerKind.ENCODER, page_id).items()
                if (parsed := parse_coordinate(coordinate)) is not None and template.contains_encoder(*parsed)
            }
            profile.replace_actions(keypad, encoder, page_id)

    def update_profile_name(self, side: PaneSide, requested_name: str | None) -> None:
        """Rename a pane's profile; a blank name becomes "Untitled Profile"."""
        with self._lock:
            profile = self._profiles[side]
            if profile is None:
                return

            name = (requested_name or "").strip() or UNTITLED_PROFILE_NAME
            if profile.name.strip() == name:
                return

            self._record_history_snapshot()
            profile.name = name
            self.status = f"Renamed {side.role} profile."
            logger.info(f"Renamed profile side={side.value} name={name}")
            self._notify(WorkspaceEvent.PROFILE_RENAMED, side)

    # =================================================================
    # Pages
    # =================================================================

    def select_page(self, side: PaneSide, page_id: str) -> None:
        with self._lock:
            profile = self._profiles[side]
            if profile is None:
                return

            current_page_id = self.get_view_page_id(side)
            resolved_page_id = self._resolve_pane_page_id(profile, page_id)
            if current_page_id == resolved_page_id:
                return

            self._record_history_snapshot()
            if self._is_visible_top_level_page(profile, resolved_page_id):
                self._reset_folder_navigation(side)
            self._set_pane_view_page(side, resolved_page_id, update_active_page=True)
            self.status = f"Switched {side.role} page."
            logger.info(f"Switched page side={side.value} page={resolved_page_id}")
            self._notify(WorkspaceEvent.PAGE_SELECTED, side)

    def add_page(self, side: PaneSide) -> str | None:
        """Append an empty page and show it. Returns the new page id."""
        with self._lock:
            profile = self._profiles[side]
            if profile is None:
                return None

            max_pages = self.config.max_pages
            if len(profile.page_order) >= max_pages:
                self.status = f"Page limit reached ({max_pages})."
                logger.info(f"Add page blocked side={side.value} reason=max-pages")
                return None

            self._record_history_snapshot()
            page_id = profile.create_page()
            self._reset_folder_navigation(side)
            self._set_pane_view_page(side, page_id, update_active_page=True)
            self._ensure_pane_view_page(PaneSide.LEFT, update_active_page=False)
            self._ensure_pane_view_page(PaneSide.RIGHT, update_active_page=False)
            self._refresh_after_edit(side)
            self.status = f"Added page to {side.role} profile."
            logger.info(f"Added page side={side.value} page={page_id}")
            self._notify(WorkspaceEvent.PAGE_ADDED, side)
            return page_id

    def remove_page(self, side: PaneSide, page_id: str) -> bool:
        with self._lock:
            profile = self._profiles[side]
            if profile is None:
                return False

            normalized = normalize_page_id(page_id)
            if len(profile.visible_page_ids()) <= 1:
                self.status = "Cannot delete the last page."
                logger.info(f"Remove page blocked side={side.value} page={normalized} reason=last-page")
                return False

            if not profile.has_page(normalized):
                self.status = "Page remove failed."
                logger.warning(f"Remove page failed side={side.value} page={normalized} reason=missing-page")
                return False

            self._record_history_snapshot()
            if not profile.remove_page(normalized):
                self.status = "Page remove failed."
                logger.warning(f"Remove page failed side={side.value} page={normalized}")
                return False

            drag = self.drag_context
            if drag is not None and drag.source_side is side and normalize_page_id(drag.source_page_id) == normalized:
                self.drag_context = None

            self._prune_folder_navigation(PaneSide.LEFT)
            self._prune_folder_navigation(PaneSide.RIGHT)
            self._ensure_pane_view_page(PaneSide.LEFT, update_active_page=False)
            self._ensure_pane_view_page(PaneSide.RIGHT, update_active_page=False)
            current_page_id = self.get_view_page_id(side)
            if current_page_id:
                profile.set_active_page(current_page_id)

            self._refresh_after_edit(side)
            self.status = f"Removed page from {side.role} profile."
            logger.info(f"Removed page side={side.value} page={normalized}")
            self._notify(WorkspaceEvent.PAGE_REMOVED, side)
            return True

    # =================================================================
    # Actions
    # =================================================================

    def remove_action(self, side: PaneSide, controller: ControllerKind, coordinate: str) -> bool:
        """Clear a slot on the pane's current page."""
        with self._lock:
            profile = self._profiles[side]
            if profile is None:
                return False

            page_id = self.get_view_page_id(side)
            if not page_id or profile.get_action(controller, coordinate, page_id) is None:
                return False

            self._record_history_snapshot()
            profile.remove_action(controller, coordinate, page_id)

            drag = self.drag_context
            if (
                drag is not None
                and drag.source_side is side
                and drag.controller is controller
                and drag.source_page_id == page_id
                and drag.coordinate.casefold() == coordinate.casefold()
            ):
                self.drag_context = None

            self._refresh_after_edit(side)
            self.status = f"Deleted {controller.slot_label} action."
            logger.info(
                f"Deleted action side={side.value} controller={controller.value} "
                f"coordinate={coordinate} page={page_id}"
            )
            self._notify(WorkspaceEvent.ACTION_REMOVED, side)
            return True

    # =================================================================
    # Folder navigation
    # =================================================================

    def open_folder_action(self, side: PaneSide, controller: ControllerKind, coordinate: str) -> bool:
        """Show the page a folder key opens, remembering where we came from."""
        with self._lock:
            if controller is not ControllerKind.KEYPAD:
                return False

            profile = self._profiles[side]
            if profile is None:
                return False

            source_page_id = self.get_view_page_id(side)
            if not source_page_id:
                return False

            action = profile.get_action(controller, coordinate, source_page_id)
            if action is None:
                return False

            folder_target_id = normalize_page_id(folder_profile_id(action))
            if not folder_target_id:
                return False

            if not profile.has_page(folder_target_id):
                self.status = "Folder target is missing in this profile."
                logger.warning(
                    f"Open folder failed side={side.value} sourcePage={source_page_id} "
                    f"target={folder_target_id} reason=missing-page"
                )
                return False

            if folder_target_id == source_page_id:
                return False

            stack = self._folder_navigation[side]
            if not stack or stack[-1] != source_page_id:
                stack.append(source_page_id)

            self._set_pane_view_page(side, folder_target_id, update_active_page=True)
            self._refresh_after_edit(side)

            folder_state = profile.get_page(folder_target_id)
            folder_name = folder_state.display_name if folder_state is not None else ""
            self.status = f"Opened folder {folder_name}." if folder_name else "Opened folder page."
            logger.info(
                f"Opened folder side={side.value} sourcePage={source_page_id} targetPage={folder_target_id}"
            )
            self._notify(WorkspaceEvent.FOLDER_OPENED, side)
            return True

    def can_navigate_folder_back(self, side: PaneSide) -> bool:
        with self._lock:
            self._prune_folder_navigation(side)
            return len(self._folder_navigation[side]) > 0

    def navigate_folder_back(self, side: PaneSide) -> bool:
        """Return to the page a folder was opened from, skipping pages that no longer exist."""
        with self._lock:
            profile = self._profiles[side]
            if profile is None:
                return False

            stack = self._folder_navigation[side]
            while stack:
                previous_page_id = stack.pop()
                if not profile.has_page(previous_page_id):
                    continue

                self._set_pane_view_page(side, previous_page_id, update_active_page=True)
                self._refresh_after_edit(side)
                self.status = "Returned from folder."
                logger.info(f"Closed folder view side={side.value} page={previous_page_id}")
                self._notify(WorkspaceEvent.FOLDER_CLOSED, side)
                return True

            self.status = "No folder history on this pane."
            return False

    # =================================================================
    # Drag and drop
    # =================================================================

    def begin_drag(
        self,
        side: PaneSide,
        controller: ControllerKind,
        coordinate: str,
        action: ActionDocument | None = None,
        page_id: str | None = None,
    ) -> bool:
        """
        Pick up an action.

        Without an explicit action or page, the action in the slot on the
        pane's current page is used.
        """
        with self._lock:
            source_page_id = normalize_page_id(page_id) if page_id else self.get_view_page_id(side)
            if action is None:
                profile = self._profiles[side]
                if profile is None:
                    return False
                action = profile.get_action(controller, coordinate, source_page_id)
                if action is None:
                    return False

            self.drag_context = DragContext(
                source_side=side,
                source_page_id=source_page_id,
                controller=controller,
                coordinate=coordinate,
                action=clone_action(action),
            )
            logger.debug(
                f"Drag started side={side.value} page={source_page_id} "
                f"controller={controller.value} coordinate={coordinate}"
            )
            self._notify(WorkspaceEvent.DRAG_STARTED, side)
            return True

    def cancel_drag(self) -> None:
        with self._lock:
            if self.drag_context is None:
                return
            side = self.drag_context.source_side
            self.drag_context = None
            self._notify(WorkspaceEvent.DRAG_CANCELED, side)

    def drop_action(self, side: PaneSide, controller: ControllerKind, coordinate: str) -> bool:
        """
        Drop the dragged action on a slot of the pane's current page.

        Dropping within one pane, or between panes that show the same
        archive, always moves. Between two different archives the action is
        copied when the source lock is on and the drag goes from the source
        pane to the target pane, and moved otherwise.

        Returns:
            True if the action was placed
        """
        with self._lock:
            drag = self.drag_context
            if drag is None:
                return False

            if drag.controller is not controller:
                self.status = "Drop canceled: keys and dials cannot be mixed."
                self.drag_context = None
                self._notify(WorkspaceEvent.DRAG_CANCELED, drag.source_side)
                return False

            source_profile = self._profiles[drag.source_side]
            target_profile = self._profiles[side]
            if source_profile is None or target_profile is None:
                self.drag_context = None
                return False

            source_page_id = drag.source_page_id
            target_page_id = self.get_view_page_id(side)
            if not target_page_id:
                self.drag_context = None
                return False

            if drag.source_side is side and source_page_id == target_page_id and drag.coordinate == coordinate:
                self.drag_context = None
                return False

            is_shared_profile_move = source_profile is target_profile
            self._record_history_snapshot()

            if drag.source_side is side:
                source_profile.remove_action(drag.controller, drag.coordinate, source_page_id)
                source_profile.set_action(drag.action, controller, coordinate, target_page_id)
                source_profile.add_required_plugin(plugin_uuid(drag.action))
                self._archive_service.copy_referenced_files(
                    drag.action, source_profile, source_profile, source_page_id, target_page_id
                )
                self._set_pane_view_page(side, target_page_id, update_active_page=True)
                self._refresh_after_edit(side)
                self.status = f"Moved action to {coordinate}."
                logger.info(
                    f"Moved action same-pane side={side.value} sourcePage={source_page_id} "
                    f"targetPage={target_page_id} coordinate={coordinate}"
                )
                self.drag_context = None
                self._notify(WorkspaceEvent.ACTION_MOVED, side)
                return True

            copy_only = (
                not is_shared_profile_move
                and self.lock_source_profile
                and drag.source_side is PaneSide.LEFT
                and side is PaneSide.RIGHT
            )
            if not copy_only:
                source_profile.remove_action(drag.controller, drag.coordinate, source_page_id)

            target_profile.set_action(drag.action, controller, coordinate, target_page_id)
            target_profile.add_required_plugin(plugin_uuid(drag.action))
            self._archive_service.copy_referenced_files(
                drag.action, source_profile, target_profile, source_page_id, target_page_id
            )
            self._set_pane_view_page(side, target_page_id, update_active_page=True)
            self._refresh_preflight_reports()
            self.drag_context = None

            if is_shared_profile_move:
                self.status = "Moved action within single profile."
                logger.info(
                    f"Moved action shared-profile sourcePage={source_page_id} "
                    f"targetPage={target_page_id} coordinate={coordinate}"
                )
                self._notify(WorkspaceEvent.ACTION_MOVED, side)
            elif copy_only:
                self.status = "Copied action to target."
                logger.info(
                    f"Copied action left->right sourcePage={source_page_id} "
                    f"targetPage={target_page_id} coordinate={coordinate}"
                )
                self._notify(WorkspaceEvent.ACTION_COPIED, side)
            else:
                self.status = f"Moved action from {drag.source_side.role} to {side.role}."
                logger.info(
                    f"Moved action cross-pane from={drag.source_side.value} to={side.value} "
                    f"sourcePage={source_page_id} targetPage={target_page_id} coordinate={coordinate}"
                )
                self._notify(WorkspaceEvent.ACTION_MOVED, side)
            return True

    # =================================================================
    # Internal: pane binding and view pages
    # =================================================================

    def _set_profile_for_pane(
        self, side: PaneSide, profile: ProfileArchive | None, preferred_page_id: str | None = None
    ) -> None:
        self.drag_context = None
        self._reset_folder_navigation(side)
        self._profiles[side] = profile
        self._view_page_ids[side] = (
            self._resolve_pane_page_id(profile, preferred_page_id) if profile is not None else ""
        )
        self._ensure_layout_mode_validity()

    def _ensure_layout_mode_validity(self) -> None:
        """Fall back to dual profile mode once the panes no longer share an archive."""
        if self._is_applying_history:
            return
        if self.is_single_profile_mode and not self.is_shared_profile_view:
            self.layout_mode = WorkspaceLayoutMode.DUAL_PROFILE

    def _set_pane_view_page(self, side: PaneSide, page_id: str, update_active_page: bool) -> None:
        profile = self._profiles[side]
        if profile is None:
            return

        resolved = self._resolve_pane_page_id(profile, page_id)
        self._view_page_ids[side] = resolved
        if update_active_page:
            profile.set_active_page(resolved)

    def _ensure_pane_view_page(self, side: PaneSide, update_active_page: bool) -> None:
        profile = self._profiles[side]
        if profile is None:
            self._view_page_ids[side] = ""
            return
        self._set_pane_view_page(side, self._view_page_ids[side], update_active_page)

    @staticmethod
    def _resolve_pane_page_id(profile: ProfileArchive, preferred_page_id: str | None) -> str:
        """Preferred page if it exists, else the active page, else the first known page."""
        candidate = normalize_page_id(preferred_page_id)
        if candidate and profile.has_page(candidate):
            return candidate

        active = normalize_page_id(profile.active_page_id)
        if active and profile.has_page(active):
            return active

        first = next(iter(profile.all_page_ids), "")
        if first:
            return normalize_page_id(first)
        return normalize_page_id(profile.template.working_page_id)

    @staticmethod
    def _is_visible_top_level_page(profile: ProfileArchive, page_id: str) -> bool:
        visible = unique_page_ids(profile.page_order) or [normalize_page_id(profile.active_page_id)]
        return normalize_page_id(page_id) in visible

    def _reset_folder_navigation(self, side: PaneSide) -> None:
        self._folder_navigation[side].clear()

    def _prune_folder_navigation(self, side: PaneSide) -> None:
        stack = self._folder_navigation[side]
        if not stack:
            return

        profile = self._profiles[side]
        if profile is None:
            stack.clear()
            return
        stack[:] = [page_id for page_id in stack if profile.has_page(page_id)]

    # =================================================================
    # Internal: preflight
    # =================================================================

    def _refresh_preflight(self, side: PaneSide) -> None:
        profile = self._profiles[side]
        self._preflight_reports[side] = self._validator.validate(profile) if profile is not None else None

    def _refresh_preflight_reports(self) -> None:
        self._refresh_preflight(PaneSide.LEFT)
        self._refresh_preflight(PaneSide.RIGHT)

    def _refresh_after_edit(self, side: PaneSide) -> None:
        """Revalidate the edited pane, or both when they share one archive."""
        if self.is_shared_profile_view:
            self._refresh_preflight_reports()
        else:
            self._refresh_preflight(side)
