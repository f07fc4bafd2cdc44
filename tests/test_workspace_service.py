"""Tests for WorkspaceService."""

import zipfile

import pytest

from sdprofile.models import (
    AppConfig,
    ControllerKind,
    PaneSide,
    ProfilePageState,
    ProfileTemplates,
    WorkspaceLayoutMode,
)
from sdprofile.protocols import WorkspaceEvent
from sdprofile.services import WorkspaceService

LEFT = PaneSide.LEFT
RIGHT = PaneSide.RIGHT
KEYPAD = ControllerKind.KEYPAD

PAGE_A = "aaaaaaaa-0000-4000-8000-000000000001"
SUB_PAGE = "dddddddd-0000-4000-8000-000000000004"


class RecordingObserver:
    """Observer that records every workspace event."""

    def __init__(self):
        self.events = []

    def on_workspace_event(self, event, side=None):
        self.events.append((event, side))


def _pane_state(workspace):
    """Snapshots of both panes plus the pages they show."""
    snapshots = []
    for side in (LEFT, RIGHT):
        profile = workspace.get_profile(side)
        snapshots.append(profile.snapshot() if profile is not None else None)
    return snapshots, workspace.get_view_page_id(LEFT), workspace.get_view_page_id(RIGHT)


@pytest.fixture
def workspace(config, archive_service):
    return WorkspaceService(config, archive_service)


@pytest.fixture
def source(archive_service, sd15, make_action):
    """sd15 profile with one action at key 0,0 of its working page."""
    archive = archive_service.create_empty_profile(sd15, "Source")
    archive.set_action(make_action(), KEYPAD, "0,0")
    return archive


@pytest.fixture
def target(archive_service, sd15):
    return archive_service.create_empty_profile(sd15, "Target")


@pytest.fixture
def loaded(workspace, source, target):
    workspace.set_profile(LEFT, source)
    workspace.set_profile(RIGHT, target)
    return workspace


@pytest.fixture
def working_page(sd15):
    return sd15.working_page_id


@pytest.mark.unit
class TestDropPolicy:
    """Test copy/move semantics of drag and drop."""

    def test_locked_source_copies_to_target(self, loaded, working_page):
        assert loaded.begin_drag(LEFT, KEYPAD, "0,0")
        assert loaded.drop_action(RIGHT, KEYPAD, "1,1")

        assert loaded.status == "Copied action to target."
        assert loaded.get_profile(LEFT).get_action(KEYPAD, "0,0") is not None
        assert loaded.get_profile(RIGHT).get_action(KEYPAD, "1,1", working_page) is not None
        assert loaded.drag_context is None

    def test_copy_registers_required_plugin(self, loaded):
        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        loaded.drop_action(RIGHT, KEYPAD, "1,1")
        assert loaded.get_profile(RIGHT).package_manifest.required_plugins == ["com.example.tools"]

    def test_unlocked_source_moves_to_target(self, loaded):
        loaded.set_source_lock(False)
        assert loaded.status == "Source lock disabled: drag to target moves."

        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        assert loaded.drop_action(RIGHT, KEYPAD, "1,1")

        assert loaded.status == "Moved action from source to target."
        assert loaded.get_profile(LEFT).get_action(KEYPAD, "0,0") is None
        assert loaded.get_profile(RIGHT).get_action(KEYPAD, "1,1") is not None

    def test_target_to_source_always_moves(self, loaded, make_action):
        loaded.get_profile(RIGHT).set_action(make_action(name="Back"), KEYPAD, "2,2")

        loaded.begin_drag(RIGHT, KEYPAD, "2,2")
        assert loaded.drop_action(LEFT, KEYPAD, "3,0")

        assert loaded.status == "Moved action from target to source."
        assert loaded.get_profile(RIGHT).get_action(KEYPAD, "2,2") is None
        assert loaded.get_profile(LEFT).get_action(KEYPAD, "3,0")["Name"] == "Back"

    def test_same_pane_move(self, loaded):
        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        assert loaded.drop_action(LEFT, KEYPAD, "2,0")

        assert loaded.status == "Moved action to 2,0."
        assert loaded.get_profile(LEFT).get_action(KEYPAD, "0,0") is None
        assert loaded.get_profile(LEFT).get_action(KEYPAD, "2,0") is not None

    def test_drop_on_same_slot_is_noop(self, loaded):
        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        assert loaded.drop_action(LEFT, KEYPAD, "0,0") is False
        assert loaded.get_profile(LEFT).get_action(KEYPAD, "0,0") is not None
        assert loaded.drag_context is None

    def test_keys_and_dials_cannot_mix(self, loaded):
        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        assert loaded.drop_action(RIGHT, ControllerKind.ENCODER, "0,0") is False

        assert loaded.status == "Drop canceled: keys and dials cannot be mixed."
        assert loaded.drag_context is None
        assert loaded.get_profile(RIGHT).get_actions(ControllerKind.ENCODER) == {}

    def test_drop_without_drag(self, loaded):
        assert loaded.drop_action(RIGHT, KEYPAD, "0,0") is False

    def test_begin_drag_on_empty_slot(self, loaded):
        assert loaded.begin_drag(LEFT, KEYPAD, "4,2") is False
        assert loaded.drag_context is None

    def test_drag_holds_a_copy(self, loaded):
        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        loaded.get_profile(LEFT).get_action(KEYPAD, "0,0")["Name"] = "Changed"
        assert loaded.drag_context.action["Name"] == "Open"

    def test_cancel_drag(self, loaded):
        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        loaded.cancel_drag()
        assert loaded.drag_context is None

    @pytest.mark.parametrize("shared", [False, True], ids=["distinct", "single_profile"])
    @pytest.mark.parametrize("locked", [True, False], ids=["locked", "unlocked"])
    @pytest.mark.parametrize(
        "from_side,to_side",
        [(LEFT, RIGHT), (RIGHT, LEFT), (LEFT, LEFT), (RIGHT, RIGHT)],
        ids=["left_to_right", "right_to_left", "left_to_left", "right_to_right"],
    )
    def test_copy_or_move(self, loaded, make_action, shared, locked, from_side, to_side):
        if shared:
            loaded.add_page(LEFT)
            loaded.split_profile_view(LEFT)
        loaded.set_source_lock(locked)

        dragged_from = loaded.get_profile(from_side)
        from_page = loaded.get_view_page_id(from_side)
        to_page = loaded.get_view_page_id(to_side)
        dragged_from.set_action(make_action(name="Dragged"), KEYPAD, "0,0", from_page)

        assert loaded.begin_drag(from_side, KEYPAD, "0,0")
        assert loaded.drop_action(to_side, KEYPAD, "1,0")

        copied = not shared and locked and from_side is LEFT and to_side is RIGHT
        assert (dragged_from.get_action(KEYPAD, "0,0", from_page) is not None) is copied
        assert loaded.get_profile(to_side).get_action(KEYPAD, "1,0", to_page)["Name"] == "Dragged"


@pytest.mark.unit
class TestUndoRedo:
    """Test workspace history."""

    def test_nothing_to_undo(self, workspace):
        assert workspace.undo() is False
        assert workspace.status == "Nothing to undo."
        assert workspace.redo() is False
        assert workspace.status == "Nothing to redo."

    def test_undo_and_redo_copy(self, loaded):
        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        loaded.drop_action(RIGHT, KEYPAD, "1,1")

        assert loaded.undo()
        assert loaded.status == "Undo complete."
        assert loaded.get_profile(RIGHT).get_action(KEYPAD, "1,1") is None
        assert loaded.can_redo

        assert loaded.redo()
        assert loaded.status == "Redo complete."
        assert loaded.get_profile(RIGHT).get_action(KEYPAD, "1,1") is not None

    def test_undo_keeps_archive_identity(self, loaded, source):
        loaded.update_profile_name(LEFT, "Renamed")
        loaded.undo()
        restored = loaded.get_profile(LEFT)
        assert restored.id == source.id
        assert restored.name == "Source"

    def test_new_edit_clears_redo(self, loaded):
        loaded.update_profile_name(LEFT, "One")
        loaded.undo()
        assert loaded.can_redo
        loaded.update_profile_name(LEFT, "Two")
        assert not loaded.can_redo

    def test_history_depth_is_bounded(self, temp_dir, archive_service, source):
        workspace = WorkspaceService(AppConfig(work_dir=temp_dir / "work", history_depth=2), archive_service)
        workspace.set_profile(LEFT, source)
        workspace.update_profile_name(LEFT, "A")
        workspace.update_profile_name(LEFT, "B")

        assert workspace.undo()
        assert workspace.undo()
        assert workspace.get_profile(LEFT).name == "Source"
        assert workspace.undo() is False

    def test_refused_operations_record_nothing(self, workspace):
        workspace.set_source_lock(True)
        workspace.split_profile_view(LEFT)
        assert workspace.status == "Load a profile first."
        assert not workspace.can_undo


def _copy_drop(workspace):
    workspace.begin_drag(LEFT, KEYPAD, "0,0")
    assert workspace.drop_action(RIGHT, KEYPAD, "1,1")


def _move_drop(workspace):
    workspace.begin_drag(LEFT, KEYPAD, "0,0")
    assert workspace.drop_action(RIGHT, KEYPAD, "2,1")


def _add_page(workspace):
    assert workspace.add_page(LEFT) is not None


def _remove_page(workspace):
    assert workspace.remove_page(LEFT, workspace.get_view_page_id(LEFT))


def _update_template(workspace):
    assert workspace.update_template(LEFT, "mini")


def _unlock(workspace):
    workspace.set_source_lock(False)


def _add_far_action(workspace):
    workspace.get_profile(LEFT).set_action({"Name": "Far", "Plugin": {"UUID": "com.example.far"}}, KEYPAD, "4,2")


@pytest.mark.unit
class TestUndoRedoSnapshots:
    """Undo returns both panes to their exact prior state; redo to the edited one."""

    @pytest.mark.parametrize(
        "prepare,mutate",
        [
            (None, _copy_drop),
            (_unlock, _move_drop),
            (None, _add_page),
            (_add_page, _remove_page),
            (_add_far_action, _update_template),
        ],
        ids=["copy_drop", "move_drop", "add_page", "remove_page", "update_template"],
    )
    def test_round_trip(self, loaded, prepare, mutate):
        if prepare is not None:
            prepare(loaded)
        before = _pane_state(loaded)

        mutate(loaded)
        after = _pane_state(loaded)
        assert after != before

        assert loaded.undo()
        assert _pane_state(loaded) == before

        assert loaded.redo()
        assert _pane_state(loaded) == after


@pytest.mark.unit
class TestSingleProfileMode:
    """Test showing one profile in both panes."""

    def test_enable_and_move_between_pages(self, loaded, source, working_page):
        new_page = loaded.add_page(LEFT)
        loaded.split_profile_view(LEFT)

        assert loaded.status == "Single profile mode enabled."
        assert loaded.is_single_profile_mode
        assert loaded.is_shared_profile_view
        assert loaded.get_profile(RIGHT) is source
        assert loaded.get_view_page_id(LEFT) == new_page
        assert loaded.get_view_page_id(RIGHT) == working_page

        loaded.begin_drag(RIGHT, KEYPAD, "0,0")
        assert loaded.drop_action(LEFT, KEYPAD, "1,0")

        assert loaded.status == "Moved action within single profile."
        assert source.get_action(KEYPAD, "0,0", working_page) is None
        assert source.get_action(KEYPAD, "1,0", new_page) is not None

    def test_disable_clones_profile(self, loaded, source):
        loaded.split_profile_view(LEFT)
        loaded.split_profile_view(LEFT)

        assert loaded.status == "Single profile mode disabled."
        assert loaded.layout_mode is WorkspaceLayoutMode.DUAL_PROFILE
        assert loaded.get_profile(LEFT) is source
        clone = loaded.get_profile(RIGHT)
        assert clone is not source
        assert clone.id != source.id
        assert clone.display_name == "Source"

    def test_undo_split_restores_target(self, loaded):
        loaded.split_profile_view(LEFT)
        loaded.undo()

        assert not loaded.is_shared_profile_view
        assert loaded.layout_mode is WorkspaceLayoutMode.DUAL_PROFILE
        assert loaded.get_profile(RIGHT).display_name == "Target"

    def test_undo_inside_single_mode_keeps_shared_view(self, loaded):
        loaded.split_profile_view(LEFT)
        loaded.update_profile_name(LEFT, "Shared")
        loaded.undo()

        assert loaded.is_shared_profile_view
        assert loaded.is_single_profile_mode
        assert loaded.get_profile(RIGHT).name == "Source"

    def test_source_lock_message_in_single_mode(self, loaded):
        loaded.split_profile_view(LEFT)
        loaded.set_source_lock(False)
        assert loaded.status == "Source lock updated (single profile mode always moves actions)."

    def test_closing_a_pane_leaves_single_mode(self, loaded):
        loaded.split_profile_view(LEFT)
        loaded.close_profile(RIGHT)
        assert loaded.layout_mode is WorkspaceLayoutMode.DUAL_PROFILE


@pytest.mark.unit
class TestPages:
    """Test page management through the workspace."""

    def test_add_page(self, loaded):
        page_id = loaded.add_page(LEFT)
        assert loaded.status == "Added page to source profile."
        assert loaded.get_view_page_id(LEFT) == page_id
        assert loaded.get_profile(LEFT).active_page_id == page_id

    def test_page_limit(self, temp_dir, archive_service, source):
        workspace = WorkspaceService(AppConfig(work_dir=temp_dir / "work", max_pages=1), archive_service)
        workspace.set_profile(LEFT, source)
        assert workspace.add_page(LEFT) is None
        assert workspace.status == "Page limit reached (1)."

    def test_cannot_remove_last_page(self, loaded, working_page):
        assert loaded.remove_page(LEFT, working_page) is False
        assert loaded.status == "Cannot delete the last page."

    def test_remove_page(self, loaded, working_page):
        page_id = loaded.add_page(LEFT)
        assert loaded.remove_page(LEFT, page_id)
        assert loaded.status == "Removed page from source profile."
        assert loaded.get_view_page_id(LEFT) == working_page
        assert not loaded.get_profile(LEFT).has_page(page_id)

    def test_remove_unknown_page(self, loaded):
        loaded.add_page(LEFT)
        assert loaded.remove_page(LEFT, "nope") is False
        assert loaded.status == "Page remove failed."

    def test_select_page(self, loaded, working_page):
        loaded.add_page(LEFT)
        loaded.select_page(LEFT, working_page.upper())
        assert loaded.status == "Switched source page."
        assert loaded.get_view_page_id(LEFT) == working_page
        assert loaded.get_profile(LEFT).active_page_id == working_page

    def test_select_unknown_page_falls_back(self, loaded, working_page):
        loaded.select_page(LEFT, "nope")
        assert loaded.get_view_page_id(LEFT) == working_page


@pytest.mark.unit
class TestFolderNavigation:
    """Test opening folder actions and navigating back."""

    @pytest.fixture
    def folder_source(self, source, sd15, make_action):
        source.page_states[SUB_PAGE] = ProfilePageState.empty(SUB_PAGE, sd15)
        source.set_action(make_action(name="Folder", folder=SUB_PAGE.upper()), KEYPAD, "1,0")
        return source

    def test_open_and_back(self, workspace, folder_source, working_page):
        workspace.set_profile(LEFT, folder_source)

        assert workspace.open_folder_action(LEFT, KEYPAD, "1,0")
        assert workspace.status == "Opened folder page."
        assert workspace.get_view_page_id(LEFT) == SUB_PAGE
        assert workspace.can_navigate_folder_back(LEFT)

        assert workspace.navigate_folder_back(LEFT)
        assert workspace.status == "Returned from folder."
        assert workspace.get_view_page_id(LEFT) == working_page

        assert workspace.navigate_folder_back(LEFT) is False
        assert workspace.status == "No folder history on this pane."

    def test_named_folder(self, workspace, folder_source):
        folder_source.update_page_name("Tools", SUB_PAGE)
        workspace.set_profile(LEFT, folder_source)
        workspace.open_folder_action(LEFT, KEYPAD, "1,0")
        assert workspace.status == "Opened folder Tools."

    def test_missing_folder_target(self, workspace, source, make_action):
        source.set_action(make_action(folder="eeeeeeee-0000-4000-8000-000000000005"), KEYPAD, "1,0")
        workspace.set_profile(LEFT, source)

        assert workspace.open_folder_action(LEFT, KEYPAD, "1,0") is False
        assert workspace.status == "Folder target is missing in this profile."

    def test_non_folder_and_encoder_slots(self, workspace, folder_source):
        workspace.set_profile(LEFT, folder_source)
        assert workspace.open_folder_action(LEFT, KEYPAD, "0,0") is False
        assert workspace.open_folder_action(LEFT, ControllerKind.ENCODER, "1,0") is False

    def test_selecting_top_level_page_resets_history(self, workspace, folder_source, working_page):
        workspace.set_profile(LEFT, folder_source)
        workspace.open_folder_action(LEFT, KEYPAD, "1,0")
        workspace.select_page(LEFT, working_page)
        assert not workspace.can_navigate_folder_back(LEFT)


@pytest.mark.unit
class TestProfileEdits:
    """Test template changes, renames, deletes and closing."""

    def test_update_template_prunes_actions(self, loaded, make_action):
        profile = loaded.get_profile(LEFT)
        profile.set_action(make_action(name="Far"), KEYPAD, "4,2")

        assert loaded.update_template(LEFT, "mini")
        assert loaded.status == "Set source template to Stream Deck Mini."
        assert profile.get_action(KEYPAD, "0,0") is not None
        assert profile.get_action(KEYPAD, "4,2") is None
        assert profile.package_manifest.device_model == ProfileTemplates.get("mini").device_model

    def test_update_template_noop(self, loaded):
        assert loaded.update_template(LEFT, "sd15") is False
        assert loaded.update_template(LEFT, "unknown") is False

    def test_update_template_to_dial_device(self, loaded):
        loaded.update_template(RIGHT, "sdplus")
        controllers = loaded.get_profile(RIGHT).get_page(loaded.get_view_page_id(RIGHT)).manifest.controllers
        assert [c.type for c in controllers] == ["Encoder", "Keypad"]

    def test_blank_name_becomes_untitled(self, loaded):
        loaded.update_profile_name(LEFT, "   ")
        assert loaded.get_profile(LEFT).name == "Untitled Profile"
        assert loaded.status == "Renamed source profile."

    def test_remove_action(self, loaded):
        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        assert loaded.remove_action(LEFT, KEYPAD, "0,0")
        assert loaded.status == "Deleted key action."
        assert loaded.drag_context is None
        assert loaded.remove_action(LEFT, KEYPAD, "0,0") is False

    def test_close_profile(self, loaded):
        loaded.close_profile(RIGHT)
        assert loaded.status == "Closed target profile."
        assert loaded.get_profile(RIGHT) is None
        assert loaded.get_view_page_id(RIGHT) == ""
        assert loaded.get_preflight_report(RIGHT) is None

        loaded.close_profile(RIGHT)
        assert loaded.status == "No target profile loaded."

    def test_create_empty_target_uses_source_template(self, workspace, source):
        workspace.set_profile(LEFT, source)
        assert workspace.create_empty_target()
        assert workspace.status == "Created empty target profile (Stream Deck)."
        assert workspace.get_profile(RIGHT).template.id == "sd15"

    def test_create_empty_target_with_template(self, workspace):
        workspace.create_empty_target("sdxl")
        assert workspace.get_profile(RIGHT).template.id == "sdxl"

    def test_create_empty_target_default_template(self, workspace):
        workspace.create_empty_target()
        assert workspace.get_profile(RIGHT).template.id == "sdplusxl"


@pytest.mark.integration
class TestLoadAndSave:
    """Test file operations through the workspace."""

    def test_rejects_other_extensions(self, workspace, temp_dir):
        assert workspace.load_profile_from_path(LEFT, temp_dir / "profile.zip") is False
        assert workspace.status == "Only .streamDeckProfile files are supported."

    def test_rejects_blank_path(self, workspace):
        assert workspace.load_profile_from_path(LEFT, "") is False
        assert workspace.status == "Invalid profile path."

    def test_failed_load_keeps_panes(self, loaded, temp_dir, source):
        broken = temp_dir / "Broken.streamDeckProfile"
        broken.write_bytes(b"nope")

        assert loaded.load_profile_from_path(LEFT, broken) is False
        assert loaded.status.startswith("Failed to load profile:")
        assert loaded.get_profile(LEFT) is source

    def test_load(self, workspace, build_profile_file):
        path = build_profile_file()
        assert workspace.load_profile_from_path(LEFT, path)
        assert workspace.status == "Loaded Test.streamDeckProfile."
        assert workspace.get_profile(LEFT).display_name == "Test Profile"
        assert workspace.get_preflight_report(LEFT) is not None

    def test_save_target(self, loaded, temp_dir, archive_service, working_page):
        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        loaded.drop_action(RIGHT, KEYPAD, "1,1")

        output = temp_dir / "out.streamDeckProfile"
        assert loaded.save_profile(RIGHT, output)
        assert loaded.status == "Saved out.streamDeckProfile."

        reloaded = archive_service.load_profile(output)
        assert reloaded.get_action(KEYPAD, "1,1", working_page) is not None

    def test_save_reports_preflight_errors(self, loaded, temp_dir, make_action):
        loaded.get_profile(RIGHT).set_action(
            make_action(folder="eeeeeeee-0000-4000-8000-000000000005"), KEYPAD, "0,0"
        )
        assert loaded.save_profile(RIGHT, temp_dir / "out.streamDeckProfile")
        assert loaded.status == "Saved out.streamDeckProfile with 1 preflight error(s)."

    def test_save_after_undoing_saved_template_change(
        self, workspace, build_profile_file, make_action, temp_dir, sd15
    ):
        root = f"Profiles/{sd15.profile_root_name}"
        icon = f"{root}/Profiles/{PAGE_A.upper()}/Images/icon.png"
        path = build_profile_file(
            pages={PAGE_A: {"keypad": {"0,0": make_action(image="Images/icon.png")}}},
            extra_files={icon: b"png"},
        )
        assert workspace.load_profile_from_path(LEFT, path)

        assert workspace.update_template(LEFT, "sdxl")
        assert workspace.save_profile(LEFT, temp_dir / "one.streamDeckProfile")
        assert workspace.undo()

        report = workspace.get_preflight_report(LEFT)
        assert report.error_count == 0, report.issues
        assert workspace.get_profile(LEFT).profile_root_path.is_dir()

        output = temp_dir / "two.streamDeckProfile"
        assert workspace.save_profile(LEFT, output)
        with zipfile.ZipFile(output) as container:
            names = container.namelist()
        roots = {name.split("/")[1] for name in names if name.startswith("Profiles/") and name.count("/") >= 2}
        assert roots == {sd15.profile_root_name}
        assert icon in names

    def test_save_without_profile(self, workspace, temp_dir):
        assert workspace.save_profile(RIGHT, temp_dir / "out.streamDeckProfile") is False
        assert workspace.status == "No target profile loaded."


@pytest.mark.unit
class TestObservers:
    """Test event notification."""

    def test_events_for_copy(self, loaded):
        observer = RecordingObserver()
        loaded.register_observer(observer)

        loaded.begin_drag(LEFT, KEYPAD, "0,0")
        loaded.drop_action(RIGHT, KEYPAD, "1,1")

        assert observer.events == [
            (WorkspaceEvent.DRAG_STARTED, LEFT),
            (WorkspaceEvent.ACTION_COPIED, RIGHT),
        ]

    def test_unregister(self, loaded):
        observer = RecordingObserver()
        loaded.register_observer(observer)
        loaded.unregister_observer(observer)
        loaded.update_profile_name(LEFT, "Other")
        assert observer.events == []

    def test_failing_observer_does_not_block_others(self, loaded):
        class Broken:
            def on_workspace_event(self, event, side=None):
                raise RuntimeError("boom")

        observer = RecordingObserver()
        loaded.register_observer(Broken())
        loaded.register_observer(observer)
        loaded.update_profile_name(LEFT, "Other")
        assert observer.events == [(WorkspaceEvent.PROFILE_RENAMED, LEFT)]

    def test_register_twice_notifies_once(self, loaded):
        observer = RecordingObserver()
        loaded.register_observer(observer)
        loaded.register_observer(observer)
        loaded.update_profile_name(LEFT, "Other")
        assert observer.events == [(WorkspaceEvent.PROFILE_RENAMED, LEFT)]

    def test_subscriber_without_callback_is_skipped(self, loaded):
        observer = RecordingObserver()
        loaded.register_observer(object())
        loaded.register_observer(observer)
        loaded.unregister_observer(RecordingObserver())
        loaded.update_profile_name(LEFT, "Other")
        assert observer.events == [(WorkspaceEvent.PROFILE_RENAMED, LEFT)]
