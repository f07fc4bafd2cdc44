"""Unit tests for the ProfileArchive model."""

from pathlib import Path

import pytest

from sdprofile.models import ControllerKind, ProfileArchive, ProfilePageState, ProfileTemplates

PAGE_A = "aaaaaaaa-0000-4000-8000-000000000001"
PAGE_B = "bbbbbbbb-0000-4000-8000-000000000002"


@pytest.mark.unit
class TestArchiveNormalization:
    """Test page set repair on construction."""

    def test_ids_lowercased(self, sd15):
        archive = ProfileArchive(
            extracted_root=Path("/work"),
            template=sd15,
            profile_root_name=sd15.profile_root_name,
            active_page_id=PAGE_A.upper(),
            page_order=[PAGE_A.upper(), PAGE_A],
            page_states={PAGE_A.upper(): ProfilePageState.empty(PAGE_A, sd15)},
        )
        assert archive.page_order == [PAGE_A]
        assert archive.active_page_id == PAGE_A
        assert list(archive.page_states) == [PAGE_A]

    def test_missing_active_page_falls_back_to_order(self, sd15):
        archive = ProfileArchive(
            extracted_root=Path("/work"),
            template=sd15,
            profile_root_name=sd15.profile_root_name,
            active_page_id="missing",
            page_order=["missing", PAGE_B],
            page_states={PAGE_B: ProfilePageState.empty(PAGE_B, sd15)},
        )
        assert archive.active_page_id == PAGE_B
        assert archive.page_order == [PAGE_B]

    def test_empty_archive_gets_working_page(self, sd15):
        archive = ProfileArchive(
            extracted_root=Path("/work"), template=sd15, profile_root_name=sd15.profile_root_name
        )
        assert archive.active_page_id == sd15.working_page_id
        assert archive.page_order == [sd15.working_page_id]

    def test_active_page_appended_to_order(self, sd15):
        archive = ProfileArchive(
            extracted_root=Path("/work"),
            template=sd15,
            profile_root_name=sd15.profile_root_name,
            active_page_id=PAGE_B,
            page_order=[PAGE_A],
            page_states={
                PAGE_A: ProfilePageState.empty(PAGE_A, sd15),
                PAGE_B: ProfilePageState.empty(PAGE_B, sd15),
            },
        )
        assert archive.page_order == [PAGE_A, PAGE_B]

    def test_display_name_fallbacks(self, memory_archive):
        memory_archive.name = "  "
        assert memory_archive.display_name == "Untitled Profile"
        memory_archive.source_path = Path("/in/Gaming.streamDeckProfile")
        assert memory_archive.display_name == "Gaming"


@pytest.mark.unit
class TestArchivePages:
    """Test page operations."""

    def test_create_page(self, memory_archive):
        page_id = memory_archive.create_page()
        assert memory_archive.page_order == [PAGE_A, page_id]
        assert memory_archive.active_page_id == page_id
        assert page_id == page_id.lower()

    def test_remove_last_page_refused(self, memory_archive):
        assert memory_archive.remove_page(PAGE_A) is False
        assert memory_archive.has_page(PAGE_A)

    def test_remove_unknown_page(self, memory_archive):
        memory_archive.create_page()
        assert memory_archive.remove_page("nope") is False

    def test_remove_active_page_moves_active(self, memory_archive):
        new_page = memory_archive.create_page()
        assert memory_archive.remove_page(new_page)
        assert memory_archive.active_page_id == PAGE_A
        assert memory_archive.page_order == [PAGE_A]

    def test_set_active_page(self, memory_archive):
        assert memory_archive.set_active_page("nope") is False
        new_page = memory_archive.create_page()
        assert memory_archive.set_active_page(PAGE_A.upper())
        assert memory_archive.active_page_id == PAGE_A
        assert memory_archive.set_active_page(new_page)

    def test_all_page_ids_puts_hidden_pages_last(self, memory_archive, sd15):
        memory_archive.page_states[PAGE_B] = ProfilePageState.empty(PAGE_B, sd15)
        assert memory_archive.all_page_ids == [PAGE_A, PAGE_B]
        assert memory_archive.visible_page_ids() == [PAGE_A]


@pytest.mark.unit
class TestArchiveActions:
    """Test action placement."""

    def test_set_and_get(self, memory_archive, make_action):
        action = make_action()
        memory_archive.set_action(action, ControllerKind.KEYPAD, "1,0")
        assert memory_archive.get_action(ControllerKind.KEYPAD, "1,0") == action

        keypad = memory_archive.get_page(PAGE_A).manifest.controllers[0]
        assert keypad.type == "Keypad"
        assert keypad.actions == {"1,0": action}

    def test_set_none_removes(self, memory_archive, make_action):
        memory_archive.set_action(make_action(), ControllerKind.KEYPAD, "1,0")
        memory_archive.set_action(None, ControllerKind.KEYPAD, "1,0")
        assert memory_archive.get_action(ControllerKind.KEYPAD, "1,0") is None

    def test_set_on_missing_page_creates_it(self, memory_archive, make_action):
        memory_archive.set_action(make_action(), ControllerKind.KEYPAD, "0,0", PAGE_B)
        assert memory_archive.page_order == [PAGE_A, PAGE_B]
        assert memory_archive.get_action(ControllerKind.KEYPAD, "0,0", PAGE_B) is not None

    def test_neo_slots_hold_no_actions(self, memory_archive, make_action):
        memory_archive.set_action(make_action(), ControllerKind.NEO, "0,0", PAGE_B)
        assert not memory_archive.has_page(PAGE_B)
        assert memory_archive.get_actions(ControllerKind.NEO) == {}

    def test_remove_action(self, memory_archive, make_action):
        assert memory_archive.remove_action(ControllerKind.KEYPAD, "0,0") is False
        memory_archive.set_action(make_action(), ControllerKind.KEYPAD, "0,0")
        assert memory_archive.remove_action(ControllerKind.KEYPAD, "0,0") is True

    def test_referenced_plugins_and_folders(self, memory_archive, make_action):
        memory_archive.set_action(make_action(folder=PAGE_B.upper()), ControllerKind.KEYPAD, "0,0")
        memory_archive.set_action(make_action(plugin="com.other"), ControllerKind.KEYPAD, "1,0")
        assert memory_archive.referenced_plugin_uuids() == {"com.example.tools", "com.other"}
        assert memory_archive.referenced_folder_ids() == [PAGE_B]

    def test_add_required_plugin_sorted(self, memory_archive):
        memory_archive.add_required_plugin("com.b")
        memory_archive.add_required_plugin("com.a")
        memory_archive.add_required_plugin("com.b")
        memory_archive.add_required_plugin(None)
        assert memory_archive.package_manifest.required_plugins == ["com.a", "com.b"]

    def test_update_controllers_for_template(self, memory_archive, make_action):
        memory_archive.set_action(make_action(), ControllerKind.KEYPAD, "0,0")
        memory_archive.template = ProfileTemplates.get("sdplus")
        memory_archive.update_controllers_for_all_pages()
        types = [c.type for c in memory_archive.get_page(PAGE_A).manifest.controllers]
        assert types == ["Encoder", "Keypad"]


@pytest.mark.unit
class TestArchiveImages:
    """Test image reference resolution."""

    def test_resolves_in_page_folder_ignoring_case(self, memory_fs, memory_archive):
        page_dir = memory_archive.pages_root_path / PAGE_A.lower()
        memory_fs.make_dirs(page_dir / "images")
        memory_fs.write_bytes(page_dir / "images" / "Icon.PNG", b"png")

        resolved = memory_archive.resolve_image_path("Images/icon.png")
        assert resolved == page_dir / "images" / "Icon.PNG"

    def test_resolves_from_another_page(self, memory_fs, memory_archive, sd15):
        memory_archive.page_states[PAGE_B] = ProfilePageState.empty(PAGE_B, sd15)
        other_dir = memory_archive.pages_root_path / PAGE_B.upper() / "Images"
        memory_fs.make_dirs(other_dir)
        memory_fs.write_bytes(other_dir / "shared.png", b"png")

        assert memory_archive.resolve_image_path("Images/shared.png", PAGE_A) == other_dir / "shared.png"

    def test_missing_image(self, memory_archive):
        assert memory_archive.resolve_image_path("Images/nope.png") is None

    def test_directory_is_not_an_image(self, memory_fs, memory_archive):
        memory_fs.make_dirs(memory_archive.profile_root_path / "Images" / "dir.png")
        assert memory_archive.resolve_image_path("Images/dir.png") is None


@pytest.mark.unit
class TestArchiveSnapshots:
    """Test snapshot, restore and clone."""

    def test_restore_round_trip(self, memory_fs, memory_archive, make_action):
        memory_archive.set_action(make_action(), ControllerKind.KEYPAD, "2,1")
        snapshot = memory_archive.snapshot()

        restored = ProfileArchive.restore(snapshot, filesystem=memory_fs)
        assert restored.id == memory_archive.id
        assert restored.snapshot() == snapshot
        assert restored.filesystem is memory_fs

    def test_restored_archive_is_independent(self, memory_archive, make_action):
        memory_archive.set_action(make_action(), ControllerKind.KEYPAD, "2,1")
        restored = ProfileArchive.restore(memory_archive.snapshot())

        restored.remove_action(ControllerKind.KEYPAD, "2,1")
        assert memory_archive.get_action(ControllerKind.KEYPAD, "2,1") is not None

    def test_clone_gets_new_identity(self, memory_archive):
        clone = memory_archive.clone()
        assert clone.id != memory_archive.id
        assert clone.page_order == memory_archive.page_order
        assert clone.filesystem is memory_archive.filesystem

    def test_snapshot_is_immutable(self, memory_archive):
        snapshot = memory_archive.snapshot()
        with pytest.raises(Exception):
            snapshot.name = "changed"
