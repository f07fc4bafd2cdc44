"""Pytest fixtures for tests."""

import json
import zipfile
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from sdprofile.models import AppConfig, ProfileArchive, ProfilePageState, ProfileTemplates
from sdprofile.services import ProfileArchiveService
from sdprofile.utils.filesystem import MemoryFileSystem

# Page ids with letters so folder casing is observable
PAGE_A = "aaaaaaaa-0000-4000-8000-000000000001"
PAGE_B = "bbbbbbbb-0000-4000-8000-000000000002"
PAGE_C = "cccccccc-0000-4000-8000-000000000003"

PLUGIN_UUID = "com.example.tools"


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config(temp_dir):
    """Config whose working directories live under temp_dir."""
    return AppConfig(work_dir=temp_dir / "work")


@pytest.fixture
def archive_service(config):
    return ProfileArchiveService(config)


@pytest.fixture
def sd15():
    return ProfileTemplates.get("sd15")


@pytest.fixture
def make_action():
    """Factory for action documents."""

    def _make(
        name: str = "Open",
        plugin: str | None = PLUGIN_UUID,
        image: str | None = None,
        folder: str | None = None,
        title: str | None = None,
    ) -> dict:
        action = {"Name": name, "UUID": f"{plugin or 'unknown'}.{name.lower()}", "Settings": {}, "State": 0}
        if plugin is not None:
            action["Plugin"] = {"Name": "Tools", "UUID": plugin, "Version": "1.0"}
        state = {}
        if image is not None:
            state["Image"] = image
        if title is not None:
            state["Title"] = title
        action["States"] = [state]
        if folder is not None:
            action["Settings"]["ProfileUUID"] = folder
        return action

    return _make


def _page_manifest(keypad: dict | None = None, encoder: dict | None = None, name: str = "") -> str:
    controllers = [{"Type": "Keypad", "Actions": keypad or {}}]
    if encoder is not None:
        controllers.append({"Type": "Encoder", "Actions": encoder})
    return json.dumps({"Controllers": controllers, "Icon": "", "Name": name})


@pytest.fixture
def build_profile_file(temp_dir):
    """
    Factory that writes a .streamDeckProfile zip.

    `pages` maps a page id to a dict with optional "keypad", "encoder" and
    "name" entries; page folders are written with `folder_case` ("upper" or
    "lower"). `extra_files` maps container-relative paths to bytes.
    """

    def _build(
        file_name: str = "Test.streamDeckProfile",
        template_id: str = "sd15",
        pages: dict[str, dict] | None = None,
        listed: list[str] | None = None,
        default: str | None = None,
        current: str | None = None,
        name: str = "Test Profile",
        device_model: str | None = None,
        required_plugins: list[str] | None = None,
        folder_case: str = "upper",
        extra_files: dict[str, bytes] | None = None,
        include_package: bool = True,
    ) -> Path:
        template = ProfileTemplates.get(template_id)
        pages = pages if pages is not None else {PAGE_A: {}}
        root = f"Profiles/{template.profile_root_name}"

        package = {
            "AppVersion": "7.3.0.22513",
            "DeviceModel": device_model or template.device_model,
            "FormatVersion": 1,
            "OSType": "Windows",
            "OSVersion": "10",
            "RequiredPlugins": required_plugins or [],
        }
        profile_manifest = {
            "Device": {"Model": device_model or template.device_model, "UUID": "device-1"},
            "Name": name,
            "Pages": {
                "Current": current or "00000000-0000-0000-0000-000000000000",
                "Default": default or template.default_page_id,
                "Pages": listed if listed is not None else list(pages),
            },
            "Version": "3.0",
        }

        path = temp_dir / file_name
        with zipfile.ZipFile(path, "w") as container:
            if include_package:
                container.writestr("package.json", json.dumps(package))
            container.writestr(f"{root}/manifest.json", json.dumps(profile_manifest))
            for page_id, page in pages.items():
                folder = page_id.upper() if folder_case == "upper" else page_id.lower()
                container.writestr(
                    f"{root}/Profiles/{folder}/manifest.json",
                    _page_manifest(page.get("keypad"), page.get("encoder"), page.get("name", "")),
                )
            for relative, data in (extra_files or {}).items():
                container.writestr(relative, data)
        return path

    return _build


@pytest.fixture
def memory_fs():
    return MemoryFileSystem()


@pytest.fixture
def memory_archive(memory_fs, sd15):
    """A one-page sd15 archive rooted at /work on an in-memory filesystem."""
    return ProfileArchive(
        filesystem=memory_fs,
        extracted_root=Path("/work"),
        template=sd15,
        name="Memory",
        profile_root_name=sd15.profile_root_name,
        active_page_id=PAGE_A,
        page_order=[PAGE_A],
        page_states={PAGE_A: ProfilePageState.empty(PAGE_A, sd15)},
    )
