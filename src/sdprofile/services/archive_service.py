"""Service for loading and saving profile archives.

A profile archive is a zip container with this layout:

    package.json
    Profiles/<ROOT>.sdProfile/manifest.json
    Profiles/<ROOT>.sdProfile/Profiles/<PAGE-ID>/manifest.json
    Profiles/<ROOT>.sdProfile/Profiles/<PAGE-ID>/Images/...

Loading unpacks the container into a private working directory and builds a
ProfileArchive from it. Saving stages a copy of that directory, rewrites the
manifests from the model and zips the result. The working directory is never
modified by a save: when the template changed, the profile root folder is
renamed inside the staging copy only.
"""

import io
import logging
import os
import platform
import tempfile
import uuid
import zipfile
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from sdprofile.exceptions import (
    ArchiveSaveError,
    ErrorContext,
    InvalidArchiveError,
    SDProfileError,
    collect_errors,
    wrap_archive_error,
)
from sdprofile.models import (
    AppConfig,
    DeviceManifest,
    PackageManifest,
    PageManifest,
    PagesManifest,
    ProfileArchive,
    ProfilePageState,
    ProfileTemplate,
    ProfileTemplates,
    RootProfileManifest,
    ZERO_UUID,
    folder_profile_id,
    normalize_page_id,
    referenced_image_paths,
    unique_page_ids,
)
from sdprofile.models.action import ActionDocument
from sdprofile.utils.filesystem import (
    FileSystem,
    LocalFileSystem,
    canonicalize_page_folders,
    copy_directory,
    find_child_ignore_case,
    merge_directory,
    read_text,
    resolve_case_insensitive_path,
    split_relative,
    write_text,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

PROFILE_EXTENSION = ".streamDeckProfile"
PROFILE_ROOT_SUFFIX = ".sdprofile"
MANIFEST_NAME = "manifest.json"
PACKAGE_MANIFEST_NAME = "package.json"

DEFAULT_APP_VERSION = "7.3.0.22513"
DEFAULT_FORMAT_VERSION = 1
DEFAULT_OS_TYPE = "Windows"
DEFAULT_PROFILE_VERSION = "3.0"
DEFAULT_PROFILE_NAME = "Untitled Profile"


class ProfileArchiveService:
    """
    Loads, creates and saves profile archives.

    This service is responsible for:
    - Unpacking a container and reconciling its three page references
      (current, default and listed) with the page folders found on disk
    - Creating a blank profile for a device template
    - Staging, canonicalizing and repackaging a profile on save
    - Copying the files an action references when it moves between pages

    The service holds no profile state; every call takes the archive it
    operates on.
    """

    def __init__(self, config: AppConfig | None = None, filesystem: FileSystem | None = None):
        """
        Initialize the ProfileArchiveService.

        Args:
            config: Application configuration (work_dir is used for extraction
                    and staging directories)
            filesystem: Filesystem to operate on (defaults to the local disk)
        """
        self.config = config or AppConfig()
        self.filesystem = filesystem or LocalFileSystem()

    # =================================================================
    # Load
    # =================================================================

    def load_profile(self, archive_path: Path) -> ProfileArchive:
        """
        Unpack and parse a profile archive.

        Args:
            archive_path: Path to a .streamDeckProfile container

        Returns:
            The loaded profile

        Raises:
            InvalidArchiveError: If the container is not a zip, lacks
                package.json or a profile root, or has no loadable page
        """
        archive_path = Path(archive_path)
        logger.info(f"Loading profile archive={archive_path.name}")
        work_dir = self.make_working_directory()

        try:
            return self._load_extracted(archive_path, work_dir)
        except Exception:
            with ErrorContext(f"remove working directory {work_dir}", re_raise=False):
                self.filesystem.remove_tree(work_dir)
            raise

    def _load_extracted(self, archive_path: Path, work_dir: Path) -> ProfileArchive:
        fs = self.filesystem
        try:
            self._extract(archive_path, work_dir)
        except (zipfile.BadZipFile, OSError) as e:
            raise wrap_archive_error(e, str(archive_path)) from e

        package_path = resolve_case_insensitive_path(fs, work_dir, PACKAGE_MANIFEST_NAME)
        if package_path is None or not fs.is_file(package_path):
            raise InvalidArchiveError("Invalid archive: missing package.json", path=str(archive_path))
        package_manifest = self._read_archive_manifest(package_path, PackageManifest, archive_path)

        profile_root_name = self._find_profile_root_name(work_dir, archive_path)
        profile_root_path = work_dir / "Profiles" / profile_root_name
        root_manifest_path = resolve_case_insensitive_path(fs, profile_root_path, MANIFEST_NAME)
        if root_manifest_path is None or not fs.is_file(root_manifest_path):
            raise InvalidArchiveError("Invalid archive: missing profile manifest.", path=str(archive_path))
        profile_manifest = self._read_archive_manifest(root_manifest_path, RootProfileManifest, archive_path)

        if not (profile_manifest.name or "").strip():
            profile_manifest.name = archive_path.stem

        device_model = package_manifest.device_model
        if device_model is None and profile_manifest.device is not None:
            device_model = profile_manifest.device.model
        template = ProfileTemplates.get_by_device_model(device_model)

        pages = profile_manifest.pages or PagesManifest()
        pages_root_path = profile_root_path / "Profiles"
        discovered_ids = self._discover_page_ids(pages_root_path)
        listed_ids = unique_page_ids(pages.pages or [])
        default_page_id = normalize_page_id(pages.default or template.default_page_id)

        candidate_ids = unique_page_ids([*listed_ids, default_page_id, *discovered_ids])
        if not candidate_ids:
            candidate_ids = [normalize_page_id(template.working_page_id)]

        page_states: dict[str, ProfilePageState] = {}
        for page_id in candidate_ids:
            manifest = self._load_page_manifest(pages_root_path, page_id)
            if manifest is None:
                continue
            page_states[page_id] = ProfilePageState.from_manifest(page_id, manifest)

        if not page_states:
            raise InvalidArchiveError("No valid page manifests found in profile.", path=str(archive_path))

        page_order = self._resolve_page_order(listed_ids, default_page_id, discovered_ids, page_states)
        active_page_id = self._select_active_page_id(
            profile_manifest, page_order, page_states, template.working_page_id
        )
        package_manifest.device_model = template.device_model

        archive = ProfileArchive(
            filesystem=fs,
            source_path=archive_path,
            extracted_root=work_dir,
            template=template,
            name=profile_manifest.name or archive_path.stem,
            profile_root_name=profile_root_name,
            active_page_id=active_page_id,
            page_order=page_order,
            page_states=page_states,
            package_manifest=package_manifest,
            profile_manifest=profile_manifest,
        )

        logger.info(
            f"Loaded profile name={archive.display_name} pages={len(archive.page_order)} "
            f"device={template.device_model}"
        )
        return archive

    @staticmethod
    def _resolve_page_order(
        listed_ids: list[str],
        default_page_id: str,
        discovered_ids: list[str],
        page_states: dict[str, ProfilePageState],
    ) -> list[str]:
        """Visible page order: listed pages that loaded, else a single fallback, then other discovered pages."""
        page_order = [page_id for page_id in listed_ids if page_id in page_states]

        if not page_order:
            loaded_discovered = [page_id for page_id in discovered_ids if page_id in page_states]
            first_with_actions = next(
                (page_id for page_id in loaded_discovered if page_states[page_id].has_actions), None
            )
            if first_with_actions is not None:
                page_order = [first_with_actions]
            elif default_page_id in page_states:
                page_order = [default_page_id]
            elif loaded_discovered:
                page_order = [loaded_discovered[0]]

        for page_id in discovered_ids:
            if page_id == default_page_id or page_id not in page_states:
                continue
            if page_id not in page_order:
                page_order.append(page_id)

        if not page_order:
            page_order = sorted(page_states)
        return page_order

    @staticmethod
    def _select_active_page_id(
        profile_manifest: RootProfileManifest,
        page_order: list[str],
        page_states: dict[str, ProfilePageState],
        fallback_page_id: str,
    ) -> str:
        pages = profile_manifest.pages or PagesManifest()

        current = normalize_page_id(pages.current)
        if current and current != normalize_page_id(ZERO_UUID) and current in page_states:
            return current

        candidates = unique_page_ids([*page_order, *(pages.pages or [])])

        for page_id in candidates:
            state = page_states.get(page_id)
            if state is not None and state.has_actions:
                return page_id

        for page_id in candidates:
            if page_id in page_states:
                return page_id

        default_id = normalize_page_id(pages.default)
        if default_id and default_id in page_states:
            return default_id

        fallback_id = normalize_page_id(fallback_page_id)
        if fallback_id in page_states:
            return fallback_id

        return sorted(page_states)[0] if page_states else fallback_id

    def _find_profile_root_name(self, work_dir: Path, archive_path: Path) -> str:
        profiles_root = work_dir / "Profiles"
        if not self.filesystem.is_dir(profiles_root):
            raise InvalidArchiveError("Invalid archive: missing Profiles directory.", path=str(archive_path))

        for entry in self.filesystem.list_dir(profiles_root):
            if self.filesystem.is_dir(entry) and entry.name.lower().endswith(PROFILE_ROOT_SUFFIX):
                return entry.name

        raise InvalidArchiveError("Missing profile root (.sdProfile folder).", path=str(archive_path))

    def _discover_page_ids(self, pages_root: Path) -> list[str]:
        """Ids of page folders that contain a manifest, in folder name order."""
        fs = self.filesystem
        if not fs.is_dir(pages_root):
            return []

        ids = []
        for entry in fs.list_dir(pages_root):
            if not fs.is_dir(entry):
                continue
            manifest_path = resolve_case_insensitive_path(fs, entry, MANIFEST_NAME)
            if manifest_path is not None and fs.is_file(manifest_path):
                ids.append(entry.name)
        return unique_page_ids(ids)

    def _existing_page_folder(self, pages_root: Path, page_id: str) -> Path | None:
        fs = self.filesystem
        if not fs.is_dir(pages_root):
            return None

        for name in (page_id.upper(), page_id.lower()):
            if fs.is_dir(pages_root / name):
                return pages_root / name
        return find_child_ignore_case(fs, pages_root, page_id)

    def _load_page_manifest(self, pages_root: Path, page_id: str) -> PageManifest | None:
        """Parse a page's manifest; missing or unreadable manifests yield None."""
        folder = self._existing_page_folder(pages_root, page_id)
        if folder is None:
            return None

        manifest_path = resolve_case_insensitive_path(self.filesystem, folder, MANIFEST_NAME)
        if manifest_path is None or not self.filesystem.is_file(manifest_path):
            return None

        try:
            return PageManifest.model_validate_json(read_text(self.filesystem, manifest_path))
        except (ValidationError, ValueError) as e:
            logger.warning(f"Skipping page {page_id}: manifest could not be parsed ({e})")
            return None

    def _read_archive_manifest(
        self, path: Path, model_type: type[M], archive_path: Path
    ) -> M:
        try:
            return model_type.model_validate_json(read_text(self.filesystem, path))
        except (ValidationError, ValueError) as e:
            raise InvalidArchiveError(
                f"Invalid archive: {path.name} could not be parsed.",
                path=str(archive_path),
                original_error=str(e),
            ) from e

    # =================================================================
    # Create
    # =================================================================

    def create_empty_profile(self, template: ProfileTemplate, name: str = DEFAULT_PROFILE_NAME) -> ProfileArchive:
        """
        Create a blank profile for a device template.

        The profile has the template's working page (visible and active) and
        its default page (loaded, not listed), both without actions.
        """
        logger.info(f"Creating empty profile template={template.id} name={name}")
        fs = self.filesystem
        work_dir = self.make_working_directory()
        profile_root_path = work_dir / "Profiles" / template.profile_root_name
        pages_root_path = profile_root_path / "Profiles"

        fs.make_dirs(pages_root_path)
        fs.make_dirs(profile_root_path / "Images")

        default_page_path = pages_root_path / template.default_page_id.upper()
        working_page_path = pages_root_path / template.working_page_id.upper()
        fs.make_dirs(default_page_path / "Images")
        fs.make_dirs(working_page_path / "Images")

        package_manifest = PackageManifest(
            app_version=DEFAULT_APP_VERSION,
            device_model=template.device_model,
            device_settings=None,
            format_version=DEFAULT_FORMAT_VERSION,
            os_type=DEFAULT_OS_TYPE,
            os_version=platform.version(),
            required_plugins=[],
        )
        profile_manifest = RootProfileManifest(
            device=DeviceManifest(model=template.device_model, uuid=str(uuid.uuid4()).lower()),
            name=name,
            pages=PagesManifest(
                current=ZERO_UUID,
                default=template.default_page_id,
                pages=[template.working_page_id],
            ),
            version=DEFAULT_PROFILE_VERSION,
        )

        default_state = ProfilePageState.empty(template.default_page_id, template)
        working_state = ProfilePageState.empty(template.working_page_id, template)

        write_text(fs, work_dir / PACKAGE_MANIFEST_NAME, package_manifest.to_json())
        write_text(fs, profile_root_path / MANIFEST_NAME, profile_manifest.to_json())
        write_text(fs, default_page_path / MANIFEST_NAME, default_state.manifest.to_json())
        write_text(fs, working_page_path / MANIFEST_NAME, working_state.manifest.to_json())

        return ProfileArchive(
            filesystem=fs,
            source_path=None,
            extracted_root=work_dir,
            template=template,
            name=name,
            profile_root_name=template.profile_root_name,
            active_page_id=template.working_page_id,
            page_order=[template.working_page_id],
            page_states={
                working_state.id: working_state,
                default_state.id: default_state,
            },
            package_manifest=package_manifest,
            profile_manifest=profile_manifest,
        )

    # =================================================================
    # Save
    # =================================================================

    def save_profile(self, archive: ProfileArchive, output_path: Path) -> None:
        """
        Write a profile to a container file, replacing any existing file.

        The archive's manifests are updated in place to what was written.

        Raises:
            ArchiveSaveError: If staging or repackaging fails
        """
        output_path = Path(output_path)
        logger.info(
            f"Saving profile name={archive.display_name} pages={len(archive.page_order)} "
            f"output={output_path.name}"
        )
        fs = self.filesystem
        template = archive.template

        staging_dir: Path | None = None
        try:
            staging_dir = self.make_working_directory("stage")
            copy_directory(fs, archive.extracted_root, staging_dir)

            profiles_root = staging_dir / "Profiles"
            source_root = profiles_root / archive.profile_root_name
            target_root = profiles_root / template.profile_root_name

            if archive.profile_root_name.casefold() != template.profile_root_name.casefold():
                if fs.is_dir(target_root):
                    fs.remove_tree(target_root)
                if fs.is_dir(source_root):
                    fs.move(source_root, target_root)

            pages_root = target_root / "Profiles"
            fs.make_dirs(pages_root)
            fs.make_dirs(target_root / "Images")

            export_ids = self.export_page_ids(archive)
            pages = archive.profile_manifest.pages or PagesManifest()
            default_page_id = normalize_page_id(pages.default or template.default_page_id)
            allowed_ids = [*export_ids, default_page_id, *archive.referenced_folder_ids()]

            canonicalize_page_folders(fs, pages_root, allowed_ids)

            default_state = ProfilePageState.empty(default_page_id, template)
            self._write_page_manifest(pages_root, default_page_id, default_state.manifest)

            for page_id in export_ids:
                state = archive.get_page(page_id)
                if state is None:
                    state = ProfilePageState.empty(page_id, template)
                else:
                    state.rebuild_controllers(template)
                self._write_page_manifest(pages_root, page_id, state.manifest)

            self._update_manifests(archive, export_ids, default_page_id)

            write_text(fs, staging_dir / PACKAGE_MANIFEST_NAME, archive.package_manifest.to_json())
            write_text(fs, target_root / MANIFEST_NAME, archive.profile_manifest.to_json())

            if fs.exists(output_path):
                fs.remove_file(output_path)
            fs.write_bytes(output_path, self._pack(staging_dir))

        except SDProfileError:
            raise
        except (OSError, zipfile.BadZipFile) as e:
            logger.error(f"Failed to save profile output={output_path}: {e}")
            raise ArchiveSaveError(str(output_path), str(e)) from e
        finally:
            if staging_dir is not None:
                with ErrorContext(f"remove staging directory {staging_dir}", re_raise=False):
                    fs.remove_tree(staging_dir)

        logger.info(f"Saved profile archive file={output_path.name}")

    @staticmethod
    def export_page_ids(archive: ProfileArchive) -> list[str]:
        """Pages written as the listed order: the visible order, else the active page, else the working page."""
        page_ids = [page_id for page_id in unique_page_ids(archive.page_order) if archive.has_page(page_id)]
        if not page_ids and archive.has_page(archive.active_page_id):
            page_ids = [normalize_page_id(archive.active_page_id)]
        if not page_ids:
            page_ids = [normalize_page_id(archive.template.working_page_id)]
        return unique_page_ids(page_ids)

    def _write_page_manifest(self, pages_root: Path, page_id: str, manifest: PageManifest) -> None:
        page_path = pages_root / page_id.upper()
        self.filesystem.make_dirs(page_path / "Images")
        write_text(self.filesystem, page_path / MANIFEST_NAME, manifest.to_json())

    @staticmethod
    def _update_manifests(archive: ProfileArchive, export_ids: list[str], default_page_id: str) -> None:
        template = archive.template
        profile_manifest = archive.profile_manifest
        package_manifest = archive.package_manifest

        device_uuid = profile_manifest.device.uuid if profile_manifest.device is not None else None
        profile_manifest.name = archive.display_name
        profile_manifest.device = DeviceManifest(
            model=template.device_model,
            uuid=device_uuid or str(uuid.uuid4()).lower(),
        )
        profile_manifest.pages = PagesManifest(current=ZERO_UUID, default=default_page_id, pages=list(export_ids))
        if profile_manifest.version is None:
            profile_manifest.version = DEFAULT_PROFILE_VERSION

        required = set(package_manifest.required_plugins or [])
        required.update(archive.referenced_plugin_uuids())

        package_manifest.device_model = template.device_model
        package_manifest.required_plugins = sorted(required)
        if package_manifest.format_version is None:
            package_manifest.format_version = DEFAULT_FORMAT_VERSION
        if package_manifest.app_version is None:
            package_manifest.app_version = DEFAULT_APP_VERSION
        if package_manifest.os_type is None:
            package_manifest.os_type = DEFAULT_OS_TYPE
        if package_manifest.os_version is None:
            package_manifest.os_version = platform.version()

    # =================================================================
    # Referenced files
    # =================================================================

    def copy_referenced_files(
        self,
        action: ActionDocument,
        source: ProfileArchive,
        target: ProfileArchive,
        source_page_id: str,
        target_page_id: str,
    ) -> None:
        """
        Copy the images and folder page an action references into the target profile.

        Copy failures are logged and skipped so that a damaged asset never
        blocks the move itself.
        """
        source_page = normalize_page_id(source_page_id)
        target_page = normalize_page_id(target_page_id)
        fs = target.filesystem
        collector = collect_errors("copy referenced files")

        for reference in referenced_image_paths(action):
            source_path = source.resolve_image_path(reference, source_page)
            if source_path is None:
                continue

            destination = self._destination_for(reference, source_path, target, source_page, target_page)
            if _same_path(source_path, destination):
                continue

            with collector.try_operation(f"copy {reference}"):
                fs.make_dirs(destination.parent)
                fs.write_bytes(destination, source.filesystem.read_bytes(source_path))

        folder_id = folder_profile_id(action)
        if folder_id:
            source_folder = source.page_directory(folder_id, prefer_existing=True)
            target_folder_id = normalize_page_id(folder_id)
            if source is target and target_folder_id == source_page:
                target_folder_id = target_page
            target_folder = target.pages_root_path / target.page_folder_name(target_folder_id)

            if not _same_path(source_folder, target_folder) and fs.is_dir(source_folder):
                with collector.try_operation(f"merge folder page {folder_id}"):
                    merge_directory(fs, source_folder, target_folder)

        if collector.has_errors:
            logger.warning(collector.get_summary())

    @staticmethod
    def _destination_for(
        reference: str,
        source_path: Path,
        target: ProfileArchive,
        source_page: str,
        target_page: str,
    ) -> Path:
        normalized = reference.replace("\\", "/")
        lowered = normalized.lower()

        if lowered.startswith("images/"):
            return target.page_directory(target_page).joinpath(*split_relative(normalized))

        if lowered.startswith("profiles/"):
            parts = normalized.split("/")
            if len(parts) >= 3:
                source_folder = parts[1]
                if source_folder.casefold() == source_page.casefold():
                    mapped_folder = target.page_folder_name(target_page)
                else:
                    mapped_folder = source_folder.upper()
                return target.pages_root_path.joinpath(mapped_folder, *[p for p in parts[2:] if p])
            return target.profile_root_path.joinpath(*split_relative(normalized))

        return target.page_directory(target_page) / "Images" / source_path.name

    # =================================================================
    # Container I/O
    # =================================================================

    def make_working_directory(self, prefix: str = "profile") -> Path:
        """Create a fresh directory under <work root>/sdprofile."""
        root = self.config.work_dir or Path(tempfile.gettempdir())
        work_dir = Path(root) / "sdprofile" / f"{prefix}-{uuid.uuid4().hex}"
        self.filesystem.make_dirs(work_dir)
        return work_dir

    def _extract(self, archive_path: Path, destination: Path) -> None:
        fs = self.filesystem
        data = fs.read_bytes(archive_path)

        with zipfile.ZipFile(io.BytesIO(data)) as container:
            for info in container.infolist():
                parts = split_relative(info.filename)
                if not parts or any(part in (".", "..") for part in parts) or ":" in parts[0]:
                    logger.warning(f"Skipping unsafe archive entry {info.filename!r}")
                    continue

                target = destination.joinpath(*parts)
                if info.is_dir() or info.filename.endswith("\\"):
                    fs.make_dirs(target)
                    continue
                fs.make_dirs(target.parent)
                fs.write_bytes(target, container.read(info))

    def _pack(self, root: Path) -> bytes:
        """Zip a directory tree; entries use '/' separators relative to root."""
        fs = self.filesystem
        buffer = io.BytesIO()

        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as container:
            pending = [Path(root)]
            while pending:
                directory = pending.pop()
                children = fs.list_dir(directory)
                relative = directory.relative_to(root).as_posix()
                if not children and relative != ".":
                    container.writestr(f"{relative}/", b"")

                for entry in children:
                    if fs.is_dir(entry):
                        pending.append(entry)
                    else:
                        container.writestr(entry.relative_to(root).as_posix(), fs.read_bytes(entry))

        return buffer.getvalue()


def _same_path(first: Path, second: Path) -> bool:
    return os.path.abspath(first).casefold() == os.path.abspath(second).casefold()


def is_profile_file(path: Path) -> bool:
    """Whether a path has the profile container extension (any case)."""
    return Path(path).suffix.lower() == PROFILE_EXTENSION.lower()


__all__ = [
    "PROFILE_EXTENSION",
    "ProfileArchiveService",
    "is_profile_file",
]
