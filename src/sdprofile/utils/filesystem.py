"""Filesystem access behind a narrow interface.

Archive persistence, image resolution and page folder canonicalization all
go through a `FileSystem` so the folder algorithms can be exercised against
`MemoryFileSystem` without touching the disk. `LocalFileSystem` is the
default everywhere else.

All lookups against a profile tree are case-insensitive; see
`resolve_case_insensitive_path`.
"""

import logging
import shutil
import uuid
from pathlib import Path, PurePosixPath
from typing import Iterable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Deepest directory nesting merge_directory will walk
MAX_MERGE_DEPTH = 64


@runtime_checkable
class FileSystem(Protocol):
    """Minimal set of filesystem operations used by the archive layer."""

    def exists(self, path: Path) -> bool: ...

    def is_file(self, path: Path) -> bool: ...

    def is_dir(self, path: Path) -> bool: ...

    def list_dir(self, path: Path) -> list[Path]:
        """Return the children of a directory, sorted by name."""
        ...

    def make_dirs(self, path: Path) -> None: ...

    def read_bytes(self, path: Path) -> bytes: ...

    def write_bytes(self, path: Path, data: bytes) -> None: ...

    def copy_file(self, source: Path, destination: Path) -> None:
        """Copy a file, overwriting the destination."""
        ...

    def move(self, source: Path, destination: Path) -> None: ...

    def remove_tree(self, path: Path) -> None: ...

    def remove_file(self, path: Path) -> None: ...


class LocalFileSystem:
    """FileSystem backed by the real disk. All instances are interchangeable."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, LocalFileSystem)

    def __hash__(self) -> int:
        return hash(LocalFileSystem)

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_file(self, path: Path) -> bool:
        return Path(path).is_file()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def list_dir(self, path: Path) -> list[Path]:
        return sorted(Path(path).iterdir(), key=lambda p: p.name)

    def make_dirs(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def write_bytes(self, path: Path, data: bytes) -> None:
        Path(path).write_bytes(data)

    def copy_file(self, source: Path, destination: Path) -> None:
        shutil.copyfile(source, destination)

    def move(self, source: Path, destination: Path) -> None:
        shutil.move(str(source), str(destination))

    def remove_tree(self, path: Path) -> None:
        shutil.rmtree(path)

    def remove_file(self, path: Path) -> None:
        Path(path).unlink()


class MemoryFileSystem:
    """
    In-memory FileSystem for tests.

    Paths are compared exactly (case-sensitive), like a Linux disk, so
    folders whose names differ only in case can coexist.
    """

    def __init__(self, files: dict[str, bytes | str] | None = None):
        """
        Initialize the filesystem.

        Args:
            files: Optional mapping of path to content used to seed the tree.
                   Parent directories are created automatically.
        """
        self._files: dict[PurePosixPath, bytes] = {}
        self._dirs: set[PurePosixPath] = {PurePosixPath("/")}
        for raw_path, content in (files or {}).items():
            path = PurePosixPath(raw_path)
            self.make_dirs(path.parent)
            data = content.encode("utf-8") if isinstance(content, str) else content
            self._files[path] = data

    @staticmethod
    def _key(path: Path | str) -> PurePosixPath:
        return PurePosixPath(path)

    def exists(self, path: Path) -> bool:
        key = self._key(path)
        return key in self._files or key in self._dirs

    def is_file(self, path: Path) -> bool:
        return self._key(path) in self._files

    def is_dir(self, path: Path) -> bool:
        return self._key(path) in self._dirs

    def list_dir(self, path: Path) -> list[Path]:
        key = self._key(path)
        if key not in self._dirs:
            raise FileNotFoundError(f"No such directory: {path}")
        children = {p for p in self._dirs if p.parent == key and p != key}
        children.update(p for p in self._files if p.parent == key)
        return [Path(p) for p in sorted(children, key=lambda p: p.name)]

    def make_dirs(self, path: Path) -> None:
        key = self._key(path)
        if key in self._files:
            raise FileExistsError(f"File exists: {path}")
        while key not in self._dirs:
            self._dirs.add(key)
            key = key.parent

    def read_bytes(self, path: Path) -> bytes:
        key = self._key(path)
        if key not in self._files:
            raise FileNotFoundError(f"No such file: {path}")
        return self._files[key]

    def write_bytes(self, path: Path, data: bytes) -> None:
        key = self._key(path)
        if key.parent not in self._dirs:
            raise FileNotFoundError(f"No such directory: {key.parent}")
        if key in self._dirs:
            raise IsADirectoryError(f"Is a directory: {path}")
        self._files[key] = bytes(data)

    def copy_file(self, source: Path, destination: Path) -> None:
        self.write_bytes(destination, self.read_bytes(source))

    def move(self, source: Path, destination: Path) -> None:
        src = self._key(source)
        dst = self._key(destination)
        if src in self._files:
            self.write_bytes(dst, self._files.pop(src))
            return
        if src not in self._dirs:
            raise FileNotFoundError(f"No such file or directory: {source}")
        if dst in self._dirs or dst in self._files:
            raise FileExistsError(f"Destination exists: {destination}")
        if dst.parent not in self._dirs:
            raise FileNotFoundError(f"No such directory: {dst.parent}")

        self._dirs = {self._rebase(p, src, dst) for p in self._dirs}
        self._files = {self._rebase(p, src, dst): data for p, data in self._files.items()}

    def remove_tree(self, path: Path) -> None:
        key = self._key(path)
        if key not in self._dirs:
            raise FileNotFoundError(f"No such directory: {path}")
        self._dirs = {p for p in self._dirs if not p.is_relative_to(key)}
        self._files = {p: d for p, d in self._files.items() if not p.is_relative_to(key)}

    def remove_file(self, path: Path) -> None:
        key = self._key(path)
        if key not in self._files:
            raise FileNotFoundError(f"No such file: {path}")
        del self._files[key]

    @staticmethod
    def _rebase(path: PurePosixPath, src: PurePosixPath, dst: PurePosixPath) -> PurePosixPath:
        if path == src or path.is_relative_to(src):
            return dst / path.relative_to(src)
        return path


def read_text(fs: FileSystem, path: Path) -> str:
    """Read a UTF-8 text file, tolerating a byte order mark."""
    return fs.read_bytes(path).decode("utf-8-sig")


def write_text(fs: FileSystem, path: Path, text: str) -> None:
    """Write a UTF-8 text file, creating parent directories."""
    fs.make_dirs(Path(path).parent)
    fs.write_bytes(path, text.encode("utf-8"))


def split_relative(relative: str) -> list[str]:
    """Split a forward- or back-slash separated relative path into its parts."""
    return [part for part in relative.replace("\\", "/").split("/") if part]


def resolve_case_insensitive_path(fs: FileSystem, base: Path, relative: str) -> Path | None:
    """
    Resolve a relative path under base, matching each segment case-insensitively.

    Exact matches win. Otherwise the parent directory is listed and the
    first entry whose name matches ignoring case is used.

    Args:
        fs: Filesystem to query
        base: Directory the relative path starts from
        relative: Relative path using '/' or '\\' separators

    Returns:
        The resolved path (file or directory), or None if any segment is missing
    """
    current = Path(base)
    for part in split_relative(relative):
        direct = current / part
        if fs.exists(direct):
            current = direct
            continue

        if not fs.is_dir(current):
            return None

        wanted = part.casefold()
        match = next((entry for entry in fs.list_dir(current) if entry.name.casefold() == wanted), None)
        if match is None:
            return None
        current = match

    return current


def find_child_ignore_case(fs: FileSystem, directory: Path, name: str) -> Path | None:
    """Return the child directory of `directory` whose name matches ignoring case."""
    if not fs.is_dir(directory):
        return None
    wanted = name.casefold()
    for entry in fs.list_dir(directory):
        if fs.is_dir(entry) and entry.name.casefold() == wanted:
            return entry
    return None


def merge_directory(fs: FileSystem, source: Path, destination: Path) -> None:
    """
    Merge the tree under source into destination.

    Files in source overwrite files of the same name in destination. The
    walk is iterative and stops descending past MAX_MERGE_DEPTH levels.

    Raises:
        FileNotFoundError: If source is not a directory
    """
    if not fs.is_dir(source):
        raise FileNotFoundError(f"No such directory: {source}")

    pending: list[tuple[Path, Path, int]] = [(Path(source), Path(destination), 0)]
    while pending:
        src_dir, dst_dir, depth = pending.pop()
        fs.make_dirs(dst_dir)
        for entry in fs.list_dir(src_dir):
            target = dst_dir / entry.name
            if fs.is_dir(entry):
                if depth + 1 > MAX_MERGE_DEPTH:
                    logger.warning(f"Skipping {entry}: directory nesting exceeds {MAX_MERGE_DEPTH}")
                    continue
                pending.append((entry, target, depth + 1))
            else:
                fs.copy_file(entry, target)


def copy_directory(fs: FileSystem, source: Path, destination: Path) -> None:
    """Copy a directory tree into destination; a missing source is a no-op."""
    if not fs.is_dir(source):
        return
    merge_directory(fs, source, destination)


def canonicalize_page_folders(fs: FileSystem, pages_root: Path, allowed_page_ids: Iterable[str]) -> None:
    """
    Bring page folders under pages_root in line with the allowed id set.

    Folders whose name does not match an allowed id (ignoring case) are
    deleted. Remaining folders are renamed to the uppercased id; when a
    folder with the canonical name already exists the two are merged and
    the non-canonical one removed.

    Args:
        fs: Filesystem to operate on
        pages_root: The `Profiles` folder inside the profile root
        allowed_page_ids: Page ids (any casing) whose folders must survive
    """
    if not fs.is_dir(pages_root):
        return

    allowed = {page_id.strip().upper() for page_id in allowed_page_ids if page_id.strip()}
    allowed_by_fold = {name.casefold(): name for name in allowed}

    for entry in fs.list_dir(pages_root):
        if fs.is_dir(entry) and entry.name.casefold() not in allowed_by_fold:
            logger.debug(f"Removing orphaned page folder {entry.name}")
            fs.remove_tree(entry)

    for entry in fs.list_dir(pages_root):
        if not fs.is_dir(entry):
            continue
        canonical = allowed_by_fold.get(entry.name.casefold())
        if canonical is None or canonical == entry.name:
            continue

        canonical_path = Path(pages_root) / canonical
        # Compare listed names, a case-insensitive disk reports the folder itself as existing
        if not any(other.name == canonical for other in fs.list_dir(pages_root)):
            # Two-step rename so case-only renames work on case-insensitive disks
            temp_path = Path(pages_root) / f".rename-{uuid.uuid4()}"
            fs.move(entry, temp_path)
            fs.move(temp_path, canonical_path)
            logger.debug(f"Renamed page folder {entry.name} -> {canonical}")
        else:
            merge_directory(fs, entry, canonical_path)
            fs.remove_tree(entry)
            logger.debug(f"Merged page folder {entry.name} into {canonical}")
