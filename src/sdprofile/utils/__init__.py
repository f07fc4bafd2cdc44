"""Generic utility modules for sdprofile.

This package contains utilities that are not specific to profile semantics:
- filesystem: FileSystem interface, local and in-memory implementations,
  case-insensitive lookup and directory merge
- observer: Thread-safe observer list
- persistence: Pydantic model JSON persistence
"""

from .filesystem import (
    FileSystem,
    LocalFileSystem,
    MemoryFileSystem,
    canonicalize_page_folders,
    copy_directory,
    merge_directory,
    resolve_case_insensitive_path,
)
from .observer import ObserverManager
from .persistence import PydanticPersistence

__all__ = [
    "FileSystem",
    "LocalFileSystem",
    "MemoryFileSystem",
    "ObserverManager",
    "PydanticPersistence",
    "canonicalize_page_folders",
    "copy_directory",
    "merge_directory",
    "resolve_case_insensitive_path",
]
