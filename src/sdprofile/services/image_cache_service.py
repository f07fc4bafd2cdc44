"""Cache of resolved action image paths."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from sdprofile.exceptions import handle_errors
from sdprofile.models import ActionDocument, ProfileArchive, image_reference, normalize_page_id

logger = logging.getLogger(__name__)


class ImageCacheService:
    """
    Resolves and caches the image an action displays.

    Entries are keyed by archive id, page id and the lowercased reference.
    Misses are cached too. Nothing is invalidated until `clear()`.

    If a loader is given, the cache stores `loader(path)` instead of the
    path itself; a loader that raises caches a miss.
    """

    def __init__(self, loader: Callable[[Path], Any] | None = None):
        self._loader = loader
        self._cache: dict[str, Any] = {}

    @staticmethod
    def cache_key(profile: ProfileArchive, reference: str, page_id: str | None = None) -> str:
        resolved_page_id = page_id if page_id is not None else profile.active_page_id
        return f"{profile.id}::{normalize_page_id(resolved_page_id)}::{reference.lower()}"

    def get_action_image(self, profile: ProfileArchive, action: ActionDocument, page_id: str | None = None) -> Any:
        """Image for the reference an action displays (state image, else encoder icon)."""
        reference = image_reference(action)
        if not reference:
            return None
        return self.get_image(profile, reference, page_id)

    def get_image(self, profile: ProfileArchive, reference: str, page_id: str | None = None) -> Any:
        if not reference:
            return None

        key = self.cache_key(profile, reference, page_id)
        if key in self._cache:
            return self._cache[key]

        resolved_page_id = page_id if page_id is not None else profile.active_page_id
        path = profile.resolve_image_path(reference, resolved_page_id)
        if path is None:
            self._cache[key] = None
            return None

        if self._loader is None:
            self._cache[key] = path
            return path

        image = self._load(path)
        self._cache[key] = image
        return image

    @handle_errors(operation_name="load image", re_raise=False, log_level=logging.WARNING)
    def _load(self, path: Path) -> Any:
        return self._loader(path)

    def clear(self) -> None:
        count = len(self._cache)
        self._cache.clear()
        logger.debug(f"Cleared {count} cached image(s)")

    def __len__(self) -> int:
        return len(self._cache)
