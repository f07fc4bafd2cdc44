"""Resolve plugin metadata for actions from locally installed plugins."""

import json
import logging
import os
import sys
from pathlib import Path
from threading import Lock
from typing import Any

from sdprofile.models import PluginActionDefinition, PluginRenderAvailability
from sdprofile.utils.filesystem import FileSystem, LocalFileSystem

logger = logging.getLogger(__name__)

# Packaged plugin manifests start with this marker instead of JSON
ENCRYPTED_MANIFEST_MARKER = b"ELGATO"


def default_plugin_root() -> Path:
    """Where the Stream Deck application installs plugins on this platform."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "Elgato" / "StreamDeck" / "Plugins"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "com.elgato.StreamDeck" / "Plugins"
    return Path.home() / ".local" / "share" / "Elgato" / "StreamDeck" / "Plugins"


class _ManifestEntry:
    """Cached result of reading one plugin manifest."""

    def __init__(
        self,
        availability: PluginRenderAvailability,
        root: dict[str, Any] | None = None,
        error_message: str | None = None,
    ):
        self.availability = availability
        self.root = root
        self.error_message = error_message


class PluginCatalogService:
    """
    Looks up what an installed plugin declares for an action.

    Plugin manifests are read from `<plugin root>/<plugin uuid>.sdPlugin/manifest.json`
    and cached per plugin uuid (case-insensitive) until `clear_cache()`.
    """

    def __init__(self, plugin_root: Path | None = None, filesystem: FileSystem | None = None):
        self.plugin_root = Path(plugin_root) if plugin_root else default_plugin_root()
        self.filesystem = filesystem or LocalFileSystem()
        self._manifest_cache: dict[str, _ManifestEntry] = {}
        self._lock = Lock()

    def resolve_action(self, plugin_uuid: str | None, action_uuid: str | None) -> PluginActionDefinition:
        """Resolve availability and encoder layout for a (plugin, action) pair."""
        plugin = (plugin_uuid or "").strip()
        action = (action_uuid or "").strip()
        fs = self.filesystem

        if not plugin:
            return PluginActionDefinition(
                availability=PluginRenderAvailability.LAYOUT_MISSING,
                message="Plugin UUID missing from action.",
            )

        if not fs.is_dir(self.plugin_root):
            return PluginActionDefinition(
                availability=PluginRenderAvailability.PLUGIN_MISSING,
                plugin_uuid=plugin,
                message=f"Plugin root not found: {self.plugin_root}",
            )

        plugin_folder = self.plugin_root / f"{plugin}.sdPlugin"
        if not fs.is_dir(plugin_folder):
            return PluginActionDefinition(
                availability=PluginRenderAvailability.PLUGIN_MISSING,
                plugin_uuid=plugin,
                plugin_folder_path=plugin_folder,
                message="Plugin package not installed locally.",
            )

        manifest_path = plugin_folder / "manifest.json"
        if not fs.is_file(manifest_path):
            return PluginActionDefinition(
                availability=PluginRenderAvailability.LAYOUT_MISSING,
                plugin_uuid=plugin,
                plugin_folder_path=plugin_folder,
                message="Plugin manifest missing.",
            )

        manifest = self._get_manifest(plugin, manifest_path)
        if manifest.availability is PluginRenderAvailability.LAYOUT_ENCRYPTED:
            return PluginActionDefinition(
                availability=PluginRenderAvailability.LAYOUT_ENCRYPTED,
                plugin_uuid=plugin,
                plugin_folder_path=plugin_folder,
                message=manifest.error_message or "Plugin manifest is encrypted or unreadable.",
            )

        if manifest.root is None:
            return PluginActionDefinition(
                availability=PluginRenderAvailability.LAYOUT_MISSING,
                plugin_uuid=plugin,
                plugin_folder_path=plugin_folder,
                message=manifest.error_message or "Plugin manifest could not be parsed.",
            )

        if not action:
            return PluginActionDefinition(
                availability=PluginRenderAvailability.LAYOUT_MISSING,
                plugin_uuid=plugin,
                plugin_folder_path=plugin_folder,
                message="Action UUID missing from action payload.",
            )

        definition = self._find_action_definition(manifest.root, action)
        if definition is None:
            return PluginActionDefinition(
                availability=PluginRenderAvailability.LAYOUT_MISSING,
                plugin_uuid=plugin,
                plugin_folder_path=plugin_folder,
                message=f"Action {action} not found in plugin manifest.",
            )

        encoder = definition.get("Encoder")
        encoder = encoder if isinstance(encoder, dict) else {}
        layout_path = _stripped(encoder.get("layout"))
        encoder_icon_path = _stripped(encoder.get("icon"))

        if not layout_path:
            return PluginActionDefinition(
                availability=PluginRenderAvailability.LAYOUT_MISSING,
                plugin_uuid=plugin,
                plugin_folder_path=plugin_folder,
                encoder_icon_path=encoder_icon_path,
                message="Plugin action has no encoder layout.",
            )

        return PluginActionDefinition(
            availability=PluginRenderAvailability.LAYOUT_AVAILABLE,
            plugin_uuid=plugin,
            plugin_folder_path=plugin_folder,
            layout_path=layout_path,
            encoder_icon_path=encoder_icon_path,
            message="Plugin layout available.",
        )

    def clear_cache(self) -> None:
        with self._lock:
            self._manifest_cache.clear()

    def _get_manifest(self, plugin_uuid: str, manifest_path: Path) -> _ManifestEntry:
        key = plugin_uuid.casefold()
        with self._lock:
            cached = self._manifest_cache.get(key)
        if cached is not None:
            return cached

        loaded = self._load_manifest(manifest_path)
        with self._lock:
            self._manifest_cache[key] = loaded
        return loaded

    def _load_manifest(self, manifest_path: Path) -> _ManifestEntry:
        try:
            data = self.filesystem.read_bytes(manifest_path)
        except OSError as e:
            logger.warning(f"Could not read plugin manifest {manifest_path}: {e}")
            return _ManifestEntry(PluginRenderAvailability.LAYOUT_MISSING, error_message=f"Manifest load failed: {e}")

        if data.startswith(ENCRYPTED_MANIFEST_MARKER):
            return _ManifestEntry(
                PluginRenderAvailability.LAYOUT_ENCRYPTED,
                error_message="Manifest is ELGATO packaged/encrypted.",
            )

        try:
            root = json.loads(data.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            return _ManifestEntry(
                PluginRenderAvailability.LAYOUT_ENCRYPTED,
                error_message=f"Manifest JSON parse failed: {e}",
            )

        if not isinstance(root, dict):
            return _ManifestEntry(
                PluginRenderAvailability.LAYOUT_MISSING,
                error_message="Manifest JSON root is invalid.",
            )
        return _ManifestEntry(PluginRenderAvailability.LAYOUT_AVAILABLE, root=root)

    @staticmethod
    def _find_action_definition(root: dict[str, Any], action_uuid: str) -> dict[str, Any] | None:
        actions = root.get("Actions")
        if not isinstance(actions, list):
            return None

        wanted = action_uuid.casefold()
        for definition in actions:
            if not isinstance(definition, dict):
                continue
            uuid = definition.get("UUID")
            if isinstance(uuid, str) and uuid.casefold() == wanted:
                return definition
        return None


def _stripped(value: Any) -> str | None:
    return value.strip() if isinstance(value, str) else None
