"""Services for loading, validating and editing Stream Deck profiles."""

from sdprofile.services.archive_service import ProfileArchiveService, is_profile_file
from sdprofile.services.image_cache_service import ImageCacheService
from sdprofile.services.plugin_catalog_service import PluginCatalogService, default_plugin_root
from sdprofile.services.preflight_service import PreflightValidator
from sdprofile.services.workspace_service import WorkspaceService

__all__ = [
    "ImageCacheService",
    "PluginCatalogService",
    "PreflightValidator",
    "ProfileArchiveService",
    "WorkspaceService",
    "default_plugin_root",
    "is_profile_file",
]
