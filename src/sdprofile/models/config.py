"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field, field_serializer

from sdprofile.utils.persistence import PydanticPersistence

from .template import FALLBACK_TEMPLATE_ID

DEFAULT_CONFIG_DIR = Path.home() / ".sdprofile"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.json"


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Paths
    work_dir: Path | None = Field(
        default=None,
        description=(
            "Root for archive extraction and save staging directories "
            "(None = system temporary directory)"
        ),
    )
    plugin_root: Path | None = Field(
        default=None,
        description="Folder holding installed '.sdPlugin' bundles (None = platform default)",
    )

    # Editing
    history_depth: int = Field(default=80, ge=1, le=1000, description="Undo/redo stack capacity")
    max_pages: int = Field(default=10, ge=1, le=100, description="Maximum visible pages per profile")
    lock_source_profile: bool = Field(
        default=True,
        description="Dragging from the source pane to the target pane copies instead of moving",
    )
    default_template: str = Field(
        default=FALLBACK_TEMPLATE_ID, description="Template id used for new empty profiles"
    )

    @field_serializer("work_dir", "plugin_root")
    def serialize_path(self, path: Path | None) -> str | None:
        """Serialize Path to string."""
        return str(path) if path is not None else None

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses default location
                  (~/.sdprofile/config.json).

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        if path is None:
            path = DEFAULT_CONFIG_PATH

        return PydanticPersistence.load_json_or_default(path, cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        if path is None:
            path = DEFAULT_CONFIG_PATH

        PydanticPersistence.save_json(self, path)
