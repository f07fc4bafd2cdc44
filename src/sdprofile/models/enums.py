"""Enumerations for the profile manager."""

from enum import Enum


class ControllerKind(str, Enum):
    """Physical control families a page stores actions for."""

    KEYPAD = "Keypad"  # LCD keys on the main grid
    ENCODER = "Encoder"  # Dials and touch strip segments
    NEO = "Neo"  # Neo info bar, carries no actions

    @classmethod
    def from_json(cls, value: str | None) -> "ControllerKind":
        """Parse a manifest controller Type; unknown values map to KEYPAD."""
        for kind in cls:
            if kind.value == value:
                return kind
        return cls.KEYPAD

    @property
    def slot_label(self) -> str:
        """Short noun used in status messages."""
        return "key" if self is ControllerKind.KEYPAD else "dial"


class PaneSide(str, Enum):
    """The two workspace panes."""

    LEFT = "left"  # Source profile
    RIGHT = "right"  # Target profile

    @property
    def opposite(self) -> "PaneSide":
        return PaneSide.RIGHT if self is PaneSide.LEFT else PaneSide.LEFT

    @property
    def role(self) -> str:
        """User-facing role name of the pane."""
        return "source" if self is PaneSide.LEFT else "target"


class WorkspaceLayoutMode(str, Enum):
    """How the two panes relate to loaded profiles."""

    DUAL_PROFILE = "dual_profile"  # Each pane shows its own profile
    SINGLE_PROFILE = "single_profile"  # Both panes show one profile at different pages


class PreflightSeverity(str, Enum):
    """Severity of a preflight issue."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def sort_rank(self) -> int:
        return {"error": 0, "warning": 1, "info": 2}[self.value]

    @property
    def code(self) -> str:
        """Short code used when deduplicating issues."""
        return {"error": "ERROR", "warning": "WARN", "info": "INFO"}[self.value]


class PluginRenderAvailability(str, Enum):
    """Whether plugin metadata for an action could be found locally."""

    PROFILE_ONLY = "profile_only"  # Render from profile data alone
    LAYOUT_AVAILABLE = "layout_available"  # Plugin manifest declares an encoder layout
    LAYOUT_ENCRYPTED = "layout_encrypted"  # Plugin manifest is packaged and unreadable
    LAYOUT_MISSING = "layout_missing"  # Plugin installed but layout not resolvable
    PLUGIN_MISSING = "plugin_missing"  # Plugin not installed
