"""Protocol definitions for workspace observers.

This package contains protocols and events specific to the profile workspace:
- Events: Profile, edit, view and history events
- Observers: Protocols for components that react to these events
"""

from .events import WorkspaceEvent
from .observers import WorkspaceObserver

__all__ = [
    # Events
    "WorkspaceEvent",
    # Observers
    "WorkspaceObserver",
]
