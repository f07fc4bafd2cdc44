"""Observer protocol definitions for workspace events."""

from typing import Protocol, runtime_checkable

from sdprofile.models import PaneSide

from .events import WorkspaceEvent


@runtime_checkable
class WorkspaceObserver(Protocol):
    """
    Observer that receives workspace change events.

    This protocol allows loose coupling between the workspace engine and
    whatever presents it (a UI, the CLI, tests). The engine itself never
    depends on an observer being present.
    """

    def on_workspace_event(self, event: WorkspaceEvent, side: PaneSide | None = None) -> None:
        """
        Handle workspace changes.

        Args:
            event: The type of change
            side: The pane the change applies to, or None for changes that
                  affect the whole workspace (undo, redo, layout)

        Note:
            Called while the workspace lock is held. Observers may read
            workspace state but should not start long-running work.
        """
        ...
