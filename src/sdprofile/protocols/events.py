"""Domain events for observer pattern.

This module defines events that can occur within a workspace:
- Profile events: A pane's profile was loaded, created, saved or closed
- Edit events: Pages and actions were changed
- View events: Pane navigation and layout changes
- History events: Undo and redo
"""

from enum import Enum


class WorkspaceEvent(Enum):
    """Events emitted by WorkspaceService after a state change."""

    # Profile lifecycle
    PROFILE_LOADED = "profile_loaded"        # Archive bound to a pane
    PROFILE_CREATED = "profile_created"      # Empty target profile created
    PROFILE_SAVED = "profile_saved"          # Pane profile written to disk
    PROFILE_CLOSED = "profile_closed"        # Pane unbound

    # Edits (change the profile content)
    TEMPLATE_CHANGED = "template_changed"    # Device template replaced, actions pruned
    PROFILE_RENAMED = "profile_renamed"      # Display name changed
    PAGE_ADDED = "page_added"                # New empty page appended
    PAGE_REMOVED = "page_removed"            # Page deleted
    ACTION_REMOVED = "action_removed"        # Slot cleared
    ACTION_MOVED = "action_moved"            # Action moved between slots
    ACTION_COPIED = "action_copied"          # Action copied to the target pane

    # View state
    PAGE_SELECTED = "page_selected"          # Pane switched page
    FOLDER_OPENED = "folder_opened"          # Pane entered a folder page
    FOLDER_CLOSED = "folder_closed"          # Pane returned from a folder page
    LAYOUT_CHANGED = "layout_changed"        # Single/dual profile mode toggled
    SOURCE_LOCK_CHANGED = "source_lock_changed"  # Copy-on-drag policy toggled
    DRAG_STARTED = "drag_started"            # Action picked up
    DRAG_CANCELED = "drag_canceled"          # Drag dropped nowhere or rejected

    # History
    UNDONE = "undone"                        # Undo applied
    REDONE = "redone"                        # Redo applied
