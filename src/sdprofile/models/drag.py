"""Pending drag between two workspace slots."""

from typing import Any

from pydantic import BaseModel, ConfigDict

from .enums import ControllerKind, PaneSide


class DragContext(BaseModel):
    """
    An action picked up from a slot and not yet dropped.

    `action` is a private clone taken when the drag began, so edits to the
    source slot in the meantime do not change what gets dropped.
    """

    model_config = ConfigDict(frozen=True)

    source_side: PaneSide
    source_page_id: str
    controller: ControllerKind
    coordinate: str
    action: dict[str, Any]
