"""Action documents.

An action is the JSON object the Stream Deck application stores for one key
or dial. It is kept as a plain insertion-ordered tree of dicts, lists and
scalars so unknown plugin fields pass through a load/save cycle untouched.
The helpers here read the handful of fields the profile manager cares about.
"""

import json
from typing import Any

from pydantic import BaseModel, Field

ActionDocument = dict[str, Any]

IMAGE_DIRECTORY_MARKER = "Images/"
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")


def _get(node: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def plugin_uuid(action: ActionDocument) -> str | None:
    """Return Plugin.UUID, or None if absent."""
    return _string(_get(action, "Plugin", "UUID"))


def action_uuid(action: ActionDocument) -> str | None:
    """Return the action type UUID."""
    return _string(_get(action, "UUID"))


def folder_profile_id(action: ActionDocument) -> str | None:
    """Return the sub-page id a folder action opens (Settings.ProfileUUID)."""
    return _string(_get(action, "Settings", "ProfileUUID"))


def is_image_reference(value: str) -> bool:
    lowered = value.lower()
    return IMAGE_DIRECTORY_MARKER in value or lowered.endswith(IMAGE_EXTENSIONS)


def referenced_image_paths(action: ActionDocument) -> list[str]:
    """
    Collect every string in the tree that looks like an image path.

    A string qualifies if it contains 'Images/' or ends in a known image
    extension. Results are unique and in first-seen order.
    """
    found: dict[str, None] = {}
    pending: list[Any] = [action]
    while pending:
        node = pending.pop()
        if isinstance(node, dict):
            pending.extend(reversed(list(node.values())))
        elif isinstance(node, list):
            pending.extend(reversed(node))
        elif isinstance(node, str) and is_image_reference(node):
            found.setdefault(node, None)
    return list(found)


def clone_action(action: ActionDocument) -> ActionDocument:
    """Deep copy an action through its JSON text form."""
    return json.loads(json.dumps(action, ensure_ascii=False))


def dumps_action(action: ActionDocument) -> str:
    return json.dumps(action, ensure_ascii=False, separators=(",", ":"))


def loads_action(text: str) -> ActionDocument:
    return json.loads(text)


def parse_coordinate(coordinate: str) -> tuple[int, int] | None:
    """Parse a 'column,row' key; returns None for malformed keys."""
    parts = coordinate.split(",")
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def format_coordinate(column: int, row: int) -> str:
    return f"{column},{row}"


class ActionPresentation(BaseModel):
    """Labels and image reference used to display an action."""

    title: str = Field(default="Action", description="Best label for the slot")
    action_name: str = Field(default="Action", description="State title, else action name")
    display_name: str = Field(default="Action", description="Action name with plugin suffix")
    plugin_name: str = Field(default="Action", description="Plugin display name")
    plugin_uuid: str | None = Field(default=None, description="Plugin.UUID")
    image_reference: str | None = Field(default=None, description="State image, else encoder icon")


def _label(*candidates: str | None) -> str:
    for value in candidates:
        if value is None:
            continue
        normalized = value.replace("\n", " ").strip()
        if normalized:
            return normalized
    return ""


def _current_state(action: ActionDocument) -> dict[str, Any] | None:
    """The States entry selected by State, falling back to the first one."""
    state_index = action.get("State")
    if not isinstance(state_index, (int, float)) or isinstance(state_index, bool):
        state_index = 0
    state_index = int(state_index)

    states = action.get("States")
    if not isinstance(states, list) or not states:
        return None
    candidate = states[state_index] if 0 <= state_index < len(states) else states[0]
    return candidate if isinstance(candidate, dict) else None


def image_reference(action: Any) -> str | None:
    """Image the action displays: the current state's image, else Encoder.Icon."""
    if not isinstance(action, dict):
        return None
    state_image = _string(_get(_current_state(action), "Image"))
    if state_image and state_image.strip():
        return state_image
    return _string(_get(action, "Encoder", "Icon"))


def describe_action(action: Any) -> ActionPresentation:
    """Build display labels for an action the way the device software shows them."""
    if not isinstance(action, dict):
        return ActionPresentation()

    plugin = action.get("Plugin") if isinstance(action.get("Plugin"), dict) else {}
    plugin_name = _label(_string(plugin.get("Name")), _string(action.get("Name")), "Action")
    state = _current_state(action)

    state_title = _label(_string(_get(state, "Title")))
    base_title = _label(_string(action.get("Name")))
    action_name = _label(state_title, base_title, plugin_name, "Action")

    display_name = action_name
    if (
        plugin_name.strip()
        and plugin_name.casefold() != action_name.casefold()
        and plugin_name.casefold() not in action_name.casefold()
    ):
        display_name = f"{action_name} - {plugin_name}"

    return ActionPresentation(
        title=action_name,
        action_name=action_name,
        display_name=display_name,
        plugin_name=plugin_name,
        plugin_uuid=_string(plugin.get("UUID")),
        image_reference=image_reference(action),
    )
