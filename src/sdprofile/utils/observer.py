"""Observer list used by the workspace to announce pane changes.

Front ends (the CLI, a UI layer, tests) subscribe to a workspace and are told
when a pane's profile, page, selection or status text changes. A subscriber
that raises is logged and skipped so one broken view cannot stop the others
from refreshing.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=object)


class ObserverManager(Generic[T]):
    """
    Ordered set of subscribers that all receive the same callback.

    Type Parameters:
        T: The subscriber protocol (WorkspaceObserver for the workspace)

    Subscribers are called in registration order on a snapshot of the list,
    taken under the lock, so a callback may subscribe or unsubscribe without
    deadlocking.

    Example:
        ```python
        observers = ObserverManager[WorkspaceObserver](observer_type_name="workspace")
        observers.register(view)
        observers.notify("on_workspace_event", WorkspaceEvent.PROFILE_LOADED, PaneSide.LEFT)
        ```
    """

    def __init__(self, lock: Lock | None = None, observer_type_name: str = "observer"):
        """
        Args:
            lock: Lock guarding the subscriber list (a new one if omitted)
            observer_type_name: Label used in log lines, e.g. "workspace"
        """
        self._observers: list[T] = []
        self._lock = lock or Lock()
        self._observer_type_name = observer_type_name

    def register(self, observer: T) -> None:
        """Subscribe; registering the same subscriber twice is a no-op."""
        with self._lock:
            if observer in self._observers:
                logger.debug(f"Subscriber already on {self._observer_type_name} list: {observer!r}")
                return
            self._observers.append(observer)
        logger.debug(f"Subscribed to {self._observer_type_name} events: {observer!r}")

    def unregister(self, observer: T) -> None:
        with self._lock:
            if observer not in self._observers:
                logger.warning(f"Cannot unsubscribe {observer!r}: not on the {self._observer_type_name} list")
                return
            self._observers.remove(observer)
        logger.debug(f"Unsubscribed from {self._observer_type_name} events: {observer!r}")

    def notify(self, callback_name: str, *args: Any, **kwargs: Any) -> None:
        """
        Call `callback_name` on every subscriber with the given arguments.

        A subscriber that lacks the callback or raises from it is logged with
        its traceback; the remaining subscribers are still called.
        """
        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            callback = getattr(observer, callback_name, None)
            if callback is None:
                logger.error(f"{self._observer_type_name} subscriber {observer!r} has no {callback_name}()")
                continue
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{self._observer_type_name} subscriber {observer!r} failed in {callback_name}: {e}",
                    exc_info=True,
                )
