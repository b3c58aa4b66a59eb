"""Observable state holder base class."""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger("travel_log.view_models")

StateListener = Callable[[str, Any], None]


class ViewModel:
    """Holds UI state attributes and notifies listeners when they change.

    Listeners receive the attribute name and its new value. A listener
    that raises is logged and skipped so the remaining listeners still
    run.
    """

    def __init__(self) -> None:
        self._listeners: list[StateListener] = []

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, name: str, value: Any) -> None:
        setattr(self, name, value)
        for listener in list(self._listeners):
            try:
                listener(name, value)
            except Exception:
                logger.exception(f"State listener failed for {name}")
