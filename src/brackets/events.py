import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class BracketEvents:
    """Listeners notified when a bracket reaches its champion."""

    def __init__(self):
        self._on_completed_listeners: List[Callable] = []

    def subscribe_completed(self, callback: Callable):
        self._on_completed_listeners.append(callback)

    def unsubscribe_completed(self, callback: Callable):
        if callback in self._on_completed_listeners:
            self._on_completed_listeners.remove(callback)

    def notify_completed(self, bracket, champion):
        """Call every listener with (bracket, champion participant).

        A failing listener is logged and does not stop the others; the
        result it reacts to is already committed.
        """
        for listener in list(self._on_completed_listeners):
            try:
                listener(bracket, champion)
            except Exception:
                logger.exception("Bracket completion listener %r failed for bracket %s",
                                 listener, bracket.id)


bracket_events = BracketEvents()
