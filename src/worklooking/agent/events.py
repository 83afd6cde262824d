"""Progress events pushed to the presentation layer during a turn."""

from __future__ import annotations

from typing import Callable

from worklooking.models.chat import ToolStatus

PartialListener = Callable[[str], None]
ToolStatusListener = Callable[[ToolStatus], None]


class EventEmitter:
    """Synchronous fan-out of assistant text and tool status notifications.

    Listeners are called in registration order, on the loop's task, in the
    order the events happen.
    """

    def __init__(self) -> None:
        self._partial_listeners: list[PartialListener] = []
        self._status_listeners: list[ToolStatusListener] = []

    def on_assistant_partial(self, listener: PartialListener) -> PartialListener:
        self._partial_listeners.append(listener)
        return listener

    def on_tool_status(self, listener: ToolStatusListener) -> ToolStatusListener:
        self._status_listeners.append(listener)
        return listener

    def emit_partial(self, content: str) -> None:
        for listener in self._partial_listeners:
            listener(content)

    def emit_tool_status(self, status: ToolStatus) -> None:
        for listener in self._status_listeners:
            listener(status)
