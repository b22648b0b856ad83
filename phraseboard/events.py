from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

ActionHandler = Callable[[dict], Any]

logger = logging.getLogger(__name__)


def get_action(ev: dict) -> str:
    return ev.get("action", "")


class ActionDispatcher:
    """Minimal synchronous dispatcher for UI actions.

    The UI layer turns taps, long-presses and admin buttons into action
    dicts such as ``{"action": "tile-up", "key": "needs", "index": 2}``.
    Handlers run to completion before :meth:`dispatch` returns and their
    result is passed back. Unknown actions are ignored.

    The :meth:`on` method can be used either as a decorator::

        dispatcher = ActionDispatcher()


        @dispatcher.on("tile-tap")
        def handler(event): ...

    or called directly::

        dispatcher.on("tile-tap", handler)

    """

    def __init__(self) -> None:
        self._handlers: dict[str, ActionHandler] = {}

    def on(
        self, action: str, handler: ActionHandler | None = None
    ) -> ActionHandler | Callable[[ActionHandler], ActionHandler]:
        """Register ``handler`` for ``action``.

        If ``handler`` is ``None`` this functions as a decorator factory.
        """

        if handler is not None:
            self._handlers[action] = handler
            return handler

        def decorator(func: ActionHandler) -> ActionHandler:
            self._handlers[action] = func
            return func

        return decorator

    register = on

    def actions(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, event: dict) -> Any:
        action = get_action(event)
        handler = self._handlers.get(action)
        if handler is None:
            logger.debug("unhandled_action", extra={"event_type": "unhandled_action"})
            return None
        return handler(event)
