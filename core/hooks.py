from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10

# Extension points dispatched by the site.
WIDGET_AREA_ASSIGNMENTS = "widget_area_assignments"
WIDGET_ADMIN_FORM = "widget_admin_form"
WIDGET_ADMIN_STYLES = "widget_admin_styles"
WIDGET_PREVIEW_STYLES = "widget_preview_styles"


@dataclass(order=True)
class _Subscription:
    priority: int
    sequence: int
    handler: Callable[..., Any] = field(compare=False)


class HookRegistry:
    """Named extension points that plugins subscribe handlers to.

    Filters pass a value through every handler and return the result.
    Actions call every handler and collect whatever they return.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._hooks: dict[str, list[_Subscription]] = {}
        self._sequence = 0

    def register(self, name: str, handler: Callable[..., Any], priority: int = DEFAULT_PRIORITY) -> None:
        self._sequence += 1
        subscriptions = self._hooks.setdefault(name, [])
        subscriptions.append(_Subscription(priority, self._sequence, handler))
        subscriptions.sort()
        logger.debug("Registered %r on %s hook %s", handler, self.name or "anonymous", name)

    def unregister(self, name: str, handler: Callable[..., Any]) -> bool:
        subscriptions = self._hooks.get(name, [])
        for subscription in subscriptions:
            if subscription.handler == handler:
                subscriptions.remove(subscription)
                return True
        return False

    def has_handlers(self, name: str) -> bool:
        return bool(self._hooks.get(name))

    def handlers(self, name: str) -> list[Callable[..., Any]]:
        return [subscription.handler for subscription in self._hooks.get(name, [])]

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        for handler in self.handlers(name):
            value = handler(value, *args)
        return value

    def do_action(self, name: str, *args: Any) -> list[Any]:
        results = []
        for handler in self.handlers(name):
            result = handler(*args)
            if result is not None:
                results.append(result)
        return results

    def clear(self, name: str | None = None) -> None:
        if name is None:
            self._hooks.clear()
        else:
            self._hooks.pop(name, None)


site_hooks = HookRegistry("site")
admin_hooks = HookRegistry("admin")
