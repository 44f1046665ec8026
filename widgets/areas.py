from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)

# Area ids and widget kinds end up in CSS selectors and DOM ids.
AREA_ID_RE = re.compile(r"[A-Za-z0-9_-]+")
WIDGET_KIND_RE = re.compile(r"[A-Za-z0-9_-]+")


@dataclass(frozen=True)
class WidgetArea:
    id: str
    label: str = ""
    description: str = ""
    allowed_widgets: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "WidgetArea":
        area_id = data.get("id") or data.get("slug") or ""
        label = data.get("label") or data.get("name") or area_id.replace("-", " ").replace("_", " ").title()
        allowed = data.get("allowed_widgets") or ()
        if isinstance(allowed, str):
            allowed = (allowed,)
        return cls(
            id=area_id,
            label=label,
            description=data.get("description", ""),
            allowed_widgets=tuple(allowed),
        )


class WidgetAreaRegistry:
    def __init__(self):
        self._areas: dict[str, WidgetArea] = {}

    def register(self, area: WidgetArea | dict) -> WidgetArea:
        if isinstance(area, dict):
            area = WidgetArea.from_dict(area)

        if not area.id or not AREA_ID_RE.fullmatch(area.id):
            raise ImproperlyConfigured(
                f"Widget area id {area.id!r} is invalid. Use letters, digits, '-' and '_' only."
            )
        if area.id in self._areas:
            raise ImproperlyConfigured(f"Widget area {area.id!r} is already registered.")
        for kind in area.allowed_widgets:
            if not isinstance(kind, str) or not WIDGET_KIND_RE.fullmatch(kind):
                raise ImproperlyConfigured(
                    f"Widget area {area.id!r} allows an invalid widget type {kind!r}."
                )

        self._areas[area.id] = area
        logger.debug("Registered widget area %s (allowed: %s)", area.id, list(area.allowed_widgets) or "any")
        return area

    def get(self, area_id: str) -> Optional[WidgetArea]:
        return self._areas.get(area_id)

    def all(self) -> list[WidgetArea]:
        return list(self._areas.values())

    def choices(self) -> list[tuple[str, str]]:
        return [(area.id, area.label) for area in self._areas.values()]

    def clear(self) -> None:
        self._areas.clear()

    def __contains__(self, area_id) -> bool:
        return area_id in self._areas

    def __len__(self) -> int:
        return len(self._areas)


def load_widget_areas(areas: WidgetAreaRegistry, plugin_registry) -> WidgetAreaRegistry:
    """Register every widget area declared by installed plugins."""
    return register_widget_areas(areas, plugin_registry.get_widget_areas())


def register_widget_areas(areas: WidgetAreaRegistry, declarations: Iterable) -> WidgetAreaRegistry:
    for declaration in declarations:
        areas.register(declaration)
    return areas


area_registry = WidgetAreaRegistry()
