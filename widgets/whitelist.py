"""Restrict which widget types may render in each widget area.

Areas declare ``allowed_widgets`` when they are registered::

    WIDGET_AREAS = [
        {"id": "main", "label": "Main Sidebar", "allowed_widgets": ["text", "links"]},
        {"id": "footer", "label": "Footer"},
    ]

On the site, widgets whose type is not in their area's list are dropped before
the area renders. An area without a list accepts every widget. In the admin,
each widget form carries a warning banner that the generated stylesheet only
reveals for widgets sitting in an area that does not allow them.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Mapping, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.template.loader import render_to_string
from django.utils.safestring import mark_safe
from django.utils.translation import gettext_lazy as _

from core.hooks import (
    WIDGET_ADMIN_FORM,
    WIDGET_ADMIN_STYLES,
    WIDGET_AREA_ASSIGNMENTS,
    WIDGET_PREVIEW_STYLES,
    HookRegistry,
)

from .areas import WIDGET_KIND_RE, WidgetArea, WidgetAreaRegistry
from .preview import PREVIEW_SECTION_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "widget_whitelist"
DEFAULT_NOTICE = _("This widget isn't configured for this widget area.")

WIDGET_ID_RE = re.compile(r"(.+?)-([0-9]+)")


def parse_widget_id(widget_id: str) -> tuple[str, Optional[int]]:
    """Split ``text-3`` into ``("text", 3)``. Ids without a number are all kind."""
    match = WIDGET_ID_RE.fullmatch(widget_id)
    if match:
        return match.group(1), int(match.group(2))
    return widget_id, None


class WidgetAreaFilter:
    """Prunes disallowed widgets from areas and flags them in the admin.

    The filter subscribes to the front-end hooks or to the admin hooks,
    depending on ``is_admin``, once at construction time.
    """

    notice_template = "widgets/admin/disallowed_notice.html"
    styles_template = "widgets/admin/disallowed_notice_styles.html"

    def __init__(
        self,
        hooks: HookRegistry,
        areas: WidgetAreaRegistry,
        *,
        prefix: Optional[str] = None,
        notice: Optional[str] = None,
        is_admin: bool = False,
        is_previewing: Optional[Callable[[], bool]] = None,
    ):
        self.hooks = hooks
        self.areas = areas
        self.prefix = prefix or DEFAULT_PREFIX
        self.notice = ""
        self.is_admin = is_admin
        self.is_previewing = is_previewing or (lambda: False)

        if not is_admin:
            hooks.register(WIDGET_AREA_ASSIGNMENTS, self.filter_assignments)
        else:
            if notice:
                self.notice = notice
            hooks.register(WIDGET_ADMIN_FORM, self.render_notice)
            hooks.register(WIDGET_ADMIN_STYLES, self.render_notice_styles)
            hooks.register(WIDGET_PREVIEW_STYLES, self.render_notice_styles)

    @property
    def allowed_widgets_hook(self) -> str:
        return f"{self.prefix}_sidebar_allowed_widgets"

    @property
    def notice_hook(self) -> str:
        return f"{self.prefix}_disallowed_widget_notice"

    def filter_assignments(self, assignments: Mapping[str, list[str]]) -> dict[str, list[str]]:
        filtered = {}
        for area_id, widget_ids in assignments.items():
            filtered[area_id] = widget_ids

            area = self.areas.get(area_id)
            if area is None:
                continue

            allowed = self.resolve_allowed_kinds(area)
            if not widget_ids or not allowed:
                continue

            kept = []
            for widget_id in widget_ids:
                kind, _number = parse_widget_id(widget_id)
                if kind in allowed:
                    kept.append(widget_id)
                else:
                    logger.debug("Removed widget %s from area %s; %s is not allowed", widget_id, area_id, kind)
            filtered[area_id] = kept
        return filtered

    def resolve_allowed_kinds(self, area: WidgetArea) -> list[str]:
        allowed = list(getattr(area, "allowed_widgets", None) or [])
        return self.hooks.apply_filters(self.allowed_widgets_hook, allowed, area)

    def identifier_for(self, suffix: str = "") -> str:
        suffix = f"-{suffix}" if suffix else ""
        return f"{self.prefix}-widget-disallowed-notice{suffix}"

    def resolve_notice_text(self) -> str:
        notice = str(self.notice or DEFAULT_NOTICE)
        return self.hooks.apply_filters(self.notice_hook, notice)

    def render_notice(self, widget) -> str:
        widget_id = getattr(widget, "widget_id", None) or str(widget.id)
        return render_to_string(
            self.notice_template,
            {
                "notice_id": self.identifier_for(widget_id),
                "notice_class": self.identifier_for(),
                "notice": self.resolve_notice_text(),
            },
        )

    def render_notice_styles(self) -> str:
        area_css = "".join(self.generate_area_notice_css(area) for area in self.areas.all())
        return render_to_string(
            self.styles_template,
            {
                "notice_class": self.identifier_for(),
                # Area ids are checked on registration, widget kinds while building the CSS.
                "area_css": mark_safe(area_css),
            },
        )

    def generate_area_notice_css(self, area: WidgetArea) -> str:
        allowed = self.resolve_allowed_kinds(area)
        if not allowed:
            return ""

        notice_selector = f".{self.identifier_for()}"
        area_selector = "#"
        if self.is_previewing():
            area_selector += PREVIEW_SECTION_PREFIX
        area_selector += area.id

        # Flag every widget in the area until its type proves allowed.
        css = f"{area_selector} {notice_selector} {{ display: block; visibility: visible;}}"
        css += f"{area_selector} .widget-top {{ background: #ffeeee;}}"

        for kind in allowed:
            if not isinstance(kind, str) or not WIDGET_KIND_RE.fullmatch(kind):
                logger.warning("Skipping invalid widget type %r allowed in area %s", kind, area.id)
                continue
            widget_selector = f'{area_selector} .widget[id*="_{kind}-"]'
            css += f"{widget_selector} .widget-top {{ background: #fafafa;}}"
            css += f"{widget_selector} {notice_selector} {{ display: none; visibility: visible;}}"
        return css


def get_whitelist_settings() -> dict:
    options = getattr(settings, "WIDGET_WHITELIST", None) or {}
    if not isinstance(options, dict):
        raise ImproperlyConfigured("WIDGET_WHITELIST must be a dict.")
    return {
        "ENABLED": options.get("ENABLED", True),
        "PREFIX": options.get("PREFIX") or DEFAULT_PREFIX,
        "NOTICE": options.get("NOTICE") or "",
    }


def configure_widget_whitelist(
    hooks: HookRegistry,
    *,
    is_admin: bool,
    areas: Optional[WidgetAreaRegistry] = None,
) -> Optional[WidgetAreaFilter]:
    """Build a filter for one execution context from the project settings."""
    from .areas import area_registry
    from .preview import is_previewing

    options = get_whitelist_settings()
    if not options["ENABLED"]:
        logger.info("Widget whitelist disabled by settings")
        return None

    return WidgetAreaFilter(
        hooks,
        areas if areas is not None else area_registry,
        prefix=options["PREFIX"],
        notice=options["NOTICE"],
        is_admin=is_admin,
        is_previewing=is_previewing,
    )
