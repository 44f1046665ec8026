import logging

from django import template
from django.utils.safestring import mark_safe

register = template.Library()
logger = logging.getLogger(__name__)


@register.simple_tag(takes_context=True)
def render_widget_area(context, area_slug: str) -> str:
    from core.hooks import WIDGET_AREA_ASSIGNMENTS, site_hooks
    from core.plugins import registry
    from widgets.areas import area_registry
    from widgets.models import build_area_assignments

    if area_slug not in area_registry:
        return ""

    request = context.get("request")
    assignments, instances = build_area_assignments([area_slug])
    assignments.setdefault(area_slug, [])
    assignments = site_hooks.apply_filters(WIDGET_AREA_ASSIGNMENTS, assignments)

    parts = []
    for widget_id in assignments.get(area_slug, []):
        inst = instances.get(widget_id)
        if inst is None:
            continue
        cls = registry.get_widget_type(inst.widget_type)
        if cls:
            try:
                parts.append(cls().render(inst.config or {}, request=request))
            except Exception:
                logger.exception(
                    "Widget %s pk=%s failed to render", inst.widget_type, inst.pk
                )
    return mark_safe("".join(parts))


@register.simple_tag
def widget_admin_styles() -> str:
    from core.hooks import WIDGET_ADMIN_STYLES, WIDGET_PREVIEW_STYLES, admin_hooks
    from widgets.preview import is_previewing

    hook_name = WIDGET_PREVIEW_STYLES if is_previewing() else WIDGET_ADMIN_STYLES
    return mark_safe("".join(admin_hooks.do_action(hook_name)))


@register.simple_tag
def widget_admin_form(widget) -> str:
    from core.hooks import WIDGET_ADMIN_FORM, admin_hooks

    return mark_safe("".join(admin_hooks.do_action(WIDGET_ADMIN_FORM, widget)))
