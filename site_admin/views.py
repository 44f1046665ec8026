from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.contrib import messages
from django.contrib.admin.views.decorators import staff_member_required
from django.http import HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from core.plugins import registry
from widgets.areas import WidgetArea, area_registry
from widgets.models import WidgetInstance
from widgets.preview import PREVIEW_SECTION_PREFIX, preview_session

from .forms import WidgetInstanceForm

logger = logging.getLogger(__name__)


@dataclass
class AreaListing:
    area: WidgetArea
    dom_id: str
    widgets: list[WidgetInstance] = field(default_factory=list)


def _area_listings(dom_prefix: str = "") -> tuple[list[AreaListing], list[WidgetInstance]]:
    listings = {area.id: AreaListing(area, f"{dom_prefix}{area.id}") for area in area_registry.all()}
    orphaned = []
    for inst in WidgetInstance.objects.order_by("area", "order", "pk"):
        listing = listings.get(inst.area)
        if listing is None:
            orphaned.append(inst)
        else:
            listing.widgets.append(inst)
    return list(listings.values()), orphaned


@staff_member_required
def widget_list(request: HttpRequest) -> HttpResponse:
    previewing = bool(request.GET.get("preview"))
    dom_prefix = PREVIEW_SECTION_PREFIX if previewing else ""
    listings, orphaned = _area_listings(dom_prefix)
    context = {
        "listings": listings,
        "orphaned": orphaned,
        "previewing": previewing,
        "nav_items": registry.get_admin_nav_items(),
    }
    if previewing:
        # Hooks read the preview flag while the template renders.
        with preview_session():
            return render(request, "site_admin/widget_list.html", context)
    return render(request, "site_admin/widget_list.html", context)


@staff_member_required
def widget_create(request: HttpRequest) -> HttpResponse:
    form = WidgetInstanceForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        obj = form.save_instance()
        messages.success(request, f"Added {obj.widget_id} to {obj.area}.")
        return redirect("site_admin:widget_list")
    return render(request, "site_admin/widget_form.html", {"form": form, "instance": None})


@staff_member_required
def widget_edit(request: HttpRequest, pk: int) -> HttpResponse:
    instance = get_object_or_404(WidgetInstance, pk=pk)
    form = WidgetInstanceForm(request.POST or None, instance=instance)
    if request.method == "POST" and form.is_valid():
        form.save_instance()
        messages.success(request, f"Saved {instance.widget_id}.")
        return redirect("site_admin:widget_list")
    return render(request, "site_admin/widget_form.html", {"form": form, "instance": instance})


@staff_member_required
@require_POST
def widget_delete(request: HttpRequest, pk: int) -> HttpResponse:
    instance = get_object_or_404(WidgetInstance, pk=pk)
    widget_id = instance.widget_id
    instance.delete()
    logger.info("Deleted widget %s", widget_id)
    messages.success(request, f"Deleted {widget_id}.")
    return redirect("site_admin:widget_list")
