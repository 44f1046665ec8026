from django.db import models


class WidgetInstance(models.Model):
    widget_type = models.CharField(max_length=64)
    area = models.CharField(max_length=64, db_index=True)
    order = models.PositiveIntegerField(default=0)
    config = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["area", "order", "pk"]

    def __str__(self):
        return f"{self.widget_type} in {self.area} (order={self.order})"

    @property
    def widget_id(self) -> str:
        """Per-instance id: the widget type plus the primary key, e.g. ``text-3``."""
        return f"{self.widget_type}-{self.pk}"


def build_area_assignments(area_ids=None):
    """Return ({area: [widget_id, ...]}, {widget_id: instance}) for active widgets."""
    instances = WidgetInstance.objects.filter(is_active=True).order_by("area", "order", "pk")
    if area_ids is not None:
        instances = instances.filter(area__in=list(area_ids))

    assignments: dict[str, list[str]] = {}
    by_id: dict[str, WidgetInstance] = {}
    for inst in instances:
        assignments.setdefault(inst.area, []).append(inst.widget_id)
        by_id[inst.widget_id] = inst
    return assignments, by_id
