from django.apps import AppConfig


class WidgetsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "widgets"

    def ready(self):
        from core.hooks import admin_hooks, site_hooks
        from core.plugins import registry
        from .areas import area_registry, load_widget_areas
        from .plugin import WidgetsPlugin
        from .whitelist import configure_widget_whitelist

        registry.register(WidgetsPlugin())

        area_registry.clear()
        load_widget_areas(area_registry, registry)

        self.site_filter = configure_widget_whitelist(site_hooks, is_admin=False)
        self.admin_filter = configure_widget_whitelist(admin_hooks, is_admin=True)
