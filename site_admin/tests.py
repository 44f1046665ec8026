from django import forms
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from site_admin.forms import WidgetInstanceForm
from widgets.models import WidgetInstance


class WidgetAdminAccessTests(TestCase):
    def setUp(self):
        super().setUp()
        self.user = get_user_model().objects.create_user(
            username="reader",
            email="reader@example.com",
            password="password",
        )

    def test_widget_list_requires_login(self):
        response = self.client.get(reverse("site_admin:widget_list"))

        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse("admin:login"), response["Location"])

    def test_widget_list_requires_staff(self):
        self.client.force_login(self.user)
        response = self.client.get(reverse("site_admin:widget_list"))

        self.assertEqual(response.status_code, 302)


class WidgetAdminViewTests(TestCase):
    def setUp(self):
        super().setUp()
        self.staff = get_user_model().objects.create_user(
            username="editor",
            email="editor@example.com",
            password="password",
            is_staff=True,
        )
        self.client.force_login(self.staff)

    def test_widget_list_renders_areas_and_styles(self):
        text = WidgetInstance.objects.create(widget_type="text", area="header", config={"content": "Hi"})
        response = self.client.get(reverse("site_admin:widget_list"))

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, '<li id="header" class="widget-area">')
        self.assertContains(response, f'<div class="widget" id="widget-1_{text.widget_id}">')
        self.assertContains(response, '#header .widget[id*="_links-"] .widget-top { background: #fafafa;}')
        self.assertContains(response, f'id="widget_whitelist-widget-disallowed-notice-{text.widget_id}"')
        self.assertNotContains(response, "#accordion-section-sidebar-widgets-")

    def test_widget_list_preview_uses_accordion_ids(self):
        WidgetInstance.objects.create(widget_type="text", area="main")
        response = self.client.get(reverse("site_admin:widget_list"), {"preview": "1"})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, '<li id="accordion-section-sidebar-widgets-main" class="widget-area">')
        self.assertContains(response, "#accordion-section-sidebar-widgets-main .widget-top { background: #ffeeee;}")
        self.assertNotContains(response, "#main .widget-top")

    def test_widget_list_shows_widgets_in_unregistered_areas(self):
        orphan = WidgetInstance.objects.create(widget_type="text", area="retired")
        response = self.client.get(reverse("site_admin:widget_list"))

        self.assertContains(response, "Widgets in unregistered areas")
        self.assertContains(response, orphan.widget_id)

    def test_create_widget(self):
        response = self.client.post(
            reverse("site_admin:widget_create"),
            {
                "widget_type": "links",
                "area": "header",
                "order": 3,
                "is_active": "on",
                "config_title": "Elsewhere",
                "config_links": "Home | https://example.com/",
            },
        )

        self.assertRedirects(response, reverse("site_admin:widget_list"))
        widget = WidgetInstance.objects.get()
        self.assertEqual(widget.area, "header")
        self.assertEqual(widget.order, 3)
        self.assertEqual(widget.config["links"], "Home | https://example.com/")

    def test_create_rejects_unregistered_area(self):
        response = self.client.post(
            reverse("site_admin:widget_create"),
            {"widget_type": "text", "area": "retired", "order": 0},
        )

        self.assertEqual(response.status_code, 200)
        self.assertFalse(WidgetInstance.objects.exists())

    def test_disallowed_widget_can_still_be_saved(self):
        response = self.client.post(
            reverse("site_admin:widget_create"),
            {"widget_type": "text", "area": "header", "order": 0, "config_content": "Hi"},
        )

        self.assertRedirects(response, reverse("site_admin:widget_list"))
        self.assertEqual(WidgetInstance.objects.get().widget_type, "text")

    def test_edit_page_shows_notice(self):
        widget = WidgetInstance.objects.create(widget_type="text", area="header", config={"content": "Hi"})
        response = self.client.get(reverse("site_admin:widget_edit", args=[widget.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, f'id="widget_whitelist-widget-disallowed-notice-{widget.widget_id}"')
        self.assertContains(response, 'name="config_content"')

    def test_edit_updates_widget(self):
        widget = WidgetInstance.objects.create(widget_type="text", area="main", config={"content": "Old"})
        response = self.client.post(
            reverse("site_admin:widget_edit", args=[widget.pk]),
            {"widget_type": "text", "area": "footer", "order": 1, "config_content": "New"},
        )

        self.assertRedirects(response, reverse("site_admin:widget_list"))
        widget.refresh_from_db()
        self.assertEqual(widget.area, "footer")
        self.assertEqual(widget.config["content"], "New")
        self.assertFalse(widget.is_active)

    def test_edit_missing_widget_404s(self):
        response = self.client.get(reverse("site_admin:widget_edit", args=[999]))

        self.assertEqual(response.status_code, 404)

    def test_delete_requires_post(self):
        widget = WidgetInstance.objects.create(widget_type="text", area="main")
        response = self.client.get(reverse("site_admin:widget_delete", args=[widget.pk]))

        self.assertEqual(response.status_code, 405)
        self.assertTrue(WidgetInstance.objects.filter(pk=widget.pk).exists())

    def test_delete_widget(self):
        widget = WidgetInstance.objects.create(widget_type="text", area="main")
        response = self.client.post(reverse("site_admin:widget_delete", args=[widget.pk]))

        self.assertRedirects(response, reverse("site_admin:widget_list"))
        self.assertFalse(WidgetInstance.objects.exists())


class WidgetInstanceFormTests(TestCase):
    def test_area_choices_come_from_registry(self):
        form = WidgetInstanceForm()

        self.assertEqual(
            form.fields["area"].choices,
            [("main", "Main Sidebar"), ("footer", "Footer"), ("header", "Header")],
        )

    def test_config_fields_follow_widget_type(self):
        form = WidgetInstanceForm(data={"widget_type": "links"})

        self.assertIn("config_links", form.fields)
        self.assertNotIn("config_content", form.fields)

    def test_initial_values_from_instance(self):
        widget = WidgetInstance(widget_type="text", area="footer", order=4, config={"title": "About"})
        form = WidgetInstanceForm(instance=widget)

        self.assertEqual(form.fields["area"].initial, "footer")
        self.assertEqual(form.fields["config_title"].initial, "About")

    def test_config_fields_follow_schema_types(self):
        form = WidgetInstanceForm(data={"widget_type": "text"})

        self.assertIsInstance(form.fields["config_title"].widget, forms.TextInput)
        self.assertIsInstance(form.fields["config_content"].widget, forms.Textarea)
        self.assertNotIn("class", form.fields["config_content"].widget.attrs)
