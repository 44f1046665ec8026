"""Tests for widgets/whitelist.py: WidgetAreaFilter and widget id parsing."""
from types import SimpleNamespace

from django.test import SimpleTestCase
from django.test.utils import override_settings

from core.hooks import (
    WIDGET_ADMIN_FORM,
    WIDGET_ADMIN_STYLES,
    WIDGET_AREA_ASSIGNMENTS,
    WIDGET_PREVIEW_STYLES,
    HookRegistry,
)
from widgets.areas import WidgetArea, WidgetAreaRegistry
from widgets.whitelist import (
    DEFAULT_PREFIX,
    WidgetAreaFilter,
    configure_widget_whitelist,
    get_whitelist_settings,
    parse_widget_id,
)


def _areas(*areas):
    registry = WidgetAreaRegistry()
    for area in areas:
        registry.register(area)
    return registry


MAIN = WidgetArea("main", "Main Sidebar", allowed_widgets=("recent-posts", "nav_menu"))
FOOTER = WidgetArea("footer", "Footer")
CUSTOM = WidgetArea("custom", "Custom", allowed_widgets=("custom_widget",))


class ParseWidgetIdTests(SimpleTestCase):
    def test_numeric_suffix_is_split_off(self):
        self.assertEqual(parse_widget_id("text-3"), ("text", 3))

    def test_hyphenated_kind_keeps_its_hyphens(self):
        self.assertEqual(parse_widget_id("recent-posts-2"), ("recent-posts", 2))

    def test_no_suffix_is_whole_kind(self):
        self.assertEqual(parse_widget_id("custom_widget"), ("custom_widget", None))

    def test_only_trailing_number_counts(self):
        self.assertEqual(parse_widget_id("block-7-12"), ("block-7", 12))

    def test_non_numeric_suffix_is_part_of_kind(self):
        self.assertEqual(parse_widget_id("text-abc"), ("text-abc", None))

    def test_bare_number_suffix_without_kind(self):
        self.assertEqual(parse_widget_id("-5"), ("-5", None))

    def test_trailing_newline_is_not_a_suffix(self):
        self.assertEqual(parse_widget_id("text-3\n"), ("text-3\n", None))

    def test_non_ascii_digits_are_not_a_suffix(self):
        self.assertEqual(parse_widget_id("text-٣"), ("text-٣", None))
        self.assertEqual(parse_widget_id("text-３"), ("text-３", None))


class FilterAssignmentsTests(SimpleTestCase):
    def setUp(self):
        self.hooks = HookRegistry("test")
        self.filter = WidgetAreaFilter(self.hooks, _areas(MAIN, FOOTER, CUSTOM))

    def test_removes_widgets_not_in_whitelist(self):
        result = self.filter.filter_assignments(
            {"main": ["recent-posts-2", "text-3", "nav_menu-1"]}
        )
        self.assertEqual(result["main"], ["recent-posts-2", "nav_menu-1"])

    def test_area_without_whitelist_is_unchanged(self):
        widgets = ["text-3", "anything-9", "weird"]
        result = self.filter.filter_assignments({"footer": widgets})
        self.assertEqual(result["footer"], widgets)

    def test_unknown_area_passes_through(self):
        result = self.filter.filter_assignments({"nowhere": ["text-1"]})
        self.assertEqual(result, {"nowhere": ["text-1"]})

    def test_empty_widget_list_is_kept(self):
        result = self.filter.filter_assignments({"main": []})
        self.assertEqual(result, {"main": []})

    def test_widget_without_number_matches_whole_id(self):
        result = self.filter.filter_assignments({"custom": ["custom_widget", "other"]})
        self.assertEqual(result["custom"], ["custom_widget"])

    def test_malformed_id_is_compared_whole(self):
        result = self.filter.filter_assignments({"main": ["nav_menu", "nav_menu-x"]})
        self.assertEqual(result["main"], ["nav_menu"])

    def test_preserves_order_of_kept_widgets(self):
        result = self.filter.filter_assignments(
            {"main": ["nav_menu-4", "text-1", "recent-posts-2", "nav_menu-1", "text-2"]}
        )
        self.assertEqual(result["main"], ["nav_menu-4", "recent-posts-2", "nav_menu-1"])

    def test_is_idempotent(self):
        assignments = {
            "main": ["recent-posts-2", "text-3", "nav_menu-1"],
            "footer": ["text-1"],
            "nowhere": ["text-9"],
        }
        once = self.filter.filter_assignments(assignments)
        twice = self.filter.filter_assignments(once)
        self.assertEqual(once, twice)

    def test_pass_through_lists_are_returned_as_is(self):
        footer = ["text-1", "anything-2"]
        nowhere = ["text-9"]
        main = ["recent-posts-2", "text-3"]
        result = self.filter.filter_assignments({"main": main, "footer": footer, "nowhere": nowhere})

        self.assertIs(result["footer"], footer)
        self.assertIs(result["nowhere"], nowhere)
        self.assertIsNot(result["main"], main)
        self.assertEqual(result["main"], ["recent-posts-2"])
        self.assertEqual(list(result), ["main", "footer", "nowhere"])

    def test_does_not_modify_input(self):
        assignments = {"main": ["recent-posts-2", "text-3"]}
        self.filter.filter_assignments(assignments)
        self.assertEqual(assignments, {"main": ["recent-posts-2", "text-3"]})

    def test_every_kept_widget_is_allowed_and_every_removed_is_not(self):
        widgets = ["recent-posts-2", "text-3", "nav_menu-1", "nav_menu", "search-8"]
        kept = self.filter.filter_assignments({"main": widgets})["main"]
        for widget_id in widgets:
            kind, _number = parse_widget_id(widget_id)
            self.assertEqual(widget_id in kept, kind in MAIN.allowed_widgets)

    def test_runs_through_site_hook(self):
        result = self.hooks.apply_filters(WIDGET_AREA_ASSIGNMENTS, {"main": ["text-3", "nav_menu-1"]})
        self.assertEqual(result["main"], ["nav_menu-1"])


class ResolveAllowedKindsTests(SimpleTestCase):
    def setUp(self):
        self.hooks = HookRegistry("test")
        self.filter = WidgetAreaFilter(self.hooks, _areas(MAIN, FOOTER))

    def test_returns_declared_kinds(self):
        self.assertEqual(self.filter.resolve_allowed_kinds(MAIN), ["recent-posts", "nav_menu"])

    def test_missing_declaration_is_empty(self):
        self.assertEqual(self.filter.resolve_allowed_kinds(FOOTER), [])

    def test_hook_can_extend_list(self):
        calls = []

        def allow_text(allowed, area):
            calls.append(area.id)
            return allowed + ["text"]

        self.hooks.register("widget_whitelist_sidebar_allowed_widgets", allow_text)
        self.assertEqual(self.filter.resolve_allowed_kinds(MAIN), ["recent-posts", "nav_menu", "text"])
        self.assertEqual(calls, ["main"])
        result = self.filter.filter_assignments({"main": ["text-3"]})
        self.assertEqual(result["main"], ["text-3"])

    def test_hook_can_restrict_open_area(self):
        self.hooks.register(
            "widget_whitelist_sidebar_allowed_widgets",
            lambda allowed, area: ["links"] if area.id == "footer" else allowed,
        )
        result = self.filter.filter_assignments({"footer": ["text-1", "links-2"]})
        self.assertEqual(result["footer"], ["links-2"])

    def test_hook_name_uses_prefix(self):
        hooks = HookRegistry("test")
        custom = WidgetAreaFilter(hooks, _areas(FOOTER), prefix="promenade")
        hooks.register("promenade_sidebar_allowed_widgets", lambda allowed, area: ["text"])
        self.assertEqual(custom.resolve_allowed_kinds(FOOTER), ["text"])


class ConstructionTests(SimpleTestCase):
    def test_front_end_subscribes_only_filter(self):
        hooks = HookRegistry("site")
        widget_filter = WidgetAreaFilter(hooks, _areas(MAIN))
        self.assertEqual(hooks.handlers(WIDGET_AREA_ASSIGNMENTS), [widget_filter.filter_assignments])
        self.assertFalse(hooks.has_handlers(WIDGET_ADMIN_FORM))
        self.assertFalse(hooks.has_handlers(WIDGET_ADMIN_STYLES))
        self.assertFalse(hooks.has_handlers(WIDGET_PREVIEW_STYLES))

    def test_admin_subscribes_notice_handlers(self):
        hooks = HookRegistry("admin")
        widget_filter = WidgetAreaFilter(hooks, _areas(MAIN), is_admin=True)
        self.assertFalse(hooks.has_handlers(WIDGET_AREA_ASSIGNMENTS))
        self.assertEqual(hooks.handlers(WIDGET_ADMIN_FORM), [widget_filter.render_notice])
        self.assertEqual(hooks.handlers(WIDGET_ADMIN_STYLES), [widget_filter.render_notice_styles])
        self.assertEqual(hooks.handlers(WIDGET_PREVIEW_STYLES), [widget_filter.render_notice_styles])

    def test_empty_prefix_keeps_default(self):
        widget_filter = WidgetAreaFilter(HookRegistry(), _areas(), prefix="")
        self.assertEqual(widget_filter.prefix, DEFAULT_PREFIX)

    def test_notice_only_kept_in_admin(self):
        site = WidgetAreaFilter(HookRegistry(), _areas(), notice="Nope")
        admin = WidgetAreaFilter(HookRegistry(), _areas(), notice="Nope", is_admin=True)
        self.assertEqual(site.notice, "")
        self.assertEqual(admin.notice, "Nope")


class NoticeTextTests(SimpleTestCase):
    def test_default_notice(self):
        widget_filter = WidgetAreaFilter(HookRegistry(), _areas(), is_admin=True)
        self.assertEqual(
            widget_filter.resolve_notice_text(),
            "This widget isn't configured for this widget area.",
        )

    def test_configured_notice(self):
        widget_filter = WidgetAreaFilter(HookRegistry(), _areas(), notice="Not here.", is_admin=True)
        self.assertEqual(widget_filter.resolve_notice_text(), "Not here.")

    def test_hook_overrides_notice(self):
        hooks = HookRegistry()
        widget_filter = WidgetAreaFilter(hooks, _areas(), notice="Not here.", is_admin=True)
        hooks.register("widget_whitelist_disallowed_widget_notice", lambda text: text.upper())
        self.assertEqual(widget_filter.resolve_notice_text(), "NOT HERE.")


class IdentifierTests(SimpleTestCase):
    def test_identifier_without_suffix(self):
        widget_filter = WidgetAreaFilter(HookRegistry(), _areas(), prefix="promenade")
        self.assertEqual(widget_filter.identifier_for(), "promenade-widget-disallowed-notice")

    def test_identifier_with_suffix(self):
        widget_filter = WidgetAreaFilter(HookRegistry(), _areas(), prefix="promenade")
        self.assertEqual(widget_filter.identifier_for("text-3"), "promenade-widget-disallowed-notice-text-3")


class RenderNoticeTests(SimpleTestCase):
    def setUp(self):
        self.hooks = HookRegistry("admin")
        self.filter = WidgetAreaFilter(self.hooks, _areas(MAIN), is_admin=True)

    def test_banner_keyed_by_widget_id(self):
        html = self.filter.render_notice(SimpleNamespace(widget_id="text-3"))
        self.assertIn('id="widget_whitelist-widget-disallowed-notice-text-3"', html)
        self.assertIn('class="widget_whitelist-widget-disallowed-notice"', html)

    def test_banner_wraps_escaped_notice_in_paragraph(self):
        html = self.filter.render_notice(SimpleNamespace(widget_id="text-3"))
        self.assertIn("<p>This widget isn&#x27;t configured for this widget area.</p>", html)

    def test_notice_markup_is_escaped(self):
        self.hooks.register("widget_whitelist_disallowed_widget_notice", lambda text: "<b>Stop</b>")
        html = self.filter.render_notice(SimpleNamespace(widget_id="text-3"))
        self.assertIn("&lt;b&gt;Stop&lt;/b&gt;", html)
        self.assertNotIn("<b>Stop</b>", html)

    def test_script_moves_banner_into_widget_content(self):
        html = self.filter.render_notice(SimpleNamespace(widget_id="text-3"))
        self.assertIn("<script", html)
        self.assertIn('closest(".widget-content")', html)
        self.assertIn("getElementById(\"widget_whitelist\\u002Dwidget", html)

    def test_falls_back_to_plain_id(self):
        html = self.filter.render_notice(SimpleNamespace(id="search-2"))
        self.assertIn('id="widget_whitelist-widget-disallowed-notice-search-2"', html)

    def test_dispatched_through_form_hook(self):
        results = self.hooks.do_action(WIDGET_ADMIN_FORM, SimpleNamespace(widget_id="text-3"))
        self.assertEqual(len(results), 1)
        self.assertIn("widget_whitelist-widget-disallowed-notice-text-3", results[0])


class AreaNoticeCssTests(SimpleTestCase):
    def setUp(self):
        self.previewing = False
        self.hooks = HookRegistry("admin")
        self.area = WidgetArea("sidebar-1", "Sidebar", allowed_widgets=("text",))
        self.filter = WidgetAreaFilter(
            self.hooks,
            _areas(self.area, FOOTER),
            is_admin=True,
            is_previewing=lambda: self.previewing,
        )

    def test_unrestricted_area_has_no_css(self):
        self.assertEqual(self.filter.generate_area_notice_css(FOOTER), "")

    def test_selector_rooted_at_area_id(self):
        css = self.filter.generate_area_notice_css(self.area)
        self.assertTrue(css.startswith("#sidebar-1 "))
        self.assertNotIn("accordion-section", css)

    def test_preview_uses_accordion_selector(self):
        self.previewing = True
        css = self.filter.generate_area_notice_css(self.area)
        self.assertTrue(css.startswith("#accordion-section-sidebar-widgets-sidebar-1 "))
        self.assertNotIn("#sidebar-1 ", css)

    def test_rules(self):
        css = self.filter.generate_area_notice_css(self.area)
        notice = ".widget_whitelist-widget-disallowed-notice"
        self.assertEqual(
            css,
            f"#sidebar-1 {notice} {{ display: block; visibility: visible;}}"
            "#sidebar-1 .widget-top { background: #ffeeee;}"
            '#sidebar-1 .widget[id*="_text-"] .widget-top { background: #fafafa;}'
            f'#sidebar-1 .widget[id*="_text-"] {notice} {{ display: none; visibility: visible;}}',
        )

    def test_two_override_rules_per_allowed_kind(self):
        area = WidgetArea("two", allowed_widgets=("text", "links"))
        css = self.filter.generate_area_notice_css(area)
        self.assertEqual(css.count('[id*="_text-"]'), 2)
        self.assertEqual(css.count('[id*="_links-"]'), 2)

    def test_styles_include_base_rule_and_each_area(self):
        html = self.filter.render_notice_styles()
        self.assertIn('<style type="text/css">', html)
        self.assertIn(".widget_whitelist-widget-disallowed-notice {", html)
        self.assertIn("background: #c43;", html)
        self.assertIn("visibility: hidden;", html)
        self.assertIn('#sidebar-1 .widget[id*="_text-"] .widget-top { background: #fafafa;}', html)
        self.assertNotIn("#footer", html)

    def test_invalid_kind_from_hook_is_skipped(self):
        injected = 'x"]{}</style><script>alert(1)</script>'
        self.hooks.register(
            "widget_whitelist_sidebar_allowed_widgets",
            lambda allowed, area: allowed + [injected, None],
        )

        with self.assertLogs("widgets.whitelist", level="WARNING") as logs:
            html = self.filter.render_notice_styles()

        self.assertNotIn("<script>", html)
        self.assertNotIn("</style><", html)
        self.assertEqual(html.count("</style>"), 1)
        self.assertIn('#sidebar-1 .widget[id*="_text-"] .widget-top { background: #fafafa;}', html)
        self.assertTrue(any("invalid widget type" in line for line in logs.output))

    def test_kind_with_trailing_newline_from_hook_is_skipped(self):
        self.hooks.register(
            "widget_whitelist_sidebar_allowed_widgets",
            lambda allowed, area: ["links\n"],
        )

        with self.assertLogs("widgets.whitelist", level="WARNING"):
            css = self.filter.generate_area_notice_css(self.area)

        self.assertNotIn("links", css)
        self.assertIn("#sidebar-1 .widget-top { background: #ffeeee;}", css)

    def test_preview_styles_hook(self):
        self.previewing = True
        results = self.hooks.do_action(WIDGET_PREVIEW_STYLES)
        self.assertEqual(len(results), 1)
        self.assertIn("#accordion-section-sidebar-widgets-sidebar-1", results[0])


class WhitelistSettingsTests(SimpleTestCase):
    @override_settings(WIDGET_WHITELIST={"PREFIX": "promenade", "NOTICE": "Nope."})
    def test_configure_reads_settings(self):
        hooks = HookRegistry()
        widget_filter = configure_widget_whitelist(hooks, is_admin=True, areas=_areas(MAIN))
        self.assertEqual(widget_filter.prefix, "promenade")
        self.assertEqual(widget_filter.resolve_notice_text(), "Nope.")
        self.assertTrue(hooks.has_handlers(WIDGET_ADMIN_FORM))

    @override_settings(WIDGET_WHITELIST={"ENABLED": False})
    def test_disabled_registers_nothing(self):
        hooks = HookRegistry()
        self.assertIsNone(configure_widget_whitelist(hooks, is_admin=False, areas=_areas(MAIN)))
        self.assertFalse(hooks.has_handlers(WIDGET_AREA_ASSIGNMENTS))

    @override_settings(WIDGET_WHITELIST=None)
    def test_missing_settings_use_defaults(self):
        self.assertEqual(
            get_whitelist_settings(),
            {"ENABLED": True, "PREFIX": DEFAULT_PREFIX, "NOTICE": ""},
        )

    @override_settings(WIDGET_WHITELIST=["not", "a", "dict"])
    def test_invalid_settings_raise(self):
        from django.core.exceptions import ImproperlyConfigured

        with self.assertRaises(ImproperlyConfigured):
            get_whitelist_settings()
