from __future__ import annotations

import logging

import markdown
from django.template.loader import render_to_string

from core.plugins import BaseWidget

logger = logging.getLogger(__name__)


class TextWidget(BaseWidget):
    slug = "text"
    label = "Text / HTML Block"
    template_name = "widgets/text_widget.html"
    config_schema = {
        "fields": {
            "title": {"type": "string", "label": "Title"},
            "content": {"type": "text", "label": "Content (Markdown)"},
        }
    }

    def render(self, config: dict, request=None) -> str:
        md = markdown.Markdown(extensions=["fenced_code"])
        content_html = md.convert(config.get("content") or "")
        return render_to_string(
            self.template_name,
            {"title": config.get("title", ""), "content_html": content_html},
            request=request,
        )


class LinksWidget(BaseWidget):
    slug = "links"
    label = "Links"
    template_name = "widgets/links_widget.html"
    config_schema = {
        "fields": {
            "title": {"type": "string", "label": "Title"},
            "links": {"type": "text", "label": "Links (one 'Title | URL' per line)"},
        }
    }

    @staticmethod
    def parse_links(raw: str) -> list[dict]:
        links = []
        for line in (raw or "").splitlines():
            line = line.strip()
            if not line:
                continue
            title, sep, url = line.partition("|")
            if not sep:
                url = title
            links.append({"title": title.strip(), "url": url.strip()})
        return links

    def render(self, config: dict, request=None) -> str:
        links = self.parse_links(config.get("links", ""))
        if not links:
            logger.debug("LinksWidget rendered without links")
        return render_to_string(
            self.template_name,
            {"title": config.get("title", ""), "links": links},
            request=request,
        )
