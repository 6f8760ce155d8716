"""Collect headings and assign anchor ids while markdown is converted."""

from __future__ import annotations

import html
import re
import typing as typ

from markdown.extensions import Extension
from markdown.extensions.toc import render_inner_html, strip_tags
from markdown.treeprocessors import Treeprocessor

from pagesmith.generator.models import RenderedHeading
from pagesmith.urls import slugify, unique_slug

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

HEADING_TAG = re.compile(r"h([1-6])")


class HeadingExtension(Extension):
    """Give every heading a slug id and record headings up to ``max_level``.

    Each instance owns its own accumulator, so create one per conversion and
    read :attr:`headings` after ``Markdown.convert`` returns.
    """

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level
        self.headings: list[RenderedHeading] = []

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the heading treeprocessor after inline processing."""
        processor = HeadingTreeprocessor(md, self.max_level, self.headings)
        md.treeprocessors.register(processor, "pagesmith_headings", 6)


class HeadingTreeprocessor(Treeprocessor):
    """Set heading ids and append collected headings to a shared list."""

    def __init__(
        self, md: Markdown, max_level: int, headings: list[RenderedHeading]
    ) -> None:
        super().__init__(md)
        self.max_level = max_level
        self.headings = headings

    def run(self, root: Element) -> Element:
        """Walk headings in document order, assigning unique slug ids."""
        used: set[str] = set()
        for element in root.iter():
            if not isinstance(element.tag, str):
                continue
            match = HEADING_TAG.fullmatch(element.tag)
            if match is None:
                continue
            level = int(match.group(1))
            text = self._plain_text(element)
            slug = unique_slug(slugify(text) or "section", used)
            element.set("id", slug)
            if level <= self.max_level:
                self.headings.append(RenderedHeading(level=level, slug=slug, text=text))
        return root

    def _plain_text(self, element: Element) -> str:
        """Return heading text without tags, placeholders, or escapes."""
        text = strip_tags(render_inner_html(element, self.md))
        return html.unescape(text).strip()


__all__ = ["HeadingExtension", "HeadingTreeprocessor"]
