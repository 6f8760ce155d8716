"""Helpers for prefixing internal markdown links with the site's base URL."""

from __future__ import annotations

import typing as typ

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from pagesmith.urls import prefix_url

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

LINK_ATTRIBUTES: dict[str, str] = {"a": "href", "img": "src"}


def _build_link_rewriter(base_url: str, *, publish_mode: bool) -> Extension | None:
    """Return a BaseUrlExtension for publish builds, or ``None`` for local ones."""
    if not publish_mode:
        return None
    return BaseUrlExtension(base_url)


class BaseUrlExtension(Extension):
    """Prefix internal links and image sources with the site base URL.

    Insert this extension into a ``markdown.Markdown`` instance when building
    a site that will be hosted under a subpath (``https://host/<project>/``),
    so ``/guide/install/`` and ``img/diagram.png`` keep resolving once
    published. External URLs, fragments, and queries are left untouched.
    """

    def __init__(self, base_url: str) -> None:
        super().__init__()
        self.base_url = base_url

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the base-URL treeprocessor on the Markdown instance."""
        processor = BaseUrlTreeprocessor(md, self.base_url)
        md.treeprocessors.register(processor, "pagesmith_base_url", 15)


class BaseUrlTreeprocessor(Treeprocessor):
    """Rewrite ``a[href]`` and ``img[src]`` attributes through ``prefix_url``."""

    def __init__(self, md: Markdown, base_url: str) -> None:
        super().__init__(md)
        self.base_url = base_url

    def run(self, root: Element) -> Element:
        """Rewrite internal link targets in the parsed markdown tree."""
        for element in root.iter():
            attribute = LINK_ATTRIBUTES.get(element.tag)
            if attribute is None:
                continue
            target = element.get(attribute)
            if target:
                element.set(
                    attribute, prefix_url(target, self.base_url, publish_mode=True)
                )
        return root


__all__ = ["BaseUrlExtension", "BaseUrlTreeprocessor", "_build_link_rewriter"]
