"""Shared dataclasses used by the page generation pipeline.

Everything here is build-scoped: records are created fresh at the start of a
build and discarded when it finishes.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ


@dc.dataclass(slots=True, frozen=True)
class RenderedHeading:
    """Heading reported by the markdown renderer.

    Attributes
    ----------
    level : int
        Heading level between 1 and 6.
    slug : str
        Anchor id assigned to the heading element, unique within its page.
    text : str
        Heading text with markup stripped and entities unescaped.
    """

    level: int
    slug: str
    text: str


@dc.dataclass(slots=True, frozen=True)
class RenderedMarkdown:
    """HTML and ordered headings produced from one markdown source."""

    html: str
    headings: tuple[RenderedHeading, ...]


@dc.dataclass(slots=True, frozen=True)
class Heading:
    """Page heading with a fully qualified anchor URL."""

    level: int
    slug: str
    text: str
    anchor_url: str


@dc.dataclass(slots=True, frozen=True)
class PageRecord:
    """Per-page content record derived from a PageSpec.

    Attributes
    ----------
    title : str
        Page title from the configuration.
    section : str
        Section title; empty for top-level pages.
    url : str
        Site URL, always starting and ending with ``/``.
    content_html : str
        Rendered markdown body.
    headings : tuple[Heading, ...]
        Headings in document order with ``anchor_url = url + "#" + slug``.
    """

    title: str
    section: str
    url: str
    content_html: str
    headings: tuple[Heading, ...]


@dc.dataclass(slots=True, frozen=True)
class MenuEntry:
    """Navigation link to one page; only ``is_active`` differs between pages."""

    title: str
    url: str
    is_active: bool
    headings: tuple[Heading, ...]


@dc.dataclass(slots=True, frozen=True)
class MenuSection:
    """Contiguous run of pages sharing a section title."""

    title: str
    pages: tuple[MenuEntry, ...]


@dc.dataclass(slots=True, frozen=True)
class PageLink:
    """Title and URL of a neighbouring page."""

    title: str
    url: str


@dc.dataclass(slots=True, frozen=True)
class PaginationLink:
    """Previous and next pages in declaration order, across sections."""

    previous: PageLink | None = None
    next: PageLink | None = None


@dc.dataclass(slots=True, frozen=True)
class PageBuildContext:
    """Everything the theme template sees when rendering one page."""

    site_title: str
    menu: tuple[MenuSection, ...]
    page: PageRecord
    pagination: PaginationLink
    site: typ.Mapping[str, typ.Any]


@dc.dataclass(slots=True, frozen=True)
class RenderedPage:
    """Final HTML for one page, keyed by its site URL."""

    url: str
    html: str


__all__ = [
    "Heading",
    "MenuEntry",
    "MenuSection",
    "PageBuildContext",
    "PageLink",
    "PageRecord",
    "PaginationLink",
    "RenderedHeading",
    "RenderedMarkdown",
    "RenderedPage",
]
