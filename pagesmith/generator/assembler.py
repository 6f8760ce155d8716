"""Compute navigation menus and pagination across the ordered page list.

Menu sections are formed by adjacency: a new section starts whenever a
page's section differs from the page before it, so sections ``[A, A, B, A]``
produce three groups. Pagination follows declaration order and crosses
section boundaries.

Example
-------
>>> from pagesmith.generator.assembler import assemble
>>> assemble([], site_title="Docs", site={})
[]
"""

from __future__ import annotations

import typing as typ

from pagesmith.generator.models import (
    MenuEntry,
    MenuSection,
    PageBuildContext,
    PageLink,
    PaginationLink,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pagesmith.generator.models import PageRecord


def assemble(
    records: cabc.Sequence[PageRecord],
    *,
    site_title: str,
    site: cabc.Mapping[str, typ.Any],
) -> list[PageBuildContext]:
    """Return one template context per page, in the same order as ``records``.

    Parameters
    ----------
    records : Sequence[PageRecord]
        Fully rendered pages in declaration order.
    site_title : str
        Site title shared by every context.
    site : Mapping[str, Any]
        Pass-through configuration shared by reference; treat as read-only.

    Returns
    -------
    list[PageBuildContext]
        Contexts carrying the menu (active flag set for the page itself) and
        previous/next links.
    """
    groups = _group_by_section(records)
    return [
        PageBuildContext(
            site_title=site_title,
            menu=_flag_active(groups, record.url),
            page=record,
            pagination=_pagination(records, index),
            site=site,
        )
        for index, record in enumerate(records)
    ]


def _group_by_section(
    records: cabc.Sequence[PageRecord],
) -> list[tuple[str, list[PageRecord]]]:
    """Split records into maximal runs of equal ``section`` values."""
    groups: list[tuple[str, list[PageRecord]]] = []
    for record in records:
        if not groups or groups[-1][0] != record.section:
            groups.append((record.section, []))
        groups[-1][1].append(record)
    return groups


def _flag_active(
    groups: list[tuple[str, list[PageRecord]]], active_url: str
) -> tuple[MenuSection, ...]:
    """Materialise the shared menu structure with one page marked active."""
    return tuple(
        MenuSection(
            title=section,
            pages=tuple(
                MenuEntry(
                    title=record.title,
                    url=record.url,
                    is_active=record.url == active_url,
                    headings=record.headings,
                )
                for record in pages
            ),
        )
        for section, pages in groups
    )


def _pagination(records: cabc.Sequence[PageRecord], index: int) -> PaginationLink:
    """Return links to the neighbours of the page at ``index``."""
    previous = None
    following = None
    if index > 0:
        before = records[index - 1]
        previous = PageLink(title=before.title, url=before.url)
    if index < len(records) - 1:
        after = records[index + 1]
        following = PageLink(title=after.title, url=after.url)
    return PaginationLink(previous=previous, next=following)


__all__ = ["assemble"]
