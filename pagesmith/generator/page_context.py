"""Build the per-page content record for each declared page."""

from __future__ import annotations

import typing as typ

from pagesmith.errors import ConfigError
from pagesmith.generator.models import Heading, PageRecord
from pagesmith.urls import page_url

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pagesmith.config import PageSpec
    from pagesmith.generator.renderer import MarkdownRenderer


def build_page_record(
    spec: PageSpec, index: int, renderer: MarkdownRenderer
) -> PageRecord:
    """Render one page's markdown and compute its URL and heading anchors.

    Parameters
    ----------
    spec : PageSpec
        Page declaration to render.
    index : int
        Position of the page in declaration order; index ``0`` is the
        homepage and is served from ``/``.
    renderer : MarkdownRenderer
        Content renderer configured for the current build.

    Returns
    -------
    PageRecord
        Rendered page whose headings carry ``anchor_url = url + "#" + slug``.

    Raises
    ------
    ContentReadError
        If the markdown source is unreadable.
    ContentRenderError
        If the markdown cannot be converted.
    """
    url = page_url(spec.title, spec.section, index)
    rendered = renderer.render(spec.markdown_path)
    headings = tuple(
        Heading(
            level=heading.level,
            slug=heading.slug,
            text=heading.text,
            anchor_url=f"{url}#{heading.slug}",
        )
        for heading in rendered.headings
    )
    return PageRecord(
        title=spec.title,
        section=spec.section,
        url=url,
        content_html=rendered.html,
        headings=headings,
    )


def check_unique_urls(records: cabc.Sequence[PageRecord]) -> None:
    """Raise ConfigError when two pages resolve to the same URL."""
    owners: dict[str, PageRecord] = {}
    for record in records:
        previous = owners.get(record.url)
        if previous is not None:
            msg = (
                f'The pages "{_label(previous)}" and "{_label(record)}" both map to '
                f"the URL {record.url}. Rename one of them."
            )
            raise ConfigError(msg)
        owners[record.url] = record


def _label(record: PageRecord) -> str:
    return f"{record.section} / {record.title}" if record.section else record.title


__all__ = ["build_page_record", "check_unique_urls"]
