"""High-level orchestration for one documentation build.

This module drives a :class:`~pagesmith.config.SiteSpec` through the whole
pipeline: markdown for every page is rendered concurrently in worker threads
(results joined back in declaration order), URLs are checked for collisions,
menus and pagination are assembled, every page is rendered through the theme
template, and only then is the output directory rewritten.

Example
-------
>>> import asyncio
>>> from pathlib import Path
>>> from pagesmith.config import load_site_spec
>>> from pagesmith.generator import SiteBuilder
>>> spec = load_site_spec(Path("config.yml"))  # doctest: +SKIP
>>> result = asyncio.run(SiteBuilder(Path("_site")).build(spec))  # doctest: +SKIP
>>> [page.url for page in result.pages]  # doctest: +SKIP
['/', '/guide/install/', '/guide/usage/']
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from pagesmith.generator.assembler import assemble
from pagesmith.generator.models import RenderedPage
from pagesmith.generator.page_context import build_page_record, check_unique_urls
from pagesmith.generator.renderer import MarkdownRenderer
from pagesmith.generator.templates import TemplateRenderer
from pagesmith.generator.writer import OutputWriter

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pagesmith.config import SiteSpec
    from pagesmith.generator.models import PageBuildContext, PageRecord

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True, frozen=True)
class BuildResult:
    """Outcome of a successful build."""

    site_spec: SiteSpec
    pages: tuple[PageRecord, ...]
    written: tuple[Path, ...]


class SiteBuilder:
    """Render a SiteSpec into a static HTML tree under ``output_dir``."""

    def __init__(self, output_dir: Path, *, publish_mode: bool = False) -> None:
        """Initialize the builder.

        Parameters
        ----------
        output_dir : Path
            Directory the site is written to; must lie strictly inside the
            current working directory.
        publish_mode : bool, optional
            Prefix internal links, images, and ``url()`` results with the
            site's base URL.
        """
        self.output_dir = output_dir
        self.publish_mode = publish_mode

    async def build(self, site_spec: SiteSpec) -> BuildResult:
        """Run the full pipeline for ``site_spec``.

        Returns
        -------
        BuildResult
            Rendered page records and the written ``index.html`` paths.

        Raises
        ------
        PagesmithError
            Any stage failure aborts the build; nothing is written unless
            every page rendered successfully.
        """
        renderer = MarkdownRenderer(
            base_url=site_spec.base_url,
            publish_mode=self.publish_mode,
            pygments_style=site_spec.pygments_style,
            toc_depth=site_spec.toc_depth,
        )
        records = await self._build_records(site_spec, renderer)
        check_unique_urls(records)
        contexts = assemble(records, site_title=site_spec.title, site=site_spec.site)
        templates = TemplateRenderer(
            site_spec.theme_path,
            base_url=site_spec.base_url,
            publish_mode=self.publish_mode,
            highlight_css=renderer.stylesheet,
        )
        rendered = await asyncio.to_thread(self._render_pages, templates, contexts)
        writer = OutputWriter(site_spec, self.output_dir, highlight_css=renderer.stylesheet)
        written = await asyncio.to_thread(writer.write, rendered)
        logger.info("Built %d pages to ./%s", len(written), self._display_dir())
        return BuildResult(
            site_spec=site_spec, pages=tuple(records), written=tuple(written)
        )

    @staticmethod
    async def _build_records(
        site_spec: SiteSpec, renderer: MarkdownRenderer
    ) -> list[PageRecord]:
        """Render every page concurrently, returning records in input order."""
        jobs = [
            asyncio.to_thread(build_page_record, spec, index, renderer)
            for index, spec in enumerate(site_spec.pages)
        ]
        return list(await asyncio.gather(*jobs))

    @staticmethod
    def _render_pages(
        templates: TemplateRenderer, contexts: cabc.Sequence[PageBuildContext]
    ) -> list[RenderedPage]:
        return [
            RenderedPage(url=context.page.url, html=templates.render(context))
            for context in contexts
        ]

    def _display_dir(self) -> str:
        """Return the output directory relative to the cwd when possible."""
        path = self.output_dir
        if path.is_absolute():
            try:
                return str(path.relative_to(Path.cwd()))
            except ValueError:  # pragma: no cover - fallback for different roots
                return str(path)
        return str(path)


__all__ = ["BuildResult", "SiteBuilder"]
