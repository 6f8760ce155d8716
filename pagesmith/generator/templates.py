"""Render page contexts through the theme's Jinja template."""

from __future__ import annotations

import typing as typ

from jinja2 import Environment, FileSystemLoader, TemplateError
from markupsafe import Markup

from pagesmith._constants import DEFAULT_BASE_URL, TEMPLATE_FILE_NAME
from pagesmith.errors import TemplateRenderError
from pagesmith.urls import prefix_url

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pagesmith.generator.models import PageBuildContext


class TemplateRenderer:
    """Render :class:`PageBuildContext` objects with a theme template.

    Templates receive ``site_title``, ``menu``, ``page``, ``pagination``,
    ``site``, ``content`` (the page HTML, marked safe so it is never escaped
    twice), ``highlight_css`` and a ``url(path)`` helper that prefixes
    internal paths with the base URL during publish builds.
    """

    def __init__(
        self,
        theme_path: Path,
        *,
        base_url: str = DEFAULT_BASE_URL,
        publish_mode: bool = False,
        highlight_css: str = "",
    ) -> None:
        """Initialize the Jinja environment and load the theme template.

        Parameters
        ----------
        theme_path : Path
            Theme directory holding ``template.jinja`` and any partials it
            includes.
        base_url : str, optional
            Base URL closed over by the ``url()`` helper.
        publish_mode : bool, optional
            Whether ``url()`` prefixes paths with ``base_url``.
        highlight_css : str, optional
            Pygments stylesheet exposed to templates for inlining.

        Raises
        ------
        TemplateRenderError
            If the template is missing or does not compile.
        """
        self.env = Environment(
            loader=FileSystemLoader(str(theme_path)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.base_url = base_url
        self.publish_mode = publish_mode
        self.highlight_css = Markup(highlight_css)
        try:
            self.template = self.env.get_template(TEMPLATE_FILE_NAME)
        except TemplateError as exc:
            msg = f"Couldn't load the theme template {theme_path / TEMPLATE_FILE_NAME}"
            raise TemplateRenderError(msg) from exc

    def render(self, context: PageBuildContext) -> str:
        """Render one page, returning HTML terminated by a newline.

        Raises
        ------
        TemplateRenderError
            If rendering fails, including ``url()`` calls with empty input.
        """
        try:
            html = self.template.render(
                site_title=context.site_title,
                menu=context.menu,
                page=context.page,
                pagination=context.pagination,
                site=context.site,
                content=Markup(context.page.content_html),
                highlight_css=self.highlight_css,
                url=self.url,
            )
        except (TemplateError, ValueError) as exc:
            msg = f'Error rendering the page "{context.page.title}" ({context.page.url})'
            raise TemplateRenderError(msg) from exc
        if not html.endswith("\n"):
            html += "\n"
        return html

    def url(self, target: str | None = None) -> str:
        """Return ``target`` prefixed for the current build; exposed as ``url()``.

        Raises
        ------
        ValueError
            If ``target`` is empty or omitted.
        """
        return prefix_url(target, self.base_url, publish_mode=self.publish_mode)


__all__ = ["TemplateRenderer"]
