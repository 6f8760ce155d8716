"""Render markdown sources into HTML with syntax highlighting and headings."""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from pagesmith._constants import DEFAULT_BASE_URL, DEFAULT_PYGMENTS_STYLE, DEFAULT_TOC_DEPTH
from pagesmith.errors import ContentReadError, ContentRenderError
from pagesmith.generator.headings import HeadingExtension
from pagesmith.generator.link_rewriter import _build_link_rewriter
from pagesmith.generator.models import RenderedMarkdown

if typ.TYPE_CHECKING:
    from pathlib import Path

    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

CODE_BLOCK_PATTERN = re.compile(
    r"^(?P<fence>`{3,}|~{3,})[ ]*(?P<lang>[A-Za-z0-9_+#.-]+)?[^\n]*\n"
    r"(?P<body>.*?)^(?P=fence)",
    re.DOTALL | re.MULTILINE,
)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


class MarkdownRenderer:
    """Convert markdown files into HTML plus the headings they contain.

    The renderer itself holds only configuration; every :meth:`render` call
    builds a fresh ``Markdown`` instance and heading accumulator, so calls
    may run concurrently from worker threads.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        publish_mode: bool = False,
        pygments_style: str = DEFAULT_PYGMENTS_STYLE,
        toc_depth: int = DEFAULT_TOC_DEPTH,
    ) -> None:
        """Initialize a renderer for one build.

        Parameters
        ----------
        base_url : str, optional
            Site base URL used to prefix internal links in publish builds.
        publish_mode : bool, optional
            When ``True`` internal links and images are prefixed with
            ``base_url``; local builds leave them untouched.
        pygments_style : str, optional
            Pygments style used for highlighted code blocks.
        toc_depth : int, optional
            Deepest heading level reported back in the render result.
        """
        self.base_url = base_url
        self.publish_mode = publish_mode
        self.pygments_style = pygments_style
        self.toc_depth = toc_depth
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def render(self, markdown_path: Path) -> RenderedMarkdown:
        """Read ``markdown_path`` and convert it into HTML and headings.

        Raises
        ------
        ContentReadError
            If the file cannot be read or decoded as UTF-8.
        ContentRenderError
            If markdown conversion or highlighting fails.
        """
        try:
            text = markdown_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Error trying to read the file {markdown_path}"
            raise ContentReadError(msg) from exc
        try:
            return self.markdown(text)
        except Exception as exc:
            msg = f"Error trying to parse the markdown in {markdown_path}"
            raise ContentRenderError(msg) from exc

    def markdown(self, text: str) -> RenderedMarkdown:
        """Render markdown text using the configured extensions."""
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return RenderedMarkdown(html="", headings=())
        heading_extension = HeadingExtension(self.toc_depth)
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            heading_extension,
        ]
        link_extension = _build_link_rewriter(self.base_url, publish_mode=self.publish_mode)
        if link_extension:
            extensions.append(link_extension)
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        html = md.convert(normalized)
        return RenderedMarkdown(
            html=self._annotate_codehilite(html, normalized),
            headings=tuple(heading_extension.headings),
        )

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markdown."""
        languages = [
            match.group("lang") or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


__all__ = ["CODE_BLOCK_PATTERN", "MarkdownRenderer"]
