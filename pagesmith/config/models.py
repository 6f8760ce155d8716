"""Typed dataclasses describing a validated pagesmith site configuration."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from pagesmith._constants import (
    DEFAULT_BASE_URL,
    DEFAULT_PYGMENTS_STYLE,
    DEFAULT_TOC_DEPTH,
    TEMPLATE_FILE_NAME,
)


@dc.dataclass(slots=True, frozen=True)
class PageSpec:
    """A single leaf page flattened out of the ``pages`` declaration.

    Attributes
    ----------
    title : str
        Page title, unique case-insensitively within its section.
    section : str
        Title of the enclosing group; empty for top-level pages.
    markdown_path : Path
        Markdown source file for the page.
    """

    title: str
    section: str
    markdown_path: Path


@dc.dataclass(slots=True, frozen=True)
class SiteSpec:
    """Validated site definition driving one build."""

    title: str
    theme_path: Path
    pages: tuple[PageSpec, ...]
    base_url: str = DEFAULT_BASE_URL
    site: dict[str, typ.Any] = dc.field(default_factory=dict)
    include_paths: tuple[Path, ...] = ()
    config_path: Path | None = None
    pygments_style: str = DEFAULT_PYGMENTS_STYLE
    toc_depth: int = DEFAULT_TOC_DEPTH

    @property
    def root_dir(self) -> Path:
        """Return the directory relative paths in the config resolve against."""
        if self.config_path is None:
            return Path.cwd()
        return self.config_path.parent

    @property
    def template_path(self) -> Path:
        """Return the path of the theme's reserved template file."""
        return self.theme_path / TEMPLATE_FILE_NAME

    def watch_paths(self) -> list[Path]:
        """Return every source whose change should trigger a rebuild."""
        paths = [page.markdown_path for page in self.pages]
        paths.append(self.theme_path)
        if self.config_path is not None:
            paths.append(self.config_path)
        return paths


__all__ = ["PageSpec", "SiteSpec"]
