"""Safely clear and repopulate the output directory for a build.

The writer refuses to touch any directory that is not strictly inside the
current working directory, then runs four steps in order: empty the output
directory, copy theme assets, copy user includes, and write one
``index.html`` per page at its URL. Any I/O failure aborts the build; steps
are not atomic, but stale content is always cleared before new content is
written.
"""

from __future__ import annotations

import logging
import shutil
import typing as typ
from pathlib import Path

from pagesmith._constants import HIGHLIGHT_CSS_FILE_NAME, PAGE_FILE_NAME, TEMPLATE_FILE_NAME
from pagesmith.errors import UnsafeOutputDirError, WriteError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pagesmith.config import SiteSpec
    from pagesmith.generator.models import RenderedPage

logger = logging.getLogger(__name__)


def ensure_safe_output_dir(output_dir: Path, cwd: Path | None = None) -> Path:
    """Return the real path of ``output_dir`` if it lies strictly inside ``cwd``.

    Parameters
    ----------
    output_dir : Path
        Requested output directory; relative paths resolve against ``cwd``.
    cwd : Path, optional
        Working directory to compare against; defaults to ``Path.cwd()``.

    Returns
    -------
    Path
        Symlink-free absolute path of the output directory.

    Raises
    ------
    UnsafeOutputDirError
        If the output directory is the working directory itself or lies
        outside it (for example, one of its ancestors).
    """
    base = (cwd or Path.cwd()).resolve()
    candidate = output_dir if output_dir.is_absolute() else base / output_dir
    resolved = candidate.resolve()
    if resolved == base or not resolved.is_relative_to(base):
        msg = (
            f"Refusing to build into {output_dir}: the output directory must be "
            f"inside the current directory ({base}) and not the directory itself."
        )
        raise UnsafeOutputDirError(msg)
    return resolved


class OutputWriter:
    """Write a rendered site into its output directory."""

    def __init__(
        self, site_spec: SiteSpec, output_dir: Path, *, highlight_css: str = ""
    ) -> None:
        self.site_spec = site_spec
        self.output_dir = output_dir
        self.highlight_css = highlight_css

    def write(self, pages: cabc.Sequence[RenderedPage]) -> list[Path]:
        """Replace the output tree with theme assets, includes, and pages.

        Parameters
        ----------
        pages : Sequence[RenderedPage]
            Rendered HTML keyed by page URL.

        Returns
        -------
        list[Path]
            Paths of the written ``index.html`` files, in page order.

        Raises
        ------
        UnsafeOutputDirError
            Before any deletion, if the output directory is unsafe.
        WriteError
            If any filesystem operation fails.
        """
        target = ensure_safe_output_dir(self.output_dir)
        self._clear(target)
        self._copy_theme(target)
        self._write_highlight_css(target)
        self._copy_includes(target)
        return [self._write_page(target, page) for page in pages]

    def _clear(self, target: Path) -> None:
        """Empty ``target`` (keeping the directory itself) or create it."""
        try:
            if not target.exists():
                target.mkdir(parents=True)
                return
            for child in target.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        except OSError as exc:
            msg = f"Error clearing the output directory {target}"
            raise WriteError(msg) from exc
        logger.debug("Cleared: %s", _display(target))

    def _copy_theme(self, target: Path) -> None:
        """Copy every top-level theme entry except the template itself."""
        theme = self.site_spec.theme_path
        try:
            entries = sorted(theme.iterdir())
        except OSError as exc:
            msg = f"Error reading the theme directory {theme}"
            raise WriteError(msg) from exc
        for entry in entries:
            if entry.name == TEMPLATE_FILE_NAME:
                continue
            self._copy_entry(entry, target / entry.name)

    def _write_highlight_css(self, target: Path) -> None:
        """Write the Pygments stylesheet unless the theme ships its own."""
        if not self.highlight_css:
            return
        css_path = target / HIGHLIGHT_CSS_FILE_NAME
        if css_path.exists():
            return
        try:
            css_path.write_text(self.highlight_css, encoding="utf-8")
        except OSError as exc:
            msg = f"Error writing the highlight stylesheet to {css_path}"
            raise WriteError(msg) from exc

    def _copy_includes(self, target: Path) -> None:
        """Copy user includes to the same path relative to the config directory."""
        root = self.site_spec.root_dir.resolve()
        for include in self.site_spec.include_paths:
            relative = include.resolve().relative_to(root)
            self._copy_entry(include, target / relative)

    @staticmethod
    def _copy_entry(source: Path, destination: Path) -> None:
        """Copy a file or directory tree, overwriting and keeping timestamps."""
        try:
            if source.is_dir():
                shutil.copytree(source, destination, dirs_exist_ok=True)
            else:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, destination)
        except OSError as exc:
            msg = f"Error copying {source} to {destination}"
            raise WriteError(msg) from exc
        logger.debug("%s -> %s", source, _display(destination))

    @staticmethod
    def _write_page(target: Path, page: RenderedPage) -> Path:
        """Write one page to ``<target>/<url>/index.html``."""
        output_path = target / page.url.strip("/") / PAGE_FILE_NAME
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(page.html, encoding="utf-8")
        except OSError as exc:
            msg = f"Error writing page to {output_path}"
            raise WriteError(msg) from exc
        logger.debug("%s -> %s", page.url, _display(output_path))
        return output_path


def _display(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    try:
        return str(path.relative_to(Path.cwd().resolve()))
    except ValueError:
        return str(path)


__all__ = ["OutputWriter", "ensure_safe_output_dir"]
