"""Error taxonomy raised by the pagesmith build pipeline.

Every error carries a human-readable message. When an error wraps an
underlying exception (``raise ... from exc``) the CLI treats it as unexpected
and re-raises it; an error without a cause is a clean, user-facing stop.
"""

from __future__ import annotations


class PagesmithError(Exception):
    """Base class for all errors raised by pagesmith."""

    @property
    def message(self) -> str:
        """Return the human-readable explanation passed to the constructor."""
        return str(self.args[0]) if self.args else self.__class__.__name__


class ConfigError(PagesmithError, ValueError):
    """Raised when the site configuration is invalid or incomplete."""


class ContentReadError(PagesmithError):
    """Raised when a markdown source cannot be read from disk."""


class ContentRenderError(PagesmithError):
    """Raised when markdown conversion or highlighting fails."""


class TemplateRenderError(PagesmithError):
    """Raised when the theme template cannot be loaded or rendered."""


class WriteError(PagesmithError):
    """Raised when the output tree cannot be written."""


class UnsafeOutputDirError(PagesmithError):
    """Raised when the output directory is not inside the working directory."""


class WatchError(PagesmithError):
    """Raised when the file watcher fails."""


class PublishError(PagesmithError):
    """Raised when pushing the built site to the hosting branch fails."""


class ServeError(PagesmithError):
    """Raised when the development server cannot start."""


__all__ = [
    "ConfigError",
    "ContentReadError",
    "ContentRenderError",
    "PagesmithError",
    "PublishError",
    "ServeError",
    "TemplateRenderError",
    "UnsafeOutputDirError",
    "WatchError",
    "WriteError",
]
