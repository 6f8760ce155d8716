"""Slug and URL helpers shared by the page builder, renderer, and templates.

Page URLs are derived from page titles and section names, heading anchors
from stripped heading text, and publish builds prefix internal links with the
site's base URL.

Examples
--------
>>> from pagesmith.urls import slugify, prefix_url
>>> slugify("  Getting Started! ")
'getting-started'
>>> prefix_url("/guide/install/", "/docs", publish_mode=True)
'/docs/guide/install/'
>>> prefix_url("/guide/install/", "/docs", publish_mode=False)
'/guide/install/'
"""

from __future__ import annotations

import posixpath
import re
from urllib.parse import urlsplit, urlunsplit

from ._constants import HOMEPAGE_URL

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]+")
_REPEATED_DASH = re.compile(r"-{2,}")


def slugify(value: object) -> str:
    """Convert ``value`` into a lowercase, hyphen-delimited URL segment.

    Parameters
    ----------
    value : object
        Title or heading text; non-strings are converted with ``str``.

    Returns
    -------
    str
        Slug containing only ``[a-z0-9_-]`` without leading, trailing, or
        repeated hyphens. May be empty when ``value`` has no usable
        characters.
    """
    text = _WHITESPACE.sub("-", str(value).lower())
    text = _DISALLOWED.sub("", text)
    text = _REPEATED_DASH.sub("-", text)
    return text.strip("-")


def unique_slug(base: str, used: set[str]) -> str:
    """Return ``base`` or a numbered variant not yet in ``used``, recording it."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def page_url(title: str, section: str, index: int) -> str:
    """Return the site URL for the page at ``index`` in declaration order.

    The first page is always the homepage (``/``). Every other page lives at
    ``/<section-slug>/<title-slug>/``; top-level pages have no section
    segment.
    """
    if index == 0:
        return HOMEPAGE_URL
    segments = [segment for segment in (slugify(section), slugify(title)) if segment]
    if not segments:
        return HOMEPAGE_URL
    return "/" + "/".join(segments) + "/"


def prefix_url(target: str | None, base_url: str, *, publish_mode: bool) -> str:
    """Prefix an internal ``target`` with ``base_url`` for publish builds.

    Parameters
    ----------
    target : str or None
        Link, image source, or asset path to rewrite.
    base_url : str
        Site base URL without a trailing slash (``/`` or empty for the root).
    publish_mode : bool
        Only publish builds are prefixed; local builds return ``target``.

    Returns
    -------
    str
        ``target`` unchanged when it is external (scheme or host present), a
        pure fragment or query, or when the build is not a publish build;
        otherwise the normalised path joined onto ``base_url``.

    Raises
    ------
    ValueError
        If ``target`` is empty or ``None``.
    """
    if not target:
        msg = "url() requires a non-empty path."
        raise ValueError(msg)
    if not publish_mode:
        return target
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or target.startswith("//") or not parsed.path:
        return target
    prefix = base_url.rstrip("/")
    joined = posixpath.normpath(f"{prefix}/{parsed.path.lstrip('/')}")
    if parsed.path.endswith("/") and not joined.endswith("/"):
        joined += "/"
    return urlunsplit(("", "", joined, parsed.query, parsed.fragment))


__all__ = ["page_url", "prefix_url", "slugify", "unique_slug"]
