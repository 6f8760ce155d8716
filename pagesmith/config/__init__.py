"""Load and validate the site configuration for pagesmith builds.

This subpackage parses the project's ``config.yml``, flattens the two-level
``pages`` declaration into an ordered list of leaf pages tagged with their
section, resolves paths against the config directory, and produces frozen
dataclasses (:class:`SiteSpec`, :class:`PageSpec`) consumed by the build
pipeline. The primary entry point is :func:`load_site_spec`.

Examples
--------
>>> from pathlib import Path
>>> from pagesmith.config import load_site_spec
>>> site = load_site_spec(Path("config.yml"))  # doctest: +SKIP
>>> [(page.section, page.title) for page in site.pages]  # doctest: +SKIP
[('', 'Home'), ('Guide', 'Install'), ('Guide', 'Usage')]
"""

from .loader import RESERVED_KEYS, load_site_spec
from .models import PageSpec, SiteSpec

__all__ = ["RESERVED_KEYS", "PageSpec", "SiteSpec", "load_site_spec"]
