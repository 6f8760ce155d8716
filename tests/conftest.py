"""Shared fixtures that lay out a small documentation project on disk.

The ``docs_project`` fixture writes a theme, three markdown pages (one
homepage plus a two-page ``Guide`` section) and a ``config.yml`` into
``tmp_path`` and makes that directory the working directory, so output
directories such as ``_site`` satisfy the output-safety check.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import pytest

if typ.TYPE_CHECKING:
    from pathlib import Path

TEMPLATE = """\
<!doctype html>
<html>
<head>
<title>{{ page.title }} | {{ site_title }}</title>
<link rel="stylesheet" href="{{ url('/style.css') }}">
</head>
<body>
<nav>
{% for section in menu %}
<section class="menu-section" data-title="{{ section.title }}">
{% for entry in section.pages %}
<a class="menu-link{% if entry.is_active %} active{% endif %}" href="{{ url(entry.url) }}">{{ entry.title }}</a>
{% for heading in entry.headings %}
<a class="menu-heading" href="{{ url(heading.anchor_url) }}">{{ heading.text }}</a>
{% endfor %}
{% endfor %}
</section>
{% endfor %}
</nav>
<main>{{ content }}</main>
{% if pagination.previous %}
<a class="previous" href="{{ url(pagination.previous.url) }}">{{ pagination.previous.title }}</a>
{% endif %}
{% if pagination.next %}
<a class="next" href="{{ url(pagination.next.url) }}">{{ pagination.next.title }}</a>
{% endif %}
<footer>{{ site.author }}</footer>
</body>
</html>
"""

CONFIG = """\
title: Docs
theme: theme
base_url: /project/
author: Jane Doe
pages:
  - Home: docs/index.md
  - Guide:
      - Install: docs/install.md
      - Usage: docs/usage.md
"""

PAGES = {
    "index.md": "# Welcome\n\nStart with the [install guide](/guide/install/).\n",
    "install.md": (
        "# Install\n\n"
        "## Requirements\n\n"
        "You need Python.\n\n"
        "```python\nprint('hello')\n```\n"
    ),
    "usage.md": "# Usage\n\n## Running & stopping\n\n![logo](/img/logo.png)\n",
}


@dc.dataclass(slots=True)
class DocsProject:
    """Paths of a documentation project written into a temporary directory."""

    root: Path
    config_path: Path
    theme_dir: Path
    docs_dir: Path

    @property
    def output_dir(self) -> Path:
        """Return the default output directory inside the project."""
        return self.root / "_site"

    def write_config(self, text: str) -> None:
        """Replace ``config.yml`` with ``text``."""
        self.config_path.write_text(text, encoding="utf-8")


@pytest.fixture
def docs_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> DocsProject:
    """Write a small docs project into ``tmp_path`` and chdir into it."""
    theme_dir = tmp_path / "theme"
    theme_dir.mkdir()
    (theme_dir / "template.jinja").write_text(TEMPLATE, encoding="utf-8")
    (theme_dir / "style.css").write_text("body { margin: 0; }\n", encoding="utf-8")
    (theme_dir / "img").mkdir()
    (theme_dir / "img" / "logo.png").write_bytes(b"\x89PNG")

    docs_dir = tmp_path / "docs"
    docs_dir.mkdir()
    for name, text in PAGES.items():
        (docs_dir / name).write_text(text, encoding="utf-8")

    config_path = tmp_path / "config.yml"
    config_path.write_text(CONFIG, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return DocsProject(
        root=tmp_path, config_path=config_path, theme_dir=theme_dir, docs_dir=docs_dir
    )
