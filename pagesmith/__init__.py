"""Build static documentation sites from markdown pages and a jinja theme.

This package exposes the ``pagesmith`` console script used to build a site
once, rebuild it on every source change, serve it locally, or publish it to
a git hosting branch.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from pagesmith import main
>>> main()  # doctest: +SKIP
>>> from pagesmith import app
>>> app.name[0]
'pagesmith'
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
