"""Cyclopts CLI entrypoint for building, serving, and publishing documentation.

The ``pagesmith`` console script renders a site described by a YAML config
into static HTML. ``pagesmith build`` runs a single build and can optionally
keep watching the sources, serve the output locally, or publish every build
to a git hosting branch. ``pagesmith publish`` builds once with base-URL
prefixing enabled and pushes the result.

Examples
--------
Build the site described by ``config.yml`` into ``_site``:

>>> from pagesmith.cli import main
>>> main()  # doctest: +SKIP

Rebuild on every change and serve the result on port 8000:

>>> from pagesmith.cli import app
>>> app.run(["build", "--watch", "--serve", "--port", "8000"])  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import logging
import os
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from pagesmith._constants import DEFAULT_CONFIG, DEFAULT_OUTPUT_DIR, DEFAULT_PORT
from pagesmith.errors import PagesmithError
from pagesmith.publish import DEFAULT_BRANCH, DEFAULT_REMOTE, GitPagesPublisher
from pagesmith.rebuild import BuildOptions, RebuildCoordinator

logger = logging.getLogger("pagesmith")

LOG_FORMAT = "%(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

app = App(name="pagesmith", config=cyclopts.config.Env("PAGESMITH_", command=False))  # type: ignore[unknown-argument]


def _configure_logging(debug: bool) -> None:
    """Configure root logging; ``PAGESMITH_DEBUG`` also enables debug output."""
    debug = debug or bool(os.getenv("PAGESMITH_DEBUG"))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=DEBUG_LOG_FORMAT if debug else LOG_FORMAT,
        force=True,
    )


def _run_guarded(coordinator: RebuildCoordinator) -> None:
    """Run ``coordinator`` and translate pagesmith errors into an exit status.

    Errors without an underlying cause are expected, user-facing stops and
    end the process with status 1. Errors chained to another exception are
    logged and re-raised so the traceback stays visible.
    """
    try:
        asyncio.run(coordinator.run())
    except PagesmithError as exc:
        logger.error(exc.message)  # noqa: TRY400
        if exc.__cause__ is None:
            raise SystemExit(1) from None
        raise
    except KeyboardInterrupt:
        logger.info("Stopped.")


@app.command(help="Build the site, optionally watching, serving, or publishing it.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="PAGESMITH_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path,
        Parameter(
            name=["--output-dir", "-o"],
            help="Output folder; must be inside the current directory",
            env_var="PAGESMITH_OUTPUT_DIR",
        ),
    ] = DEFAULT_OUTPUT_DIR,
    watch: typ.Annotated[
        bool, Parameter(name=["--watch", "-w"], help="Rebuild when sources change")
    ] = False,
    serve: typ.Annotated[
        bool, Parameter(name=["--serve", "-s"], help="Serve the output folder")
    ] = False,
    port: typ.Annotated[
        int, Parameter(name=["--port", "-p"], help="Port for --serve")
    ] = DEFAULT_PORT,
    publish: typ.Annotated[
        bool,
        Parameter(help="Prefix links with base_url and push every build to gh-pages"),
    ] = False,
    debug: typ.Annotated[
        bool, Parameter(name=["--debug", "-d"], help="Enable debug logging")
    ] = False,
) -> None:
    """Build the site described by ``config`` into ``output_dir``.

    Parameters
    ----------
    config : Path
        YAML site configuration.
    output_dir : Path
        Directory to write; it is emptied before each build.
    watch : bool
        Keep running and rebuild whenever a page, the theme, or the config
        changes.
    serve : bool
        Serve ``output_dir`` over HTTP on ``port`` after the first build.
    port : int
        Port for the development server.
    publish : bool
        Build with base-URL prefixing and force-push each build to the
        ``gh-pages`` branch of ``origin``.
    debug : bool
        Enable debug logging.
    """
    _configure_logging(debug)
    options = BuildOptions(watch=watch, serve=serve, publish=publish, port=port)
    _run_guarded(RebuildCoordinator(config, output_dir, options))


@app.command(help="Build the site and push it to a git hosting branch.")
def publish(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="PAGESMITH_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path,
        Parameter(
            name=["--output-dir", "-o"],
            help="Output folder; must be inside the current directory",
            env_var="PAGESMITH_OUTPUT_DIR",
        ),
    ] = DEFAULT_OUTPUT_DIR,
    remote: typ.Annotated[str, Parameter(help="Git remote to push to")] = DEFAULT_REMOTE,
    branch: typ.Annotated[str, Parameter(help="Branch to force-push")] = DEFAULT_BRANCH,
    debug: typ.Annotated[
        bool, Parameter(name=["--debug", "-d"], help="Enable debug logging")
    ] = False,
) -> None:
    """Build once in publish mode and force-push the output to ``branch``."""
    _configure_logging(debug)
    publisher = GitPagesPublisher(remote=remote, branch=branch)
    coordinator = RebuildCoordinator(
        config, output_dir, BuildOptions(publish=True), publisher=publisher
    )
    _run_guarded(coordinator)


def main() -> None:
    """Run the pagesmith CLI application.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
