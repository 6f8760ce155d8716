"""Coordinate builds, file watching, serving, and publishing.

The coordinator owns a small state machine. A change notification while idle
starts a build; a notification while building schedules exactly one more
build; further notifications while one is scheduled are coalesced into it.
Every build re-reads the config so edits to it are picked up, and the watch
set is refreshed from the freshly loaded site after each successful build.

Watchdog delivers events on its own thread; they are handed to the event loop
with ``call_soon_threadsafe`` so all state transitions happen on the loop.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import enum
import logging
import typing as typ

from pagesmith._constants import DEFAULT_PORT
from pagesmith.config import load_site_spec
from pagesmith.errors import WatchError
from pagesmith.generator import SiteBuilder
from pagesmith.publish import GitPagesPublisher
from pagesmith.server import StaticServer
from pagesmith.watcher import SourceWatcher

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from pagesmith.config import SiteSpec

logger = logging.getLogger(__name__)


class BuildState(enum.Enum):
    """Lifecycle of the rebuild loop."""

    IDLE = "idle"
    BUILDING = "building"
    SCHEDULED = "scheduled"


@dc.dataclass(slots=True, frozen=True)
class BuildOptions:
    """Switches selected on the command line."""

    watch: bool = False
    serve: bool = False
    publish: bool = False
    port: int = DEFAULT_PORT

    @property
    def keeps_running(self) -> bool:
        """Return whether ``run`` waits for changes after the first build."""
        return self.watch or self.serve


class RebuildCoordinator:
    """Drive builds in response to startup and file-change notifications."""

    def __init__(
        self,
        config_path: Path,
        output_dir: Path,
        options: BuildOptions | None = None,
        *,
        load_spec: cabc.Callable[[Path], SiteSpec] = load_site_spec,
        builder: typ.Any | None = None,
        publisher: typ.Any | None = None,
        watcher_factory: cabc.Callable[..., typ.Any] = SourceWatcher,
        server_factory: cabc.Callable[..., typ.Any] = StaticServer,
    ) -> None:
        """Initialize the coordinator.

        Parameters
        ----------
        config_path : Path
            Site configuration file, re-read before every build.
        output_dir : Path
            Directory the site is built into and served from.
        options : BuildOptions, optional
            Watch, serve, and publish switches.
        load_spec : Callable[[Path], SiteSpec], optional
            Loader used for each build.
        builder : Any, optional
            Object exposing ``async build(site_spec)``; defaults to a
            :class:`~pagesmith.generator.SiteBuilder`.
        publisher : Any, optional
            Object exposing ``publish(directory)``; defaults to a
            :class:`~pagesmith.publish.GitPagesPublisher` when publishing.
        watcher_factory, server_factory : Callable, optional
            Factories for the file watcher and static server.
        """
        self.config_path = config_path
        self.output_dir = output_dir
        self.options = options or BuildOptions()
        self.load_spec = load_spec
        self.builder = builder or SiteBuilder(
            output_dir, publish_mode=self.options.publish
        )
        if publisher is None and self.options.publish:
            publisher = GitPagesPublisher()
        self.publisher = publisher
        self._watcher_factory = watcher_factory
        self._server_factory = server_factory

        self.state = BuildState.IDLE
        self.build_count = 0
        self.site_spec: SiteSpec | None = None
        self.watcher: typ.Any | None = None
        self.server: typ.Any | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._cycle: asyncio.Task[None] | None = None
        self._finished: asyncio.Future[None] | None = None
        self._stop_requested = False

    async def run(self) -> None:
        """Build once, then keep rebuilding while watching or serving.

        Raises
        ------
        PagesmithError
            The first build failure, or a :class:`WatchError` once the build
            in flight when the watcher failed has completed.
        """
        self._loop = asyncio.get_running_loop()
        if self.options.watch and self.options.publish:
            logger.warning(
                "Watching and publishing together may be slow: "
                "every change triggers a full publish."
            )
        try:
            self.request_rebuild()
            await self.wait_idle()
            if not self.options.keeps_running or self._stop_requested:
                return
            self._finished = self._loop.create_future()
            if self.options.serve:
                self.server = self._server_factory(self.output_dir, self.options.port)
                self.server.start()
            if self.options.watch and self.watcher is None:
                self._start_watching()
            await self._finished
        finally:
            self._shutdown()

    def stop(self) -> None:
        """End a watching or serving run; safe to call from any thread."""
        if self._loop is None:
            self._stop_requested = True
            return
        self._loop.call_soon_threadsafe(self._finish, None)

    def notify_change(self, kind: str, path: str) -> None:
        """Accept a watcher notification from any thread."""
        logger.debug("Rebuild requested by %s: %s", kind, path)
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self.request_rebuild)

    def request_rebuild(self) -> None:
        """Start a build, or schedule one if a build is already running.

        Must be called on the event loop thread.
        """
        match self.state:
            case BuildState.IDLE:
                self.state = BuildState.BUILDING
                self._cycle = asyncio.get_running_loop().create_task(self._build_cycle())
                self._cycle.add_done_callback(self._cycle_done)
            case BuildState.BUILDING:
                self.state = BuildState.SCHEDULED
            case BuildState.SCHEDULED:
                logger.debug("Rebuild already scheduled")

    async def wait_idle(self) -> None:
        """Wait for the current build cycle, re-raising its failure."""
        if self._cycle is not None:
            await self._cycle

    async def _build_cycle(self) -> None:
        try:
            while True:
                site_spec = self.load_spec(self.config_path)
                await self.builder.build(site_spec)
                self.site_spec = site_spec
                self.build_count += 1
                if self.publisher is not None:
                    await asyncio.to_thread(self.publisher.publish, self.output_dir)
                self._refresh_watch()
                if self.state is not BuildState.SCHEDULED:
                    return
                self.state = BuildState.BUILDING
        finally:
            self.state = BuildState.IDLE

    def _cycle_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._finish(exc)

    def _start_watching(self) -> None:
        self.watcher = self._watcher_factory(self.notify_change)
        self._refresh_watch()

    def _refresh_watch(self) -> None:
        if self.watcher is None or self.site_spec is None:
            return
        try:
            self.watcher.watch(self.site_spec.watch_paths())
        except WatchError as exc:
            self._stop_watcher()
            self._finish(exc)

    def _finish(self, exc: BaseException | None) -> None:
        if self._finished is None:
            # Stop requested before the first build finished.
            if exc is None:
                self._stop_requested = True
            return
        if self._finished.done():
            return
        if exc is None:
            self._finished.set_result(None)
        else:
            self._finished.set_exception(exc)

    def _stop_watcher(self) -> None:
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None

    def _shutdown(self) -> None:
        self._stop_watcher()
        if self.server is not None:
            self.server.stop()
            self.server = None


__all__ = ["BuildOptions", "BuildState", "RebuildCoordinator"]
