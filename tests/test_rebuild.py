"""Tests for the rebuild coordinator's state machine and collaborators.

The coordinator is driven with fake builders, watchers, servers, and
publishers so the tests control exactly when a build finishes.
"""

from __future__ import annotations

import asyncio
import typing as typ
from pathlib import Path

import pytest

from pagesmith.config import SiteSpec
from pagesmith.errors import ContentReadError, WatchError
from pagesmith.rebuild import BuildOptions, BuildState, RebuildCoordinator

CONFIG_PATH = Path("config.yml")
OUTPUT_DIR = Path("_site")
TIMEOUT = 5


@pytest.fixture
def site_spec() -> SiteSpec:
    return SiteSpec(title="Docs", theme_path=Path("theme"), pages=())


class GatedBuilder:
    """Builder whose first build blocks until ``release`` is set."""

    def __init__(self) -> None:
        self.calls = 0
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def build(self, site_spec: SiteSpec) -> None:
        self.calls += 1
        self.started.set()
        await self.release.wait()


class CountingBuilder:
    def __init__(self) -> None:
        self.calls = 0

    async def build(self, site_spec: SiteSpec) -> None:
        self.calls += 1


class FakeWatcher:
    def __init__(self, on_change: typ.Callable[[str, str], None]) -> None:
        self.on_change = on_change
        self.watched: list[list[Path]] = []
        self.stopped = False

    def watch(self, paths: typ.Iterable[Path]) -> None:
        self.watched.append(list(paths))

    def stop(self) -> None:
        self.stopped = True


class FailingWatcher(FakeWatcher):
    def watch(self, paths: typ.Iterable[Path]) -> None:
        msg = "Error watching files."
        raise WatchError(msg)


class FakeServer:
    def __init__(self, directory: Path, port: int) -> None:
        self.directory = directory
        self.port = port
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True


class FakePublisher:
    def __init__(self) -> None:
        self.published: list[Path] = []

    def publish(self, directory: Path) -> None:
        self.published.append(directory)


async def _wait_for(predicate: typ.Callable[[], bool]) -> None:
    while not predicate():
        await asyncio.sleep(0.01)


def test_notifications_while_building_coalesce_into_one_rebuild(
    site_spec: SiteSpec,
) -> None:
    loads: list[Path] = []

    def load(path: Path) -> SiteSpec:
        loads.append(path)
        return site_spec

    async def scenario() -> tuple[RebuildCoordinator, GatedBuilder]:
        builder = GatedBuilder()
        coordinator = RebuildCoordinator(
            CONFIG_PATH, OUTPUT_DIR, load_spec=load, builder=builder
        )
        coordinator.request_rebuild()
        await builder.started.wait()
        assert coordinator.state is BuildState.BUILDING

        coordinator.request_rebuild()
        assert coordinator.state is BuildState.SCHEDULED
        coordinator.request_rebuild()
        assert coordinator.state is BuildState.SCHEDULED

        builder.release.set()
        await coordinator.wait_idle()
        return coordinator, builder

    coordinator, builder = asyncio.run(asyncio.wait_for(scenario(), TIMEOUT))

    assert builder.calls == 2
    assert coordinator.build_count == 2
    assert loads == [CONFIG_PATH, CONFIG_PATH]
    assert coordinator.state is BuildState.IDLE


def test_notification_while_idle_starts_a_build(site_spec: SiteSpec) -> None:
    async def scenario() -> CountingBuilder:
        builder = CountingBuilder()
        coordinator = RebuildCoordinator(
            CONFIG_PATH, OUTPUT_DIR, load_spec=lambda _: site_spec, builder=builder
        )
        coordinator.request_rebuild()
        await coordinator.wait_idle()
        coordinator.request_rebuild()
        await coordinator.wait_idle()
        return builder

    builder = asyncio.run(asyncio.wait_for(scenario(), TIMEOUT))
    assert builder.calls == 2


def test_build_errors_end_the_run(site_spec: SiteSpec) -> None:
    class BrokenBuilder:
        async def build(self, site_spec: SiteSpec) -> None:
            msg = "Error trying to read the file docs/index.md"
            raise ContentReadError(msg)

    coordinator = RebuildCoordinator(
        CONFIG_PATH,
        OUTPUT_DIR,
        BuildOptions(watch=True),
        load_spec=lambda _: site_spec,
        builder=BrokenBuilder(),
        watcher_factory=FakeWatcher,
    )

    with pytest.raises(ContentReadError):
        asyncio.run(coordinator.run())
    assert coordinator.state is BuildState.IDLE
    assert coordinator.watcher is None


def test_publish_runs_after_the_build(site_spec: SiteSpec) -> None:
    builder = CountingBuilder()
    publisher = FakePublisher()
    coordinator = RebuildCoordinator(
        CONFIG_PATH,
        OUTPUT_DIR,
        BuildOptions(publish=True),
        load_spec=lambda _: site_spec,
        builder=builder,
        publisher=publisher,
    )

    asyncio.run(coordinator.run())

    assert builder.calls == 1
    assert publisher.published == [OUTPUT_DIR]


def test_watch_rebuilds_on_change_and_refreshes_watch_set(site_spec: SiteSpec) -> None:
    async def scenario() -> tuple[RebuildCoordinator, FakeWatcher]:
        coordinator = RebuildCoordinator(
            CONFIG_PATH,
            OUTPUT_DIR,
            BuildOptions(watch=True),
            load_spec=lambda _: site_spec,
            builder=CountingBuilder(),
            watcher_factory=FakeWatcher,
        )
        run = asyncio.create_task(coordinator.run())
        await _wait_for(lambda: coordinator.watcher is not None)
        watcher = typ.cast("FakeWatcher", coordinator.watcher)

        await asyncio.to_thread(watcher.on_change, "changed", "docs/index.md")
        await _wait_for(lambda: coordinator.build_count == 2)
        await coordinator.wait_idle()

        coordinator.stop()
        await run
        return coordinator, watcher

    coordinator, watcher = asyncio.run(asyncio.wait_for(scenario(), TIMEOUT))

    assert watcher.watched == [site_spec.watch_paths(), site_spec.watch_paths()]
    assert watcher.stopped
    assert coordinator.watcher is None


def test_watcher_failure_ends_the_run_with_watch_error(site_spec: SiteSpec) -> None:
    builder = CountingBuilder()
    coordinator = RebuildCoordinator(
        CONFIG_PATH,
        OUTPUT_DIR,
        BuildOptions(watch=True),
        load_spec=lambda _: site_spec,
        builder=builder,
        watcher_factory=FailingWatcher,
    )

    with pytest.raises(WatchError):
        asyncio.run(asyncio.wait_for(coordinator.run(), TIMEOUT))
    assert builder.calls == 1


def test_server_starts_once_after_first_build(site_spec: SiteSpec) -> None:
    servers: list[FakeServer] = []

    def server_factory(directory: Path, port: int) -> FakeServer:
        server = FakeServer(directory, port)
        servers.append(server)
        return server

    async def scenario() -> RebuildCoordinator:
        coordinator = RebuildCoordinator(
            CONFIG_PATH,
            OUTPUT_DIR,
            BuildOptions(serve=True, port=4000),
            load_spec=lambda _: site_spec,
            builder=CountingBuilder(),
            server_factory=server_factory,
        )
        run = asyncio.create_task(coordinator.run())
        await _wait_for(lambda: coordinator.server is not None)
        coordinator.stop()
        await run
        return coordinator

    coordinator = asyncio.run(asyncio.wait_for(scenario(), TIMEOUT))

    assert len(servers) == 1
    (server,) = servers
    assert (server.directory, server.port) == (OUTPUT_DIR, 4000)
    assert server.started
    assert server.stopped
    assert coordinator.build_count == 1


def test_single_build_does_not_start_watcher_or_server(site_spec: SiteSpec) -> None:
    def unexpected(*args: object) -> None:
        pytest.fail("no watcher or server should be created")

    coordinator = RebuildCoordinator(
        CONFIG_PATH,
        OUTPUT_DIR,
        load_spec=lambda _: site_spec,
        builder=CountingBuilder(),
        watcher_factory=unexpected,
        server_factory=unexpected,
    )

    asyncio.run(coordinator.run())
    assert coordinator.build_count == 1


def test_stop_during_first_build_ends_the_run(site_spec: SiteSpec) -> None:
    def unexpected(*args: object) -> None:
        pytest.fail("no watcher or server should be created after stop()")

    async def scenario() -> tuple[RebuildCoordinator, GatedBuilder]:
        builder = GatedBuilder()
        coordinator = RebuildCoordinator(
            CONFIG_PATH,
            OUTPUT_DIR,
            BuildOptions(watch=True, serve=True),
            load_spec=lambda _: site_spec,
            builder=builder,
            watcher_factory=unexpected,
            server_factory=unexpected,
        )
        run = asyncio.create_task(coordinator.run())
        await builder.started.wait()
        coordinator.stop()
        await asyncio.sleep(0)
        builder.release.set()
        await run
        return coordinator, builder

    coordinator, builder = asyncio.run(asyncio.wait_for(scenario(), TIMEOUT))

    assert builder.calls == 1
    assert coordinator.build_count == 1
    assert coordinator.state is BuildState.IDLE
