"""Tests for :class:`pagesmith.watcher.SourceWatcher` with a fake observer."""

from __future__ import annotations

import typing as typ

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from pagesmith.errors import WatchError
from pagesmith.watcher import SourceWatcher

if typ.TYPE_CHECKING:
    from pathlib import Path


class FakeObserver:
    def __init__(self) -> None:
        self.scheduled: list[tuple[str, bool]] = []
        self.handler: typ.Any = None
        self.starts = 0
        self.stopped = False
        self.joined = False

    def schedule(self, handler: typ.Any, path: str, *, recursive: bool = False) -> None:
        self.handler = handler
        self.scheduled.append((path, recursive))

    def unschedule_all(self) -> None:
        self.scheduled.clear()

    def start(self) -> None:
        self.starts += 1

    def stop(self) -> None:
        self.stopped = True

    def join(self) -> None:
        self.joined = True


class Sources(typ.NamedTuple):
    page: Path
    other: Path
    theme: Path
    config: Path


@pytest.fixture
def sources(tmp_path: Path) -> Sources:
    docs = tmp_path / "docs"
    docs.mkdir()
    page = docs / "index.md"
    page.write_text("# Home\n", encoding="utf-8")
    other = docs / "draft.md"
    other.write_text("# Draft\n", encoding="utf-8")
    theme = tmp_path / "theme"
    theme.mkdir()
    config = tmp_path / "config.yml"
    config.write_text("title: Docs\n", encoding="utf-8")
    return Sources(page=page, other=other, theme=theme, config=config)


@pytest.fixture
def observer() -> FakeObserver:
    return FakeObserver()


@pytest.fixture
def changes() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def watcher(
    sources: Sources, observer: FakeObserver, changes: list[tuple[str, str]]
) -> SourceWatcher:
    watcher = SourceWatcher(
        lambda kind, path: changes.append((kind, path)),
        observer_factory=lambda: observer,
    )
    watcher.watch([sources.page, sources.theme, sources.config])
    return watcher


def test_directories_are_recursive_and_files_use_their_parent(
    watcher: SourceWatcher, sources: Sources, observer: FakeObserver
) -> None:
    assert sorted(observer.scheduled) == sorted(
        [
            (str(sources.page.parent), False),
            (str(sources.theme), True),
            (str(sources.config.parent), False),
        ]
    )
    assert observer.starts == 1


def test_rewatching_replaces_the_schedule_without_restarting(
    watcher: SourceWatcher, sources: Sources, observer: FakeObserver
) -> None:
    watcher.watch([sources.theme])

    assert observer.scheduled == [(str(sources.theme), True)]
    assert observer.starts == 1
    assert not watcher.is_watched(str(sources.page))


def test_changes_to_watched_files_are_reported(
    watcher: SourceWatcher,
    sources: Sources,
    observer: FakeObserver,
    changes: list[tuple[str, str]],
) -> None:
    observer.handler.dispatch(FileModifiedEvent(str(sources.page)))
    observer.handler.dispatch(FileDeletedEvent(str(sources.config)))

    assert changes == [("changed", str(sources.page)), ("deleted", str(sources.config))]


def test_files_inside_watched_directories_are_reported(
    watcher: SourceWatcher,
    sources: Sources,
    observer: FakeObserver,
    changes: list[tuple[str, str]],
) -> None:
    new_file = sources.theme / "css" / "site.css"
    observer.handler.dispatch(FileCreatedEvent(str(new_file)))

    assert changes == [("added", str(new_file))]


def test_unwatched_siblings_and_directory_noise_are_ignored(
    watcher: SourceWatcher,
    sources: Sources,
    observer: FakeObserver,
    changes: list[tuple[str, str]],
) -> None:
    observer.handler.dispatch(FileModifiedEvent(str(sources.other)))
    observer.handler.dispatch(DirModifiedEvent(str(sources.theme)))

    assert changes == []


def test_moves_onto_a_watched_file_are_reported(
    watcher: SourceWatcher,
    sources: Sources,
    observer: FakeObserver,
    changes: list[tuple[str, str]],
) -> None:
    temp = sources.page.with_suffix(".md.swp")
    observer.handler.dispatch(FileMovedEvent(str(temp), str(sources.page)))

    assert changes == [("moved", str(sources.page))]


def test_events_after_stop_are_suppressed(
    watcher: SourceWatcher,
    sources: Sources,
    observer: FakeObserver,
    changes: list[tuple[str, str]],
) -> None:
    handler = observer.handler
    watcher.stop()
    handler.dispatch(FileModifiedEvent(str(sources.page)))

    assert observer.stopped
    assert observer.joined
    assert changes == []


def test_scheduling_failure_raises_watch_error(sources: Sources) -> None:
    class BrokenObserver(FakeObserver):
        def schedule(self, handler: typ.Any, path: str, *, recursive: bool = False) -> None:
            raise FileNotFoundError(path)

    watcher = SourceWatcher(lambda kind, path: None, observer_factory=BrokenObserver)

    with pytest.raises(WatchError) as excinfo:
        watcher.watch([sources.theme])
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
    assert not watcher.ready
