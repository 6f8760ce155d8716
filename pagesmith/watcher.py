"""Watch site sources and report relevant changes.

Directories (the theme) are observed recursively; individual files (pages
and the config) are observed through their parent directory and filtered to
the file itself. Events are only reported once the observer is running.
"""

from __future__ import annotations

import logging
import os
import typing as typ
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from pagesmith.errors import WatchError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

EVENT_LABELS: dict[str, str] = {
    "created": "added",
    "modified": "changed",
    "deleted": "deleted",
    "moved": "moved",
}


class SourceWatcher:
    """Report changes to a set of watched paths through ``on_change``."""

    def __init__(
        self,
        on_change: cabc.Callable[[str, str], None],
        *,
        observer_factory: cabc.Callable[[], typ.Any] = Observer,
    ) -> None:
        """Initialize the watcher without starting it.

        Parameters
        ----------
        on_change : Callable[[str, str], None]
            Called from the observer thread with ``(label, path)`` where label
            is one of ``added``, ``changed``, ``deleted`` or ``moved``.
        observer_factory : Callable[[], Any], optional
            Factory for the watchdog observer; tests inject fakes here.
        """
        self.on_change = on_change
        self._observer_factory = observer_factory
        self._observer: typ.Any | None = None
        self._handler = _SourceEventHandler(self)
        self._files: frozenset[str] = frozenset()
        self._dirs: frozenset[str] = frozenset()
        self.ready = False

    def watch(self, paths: cabc.Iterable[Path]) -> None:
        """Start watching ``paths``, replacing any previously watched set.

        Raises
        ------
        WatchError
            If the observer cannot schedule or start watching.
        """
        files: set[str] = set()
        dirs: set[str] = set()
        for path in paths:
            absolute = os.path.abspath(path)
            if Path(absolute).is_dir():
                dirs.add(absolute)
            else:
                files.add(absolute)
        self._files = frozenset(files)
        self._dirs = frozenset(dirs)

        roots = {directory: True for directory in dirs}
        for file in files:
            parent = os.path.dirname(file)
            roots.setdefault(parent, False)

        try:
            if self._observer is None:
                self._observer = self._observer_factory()
            self._observer.unschedule_all()
            for root, recursive in sorted(roots.items()):
                self._observer.schedule(self._handler, root, recursive=recursive)
            if not self.ready:
                self._observer.start()
                self.ready = True
                logger.info("Watching for file changes...")
        except OSError as exc:
            msg = "Error watching files."
            raise WatchError(msg) from exc

    def stop(self) -> None:
        """Stop the observer thread if it is running."""
        if self._observer is not None and self.ready:
            self._observer.stop()
            self._observer.join()
        self.ready = False

    def is_watched(self, path: str) -> bool:
        """Return whether ``path`` is a watched file or lies in a watched directory."""
        absolute = os.path.abspath(path)
        if absolute in self._files:
            return True
        return any(
            absolute == directory or absolute.startswith(directory + os.sep)
            for directory in self._dirs
        )

    def _dispatch(self, event: FileSystemEvent) -> None:
        label = EVENT_LABELS.get(event.event_type)
        if label is None or not self.ready:
            return
        if event.is_directory and event.event_type == "modified":
            return
        candidates = [os.fsdecode(event.src_path)]
        destination = getattr(event, "dest_path", "")
        if destination:
            candidates.append(os.fsdecode(destination))
        for candidate in candidates:
            if self.is_watched(candidate):
                logger.info("%s was %s", candidate, label)
                self.on_change(label, candidate)
                return


class _SourceEventHandler(FileSystemEventHandler):
    """Forward every watchdog event to the owning SourceWatcher."""

    def __init__(self, watcher: SourceWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._watcher._dispatch(event)


__all__ = ["EVENT_LABELS", "SourceWatcher"]
