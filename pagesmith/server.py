"""Serve the output directory over HTTP while developing a site.

The server reads whatever is on disk; it does not coordinate with the output
writer, so a request made mid-rebuild may see a partially written tree.
"""

from __future__ import annotations

import functools
import logging
import threading
import typing as typ
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer

from pagesmith.errors import ServeError

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

LOCAL_HOSTS = frozenset({"", "127.0.0.1", "0.0.0.0"})  # noqa: S104


class _LoggingRequestHandler(SimpleHTTPRequestHandler):
    """Static file handler that logs requests through ``logging``."""

    def log_message(self, format: str, *args: typ.Any) -> None:  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)


class StaticServer:
    """Threaded static file server bound to a directory."""

    def __init__(self, directory: Path, port: int, *, host: str = "127.0.0.1") -> None:
        self.directory = directory
        self.port = port
        self.host = host
        self._httpd: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def address(self) -> tuple[str, int]:
        """Return the bound ``(host, port)``; the port is real once started."""
        if self._httpd is None:
            return self.host, self.port
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    @property
    def url(self) -> str:
        """Return the base URL clients should browse to."""
        host, port = self.address
        display = "localhost" if host in LOCAL_HOSTS else host
        return f"http://{display}:{port}"

    def start(self) -> None:
        """Bind the listener and serve requests on a daemon thread.

        Raises
        ------
        ServeError
            If the port cannot be bound.
        """
        handler = functools.partial(_LoggingRequestHandler, directory=str(self.directory))
        try:
            self._httpd = ThreadingHTTPServer((self.host, self.port), handler)
        except OSError as exc:
            msg = f"Could not start the server on port {self.port}"
            raise ServeError(msg) from exc
        self._thread = threading.Thread(
            target=self._httpd.serve_forever, name="pagesmith-server", daemon=True
        )
        self._thread.start()
        logger.info("Server listening on: %s", self.url)

    def stop(self) -> None:
        """Shut the listener down and wait for the serving thread."""
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join()
        self._httpd = None
        self._thread = None


__all__ = ["StaticServer"]
