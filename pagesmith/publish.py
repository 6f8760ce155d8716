"""Publish a built site to a git hosting branch such as ``gh-pages``.

The output directory is copied into a throwaway work tree, committed as a
single orphan commit, and force-pushed to the configured remote branch. The
project repository's own working tree and history are never touched.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
import typing as typ
from pathlib import Path

from pagesmith.errors import PublishError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH = "gh-pages"
DEFAULT_MESSAGE = "Updates"
NOJEKYLL_FILE_NAME = ".nojekyll"


def run_git(
    args: cabc.Sequence[str], *, cwd: Path, check: bool = True
) -> subprocess.CompletedProcess[str]:
    """Invoke git with ``args`` inside ``cwd`` and capture its output."""
    return subprocess.run(  # noqa: S603
        ["git", *args],  # noqa: S607
        cwd=cwd,
        check=check,
        text=True,
        capture_output=True,
    )


class GitPagesPublisher:
    """Force-push a directory to a branch of the repository's remote."""

    def __init__(
        self,
        *,
        remote: str = DEFAULT_REMOTE,
        branch: str = DEFAULT_BRANCH,
        repo_dir: Path | None = None,
        message: str = DEFAULT_MESSAGE,
    ) -> None:
        self.remote = remote
        self.branch = branch
        self.repo_dir = repo_dir or Path.cwd()
        self.message = message

    def remote_url(self) -> str:
        """Return the push URL of the configured remote.

        Local remotes given as relative paths are resolved against the
        repository directory so they still work from the temporary tree.
        """
        result = run_git(
            ["config", "--get", f"remote.{self.remote}.url"], cwd=self.repo_dir
        )
        url = result.stdout.strip()
        if "://" not in url and ":" not in url.split("/", 1)[0]:
            candidate = self.repo_dir / url
            if candidate.exists():
                return str(candidate.resolve())
        return url

    def publish(self, directory: Path) -> None:
        """Commit the contents of ``directory`` and force-push them.

        Raises
        ------
        PublishError
            If git fails at any step or the directory cannot be copied.
        """
        logger.info("Publishing %s to %s/%s", directory, self.remote, self.branch)
        try:
            url = self.remote_url()
            with tempfile.TemporaryDirectory(prefix="pagesmith-publish-") as tmp:
                work_tree = Path(tmp) / "site"
                shutil.copytree(directory, work_tree)
                (work_tree / NOJEKYLL_FILE_NAME).touch()
                self._commit(work_tree)
                run_git(
                    ["push", "--force", "--quiet", url, f"HEAD:refs/heads/{self.branch}"],
                    cwd=work_tree,
                )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            msg = f"Publishing to {self.remote}/{self.branch} failed: {detail}"
            raise PublishError(msg) from exc
        except OSError as exc:
            msg = f"Publishing to {self.remote}/{self.branch} failed: {exc}"
            raise PublishError(msg) from exc
        logger.info("Published to %s/%s", self.remote, self.branch)

    def _commit(self, work_tree: Path) -> None:
        run_git(["init", "--quiet"], cwd=work_tree)
        run_git(["symbolic-ref", "HEAD", f"refs/heads/{self.branch}"], cwd=work_tree)
        run_git(["add", "--all"], cwd=work_tree)
        run_git(
            [*self._identity(), "commit", "--quiet", "--message", self.message],
            cwd=work_tree,
        )

    def _identity(self) -> list[str]:
        """Return ``-c`` overrides carrying the project repository's identity."""
        overrides: list[str] = []
        for key in ("user.name", "user.email"):
            value = run_git(["config", "--get", key], cwd=self.repo_dir, check=False)
            if value.returncode == 0 and value.stdout.strip():
                overrides += ["-c", f"{key}={value.stdout.strip()}"]
        return overrides


__all__ = [
    "DEFAULT_BRANCH",
    "DEFAULT_REMOTE",
    "GitPagesPublisher",
    "NOJEKYLL_FILE_NAME",
    "run_git",
]
