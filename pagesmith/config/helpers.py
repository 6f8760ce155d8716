"""Validation helpers shared by the pagesmith configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from pagesmith._constants import DEFAULT_BASE_URL, DEFAULT_TOC_DEPTH
from pagesmith.errors import ConfigError

from .models import PageSpec

MAX_HEADING_LEVEL = 6


def _require_string(raw: typ.Mapping[str, typ.Any], key: str, message: str) -> str:
    """Return ``raw[key]`` when it is a non-empty string, else raise ConfigError."""
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(message)
    return value


def _resolve_path(root: Path, value: str) -> Path:
    """Resolve ``value`` against ``root`` unless it is already absolute."""
    candidate = Path(value).expanduser()
    if candidate.is_absolute():
        return candidate
    return root / candidate


def _normalize_base_url(value: object, location: Path) -> str:
    """Return the configured base URL with a single trailing slash removed."""
    if value is None:
        return DEFAULT_BASE_URL
    if not isinstance(value, str):
        msg = f"You have incorrectly defined 'base_url' in {location}; expected a string."
        raise ConfigError(msg)
    if value.endswith("/"):
        return value[:-1]
    return value


def _normalize_toc_depth(value: object, location: Path) -> int:
    """Return a heading depth between 1 and 6, defaulting to two levels."""
    if value is None:
        return DEFAULT_TOC_DEPTH
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"Expected 'toc_depth' to be an integer in {location}."
        raise ConfigError(msg)
    if not 1 <= value <= MAX_HEADING_LEVEL:
        msg = f"'toc_depth' must be between 1 and {MAX_HEADING_LEVEL} in {location}."
        raise ConfigError(msg)
    return value


def _split_entry(entry: object, location: Path, *, parent: str | None) -> tuple[str, object]:
    """Return the ``(title, value)`` pair of a single-key page mapping."""
    where = f"subpage of '{parent}'" if parent else "page"
    if not isinstance(entry, dict) or len(entry) != 1:
        msg = (
            f"Each {where} in {location} must be a mapping with exactly one key: "
            "the page title."
        )
        raise ConfigError(msg)
    title, value = next(iter(entry.items()))
    # YAML reads keys such as ``2024`` or ``2.0`` as numbers.
    if isinstance(title, int | float) and not isinstance(title, bool):
        title = str(title)
    if not isinstance(title, str) or not title.strip():
        msg = f"The name of each {where} has to be a string in {location}."
        raise ConfigError(msg)
    return title, value


def _check_markdown(root: Path, title: str, value: str) -> Path:
    """Resolve a markdown path and ensure it can be read."""
    path = _resolve_path(root, value)
    try:
        with path.open("rb"):
            pass
    except OSError as exc:
        msg = f'Couldn\'t read the markdown file at "{value}" for the page titled "{title}".'
        raise ConfigError(msg) from exc
    return path


def _claim_title(seen: set[str], title: str, message: str) -> None:
    """Record ``title`` case-insensitively, raising when it is a duplicate."""
    key = title.lower()
    if key in seen:
        raise ConfigError(message)
    seen.add(key)


def _flatten_pages(raw_pages: object, root: Path, location: Path) -> tuple[PageSpec, ...]:
    """Flatten the two-level ``pages`` declaration into ordered PageSpecs.

    Parameters
    ----------
    raw_pages : object
        Value of the ``pages`` key as loaded from YAML.
    root : Path
        Directory that relative markdown paths resolve against.
    location : Path
        Config file path, used in error messages.

    Returns
    -------
    tuple[PageSpec, ...]
        Leaf pages in declaration order; grouped pages take the group title
        as their section.

    Raises
    ------
    ConfigError
        If the declaration is missing, malformed, nested too deeply, has
        duplicate titles, or references unreadable markdown.
    """
    if not raw_pages:
        msg = (
            "You must specify a list of pages that defines your docs content and "
            f"structure ('pages' not specified in {location})."
        )
        raise ConfigError(msg)
    if not isinstance(raw_pages, list):
        msg = f"Pages defined in {location} have to be a list."
        raise ConfigError(msg)

    pages: list[PageSpec] = []
    top_titles: set[str] = set()
    for entry in raw_pages:
        title, value = _split_entry(entry, location, parent=None)
        _claim_title(
            top_titles,
            title,
            f'It looks like you have two top-level pages both called "{title}". '
            "Page names at each level must be unique.",
        )
        match value:
            case str():
                markdown = _check_markdown(root, title, value)
                pages.append(PageSpec(title=title, section="", markdown_path=markdown))
            case list():
                pages.extend(_flatten_group(title, value, root, location))
            case _:
                msg = (
                    f"You have defined the page '{title}' incorrectly in {location}. "
                    "Each page should be the path of a markdown file or a list of sub-pages."
                )
                raise ConfigError(msg)
    return tuple(pages)


def _flatten_group(
    section: str, children: list[object], root: Path, location: Path
) -> list[PageSpec]:
    """Return the sub-pages of one group, tagged with the group's title."""
    sub_titles: set[str] = set()
    pages: list[PageSpec] = []
    for child in children:
        title, value = _split_entry(child, location, parent=section)
        if not isinstance(value, str):
            msg = (
                f"You have defined the subpage '{title}' incorrectly in {location}. "
                "Each subpage should be the path of a markdown file."
            )
            raise ConfigError(msg)
        _claim_title(
            sub_titles,
            title,
            f'It looks like you have two subpages of "{section}" both called "{title}". '
            "Page names at each level must be unique.",
        )
        markdown = _check_markdown(root, title, value)
        pages.append(PageSpec(title=title, section=section, markdown_path=markdown))
    return pages


def _build_include_paths(raw: object, root: Path, location: Path) -> tuple[Path, ...]:
    """Validate ``include`` entries: existing paths inside the config directory."""
    if raw is None:
        return ()
    if not isinstance(raw, list):
        msg = f"Expected 'include' to be a list of paths in {location}."
        raise ConfigError(msg)
    paths: list[Path] = []
    for value in raw:
        if not isinstance(value, str) or not value.strip():
            msg = f"Each 'include' entry in {location} must be a non-empty string."
            raise ConfigError(msg)
        path = _resolve_path(root, value)
        if not path.exists():
            msg = f"Included path '{value}' does not exist."
            raise ConfigError(msg)
        try:
            path.resolve().relative_to(root.resolve())
        except ValueError:
            msg = f"Included path '{value}' must live inside {root}."
            raise ConfigError(msg) from None
        paths.append(path)
    return tuple(paths)


__all__ = [
    "_build_include_paths",
    "_flatten_pages",
    "_normalize_base_url",
    "_normalize_toc_depth",
    "_require_string",
    "_resolve_path",
]
