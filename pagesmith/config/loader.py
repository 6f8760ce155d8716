"""Load the site configuration YAML into a validated SiteSpec."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from pagesmith._constants import DEFAULT_PYGMENTS_STYLE, TEMPLATE_FILE_NAME
from pagesmith.errors import ConfigError

from .helpers import (
    _build_include_paths,
    _flatten_pages,
    _normalize_base_url,
    _normalize_toc_depth,
    _require_string,
    _resolve_path,
)
from .models import SiteSpec

logger = logging.getLogger(__name__)

RESERVED_KEYS = frozenset(
    {"title", "theme", "base_url", "pages", "include", "pygments_style", "toc_depth"}
)


def load_site_spec(path: Path) -> SiteSpec:
    """Load and validate the YAML configuration describing a docs site.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config.yml``). Relative paths inside the file resolve against its
        parent directory.

    Returns
    -------
    SiteSpec
        Validated site definition with a flat, ordered page list and the
        remaining keys passed through as ``site``.

    Raises
    ------
    ConfigError
        If the file is missing or unparsable, or any required key is absent
        or malformed.

    Examples
    --------
    >>> from pathlib import Path
    >>> from pagesmith.config import load_site_spec
    >>> spec = load_site_spec(Path("config.yml"))  # doctest: +SKIP
    >>> spec.pages[0].title  # doctest: +SKIP
    'Home'
    """
    config_path = Path(path).absolute()
    if not config_path.is_file():
        msg = f"Configuration file '{path}' not found."
        raise ConfigError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except (OSError, YAMLError) as exc:
        msg = f"Error parsing the config in {path}"
        raise ConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = f"Top-level YAML structure in {path} must be a mapping."
        raise ConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    root = config_path.parent

    title = _require_string(
        raw,
        "title",
        'In your config, you must define your "title" as a string of at least '
        f"1 character in length (in {path}).",
    )
    theme_path = _resolve_theme(raw, root, config_path)
    pygments_style = raw.get("pygments_style") or DEFAULT_PYGMENTS_STYLE
    if not isinstance(pygments_style, str):
        msg = f"Expected 'pygments_style' to be a string in {path}."
        raise ConfigError(msg)

    spec = SiteSpec(
        title=title,
        theme_path=theme_path,
        pages=_flatten_pages(raw.get("pages"), root, config_path),
        base_url=_normalize_base_url(raw.get("base_url"), config_path),
        site={key: value for key, value in raw.items() if key not in RESERVED_KEYS},
        include_paths=_build_include_paths(raw.get("include"), root, config_path),
        config_path=config_path,
        pygments_style=pygments_style,
        toc_depth=_normalize_toc_depth(raw.get("toc_depth"), config_path),
    )
    logger.debug("Config: %s", spec)
    return spec


def _resolve_theme(raw: typ.Mapping[str, typ.Any], root: Path, location: Path) -> Path:
    """Return the theme directory, ensuring it ships the reserved template."""
    value = _require_string(
        raw,
        "theme",
        'In your config, you must define a "theme" for your docs: the folder '
        f"that contains your theme files ('theme' undefined in {location}).",
    )
    theme_path = _resolve_path(root, value)
    if not (theme_path / TEMPLATE_FILE_NAME).is_file():
        msg = (
            f"Your theme '{value}' doesn't include a {TEMPLATE_FILE_NAME} file, "
            "so it isn't a valid theme."
        )
        raise ConfigError(msg)
    return theme_path


__all__ = ["RESERVED_KEYS", "load_site_spec"]
