"""Project-level configuration for reporting contexts.

Options are read from ``[tool.covtree]`` in ``pyproject.toml`` or, failing
that, from ``[covtree]`` in ``setup.cfg``::

    [tool.covtree]
    dir = "coverage"
    default_summarizer = "nested"

    [tool.covtree.watermarks]
    statements = [60, 90]

The INI form lists watermarks as ``metric = low, high`` under
``[covtree:watermarks]``. The returned dictionary can be passed straight to
:func:`covtree.create_context`.
"""

from __future__ import annotations

import re
import tomllib
from configparser import ConfigParser
from configparser import Error as ConfigError
from pathlib import Path
from typing import Any

from covtree._meta import logger

_SCALAR_KEYS = ("dir", "default_summarizer")


def _finish(options: dict[str, Any], base: Path) -> dict[str, Any]:
    if "dir" in options:
        options["dir"] = (base / str(options["dir"])).resolve()
    return options


def _options_from_pyproject(pyproject: Path) -> dict[str, Any] | None:
    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to parse %s: %s", pyproject, e)
        return None

    section = data.get("tool", {}).get("covtree")
    if not isinstance(section, dict):
        return None
    options: dict[str, Any] = {key: section[key] for key in _SCALAR_KEYS if key in section}
    watermarks = section.get("watermarks")
    if isinstance(watermarks, dict):
        options["watermarks"] = dict(watermarks)
    return _finish(options, pyproject.parent)


def _parse_pair(value: str) -> list[float] | str:
    tokens = [t for t in re.split(r"[,\s]+", value.strip()) if t]
    try:
        return [float(t) for t in tokens]
    except ValueError:
        # Left as-is so watermark normalisation reports it and falls back.
        return value


def _options_from_config(config_path: Path) -> dict[str, Any] | None:
    config = ConfigParser()
    try:
        config.read(config_path)
    except (OSError, ConfigError, ValueError) as e:
        logger.warning("Failed to parse %s: %s", config_path, e)
        return None

    if not config.has_section("covtree"):
        return None
    options: dict[str, Any] = {
        key: config.get("covtree", key) for key in _SCALAR_KEYS if config.has_option("covtree", key)
    }
    if config.has_section("covtree:watermarks"):
        options["watermarks"] = {
            metric: _parse_pair(value) for metric, value in config.items("covtree:watermarks")
        }
    return _finish(options, config_path.parent)


def load_config(directory: Path | None = None) -> dict[str, Any]:
    """Return context options configured for the project in ``directory``."""
    base = (directory or Path.cwd()).resolve()
    config_files = [
        (base / "pyproject.toml", _options_from_pyproject),
        (base / "setup.cfg", _options_from_config),
    ]

    for path, extractor in config_files:
        if path.exists():
            options = extractor(path)
            if options is not None:
                logger.debug("Using covtree options from %s", path)
                return options

    return {}


__all__ = ["load_config"]
