from __future__ import annotations

import logging
from importlib.metadata import version

__version__ = version("covtree")

logger = logging.getLogger("covtree")

__all__ = ["__version__", "logger"]
