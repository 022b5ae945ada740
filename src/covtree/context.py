"""Reporting context handed to report generators."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from covtree._meta import logger
from covtree.errors import InvalidCoverageInputError
from covtree.summarizer import DEFAULT_SUMMARIZER, get_summarizer
from covtree.tree import Visitor
from covtree.watermarks import classify, get_default, normalize_watermarks
from covtree.writer import FileWriter

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from contextlib import AbstractContextManager

    from covtree.coverage import FileCoverage
    from covtree.summarizer import ReportTree
    from covtree.types import Metric, Percent, Watermark, WatermarkStatus
    from covtree.writer import ContentWriter


def _read_source(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


class Context:
    """Where reports are written, which watermarks apply, and the data to report on.

    Parameters
    ----------
    dir:
        Output root for file writers. Defaults to the current directory.
    watermarks:
        Per-metric ``[low, high]`` overrides merged over the defaults.
    coverage_map:
        Mapping of path to file coverage that :meth:`get_tree` summarizes.
    default_summarizer:
        Summarizer used by :meth:`get_tree` when none is named.
    source_finder:
        Callable returning the source text for a path.
    """

    def __init__(
        self,
        *,
        dir: Path | str | None = None,  # noqa: A002
        watermarks: Mapping[str, object] | None = None,
        coverage_map: Mapping[str, FileCoverage] | None = None,
        default_summarizer: str | None = None,
        source_finder: Callable[[str], str] | None = None,
    ) -> None:
        self.dir = Path(dir) if dir is not None else Path.cwd()
        self.watermarks: dict[str, Watermark] = normalize_watermarks(watermarks)
        self.coverage_map = coverage_map
        self.default_summarizer = default_summarizer or DEFAULT_SUMMARIZER
        self._source_finder = source_finder or _read_source
        self._writer: FileWriter | None = None
        self._trees: dict[str, ReportTree] = {}
        # Fail early on a bad name rather than during the first report.
        get_summarizer(self.default_summarizer)

    @property
    def writer(self) -> FileWriter:
        if self._writer is None:
            self._writer = FileWriter(self.dir)
        return self._writer

    def open_writer(self, file: Path | str | None = None) -> AbstractContextManager[ContentWriter]:
        """Return a context manager yielding a writer for ``file`` (console if ``None``)."""
        return self.writer.open(file)

    def get_default_watermarks(self) -> dict[str, Watermark]:
        return get_default()

    def classify(self, metric: Metric | str, pct: Percent) -> WatermarkStatus:
        return classify(self.watermarks, metric, pct)

    def get_tree(self, name: str | None = None) -> ReportTree:
        """Return the tree for summarizer ``name``, building it on first use."""
        key = str(name or self.default_summarizer)
        tree = self._trees.get(key)
        if tree is None:
            if self.coverage_map is None:
                msg = "context has no coverage map to summarize"
                raise InvalidCoverageInputError(msg)
            tree = get_summarizer(key)(self.coverage_map)
            self._trees[key] = tree
            logger.debug("cached %s tree", key)
        return tree

    def get_source(self, path: str) -> str:
        return self._source_finder(path)

    def get_visitor(self, partial: Any) -> Visitor:
        return partial if isinstance(partial, Visitor) else Visitor(partial)


def create_context(options: Mapping[str, Any] | None = None) -> Context:
    """Return a reporting context for ``options``.

    Recognised keys are ``dir``, ``watermarks``, ``coverage_map``,
    ``default_summarizer`` and ``source_finder``; anything else is ignored.
    """
    opts = dict(options or {})
    known = {"dir", "watermarks", "coverage_map", "default_summarizer", "source_finder"}
    for key in sorted(set(opts) - known):
        logger.warning("ignoring unknown context option %r", key)
        del opts[key]
    return Context(**opts)


__all__ = ["Context", "create_context"]
