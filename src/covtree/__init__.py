"""Coverage report trees and the visitors that walk them.

A summarizer turns a mapping of file path to file coverage into a tree of
summary and detail nodes. A report is a partial visitor for that tree, run
with a context that knows where output goes and which watermarks apply.
"""

from __future__ import annotations

from covtree._meta import __version__, logger
from covtree.config import load_config
from covtree.context import Context, create_context
from covtree.coverage import CoverageMap, CoverageSummary, FileCoverage, Totals
from covtree.errors import (
    CovtreeError,
    InvalidCoverageInputError,
    UnimplementedAbstractMethodError,
    UnknownSummarizerError,
    WriterError,
)
from covtree.report import ReportBase
from covtree.summarizer import SUMMARIZERS
from covtree.tree import CompositeVisitor, Node, Tree, Visitor
from covtree.watermarks import get_default

summarizers = SUMMARIZERS
"""``flat``, ``nested`` and ``pkg``; each accepts coverage data and returns a tree."""


def get_default_watermarks() -> dict[str, tuple[float, float]]:
    """Return the watermarks used when none are overridden."""
    return get_default()


__all__ = [
    "CompositeVisitor",
    "Context",
    "CoverageMap",
    "CoverageSummary",
    "CovtreeError",
    "FileCoverage",
    "InvalidCoverageInputError",
    "Node",
    "ReportBase",
    "Totals",
    "Tree",
    "UnimplementedAbstractMethodError",
    "UnknownSummarizerError",
    "Visitor",
    "WriterError",
    "__version__",
    "create_context",
    "get_default_watermarks",
    "load_config",
    "logger",
    "summarizers",
]
