"""Tree construction strategies.

Every summarizer takes a mapping of file path to file coverage and returns a
:class:`ReportTree`. They differ only in how summary nodes are introduced
between the root and the files:

* ``flat`` - a single root with every file directly under it.
* ``nested`` - a directory hierarchy where each directory's summary reflects
  all files and subdirectories beneath it.
* ``pkg`` - one summary node per directory, all of them direct children of
  the root, each reflecting only the files directly inside it. This is the
  default.

Names are made relative to the deepest directory shared by every file.
"""

from __future__ import annotations

import difflib
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from more_itertools import map_reduce

from covtree._meta import logger
from covtree.coverage import CoverageSummary, merge_summaries
from covtree.errors import InvalidCoverageInputError, UnknownSummarizerError
from covtree.path import NodePath, common_prefix
from covtree.tree import Node, Tree
from covtree.types import SummarizerName

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from covtree.coverage import FileCoverage

DEFAULT_SUMMARIZER = SummarizerName.PKG


class ReportNode(Node):
    """Concrete node produced by the summarizers."""

    __slots__ = ("_children", "_file_coverage", "_parent", "_path", "_summaries")

    def __init__(self, path: NodePath, file_coverage: FileCoverage | None = None) -> None:
        self._path = path
        self._file_coverage = file_coverage
        self._parent: ReportNode | None = None
        self._children: list[ReportNode] = []
        self._summaries: dict[bool, CoverageSummary | None] = {}

    def __repr__(self) -> str:
        kind = "summary" if self.is_summary() else "detail"
        return f"ReportNode({kind} {str(self._path)!r})"

    @property
    def path(self) -> NodePath:
        return self._path

    def _add_child(self, child: ReportNode) -> None:
        child._parent = self  # noqa: SLF001
        self._children.append(child)

    def get_qualified_name(self) -> str:
        return str(self._path)

    def get_relative_name(self) -> str:
        parent = self._parent
        if parent is not None and parent.path.ancestor_of(self._path):
            return str(self._path.relative_to(parent.path))
        return str(self._path)

    def get_parent(self) -> ReportNode | None:
        return self._parent

    def get_children(self) -> Sequence[ReportNode]:
        return tuple(self._children)

    def is_summary(self) -> bool:
        return self._file_coverage is None

    def get_file_coverage(self) -> FileCoverage | None:
        return self._file_coverage

    def get_coverage_summary(self, files_only: bool = False) -> CoverageSummary | None:  # noqa: FBT001, FBT002
        if files_only in self._summaries:
            return self._summaries[files_only]

        summary: CoverageSummary | None
        if self._file_coverage is not None:
            summary = self._file_coverage.to_summary()
        else:
            children = [c for c in self._children if not (files_only and c.is_summary())]
            if files_only and not children:
                summary = None
            else:
                summary = merge_summaries(
                    c.get_coverage_summary(files_only) or CoverageSummary.empty() for c in children
                )
        self._summaries[files_only] = summary
        return summary


class ReportTree(Tree):
    """Tree rooted at a :class:`ReportNode`."""

    __slots__ = ("_root",)

    def __init__(self, root: ReportNode) -> None:
        self._root = root

    def get_root(self) -> ReportNode:
        return self._root


# -----------------------------------------------------------------------------
# Shared preparation
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _Entry:
    path: NodePath
    record: Any


def _to_initial_list(coverage_data: Mapping[str, Any] | None) -> tuple[list[_Entry], NodePath]:
    """Return one entry per file with paths relative to their common parent."""
    if coverage_data is None:
        msg = "coverage data is required"
        raise InvalidCoverageInputError(msg)
    if not isinstance(coverage_data, Mapping):
        msg = f"coverage data must be a mapping of path to file coverage, got {type(coverage_data).__name__}"
        raise InvalidCoverageInputError(msg)

    entries: list[_Entry] = []
    for key, record in coverage_data.items():
        if not isinstance(key, str):
            msg = f"coverage key must be a string path, got {key!r}"
            raise InvalidCoverageInputError(msg)
        path = NodePath.parse(key)
        if not path:
            msg = f"cannot derive any path segment from coverage key {key!r}"
            raise InvalidCoverageInputError(msg)
        if not callable(getattr(record, "to_summary", None)):
            msg = f"coverage for {key!r} does not provide to_summary()"
            raise InvalidCoverageInputError(msg)
        entries.append(_Entry(path, record))

    common = common_prefix(e.path.parent() for e in entries)
    if common:
        size = len(common)
        entries = [_Entry(e.path.strip_prefix(size), e.record) for e in entries]
    return entries, common


def _to_dir_parents(entries: list[_Entry]) -> list[ReportNode]:
    """Group files under one summary node per containing directory."""
    groups = map_reduce(entries, keyfunc=lambda e: e.path.parent())
    parents: list[ReportNode] = []
    for directory, members in groups.items():
        parent = ReportNode(directory)
        for entry in members:
            parent._add_child(ReportNode(entry.path, entry.record))  # noqa: SLF001
        parents.append(parent)
    return parents


def _finalize(node: ReportNode, prefix: str | None = None) -> None:
    if prefix and not node.is_root():
        node._path = node.path.with_prefix(prefix)  # noqa: SLF001
    node._children.sort(key=lambda c: str(c.path))  # noqa: SLF001
    for child in node._children:  # noqa: SLF001
        _finalize(child, prefix)


# -----------------------------------------------------------------------------
# Strategies
# -----------------------------------------------------------------------------


def create_flat_summary(coverage_data: Mapping[str, Any] | None) -> ReportTree:
    """Return a tree with one root and every file directly under it."""
    entries, _ = _to_initial_list(coverage_data)
    root = ReportNode(NodePath())
    for entry in entries:
        root._add_child(ReportNode(entry.path, entry.record))  # noqa: SLF001
    _finalize(root)
    logger.debug("built flat tree for %d files", len(entries))
    return ReportTree(root)


def _ensure_dir(dirs: dict[NodePath, ReportNode], path: NodePath) -> ReportNode:
    node = dirs.get(path)
    if node is None:
        node = ReportNode(path)
        dirs[path] = node
        _ensure_dir(dirs, path.parent())._add_child(node)  # noqa: SLF001
    return node


def _fold_single_dirs(node: ReportNode) -> None:
    # A directory whose only child is another directory has the same aggregate.
    folded: list[ReportNode] = []
    for child in node._children:  # noqa: SLF001
        while child.is_summary() and len(child._children) == 1 and child._children[0].is_summary():  # noqa: SLF001
            child = child._children[0]  # noqa: SLF001, PLW2901
        child._parent = node  # noqa: SLF001
        _fold_single_dirs(child)
        folded.append(child)
    node._children = folded  # noqa: SLF001


def create_nested_summary(coverage_data: Mapping[str, Any] | None) -> ReportTree:
    """Return a directory tree whose summaries include every nested file."""
    entries, _ = _to_initial_list(coverage_data)
    root = ReportNode(NodePath())
    dirs: dict[NodePath, ReportNode] = {root.path: root}
    for entry in entries:
        _ensure_dir(dirs, entry.path.parent())._add_child(ReportNode(entry.path, entry.record))  # noqa: SLF001
    _fold_single_dirs(root)
    _finalize(root)
    logger.debug("built nested tree for %d files in %d directories", len(entries), len(dirs))
    return ReportTree(root)


def create_package_summary(coverage_data: Mapping[str, Any] | None) -> ReportTree:
    """Return a tree with one non-nested summary node per directory."""
    entries, common = _to_initial_list(coverage_data)
    packages = _to_dir_parents(entries)
    prefix: str | None = None
    if len(packages) == 1:
        root = packages[0]
    else:
        root = ReportNode(NodePath())
        # Files sitting in the common directory itself need a package name.
        if any(not pkg.path for pkg in packages):
            prefix = common.name if common else "root"
        for pkg in packages:
            root._add_child(pkg)  # noqa: SLF001
    _finalize(root, prefix)
    logger.debug("built pkg tree for %d files in %d packages", len(entries), len(packages))
    return ReportTree(root)


SUMMARIZERS: Mapping[str, Callable[[Mapping[str, Any] | None], ReportTree]] = MappingProxyType({
    SummarizerName.FLAT.value: create_flat_summary,
    SummarizerName.NESTED.value: create_nested_summary,
    SummarizerName.PKG.value: create_package_summary,
})


def get_summarizer(name: str | None = None) -> Callable[[Mapping[str, Any] | None], ReportTree]:
    """Resolve ``name`` (default ``pkg``) to a summarizer function."""
    key = str(name or DEFAULT_SUMMARIZER)
    try:
        return SUMMARIZERS[key]
    except KeyError:
        choices = [s.value for s in SummarizerName]
        suggestion = difflib.get_close_matches(str(key), choices, n=1)
        hint = f". Did you mean {suggestion[0]!r}?" if suggestion else ""
        msg = f"{key!r} is not one of {', '.join(choices)}{hint}"
        raise UnknownSummarizerError(msg) from None


__all__ = [
    "DEFAULT_SUMMARIZER",
    "SUMMARIZERS",
    "ReportNode",
    "ReportTree",
    "create_flat_summary",
    "create_nested_summary",
    "create_package_summary",
    "get_summarizer",
]
