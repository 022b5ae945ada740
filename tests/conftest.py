from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from covtree.coverage import FileCoverage
from covtree.tree import Node


@pytest.fixture
def make_coverage() -> Callable[..., FileCoverage]:
    """Return a factory for line-based file coverage with ``covered`` hit and ``missed`` lines."""

    def build(path: str, covered: int = 1, missed: int = 0, **kwargs: Any) -> FileCoverage:
        lines = {n: 1 for n in range(1, covered + 1)}
        lines.update({n: 0 for n in range(covered + 1, covered + missed + 1)})
        return FileCoverage.from_lines(path, lines, **kwargs)

    return build


@pytest.fixture
def sample_data(make_coverage: Callable[..., FileCoverage]) -> dict[str, FileCoverage]:
    paths = {
        "/repo/src/app.py": (3, 1),
        "/repo/src/util/strings.py": (1, 1),
        "/repo/src/util/io/files.py": (2, 2),
        "/repo/tests/test_app.py": (4, 0),
    }
    return {path: make_coverage(path, covered, missed) for path, (covered, missed) in paths.items()}


class Recorder:
    """Full visitor that records every callback as ``(event, qualified_name)``."""

    def __init__(self, events: list[tuple[str, str]] | None = None, tag: str = "") -> None:
        self.events = [] if events is None else events
        self.tag = tag

    def _record(self, event: str, node: Node) -> None:
        self.events.append((f"{self.tag}{event}", node.get_qualified_name()))

    def on_start(self, root: Node, state: Any) -> None:
        self._record("start", root)

    def on_summary(self, node: Node, state: Any) -> None:
        self._record("summary", node)

    def on_detail(self, node: Node, state: Any) -> None:
        self._record("detail", node)

    def on_summary_end(self, node: Node, state: Any) -> None:
        self._record("summary_end", node)

    def on_end(self, root: Node, state: Any) -> None:
        self._record("end", root)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


def walk(node: Node) -> list[Node]:
    """Return ``node`` and all of its descendants in pre-order."""
    out = [node]
    for child in node.get_children():
        out.extend(walk(child))
    return out


def detail_nodes(node: Node) -> list[Node]:
    return [n for n in walk(node) if not n.is_summary()]
