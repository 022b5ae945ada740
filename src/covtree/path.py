"""Slash-agnostic path values used to lay out report trees."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

_SEPARATORS = re.compile(r"[\\/]+")


@dataclass(frozen=True, slots=True)
class NodePath:
    """An immutable sequence of path segments.

    Segments are split on both ``/`` and ``\\`` and empty segments are
    dropped, so ``"/src/a.py"``, ``"src//a.py"`` and ``"src\\a.py"`` all
    decompose to ``("src", "a.py")``.
    """

    elements: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> NodePath:
        return cls(tuple(seg for seg in _SEPARATORS.split(text) if seg))

    def __str__(self) -> str:
        return "/".join(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[str]:
        return iter(self.elements)

    @property
    def name(self) -> str:
        return self.elements[-1] if self.elements else ""

    def parent(self) -> NodePath:
        if not self.elements:
            msg = "cannot take the parent of an empty path"
            raise ValueError(msg)
        return NodePath(self.elements[:-1])

    def contains(self, other: NodePath) -> bool:
        """Return ``True`` if ``self`` is ``other`` or one of its ancestors."""
        return other.elements[: len(self.elements)] == self.elements

    def ancestor_of(self, other: NodePath) -> bool:
        return len(other) != len(self) and self.contains(other)

    def relative_to(self, ancestor: NodePath) -> NodePath:
        if not ancestor.contains(self):
            msg = f"{self} is not inside {ancestor}"
            raise ValueError(msg)
        return NodePath(self.elements[len(ancestor) :])

    def strip_prefix(self, length: int) -> NodePath:
        return NodePath(self.elements[length:])

    def with_prefix(self, segment: str) -> NodePath:
        return NodePath((segment, *self.elements))


def common_prefix(paths: Iterable[NodePath]) -> NodePath:
    """Return the longest path that contains every path in ``paths``."""
    common: tuple[str, ...] | None = None
    for path in paths:
        if common is None:
            common = path.elements
            continue
        size = 0
        for mine, theirs in zip(common, path.elements, strict=False):
            if mine != theirs:
                break
            size += 1
        common = common[:size]
        if not common:
            break
    return NodePath(common or ())


__all__ = ["NodePath", "common_prefix"]
