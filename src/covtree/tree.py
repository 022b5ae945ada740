"""Abstract coverage tree, its nodes, and the visitors that walk it.

A coverage tree has *summary* nodes (aggregate coverage over a group of other
nodes, usually a directory) and *detail* nodes (a single file). A summary node
does not have to mirror the file system; it is just a collection of nodes.

A visitor receives these callbacks during a traversal:

* ``on_start(root, state)`` - once, before traversal begins
* ``on_summary(node, state)`` - for every summary node, before its children
* ``on_detail(node, state)`` - for every detail node
* ``on_summary_end(node, state)`` - for every summary node, after all of its
  descendants have been visited
* ``on_end(root, state)`` - once, after traversal ends

Report generators only implement the callbacks they need. :class:`Visitor`
wraps such a partial object and turns every missing callback into a no-op.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from covtree.errors import UnimplementedAbstractMethodError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covtree.coverage import CoverageSummary, FileCoverage


class Visitor:
    """Full visitor that forwards to a possibly partial ``delegate``."""

    __slots__ = ("delegate",)

    def __init__(self, delegate: Any) -> None:
        self.delegate = delegate

    def _forward(self, name: str, node: Node, state: Any) -> None:
        callback = getattr(self.delegate, name, None)
        if callable(callback):
            callback(node, state)

    def on_start(self, root: Node, state: Any = None) -> None:
        self._forward("on_start", root, state)

    def on_summary(self, node: Node, state: Any = None) -> None:
        self._forward("on_summary", node, state)

    def on_detail(self, node: Node, state: Any = None) -> None:
        self._forward("on_detail", node, state)

    def on_summary_end(self, node: Node, state: Any = None) -> None:
        self._forward("on_summary_end", node, state)

    def on_end(self, root: Node, state: Any = None) -> None:
        self._forward("on_end", root, state)


class CompositeVisitor(Visitor):
    """Fan a single traversal out to several visitors, in registration order."""

    __slots__ = ("visitors",)

    def __init__(self, visitors: Any) -> None:
        super().__init__(None)
        bare = isinstance(visitors, (Visitor, str)) or not isinstance(visitors, Iterable)
        members = [visitors] if bare else list(visitors)
        self.visitors: tuple[Visitor, ...] = tuple(
            v if isinstance(v, Visitor) else Visitor(v) for v in members
        )

    def on_start(self, root: Node, state: Any = None) -> None:
        for v in self.visitors:
            v.on_start(root, state)

    def on_summary(self, node: Node, state: Any = None) -> None:
        for v in self.visitors:
            v.on_summary(node, state)

    def on_detail(self, node: Node, state: Any = None) -> None:
        for v in self.visitors:
            v.on_detail(node, state)

    def on_summary_end(self, node: Node, state: Any = None) -> None:
        for v in self.visitors:
            v.on_summary_end(node, state)

    def on_end(self, root: Node, state: Any = None) -> None:
        for v in self.visitors:
            v.on_end(root, state)


def _unimplemented(owner: object, name: str) -> UnimplementedAbstractMethodError:
    msg = f"{type(owner).__name__}.{name} must be overridden"
    return UnimplementedAbstractMethodError(msg)


class Node:
    """A node in the coverage tree."""

    __slots__ = ()

    def get_qualified_name(self) -> str:
        """Return the full name of the node from the root."""
        raise _unimplemented(self, "get_qualified_name")

    def get_relative_name(self) -> str:
        """Return the name of the node relative to its parent."""
        raise _unimplemented(self, "get_relative_name")

    def get_parent(self) -> Node | None:
        """Return the parent node, or ``None`` for the root."""
        raise _unimplemented(self, "get_parent")

    def get_children(self) -> Sequence[Node]:
        """Return the node's children; empty for detail nodes."""
        raise _unimplemented(self, "get_children")

    def is_summary(self) -> bool:
        raise _unimplemented(self, "is_summary")

    def get_coverage_summary(self, files_only: bool = False) -> CoverageSummary | None:  # noqa: FBT001, FBT002
        """Return the coverage summary for the node.

        For summary nodes this is the aggregate of every detail node beneath
        it. With ``files_only`` only the direct detail children are merged and
        ``None`` is returned when there are none. For detail nodes it is the
        file coverage expressed in summary form.
        """
        raise _unimplemented(self, "get_coverage_summary")

    def get_file_coverage(self) -> FileCoverage | None:
        """Return the file coverage, or ``None`` for summary nodes."""
        raise _unimplemented(self, "get_file_coverage")

    def is_root(self) -> bool:
        return self.get_parent() is None

    def visit(self, visitor: Visitor, state: Any = None) -> None:
        """Visit every node depth-first from this node down.

        ``on_start`` and ``on_end`` are never called here, even on the root.
        """
        summary = self.is_summary()
        if summary:
            visitor.on_summary(self, state)
        else:
            visitor.on_detail(self, state)

        for child in self.get_children():
            child.visit(visitor, state)

        if summary:
            visitor.on_summary_end(self, state)


class Tree:
    """A coverage tree; summarizers return concrete subclasses."""

    __slots__ = ()

    def get_root(self) -> Node:
        raise _unimplemented(self, "get_root")

    def visit(self, visitor: Any, state: Any = None) -> None:
        """Visit the tree depth-first with a possibly partial ``visitor``."""
        if not isinstance(visitor, Visitor):
            visitor = Visitor(visitor)
        root = self.get_root()
        visitor.on_start(root, state)
        root.visit(visitor, state)
        visitor.on_end(root, state)


__all__ = ["CompositeVisitor", "Node", "Tree", "Visitor"]
