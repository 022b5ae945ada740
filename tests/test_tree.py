from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest
from conftest import Recorder

from covtree.coverage import CoverageSummary, FileCoverage
from covtree.errors import UnimplementedAbstractMethodError
from covtree.summarizer import create_flat_summary, create_nested_summary
from covtree.tree import CompositeVisitor, Node, Tree, Visitor

NESTED_SEQUENCE = [
    ("start", ""),
    ("summary", ""),
    ("summary", "src"),
    ("detail", "src/app.py"),
    ("summary", "src/util"),
    ("summary", "src/util/io"),
    ("detail", "src/util/io/files.py"),
    ("summary_end", "src/util/io"),
    ("detail", "src/util/strings.py"),
    ("summary_end", "src/util"),
    ("summary_end", "src"),
    ("summary", "tests"),
    ("detail", "tests/test_app.py"),
    ("summary_end", "tests"),
    ("summary_end", ""),
    ("end", ""),
]


def test_tree_visit_is_depth_first_with_summary_end_after_descendants(
    sample_data: dict[str, FileCoverage], recorder: Recorder
) -> None:
    create_nested_summary(sample_data).visit(recorder)
    assert recorder.events == NESTED_SEQUENCE


def test_node_visit_skips_start_and_end(sample_data: dict[str, FileCoverage], recorder: Recorder) -> None:
    root = create_nested_summary(sample_data).get_root()
    root.visit(Visitor(recorder))
    assert recorder.events == NESTED_SEQUENCE[1:-1]


def test_visiting_twice_yields_identical_sequences(sample_data: dict[str, FileCoverage]) -> None:
    tree = create_nested_summary(sample_data)
    first, second = Recorder(), Recorder()
    tree.visit(first)
    tree.visit(second)
    assert first.events == second.events


def test_partial_visitor_missing_callbacks_are_noops(sample_data: dict[str, FileCoverage]) -> None:
    class EndOnly:
        def __init__(self) -> None:
            self.ends: list[str] = []

        def on_summary_end(self, node: Node, state: Any) -> None:
            self.ends.append(node.get_qualified_name())

    tree = create_flat_summary(sample_data)
    visitor = EndOnly()
    tree.visit(visitor)
    # flat trees have a single summary node
    assert visitor.ends == [""]


def test_partial_visitor_ignores_non_callable_attributes(sample_data: dict[str, FileCoverage]) -> None:
    class Odd:
        on_detail = "not a callback"
        on_summary = None

    create_flat_summary(sample_data).visit(Odd())


def test_state_is_threaded_through_every_callback(sample_data: dict[str, FileCoverage]) -> None:
    class Counter:
        def on_start(self, root: Node, state: dict[str, int]) -> None:
            state["start"] += 1

        def on_detail(self, node: Node, state: dict[str, int]) -> None:
            state["detail"] += 1

    state = {"start": 0, "detail": 0}
    create_flat_summary(sample_data).visit(Counter(), state)
    assert state == {"start": 1, "detail": 4}


def test_visitor_callback_errors_propagate(sample_data: dict[str, FileCoverage]) -> None:
    seen: list[str] = []

    class Boom:
        def on_summary(self, node: Node, state: Any) -> None:
            seen.append("summary")

        def on_detail(self, node: Node, state: Any) -> None:
            msg = "render failed"
            raise RuntimeError(msg)

    with pytest.raises(RuntimeError, match="render failed"):
        create_flat_summary(sample_data).visit(Boom())
    assert seen == ["summary"]


def test_tree_visit_does_not_rewrap_visitor(sample_data: dict[str, FileCoverage], recorder: Recorder) -> None:
    wrapped = Visitor(recorder)
    create_flat_summary(sample_data).visit(wrapped)
    assert recorder.events[0] == ("start", "")
    assert recorder.events[-1] == ("end", "")


# --- CompositeVisitor ---


def test_composite_calls_members_in_registration_order(sample_data: dict[str, FileCoverage]) -> None:
    events: list[tuple[str, str]] = []
    composite = CompositeVisitor([Recorder(events, "a:"), Recorder(events, "b:")])
    create_flat_summary({"x.py": sample_data["/repo/src/app.py"]}).visit(composite)
    assert events == [
        ("a:start", ""),
        ("b:start", ""),
        ("a:summary", ""),
        ("b:summary", ""),
        ("a:detail", "x.py"),
        ("b:detail", "x.py"),
        ("a:summary_end", ""),
        ("b:summary_end", ""),
        ("a:end", ""),
        ("b:end", ""),
    ]


def test_composite_passes_identical_node_and_state(sample_data: dict[str, FileCoverage]) -> None:
    calls: list[tuple[str, Node, object]] = []

    def member(name: str) -> object:
        class Member:
            def on_detail(self, node: Node, state: object) -> None:
                calls.append((name, node, state))

        return Member()

    node = create_flat_summary(sample_data).get_root().get_children()[0]
    state = object()
    CompositeVisitor([member("v1"), member("v2")]).on_detail(node, state)

    assert [name for name, _, _ in calls] == ["v1", "v2"]
    assert calls[0][1] is calls[1][1] is node
    assert calls[0][2] is calls[1][2] is state


def test_composite_accepts_a_single_visitor(recorder: Recorder) -> None:
    composite = CompositeVisitor(recorder)
    assert len(composite.visitors) == 1
    assert isinstance(composite.visitors[0], Visitor)
    assert composite.visitors[0].delegate is recorder


def test_composite_accepts_any_iterable_of_visitors(sample_data: dict[str, FileCoverage]) -> None:
    first, second = Recorder(), Recorder()
    tree = create_flat_summary({"x.py": sample_data["/repo/src/app.py"]})
    tree.visit(CompositeVisitor(v for v in (first, second)))
    assert first.events == second.events
    assert first.events[2] == ("detail", "x.py")
    assert len(CompositeVisitor({"a": Recorder(), "b": Recorder()}.values()).visitors) == 2


def test_composite_keeps_existing_visitors() -> None:
    inner = Visitor(object())
    composite = CompositeVisitor((inner, object()))
    assert composite.visitors[0] is inner
    assert isinstance(composite.visitors[1], Visitor)


def test_composite_of_partial_visitors(sample_data: dict[str, FileCoverage]) -> None:
    details: list[str] = []

    class Details:
        def on_detail(self, node: Node, state: Any) -> None:
            details.append(node.get_relative_name())

    create_flat_summary({"a.js": sample_data["/repo/src/app.py"]}).visit(CompositeVisitor([Details(), object()]))
    assert details == ["a.js"]


# --- abstract contract ---


@pytest.mark.parametrize(
    ("method", "args"),
    [
        ("get_qualified_name", ()),
        ("get_relative_name", ()),
        ("get_parent", ()),
        ("get_children", ()),
        ("is_summary", ()),
        ("get_coverage_summary", (True,)),
        ("get_file_coverage", ()),
        ("is_root", ()),
    ],
)
def test_node_abstract_methods_raise(method: str, args: tuple[object, ...]) -> None:
    with pytest.raises(UnimplementedAbstractMethodError, match=f"{method}|get_parent"):
        getattr(Node(), method)(*args)


def test_unimplemented_is_a_not_implemented_error() -> None:
    with pytest.raises(NotImplementedError):
        Tree().get_root()


def test_tree_without_root_fails_before_any_callback(recorder: Recorder) -> None:
    with pytest.raises(UnimplementedAbstractMethodError, match="get_root"):
        Tree().visit(recorder)
    assert recorder.events == []


class _Leaf(Node):
    def __init__(self, name: str, parent: Node) -> None:
        self.name = name
        self.parent = parent

    def get_qualified_name(self) -> str:
        return self.name

    def get_relative_name(self) -> str:
        return self.name

    def get_parent(self) -> Node | None:
        return self.parent

    def get_children(self) -> Sequence[Node]:
        return ()

    def is_summary(self) -> bool:
        return False

    def get_coverage_summary(self, files_only: bool = False) -> CoverageSummary | None:  # noqa: FBT001, FBT002
        return CoverageSummary.empty()

    def get_file_coverage(self) -> FileCoverage | None:
        return FileCoverage(path=self.name)


class _Group(Node):
    def __init__(self, names: list[str]) -> None:
        self.children = [_Leaf(n, self) for n in names]

    def get_qualified_name(self) -> str:
        return "group"

    def get_relative_name(self) -> str:
        return "group"

    def get_parent(self) -> Node | None:
        return None

    def get_children(self) -> Sequence[Node]:
        return self.children

    def is_summary(self) -> bool:
        return True

    def get_coverage_summary(self, files_only: bool = False) -> CoverageSummary | None:  # noqa: FBT001, FBT002
        return CoverageSummary.empty()

    def get_file_coverage(self) -> FileCoverage | None:
        return None


def test_custom_node_implementations_can_be_visited(recorder: Recorder) -> None:
    class GroupTree(Tree):
        def __init__(self, root: Node) -> None:
            self.root = root

        def get_root(self) -> Node:
            return self.root

    root = _Group(["b", "a"])
    GroupTree(root).visit(recorder)

    assert root.is_root()
    assert not root.get_children()[0].is_root()
    assert recorder.events == [
        ("start", "group"),
        ("summary", "group"),
        ("detail", "b"),
        ("detail", "a"),
        ("summary_end", "group"),
        ("end", "group"),
    ]


def test_summary_end_never_fires_for_details(make_coverage: Callable[..., FileCoverage]) -> None:
    ends: list[bool] = []

    class Ends:
        def on_summary_end(self, node: Node, state: Any) -> None:
            ends.append(node.is_summary())

    data = {f"pkg{i}/m.py": make_coverage(f"pkg{i}/m.py") for i in range(3)}
    create_nested_summary(data).visit(Ends())
    assert ends == [True, True, True, True]
