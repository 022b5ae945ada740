"""Base class for report generators."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from covtree.context import Context


class ReportBase:
    """A partial visitor that runs itself over a context's tree.

    Subclasses implement whichever ``on_*`` callbacks they need; the context
    is passed as the traversal state.
    """

    def __init__(self, summarizer: str | None = None) -> None:
        self.summarizer = summarizer

    def execute(self, context: Context) -> None:
        context.get_tree(self.summarizer).visit(self, context)


__all__ = ["ReportBase"]
