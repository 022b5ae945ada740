"""Per-file coverage records and the summaries aggregated from them.

A :class:`FileCoverage` holds the raw hit counts for one source file. It can be
merged with another record for the same file and reduced to a
:class:`CoverageSummary`, which is what every node of a report tree exposes.
Summaries are immutable: merging always returns a new value, which is how
summary nodes build their aggregate from their descendants.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import reduce
from itertools import zip_longest
from typing import TYPE_CHECKING

from covtree.types import UNKNOWN_PCT, Metric

if TYPE_CHECKING:
    from collections.abc import Callable

    from covtree.types import Percent


def percent(covered: int, total: int) -> Percent:
    """Return ``covered / total`` as a percentage rounded half-up to two decimals."""
    if total <= 0:
        return UNKNOWN_PCT
    return math.floor((100_000 * covered / total + 5) / 10) / 100


# -----------------------------------------------------------------------------
# Summaries
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Totals:
    """Counts for a single metric."""

    total: int = 0
    covered: int = 0
    skipped: int = 0

    def __post_init__(self) -> None:
        """Validate that counts are non-negative and consistent."""
        if self.total < 0 or self.covered < 0 or self.skipped < 0:
            msg = "Totals counts must be >= 0"
            raise ValueError(msg)
        if self.covered + self.skipped > self.total:
            msg = f"covered + skipped exceeds total: {self.covered} + {self.skipped} > {self.total}"
            raise ValueError(msg)

    @property
    def pct(self) -> Percent:
        return percent(self.covered, self.total)

    def __add__(self, other: Totals) -> Totals:
        return Totals(
            total=self.total + other.total,
            covered=self.covered + other.covered,
            skipped=self.skipped + other.skipped,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "covered": self.covered,
            "skipped": self.skipped,
            "pct": self.pct,
        }


@dataclass(frozen=True, slots=True)
class CoverageSummary:
    """Aggregate statement, branch, function and line counts."""

    statements: Totals = field(default_factory=Totals)
    branches: Totals = field(default_factory=Totals)
    functions: Totals = field(default_factory=Totals)
    lines: Totals = field(default_factory=Totals)

    @classmethod
    def empty(cls) -> CoverageSummary:
        return cls()

    def merge(self, other: CoverageSummary) -> CoverageSummary:
        """Return a new summary combining the counts of ``self`` and ``other``."""
        return CoverageSummary(
            statements=self.statements + other.statements,
            branches=self.branches + other.branches,
            functions=self.functions + other.functions,
            lines=self.lines + other.lines,
        )

    def metric(self, name: Metric | str) -> Totals:
        """Return the :class:`Totals` for metric ``name``."""
        return getattr(self, Metric(name).value)

    def is_empty(self) -> bool:
        return self.lines.total == 0

    def to_dict(self) -> dict[str, dict[str, object]]:
        return {m.value: self.metric(m).to_dict() for m in Metric}


def merge_summaries(summaries: Iterable[CoverageSummary]) -> CoverageSummary:
    """Fold ``summaries`` into one, starting from an empty summary."""
    return reduce(CoverageSummary.merge, summaries, CoverageSummary.empty())


# -----------------------------------------------------------------------------
# File records
# -----------------------------------------------------------------------------


def _add_hits(first: Mapping[str, int], second: Mapping[str, int]) -> dict[str, int]:
    merged = dict(first)
    for key, hits in second.items():
        merged[key] = merged.get(key, 0) + hits
    return merged


def _add_arms(
    first: Mapping[str, tuple[int, ...]], second: Mapping[str, tuple[int, ...]]
) -> dict[str, tuple[int, ...]]:
    merged = dict(first)
    for key, arms in second.items():
        existing = merged.get(key, ())
        merged[key] = tuple(a + b for a, b in zip_longest(existing, arms, fillvalue=0))
    return merged


def _simple_totals(hits: Mapping[str, int], skipped: frozenset[str]) -> Totals:
    return Totals(
        total=len(hits),
        covered=sum(1 for key, n in hits.items() if n > 0 and key not in skipped),
        skipped=sum(1 for key in hits if key in skipped),
    )


def _branch_totals(arms: Mapping[str, tuple[int, ...]], skipped: frozenset[str]) -> Totals:
    total = covered = skip = 0
    for key, counts in arms.items():
        total += len(counts)
        if key in skipped:
            skip += len(counts)
            continue
        covered += sum(1 for n in counts if n > 0)
    return Totals(total=total, covered=covered, skipped=skip)


@dataclass(frozen=True, slots=True)
class FileCoverage:
    """Raw hit counts for one source file.

    Fields
    ------
    statements:
        Statement id to hit count.
    statement_lines:
        Statement id to the line it starts on; used to derive line coverage.
    functions:
        Function id to hit count.
    branches:
        Branch id to the hit count of each of its arms.
    skipped_*:
        Ids excluded from measurement (e.g. ignore pragmas).
    """

    path: str
    statements: Mapping[str, int] = field(default_factory=dict)
    statement_lines: Mapping[str, int] = field(default_factory=dict)
    functions: Mapping[str, int] = field(default_factory=dict)
    branches: Mapping[str, tuple[int, ...]] = field(default_factory=dict)
    skipped_statements: frozenset[str] = frozenset()
    skipped_functions: frozenset[str] = frozenset()
    skipped_branches: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        """Copy the hit maps and validate that hit counts are non-negative."""
        object.__setattr__(self, "statements", dict(self.statements))
        object.__setattr__(self, "statement_lines", dict(self.statement_lines))
        object.__setattr__(self, "functions", dict(self.functions))
        object.__setattr__(self, "branches", {k: tuple(v) for k, v in self.branches.items()})
        for name in ("skipped_statements", "skipped_functions", "skipped_branches"):
            object.__setattr__(self, name, frozenset(getattr(self, name)))

        hits = [*self.statements.values(), *self.functions.values()]
        hits.extend(n for arms in self.branches.values() for n in arms)
        if any(n < 0 for n in hits):
            msg = f"hit counts must be >= 0 in {self.path!r}"
            raise ValueError(msg)

    @classmethod
    def from_lines(
        cls,
        path: str,
        lines: Mapping[int, int],
        *,
        functions: Mapping[str, int] | None = None,
        branches: Mapping[str, tuple[int, ...]] | None = None,
    ) -> FileCoverage:
        """Build a record where every line holds exactly one statement."""
        return cls(
            path=path,
            statements={str(line): hits for line, hits in lines.items()},
            statement_lines={str(line): line for line in lines},
            functions=functions or {},
            branches=branches or {},
        )

    def line_hits(self) -> dict[int, int]:
        """Return line number to hits, taking the busiest statement on each line."""
        lines: dict[int, int] = {}
        for sid, hits in self.statements.items():
            line = self.statement_lines.get(sid)
            if line is None:
                continue
            previous = lines.get(line)
            if previous is None or previous < hits:
                lines[line] = hits
        return dict(sorted(lines.items()))

    def uncovered_lines(self) -> list[int]:
        return [line for line, hits in self.line_hits().items() if hits == 0]

    def to_summary(self) -> CoverageSummary:
        line_hits = self.line_hits()
        return CoverageSummary(
            statements=_simple_totals(self.statements, self.skipped_statements),
            branches=_branch_totals(self.branches, self.skipped_branches),
            functions=_simple_totals(self.functions, self.skipped_functions),
            lines=Totals(
                total=len(line_hits),
                covered=sum(1 for n in line_hits.values() if n > 0),
            ),
        )

    def merge(self, other: FileCoverage) -> FileCoverage:
        """Return a new record adding the hits of ``other`` to this one."""
        if other.path != self.path:
            msg = f"cannot merge coverage for {other.path!r} into {self.path!r}"
            raise ValueError(msg)
        return FileCoverage(
            path=self.path,
            statements=_add_hits(self.statements, other.statements),
            statement_lines={**other.statement_lines, **self.statement_lines},
            functions=_add_hits(self.functions, other.functions),
            branches=_add_arms(self.branches, other.branches),
            skipped_statements=self.skipped_statements | other.skipped_statements,
            skipped_functions=self.skipped_functions | other.skipped_functions,
            skipped_branches=self.skipped_branches | other.skipped_branches,
        )


class CoverageMap(Mapping[str, FileCoverage]):
    """File path to :class:`FileCoverage`, merging records for repeated paths."""

    def __init__(self, files: Mapping[str, FileCoverage] | Iterable[FileCoverage] | None = None) -> None:
        self._files: dict[str, FileCoverage] = {}
        if files is None:
            return
        records = files.values() if isinstance(files, Mapping) else files
        for record in records:
            self.add_file_coverage(record)

    def __getitem__(self, path: str) -> FileCoverage:
        return self._files[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"CoverageMap({list(self._files)!r})"

    def add_file_coverage(self, record: FileCoverage) -> None:
        existing = self._files.get(record.path)
        self._files[record.path] = record if existing is None else existing.merge(record)

    def merge(self, other: Mapping[str, FileCoverage]) -> None:
        """Merge every record of ``other`` into this map."""
        for record in other.values():
            self.add_file_coverage(record)

    def files(self) -> list[str]:
        return list(self._files)

    def file_coverage_for(self, path: str) -> FileCoverage:
        try:
            return self._files[path]
        except KeyError:
            msg = f"no file coverage for {path!r}"
            raise KeyError(msg) from None

    def filter(self, predicate: Callable[[str], bool]) -> CoverageMap:
        """Return a new map holding only the paths accepted by ``predicate``."""
        return CoverageMap(record for path, record in self._files.items() if predicate(path))

    def get_coverage_summary(self) -> CoverageSummary:
        return merge_summaries(record.to_summary() for record in self._files.values())


__all__ = [
    "CoverageMap",
    "CoverageSummary",
    "FileCoverage",
    "Totals",
    "merge_summaries",
    "percent",
]
