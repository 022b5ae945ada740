"""Centralised exception hierarchy for covtree."""

from __future__ import annotations


class CovtreeError(Exception):
    """Base class for all custom covtree exceptions."""


class UnimplementedAbstractMethodError(CovtreeError, NotImplementedError):
    """A concrete node, tree or writer did not override a required method."""


class InvalidCoverageInputError(CovtreeError, ValueError):
    """Coverage data handed to a summarizer is absent or malformed."""


class UnknownSummarizerError(CovtreeError, KeyError):
    """A summarizer name does not match any registered strategy."""


class WriterError(CovtreeError):
    """A scoped writer was asked to write outside its output directory."""


__all__ = [
    "CovtreeError",
    "InvalidCoverageInputError",
    "UnimplementedAbstractMethodError",
    "UnknownSummarizerError",
    "WriterError",
]
