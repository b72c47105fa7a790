"""Exception hierarchy for penguinflow."""

from __future__ import annotations


class PenguinflowError(Exception):
    """Base class for all penguinflow errors."""


class SchemaError(PenguinflowError, ValueError):
    """Raised when a table is missing expected columns."""


class ModelFitError(PenguinflowError, ValueError):
    """Raised when a model cannot be fitted (degenerate groups, non-finite data)."""


class TransformError(PenguinflowError, ValueError):
    """Raised when the Box-Cox transformation is undefined for the input."""
