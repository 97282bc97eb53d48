"""Exception types raised by the tableau optimizer."""

from __future__ import annotations


class TableauOptimizerError(Exception):
    """Base class for errors raised before a solve starts."""


class MalformedInputError(TableauOptimizerError, ValueError):
    """Problem data is structurally inconsistent (lengths, missing fields, bad text)."""
