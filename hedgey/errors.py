"""Exception types raised outside the numeric core."""
from __future__ import annotations


class HedgeyError(Exception):
    """Base class for hedgey errors."""


class SnapshotError(HedgeyError):
    """A position payload is structurally invalid (missing keys, bad numbers)."""
