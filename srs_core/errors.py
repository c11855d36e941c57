"""
Exception types raised by the scheduling core.

Numeric degeneracy (non-positive stability, clock skew) is clamped, never
raised. These errors signal configuration mistakes and caller misuse.
"""

from __future__ import annotations


class SrsError(Exception):
    """Base class for all scheduling-core errors."""


class ConfigurationError(SrsError, ValueError):
    """Invalid model parameters or environment configuration."""


class InvalidGradeError(SrsError, ValueError):
    """A grade was applied to a card it was not computed for."""


class InvalidStateError(SrsError, RuntimeError):
    """An operation was called in a state that does not allow it."""
