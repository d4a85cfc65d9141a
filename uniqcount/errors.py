"""Exception types raised by uniqcount.

Configuration and input problems are reported before any trial runs.
A sketch reaching its failure outcome is not an error: it shows up as a
failed trial result. InternalConsistencyError signals a harness bug and
is never caught by the command-line tool.
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "InputError",
    "InternalConsistencyError",
    "SketchFailedError",
    "UniqCountError",
]


class UniqCountError(Exception):
    """Base class for uniqcount errors."""


class ConfigurationError(UniqCountError, ValueError):
    """Invalid trial, seed or threshold settings."""


class InputError(UniqCountError):
    """The token source could not be read or decoded."""


class SketchFailedError(UniqCountError):
    """A failed sketch was asked to consume more items or to estimate."""


class InternalConsistencyError(UniqCountError, RuntimeError):
    """The trial harness lost track of a trial result."""
