"""Errors raised while appending datasets.

Every condition has its own class so that calling tooling can tell
"you gave incompatible datasets" apart from "you gave too few datasets".
All of them are ValueErrors.
"""

from __future__ import annotations


class AppendError(ValueError):
    """Base class for all append failures."""


class InsufficientInputError(AppendError):
    pass


class InvalidDatasetError(AppendError):
    pass


class DuplicateLabelError(AppendError):
    pass


class AmbiguousMergeError(AppendError):
    pass


class InconsistentLabelsError(AppendError):
    pass


class TrialCountMismatchError(AppendError):
    pass


class TimeAxisMismatchError(AppendError):
    pass
