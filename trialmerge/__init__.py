"""Combine separately preprocessed multi-channel, multi-trial recordings."""

from .datamodules import AppendConfig, MergeMode, TrialDataset, append_data
from .datamodules.errors import (
    AmbiguousMergeError,
    AppendError,
    DuplicateLabelError,
    InconsistentLabelsError,
    InsufficientInputError,
    InvalidDatasetError,
    TimeAxisMismatchError,
    TrialCountMismatchError,
)

__version__ = "0.1.0"

__all__ = [
    "AmbiguousMergeError",
    "AppendConfig",
    "AppendError",
    "DuplicateLabelError",
    "InconsistentLabelsError",
    "InsufficientInputError",
    "InvalidDatasetError",
    "MergeMode",
    "TimeAxisMismatchError",
    "TrialCountMismatchError",
    "TrialDataset",
    "append_data",
]
