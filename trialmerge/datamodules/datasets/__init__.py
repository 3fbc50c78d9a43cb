"""Dataset container and readers.

Every reader returns a TrialDataset:
  labels: list[str]          channel names
  trials: list[[C, T_i]]     one block per trial
  time:   list[[T_i]]        one time axis per trial
"""

from .asa import read_asa
from .base import TrialDataset, check_dataset, find_cfg
from .npz_cache import load_dataset_dir, save_dataset
from .registry import load_dataset

__all__ = [
    "TrialDataset",
    "check_dataset",
    "find_cfg",
    "load_dataset",
    "load_dataset_dir",
    "read_asa",
    "save_dataset",
]
