from __future__ import annotations

import os
from typing import Optional

from .base import TrialDataset
from .fieldtrip_mat import load_fieldtrip_mat
from .npz_cache import load_dataset_dir


def load_dataset(
    path: str,
    *,
    variable: Optional[str] = None,
) -> TrialDataset:
    """Factory for dataset readers, chosen from the path.

    Supported:
      - <dir>/        : cache written by save_dataset (trials.npz, time.npz, meta.json)
      - *.mat         : FieldTrip raw structure (variable selects the MATLAB variable)
      - *-epo.fif     : MNE epochs
    """

    if os.path.isdir(path):
        return load_dataset_dir(path)

    ext = os.path.splitext(path)[1].lower()
    if ext == ".mat":
        return load_fieldtrip_mat(path, variable=variable)

    if ext in (".fif", ".gz") and "epo" in os.path.basename(path):
        from .mne_epochs import load_epochs_fif

        return load_epochs_fif(path)

    if not os.path.exists(path):
        raise FileNotFoundError(f"No such dataset: {path}")
    raise ValueError(f"Unknown dataset kind '{path}'. Valid: cache directory, .mat, -epo.fif")
