from __future__ import annotations

"""Conversion from MNE epochs.

Each epoch becomes one trial; all trials share the epochs' time axis. The
trial definition is rebuilt from the event samples:
  trl[:, 0] = begin sample, trl[:, 1] = end sample, trl[:, 2] = offset
"""

import os
import numpy as np

import mne

from .base import TrialDataset


def _trl_from_events(events: np.ndarray, tmin: float, sfreq: float, n_times: int) -> np.ndarray:
    offset = int(round(tmin * sfreq))
    beg = events[:, 0].astype(np.int64) + offset
    end = beg + n_times - 1
    return np.column_stack([beg, end, np.full_like(beg, offset)])


def from_epochs(epochs: mne.BaseEpochs) -> TrialDataset:
    X = epochs.get_data()  # [N,C,T]
    sfreq = float(epochs.info["sfreq"])
    times = np.asarray(epochs.times, dtype=np.float64)

    trl = _trl_from_events(np.asarray(epochs.events), float(epochs.tmin), sfreq, X.shape[2])
    return TrialDataset(
        labels=list(epochs.ch_names),
        trials=[np.array(x, dtype=np.float64) for x in X],
        time=[times.copy() for _ in range(X.shape[0])],
        fsample=sfreq,
        cfg={"trl": trl},
    )


def load_epochs_fif(path: str) -> TrialDataset:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Missing epochs file: {path}")
    epochs = mne.read_epochs(path, preload=True, verbose="ERROR")
    return from_epochs(epochs)
