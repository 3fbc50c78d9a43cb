"""Shared fixtures for trialmerge tests."""

import numpy as np
import pytest

from trialmerge.datamodules.datasets import TrialDataset


def make_dataset(labels, n_trials=1, n_samples=10, seed=0, trl=True, fsample=100.0):
    """Random dataset; channel c of every trial is offset by 100*c so rows are traceable."""
    rng = np.random.default_rng(seed)
    trials = []
    for _ in range(n_trials):
        x = rng.standard_normal((len(labels), n_samples))
        x += 100.0 * np.arange(len(labels))[:, None]
        trials.append(x)
    time = [np.arange(n_samples) / fsample for _ in range(n_trials)]
    cfg = None
    if trl:
        beg = np.arange(n_trials) * n_samples + 1
        cfg = {"trl": np.column_stack([beg, beg + n_samples - 1, np.zeros(n_trials, dtype=int)])}
    return TrialDataset(labels=list(labels), trials=trials, time=time, fsample=fsample, cfg=cfg)


@pytest.fixture
def dataset_factory():
    return make_dataset
