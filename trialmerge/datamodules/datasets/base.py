from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional

import numpy as np

from ..errors import InvalidDatasetError

if TYPE_CHECKING:
    from ..append import AppendProvenance


@dataclass
class TrialDataset:
    """Multi-channel, multi-trial recording.

    labels : channel names, their order defines the channel axis
    trials : one float array [C, T_i] per trial
    time   : one 1-D time axis [T_i] per trial

    fsample and cfg are optional. cfg holds the configuration history of the
    recording; a trial definition ("trl", one row per trial with begin sample,
    end sample and offset) may sit in it directly or under "previous".
    """

    labels: List[str]
    trials: List[np.ndarray]
    time: List[np.ndarray]
    fsample: Optional[float] = None
    cfg: Optional[dict] = None
    provenance: Optional["AppendProvenance"] = field(default=None, compare=False)

    @property
    def n_channels(self) -> int:
        return len(self.labels)

    @property
    def n_trials(self) -> int:
        return len(self.trials)

    def copy(self) -> "TrialDataset":
        return TrialDataset(
            labels=list(self.labels),
            trials=[np.array(x, copy=True) for x in self.trials],
            time=[np.array(t, copy=True) for t in self.time],
            fsample=self.fsample,
            cfg=copy.deepcopy(self.cfg),
            provenance=self.provenance,
        )


def check_dataset(ds: TrialDataset, index: int = 1) -> None:
    """Check that ds is a minimally well-formed dataset.

    index is the 1-based input position used in error messages. Duplicate
    labels are left to the label indexer.
    """
    where = f"Input dataset {index}"
    for attr in ("labels", "trials", "time"):
        if getattr(ds, attr, None) is None:
            raise InvalidDatasetError(f"{where} has no '{attr}'")

    bad = [n for n in ds.labels if not isinstance(n, str)]
    if bad:
        raise InvalidDatasetError(f"{where} has non-string channel labels: {bad}")

    if len(ds.trials) != len(ds.time):
        raise InvalidDatasetError(
            f"{where} has {len(ds.trials)} trials but {len(ds.time)} time axes"
        )

    n_chan = len(ds.labels)
    for i, (x, t) in enumerate(zip(ds.trials, ds.time)):
        x = np.asarray(x)
        t = np.asarray(t)
        if x.ndim != 2:
            raise InvalidDatasetError(f"{where}, trial {i + 1}: expected 2D [C,T], got {x.ndim}D")
        if x.shape[0] != n_chan:
            raise InvalidDatasetError(
                f"{where}, trial {i + 1}: {x.shape[0]} channels but {n_chan} labels"
            )
        if t.ndim != 1:
            raise InvalidDatasetError(f"{where}, trial {i + 1}: time axis must be 1D, got {t.ndim}D")
        if t.shape[0] != x.shape[1]:
            raise InvalidDatasetError(
                f"{where}, trial {i + 1}: {x.shape[1]} samples but {t.shape[0]} time points"
            )


def find_cfg(cfg: Any, key: str) -> Any:
    """Look up key in cfg, then recursively in its "previous" history."""
    if cfg is None:
        return None
    if isinstance(cfg, (list, tuple)):
        for c in cfg:
            val = find_cfg(c, key)
            if val is not None:
                return val
        return None
    if not isinstance(cfg, dict):
        return None
    if cfg.get(key) is not None:
        return cfg[key]
    return find_cfg(cfg.get("previous"), key)
