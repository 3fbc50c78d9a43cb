from __future__ import annotations

"""Loader for FieldTrip raw data structures saved in MATLAB .mat files.

A raw structure has the fields
  label   : cell array of channel names
  trial   : cell array of [C, T_i] matrices
  time    : cell array of [T_i] time axes
  fsample : sampling rate (optional)
  cfg     : configuration history (optional, may hold the trial definition 'trl')
"""

from typing import List, Optional

import os
import numpy as np

from scipy.io import loadmat

from .base import TrialDataset

REQUIRED_FIELDS = ("label", "trial", "time")


def _mat_to_dict(mat_obj):
    """Convert matlab structs loaded by scipy into nested dicts (best-effort)."""
    if isinstance(mat_obj, np.ndarray) and mat_obj.dtype == object and mat_obj.size == 1:
        mat_obj = mat_obj.item()
    if isinstance(mat_obj, np.void):
        out = {}
        for name in mat_obj.dtype.names:
            out[name] = _mat_to_dict(mat_obj[name])
        return out
    if isinstance(mat_obj, np.ndarray) and mat_obj.dtype.names is not None:
        if mat_obj.size == 1:
            return _mat_to_dict(mat_obj.reshape(-1)[0])
        return [_mat_to_dict(x) for x in mat_obj.reshape(-1)]
    if isinstance(mat_obj, np.ndarray) and mat_obj.dtype == object:
        # cell array, e.g. cfg.previous holding the history of several inputs
        return [_mat_to_dict(x) for x in mat_obj.reshape(-1)]
    return mat_obj


def _cells(obj) -> list:
    """Flatten a MATLAB cell array (list or object ndarray) into a list."""
    if isinstance(obj, list):
        return obj
    if isinstance(obj, np.ndarray) and obj.dtype == object:
        return list(obj.reshape(-1))
    return [obj]


def _as_str(obj) -> str:
    arr = np.asarray(obj)
    if arr.dtype.kind in ("U", "S") and arr.ndim > 0:
        return str(arr.reshape(-1)[0]).strip()
    return str(obj).strip()


def _looks_like_raw(d) -> bool:
    return isinstance(d, dict) and all(f in d for f in REQUIRED_FIELDS)


def _to_dataset(d: dict) -> TrialDataset:
    labels: List[str] = [_as_str(c) for c in _cells(d["label"])]
    trials = [np.atleast_2d(np.asarray(x, dtype=np.float64)) for x in _cells(d["trial"])]
    time = [np.asarray(t, dtype=np.float64).reshape(-1) for t in _cells(d["time"])]

    fsample = None
    if d.get("fsample") is not None:
        fsample = float(np.asarray(d["fsample"]).reshape(-1)[0])

    cfg = d.get("cfg")
    if not isinstance(cfg, dict):
        cfg = None
    return TrialDataset(labels=labels, trials=trials, time=time, fsample=fsample, cfg=cfg)


def load_fieldtrip_mat(path: str, variable: Optional[str] = None) -> TrialDataset:
    """Read a FieldTrip raw structure from path.

    If variable is None the first top-level variable with label/trial/time
    fields is used.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Missing FieldTrip file: {path}")
    mat = loadmat(path, simplify_cells=False)
    keys = [k for k in mat.keys() if not k.startswith("__")]

    if variable is not None:
        if variable not in keys:
            raise RuntimeError(f"Variable '{variable}' not found in {path}. Available: {keys}")
        keys = [variable]

    for k in keys:
        d = _mat_to_dict(mat[k])
        if _looks_like_raw(d):
            return _to_dataset(d)

    raise RuntimeError(
        "Could not locate a FieldTrip raw structure (label/trial/time) in .mat file. "
        f"Path={path}. Detected top-level keys={keys}."
    )
