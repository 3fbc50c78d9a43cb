from __future__ import annotations

"""On-disk cache for TrialDataset.

Layout:
  root/{trials.npz,time.npz,meta.json[,trl.npy]}

Trials can differ in length, so each one is stored under its own key
(trial_0000, trial_0001, ...).
"""

from typing import Any, Dict

import os
import json
import numpy as np

from .base import TrialDataset, find_cfg


def _cache_paths(root: str) -> Dict[str, str]:
    return {
        "dir": root,
        "trials": os.path.join(root, "trials.npz"),
        "time": os.path.join(root, "time.npz"),
        "meta": os.path.join(root, "meta.json"),
        "trl": os.path.join(root, "trl.npy"),
    }


def _key(i: int) -> str:
    return f"trial_{i:04d}"


def save_dataset(root: str, ds: TrialDataset, extra_meta: Dict[str, Any] | None = None) -> Dict[str, str]:
    paths = _cache_paths(root)
    os.makedirs(paths["dir"], exist_ok=True)
    np.savez(paths["trials"], **{_key(i): np.asarray(x) for i, x in enumerate(ds.trials)})
    np.savez(paths["time"], **{_key(i): np.asarray(t) for i, t in enumerate(ds.time)})

    # an explicit trl=None (e.g. after concatenating channels) is not looked up further
    cfg = ds.cfg or {}
    trl = cfg["trl"] if "trl" in cfg else find_cfg(cfg, "trl")
    if trl is not None:
        np.save(paths["trl"], np.asarray(trl))
    elif os.path.exists(paths["trl"]):
        os.remove(paths["trl"])

    meta = {
        "labels": list(ds.labels),
        "n_trials": ds.n_trials,
        "fsample": ds.fsample,
    }
    if extra_meta:
        meta.update(extra_meta)
    with open(paths["meta"], "w") as f:
        json.dump(meta, f, indent=2)
    return paths


def load_dataset_dir(root: str) -> TrialDataset:
    paths = _cache_paths(root)
    missing = [paths[k] for k in ("trials", "time", "meta") if not os.path.exists(paths[k])]
    if missing:
        raise FileNotFoundError(f"Incomplete dataset cache in {root}, missing: {missing}")

    with open(paths["meta"], "r") as f:
        meta = json.load(f)
    n = int(meta["n_trials"])
    with np.load(paths["trials"]) as z:
        trials = [z[_key(i)] for i in range(n)]
    with np.load(paths["time"]) as z:
        time = [z[_key(i)] for i in range(n)]

    cfg = None
    if os.path.exists(paths["trl"]):
        cfg = {"trl": np.load(paths["trl"])}
    fsample = meta.get("fsample")
    return TrialDataset(
        labels=[str(c) for c in meta["labels"]],
        trials=trials,
        time=time,
        fsample=float(fsample) if fsample is not None else None,
        cfg=cfg,
    )
