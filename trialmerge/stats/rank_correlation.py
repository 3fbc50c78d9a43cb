from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.stats import rankdata


def _condition_row(design: np.ndarray, ivar: Optional[int]) -> np.ndarray:
    design = np.asarray(design)
    if design.ndim <= 1 or design.size == max(design.shape):
        if ivar not in (None, 0):
            raise ValueError(f"ivar={ivar} given but design is a single vector")
        return design.reshape(-1)
    if ivar is None:
        raise ValueError("cannot determine the labeling of the trials")
    return design[ivar, :]


def spearman_binned(dat: np.ndarray, design: np.ndarray, ivar: Optional[int] = None) -> np.ndarray:
    """Spearman rank correlation between two variables, per condition.

    dat    : [signals, repetitions, 2] or [signals, repetitions, freqs, 2];
             the last dimension holds the two variables that are correlated
    design : condition label per repetition, or a design matrix [n_var, repetitions]
             together with ivar selecting the row that holds the conditions

    Returns rcc [signals, freqs, conditions] (freqs is 1 for 3D input), with the
    conditions in ascending order. Ranks are ordinal, so ties are broken by
    position and the tie-free formula 1 - 6*sum(d^2) / (n*(n^2-1)) applies.
    """
    dat = np.asarray(dat, dtype=np.float64)
    if dat.ndim == 3:
        dat = dat[:, :, None, :]
    elif dat.ndim != 4:
        raise ValueError(f"Expected 3D/4D input, got {dat.ndim}D")
    if dat.shape[-1] != 2:
        raise ValueError("the last dimension of the input should be 2")

    cond = _condition_row(design, ivar)
    if cond.shape[0] != dat.shape[1]:
        raise ValueError(f"design labels {cond.shape[0]} repetitions, data has {dat.shape[1]}")

    nsgn, _, nfrq, _ = dat.shape
    levels = np.unique(cond)
    rcc = np.zeros((nsgn, nfrq, len(levels)), dtype=np.float64)
    for m, c in enumerate(levels):
        sel = cond == c
        n = int(sel.sum())
        denom = n * (n ** 2 - 1) / 6.0
        for k in range(nsgn):
            for j in range(nfrq):
                x = dat[k, sel, j, :]
                r0 = rankdata(x[:, 0], method="ordinal")
                r1 = rankdata(x[:, 1], method="ordinal")
                # n == 1 gives 0/0, left as nan
                with np.errstate(divide="ignore", invalid="ignore"):
                    rcc[k, j, m] = 1.0 - np.sum((r1 - r0) ** 2) / denom
    return rcc
