from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import numpy as np

from .errors import DuplicateLabelError


def name_to_index(names: Sequence[str]) -> Dict[str, int]:
    return {n: i for i, n in enumerate(names)}


def find_duplicates(names: Sequence[str]) -> List[str]:
    """Labels that occur more than once, in order of first occurrence."""
    seen = set()
    dup: List[str] = []
    for n in names:
        if n in seen and n not in dup:
            dup.append(n)
        seen.add(n)
    return dup


def build_label_index(label_lists: Sequence[Sequence[str]]) -> Tuple[List[str], np.ndarray]:
    """Build the global label set and the label-index matrix.

    Returns (all_labels, order) where all_labels is the union of all label
    lists in order of first appearance, and order is an int array [R, N]
    holding the 1-based position of all_labels[r] in label_lists[n], or 0
    when that list lacks the label. Matching is exact.
    """
    for i, names in enumerate(label_lists):
        dup = find_duplicates(names)
        if dup:
            raise DuplicateLabelError(f"Input dataset {i + 1} has duplicate channel labels: {dup}")

    all_labels: List[str] = []
    seen = set()
    for names in label_lists:
        for n in names:
            if n not in seen:
                seen.add(n)
                all_labels.append(n)

    order = np.zeros((len(all_labels), len(label_lists)), dtype=np.int64)
    for j, names in enumerate(label_lists):
        m = name_to_index(names)
        for r, n in enumerate(all_labels):
            if n in m:
                order[r, j] = m[n] + 1
    return all_labels, order


def subset_and_reorder(X, keep_idx: Sequence[int]):
    """Subset channels of X to keep_idx.

    Supports X:
      - [N,C,T]
      - [C,T]
    Fancy indexing always returns a new array.
    """
    keep_idx = np.asarray(keep_idx, dtype=np.int64)
    if X.ndim == 3:
        return X[:, keep_idx, :]
    if X.ndim == 2:
        return X[keep_idx, :]
    raise ValueError(f"Expected 2D/3D, got {X.ndim}D")


def canonical_order(positions: Sequence[int]) -> np.ndarray:
    """Permutation that sorts channels back by their original positions."""
    return np.argsort(np.asarray(positions), kind="stable")
