"""Append separately preprocessed datasets into one.

If all inputs share their channels, the trials are concatenated. Channel
order may differ between inputs; the output always follows the channel order
of the first input. Channels missing from some inputs are pruned, so only the
channels present in every input survive.

If the inputs have different channels but the same trials (count and time
axes), the channels are concatenated within each trial.

Which of the two applies is decided from the label-index matrix by a fixed
rule set (see classify_labels). Inputs that fit both or neither rule are
rejected instead of guessed at.
"""

from __future__ import annotations

import copy
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .channels import build_label_index, canonical_order, subset_and_reorder
from .datasets.base import TrialDataset, check_dataset, find_cfg
from .errors import (
    AmbiguousMergeError,
    InconsistentLabelsError,
    InsufficientInputError,
    TimeAxisMismatchError,
    TrialCountMismatchError,
)

logger = logging.getLogger(__name__)


class MergeMode(str, enum.Enum):
    TRIAL_CONCAT = "trial_concat"
    CHANNEL_CONCAT = "channel_concat"
    UNRESOLVABLE = "unresolvable"


@dataclass(frozen=True)
class AppendConfig:
    """Options for append_data.

    None of them changes the merged result.
      - feedback: log progress at INFO level
    """

    feedback: bool = True


@dataclass(frozen=True)
class LabelClassification:
    catlabel: bool
    cattrial: bool
    needs_reorder: bool
    needs_prune: bool
    n_shared: int
    mode: MergeMode


@dataclass(frozen=True)
class AppendProvenance:
    """What went into a merged dataset and how it was combined."""

    mode: MergeMode
    n_inputs: int
    input_channels: Tuple[int, ...]
    input_trials: Tuple[int, ...]
    previous: Tuple[Optional[dict], ...]
    input_trl: Tuple[Optional[np.ndarray], ...]
    trl: Optional[np.ndarray]
    pruned_labels: Tuple[str, ...]
    reordered: bool

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "n_inputs": self.n_inputs,
            "input_channels": list(self.input_channels),
            "input_trials": list(self.input_trials),
            "pruned_labels": list(self.pruned_labels),
            "reordered": self.reordered,
            "has_trl": self.trl is not None,
        }


# (cattrial, catlabel) -> mode
_MODE_TABLE = {
    (True, True): MergeMode.UNRESOLVABLE,
    (True, False): MergeMode.TRIAL_CONCAT,
    (False, True): MergeMode.CHANNEL_CONCAT,
    (False, False): MergeMode.UNRESOLVABLE,
}


def classify_labels(order: np.ndarray) -> LabelClassification:
    """Derive the merge mode from the label-index matrix [R, N].

    catlabel : every label is present in exactly one input
    cattrial : at least one label is present in every input
    needs_reorder : cattrial, and some input orders its channels differently
                    from the first input (or lacks some of them)
    needs_prune : cattrial, and not every label is present in every input
    """
    order = np.asarray(order)
    n_data = order.shape[1]
    present = (order != 0).sum(axis=1)
    full = present == n_data

    catlabel = bool(np.all(present == 1))
    cattrial = bool(np.any(full))
    needs_reorder = cattrial and not bool(np.all(order == order[:, [0]]))
    needs_prune = cattrial and int(full.sum()) < order.shape[0]

    return LabelClassification(
        catlabel=catlabel,
        cattrial=cattrial,
        needs_reorder=needs_reorder,
        needs_prune=needs_prune,
        n_shared=int(full.sum()),
        mode=_MODE_TABLE[(cattrial, catlabel)],
    )


def resolve_mode(cls: LabelClassification) -> MergeMode:
    if cls.mode is not MergeMode.UNRESOLVABLE:
        return cls.mode
    if cls.cattrial and cls.catlabel:
        raise AmbiguousMergeError(
            "Cannot determine how the data should be concatenated: the channel labels allow both "
            "concatenating trials and concatenating channels. The mode is chosen by a fixed rule "
            "set and is never guessed; make the channel sets either identical or disjoint."
        )
    raise InconsistentLabelsError(
        "Cannot determine how the data should be concatenated: no channel is shared by all inputs, "
        "and some channels occur in more than one input. Trials can only be concatenated over "
        "shared channels, channels only over disjoint label sets."
    )


def prune_to_shared(all_labels: Sequence[str], order: np.ndarray) -> Tuple[List[str], np.ndarray, List[str]]:
    """Restrict the label set to labels present in every input.

    Returns (kept_labels, kept_order, dropped_labels).
    """
    full = np.all(order != 0, axis=1)
    kept = [n for n, f in zip(all_labels, full) if f]
    dropped = [n for n, f in zip(all_labels, full) if not f]
    return kept, order[full], dropped


def reorder_dataset(ds: TrialDataset, positions: Sequence[int]) -> TrialDataset:
    """Permute the channel axis by 1-based positions into ds.labels."""
    idx = np.asarray(positions, dtype=np.int64) - 1
    return TrialDataset(
        labels=[ds.labels[i] for i in idx],
        trials=[subset_and_reorder(np.asarray(x), idx) for x in ds.trials],
        time=list(ds.time),
        fsample=ds.fsample,
        cfg=ds.cfg,
    )


def restore_channel_order(ds: TrialDataset, first_positions: Sequence[int]) -> TrialDataset:
    """Put the channels back in the order they had in the first input."""
    idx = canonical_order(first_positions)
    return TrialDataset(
        labels=[ds.labels[i] for i in idx],
        trials=[subset_and_reorder(x, idx) for x in ds.trials],
        time=ds.time,
        fsample=ds.fsample,
        cfg=ds.cfg,
    )


def concatenate_trials(datasets: Sequence[TrialDataset]) -> TrialDataset:
    trials: List[np.ndarray] = []
    time: List[np.ndarray] = []
    for ds in datasets:
        trials.extend(np.array(x, copy=True) for x in ds.trials)
        time.extend(np.array(t, copy=True) for t in ds.time)
    first = datasets[0]
    return TrialDataset(labels=list(first.labels), trials=trials, time=time, fsample=first.fsample)


def concatenate_channels(datasets: Sequence[TrialDataset]) -> TrialDataset:
    n_trials = [ds.n_trials for ds in datasets]
    if len(set(n_trials)) != 1:
        raise TrialCountMismatchError(f"Not all datasets have the same number of trials: {n_trials}")

    first = datasets[0]
    for i, ds in enumerate(datasets[1:], start=2):
        for j in range(first.n_trials):
            if not np.array_equal(np.asarray(first.time[j]), np.asarray(ds.time[j])):
                raise TimeAxisMismatchError(
                    f"Time axis of trial {j + 1} in input dataset {i} differs from input dataset 1"
                )

    labels: List[str] = []
    for ds in datasets:
        labels.extend(ds.labels)
    trials = [
        np.concatenate([np.asarray(ds.trials[j]) for ds in datasets], axis=0)
        for j in range(first.n_trials)
    ]
    time = [np.array(t, copy=True) for t in first.time]
    return TrialDataset(labels=labels, trials=trials, time=time, fsample=first.fsample)


def _trial_definitions(datasets: Sequence[TrialDataset]) -> List[Optional[np.ndarray]]:
    out: List[Optional[np.ndarray]] = []
    for i, ds in enumerate(datasets, start=1):
        trl = find_cfg(ds.cfg, "trl")
        if trl is None:
            logger.warning(f"Could not locate the trial definition 'trl' in input dataset {i}")
            out.append(None)
        else:
            out.append(np.atleast_2d(np.array(trl, copy=True)))
    return out


def append_data(*datasets: TrialDataset, cfg: Optional[AppendConfig] = None) -> TrialDataset:
    """Combine two or more datasets into one.

    Returns a new TrialDataset; the inputs are left untouched. Raises one of
    the errors in trialmerge.datamodules.errors when the inputs cannot be
    combined. Nothing is returned on failure.
    """
    cfg = cfg or AppendConfig()
    log = logger.info if cfg.feedback else logger.debug

    if len(datasets) < 2:
        raise InsufficientInputError(f"At least two datasets are needed to append, got {len(datasets)}")
    for i, ds in enumerate(datasets, start=1):
        check_dataset(ds, i)
        log(f"input dataset {i}, {ds.n_channels} channels, {ds.n_trials} trials")

    trl = _trial_definitions(datasets)

    all_labels, order = build_label_index([ds.labels for ds in datasets])
    cls = classify_labels(order)
    mode = resolve_mode(cls)

    work: Sequence[TrialDataset] = datasets
    dropped: List[str] = []
    reordered = mode is MergeMode.TRIAL_CONCAT and cls.needs_reorder
    if reordered:
        log("the channel order in the input datasets is not consistent, reordering")
        if cls.needs_prune:
            log("not all input datasets contain the same channels, pruning prior to concatenating over trials")
            all_labels, order, dropped = prune_to_shared(all_labels, order)
            logger.debug(f"pruned channels: {dropped}")
        work = [reorder_dataset(ds, order[:, i]) for i, ds in enumerate(datasets)]

    if mode is MergeMode.TRIAL_CONCAT:
        log("concatenating the trials over all datasets")
        out = concatenate_trials(work)
    else:
        log("concatenating the channels within each trial")
        out = concatenate_channels(work)

    if reordered:
        log("reordering the channels")
        out = restore_channel_order(out, order[:, 0])

    merged_trl = None
    if mode is MergeMode.TRIAL_CONCAT and all(t is not None for t in trl):
        widths = {t.shape[1] for t in trl}
        if len(widths) == 1:
            merged_trl = np.concatenate(trl, axis=0)
        else:
            logger.warning(f"Trial definitions have different column counts {sorted(widths)}, not concatenating")

    previous = tuple(copy.deepcopy(ds.cfg) for ds in datasets)
    out.cfg = {
        "trl": None if merged_trl is None else merged_trl.copy(),
        "previous": copy.deepcopy(list(previous)),
    }
    out.provenance = AppendProvenance(
        mode=mode,
        n_inputs=len(datasets),
        input_channels=tuple(ds.n_channels for ds in datasets),
        input_trials=tuple(ds.n_trials for ds in datasets),
        previous=previous,
        input_trl=tuple(trl),
        trl=merged_trl,
        pruned_labels=tuple(dropped),
        reordered=reordered,
    )

    log(f"output dataset, {out.n_channels} channels, {out.n_trials} trials")
    return out
