from .append import (
    AppendConfig,
    AppendProvenance,
    LabelClassification,
    MergeMode,
    append_data,
    classify_labels,
    resolve_mode,
)
from .channels import build_label_index
from .datasets import TrialDataset

__all__ = [
    "AppendConfig",
    "AppendProvenance",
    "LabelClassification",
    "MergeMode",
    "TrialDataset",
    "append_data",
    "build_label_index",
    "classify_labels",
    "resolve_mode",
]
