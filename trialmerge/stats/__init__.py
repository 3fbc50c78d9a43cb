from .rank_correlation import spearman_binned

__all__ = ["spearman_binned"]
