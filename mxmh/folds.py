"""
Seeded fold assignment for nested cross-validation.

The fold ids 1..K are laid out cyclically over the n observations and then
shuffled with a seeded generator, so every fold gets floor(n/K) or ceil(n/K)
members and the same (n, K, seed) always reproduces the same split. Every
model in the benchmark is scored on identical partitions this way.
"""

from typing import Iterator, Tuple

import numpy as np


def assign_folds(n: int, n_folds: int, seed: int) -> np.ndarray:
    """
    Assign each of n observations to a fold id in 1..n_folds.

    With n_folds > n some folds stay empty; callers that score on a fold must
    treat an empty fold as undefined rather than as zero error.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if n_folds < 1:
        raise ValueError(f"n_folds must be at least 1, got {n_folds}")
    layout = np.resize(np.arange(1, n_folds + 1), n)
    rng = np.random.default_rng(seed)
    return rng.permutation(layout)


def fold_sizes(fold_ids: np.ndarray, n_folds: int) -> np.ndarray:
    """Members per fold, index 0 holding fold 1. Empty folds count as 0."""
    return np.bincount(np.asarray(fold_ids, dtype=int), minlength=n_folds + 1)[1:]


def iter_folds(fold_ids: np.ndarray, n_folds: int) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
    """Yield (fold, train_idx, test_idx) for folds 1..n_folds, empty ones included."""
    fold_ids = np.asarray(fold_ids)
    for fold in range(1, n_folds + 1):
        in_fold = fold_ids == fold
        yield fold, np.flatnonzero(~in_fold), np.flatnonzero(in_fold)


def inner_seed(seed: int, outer_fold: int) -> int:
    """Seed for the inner assignment carved out of one outer-training partition."""
    return seed * 1000 + outer_fold
