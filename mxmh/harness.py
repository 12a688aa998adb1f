"""
Nested Cross-Validation Harness

Outer loop (K1 folds): honest held-out estimate of test MSE per algorithm.
Inner loop (K2 folds, carved from each outer-training partition only):
hyperparameter selection, never touching the outer test fold.

Every algorithm is scored on the same outer fold assignment. Each outer fold
produces one immutable FoldResult, and aggregation happens only after all
folds are done, so folds can run in any order (or in parallel via joblib).
"""

import time
import warnings
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.metrics import mean_squared_error

from mxmh import config
from mxmh.folds import assign_folds, inner_seed, iter_folds
from mxmh.models import RegressionAdapter


class FrozenArtifacts(dict):
    """Read-only dict of per-fold side outputs."""

    def _readonly(self, *args, **kwargs):
        raise TypeError("FoldResult artifacts are read-only")

    __setitem__ = __delitem__ = _readonly
    clear = pop = popitem = setdefault = update = _readonly

    def __ior__(self, other):
        self._readonly()

    def __reduce__(self):
        return (type(self), (dict(self),))


@dataclass(frozen=True)
class FoldResult:
    algorithm: str
    fold: int
    n_train: int
    n_test: int
    train_mse: float
    test_mse: float
    hyperparameter: Optional[Any] = None
    model_size: Optional[int] = None
    artifacts: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if not isinstance(self.artifacts, FrozenArtifacts):
            object.__setattr__(self, 'artifacts', FrozenArtifacts(self.artifacts))


def mse(y_true, y_pred) -> float:
    """Mean squared error; NaN (undefined) for an empty partition."""
    y_true = np.asarray(y_true, dtype=float)
    if y_true.size == 0:
        return float('nan')
    return float(mean_squared_error(y_true, np.asarray(y_pred, dtype=float)))


def _rows(X, idx):
    return X.iloc[idx] if isinstance(X, (pd.DataFrame, pd.Series)) else np.asarray(X)[idx]


# ============================================================================
# INNER LOOP: HYPERPARAMETER SELECTION
# ============================================================================

def select_hyperparameter(
    adapter: RegressionAdapter,
    X_train,
    y_train,
    n_inner_folds: int = config.INNER_FOLDS,
    seed: int = config.SEED,
) -> Tuple[Optional[Any], Optional[pd.DataFrame]]:
    """
    Pick the candidate with the lowest mean inner-fold MSE.

    A (candidate, fold) error is undefined when the inner test fold is empty
    or the adapter cannot fit the candidate on that many rows; undefined
    errors are left out of the candidate's mean, and a candidate with no
    defined fold at all is left out of the minimization. Ties go to the
    earliest candidate in grid order.

    Returns (best_candidate, table) or (None, None) for untuned adapters.
    """
    y_train = np.asarray(y_train, dtype=float)
    grid = adapter.candidates(X_train, y_train, n_inner_folds)
    if grid is None:
        return None, None
    if len(grid) == 0:
        raise ValueError(f"{adapter.name}: empty hyperparameter grid")

    fold_ids = assign_folds(len(y_train), n_inner_folds, seed)
    errors = np.full((len(grid), n_inner_folds), np.nan)

    for fold, train_idx, test_idx in iter_folds(fold_ids, n_inner_folds):
        if len(test_idx) == 0 or len(train_idx) == 0:
            continue
        X_tr, X_te = _rows(X_train, train_idx), _rows(X_train, test_idx)
        y_tr, y_te = y_train[train_idx], y_train[test_idx]
        for i, candidate in enumerate(grid):
            if not adapter.accepts(candidate, len(train_idx)):
                continue
            fitted = adapter.fit(X_tr, y_tr, candidate)
            errors[i, fold - 1] = mse(y_te, adapter.predict(fitted, X_te))

    n_defined = (~np.isnan(errors)).sum(axis=1)
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', category=RuntimeWarning)
        mean_err = np.nanmean(errors, axis=1)

    if not (n_defined > 0).any():
        raise ValueError(
            f"{adapter.name}: no hyperparameter candidate has a defined inner-CV error "
            f"({len(y_train)} rows, {n_inner_folds} inner folds)"
        )

    best = int(np.nanargmin(mean_err))
    table = pd.DataFrame({
        'candidate': list(grid),
        'mean_mse': mean_err,
        'n_folds': n_defined,
    })
    return grid[best], table


# ============================================================================
# OUTER LOOP
# ============================================================================

def _evaluate_fold(
    adapter: RegressionAdapter,
    X,
    y: np.ndarray,
    fold_ids: np.ndarray,
    fold: int,
    n_inner_folds: int,
    seed: int,
    collect_artifacts: bool,
) -> FoldResult:
    train_idx = np.flatnonzero(fold_ids != fold)
    test_idx = np.flatnonzero(fold_ids == fold)
    X_train, X_test = _rows(X, train_idx), _rows(X, test_idx)
    y_train, y_test = y[train_idx], y[test_idx]

    best, inner_table = select_hyperparameter(
        adapter, X_train, y_train, n_inner_folds, inner_seed(seed, fold)
    )
    fitted = adapter.fit(X_train, y_train, best)

    artifacts = {}
    if collect_artifacts:
        artifacts = dict(adapter.artifacts(fitted))
        if inner_table is not None:
            artifacts['inner_cv'] = inner_table

    return FoldResult(
        algorithm=adapter.name,
        fold=fold,
        n_train=len(train_idx),
        n_test=len(test_idx),
        train_mse=mse(y_train, adapter.predict(fitted, X_train)),
        test_mse=mse(y_test, adapter.predict(fitted, X_test)),
        hyperparameter=fitted.get('hyperparameter'),
        model_size=fitted.get('model_size'),
        artifacts=artifacts,
    )


def _outer_assignment(outer_folds: Union[int, Sequence[int]], n: int, seed: int) -> Tuple[np.ndarray, int]:
    if isinstance(outer_folds, (int, np.integer)):
        return assign_folds(n, int(outer_folds), seed), int(outer_folds)
    fold_ids = np.asarray(outer_folds, dtype=int)
    if len(fold_ids) != n:
        raise ValueError(f"Fold assignment has {len(fold_ids)} entries for {n} observations")
    return fold_ids, int(fold_ids.max()) if n else 0


def evaluate(
    adapter: RegressionAdapter,
    X,
    y,
    outer_folds: Union[int, Sequence[int]] = config.OUTER_FOLDS,
    n_inner_folds: int = config.INNER_FOLDS,
    seed: int = config.SEED,
    collect_artifacts: bool = False,
    n_jobs: Optional[int] = None,
) -> List[FoldResult]:
    """
    Nested CV for one adapter.

    outer_folds is either K1 (folds are assigned from seed) or an explicit
    fold-id sequence. For each non-empty outer fold: select the
    hyperparameter on the remaining rows, refit on all of them, and record
    training and held-out MSE.
    """
    y = np.asarray(y, dtype=float)
    fold_ids, n_outer = _outer_assignment(outer_folds, len(y), seed)
    folds = [fold for fold, _, test_idx in iter_folds(fold_ids, n_outer) if len(test_idx) > 0]

    if n_jobs is None or n_jobs == 1:
        return [
            _evaluate_fold(adapter, X, y, fold_ids, fold, n_inner_folds, seed, collect_artifacts)
            for fold in folds
        ]
    return list(Parallel(n_jobs=n_jobs)(
        delayed(_evaluate_fold)(adapter, X, y, fold_ids, fold, n_inner_folds, seed, collect_artifacts)
        for fold in folds
    ))


def run_benchmark(
    adapters: Sequence[RegressionAdapter],
    X,
    y,
    n_outer_folds: int = config.OUTER_FOLDS,
    n_inner_folds: int = config.INNER_FOLDS,
    seed: int = config.SEED,
    n_jobs: Optional[int] = None,
    collect_artifacts: bool = False,
    verbose: bool = True,
) -> Dict[str, List[FoldResult]]:
    """Run every adapter over one shared outer fold assignment."""
    y = np.asarray(y, dtype=float)
    fold_ids = assign_folds(len(y), n_outer_folds, seed)

    benchmark = {}
    for adapter in adapters:
        start = time.perf_counter()
        results = evaluate(adapter, X, y, fold_ids, n_inner_folds, seed,
                           collect_artifacts=collect_artifacts, n_jobs=n_jobs)
        benchmark[adapter.name] = results
        if verbose:
            summary = summarize_folds(results)
            print(f"  {adapter.name:28} test MSE={summary['mean_test_mse']:8.3f}  "
                  f"train MSE={summary['mean_train_mse']:8.3f}  "
                  f"({time.perf_counter() - start:.1f}s)")
    return benchmark


# ============================================================================
# AGGREGATION
# ============================================================================

def summarize_folds(results: Sequence[FoldResult]) -> Dict[str, float]:
    """
    Mean train/test MSE and the best single fold.

    min_test_mse shows what a favourable partition achieves; it is not an
    unbiased estimate of generalization error.
    """
    train = np.array([r.train_mse for r in results], dtype=float)
    test = np.array([r.test_mse for r in results], dtype=float)
    if test.size == 0:
        raise ValueError("No fold results to summarize")
    return {
        'mean_train_mse': float(np.mean(train)),
        'mean_test_mse': float(np.mean(test)),
        'min_test_mse': float(np.min(test)),
        'std_test_mse': float(np.std(test, ddof=1)) if test.size > 1 else 0.0,
        'n_folds': int(test.size),
    }


def summarize_benchmark(benchmark: Dict[str, List[FoldResult]]) -> pd.DataFrame:
    """One row per algorithm, best mean test MSE first."""
    rows = []
    for name, results in benchmark.items():
        summary = summarize_folds(results)
        rows.append({
            'Model': name,
            'Train_MSE': summary['mean_train_mse'],
            'Test_MSE': summary['mean_test_mse'],
            'Min_Test_MSE': summary['min_test_mse'],
            'Std_Test_MSE': summary['std_test_mse'],
            'Hyperparameter': [r.hyperparameter for r in results],
            'Model_Size': [r.model_size for r in results],
        })
    return pd.DataFrame(rows).sort_values('Test_MSE').reset_index(drop=True)


def fold_table(benchmark: Dict[str, List[FoldResult]]) -> pd.DataFrame:
    """Long table of every fold result, without the artifacts side-channel."""
    rows = []
    for results in benchmark.values():
        for r in results:
            rows.append({f.name: getattr(r, f.name) for f in fields(r) if f.name != 'artifacts'})
    return pd.DataFrame(rows)
