import dataclasses
import pickle

import numpy as np
import pandas as pd
import pytest

from conftest import make_linear_data
from mxmh.folds import assign_folds
from mxmh.harness import (
    FoldResult,
    FrozenArtifacts,
    evaluate,
    fold_table,
    run_benchmark,
    select_hyperparameter,
    summarize_benchmark,
    summarize_folds,
)
from mxmh.models import KNNAdapter, OLSAdapter, RegressionAdapter


class _Constant:
    def __init__(self, value):
        self.value = value

    def predict(self, X):
        return np.full(len(X), self.value, dtype=float)


class ConstantAdapter(RegressionAdapter):
    """Predicts the candidate value itself; optionally infeasible above n_train."""
    name = 'constant'

    def __init__(self, grid, limit_by_rows=False):
        super().__init__()
        self.grid = list(grid)
        self.limit_by_rows = limit_by_rows

    def candidates(self, X, y, n_inner_folds):
        return self.grid

    def accepts(self, candidate, n_train):
        return not self.limit_by_rows or candidate <= n_train

    def _fit_estimator(self, X, y, hyperparameter):
        value = float(np.mean(y)) if hyperparameter is None else float(hyperparameter)
        return {'model': _Constant(value)}


def _flat(n, value=5.0):
    return pd.DataFrame({'x': np.arange(n, dtype=float)}), pd.Series(np.full(n, value))


# ============================================================================
# INNER LOOP
# ============================================================================

def test_empty_inner_folds_do_not_count_as_zero_error():
    X, y = _flat(4)
    best, table = select_hyperparameter(ConstantAdapter([0.0, 3.0, 5.0]), X, y, n_inner_folds=10, seed=1)
    assert best == 5.0
    assert list(table['n_folds']) == [4, 4, 4]
    np.testing.assert_allclose(table['mean_mse'], [25.0, 4.0, 0.0])


def test_infeasible_candidate_is_excluded():
    X, y = _flat(12)
    adapter = ConstantAdapter([5.0, 100.0], limit_by_rows=True)
    best, table = select_hyperparameter(adapter, X, y, n_inner_folds=3, seed=0)
    assert best == 5.0
    assert table.loc[1, 'n_folds'] == 0
    assert np.isnan(table.loc[1, 'mean_mse'])


def test_no_feasible_candidate_raises():
    X, y = _flat(12)
    with pytest.raises(ValueError, match='no hyperparameter candidate'):
        select_hyperparameter(ConstantAdapter([100.0], limit_by_rows=True), X, y, n_inner_folds=3, seed=0)


def test_ties_go_to_first_candidate():
    X, y = _flat(20)
    best, _ = select_hyperparameter(ConstantAdapter([3.0, 7.0]), X, y, n_inner_folds=5, seed=0)
    assert best == 3.0


def test_untuned_adapter_skips_inner_cv(linear_data):
    X, y = linear_data
    assert select_hyperparameter(OLSAdapter(), X, y) == (None, None)


# ============================================================================
# OUTER LOOP
# ============================================================================

def test_ols_recovers_noise_level():
    X, y = make_linear_data(n=100, p=5, noise_sd=0.5, seed=0)
    results = evaluate(OLSAdapter(), X, y, outer_folds=10, n_inner_folds=10, seed=1)
    summary = summarize_folds(results)
    assert len(results) == 10
    assert summary['mean_test_mse'] < 3 * 0.25
    assert summary['mean_train_mse'] < summary['mean_test_mse']
    assert sum(r.n_test for r in results) == 100
    assert all(r.n_train + r.n_test == 100 for r in results)


def test_fold_result_is_immutable(linear_data):
    X, y = linear_data
    result = evaluate(OLSAdapter(), X, y, outer_folds=5)[0]
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.test_mse = 0.0


def test_fold_result_artifacts_are_read_only(linear_data):
    X, y = linear_data
    result = evaluate(OLSAdapter(), X, y, outer_folds=5, collect_artifacts=True)[0]
    with pytest.raises(TypeError):
        result.artifacts['intercept'] = 0.0
    with pytest.raises(TypeError):
        result.artifacts.update({'extra': 1})
    with pytest.raises(TypeError):
        del result.artifacts['coefficients']

    restored = pickle.loads(pickle.dumps(result))
    assert restored == result
    assert restored.artifacts == result.artifacts
    assert isinstance(restored.artifacts, FrozenArtifacts)


def test_same_seed_reproduces_results(linear_data):
    X, y = linear_data
    first = evaluate(KNNAdapter(), X, y, outer_folds=5, n_inner_folds=5, seed=3)
    second = evaluate(KNNAdapter(), X, y, outer_folds=5, n_inner_folds=5, seed=3)
    assert first == second


def test_parallel_folds_match_sequential(linear_data):
    X, y = linear_data
    sequential = evaluate(KNNAdapter(), X, y, outer_folds=4, n_inner_folds=4, seed=2)
    parallel = evaluate(KNNAdapter(), X, y, outer_folds=4, n_inner_folds=4, seed=2, n_jobs=2)
    assert sorted(parallel, key=lambda r: r.fold) == sequential


def test_empty_outer_folds_are_skipped():
    X, y = make_linear_data(n=8, p=1)
    results = evaluate(KNNAdapter(), X, y, outer_folds=10, n_inner_folds=3, seed=0)
    assert len(results) == 8
    assert all(r.n_test == 1 for r in results)


def test_explicit_fold_assignment(linear_data):
    X, y = linear_data
    ids = np.repeat([1, 2], 50)
    results = evaluate(OLSAdapter(), X, y, outer_folds=ids)
    assert [r.fold for r in results] == [1, 2]
    assert [r.n_test for r in results] == [50, 50]
    with pytest.raises(ValueError):
        evaluate(OLSAdapter(), X, y, outer_folds=ids[:-1])


def test_collect_artifacts_includes_inner_cv(linear_data):
    X, y = linear_data
    results = evaluate(KNNAdapter(), X, y, outer_folds=3, n_inner_folds=3, collect_artifacts=True)
    for r in results:
        table = r.artifacts['inner_cv']
        assert r.hyperparameter in table['candidate'].tolist()
        assert r.artifacts['k'] == r.hyperparameter
    assert evaluate(KNNAdapter(), X, y, outer_folds=3, n_inner_folds=3)[0].artifacts == {}


# ============================================================================
# BENCHMARK + AGGREGATION
# ============================================================================

def test_benchmark_uses_identical_partitions(linear_data):
    X, y = linear_data
    benchmark = run_benchmark([OLSAdapter(), KNNAdapter()], X, y, n_outer_folds=5,
                              n_inner_folds=3, seed=4, verbose=False)
    assert list(benchmark) == ['ols', 'knn']
    ols_sizes = [(r.fold, r.n_test) for r in benchmark['ols']]
    knn_sizes = [(r.fold, r.n_test) for r in benchmark['knn']]
    assert ols_sizes == knn_sizes
    expected = evaluate(OLSAdapter(), X, y, outer_folds=assign_folds(len(y), 5, 4), seed=4)
    assert benchmark['ols'] == expected


def test_summarize_benchmark_orders_by_test_mse(linear_data):
    X, y = linear_data
    benchmark = run_benchmark([KNNAdapter(), OLSAdapter()], X, y, n_outer_folds=5,
                              n_inner_folds=3, verbose=False)
    summary = summarize_benchmark(benchmark)
    assert list(summary['Model']) == ['ols', 'knn']
    assert (summary['Min_Test_MSE'] <= summary['Test_MSE']).all()
    assert len(summary.loc[1, 'Hyperparameter']) == 5
    assert summary.loc[0, 'Model_Size'] == [5] * 5


def test_summarize_folds_needs_results():
    with pytest.raises(ValueError):
        summarize_folds([])


def test_fold_table_drops_artifacts():
    results = [
        FoldResult('ols', 1, 9, 1, 0.1, 0.2, artifacts={'coefficients': {'x0': 1.0}}),
        FoldResult('ols', 2, 9, 1, 0.1, 0.4),
    ]
    table = fold_table({'ols': results})
    assert 'artifacts' not in table.columns
    assert list(table['test_mse']) == [0.2, 0.4]
    assert results[0] == FoldResult('ols', 1, 9, 1, 0.1, 0.2)
