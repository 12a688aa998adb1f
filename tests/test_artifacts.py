import numpy as np
import pandas as pd
import pytest

from mxmh.artifacts import (
    compute_spearman_correlations,
    importance_ranking,
    selected_hyperparameters,
    subset_selection_frequency,
    top_feature_importance,
)
from mxmh.harness import FoldResult


def _result(fold, **artifacts):
    return FoldResult('model', fold, 90, 10, 1.0, 2.0, hyperparameter=fold * 0.1,
                      model_size=len(artifacts.get('selected_features', [])), artifacts=artifacts)


def test_spearman_ranks_monotone_feature_first():
    rng = np.random.default_rng(0)
    x = rng.normal(size=80)
    X = pd.DataFrame({
        'noise': rng.normal(size=80),
        'monotone': np.exp(x),
        'constant': np.ones(80),
    })
    y = pd.Series(x)
    corr = compute_spearman_correlations(X, y)
    assert corr.iloc[0]['feature'] == 'monotone'
    assert corr.iloc[0]['spearman_rho'] == pytest.approx(1.0)
    assert corr.iloc[0]['significant']
    const = corr.set_index('feature').loc['constant']
    assert np.isnan(const['spearman_rho'])
    assert not const['significant']
    assert corr.iloc[-1]['feature'] == 'constant'


def test_subset_selection_frequency_counts_folds():
    results = [
        _result(1, selected_features=['Age', 'Freq_Metal']),
        _result(2, selected_features=['Age']),
        _result(3, selected_features=['Age', 'Composer']),
    ]
    freq = subset_selection_frequency(results)
    assert freq.iloc[0]['feature'] == 'Age'
    assert freq.iloc[0]['n_selected'] == 3
    assert freq.iloc[0]['share'] == pytest.approx(1.0)
    assert list(freq['feature'][1:]) == ['Composer', 'Freq_Metal']


def test_importance_ranking_treats_missing_features_as_zero():
    results = [
        _result(1, coefficients={'a': 2.0, 'b': -4.0}),
        _result(2, coefficients={'a': 4.0}),
    ]
    signed = importance_ranking(results, 'coefficients')
    assert list(signed['feature']) == ['a', 'b']
    assert signed.loc[1, 'mean'] == pytest.approx(-2.0)

    absolute = importance_ranking(results, 'coefficients', absolute=True)
    assert absolute.loc[0, 'mean'] == pytest.approx(3.0)
    assert absolute.loc[0, 'n_folds'] == 2


def test_importance_ranking_without_artifacts():
    ranking = importance_ranking([_result(1)], 'importance')
    assert ranking.empty
    assert list(ranking.columns) == ['feature', 'mean', 'std', 'n_folds']


def test_top_feature_importance_prefers_tree_scores():
    results = [
        _result(1, relative_influence={'a': 70.0, 'b': 30.0}),
        _result(2, relative_influence={'a': 40.0, 'b': 60.0}),
    ]
    top = top_feature_importance(results, top_n=1)
    assert list(top['feature']) == ['a']
    assert top.iloc[0]['mean'] == pytest.approx(55.0)

    linear = top_feature_importance([_result(1, coefficients={'a': 0.5, 'b': -3.0})], top_n=2)
    assert list(linear['feature']) == ['b', 'a']


def test_selected_hyperparameters():
    rows = selected_hyperparameters([_result(1), _result(2)])
    assert [row['fold'] for row in rows] == [1, 2]
    assert rows[1]['hyperparameter'] == pytest.approx(0.2)
