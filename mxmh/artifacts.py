"""
Side outputs of the benchmark used for narrative figures and tables.

Nothing here feeds back into model selection; every function reads the
artifacts attached to FoldResult records (run the harness with
collect_artifacts=True) or the cleaned data directly.
"""

from typing import Dict, List, Sequence

import numpy as np
import pandas as pd
from scipy.stats import spearmanr

from mxmh.harness import FoldResult


def compute_spearman_correlations(X: pd.DataFrame, y: pd.Series) -> pd.DataFrame:
    """
    Compute Spearman correlations between features and the response.

    Spearman suits the 0-3 listening-frequency ordinals (ranks, not values).
    Constant features get NaN rho.
    """
    correlations = []
    for col in X.columns:
        if X[col].nunique() < 2:
            rho, pval = np.nan, np.nan
        else:
            rho, pval = spearmanr(X[col], y)
        correlations.append({
            'feature': col,
            'spearman_rho': rho,
            'abs_rho': abs(rho),
            'p_value': pval,
            'significant': bool(pval < 0.05) if not np.isnan(pval) else False,
        })

    return pd.DataFrame(correlations).sort_values('abs_rho', ascending=False, na_position='last')


def importance_ranking(results: Sequence[FoldResult], key: str, absolute: bool = False) -> pd.DataFrame:
    """
    Average a per-feature score across outer folds.

    key is the artifact holding a {feature: score} dict: 'importance' (forest,
    tree), 'relative_influence' (boosting) or 'coefficients' (OLS, LASSO).
    Features a fold did not score count as 0 for that fold.
    """
    per_fold = [r.artifacts[key] for r in results if key in r.artifacts]
    if not per_fold:
        return pd.DataFrame(columns=['feature', 'mean', 'std', 'n_folds'])

    frame = pd.DataFrame(per_fold).fillna(0.0)
    if absolute:
        frame = frame.abs()
    ranking = pd.DataFrame({
        'feature': frame.columns,
        'mean': frame.mean(axis=0).to_numpy(),
        'std': frame.std(axis=0, ddof=1).fillna(0.0).to_numpy(),
        'n_folds': len(frame),
    })
    return ranking.sort_values('mean', ascending=False).reset_index(drop=True)


def subset_selection_frequency(results: Sequence[FoldResult]) -> pd.DataFrame:
    """How many outer folds selected each feature, most frequent first."""
    counts: Dict[str, int] = {}
    n_folds = 0
    for r in results:
        selected = r.artifacts.get('selected_features')
        if selected is None:
            continue
        n_folds += 1
        for feature in selected:
            counts[feature] = counts.get(feature, 0) + 1

    freq = pd.DataFrame({
        'feature': list(counts.keys()),
        'n_selected': list(counts.values()),
    })
    freq['share'] = freq['n_selected'] / n_folds if n_folds else np.nan
    return freq.sort_values(['n_selected', 'feature'], ascending=[False, True]).reset_index(drop=True)


def selected_hyperparameters(results: Sequence[FoldResult]) -> List[dict]:
    return [
        {'fold': r.fold, 'hyperparameter': r.hyperparameter, 'model_size': r.model_size}
        for r in results
    ]


def top_feature_importance(results: Sequence[FoldResult], top_n: int = 10) -> pd.DataFrame:
    """Top features from whichever score the algorithm exposes."""
    # Tree-based models
    for key in ('relative_influence', 'importance'):
        if any(key in r.artifacts for r in results):
            return importance_ranking(results, key).head(top_n)

    # Linear models
    if any('coefficients' in r.artifacts for r in results):
        return importance_ranking(results, 'coefficients', absolute=True).head(top_n)

    return pd.DataFrame()
