"""
Regression Model Adapters for the Music & Mental Health benchmark

Every algorithm family is wrapped in an adapter with the same contract, so the
evaluation harness can treat them uniformly:

    fitted = adapter.fit(X_train, y_train, hyperparameter)
    y_hat = adapter.predict(fitted, X)

A fitted model is a plain dict ('model', 'scaler', 'features',
'hyperparameter', 'model_size', ...). Adapters hold configuration only; every
fit starts from the training data it is given.

Families:
    - OLS on the full feature set
    - Subset-selection OLS (exhaustive / forward / backward search,
      chosen by R², adjusted R², Mallow's Cp or BIC)
    - LASSO (lambda chosen by inner CV)
    - k-NN on standardized features (k chosen by inner CV)
    - Pruned regression tree (cost-complexity alpha chosen by inner CV)
    - Random forest (library defaults, importance side output)
    - Gradient boosting (iteration count chosen by internal CV,
      relative influence side output)

DEGREES OF FREEDOM:
-------------------
Unregularized least squares with p predictors and an intercept needs more
than p + 1 observations and a full-rank design. Anything less raises
DegenerateFitError instead of returning meaningless coefficients.
"""

import itertools
import math
import warnings
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from sklearn.ensemble import GradientBoostingRegressor, RandomForestRegressor
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import Lasso, LassoCV, LinearRegression, lasso_path
from sklearn.metrics import mean_squared_error
from sklearn.model_selection import KFold
from sklearn.neighbors import KNeighborsRegressor
from sklearn.preprocessing import StandardScaler
from sklearn.tree import DecisionTreeRegressor

from mxmh import config
from mxmh.folds import assign_folds, iter_folds


class DegenerateFitError(ValueError):
    """Too few observations (or a rank-deficient design) for an unregularized fit."""


def check_degrees_of_freedom(n_samples: int, n_features: int, what: str = "OLS") -> None:
    if n_samples <= n_features + 1:
        raise DegenerateFitError(
            f"{what} needs more than {n_features + 1} observations for "
            f"{n_features} predictors plus intercept, got {n_samples}"
        )


def check_full_rank(X: np.ndarray, what: str = "OLS") -> None:
    design = np.column_stack([np.ones(len(X)), X])
    rank = np.linalg.matrix_rank(design)
    if rank < design.shape[1]:
        raise DegenerateFitError(
            f"{what} design matrix is rank deficient (rank {rank} < {design.shape[1]} "
            f"columns); drop collinear predictors"
        )


# ============================================================================
# ADAPTER BASE
# ============================================================================

class RegressionAdapter:
    """
    Uniform fit/predict wrapper around one sklearn regressor family.

    Subclasses implement _fit_estimator(); those with a tunable
    hyperparameter also implement candidates() so the harness can run the
    inner cross-validation.
    """
    name = 'base'
    needs_scaling = False

    def __init__(self, features: Optional[Sequence[str]] = None):
        self.features = list(features) if features is not None else None

    # -- column handling ----------------------------------------------------

    def _columns(self, X) -> List[str]:
        if self.features is not None:
            return list(self.features)
        if isinstance(X, pd.DataFrame):
            return list(X.columns)
        return [f'x{i}' for i in range(np.asarray(X).shape[1])]

    @staticmethod
    def _matrix(X, features: Sequence[str]) -> np.ndarray:
        if isinstance(X, pd.DataFrame):
            return X[list(features)].to_numpy(dtype=float)
        arr = np.asarray(X, dtype=float)
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        if arr.shape[1] != len(features):
            raise ValueError(f"Expected {len(features)} feature columns, got {arr.shape[1]}")
        return arr

    # -- contract -----------------------------------------------------------

    def fit(self, X, y, hyperparameter=None) -> Dict:
        features = self._columns(X)
        X_mat = self._matrix(X, features)
        y_vec = np.asarray(y, dtype=float)
        if len(y_vec) != len(X_mat):
            raise ValueError(f"X has {len(X_mat)} rows but y has {len(y_vec)}")

        scaler = StandardScaler().fit(X_mat) if self.needs_scaling else None
        X_use = scaler.transform(X_mat) if scaler is not None else X_mat

        fitted = self._fit_estimator(X_use, y_vec, hyperparameter)
        fitted.update({
            'scaler': scaler,
            'features': features,
            'n_train': len(y_vec),
        })
        fitted.setdefault('hyperparameter', hyperparameter)
        fitted.setdefault('model_size', None)
        return fitted

    def predict(self, fitted: Dict, X) -> np.ndarray:
        X_mat = self._matrix(X, fitted['features'])
        if fitted['scaler'] is not None:
            X_mat = fitted['scaler'].transform(X_mat)
        return np.asarray(fitted['model'].predict(X_mat), dtype=float)

    def candidates(self, X, y, n_inner_folds: int) -> Optional[list]:
        """Hyperparameter grid for inner CV, or None when nothing is tuned."""
        return None

    def accepts(self, candidate, n_train: int) -> bool:
        return True

    def artifacts(self, fitted: Dict) -> Dict:
        return {}

    def _fit_estimator(self, X: np.ndarray, y: np.ndarray, hyperparameter) -> Dict:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"


# ============================================================================
# LINEAR REGRESSION (OLS)
# ============================================================================

class OLSAdapter(RegressionAdapter):
    name = 'ols'

    def _fit_estimator(self, X, y, hyperparameter):
        check_degrees_of_freedom(X.shape[0], X.shape[1], 'OLS')
        check_full_rank(X, 'OLS')
        model = LinearRegression().fit(X, y)
        return {'model': model, 'model_size': X.shape[1]}

    def artifacts(self, fitted):
        model = fitted['model']
        return {
            'intercept': float(model.intercept_),
            'coefficients': dict(zip(fitted['features'], model.coef_.tolist())),
        }


# ============================================================================
# SUBSET SELECTION (best subset / forward / backward stepwise)
# ============================================================================

SUBSET_METHODS = ('exhaustive', 'forward', 'backward')
SUBSET_CRITERIA = ('r2', 'adjr2', 'cp', 'bic')

# criteria that are maximized; the rest are minimized
_MAXIMIZED = {'r2', 'adjr2'}


def _centered(X: np.ndarray, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    return X - X.mean(axis=0), y - y.mean()


def subset_rss(Xc: np.ndarray, yc: np.ndarray, cols: Sequence[int]) -> float:
    """RSS of the intercept model on centered data restricted to cols."""
    if len(cols) == 0:
        return float(yc @ yc)
    sub = Xc[:, list(cols)]
    coef, *_ = np.linalg.lstsq(sub, yc, rcond=None)
    resid = yc - sub @ coef
    return float(resid @ resid)


def max_exhaustive_size(n_features: int, limit: Optional[int] = None) -> int:
    """Largest subset size whose exhaustive search stays within the fit limit."""
    limit = config.MAX_EXHAUSTIVE_SUBSETS if limit is None else limit
    total = 0
    for d in range(1, n_features + 1):
        total += math.comb(n_features, d)
        if total > limit:
            return max(1, d - 1)
    return n_features


def _exhaustive_search(Xc, yc, max_size) -> List[Tuple[Tuple[int, ...], float]]:
    p = Xc.shape[1]
    n_subsets = sum(math.comb(p, d) for d in range(1, max_size + 1))
    if n_subsets > config.MAX_EXHAUSTIVE_SUBSETS:
        raise ValueError(
            f"Exhaustive search over {p} features up to size {max_size} means "
            f"{n_subsets:,} fits (limit {config.MAX_EXHAUSTIVE_SUBSETS:,}); "
            f"use forward/backward search or a smaller max_size"
        )
    best = []
    for d in range(1, max_size + 1):
        best.append(min(
            ((cols, subset_rss(Xc, yc, cols)) for cols in itertools.combinations(range(p), d)),
            key=lambda item: item[1],
        ))
    return best


def _forward_search(Xc, yc, max_size) -> List[Tuple[Tuple[int, ...], float]]:
    p = Xc.shape[1]
    chosen: List[int] = []
    path = []
    for _ in range(max_size):
        remaining = [j for j in range(p) if j not in chosen]
        scores = [(j, subset_rss(Xc, yc, chosen + [j])) for j in remaining]
        j_best, rss = min(scores, key=lambda item: item[1])
        chosen.append(j_best)
        path.append((tuple(chosen), rss))
    return path


def _backward_search(Xc, yc, max_size) -> List[Tuple[Tuple[int, ...], float]]:
    p = Xc.shape[1]
    current = list(range(p))
    by_size = {p: (tuple(current), subset_rss(Xc, yc, current))}
    while len(current) > 1:
        scores = [
            (j, subset_rss(Xc, yc, [c for c in current if c != j]))
            for j in current
        ]
        j_drop, rss = min(scores, key=lambda item: item[1])
        current = [c for c in current if c != j_drop]
        by_size[len(current)] = (tuple(current), rss)
    return [by_size[d] for d in range(1, max_size + 1)]


_SEARCHES = {
    'exhaustive': _exhaustive_search,
    'forward': _forward_search,
    'backward': _backward_search,
}


def subset_criteria(rss: np.ndarray, sizes: np.ndarray, n: int, tss: float,
                    sigma2: float) -> Dict[str, np.ndarray]:
    """
    Model-size criteria computed from the RSS of the best subset per size.

    sigma2 is the residual variance of the full model, as in Mallow's Cp.
    The complexity penalties differ (2·d·sigma2/n for Cp, d·log(n) for BIC),
    which is what pushes Cp towards larger subsets than BIC.
    """
    rss = np.asarray(rss, dtype=float)
    d = np.asarray(sizes, dtype=float)
    with np.errstate(divide='ignore', invalid='ignore'):
        r2 = 1.0 - rss / tss
        adjr2 = 1.0 - (rss / (n - d - 1)) / (tss / (n - 1))
        bic = n * np.log(rss / n) + (d + 1) * np.log(n)
    cp = (rss + 2.0 * d * sigma2) / n
    return {'r2': r2, 'adjr2': adjr2, 'cp': cp, 'bic': bic}


def select_subset(
    X: np.ndarray,
    y: np.ndarray,
    feature_names: Sequence[str],
    method: str = 'forward',
    criterion: str = 'bic',
    max_size: Optional[int] = None,
) -> Dict:
    """
    Search best subsets per size, then pick the size optimizing criterion.

    Returns dict with 'selected_size', 'selected_features', 'selected_index'
    and 'table' (one row per size with subset, RSS and all four criteria).
    """
    if method not in SUBSET_METHODS:
        raise ValueError(f"Unknown subset search {method!r}; expected one of {SUBSET_METHODS}")
    if criterion not in SUBSET_CRITERIA:
        raise ValueError(f"Unknown criterion {criterion!r}; expected one of {SUBSET_CRITERIA}")

    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)
    n, p = X.shape
    max_size = p if max_size is None else min(max_size, p)
    if max_size < 1:
        raise ValueError("max_size must be at least 1")

    # sigma2 for Cp comes from the full model, so it must be estimable
    check_degrees_of_freedom(n, p, 'Subset selection')
    check_full_rank(X, 'Subset selection')

    Xc, yc = _centered(X, y)
    tss = float(yc @ yc)
    sigma2 = subset_rss(Xc, yc, range(p)) / (n - p - 1)

    path = _SEARCHES[method](Xc, yc, max_size)
    sizes = np.array([len(cols) for cols, _ in path])
    rss = np.array([r for _, r in path])
    crit = subset_criteria(rss, sizes, n, tss, sigma2)

    values = crit[criterion]
    best_pos = int(np.nanargmax(values) if criterion in _MAXIMIZED else np.nanargmin(values))
    best_cols = path[best_pos][0]

    table = pd.DataFrame({
        'size': sizes,
        'features': [[feature_names[j] for j in cols] for cols, _ in path],
        'rss': rss,
        **crit,
    })
    return {
        'selected_size': int(sizes[best_pos]),
        'selected_index': list(best_cols),
        'selected_features': [feature_names[j] for j in best_cols],
        'table': table,
        'method': method,
        'criterion': criterion,
    }


class SubsetSelectionAdapter(RegressionAdapter):
    """
    OLS restricted to the subset chosen by a search strategy + criterion.

    The size is chosen by the criterion on the training data itself, so no
    inner CV is needed; the harness reports the chosen size per fold.
    Exhaustive search without an explicit max_size searches every size the
    MAX_EXHAUSTIVE_SUBSETS limit allows (6 of 24 survey features).
    """

    def __init__(self, features=None, method: str = 'forward', criterion: str = 'bic',
                 max_size: Optional[int] = config.SUBSET_MAX_SIZE):
        super().__init__(features)
        if method not in SUBSET_METHODS:
            raise ValueError(f"Unknown subset search {method!r}; expected one of {SUBSET_METHODS}")
        if criterion not in SUBSET_CRITERIA:
            raise ValueError(f"Unknown criterion {criterion!r}; expected one of {SUBSET_CRITERIA}")
        self.method = method
        self.criterion = criterion
        self.max_size = max_size
        self.name = f'subset_{method}_{criterion}'

    def fit(self, X, y, hyperparameter=None):
        features = self._columns(X)
        X_mat = self._matrix(X, features)
        y_vec = np.asarray(y, dtype=float)

        max_size = self.max_size
        if max_size is None and self.method == 'exhaustive':
            max_size = max_exhaustive_size(X_mat.shape[1])

        selection = select_subset(X_mat, y_vec, features, self.method, self.criterion, max_size)
        cols = selection['selected_index']
        model = LinearRegression().fit(X_mat[:, cols], y_vec)
        return {
            'model': model,
            'scaler': None,
            'features': features,
            'selected_index': list(cols),
            'n_train': len(y_vec),
            'hyperparameter': None,
            'model_size': selection['selected_size'],
            'selection': selection,
        }

    def predict(self, fitted, X):
        X_mat = self._matrix(X, fitted['features'])
        return np.asarray(fitted['model'].predict(X_mat[:, fitted['selected_index']]), dtype=float)

    def artifacts(self, fitted):
        selection = fitted['selection']
        return {
            'selected_features': list(selection['selected_features']),
            'selected_size': selection['selected_size'],
            'criterion_table': selection['table'],
            'coefficients': dict(zip(selection['selected_features'], fitted['model'].coef_.tolist())),
        }


# ============================================================================
# LASSO (L1 regularization, lambda by inner CV)
# ============================================================================

def lasso_alpha_grid(X_std: np.ndarray, y: np.ndarray,
                     n_alphas: int = config.LASSO_N_ALPHAS,
                     min_ratio: float = config.LASSO_ALPHA_MIN_RATIO) -> np.ndarray:
    """
    Log-spaced lambda grid, largest first.

    lambda_max is the smallest penalty that zeroes every coefficient on the
    standardized design: max|X'(y - mean y)| / n.
    """
    yc = y - y.mean()
    alpha_max = float(np.max(np.abs(X_std.T @ yc))) / len(y) if len(y) else 0.0
    if not np.isfinite(alpha_max) or alpha_max <= 0:
        alpha_max = 1.0
    return np.logspace(np.log10(alpha_max), np.log10(alpha_max * min_ratio), n_alphas)


def lasso_nonzero_counts(X, y, alphas: Sequence[float]) -> pd.DataFrame:
    """Number of non-zero standardized coefficients along a lambda path."""
    X_std = StandardScaler().fit_transform(np.asarray(X, dtype=float))
    yc = np.asarray(y, dtype=float) - np.mean(y)
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', category=ConvergenceWarning)
        path_alphas, coefs, _ = lasso_path(X_std, yc, alphas=np.asarray(alphas, dtype=float),
                                           max_iter=config.LASSO_MAX_ITER)
    counts = (np.abs(coefs) > 1e-10).sum(axis=0)
    return pd.DataFrame({'alpha': path_alphas, 'n_nonzero': counts}).sort_values('alpha').reset_index(drop=True)


class LassoAdapter(RegressionAdapter):
    name = 'lasso'
    needs_scaling = True

    def __init__(self, features=None, n_alphas: int = config.LASSO_N_ALPHAS,
                 min_ratio: float = config.LASSO_ALPHA_MIN_RATIO, seed: int = config.SEED):
        super().__init__(features)
        self.n_alphas = n_alphas
        self.min_ratio = min_ratio
        self.seed = seed

    def candidates(self, X, y, n_inner_folds):
        X_mat = self._matrix(X, self._columns(X))
        X_std = StandardScaler().fit_transform(X_mat)
        return lasso_alpha_grid(X_std, np.asarray(y, dtype=float), self.n_alphas, self.min_ratio).tolist()

    def _fit_estimator(self, X, y, hyperparameter):
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', category=ConvergenceWarning)
            if hyperparameter is None:
                # Standalone use: let LassoCV pick lambda on the same grid
                grid = lasso_alpha_grid(X, y, self.n_alphas, self.min_ratio)
                cv = KFold(n_splits=min(config.INNER_FOLDS, len(y)), shuffle=True, random_state=self.seed)
                model = LassoCV(alphas=grid, cv=cv, max_iter=config.LASSO_MAX_ITER).fit(X, y)
                alpha = float(model.alpha_)
            else:
                alpha = float(hyperparameter)
                model = Lasso(alpha=alpha, max_iter=config.LASSO_MAX_ITER).fit(X, y)
        n_selected = int(np.sum(np.abs(model.coef_) > 1e-10))
        return {'model': model, 'hyperparameter': alpha, 'model_size': n_selected}

    def artifacts(self, fitted):
        coefs = fitted['model'].coef_
        return {
            'alpha': fitted['hyperparameter'],
            'coefficients': dict(zip(fitted['features'], coefs.tolist())),
            'n_nonzero': fitted['model_size'],
        }


# ============================================================================
# k-NN REGRESSOR (k by inner CV)
# ============================================================================

class KNNAdapter(RegressionAdapter):
    """Mean response of the k nearest standardized neighbours (Euclidean)."""
    name = 'knn'
    needs_scaling = True
    default_k = 5

    def candidates(self, X, y, n_inner_folds):
        n_train = len(y)
        k_max = max(1, math.ceil(n_train / max(1, n_inner_folds)))
        return list(range(1, k_max + 1))

    def accepts(self, candidate, n_train):
        return 1 <= int(candidate) <= n_train

    def _fit_estimator(self, X, y, hyperparameter):
        k = self.default_k if hyperparameter is None else int(hyperparameter)
        if not self.accepts(k, len(y)):
            raise ValueError(f"k={k} needs at least {k} training observations, got {len(y)}")
        model = KNeighborsRegressor(n_neighbors=k, weights='uniform', metric='euclidean').fit(X, y)
        return {'model': model, 'hyperparameter': k}

    def artifacts(self, fitted):
        return {'k': fitted['hyperparameter']}


# ============================================================================
# PRUNED DECISION TREE (cost-complexity alpha by inner CV)
# ============================================================================

class PrunedTreeAdapter(RegressionAdapter):
    """
    Grow a full regression tree, then prune by cost-complexity.

    Candidates are the distinct effective alphas of the tree grown on the
    outer-training partition, simplest tree first, so ties in inner-CV
    deviance resolve towards the smaller tree.
    """
    name = 'tree'

    def __init__(self, features=None, min_samples_split: int = config.TREE_MIN_SAMPLES_SPLIT,
                 min_samples_leaf: int = config.TREE_MIN_SAMPLES_LEAF, seed: int = config.SEED):
        super().__init__(features)
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.seed = seed

    def _make(self, ccp_alpha: float = 0.0) -> DecisionTreeRegressor:
        return DecisionTreeRegressor(
            min_samples_split=self.min_samples_split,
            min_samples_leaf=self.min_samples_leaf,
            ccp_alpha=ccp_alpha,
            random_state=self.seed,
        )

    def candidates(self, X, y, n_inner_folds):
        X_mat = self._matrix(X, self._columns(X))
        path = self._make().cost_complexity_pruning_path(X_mat, np.asarray(y, dtype=float))
        alphas = np.unique(np.clip(path.ccp_alphas, 0.0, None))
        return alphas[::-1].tolist()

    def _fit_estimator(self, X, y, hyperparameter):
        alpha = 0.0 if hyperparameter is None else float(hyperparameter)
        model = self._make(alpha).fit(X, y)
        return {'model': model, 'hyperparameter': alpha, 'model_size': int(model.get_n_leaves())}

    def artifacts(self, fitted):
        model = fitted['model']
        return {
            'ccp_alpha': fitted['hyperparameter'],
            'n_leaves': int(model.get_n_leaves()),
            'depth': int(model.get_depth()),
            'importance': dict(zip(fitted['features'], model.feature_importances_.tolist())),
        }


# ============================================================================
# RANDOM FOREST
# ============================================================================

class RandomForestAdapter(RegressionAdapter):
    name = 'random_forest'

    def __init__(self, features=None, n_trees: int = config.RF_N_TREES, seed: int = config.SEED):
        super().__init__(features)
        self.n_trees = n_trees
        self.seed = seed

    def _fit_estimator(self, X, y, hyperparameter):
        # p/3 candidate features per split, the usual regression-forest default
        mtry = max(1, X.shape[1] // 3)
        model = RandomForestRegressor(
            n_estimators=self.n_trees,
            max_features=mtry,
            random_state=self.seed,
        ).fit(X, y)
        return {'model': model, 'hyperparameter': None, 'model_size': mtry}

    def artifacts(self, fitted):
        return {
            'importance': dict(zip(fitted['features'], fitted['model'].feature_importances_.tolist())),
        }


# ============================================================================
# GRADIENT BOOSTING (iteration count by internal CV)
# ============================================================================

class GradientBoostingAdapter(RegressionAdapter):
    """
    Squared-error boosting of shallow trees.

    When no iteration count is given, fit() runs its own cv_folds-fold CV on
    the training data, tracks held-out MSE after every stage via
    staged_predict, and refits with the count that minimizes it.
    """
    name = 'boosting'

    def __init__(self, features=None, n_trees: int = config.GBM_N_TREES,
                 learning_rate: float = config.GBM_LEARNING_RATE,
                 max_depth: int = config.GBM_MAX_DEPTH,
                 subsample: float = config.GBM_SUBSAMPLE,
                 cv_folds: int = config.GBM_CV_FOLDS,
                 seed: int = config.SEED):
        super().__init__(features)
        self.n_trees = n_trees
        self.learning_rate = learning_rate
        self.max_depth = max_depth
        self.subsample = subsample
        self.cv_folds = cv_folds
        self.seed = seed

    def _make(self, n_estimators: int) -> GradientBoostingRegressor:
        return GradientBoostingRegressor(
            loss='squared_error',
            n_estimators=n_estimators,
            learning_rate=self.learning_rate,
            max_depth=self.max_depth,
            subsample=self.subsample,
            random_state=self.seed,
        )

    def cv_iterations(self, X: np.ndarray, y: np.ndarray) -> Tuple[int, np.ndarray]:
        """Best iteration count and the mean held-out MSE curve."""
        fold_ids = assign_folds(len(y), self.cv_folds, self.seed)
        curves = []
        for _, train_idx, test_idx in iter_folds(fold_ids, self.cv_folds):
            if len(test_idx) == 0 or len(train_idx) == 0:
                continue
            gbm = self._make(self.n_trees).fit(X[train_idx], y[train_idx])
            curves.append([
                mean_squared_error(y[test_idx], pred)
                for pred in gbm.staged_predict(X[test_idx])
            ])
        if not curves:
            raise ValueError(f"Cannot cross-validate boosting on {len(y)} observations")
        curve = np.mean(np.asarray(curves), axis=0)
        return int(np.argmin(curve)) + 1, curve

    def _fit_estimator(self, X, y, hyperparameter):
        curve = None
        if hyperparameter is None:
            best_iter, curve = self.cv_iterations(X, y)
        else:
            best_iter = int(hyperparameter)
        model = self._make(best_iter).fit(X, y)
        return {'model': model, 'hyperparameter': best_iter, 'model_size': best_iter, 'cv_curve': curve}

    def artifacts(self, fitted):
        importances = fitted['model'].feature_importances_
        total = importances.sum()
        influence = importances * 100.0 / total if total > 0 else importances
        return {
            'n_iterations': fitted['hyperparameter'],
            'relative_influence': dict(zip(fitted['features'], influence.tolist())),
        }


# ============================================================================
# BENCHMARK LINE-UP
# ============================================================================

def default_adapters(
    features: Optional[Sequence[str]] = None,
    subset_method: str = config.SUBSET_METHOD,
    subset_criterion: str = config.SUBSET_CRITERION,
    subset_max_size: Optional[int] = config.SUBSET_MAX_SIZE,
    seed: int = config.SEED,
    rf_trees: int = config.RF_N_TREES,
    gbm_trees: int = config.GBM_N_TREES,
) -> List[RegressionAdapter]:
    """The seven algorithm families compared in the report, in report order."""
    return [
        OLSAdapter(features),
        SubsetSelectionAdapter(features, method=subset_method, criterion=subset_criterion,
                               max_size=subset_max_size),
        LassoAdapter(features, seed=seed),
        KNNAdapter(features),
        PrunedTreeAdapter(features, seed=seed),
        RandomForestAdapter(features, n_trees=rf_trees, seed=seed),
        GradientBoostingAdapter(features, n_trees=gbm_trees, seed=seed),
    ]
