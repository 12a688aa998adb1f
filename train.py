"""
Music & Mental Health: Nested Cross-Validation Regression Benchmark
===================================================================

Compares seven regression families on the survey's composite symptom score
(or on each of the four sub-scores) under nested cross-validation:

1. Data Cleaning - drop incomplete rows, recode ordinals, reject bad categories
2. Outer CV (K1 folds) - held-out test MSE per algorithm, identical splits
3. Inner CV (K2 folds) - LASSO lambda, k-NN k, tree size selected per outer fold
4. Summary - mean train/test MSE, best single fold, selected hyperparameters
5. Side outputs - subset-selection frequencies, importance rankings

Writes results_<target>.csv, folds_<target>.csv and benchmark.pkl to the
output directory; the report itself is assembled elsewhere.
"""

import argparse
import pickle
import warnings
from pathlib import Path

import pandas as pd

from mxmh import config
from mxmh.artifacts import (
    compute_spearman_correlations,
    importance_ranking,
    selected_hyperparameters,
    subset_selection_frequency,
    top_feature_importance,
)
from mxmh.data_prep import (
    CATEGORICAL_COLUMNS,
    TARGET_MODES,
    feature_columns,
    get_cleaning_report,
    load_raw_dataframe,
    preprocess,
    target_columns,
)
from mxmh.harness import fold_table, run_benchmark, summarize_benchmark
from mxmh.models import SUBSET_CRITERIA, SUBSET_METHODS, default_adapters


def print_section(title: str, char: str = "="):
    """Print formatted section header."""
    print(f"\n{char * 80}")
    print(f" {title}")
    print(f"{char * 80}")


def print_subsection(title: str):
    """Print formatted subsection header."""
    print(f"\n--- {title} ---")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--data", type=Path, default=config.DATA_PATH,
                        help="Survey CSV (mxmh_survey_results.csv)")
    parser.add_argument("--outer-folds", type=int, default=config.OUTER_FOLDS)
    parser.add_argument("--inner-folds", type=int, default=config.INNER_FOLDS)
    parser.add_argument("--seed", type=int, default=config.SEED)
    parser.add_argument("--target-mode", choices=TARGET_MODES, default=config.TARGET_MODE)
    parser.add_argument("--subset-method", choices=SUBSET_METHODS, default=config.SUBSET_METHOD)
    parser.add_argument("--subset-criterion", choices=SUBSET_CRITERIA, default=config.SUBSET_CRITERION)
    parser.add_argument("--subset-max-size", type=int, default=config.SUBSET_MAX_SIZE,
                        help="Largest subset searched (default: all sizes; exhaustive stops at the fit limit)")
    parser.add_argument("--expand", nargs="*", choices=CATEGORICAL_COLUMNS, default=[],
                        help="Categorical fields to expand into k-1 indicators instead of dropping")
    parser.add_argument("--n-jobs", type=int, default=1, help="Parallel outer folds (joblib)")
    parser.add_argument("--output-dir", type=Path, default=config.OUTPUT_DIR)
    parser.add_argument("--quick", action="store_true",
                        help="Smaller forest/boosting ensembles for a fast smoke run")
    return parser.parse_args(argv)


def report_cleaning(df_raw: pd.DataFrame, df: pd.DataFrame, expand) -> None:
    print_section("DATA CLEANING")
    report = get_cleaning_report(df_raw, df, expand)
    print(f"  Raw rows:                {report['n_raw']}")
    print(f"  Dropped (missing value): {report['n_dropped_missing']}")
    print(f"  Rejected (bad category): {report['n_rejected']}")
    print(f"  Working rows:            {report['n_clean']}")
    print(f"  Feature columns:         {report['n_features']}")
    if report['missing_by_column']:
        print(f"  Missing by column:       {report['missing_by_column']}")
    if 'target_summary' in report:
        ts = report['target_summary']
        print(f"  Symptom_Total: mean={ts['mean']:.2f} sd={ts['std']:.2f} "
              f"range={ts['min']:.0f}-{ts['max']:.0f}")
    means = ", ".join(f"{k}={v:.2f}" for k, v in report['symptom_means'].items())
    print(f"  Sub-score means: {means}")


def report_side_outputs(benchmark, subset_name: str) -> None:
    print_subsection("Selected hyperparameters per outer fold")
    for name in ('lasso', 'knn', 'tree', 'boosting'):
        chosen = selected_hyperparameters(benchmark[name])
        values = ", ".join(f"{row['hyperparameter']:.4g}" for row in chosen)
        sizes = ", ".join(str(row['model_size']) for row in chosen)
        print(f"    {name:10} value: [{values}]  size: [{sizes}]")

    print_subsection("Subset selection: features chosen across outer folds")
    freq = subset_selection_frequency(benchmark[subset_name])
    for _, row in freq.head(10).iterrows():
        print(f"    {row['feature']:25} {int(row['n_selected']):2d} folds")

    print_subsection("LASSO: mean |coefficient| (standardized)")
    for _, row in importance_ranking(benchmark['lasso'], 'coefficients', absolute=True).head(8).iterrows():
        print(f"    {row['feature']:25} {row['mean']:.4f}")

    for name, label in (('random_forest', 'Random forest importance'),
                        ('boosting', 'Boosting relative influence')):
        print_subsection(label)
        for _, row in top_feature_importance(benchmark[name], top_n=8).iterrows():
            print(f"    {row['feature']:25} {row['mean']:.4f}")


def run_target(df: pd.DataFrame, target: str, args) -> dict:
    print_section(f"NESTED CV: {target}")
    features = feature_columns(df)
    X = df[features]
    y = df[target]
    print(f"  Samples: {len(y)}, Features: {len(features)}")
    print(f"  Target range: {y.min():.0f}-{y.max():.0f} (mean={y.mean():.2f}, var={y.var():.2f})")
    print(f"  Outer folds: {args.outer_folds}, inner folds: {args.inner_folds}, seed: {args.seed}")

    print_subsection("Spearman correlations with target (top 8)")
    for _, row in compute_spearman_correlations(X, y).head(8).iterrows():
        sig = "*" if row['significant'] else ""
        print(f"  {row['feature']:25} rho={row['spearman_rho']:+.3f} (p={row['p_value']:.3f}){sig}")

    rf_trees = config.QUICK_RF_N_TREES if args.quick else config.RF_N_TREES
    gbm_trees = config.QUICK_GBM_N_TREES if args.quick else config.GBM_N_TREES
    adapters = default_adapters(
        features,
        subset_method=args.subset_method,
        subset_criterion=args.subset_criterion,
        subset_max_size=args.subset_max_size,
        seed=args.seed,
        rf_trees=rf_trees,
        gbm_trees=gbm_trees,
    )

    print_subsection("Outer-fold evaluation")
    benchmark = run_benchmark(
        adapters, X, y,
        n_outer_folds=args.outer_folds,
        n_inner_folds=args.inner_folds,
        seed=args.seed,
        n_jobs=args.n_jobs,
        collect_artifacts=True,
    )

    summary = summarize_benchmark(benchmark)
    print_subsection("Results (MSE)")
    print(summary[['Model', 'Train_MSE', 'Test_MSE', 'Min_Test_MSE', 'Std_Test_MSE']].to_string(index=False))
    print("\n  Min_Test_MSE is the best single fold, not an unbiased estimate.")

    report_side_outputs(benchmark, adapters[1].name)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    summary.to_csv(args.output_dir / f"results_{target}.csv", index=False)
    fold_table(benchmark).to_csv(args.output_dir / f"folds_{target}.csv", index=False)
    return {'summary': summary, 'folds': benchmark}


def main(argv=None):
    """Main execution pipeline."""
    args = parse_args(argv)

    print("=" * 80)
    print(" MUSIC & MENTAL HEALTH: NESTED CV REGRESSION BENCHMARK")
    print(f" Target mode: {args.target_mode}")
    print("=" * 80)

    if not args.data.exists():
        raise FileNotFoundError(f"Expected CSV at {args.data}")

    df_raw = load_raw_dataframe(args.data)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        df = preprocess(df_raw, expand_categoricals=tuple(args.expand), target_mode=args.target_mode)
    for w in caught:
        print(f"  [!!] {w.message}")

    report_cleaning(df_raw, df, tuple(args.expand))

    results = {}
    for target in target_columns(args.target_mode):
        results[target] = run_target(df, target, args)

    with open(args.output_dir / "benchmark.pkl", "wb") as f:
        pickle.dump({
            'config': vars(args),
            'results': results,
        }, f)

    print_section("SUMMARY")
    for target, res in results.items():
        best = res['summary'].iloc[0]
        print(f"  {target:15} best: {best['Model']:28} test MSE={best['Test_MSE']:.3f}")
    print(f"\n  Reports written to {args.output_dir}")

    print("\n" + "=" * 80)
    print(" PIPELINE COMPLETE")
    print("=" * 80)
    return results


if __name__ == "__main__":
    main()
