"""
Compute and save the correlation matrix and target correlations of the cleaned survey.
"""
import pickle
import sys
from pathlib import Path

import pandas as pd

from mxmh import config
from mxmh.artifacts import compute_spearman_correlations
from mxmh.data_prep import (
    SYMPTOM_COLUMNS,
    TARGET_COMPOSITE,
    feature_columns,
    load_raw_dataframe,
    preprocess,
)


def compute_correlations(data_path: Path = config.DATA_PATH, output_dir: Path = config.OUTPUT_DIR):
    """Compute correlation matrix from survey data."""
    df = preprocess(load_raw_dataframe(data_path), target_mode='composite')

    features = feature_columns(df)
    numeric_cols = features + SYMPTOM_COLUMNS + [TARGET_COMPOSITE]
    print(f"Features: {len(features)}, rows: {len(df)}")

    corr_matrix = df[numeric_cols].corr()
    spearman = compute_spearman_correlations(df[features], df[TARGET_COMPOSITE])

    output_dir.mkdir(parents=True, exist_ok=True)
    with open(output_dir / "correlation_matrix.pkl", "wb") as f:
        pickle.dump({
            'correlation_matrix': corr_matrix,
            'spearman_with_target': spearman,
            'columns': numeric_cols,
        }, f)

    print(f"\nCorrelation matrix saved to {output_dir / 'correlation_matrix.pkl'}")
    print(f"Shape: {corr_matrix.shape}")

    print("\n=== Top Feature Correlations ===")
    corr_pairs = []
    for i in range(len(features)):
        for j in range(i + 1, len(features)):
            corr_pairs.append({
                'Feature 1': features[i],
                'Feature 2': features[j],
                'Correlation': corr_matrix.loc[features[i], features[j]],
            })

    corr_df = pd.DataFrame(corr_pairs)
    corr_df['Abs_Correlation'] = corr_df['Correlation'].abs()
    corr_df = corr_df.sort_values('Abs_Correlation', ascending=False)
    print(corr_df.head(20).to_string(index=False))

    print(f"\n=== Spearman correlation with {TARGET_COMPOSITE} ===")
    print(spearman.head(10)[['feature', 'spearman_rho', 'p_value']].to_string(index=False))

    return corr_matrix


if __name__ == "__main__":
    compute_correlations(Path(sys.argv[1]) if len(sys.argv) > 1 else config.DATA_PATH)
