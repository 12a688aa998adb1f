"""
Data Preparation for the Music & Mental Health survey (n≈620 after cleaning)

Turns the raw survey export into the fixed numeric feature matrix used by
every model in the benchmark:
1. Missing values: rows with a gap in any needed column are dropped (no imputation)
2. Ordinal recoding: Never/Rarely/Sometimes/Very frequently -> 0/1/2/3
3. Boolean recoding: Yes/No -> 1/0
4. Categorical fields: dropped by default, or expanded into k-1 indicators
5. Response: composite symptom score, or the four sub-scores separately

Key Principles:
- Unrecognized category values are never coerced; the row is rejected
- Column order is fixed, so coefficients line up across folds and models
- The composite target (sum of four 0-10 scores) loses information about
  which condition drives the score; it is kept configurable for that reason
"""

import warnings
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from mxmh import config


class MissingColumnsError(KeyError):
    """The raw table does not carry the expected survey columns."""


class UnrecognizedCategoryError(ValueError):
    """A categorical field holds a value outside its fixed level set."""


RAW_COL_MAP = {
    'Age': 'Age',
    'Primary streaming service': 'Streaming_Service',
    'Hours per day': 'Hours_Per_Day',
    'While working': 'While_Working',
    'Instrumentalist': 'Instrumentalist',
    'Composer': 'Composer',
    'Fav genre': 'Fav_Genre',
    'Exploratory': 'Exploratory',
    'Foreign languages': 'Foreign_Languages',
    'BPM': 'BPM',
    'Frequency [Classical]': 'Freq_Classical',
    'Frequency [Country]': 'Freq_Country',
    'Frequency [EDM]': 'Freq_EDM',
    'Frequency [Folk]': 'Freq_Folk',
    'Frequency [Gospel]': 'Freq_Gospel',
    'Frequency [Hip hop]': 'Freq_Hip_Hop',
    'Frequency [Jazz]': 'Freq_Jazz',
    'Frequency [K pop]': 'Freq_K_Pop',
    'Frequency [Latin]': 'Freq_Latin',
    'Frequency [Lofi]': 'Freq_Lofi',
    'Frequency [Metal]': 'Freq_Metal',
    'Frequency [Pop]': 'Freq_Pop',
    'Frequency [R&B]': 'Freq_RnB',
    'Frequency [Rap]': 'Freq_Rap',
    'Frequency [Rock]': 'Freq_Rock',
    'Frequency [Video game music]': 'Freq_Video_Game',
    'Anxiety': 'Anxiety',
    'Depression': 'Depression',
    'Insomnia': 'Insomnia',
    'OCD': 'OCD',
}

FREQUENCY_LEVELS = {
    'Never': 0,
    'Rarely': 1,
    'Sometimes': 2,
    'Very frequently': 3,
}

YES_NO_LEVELS = {
    'No': 0,
    'Yes': 1,
}

NUMERIC_COLUMNS = ['Age', 'Hours_Per_Day', 'BPM']

BOOLEAN_COLUMNS = [
    'While_Working',
    'Instrumentalist',
    'Composer',
    'Exploratory',
    'Foreign_Languages',
]

FREQUENCY_COLUMNS = [
    'Freq_Classical',
    'Freq_Country',
    'Freq_EDM',
    'Freq_Folk',
    'Freq_Gospel',
    'Freq_Hip_Hop',
    'Freq_Jazz',
    'Freq_K_Pop',
    'Freq_Latin',
    'Freq_Lofi',
    'Freq_Metal',
    'Freq_Pop',
    'Freq_RnB',
    'Freq_Rap',
    'Freq_Rock',
    'Freq_Video_Game',
]

# Multi-valued fields: 16 genres / 6 services. Dropped unless asked for,
# since k-1 indicators per field buy little interpretability on n≈620.
CATEGORICAL_COLUMNS = ['Fav_Genre', 'Streaming_Service']

# 24 model inputs, in the order every coefficient/importance table uses
FEATURE_COLUMNS = NUMERIC_COLUMNS + BOOLEAN_COLUMNS + FREQUENCY_COLUMNS

SYMPTOM_COLUMNS = ['Anxiety', 'Depression', 'Insomnia', 'OCD']
SYMPTOM_RANGE = (0.0, 10.0)

TARGET_COMPOSITE = 'Symptom_Total'
TARGET_MODES = ('composite', 'separate')


def load_raw_dataframe(csv_path: Path) -> pd.DataFrame:
    df = pd.read_csv(csv_path)
    df = df.dropna(how='all')
    df.columns = df.columns.str.strip()
    missing = [col for col in RAW_COL_MAP if col not in df.columns]
    if missing:
        raise MissingColumnsError(f"Survey file {csv_path} lacks columns: {missing}")
    df = df.rename(columns=RAW_COL_MAP)
    return df


def encode_frequency(freq_str) -> float:
    """Map the 4-level listening frequency scale to 0-3."""
    if pd.isna(freq_str):
        return np.nan
    text = str(freq_str).strip()
    if text not in FREQUENCY_LEVELS:
        raise UnrecognizedCategoryError(f"Unrecognized frequency level: {freq_str!r}")
    return FREQUENCY_LEVELS[text]


def encode_yes_no(flag_str) -> float:
    if pd.isna(flag_str):
        return np.nan
    text = str(flag_str).strip()
    if text not in YES_NO_LEVELS:
        raise UnrecognizedCategoryError(f"Unrecognized Yes/No value: {flag_str!r}")
    return YES_NO_LEVELS[text]


def target_columns(mode: str = 'composite') -> List[str]:
    if mode == 'composite':
        return [TARGET_COMPOSITE]
    if mode == 'separate':
        return list(SYMPTOM_COLUMNS)
    raise ValueError(f"Unknown target mode {mode!r}; expected one of {TARGET_MODES}")


def feature_columns(df: pd.DataFrame) -> List[str]:
    """Base features followed by any categorical indicator columns present."""
    indicators = sorted(
        col for col in df.columns
        if any(col.startswith(f'{cat}_') for cat in CATEGORICAL_COLUMNS)
    )
    return FEATURE_COLUMNS + indicators


def needed_columns(expand_categoricals: Sequence[str] = ()) -> List[str]:
    return FEATURE_COLUMNS + list(expand_categoricals) + SYMPTOM_COLUMNS


def _recode_levels(series: pd.Series, levels: Dict[str, int]) -> Tuple[pd.Series, pd.Series]:
    """Vectorised level lookup. Returns (codes, unrecognized_mask)."""
    text = series.astype(str).str.strip()
    codes = text.map(levels)
    unrecognized = series.notna() & codes.isna()
    return codes, unrecognized


def _recode_numeric(series: pd.Series) -> Tuple[pd.Series, pd.Series]:
    values = pd.to_numeric(series, errors='coerce')
    unrecognized = series.notna() & values.isna()
    return values, unrecognized


def _expand_categorical(series: pd.Series, name: str, min_count: int = 1) -> pd.DataFrame:
    """
    k-1 indicator columns; the alphabetically first kept level is the reference.

    Levels with fewer than min_count rows are merged into the reference, since
    such an indicator can be all zero in an outer-training partition.
    """
    clean = series.astype(str).str.strip()
    counts = clean.value_counts()
    rare = sorted(counts.index[counts < min_count])
    if rare:
        kept = sorted(counts.index[counts >= min_count])
        if not kept:
            warnings.warn(f"{name}: every level has fewer than {min_count} rows; field not expanded")
            return pd.DataFrame(index=series.index)
        warnings.warn(f"{name}: merged rare levels {rare} into reference level {kept[0]!r}")
        clean = clean.where(~clean.isin(rare), kept[0])
    dummies = pd.get_dummies(clean, prefix=name, drop_first=True, dtype=int)
    dummies.columns = [col.replace(' ', '_').replace('&', 'n') for col in dummies.columns]
    return dummies[sorted(dummies.columns)]


def build_targets(df: pd.DataFrame, mode: str = 'composite') -> pd.DataFrame:
    """
    Attach the response column(s) for the requested target mode.

    'composite' sums the four 0-10 sub-scores into Symptom_Total (0-40).
    This conflates conditions that may have different predictive structure;
    'separate' keeps the four sub-scores as independent responses instead.
    """
    target_columns(mode)
    df = df.copy()
    if mode == 'composite':
        df[TARGET_COMPOSITE] = df[SYMPTOM_COLUMNS].sum(axis=1)
    return df


def preprocess(
    df: pd.DataFrame,
    expand_categoricals: Sequence[str] = (),
    target_mode: str = 'composite',
    max_reject_fraction: float = config.MAX_REJECT_FRACTION,
    min_level_count: int = config.MIN_CATEGORY_COUNT,
) -> pd.DataFrame:
    """
    Main cleaning pipeline: raw renamed survey table -> numeric working frame.

    Rows with missing needed values are dropped. Rows holding an unrecognized
    category (or an out-of-range symptom score) are rejected with a warning;
    if more than max_reject_fraction of rows would be rejected, the input is
    treated as systemically malformed and UnrecognizedCategoryError is raised.
    Expanded categorical levels with fewer than min_level_count rows are
    merged into the reference level.
    """
    unknown = [col for col in expand_categoricals if col not in CATEGORICAL_COLUMNS]
    if unknown:
        raise ValueError(f"Cannot expand {unknown}; categorical fields are {CATEGORICAL_COLUMNS}")
    target_columns(target_mode)

    required = needed_columns(expand_categoricals)
    df = df.dropna(subset=required).copy()
    if df.empty:
        return _empty_frame(expand_categoricals, target_mode)

    out = pd.DataFrame(index=df.index)
    rejected = pd.Series(False, index=df.index)
    reasons = []

    # === NUMERIC FEATURES ===
    for col in NUMERIC_COLUMNS:
        out[col], bad = _recode_numeric(df[col])
        rejected |= bad
        if bad.any():
            reasons.append((col, df.loc[bad, col].unique().tolist(), int(bad.sum())))

    # === BOOLEAN + ORDINAL FEATURES ===
    for cols, levels in ((BOOLEAN_COLUMNS, YES_NO_LEVELS), (FREQUENCY_COLUMNS, FREQUENCY_LEVELS)):
        for col in cols:
            out[col], bad = _recode_levels(df[col], levels)
            rejected |= bad
            if bad.any():
                reasons.append((col, df.loc[bad, col].unique().tolist(), int(bad.sum())))

    # === SYMPTOM SCORES ===
    low, high = SYMPTOM_RANGE
    for col in SYMPTOM_COLUMNS:
        values, bad = _recode_numeric(df[col])
        bad |= values.notna() & ((values < low) | (values > high))
        out[col] = values
        rejected |= bad
        if bad.any():
            reasons.append((col, df.loc[bad, col].unique().tolist(), int(bad.sum())))

    n_rejected = int(rejected.sum())
    if n_rejected:
        detail = "; ".join(f"{col}: {vals[:5]} ({n} rows)" for col, vals, n in reasons)
        if n_rejected / len(df) > max_reject_fraction:
            raise UnrecognizedCategoryError(
                f"{n_rejected}/{len(df)} rows hold unrecognized values, "
                f"above the {max_reject_fraction:.0%} limit: {detail}"
            )
        warnings.warn(f"Rejected {n_rejected} rows with unrecognized values: {detail}")

    keep = ~rejected
    out = out.loc[keep]

    for col in BOOLEAN_COLUMNS + FREQUENCY_COLUMNS:
        out[col] = out[col].astype('int64')
    for col in NUMERIC_COLUMNS + SYMPTOM_COLUMNS:
        out[col] = out[col].astype('float64')

    # === CATEGORICAL EXPANSION ===
    indicator_frames = [
        _expand_categorical(df.loc[keep, col], col, min_level_count) for col in CATEGORICAL_COLUMNS
        if col in expand_categoricals
    ]
    features = out[FEATURE_COLUMNS]
    if indicator_frames:
        indicators = pd.concat(indicator_frames, axis=1)
        features = pd.concat([features, indicators[sorted(indicators.columns)]], axis=1)

    result = pd.concat([features, out[SYMPTOM_COLUMNS]], axis=1)
    result = build_targets(result, target_mode)
    return result.reset_index(drop=True)


def _empty_frame(expand_categoricals: Sequence[str], target_mode: str) -> pd.DataFrame:
    columns = FEATURE_COLUMNS + SYMPTOM_COLUMNS
    if target_mode == 'composite':
        columns = columns + [TARGET_COMPOSITE]
    return pd.DataFrame(columns=columns, dtype='float64')


def build_regression_frame(
    df: pd.DataFrame,
    target: str = TARGET_COMPOSITE,
    features: Optional[Sequence[str]] = None,
):
    """
    Build regression dataset for one response column.

    Args:
        df: Preprocessed dataframe
        target: Response column (Symptom_Total or one of the sub-scores)
        features: Ordered feature list; defaults to every feature column present
    """
    features = list(features) if features is not None else feature_columns(df)
    required = features + [target]
    df_reg = df.dropna(subset=required).copy()
    X = df_reg[features]
    y_reg = df_reg[target]
    return df_reg, X, y_reg


def load_and_prepare(
    csv_path: Path,
    target_mode: str = 'composite',
    expand_categoricals: Iterable[str] = (),
):
    """Load data and return the working frame, feature matrix and response(s)."""
    df_raw = load_raw_dataframe(csv_path)
    df = preprocess(df_raw, expand_categoricals=tuple(expand_categoricals), target_mode=target_mode)
    X = df[feature_columns(df)]
    targets = {name: df[name] for name in target_columns(target_mode)}
    return df, X, targets


def get_cleaning_report(df_raw: pd.DataFrame, df_clean: pd.DataFrame,
                        expand_categoricals: Sequence[str] = ()) -> Dict[str, object]:
    """
    Summarise what cleaning removed and what the working frame looks like.
    Used in the printed run log to justify the final sample size.
    """
    required = needed_columns(expand_categoricals)
    after_missing = len(df_raw.dropna(subset=required))
    report = {
        'n_raw': len(df_raw),
        'n_dropped_missing': len(df_raw) - after_missing,
        'n_rejected': after_missing - len(df_clean),
        'n_clean': len(df_clean),
        'n_features': len(feature_columns(df_clean)),
        'missing_by_column': {
            col: int(n) for col, n in df_raw[required].isna().sum().items() if n > 0
        },
    }

    report['frequency_counts'] = {
        col: df_clean[col].value_counts().sort_index().to_dict()
        for col in FREQUENCY_COLUMNS if col in df_clean.columns
    }

    if TARGET_COMPOSITE in df_clean.columns:
        report['target_summary'] = df_clean[TARGET_COMPOSITE].describe().to_dict()
    report['symptom_means'] = df_clean[SYMPTOM_COLUMNS].mean().to_dict()

    return report
