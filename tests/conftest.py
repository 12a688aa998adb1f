import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Ensure repository root is on sys.path so tests can import local modules
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mxmh.data_prep import FREQUENCY_LEVELS, RAW_COL_MAP  # noqa: E402

RAW_NAME = {clean: raw for raw, clean in RAW_COL_MAP.items()}
GENRES = ['Classical', 'Metal', 'Pop', 'Rock', 'Video game music']
SERVICES = ['Apple Music', 'Pandora', 'Spotify', 'YouTube Music']


def make_raw_survey(n: int = 60, seed: int = 0) -> pd.DataFrame:
    """Synthetic survey export with the real header layout."""
    rng = np.random.default_rng(seed)
    levels = list(FREQUENCY_LEVELS)
    data = {
        'Timestamp': [f'8/27/2022 19:{i % 60:02d}:00' for i in range(n)],
        RAW_NAME['Age']: rng.integers(14, 70, n),
        RAW_NAME['Streaming_Service']: rng.choice(SERVICES, n),
        RAW_NAME['Hours_Per_Day']: np.round(rng.uniform(0, 12, n), 1),
        RAW_NAME['While_Working']: rng.choice(['Yes', 'No'], n),
        RAW_NAME['Instrumentalist']: rng.choice(['Yes', 'No'], n),
        RAW_NAME['Composer']: rng.choice(['Yes', 'No'], n),
        RAW_NAME['Fav_Genre']: rng.choice(GENRES, n),
        RAW_NAME['Exploratory']: rng.choice(['Yes', 'No'], n),
        RAW_NAME['Foreign_Languages']: rng.choice(['Yes', 'No'], n),
        RAW_NAME['BPM']: rng.integers(60, 180, n).astype(float),
    }
    for raw, clean in RAW_COL_MAP.items():
        if clean.startswith('Freq_'):
            data[raw] = rng.choice(levels, n)
    for col in ['Anxiety', 'Depression', 'Insomnia', 'OCD']:
        data[col] = rng.integers(0, 11, n).astype(float)
    data['Music effects'] = rng.choice(['Improve', 'No effect', 'Worsen'], n)
    data['Permissions'] = 'I understand.'
    return pd.DataFrame(data)


@pytest.fixture
def raw_survey() -> pd.DataFrame:
    return make_raw_survey()


@pytest.fixture
def survey_csv(tmp_path) -> Path:
    path = tmp_path / 'mxmh_survey_results.csv'
    make_raw_survey(90, seed=3).to_csv(path, index=False)
    return path


def make_linear_data(n: int = 100, p: int = 5, noise_sd: float = 0.5, seed: int = 0,
                     coef=None):
    rng = np.random.default_rng(seed)
    X = pd.DataFrame(rng.normal(size=(n, p)), columns=[f'x{i}' for i in range(p)])
    beta = np.arange(1, p + 1, dtype=float) if coef is None else np.asarray(coef, dtype=float)
    y = 2.0 + X.to_numpy() @ beta + rng.normal(scale=noise_sd, size=n)
    return X, pd.Series(y, name='y')


@pytest.fixture
def linear_data():
    return make_linear_data()
