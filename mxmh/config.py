"""
Run configuration for the music & mental health regression benchmark.

Every default here can be overridden from the command line of train.py.
"""

from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_PATH = PROJECT_ROOT / "mxmh_survey_results.csv"
OUTPUT_DIR = PROJECT_ROOT / "outputs"

# ============================================================================
# CROSS-VALIDATION PROTOCOL
# ============================================================================

OUTER_FOLDS = 10
INNER_FOLDS = 10
SEED = 1

# 'composite' = sum of the four symptom scores; 'separate' = one run per score
TARGET_MODE = "composite"

# ============================================================================
# DATA CLEANING
# ============================================================================

# Share of rows that may be rejected for unrecognized category values before
# the whole run is treated as a schema problem and aborted.
MAX_REJECT_FRACTION = 0.05

# Levels of an expanded categorical field with fewer respondents than this are
# merged into the reference level before expansion.
MIN_CATEGORY_COUNT = 10

# ============================================================================
# MODEL DEFAULTS
# ============================================================================

SUBSET_METHOD = "forward"
SUBSET_CRITERION = "bic"
MAX_EXHAUSTIVE_SUBSETS = 500_000
# None: all sizes for forward/backward, the largest size under the limit for exhaustive
SUBSET_MAX_SIZE = None

LASSO_N_ALPHAS = 100
LASSO_ALPHA_MIN_RATIO = 1e-3
LASSO_MAX_ITER = 10000

TREE_MIN_SAMPLES_SPLIT = 10
TREE_MIN_SAMPLES_LEAF = 5

RF_N_TREES = 500

GBM_N_TREES = 1000
GBM_LEARNING_RATE = 0.01
GBM_MAX_DEPTH = 4
GBM_SUBSAMPLE = 0.5
GBM_CV_FOLDS = 5

# Reduced ensemble sizes for --quick runs
QUICK_RF_N_TREES = 100
QUICK_GBM_N_TREES = 200
