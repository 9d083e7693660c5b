"""
===============================================================================
LOGSUM BENCH - Default Parameters
===============================================================================
Central repository for the defaults used by the summation engine, the
benchmark harness and the command line entry point.  Config files and CLI
flags override these values; nothing here is mutated at runtime.

Times are in seconds throughout.
===============================================================================
"""

import numpy as np


# =============================================================================
# NUMERIC CONSTANTS
# =============================================================================
FLOAT_DTYPE = np.float64
INDEX_DTYPE = np.int64

# Cross-variant agreement: |v_i - v_ref| <= RELATIVE_TOLERANCE * scale,
# where scale = max(sum(|log x|), 1).
RELATIVE_TOLERANCE = 1e-9

# Sign pattern recycled over the input: +1 for odd 1-based positions.
SIGN_PATTERN = (1.0, -1.0)

# =============================================================================
# BENCHMARK DEFAULTS
# =============================================================================
DEFAULT_N = 50_000                     # Length of the 1..N input sequence
DEFAULT_REPLICATIONS = 20              # Timed calls per variant
DEFAULT_WARMUP = 1                     # Untimed calls per variant (JIT compile)
DEFAULT_SCALING_SIZES = (1_000, 5_000, 10_000, 50_000, 100_000)
DEFAULT_SCALING_REPLICATIONS = 5
QUICK_N = 5_000
QUICK_REPLICATIONS = 3

# =============================================================================
# PROFILER DEFAULTS
# =============================================================================
PROFILE_INTERVAL = 0.001               # Sampling period (1 ms)
PROFILE_REPLICATIONS = 50
PROFILE_TOP = 10                       # Rows shown per table

# =============================================================================
# OUTPUT
# =============================================================================
DEFAULT_OUTPUT_DIR = "benchmark_results"
DEFAULT_CONFIG_PATH = "config/benchmark_config.yaml"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
