#!/usr/bin/env python3
"""
===============================================================================
LOGSUM BENCH - MAIN ENTRY POINT
===============================================================================
Compares five implementations of the alternating-sign sum of logarithms

    S(ind) = log(ind[1]) - log(ind[2]) + log(ind[3]) - ...

on the input 1..N, checks that they agree, times them, and optionally profiles
the slow one to show where its time goes.

USAGE:
    python main.py                        # Equivalence check + comparison table
    python main.py --n 100000             # Larger input
    python main.py --variants loop,fill   # Subset of variants
    python main.py --scaling              # Also run the scaling study
    python main.py --profile replicate    # Sampling profile of one variant
    python main.py --report               # CSVs, plots and report.md
    python main.py --quick                # Small input, few replications

OUTPUTS (under --output-dir, default benchmark_results/):
    benchmark.log      - Run log
    comparison.csv     - Variant comparison table
    memory.csv         - Peak traced memory per variant        (--report)
    scaling.csv/.png   - Mean time vs n per variant            (--scaling)
    relative_bar.png   - Relative mean time per variant        (--report)
    report.md          - Markdown summary                      (--report)

DEPENDENCIES:
    numpy, numba, pandas, matplotlib, pyyaml
===============================================================================
"""

import sys
import os
import argparse
import copy
import logging
from pathlib import Path
from datetime import datetime

import yaml

# ---------------------------------------------------------------------------
# Path setup: ensure all project modules are importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.constants import (
    DEFAULT_CONFIG_PATH, DEFAULT_N, DEFAULT_OUTPUT_DIR, DEFAULT_REPLICATIONS,
    DEFAULT_SCALING_REPLICATIONS, DEFAULT_SCALING_SIZES, DEFAULT_WARMUP,
    LOG_FORMAT, PROFILE_INTERVAL, PROFILE_REPLICATIONS, QUICK_N,
    QUICK_REPLICATIONS, RELATIVE_TOLERANCE,
)
from core.exceptions import LogSumError
from summation import VARIANTS, check_equivalence, get_variants, make_input_sequence
from performance.benchmarks import Benchmark, format_table
from performance.profiler import format_summary, profile_variant

logger = logging.getLogger('LOGSUM_MAIN')

DEFAULT_CONFIG = {
    'benchmark': {
        'n': DEFAULT_N,
        'replications': DEFAULT_REPLICATIONS,
        'warmup': DEFAULT_WARMUP,
        'variants': list(VARIANTS),
    },
    'scaling': {
        'sizes': list(DEFAULT_SCALING_SIZES),
        'replications': DEFAULT_SCALING_REPLICATIONS,
    },
    'profiler': {
        'variant': 'replicate',
        'interval': PROFILE_INTERVAL,
        'replications': PROFILE_REPLICATIONS,
    },
    'equivalence': {'rtol': RELATIVE_TOLERANCE},
    'output': {'directory': DEFAULT_OUTPUT_DIR},
    'logging': {'level': 'INFO'},
}


def _merge(base: dict, override: dict) -> dict:
    """Recursively overlay *override* on a copy of *base*."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str = None) -> dict:
    """
    Load benchmark configuration from a YAML file over the built-in defaults.

    Args:
        config_path: Path to YAML config.  Defaults to
            config/benchmark_config.yaml next to the source tree; if that
            file does not exist the built-in defaults are used.

    Returns:
        Dictionary of benchmark configuration parameters
    """
    if config_path is None:
        default_path = PROJECT_ROOT.parent / DEFAULT_CONFIG_PATH
        if not default_path.exists():
            return copy.deepcopy(DEFAULT_CONFIG)
        config_path = str(default_path)

    with open(config_path, 'r') as f:
        user_config = yaml.safe_load(f) or {}
    if not isinstance(user_config, dict):
        raise ValueError(f"{config_path}: expected a mapping at the top level")
    return _merge(DEFAULT_CONFIG, user_config)


def setup_logging(level: str, output_dir: str) -> None:
    """Log to stdout and to benchmark.log in the output directory."""
    os.makedirs(output_dir, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(os.path.join(output_dir, 'benchmark.log'), mode='w'),
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Benchmark five implementations of the alternating-sign log sum',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                        Comparison on 1..50000
  python main.py --quick                Quick run
  python main.py --profile replicate    Where does 'replicate' spend its time?
  python main.py --report --scaling     Everything, with plots and report
        """
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Path to benchmark config YAML')
    parser.add_argument('--n', type=int, default=None,
                        help='Input length (sequence 1..N)')
    parser.add_argument('--replications', type=int, default=None,
                        help='Timed calls per variant')
    parser.add_argument('--variants', type=str, default=None,
                        help=f"Comma-separated subset of: {', '.join(VARIANTS)}")
    parser.add_argument('--scaling', action='store_true',
                        help='Run the scaling study over several input sizes')
    parser.add_argument('--profile', nargs='?', const='', default=None, metavar='VARIANT',
                        help='Sampling-profile one variant (default from config)')
    parser.add_argument('--report', action='store_true',
                        help='Write CSVs, plots and report.md')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Directory for results and the log file')
    parser.add_argument('--quick', action='store_true',
                        help=f'Quick mode (n={QUICK_N}, {QUICK_REPLICATIONS} replications)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Debug logging')
    return parser


def main(argv=None) -> int:
    """
    Main entry point.  Parses command line arguments, runs the requested
    benchmarks and returns the process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    bench_cfg = config['benchmark']
    scaling_cfg = config['scaling']
    profile_cfg = config['profiler']

    n = bench_cfg['n']
    replications = bench_cfg['replications']
    scaling_reps = scaling_cfg['replications']
    sizes = list(scaling_cfg['sizes'])
    if args.quick:
        n = QUICK_N
        replications = QUICK_REPLICATIONS
        scaling_reps = QUICK_REPLICATIONS
        sizes = [s for s in sizes if s <= QUICK_N] or [QUICK_N]
    if args.n is not None:
        n = args.n
    if args.replications is not None:
        replications = args.replications
    if n < 0:
        parser.error(f"n must be >= 0, got {n}")
    if replications < 1:
        parser.error(f"replications must be >= 1, got {replications}")

    names = args.variants.split(',') if args.variants else bench_cfg['variants']
    try:
        variants = get_variants(name.strip() for name in names)
    except KeyError as exc:
        parser.error(exc.args[0])

    profile_name = None
    if args.profile is not None:
        profile_name = args.profile or profile_cfg['variant']
        if profile_name not in VARIANTS:
            parser.error(f"unknown variant '{profile_name}' for --profile")

    output_dir = args.output_dir or config['output']['directory']
    setup_logging('DEBUG' if args.verbose else config['logging']['level'], output_dir)

    print("=" * 70)
    print("  ALTERNATING LOG-SUM BENCHMARK")
    print(f"  Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"  n = {n:,}   replications = {replications}   variants = {', '.join(variants)}")
    print("=" * 70)

    try:
        seq = make_input_sequence(n)

        agreement = check_equivalence(seq, variants, rtol=config['equivalence']['rtol'])
        print("\n=== Results ===")
        print(agreement.to_string(float_format=lambda v: f"{v:.12g}"))

        if args.report:
            Benchmark.run_all_benchmarks(
                variants,
                output_dir=output_dir,
                n=n,
                replications=replications,
                warmup=bench_cfg['warmup'],
                sizes=sizes if args.scaling else None,
                scaling_replications=scaling_reps,
            )
            Benchmark.generate_report(output_dir)
        else:
            comparison = Benchmark.compare_variants(
                variants, seq, replications=replications, warmup=bench_cfg['warmup']
            )
            comparison.to_csv(os.path.join(output_dir, 'comparison.csv'), index=False)
            print(f"\n=== Variant comparison (n = {n:,}) ===")
            print(format_table(comparison))

            if args.scaling:
                scaling = Benchmark.scaling_study(
                    variants, sizes=sizes, replications=scaling_reps, warmup=bench_cfg['warmup']
                )
                scaling.to_csv(os.path.join(output_dir, 'scaling.csv'), index=False)
                print("\n=== Scaling (mean seconds per call) ===")
                print(scaling.pivot(index='n', columns='expression', values='mean').to_string())

        if profile_name:
            summary = profile_variant(
                VARIANTS[profile_name],
                seq,
                replications=profile_cfg['replications'],
                interval=profile_cfg['interval'],
            )
            print(f"\n=== Sampling profile: {profile_name} ===")
            print(format_summary(summary))
    except LogSumError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return 1

    logger.info("Results saved to %s", os.path.abspath(output_dir))
    return 0


if __name__ == '__main__':
    sys.exit(main())
