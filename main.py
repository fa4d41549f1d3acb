"""
main.py
--------
Entry point for the Spending Pattern Analysis Engine.

Reads a transactions CSV, runs the pattern analysis, and writes the ranked
patterns to the outputs/ folder.

Usage (from the project root):
    python main.py --input path/to/transactions.csv

    # With optional arguments:
    python main.py --input txns.csv --timeframe quarter
    python main.py --input txns.csv --type anomaly --sort-by confidence
"""

import sys
import os
import argparse
import logging
from datetime import datetime

# Ensure project root is on path (for runs from any working directory)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from pipeline import SpendingPatternPipeline
from core.models import PatternType, SortKey, Timeframe
from core.ranking import ALL_TYPES, rank_patterns
from core.transaction_source import load_transactions_csv
from config.config_loader import get_analysis_config, get_output_config
from reporting.pattern_summary import summarize_patterns


# =============================================================================
# LOGGING SETUP
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("main")


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def parse_args(argv=None) -> argparse.Namespace:
    defaults = get_analysis_config()
    parser = argparse.ArgumentParser(
        description="Spending Pattern Analysis Engine. Detects trends, recurring charges, anomalies and weekday skew."
    )
    parser.add_argument(
        "--input", type=str, required=True,
        help="Path to input transactions CSV."
    )
    parser.add_argument(
        "--timeframe", type=str, default=defaults["default_timeframe"],
        choices=[t.value for t in Timeframe],
        help="Window label echoed into each pattern. The input is not filtered by date."
    )
    parser.add_argument(
        "--type", dest="pattern_type", type=str, default=defaults["default_pattern_type"],
        choices=[ALL_TYPES] + [t.value for t in PatternType],
        help="Only output patterns of this type. Default: all."
    )
    parser.add_argument(
        "--sort-by", type=str, default=defaults["default_sort_by"],
        choices=[k.value for k in SortKey],
        help="Sort key for the output. Default: impact."
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Output directory. Defaults to outputs/ in project root."
    )
    parser.add_argument(
        "--verbose", action="store_true", default=False,
        help="Log per-category detector results."
    )
    return parser.parse_args(argv)


# =============================================================================
# MAIN
# =============================================================================

def main(argv=None):
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # --- Resolve paths ---
    output_dir = args.output_dir or os.path.join(PROJECT_ROOT, get_output_config()["directory"])
    os.makedirs(output_dir, exist_ok=True)

    # --- Load transactions ---
    logger.info(f"Loading transactions from: {args.input}")
    if not os.path.exists(args.input):
        logger.error(f"Input file not found: {args.input}")
        sys.exit(1)

    try:
        transactions = load_transactions_csv(args.input)
    except ValueError as exc:
        logger.error(f"Rejected input: {exc}")
        sys.exit(1)
    logger.info(
        f"Loaded {len(transactions):,} transactions, "
        f"{len({t.category for t in transactions}):,} categories."
    )

    # --- Run pipeline ---
    pipeline = SpendingPatternPipeline()
    all_patterns = pipeline.analyze(transactions, timeframe=args.timeframe)
    ranked = rank_patterns(all_patterns, pattern_type=args.pattern_type, sort_by=args.sort_by)

    # --- Output: Patterns ---
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    patterns_path = os.path.join(output_dir, f"patterns_{timestamp}.csv")
    pipeline.to_dataframe(ranked).to_csv(patterns_path, index=False)
    logger.info(f"Patterns saved to: {patterns_path}")

    # --- Print summary ---
    _print_summary(ranked, all_patterns)


def _print_summary(ranked, all_patterns):
    """Prints a clean summary table to the console."""
    if not all_patterns:
        print("\n  Not enough transaction data to identify meaningful patterns.\n")
        return

    summary = summarize_patterns(all_patterns)

    print("\n" + "=" * 80)
    print("  SPENDING PATTERN SUMMARY")
    print("=" * 80)

    print(f"\n  Patterns found: {summary.total_patterns}  "
          f"(critical: {summary.critical_patterns}, high confidence: {summary.high_confidence_patterns}, "
          f"trending up: {summary.trending_up}, trending down: {summary.trending_down})")

    print("\n  By Type:")
    print("  " + "-" * 60)
    for pattern_type, count in summary.by_type.items():
        if count:
            print(f"    {pattern_type:15s}  {count:>5,}")

    print(f"\n  Showing {len(ranked)} of {summary.total_patterns} patterns:")
    print("  " + "-" * 60)
    for p in ranked:
        print(f"    [{p.impact.value:8s}] {p.confidence:.2f}  {p.title}")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    main()
