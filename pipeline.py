"""
pipeline.py
------------
Main orchestration layer. Wires together:
    1. Category grouping     →  one transaction group per category
    2. Pattern detectors     →  trend, recurring, anomaly, behavioral per group
    3. Ranking               →  type filter + selected sort key
    4. Output serialization  →  flat DataFrame for CSV export

This is the single entry point for running the engine. Everything else
is internal machinery.

Usage:
    from pipeline import SpendingPatternPipeline

    pipeline = SpendingPatternPipeline()
    patterns = pipeline.run(transactions, timeframe="month", sort_by="impact")
"""

from collections import Counter
import logging
import pandas as pd
from typing import Iterable, List

from core.grouping import group_by_category
from core.models import Pattern, PatternType, SortKey, Timeframe, Transaction
from core.ranking import rank_patterns
from detectors.pattern_detectors import get_all_detectors
from config.config_loader import get_analysis_config

logger = logging.getLogger(__name__)


OUTPUT_COLUMNS = [
    "pattern_id", "type", "category", "title", "description",
    "confidence", "impact", "timeframe",
    "amount", "percentage", "frequency", "trend", "prediction", "comparison",
    "insights", "recommendations", "visualization_type",
    "evidence_transaction_ids", "last_activity",
]


class SpendingPatternPipeline:
    """
    End-to-end spending pattern analysis.

    Holds only read-only settings and stateless detectors, so a single
    instance can be shared across requests. Every run() is a complete,
    fresh recomputation over its own snapshot of the input.
    """

    def __init__(self, currency_symbol: str | None = None):
        """
        Args:
            currency_symbol: Override the display currency from config.
        """
        self.config = get_analysis_config()
        self.detectors = get_all_detectors(currency_symbol)

        logger.info(
            f"Pipeline initialized. "
            f"Detectors: {[d.pattern_type.value for d in self.detectors]}. "
            f"Default sort: {self.config['default_sort_by']}."
        )

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def run(
        self,
        transactions: Iterable[Transaction],
        timeframe: Timeframe | str | None = None,
        pattern_type: PatternType | str | None = None,
        sort_by: SortKey | str | None = None,
    ) -> List[Pattern]:
        """
        Run the full analysis: detect, then filter and sort.

        Args:
            transactions: Validated transactions for one analysis window.
            timeframe: Window label echoed into each pattern. Defaults to config.
            pattern_type: "all" or a PatternType value. Defaults to config.
            sort_by: SortKey value. Defaults to config.

        Returns:
            Ranked list of patterns.
        """
        pattern_type = pattern_type or self.config["default_pattern_type"]
        sort_by = sort_by or self.config["default_sort_by"]

        patterns = self.analyze(transactions, timeframe)

        ranked = rank_patterns(patterns, pattern_type=pattern_type, sort_by=sort_by)
        logger.info(
            f"Ranking complete. Filter: {pattern_type}. Sort: {SortKey(sort_by).value}. "
            f"Output: {len(ranked):,} of {len(patterns):,} patterns."
        )
        return ranked

    def analyze(
        self,
        transactions: Iterable[Transaction],
        timeframe: Timeframe | str | None = None,
    ) -> List[Pattern]:
        """
        Run only detection (no filter, no sort). Useful for summary counts,
        which are taken over every pattern regardless of the active filter.

        Categories are visited in sorted key order and detectors in their
        fixed order, so the result depends only on the transactions
        themselves, not on the order they arrive in.

        Raises:
            ValueError: If two transactions share an id, or the timeframe is unknown.
        """
        timeframe = Timeframe(timeframe or self.config["default_timeframe"])
        snapshot = tuple(transactions)
        id_counts = Counter(t.id for t in snapshot)
        dup_ids = sorted(txn_id for txn_id, count in id_counts.items() if count > 1)
        if dup_ids:
            raise ValueError(f"Duplicate transaction ids: {dup_ids}")
        logger.info(f"Analysis starting. Input: {len(snapshot):,} transactions. Timeframe: {timeframe.value}.")

        # --- Stage 1: Group by category ---
        groups = group_by_category(snapshot)
        logger.info(f"Stage 1 complete. Categories: {len(groups):,}.")

        # --- Stage 2: Run every detector on every category ---
        patterns: List[Pattern] = []
        for category in sorted(groups):
            group = groups[category]
            for detector in self.detectors:
                pattern = detector.detect(category, group, timeframe)
                if pattern is not None:
                    patterns.append(pattern)
                    logger.debug(
                        f"{category}: {pattern.type.value} pattern "
                        f"(impact={pattern.impact.value}, confidence={pattern.confidence:.2f})."
                    )
        logger.info(f"Stage 2 complete. Patterns: {len(patterns):,}.")

        return patterns

    # -------------------------------------------------------------------------
    # OUTPUT SERIALIZATION
    # -------------------------------------------------------------------------

    @staticmethod
    def to_dataframe(patterns: Iterable[Pattern]) -> pd.DataFrame:
        """
        Flattens patterns into a DataFrame, one row per pattern, in the
        order given. List fields are joined with " | ".
        """
        patterns = list(patterns)
        if not patterns:
            return pd.DataFrame(columns=OUTPUT_COLUMNS)

        rows = []
        for p in patterns:
            rows.append({
                "pattern_id": p.id,
                "type": p.type.value,
                "category": p.category,
                "title": p.title,
                "description": p.description,
                "confidence": p.confidence,
                "impact": p.impact.value,
                "timeframe": p.timeframe.value,
                "amount": p.data.amount,
                "percentage": round(p.data.percentage, 2) if p.data.percentage is not None else None,
                "frequency": p.data.frequency,
                "trend": p.data.trend.value if p.data.trend is not None else None,
                "prediction": round(p.data.prediction, 2) if p.data.prediction is not None else None,
                "comparison": p.data.comparison,
                "insights": " | ".join(p.insights),
                "recommendations": " | ".join(p.recommendations),
                "visualization_type": p.visualization_type.value,
                "evidence_transaction_ids": "|".join(p.evidence_transaction_ids),
                "last_activity": p.last_activity.strftime("%Y-%m-%d") if p.last_activity else None,
            })

        return pd.DataFrame(rows, columns=OUTPUT_COLUMNS)
