"""
base_detector.py
------------------
Abstract base class for all spending pattern detectors.

Each concrete detector (trend, recurring, anomaly, behavioral) inherits from
this. Pattern construction and evidence bookkeeping live here so they are
never duplicated.

Concrete detectors only need to implement:
    - _evaluate(): detector-specific statistics. Returns a _Finding or None.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from core.models import (
    Impact,
    Pattern,
    PatternData,
    PatternType,
    Timeframe,
    Transaction,
    VisualizationType,
)
from config.config_loader import get_currency_symbol


@dataclass(frozen=True)
class _Finding:
    """Everything a detector decides. The base class turns it into a Pattern."""
    title: str
    description: str
    confidence: float
    impact: Impact
    data: PatternData
    insights: tuple
    recommendations: tuple
    evidence: tuple                  # Transactions that support the finding.


class BasePatternDetector(ABC):
    """
    Abstract base for pattern detectors.

    Detectors are stateless: detect() reads one category's transactions and
    returns at most one Pattern. Nothing on the instance changes between
    calls, so one instance can serve any number of concurrent analyses.
    """

    pattern_type: PatternType
    visualization_type: VisualizationType
    min_transactions: int = 1

    def __init__(self, currency_symbol: str | None = None):
        self.currency_symbol = currency_symbol if currency_symbol is not None else get_currency_symbol()

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def detect(
        self,
        category: str,
        transactions: Sequence[Transaction],
        timeframe: Timeframe | str = Timeframe.MONTH,
    ) -> Pattern | None:
        """
        Look for this detector's pattern in one category.

        Returns:
            Pattern if the category carries enough signal, None otherwise.
            "No pattern" is an expected outcome, not an error.
        """
        timeframe = Timeframe(timeframe)

        # Step 1: Size gate
        if len(transactions) < self.min_transactions:
            return None

        # Step 2: Detector-specific statistics, always over date order so the
        # result never depends on the order transactions arrive in
        finding = self._evaluate(category, tuple(self._chronological(transactions)), timeframe)
        if finding is None:
            return None

        # Step 3: Build the value object
        evidence = finding.evidence
        return Pattern(
            id=f"{self.pattern_type.value}-{category}",
            type=self.pattern_type,
            category=category,
            title=finding.title,
            description=finding.description,
            confidence=finding.confidence,
            impact=finding.impact,
            timeframe=timeframe,
            data=finding.data,
            insights=finding.insights,
            recommendations=finding.recommendations,
            visualization_type=self.visualization_type,
            evidence_transaction_ids=tuple(t.id for t in evidence),
            last_activity=max(t.date for t in evidence) if evidence else None,
        )

    # -------------------------------------------------------------------------
    # ABSTRACT METHODS: implement in each detector
    # -------------------------------------------------------------------------

    @abstractmethod
    def _evaluate(
        self, category: str, transactions: tuple, timeframe: Timeframe
    ) -> _Finding | None:
        """
        Run the detector's statistics over one category. `transactions` is
        already sorted by (date, id).

        Returns:
            _Finding if a pattern was found, None if the category fails a
            threshold or a degenerate-arithmetic guard.
        """
        ...

    # -------------------------------------------------------------------------
    # SHARED HELPERS
    # -------------------------------------------------------------------------

    @staticmethod
    def _amounts(transactions: Sequence[Transaction]) -> np.ndarray:
        return np.array([t.amount for t in transactions], dtype=float)

    @staticmethod
    def _chronological(transactions: Sequence[Transaction]) -> list:
        """Sorted by date; id breaks ties so the order never depends on input order."""
        return sorted(transactions, key=lambda t: (t.date, t.id))

    def _money(self, amount: float) -> str:
        """Formats an amount for generated text, e.g. ฿1,234.50."""
        return f"{self.currency_symbol}{amount:,.2f}"
