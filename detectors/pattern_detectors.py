"""
pattern_detectors.py
-------------------------
Concrete pattern detectors. One class per pattern type.

Each detector applies its statistics to a single category's transactions and
follows the same structure:

    1. Guards: if the category lacks signal or the arithmetic would be
       degenerate (zero average, zero spread, zero total), return None.
    2. Statistic: compute the detector's measure with numpy.
    3. Threshold: emit a finding only when the measure crosses its cutoff.

Thresholds and confidence scores are fixed heuristics, kept here as module
constants rather than in config.yaml.
"""

import numpy as np

from core.models import (
    Impact,
    PatternData,
    PatternType,
    TrendDirection,
    VisualizationType,
)
from detectors.base_detector import BasePatternDetector, _Finding


# Trend
TREND_MIN_TRANSACTIONS = 3
TREND_MIN_CHANGE_PCT = 15.0
TREND_HIGH_IMPACT_PCT = 30.0
TREND_CONFIDENCE = 0.85
TREND_PREDICTION_FACTOR = 1.1

# Recurring
RECURRING_HIGH_IMPACT_MEAN_MULTIPLE = 2.0
RECURRING_CONFIDENCE = 0.95

# Anomaly
ANOMALY_STDDEV_MULTIPLE = 2.0
ANOMALY_CRITICAL_MEAN_MULTIPLE = 3.0
ANOMALY_CONFIDENCE = 0.75

# Behavioral
BEHAVIORAL_MIN_DAY_SHARE = 0.3
BEHAVIORAL_CONFIDENCE = 0.7

# Index 0 is Sunday.
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def day_of_week_index(date) -> int:
    """Sunday-based weekday index (0=Sunday ... 6=Saturday)."""
    return (date.weekday() + 1) % 7


# =============================================================================
# TREND
# =============================================================================
class TrendDetector(BasePatternDetector):
    """
    Detects a sustained change in average transaction size.

    Splits the category's transactions, in date order, into two halves (the
    first half takes the smaller share when the count is odd) and compares
    their averages.
    """

    pattern_type = PatternType.TREND
    visualization_type = VisualizationType.LINE
    min_transactions = TREND_MIN_TRANSACTIONS

    def _evaluate(self, category, transactions, timeframe):
        amounts = self._amounts(transactions)
        split = len(amounts) // 2

        first_avg = float(np.mean(amounts[:split]))
        second_avg = float(np.mean(amounts[split:]))

        # Guard: percentage change is undefined against a zero baseline
        if first_avg == 0:
            return None

        change_pct = (second_avg - first_avg) / first_avg * 100
        if abs(change_pct) <= TREND_MIN_CHANGE_PCT:
            return None

        increasing = change_pct > 0
        total = float(np.sum(amounts))
        avg = total / len(amounts)
        name = category.lower()

        if increasing:
            recommendations = (
                f"Consider setting a monthly budget for {name}",
                "Review recent purchases to identify unnecessary expenses",
                "Look for alternative options or discounts",
            )
        else:
            recommendations = (
                "Great job reducing expenses in this category!",
                "Consider reallocating saved money to savings or investments",
                "Maintain this positive trend",
            )

        return _Finding(
            title=f"{category} Spending {'Increasing' if increasing else 'Decreasing'}",
            description=(
                f"Your {name} expenses have {'increased' if increasing else 'decreased'} "
                f"by {abs(change_pct):.1f}% over the selected {timeframe.value}."
            ),
            confidence=TREND_CONFIDENCE,
            impact=Impact.HIGH if abs(change_pct) > TREND_HIGH_IMPACT_PCT else Impact.MEDIUM,
            data=PatternData(
                amount=total,
                percentage=change_pct,
                trend=TrendDirection.INCREASING if increasing else TrendDirection.DECREASING,
                prediction=second_avg * TREND_PREDICTION_FACTOR,
            ),
            insights=(
                f"Average {name} spending: {self._money(avg)}",
                f"Total transactions: {len(amounts)}",
                f"Trend direction: {'Upward' if increasing else 'Downward'}",
            ),
            recommendations=recommendations,
            evidence=transactions,
        )


# =============================================================================
# RECURRING
# =============================================================================
class RecurringDetector(BasePatternDetector):
    """
    Aggregates transactions flagged as recurring upstream.

    Recurrence itself is not inferred here; the detector only sums what the
    transaction source already marked.
    """

    pattern_type = PatternType.RECURRING
    visualization_type = VisualizationType.BAR

    def _evaluate(self, category, transactions, timeframe):
        recurring = [t for t in transactions if t.is_recurring]
        if not recurring:
            return None

        amounts = self._amounts(transactions)
        total = float(np.sum(amounts))
        mean = float(np.mean(amounts))
        recurring_amount = float(np.sum(self._amounts(recurring)))
        share_pct = recurring_amount / total * 100 if total > 0 else 0.0
        name = category.lower()

        return _Finding(
            title=f"Regular {category} Expenses",
            description=(
                f"You have {len(recurring)} recurring {name} expenses totaling "
                f"{self._money(recurring_amount)} per {timeframe.value}."
            ),
            confidence=RECURRING_CONFIDENCE,
            impact=(
                Impact.HIGH
                if recurring_amount > RECURRING_HIGH_IMPACT_MEAN_MULTIPLE * mean
                else Impact.MEDIUM
            ),
            data=PatternData(
                amount=recurring_amount,
                frequency="monthly",
                percentage=share_pct,
            ),
            insights=(
                f"Recurring expenses: {len(recurring)} transactions",
                f"Average recurring amount: {self._money(recurring_amount / len(recurring))}",
                f"Percentage of total {name} spending: {share_pct:.1f}%",
            ),
            recommendations=(
                "Review all recurring subscriptions and memberships",
                "Cancel unused or underutilized services",
                "Negotiate better rates for essential services",
                "Consider annual payments for discounts",
            ),
            evidence=tuple(recurring),
        )


# =============================================================================
# ANOMALY
# =============================================================================
class AnomalyDetector(BasePatternDetector):
    """
    Flags transactions more than two population standard deviations from
    the category mean and reports the largest one.
    """

    pattern_type = PatternType.ANOMALY
    visualization_type = VisualizationType.SCATTER

    def _evaluate(self, category, transactions, timeframe):
        amounts = self._amounts(transactions)
        mean = float(np.mean(amounts))
        stddev = float(np.std(amounts))     # ddof=0: population

        # Guard: all amounts identical
        if stddev == 0:
            return None

        cutoff = ANOMALY_STDDEV_MULTIPLE * stddev
        anomalies = [t for t in transactions if abs(t.amount - mean) > cutoff]
        if not anomalies:
            return None

        # Largest amount wins; earliest date, then id, on ties.
        largest = min(anomalies, key=lambda t: (-t.amount, t.date, t.id))
        above_pct = (largest.amount - mean) / mean * 100
        name = category.lower()

        return _Finding(
            title=f"Unusual {category} Expense Detected",
            description=(
                f"Found {len(anomalies)} unusual {name} transaction(s). "
                f"The largest was {self._money(largest.amount)} on {largest.date:%Y-%m-%d}."
            ),
            confidence=ANOMALY_CONFIDENCE,
            impact=(
                Impact.CRITICAL
                if largest.amount > ANOMALY_CRITICAL_MEAN_MULTIPLE * mean
                else Impact.HIGH
            ),
            data=PatternData(
                amount=largest.amount,
                percentage=above_pct,
                comparison=f"{above_pct:.1f}% above average",
            ),
            insights=(
                f"Average {name} expense: {self._money(mean)}",
                f"Unusual transaction: {self._money(largest.amount)}",
                f"Merchant: {largest.merchant or 'Unknown'}",
                f"Description: {largest.description}",
            ),
            recommendations=(
                "Verify this transaction is legitimate",
                "Check if this was a one-time purchase or error",
                "Consider if this expense was necessary",
                "Set up alerts for large transactions",
            ),
            evidence=tuple(anomalies),
        )


# =============================================================================
# BEHAVIORAL
# =============================================================================
class BehavioralDetector(BasePatternDetector):
    """
    Detects spending concentrated on one weekday.

    Ties between weekdays go to the lowest day index (Sunday first).
    """

    pattern_type = PatternType.BEHAVIORAL
    visualization_type = VisualizationType.HEATMAP

    def _evaluate(self, category, transactions, timeframe):
        amounts = self._amounts(transactions)
        total = float(np.sum(amounts))

        # Guard: nothing spent
        if total <= 0:
            return None

        days = np.array([day_of_week_index(t.date) for t in transactions], dtype=int)
        day_totals = np.bincount(days, weights=amounts, minlength=7)

        # argmax returns the first maximum, i.e. the lowest day index
        peak_day = int(np.argmax(day_totals))
        peak_amount = float(day_totals[peak_day])
        if peak_amount <= BEHAVIORAL_MIN_DAY_SHARE * total:
            return None

        day_name = DAY_NAMES[peak_day]
        share_pct = peak_amount / total * 100
        name = category.lower()

        return _Finding(
            title=f"{category} Spending Peak on {day_name}",
            description=(
                f"You tend to spend most on {name} on {day_name}s, accounting for "
                f"{share_pct:.1f}% of your total {name} expenses."
            ),
            confidence=BEHAVIORAL_CONFIDENCE,
            impact=Impact.MEDIUM,
            data=PatternData(
                amount=peak_amount,
                percentage=share_pct,
                frequency="weekly",
            ),
            insights=(
                f"Peak spending day: {day_name}",
                f"Amount on peak day: {self._money(peak_amount)}",
                f"Percentage of total: {share_pct:.1f}%",
            ),
            recommendations=(
                f"Be mindful of {name} spending on {day_name}s",
                "Set a daily spending limit for this category",
                "Plan purchases in advance to avoid impulse buying",
                "Consider shopping on different days for better deals",
            ),
            evidence=tuple(
                t for t in transactions if day_of_week_index(t.date) == peak_day
            ),
        )


# =============================================================================
# DETECTOR REGISTRY
# =============================================================================
# Insertion order is the per-category run order.

DETECTOR_REGISTRY: dict[PatternType, type[BasePatternDetector]] = {
    PatternType.TREND: TrendDetector,
    PatternType.RECURRING: RecurringDetector,
    PatternType.ANOMALY: AnomalyDetector,
    PatternType.BEHAVIORAL: BehavioralDetector,
}


def get_all_detectors(currency_symbol: str | None = None) -> list[BasePatternDetector]:
    """Instantiates and returns all registered detectors, in run order."""
    return [cls(currency_symbol) for cls in DETECTOR_REGISTRY.values()]
