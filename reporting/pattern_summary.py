"""
pattern_summary.py
-------------------
Headline counts for the presentation layer, computed straight from a
pattern list. A convenience on top of the engine, not part of detection.
"""

from dataclasses import dataclass, field
from typing import Iterable

from core.models import Impact, Pattern, PatternType, TrendDirection
from config.config_loader import get_analysis_config


@dataclass
class PatternSummary:
    """Aggregate counts over one analysis result."""
    total_patterns: int = 0
    critical_patterns: int = 0
    high_confidence_patterns: int = 0
    trending_up: int = 0
    trending_down: int = 0
    by_type: dict = field(default_factory=dict)      # PatternType value -> count
    by_impact: dict = field(default_factory=dict)    # Impact value -> count


def summarize_patterns(patterns: Iterable[Pattern], high_confidence_threshold: float | None = None) -> PatternSummary:
    """
    Count patterns by impact, confidence and trend direction.

    Args:
        patterns: Usually the unfiltered analysis result.
        high_confidence_threshold: Strict lower bound for "high confidence".
            Defaults to analysis.high_confidence_threshold from config.
    """
    if high_confidence_threshold is None:
        high_confidence_threshold = get_analysis_config()["high_confidence_threshold"]

    patterns = list(patterns)
    return PatternSummary(
        total_patterns=len(patterns),
        critical_patterns=sum(1 for p in patterns if p.impact == Impact.CRITICAL),
        high_confidence_patterns=sum(1 for p in patterns if p.confidence > high_confidence_threshold),
        trending_up=sum(1 for p in patterns if p.data.trend == TrendDirection.INCREASING),
        trending_down=sum(1 for p in patterns if p.data.trend == TrendDirection.DECREASING),
        by_type={t.value: sum(1 for p in patterns if p.type == t) for t in PatternType},
        by_impact={i.value: sum(1 for p in patterns if p.impact == i) for i in Impact},
    )
