"""
models.py
----------
Core domain models. These are the typed contracts between engine layers.

- Transaction: A validated, categorized spending record. Input to the engine.
  Never mutated by any detector.

- Pattern: Output of a detector. One explained observation about spending
  behaviour in a single category, consumed by the presentation layer.

- PatternAction: The (action_type, payload) pair handed to the external
  action dispatcher from a pattern's detail view.

The string-valued enums below close the set of legal values for pattern
type, impact, trend direction, visualization hint, timeframe and sort key.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class PatternType(str, Enum):
    TREND = "trend"
    RECURRING = "recurring"
    ANOMALY = "anomaly"
    BEHAVIORAL = "behavioral"
    SEASONAL = "seasonal"            # Reserved. No detector emits it yet.


class Impact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordinal used by the ranker: critical=4 ... low=1."""
        return _IMPACT_RANK[self]


_IMPACT_RANK = {
    Impact.LOW: 1,
    Impact.MEDIUM: 2,
    Impact.HIGH: 3,
    Impact.CRITICAL: 4,
}


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"


class VisualizationType(str, Enum):
    LINE = "line"
    BAR = "bar"
    SCATTER = "scatter"
    HEATMAP = "heatmap"
    PIE = "pie"


class Timeframe(str, Enum):
    """Caller-selected window label. Echoed into Pattern.timeframe, never used to filter."""
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class SortKey(str, Enum):
    IMPACT = "impact"
    CONFIDENCE = "confidence"
    ID = "id"                        # Lexicographic on pattern id.
    RECENCY = "recency"              # Latest evidence transaction first.


class ActionType(str, Enum):
    CREATE_BUDGET = "create_budget"
    SET_ALERT = "set_alert"
    EXPORT_DATA = "export_data"
    SCHEDULE_REVIEW = "schedule_review"
    IMPLEMENT = "implement"


@dataclass(frozen=True)
class Transaction:
    """
    A single categorized spending transaction.

    Produced by the transaction source (see core/transaction_source.py) and
    treated as immutable input by every detector. `is_recurring` is computed
    upstream; `confidence` is the categorization confidence and is carried
    through untouched.
    """

    # Identity
    id: str
    amount: float                    # Non-negative spend amount.
    category: str
    description: str
    date: datetime

    # Optional context
    subcategory: Optional[str] = None
    merchant: Optional[str] = None
    location: Optional[str] = None
    tags: frozenset = field(default_factory=frozenset)

    # Upstream flags
    is_recurring: bool = False
    confidence: float = 1.0

    def __post_init__(self):
        is_number = isinstance(self.amount, (int, float)) and not isinstance(self.amount, bool)
        if not is_number or not math.isfinite(self.amount):
            raise ValueError(f"Transaction {self.id}: amount must be a finite number, got {self.amount!r}")
        if self.amount < 0:
            raise ValueError(f"Transaction {self.id}: amount must be non-negative, got {self.amount}")
        if not isinstance(self.date, datetime):
            raise ValueError(f"Transaction {self.id}: date must be a datetime, got {type(self.date).__name__}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Transaction {self.id}: confidence must be within [0, 1], got {self.confidence}")
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))


@dataclass(frozen=True)
class PatternData:
    """Detector-specific figures. Each detector populates the subset it owns."""
    amount: Optional[float] = None
    percentage: Optional[float] = None
    frequency: Optional[str] = None           # "monthly" | "weekly"
    trend: Optional[TrendDirection] = None
    prediction: Optional[float] = None
    comparison: Optional[str] = None          # e.g. "257.1% above average"


@dataclass(frozen=True)
class Pattern:
    """
    Detector output. One per (detector, category) that found a signal.

    Value object: recomputed on every analysis call and never mutated.
    """

    # Identity
    id: str                          # "{type}-{category}", stable per detector + category
    type: PatternType
    category: str

    # Text
    title: str
    description: str

    # Scoring
    confidence: float                # Fixed heuristic in [0, 1]
    impact: Impact
    timeframe: Timeframe

    data: PatternData = field(default_factory=PatternData)
    insights: tuple = ()
    recommendations: tuple = ()
    visualization_type: VisualizationType = VisualizationType.BAR

    # Evidence
    evidence_transaction_ids: tuple = ()
    last_activity: Optional[datetime] = None


@dataclass(frozen=True)
class PatternAction:
    """An action requested from a pattern detail view. Executed by an external dispatcher."""
    action_type: ActionType
    pattern_id: str
    payload: Any = None
    requested_at: datetime = field(default_factory=datetime.now)


def build_pattern_action(pattern: Pattern, action_type: ActionType | str, payload: Any = None) -> PatternAction:
    """
    Package an action for the external dispatcher.

    The pattern itself is the default payload, except for `implement`, which
    carries the selected recommendation.

    Raises:
        ValueError: If action_type is not a known ActionType value.
    """
    action_type = ActionType(action_type)
    if payload is None and action_type != ActionType.IMPLEMENT:
        payload = pattern
    return PatternAction(action_type=action_type, pattern_id=pattern.id, payload=payload)
