"""
visualization.py
-----------------
Chart series for a pattern's detail view, derived from the transactions that
produced it. The same pattern and transactions always give the same series,
so a re-opened detail view shows the same chart.

Series shapes by visualization hint:
    line     category amounts in date order
    bar      recurring amounts in date order
    scatter  category amounts in date order, evidence points highlighted
    heatmap  week x weekday spend matrix (weeks start on Sunday)
    pie      spend per weekday
"""

from dataclasses import dataclass
from typing import Iterable

import pandas as pd

from core.models import Pattern, Transaction, VisualizationType
from detectors.pattern_detectors import DAY_NAMES


@dataclass(frozen=True)
class VisualizationSeries:
    pattern_id: str
    visualization_type: VisualizationType
    labels: tuple                    # x-axis labels, or heatmap row labels
    values: tuple                    # 1-D values, or rows of 7 values for a heatmap
    columns: tuple = ()              # heatmap column labels
    highlighted: tuple = ()          # indices into labels (scatter) or columns (heatmap)


def build_visualization_series(pattern: Pattern, transactions: Iterable[Transaction]) -> VisualizationSeries:
    """
    Build the chart series for one pattern.

    Args:
        pattern: The pattern being shown.
        transactions: The analysed transactions. Only the pattern's category
            is used, so the full analysis input can be passed as-is.
    """
    df = _category_frame(pattern.category, transactions)
    vis = pattern.visualization_type

    if df.empty:
        columns = tuple(DAY_NAMES) if vis == VisualizationType.HEATMAP else ()
        return VisualizationSeries(pattern_id=pattern.id, visualization_type=vis, labels=(), values=(), columns=columns)

    if vis == VisualizationType.LINE:
        return _series(pattern, df)
    if vis == VisualizationType.BAR:
        return _series(pattern, df[df["is_recurring"]])
    if vis == VisualizationType.SCATTER:
        evidence = set(pattern.evidence_transaction_ids)
        flagged = tuple(i for i, txn_id in enumerate(df["id"]) if txn_id in evidence)
        return _series(pattern, df, highlighted=flagged)
    if vis == VisualizationType.HEATMAP:
        return _weekday_heatmap(pattern, df)
    if vis == VisualizationType.PIE:
        totals = _weekday_totals(df)
        return VisualizationSeries(
            pattern_id=pattern.id,
            visualization_type=vis,
            labels=tuple(DAY_NAMES),
            values=tuple(float(v) for v in totals),
        )

    raise ValueError(f"Unhandled visualization type: {vis}")


# -----------------------------------------------------------------------------
# INTERNAL
# -----------------------------------------------------------------------------

def _category_frame(category: str, transactions: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {"id": t.id, "date": t.date, "amount": t.amount, "is_recurring": t.is_recurring}
        for t in transactions
        if t.category == category
    ]
    df = pd.DataFrame(rows, columns=["id", "date", "amount", "is_recurring"])
    if df.empty:
        return df
    df["date"] = pd.to_datetime(df["date"])
    df["day_index"] = (df["date"].dt.dayofweek + 1) % 7     # 0 = Sunday
    return df.sort_values(["date", "id"]).reset_index(drop=True)


def _series(pattern: Pattern, df: pd.DataFrame, highlighted: tuple = ()) -> VisualizationSeries:
    return VisualizationSeries(
        pattern_id=pattern.id,
        visualization_type=pattern.visualization_type,
        labels=tuple(d.strftime("%Y-%m-%d") for d in df["date"]),
        values=tuple(float(a) for a in df["amount"]),
        highlighted=highlighted,
    )


def _weekday_totals(df: pd.DataFrame) -> pd.Series:
    return df.groupby("day_index")["amount"].sum().reindex(range(7), fill_value=0.0)


def _weekday_heatmap(pattern: Pattern, df: pd.DataFrame) -> VisualizationSeries:
    df = df.assign(week_start=df["date"].dt.normalize() - pd.to_timedelta(df["day_index"], unit="D"))
    matrix = (
        df.pivot_table(index="week_start", columns="day_index", values="amount", aggfunc="sum", fill_value=0.0)
        .reindex(columns=range(7), fill_value=0.0)
        .sort_index()
    )
    # argmax keeps the lowest weekday index on ties, matching the detector
    peak = (int(matrix.sum(axis=0).to_numpy().argmax()),)

    return VisualizationSeries(
        pattern_id=pattern.id,
        visualization_type=pattern.visualization_type,
        labels=tuple(w.strftime("%Y-%m-%d") for w in matrix.index),
        values=tuple(tuple(float(v) for v in row) for row in matrix.to_numpy()),
        columns=tuple(DAY_NAMES),
        highlighted=peak,
    )
