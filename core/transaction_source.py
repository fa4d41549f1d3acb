"""
transaction_source.py
----------------------
Ingestion boundary. Turns tabular transaction data into validated
Transaction objects before it reaches the engine.

Malformed input is rejected here with ValueError. The detectors assume
everything they receive has already passed through this layer.
"""

import pandas as pd
from typing import List

from core.models import Transaction
from config.config_loader import get_transaction_source_config


_TRUE_STRINGS = {"true", "t", "yes", "y", "1"}


def load_transactions_csv(path: str) -> List[Transaction]:
    """Read a transactions CSV and validate every row."""
    return transactions_from_dataframe(pd.read_csv(path))


def transactions_from_dataframe(df: pd.DataFrame) -> List[Transaction]:
    """
    Build Transaction objects from a DataFrame.

    Args:
        df: DataFrame with at least the configured required columns
            (id, amount, category, description, date). Optional columns:
            subcategory, merchant, location, tags, is_recurring, confidence.

    Returns:
        List of Transaction, in DataFrame row order.

    Raises:
        ValueError: On missing columns or values, duplicate ids, unparsable
            dates or amounts, or values that violate the Transaction contract (e.g. negative amount).
    """
    cfg = get_transaction_source_config()
    required_cols = cfg["required_columns"]
    missing = [c for c in required_cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    if df.empty:
        return []

    df = df.copy()

    blank = df[required_cols].isna().any(axis=1)
    if blank.any():
        bad_ids = df.loc[blank, "id"].tolist()
        raise ValueError(f"Missing required values for ids: {bad_ids}")

    duplicated = df["id"].astype(str).duplicated(keep=False)
    if duplicated.any():
        dup_ids = sorted(set(df.loc[duplicated, "id"].astype(str)))
        raise ValueError(f"Duplicate transaction ids: {dup_ids}")

    if not pd.api.types.is_datetime64_any_dtype(df["date"]):
        try:
            df["date"] = pd.to_datetime(df["date"])
        except (ValueError, TypeError) as exc:
            raise ValueError(f"Unparsable transaction date: {exc}") from exc
    if df["date"].isna().any():
        bad_ids = df.loc[df["date"].isna(), "id"].tolist()
        raise ValueError(f"Missing transaction dates for ids: {bad_ids}")

    amounts = pd.to_numeric(df["amount"], errors="coerce")
    if amounts.isna().any():
        bad_ids = df.loc[amounts.isna(), "id"].tolist()
        raise ValueError(f"Unparsable amounts for ids: {bad_ids}")
    df["amount"] = amounts

    separator = cfg["tag_separator"]
    transactions: List[Transaction] = []
    for row in df.to_dict(orient="records"):
        transactions.append(Transaction(
            id=str(row["id"]),
            amount=float(row["amount"]),
            category=str(row["category"]),
            description=str(row["description"]),
            date=row["date"].to_pydatetime(),
            subcategory=_optional_str(row.get("subcategory")),
            merchant=_optional_str(row.get("merchant")),
            location=_optional_str(row.get("location")),
            tags=_parse_tags(row.get("tags"), separator),
            is_recurring=_parse_bool(row.get("is_recurring")),
            confidence=_parse_confidence(row.get("confidence")),
        ))

    return transactions


# -----------------------------------------------------------------------------
# INTERNAL: FIELD COERCION
# -----------------------------------------------------------------------------

def _optional_str(value) -> str | None:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    value = str(value).strip()
    return value or None


def _parse_tags(value, separator: str) -> frozenset:
    text = _optional_str(value)
    if text is None:
        return frozenset()
    return frozenset(tag.strip() for tag in text.split(separator) if tag.strip())


def _parse_bool(value) -> bool:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return False
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _parse_confidence(value) -> float:
    # Absent confidence means the category was assigned by hand.
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return 1.0
    return float(value)
