"""
grouping.py
------------
Category grouper. Partitions one analysis window's transactions by category
key. No filtering and no minimum group size: detectors decide for
themselves whether a group carries enough signal.
"""

from typing import Dict, Iterable, List

from core.models import Transaction


def group_by_category(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    """
    Group transactions by their category key.

    Input order is preserved inside each group. The input collection is
    only read.

    Returns:
        Dict of category -> list of that category's transactions.
    """
    groups: Dict[str, List[Transaction]] = {}
    for txn in transactions:
        groups.setdefault(txn.category, []).append(txn)
    return groups
