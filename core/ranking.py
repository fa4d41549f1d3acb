"""
ranking.py
-----------
Pattern ranker / filter. A pure reordering and filtering pass over the
flattened detector output: patterns are never modified, and Python's stable
sort keeps the incoming order among equal keys.
"""

from typing import Iterable, List

from core.models import Pattern, PatternType, SortKey


ALL_TYPES = "all"


def filter_patterns(patterns: Iterable[Pattern], pattern_type: PatternType | str = ALL_TYPES) -> List[Pattern]:
    """
    Keep patterns of one type, or everything when pattern_type is "all".

    Raises:
        ValueError: If pattern_type is neither "all" nor a PatternType value.
    """
    if pattern_type == ALL_TYPES:
        return list(patterns)
    wanted = PatternType(pattern_type)
    return [p for p in patterns if p.type == wanted]


def sort_patterns(patterns: Iterable[Pattern], sort_by: SortKey | str = SortKey.IMPACT) -> List[Pattern]:
    """
    Order patterns by the selected key.

        impact      critical > high > medium > low
        confidence  highest first
        id          ascending lexicographic on pattern id
        recency     latest evidence transaction first, id ascending on ties

    Raises:
        ValueError: If sort_by is not a SortKey value.
    """
    sort_by = SortKey(sort_by)
    patterns = list(patterns)

    if sort_by == SortKey.IMPACT:
        return sorted(patterns, key=lambda p: p.impact.rank, reverse=True)
    if sort_by == SortKey.CONFIDENCE:
        return sorted(patterns, key=lambda p: p.confidence, reverse=True)
    if sort_by == SortKey.ID:
        return sorted(patterns, key=lambda p: p.id)
    if sort_by == SortKey.RECENCY:
        by_id = sorted(patterns, key=lambda p: p.id)
        # Patterns without evidence dates go last.
        return sorted(by_id, key=lambda p: (p.last_activity is not None, p.last_activity), reverse=True)

    raise ValueError(f"Unhandled sort key: {sort_by}")


def rank_patterns(
    patterns: Iterable[Pattern],
    pattern_type: PatternType | str = ALL_TYPES,
    sort_by: SortKey | str = SortKey.IMPACT,
) -> List[Pattern]:
    """Filter, then sort."""
    return sort_patterns(filter_patterns(patterns, pattern_type), sort_by)
