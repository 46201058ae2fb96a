"""Recent-history exclusion sets passed to the outfit recommender.

The exclusion set is a soft signal: recommenders are asked to avoid these
combinations, but nothing downstream rejects a result that repeats one.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Sequence

from tools.outfit_store import OutfitStore

DEFAULT_WINDOW_DAYS = 7


def exclusion_set(
    outfit_store: OutfitStore,
    user_id: str,
    as_of: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[List[str]]:
    """Item lists of outfits dated in ``[as_of - window_days, as_of]``, newest first."""

    start = as_of - timedelta(days=window_days)
    records = outfit_store.list_between(user_id, start, as_of)
    return [list(record.item_ids) for record in records]


def merge_exclusions(*groups: Iterable[Sequence[str]]) -> List[List[str]]:
    """Concatenate exclusion groups, dropping repeated item lists but keeping order."""

    merged: List[List[str]] = []
    seen = set()
    for group in groups:
        for item_ids in group:
            key = tuple(item_ids)
            if key in seen:
                continue
            seen.add(key)
            merged.append(list(item_ids))
    return merged


def regeneration_exclusion_set(
    outfit_store: OutfitStore,
    user_id: str,
    as_of: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[List[str]]:
    """Every outfit generated on ``as_of`` unioned with the trailing window."""

    todays = [list(record.item_ids) for record in outfit_store.list_for_date(user_id, as_of)]
    return merge_exclusions(todays, exclusion_set(outfit_store, user_id, as_of, window_days))


__all__ = ["DEFAULT_WINDOW_DAYS", "exclusion_set", "merge_exclusions", "regeneration_exclusion_set"]
