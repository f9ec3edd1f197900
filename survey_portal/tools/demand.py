"""Demand ranking over requested items.

Items are grouped by the exact (item_name, category) pair, so the grouping is
case-sensitive: "Rice" and "rice" are two entries. Entries are ordered by
descending count with a stable sort, so ties keep first-seen order, and ranks
are 1-based positions within each category.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

import pandas as pd

from survey_portal.db.models import Category


@dataclass(frozen=True)
class DemandEntry:
    item_name: str
    category: Category
    count: int


@dataclass(frozen=True)
class RankedDemand:
    rank: int
    item_name: str
    count: int


@dataclass(frozen=True)
class DemandReport:
    products: List[RankedDemand] = field(default_factory=list)
    services: List[RankedDemand] = field(default_factory=list)

    def for_category(self, category: Category) -> List[RankedDemand]:
        return self.products if category == "product" else self.services

    def to_dataframe(self, category: Category) -> pd.DataFrame:
        rows = [{"rank": d.rank, "item": d.item_name, "count": d.count} for d in self.for_category(category)]
        return pd.DataFrame(rows, columns=["rank", "item", "count"])


def tally_demand(rows: Iterable[Tuple[str, Category]]) -> List[DemandEntry]:
    counts: Dict[Tuple[str, Category], int] = {}
    for item_name, category in rows:
        key = (item_name, category)
        counts[key] = counts.get(key, 0) + 1

    # dicts keep insertion order and sorted() is stable: ties stay in first-seen order.
    ordered = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [DemandEntry(item_name=name, category=cat, count=n) for (name, cat), n in ordered]


def rank_demand(entries: Iterable[DemandEntry]) -> DemandReport:
    products: List[RankedDemand] = []
    services: List[RankedDemand] = []
    for e in entries:
        bucket = products if e.category == "product" else services
        bucket.append(RankedDemand(rank=len(bucket) + 1, item_name=e.item_name, count=e.count))
    return DemandReport(products=products, services=services)


def build_demand_report(rows: Iterable[Tuple[str, Category]]) -> DemandReport:
    return rank_demand(tally_demand(rows))
