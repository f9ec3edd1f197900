from dataclasses import dataclass
from typing import Iterable, Sequence

from survey_portal.db.models import ResponseHeader


@dataclass(frozen=True)
class ResponseSummary:
    total_responses: int
    unique_items: int


def count_unique_items(item_names: Iterable[str]) -> int:
    """
    Number of distinct requested items, ignoring letter case.

    "Soap" and "soap" count once here, although the demand ranking keeps them
    as separate entries.
    """
    return len({name.lower() for name in item_names})


def summarize_responses(headers: Sequence[ResponseHeader], item_names: Iterable[str]) -> ResponseSummary:
    # item_names is the full item table, not the per-response fan-out reads.
    return ResponseSummary(total_responses=len(headers), unique_items=count_unique_items(item_names))
