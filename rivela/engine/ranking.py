"""Insight ranking: priority first, then impact, both descending."""

from typing import Iterable

from rivela.models.finance import Insight


def _sort_key(insight: Insight) -> tuple[int, float]:
    return (-insight.priority.rank, -insight.impact)


def sort_insights(insights: Iterable[Insight]) -> list[Insight]:
    """
    Return a new list ordered by priority, then impact.

    sorted() is stable, so insights tied on both keys keep the order
    the rules emitted them in.
    """
    return sorted(insights, key=_sort_key)
