"""
Lifecycle and title-prefix classification of activity items relative to the report window.
All functions are pure: the same item, window and policy always yield the same result.
"""
from typing import Iterable, List, Tuple

from normalize.models import ActivityItem
from window import ReportWindow
from .policy import CLOSED, CREATED, MERGED, UPDATED, ReportPolicy, DEFAULT_POLICY


def lifecycle_phase(item: ActivityItem, window: ReportWindow) -> str:
    """Return the item's phase in the window: merged, closed, created or updated."""
    if item.is_pull_request and window.contains(item.merged_at):
        return MERGED
    if window.contains(item.closed_at):
        return CLOSED
    if window.contains(item.created_at):
        return CREATED
    # the search already filtered on "updated in window"
    return UPDATED


def is_relevant(item: ActivityItem, window: ReportWindow) -> bool:
    """An item is relevant when it was merged, closed or created inside the window."""
    return lifecycle_phase(item, window) != UPDATED


def lifecycle_priority(item: ActivityItem, window: ReportWindow, policy: ReportPolicy = DEFAULT_POLICY) -> int:
    weights = policy.lifecycle_weights.get(item.kind) or {}
    phase = lifecycle_phase(item, window)
    return int(weights.get(phase, max(weights.values(), default=0) + 1))


def prefix_priority(title: str, policy: ReportPolicy = DEFAULT_POLICY) -> int:
    t = (title or '').lower()
    for prefix, weight in policy.ordered_prefixes():
        if t.startswith(prefix):
            return int(weight)
    return int(policy.other_prefix_weight)


def sort_key(item: ActivityItem, window: ReportWindow, policy: ReportPolicy = DEFAULT_POLICY) -> Tuple[int, int, int]:
    """(primary, lifecycle, number). Primary is the prefix priority when prefix ranking is on."""
    lifecycle = lifecycle_priority(item, window, policy)
    primary = prefix_priority(item.title, policy) if policy.prefix_ranking else lifecycle
    return primary, lifecycle, item.number


def rank_items(items: Iterable[ActivityItem], window: ReportWindow, policy: ReportPolicy = DEFAULT_POLICY) -> List[ActivityItem]:
    return sorted(items, key=lambda it: sort_key(it, window, policy))
