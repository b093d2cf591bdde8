"""
Aggregation of search results: deduplicate by URL, partition by kind and collect contributors.
"""
from typing import Dict, Iterable, Optional

from normalize.models import ActivityFetch, ActivityItem, Aggregate, Identity


def _add_contributor(contributors: Dict[str, str], identity: Optional[Identity]) -> None:
    if identity and identity.login:
        contributors[identity.login] = identity.url


def collect_contributors(items: Iterable[ActivityItem]) -> Dict[str, str]:
    """Map login -> profile URL across authors, commenters and reviewers. Insertion order is first seen."""
    contributors: Dict[str, str] = {}
    for item in items:
        _add_contributor(contributors, item.author)
        for identity in item.commenters + item.reviewers:
            _add_contributor(contributors, identity)
    return contributors


def aggregate(fetch: ActivityFetch) -> Aggregate:
    """
    Merge PR and Issue results into one URL-keyed map and partition them back by kind.
    When a URL repeats, the first entry is kept, so a pull request result wins over an issue result.
    """
    by_url: Dict[str, ActivityItem] = {}
    for item in list(fetch.pull_requests) + list(fetch.issues):
        by_url.setdefault(item.url, item)

    unique = list(by_url.values())
    return Aggregate(
        pull_requests=[it for it in unique if it.is_pull_request],
        issues=[it for it in unique if not it.is_pull_request],
        contributors=collect_contributors(unique),
    )
