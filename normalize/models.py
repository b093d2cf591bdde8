"""
Unified data models for activity items, identities and fetch results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

PULL_REQUEST = "PullRequest"
ISSUE = "Issue"


@dataclass(frozen=True)
class Identity:
    """
    A contributor identity. The login is the unique key.
    """
    login: str
    url: str = ""


@dataclass(frozen=True)
class FileChange:
    """
    One changed file of a pull request with its unified-diff patch text.
    """
    filename: str
    patch: str = ""


@dataclass(frozen=True)
class ActivityItem:
    """
    Normalized Pull Request or Issue.

    Records are immutable; enrichment steps build new records with dataclasses.replace.
    """
    number: int
    kind: str
    title: str
    url: str
    state: str = ""
    body: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None
    author: Optional[Identity] = None
    commenters: Tuple[Identity, ...] = ()
    reviewers: Tuple[Identity, ...] = ()
    ai_summary: Optional[str] = None
    diff_context: Optional[Tuple[FileChange, ...]] = None

    @property
    def is_pull_request(self) -> bool:
        return self.kind == PULL_REQUEST


@dataclass(frozen=True)
class ActivityFetch:
    """
    Raw search results for one run. `failures` names the kinds whose request failed,
    so an empty list can be told apart from a failed query.
    """
    pull_requests: List[ActivityItem] = field(default_factory=list)
    issues: List[ActivityItem] = field(default_factory=list)
    failures: Tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return bool(self.failures)


@dataclass(frozen=True)
class Aggregate:
    """
    Deduplicated items partitioned by kind plus the contributor map (login -> profile URL).
    """
    pull_requests: List[ActivityItem]
    issues: List[ActivityItem]
    contributors: Dict[str, str]

    @property
    def is_empty(self) -> bool:
        return not self.pull_requests and not self.issues
