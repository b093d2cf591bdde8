"""
Normalization utility helpers.
Small helpers to turn GraphQL search nodes into normalize.models entities.
"""
from typing import Any, Dict, List, Optional, Tuple

from normalize.models import ActivityItem, Identity, ISSUE, PULL_REQUEST
from window import parse_timestamp

KINDS = (PULL_REQUEST, ISSUE)


def normalize_identity(raw: Optional[Dict[str, Any]]) -> Optional[Identity]:
    """Return an Identity for an author payload, or None when it has no login (deleted users, bots without login)."""
    if not isinstance(raw, dict) or not raw.get('login'):
        return None
    return Identity(login=raw['login'], url=raw.get('url') or '')


def _connection_authors(connection: Optional[Dict[str, Any]]) -> Tuple[Identity, ...]:
    nodes = (connection or {}).get('nodes') or []
    authors = (normalize_identity((n or {}).get('author')) for n in nodes)
    return tuple(a for a in authors if a is not None)


def normalize_item(node: Dict[str, Any]) -> Optional[ActivityItem]:
    """Create an ActivityItem from a search node. Nodes that are neither PR nor Issue return None."""
    kind = (node or {}).get('__typename')
    if kind not in KINDS:
        return None
    return ActivityItem(
        number=int(node.get('number') or 0),
        kind=kind,
        title=node.get('title') or '',
        url=node.get('url') or '',
        state=node.get('state') or '',
        body=node.get('body') or '',
        created_at=parse_timestamp(node.get('createdAt')),
        updated_at=parse_timestamp(node.get('updatedAt')),
        closed_at=parse_timestamp(node.get('closedAt')),
        merged_at=parse_timestamp(node.get('mergedAt')) if kind == PULL_REQUEST else None,
        author=normalize_identity(node.get('author')),
        commenters=_connection_authors(node.get('comments')),
        reviewers=_connection_authors(node.get('reviews')) if kind == PULL_REQUEST else (),
    )


def normalize_nodes(nodes: List[Dict[str, Any]]) -> List[ActivityItem]:
    items = (normalize_item(n) for n in nodes or [])
    return [it for it in items if it is not None]
