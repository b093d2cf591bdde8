"""
Diff context enrichment for pull requests selected for narrative summaries.
"""
import fnmatch
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import requests

from ingest.github import GitHubAPIError, GitHubClient, split_repo
from normalize.models import ActivityItem, FileChange
from ranking.policy import ReportPolicy, DEFAULT_POLICY

logger = logging.getLogger(__name__)

# the files endpoint is asked for at most this many entries per PR
FILES_PER_PAGE = 10


def is_denied(filename: str, patterns: Sequence[str]) -> bool:
    """True when the file (or its basename) matches a generated/lock-file pattern."""
    basename = filename.rsplit('/', 1)[-1]
    return any(fnmatch.fnmatch(filename, p) or fnmatch.fnmatch(basename, p) for p in patterns)


def select_file_changes(files: Iterable[dict], policy: ReportPolicy = DEFAULT_POLICY) -> Tuple[FileChange, ...]:
    kept: List[FileChange] = []
    for f in files or []:
        name = (f or {}).get('filename') or ''
        if not name or is_denied(name, policy.diff_denylist):
            continue
        kept.append(FileChange(filename=name, patch=f.get('patch') or ''))
        if len(kept) >= policy.diff_max_files:
            break
    return tuple(kept)


def _fetch_one(client: GitHubClient, owner: str, name: str, number: int, policy: ReportPolicy) -> Optional[Tuple[FileChange, ...]]:
    try:
        files = client.get_pull_request_files(owner, name, number, per_page=FILES_PER_PAGE)
    except (GitHubAPIError, requests.RequestException, ValueError) as ex:
        logger.warning("Could not fetch files for PR #%s: %s", number, ex)
        return None
    return select_file_changes(files, policy)


def fetch_diff_contexts(
    client: GitHubClient, repo: str, pull_requests: Sequence[ActivityItem], policy: ReportPolicy = DEFAULT_POLICY, max_workers: int = 8
) -> Dict[int, Tuple[FileChange, ...]]:
    """Fetch file changes for each PR concurrently. PRs whose fetch failed are absent from the result."""
    if not pull_requests:
        return {}
    owner, name = split_repo(repo)
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(pull_requests)))) as executor:
        futures = {pr.number: executor.submit(_fetch_one, client, owner, name, pr.number, policy) for pr in pull_requests}
        results = {number: fut.result() for number, fut in futures.items()}
    return {number: files for number, files in results.items() if files is not None}


def attach_diff_contexts(items: Sequence[ActivityItem], contexts: Dict[int, Tuple[FileChange, ...]]) -> List[ActivityItem]:
    """Return new records with diff context attached where available."""
    return [replace(it, diff_context=contexts[it.number]) if it.is_pull_request and it.number in contexts else it for it in items]
