"""
GitHub client for the weekly roundup: GraphQL search, pull request files, discussion categories
and discussion creation. Every call is attempted once; callers decide whether a failure is fatal.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import requests

from normalize.models import ActivityFetch, ActivityItem, ISSUE, PULL_REQUEST
from normalize.util import normalize_nodes
from window import ReportWindow

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

SEARCH_QUERY = """
query($q: String!) {
  search(query: $q, type: ISSUE, first: 100) {
    nodes {
      ... on PullRequest {
        __typename
        number
        title
        body
        url
        state
        createdAt
        updatedAt
        closedAt
        mergedAt
        author { login url }
        comments(first: 20) { nodes { author { login url } } }
        reviews(first: 20) { nodes { author { login url } } }
      }
      ... on Issue {
        __typename
        number
        title
        body
        url
        state
        createdAt
        updatedAt
        closedAt
        author { login url }
        comments(first: 20) { nodes { author { login url } } }
      }
    }
  }
}
"""

REPOSITORY_QUERY = """
query($owner: String!, $repo: String!) {
  repository(owner: $owner, name: $repo) {
    id
    discussionCategories(first: 10) { nodes { id name } }
  }
}
"""

CREATE_DISCUSSION_MUTATION = """
mutation($repositoryId: ID!, $categoryId: ID!, $title: String!, $body: String!) {
  createDiscussion(input: {repositoryId: $repositoryId, categoryId: $categoryId, title: $title, body: $body}) {
    discussion { url }
  }
}
"""


class GitHubAPIError(Exception):
    """Raised when GitHub returns an error status or a GraphQL errors payload."""


def split_repo(full_name: str):
    """Split 'owner/name' into its parts."""
    owner, _, name = (full_name or '').partition('/')
    if not owner or not name or '/' in name:
        raise ValueError(f"Repository must be in the form owner/name, got {full_name!r}")
    return owner, name


class GitHubClient:
    """Thin GitHub API client (GraphQL + REST) authenticated with a bearer token."""

    def __init__(self, token: str, base_url: str = None, graphql_url: str = None, timeout: float = DEFAULT_TIMEOUT):
        self.token = token
        self.base_url = (base_url or "https://api.github.com").rstrip('/')
        self.graphql_url = graphql_url or f"{self.base_url}/graphql"
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
        }

    @staticmethod
    def _error_message(resp) -> str:
        try:
            data = resp.json()
        except ValueError:
            return resp.text
        if isinstance(data, dict) and data.get('message'):
            return data['message']
        return resp.text

    def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a GraphQL document and return its `data` object."""
        resp = requests.post(self.graphql_url, headers=self.headers, json={"query": query, "variables": variables or {}}, timeout=self.timeout)
        if resp.status_code != 200:
            raise GitHubAPIError(f"GitHub GraphQL error {resp.status_code}: {self._error_message(resp)}")
        payload = resp.json()
        if payload.get('errors'):
            messages = '; '.join(e.get('message', str(e)) for e in payload['errors'])
            raise GitHubAPIError(f"GitHub GraphQL error: {messages}")
        return payload.get('data') or {}

    def search_items(self, query: str) -> List[ActivityItem]:
        """Search issues/PRs and normalize the first 100 result nodes."""
        data = self.graphql(SEARCH_QUERY, {"q": query})
        return normalize_nodes((data.get('search') or {}).get('nodes') or [])

    def get_pull_request_files(self, owner: str, repo: str, number: int, per_page: int = 10) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/repos/{owner}/{repo}/pulls/{number}/files"
        resp = requests.get(url, headers=self.headers, params={"per_page": per_page}, timeout=self.timeout)
        if resp.status_code != 200:
            raise GitHubAPIError(f"GitHub API error {resp.status_code}: {self._error_message(resp)}")
        return resp.json()

    def get_repository(self, owner: str, name: str) -> Dict[str, Any]:
        """Return the repository id and up to 10 discussion categories."""
        data = self.graphql(REPOSITORY_QUERY, {"owner": owner, "repo": name})
        repository = data.get('repository')
        if not repository:
            raise GitHubAPIError(f"Repository {owner}/{name} not found")
        return {
            'id': repository['id'],
            'categories': ((repository.get('discussionCategories') or {}).get('nodes')) or [],
        }

    def create_discussion(self, repository_id: str, category_id: str, title: str, body: str) -> str:
        """Create a discussion and return its URL."""
        data = self.graphql(
            CREATE_DISCUSSION_MUTATION,
            {"repositoryId": repository_id, "categoryId": category_id, "title": title, "body": body},
        )
        return data['createDiscussion']['discussion']['url']


def build_search_queries(repo: str, window: ReportWindow) -> Dict[str, str]:
    scope = f"repo:{repo}"
    return {
        PULL_REQUEST: f"{scope} is:pr updated:{window.search_range}",
        ISSUE: f"{scope} is:issue updated:{window.search_range}",
    }


def _search_or_empty(client: GitHubClient, kind: str, query: str):
    try:
        return client.search_items(query), None
    except (GitHubAPIError, requests.RequestException, ValueError) as ex:
        logger.warning("Error fetching %s items, returning empty: %s", kind, ex)
        return [], kind


def fetch_activity(client: GitHubClient, repo: str, window: ReportWindow) -> ActivityFetch:
    """
    Run the PR and Issue searches concurrently.

    A failed search degrades to an empty list for that kind only and is recorded in
    ActivityFetch.failures so callers can tell "failed" from "no activity".
    """
    queries = build_search_queries(repo, window)
    with ThreadPoolExecutor(max_workers=len(queries)) as executor:
        futures = {kind: executor.submit(_search_or_empty, client, kind, q) for kind, q in queries.items()}
        results = {kind: fut.result() for kind, fut in futures.items()}

    pull_requests, pr_failure = results[PULL_REQUEST]
    issues, issue_failure = results[ISSUE]
    failures = tuple(k for k in (pr_failure, issue_failure) if k)
    logger.info("Fetched %d PR nodes and %d issue nodes for %s", len(pull_requests), len(issues), repo)
    return ActivityFetch(pull_requests=pull_requests, issues=issues, failures=failures)
