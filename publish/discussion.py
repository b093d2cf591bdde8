"""
Publish the rendered report as a GitHub Discussion, or print it in dry-run mode.
"""
import logging
import os
from typing import Any, Dict, List, Optional

from ingest.github import GitHubClient, split_repo
from settings import ConfigurationError, ReportConfig

logger = logging.getLogger(__name__)

RULE = "-" * 51


def select_category(categories: List[Dict[str, Any]], preferred: str = "announcements") -> Dict[str, Any]:
    """Pick the category whose name matches `preferred` case-insensitively, else the first one."""
    wanted = (preferred or "").lower()
    for category in categories or []:
        if (category.get('name') or '').lower() == wanted:
            return category
    if not categories:
        raise ConfigurationError("No discussion categories found.")
    return categories[0]


def _write_body(path: str, body: str) -> None:
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(body)
    logger.info("Wrote report to %s", path)


def print_dry_run(body: str) -> None:
    print(RULE)
    print("DRY RUN MODE ENABLED. Generated Body:")
    print(RULE)
    print(body)
    print(RULE)


def publish(client: GitHubClient, config: ReportConfig, title: str, body: str) -> Optional[str]:
    """
    Dry run: print the body (and write it to config.out_file when set) without touching GitHub.
    Live: create the discussion in the target repository and return its URL.
    Re-running creates a new discussion every time.
    """
    if config.out_file:
        _write_body(config.out_file, body)

    if config.dry_run:
        print_dry_run(body)
        return None

    if not config.target_repo:
        raise ConfigurationError("GITHUB_REPOSITORY env var not set")
    owner, name = split_repo(config.target_repo)
    repository = client.get_repository(owner, name)
    category = select_category(repository['categories'], config.policy.discussion_category)
    logger.info("Posting to Category: %s", category.get('name'))

    url = client.create_discussion(repository['id'], category['id'], title, body)
    logger.info("Discussion created: %s", url)
    return url
