"""
CLI entry point for the weekly roundup. Wires the pipeline:
window -> fetch -> aggregate -> rank -> enrich/summarize -> render -> publish
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional, Tuple

from ingest.diffs import attach_diff_contexts, fetch_diff_contexts
from ingest.github import GitHubClient, fetch_activity
from normalize.aggregate import aggregate
from publish.discussion import publish
from ranking.phases import is_relevant, rank_items
from ranking.policy import list_presets
from report.renderer import order_contributors, render_report
from settings import ConfigurationError, ReportConfig, load_config
from summarize.gemini import GeminiClient, model_label
from summarize.summaries import TextGenerator, global_overview, summarize_items
from window import compute_window

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _enrich_with_diffs(github: GitHubClient, config: ReportConfig, pull_requests, window):
    """Attach code-change excerpts to the PRs that will be summarized."""
    relevant = [pr for pr in pull_requests if is_relevant(pr, window)]
    contexts = fetch_diff_contexts(github, config.source_repo, relevant, config.policy)
    return attach_diff_contexts(pull_requests, contexts)


def run_pipeline(config: ReportConfig, github: GitHubClient, ai_client: Optional[TextGenerator] = None, now: Optional[datetime] = None) -> Tuple[str, str]:
    """Execute fetch -> aggregate -> rank -> summarize -> render and return (title, body)."""
    policy = config.policy
    window = compute_window(config.date_override or now, policy.window_strategy, policy.report_name)
    logger.info("Generating roundup for %s...", window.title)
    logger.info("Targeting Repository: %s", config.source_repo)

    fetch = fetch_activity(github, config.source_repo, window)
    if fetch.failed:
        logger.warning("Search failed for %s; the report may be incomplete", ", ".join(fetch.failures))

    activity = aggregate(fetch)
    pull_requests = rank_items(activity.pull_requests, window, policy)
    issues = rank_items(activity.issues, window, policy)
    if not policy.include_inactive_pull_requests:
        pull_requests = [pr for pr in pull_requests if is_relevant(pr, window)]
    logger.info("Found %d Unique PRs and %d Unique Issues.", len(pull_requests), len(issues))
    if activity.is_empty:
        logger.info("No activity found.")

    if ai_client is not None and policy.enrich_diffs:
        pull_requests = _enrich_with_diffs(github, config, pull_requests, window)

    # per-item summaries first: the overview prompt reuses them
    summarized = summarize_items(pull_requests + issues, window, ai_client, policy)
    pull_requests, issues = summarized[:len(pull_requests)], summarized[len(pull_requests):]
    overview = global_overview(pull_requests, window, ai_client, project=config.source_repo.split('/')[-1])

    body = render_report(
        title=window.title,
        overview=overview,
        pull_requests=pull_requests,
        issues=issues,
        contributors=order_contributors(activity.contributors, policy.core_team),
        window=window,
        policy=policy,
        model_label=model_label(config.gemini_model),
    )
    return window.title, body


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Weekly repository roundup published as a GitHub Discussion")
    parser.add_argument("--github_token", type=str, help="GitHub token (or set GITHUB_TOKEN env var)")
    parser.add_argument("--gemini_api_key", type=str, help="Gemini API key (or set GEMINI_API_KEY env var); omit for heuristic summaries")
    parser.add_argument("--gemini_model", type=str, help="Gemini model name (or set GEMINI_MODEL env var)")
    parser.add_argument("--date-override", type=str, help="Pretend the run happens on this date (or set DATE_OVERRIDE env var)")
    parser.add_argument("--dry-run", action="store_true", help="Print the report instead of publishing it (or set DRY_RUN=true)")
    parser.add_argument("--source-repo", type=str, help="Repository to report on, owner/name (or set SOURCE_REPO env var)")
    parser.add_argument("--target-repo", type=str, help="Repository to post the discussion to (defaults to GITHUB_REPOSITORY)")
    parser.add_argument("--policy", type=str, default="", help="Path to the policy YAML (default ranking/policy.yaml)")
    parser.add_argument("--preset", type=str, default="", help="Named preset from the policy YAML (plain, standard, enriched)")
    parser.add_argument("--list-presets", action="store_true", help="List presets available in the policy YAML and exit")
    parser.add_argument("--out-file", type=str, default="", help="Also write the rendered body to this file")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="INFO", help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT, force=True)

    try:
        if args.list_presets:
            for name in list_presets(args.policy or None):
                print(name)
            return 0
        config = load_config(args)
        github = GitHubClient(config.github_token)
        ai_client = GeminiClient(config.gemini_api_key, config.gemini_model) if config.gemini_api_key else None
        title, body = run_pipeline(config, github, ai_client)
        publish(github, config, title, body)
    except ConfigurationError as ex:
        logger.error("Configuration error: %s", ex)
        return 1
    except Exception:
        logger.exception("Roundup failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
