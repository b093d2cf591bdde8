"""
Prose for the report: a whole-report overview and per-item narrative summaries.

Both have a Gemini path and a deterministic fallback. The service being absent or failing
is never fatal; it only lowers prose quality.
"""
import logging
import re
from dataclasses import replace
from typing import List, Optional, Protocol, Sequence

from normalize.models import ActivityItem
from ranking.phases import is_relevant
from ranking.policy import ReportPolicy, DEFAULT_POLICY
from window import ReportWindow
from .parser import parse_summaries

logger = logging.getLogger(__name__)

FILLER_OVERVIEW = "This week saw steady progress with various improvements."
MISSING_SUMMARY = "No summary available."

HIGHLIGHT_KEYWORDS = ("feat", "add", "support", "stable", "release", "update", "fix")
MAX_HIGHLIGHTS = 3
BODY_PROMPT_CHARS = 300

CONVENTIONAL_PREFIX = re.compile(r"^(feature|feat|fix|chore|docs|refactor|perf|test|build|ci|style)(\(.*?\))?!?:", re.IGNORECASE)


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str:
        ...


def strip_conventional_prefix(title: str) -> str:
    return CONVENTIONAL_PREFIX.sub('', title or '').strip()


def merged_in_window(pull_requests: Sequence[ActivityItem], window: ReportWindow) -> List[ActivityItem]:
    return [pr for pr in pull_requests if pr.is_pull_request and window.contains(pr.merged_at)]


def _join_highlights(updates: List[str]) -> str:
    if len(updates) == 1:
        return f"We are excited to highlight the completion of {updates[0]}."
    return f"Highlights include {', '.join(updates[:-1])} and {updates[-1]}."


def heuristic_overview(merged_prs: Sequence[ActivityItem]) -> str:
    """Hand-assembled overview from keyword-matching merged PR titles."""
    significant = [pr for pr in merged_prs if any(k in pr.title.lower() for k in HIGHLIGHT_KEYWORDS)]
    if not significant:
        return FILLER_OVERVIEW
    updates = [f"[{strip_conventional_prefix(pr.title)}]({pr.url})" for pr in significant[:MAX_HIGHLIGHTS]]
    return _join_highlights(updates)


def _overview_prompt(merged_prs: Sequence[ActivityItem], project: str) -> str:
    lines = []
    for pr in merged_prs:
        author = pr.author.login if pr.author else 'unknown'
        line = f"- {pr.title} (Author: {author})"
        if pr.ai_summary and pr.ai_summary != MISSING_SUMMARY:
            line += f"\n  Summary: {pr.ai_summary}"
        lines.append(line)
    pr_list = "\n".join(lines)
    return f"""
You are writing a weekly newsletter for the "{project}" project.
Here is the list of Pull Requests merged this week:
{pr_list}

Please write a short, engaging conversational summary (1-2 sentences) highlighting the key progress.
Focus on the value delivered. Do not list every PR. Do not use markdown links in your response, just text.
Start with "Highlights include..." or similar.
"""


def global_overview(pull_requests: Sequence[ActivityItem], window: ReportWindow, client: Optional[TextGenerator] = None, project: str = "") -> str:
    """1-2 sentences about the PRs merged in the window. Always returns a non-empty string."""
    merged = merged_in_window(pull_requests, window)
    if not merged:
        return FILLER_OVERVIEW
    if client is None:
        logger.warning("No Gemini API key configured, falling back to heuristic summary.")
        return heuristic_overview(merged)
    try:
        text = client.generate(_overview_prompt(merged, project))
    except Exception as ex:
        logger.error("Error generating summary with Gemini: %s", ex)
        return heuristic_overview(merged)
    return text or heuristic_overview(merged)


def _one_line(text: str, limit: int) -> str:
    return (text or '').replace('\n', ' ')[:limit]


def _diff_preview(item: ActivityItem, policy: ReportPolicy) -> str:
    if not item.diff_context:
        return ""
    parts = []
    for change in item.diff_context:
        patch = (change.patch or '')[:policy.diff_preview_chars]
        parts.append(f"    File: {change.filename}\n{patch}")
    return "\n  Code changes:\n" + "\n".join(parts)


def _items_prompt(items: Sequence[ActivityItem], policy: ReportPolicy) -> str:
    entries = []
    for index, item in enumerate(items):
        label = "PR" if item.is_pull_request else "Issue"
        entries.append(
            f'{label} #{index}: Title: "{item.title}", State: {item.state}, '
            f'Body: "{_one_line(item.body, BODY_PROMPT_CHARS)}..."{_diff_preview(item, policy)}'
        )
    item_data = "\n".join(entries)
    return f"""
You are analyzing Pull Requests and Issues for a technical newsletter.
Here is the list of items:
{item_data}

For each item, write a clear, elaborate summary (2-3 sentences).
- For MERGED PRs: Explain exactly what functionality was added or fixed and why it matters to the team.
- For OPEN/WIP PRs: Explain what this feature *will* add or solve when completed.
- For Issues: Explain the problem or request and its current status.

Return valid JSON format: {{ "summaries": [ {{ "index": 0, "summary": "..." }}, ... ] }}
Do not include markdown formatting in the JSON.
"""


def summarize_items(
    items: Sequence[ActivityItem], window: ReportWindow, client: Optional[TextGenerator] = None, policy: ReportPolicy = DEFAULT_POLICY
) -> List[ActivityItem]:
    """
    Attach AI summaries to every relevant item (merged, closed or created in the window)
    with a single batched request. Returns new records in the original order.

    On any failure the items are returned unchanged so rendering falls back to body excerpts.
    """
    items = list(items)
    relevant = [it for it in items if is_relevant(it, window)]
    if client is None or not relevant:
        return items

    try:
        response = client.generate(_items_prompt(relevant, policy))
    except Exception as ex:
        logger.error("Error generating item summaries: %s", ex)
        return items

    result = parse_summaries(response)
    if not result.ok:
        logger.error("Could not parse item summaries: %s", result.error)
        return items

    summarized = {
        it.url: replace(it, ai_summary=result.summaries.get(i, MISSING_SUMMARY))
        for i, it in enumerate(relevant)
    }
    matched = sum(1 for i in range(len(relevant)) if i in result.summaries)
    logger.info("Attached AI summaries to %d of %d items", matched, len(relevant))
    return [summarized.get(it.url, it) for it in items]
