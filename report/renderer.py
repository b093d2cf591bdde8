"""
Report renderer: build the discussion body (Markdown with collapsible HTML blocks) from
classified and summarized activity items.
Rendering is a pure function of its inputs; templates live in report/templates.
"""

import os
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from normalize.models import ActivityItem
from ranking.phases import lifecycle_phase
from ranking.policy import CLOSED, CREATED, MERGED, ReportPolicy, DEFAULT_POLICY
from window import ReportWindow, format_short_date

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates')

BODY_EXCERPT_CHARS = 150
NO_DESCRIPTION = "No description provided."
ITEM_SEPARATOR = "\n\n"

FOOTER = (
    "*Auto-generated by {report_name} GitHub Action, summarised using {model_label}. "
    "The summaries in this post are generated by AI and may contain inaccuracies. "
    "Please verify important details by reviewing the source Pull Requests/Issues directly.*"
)

_PR_STATUS = {
    MERGED: ("✅", "Merged on"),
    CLOSED: ("🔴", "Closed on"),
    CREATED: ("🚧", "Opened on"),
}
_ISSUE_STATUS = {
    CLOSED: ("✅", "Closed on"),
    CREATED: ("✨", "Opened on"),
}
_UPDATED_STATUS = ("⚡", "Updated on")


class ItemStatus(NamedTuple):
    icon: str
    label: str
    date: str


def _environment() -> Environment:
    return Environment(loader=FileSystemLoader(TEMPLATE_DIR), autoescape=select_autoescape(['html', 'xml']))


def item_status(item: ActivityItem, window: ReportWindow) -> ItemStatus:
    """Icon, status label and display date, re-deriving the same in-window checks as the classifier."""
    phase = lifecycle_phase(item, window)
    table = _PR_STATUS if item.is_pull_request else _ISSUE_STATUS
    icon, label = table.get(phase, _UPDATED_STATUS)
    when = {
        MERGED: item.merged_at,
        CLOSED: item.closed_at,
        CREATED: item.created_at,
    }.get(phase, item.updated_at)
    return ItemStatus(icon, label, format_short_date(when) if when else "")


def _author_link(item: ActivityItem) -> str:
    if not item.author:
        return "unknown"
    return f'<a href="{item.author.url}">@{item.author.login}</a>'


def _author_markdown(item: ActivityItem) -> str:
    if not item.author:
        return "unknown"
    return f"[@{item.author.login}]({item.author.url})"


def summary_text(item: ActivityItem) -> str:
    """AI summary when present, else a one-line body excerpt, else a placeholder."""
    if item.ai_summary:
        return item.ai_summary
    if item.body:
        return item.body.replace('\n', ' ')[:BODY_EXCERPT_CHARS] + "..."
    return NO_DESCRIPTION


def render_item(item: ActivityItem, window: ReportWindow, style: str = 'details', env: Optional[Environment] = None) -> str:
    env = env or _environment()
    if style == 'bullet':
        tmpl = env.get_template('item_bullet.md.j2')
        return tmpl.render(item=item, status=item_status(item, window), author=_author_markdown(item))
    tmpl = env.get_template('item_details.md.j2')
    return tmpl.render(
        item=item,
        status=item_status(item, window),
        author=_author_link(item),
        summary=summary_text(item),
        link_text="📥 View Pull Request" if item.is_pull_request else "🐛 View Issue",
    )


def order_contributors(contributors: Dict[str, str], core_team: Sequence[str] = ()) -> List[Tuple[str, str]]:
    """Core team first in roster order (always listed), then everyone else alphabetically, each login once."""
    ordered: List[str] = []
    for login in core_team:
        if login not in ordered:
            ordered.append(login)
    ordered.extend(sorted(login for login in contributors if login not in ordered))
    return [(login, contributors.get(login) or f"https://github.com/{login}") for login in ordered]


def _contributor_links(contributors: Iterable[Tuple[str, str]]) -> List[str]:
    return [f"[{login}]({url})" for login, url in contributors]


def render_report(
    title: str,
    overview: str,
    pull_requests: Sequence[ActivityItem],
    issues: Sequence[ActivityItem],
    contributors: Sequence[Tuple[str, str]],
    window: ReportWindow,
    policy: ReportPolicy = DEFAULT_POLICY,
    model_label: str = "Gemini 2.0 Flash",
) -> str:
    """
    Render the full discussion body.

    Empty PR/Issue sections render a "no activity" sentence. With no activity at all the
    contributor section is omitted. The attribution footer is always appended.
    """
    env = _environment()
    pr_blocks = [render_item(pr, window, policy.item_style, env) for pr in pull_requests]
    issue_blocks = [render_item(issue, window, policy.item_style, env) for issue in issues]
    has_activity = bool(pull_requests or issues)
    tmpl = env.get_template('discussion.md.j2')
    return tmpl.render(
        title=title,
        overview=overview,
        pull_requests=pr_blocks,
        issues=issue_blocks,
        contributors=_contributor_links(contributors) if has_activity else [],
        item_separator="\n" if policy.item_style == 'bullet' else ITEM_SEPARATOR,
        footer=FOOTER.format(report_name=policy.report_name, model_label=model_label),
    )
