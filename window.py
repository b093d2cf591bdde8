"""
Report window calculation.

Two strategies are supported:
- weekly: [start of day 7 days ago, end of day yesterday]. Run on a Saturday, the
  report covers the previous Saturday through Friday.
- rolling: [now - 7 days, now] using full instants, no day-boundary snapping.

All times are UTC. Window membership compares parsed datetimes, never raw strings.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Optional

WEEKLY = "weekly"
ROLLING = "rolling"
STRATEGIES = (WEEKLY, ROLLING)

DEFAULT_REPORT_NAME = "Week in AWL"


@dataclass(frozen=True)
class ReportWindow:
    start: datetime
    end: datetime
    title: str
    search_range: str

    def contains(self, ts: Optional[datetime]) -> bool:
        """Inclusive membership test; a missing timestamp is never in the window."""
        if ts is None:
            return False
        return self.start <= ts <= self.end


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an API timestamp such as 2024-01-10T12:00:00Z into an aware UTC datetime."""
    if not value:
        return None
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_override(value: str) -> datetime:
    """Parse a date override (ISO date or datetime). Raises ValueError when unparseable."""
    text = (value or "").strip()
    if not text:
        raise ValueError("empty date override")
    return parse_timestamp(text)


def format_title_date(dt: datetime) -> str:
    """Format as '6 January 2024'."""
    return f"{dt.day} {dt.strftime('%B %Y')}"


def format_short_date(dt: datetime) -> str:
    """Format as 'Jan 6'."""
    return f"{dt.strftime('%b')} {dt.day}"


def _weekly_bounds(now: datetime):
    start = datetime.combine((now - timedelta(days=7)).date(), time.min, tzinfo=timezone.utc)
    end = datetime.combine((now - timedelta(days=1)).date(), time.max, tzinfo=timezone.utc)
    return start, end, f"{start:%Y-%m-%d}..{end:%Y-%m-%d}"


def _rolling_bounds(now: datetime):
    start = now - timedelta(days=7)
    return start, now, f"{start:%Y-%m-%dT%H:%M:%SZ}..{now:%Y-%m-%dT%H:%M:%SZ}"


def compute_window(now: Optional[datetime] = None, strategy: str = WEEKLY, report_name: str = DEFAULT_REPORT_NAME) -> ReportWindow:
    """Derive the report window and its display title from `now` (defaults to the wall clock)."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)

    if strategy == WEEKLY:
        start, end, search_range = _weekly_bounds(now)
    elif strategy == ROLLING:
        start, end, search_range = _rolling_bounds(now)
    else:
        raise ValueError(f"Unknown window strategy: {strategy!r} (expected one of {', '.join(STRATEGIES)})")

    title = f"{report_name} | {format_title_date(start)} - {format_title_date(end)}"
    return ReportWindow(start=start, end=end, title=title, search_range=search_range)
