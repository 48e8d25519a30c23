from __future__ import annotations

# ============================================================================
# VIEW RENDERING
# ============================================================================
# Render functions take structured data and return HTML markup. They hold no
# state, so the same input always produces the same markup; Streamlit pages
# only hand the result to st.markdown.
import logging
from datetime import datetime
from html import escape
from typing import Sequence

import pytz

from .models import Issue, Location

CONTEXT_PUBLIC = "public"
CONTEXT_CITIZEN = "citizen"
CONTEXT_ADMIN = "admin"

DATE_FORMAT = "%Y-%m-%d"

EMPTY_FEED_MARKUP = {
    CONTEXT_PUBLIC: "<p>No issues reported yet.</p>",
    CONTEXT_CITIZEN: (
        '<p class="empty-feed">No issues reported yet. '
        "<strong>Report your first issue</strong> with the form above.</p>"
    ),
    CONTEXT_ADMIN: "<p>No issues found.</p>",
}

FEED_CSS = """
<style>
.issue-card { border: 1px solid #e0e0e0; border-radius: 10px; overflow: hidden; margin-bottom: 1rem; background: #fff; }
.issue-image { width: 100%; max-height: 220px; object-fit: cover; }
.issue-content { padding: 0.75rem 1rem; }
.issue-title { font-weight: 700; font-size: 1.1rem; margin-bottom: 0.25rem; }
.issue-description { color: #444; margin-bottom: 0.5rem; }
.issue-meta { display: flex; gap: 0.5rem; margin-bottom: 0.5rem; }
.issue-category { background: #eef2ff; color: #3730a3; padding: 0.1rem 0.5rem; border-radius: 6px; }
.issue-status { padding: 0.1rem 0.5rem; border-radius: 6px; font-weight: 600; }
.status-pending { background: #fff7e6; color: #b45309; }
.status-in-progress { background: #e0f2fe; color: #0369a1; }
.status-resolved { background: #dcfce7; color: #15803d; }
.issue-reporter, .issue-date { color: #666; font-size: 0.85rem; }
.location-success { color: #15803d; }
.location-error { color: #b91c1c; }
</style>
"""

logger = logging.getLogger(__name__)


def format_date(value: str, tz: pytz.BaseTzInfo = pytz.utc) -> str:
    """Render an API timestamp as a calendar date in `tz`.

    Unparseable values are shown as-is so a bad row never breaks the feed.
    """
    raw = (value or "").strip()
    if not raw:
        return ""
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Failed to parse datetime from value=%r", value)
        return raw
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(tz).strftime(DATE_FORMAT)


def render_status_badge(issue: Issue) -> str:
    return f'<span class="issue-status status-{escape(issue.status_slug)}">{escape(issue.status)}</span>'


def render_issue_card(issue: Issue, context: str = CONTEXT_PUBLIC, tz: pytz.BaseTzInfo = pytz.utc) -> str:
    created = escape(format_date(issue.created_at, tz))
    if context == CONTEXT_CITIZEN:
        footer = f'<div class="issue-date">Reported on: {created}</div>'
    else:
        footer = (
            f'<div class="issue-reporter">Reported by: {escape(issue.reported_by.name)}</div>'
            f'<div class="issue-date">{created}</div>'
        )

    return (
        '<div class="issue-card">'
        f'<img src="{escape(issue.image_url)}" alt="Issue Image" class="issue-image">'
        '<div class="issue-content">'
        f'<div class="issue-title">{escape(issue.title)}</div>'
        f'<div class="issue-description">{escape(issue.description)}</div>'
        '<div class="issue-meta">'
        f'<span class="issue-category">{escape(issue.category)}</span>'
        f"{render_status_badge(issue)}"
        "</div>"
        f"{footer}"
        "</div>"
        "</div>"
    )


def render_issue_feed(issues: Sequence[Issue], context: str = CONTEXT_PUBLIC, tz: pytz.BaseTzInfo = pytz.utc) -> str:
    if not issues:
        return EMPTY_FEED_MARKUP.get(context, EMPTY_FEED_MARKUP[CONTEXT_PUBLIC])
    return "".join(render_issue_card(issue, context, tz) for issue in issues)


def render_issue_detail(issue: Issue, show_email: bool = False, tz: pytz.BaseTzInfo = pytz.utc) -> str:
    """Full detail view, including precise coordinates."""
    reporter = escape(issue.reported_by.name)
    if show_email and issue.reported_by.email:
        reporter += f" ({escape(issue.reported_by.email)})"

    parts = [
        f"<h2>{escape(issue.title)}</h2>",
        f'<img src="{escape(issue.image_url)}" alt="Issue Image" '
        'style="width: 100%; max-height: 300px; object-fit: cover; margin: 1rem 0;">',
        f"<p><strong>Description:</strong> {escape(issue.description)}</p>",
        f"<p><strong>Category:</strong> {escape(issue.category)}</p>",
        f"<p><strong>Status:</strong> {render_status_badge(issue)}</p>",
        f"<p><strong>Location:</strong> {issue.location.format(6)}</p>",
        f"<p><strong>Reported by:</strong> {reporter}</p>",
        f"<p><strong>Reported on:</strong> {escape(format_date(issue.created_at, tz))}</p>",
    ]
    if issue.updated_at != issue.created_at:
        parts.append(f"<p><strong>Last updated:</strong> {escape(format_date(issue.updated_at, tz))}</p>")
    return "".join(parts)


def render_location_status(location: Location | None, error: str = "") -> str:
    if error:
        return f'<div class="location-error">{escape(error)}</div>'
    if location is None:
        return ""
    return f'<div class="location-success">Location captured: {location.format(6)}</div>'
