from __future__ import annotations

# ============================================================================
# FILTERS & AGGREGATES
# ============================================================================
# Pure functions over an already-fetched issue list. None of them touch the
# network or mutate their input.
from dataclasses import dataclass
from typing import Iterable, Sequence

import pandas as pd

from .models import STATUS_LEVELS, Issue


@dataclass(frozen=True)
class IssueStats:
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0


def filter_issues(issues: Sequence[Issue], status: str = "", category: str = "") -> list[Issue]:
    """Subset of `issues` matching both predicates. An empty predicate matches all."""
    return [
        issue
        for issue in issues
        if (not status or issue.status == status) and (not category or issue.category == category)
    ]


def compute_stats(issues: Iterable[Issue]) -> IssueStats:
    total = pending = in_progress = resolved = 0
    for issue in issues:
        total += 1
        if issue.status == "Pending":
            pending += 1
        elif issue.status == "In Progress":
            in_progress += 1
        elif issue.status == "Resolved":
            resolved += 1
    return IssueStats(total=total, pending=pending, in_progress=in_progress, resolved=resolved)


def issues_to_frame(issues: Sequence[Issue]) -> pd.DataFrame:
    """Flatten issues into a table for export."""
    columns = [
        "id",
        "title",
        "description",
        "category",
        "status",
        "latitude",
        "longitude",
        "reported_by",
        "reporter_email",
        "created_at",
        "updated_at",
        "image_url",
    ]
    rows = [
        {
            "id": issue.id,
            "title": issue.title,
            "description": issue.description,
            "category": issue.category,
            "status": issue.status,
            "latitude": issue.location.latitude,
            "longitude": issue.location.longitude,
            "reported_by": issue.reported_by.name,
            "reporter_email": issue.reported_by.email,
            "created_at": issue.created_at,
            "updated_at": issue.updated_at,
            "image_url": issue.image_url,
        }
        for issue in issues
    ]
    return pd.DataFrame(rows, columns=columns)


def status_counts(issues: Sequence[Issue]) -> pd.Series:
    """Issue count per status, in lifecycle order (zeros included)."""
    statuses = pd.Series([issue.status for issue in issues], dtype="object")
    return statuses.value_counts().reindex(STATUS_LEVELS, fill_value=0)
