from __future__ import annotations

# ============================================================================
# ADMIN DASHBOARD
# ============================================================================
import logging
from typing import Any

from ..api import APIRejection, TransportFailure
from ..issues import IssueStats, compute_stats, filter_issues
from ..models import ActionResult, Issue
from .base import DashboardController

logger = logging.getLogger(__name__)


class AdminController(DashboardController):
    """Every issue across all users, with filters and status updates.

    `filtered_issues` is always the subset of `all_issues` that matches the
    current status/category filters.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.all_issues: list[Issue] = []
        self.filtered_issues: list[Issue] = []
        self.status_filter = ""
        self.category_filter = ""

    def fetch(self) -> list[Issue]:
        return self.api.all_issues(self.token)

    def replace_issues(self, issues: list[Issue]) -> None:
        self.all_issues = issues
        self.filtered_issues = filter_issues(self.all_issues, self.status_filter, self.category_filter)

    def apply_filter(self, status: str = "", category: str = "") -> list[Issue]:
        self.status_filter = status or ""
        self.category_filter = category or ""
        self.filtered_issues = filter_issues(self.all_issues, self.status_filter, self.category_filter)
        return self.filtered_issues

    def stats(self) -> IssueStats:
        return compute_stats(self.all_issues)

    def update_status(self, issue_id: str, new_status: str) -> ActionResult | None:
        """Send a status change, then refresh from the server.

        Returns None without a request when no status was selected. Any
        transition is allowed here; legality is the server's concern.
        """
        if not new_status:
            return None

        try:
            self.api.update_status(self.token, issue_id, new_status)
        except APIRejection as e:
            return ActionResult(ok=False, message=e.user_message("Failed to update issue status"))
        except TransportFailure as e:
            logger.error("Update error: %s", e)
            return ActionResult(ok=False, message="Failed to update issue status. Please try again.")

        logger.info("Issue %s set to %r by %s", issue_id, new_status, self.session.user.email)
        self.refresh()
        return ActionResult(ok=True, message="Issue status updated successfully!")
