from __future__ import annotations

import logging

from ..api import ApiClient, APIRejection, TransportFailure
from ..models import ActionResult, Issue, Session
from ..session import ROUTE_PUBLIC, SessionStore

logger = logging.getLogger(__name__)


class DashboardController:
    """Shared lifecycle of the signed-in dashboards.

    The issue list is a view cache: `refresh()` replaces it wholesale from
    the server and every mutating action ends by calling it.
    """

    def __init__(self, api: ApiClient, store: SessionStore, session: Session):
        self.api = api
        self.store = store
        self.session = session
        self.load_error = ""

    @property
    def token(self) -> str:
        return self.session.token

    def fetch(self) -> list[Issue]:
        raise NotImplementedError

    def refresh(self) -> bool:
        """Re-fetch the collection. On failure the previous list is kept.

        Why:
        - Every write ends with a full re-fetch, so the list on screen is always
          what the API last returned (no local patching to drift).
        """
        try:
            issues = self.fetch()
        except (TransportFailure, APIRejection) as e:
            logger.error("Error loading issues: %s", e)
            self.load_error = "Could not load issues. Please try again."
            return False
        self.load_error = ""
        self.replace_issues(issues)
        return True

    def replace_issues(self, issues: list[Issue]) -> None:
        raise NotImplementedError

    def issue_detail(self, issue_id: str) -> tuple[Issue | None, ActionResult]:
        # Always a fresh request, even when the issue is already in memory.
        try:
            issue = self.api.get_issue(issue_id)
        except (TransportFailure, APIRejection) as e:
            logger.error("Error loading issue details for %s: %s", issue_id, e)
            return None, ActionResult(ok=False, message="Failed to load issue details")
        return issue, ActionResult(ok=True)

    def logout(self) -> ActionResult:
        self.store.clear()
        return ActionResult(ok=True, redirect=ROUTE_PUBLIC)
