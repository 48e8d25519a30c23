from __future__ import annotations

# ============================================================================
# PUBLIC LANDING PAGE
# ============================================================================
import logging

import pytz

from ..api import ApiClient, APIRejection, TransportFailure
from ..models import ActionResult, Issue, Session
from ..session import SessionStore, route_for_role
from ..views import CONTEXT_PUBLIC, render_issue_feed

logger = logging.getLogger(__name__)


class PublicController:
    """Read-only feed of every issue plus the login and sign-up forms."""

    def __init__(self, api: ApiClient, store: SessionStore):
        self.api = api
        self.store = store
        self.issues: list[Issue] = []
        self.load_error = ""

    def load(self) -> None:
        """Fetch the public feed.

        Why:
        - The feed is the first thing a visitor sees, so a failed fetch shows an
          empty feed plus a warning instead of taking the login forms down too.
        """
        try:
            self.issues = self.api.public_issues()
            self.load_error = ""
        except (TransportFailure, APIRejection) as e:
            logger.error("Error loading public issues: %s", e)
            self.issues = []
            self.load_error = "Could not load issues. Please try again later."

    def feed_markup(self, tz: pytz.BaseTzInfo = pytz.utc) -> str:
        return render_issue_feed(self.issues, CONTEXT_PUBLIC, tz)

    def _signed_in(self, session: Session) -> ActionResult:
        # Storage is only written after a 2xx response.
        self.store.save(session)
        return ActionResult(ok=True, message=f"Welcome, {session.user.name}!", redirect=route_for_role(session.user.role))

    def login(self, email: str, password: str) -> ActionResult:
        try:
            session = self.api.login(email, password)
        except APIRejection as e:
            return ActionResult(ok=False, message=e.user_message("Login failed"))
        except TransportFailure as e:
            logger.error("Login error: %s", e)
            return ActionResult(ok=False, message="Login failed. Please try again.")
        return self._signed_in(session)

    def signup(self, name: str, email: str, password: str, role: str) -> ActionResult:
        try:
            session = self.api.register(name, email, password, role)
        except APIRejection as e:
            return ActionResult(ok=False, message=e.user_message("Registration failed"))
        except TransportFailure as e:
            logger.error("Registration error: %s", e)
            return ActionResult(ok=False, message="Registration failed. Please try again.")
        return self._signed_in(session)
