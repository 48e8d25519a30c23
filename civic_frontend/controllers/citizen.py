from __future__ import annotations

# ============================================================================
# CITIZEN DASHBOARD
# ============================================================================
import logging
from typing import Any, Mapping

from ..api import APIRejection, IssueReport, ReportImage, TransportFailure
from ..issues import IssueStats, compute_stats
from ..models import ActionResult, Issue, Location
from .base import DashboardController

LOCATION_ERROR = "Error getting location. Please try again."

logger = logging.getLogger(__name__)


class CitizenController(DashboardController):
    """The signed-in citizen's own issues and the report form."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.issues: list[Issue] = []
        self.location: Location | None = None
        self.location_error = ""

    def fetch(self) -> list[Issue]:
        return self.api.my_issues(self.token)

    def replace_issues(self, issues: list[Issue]) -> None:
        self.issues = issues

    def stats(self) -> IssueStats:
        return compute_stats(self.issues)

    def capture_location(self, fix: Mapping[str, Any] | None) -> ActionResult:
        """Consume one answer of the platform location service.

        `fix` carries `latitude`/`longitude`, or nothing usable when the
        request failed or was denied. A failure keeps any earlier fix.
        """
        latitude = fix.get("latitude") if fix else None
        longitude = fix.get("longitude") if fix else None
        if not isinstance(latitude, (int, float)) or not isinstance(longitude, (int, float)):
            logger.warning("Geolocation error: %r", fix)
            self.location_error = LOCATION_ERROR
            return ActionResult(ok=False, message=LOCATION_ERROR)

        self.location = Location(latitude=float(latitude), longitude=float(longitude))
        self.location_error = ""
        return ActionResult(ok=True, message=f"Location captured: {self.location.format(6)}")

    def clear_location(self) -> None:
        self.location = None
        self.location_error = ""

    def submit_report(self, title: str, description: str, category: str, image: ReportImage) -> ActionResult:
        if self.location is None:
            return ActionResult(ok=False, message="Please get your current location first.")

        report = IssueReport(
            title=title,
            description=description,
            category=category,
            latitude=self.location.latitude,
            longitude=self.location.longitude,
            image=image,
        )
        try:
            self.api.report_issue(self.token, report)
        except APIRejection as e:
            return ActionResult(ok=False, message=e.user_message("Failed to report issue"))
        except TransportFailure as e:
            logger.error("Report error: %s", e)
            return ActionResult(ok=False, message="Failed to report issue. Please try again.")

        logger.info("Issue %r reported by %s", title, self.session.user.email)
        self.clear_location()
        self.refresh()
        return ActionResult(ok=True, message="Issue reported successfully!", reset_form=True)
