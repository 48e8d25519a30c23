from __future__ import annotations

# ============================================================================
# DATA MODELS
# ============================================================================
# Issues are owned by the REST API. The front end only ever holds read-only
# copies, so every record here is a frozen dataclass built from API JSON.
from dataclasses import dataclass
from typing import Any, Mapping

STATUS_LEVELS = ["Pending", "In Progress", "Resolved"]

# Offered by the report form and the admin filter. The API owns the real set.
ISSUE_CATEGORIES = [
    "Road",
    "Water",
    "Electricity",
    "Garbage",
    "Drainage",
    "Street Light",
    "Other",
]

ROLE_CITIZEN = "citizen"
ROLE_ADMIN = "admin"
ROLES = [ROLE_CITIZEN, ROLE_ADMIN]


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    def format(self, precision: int = 6) -> str:
        return f"{self.latitude:.{precision}f}, {self.longitude:.{precision}f}"

    @classmethod
    def from_api(cls, payload: Mapping[str, Any] | None) -> "Location":
        payload = payload or {}
        return cls(
            latitude=_as_float(payload.get("latitude")),
            longitude=_as_float(payload.get("longitude")),
        )


@dataclass(frozen=True)
class Reporter:
    """Denormalized snapshot of the reporting user."""

    name: str
    email: str = ""


@dataclass(frozen=True)
class Issue:
    """A reported civic problem as returned by the API."""

    id: str
    title: str
    description: str
    category: str
    status: str
    image_url: str
    location: Location
    reported_by: Reporter
    created_at: str
    updated_at: str

    @property
    def status_slug(self) -> str:
        """CSS slug for the status badge ("In Progress" -> "in-progress")."""
        return self.status.lower().replace(" ", "-", 1)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Issue":
        reporter = payload.get("reportedBy") or {}
        return cls(
            id=str(payload.get("_id") or payload.get("id") or ""),
            title=str(payload.get("title", "")),
            description=str(payload.get("description", "")),
            category=str(payload.get("category", "")),
            status=str(payload.get("status", "")),
            image_url=str(payload.get("imageUrl", "") or ""),
            location=Location.from_api(payload.get("location")),
            reported_by=Reporter(
                name=str(reporter.get("name", "")),
                email=str(reporter.get("email", "")),
            ),
            created_at=str(payload.get("createdAt", "") or ""),
            updated_at=str(payload.get("updatedAt", "") or ""),
        )


@dataclass(frozen=True)
class User:
    name: str
    email: str
    role: str

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "User":
        return cls(
            name=str(payload.get("name", "")),
            email=str(payload.get("email", "")),
            role=str(payload.get("role", "")),
        )

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email, "role": self.role}


@dataclass(frozen=True)
class Session:
    """Authenticated identity and bearer credential for the current browser."""

    token: str
    user: User


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a user action, ready to be surfaced by the page.

    `redirect` names the route to navigate to, `reset_form` asks the page to
    clear the form that triggered the action.
    """

    ok: bool
    message: str = ""
    redirect: str | None = None
    reset_form: bool = False
