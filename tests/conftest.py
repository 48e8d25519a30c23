from __future__ import annotations

import pytest

from civic_frontend.api import APIRejection
from civic_frontend.models import Issue, Session, User
from civic_frontend.session import SessionStore


def issue_payload(issue_id: str, status: str = "Pending", category: str = "Road", **overrides) -> dict:
    payload = {
        "_id": issue_id,
        "title": f"Issue {issue_id}",
        "description": "Large pothole near the bus stop",
        "category": category,
        "status": status,
        "imageUrl": f"https://img.example.com/{issue_id}.jpg",
        "location": {"latitude": 12.9715987, "longitude": 77.5945627},
        "reportedBy": {"name": "Asha", "email": "asha@example.com"},
        "createdAt": "2024-03-01T10:00:00.000Z",
        "updatedAt": "2024-03-01T10:00:00.000Z",
    }
    payload.update(overrides)
    return payload


def make_issue(issue_id: str, status: str = "Pending", category: str = "Road", **overrides) -> Issue:
    return Issue.from_api(issue_payload(issue_id, status, category, **overrides))


class FakeApi:
    """In-memory stand-in for ApiClient that records every call."""

    def __init__(self, issues: list[dict] | None = None):
        self.issues = {p["_id"]: dict(p) for p in (issues or [])}
        self.calls: list[tuple] = []
        self.users = {
            "citizen@example.com": ("secret", User("Asha", "citizen@example.com", "citizen")),
            "admin@example.com": ("secret", User("Ravi", "admin@example.com", "admin")),
        }
        self.fail_next: Exception | None = None

    def _maybe_fail(self) -> None:
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error

    def login(self, email, password):
        self.calls.append(("login", email))
        self._maybe_fail()
        known = self.users.get(email)
        if known is None or known[0] != password:
            raise APIRejection(401, "Invalid credentials")
        return Session(token=f"token-{email}", user=known[1])

    def register(self, name, email, password, role):
        self.calls.append(("register", email, role))
        self._maybe_fail()
        if email in self.users:
            raise APIRejection(400, "Email already registered")
        user = User(name, email, role)
        self.users[email] = (password, user)
        return Session(token=f"token-{email}", user=user)

    def _list(self) -> list[Issue]:
        return [Issue.from_api(p) for p in self.issues.values()]

    def public_issues(self):
        self.calls.append(("public_issues",))
        self._maybe_fail()
        return self._list()

    def my_issues(self, token):
        self.calls.append(("my_issues", token))
        self._maybe_fail()
        return self._list()

    def all_issues(self, token):
        self.calls.append(("all_issues", token))
        self._maybe_fail()
        return self._list()

    def get_issue(self, issue_id):
        self.calls.append(("get_issue", issue_id))
        self._maybe_fail()
        if issue_id not in self.issues:
            raise APIRejection(404, "Issue not found")
        return Issue.from_api(self.issues[issue_id])

    def update_status(self, token, issue_id, status):
        self.calls.append(("update_status", issue_id, status))
        self._maybe_fail()
        if issue_id not in self.issues:
            raise APIRejection(404, "Issue not found")
        self.issues[issue_id]["status"] = status
        self.issues[issue_id]["updatedAt"] = "2024-03-02T09:30:00.000Z"
        return self.issues[issue_id]

    def report_issue(self, token, report):
        self.calls.append(("report_issue", report))
        self._maybe_fail()
        new_id = f"new-{len(self.issues) + 1}"
        self.issues[new_id] = issue_payload(
            new_id,
            title=report.title,
            description=report.description,
            category=report.category,
            location={"latitude": report.latitude, "longitude": report.longitude},
        )
        return self.issues[new_id]

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi(
        [
            issue_payload("a1", "Pending", "Road"),
            issue_payload("a2", "In Progress", "Water"),
            issue_payload("a3", "Resolved", "Road"),
            issue_payload("a4", "Pending", "Electricity"),
        ]
    )


@pytest.fixture
def store() -> SessionStore:
    return SessionStore({})


@pytest.fixture
def citizen_session() -> Session:
    return Session(token="citizen-token", user=User("Asha", "citizen@example.com", "citizen"))


@pytest.fixture
def admin_session() -> Session:
    return Session(token="admin-token", user=User("Ravi", "admin@example.com", "admin"))


