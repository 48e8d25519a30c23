import pytz

from civic_frontend.models import Location
from civic_frontend.views import (
    CONTEXT_ADMIN,
    CONTEXT_CITIZEN,
    CONTEXT_PUBLIC,
    format_date,
    render_issue_card,
    render_issue_detail,
    render_issue_feed,
    render_location_status,
)

from conftest import make_issue


def test_feed_rendering_is_idempotent():
    issues = [make_issue("1"), make_issue("2", "In Progress")]
    assert render_issue_feed(issues, CONTEXT_ADMIN) == render_issue_feed(issues, CONTEXT_ADMIN)


def test_feed_contains_one_card_per_issue():
    issues = [make_issue("1"), make_issue("2"), make_issue("3")]
    assert render_issue_feed(issues).count('class="issue-card"') == 3


def test_empty_feed_placeholders_depend_on_context():
    public = render_issue_feed([], CONTEXT_PUBLIC)
    citizen = render_issue_feed([], CONTEXT_CITIZEN)
    admin = render_issue_feed([], CONTEXT_ADMIN)

    assert "No issues reported yet." in public
    assert "Report your first issue" in citizen
    assert "No issues found." in admin
    assert "Report your first issue" not in admin


def test_status_badge_uses_normalised_slug():
    card = render_issue_card(make_issue("1", "In Progress"))
    assert 'class="issue-status status-in-progress"' in card
    assert ">In Progress<" in card


def test_card_shows_reporter_except_for_citizens():
    issue = make_issue("1")
    assert "Reported by: Asha" in render_issue_card(issue, CONTEXT_PUBLIC)
    citizen_card = render_issue_card(issue, CONTEXT_CITIZEN)
    assert "Reported by" not in citizen_card
    assert "Reported on: 2024-03-01" in citizen_card


def test_card_escapes_user_text():
    issue = make_issue("1", title="<script>alert(1)</script>")
    card = render_issue_card(issue)
    assert "<script>" not in card
    assert "&lt;script&gt;" in card


def test_format_date_converts_to_timezone():
    kolkata = pytz.timezone("Asia/Kolkata")
    assert format_date("2024-03-01T20:00:00.000Z") == "2024-03-01"
    assert format_date("2024-03-01T20:00:00.000Z", kolkata) == "2024-03-02"


def test_format_date_returns_raw_text_when_unparseable():
    assert format_date("yesterday") == "yesterday"
    assert format_date("") == ""


def test_detail_has_six_decimal_coordinates():
    detail = render_issue_detail(make_issue("1", location={"latitude": 12.5, "longitude": -0.1234567}))
    assert "12.500000, -0.123457" in detail


def test_detail_shows_last_updated_only_when_timestamps_differ():
    same = make_issue("1")
    changed = make_issue("2", updatedAt="2024-03-05T08:00:00.000Z")
    assert "Last updated" not in render_issue_detail(same)
    assert "Last updated:</strong> 2024-03-05" in render_issue_detail(changed)


def test_detail_shows_reporter_email_for_admins_only():
    issue = make_issue("1")
    assert "asha@example.com" in render_issue_detail(issue, show_email=True)
    assert "asha@example.com" not in render_issue_detail(issue, show_email=False)


def test_location_status_markup():
    assert render_location_status(None) == ""
    assert "Location captured: 1.000000, 2.000000" in render_location_status(Location(1.0, 2.0))
    assert "location-error" in render_location_status(None, "Error getting location. Please try again.")
