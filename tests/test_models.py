from civic_frontend.models import Issue, Location

from conftest import issue_payload


def test_issue_from_api_reads_nested_fields():
    issue = Issue.from_api(issue_payload("abc", "In Progress", "Water"))

    assert issue.id == "abc"
    assert issue.category == "Water"
    assert issue.image_url == "https://img.example.com/abc.jpg"
    assert issue.location == Location(12.9715987, 77.5945627)
    assert issue.reported_by.name == "Asha"
    assert issue.reported_by.email == "asha@example.com"


def test_issue_from_api_accepts_plain_id_and_missing_fields():
    issue = Issue.from_api({"id": 7, "title": "Leak", "status": "Pending"})

    assert issue.id == "7"
    assert issue.image_url == ""
    assert issue.location == Location(0.0, 0.0)
    assert issue.reported_by.name == ""
    assert issue.created_at == ""


def test_status_slug():
    assert Issue.from_api({"status": "Pending"}).status_slug == "pending"
    assert Issue.from_api({"status": "In Progress"}).status_slug == "in-progress"


def test_location_format_six_decimals():
    assert Location(1.23456789, -9.87654321).format() == "1.234568, -9.876543"
