from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from src.catalog.browse import (
    admin_overview,
    browse_scholarships,
    featured_scholarships,
    platform_stats,
    school_overview,
)
from src.models.entities import AdminProfile, Application, Scholarship, SchoolProfile, StudentProfile, User

NOW = datetime(2026, 3, 1, tzinfo=UTC)


def _scholarship(scholarship_id: str, **overrides: Any) -> Scholarship:
    fields = {
        "id": scholarship_id,
        "name": f"Scholarship {scholarship_id}",
        "description": "General support.",
        "amount": 1000,
        "deadline": "2026-06-01",
        "eligibility_criteria": "Open to all.",
        "university_id": "3",
        "university_name": "Demo University",
        "is_active": True,
    }
    fields.update(overrides)
    return Scholarship(**fields)


def _application(application_id: str, scholarship_id: str, status: str = "pending") -> Application:
    return Application(id=application_id, scholarship_id=scholarship_id, student_id="2", status=status)


def test_browse_hides_inactive_scholarships() -> None:
    page = browse_scholarships([_scholarship("1"), _scholarship("2", is_active=False)])

    assert [item.id for item in page.items] == ["1"]
    assert page.total == 1


def test_search_is_case_insensitive_across_name_university_and_description() -> None:
    items = [
        _scholarship("1", name="Excellence in STEM Scholarship"),
        _scholarship("2", university_name="Stemford College"),
        _scholarship("3", description="For future STEM teachers."),
        _scholarship("4", name="Arts Award"),
        _scholarship("5", name="stem (part-time)", is_active=False),
    ]

    page = browse_scholarships(items, search_term="stem")

    assert [item.id for item in page.items] == ["1", "2", "3"]


def test_search_treats_input_as_literal_text() -> None:
    items = [_scholarship("1", name="C++ Developers Fund"), _scholarship("2", name="Cello Fund")]

    page = browse_scholarships(items, search_term="c++")

    assert [item.id for item in page.items] == ["1"]


def test_sorts_by_deadline_amount_and_name() -> None:
    items = [
        _scholarship("1", name="beta", amount=3000, deadline="2026-05-01"),
        _scholarship("2", name="Alpha", amount=7500, deadline="not a date"),
        _scholarship("3", name="gamma", amount=5000, deadline="2026-04-01"),
    ]

    assert [item.id for item in browse_scholarships(items, sort_by="deadline").items] == ["3", "1", "2"]
    assert [item.id for item in browse_scholarships(items, sort_by="amount").items] == ["2", "3", "1"]
    assert [item.id for item in browse_scholarships(items, sort_by="name").items] == ["2", "1", "3"]
    with pytest.raises(ValueError, match="popularity"):
        browse_scholarships(items, sort_by="popularity")


def test_ten_matches_span_two_pages_of_nine() -> None:
    items = [_scholarship(str(index), name=f"Award {index:02d}") for index in range(10)]

    first = browse_scholarships(items, sort_by="name", page=1)
    second = browse_scholarships(items, sort_by="name", page=2)

    assert first.total_pages == 2
    assert len(first.items) == 9
    assert [item.name for item in second.items] == ["Award 09"]


def test_page_numbers_are_clamped_to_available_range() -> None:
    items = [_scholarship(str(index)) for index in range(3)]

    assert browse_scholarships(items, page=5).page == 1
    assert browse_scholarships(items, page=0).page == 1
    empty = browse_scholarships([], search_term="anything")
    assert empty.items == []
    assert empty.total_pages == 0
    assert empty.page == 1


def test_featured_keeps_insertion_order_of_open_scholarships() -> None:
    items = [
        _scholarship("1", deadline="2026-02-01"),
        _scholarship("2", deadline="2026-09-01"),
        _scholarship("3", deadline="2026-04-01", is_active=False),
        *[_scholarship(str(index), deadline="2026-05-01") for index in range(4, 11)],
    ]

    featured = featured_scholarships(items, now=NOW)

    assert [item.id for item in featured] == ["2", "4", "5", "6", "7", "8"]
    assert featured_scholarships([], now=NOW) == []


def test_platform_stats_cover_every_scholarship() -> None:
    items = [_scholarship("1", amount=5000), _scholarship("2", amount=2500.5, is_active=False)]
    applications = [_application("a1", "1"), _application("a2", "1")]

    assert platform_stats(items, applications) == {
        "total_scholarships": 2,
        "total_amount": 7500.5,
        "total_applications": 2,
    }


def test_admin_overview_counts_roles_and_pending_accounts() -> None:
    stamp = "2026-01-01T00:00:00.000Z"
    users = [
        User("1", "admin@x.com", "pw", "admin", True, stamp, AdminProfile()),
        User("2", "a@x.com", "pw", "student", False, stamp, StudentProfile()),
        User("3", "b@x.com", "pw", "student", True, stamp, StudentProfile()),
        User("4", "s@x.com", "pw", "school", False, stamp, SchoolProfile(name="Demo")),
    ]
    items = [_scholarship("1"), _scholarship("2", is_active=False), _scholarship("3")]

    assert admin_overview(users, items) == {
        "admins": 1,
        "students": 2,
        "schools": 1,
        "total_users": 4,
        "pending_approvals": 2,
        "active_scholarships": 2,
        "inactive_scholarships": 1,
    }


def test_school_overview_only_counts_owned_scholarships() -> None:
    items = [_scholarship("1"), _scholarship("2"), _scholarship("9", university_id="other")]
    applications = [
        _application("a1", "1"),
        _application("a2", "1", "accepted"),
        _application("a3", "2", "rejected"),
        _application("a4", "9"),
    ]

    assert school_overview("3", items, applications) == {
        "scholarships": 2,
        "applications": 3,
        "pending": 1,
        "accepted": 1,
        "rejected": 1,
    }
    assert school_overview("nobody", items, applications)["applications"] == 0
