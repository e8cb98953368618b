from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from src.auth.session import Session
from src.models.notifications import Notifier
from src.repository.collections import ApplicationRepository, ScholarshipRepository, UserRepository
from src.store.kv_store import MemoryStore
from src.workflow.applications import (
    apply_block_reasons,
    can_apply,
    is_expired,
    review_application,
    submit_application,
)
from src.workflow.documents import Attachment, decode_document

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class Platform:
    """One shared store with a signed-in session per demo account."""

    def __init__(self) -> None:
        self.store = MemoryStore()
        self.users = UserRepository(self.store)
        self.scholarships = ScholarshipRepository(self.store)
        self.applications = ApplicationRepository(self.store, scholarships=self.scholarships)

    def signed_in(self, email: str, role: str, profile: dict[str, Any], *, approved: bool = True) -> Session:
        user = self.users.create({"email": email, "password": "pw", "role": role, "profile": profile})
        if approved:
            self.users.approve(user.id)
        session = Session(self.store, notifier=Notifier(), users=self.users)
        if approved:
            assert session.login(email, "pw")
        else:
            session._persist(self.users.get_by_id(user.id))
        return session

    def scholarship(self, university_id: str, **overrides: Any):
        fields = {
            "name": "Excellence in STEM Scholarship",
            "description": "Recognizes outstanding STEM students.",
            "amount": 5000,
            "deadline": "2026-04-01",
            "eligibility_criteria": "Minimum GPA of 3.5.",
            "requirements": ["Transcript"],
            "university_id": university_id,
            "university_name": "Demo University",
            "is_active": True,
        }
        fields.update(overrides)
        return self.scholarships.create(fields)


@pytest.fixture()
def platform() -> Platform:
    return Platform()


@pytest.fixture()
def school(platform: Platform) -> Session:
    return platform.signed_in("school@x.com", "school", {"name": "Demo University"})


@pytest.fixture()
def student(platform: Platform) -> Session:
    return platform.signed_in("a@x.com", "student", {"firstName": "Ada", "lastName": "Lovelace", "gpa": 3.9})


def test_short_essay_is_rejected_without_touching_the_store(
    platform: Platform, school: Session, student: Session
) -> None:
    scholarship = platform.scholarship(school.user.id)

    result = submit_application(
        student, platform.scholarships, platform.applications, scholarship.id, "x" * 99, now=NOW
    )

    assert result is None
    assert student.notifier.last.title == "Essay too short"
    assert platform.applications.list_all() == []
    assert platform.scholarships.get_by_id(scholarship.id).application_count == 0


def test_valid_essay_creates_pending_application_and_bumps_counter(
    platform: Platform, school: Session, student: Session
) -> None:
    scholarship = platform.scholarship(school.user.id)

    application = submit_application(
        student, platform.scholarships, platform.applications, scholarship.id, "x" * 100, now=NOW
    )

    assert application is not None
    assert application.status == "pending"
    assert application.student_id == student.user.id
    assert application.student_name == "Ada Lovelace"
    assert application.scholarship_name == "Excellence in STEM Scholarship"
    assert student.notifier.last.title == "Application Submitted"
    assert platform.scholarships.get_by_id(scholarship.id).application_count == 1


def test_past_deadline_blocks_application_even_when_active(
    platform: Platform, school: Session, student: Session
) -> None:
    scholarship = platform.scholarship(school.user.id, deadline="2026-02-01")

    assert scholarship.is_active
    assert is_expired(scholarship, NOW)
    assert apply_block_reasons(student, scholarship, platform.applications, now=NOW) == ["DEADLINE_PASSED"]

    result = submit_application(
        student, platform.scholarships, platform.applications, scholarship.id, "x" * 150, now=NOW
    )

    assert result is None
    assert student.notifier.last.title == "Scholarship Expired"


def test_unparseable_deadline_does_not_count_as_expired(platform: Platform, school: Session) -> None:
    scholarship = platform.scholarship(school.user.id, deadline="soon")

    assert is_expired(scholarship, NOW) is False


def test_student_cannot_apply_twice(platform: Platform, school: Session, student: Session) -> None:
    scholarship = platform.scholarship(school.user.id)
    essay = "x" * 120

    assert submit_application(student, platform.scholarships, platform.applications, scholarship.id, essay, now=NOW)
    assert not can_apply(student, scholarship, platform.applications, now=NOW)

    second = submit_application(
        student, platform.scholarships, platform.applications, scholarship.id, essay, now=NOW
    )

    assert second is None
    assert student.notifier.last.title == "Already Applied"
    assert len(platform.applications.list_all()) == 1


def test_only_approved_students_may_apply(platform: Platform, school: Session) -> None:
    scholarship = platform.scholarship(school.user.id)
    pending = platform.signed_in("p@x.com", "student", {"firstName": "Pat"}, approved=False)
    anonymous = Session(MemoryStore())

    assert apply_block_reasons(school, scholarship, platform.applications, now=NOW) == ["NOT_STUDENT"]
    assert apply_block_reasons(pending, scholarship, platform.applications, now=NOW) == ["NOT_APPROVED"]
    assert apply_block_reasons(anonymous, scholarship, platform.applications, now=NOW) == ["NOT_AUTHENTICATED"]

    assert submit_application(school, platform.scholarships, platform.applications, scholarship.id, "x" * 120) is None
    assert school.notifier.last.title == "Access Denied"


def test_missing_scholarship_is_reported(platform: Platform, student: Session) -> None:
    result = submit_application(student, platform.scholarships, platform.applications, "missing", "x" * 120)

    assert result is None
    assert student.notifier.last.title == "Scholarship Not Found"


def test_attachments_are_inlined_as_data_urls(platform: Platform, school: Session, student: Session) -> None:
    scholarship = platform.scholarship(school.user.id)

    application = submit_application(
        student,
        platform.scholarships,
        platform.applications,
        scholarship.id,
        "x" * 120,
        [Attachment(name="transcript.pdf", payload=b"%PDF-1.4 transcript")],
        now=NOW,
    )

    stored = platform.applications.get_by_id(application.id)
    document = stored.documents[0]
    assert document.name == "transcript.pdf"
    assert document.mime_type == "application/pdf"
    assert document.base64_data.startswith("data:application/pdf;base64,")
    assert decode_document(document) == b"%PDF-1.4 transcript"


def test_owning_school_review_changes_only_target_status(
    platform: Platform, school: Session, student: Session
) -> None:
    first = platform.scholarship(school.user.id)
    second = platform.scholarship(school.user.id, name="Arts Award")
    target = submit_application(student, platform.scholarships, platform.applications, first.id, "x" * 120, now=NOW)
    other = submit_application(student, platform.scholarships, platform.applications, second.id, "y" * 120, now=NOW)

    assert review_application(school, platform.scholarships, platform.applications, target.id, "accepted")

    assert platform.applications.get_by_id(target.id).status == "accepted"
    assert platform.applications.get_by_id(other.id) == other
    assert school.notifier.last.description == "Application status set to accepted"


def test_review_is_denied_for_other_schools_and_students(
    platform: Platform, school: Session, student: Session
) -> None:
    scholarship = platform.scholarship(school.user.id)
    application = submit_application(
        student, platform.scholarships, platform.applications, scholarship.id, "x" * 120, now=NOW
    )
    rival = platform.signed_in("rival@x.com", "school", {"name": "Rival College"})

    assert not review_application(rival, platform.scholarships, platform.applications, application.id, "rejected")
    assert rival.notifier.last.title == "Access Denied"
    assert not review_application(student, platform.scholarships, platform.applications, application.id, "accepted")
    assert platform.applications.get_by_id(application.id).status == "pending"


def test_reviewed_application_cannot_change_again(
    platform: Platform, school: Session, student: Session
) -> None:
    scholarship = platform.scholarship(school.user.id)
    application = submit_application(
        student, platform.scholarships, platform.applications, scholarship.id, "x" * 120, now=NOW
    )
    review_application(school, platform.scholarships, platform.applications, application.id, "rejected")

    assert not review_application(school, platform.scholarships, platform.applications, application.id, "accepted")
    assert school.notifier.last.title == "Invalid Status Change"
    assert not review_application(school, platform.scholarships, platform.applications, application.id, "pending")
    with pytest.raises(ValueError):
        review_application(school, platform.scholarships, platform.applications, application.id, "withdrawn")
    assert platform.applications.get_by_id(application.id).status == "rejected"


def test_naive_now_is_compared_as_utc(platform: Platform, school: Session) -> None:
    scholarship = platform.scholarship(school.user.id, deadline="2026-04-01T00:00:00.000Z")

    assert is_expired(scholarship, datetime(2026, 3, 31, 23, 59)) is False
    assert is_expired(scholarship, datetime(2026, 4, 1, 0, 1)) is True
