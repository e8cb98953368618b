from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from src.auth.session import Session
from src.models.entities import Application, Scholarship, parse_timestamp, utc_now, validate_status
from src.repository.collections import ApplicationRepository, ScholarshipRepository
from src.workflow.documents import Attachment, encode_attachments

ESSAY_MIN_CHARS = 100
REVIEW_OUTCOMES = ("accepted", "rejected")

logger = logging.getLogger(__name__)


def is_expired(scholarship: Scholarship, now: datetime | None = None) -> bool:
    deadline = scholarship.deadline_at
    if deadline is None:
        return False
    # Naive `now` is read as UTC, like stored timestamps.
    cutoff = parse_timestamp(now) if now is not None else utc_now()
    return deadline < cutoff


def apply_block_reasons(
    session: Session,
    scholarship: Scholarship | None,
    applications: ApplicationRepository,
    *,
    now: datetime | None = None,
) -> list[str]:
    """Reason codes preventing the current user from applying; empty means allowed."""

    user = session.user
    if user is None:
        return ["NOT_AUTHENTICATED"]
    reasons: list[str] = []
    if user.role != "student":
        reasons.append("NOT_STUDENT")
    elif not user.is_approved:
        reasons.append("NOT_APPROVED")
    if scholarship is None:
        reasons.append("SCHOLARSHIP_NOT_FOUND")
        return reasons
    if is_expired(scholarship, now):
        reasons.append("DEADLINE_PASSED")
    if user.role == "student" and applications.has_applied(user.id, scholarship.id):
        reasons.append("ALREADY_APPLIED")
    return reasons


def can_apply(
    session: Session,
    scholarship: Scholarship | None,
    applications: ApplicationRepository,
    *,
    now: datetime | None = None,
) -> bool:
    return not apply_block_reasons(session, scholarship, applications, now=now)


_BLOCK_MESSAGES = {
    "NOT_AUTHENTICATED": ("Login Required", "Please login as a student to apply."),
    "NOT_STUDENT": ("Access Denied", "Only students can apply for scholarships."),
    "NOT_APPROVED": ("Account Pending", "Your account is pending approval."),
    "SCHOLARSHIP_NOT_FOUND": ("Scholarship Not Found", "This scholarship no longer exists."),
    "DEADLINE_PASSED": ("Scholarship Expired", "The application deadline has passed."),
    "ALREADY_APPLIED": ("Already Applied", "You have already applied for this scholarship."),
}


def submit_application(
    session: Session,
    scholarships: ScholarshipRepository,
    applications: ApplicationRepository,
    scholarship_id: str,
    essay: str,
    attachments: Iterable[Attachment] = (),
    *,
    now: datetime | None = None,
) -> Application | None:
    scholarship = scholarships.get_by_id(scholarship_id)
    reasons = apply_block_reasons(session, scholarship, applications, now=now)
    if reasons:
        title, description = _BLOCK_MESSAGES[reasons[0]]
        session.notifier.error(title, description)
        return None

    if len(essay) < ESSAY_MIN_CHARS:
        session.notifier.error(
            "Essay too short",
            f"Please write at least {ESSAY_MIN_CHARS} characters for your essay.",
        )
        return None

    user = session.user
    documents = encode_attachments(list(attachments))
    application = applications.create(
        {
            "scholarship_id": scholarship.id,
            "student_id": user.id,
            "status": "pending",
            "essay": essay,
            "documents": documents,
            "student_name": user.profile.display_name,
            "scholarship_name": scholarship.name,
        }
    )
    session.notifier.notify("Application Submitted", "Your application has been submitted successfully!")
    return application


def review_application(
    session: Session,
    scholarships: ScholarshipRepository,
    applications: ApplicationRepository,
    application_id: str,
    status: str,
) -> bool:
    validate_status(status)
    user = session.user
    if user is None or user.role != "school":
        session.notifier.error("Access Denied", "Only the owning school can review applications.")
        return False

    application = applications.get_by_id(application_id)
    if application is None:
        session.notifier.error("Application Not Found", "This application no longer exists.")
        return False
    scholarship = scholarships.get_by_id(application.scholarship_id)
    if scholarship is None or scholarship.university_id != user.id:
        session.notifier.error("Access Denied", "Only the owning school can review applications.")
        return False
    if status not in REVIEW_OUTCOMES or application.status != "pending":
        session.notifier.error(
            "Invalid Status Change",
            f"Cannot move an application from {application.status} to {status}.",
        )
        return False

    applications.update_status(application_id, status)
    logger.info("Application id=%s reviewed by school id=%s: %s", application_id, user.id, status)
    session.notifier.notify("Status Updated", f"Application status set to {status}")
    return True
