from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from src.auth.session import Session
from src.models.entities import Scholarship, SchoolProfile
from src.repository.collections import ScholarshipRepository

REQUIRED_SCHOLARSHIP_FIELDS = ("name", "description", "amount", "deadline", "eligibility_criteria")
DEFAULT_UNIVERSITY_NAME = "University"

logger = logging.getLogger(__name__)


def _clean_requirements(requirements: Any) -> list[str]:
    if not requirements:
        return []
    if isinstance(requirements, str):
        requirements = requirements.splitlines()
    return [str(item).strip() for item in requirements if str(item).strip()]


def _coerce_amount(value: Any) -> float | None:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


def create_scholarship(
    session: Session,
    scholarships: ScholarshipRepository,
    values: Mapping[str, Any],
) -> Scholarship | None:
    user = session.user
    if user is None or user.role != "school":
        session.notifier.error("Access Denied", "Only schools can create scholarships.")
        return None

    missing = [
        name
        for name in REQUIRED_SCHOLARSHIP_FIELDS
        if values.get(name) is None or str(values.get(name)).strip() == ""
    ]
    if missing:
        session.notifier.error("Missing required field", f"Please provide: {', '.join(missing)}.")
        return None
    amount = _coerce_amount(values["amount"])
    if amount is None:
        session.notifier.error("Error", "Amount must be a non-negative number.")
        return None

    profile = user.profile
    university_name = profile.name if isinstance(profile, SchoolProfile) and profile.name else DEFAULT_UNIVERSITY_NAME
    scholarship = scholarships.create(
        {
            "name": str(values["name"]).strip(),
            "description": str(values["description"]),
            "amount": amount,
            "deadline": str(values["deadline"]),
            "eligibility_criteria": str(values["eligibility_criteria"]),
            "requirements": _clean_requirements(values.get("requirements")),
            "university_id": user.id,
            "university_name": university_name,
            "is_active": True,
        }
    )
    session.notifier.notify("Success", "Scholarship created successfully")
    return scholarship


def _can_manage(session: Session, scholarship: Scholarship) -> bool:
    user = session.user
    if user is None:
        return False
    return user.role == "admin" or (user.role == "school" and scholarship.university_id == user.id)


def _managed_scholarship(
    session: Session, scholarships: ScholarshipRepository, scholarship_id: str
) -> Scholarship | None:
    scholarship = scholarships.get_by_id(scholarship_id)
    if scholarship is None:
        logger.debug("Scholarship id=%s not found; nothing to manage.", scholarship_id)
        return None
    if not _can_manage(session, scholarship):
        session.notifier.error("Access Denied", "Only an admin or the owning school can manage this scholarship.")
        return None
    return scholarship


def toggle_scholarship(session: Session, scholarships: ScholarshipRepository, scholarship_id: str) -> bool:
    scholarship = _managed_scholarship(session, scholarships, scholarship_id)
    if scholarship is None:
        return False

    was_active = scholarship.is_active
    scholarships.update(scholarship_id, {"is_active": not was_active})
    if was_active:
        session.notifier.notify("Scholarship Deactivated", "Scholarship has been deactivated successfully")
    else:
        session.notifier.notify("Scholarship Activated", "Scholarship has been activated successfully")
    return True


def delete_scholarship(session: Session, scholarships: ScholarshipRepository, scholarship_id: str) -> bool:
    scholarship = _managed_scholarship(session, scholarships, scholarship_id)
    if scholarship is None:
        return False

    # Applications referencing this scholarship are left in place.
    scholarships.delete(scholarship_id)
    session.notifier.notify(
        "Scholarship Deleted",
        "Scholarship has been deleted successfully",
        variant="destructive",
    )
    return True
