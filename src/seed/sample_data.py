from __future__ import annotations

import logging
from datetime import datetime, timedelta

from src.models.entities import (
    AdminProfile,
    Scholarship,
    SchoolProfile,
    StudentProfile,
    User,
    to_iso_timestamp,
    utc_now,
)
from src.store.kv_store import (
    ALL_KEYS,
    APPLICATIONS_KEY,
    DATA_INITIALIZED_KEY,
    SCHOLARSHIPS_KEY,
    USERS_KEY,
    KeyValueStore,
    write_json,
)

DEMO_PASSWORD = "password"
DEMO_UNIVERSITY_ID = "3"
DEMO_UNIVERSITY_NAME = "Demo University"

logger = logging.getLogger(__name__)


def get_demo_users(now: datetime) -> list[User]:
    created_at = to_iso_timestamp(now)
    return [
        User(
            id="1",
            email="admin@demo.com",
            password=DEMO_PASSWORD,
            role="admin",
            is_approved=True,
            created_at=created_at,
            profile=AdminProfile(first_name="Admin", last_name="User", department="Administration"),
        ),
        User(
            id="2",
            email="student@demo.com",
            password=DEMO_PASSWORD,
            role="student",
            is_approved=True,
            created_at=created_at,
            profile=StudentProfile(
                first_name="John",
                last_name="Doe",
                date_of_birth="2000-01-15",
                gpa=3.8,
                major="Computer Science",
                university=DEMO_UNIVERSITY_NAME,
                phone="+1 234 567 8900",
                address="123 Student St, College Town, ST 12345",
            ),
        ),
        User(
            id=DEMO_UNIVERSITY_ID,
            email="school@demo.com",
            password=DEMO_PASSWORD,
            role="school",
            is_approved=True,
            created_at=created_at,
            profile=SchoolProfile(
                name=DEMO_UNIVERSITY_NAME,
                description=(
                    "A leading institution in higher education, committed to excellence in "
                    "teaching, research, and community service."
                ),
                website="https://demo-university.edu",
                address="456 University Ave, College Town, ST 12345",
                phone="+1 234 567 8901",
                email="contact@demo-university.edu",
            ),
        ),
    ]


def _demo_scholarship(
    *,
    scholarship_id: str,
    name: str,
    description: str,
    amount: float,
    days_open: int,
    eligibility_criteria: str,
    requirements: tuple[str, ...],
    now: datetime,
) -> Scholarship:
    return Scholarship(
        id=scholarship_id,
        name=name,
        description=description,
        amount=amount,
        deadline=to_iso_timestamp(now + timedelta(days=days_open)),
        eligibility_criteria=eligibility_criteria,
        requirements=requirements,
        university_id=DEMO_UNIVERSITY_ID,
        university_name=DEMO_UNIVERSITY_NAME,
        is_active=True,
        created_at=to_iso_timestamp(now),
        application_count=0,
    )


def get_demo_scholarships(now: datetime) -> list[Scholarship]:
    return [
        _demo_scholarship(
            scholarship_id="1",
            name="Excellence in STEM Scholarship",
            description=(
                "This scholarship recognizes outstanding students pursuing degrees in Science, "
                "Technology, Engineering, and Mathematics. Recipients demonstrate academic "
                "excellence, leadership potential, and a commitment to using their skills to make "
                "a positive impact on society."
            ),
            amount=5000,
            days_open=30,
            eligibility_criteria=(
                "Must be enrolled in a STEM program with a minimum GPA of 3.5. Demonstrated "
                "financial need and leadership experience preferred."
            ),
            requirements=(
                "Completed application form",
                "Official transcripts",
                "Two letters of recommendation",
                "Personal essay (500-750 words)",
                "Proof of enrollment in STEM program",
            ),
            now=now,
        ),
        _demo_scholarship(
            scholarship_id="2",
            name="First-Generation College Student Award",
            description=(
                "Supporting students who are the first in their family to pursue higher education. "
                "This scholarship aims to remove financial barriers and provide mentorship "
                "opportunities for academic success."
            ),
            amount=3000,
            days_open=45,
            eligibility_criteria=(
                "First-generation college student with demonstrated financial need. "
                "Minimum 3.0 GPA required."
            ),
            requirements=(
                "Application form",
                "Financial aid documentation",
                "Essay about family educational background",
                "High school transcripts",
                "One letter of recommendation",
            ),
            now=now,
        ),
        _demo_scholarship(
            scholarship_id="3",
            name="Community Service Leadership Scholarship",
            description=(
                "Recognizing students who have demonstrated exceptional commitment to community "
                "service and leadership. This scholarship supports students who plan to continue "
                "their service work while pursuing their education."
            ),
            amount=2500,
            days_open=60,
            eligibility_criteria=(
                "Minimum 100 hours of documented community service. Leadership roles in community "
                "organizations preferred."
            ),
            requirements=(
                "Application form",
                "Community service documentation",
                "Leadership portfolio",
                "Two letters of recommendation from community leaders",
                "Personal statement on service impact",
            ),
            now=now,
        ),
        _demo_scholarship(
            scholarship_id="4",
            name="International Student Excellence Award",
            description=(
                "Supporting outstanding international students who bring diverse perspectives and "
                "academic excellence to our campus community."
            ),
            amount=7500,
            days_open=21,
            eligibility_criteria=(
                "International student status with F-1 visa. Minimum 3.7 GPA and English "
                "proficiency requirements."
            ),
            requirements=(
                "Application form",
                "Academic transcripts",
                "English proficiency scores",
                "Cultural diversity essay",
                "Two academic references",
            ),
            now=now,
        ),
        _demo_scholarship(
            scholarship_id="5",
            name="Arts and Creativity Scholarship",
            description=(
                "Celebrating students who demonstrate exceptional talent and innovation in the arts, "
                "including visual arts, music, theater, creative writing, and digital media."
            ),
            amount=4000,
            days_open=35,
            eligibility_criteria=(
                "Enrolled in arts program or demonstrated artistic achievement. Portfolio "
                "submission required."
            ),
            requirements=(
                "Application form",
                "Artistic portfolio (digital submission)",
                "Artist statement",
                "Academic transcripts",
                "One recommendation from arts faculty",
            ),
            now=now,
        ),
        _demo_scholarship(
            scholarship_id="6",
            name="Business Innovation Scholarship",
            description=(
                "Supporting future entrepreneurs and business leaders who demonstrate innovative "
                "thinking and potential for making a positive impact in the business world."
            ),
            amount=6000,
            days_open=40,
            eligibility_criteria=(
                "Business major or demonstrated business acumen. Entrepreneurial experience or "
                "business plan preferred."
            ),
            requirements=(
                "Application form",
                "Business plan or project proposal",
                "Academic transcripts",
                "Two professional references",
                "Innovation essay",
            ),
            now=now,
        ),
    ]


def is_initialized(store: KeyValueStore) -> bool:
    return store.contains(DATA_INITIALIZED_KEY)


def initialize_sample_data(store: KeyValueStore, *, now: datetime | None = None) -> bool:
    """Write the demo dataset once. Returns False when the store was already seeded."""

    if is_initialized(store):
        return False

    resolved_now = now or utc_now()
    users = get_demo_users(resolved_now)
    scholarships = get_demo_scholarships(resolved_now)
    write_json(store, USERS_KEY, [user.to_dict() for user in users])
    write_json(store, SCHOLARSHIPS_KEY, [item.to_dict() for item in scholarships])
    write_json(store, APPLICATIONS_KEY, [])
    store.set(DATA_INITIALIZED_KEY, "true")
    logger.info("Seeded store with %d users and %d scholarships.", len(users), len(scholarships))
    return True


def reset_store(store: KeyValueStore) -> None:
    for key in ALL_KEYS:
        store.remove(key)
    logger.info("Removed all application keys from the store.")
