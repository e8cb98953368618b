"""Entity records persisted in the store, plus the user-facing notification channel."""

from src.models.entities import (
    APPLICATION_STATUSES,
    ROLES,
    AdminProfile,
    Application,
    ApplicationStatus,
    Profile,
    Role,
    Scholarship,
    SchoolProfile,
    StudentProfile,
    UploadedDocument,
    User,
    parse_timestamp,
    profile_class_for_role,
    profile_from_mapping,
    to_iso_timestamp,
    utc_now,
)
from src.models.notifications import Notification, Notifier

__all__ = [
    "APPLICATION_STATUSES",
    "AdminProfile",
    "Application",
    "ApplicationStatus",
    "Notification",
    "Notifier",
    "Profile",
    "ROLES",
    "Role",
    "Scholarship",
    "SchoolProfile",
    "StudentProfile",
    "UploadedDocument",
    "User",
    "parse_timestamp",
    "profile_class_for_role",
    "profile_from_mapping",
    "to_iso_timestamp",
    "utc_now",
]
