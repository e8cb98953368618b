from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import UTC, date, datetime
from typing import Any, Literal, Mapping, Union

Role = Literal["admin", "student", "school"]
ApplicationStatus = Literal["pending", "accepted", "rejected"]

ROLES: tuple[str, ...] = ("admin", "student", "school")
APPLICATION_STATUSES: tuple[str, ...] = ("pending", "accepted", "rejected")
GPA_MIN = 0.0
GPA_MAX = 4.0


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def to_iso_timestamp(value: datetime | None = None) -> str:
    """Millisecond UTC timestamp with a trailing `Z`, e.g. `2026-02-01T12:00:00.000Z`."""

    resolved = value or utc_now()
    if resolved.tzinfo is None:
        resolved = resolved.replace(tzinfo=UTC)
    return resolved.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO date or datetime into an aware UTC datetime.

    Bare dates resolve to midnight UTC. Naive datetimes are treated as UTC.
    Unparseable values return None.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        cleaned = str(value).strip()
        if not cleaned:
            return None
        try:
            parsed = datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def field_aliases(cls: type) -> dict[str, str]:
    """Map both snake_case field names and persisted camelCase keys to field names."""

    aliases: dict[str, str] = {}
    for item in fields(cls):
        aliases[item.name] = item.name
        aliases[_camel(item.name)] = item.name
    return aliases


@dataclass(frozen=True, slots=True)
class UploadedDocument:
    id: str
    name: str
    mime_type: str
    base64_data: str
    uploaded_at: str

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> UploadedDocument:
        return cls(
            id=_text(payload.get("id")),
            name=_text(payload.get("name")),
            mime_type=_text(payload.get("type")),
            base64_data=_text(payload.get("base64Data")),
            uploaded_at=_text(payload.get("uploadedAt")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.mime_type,
            "base64Data": self.base64_data,
            "uploadedAt": self.uploaded_at,
        }


def _documents(value: Any) -> tuple[UploadedDocument, ...]:
    if not value:
        return ()
    return tuple(
        item if isinstance(item, UploadedDocument) else UploadedDocument.from_mapping(item)
        for item in value
    )


@dataclass(frozen=True, slots=True)
class StudentProfile:
    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = ""
    gpa: float = 0.0
    major: str = ""
    university: str = ""
    phone: str = ""
    address: str = ""
    documents: tuple[UploadedDocument, ...] = ()

    def __post_init__(self) -> None:
        gpa = float(self.gpa)
        if gpa < GPA_MIN or gpa > GPA_MAX:
            raise ValueError(f"Student gpa must be between {GPA_MIN} and {GPA_MAX} (received {gpa}).")
        object.__setattr__(self, "gpa", gpa)
        object.__setattr__(self, "documents", _documents(self.documents))

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> StudentProfile:
        values = payload or {}
        return cls(
            first_name=_text(values.get("firstName")),
            last_name=_text(values.get("lastName")),
            date_of_birth=_text(values.get("dateOfBirth")),
            gpa=_float(values.get("gpa")),
            major=_text(values.get("major")),
            university=_text(values.get("university")),
            phone=_text(values.get("phone")),
            address=_text(values.get("address")),
            documents=_documents(values.get("documents")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "dateOfBirth": self.date_of_birth,
            "gpa": self.gpa,
            "major": self.major,
            "university": self.university,
            "phone": self.phone,
            "address": self.address,
            "documents": [document.to_dict() for document in self.documents],
        }


@dataclass(frozen=True, slots=True)
class SchoolProfile:
    name: str = ""
    description: str = ""
    website: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    logo: str | None = None

    @property
    def display_name(self) -> str:
        return self.name

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> SchoolProfile:
        values = payload or {}
        logo = values.get("logo")
        return cls(
            name=_text(values.get("name")),
            description=_text(values.get("description")),
            website=_text(values.get("website")),
            address=_text(values.get("address")),
            phone=_text(values.get("phone")),
            email=_text(values.get("email")),
            logo=str(logo) if logo else None,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "website": self.website,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
        }
        if self.logo:
            payload["logo"] = self.logo
        return payload


@dataclass(frozen=True, slots=True)
class AdminProfile:
    first_name: str = ""
    last_name: str = ""
    department: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> AdminProfile:
        values = payload or {}
        return cls(
            first_name=_text(values.get("firstName")),
            last_name=_text(values.get("lastName")),
            department=_text(values.get("department")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "department": self.department,
        }


Profile = Union[StudentProfile, SchoolProfile, AdminProfile]

PROFILE_TYPES: dict[str, type] = {
    "admin": AdminProfile,
    "student": StudentProfile,
    "school": SchoolProfile,
}


def validate_role(role: Any) -> str:
    if role not in ROLES:
        raise ValueError(f"Unknown role {role!r}; expected one of {', '.join(ROLES)}.")
    return str(role)


def validate_status(status: Any) -> str:
    if status not in APPLICATION_STATUSES:
        raise ValueError(
            f"Unknown application status {status!r}; expected one of {', '.join(APPLICATION_STATUSES)}."
        )
    return str(status)


def profile_class_for_role(role: str) -> type:
    return PROFILE_TYPES[validate_role(role)]


def profile_from_mapping(role: str, payload: Mapping[str, Any] | Profile | None) -> Profile:
    profile_cls = profile_class_for_role(role)
    if isinstance(payload, profile_cls):
        return payload
    if isinstance(payload, (StudentProfile, SchoolProfile, AdminProfile)):
        raise ValueError(f"A {type(payload).__name__} cannot belong to a '{role}' user.")
    return profile_cls.from_mapping(payload)


@dataclass(frozen=True, slots=True)
class User:
    id: str
    email: str
    password: str
    role: Role
    is_approved: bool
    created_at: str
    profile: Profile

    def __post_init__(self) -> None:
        validate_role(self.role)
        expected = PROFILE_TYPES[self.role]
        if not isinstance(self.profile, expected):
            raise ValueError(
                f"User role '{self.role}' requires a {expected.__name__}, "
                f"received {type(self.profile).__name__}."
            )

    @property
    def display_name(self) -> str:
        return self.profile.display_name or self.email

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> User:
        role = validate_role(payload.get("role"))
        return cls(
            id=_text(payload.get("id")),
            email=_text(payload.get("email")),
            password=_text(payload.get("password")),
            role=role,
            is_approved=bool(payload.get("isApproved", False)),
            created_at=_text(payload.get("createdAt")),
            profile=profile_from_mapping(role, payload.get("profile")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "password": self.password,
            "role": self.role,
            "isApproved": self.is_approved,
            "createdAt": self.created_at,
            "profile": self.profile.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class Scholarship:
    id: str
    name: str
    description: str
    amount: float
    deadline: str
    eligibility_criteria: str
    requirements: tuple[str, ...] = ()
    university_id: str = ""
    university_name: str = ""
    is_active: bool = True
    created_at: str = ""
    application_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _float(self.amount))
        object.__setattr__(self, "requirements", tuple(str(item) for item in self.requirements or ()))
        object.__setattr__(self, "application_count", int(self.application_count or 0))

    @property
    def deadline_at(self) -> datetime | None:
        return parse_timestamp(self.deadline)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> Scholarship:
        return cls(
            id=_text(payload.get("id")),
            name=_text(payload.get("name")),
            description=_text(payload.get("description")),
            amount=_float(payload.get("amount")),
            deadline=_text(payload.get("deadline")),
            eligibility_criteria=_text(payload.get("eligibilityCriteria")),
            requirements=tuple(payload.get("requirements") or ()),
            university_id=_text(payload.get("universityId")),
            university_name=_text(payload.get("universityName")),
            is_active=bool(payload.get("isActive", True)),
            created_at=_text(payload.get("createdAt")),
            application_count=int(payload.get("applicationCount") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "amount": self.amount,
            "deadline": self.deadline,
            "eligibilityCriteria": self.eligibility_criteria,
            "requirements": list(self.requirements),
            "universityId": self.university_id,
            "universityName": self.university_name,
            "isActive": self.is_active,
            "createdAt": self.created_at,
            "applicationCount": self.application_count,
        }


@dataclass(frozen=True, slots=True)
class Application:
    id: str
    scholarship_id: str
    student_id: str
    status: ApplicationStatus = "pending"
    essay: str = ""
    documents: tuple[UploadedDocument, ...] = field(default_factory=tuple)
    student_name: str = ""
    scholarship_name: str = ""
    submitted_at: str = ""

    def __post_init__(self) -> None:
        validate_status(self.status)
        object.__setattr__(self, "documents", _documents(self.documents))

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> Application:
        return cls(
            id=_text(payload.get("id")),
            scholarship_id=_text(payload.get("scholarshipId")),
            student_id=_text(payload.get("studentId")),
            status=payload.get("status") or "pending",
            essay=_text(payload.get("essay")),
            documents=_documents(payload.get("documents")),
            student_name=_text(payload.get("studentName")),
            scholarship_name=_text(payload.get("scholarshipName")),
            submitted_at=_text(payload.get("submittedAt")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "scholarshipId": self.scholarship_id,
            "studentId": self.student_id,
            "status": self.status,
            "essay": self.essay,
            "submittedAt": self.submitted_at,
            "documents": [document.to_dict() for document in self.documents],
            "studentName": self.student_name,
            "scholarshipName": self.scholarship_name,
        }
