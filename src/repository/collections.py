from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Generic, Iterable, Mapping, TypeVar
from uuid import uuid4

from src.models.entities import (
    Application,
    Scholarship,
    User,
    field_aliases,
    profile_from_mapping,
    to_iso_timestamp,
    validate_role,
    validate_status,
)
from src.store.kv_store import (
    APPLICATIONS_KEY,
    SCHOLARSHIPS_KEY,
    USERS_KEY,
    KeyValueStore,
    read_json,
    write_json,
)

T = TypeVar("T", Scholarship, Application, User)

logger = logging.getLogger(__name__)


def new_entity_id() -> str:
    return uuid4().hex


class CollectionRepository(Generic[T]):
    """Whole-collection read-modify-write over a single store key.

    Every write replaces the full JSON array, so concurrent writers lose updates
    (last write wins). Lookups by unknown id are silent no-ops.
    """

    key: str
    entity_cls: type
    # Fields stamped by `create`; callers cannot supply them.
    generated_fields: tuple[str, ...] = ("id",)

    def __init__(self, store: KeyValueStore, *, id_factory: Callable[[], str] = new_entity_id) -> None:
        self.store = store
        self._id_factory = id_factory
        self._aliases = field_aliases(self.entity_cls)

    def _load(self) -> list[T]:
        payload = read_json(self.store, self.key, [])
        if not isinstance(payload, list):
            raise ValueError(f"Store key '{self.key}' must hold a JSON array.")
        return [self.entity_cls.from_mapping(item) for item in payload]

    def _save(self, items: Iterable[T]) -> None:
        write_json(self.store, self.key, [item.to_dict() for item in items])

    def _normalize_fields(self, values: Mapping[str, Any]) -> dict[str, Any]:
        normalized: dict[str, Any] = {}
        unknown = [name for name in values if name not in self._aliases]
        if unknown:
            raise ValueError(
                f"Unknown {self.entity_cls.__name__} field(s): {', '.join(sorted(unknown))}."
            )
        for name, value in values.items():
            normalized[self._aliases[name]] = value
        return normalized

    def _build(self, values: dict[str, Any]) -> T:
        try:
            return self.entity_cls(**values)
        except TypeError as exc:
            raise ValueError(f"Cannot build {self.entity_cls.__name__}: {exc}") from exc

    def list_all(self) -> list[T]:
        return self._load()

    def get_by_id(self, entity_id: str) -> T | None:
        for item in self._load():
            if item.id == entity_id:
                return item
        return None

    def insert(self, entity: T) -> T:
        items = self._load()
        items.append(entity)
        self._save(items)
        logger.debug("Inserted %s id=%s", self.entity_cls.__name__, entity.id)
        return entity

    def update(self, entity_id: str, changes: Mapping[str, Any]) -> None:
        normalized = self._normalize_fields(changes)
        items = self._load()
        for index, item in enumerate(items):
            if item.id == entity_id:
                items[index] = dataclasses.replace(item, **normalized)
                self._save(items)
                logger.debug(
                    "Updated %s id=%s fields=%s",
                    self.entity_cls.__name__,
                    entity_id,
                    sorted(normalized),
                )
                return
        logger.debug("Update skipped; %s id=%s not found", self.entity_cls.__name__, entity_id)

    def delete(self, entity_id: str) -> None:
        items = self._load()
        remaining = [item for item in items if item.id != entity_id]
        if len(remaining) == len(items):
            logger.debug("Delete skipped; %s id=%s not found", self.entity_cls.__name__, entity_id)
            return
        self._save(remaining)
        logger.info("Deleted %s id=%s", self.entity_cls.__name__, entity_id)

    def _creation_values(self, values: Mapping[str, Any]) -> dict[str, Any]:
        normalized = self._normalize_fields(values)
        for generated in self.generated_fields:
            normalized.pop(generated, None)
        normalized["id"] = self._id_factory()
        return normalized


class ScholarshipRepository(CollectionRepository[Scholarship]):
    key = SCHOLARSHIPS_KEY
    entity_cls = Scholarship
    generated_fields = ("id", "created_at", "application_count")

    def create(self, values: Mapping[str, Any]) -> Scholarship:
        creation = self._creation_values(values)
        creation["created_at"] = to_iso_timestamp()
        creation["application_count"] = 0
        scholarship = self.insert(self._build(creation))
        logger.info("Created scholarship id=%s name=%s", scholarship.id, scholarship.name)
        return scholarship

    def list_active(self) -> list[Scholarship]:
        return [item for item in self._load() if item.is_active]

    def list_by_university(self, university_id: str) -> list[Scholarship]:
        return [item for item in self._load() if item.university_id == university_id]

    def increment_application_count(self, scholarship_id: str, step: int = 1) -> None:
        items = self._load()
        for index, item in enumerate(items):
            if item.id == scholarship_id:
                items[index] = dataclasses.replace(
                    item, application_count=item.application_count + step
                )
                self._save(items)
                return
        logger.warning("Application count not updated; scholarship id=%s not found", scholarship_id)


class ApplicationRepository(CollectionRepository[Application]):
    key = APPLICATIONS_KEY
    entity_cls = Application
    generated_fields = ("id", "submitted_at")

    def __init__(
        self,
        store: KeyValueStore,
        *,
        scholarships: ScholarshipRepository | None = None,
        id_factory: Callable[[], str] = new_entity_id,
    ) -> None:
        super().__init__(store, id_factory=id_factory)
        self.scholarships = scholarships or ScholarshipRepository(store, id_factory=id_factory)

    def create(self, values: Mapping[str, Any]) -> Application:
        creation = self._creation_values(values)
        creation["submitted_at"] = to_iso_timestamp()
        creation.setdefault("status", "pending")
        application = self.insert(self._build(creation))
        # Separate write: a failure here leaves the counter behind the applications list.
        self.scholarships.increment_application_count(application.scholarship_id)
        logger.info(
            "Created application id=%s scholarship=%s student=%s",
            application.id,
            application.scholarship_id,
            application.student_id,
        )
        return application

    def list_by_student(self, student_id: str) -> list[Application]:
        return [item for item in self._load() if item.student_id == student_id]

    def list_by_scholarship(self, scholarship_id: str) -> list[Application]:
        return [item for item in self._load() if item.scholarship_id == scholarship_id]

    def list_for_scholarships(self, scholarship_ids: Iterable[str]) -> list[Application]:
        wanted = set(scholarship_ids)
        return [item for item in self._load() if item.scholarship_id in wanted]

    def has_applied(self, student_id: str, scholarship_id: str) -> bool:
        return any(item.scholarship_id == scholarship_id for item in self.list_by_student(student_id))

    def update_status(self, application_id: str, status: str) -> None:
        self.update(application_id, {"status": validate_status(status)})


class UserRepository(CollectionRepository[User]):
    key = USERS_KEY
    entity_cls = User
    generated_fields = ("id", "created_at", "is_approved")

    def create(self, values: Mapping[str, Any]) -> User:
        creation = self._creation_values(values)
        role = validate_role(creation.get("role"))
        creation["is_approved"] = role == "admin"
        creation["created_at"] = to_iso_timestamp()
        creation["profile"] = profile_from_mapping(role, creation.get("profile"))
        user = self.insert(self._build(creation))
        logger.info("Created %s user id=%s approved=%s", role, user.id, user.is_approved)
        return user

    def find_by_email(self, email: str) -> User | None:
        for item in self._load():
            if item.email == email:
                return item
        return None

    def find_by_credentials(self, email: str, password: str) -> User | None:
        for item in self._load():
            if item.email == email and item.password == password:
                return item
        return None

    def list_by_role(self, role: str) -> list[User]:
        validate_role(role)
        return [item for item in self._load() if item.role == role]

    def replace(self, user: User) -> None:
        items = self._load()
        for index, item in enumerate(items):
            if item.id == user.id:
                items[index] = user
                self._save(items)
                return
        logger.debug("Replace skipped; user id=%s not found", user.id)

    def approve(self, user_id: str) -> None:
        self.update(user_id, {"is_approved": True})

    def block(self, user_id: str) -> None:
        self.update(user_id, {"is_approved": False})
