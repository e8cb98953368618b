from __future__ import annotations

import dataclasses
import logging
from typing import Any, Literal, Mapping

from src.models.entities import User, field_aliases
from src.models.notifications import Notifier
from src.repository.collections import UserRepository
from src.store.kv_store import CURRENT_USER_KEY, KeyValueStore, read_json, write_json

SessionState = Literal["anonymous", "authenticated"]
REQUIRED_REGISTRATION_FIELDS = ("email", "password", "role", "profile")

logger = logging.getLogger(__name__)


class Session:
    """The signed-in identity, persisted under `currentUser`.

    anonymous -> login() -> authenticated -> logout() -> anonymous. Failures are
    reported through the notifier and a False return, never raised.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        notifier: Notifier | None = None,
        users: UserRepository | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier if notifier is not None else Notifier()
        self.users = users if users is not None else UserRepository(store)
        self._user: User | None = self._restore()

    def _restore(self) -> User | None:
        try:
            payload = read_json(self.store, CURRENT_USER_KEY)
            if payload is None:
                return None
            if not isinstance(payload, Mapping):
                raise ValueError(f"Persisted session must be a JSON object, got {type(payload).__name__}.")
            return User.from_mapping(payload)
        except ValueError:
            logger.warning("Discarding unreadable persisted session.", exc_info=True)
            self.store.remove(CURRENT_USER_KEY)
            return None

    def _persist(self, user: User) -> None:
        self._user = user
        write_json(self.store, CURRENT_USER_KEY, user.to_dict())

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def state(self) -> SessionState:
        return "authenticated" if self._user is not None else "anonymous"

    @property
    def role(self) -> str | None:
        return self._user.role if self._user is not None else None

    def has_role(self, *roles: str) -> bool:
        return self._user is not None and self._user.role in roles

    def login(self, email: str, password: str) -> bool:
        found = self.users.find_by_credentials(email, password)
        if found is None:
            self.notifier.error("Login Failed", "Invalid email or password.")
            return False
        if not found.is_approved and found.role != "admin":
            self.notifier.error("Account Pending", "Your account is pending approval.")
            return False

        self._persist(found)
        self.notifier.notify("Login Successful", f"Welcome back, {found.role}!")
        return True

    def register(self, user_data: Mapping[str, Any], *, confirm_password: str | None = None) -> bool:
        missing = [name for name in REQUIRED_REGISTRATION_FIELDS if not user_data.get(name)]
        if missing:
            self.notifier.error("Missing required field", f"Please provide: {', '.join(missing)}.")
            return False
        if confirm_password is not None and confirm_password != user_data["password"]:
            self.notifier.error("Registration Failed", "Passwords do not match")
            return False
        if self.users.find_by_email(str(user_data["email"])) is not None:
            self.notifier.error("Registration Failed", "Email already exists.")
            return False

        try:
            created = self.users.create(
                {
                    "email": user_data["email"],
                    "password": user_data["password"],
                    "role": user_data["role"],
                    "profile": user_data["profile"],
                }
            )
        except ValueError as exc:
            self.notifier.error("Registration Failed", str(exc))
            return False

        description = (
            "You can now login!" if created.role == "admin" else "Your account is pending approval."
        )
        self.notifier.notify("Registration Successful", description)
        return True

    def logout(self) -> None:
        self._user = None
        self.store.remove(CURRENT_USER_KEY)
        self.notifier.notify("Logged Out", "You have been logged out successfully.")

    def update_profile(
        self,
        changes: Mapping[str, Any],
        *,
        success: tuple[str, str] = ("Profile Updated", "Your profile has been updated successfully."),
    ) -> bool:
        if self._user is None:
            logger.warning("Profile update ignored; no authenticated user.")
            return False

        current = self._user
        aliases = field_aliases(type(current.profile))
        unknown = sorted(name for name in changes if name not in aliases)
        if unknown:
            raise ValueError(
                f"Unknown {type(current.profile).__name__} field(s): {', '.join(unknown)}."
            )
        normalized = {aliases[name]: value for name, value in changes.items()}

        try:
            updated = dataclasses.replace(
                current, profile=dataclasses.replace(current.profile, **normalized)
            )
        except ValueError as exc:
            self.notifier.error("Profile Update Failed", str(exc))
            return False

        self._persist(updated)
        stored = self.users.get_by_id(current.id)
        if stored is not None:
            self.users.replace(
                dataclasses.replace(stored, profile=dataclasses.replace(stored.profile, **normalized))
            )
        self.notifier.notify(*success)
        return True

    def refresh(self) -> User | None:
        """Reload the cached user from the user collection, signing out if it vanished."""

        if self._user is None:
            return None
        stored = self.users.get_by_id(self._user.id)
        if stored is None:
            logger.info("Session user id=%s no longer exists; signing out.", self._user.id)
            self._user = None
            self.store.remove(CURRENT_USER_KEY)
            return None
        self._persist(stored)
        return stored
