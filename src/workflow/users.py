from __future__ import annotations

from src.auth.session import Session
from src.repository.collections import UserRepository


def _require_admin(session: Session) -> bool:
    if session.has_role("admin"):
        return True
    session.notifier.error("Access Denied", "Only administrators can manage accounts.")
    return False


def approve_user(session: Session, users: UserRepository, user_id: str) -> bool:
    if not _require_admin(session):
        return False
    users.approve(user_id)
    session.notifier.notify("User Approved", "User has been approved successfully")
    return True


def block_user(session: Session, users: UserRepository, user_id: str) -> bool:
    if not _require_admin(session):
        return False
    users.block(user_id)
    session.notifier.notify("User Blocked", "User has been blocked successfully", variant="destructive")
    return True
