from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

NotificationVariant = Literal["default", "destructive"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    description: str
    variant: NotificationVariant = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


@dataclass(slots=True)
class Notifier:
    """Collects user-facing messages until the view layer drains them."""

    pending: list[Notification] = field(default_factory=list)

    def notify(self, title: str, description: str, *, variant: NotificationVariant = "default") -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.pending.append(notification)
        log_level = logging.WARNING if notification.is_error else logging.INFO
        logger.log(log_level, "%s: %s", title, description)
        return notification

    def error(self, title: str, description: str) -> Notification:
        return self.notify(title, description, variant="destructive")

    def drain(self) -> list[Notification]:
        drained = list(self.pending)
        self.pending.clear()
        return drained

    @property
    def last(self) -> Notification | None:
        return self.pending[-1] if self.pending else None
