from __future__ import annotations

from .collections import (
    ApplicationRepository,
    CollectionRepository,
    ScholarshipRepository,
    UserRepository,
    new_entity_id,
)

__all__ = [
    "ApplicationRepository",
    "CollectionRepository",
    "ScholarshipRepository",
    "UserRepository",
    "new_entity_id",
]
