"""Role-checked operations the dashboards invoke on top of the repositories."""

from src.workflow.applications import (
    ESSAY_MIN_CHARS,
    apply_block_reasons,
    can_apply,
    is_expired,
    review_application,
    submit_application,
)
from src.workflow.documents import (
    Attachment,
    add_profile_document,
    decode_document,
    encode_document,
    remove_profile_document,
)
from src.workflow.scholarships import create_scholarship, delete_scholarship, toggle_scholarship
from src.workflow.users import approve_user, block_user

__all__ = [
    "ESSAY_MIN_CHARS",
    "Attachment",
    "add_profile_document",
    "apply_block_reasons",
    "approve_user",
    "block_user",
    "can_apply",
    "create_scholarship",
    "decode_document",
    "delete_scholarship",
    "encode_document",
    "is_expired",
    "remove_profile_document",
    "review_application",
    "submit_application",
    "toggle_scholarship",
]
