from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Literal

import pandas as pd

from src.models.entities import APPLICATION_STATUSES, ROLES, Application, Scholarship, User, utc_now

SortKey = Literal["deadline", "amount", "name"]
SORT_KEYS: tuple[str, ...] = ("deadline", "amount", "name")
DEFAULT_PAGE_SIZE = 9
FEATURED_LIMIT = 6
SEARCH_FIELDS = ("name", "university_name", "description")

SCHOLARSHIP_COLUMNS = [
    "id",
    "name",
    "description",
    "university_id",
    "university_name",
    "amount",
    "deadline",
    "deadline_at",
    "is_active",
    "application_count",
]
APPLICATION_COLUMNS = [
    "id",
    "scholarship_id",
    "scholarship_name",
    "student_id",
    "student_name",
    "status",
    "submitted_at",
    "document_count",
]


@dataclass(frozen=True, slots=True)
class BrowsePage:
    items: list[Scholarship]
    total: int
    page: int
    total_pages: int
    per_page: int


def scholarships_frame(scholarships: Iterable[Scholarship]) -> pd.DataFrame:
    rows = [
        {
            "id": item.id,
            "name": item.name,
            "description": item.description,
            "university_id": item.university_id,
            "university_name": item.university_name,
            "amount": item.amount,
            "deadline": item.deadline,
            "deadline_at": item.deadline_at,
            "is_active": item.is_active,
            "application_count": item.application_count,
        }
        for item in scholarships
    ]
    if not rows:
        return pd.DataFrame(columns=SCHOLARSHIP_COLUMNS)
    df = pd.DataFrame(rows, columns=SCHOLARSHIP_COLUMNS)
    df["deadline_at"] = pd.to_datetime(df["deadline_at"], utc=True, errors="coerce")
    return df


def applications_frame(applications: Iterable[Application]) -> pd.DataFrame:
    rows = [
        {
            "id": item.id,
            "scholarship_id": item.scholarship_id,
            "scholarship_name": item.scholarship_name,
            "student_id": item.student_id,
            "student_name": item.student_name,
            "status": item.status,
            "submitted_at": item.submitted_at,
            "document_count": len(item.documents),
        }
        for item in applications
    ]
    return pd.DataFrame(rows, columns=APPLICATION_COLUMNS)


def _search_mask(df: pd.DataFrame, search_term: str) -> pd.Series:
    pattern = re.escape(search_term.strip())
    mask = pd.Series(False, index=df.index)
    for column in SEARCH_FIELDS:
        mask |= df[column].fillna("").astype(str).str.contains(pattern, case=False, regex=True)
    return mask


def _sort_frame(df: pd.DataFrame, sort_by: str) -> pd.DataFrame:
    if sort_by == "deadline":
        return df.sort_values(by="deadline_at", ascending=True, kind="mergesort", na_position="last")
    if sort_by == "amount":
        return df.sort_values(by="amount", ascending=False, kind="mergesort")
    if sort_by == "name":
        return df.sort_values(by="name", kind="mergesort", key=lambda column: column.str.lower())
    raise ValueError(f"Unsupported sort key {sort_by!r}; expected one of {', '.join(SORT_KEYS)}.")


def browse_scholarships(
    scholarships: Iterable[Scholarship],
    *,
    search_term: str = "",
    sort_by: str = "deadline",
    page: int = 1,
    per_page: int = DEFAULT_PAGE_SIZE,
) -> BrowsePage:
    """Active scholarships matching `search_term`, sorted and sliced to one page."""

    if per_page <= 0:
        raise ValueError("per_page must be positive.")
    by_id = {item.id: item for item in scholarships}
    df = scholarships_frame(by_id.values())
    filtered = df[df["is_active"].astype(bool)] if not df.empty else df
    if search_term.strip() and not filtered.empty:
        filtered = filtered[_search_mask(filtered, search_term)]
    if not filtered.empty:
        filtered = _sort_frame(filtered, sort_by)

    total = len(filtered)
    total_pages = math.ceil(total / per_page)
    resolved_page = min(max(int(page), 1), max(total_pages, 1))
    start = (resolved_page - 1) * per_page
    page_ids = filtered["id"].iloc[start : start + per_page].tolist()
    return BrowsePage(
        items=[by_id[scholarship_id] for scholarship_id in page_ids],
        total=total,
        page=resolved_page,
        total_pages=total_pages,
        per_page=per_page,
    )


def featured_scholarships(
    scholarships: Iterable[Scholarship],
    *,
    now: datetime | None = None,
    limit: int = FEATURED_LIMIT,
) -> list[Scholarship]:
    items = list(scholarships)
    if not items:
        return []
    df = scholarships_frame(items)
    cutoff = pd.Timestamp(now or utc_now())
    if cutoff.tzinfo is None:
        cutoff = cutoff.tz_localize("UTC")
    open_mask = df["is_active"].astype(bool) & df["deadline_at"].notna() & (df["deadline_at"] > cutoff)
    positions = [index for index, is_open in enumerate(open_mask.tolist()) if is_open]
    return [items[index] for index in positions[:limit]]


def platform_stats(
    scholarships: Iterable[Scholarship], applications: Iterable[Application]
) -> dict[str, Any]:
    df = scholarships_frame(scholarships)
    return {
        "total_scholarships": int(len(df)),
        "total_amount": float(pd.to_numeric(df["amount"], errors="coerce").fillna(0.0).sum()),
        "total_applications": sum(1 for _ in applications),
    }


def admin_overview(users: Iterable[User], scholarships: Iterable[Scholarship]) -> dict[str, int]:
    user_df = pd.DataFrame(
        [{"role": user.role, "is_approved": user.is_approved} for user in users],
        columns=["role", "is_approved"],
    )
    role_counts = user_df["role"].value_counts()
    pending = user_df[(user_df["role"] != "admin") & ~user_df["is_approved"].astype(bool)]
    scholarship_df = scholarships_frame(scholarships)
    active_count = int(scholarship_df["is_active"].astype(bool).sum())

    overview = {f"{role}s": int(role_counts.get(role, 0)) for role in ROLES}
    overview.update(
        {
            "total_users": int(len(user_df)),
            "pending_approvals": int(len(pending)),
            "active_scholarships": active_count,
            "inactive_scholarships": int(len(scholarship_df)) - active_count,
        }
    )
    return overview


def school_overview(
    university_id: str,
    scholarships: Iterable[Scholarship],
    applications: Iterable[Application],
) -> dict[str, int]:
    owned_ids = {item.id for item in scholarships if item.university_id == university_id}
    app_df = applications_frame(item for item in applications if item.scholarship_id in owned_ids)
    status_counts = app_df["status"].value_counts()
    overview = {
        "scholarships": len(owned_ids),
        "applications": int(len(app_df)),
    }
    overview.update({status: int(status_counts.get(status, 0)) for status in APPLICATION_STATUSES})
    return overview
