from __future__ import annotations

from datetime import datetime
from typing import Any

import pandas as pd

from src.models.entities import parse_timestamp
from src.models.notifications import Notification

STATUS_BADGES = {
    "pending": "🟡 pending",
    "accepted": "🟢 accepted",
    "rejected": "🔴 rejected",
}


def format_amount(amount: Any) -> str:
    value = _coerce_float(amount)
    if value is None:
        return "Unknown"
    return f"${max(value, 0.0):,.0f}"


def format_date(value: Any) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return str(value or "")
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def days_remaining(deadline: Any, now: datetime) -> int | None:
    parsed = parse_timestamp(deadline)
    if parsed is None:
        return None
    return (parsed - now).days


def notification_level(notification: Notification) -> str:
    """Streamlit call used to render a notification: `error` or `success`."""

    return "error" if notification.is_error else "success"


def status_badge(status: str) -> str:
    return STATUS_BADGES.get(status, status)


def requirements_from_text(text: str) -> list[str]:
    return [line.strip() for line in str(text or "").splitlines() if line.strip()]


def _coerce_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(numeric):
        return None
    return numeric


def browse_page_for_filters(current_page: int, filters: tuple[str, str], previous: tuple[str, str] | None) -> int:
    """Back to page 1 whenever the search term or sort key changes."""

    if previous is not None and filters != previous:
        return 1
    return int(current_page)
