from __future__ import annotations

from .sample_data import (
    DEMO_PASSWORD,
    get_demo_scholarships,
    get_demo_users,
    initialize_sample_data,
    is_initialized,
    reset_store,
)

__all__ = [
    "DEMO_PASSWORD",
    "get_demo_scholarships",
    "get_demo_users",
    "initialize_sample_data",
    "is_initialized",
    "reset_store",
]
