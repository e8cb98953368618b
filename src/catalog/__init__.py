"""List, search and summary views over the scholarship and application collections."""

from src.catalog.browse import (
    DEFAULT_PAGE_SIZE,
    SORT_KEYS,
    BrowsePage,
    admin_overview,
    applications_frame,
    browse_scholarships,
    featured_scholarships,
    platform_stats,
    scholarships_frame,
    school_overview,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "SORT_KEYS",
    "BrowsePage",
    "admin_overview",
    "applications_frame",
    "browse_scholarships",
    "featured_scholarships",
    "platform_stats",
    "scholarships_frame",
    "school_overview",
]
