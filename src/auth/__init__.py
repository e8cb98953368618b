from __future__ import annotations

from .session import Session, SessionState

__all__ = ["Session", "SessionState"]
