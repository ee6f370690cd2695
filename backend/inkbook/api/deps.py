"""Shared API dependencies — single import point for all routers.

Re-exports database, clock, and authentication dependencies so that router
modules can import everything they need from one place::

    from inkbook.api.deps import get_clock, get_current_active_user, get_db
"""

from inkbook.auth.dependencies import (
    get_current_active_user,
    get_current_user,
    verify_cron_secret,
)
from inkbook.core.clock import get_clock
from inkbook.database import get_db, get_session_factory

__all__ = [
    "get_db",
    "get_session_factory",
    "get_clock",
    "get_current_user",
    "get_current_active_user",
    "verify_cron_secret",
]
