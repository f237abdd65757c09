"""Shared API dependencies, imported by every router.

Re-exports database session and authentication dependencies so that router
modules can import everything they need from one place::

    from casa.api.deps import get_db, get_current_user
"""

from casa.auth.dependencies import (
    get_current_admin,
    get_current_user,
)
from casa.database import get_db

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_admin",
]
