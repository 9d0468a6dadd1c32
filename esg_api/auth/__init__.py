"""Auth package: bearer-token dependencies and account endpoints."""

from esg_api.auth.dependencies import get_current_user, get_db_user

__all__ = [
    "get_current_user",
    "get_db_user",
]
