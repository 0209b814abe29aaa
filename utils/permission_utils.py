"""
Centralized permission utilities for user authorization.
"""

import config


def is_admin_user(user_id: int) -> bool:
    """
    Check if a user is an operator allowed on /admin endpoints.

    Example:
        >>> is_admin_user(1)
        True
    """
    return user_id in config.ADMIN_ID_LIST
