"""
Caller identity exceptions.
"""

from enums.fault_kind import FaultKind

from .base import StorefrontException


class UserException(StorefrontException):
    """Base exception for user-related errors."""
    pass


class NotAuthenticatedException(UserException):
    """Raised when the request carries no valid session token."""

    fault_kind = FaultKind.UNAUTHORIZED
    public_detail = "Not authenticated"

    def __init__(self, reason: str):
        super().__init__(
            f"Not authenticated: {reason}",
            details={'reason': reason}
        )
        self.reason = reason


class AdminRequiredException(UserException):
    """Raised when a non-admin user calls an operator endpoint."""

    fault_kind = FaultKind.FORBIDDEN
    public_detail = "Admin access required"

    def __init__(self, user_id: int):
        super().__init__(
            f"User {user_id} is not an admin",
            details={'user_id': user_id}
        )
        self.user_id = user_id
