"""
Root of the storefront fault hierarchy.

Every exception carries a FaultKind. The kind decides the HTTP status a
router answers with and the level the fault is logged at.
"""

import logging

from enums.fault_kind import FaultKind

# kind -> (HTTP status, log level)
FAULT_RESPONSES = {
    FaultKind.AUTHENTICATION: (400, logging.ERROR),
    FaultKind.DATA_INTEGRITY: (400, logging.CRITICAL),
    FaultKind.UNAUTHORIZED: (401, logging.INFO),
    FaultKind.FORBIDDEN: (403, logging.WARNING),
    FaultKind.NOT_FOUND: (404, logging.ERROR),
    FaultKind.CONFLICT: (409, logging.WARNING),
    FaultKind.UPSTREAM: (502, logging.ERROR),
    FaultKind.INTERNAL: (500, logging.ERROR),
}


class StorefrontException(Exception):
    fault_kind = FaultKind.INTERNAL
    # Response body detail; `message` may hold ids and stays in the logs
    public_detail = "Internal error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def http_status(self) -> int:
        return FAULT_RESPONSES[self.fault_kind][0]

    @property
    def log_level(self) -> int:
        return FAULT_RESPONSES[self.fault_kind][1]

    def log_line(self) -> str:
        """`message [kind key=value ...]`, the form faults are written to the log in."""
        context = " ".join(f"{key}={value}" for key, value in self.details.items() if value is not None)
        return f"{self.message} [{self.fault_kind.value}{' ' + context if context else ''}]"
