"""Security utilities for the procedure catalog."""

from catalog_security.security import (
    Accepted,
    Rejected,
    RuleId,
    Role,
    UploadCandidate,
    Valid,
    Invalid,
    SecurityMonitor,
    get_security_monitor,
)

__version__ = "1.0.0"

__all__ = [
    "Accepted",
    "Rejected",
    "RuleId",
    "Role",
    "UploadCandidate",
    "Valid",
    "Invalid",
    "SecurityMonitor",
    "get_security_monitor",
]
