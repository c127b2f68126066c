"""Security module for the procedure catalog."""

from catalog_security.security.patterns import (
    RULES,
    RuleId,
    ValidationRule,
    UnknownRuleError,
    get_rule,
)
from catalog_security.security.validation import (
    Accepted,
    Rejected,
    ValidationOutcome,
    validate,
    validate_or_raise,
)
from catalog_security.security.sanitize import (
    sanitize_html,
    sanitize_html_strict,
    sanitize_filename,
    sanitize_input,
    sanitize_url,
)
from catalog_security.security.tokens import (
    EntropyUnavailableError,
    generate_token,
)
from catalog_security.security.uploads import (
    UploadCandidate,
    UploadPolicy,
    UploadVerdict,
    Valid,
    Invalid,
    validate_upload,
    candidate_from_upload,
)
from catalog_security.security.rbac import (
    Role,
    ROLE_LEVELS,
    PermissionChecker,
    role_level,
    has_permission,
    require_role,
)
from catalog_security.security.monitor import (
    SecurityMonitor,
    detect_injection_attempt,
    get_security_monitor,
)

__all__ = [
    "RULES",
    "RuleId",
    "ValidationRule",
    "UnknownRuleError",
    "get_rule",
    "Accepted",
    "Rejected",
    "ValidationOutcome",
    "validate",
    "validate_or_raise",
    "sanitize_html",
    "sanitize_html_strict",
    "sanitize_filename",
    "sanitize_input",
    "sanitize_url",
    "EntropyUnavailableError",
    "generate_token",
    "UploadCandidate",
    "UploadPolicy",
    "UploadVerdict",
    "Valid",
    "Invalid",
    "validate_upload",
    "candidate_from_upload",
    "Role",
    "ROLE_LEVELS",
    "PermissionChecker",
    "role_level",
    "has_permission",
    "require_role",
    "SecurityMonitor",
    "detect_injection_attempt",
    "get_security_monitor",
]
