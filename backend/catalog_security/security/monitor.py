"""Security monitor: single entry point for the security utilities.

The monitor delegates to the specialised modules and records what it sees
in an injected metrics registry. Recording is best effort; a broken
counter or log sink never changes the answer returned to the caller.
"""

import re
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Union

from catalog_security.config import settings
from catalog_security.observability.logging import StructuredLogger, get_logger
from catalog_security.observability.metrics import Counter, MetricsRegistry
from catalog_security.security import sanitize
from catalog_security.security.patterns import RULES, RuleId, UnknownRuleError, ValidationRule
from catalog_security.security.rbac import PermissionChecker, RoleLike
from catalog_security.security.tokens import generate_token
from catalog_security.security.uploads import UploadCandidate, UploadPolicy, UploadVerdict, validate_upload
from catalog_security.security.validation import (
    Accepted,
    Rejected,
    ValidationOutcome,
    validate,
)


GENERAL_CONTEXT = "general"
MAX_GENERAL_LENGTH = 10000

# Signatures of common injection attempts in free text. They feed the
# anomaly counters and reject input in contexts without a dedicated rule.
SCRIPT_TAG_PATTERN = re.compile(r"<\s*script\b", re.IGNORECASE)
SQL_INJECTION_PATTERN = re.compile(
    r"(\b(SELECT|INSERT|UPDATE|DELETE|DROP|UNION|ALTER|CREATE|EXEC)\b.*\b(FROM|INTO|TABLE|WHERE|SET)\b)",
    re.IGNORECASE | re.DOTALL
)
COMMAND_INJECTION_PATTERN = re.compile(
    r"(?:[;&|`]|\$\()\s*(?:rm|cat|wget|curl|bash|sh|python|perl|ruby|nc|netcat)\b",
    re.IGNORECASE
)
PATH_TRAVERSAL_PATTERN = re.compile(r"\.\./|\.\.\\|%2e%2e%2f|%2e%2e/|\.%2e/|%2e\./", re.IGNORECASE)

INJECTION_SIGNATURES = (
    ("script_tag", SCRIPT_TAG_PATTERN),
    ("sql_injection", SQL_INJECTION_PATTERN),
    ("command_injection", COMMAND_INJECTION_PATTERN),
    ("path_traversal", PATH_TRAVERSAL_PATTERN),
)


def detect_injection_attempt(text: str) -> Optional[str]:
    """
    Detect potential injection attacks in input.

    Args:
        text: Input text to check

    Returns:
        Kind of injection detected, or None if clean
    """
    if not text:
        return None

    for kind, pattern in INJECTION_SIGNATURES:
        if pattern.search(text):
            return kind

    return None


class SecurityMonitor:
    """
    Façade over validation, sanitization, tokens, uploads and permissions.

    Args:
        registry: Metrics sink for observations; a private one is created when omitted
        rules: Validation rule table
        upload_policy: Upload policy, from settings when omitted
        permissions: Permission checker, from settings when omitted
        token_bytes: Default token size, from settings when omitted
        logger: Structured logger, the global one when omitted
    """

    def __init__(
        self,
        registry: Optional[MetricsRegistry] = None,
        rules: Mapping[str, ValidationRule] = RULES,
        upload_policy: Optional[UploadPolicy] = None,
        permissions: Optional[PermissionChecker] = None,
        token_bytes: Optional[int] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.registry = registry if registry is not None else MetricsRegistry()
        self.rules = rules
        self.upload_policy = upload_policy or UploadPolicy.from_settings()
        self.permissions = permissions or PermissionChecker()
        self.token_bytes = token_bytes or settings.token_bytes
        self.logger = logger or get_logger()

        self._validations = self.registry.counter(
            "security_validations_total",
            "Input validations by rule and outcome",
            ["rule", "outcome"],
        )
        self._anomalies = self.registry.counter(
            "security_anomalies_total",
            "Injection signatures detected in free text",
            ["context", "kind"],
        )
        self._uploads = self.registry.counter(
            "security_uploads_total",
            "Upload checks by outcome",
            ["outcome"],
        )
        self._permission_checks = self.registry.counter(
            "security_permission_checks_total",
            "Permission checks by required role and outcome",
            ["required", "outcome"],
        )
        self._tokens = self.registry.counter(
            "security_tokens_issued_total",
            "Security tokens issued",
        )

    def _observe(self, counter: Counter, labels: Optional[Dict[str, str]] = None):
        try:
            counter.inc(labels=labels)
        except Exception as e:
            try:
                self.logger.warning(
                    "Security observation dropped",
                    exception=e,
                    metric=counter.name,
                )
            except Exception:
                pass

    # Validation

    def validate(self, rule_id: Union[str, RuleId], value: Any) -> ValidationOutcome:
        """Validate a value against a registered rule and record the outcome."""
        try:
            outcome = validate(rule_id, value, self.rules)
        except UnknownRuleError as e:
            try:
                self.logger.error("Unknown validation rule requested", exception=e, rule=e.rule_id)
            except Exception:
                pass
            raise

        rule = rule_id.value if isinstance(rule_id, RuleId) else rule_id
        self._observe(
            self._validations,
            {"rule": rule, "outcome": "accepted" if outcome.ok else "rejected"},
        )
        return outcome

    def validate_input(self, value: Any, context: str = GENERAL_CONTEXT) -> ValidationOutcome:
        """
        Validate free text for a named context.

        Contexts that name a registered rule use that rule. Any other
        context gets the general policy: non-empty text of bounded length
        without a known injection signature.
        """
        if context in self.rules:
            return self.validate(context, value)

        if not isinstance(value, str):
            outcome: ValidationOutcome = Rejected("Value must be text")
        elif not value.strip():
            outcome = Rejected("Input cannot be empty")
        elif len(value) > MAX_GENERAL_LENGTH:
            outcome = Rejected(f"Input exceeds maximum length of {MAX_GENERAL_LENGTH}")
        else:
            kind = detect_injection_attempt(value)
            if kind:
                self._observe(self._anomalies, {"context": context, "kind": kind})
                try:
                    self.logger.warning("Suspicious input rejected", context=context, kind=kind)
                except Exception:
                    pass
                outcome = Rejected("Potentially unsafe input detected")
            else:
                outcome = Accepted(value)

        self._observe(
            self._validations,
            {"rule": context, "outcome": "accepted" if outcome.ok else "rejected"},
        )
        return outcome

    # Sanitization

    def sanitize_html(self, text: str) -> str:
        return sanitize.sanitize_html(text)

    def sanitize_html_strict(self, text: str) -> str:
        return sanitize.sanitize_html_strict(text)

    def sanitize_filename(self, filename: str) -> str:
        return sanitize.sanitize_filename(filename)

    def sanitize_input(self, text: str) -> str:
        return sanitize.sanitize_input(text)

    def sanitize_url(self, url: str) -> str:
        return sanitize.sanitize_url(url)

    # Tokens, uploads, permissions

    def generate_token(self, byte_length: Optional[int] = None) -> str:
        """Generate a hex token; errors from the entropy source propagate."""
        token = generate_token(byte_length if byte_length is not None else self.token_bytes)
        self._observe(self._tokens)
        return token

    def validate_upload(self, candidate: UploadCandidate) -> UploadVerdict:
        verdict = validate_upload(candidate, self.upload_policy)
        self._observe(self._uploads, {"outcome": "valid" if verdict.ok else "invalid"})
        return verdict

    def has_permission(self, actual: Optional[RoleLike], required: Optional[RoleLike]) -> bool:
        allowed = self.permissions.has_permission(actual, required)
        required_name = getattr(required, "value", required)
        self._observe(
            self._permission_checks,
            {"required": str(required_name), "outcome": "granted" if allowed else "denied"},
        )
        return allowed

    def snapshot(self) -> Dict[str, Dict]:
        """Current counter values, keyed by metric name."""
        return self.registry.collect_all()


@lru_cache
def get_security_monitor() -> SecurityMonitor:
    """Get the cached default monitor."""
    return SecurityMonitor()
