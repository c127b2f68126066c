"""Registry of named validation rules.

Each rule pairs length bounds with an allow-list pattern. Patterns list the
characters that are permitted; anything not listed is rejected, so a new
dangerous character cannot slip through a forgotten deny entry.
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Pattern, Union

from email_validator import EmailNotValidError, validate_email


class UnknownRuleError(LookupError):
    """Raised when a caller asks for a rule that was never registered.

    This is a coding defect at the call site, not bad user input.
    """

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"No validation rule registered under {rule_id!r}")


class RuleId(str, Enum):
    """Identifiers of the built-in rules."""

    SEARCH_INPUT = "search_input"
    FILE_NAME = "file_name"
    EMAIL = "email"
    URL = "url"
    PHONE = "phone"
    STRONG_PASSWORD = "strong_password"


@dataclass(frozen=True)
class ValidationRule:
    """Immutable description of a valid value for one input class."""

    rule_id: str
    pattern: Pattern[str]
    min_length: int
    max_length: int
    empty_message: str
    too_long_message: str
    pattern_message: str
    too_short_message: str = ""
    # Structural check run after the allow-list pattern; failures reuse pattern_message
    format_check: Optional[Callable[[str], bool]] = None

    def __post_init__(self):
        if self.min_length < 1 or self.max_length < self.min_length:
            raise ValueError(f"Invalid length bounds for rule {self.rule_id!r}")


SEARCH_INPUT_PATTERN = re.compile(r"[a-zA-Z0-9\s\-_.,;:!?'\"()\[\]]+", re.ASCII)
FILE_NAME_PATTERN = re.compile(r"[a-zA-Z0-9\s\-_.]+", re.ASCII)
EMAIL_PATTERN = re.compile(
    r"[A-Za-z0-9._%+-]+"
    r"@(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,63}"
)


def is_valid_email(value: str) -> bool:
    """Check address syntax with email-validator, without DNS lookups."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


URL_PATTERN = re.compile(
    r"https?://"
    r"(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,63}\.?|"  # domain
    r"localhost|"  # localhost
    r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})"  # or IP
    r"(?::\d{1,5})?"  # optional port
    r"(?:[/?#][A-Z0-9\-._~:/?#\[\]@!$&'()*+,;=%]*)?",  # path, query, fragment
    re.IGNORECASE | re.ASCII,
)
PHONE_PATTERN = re.compile(r"\+?[0-9 ().\-]*[0-9][0-9 ().\-]*")
STRONG_PASSWORD_PATTERN = re.compile(
    r"(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[^A-Za-z0-9])[\x21-\x7e]+"
)


RULES: Mapping[str, ValidationRule] = MappingProxyType({
    RuleId.SEARCH_INPUT.value: ValidationRule(
        rule_id=RuleId.SEARCH_INPUT.value,
        pattern=SEARCH_INPUT_PATTERN,
        min_length=1,
        max_length=200,
        empty_message="Search term cannot be empty",
        too_long_message="Search term is too long",
        pattern_message="Search term contains characters that are not allowed",
    ),
    RuleId.FILE_NAME.value: ValidationRule(
        rule_id=RuleId.FILE_NAME.value,
        pattern=FILE_NAME_PATTERN,
        min_length=1,
        max_length=255,
        empty_message="File name cannot be empty",
        too_long_message="File name is too long",
        pattern_message="File name contains characters that are not allowed",
    ),
    RuleId.EMAIL.value: ValidationRule(
        rule_id=RuleId.EMAIL.value,
        pattern=EMAIL_PATTERN,
        format_check=is_valid_email,
        min_length=1,
        max_length=254,
        empty_message="Email address cannot be empty",
        too_long_message="Email address is too long",
        pattern_message="Invalid email format",
    ),
    RuleId.URL.value: ValidationRule(
        rule_id=RuleId.URL.value,
        pattern=URL_PATTERN,
        min_length=1,
        max_length=2048,
        empty_message="URL cannot be empty",
        too_long_message="URL is too long",
        pattern_message="Invalid URL",
    ),
    RuleId.PHONE.value: ValidationRule(
        rule_id=RuleId.PHONE.value,
        pattern=PHONE_PATTERN,
        min_length=7,
        max_length=20,
        empty_message="Phone number cannot be empty",
        too_short_message="Phone number is too short",
        too_long_message="Phone number is too long",
        pattern_message="Invalid phone number format",
    ),
    RuleId.STRONG_PASSWORD.value: ValidationRule(
        rule_id=RuleId.STRONG_PASSWORD.value,
        pattern=STRONG_PASSWORD_PATTERN,
        min_length=8,
        max_length=128,
        empty_message="Password cannot be empty",
        too_short_message="Password must be at least 8 characters long",
        too_long_message="Password is too long",
        pattern_message=(
            "Password must mix upper and lower case letters, digits and symbols, without spaces"
        ),
    ),
})


def get_rule(rule_id: Union[str, RuleId], rules: Mapping[str, ValidationRule] = RULES) -> ValidationRule:
    """
    Look up a registered rule.

    Args:
        rule_id: Rule identifier, as a string or RuleId
        rules: Rule table to search

    Returns:
        The matching ValidationRule

    Raises:
        UnknownRuleError: If no rule is registered under rule_id
    """
    key = rule_id.value if isinstance(rule_id, RuleId) else rule_id
    try:
        return rules[key]
    except (KeyError, TypeError):
        raise UnknownRuleError(str(key)) from None
