"""Input validation against the rule registry."""

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Union

from fastapi import HTTPException

from catalog_security.security.patterns import RULES, RuleId, ValidationRule, get_rule


logger = logging.getLogger(__name__)

NOT_TEXT_MESSAGE = "Value must be text"


@dataclass(frozen=True)
class Accepted:
    """Successful validation, carrying the accepted value unchanged."""

    value: str
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Rejected:
    """Failed validation, carrying a user-facing message."""

    message: str
    ok: ClassVar[bool] = False


ValidationOutcome = Union[Accepted, Rejected]


def check_rule(rule: ValidationRule, value: Any) -> ValidationOutcome:
    """
    Apply a single rule to a value.

    Checks run in a fixed order and the first failure wins:
    type, emptiness, minimum length, maximum length, pattern, format.

    Args:
        rule: Rule to apply
        value: Untrusted value

    Returns:
        Accepted or Rejected
    """
    if not isinstance(value, str):
        return Rejected(NOT_TEXT_MESSAGE)

    if not value:
        return Rejected(rule.empty_message)

    if len(value) < rule.min_length:
        return Rejected(rule.too_short_message or rule.pattern_message)

    if len(value) > rule.max_length:
        return Rejected(rule.too_long_message)

    if rule.pattern.fullmatch(value) is None:
        return Rejected(rule.pattern_message)

    if rule.format_check is not None and not rule.format_check(value):
        return Rejected(rule.pattern_message)

    return Accepted(value)


def validate(
    rule_id: Union[str, RuleId],
    value: Any,
    rules: Mapping[str, ValidationRule] = RULES,
) -> ValidationOutcome:
    """
    Validate a value against a registered rule.

    Args:
        rule_id: Identifier of a registered rule
        value: Untrusted value, normally a string
        rules: Rule table, the built-in registry by default

    Returns:
        Accepted or Rejected

    Raises:
        UnknownRuleError: If rule_id is not registered
    """
    rule = get_rule(rule_id, rules)
    outcome = check_rule(rule, value)
    if not outcome.ok:
        logger.debug("Rule %s rejected input: %s", rule.rule_id, outcome.message)
    return outcome


def validate_or_raise(
    rule_id: Union[str, RuleId],
    value: Any,
    rules: Mapping[str, ValidationRule] = RULES,
) -> str:
    """
    Validate a value at an HTTP boundary.

    Usage:
        @router.get("/procedures")
        async def search(q: str):
            term = validate_or_raise(RuleId.SEARCH_INPUT, q)

    Returns:
        The accepted value

    Raises:
        HTTPException: 400 with the rejection message
    """
    outcome = validate(rule_id, value, rules)
    if isinstance(outcome, Rejected):
        raise HTTPException(status_code=400, detail=outcome.message)
    return outcome.value
