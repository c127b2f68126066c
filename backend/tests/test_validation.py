"""Tests for the rule registry and validator."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


class TestRuleRegistry:
    """Tests for the built-in rule table."""

    def test_builtin_rules_registered(self):
        """Test every RuleId has a rule."""
        from catalog_security.security.patterns import RULES, RuleId

        assert set(RULES) == {rule_id.value for rule_id in RuleId}

    def test_rules_are_immutable(self):
        """Test the rule table and rules cannot be changed at runtime."""
        from dataclasses import FrozenInstanceError
        from catalog_security.security.patterns import RULES

        with pytest.raises(TypeError):
            RULES["search_input"] = None

        with pytest.raises(FrozenInstanceError):
            RULES["search_input"].max_length = 10_000

    def test_get_rule_accepts_enum_and_string(self):
        """Test lookup by RuleId and by plain name."""
        from catalog_security.security.patterns import RuleId, get_rule

        assert get_rule(RuleId.EMAIL) is get_rule("email")

    def test_get_rule_unknown(self):
        """Test unknown rule is a lookup error."""
        from catalog_security.security.patterns import UnknownRuleError, get_rule

        with pytest.raises(UnknownRuleError) as exc:
            get_rule("postcode")
        assert exc.value.rule_id == "postcode"
        assert isinstance(exc.value, LookupError)

    def test_invalid_length_bounds(self):
        """Test a rule with inverted bounds cannot be built."""
        import re
        from catalog_security.security.patterns import ValidationRule

        with pytest.raises(ValueError):
            ValidationRule(
                rule_id="broken",
                pattern=re.compile(r"[a-z]+"),
                min_length=5,
                max_length=2,
                empty_message="empty",
                too_long_message="long",
                pattern_message="bad",
            )


class TestValidate:
    """Tests for validate()."""

    def test_empty_string_rejected_for_every_rule(self):
        """Test emptiness is checked first with the rule's own message."""
        from catalog_security.security.patterns import RULES
        from catalog_security.security.validation import Rejected, validate

        for rule_id, rule in RULES.items():
            outcome = validate(rule_id, "")
            assert outcome == Rejected(rule.empty_message)

    def test_too_long_checked_before_pattern(self):
        """Test over-long input reports length even with bad characters."""
        from catalog_security.security.patterns import RULES
        from catalog_security.security.validation import Rejected, validate

        for rule_id, rule in RULES.items():
            outcome = validate(rule_id, "<" * (rule.max_length + 1))
            assert outcome == Rejected(rule.too_long_message)

    @pytest.mark.parametrize("rule_id,value", [
        ("search_input", "hello world"),
        ("search_input", "Procedure (v2) - \"draft\"; notes: [ok]!?"),
        ("file_name", "report-2024_final.pdf"),
        ("email", "jane.doe+catalog@example.co.uk"),
        ("url", "https://example.com"),
        ("url", "http://localhost:8000"),
        ("url", "https://api.example.com/path?query=1#top"),
        ("phone", "+1 (555) 123-4567"),
        ("strong_password", "Str0ng!Pass"),
    ])
    def test_allowed_values_accepted(self, rule_id, value):
        """Test allow-listed values within bounds are accepted unchanged."""
        from catalog_security.security.validation import Accepted, validate

        assert validate(rule_id, value) == Accepted(value)

    @pytest.mark.parametrize("rule_id,value", [
        ("search_input", "<script>alert(1)</script>"),
        ("search_input", "price $5"),
        ("file_name", "../etc/passwd"),
        ("file_name", "a:b"),
        ("email", "not-an-email"),
        ("email", "user@localhost"),
        ("url", "not-a-url"),
        ("url", "ftp://example.com"),
        ("url", "javascript:alert(1)"),
        ("url", "https://example.com/<script>"),
        ("phone", "call me now"),
        ("strong_password", "alllowercase1!"),
        ("strong_password", "With Space1!"),
    ])
    def test_disallowed_values_rejected(self, rule_id, value):
        """Test values outside the allow-list get the pattern message."""
        from catalog_security.security.patterns import RULES
        from catalog_security.security.validation import Rejected, validate

        assert validate(rule_id, value) == Rejected(RULES[rule_id].pattern_message)

    def test_trailing_newline_not_smuggled(self):
        """Test the pattern must match the whole value."""
        from catalog_security.security.validation import validate

        assert not validate("email", "user@example.com\n").ok

    @pytest.mark.parametrize("value", [
        ".jane@example.com",
        "jane.@example.com",
        "ja..ne@example.com",
    ])
    def test_malformed_dots_in_email_rejected(self, value):
        """Test leading, trailing and doubled dots in the local part are refused."""
        from catalog_security.security.patterns import RULES
        from catalog_security.security.validation import Rejected, validate

        assert validate("email", value) == Rejected(RULES["email"].pattern_message)

    def test_too_short(self):
        """Test minimum length above one has its own message."""
        from catalog_security.security.patterns import RULES
        from catalog_security.security.validation import Rejected, validate

        assert validate("strong_password", "Ab1!") == Rejected(
            RULES["strong_password"].too_short_message
        )
        assert validate("phone", "12345") == Rejected(RULES["phone"].too_short_message)

    def test_non_text_rejected(self):
        """Test non-string values are rejected, not raised."""
        from catalog_security.security.validation import NOT_TEXT_MESSAGE, Rejected, validate

        assert validate("search_input", 42) == Rejected(NOT_TEXT_MESSAGE)
        assert validate("email", None) == Rejected(NOT_TEXT_MESSAGE)

    def test_unknown_rule_raises(self):
        """Test unknown rule is distinct from a rejection."""
        from catalog_security.security.patterns import UnknownRuleError
        from catalog_security.security.validation import validate

        with pytest.raises(UnknownRuleError):
            validate("no_such_rule", "value")

    def test_outcome_variants(self):
        """Test outcome tags."""
        from catalog_security.security.validation import Accepted, Rejected

        assert Accepted("x").ok is True
        assert Rejected("nope").ok is False

    def test_custom_rule_table(self):
        """Test validate works against an injected rule table."""
        import re
        from types import MappingProxyType
        from catalog_security.security.patterns import ValidationRule
        from catalog_security.security.validation import Accepted, Rejected, validate

        rules = MappingProxyType({
            "code": ValidationRule(
                rule_id="code",
                pattern=re.compile(r"[A-Z]{3}"),
                min_length=3,
                max_length=3,
                empty_message="Code cannot be empty",
                too_long_message="Code is too long",
                pattern_message="Code must be three capitals",
            )
        })

        assert validate("code", "ABC", rules) == Accepted("ABC")
        assert validate("code", "abc", rules) == Rejected("Code must be three capitals")


class TestValidateOrRaise:
    """Tests for the HTTP boundary adapter."""

    @pytest.fixture
    def client(self):
        from catalog_security.security.patterns import RuleId
        from catalog_security.security.validation import validate_or_raise

        app = FastAPI()

        @app.get("/procedures")
        async def search(q: str = ""):
            return {"term": validate_or_raise(RuleId.SEARCH_INPUT, q)}

        return TestClient(app)

    def test_accepted_value_returned(self, client):
        """Test valid search terms reach the handler."""
        response = client.get("/procedures", params={"q": "fire safety"})
        assert response.status_code == 200
        assert response.json() == {"term": "fire safety"}

    def test_rejected_value_is_400(self, client):
        """Test rejection becomes a 400 with the user-facing message."""
        response = client.get("/procedures", params={"q": ""})
        assert response.status_code == 400
        assert response.json()["detail"] == "Search term cannot be empty"

    def test_disallowed_characters_are_400(self, client):
        """Test markup in a search term is refused."""
        response = client.get("/procedures", params={"q": "<b>bold</b>"})
        assert response.status_code == 400
        assert "not allowed" in response.json()["detail"]
