"""Tests for token generation."""

import re

import pytest
from unittest.mock import patch


HEX_PATTERN = re.compile(r"[0-9a-f]+")


class TestGenerateToken:
    """Tests for generate_token()."""

    def test_length_is_twice_byte_count(self):
        """Test 16 bytes give 32 lowercase hex characters."""
        from catalog_security.security.tokens import generate_token

        token = generate_token(16)

        assert len(token) == 32
        assert HEX_PATTERN.fullmatch(token)

    def test_default_length_from_settings(self):
        """Test the default uses the configured byte count."""
        from catalog_security.config import settings
        from catalog_security.security.tokens import generate_token

        assert len(generate_token()) == 2 * settings.token_bytes

    def test_successive_tokens_differ(self):
        """Test tokens are distinct across many draws."""
        from catalog_security.security.tokens import generate_token

        tokens = {generate_token(16) for _ in range(200)}
        assert len(tokens) == 200

    def test_uses_secure_source(self):
        """Test bytes come from the secrets module."""
        from catalog_security.security.tokens import generate_token

        with patch("catalog_security.security.tokens.secrets.token_bytes", return_value=b"\x00\x0f\xff") as mock:
            assert generate_token(3) == "000fff"
        mock.assert_called_once_with(3)

    @pytest.mark.parametrize("byte_length", [0, -1, 2.5, "16", True])
    def test_invalid_length(self, byte_length):
        """Test non-positive or non-integer lengths are programming errors."""
        from catalog_security.security.tokens import generate_token

        with pytest.raises(ValueError):
            generate_token(byte_length)

    @pytest.mark.parametrize("error", [NotImplementedError("no urandom"), OSError("getrandom failed")])
    def test_entropy_failure_is_loud(self, error):
        """Test a broken entropy source raises instead of degrading."""
        from catalog_security.security.tokens import EntropyUnavailableError, generate_token

        with patch("catalog_security.security.tokens.secrets.token_bytes", side_effect=error), \
                patch("catalog_security.security.tokens.get_logger") as get_logger:
            with pytest.raises(EntropyUnavailableError) as exc:
                generate_token(16)

        assert exc.value.__cause__ is error
        get_logger.return_value.critical.assert_called_once()
