"""Unpredictable token generation backed by the OS secure random source."""

import secrets
from typing import Optional

from catalog_security.config import settings
from catalog_security.observability.logging import get_logger


class EntropyUnavailableError(RuntimeError):
    """Raised when the system secure random source cannot be read."""


def generate_token(byte_length: Optional[int] = None) -> str:
    """
    Generate a random hexadecimal token.

    Tokens carry no identity or expiry; callers decide whether one is an
    anti-forgery token, a reset link secret, and so on.

    Args:
        byte_length: Number of random bytes, settings.token_bytes by default

    Returns:
        Lowercase hex string of length 2 * byte_length

    Raises:
        ValueError: If byte_length is smaller than 1
        EntropyUnavailableError: If the secure random source fails
    """
    if byte_length is None:
        byte_length = settings.token_bytes

    if isinstance(byte_length, bool) or not isinstance(byte_length, int) or byte_length < 1:
        raise ValueError(f"byte_length must be a positive integer, got {byte_length!r}")

    try:
        raw = secrets.token_bytes(byte_length)
    except (OSError, NotImplementedError) as e:
        get_logger().critical(
            "Secure random source unavailable",
            exception=e,
            byte_length=byte_length,
        )
        raise EntropyUnavailableError("Secure random source unavailable") from e

    return raw.hex()
