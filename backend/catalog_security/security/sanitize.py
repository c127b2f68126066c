"""Context-specific output sanitizers.

Every function here is total: it accepts any string and never raises.
A string cleaned for one context is not safe for another; HTML-escaped
text can still be an unusable file name and vice versa.
"""

import re
from urllib.parse import urlsplit


# Applied in this order; none of the replacements contains a later target.
HTML_REPLACEMENTS = (
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)

FILENAME_FORBIDDEN_PATTERN = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
ANGLE_BRACKET_PATTERN = re.compile(r"[<>]")
URL_CONTROL_PATTERN = re.compile(r"[\x00-\x1f\x7f\s]")

SAFE_URL_SCHEMES = frozenset({"http", "https", "mailto"})


def sanitize_html(text: str) -> str:
    """
    Escape the HTML metacharacters ``< > " ' /``.

    ``&`` is left untouched, so existing entities pass through and a
    crafted ``&lt;`` in the input is rendered as ``<`` by the browser.
    Use sanitize_html_strict when the output is embedded in markup.

    Args:
        text: Untrusted text

    Returns:
        Text without raw ``< > " ' /`` characters
    """
    if not text:
        return ""

    for char, entity in HTML_REPLACEMENTS:
        text = text.replace(char, entity)
    return text


def sanitize_html_strict(text: str) -> str:
    """Escape ``&`` first, then the same characters as sanitize_html."""
    if not text:
        return ""

    return sanitize_html(text.replace("&", "&amp;"))


def sanitize_filename(filename: str) -> str:
    """
    Replace path separators, reserved and control characters with ``_``.

    The replacement is one for one, so the length never changes and the
    function is idempotent.
    """
    if not filename:
        return ""

    return FILENAME_FORBIDDEN_PATTERN.sub("_", filename)


def sanitize_input(text: str) -> str:
    """
    Trim surrounding whitespace and drop bare angle brackets.

    A coarse filter for free-text fields; it does not replace
    sanitize_html at render time.
    """
    if not text:
        return ""

    return ANGLE_BRACKET_PATTERN.sub("", text.strip())


def sanitize_url(url: str) -> str:
    """
    Keep a URL only if it uses an http, https or mailto scheme.

    Surrounding whitespace is stripped. A URL that still contains
    whitespace or control characters is refused rather than repaired, so
    ``java\\tscript:`` style obfuscation cannot hide the scheme and a
    spaced path is never silently turned into a different address.

    Args:
        url: Untrusted URL

    Returns:
        The trimmed URL, or an empty string when it is refused
    """
    if not url:
        return ""

    cleaned = url.strip()
    if URL_CONTROL_PATTERN.search(cleaned):
        return ""

    try:
        scheme = urlsplit(cleaned).scheme.lower()
    except ValueError:
        return ""

    if scheme not in SAFE_URL_SCHEMES:
        return ""
    return cleaned
