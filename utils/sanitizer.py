"""
Input Sanitization Module

Cleans user input and model output before it is stored.

Values are stored as plain text and escaped by whoever renders them;
these helpers only strip control characters, normalise whitespace and
enforce length limits.
"""

import re

# Control characters except tab/newline/carriage return
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')
_ALL_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_text(text, max_length=10000):
    """
    Sanitize free text (descriptions, notes, instructions).

    Newlines are preserved.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 10000)

    Returns:
        Sanitized string, truncated if necessary
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = _CONTROL_CHARS.sub('', text).strip()

    if len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_name(name, max_length=200, default=''):
    """
    Sanitize a single-line name (recipe, custom meal, ingredient).

    Args:
        name: The name to sanitize
        max_length: Maximum allowed length (default 200)
        default: Returned when nothing is left after cleaning

    Returns:
        Sanitized name
    """
    if not name:
        return default

    if not isinstance(name, str):
        name = str(name)

    # Remove control characters and null bytes
    name = _ALL_CONTROL_CHARS.sub(' ', name)

    # Collapse multiple spaces
    name = re.sub(r'\s+', ' ', name).strip()

    if len(name) > max_length:
        name = name[:max_length - 3] + '...'

    return name or default


def sanitize_optional(text, max_length):
    """Like sanitize_text, but maps empty results to None for nullable columns."""
    cleaned = sanitize_text(text, max_length=max_length)
    return cleaned or None


def sanitize_int(value, default=None, min_val=None, max_val=None):
    """Safely parse an integer value with optional bounds."""
    try:
        result = int(value) if value not in (None, '') else default
    except (ValueError, TypeError):
        return default
    if result is None:
        return None
    if min_val is not None:
        result = max(min_val, result)
    if max_val is not None:
        result = min(max_val, result)
    return result
