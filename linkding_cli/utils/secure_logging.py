"""
Secret redaction helpers.

Keeps API tokens out of terminal output, log records and error messages.
"""

import re
from typing import Any, Optional, Pattern

TOKEN_HEADER_PATTERN: Pattern = re.compile(r"(?i)(token\s+)([a-zA-Z0-9+/=_-]{8,})")


def redact_token(token: Optional[str]) -> str:
    """
    Produce a display-safe form of an API token.

    Tokens of eight characters or fewer are fully hidden; longer tokens keep
    their first and last four characters.

    Args:
        token: Raw token value

    Returns:
        Redacted token string
    """
    if not token:
        return ""
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"


def mask_secret(message: Any, secret: Optional[str] = None) -> str:
    """
    Remove a secret and any ``Token <value>`` header text from a message.

    Args:
        message: Message (or object) to sanitize
        secret: Literal secret value to replace, if known

    Returns:
        Sanitized message
    """
    text = str(message)
    if secret:
        text = text.replace(secret, redact_token(secret))
    return TOKEN_HEADER_PATTERN.sub(r"\1***REDACTED***", text)
