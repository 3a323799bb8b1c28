"""
Log sanitization utilities to keep booker PII and credentials out of logs.

Booking requests carry names, email addresses and free-text messages from
the public; calendar ids are frequently the owner's email address. These
helpers reduce such values to a shape that is still useful when reading
logs.
"""

from typing import Optional


def sanitize_email(email: str) -> str:
    """
    Sanitize email address for logging by showing only domain and length.

    Example:
        "user@example.com" -> "***@example.com (16 chars)"
    """
    if not email or '@' not in email:
        return "[invalid-email]"

    domain = email.split('@', 1)[1]
    return f"***@{domain} ({len(email)} chars)"


def sanitize_name(name: str) -> str:
    """Show only the initial and length of a person's name."""
    if not name:
        return "[no-name]"
    return f"{name[0]}*** ({len(name)} chars)"


def sanitize_message(message: str, max_preview_length: int = 0) -> str:
    """
    Sanitize a free-text message for logging.

    By default only the length is kept; a short preview can be allowed.
    """
    if not message:
        return "[empty-message]"

    if max_preview_length <= 0:
        return f"[message] ({len(message)} chars)"

    preview = message[:max_preview_length]
    if len(message) > max_preview_length:
        preview += "..."
    return f"'{preview}' ({len(message)} chars)"


def sanitize_calendar_id(calendar_id: str) -> str:
    """Calendar ids are often email addresses; mask them the same way."""
    if not calendar_id:
        return "[no-calendar]"
    if calendar_id == "primary":
        return calendar_id
    if '@' in calendar_id:
        return sanitize_email(calendar_id)
    return f"[calendar] ({len(calendar_id)} chars)"


def sanitize_identifier(value: str) -> str:
    """Shorten long opaque identifiers such as remote event ids."""
    if not value:
        return "[no-id]"
    if len(value) <= 12:
        return f"[id: {value}]"
    return f"[id: {value[:8]}...{value[-4:]}]"


def sanitize_secret(value: Optional[str]) -> str:
    """Never reveal any part of a token or encrypted blob."""
    if not value:
        return "[none]"
    return "[redacted]"


def sanitize_for_logging(**kwargs) -> dict:
    """
    Sanitize multiple fields for logging in one call.

    Args:
        **kwargs: Fields to sanitize (email, name, message, calendar_id, ...)

    Returns:
        Dictionary with sanitized values
    """
    sanitized = {}

    for key, value in kwargs.items():
        if key in ('email', 'owner_email', 'booker_email'):
            sanitized[key] = sanitize_email(value)
        elif key in ('name', 'owner_name', 'booker_name'):
            sanitized[key] = sanitize_name(value)
        elif key in ('message', 'description'):
            sanitized[key] = sanitize_message(value)
        elif key == 'calendar_id':
            sanitized[key] = sanitize_calendar_id(value)
        elif key in ('event_id',):
            sanitized[key] = sanitize_identifier(value)
        elif key in ('token', 'access_token', 'refresh_token', 'blob', 'secret'):
            sanitized[key] = sanitize_secret(value)
        else:
            # Non-PII values (instants, counts, tenant ids) pass through
            sanitized[key] = value

    return sanitized
