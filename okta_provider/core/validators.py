"""Input validation helpers for user attributes."""
from __future__ import annotations
import json
import re
from typing import Iterable, Optional
from urllib.parse import urlparse

from .errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
EMAIL_MAX_LENGTH = 254
VALID_URL_SCHEMES = ("http", "https")


def validate_email(email: str, field: str = "email") -> str:
    """Validate email address.
    
    Args:
        email: Email address to validate
        field: Attribute name for error messages
        
    Returns:
        The email, stripped
        
    Raises:
        ValidationError: If email is invalid
    """
    email = (email or "").strip()
    if not email:
        raise ValidationError(f"{field} is required")
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"{field} exceeds maximum length")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f"{field} is not a valid email address")
    return email


def validate_url(url: str, field: str, schemes: Iterable[str] = VALID_URL_SCHEMES) -> str:
    """Validate that a value is an absolute URL with an allowed scheme."""
    parsed = urlparse(url or "")
    allowed = tuple(schemes)
    if parsed.scheme not in allowed or not parsed.netloc:
        raise ValidationError(f"{field} must be a URL with scheme {'/'.join(allowed)}")
    return url


def validate_json_object(raw: str, field: str) -> dict:
    """Parse a JSON document that must decode to an object.
    
    Raises:
        ValidationError: If the document is not valid JSON or not an object
    """
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise ValidationError(f"{field} must be valid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise ValidationError(f"{field} must be a JSON object")
    return value


def validate_length(value: str, field: str, minimum: int, maximum: int) -> str:
    if not minimum <= len(value) <= maximum:
        raise ValidationError(f"{field} must be between {minimum} and {maximum} characters")
    return value


def validate_choice(value: str, field: str, choices: Iterable[str]) -> str:
    allowed = list(choices)
    if value not in allowed:
        raise ValidationError(f"{field} must be one of {', '.join(allowed)}; got '{value}'")
    return value


def validate_range(value: Optional[int], field: str, minimum: int, maximum: int) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not minimum <= value <= maximum:
        raise ValidationError(f"{field} must be an integer between {minimum} and {maximum}")
    return value
