"""Input validation shared by the lifecycle services"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from yamlrg.errors import ValidationError

MAX_INTERESTS_LENGTH = 250

_email_adapter = TypeAdapter(EmailStr)
_url_adapter = TypeAdapter(HttpUrl)


def require_text(value: Optional[str], field: str, operation: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required", operation=operation)
    return value


def require_email(value: Optional[str], operation: str) -> str:
    value = require_text(value, "email", operation)
    try:
        _email_adapter.validate_python(value)
    except PydanticValidationError:
        raise ValidationError("email is not a valid email address", operation=operation)
    return value


def require_url(value: Optional[str], field: str, operation: str) -> str:
    value = require_text(value, field, operation)
    try:
        _url_adapter.validate_python(value)
    except PydanticValidationError:
        raise ValidationError(f"{field} must be a valid http(s) URL", operation=operation)
    return value


def require_iso_date(value: Optional[str], field: str, operation: str) -> str:
    """ISO 8601 date, optionally with a time (YYYY-MM-DD[THH:MM...])"""
    value = require_text(value, field, operation)
    try:
        datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)", operation=operation)
    return value


def optional_url(value: Optional[str], field: str, operation: str) -> str:
    """Empty values are allowed; anything else must be a URL"""
    if not (value or "").strip():
        return ""
    return require_url(value, field, operation)


def limit_length(value: str, field: str, limit: int, operation: str) -> str:
    if len(value) > limit:
        raise ValidationError(
            f"{field} must be at most {limit} characters", operation=operation
        )
    return value
