"""Shared utility functions for service layer."""
from collections.abc import Callable
from typing import TypeVar

from services.exceptions import ValidationError

T = TypeVar("T")


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters for safe use in LIKE/ILIKE patterns.

    PostgreSQL LIKE/ILIKE treats these characters specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is the escape character

    This function escapes them so they match literally.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(text: str) -> str:
    """Build an escaped ILIKE pattern matching `text` anywhere."""
    return f"%{escape_ilike(text)}%"


def revalidate(validator: Callable[[T], T], value: T) -> T:
    """Run a schema validator and surface failures as a service ValidationError."""
    try:
        return validator(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e
