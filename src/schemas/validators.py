"""
Shared validation functions for Pydantic schemas.

These are also called by the service layer, which re-validates referential
and free-text fields itself rather than trusting the HTTP schemas.
"""
import re

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.config import get_settings

MAX_TAG_LENGTH = 50
MAX_CATEGORY_NAME_LENGTH = 100

# Category colors are stored as #RRGGBB
COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

_WHITESPACE = re.compile(r"\s+")
_http_url_adapter = TypeAdapter(HttpUrl)


def normalize_tag_name(name: str) -> str:
    """
    Normalize a free-text tag name.

    Trims, collapses runs of whitespace to a single space, and lower-cases.
    Returns an empty string for blank input.
    """
    return _WHITESPACE.sub(" ", name).strip().lower()


def validate_and_normalize_tag(tag: str) -> str:
    """
    Normalize and validate a single tag.

    Raises:
        ValueError: If tag is empty or too long.
    """
    normalized = normalize_tag_name(tag)
    if not normalized:
        raise ValueError("Tag name cannot be empty")
    if len(normalized) > MAX_TAG_LENGTH:
        raise ValueError(
            f"Tag name exceeds maximum length of {MAX_TAG_LENGTH} characters "
            f"(got {len(normalized)} characters).",
        )
    return normalized


def validate_and_normalize_tags(tags: list[str]) -> list[str]:
    """
    Normalize and validate a list of tags.

    Returns:
        List of normalized tags with empty strings filtered out and duplicates
        removed (preserving first occurrence order).

    Raises:
        ValueError: If tags is not a list of strings, or any tag is too long.
    """
    if isinstance(tags, str):
        raise ValueError("Tags must be a list of names, not a single string")
    normalized = []
    seen: set[str] = set()
    for tag in tags:
        if not isinstance(tag, str):
            raise ValueError(f"Tag names must be strings (got {type(tag).__name__})")
        if not normalize_tag_name(tag):
            continue  # Skip empty tags silently
        validated = validate_and_normalize_tag(tag)
        if validated not in seen:
            seen.add(validated)
            normalized.append(validated)
    return normalized


def validate_url(url: str) -> str:
    """
    Validate that url is a well-formed absolute http(s) URL.

    The stripped input string is returned unchanged so that the same URL
    always maps to the same shared metadata row.

    Raises:
        ValueError: If the URL is empty, too long, relative, or not http(s).
    """
    settings = get_settings()
    stripped = url.strip()
    if not stripped:
        raise ValueError("URL cannot be empty")
    if len(stripped) > settings.max_url_length:
        raise ValueError(
            f"URL exceeds maximum length of {settings.max_url_length:,} characters.",
        )
    try:
        _http_url_adapter.validate_python(stripped)
    except PydanticValidationError as e:
        raise ValueError(f"Invalid URL: '{stripped}'") from e
    return stripped


def validate_category_name(name: str) -> str:
    """Trim and validate a category name. Case is preserved."""
    trimmed = name.strip()
    if not trimmed:
        raise ValueError("Category name cannot be empty")
    if len(trimmed) > MAX_CATEGORY_NAME_LENGTH:
        raise ValueError(
            f"Category name exceeds maximum length of {MAX_CATEGORY_NAME_LENGTH} characters "
            f"(got {len(trimmed)} characters).",
        )
    return trimmed


def validate_color(color: str | None) -> str | None:
    """Validate a #RRGGBB hex color and normalize it to upper case."""
    if color is None:
        return None
    if not COLOR_PATTERN.match(color):
        raise ValueError(f"Invalid color: '{color}'. Use a hex color like '#1A2B3C'.")
    return color.upper()


def validate_title_length(title: str | None) -> str | None:
    """Validate that title doesn't exceed maximum length."""
    settings = get_settings()
    if title is not None and len(title) > settings.max_title_length:
        raise ValueError(
            f"Title exceeds maximum length of {settings.max_title_length:,} characters "
            f"(got {len(title):,} characters).",
        )
    return title


def validate_note_length(note: str | None) -> str | None:
    """Validate that a personal note doesn't exceed maximum length."""
    settings = get_settings()
    if note is not None and len(note) > settings.max_note_length:
        raise ValueError(
            f"Note exceeds maximum length of {settings.max_note_length:,} characters "
            f"(got {len(note):,} characters).",
        )
    return note
