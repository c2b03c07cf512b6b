"""
Contact list query builder component.

Turns the raw `page`, `limit` and `favorite` query parameters of a list request into
a `ListQuery`: an owner-scoped filter plus the offset/limit window.
"""

from __future__ import annotations

import re
from typing import Optional
from uuid import UUID

from addressbook.components.contracts import ContactFilter, ListQuery
from addressbook.core.errors import ValidationError

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20

# Storage offsets and limits are signed 64-bit integers
MAX_OFFSET = 2 ** 63 - 1

_INTEGER = re.compile(r"-?[0-9]+")

_FAVORITE_LITERALS = {"true": True, "false": False}


def _parse_positive(name: str, raw: Optional[str], default: int) -> int:
    """Parse a plain ASCII integer parameter; values below 1 are floored to 1"""
    if raw is None or str(raw).strip() == "":
        return default
    text = str(raw).strip()
    if not _INTEGER.fullmatch(text):
        raise ValidationError(f'"{name}" must be a number')
    if text.startswith("-"):
        return 1
    digits = text.lstrip("0") or "0"
    # Checked on length first; int() refuses very long digit strings
    if len(digits) > len(str(MAX_OFFSET)) or int(digits) > MAX_OFFSET:
        raise ValidationError(f'"{name}" is out of range')
    return max(int(digits), 1)


def parse_favorite(raw: Optional[str]) -> Optional[bool]:
    """Only the literals "true"/"false" select a filter; anything else means no filter"""
    if raw is None:
        return None
    return _FAVORITE_LITERALS.get(raw)


def build_list_query(
    owner_id: UUID,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    favorite: Optional[str] = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: Optional[int] = None,
) -> ListQuery:
    """
    Build the repository query for a list request.

    Args:
        owner_id: Caller identity; every result is scoped to it
        page: 1-based page number (default 1)
        limit: Page size (default `default_limit`, capped at `max_limit` when given)
        favorite: "true"/"false" to filter on the favorite flag

    Raises:
        ValidationError: If page or limit is not an integer, or the page starts
            beyond the largest offset storage can address
    """
    page_number = _parse_positive("page", page, DEFAULT_PAGE)
    page_size = _parse_positive("limit", limit, default_limit)
    if max_limit is not None:
        page_size = min(page_size, max_limit)

    skip = (page_number - 1) * page_size
    if skip > MAX_OFFSET:
        raise ValidationError('"page" is out of range')

    return ListQuery(
        filter=ContactFilter(owner_id=owner_id, favorite=parse_favorite(favorite)),
        skip=skip,
        limit=page_size,
    )
