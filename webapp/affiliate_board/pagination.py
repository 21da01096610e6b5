"""
Page/limit/sort handling shared by every list endpoint.
"""

import math
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Optional

from django.conf import settings
from django.db.models import QuerySet
from django.utils.dateparse import parse_date

from src.core.exceptions.base import ValidationError

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


def query_int(request, name: str, default: int) -> int:
    raw = request.GET.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(name, raw, "must be an integer")


def query_bool(request, name: str) -> Optional[bool]:
    raw = request.GET.get(name)
    if raw in (None, ""):
        return None
    value = raw.lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValidationError(name, raw, "must be true or false")


def query_decimal(request, name: str) -> Optional[Decimal]:
    raw = request.GET.get(name)
    if raw in (None, ""):
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise ValidationError(name, raw, "must be a number")


def query_date(request, name: str) -> Optional[date]:
    raw = request.GET.get(name)
    if raw in (None, ""):
        return None
    try:
        parsed = parse_date(raw)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(name, raw, "must be a date (YYYY-MM-DD)")
    return parsed


def paginate(
    queryset: QuerySet,
    request,
    serialize: Callable,
    allowed_sort: Iterable[str],
    default_sort: str,
    tie_breaker: str = "-id",
) -> dict:
    """
    Slice a queryset into one page.
    
    ``page`` below 1 and ``limit`` outside 1..API_MAX_PAGE_SIZE are clamped;
    non-numeric values and sort fields outside ``allowed_sort`` are rejected.
    
    Args:
        queryset: Filtered rows
        request: Incoming request carrying page, limit and sort
        serialize: Row to dict
        allowed_sort: Field names the client may sort by
        default_sort: Sort used when the request gives none
        tie_breaker: Secondary ordering for stable pages
        
    Returns:
        ``{docs, totalDocs, page, limit, totalPages, hasNextPage, hasPrevPage}``
        
    Raises:
        ValidationError: On a malformed page, limit or sort
    """
    page = max(1, query_int(request, "page", 1))
    limit = query_int(request, "limit", settings.API_DEFAULT_PAGE_SIZE)
    limit = min(settings.API_MAX_PAGE_SIZE, max(1, limit))
    
    sort = request.GET.get("sort") or default_sort
    if sort.lstrip("-") not in set(allowed_sort):
        raise ValidationError("sort", sort, "unsupported sort field")
    
    total = queryset.count()
    total_pages = math.ceil(total / limit) if total else 0
    offset = (page - 1) * limit
    rows = queryset.order_by(sort, tie_breaker)[offset:offset + limit]
    return {
        "docs": [serialize(row) for row in rows],
        "totalDocs": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }
