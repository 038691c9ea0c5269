"""Shared pagination classes for API list endpoints."""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Default pagination used by most API endpoints."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def parse_page_args(query_params, default_limit=10, max_limit=100):
    """Read ``page``/``limit`` query params the way storefront clients send them.

    Returns ``(page, limit, offset)``; bad or non-positive values fall back to
    the defaults instead of raising.
    """

    try:
        page = int(query_params.get('page') or 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(query_params.get('limit') or default_limit)
    except (TypeError, ValueError):
        limit = default_limit

    page = max(page, 1)
    limit = min(max(limit, 1), max_limit)
    return page, limit, (page - 1) * limit
