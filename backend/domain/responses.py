"""
Standard API response helpers for consistent response formatting.

Catalog/auth endpoints use these envelopes:
- Success: { "success": true, "data": <payload>, "meta": {...} }
- Error: { "success": false, "error": { "code": "...", "message": "...", "details": {...} } }

The checkout endpoints keep the bare shapes their clients expect
({clientToken}, {ok: true}, raw order JSON).
"""
from typing import Any


def success_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: The response payload
        meta: Optional metadata (pagination, counts, etc.)

    Returns:
        dict: { "success": true, "data": <data>, "meta": <meta> }
    """
    response = {"success": True, "data": data}
    if meta:
        response["meta"] = meta
    return response


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
    }


def paginated_response(
    items: list[Any],
    limit: int,
    page: int,
    total: int,
) -> dict[str, Any]:
    """
    Create a standardized paginated response for page-numbered listings.

    Returns:
        dict: { "success": true, "data": <items>, "meta": { "page", "limit", "total", "hasMore" } }
    """
    meta = {
        "page": page,
        "limit": limit,
        "total": total,
        "hasMore": page * limit < total,
    }
    return success_response(data=items, meta=meta)
