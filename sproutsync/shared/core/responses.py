# 📄 File: sproutsync/shared/core/responses.py
# 🧭 Purpose (Layman Explanation):
# Wraps every successful answer from the API in the same envelope so the app
# always knows where to find the data, counts and page information.
# 🧪 Purpose (Technical Summary):
# Success envelope builders ({success, data, message?, count?, pagination?}) and
# pagination metadata computation.
# 🔗 Dependencies:
# typing, math
# 🔄 Connected Modules / Calls From:
# Every presentation router

import math
from typing import Any, Dict, Optional


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, int]:
    """
    Pagination block for list responses.

    Example:
        >>> pagination_meta(page=2, limit=20, total=45)
        {'page': 2, 'limit': 20, 'total': 45, 'pages': 3}
    """
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def api_response(
    data: Any = None,
    message: Optional[str] = None,
    count: Optional[int] = None,
    pagination: Optional[Dict[str, int]] = None,
) -> Dict[str, Any]:
    """Build the standard success envelope, omitting unset optional keys."""
    body: Dict[str, Any] = {"success": True, "data": data}
    if message is not None:
        body["message"] = message
    if count is not None:
        body["count"] = count
    if pagination is not None:
        body["pagination"] = pagination
    return body


def paginated_response(items: Any, page: int, limit: int, total: int) -> Dict[str, Any]:
    """Success envelope for one page of a list."""
    return api_response(data=items, pagination=pagination_meta(page, limit, total))
