from __future__ import annotations

from typing import Any, Dict, Optional

from .models import Filter


# PUBLIC_INTERFACE
def build_metadata(total: int, task_filter: Filter, message: str = "") -> Dict[str, Any]:
    """
    Build the pagination metadata echoed back on list endpoints.

    Args:
        total: Total number of stored tasks (ignoring pagination).
        task_filter: The filter used for the query.
        message: Optional free-form note; omitted when empty.
    """
    return {
        "offset": task_filter.offset,
        "limit": task_filter.limit,
        "total": int(total),
        "message": message or None,
    }


# PUBLIC_INTERFACE
def build_response(
    data: Any,
    total: int = 0,
    task_filter: Optional[Filter] = None,
    message: str = "",
) -> Dict[str, Any]:
    """
    Build the standard response envelope.

    metadata is only attached when a filter was supplied, i.e. on list
    operations.
    """
    response: Dict[str, Any] = {"data": data}
    if task_filter is not None:
        response["metadata"] = build_metadata(total, task_filter, message)
    return response
