"""Paginated collection envelope ({data, meta, links})."""

from __future__ import annotations

import math
from typing import Any

from starlette.datastructures import URL


def paginate(
    items: list[Any],
    *,
    total: int,
    page: int,
    per_page: int,
    url: URL,
) -> dict[str, Any]:
    """Wrap one page of serialized items with page metadata and navigation links."""
    page = max(page, 1)
    last_page = max(math.ceil(total / per_page), 1) if per_page else 1
    first_index = (page - 1) * per_page + 1 if items else None
    last_index = first_index + len(items) - 1 if items else None

    def page_url(number: int | None) -> str | None:
        if number is None:
            return None
        return str(url.include_query_params(page=number))

    return {
        "data": items,
        "meta": {
            "current_page": page,
            "from": first_index,
            "last_page": last_page,
            "path": str(url.replace(query="")),
            "per_page": per_page,
            "to": last_index,
            "total": total,
        },
        "links": {
            "first": page_url(1),
            "last": page_url(last_page),
            "prev": page_url(page - 1 if page > 1 else None),
            "next": page_url(page + 1 if page < last_page else None),
        },
    }
