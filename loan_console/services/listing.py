from __future__ import annotations

import math
from typing import Any, Callable, Iterable


def _extract(result: Any) -> tuple[list[dict[str, Any]], int | None]:
    if result is None:
        return [], 0
    if isinstance(result, list):
        return result, len(result)
    if isinstance(result, dict):
        for key in ("content", "items", "records"):
            if isinstance(result.get(key), list):
                rows = result[key]
                total = result.get("totalElements", result.get("total"))
                return rows, int(total) if total is not None else None
    return [], 0


def normalize_page(
    result: Any,
    page: int,
    size: int,
    shape: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Flatten the upstream filter response into the console page shape.

    Upstream returns either a Spring-style ``{content, totalElements}`` page,
    an ``{items, total}`` object, or a bare list.
    """
    rows, total = _extract(result)
    if total is None:
        total = len(rows)
    items = [shape(row) for row in rows] if shape else list(rows)
    return {
        "items": items,
        "total": total,
        "page": page,
        "size": size,
        "totalPages": math.ceil(total / size) if size else 0,
    }


def count_of(result: Any) -> int:
    rows, total = _extract(result)
    return total if total is not None else len(rows)


def rows_of(result: Any) -> Iterable[dict[str, Any]]:
    return _extract(result)[0]
