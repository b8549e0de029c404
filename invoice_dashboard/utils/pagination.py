"""Helpers for handling paginated views."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

from flask import request

ELLIPSIS = "..."
MAX_UNABRIDGED_PAGES = 7

PageToken = Union[int, str]


def generate_pagination(current_page: int, total_pages: int) -> List[PageToken]:
    """Return the page numbers to link to, eliding ranges with ``"..."``.

    Parameters
    ----------
    current_page:
        The 1-based page being viewed.
    total_pages:
        Number of pages available.

    Returns
    -------
    list
        Page numbers and :data:`ELLIPSIS` markers in display order.
    """

    if total_pages <= MAX_UNABRIDGED_PAGES:
        return list(range(1, total_pages + 1))

    if current_page <= 3:
        return [1, 2, 3, ELLIPSIS, total_pages - 1, total_pages]

    if current_page >= total_pages - 2:
        return [1, 2, ELLIPSIS, total_pages - 2, total_pages - 1, total_pages]

    return [
        1,
        ELLIPSIS,
        current_page - 1,
        current_page,
        current_page + 1,
        ELLIPSIS,
        total_pages,
    ]


def get_page(param: str = "page") -> int:
    """Return the requested page from the query string, never below 1."""

    value = request.args.get(param, 1, type=int)
    return value if value and value > 0 else 1


def build_pagination_args(
    *,
    page_param: str = "page",
    extra_params: Mapping[str, Any] | None = None,
) -> Dict[str, Union[str, List[str]]]:
    """Assemble arguments for pagination links.

    Parameters
    ----------
    page_param:
        Name of the page number query parameter to exclude.
    extra_params:
        Defaults added when the request does not already carry the key.

    Returns
    -------
    dict
        Mapping of query parameter names to values suitable for ``url_for``.
    """

    args: Dict[str, Union[str, List[str]]] = {}
    for key, values in request.args.lists():
        if key == page_param:
            continue
        if not values:
            continue
        if len(values) == 1:
            args[key] = values[0]
        else:
            args[key] = values
    if extra_params:
        for key, value in extra_params.items():
            if value is None or key in args:
                continue
            if isinstance(value, (list, tuple)):
                args[key] = [str(v) for v in value]
            else:
                args[key] = str(value)
    return args
