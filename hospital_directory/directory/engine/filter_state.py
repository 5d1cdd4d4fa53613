"""Filter state transitions.

Every operation returns a new `FilterState`; states are frozen and never
modified in place.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from directory.models.filter_model import (
    DEPENDENT_KEYS,
    FILTER_KEYS,
    PRIMARY_KEYS,
    SORT_OPTIONS,
    VIEWS,
    FilterOption,
    FilterState,
    FilterValue,
    SubKey,
)
from directory.utils.text_helpers import is_uuid

VISIBLE_FILTERS = {
    "hospitals": ["branch", "treatment", "city", "state"],
    "doctors": ["doctor", "specialization", "treatment", "city"],
    "treatments": ["treatment", "city"],
}

EMPTY = FilterValue()


def _check_key(key: str) -> None:
    if key not in FILTER_KEYS:
        raise ValueError(f"Unknown filter key: {key!r}")


def set_filter_field(state: FilterState, key: str, sub_key: SubKey, value: str) -> FilterState:
    """Set the `id` or `query` of one filter field.

    `id` and `query` of a field exclude each other: setting one to a
    non-empty value clears the other. A non-empty primary field (doctor,
    treatment, branch) clears the other primary fields together with
    department and specialization.
    """
    _check_key(key)
    if sub_key not in ("id", "query"):
        raise ValueError(f"Unknown filter sub-key: {sub_key!r}")

    value = value or ""
    current = state.get_field(key)
    if sub_key == "id":
        new_value = FilterValue(id=value, query="" if value else current.query)
    else:
        new_value = FilterValue(id="" if value else current.id, query=value)

    update: Dict[str, FilterValue] = {key: new_value}
    if key in PRIMARY_KEYS and value:
        for other in PRIMARY_KEYS:
            if other != key:
                update[other] = EMPTY
        for dependent in DEPENDENT_KEYS:
            update[dependent] = EMPTY

    return state.model_copy(update=update)


def clear_field(state: FilterState, key: str) -> FilterState:
    _check_key(key)
    return state.model_copy(update={key: EMPTY})


def set_view(state: FilterState, view: str) -> FilterState:
    """Switch view; every filter field resets, the sort order is kept."""
    if view not in VIEWS:
        raise ValueError(f"Unknown view: {view!r}")
    return FilterState(view=view, sort_by=state.sort_by)


def set_sort(state: FilterState, sort_by: str) -> FilterState:
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option: {sort_by!r}")
    return state.model_copy(update={"sort_by": sort_by})


def clear_filters(state: FilterState) -> FilterState:
    """Reset every filter field and the sort order; the view is kept."""
    return FilterState(view=state.view)


def visible_filters_by_view(view: str) -> List[str]:
    return list(VISIBLE_FILTERS.get(view, ["doctor", "city"]))


def filters_from_params(params: Mapping[str, str]) -> FilterState:
    """Build a filter state from URL query parameters.

    UUID values select an option by id; anything else is a free-text query.
    """
    view = params.get("view") or "hospitals"
    state = FilterState(view=view if view in VIEWS else "hospitals")

    sort_by = params.get("sortBy") or params.get("sort_by")
    if sort_by in SORT_OPTIONS:
        state = set_sort(state, sort_by)

    # Primary keys go first so secondary values survive the primary reset
    ordered = [k for k in FILTER_KEYS if k in PRIMARY_KEYS] + [k for k in FILTER_KEYS if k not in PRIMARY_KEYS]
    for key in ordered:
        raw = (params.get(key) or "").strip()
        if raw:
            state = set_filter_field(state, key, "id" if is_uuid(raw) else "query", raw)
    return state


def filters_to_params(state: FilterState) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if state.view != "hospitals":
        params["view"] = state.view
    for key in FILTER_KEYS:
        value = state.get_field(key)
        if value.id:
            params[key] = value.id
        elif value.query:
            params[key] = value.query
    return params


def filter_value_display(key: str, state: FilterState, options: Mapping[str, Sequence[FilterOption]]) -> Optional[str]:
    """Label shown for an active filter: option name, else query, else id."""
    _check_key(key)
    value = state.get_field(key)
    if not value.active:
        return None
    for option in options.get(key) or []:
        if value.id and option.id == value.id:
            return option.name
    return value.query or value.id or None
