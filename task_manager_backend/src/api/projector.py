"""
Derivation of render-ready category sections from a snapshot of stored
categories and tasks.

Everything here is a pure function of its inputs: the snapshot is only read,
and fresh CategorySection objects are built on every call, so the functions
are safe to call concurrently from any thread.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import CategoryEntity, CategorySection, CategorySnapshot, SortOption, TaskEntity, to_local_naive

_SortRule = Tuple[Callable[[TaskEntity], object], bool]

# key function, reverse; datetimes are compared as local naive values
_SORTS: Dict[SortOption, _SortRule] = {
    SortOption.DUE_DATE: (lambda t: to_local_naive(t["due_date"]), False),
    SortOption.PRIORITY: (lambda t: t["priority"], True),
    SortOption.TITLE: (lambda t: t["title"], False),
    SortOption.CREATED_AT: (lambda t: to_local_naive(t["created_at"]), True),
}

NO_TASKS_FOUND = "No tasks found"
TRY_DIFFERENT_SEARCH = "Try a different search term"


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle in haystack.casefold()


def _matches(task: TaskEntity, category: CategoryEntity, needle: str) -> bool:
    return (
        _contains(task.get("title"), needle)
        or _contains(task.get("description"), needle)
        or _contains(category.get("name"), needle)
    )


# PUBLIC_INTERFACE
def filter_and_sort_tasks(
    tasks: Iterable[TaskEntity],
    category: CategoryEntity,
    search_text: str,
    sort_option: SortOption,
    show_completed: bool,
) -> List[TaskEntity]:
    """
    Apply the per-category pipeline to one category's tasks.

    Steps, in order:
    - Search: if search_text is non-empty, keep tasks whose title, description or
      owning category name contains it (case-insensitive).
    - Completion: if show_completed is False, drop completed tasks.
    - Sort by the selected option. Python's sort is stable, so tasks with equal
      keys keep their filtered order.
    """
    filtered = list(tasks)

    if search_text:
        needle = search_text.casefold()
        filtered = [t for t in filtered if _matches(t, category, needle)]

    if not show_completed:
        filtered = [t for t in filtered if not t.get("completed")]

    key, reverse = _SORTS[sort_option]
    return sorted(filtered, key=key, reverse=reverse)


# PUBLIC_INTERFACE
def project(
    categories: Optional[Sequence[CategorySnapshot]],
    search_text: Optional[str] = "",
    sort_option: object = SortOption.DUE_DATE,
    show_completed: bool = True,
) -> List[CategorySection]:
    """
    Turn a snapshot of categories into ordered sections ready for display.

    Args:
        categories: Categories with their tasks, in the order they should be shown.
        search_text: Substring filter; empty (or None) disables searching.
        sort_option: A SortOption or its string value. Unknown values sort by due date.
        show_completed: Whether completed tasks are kept.

    Returns:
        One CategorySection per admitted category, in input order. While searching,
        categories without a surviving task are omitted. Without a search every
        category is returned, possibly with an empty task tuple.
    """
    search = search_text or ""
    option = SortOption.coerce(sort_option)

    sections: List[CategorySection] = []
    for snapshot in categories or ():
        visible = filter_and_sort_tasks(
            snapshot.tasks or (), snapshot.category, search, option, show_completed
        )
        if visible or not search:
            sections.append(CategorySection(category=snapshot.category, tasks=tuple(visible)))
    return sections


# PUBLIC_INTERFACE
def empty_state(
    sections: Sequence[CategorySection], category_count: int, search_text: Optional[str]
) -> Optional[Dict[str, Optional[str]]]:
    """
    Describe the placeholder shown when a projection has nothing to render.

    Returns None when there is something to show or when no categories exist at all;
    otherwise a dict with a message and an optional hint for active searches.
    """
    if sections or category_count == 0:
        return None
    return {
        "message": NO_TASKS_FOUND,
        "hint": TRY_DIFFERENT_SEARCH if search_text else None,
    }
