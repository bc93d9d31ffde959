from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Tuple, TypedDict


# PUBLIC_INTERFACE
class CategoryEntity(TypedDict):
    """
    A named grouping that owns a set of tasks.

    Fields:
    - id: Unique integer identifier
    - name: Display name (1..100 chars, trimmed on input via schemas)
    - color: Hex color tag without leading '#', e.g. '007AFF'
    - created_at: Local creation timestamp (datetime)
    """

    id: int
    name: str
    color: str
    created_at: datetime


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A single actionable item owned by exactly one category.

    Fields:
    - id: Unique integer identifier
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - description: Free-text description, empty string when not provided
    - due_date: Due date/time (dates are normalized to midnight in schemas)
    - priority: Integer priority, higher is more urgent
    - completed: Boolean completion flag
    - created_at: Local creation timestamp (datetime)
    - updated_at: Local last update timestamp (datetime)
    - category_id: Id of the owning category
    """

    id: int
    title: str
    description: str
    due_date: datetime
    priority: int
    completed: bool
    created_at: datetime
    updated_at: datetime
    category_id: int


# PUBLIC_INTERFACE
class SortOption(str, Enum):
    """Ordering applied to the tasks of each section."""

    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"
    CREATED_AT = "created_at"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]

    @classmethod
    def coerce(cls, raw: object) -> SortOption:
        """Return the matching option, falling back to DUE_DATE for unknown input."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.DUE_DATE


_SORT_LABELS = {
    SortOption.DUE_DATE: "Due Date",
    SortOption.PRIORITY: "Priority",
    SortOption.TITLE: "Title",
    SortOption.CREATED_AT: "Created Date",
}


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class CategorySnapshot:
    """
    Read-only view of one stored category and all of its tasks, in storage order.
    """

    category: CategoryEntity
    tasks: Tuple[TaskEntity, ...] = ()


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class CategorySection:
    """
    A category paired with its visible tasks after search, completion filter and sort.
    Recomputed on every projection; never persisted.
    """

    category: CategoryEntity
    tasks: Tuple[TaskEntity, ...] = ()


# PUBLIC_INTERFACE
def to_local_naive(value: datetime) -> datetime:
    """Return value as a naive datetime in local time; naive input is returned unchanged."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    return value.astimezone().replace(tzinfo=None)
