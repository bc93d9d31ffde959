from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import CategorySection, to_local_naive
from .sync_status import SyncStatus, display_for, offers_settings_link, show_banner

# Shared type for incoming due_date which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]

DEFAULT_COLOR = "007AFF"
_HEX_COLOR = re.compile(r"^[0-9A-F]{6}$")


def _parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """
    Internal helper to normalize due_date input into a naive local datetime.
    - If value is a string, attempt to parse via datetime.fromisoformat; if time is missing, set to 00:00.
      A trailing 'Z' is read as UTC.
    - If value is a date (not datetime), convert to datetime at 00:00.
    - If value carries a UTC offset, convert it to local time and drop the offset, so all
      stored due dates stay comparable with each other.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return to_local_naive(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if isinstance(value, str):
        s = value.strip()
        if s[-1:] in ("Z", "z"):
            s = s[:-1] + "+00:00"
        try:
            return to_local_naive(datetime.fromisoformat(s))
        except ValueError:
            try:
                d = date.fromisoformat(s)
                return datetime(d.year, d.month, d.day, 0, 0, 0)
            except ValueError as e:
                raise ValueError(
                    "Invalid due_date format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
                ) from e

    raise ValueError("Invalid type for due_date; expected date, datetime, or ISO8601 string.")


def _clean_text(v: Optional[str], field: str, max_length: int) -> Optional[str]:
    if v is None:
        return v
    s = v.strip()
    if not (1 <= len(s) <= max_length):
        raise ValueError(f"{field} length must be between 1 and {max_length} characters")
    return s


def _normalize_color(v: Optional[str]) -> Optional[str]:
    """Accept 'abc123' or '#ABC123'; store upper-case without the leading '#'."""
    if v is None:
        return v
    s = v.strip().lstrip("#").upper()
    if not _HEX_COLOR.match(s):
        raise ValueError("color must be a 6-digit hex value such as '007AFF'")
    return s


# PUBLIC_INTERFACE
class CategoryCreate(BaseModel):
    """
    Schema for creating a new Category.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"name": "Work", "color": "007AFF"}})

    name: str = Field(..., description="Display name of the category", min_length=1, max_length=100)
    color: str = Field(default=DEFAULT_COLOR, description="Hex color tag, e.g. '007AFF'")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_text(v, "name", 100)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _normalize_color(v)


# PUBLIC_INTERFACE
class CategoryUpdate(BaseModel):
    """
    Schema for updating a Category. Only provided fields are changed.
    """

    name: Optional[str] = Field(default=None, description="Display name of the category", max_length=100)
    color: Optional[str] = Field(default=None, description="Hex color tag, e.g. '007AFF'")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v, "name", 100)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_color(v)


# PUBLIC_INTERFACE
class CategoryOut(BaseModel):
    """
    Schema returned by the API for a Category.
    """

    id: int = Field(..., description="Unique identifier of the category")
    name: str = Field(..., description="Display name of the category")
    color: str = Field(..., description="Hex color tag")
    created_at: datetime = Field(..., description="Creation timestamp")


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new Task inside an existing Category.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Finish SwiftData project",
                "description": "Complete the task manager app with SwiftData",
                "due_date": "2025-02-01T17:00:00",
                "priority": 2,
                "completed": False,
                "category_id": 1,
            }
        }
    )

    title: str = Field(..., description="Short title for the task", min_length=1, max_length=200)
    description: str = Field(default="", description="Optional detailed description")
    due_date: datetime = Field(
        ...,
        description="Due date/time of the task. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    priority: int = Field(default=1, ge=0, le=10, description="Priority, higher is more urgent")
    completed: bool = Field(default=False, description="Completion status flag")
    category_id: int = Field(..., description="Id of the owning category")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        if v is None:
            raise ValueError("title is required")
        return _clean_text(v, "title", 200)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        """
        Normalize due_date from str/date/datetime to datetime.
        """
        return _parse_due_date(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for updating an existing Task.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Meeting with team",
                "completed": True,
                "priority": 3,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the task", max_length=200)
    description: Optional[str] = Field(default=None, description="Detailed description")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time of the task. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )
    priority: Optional[int] = Field(default=None, ge=0, le=10, description="Priority, higher is more urgent")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    category_id: Optional[int] = Field(default=None, description="Move the task to another category")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """
        If title is provided, strip whitespace and enforce 1..200 length.
        """
        return _clean_text(v, "title", 200)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return _parse_due_date(v)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task.
    """

    id: int = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title for the task")
    description: str = Field(default="", description="Detailed description")
    due_date: datetime = Field(..., description="Due date/time as an ISO8601 datetime")
    priority: int = Field(..., description="Priority, higher is more urgent")
    completed: bool = Field(..., description="Completion status flag")
    category_id: int = Field(..., description="Id of the owning category")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# PUBLIC_INTERFACE
class SectionOut(BaseModel):
    """
    A category with its visible tasks, in display order.
    """

    category: CategoryOut
    tasks: List[TaskOut] = Field(default_factory=list)

    @classmethod
    def from_section(cls, section: CategorySection) -> SectionOut:
        return cls(
            category=CategoryOut(**section.category),  # type: ignore[arg-type]
            tasks=[TaskOut(**t) for t in section.tasks],  # type: ignore[arg-type]
        )


# PUBLIC_INTERFACE
class EmptyStateOut(BaseModel):
    """Placeholder shown when there is nothing to render."""

    message: str
    hint: Optional[str] = None


# PUBLIC_INTERFACE
class SectionsOut(BaseModel):
    """
    Envelope for the grouped task view.
    """

    sections: List[SectionOut] = Field(..., description="Admitted categories in display order")
    empty_state: Optional[EmptyStateOut] = Field(
        default=None, description="Set when categories exist but no section survived filtering"
    )


# PUBLIC_INTERFACE
class SyncStatusOut(BaseModel):
    """
    Current cloud sync status with its display attributes.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "unavailable",
                "icon": "icloud.slash",
                "color": "orange",
                "description": "iCloud Not Available",
                "show_banner": True,
                "offers_settings_link": True,
            }
        }
    )

    status: SyncStatus
    icon: str
    color: str
    description: str
    show_banner: bool
    offers_settings_link: bool

    @classmethod
    def from_status(cls, status: SyncStatus) -> SyncStatusOut:
        display = display_for(status)
        return cls(
            status=status,
            icon=display.icon,
            color=display.color,
            description=display.description,
            show_banner=show_banner(status),
            offers_settings_link=offers_settings_link(status),
        )
