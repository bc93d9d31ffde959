from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..auth import require_basic_auth
from ..models import CategorySection, SortOption
from ..projector import project
from ..repositories import Repository, get_repository
from ..schemas import SectionOut, SectionsOut
from ..settings import get_settings
from ..utils import sections_envelope

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/sections",
    tags=["sections"],
    dependencies=[Depends(require_basic_auth)],
)

_SORT_ERROR = "sort must be one of: " + ", ".join(o.value for o in SortOption)


def _resolve_sort(sort: Optional[str]) -> SortOption:
    if sort is None or not sort.strip():
        return get_settings().default_sort
    try:
        return SortOption(sort.strip().lower())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_SORT_ERROR)


def _project(
    repo: Repository, q: Optional[str], sort: Optional[str], show_completed: Optional[bool]
) -> Tuple[List[CategorySection], int]:
    option = _resolve_sort(sort)
    if show_completed is None:
        show_completed = get_settings().default_show_completed
    snapshot = repo.snapshot()
    return project(snapshot, q or "", option, show_completed), len(snapshot)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=SectionsOut,
    summary="Grouped Task View",
    description=(
        "Tasks grouped by category, filtered and sorted for display.\n\n"
        "Query parameters:\n"
        "- q: case-insensitive search over task title, description and category name\n"
        "- sort: one of due_date, priority, title, created_at\n"
        "- show_completed: include completed tasks\n\n"
        "Without a search every category is returned, even when it has no visible tasks. "
        "While searching, categories without a match are left out."
    ),
    responses={400: {"description": "Invalid sort option"}},
)
def list_sections(
    q: Optional[str] = Query(None, description="Search text"),
    sort: Optional[str] = Query(None, description="Sort option; defaults to DEFAULT_SORT"),
    show_completed: Optional[bool] = Query(
        None, description="Include completed tasks; defaults to DEFAULT_SHOW_COMPLETED"
    ),
    repo: Repository = Depends(get_repository),
) -> SectionsOut:
    sections, category_count = _project(repo, q, sort, show_completed)
    envelope = sections_envelope(sections, category_count, q)
    return SectionsOut(
        sections=[SectionOut.from_section(s) for s in envelope["sections"]],
        empty_state=envelope["empty_state"],
    )


# PUBLIC_INTERFACE
@router.delete(
    "/{category_id}/tasks",
    summary="Delete Tasks From Section",
    description=(
        "Delete tasks by their position in a section of the grouped view. The view is "
        "recomputed with the same q/sort/show_completed the client is displaying."
    ),
    responses={
        400: {"description": "Index out of range or invalid sort option"},
        404: {"description": "Category not found"},
    },
)
def delete_section_tasks(
    category_id: int,
    indices: List[int] = Query(..., description="Positions of the tasks within the section"),
    q: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    show_completed: Optional[bool] = Query(None),
    repo: Repository = Depends(get_repository),
) -> Dict[str, int]:
    if repo.get_category(category_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")

    sections, _ = _project(repo, q, sort, show_completed)
    visible = next((s.tasks for s in sections if s.category["id"] == category_id), ())
    if any(i < 0 or i >= len(visible) for i in indices):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Task index out of range")

    deleted = repo.delete_tasks({visible[i]["id"] for i in indices})
    logger.info("Deleted %d task(s) from category %s", deleted, category_id)
    return {"deleted": deleted}
