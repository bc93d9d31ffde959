from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import require_basic_auth
from ..repositories import CategoryNotFoundError, Repository, TaskNotFoundError, get_repository
from ..schemas import TaskCreate, TaskOut, TaskUpdate

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
    dependencies=[Depends(require_basic_auth)],
)


def _task_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


def _category_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new Task in an existing Category and return the created resource.",
    responses={
        201: {"description": "Task created successfully"},
        404: {"description": "Category not found"},
    },
)
def create_task(payload: TaskCreate, repo: Repository = Depends(get_repository)) -> TaskOut:
    try:
        created = repo.create_task(payload)
    except CategoryNotFoundError:
        raise _category_not_found()
    return TaskOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    responses={404: {"description": "Task not found"}},
)
def get_task(task_id: int, repo: Repository = Depends(get_repository)) -> TaskOut:
    item = repo.get_task(task_id)
    if not item:
        raise _task_not_found()
    return TaskOut(**item)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Partially update fields of a Task, including moving it to another category.",
    responses={
        200: {"description": "Task updated"},
        404: {"description": "Task or target category not found"},
    },
)
def patch_task(task_id: int, payload: TaskUpdate, repo: Repository = Depends(get_repository)) -> TaskOut:
    try:
        updated = repo.update_task(task_id, payload)
    except CategoryNotFoundError:
        raise _category_not_found()
    if not updated:
        raise _task_not_found()
    return TaskOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=TaskOut,
    summary="Toggle Task Completion",
    responses={404: {"description": "Task not found"}},
)
def toggle_task(task_id: int, repo: Repository = Depends(get_repository)) -> TaskOut:
    try:
        return TaskOut(**repo.toggle_task(task_id))  # type: ignore[arg-type]
    except TaskNotFoundError:
        raise _task_not_found()


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    responses={
        204: {"description": "Task deleted"},
        404: {"description": "Task not found"},
    },
)
def delete_task(task_id: int, repo: Repository = Depends(get_repository)) -> None:
    """
    Delete a Task. Returns 204 on success, 404 if not found.
    """
    if not repo.delete_task(task_id):
        raise _task_not_found()
    return None
