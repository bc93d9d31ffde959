from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import require_basic_auth
from ..repositories import Repository, get_repository
from ..schemas import CategoryCreate, CategoryOut, CategoryUpdate

router = APIRouter(
    prefix="/api/v1/categories",
    tags=["categories"],
    dependencies=[Depends(require_basic_auth)],
)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Category",
    responses={201: {"description": "Category created successfully"}},
)
def create_category(payload: CategoryCreate, repo: Repository = Depends(get_repository)) -> CategoryOut:
    """Create a new Category."""
    return CategoryOut(**repo.create_category(payload))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get("/", response_model=List[CategoryOut], summary="List Categories")
def list_categories(repo: Repository = Depends(get_repository)) -> List[CategoryOut]:
    """List all categories in the order they were created."""
    return [CategoryOut(**c) for c in repo.list_categories()]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/sample-data",
    summary="Add Sample Data",
    description="Insert demo categories and tasks unless 'Work' or 'Personal' already exists.",
)
def add_sample_data(repo: Repository = Depends(get_repository)) -> Dict[str, bool]:
    return {"created": repo.seed_sample_data()}


# PUBLIC_INTERFACE
@router.get(
    "/{category_id}",
    response_model=CategoryOut,
    summary="Get Category",
    responses={404: {"description": "Category not found"}},
)
def get_category(category_id: int, repo: Repository = Depends(get_repository)) -> CategoryOut:
    item = repo.get_category(category_id)
    if not item:
        raise _not_found()
    return CategoryOut(**item)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{category_id}",
    response_model=CategoryOut,
    summary="Update Category",
    responses={404: {"description": "Category not found"}},
)
def patch_category(
    category_id: int, payload: CategoryUpdate, repo: Repository = Depends(get_repository)
) -> CategoryOut:
    """Rename or recolor a category."""
    updated = repo.update_category(category_id, payload)
    if not updated:
        raise _not_found()
    return CategoryOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Category",
    description="Delete a category together with all of its tasks.",
    responses={404: {"description": "Category not found"}},
)
def delete_category(category_id: int, repo: Repository = Depends(get_repository)) -> None:
    if not repo.delete_category(category_id):
        raise _not_found()
    return None
