"""Page API: create, read, edit, move, copy, reorder, delete, search, tree, statistics.

Thin routing layer. Every operation delegates to ContentService (deep
module); domain errors surface through the WikiException handler.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.page import (
    DeleteResponse,
    PageCopyRequest,
    PageCreate,
    PageDetailResponse,
    PageMoveRequest,
    PageResponse,
    PageSearchResponse,
    PageTreeNode,
    PageUpdate,
    SortOrderUpdate,
    WikiStatistics,
)
from ..services import ContentService

router = APIRouter(prefix="/api/pages", tags=["pages"])

# Project-scoped collection endpoints.
project_router = APIRouter(prefix="/api/projects/{project_id}/pages", tags=["pages"])


# -- Project collection ---------------------------------------------------

@project_router.post("", response_model=PageDetailResponse, status_code=201)
def create_page(project_id: int, data: PageCreate, db: Session = Depends(get_db)):
    """Create a directory or document. Documents start at version 1."""
    service = ContentService(db)
    return service.create_page(project_id, data)


@project_router.get("", response_model=List[PageTreeNode])
def get_tree(project_id: int, db: Session = Depends(get_db)):
    """Nested page tree of a project, siblings in sort order."""
    service = ContentService(db)
    return service.get_tree(project_id)


@project_router.get("/statistics", response_model=WikiStatistics)
def get_statistics(project_id: int, db: Session = Depends(get_db)):
    service = ContentService(db)
    return service.get_statistics(project_id)


@project_router.get("/search", response_model=PageSearchResponse)
def search_pages(
    project_id: int,
    keyword: str = Query(..., min_length=1, max_length=255),
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Case-insensitive search on page titles."""
    service = ContentService(db)
    return service.search_pages(project_id, keyword, skip, limit)


@project_router.get("/recent", response_model=List[PageResponse])
def recently_updated(
    project_id: int,
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Most recently updated pages, newest first."""
    service = ContentService(db)
    return service.get_recently_updated(project_id, limit)


@project_router.delete("", response_model=DeleteResponse)
def delete_project_pages(project_id: int, db: Session = Depends(get_db)):
    """Remove every page of a project together with its archived history."""
    service = ContentService(db)
    removed, purged = service.delete_project(project_id)
    return DeleteResponse(deleted_pages=removed, purged_versions=purged)


# -- Single page ----------------------------------------------------------

@router.get("/{page_id}", response_model=PageDetailResponse)
def get_page(page_id: int, db: Session = Depends(get_db)):
    service = ContentService(db)
    return service.get_page(page_id)


@router.put("/{page_id}", response_model=PageDetailResponse)
def update_page(page_id: int, update: PageUpdate, db: Session = Depends(get_db)):
    """Rename and/or edit. Unchanged content does not create a version."""
    service = ContentService(db)
    return service.update_page(page_id, update)


@router.delete("/{page_id}", response_model=DeleteResponse)
def delete_page(page_id: int, db: Session = Depends(get_db)):
    """Delete a page without children. Pages with children answer 400."""
    service = ContentService(db)
    removed = service.delete_page(page_id)
    return DeleteResponse(deleted_pages=removed)


@router.delete("/{page_id}/recursive", response_model=DeleteResponse)
def delete_page_recursive(page_id: int, db: Session = Depends(get_db)):
    """Delete a page and its whole subtree."""
    service = ContentService(db)
    removed = service.delete_page_recursive(page_id)
    return DeleteResponse(deleted_pages=removed)


@router.put("/{page_id}/move", response_model=PageResponse)
def move_page(page_id: int, request: PageMoveRequest, db: Session = Depends(get_db)):
    service = ContentService(db)
    return service.move_page(page_id, request.new_parent_id, request.operator_id)


@router.post("/{page_id}/copy", response_model=PageResponse, status_code=201)
def copy_page(page_id: int, request: PageCopyRequest, db: Session = Depends(get_db)):
    """Deep-copy a page and its subtree. Copies start with fresh history."""
    service = ContentService(db)
    return service.copy_page(
        page_id, request.target_parent_id, request.new_title, request.operator_id
    )


@router.put("/{page_id}/sort-order", response_model=PageResponse)
def update_sort_order(page_id: int, request: SortOrderUpdate, db: Session = Depends(get_db)):
    service = ContentService(db)
    return service.update_sort_order(page_id, request.sort_order)
