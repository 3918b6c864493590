"""Version API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.version import VersionCompareResponse, VersionContentResponse, VersionSummary
from ..services import ContentService

router = APIRouter(prefix="/api/pages/{page_id}/versions", tags=["versions"])


@router.get("", response_model=List[VersionSummary])
def list_versions(page_id: int, db: Session = Depends(get_db)):
    """Full history of a page (archived and recent), oldest first."""
    service = ContentService(db)
    return service.get_history(page_id)


@router.get("/recent", response_model=List[VersionSummary])
def list_recent_versions(page_id: int, db: Session = Depends(get_db)):
    """Only the versions kept inline on the page row."""
    service = ContentService(db)
    return service.get_recent_versions(page_id)


@router.get("/compare", response_model=VersionCompareResponse)
def compare_versions(
    page_id: int,
    from_version: int = Query(..., ge=1),
    to_version: int = Query(..., ge=1),
    db: Session = Depends(get_db),
):
    """Unified diff between two versions."""
    service = ContentService(db)
    diff = service.compare_versions(page_id, from_version, to_version)
    return VersionCompareResponse(
        page_id=page_id, from_version=from_version, to_version=to_version, diff=diff
    )


@router.get("/{version}", response_model=VersionContentResponse)
def get_version_content(page_id: int, version: int, db: Session = Depends(get_db)):
    """Reconstructed full text of one version."""
    service = ContentService(db)
    content = service.get_version_content(page_id, version)
    return VersionContentResponse(page_id=page_id, version=version, content=content)
