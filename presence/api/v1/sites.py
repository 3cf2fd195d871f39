"""
Registered site endpoints (geofence centre points)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from presence.core.deps import get_db
from presence.schemas.site import SiteCreate, SiteListResponse, SiteOut, SiteUpdate
from presence.services.site_service import (
    create_site,
    deactivate_site,
    get_site_or_404,
    list_sites,
    update_site,
)

router = APIRouter()


@router.get("", response_model=SiteListResponse)
def list_sites_endpoint(
    search: Optional[str] = Query(None, description="Search term for site name"),
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
):
    sites, total = list_sites(db, search=search, include_inactive=include_inactive)
    return SiteListResponse(items=[SiteOut.model_validate(s) for s in sites], total=total)


@router.post("", response_model=SiteOut, status_code=201)
def create_site_endpoint(payload: SiteCreate, db: Session = Depends(get_db)):
    return SiteOut.model_validate(create_site(db, payload))


@router.get("/{site_id}", response_model=SiteOut)
def get_site_endpoint(site_id: int, db: Session = Depends(get_db)):
    return SiteOut.model_validate(get_site_or_404(db, site_id))


@router.put("/{site_id}", response_model=SiteOut)
def update_site_endpoint(site_id: int, payload: SiteUpdate, db: Session = Depends(get_db)):
    return SiteOut.model_validate(update_site(db, site_id, payload))


@router.delete("/{site_id}", response_model=SiteOut)
def delete_site_endpoint(site_id: int, db: Session = Depends(get_db)):
    """Deactivate a site. Check-ins against it are rejected afterwards."""
    return SiteOut.model_validate(deactivate_site(db, site_id))
