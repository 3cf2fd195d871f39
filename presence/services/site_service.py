"""
Site registry: CRUD for registered sites plus the read-only lookup the
decision engine uses.
"""
import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from presence.core.exceptions import StoreUnavailable
from presence.models.site import Site
from presence.schemas.decision import RegisteredSite
from presence.schemas.site import SiteCreate, SiteUpdate

_log = logging.getLogger(__name__)


class SiteRegistry:
    """Read-only view of active sites for the decision engine"""

    def __init__(self, db: Session):
        self.db = db

    def get_site(self, site_id: int) -> Optional[RegisteredSite]:
        try:
            site = (
                self.db.query(Site)
                .filter(Site.id == site_id, Site.active.is_(True))
                .first()
            )
        except SQLAlchemyError as exc:
            _log.error("Site lookup failed for site_id=%s: %s", site_id, exc)
            raise StoreUnavailable("Site registry unavailable") from exc
        if site is None:
            return None
        return RegisteredSite.model_validate(site)


def list_sites(
    db: Session,
    search: Optional[str] = None,
    include_inactive: bool = False,
) -> Tuple[List[Site], int]:
    """List sites ordered by newest first, optionally filtered by name."""
    query = db.query(Site)
    if not include_inactive:
        query = query.filter(Site.active.is_(True))
    if search and search.strip():
        query = query.filter(Site.name.ilike(f"%{search.strip()}%"))
    total = query.count()
    return query.order_by(Site.created_at.desc(), Site.id.desc()).all(), total


def get_site_or_404(db: Session, site_id: int) -> Site:
    site = db.query(Site).filter(Site.id == site_id).first()
    if not site:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Site not found",
        )
    return site


def create_site(db: Session, payload: SiteCreate) -> Site:
    """
    Register a new site

    Raises:
        HTTPException: If a site with the same name already exists (409 Conflict)
    """
    name = payload.name.strip()
    existing = db.query(Site).filter(Site.name == name).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Site with the same name already exists",
        )

    site = Site(name=name, latitude=payload.latitude, longitude=payload.longitude, active=True)
    db.add(site)
    db.commit()
    db.refresh(site)
    _log.info("Site created: id=%s name=%s", site.id, site.name)
    return site


def update_site(db: Session, site_id: int, payload: SiteUpdate) -> Site:
    site = get_site_or_404(db, site_id)
    site.latitude = payload.latitude
    site.longitude = payload.longitude
    db.commit()
    db.refresh(site)
    _log.info("Site updated: id=%s", site.id)
    return site


def deactivate_site(db: Session, site_id: int) -> Site:
    """Sites are referenced by attendance records, so deletion only deactivates."""
    site = get_site_or_404(db, site_id)
    site.active = False
    db.commit()
    db.refresh(site)
    _log.info("Site deactivated: id=%s", site.id)
    return site
