"""
Registered site schemas
"""
from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict, Field

from presence.constants import GEOFENCE_RADIUS_METERS


class SiteCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    latitude: float = Field(..., ge=-90, le=90, description="Latitude")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude")


class SiteUpdate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, description="Latitude")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude")


class SiteOut(BaseModel):
    id: int
    name: str
    latitude: float
    longitude: float
    radius_meters: float = GEOFENCE_RADIUS_METERS
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SiteListResponse(BaseModel):
    items: List[SiteOut]
    total: int
