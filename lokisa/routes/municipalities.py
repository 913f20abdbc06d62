"""Municipality routes - registry listing, lookup and email routing preview."""

from typing import List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from lokisa.models.geo import Coordinate, MunicipalityInfo, MunicipalitySummary
from lokisa.services.municipality_resolver import MunicipalityResolver, get_municipality_resolver


class RoutingResponse(BaseModel):
    municipality: MunicipalityInfo
    category: str
    recipients: List[str]


router = APIRouter(prefix="/api/municipalities", tags=["Municipalities"])


@router.get("", response_model=List[MunicipalitySummary])
def list_municipalities(resolver: MunicipalityResolver = Depends(get_municipality_resolver)):
    """Supported municipalities in match-precedence order."""
    return resolver.all()


@router.get("/lookup", response_model=MunicipalityInfo)
def lookup_municipality(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    resolver: MunicipalityResolver = Depends(get_municipality_resolver),
):
    return resolver.info(Coordinate(latitude=lat, longitude=lng))


@router.get("/routing", response_model=RoutingResponse)
def routing_preview(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    category: str = Query("general", min_length=1),
    resolver: MunicipalityResolver = Depends(get_municipality_resolver),
):
    """Recipients an issue of this category at this point would be emailed to."""
    point = Coordinate(latitude=lat, longitude=lng)
    return RoutingResponse(
        municipality=resolver.info(point),
        category=category,
        recipients=resolver.department_emails(point, category),
    )
