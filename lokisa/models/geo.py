"""
Pydantic models for coordinates, boundaries and municipalities.

Boundaries and municipalities are configuration-time data: they are built
once when the registry is loaded and never mutated afterwards.
"""

from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Literal, Union


class Coordinate(BaseModel):
    """A WGS84 point in decimal degrees."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    class Config:
        frozen = True


class PolygonBoundary(BaseModel):
    """
    Polygon region. Vertices are ordered and implicitly closed: the last
    vertex connects back to the first.
    """
    type: Literal["polygon"] = "polygon"
    vertices: List[Coordinate] = Field(..., min_length=3)

    class Config:
        frozen = True


class CircleBoundary(BaseModel):
    """Circular region around a center point."""
    type: Literal["circle"] = "circle"
    center: Coordinate
    radius_km: float = Field(..., gt=0)

    class Config:
        frozen = True


GeoBoundary = Annotated[Union[PolygonBoundary, CircleBoundary], Field(discriminator="type")]


class Municipality(BaseModel):
    """
    A governing authority with its boundaries and department routing table.

    A point belongs to the municipality if it lies inside ANY of the
    boundaries.
    """
    name: str
    code: str
    boundaries: List[GeoBoundary] = Field(..., min_length=1)
    default_email_domain: str = Field(..., description="Domain suffix such as '@tshwane.gov.za'")
    department_routing: Dict[str, List[str]] = Field(default_factory=dict)
    fallback_category: str = "general"

    class Config:
        frozen = True


class MunicipalityInfo(BaseModel):
    """Display-oriented municipality lookup result."""
    name: str
    code: str
    found: bool


class MunicipalitySummary(BaseModel):
    name: str
    code: str
