"""
Municipality registry for Gauteng metros.

ORDER MATTERS: resolution is first-match-wins, so a point inside two
overlapping boundaries belongs to whichever municipality appears first in
MUNICIPALITIES. Tshwane is listed before Ekurhuleni on purpose; their
approximate boxes overlap south of Centurion.
"""

from typing import Dict, List, Tuple

from lokisa.models.geo import Coordinate, Municipality, PolygonBoundary

# Issue categories grouped by department
ROAD_CATEGORIES = ["pothole", "damaged-road", "road-damage"]
WATER_CATEGORIES = ["burst-pipe", "leaking-meter", "water-leak", "no-water"]
SEWER_CATEGORIES = ["blocked-drain", "sewage-spill", "sewer-overflow", "manhole-cover"]
STREETLIGHT_CATEGORIES = ["streetlight", "street-light", "broken-light", "light-out"]
TRAFFIC_CATEGORIES = ["trafficlight", "traffic-light", "malfunctioning-traffic", "traffic-signal"]
ELECTRICITY_CATEGORIES = [
    "downed-lines",
    "damaged-substation",
    "open-electrical-box",
    "broken-electrical-box",
    "power-outage",
    "fallen-power-line",
    "electrical-hazard",
]
WASTE_CATEGORIES = ["overflowing-bin", "illegal-dumping", "missed-collection", "broken-bin"]
ENVIRONMENT_CATEGORIES = ["damaged-green-space", "tree-damage", "park-maintenance", "environmental-hazard"]
GENERAL_CATEGORIES = ["other", "general"]

ALL_CATEGORIES = (
    ROAD_CATEGORIES
    + WATER_CATEGORIES
    + SEWER_CATEGORIES
    + STREETLIGHT_CATEGORIES
    + TRAFFIC_CATEGORIES
    + ELECTRICITY_CATEGORIES
    + WASTE_CATEGORIES
    + ENVIRONMENT_CATEGORIES
    + GENERAL_CATEGORIES
)


def _routing(*groups: Tuple[List[str], str]) -> Dict[str, List[str]]:
    routing: Dict[str, List[str]] = {}
    for categories, email in groups:
        for category in categories:
            routing[category] = [email]
    return routing


def _box(north: float, south: float, west: float, east: float) -> PolygonBoundary:
    return PolygonBoundary(vertices=[
        Coordinate(latitude=north, longitude=west),
        Coordinate(latitude=north, longitude=east),
        Coordinate(latitude=south, longitude=east),
        Coordinate(latitude=south, longitude=west),
    ])


TSHWANE = Municipality(
    name="City of Tshwane Metropolitan Municipality",
    code="tshwane",
    # Approximate Tshwane/Pretoria metropolitan area
    boundaries=[_box(north=-25.4, south=-25.9, west=28.0, east=28.6)],
    default_email_domain="@tshwane.gov.za",
    department_routing=_routing(
        (ROAD_CATEGORIES, "pothole@tshwane.gov.za"),
        (WATER_CATEGORIES, "waterleaks@tshwane.gov.za"),
        (SEWER_CATEGORIES, "SewerBlockages@Tshwane.gov.za"),
        (STREETLIGHT_CATEGORIES, "streetlights@tshwane.gov.za"),
        (TRAFFIC_CATEGORIES, "trafficsignalfaults@tshwane.gov.za"),
        (ELECTRICITY_CATEGORIES, "electricity@tshwane.gov.za"),
        (WASTE_CATEGORIES, "wastemanagement@tshwane.gov.za"),
        (ENVIRONMENT_CATEGORIES, "ehonestop@tshwane.gov.za"),
        (GENERAL_CATEGORIES, "customercare@tshwane.gov.za"),
    ),
)

JOHANNESBURG = Municipality(
    name="City of Johannesburg Metropolitan Municipality",
    code="johannesburg",
    # West of Ekurhuleni
    boundaries=[_box(north=-25.9, south=-26.4, west=27.8, east=28.15)],
    default_email_domain="@joburg.org.za",
    department_routing=_routing(
        (ROAD_CATEGORIES, "roads@joburg.org.za"),
        (WATER_CATEGORIES, "water@joburg.org.za"),
        (SEWER_CATEGORIES, "wastewater@joburg.org.za"),
        (STREETLIGHT_CATEGORIES, "electricity@joburg.org.za"),
        (TRAFFIC_CATEGORIES, "traffic@joburg.org.za"),
        (ELECTRICITY_CATEGORIES, "electricity@joburg.org.za"),
        (WASTE_CATEGORIES, "waste@joburg.org.za"),
        (ENVIRONMENT_CATEGORIES, "environment@joburg.org.za"),
        (GENERAL_CATEGORIES, "callcentre@joburg.org.za"),
    ),
)

EKURHULENI = Municipality(
    name="Ekurhuleni Metropolitan Municipality",
    code="ekurhuleni",
    # East Rand
    boundaries=[_box(north=-25.8, south=-26.5, west=28.15, east=28.8)],
    default_email_domain="@ekurhuleni.gov.za",
    # Every category goes to the call centre
    department_routing=_routing((ALL_CATEGORIES, "call.centre@ekurhuleni.gov.za")),
)

MUNICIPALITIES: Tuple[Municipality, ...] = (TSHWANE, JOHANNESBURG, EKURHULENI)
