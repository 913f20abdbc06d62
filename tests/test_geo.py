import math
import random
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from lokisa.models.geo import CircleBoundary, Coordinate, PolygonBoundary
from lokisa.models.issue import Issue
from lokisa.services.boundary import contains
from lokisa.services.proximity import DEFAULT_RADIUS_KM, find_nearby, haversine_distance_km


def pt(lat, lng):
    return Coordinate(latitude=lat, longitude=lng)


def polygon(*pairs):
    return PolygonBoundary(vertices=[pt(lat, lng) for lat, lng in pairs])


def make_issue(issue_id, lat, lng):
    return Issue(
        id=issue_id,
        type="pothole",
        latitude=lat,
        longitude=lng,
        address=f"Somewhere {issue_id}",
        report_id=f"R{issue_id:09d}",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


SQUARE = polygon((-25.4, 28.0), (-25.4, 28.6), (-25.9, 28.6), (-25.9, 28.0))

# L-shape: the north-east quadrant is cut out
L_SHAPE = polygon((0, 0), (0, 2), (1, 2), (1, 1), (2, 1), (2, 0))


class TestCoordinate:

    def test_rejects_out_of_range_latitude(self):
        with pytest.raises(PydanticValidationError):
            Coordinate(latitude=90.5, longitude=0)

    def test_rejects_out_of_range_longitude(self):
        with pytest.raises(PydanticValidationError):
            Coordinate(latitude=0, longitude=-180.01)

    def test_polygon_needs_three_vertices(self):
        with pytest.raises(PydanticValidationError):
            polygon((0, 0), (1, 1))

    def test_circle_radius_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            CircleBoundary(center=pt(0, 0), radius_km=0)


class TestPolygonContainment:

    def test_interior_point(self):
        assert contains(SQUARE, pt(-25.7479, 28.2293))

    @pytest.mark.parametrize("lat,lng", [(-25.3, 28.3), (-26.0, 28.3), (-25.6, 27.9), (-25.6, 28.7), (-24.0, 29.0)])
    def test_exterior_points(self, lat, lng):
        assert not contains(SQUARE, pt(lat, lng))

    def test_concave_polygon(self):
        assert contains(L_SHAPE, pt(0.5, 0.5))
        assert contains(L_SHAPE, pt(0.5, 1.5))
        assert contains(L_SHAPE, pt(1.5, 0.5))
        assert not contains(L_SHAPE, pt(1.5, 1.5))

    def test_explicit_closing_vertex_gives_same_answer(self):
        closed = polygon((-25.4, 28.0), (-25.4, 28.6), (-25.9, 28.6), (-25.9, 28.0), (-25.4, 28.0))
        for point in [pt(-25.7, 28.3), pt(-25.3, 28.3), pt(-25.7, 28.7)]:
            assert contains(closed, point) == contains(SQUARE, point)

    def test_deterministic(self):
        rng = random.Random(7)
        for _ in range(200):
            point = pt(rng.uniform(-26.5, -25.0), rng.uniform(27.5, 29.0))
            assert contains(L_SHAPE, point) == contains(L_SHAPE, point)
            assert contains(SQUARE, point) == contains(SQUARE, point)

    def test_unsupported_boundary(self):
        with pytest.raises(TypeError):
            contains(object(), pt(0, 0))


class TestCircleContainment:

    def test_center_is_inside(self):
        circle = CircleBoundary(center=pt(-26.2, 28.0), radius_km=10)
        assert contains(circle, pt(-26.2, 28.0))

    def test_inside_and_outside(self):
        circle = CircleBoundary(center=pt(0, 0), radius_km=120)
        # One degree of latitude is about 111.2 km
        assert contains(circle, pt(1.0, 0))
        assert not contains(circle, pt(1.2, 0))

    def test_antipodal_point_is_outside(self):
        circle = CircleBoundary(center=pt(-89.58, 0), radius_km=5)
        assert not contains(circle, pt(89.58, 180))


class TestHaversine:

    def test_zero_for_identical_points(self):
        assert haversine_distance_km(pt(-25.7479, 28.2293), pt(-25.7479, 28.2293)) == 0

    def test_one_degree_of_latitude(self):
        expected = 2 * math.pi * 6371 / 360
        assert haversine_distance_km(pt(0, 0), pt(1, 0)) == pytest.approx(expected, abs=1e-6)

    def test_symmetric(self):
        rng = random.Random(42)
        for _ in range(200):
            a = pt(rng.uniform(-90, 90), rng.uniform(-180, 180))
            b = pt(rng.uniform(-90, 90), rng.uniform(-180, 180))
            assert haversine_distance_km(a, b) == pytest.approx(haversine_distance_km(b, a), rel=1e-9)

    @pytest.mark.parametrize("a,b", [
        ((-89.58, 0), (89.58, 180)),
        ((0, 0), (0, 180)),
        ((-25.7479, 28.2293), (25.7479, -151.7707)),
    ])
    def test_antipodal_points(self, a, b):
        distance = haversine_distance_km(pt(*a), pt(*b))
        assert distance == pytest.approx(math.pi * 6371, rel=1e-6)

    def test_pretoria_to_sandton(self):
        distance = haversine_distance_km(pt(-25.7479, 28.2293), pt(-26.1076, 28.0567))
        assert 40 < distance < 50


class TestFindNearby:

    def test_filters_and_preserves_order(self):
        center = pt(-25.7479, 28.2293)
        issues = [
            make_issue(1, -25.7500, 28.2300),  # ~0.25 km
            make_issue(2, -26.1076, 28.0567),  # Sandton, ~43 km
            make_issue(3, -25.7400, 28.2200),  # ~1.3 km
        ]
        assert [i.id for i in find_nearby(issues, center, 5)] == [1, 3]

    def test_boundary_is_inclusive(self):
        center = pt(0, 0)
        issue = make_issue(1, 0.5, 0.5)
        exact = haversine_distance_km(issue.coordinate, center)
        assert find_nearby([issue], center, exact) == [issue]

    def test_default_radius(self):
        center = pt(0, 0)
        near = make_issue(1, 0.04, 0)   # ~4.4 km
        far = make_issue(2, 0.05, 0)    # ~5.6 km
        assert DEFAULT_RADIUS_KM == 5
        assert find_nearby([near, far], center) == [near]

    def test_far_side_of_the_globe(self):
        center = pt(-89.58, 0)
        opposite = make_issue(1, 89.58, 180)
        near = make_issue(2, -89.58, 0.01)
        assert find_nearby([opposite, near], center, 5) == [near]
        assert find_nearby([opposite, near], center, 30000) == [opposite, near]

    @pytest.mark.parametrize("radius", [0, -1, -100.5])
    def test_non_positive_radius_matches_nothing(self, radius):
        center = pt(0, 0)
        assert find_nearby([make_issue(1, 0, 0)], center, radius) == []

    def test_matches_brute_force(self):
        rng = random.Random(3)
        center = pt(-25.75, 28.2)
        issues = [make_issue(n, rng.uniform(-26.0, -25.5), rng.uniform(27.9, 28.5)) for n in range(1, 300)]
        for radius in (1, 5, 12.5, 30):
            result = find_nearby(issues, center, radius)
            expected = [i for i in issues if haversine_distance_km(i.coordinate, center) <= radius]
            assert result == expected
            assert all(haversine_distance_km(i.coordinate, center) <= radius for i in result)
