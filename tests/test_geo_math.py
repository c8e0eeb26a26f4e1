import itertools
import math
import random

import pytest

from geo_math import distance_miles

UNION_STATION = (39.7527, -105.0008)
CENTRAL_LIBRARY = (39.7377, -104.9882)


def test_same_point_is_zero():
    assert distance_miles(39.7392, -104.9903, 39.7392, -104.9903) == 0


def test_union_station_to_central_library():
    d = distance_miles(*UNION_STATION, *CENTRAL_LIBRARY)
    assert d == pytest.approx(1.234, abs=0.01)


def test_distance_is_symmetric():
    points = [UNION_STATION, CENTRAL_LIBRARY, (39.7316, -104.9739), (0.0, 0.0), (-33.9, 151.2)]
    for a, b in itertools.combinations(points, 2):
        assert distance_miles(*a, *b) == pytest.approx(distance_miles(*b, *a), rel=1e-12)


def test_antipodes_is_half_circumference():
    d = distance_miles(0.0, 0.0, 0.0, 180.0)
    assert d == pytest.approx(3958.8 * 3.141592653589793, rel=1e-9)


def test_near_antipodal_pairs_stay_finite():
    rng = random.Random(1234)
    for _ in range(20000):
        lat, lng = rng.uniform(-90, 90), rng.uniform(-180, 180)
        d = distance_miles(lat, lng, -lat, lng + 180)
        assert math.isfinite(d)
        assert d == pytest.approx(math.pi * 3958.8, rel=1e-6)
    assert math.isfinite(distance_miles(69.51232454868148, 86.5812282599507, -69.51232454868148, 266.5812282599507))


def test_out_of_range_inputs_stay_finite():
    rng = random.Random(99)
    for _ in range(5000):
        lat1, lat2 = rng.uniform(-400, 400), rng.uniform(-400, 400)
        lng1, lng2 = rng.uniform(-1000, 1000), rng.uniform(-1000, 1000)
        d = distance_miles(lat1, lng1, lat2, lng2)
        assert math.isfinite(d) and d >= 0
