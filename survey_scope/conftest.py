import pytest

from survey_scope.core.geometry import destination_point

CENTER = (40.7608, -111.891)


def rectangle_aoi(center, width_m, height_m):
    """Closed (lat, lon) ring of a width x height rectangle around center."""
    north = destination_point(center, height_m / 2, 0)[0]
    south = destination_point(center, height_m / 2, 180)[0]
    east = destination_point(center, width_m / 2, 90)[1]
    west = destination_point(center, width_m / 2, 270)[1]
    return [(south, west), (south, east), (north, east), (north, west), (south, west)]


@pytest.fixture
def center():
    return CENTER


@pytest.fixture
def square_aoi():
    return rectangle_aoi(CENTER, 100, 100)


@pytest.fixture
def home():
    # South-west of the square
    return destination_point(CENTER, 300, 225)


@pytest.fixture
def rectangle():
    return rectangle_aoi
