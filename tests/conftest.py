"""
Shared test fixtures for the earth transform test suite.
Provides datum caches, reference ellipsoids and ready-made grids.
"""
import numpy as np
import pytest

from common.types import EarthLocation
from geodesy.datum import DatumFactory
from geodesy.spheroids import Spheroid, spheroid_parameters
from projections import Mercator
from transforms import MapProjection, MapProjectionFactory


class Ellipsoids:
    """Axis pairs used across the tests."""
    WGS84_A = spheroid_parameters(Spheroid.WGS84).a
    WGS84_B = spheroid_parameters(Spheroid.WGS84).b
    CLARKE_A = spheroid_parameters(Spheroid.CLARKE1866).a
    CLARKE_B = spheroid_parameters(Spheroid.CLARKE1866).b
    SPHERE_R = 6370997.0


@pytest.fixture
def ellipsoids():
    return Ellipsoids()


@pytest.fixture
def datum_factory():
    """Fresh datum cache backed by the packaged table."""
    return DatumFactory()


@pytest.fixture
def wgs84(datum_factory):
    return datum_factory.wgs84()


@pytest.fixture
def nad27(datum_factory):
    return datum_factory.create(Spheroid.CLARKE1866)


@pytest.fixture
def projection_factory(datum_factory):
    return MapProjectionFactory(datum_factory)


@pytest.fixture
def mercator_grid(wgs84):
    """512 x 512 Mercator grid with 1 km pixels centered on 30N 80W."""
    merc = Mercator(wgs84.axis, wgs84.rp)
    return MapProjection(merc, wgs84, (512, 512)).with_center(
        EarthLocation(30.0, -80.0), (1000.0, 1000.0)
    )


@pytest.fixture
def rng():
    return np.random.default_rng(20240601)
