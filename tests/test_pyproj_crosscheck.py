"""
Cross-checks of forward projections against PROJ through pyproj.

Every projection that knows its PROJ definition is compared with the
same definition evaluated by PROJ. Differences stay well below a
centimeter inside the usual working area of each projection.
"""
import numpy as np
import pytest
from pyproj import CRS, Proj, Transformer

from geodesy.spheroids import Spheroid, spheroid_parameters
from projections import (
    AlbersConicalEqualArea,
    AzimuthalEquidistant,
    EquidistantConic,
    LambertAzimuthalEqualArea,
    LambertConformalConic,
    Mercator,
    Mollweide,
    PolarStereographic,
    Polyconic,
    Sinusoidal,
    StatePlane,
    Stereographic,
    TransverseMercator,
    UniversalTransverseMercator,
)

A = spheroid_parameters(Spheroid.WGS84).a
B = spheroid_parameters(Spheroid.WGS84).b
R = 6370997.0
rad = np.radians

TOLERANCE_M = 1.0e-2

CASES = [
    pytest.param(lambda: Mercator(6378137.0, 6356752.3),
                 [(45.0, 90.0)], id="mercator-reference-point"),
    pytest.param(lambda: Mercator(A, B, center_lon=rad(-80.0)),
                 [(30.0, -80.0), (60.0, 10.0), (-45.0, 170.0)], id="mercator"),
    pytest.param(lambda: Mercator(A, B, lat1=rad(30.0), false_easting=1.0e5),
                 [(30.0, -80.0), (-70.0, 45.0)], id="mercator-true-scale"),
    pytest.param(lambda: TransverseMercator(A, B, 0.9996, rad(-75.0), rad(10.0), 500000.0, 1000.0),
                 [(40.0, -75.0), (45.0, -73.0), (-10.0, -77.5)], id="transverse-mercator"),
    pytest.param(lambda: UniversalTransverseMercator(A, B, zone=18),
                 [(40.0, -75.0), (45.0, -73.0)], id="utm-north"),
    pytest.param(lambda: UniversalTransverseMercator(A, B, zone=-56),
                 [(-33.9, 151.2), (-40.0, 152.5)], id="utm-south"),
    pytest.param(lambda: LambertConformalConic(A, B, rad(33.0), rad(45.0), rad(-96.0), rad(23.0),
                                               1.0e6, 2.0e5),
                 [(35.0, -100.0), (45.0, -80.0), (25.0, -120.0)], id="lambert-conformal-conic"),
    pytest.param(lambda: AlbersConicalEqualArea(A, B, rad(29.5), rad(45.5), rad(-96.0), rad(23.0)),
                 [(35.0, -100.0), (45.0, -80.0), (25.0, -120.0)], id="albers"),
    pytest.param(lambda: EquidistantConic(A, B, rad(20.0), rad(60.0), rad(-96.0), rad(40.0)),
                 [(35.0, -100.0), (55.0, -70.0)], id="equidistant-conic"),
    pytest.param(lambda: Polyconic(A, B, rad(-96.0), rad(30.0)),
                 [(35.0, -100.0), (45.0, -90.0)], id="polyconic"),
    pytest.param(lambda: PolarStereographic(A, B, rad(-45.0), rad(70.0)),
                 [(80.0, -45.0), (65.0, 0.0)], id="polar-stereographic"),
    pytest.param(lambda: Stereographic(R, rad(-100.0), rad(40.0)),
                 [(60.0, -60.0), (-20.0, -120.0)], id="stereographic"),
    pytest.param(lambda: LambertAzimuthalEqualArea(R, rad(-100.0), rad(45.0)),
                 [(50.0, -90.0), (-30.0, 60.0)], id="lambert-azimuthal"),
    pytest.param(lambda: AzimuthalEquidistant(R, rad(-100.0), rad(45.0)),
                 [(50.0, -90.0), (-40.0, 80.0)], id="azimuthal-equidistant"),
    pytest.param(lambda: Sinusoidal(R, rad(10.0)),
                 [(60.0, 120.0), (-45.0, -169.0)], id="sinusoidal"),
    pytest.param(lambda: Mollweide(R),
                 [(60.0, 120.0), (-80.0, -160.0)], id="mollweide"),
]


class TestAgainstProj:

    @pytest.mark.parametrize("build, points", CASES)
    def test_forward_matches_proj(self, build, points):
        projection = build()
        proj = Proj(projection.to_crs())
        for lat, lon in points:
            x, y, status = projection.forward_deg(lat, lon)
            assert status == 0
            expected_x, expected_y = proj(lon, lat)
            assert x == pytest.approx(expected_x, abs=TOLERANCE_M)
            assert y == pytest.approx(expected_y, abs=TOLERANCE_M)

    def test_proj_definition_names_the_ellipsoid(self):
        assert "+a=6378137.0" in Mercator(A, B).proj4_string
        assert "+R=6370997.0" in Sinusoidal(R).proj4_string

    def test_mercator_reference_point(self):
        x, y, status = Mercator(6378137.0, 6356752.3).forward_deg(45.0, 90.0)
        assert status == 0
        assert x == pytest.approx(10018754.171394622, abs=1.0e-6)
        assert y == pytest.approx(5591295.898430271, abs=1.0e-6)


class TestStatePlaneAgainstEpsg:

    @pytest.mark.parametrize("zone, epsg, points", [
        (3800, "EPSG:32130", [(41.7, -71.5), (41.5, -71.2)]),
        (2001, "EPSG:26986", [(42.36, -71.06), (42.1, -72.5)]),
    ], ids=["rhode-island", "massachusetts-mainland"])
    def test_nad83_zones_match_epsg(self, zone, epsg, points):
        zone_projection = StatePlane(zone, spheroid=Spheroid.GRS1980)
        transformer = Transformer.from_crs(CRS("EPSG:4269"), CRS(epsg), always_xy=True)
        for lat, lon in points:
            x, y, _ = zone_projection.forward_deg(lat, lon)
            expected_x, expected_y = transformer.transform(lon, lat)
            assert x == pytest.approx(expected_x, abs=TOLERANCE_M)
            assert y == pytest.approx(expected_y, abs=TOLERANCE_M)
