"""
Tests for the projection family: forward/inverse round trips for every
projection system, per-point failure statuses, parameter validation and
the projection registry.
"""
import numpy as np
import pytest

from common.exceptions import ConvergenceError, ProjectionParameterError, UnsupportedOperationError
from common.units import Q_
from geodesy.spheroids import Spheroid, spheroid_parameters
from projections import (
    PROJECTION_NAMES,
    AlaskaConformal,
    AlbersConicalEqualArea,
    AzimuthalEquidistant,
    EquidistantConic,
    Equirectangular,
    GeneralVerticalNearsidePerspective,
    GeographicProjection,
    Gnomonic,
    Hammer,
    HotineObliqueMercator,
    InterruptedGoodeHomolosine,
    InterruptedMollweide,
    LambertAzimuthalEqualArea,
    LambertConformalConic,
    Mercator,
    MillerCylindrical,
    Mollweide,
    OblatedEqualArea,
    Orthographic,
    PolarStereographic,
    Polyconic,
    ProjectionCode,
    ProjectionStatus,
    Robinson,
    Sinusoidal,
    SpaceObliqueMercator,
    Stereographic,
    TransverseMercator,
    UniversalTransverseMercator,
    VanDerGrinten,
    WagnerIV,
    WagnerVII,
    create_projection,
    projection_class,
    projection_code,
    registered_codes,
)
from projections.base import geographic_failure

A = spheroid_parameters(Spheroid.WGS84).a
B = spheroid_parameters(Spheroid.WGS84).b
R = 6370997.0
rad = np.radians

ROUND_TRIP_DEGREES = 1.0e-6


def _lon_difference(a, b):
    return abs((a - b + 180.0) % 360.0 - 180.0)


ROUND_TRIP_CASES = [
    pytest.param(lambda: GeographicProjection(A, B),
                 [(45.0, -120.0), (-30.0, 170.0), (0.0, 0.0)], id="geographic"),
    pytest.param(lambda: Mercator(A, B, center_lon=rad(-80.0)),
                 [(30.0, -80.0), (60.0, 10.0), (-45.0, 170.0)], id="mercator"),
    pytest.param(lambda: Mercator(A, B, lat1=rad(30.0), false_easting=1.0e5, false_northing=-2.0e5),
                 [(30.0, -80.0), (-70.0, 45.0)], id="mercator-true-scale-30"),
    pytest.param(lambda: TransverseMercator(A, B, 0.9996, rad(-75.0), 0.0, 500000.0, 0.0),
                 [(40.0, -75.0), (45.0, -72.0), (-10.0, -78.0)], id="transverse-mercator"),
    pytest.param(lambda: TransverseMercator(R, R, 1.0, rad(10.0), rad(20.0), 1000.0, 2000.0),
                 [(10.0, 10.0), (50.0, 15.0), (-20.0, 40.0)], id="transverse-mercator-sphere"),
    pytest.param(lambda: UniversalTransverseMercator(A, B, zone=18),
                 [(40.0, -75.0), (45.0, -73.0)], id="utm-north"),
    pytest.param(lambda: UniversalTransverseMercator(A, B, zone=-19),
                 [(-33.0, -70.0), (-50.0, -68.0)], id="utm-south"),
    pytest.param(lambda: MillerCylindrical(R, center_lon=rad(20.0)),
                 [(70.0, 20.0), (-45.0, -120.0), (0.0, 0.0)], id="miller"),
    pytest.param(lambda: Equirectangular(R, lat1=rad(30.0), false_easting=5.0e4),
                 [(70.0, 20.0), (-45.0, -120.0)], id="equirectangular"),
    pytest.param(lambda: AlbersConicalEqualArea(A, B, rad(29.5), rad(45.5), rad(-96.0), rad(23.0)),
                 [(35.0, -100.0), (45.0, -80.0), (25.0, -120.0)], id="albers"),
    pytest.param(lambda: LambertConformalConic(A, B, rad(33.0), rad(45.0), rad(-96.0), rad(23.0)),
                 [(35.0, -100.0), (45.0, -80.0), (25.0, -120.0)], id="lambert-conformal-conic"),
    pytest.param(lambda: LambertConformalConic(A, B, rad(-40.0), rad(-20.0), rad(135.0), rad(-30.0)),
                 [(-35.0, 140.0), (-15.0, 120.0)], id="lambert-conformal-conic-south"),
    pytest.param(lambda: EquidistantConic(A, B, rad(20.0), rad(60.0), rad(-96.0), rad(40.0)),
                 [(35.0, -100.0), (55.0, -70.0)], id="equidistant-conic-two-parallels"),
    pytest.param(lambda: EquidistantConic(A, B, rad(40.0), 0.0, rad(-96.0), rad(40.0), two_parallels=False),
                 [(35.0, -100.0), (55.0, -70.0)], id="equidistant-conic-one-parallel"),
    pytest.param(lambda: Polyconic(A, B, rad(-96.0), rad(30.0)),
                 [(35.0, -100.0), (45.0, -80.0), (0.0, -96.0)], id="polyconic"),
    pytest.param(lambda: Stereographic(R, rad(-100.0), rad(40.0)),
                 [(40.0, -100.0), (60.0, -60.0), (-20.0, -120.0)], id="stereographic"),
    pytest.param(lambda: PolarStereographic(A, B, rad(-45.0), rad(70.0)),
                 [(80.0, -45.0), (65.0, 0.0), (89.0, 100.0)], id="polar-stereographic-north"),
    pytest.param(lambda: PolarStereographic(A, B, 0.0, rad(-71.0), 1.0e5, 1.0e5),
                 [(-80.0, 0.0), (-65.0, 120.0)], id="polar-stereographic-south"),
    pytest.param(lambda: PolarStereographic(A, B, 0.0, rad(90.0)),
                 [(80.0, 30.0), (50.0, -150.0)], id="polar-stereographic-pole-scale"),
    pytest.param(lambda: LambertAzimuthalEqualArea(R, rad(-100.0), rad(45.0)),
                 [(50.0, -90.0), (10.0, -100.0), (-30.0, 60.0)], id="lambert-azimuthal"),
    pytest.param(lambda: AzimuthalEquidistant(R, rad(-100.0), rad(45.0)),
                 [(50.0, -90.0), (-40.0, 80.0), (45.0, -100.0)], id="azimuthal-equidistant"),
    pytest.param(lambda: Gnomonic(R, rad(-100.0), rad(45.0)),
                 [(50.0, -90.0), (20.0, -130.0)], id="gnomonic"),
    pytest.param(lambda: Orthographic(R, rad(-100.0), rad(45.0)),
                 [(50.0, -90.0), (0.0, -120.0), (80.0, 20.0)], id="orthographic"),
    pytest.param(lambda: GeneralVerticalNearsidePerspective(R, 35786000.0, rad(-75.0), 0.0),
                 [(30.0, -75.0), (-20.0, -50.0)], id="vertical-perspective"),
    pytest.param(lambda: Sinusoidal(R),
                 [(60.0, 120.0), (-45.0, -170.0), (0.0, 10.0)], id="sinusoidal"),
    pytest.param(lambda: Mollweide(R, center_lon=rad(10.0)),
                 [(60.0, 120.0), (-80.0, -160.0), (0.0, 10.0)], id="mollweide"),
    pytest.param(lambda: Robinson(R),
                 [(60.0, 120.0), (-45.0, -170.0), (3.0, 10.0), (85.0, 30.0)], id="robinson"),
    pytest.param(lambda: WagnerIV(R),
                 [(60.0, 120.0), (-45.0, -170.0), (0.0, 10.0)], id="wagner-iv"),
    pytest.param(lambda: WagnerVII(R),
                 [(60.0, 120.0), (-45.0, -170.0), (10.0, 10.0)], id="wagner-vii"),
    pytest.param(lambda: Hammer(R),
                 [(60.0, 120.0), (-45.0, -170.0), (10.0, 10.0)], id="hammer"),
    pytest.param(lambda: VanDerGrinten(R),
                 [(60.0, 120.0), (-45.0, -150.0), (10.0, 10.0)], id="van-der-grinten"),
    pytest.param(lambda: InterruptedGoodeHomolosine(R),
                 [(10.0, -100.0), (10.0, 30.0), (60.0, -100.0), (60.0, 30.0), (-20.0, -160.0),
                  (-20.0, -60.0), (-20.0, 20.0), (-20.0, 140.0), (-60.0, 20.0)], id="goode"),
    pytest.param(lambda: InterruptedMollweide(R),
                 [(30.0, 60.0), (30.0, -30.0), (30.0, -170.0), (-30.0, 90.0), (-30.0, -20.0),
                  (-30.0, 170.0)], id="interrupted-mollweide"),
    pytest.param(lambda: HotineObliqueMercator(A, B, 0.9996, rad(45.0), rad(30.0), rad(-100.0)),
                 [(45.0, -100.0), (46.0, -99.0), (44.0, -101.5)], id="hotine-azimuth"),
    pytest.param(lambda: HotineObliqueMercator(A, B, 1.0, rad(45.0), lon1=rad(-105.0), lat1=rad(40.0),
                                               lon2=rad(-95.0), lat2=rad(50.0), two_points=True),
                 [(45.0, -100.0), (42.0, -104.0)], id="hotine-two-points"),
    pytest.param(lambda: OblatedEqualArea(R, rad(-90.0), rad(45.0), 1.0, 2.0, 0.0),
                 [(45.0, -90.0), (40.0, -85.0), (50.0, -95.0)], id="oblated-equal-area"),
    pytest.param(lambda: AlaskaConformal(spheroid_parameters(Spheroid.CLARKE1866).a,
                                         spheroid_parameters(Spheroid.CLARKE1866).b),
                 [(64.0, -152.0), (60.0, -140.0), (70.0, -160.0), (55.0, -135.0)], id="alaska"),
]


class TestRoundTrips:

    @pytest.mark.parametrize("build, points", ROUND_TRIP_CASES)
    def test_forward_then_inverse(self, build, points):
        projection = build()
        for lat, lon in points:
            x, y, status = projection.forward_deg(lat, lon)
            assert status == ProjectionStatus.OK, f"forward failed at {(lat, lon)}"
            back_lat, back_lon, status = projection.inverse_deg(x, y)
            assert status == ProjectionStatus.OK, f"inverse failed at {(lat, lon)}"
            assert back_lat == pytest.approx(lat, abs=ROUND_TRIP_DEGREES)
            assert _lon_difference(back_lon, lon) < ROUND_TRIP_DEGREES

    @pytest.mark.parametrize("build", [
        lambda: SpaceObliqueMercator(A, B, satellite=5, path=39),
        lambda: SpaceObliqueMercator(A, B, satellite=2, path=10),
        lambda: SpaceObliqueMercator(A, B, inclination=rad(98.2), center_lon=rad(-60.0), period=98.8841202),
    ], ids=["landsat-5", "landsat-2", "explicit-orbit"])
    def test_space_oblique_mercator_along_the_track(self, build):
        som = build()
        for x, y in [(2.5 * A, 0.0), (3.0 * A, 1.0e5), (4.0 * A, -1.0e5)]:
            lat, lon, status = som.inverse(x, y)
            assert status == ProjectionStatus.OK
            x2, y2, status = som.forward(lat, lon)
            assert status == ProjectionStatus.OK
            assert x2 == pytest.approx(x, abs=10.0)
            assert y2 == pytest.approx(y, abs=10.0)

    def test_bulk_arrays_match_single_points(self):
        merc = Mercator(A, B)
        lats = rad(np.array([[0.0, 30.0], [60.0, 90.0]]))
        lons = rad(np.array([[0.0, -80.0], [10.0, 0.0]]))
        xs, ys = np.empty_like(lats), np.empty_like(lats)
        status = merc.forward_arrays(lats, lons, xs, ys)
        assert status.dtype == np.int8
        assert status.shape == (2, 2)
        assert status[1, 1] == ProjectionStatus.PROJECTS_TO_INFINITY
        assert np.isnan(xs[1, 1])
        assert xs[0, 1] == pytest.approx(merc.forward(lats[0, 1], lons[0, 1]).x)

        out_lat, out_lon = np.empty_like(xs), np.empty_like(ys)
        status = merc.inverse_arrays(xs, ys, out_lat, out_lon)
        assert list(status.ravel()) == [0, 0, 0, ProjectionStatus.POINT_NOT_PROJECTABLE]
        assert out_lat[0, 1] == pytest.approx(lats[0, 1])

    def test_lengths_accept_pint_quantities(self):
        in_feet = TransverseMercator(Q_(A, "m"), Q_(B, "m"), 0.9996, rad(-75.0), 0.0, Q_(500000, "ft"))
        in_meters = TransverseMercator(A, B, 0.9996, rad(-75.0), 0.0, 152400.0)
        assert in_feet.forward_deg(40.0, -75.0).x == pytest.approx(in_meters.forward_deg(40.0, -75.0).x)


class TestKnownValues:

    def test_mercator_on_the_equator(self):
        x, y, _ = Mercator(A, B).forward_deg(0.0, 1.0)
        assert x == pytest.approx(A * rad(1.0))
        assert y == pytest.approx(0.0, abs=1e-9)

    def test_utm_central_meridian_is_false_easting(self):
        x, y, _ = UniversalTransverseMercator(A, B, zone=18).forward_deg(0.0, -75.0)
        assert x == pytest.approx(500000.0)
        assert y == pytest.approx(0.0, abs=1e-6)

    def test_southern_utm_false_northing(self):
        _, y, _ = UniversalTransverseMercator(A, B, zone=-18).forward_deg(0.0, -75.0)
        assert y == pytest.approx(10000000.0)

    def test_sinusoidal_is_equal_area_along_the_parallel(self):
        x, y, _ = Sinusoidal(R).forward_deg(60.0, 90.0)
        assert x == pytest.approx(R * rad(90.0) * 0.5)
        assert y == pytest.approx(R * rad(60.0))

    def test_geographic_forward_returns_degrees(self):
        x, y, _ = GeographicProjection(A, B).forward(rad(10.0), rad(-20.0))
        assert (x, y) == pytest.approx((-20.0, 10.0))


class TestFailureStatuses:

    def test_mercator_pole_projects_to_infinity(self):
        assert Mercator(A, B).forward_deg(90.0, 0.0).status == ProjectionStatus.PROJECTS_TO_INFINITY

    def test_stereographic_antipode(self):
        point = Stereographic(R, 0.0, 0.0).forward_deg(0.0, 180.0)
        assert point.status == ProjectionStatus.PROJECTS_TO_INFINITY
        assert np.isnan(point.x) and np.isnan(point.y)

    def test_gnomonic_far_hemisphere(self):
        assert Gnomonic(R).forward_deg(0.0, 120.0).status == ProjectionStatus.PROJECTS_TO_INFINITY

    def test_orthographic_far_side(self):
        ortho = Orthographic(R)
        assert ortho.forward_deg(0.0, 120.0).status == ProjectionStatus.POINT_NOT_PROJECTABLE
        assert ortho.inverse(1.1 * R, 0.0).status == ProjectionStatus.OUTSIDE_DOMAIN

    def test_lambert_azimuthal_outside_the_disc(self):
        assert LambertAzimuthalEqualArea(R).inverse(2.1 * R, 0.0).status == ProjectionStatus.OUTSIDE_DOMAIN

    def test_geographic_inverse_beyond_the_pole(self):
        assert GeographicProjection(A, B).inverse(0.0, 91.0).status == ProjectionStatus.OUTSIDE_DOMAIN

    def test_latitude_beyond_pole_is_outside_domain(self):
        assert Sinusoidal(R).forward(2.0, 0.0).status == ProjectionStatus.OUTSIDE_DOMAIN

    @pytest.mark.parametrize("lat, lon", [(np.nan, 0.0), (0.0, np.inf)])
    def test_non_finite_input(self, lat, lon):
        assert Sinusoidal(R).forward(lat, lon).status == ProjectionStatus.POINT_NOT_PROJECTABLE
        assert Sinusoidal(R).inverse(lat, lon).status == ProjectionStatus.POINT_NOT_PROJECTABLE

    def test_goode_interruption(self):
        goode = InterruptedGoodeHomolosine(R)
        assert goode.inverse(-rad(179.9) * R, 0.6 * R).status == ProjectionStatus.OUTSIDE_DOMAIN

    def test_interrupted_mollweide_gap(self):
        imoll = InterruptedMollweide(R)
        assert imoll.inverse(0.9 * R, 0.9 * 1.4142135623731 * R).status == ProjectionStatus.OUTSIDE_DOMAIN

    def test_hammer_outside_the_ellipse(self):
        assert Hammer(R).inverse(5.0 * R, 0.0).status == ProjectionStatus.OUTSIDE_DOMAIN


class TestParameterValidation:

    def test_axes_must_be_positive_and_ordered(self):
        with pytest.raises(ProjectionParameterError):
            Mercator(-1.0)
        with pytest.raises(ProjectionParameterError):
            Mercator(6000000.0, 6100000.0)

    def test_opposite_standard_parallels(self):
        with pytest.raises(ProjectionParameterError):
            AlbersConicalEqualArea(A, B, rad(30.0), rad(-30.0))
        with pytest.raises(ProjectionParameterError):
            LambertConformalConic(A, B, rad(30.0), rad(-30.0))

    def test_equatorial_tangent_cone(self):
        with pytest.raises(ProjectionParameterError):
            LambertConformalConic(A, B, 0.0, 0.0)

    @pytest.mark.parametrize("zone", [0, 61, -61])
    def test_illegal_utm_zone(self, zone):
        with pytest.raises(ProjectionParameterError, match="error 11"):
            UniversalTransverseMercator(A, B, zone=zone)

    def test_hotine_origin_on_the_equator(self):
        with pytest.raises(ProjectionParameterError, match="error 201"):
            HotineObliqueMercator(A, B, 1.0, 0.0, rad(30.0), 0.0)

    def test_hotine_two_points_on_one_parallel(self):
        with pytest.raises(ProjectionParameterError, match="error 202"):
            HotineObliqueMercator(A, B, 1.0, rad(45.0), lon1=0.0, lat1=rad(40.0),
                                  lon2=rad(10.0), lat2=rad(40.0), two_points=True)

    def test_perspective_height(self):
        with pytest.raises(ProjectionParameterError):
            GeneralVerticalNearsidePerspective(R, height=0.0)

    def test_oblated_shape(self):
        with pytest.raises(ProjectionParameterError):
            OblatedEqualArea(R, shape_m=0.0)

    def test_space_oblique_explicit_orbit_needs_period(self):
        with pytest.raises(ProjectionParameterError):
            SpaceObliqueMercator(A, B, inclination=rad(98.0))

    def test_mercator_true_scale_at_pole(self):
        with pytest.raises(ProjectionParameterError, match="error 51"):
            Mercator(A, B, lat1=rad(90.0))


class TestPerspectiveBoundaries:

    def test_vertical_perspective_limb_is_closed(self):
        geo = GeneralVerticalNearsidePerspective(R, height=35786000.0, center_lon=rad(-75.0))
        boundary = geo.boundary()
        assert len(boundary) == 721
        assert boundary[0] == pytest.approx(boundary[-1], abs=1e-9)
        # Geostationary limb is roughly 81 degrees of arc from the sub-satellite point
        lat, lon = boundary[0]
        assert lat == pytest.approx(0.0, abs=1e-6)
        assert abs(lon + 75.0) == pytest.approx(81.3, abs=0.1)

    def test_orthographic_limb_is_a_great_circle_from_the_center(self):
        ortho = Orthographic(R, center_lon=rad(10.0), center_lat=rad(50.0))
        for lat, lon in ortho.boundary()[::90]:
            # Angular distance to the center is 90 degrees on the limb
            cos_c = (np.sin(rad(50.0)) * np.sin(rad(lat))
                     + np.cos(rad(50.0)) * np.cos(rad(lat)) * np.cos(rad(lon - 10.0)))
            assert cos_c == pytest.approx(0.0, abs=1e-3)

    def test_boundary_is_a_copy(self):
        ortho = Orthographic(R)
        ortho.boundary().clear()
        assert len(ortho.boundary()) == 721

    def test_limb_trace_failure_raises(self, monkeypatch):
        monkeypatch.setattr(Orthographic, "_inverse",
                            lambda self, x, y: geographic_failure(ProjectionStatus.NO_CONVERGENCE))
        with pytest.raises(ConvergenceError):
            Orthographic(R)


class TestReporting:

    def test_describe_lists_parameters(self):
        report = LambertConformalConic(A, B, rad(33.0), rad(45.0), rad(-96.0), rad(23.0)).describe()
        assert report.startswith("LAMBERT CONFORMAL CONIC PROJECTION PARAMETERS:")
        assert "Semi-Major Axis of Ellipsoid: 6378137.000000" in report
        assert "Center Lon: -96.000000 degrees" in report

    def test_spherical_report_names_the_radius(self):
        assert "Radius of Sphere (meters): 6370997.000000" in Sinusoidal(R).describe()

    def test_parameters_are_a_copy(self):
        merc = Mercator(A, B)
        merc.parameters["center_lon"] = 99.0
        assert merc.parameters["center_lon"] == 0.0

    def test_projections_without_proj_equivalent(self):
        hom = HotineObliqueMercator(A, B, 1.0, rad(45.0), lon1=rad(-105.0), lat1=rad(40.0),
                                    lon2=rad(-95.0), lat2=rad(50.0), two_points=True)
        assert hom.proj4_string is None
        with pytest.raises(UnsupportedOperationError):
            hom.to_crs()

    def test_repr(self):
        assert repr(Sinusoidal(R)) == "Sinusoidal(a=6370997.0, b=6370997.0)"


class TestRegistry:

    def test_every_code_has_a_class(self):
        assert registered_codes() == tuple(sorted(ProjectionCode))
        assert len(PROJECTION_NAMES) == 31

    def test_lookup_by_code(self):
        assert projection_class(ProjectionCode.MERCAT) is Mercator
        assert projection_class(5) is Mercator

    def test_unknown_code(self):
        with pytest.raises(ProjectionParameterError):
            projection_class(99)

    def test_create_by_code(self):
        robin = create_projection(ProjectionCode.ROBIN, radius=R)
        assert isinstance(robin, Robinson)
        assert robin.name == "Robinson"

    @pytest.mark.parametrize("name, code", [
        ("mercator", ProjectionCode.MERCAT),
        ("Lambert Conformal Conic", ProjectionCode.LAMCC),
        ("gvnsp", ProjectionCode.GVNSP),
    ])
    def test_lookup_by_name(self, name, code):
        assert projection_code(name) is code

    def test_unknown_name(self):
        assert projection_code("not a projection") is None
