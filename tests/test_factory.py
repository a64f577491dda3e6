"""
Tests for building map projection grids from GCTP projection descriptions.
"""
import numpy as np
import pytest

from common.exceptions import MalformedTableError, ProjectionParameterError
from common.types import EarthLocation
from geodesy.spheroids import Spheroid
from projections import (
    AlbersConicalEqualArea,
    EquidistantConic,
    GeneralVerticalNearsidePerspective,
    HotineObliqueMercator,
    InterruptedGoodeHomolosine,
    Mercator,
    OblatedEqualArea,
    ProjectionCode,
    Sinusoidal,
    SpaceObliqueMercator,
    StatePlane,
    TransverseMercator,
)
from transforms import AffineTransform, packed_parameters, packed_radians


class TestPackedParameters:

    def test_named_slots(self):
        params = packed_parameters(p4=-75000000.0, p14=1.0)
        assert params.shape == (15,)
        assert params[4] == -75000000.0
        assert params[14] == 1.0
        assert params.sum() == -74999999.0

    def test_slot_out_of_range(self):
        with pytest.raises(ValueError):
            packed_parameters(p15=1.0)

    def test_packed_radians(self):
        assert packed_radians(-75030000.0) == pytest.approx(np.radians(-75.5))


class TestCreateProjection:

    def test_utm_zone_from_packed_location(self, projection_factory):
        params = packed_parameters(p0=-71030000.0, p1=41042000.0)
        utm = projection_factory.create_projection(ProjectionCode.UTM, 0, params, Spheroid.WGS84)
        assert utm.zone == 19

    def test_utm_southern_zone_from_packed_location(self, projection_factory):
        params = packed_parameters(p0=151012000.0, p1=-33054000.0)
        utm = projection_factory.create_projection(ProjectionCode.UTM, 0, params, Spheroid.WGS84)
        assert utm.zone == -56

    def test_utm_explicit_zone(self, projection_factory):
        utm = projection_factory.create_projection(ProjectionCode.UTM, 18, packed_parameters(), 0)
        assert utm.zone == 18
        assert isinstance(utm.transverse_mercator, TransverseMercator)

    def test_unknown_system(self, projection_factory):
        with pytest.raises(ProjectionParameterError):
            projection_factory.create_projection(99, 0, packed_parameters(), 0)

    def test_short_parameter_array(self, projection_factory):
        with pytest.raises(ProjectionParameterError):
            projection_factory.create_projection(ProjectionCode.MERCAT, 0, [0.0] * 14, 0)

    def test_malformed_packed_angle(self, projection_factory):
        with pytest.raises(MalformedTableError):
            projection_factory.create_projection(ProjectionCode.MERCAT, 0,
                                                 packed_parameters(p4=-75070000.0), 12)

    def test_mercator_slots(self, projection_factory):
        params = packed_parameters(p4=-80000000.0, p5=30000000.0, p6=1000.0, p7=-2000.0)
        merc = projection_factory.create_projection(ProjectionCode.MERCAT, 0, params, Spheroid.WGS84)
        assert isinstance(merc, Mercator)
        assert merc.parameters["center_lon"] == pytest.approx(np.radians(-80.0))
        assert merc.parameters["lat1"] == pytest.approx(np.radians(30.0))
        assert merc.forward_deg(0.0, -80.0).x == pytest.approx(1000.0)

    def test_albers_slots(self, projection_factory):
        params = packed_parameters(p2=29030000.0, p3=45030000.0, p4=-96000000.0, p5=23000000.0)
        albers = projection_factory.create_projection(ProjectionCode.ALBERS, 0, params, Spheroid.GRS1980)
        assert isinstance(albers, AlbersConicalEqualArea)
        assert albers.parameters["lat1"] == pytest.approx(np.radians(29.5))
        assert albers.parameters["lat2"] == pytest.approx(np.radians(45.5))

    def test_equidistant_conic_parallel_count(self, projection_factory):
        params = packed_parameters(p2=20000000.0, p3=60000000.0, p5=40000000.0)
        one = projection_factory.create_projection(ProjectionCode.EQUIDC, 0, params, 0)
        params[8] = 1.0
        two = projection_factory.create_projection(ProjectionCode.EQUIDC, 0, params, 0)
        assert isinstance(one, EquidistantConic)
        assert one.forward_deg(50.0, 10.0) != two.forward_deg(50.0, 10.0)

    def test_spherical_systems_use_standard_radius(self, projection_factory):
        sinusoidal = projection_factory.create_projection(ProjectionCode.SNSOID, 0,
                                                          packed_parameters(), Spheroid.WGS84)
        assert isinstance(sinusoidal, Sinusoidal)
        assert sinusoidal.semi_major == 6370997.0

    def test_custom_sphere(self, projection_factory):
        goode = projection_factory.create_projection(ProjectionCode.GOOD, 0,
                                                     packed_parameters(p0=6371007.0), -1)
        assert isinstance(goode, InterruptedGoodeHomolosine)
        assert goode.semi_major == 6371007.0

    def test_custom_ellipsoid_from_eccentricity(self, projection_factory):
        merc = projection_factory.create_projection(
            ProjectionCode.MERCAT, 0, packed_parameters(p0=6378137.0, p1=0.00669438), -1)
        assert merc.semi_minor == pytest.approx(6378137.0 * np.sqrt(1 - 0.00669438))

    def test_perspective_height(self, projection_factory):
        params = packed_parameters(p2=35786000.0, p4=-75000000.0)
        geo = projection_factory.create_projection(ProjectionCode.GVNSP, 0, params, 19)
        assert isinstance(geo, GeneralVerticalNearsidePerspective)
        assert geo.parameters["height"] == 35786000.0

    def test_hotine_azimuth_mode(self, projection_factory):
        params = packed_parameters(p2=0.9996, p3=30000000.0, p4=-100000000.0, p5=45000000.0, p12=1.0)
        hom = projection_factory.create_projection(ProjectionCode.HOM, 0, params, 12)
        assert isinstance(hom, HotineObliqueMercator)
        assert hom.proj4_string is not None

    def test_hotine_two_point_mode(self, projection_factory):
        params = packed_parameters(p2=1.0, p5=45000000.0, p8=-105000000.0, p9=40000000.0,
                                   p10=-95000000.0, p11=50000000.0)
        hom = projection_factory.create_projection(ProjectionCode.HOM, 0, params, 12)
        assert hom.proj4_string is None

    def test_space_oblique_landsat_mode(self, projection_factory):
        params = packed_parameters(p2=5.0, p3=39.0, p12=1.0)
        som = projection_factory.create_projection(ProjectionCode.SOM, 0, params, 12)
        assert isinstance(som, SpaceObliqueMercator)
        assert som.parameters["satellite"] == 5
        assert som.parameters["path"] == 39

    def test_space_oblique_explicit_orbit(self, projection_factory):
        params = packed_parameters(p3=98012000.0, p4=-60000000.0, p8=98.8841202)
        som = projection_factory.create_projection(ProjectionCode.SOM, 0, params, 12)
        assert som.parameters["period"] == pytest.approx(98.8841202)
        assert som.parameters["inclination"] == pytest.approx(np.radians(98.2))

    def test_space_oblique_explicit_orbit_needs_period(self, projection_factory):
        with pytest.raises(ProjectionParameterError):
            projection_factory.create_projection(ProjectionCode.SOM, 0,
                                                 packed_parameters(p3=98012000.0), 12)

    def test_oblated_equal_area(self, projection_factory):
        params = packed_parameters(p2=1.0, p3=2.0, p5=45000000.0)
        obeqa = projection_factory.create_projection(ProjectionCode.OBEQA, 0, params, 19)
        assert isinstance(obeqa, OblatedEqualArea)
        assert obeqa.parameters["shape_n"] == 2.0

    def test_state_plane_zone(self, projection_factory):
        zone = projection_factory.create_projection(ProjectionCode.SPCS, 3800, packed_parameters(), 8)
        assert isinstance(zone, StatePlane)
        assert zone.zone == 3800

    @pytest.mark.parametrize("code", [c for c in ProjectionCode if c is not ProjectionCode.SPCS])
    def test_every_system_builds_from_defaults(self, projection_factory, code):
        params = packed_parameters(p2=1.0, p3=1.0, p5=45000000.0, p8=1.0, p9=40000000.0,
                                   p11=50000000.0, p12=1.0)
        if code is ProjectionCode.GVNSP:
            params[2] = 1.0e6
        if code is ProjectionCode.SOM:
            params[2], params[3] = 5.0, 39.0
        if code in (ProjectionCode.LAMCC, ProjectionCode.ALBERS, ProjectionCode.EQUIDC):
            params[2], params[3] = 33000000.0, 45000000.0
        projection = projection_factory.create_projection(code, 18, params, Spheroid.WGS84)
        assert projection.code == code


class TestCreateGrid:

    def test_datum_matches_spheroid(self, projection_factory):
        grid = projection_factory.create(ProjectionCode.MERCAT, 0, packed_parameters(), Spheroid.WGS84,
                                         (100, 100))
        assert grid.datum is projection_factory.datum_factory.wgs84()
        assert grid.affine.is_identity

    def test_sphere_gets_user_defined_datum(self, projection_factory):
        grid = projection_factory.create(ProjectionCode.SNSOID, 0, packed_parameters(), 19, (10, 10))
        assert grid.datum.datum_name == "User defined"

    def test_explicit_affine(self, projection_factory):
        affine = AffineTransform.scaling(-1000.0, 1000.0)
        grid = projection_factory.create(ProjectionCode.MERCAT, 0, packed_parameters(), 12,
                                         (10, 10), affine)
        assert grid.affine == affine

    def test_create_centered(self, projection_factory, mercator_grid):
        params = packed_parameters()
        grid = projection_factory.create_centered(ProjectionCode.MERCAT, 0, params, Spheroid.WGS84,
                                                  (512, 512), EarthLocation(30.0, -80.0),
                                                  (1000.0, 1000.0))
        assert grid.pixel_dims() == (1000.0, 1000.0)
        assert grid.to_grid(EarthLocation(30.0, -80.0)).coords == pytest.approx((255.5, 255.5))
        assert grid.affine.is_close(mercator_grid.affine)
