"""
Tests for the spheroid table, datum records and the datum cache.
"""
import numpy as np
import pytest

from common.exceptions import DatumNotFoundError, MalformedTableError
from common.types import EarthLocation
from geodesy.coordinate_models import ecf_to_geodetic, geodetic_to_ecf
from geodesy.datum import Datum, DatumFactory, parse_datum_table
from geodesy.spheroids import (
    MAX_SPHEROIDS,
    Spheroid,
    all_spheroids,
    find_spheroid,
    find_spheroid_by_name,
    resolve_axes,
    spheroid_parameters,
)


class TestSpheroidTable:

    def test_table_has_twenty_entries_in_code_order(self):
        assert MAX_SPHEROIDS == 20
        assert all_spheroids()[Spheroid.CLARKE1866].name == "Clarke 1866"
        assert all_spheroids()[Spheroid.SPHERE].a == 6370997.0

    def test_unknown_code_raises_key_error(self):
        with pytest.raises(KeyError):
            spheroid_parameters(20)

    def test_wgs84_axes_resolve_to_wgs84_not_grs80(self, ellipsoids):
        assert find_spheroid(ellipsoids.WGS84_A, ellipsoids.WGS84_B) is Spheroid.WGS84

    def test_grs80_axes_resolve_to_grs80(self):
        assert find_spheroid(6378137.0, 6356752.31414) is Spheroid.GRS1980

    def test_axes_far_from_every_entry_match_nothing(self):
        assert find_spheroid(6378000.0, 6356000.0) is None

    def test_lookup_by_name_ignores_case(self):
        assert find_spheroid_by_name("wgs 84") is Spheroid.WGS84
        assert find_spheroid_by_name("No Such Ellipsoid") is None

    def test_derived_eccentricities(self):
        wgs = spheroid_parameters(Spheroid.WGS84)
        assert wgs.e2 == pytest.approx(0.00669437999014, rel=1e-10)
        assert wgs.key == "WGS_84"
        assert spheroid_parameters(Spheroid.SPHERE).e2 == 0.0


class TestResolveAxes:

    def test_tabulated_code_uses_standard_sphere_radius(self, ellipsoids):
        a, b, r = resolve_axes(Spheroid.WGS84)
        assert (a, b) == (ellipsoids.WGS84_A, ellipsoids.WGS84_B)
        assert r == ellipsoids.SPHERE_R

    def test_code_past_the_table_falls_back_to_clarke(self, ellipsoids):
        a, b, _ = resolve_axes(25)
        assert (a, b) == (ellipsoids.CLARKE_A, ellipsoids.CLARKE_B)

    def test_negative_code_with_semi_minor_axis(self):
        assert resolve_axes(-1, [6378137.0, 6356752.3]) == (6378137.0, 6356752.3, 6378137.0)

    def test_negative_code_with_eccentricity_squared(self):
        a, b, r = resolve_axes(-1, [6378137.0, 0.00669438])
        assert a == r == 6378137.0
        assert b == pytest.approx(6378137.0 * np.sqrt(1 - 0.00669438))

    def test_negative_code_with_zero_second_slot_is_a_sphere(self):
        assert resolve_axes(-1, [6371000.0, 0.0]) == (6371000.0, 6371000.0, 6371000.0)

    def test_negative_code_without_major_axis(self, ellipsoids):
        assert resolve_axes(-1, [0.0, 2.0])[:2] == (ellipsoids.CLARKE_A, ellipsoids.CLARKE_B)
        assert resolve_axes(-1, [0.0, 0.0]) == (ellipsoids.SPHERE_R,) * 3


class TestDatum:

    def test_validates_axes(self):
        with pytest.raises(ValueError):
            Datum("bad", "bad", -1.0, 0.0)
        with pytest.raises(ValueError):
            Datum("bad", "bad", 6378137.0, 1.5)

    def test_equality_is_identity(self):
        first = Datum.from_spheroid("WGS 84", Spheroid.WGS84)
        second = Datum.from_spheroid("WGS 84", Spheroid.WGS84)
        assert first != second
        assert first == first
        assert first.same_parameters(second)

    def test_user_defined_sphere_has_zero_flattening(self):
        datum = Datum.user_defined(6371000.0, 6371000.0)
        assert datum.flattening == 0.0
        assert datum.inverse_flattening == np.inf
        assert datum.datum_name == "User defined"

    @pytest.mark.parametrize("lat, lon", [(0.0, 0.0), (45.0, -120.0), (-33.9, 151.2), (89.9, 10.0)])
    def test_ecf_matches_prime_vertical_formula(self, wgs84, lat, lon):
        x, y, z = wgs84.compute_ecf(lat, lon)
        ex, ey, ez = geodetic_to_ecf(np.radians(lat), np.radians(lon), wgs84.axis, wgs84.e2)
        assert (x, y, z) == pytest.approx((ex, ey, ez), abs=1e-6)

    def test_ecf_round_trip_through_geodetic(self, wgs84):
        x, y, z = wgs84.compute_ecf(41.7, -71.5)
        lat, lon, alt = ecf_to_geodetic(x, y, z, wgs84.axis, wgs84.e2)
        assert np.degrees(lat) == pytest.approx(41.7, abs=1e-9)
        assert np.degrees(lon) == pytest.approx(-71.5, abs=1e-9)
        assert alt == pytest.approx(0.0, abs=1e-3)

    def test_equator_prime_meridian_is_on_x_axis(self, wgs84):
        assert wgs84.compute_ecf(0.0, 0.0) == pytest.approx((wgs84.axis, 0.0, 0.0))

    def test_bulk_ecf_fills_caller_buffer(self, wgs84):
        lats = np.array([0.0, 30.0, -60.0])
        lons = np.array([0.0, 90.0, 180.0])
        out = np.empty((3, 3))
        result = wgs84.compute_ecf_into(lats, lons, out)
        assert result is out
        assert tuple(out[1]) == pytest.approx(wgs84.compute_ecf(30.0, 90.0))

    def test_transform_onto_same_datum_is_unchanged(self, wgs84):
        loc = EarthLocation(41.7, -71.5, wgs84)
        assert wgs84.transform(loc, wgs84) is loc

    def test_untagged_location_takes_the_calling_datum_as_source(self, nad27, wgs84):
        untagged = EarthLocation(41.7, -71.5)
        shifted = nad27.transform(untagged, wgs84)
        tagged = nad27.transform(EarthLocation(41.7, -71.5, nad27), wgs84)
        assert shifted == tagged

    def test_nad27_to_wgs84_shift_is_small_and_reversible(self, nad27, wgs84):
        original = EarthLocation(41.7, -71.5, nad27)
        shifted = original.shift_datum(wgs84)
        assert shifted.datum is wgs84
        assert 0.0 < original.distance(shifted) < 0.1
        back = shifted.shift_datum(nad27)
        assert back.lat == pytest.approx(original.lat, abs=1e-5)
        assert back.lon == pytest.approx(original.lon, abs=1e-5)

    def test_invalid_location_shifts_to_invalid(self, nad27, wgs84):
        shifted = nad27.transform(EarthLocation.invalid(nad27), wgs84)
        assert not shifted.is_valid()
        assert shifted.datum is wgs84


class TestDatumFactory:

    def test_packaged_table_names(self, datum_factory):
        assert datum_factory.create(Spheroid.CLARKE1866).datum_name == "North American 1927"
        assert datum_factory.create(Spheroid.GRS1980).datum_name == "North American 1983"
        assert datum_factory.wgs84().datum_name == "WGS 84"

    def test_datums_are_cached(self, datum_factory):
        assert datum_factory.create(0) is datum_factory.create(0)
        assert datum_factory.cached_codes == (0,)
        assert 0 in datum_factory

    def test_separate_factories_build_separate_instances(self, datum_factory):
        other = DatumFactory()
        assert other.wgs84() is not datum_factory.wgs84()
        assert other.wgs84().same_parameters(datum_factory.wgs84())

    def test_clear_drops_cached_instances(self, datum_factory):
        before = datum_factory.wgs84()
        datum_factory.clear()
        assert datum_factory.cached_codes == ()
        assert datum_factory.wgs84() is not before

    @pytest.mark.parametrize("code", [Spheroid.SPHERE, 42, -3])
    def test_missing_datum_raises(self, datum_factory, code):
        with pytest.raises(DatumNotFoundError):
            datum_factory.create(code)
        assert datum_factory.get(code) is None

    def test_for_axes_finds_tabulated_datum(self, datum_factory, ellipsoids):
        datum = datum_factory.for_axes(ellipsoids.WGS84_A, ellipsoids.WGS84_B)
        assert datum is datum_factory.wgs84()

    def test_for_axes_caches_user_defined_datums(self, datum_factory):
        first = datum_factory.for_axes(6371000.0, 6371000.0)
        assert first.datum_name == "User defined"
        assert datum_factory.for_axes(6371000.0, 6371000.0) is first

    def test_sphere_without_table_entry_is_user_defined(self, datum_factory, ellipsoids):
        datum = datum_factory.for_axes(ellipsoids.SPHERE_R, ellipsoids.SPHERE_R)
        assert datum.datum_name == "User defined"

    def test_explicit_table(self):
        factory = DatumFactory({"WGS_84": "Custom WGS,1,2,3"})
        datum = factory.wgs84()
        assert datum.datum_name == "Custom WGS"
        assert datum.shift == (1.0, 2.0, 3.0)
        with pytest.raises(DatumNotFoundError):
            factory.create(Spheroid.CLARKE1866)

    def test_from_file(self, tmp_path):
        path = tmp_path / "datum.properties"
        path.write_text("# comment\n! another\nClarke_1866=Test 1927,-8,160,176\n")
        factory = DatumFactory.from_file(path)
        assert factory.create(0).datum_name == "Test 1927"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DatumNotFoundError):
            DatumFactory.from_file(tmp_path / "absent.properties")

    @pytest.mark.parametrize("text", ["WGS_84=only a name", "WGS_84=WGS,a,b,c", "no separator"])
    def test_malformed_tables(self, text):
        with pytest.raises(MalformedTableError):
            parse_datum_table(text)
