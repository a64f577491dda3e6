"""
Tests for map projection grids: grid/earth conversions, re-centering,
subsets, bulk buffers and geographic longitude windows.
"""
import numpy as np
import pytest

from common.exceptions import NonInvertibleAffineError, ProjectionParameterError
from common.types import DataLocation, EarthLocation
from geodesy.datum import DatumFactory
from projections import GeographicProjection, LongitudeRange, Mercator, ProjectionCode
from transforms import AffineTransform, MapProjection


@pytest.fixture
def world_grid(wgs84):
    """One degree geographic grid whose columns start at the prime meridian."""
    grid = MapProjection(GeographicProjection(wgs84.axis, wgs84.rp), wgs84, (180, 360))
    return grid.with_affine(AffineTransform.from_coefficients(0.0, -1.0, 1.0, 0.0, 0.5, 89.5))


class TestMercatorGrid:

    def test_center_lands_on_grid_center(self, mercator_grid):
        row, col = mercator_grid.to_grid(EarthLocation(30.0, -80.0)).coords
        assert row == pytest.approx(255.5, abs=1e-6)
        assert col == pytest.approx(255.5, abs=1e-6)

    def test_round_trip_through_the_grid(self, mercator_grid):
        loc = EarthLocation(31.2, -81.7)
        back = mercator_grid.to_earth(mercator_grid.to_grid(loc))
        assert back.lat == pytest.approx(31.2, abs=1e-9)
        assert back.lon == pytest.approx(-81.7, abs=1e-9)
        assert back.datum is mercator_grid.datum

    def test_rows_run_south_and_columns_run_east(self, mercator_grid):
        north, east = mercator_grid.world_axes(EarthLocation(30.0, -80.0))
        assert north == pytest.approx((-1.0, 0.0), abs=1e-6)
        assert east == pytest.approx((0.0, 1.0), abs=1e-6)

    def test_resolution_follows_mercator_scale(self, mercator_grid):
        rows_km, cols_km = mercator_grid.resolution(DataLocation.of(255.5, 255.5))
        assert rows_km == pytest.approx(np.cos(np.radians(30.0)), rel=1e-2)
        assert cols_km == pytest.approx(rows_km, rel=1e-2)

    def test_pixel_geometry(self, mercator_grid):
        assert mercator_grid.pixel_dims() == (1000.0, 1000.0)
        assert mercator_grid.pixel_size() == 1000.0

    def test_pixel_dims_need_an_unrotated_grid(self, mercator_grid):
        rotated = mercator_grid.with_affine(AffineTransform([[1.0, 1.0, 0.0], [-1.0, 1.0, 0.0]]))
        with pytest.raises(ValueError):
            rotated.pixel_dims()

    def test_pixel_size_needs_square_pixels(self, mercator_grid):
        wide = mercator_grid.with_center(EarthLocation(30.0, -80.0), (1000.0, 2000.0))
        assert wide.pixel_dims() == (1000.0, 2000.0)
        with pytest.raises(ValueError):
            wide.pixel_size()

    def test_closest_rounds_half_up_inside_the_grid(self, mercator_grid):
        assert mercator_grid.closest(EarthLocation(30.0, -80.0)) == DataLocation.of(256.0, 256.0)
        assert not mercator_grid.closest(EarthLocation(-30.0, 100.0)).is_valid()

    def test_invalid_locations_stay_invalid(self, mercator_grid):
        assert not mercator_grid.to_grid(EarthLocation.invalid()).is_valid()
        assert not mercator_grid.to_earth(DataLocation.invalid()).is_valid()

    def test_unprojectable_point(self, mercator_grid):
        assert not mercator_grid.to_grid(EarthLocation(90.0, 0.0)).is_valid()

    def test_center_must_project(self, mercator_grid):
        with pytest.raises(ProjectionParameterError):
            mercator_grid.with_center(EarthLocation(90.0, 0.0), (1000.0, 1000.0))

    def test_singular_affine(self, mercator_grid):
        with pytest.raises(NonInvertibleAffineError):
            mercator_grid.with_affine(AffineTransform.scaling(0.0, 0.0))

    def test_bounding_box_is_closed(self, mercator_grid):
        box = mercator_grid.bounding_box(DataLocation.of(0, 0), DataLocation.of(511, 511), segments=2)
        assert len(box) == 9
        assert box[0] == box[-1]
        assert box[0].is_north(box[4]) and box[4].is_east(box[0])
        with pytest.raises(ValueError):
            mercator_grid.bounding_box(DataLocation.of(0, 0), DataLocation.of(1, 1), segments=0)

    def test_system_and_description(self, mercator_grid):
        assert mercator_grid.system == ProjectionCode.MERCAT
        assert mercator_grid.zone == 0
        assert "Mercator" in mercator_grid.describe()


class TestDatumHandling:

    def test_tagged_locations_are_shifted_to_the_native_datum(self, mercator_grid, nad27, wgs84):
        tagged = EarthLocation(30.0, -80.0, nad27)
        shifted = tagged.shift_datum(wgs84)
        assert mercator_grid.to_grid(tagged).coords == pytest.approx(
            mercator_grid.to_grid(shifted).coords, abs=1e-9)
        assert mercator_grid.to_grid(tagged) != mercator_grid.to_grid(EarthLocation(30.0, -80.0))

    def test_untagged_locations_are_native(self, mercator_grid, wgs84):
        assert mercator_grid.to_grid(EarthLocation(30.0, -80.0)) == \
            mercator_grid.to_grid(EarthLocation(30.0, -80.0, wgs84))


class TestSubsets:

    def test_subset_starts_at_origin(self, mercator_grid):
        sub = mercator_grid.subset(DataLocation.of(100, 50), (10, 10))
        assert sub.dims == (10, 10)
        expected = mercator_grid.to_earth(DataLocation.of(100, 50))
        actual = sub.to_earth(DataLocation.of(0, 0))
        assert actual.coords() == pytest.approx(expected.coords(), abs=1e-9)

    def test_strided_subset(self, mercator_grid):
        strided = mercator_grid.subset_strided((10, 20), (2, 3), (50, 50))
        expected = mercator_grid.to_earth(DataLocation.of(20, 35))
        actual = strided.to_earth(DataLocation.of(5, 5))
        assert actual.coords() == pytest.approx(expected.coords(), abs=1e-9)
        assert strided.pixel_dims() == (2000.0, 3000.0)

    def test_subsets_do_not_touch_the_parent(self, mercator_grid):
        before = mercator_grid.affine
        mercator_grid.subset(DataLocation.of(1, 1), (5, 5))
        assert mercator_grid.affine == before


class TestBulkBuffers:

    def test_to_earth_into_matches_single_points(self, mercator_grid):
        rows = np.array([[0.0, 255.5], [511.0, 100.0]])
        cols = np.array([[0.0, 255.5], [20.0, 400.0]])
        lats, lons = np.empty_like(rows), np.empty_like(rows)
        status = mercator_grid.to_earth_into(rows, cols, lats, lons)
        assert not status.any()
        single = mercator_grid.to_earth(DataLocation.of(511.0, 20.0))
        assert (lats[1, 0], lons[1, 0]) == pytest.approx(single.coords(), abs=1e-9)

    def test_to_grid_into_matches_single_points(self, mercator_grid):
        lats = np.array([30.0, 31.0, 90.0])
        lons = np.array([-80.0, -79.0, 0.0])
        rows, cols = np.empty(3), np.empty(3)
        status = mercator_grid.to_grid_into(lats, lons, rows, cols)
        assert list(status) == [0, 0, 1]
        assert (rows[1], cols[1]) == pytest.approx(
            mercator_grid.to_grid(EarthLocation(31.0, -79.0)).coords, abs=1e-9)
        assert np.isnan(rows[2])


class TestEquality:

    def test_equal_grids(self, mercator_grid, wgs84):
        twin = MapProjection(Mercator(wgs84.axis, wgs84.rp), wgs84, (512, 512)).with_center(
            EarthLocation(30.0, -80.0), (1000.0, 1000.0))
        assert twin == mercator_grid

    def test_datum_identity_matters(self, mercator_grid, wgs84):
        other = DatumFactory().wgs84()
        twin = MapProjection(mercator_grid.projection, other, (512, 512), mercator_grid.affine)
        assert twin != mercator_grid

    def test_different_parameters(self, mercator_grid, wgs84):
        shifted = MapProjection(Mercator(wgs84.axis, wgs84.rp, center_lon=0.1), wgs84,
                                (512, 512), mercator_grid.affine)
        assert shifted != mercator_grid

    def test_grids_are_not_hashable(self, mercator_grid):
        with pytest.raises(TypeError):
            hash(mercator_grid)


class TestGeographicGrids:

    def test_window_follows_the_affine(self, world_grid):
        assert world_grid.projection.longitude_range is LongitudeRange.SPANS_ANTI_POSITIVE

    def test_western_longitudes_land_past_the_antimeridian(self, world_grid):
        assert world_grid.to_grid(EarthLocation(10.0, -170.0)).coords == pytest.approx((79.5, 189.5))
        back = world_grid.to_earth(DataLocation.of(79.5, 189.5))
        assert back.coords() == pytest.approx((10.0, -170.0))

    def test_seam_at_the_prime_meridian(self, world_grid):
        assert world_grid.is_boundary_cut(EarthLocation(0.0, -1.0), EarthLocation(0.0, 1.0))
        assert not world_grid.is_boundary_cut(EarthLocation(0.0, 179.0), EarthLocation(0.0, -179.0))

    def test_default_window_cuts_at_the_antimeridian(self, wgs84):
        grid = MapProjection(GeographicProjection(wgs84.axis, wgs84.rp), wgs84, (180, 360))
        assert grid.projection.longitude_range is LongitudeRange.SPANS_PRIME
        assert grid.is_boundary_cut(EarthLocation(0.0, 179.0), EarthLocation(0.0, -179.0))

    def test_recentering_reclassifies_the_window(self, world_grid):
        recentered = world_grid.with_center(EarthLocation(0.0, 0.0), (1.0, 1.0))
        assert recentered.projection.longitude_range is LongitudeRange.SPANS_PRIME

    def test_identity_affine_resets_the_window(self, world_grid):
        reset = world_grid.with_affine(AffineTransform.identity())
        assert reset.projection.longitude_range is LongitudeRange.SPANS_PRIME
        assert reset.is_boundary_cut(EarthLocation(0.0, 179.0), EarthLocation(0.0, -179.0))

    def test_other_projections_never_cut(self, mercator_grid):
        assert not mercator_grid.is_boundary_cut(EarthLocation(0.0, 179.0), EarthLocation(0.0, -179.0))
