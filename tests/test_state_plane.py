"""
Tests for State Plane zones and their record sources.
"""
import numpy as np
import pytest

from common.exceptions import (
    MalformedTableError,
    ProjectionParameterError,
    ResourceNotFoundError,
    ZoneNotFoundError,
)
from geodesy.spheroids import Spheroid
from projections import (
    HotineObliqueMercator,
    LambertConformalConic,
    LegacyZoneFile,
    PackagedZoneTable,
    Polyconic,
    ProjectionCode,
    StatePlane,
    TransverseMercator,
    ZoneRecord,
)
from projections.state_plane import (
    NAD27_ZONES,
    NAD83_ZONES,
    RECORD_SIZE,
    nad_year,
    unpack_radians,
    zone_index,
)
from transforms import packed_parameters

CSV_HEADER = "datum,zone,name,projection_id,axis,e2,p2,p3,p4,p5,p6,p7,p8\n"
CLARKE_ROW = "6378206.4,0.00676865799729"


class TestZoneLookup:

    def test_nad_year(self):
        assert nad_year(Spheroid.CLARKE1866) == 27
        assert nad_year(Spheroid.GRS1980) == 83

    def test_other_spheroids_are_illegal(self):
        with pytest.raises(ProjectionParameterError, match="error 23"):
            nad_year(Spheroid.WGS84)

    def test_zone_index_follows_record_order(self):
        assert zone_index(101, 0) == 0
        assert zone_index(3800, 0) == NAD27_ZONES.index(3800)
        assert zone_index(5400, 8) == len(NAD83_ZONES) - 1

    @pytest.mark.parametrize("zone, spheroid", [(9999, 0), (0, 8), (-101, 0), (2501, 8)])
    def test_unknown_zone(self, zone, spheroid):
        with pytest.raises(ZoneNotFoundError):
            zone_index(zone, spheroid)

    def test_packed_table_angles(self):
        assert unpack_radians(-713000.0) == pytest.approx(np.radians(-71.5))
        assert unpack_radians(410500.0) == pytest.approx(np.radians(41.0 + 5.0 / 60.0))


class TestPackagedZoneTable:

    def test_packaged_table_covers_both_datums(self):
        table = PackagedZoneTable()
        assert len(table.zones(0)) == 103
        assert len(table.zones(8)) == 123
        assert len(table) == 226

    def test_record_values(self):
        record = PackagedZoneTable().record(3800, 8)
        assert record.name == "RHODE ISLAND"
        assert record.projection_id == 1
        assert record.semi_major == 6378137.0
        assert record.semi_minor == pytest.approx(6356752.3141, abs=1e-3)

    def test_zone_without_row(self, tmp_path):
        path = tmp_path / "zones.csv"
        path.write_text(CSV_HEADER)
        with pytest.raises(ZoneNotFoundError):
            PackagedZoneTable(path).record(3800, 0)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResourceNotFoundError):
            PackagedZoneTable(tmp_path / "absent.csv")

    @pytest.mark.parametrize("row", [
        "27,3800,SHORT ROW,1,6378206.4\n",
        f"27,3800,BAD NUMBER,1,{CLARKE_ROW},abc,0,0,0,0,0,0\n",
    ])
    def test_malformed_rows(self, tmp_path, row):
        path = tmp_path / "zones.csv"
        path.write_text(CSV_HEADER + row)
        with pytest.raises(MalformedTableError):
            PackagedZoneTable(path)

    def test_comments_are_skipped(self, tmp_path):
        path = tmp_path / "zones.csv"
        path.write_text(f"# header comment\n{CSV_HEADER}"
                        f"27,3800,RI,1,{CLARKE_ROW},-713000.0,0.99999375,0,0,410500.0,152400.3048006,0\n")
        assert PackagedZoneTable(path).zones(0) == (3800,)

    def test_records_need_nine_values(self):
        with pytest.raises(MalformedTableError):
            ZoneRecord("SHORT", 1, (1.0, 2.0))


class TestStatePlane:

    def test_rhode_island_nad27_round_trip(self):
        rhode_island = StatePlane(3800, spheroid=0)
        assert isinstance(rhode_island.zone_projection, TransverseMercator)
        x, y, status = rhode_island.forward_deg(41.7, -71.5)
        assert status == 0
        lat, lon, status = rhode_island.inverse_deg(x, y)
        assert lat == pytest.approx(41.7, abs=1e-4)
        assert lon == pytest.approx(-71.5, abs=1e-4)

    def test_rhode_island_nad83_origin(self):
        x, y, _ = StatePlane(3800, spheroid=8).forward_deg(41.0 + 5.0 / 60.0, -71.5)
        assert x == pytest.approx(100000.0, abs=1e-6)
        assert y == pytest.approx(0.0, abs=1e-6)

    def test_zone_record_selects_the_projection(self):
        assert isinstance(StatePlane(2001, 8).zone_projection, LambertConformalConic)
        assert isinstance(StatePlane(5001, 8).zone_projection, HotineObliqueMercator)

    def test_attributes(self):
        zone = StatePlane(3800, 8)
        assert (zone.zone, zone.spheroid, zone.code) == (3800, 8, ProjectionCode.SPCS)
        assert zone.record.name == "RHODE ISLAND"
        assert zone.parameters["datum"] == "NAD83"
        assert zone.proj4_string == zone.zone_projection.proj4_string

    def test_describe_names_zone_and_datum(self):
        report = StatePlane(3800, 0).describe()
        assert "Zone: 3800 (RHODE ISLAND)" in report
        assert "Datum: NAD27" in report
        assert "Zone Projection: Transverse Mercator" in report

    def test_illegal_spheroid(self):
        with pytest.raises(ProjectionParameterError, match="error 23"):
            StatePlane(3800, spheroid=Spheroid.WGS84)

    def test_unknown_zone(self):
        with pytest.raises(ZoneNotFoundError):
            StatePlane(9999, spheroid=0)

    def test_polyconic_zone(self, tmp_path):
        path = tmp_path / "zones.csv"
        path.write_text(CSV_HEADER + f"27,3800,TEST POLYCONIC,3,{CLARKE_ROW},"
                                     "-713000.0,410000.0,100000.0,50000.0,0,0,0\n")
        zone = StatePlane(3800, 0, zone_table=PackagedZoneTable(path))
        assert isinstance(zone.zone_projection, Polyconic)
        x, y, _ = zone.forward_deg(41.0, -71.5)
        assert (x, y) == pytest.approx((100000.0, 50000.0), abs=1e-6)

    def test_unknown_projection_id(self, tmp_path):
        path = tmp_path / "zones.csv"
        path.write_text(CSV_HEADER + f"27,3800,BROKEN,9,{CLARKE_ROW},0,0,0,0,0,0,0\n")
        with pytest.raises(MalformedTableError):
            StatePlane(3800, 0, zone_table=PackagedZoneTable(path))


class TestLegacyZoneFile:

    @pytest.fixture
    def rhode_island(self):
        return PackagedZoneTable().record(3800, 0)

    def test_write_then_read(self, tmp_path, rhode_island):
        nad27 = tmp_path / "nad27sp"
        LegacyZoneFile.write(nad27, {3800: rhode_island}, spheroid=0)
        assert nad27.stat().st_size == len(NAD27_ZONES) * RECORD_SIZE
        record = LegacyZoneFile(nad27, tmp_path / "nad83sp").record(3800, 0)
        assert record == rhode_island

    def test_legacy_source_builds_the_same_zone(self, tmp_path, rhode_island):
        nad27 = tmp_path / "nad27sp"
        LegacyZoneFile.write(nad27, {3800: rhode_island}, spheroid=0)
        legacy = StatePlane(3800, 0, zone_table=LegacyZoneFile(nad27, tmp_path / "nad83sp"))
        packaged = StatePlane(3800, 0)
        assert legacy.forward_deg(41.7, -71.5) == packaged.forward_deg(41.7, -71.5)

    def test_empty_slot(self, tmp_path, rhode_island):
        nad27 = tmp_path / "nad27sp"
        LegacyZoneFile.write(nad27, {3800: rhode_island}, spheroid=0)
        with pytest.raises(ZoneNotFoundError):
            LegacyZoneFile(nad27, tmp_path / "nad83sp").record(101, 0)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResourceNotFoundError):
            LegacyZoneFile(tmp_path / "nad27sp", tmp_path / "nad83sp").record(3800, 8)

    def test_truncated_file(self, tmp_path):
        nad27 = tmp_path / "nad27sp"
        nad27.write_bytes(b"\x00" * 50)
        with pytest.raises(MalformedTableError):
            LegacyZoneFile(nad27, tmp_path / "nad83sp").record(101, 0)

    def test_record_layout(self, rhode_island):
        data = LegacyZoneFile.encode(rhode_island)
        assert len(data) == RECORD_SIZE
        assert data[:12] == b"RHODE ISLAND"


class TestStatePlaneThroughFactory:

    def test_nad27_zone_gets_nad27_datum(self, projection_factory):
        grid = projection_factory.create(ProjectionCode.SPCS, 3800, packed_parameters(), 0, (10, 10))
        assert grid.datum.datum_name == "North American 1927"

    def test_nad83_zone_gets_nad83_datum(self, projection_factory):
        grid = projection_factory.create(ProjectionCode.SPCS, 2001, packed_parameters(), 8, (10, 10))
        assert grid.datum.datum_name == "North American 1983"
