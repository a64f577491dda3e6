"""
State Plane Coordinate System.

A State Plane zone is not a projection of its own: the zone code and the
datum (NAD27 on Clarke 1866 or NAD83 on GRS 1980) select a parameter
record, and the record selects and configures one of Transverse Mercator,
Lambert Conformal Conic, Polyconic or Hotine Oblique Mercator. Every
forward and inverse call is delegated to that projection.

Zone Records
------------
Each record carries a 32-character zone name, a projection id (1 TM,
2 LCC, 3 Polyconic, 4 HOM) and nine values: the ellipsoid axis, its
eccentricity squared and seven projection parameters with angles packed
as DDDMMSS.SS. Two sources supply records:

- ``PackagedZoneTable`` reads the CSV shipped with the package (default).
- ``LegacyZoneFile`` reads the binary ``nad27sp``/``nad83sp`` files of the
  USGS General Cartographic Transformation Package, one big-endian
  record at byte offset ``index * 432``.

Examples
--------
>>> from projections.state_plane import StatePlane
>>> rhode_island = StatePlane(3800, spheroid=0)
>>> point = rhode_island.forward_deg(41.7, -71.5)
>>> lat, lon, _ = rhode_island.inverse_deg(point.x, point.y)
"""

import csv
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
import io
from pathlib import Path
import struct
from typing import Dict, Optional, Protocol, Tuple, Union

import numpy as np

from common.constants import GeodeticConstants
from common.exceptions import (
    MalformedTableError,
    ResourceNotFoundError,
    ZoneNotFoundError,
)
from geodesy.ellipsoid_math import pakcz, paksz
from geodesy.spheroids import Spheroid
from projections.base import Projection, logger, require
from projections.conic import LambertConformalConic
from projections.cylindrical import TransverseMercator
from projections.oblique import HotineObliqueMercator
from projections.polyconic import Polyconic
from projections.registry import ProjectionCode, register_projection

# Zone codes in record order. A 0 marks a slot with no zone.
NAD27_ZONES: Tuple[int, ...] = (
    101, 102, 5010, 5300, 201, 202, 203, 301, 302, 401, 402, 403, 404,
    405, 406, 407, 501, 502, 503, 600, 700, 901, 902, 903, 1001, 1002, 5101,
    5102, 5103, 5104, 5105, 1101, 1102, 1103, 1201, 1202, 1301, 1302, 1401,
    1402, 1501, 1502, 1601, 1602, 1701, 1702, 1703, 1801, 1802, 1900, 2001,
    2002, 2101, 2102, 2103, 2111, 2112, 2113, 2201, 2202, 2203, 2301, 2302,
    2401, 2402, 2403, 2501, 2502, 2503, 2601, 2602, 2701, 2702, 2703, 2800,
    2900, 3001, 3002, 3003, 3101, 3102, 3103, 3104, 3200, 3301, 3302, 3401,
    3402, 3501, 3502, 3601, 3602, 3701, 3702, 3800, 3901, 3902, 4001, 4002,
    4100, 4201, 4202, 4203, 4204, 4205, 4301, 4302, 4303, 4400, 4501, 4502,
    4601, 4602, 4701, 4702, 4801, 4802, 4803, 4901, 4902, 4903, 4904, 5001,
    5002, 5003, 5004, 5005, 5006, 5007, 5008, 5009, 5201, 5202, 5400,
)

NAD83_ZONES: Tuple[int, ...] = (
    101, 102, 5010, 5300, 201, 202, 203, 301, 302, 401, 402, 403,
    404, 405, 406, 0, 501, 502, 503, 600, 700, 901, 902, 903, 1001, 1002,
    5101, 5102, 5103, 5104, 5105, 1101, 1102, 1103, 1201, 1202, 1301, 1302,
    1401, 1402, 1501, 1502, 1601, 1602, 1701, 1702, 1703, 1801, 1802, 1900,
    2001, 2002, 2101, 2102, 2103, 2111, 2112, 2113, 2201, 2202, 2203, 2301,
    2302, 2401, 2402, 2403, 2500, 0, 0, 2600, 0, 2701, 2702, 2703,
    2800, 2900, 3001, 3002, 3003, 3101, 3102, 3103, 3104, 3200, 3301, 3302,
    3401, 3402, 3501, 3502, 3601, 3602, 3701, 3702, 3800, 3900, 0, 4001,
    4002, 4100, 4201, 4202, 4203, 4204, 4205, 4301, 4302, 4303, 4400, 4501,
    4502, 4601, 4602, 4701, 4702, 4801, 4802, 4803, 4901, 4902, 4903, 4904,
    5001, 5002, 5003, 5004, 5005, 5006, 5007, 5008, 5009, 5200, 0, 5400,
)

NAD27_SPHEROID = Spheroid.CLARKE1866
NAD83_SPHEROID = Spheroid.GRS1980

ZONE_TABLE_RESOURCE = "state_plane_zones.csv"

# Legacy binary layout: 32 name bytes, int32 id, nine float64, big-endian
RECORD_SIZE = 432
RECORD_FORMAT = struct.Struct(">32si9d")

TRANSVERSE_MERCATOR_ID = 1
LAMBERT_CONFORMAL_ID = 2
POLYCONIC_ID = 3
OBLIQUE_MERCATOR_ID = 4

D2R = GeodeticConstants.D2R


def nad_year(spheroid: int) -> int:
    """27 or 83 for the two legal State Plane spheroids.

    Raises
    ------
    ProjectionParameterError
        For any other spheroid (legacy error 23).
    """
    require(spheroid in (NAD27_SPHEROID, NAD83_SPHEROID), f"Illegal spheroid #{spheroid}", 23)
    return 27 if spheroid == NAD27_SPHEROID else 83


def zone_index(zone: int, spheroid: int) -> int:
    """Record position of a zone in its datum's zone table.

    Raises
    ------
    ProjectionParameterError
        If the spheroid is neither NAD27 nor NAD83.
    ZoneNotFoundError
        If the zone is not in the table.
    """
    codes = NAD27_ZONES if nad_year(spheroid) == 27 else NAD83_ZONES
    if zone > 0 and zone in codes:
        return codes.index(zone)
    message = f"Illegal zone #{zone} for spheroid #{spheroid}"
    logger.warning(message)
    raise ZoneNotFoundError(message)


def unpack_radians(packed: float) -> float:
    """Packed DDDMMSS.SS table angle to radians."""
    return paksz(pakcz(packed)) * D2R


@dataclass(frozen=True)
class ZoneRecord:
    """One zone's parameter record.

    Attributes
    ----------
    name : str
        Zone name, for example ``"RHODE ISLAND"``.
    projection_id : int
        1 Transverse Mercator, 2 Lambert Conformal Conic, 3 Polyconic,
        4 Hotine Oblique Mercator.
    table : Tuple[float, ...]
        The nine record values.
    """
    name: str
    projection_id: int
    table: Tuple[float, ...]

    def __post_init__(self):
        if len(self.table) != 9:
            raise MalformedTableError(
                f"Zone record '{self.name}' needs 9 values, got {len(self.table)}"
            )

    @property
    def semi_major(self) -> float:
        return self.table[0]

    @property
    def semi_minor(self) -> float:
        return float(np.sqrt(1.0 - self.table[1]) * self.table[0])


class ZoneTable(Protocol):
    """Anything that can look up zone records."""

    def record(self, zone: int, spheroid: int) -> ZoneRecord:
        ...


class LegacyZoneFile:
    """Zone records from the legacy fixed-layout binary files.

    Parameters
    ----------
    nad27_path, nad83_path : str or Path
        The NAD27 and NAD83 parameter files.
    """

    def __init__(self, nad27_path: Union[str, Path], nad83_path: Union[str, Path]):
        self._paths = {27: Path(nad27_path), 83: Path(nad83_path)}

    def record(self, zone: int, spheroid: int) -> ZoneRecord:
        """Read one zone's record.

        Raises
        ------
        ResourceNotFoundError
            If the datum's parameter file does not exist.
        ZoneNotFoundError
            If the zone is unknown or its record is empty.
        MalformedTableError
            If the record is truncated.
        """
        index = zone_index(zone, spheroid)
        path = self._paths[nad_year(spheroid)]
        if not path.is_file():
            raise ResourceNotFoundError(f"State Plane parameter file not found: {path}")
        with open(path, "rb") as f:
            f.seek(index * RECORD_SIZE)
            data = f.read(RECORD_FORMAT.size)
        if len(data) < RECORD_FORMAT.size:
            raise MalformedTableError(
                f"Short State Plane record for zone {zone} in {path}: {len(data)} bytes"
            )
        name, projection_id, *table = RECORD_FORMAT.unpack(data)
        if projection_id <= 0:
            message = f"Illegal zone #{zone} for spheroid #{spheroid}"
            logger.warning(message)
            raise ZoneNotFoundError(message)
        return ZoneRecord(name.decode("latin-1").rstrip("\x00 "), projection_id, tuple(table))

    @staticmethod
    def encode(record: ZoneRecord) -> bytes:
        """One record in the legacy layout, padded to the record size."""
        name = record.name.encode("latin-1")[:32].ljust(32, b" ")
        data = RECORD_FORMAT.pack(name, record.projection_id, *record.table)
        return data.ljust(RECORD_SIZE, b"\x00")

    @classmethod
    def write(cls, path: Union[str, Path], records: Dict[int, ZoneRecord], spheroid: int):
        """Write a legacy file holding ``records`` keyed by zone code.

        Slots without a record are left empty (projection id 0).
        """
        codes = NAD27_ZONES if nad_year(spheroid) == 27 else NAD83_ZONES
        blank = b"\x00" * RECORD_SIZE
        with open(path, "wb") as f:
            for code in codes:
                record = records.get(code) if code > 0 else None
                f.write(cls.encode(record) if record is not None else blank)


class PackagedZoneTable:
    """Zone records from a CSV table, by default the packaged one.

    Each data row holds ``datum,zone,name,projection_id`` followed by the
    nine record values. Lines starting with ``#`` are comments.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        if path is None:
            text = resources.files("projections").joinpath("data").joinpath(ZONE_TABLE_RESOURCE).read_text()
            source = f"package resource {ZONE_TABLE_RESOURCE}"
        else:
            path = Path(path)
            if not path.is_file():
                raise ResourceNotFoundError(f"State Plane zone table not found: {path}")
            text = path.read_text()
            source = str(path)
        self._records = self._parse(text, source)
        logger.info(f"Loaded {len(self._records)} State Plane zone records from {source}")

    @staticmethod
    def _parse(text: str, source: str) -> Dict[Tuple[int, int], ZoneRecord]:
        lines = [line for line in text.splitlines() if line.strip() and not line.lstrip().startswith("#")]
        records = {}
        for row_number, row in enumerate(csv.reader(io.StringIO("\n".join(lines))), start=1):
            if row_number == 1 and row[0].strip() == "datum":
                continue
            if len(row) != 13:
                raise MalformedTableError(
                    f"{source} row {row_number}: expected 13 fields, got {len(row)}"
                )
            try:
                datum, zone, projection_id = int(row[0]), int(row[1]), int(row[3])
                table = tuple(float(value) for value in row[4:])
            except ValueError as e:
                raise MalformedTableError(f"{source} row {row_number}: {e}") from e
            records[(datum, zone)] = ZoneRecord(row[2].strip(), projection_id, table)
        return records

    def __len__(self) -> int:
        return len(self._records)

    def zones(self, spheroid: int) -> Tuple[int, ...]:
        """Zone codes with a record for one datum."""
        year = nad_year(spheroid)
        return tuple(sorted(zone for datum, zone in self._records if datum == year))

    def record(self, zone: int, spheroid: int) -> ZoneRecord:
        """Look up one zone's record.

        Raises
        ------
        ZoneNotFoundError
            If the zone is unknown or has no row in the table.
        """
        zone_index(zone, spheroid)
        record = self._records.get((nad_year(spheroid), zone))
        if record is None:
            message = f"No State Plane parameters for zone #{zone} on NAD{nad_year(spheroid)}"
            logger.warning(message)
            raise ZoneNotFoundError(message)
        return record


@lru_cache(maxsize=1)
def default_zone_table() -> PackagedZoneTable:
    """The packaged zone table, loaded once."""
    return PackagedZoneTable()


def zone_projection(record: ZoneRecord) -> Projection:
    """Build the projection a zone record describes."""
    a, b = record.semi_major, record.semi_minor
    t = record.table
    if record.projection_id == TRANSVERSE_MERCATOR_ID:
        return TransverseMercator(
            a, b, scale_factor=t[3], center_lon=unpack_radians(t[2]),
            center_lat=unpack_radians(t[6]), false_easting=t[7], false_northing=t[8],
        )
    if record.projection_id == LAMBERT_CONFORMAL_ID:
        return LambertConformalConic(
            a, b, lat1=unpack_radians(t[5]), lat2=unpack_radians(t[4]),
            center_lon=unpack_radians(t[2]), center_lat=unpack_radians(t[6]),
            false_easting=t[7], false_northing=t[8],
        )
    if record.projection_id == POLYCONIC_ID:
        return Polyconic(
            a, b, center_lon=unpack_radians(t[2]), center_lat=unpack_radians(t[3]),
            false_easting=t[4], false_northing=t[5],
        )
    if record.projection_id == OBLIQUE_MERCATOR_ID:
        return HotineObliqueMercator(
            a, b, scale_factor=t[3], azimuth=unpack_radians(t[5]),
            center_lon=unpack_radians(t[2]), center_lat=unpack_radians(t[6]),
            false_easting=t[7], false_northing=t[8],
        )
    raise MalformedTableError(
        f"Zone '{record.name}' has unknown projection id {record.projection_id}"
    )


@register_projection
class StatePlane(Projection):
    """State Plane Coordinate System zone.

    Parameters
    ----------
    zone : int
        State Plane zone code, for example 3800 for Rhode Island.
    spheroid : int
        0 (Clarke 1866, NAD27) or 8 (GRS 1980, NAD83).
    zone_table : ZoneTable, optional
        Record source. Defaults to the packaged table.

    Raises
    ------
    ProjectionParameterError
        If the spheroid is not a State Plane datum.
    ZoneNotFoundError
        If the zone has no record.
    """

    code = ProjectionCode.SPCS

    def __init__(
        self,
        zone: int,
        spheroid: int = NAD27_SPHEROID,
        zone_table: Optional[ZoneTable] = None
    ):
        zone, spheroid = int(zone), int(spheroid)
        table = zone_table if zone_table is not None else default_zone_table()
        record = table.record(zone, spheroid)
        super().__init__(record.semi_major, record.semi_minor)
        self._zone = zone
        self._spheroid = spheroid
        self._record = record
        self._actual = zone_projection(record)
        self._set_parameters(zone=zone, datum=f"NAD{nad_year(spheroid)}", **self._actual.parameters)
        self._log_parameters()

    @property
    def zone(self) -> int:
        return self._zone

    @property
    def spheroid(self) -> int:
        return self._spheroid

    @property
    def record(self) -> ZoneRecord:
        return self._record

    @property
    def zone_projection(self) -> Projection:
        """The projection every call is delegated to."""
        return self._actual

    @property
    def proj4_string(self):
        return self._actual.proj4_string

    def _report_lines(self):
        lines = [("Zone", f"{self._zone} ({self._record.name})"),
                 ("Datum", f"NAD{nad_year(self._spheroid)}"),
                 ("Zone Projection", self._actual.name)]
        return lines + self._actual._report_lines()

    def _forward(self, lat, lon):
        return self._actual.forward(lat, lon)

    def _inverse(self, x, y):
        return self._actual.inverse(x, y)
