"""
Location Value Types for Earth Transforms.

This module defines the two immutable coordinate types that flow through
the library: geographic locations on a datum, and data (grid) locations
in row/column index space. Transform operations always return new values;
the only in-place paths are the explicit bulk buffer methods on
``transforms.MapProjection``.

Design Rationale
----------------
Using frozen dataclasses instead of raw tuples provides:
1. Self-documenting code - field names describe the data
2. No aliasing bugs - a location handed to a transform cannot change
3. Hashable values usable as dictionary keys
4. A single place for validity rules (NaN marks an invalid location)
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Optional, Sequence, Tuple
import numpy as np

from pyproj import Geod

from common.constants import GeodeticConstants
from common.units import meters_to_kilometers

if TYPE_CHECKING:
    from geodesy.datum import Datum


def lon_range(lon: float) -> float:
    """Bring a longitude in degrees into [-180, 180) with one 360 step."""
    if lon < -180:
        return lon + 360
    if lon >= 180:
        return lon - 360
    return lon


def lat_range(lat: float) -> float:
    """Clamp a latitude in degrees to [-90, 90]."""
    if lat > 90:
        return 90.0
    if lat < -90:
        return -90.0
    return lat


_wgs84_geod = Geod(ellps='WGS84')

# Formatting styles for EarthLocation.format
FORMAT_STYLES = ("D", "DD", "DDDD", "DDMM", "DDMMSS", "RAW")


@dataclass(frozen=True)
class EarthLocation:
    """A geographic location on a datum.

    Attributes
    ----------
    lat : float
        Latitude in DEGREES. Range: [-90, 90].
    lon : float
        Longitude in DEGREES. Brought into [-180, 180) on construction by
        a single ±360 step.
    datum : Datum, optional
        Datum the coordinates refer to. ``None`` marks an untagged
        location, which transforms interpret as already being on their
        own native datum.

    Notes
    -----
    - A location with NaN in either coordinate is invalid.
    - Equality compares coordinates exactly and datums by identity.

    Examples
    --------
    >>> loc = EarthLocation(41.7, -71.5)
    >>> loc.format("DDDD")
    '41.7000 N, 71.5000 W'
    """
    lat: float
    lon: float
    datum: Optional["Datum"] = field(default=None, compare=True)

    def __post_init__(self):
        object.__setattr__(self, "lat", float(self.lat))
        object.__setattr__(self, "lon", float(lon_range(float(self.lon))))

    @classmethod
    def invalid(cls, datum: Optional["Datum"] = None) -> "EarthLocation":
        """Create an invalid location (NaN coordinates)."""
        return cls(np.nan, np.nan, datum)

    def is_valid(self) -> bool:
        """True when neither coordinate is NaN."""
        return not (np.isnan(self.lat) or np.isnan(self.lon))

    def coords(self) -> Tuple[float, float]:
        """(lat, lon) in degrees."""
        return self.lat, self.lon

    def normalized(self) -> "EarthLocation":
        """Latitude clamped to [-90, 90], longitude fully wrapped into [-180, 180)."""
        if not self.is_valid():
            return self
        lon = (self.lon + 180.0) % 360.0 - 180.0
        return EarthLocation(lat_range(self.lat), lon, self.datum)

    def with_datum(self, datum: Optional["Datum"]) -> "EarthLocation":
        """Same coordinates, tagged with another datum (no shift applied)."""
        return replace(self, datum=datum)

    def shift_datum(self, datum: "Datum") -> "EarthLocation":
        """Shift this location onto another datum.

        Untagged locations are simply tagged with ``datum``.
        """
        if self.datum is None:
            return self.with_datum(datum)
        return self.datum.transform(self, datum)

    @staticmethod
    def haversine_distance(lat_a: float, lon_a: float, lat_b: float, lon_b: float) -> float:
        """Great circle distance in kilometers on the standard sphere.

        Parameters
        ----------
        lat_a, lon_a, lat_b, lon_b : float
            Coordinates in degrees.
        """
        lat1 = np.radians(lat_a)
        lat2 = np.radians(lat_b)
        dlon = np.radians(lon_b) - np.radians(lon_a)
        dlat = lat2 - lat1
        a = np.sin(dlat / 2)**2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2)**2
        c = 2 * np.arcsin(min(1.0, np.sqrt(a)))
        return meters_to_kilometers(GeodeticConstants.STD_RADIUS.value * c)

    def distance(self, other: "EarthLocation") -> float:
        """Haversine distance to another location in kilometers."""
        return self.haversine_distance(self.lat, self.lon, other.lat, other.lon)

    def geodesic_distance(self, other: "EarthLocation") -> float:
        """Ellipsoidal geodesic distance to another location in kilometers.

        Uses this location's datum ellipsoid, or WGS84 when untagged.
        """
        if self.datum is None:
            geod = _wgs84_geod
        else:
            geod = Geod(a=self.datum.axis, f=self.datum.flattening)
        _, _, distance_m = geod.inv(self.lon, self.lat, other.lon, other.lat)
        return meters_to_kilometers(distance_m)

    def translate(self, lat_inc: float, lon_inc: float) -> "EarthLocation":
        """Move by the given increments in degrees.

        Crossing a pole reflects the latitude and moves the longitude to
        the opposite meridian.
        """
        lat = self.lat + lat_inc
        lon = self.lon
        if lat > 90:
            lat = 180 - lat
            lon += 180
        elif lat < -90:
            lat = -180 - lat
            lon += 180
        return EarthLocation(lat, lon_range(lon + lon_inc), self.datum)

    def is_north(self, other: "EarthLocation") -> bool:
        return self.lat > other.lat

    def is_south(self, other: "EarthLocation") -> bool:
        return self.lat < other.lat

    def is_east(self, other: "EarthLocation") -> bool:
        """True if this location lies east of ``other`` along the shorter arc."""
        diff = abs(self.lon - other.lon)
        if diff < 180:
            return self.lon > other.lon
        if diff > 180:
            return self.lon < other.lon
        return False

    def is_west(self, other: "EarthLocation") -> bool:
        """True if this location lies west of ``other`` along the shorter arc."""
        diff = abs(self.lon - other.lon)
        if diff < 180:
            return self.lon < other.lon
        if diff > 180:
            return self.lon > other.lon
        return False

    @staticmethod
    def format_single(deg: float, style: str = "DDDD", is_lat: bool = True) -> str:
        """Format one coordinate.

        Parameters
        ----------
        deg : float
            Coordinate in degrees.
        style : str
            One of ``D``, ``DD``, ``DDDD``, ``DDMM``, ``DDMMSS`` or ``RAW``.
        is_lat : bool
            Selects N/S (True) or E/W (False) hemisphere letters.
        """
        if style not in FORMAT_STYLES:
            raise ValueError(f"Unknown format style '{style}', expected one of {FORMAT_STYLES}")
        if style == "RAW":
            return repr(float(deg))
        if is_lat:
            hemisphere = "S" if deg < 0 else "N"
        else:
            hemisphere = "W" if deg < 0 else "E"
        deg = abs(deg)
        if style == "D":
            return f"{int(deg)} {hemisphere}"
        if style == "DD":
            return f"{deg:.2f} {hemisphere}"
        if style == "DDDD":
            return f"{deg:.4f} {hemisphere}"
        if style == "DDMM":
            dd = int(deg)
            return f"{dd} {(deg - dd) * 60:.2f} {hemisphere}"
        dd = int(deg)
        mm = int((deg - dd) * 60)
        ss = (deg - dd - mm / 60.0) * 3600
        return f"{dd}d{mm}'{ss:.2f}\"{hemisphere}"

    def format(self, style: str = "DDDD") -> str:
        """Format as ``"<lat>, <lon>"`` in the given style."""
        return (self.format_single(self.lat, style, True) + ", "
                + self.format_single(self.lon, style, False))


@dataclass(frozen=True)
class DataLocation:
    """A location in data grid index space.

    Attributes
    ----------
    coords : tuple of float
        Index coordinates, (row, col) for 2D grids. Fractional values
        address positions between grid points.

    Examples
    --------
    >>> DataLocation.of(2.4, 7.6).round()
    DataLocation(coords=(2.0, 8.0))
    """
    coords: Tuple[float, ...]

    def __post_init__(self):
        object.__setattr__(self, "coords", tuple(float(c) for c in self.coords))

    @classmethod
    def of(cls, *coords: float) -> "DataLocation":
        """Build a location from positional coordinates."""
        return cls(tuple(coords))

    @classmethod
    def invalid(cls, rank: int = 2) -> "DataLocation":
        """Create an invalid location (all NaN)."""
        return cls((np.nan,) * rank)

    @classmethod
    def from_index(cls, index: int, dims: Sequence[int]) -> "DataLocation":
        """Location of a flat row-major index within a grid of ``dims``."""
        coords = []
        divisor = int(np.prod(dims[1:])) if len(dims) > 1 else 1
        for i in range(len(dims)):
            coord = index // divisor
            coords.append(coord)
            index -= coord * divisor
            if i + 1 < len(dims):
                divisor //= dims[i + 1]
        return cls(tuple(coords))

    @property
    def rank(self) -> int:
        return len(self.coords)

    def __getitem__(self, index: int) -> float:
        return self.coords[index]

    def is_valid(self) -> bool:
        """True when every coordinate is finite."""
        return bool(np.all(np.isfinite(self.coords)))

    def is_contained(self, dims: Sequence[int]) -> bool:
        """True when the location lies within [0, dims-1] on every axis."""
        if len(dims) != self.rank:
            return False
        return all(0 <= c <= d - 1 for c, d in zip(self.coords, dims))

    def round(self) -> "DataLocation":
        # half-up rounding of grid indices, not banker's rounding
        return DataLocation(tuple(np.floor(np.asarray(self.coords) + 0.5)))

    def floor(self) -> "DataLocation":
        return DataLocation(tuple(np.floor(self.coords)))

    def ceil(self) -> "DataLocation":
        return DataLocation(tuple(np.ceil(self.coords)))

    def truncate(self, dims: Sequence[int]) -> "DataLocation":
        """Clamp every coordinate into [0, dims-1]."""
        return DataLocation(tuple(
            min(max(c, 0.0), d - 1) for c, d in zip(self.coords, dims)
        ))

    def translate(self, *offsets: float) -> "DataLocation":
        """Add per-axis offsets."""
        if len(offsets) != self.rank:
            raise ValueError(f"Expected {self.rank} offsets, got {len(offsets)}")
        return DataLocation(tuple(c + o for c, o in zip(self.coords, offsets)))

    def format(self, do_round: bool = False) -> str:
        if do_round:
            return ", ".join(str(int(round(c))) for c in self.coords)
        return ", ".join(str(c) for c in self.coords)
