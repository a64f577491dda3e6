"""
Geodetic Datums and the Datum Cache.

A datum is a reference ellipsoid together with the shift of its origin
relative to WGS 84. This module provides the immutable ``Datum`` record
with its Earth-Centered-Fixed (ECF) conversion and the abridged Molodensky
shift between two datums, and ``DatumFactory``, an explicitly constructed
cache that hands out one ``Datum`` instance per spheroid code.

Equality Contract
-----------------
``Datum`` compares by IDENTITY, not by value. Every datum used by the
library is expected to come from a single ``DatumFactory`` cache, so two
references to the same datum are the same object. Two independently
built datums with identical parameters are NOT equal; use
``Datum.same_parameters`` when a value comparison is wanted. Transforms
rely on this: a location is reshifted whenever its datum is not the very
instance the transform was built with.

Datum Table Format
------------------
One ``KEY=datum name,dx,dy,dz`` line per spheroid, where KEY is the
spheroid name with spaces replaced by underscores and the shifts are in
meters. Lines starting with ``#`` or ``!`` are comments.

References
----------
- DMA TR 8350.2 (1987). Department of Defense World Geodetic System 1984.
  Section 7, Molodensky datum transformation formulas.
- Torge, W. (2001). Geodesy (3rd ed.). de Gruyter.
"""

from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
import threading
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union
import numpy as np
from numpy.typing import NDArray

from common.logging_config import get_logger
from common.exceptions import DatumNotFoundError, MalformedTableError
from common.types import EarthLocation
from geodesy.coordinate_models import (
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)
from geodesy.spheroids import (
    Spheroid,
    SpheroidParameters,
    find_spheroid,
    spheroid_parameters,
)

logger = get_logger(__name__)

DATUM_TABLE_RESOURCE = "datum.properties"

# Parsed datum table entry: (datum name, dx, dy, dz)
DatumEntry = Tuple[str, float, float, float]


@dataclass(frozen=True, eq=False)
class Datum:
    """An ellipsoid plus its WGS 84 relative origin shift.

    Attributes
    ----------
    datum_name : str
        Datum name, e.g. "North American 1927".
    spheroid_name : str
        Reference ellipsoid name, e.g. "Clarke 1866".
    axis : float
        Semi-major axis in meters.
    flattening : float
        Flattening f = (a - b) / a. Zero for a sphere.
    dx, dy, dz : float
        Origin shift relative to WGS 84 in meters.

    Derived Parameters
    ------------------
    e2 : float
        Eccentricity squared, 2f - f².
    re, rp : float
        Equatorial and polar radii in meters.
    rp2, re2_over_rp2 : float
        Precomputed terms for the ECF conversion.

    Notes
    -----
    Equality is identity. See the module docstring.
    """
    datum_name: str
    spheroid_name: str
    axis: float
    flattening: float
    dx: float = 0.0
    dy: float = 0.0
    dz: float = 0.0
    e2: float = field(init=False)
    re: float = field(init=False)
    rp: float = field(init=False)
    rp2: float = field(init=False)
    re2_over_rp2: float = field(init=False)

    def __post_init__(self):
        if self.axis <= 0:
            raise ValueError(f"Datum semi-major axis must be positive, got {self.axis}")
        if not 0.0 <= self.flattening < 1.0:
            raise ValueError(f"Datum flattening must be in [0, 1), got {self.flattening}")
        f = self.flattening
        rp = self.axis * (1.0 - f)
        object.__setattr__(self, "e2", 2.0 * f - f * f)
        object.__setattr__(self, "re", self.axis)
        object.__setattr__(self, "rp", rp)
        object.__setattr__(self, "rp2", rp * rp)
        object.__setattr__(self, "re2_over_rp2", (self.axis * self.axis) / (rp * rp))

    @classmethod
    def from_inverse_flattening(
        cls,
        datum_name: str,
        spheroid_name: str,
        axis: float,
        inverse_flattening: float,
        dx: float = 0.0,
        dy: float = 0.0,
        dz: float = 0.0
    ) -> "Datum":
        """Build a datum from 1/f (infinite for a sphere)."""
        return cls(datum_name, spheroid_name, axis, 1.0 / inverse_flattening, dx, dy, dz)

    @classmethod
    def from_spheroid(
        cls,
        datum_name: str,
        spheroid: Union[int, SpheroidParameters],
        dx: float = 0.0,
        dy: float = 0.0,
        dz: float = 0.0
    ) -> "Datum":
        """Build a datum on a tabulated spheroid."""
        params = spheroid if isinstance(spheroid, SpheroidParameters) else spheroid_parameters(spheroid)
        return cls.from_inverse_flattening(
            datum_name, params.name, params.a, params.inverse_flattening, dx, dy, dz
        )

    @classmethod
    def user_defined(cls, semi_major: float, semi_minor: float) -> "Datum":
        """Datum with no shift for axes that match no tabulated spheroid."""
        inv_flat = np.inf if semi_major == semi_minor else semi_major / (semi_major - semi_minor)
        return cls.from_inverse_flattening("User defined", "User defined", semi_major, inv_flat)

    @property
    def inverse_flattening(self) -> float:
        return np.inf if self.flattening == 0 else 1.0 / self.flattening

    @property
    def shift(self) -> Tuple[float, float, float]:
        """(dx, dy, dz) in meters."""
        return self.dx, self.dy, self.dz

    def same_parameters(self, other: "Datum") -> bool:
        """Value comparison of names, ellipsoid and shift."""
        return (
            self.datum_name == other.datum_name
            and self.spheroid_name == other.spheroid_name
            and self.axis == other.axis
            and self.flattening == other.flattening
            and self.shift == other.shift
        )

    def compute_ecf(self, lat, lon):
        """Convert geographic coordinates on this datum to ECF.

        Parameters
        ----------
        lat, lon : float or ndarray
            Geodetic latitude and longitude in degrees.

        Returns
        -------
        Tuple
            (x, y, z) in meters.

        Notes
        -----
        With β = rp sqrt((re²/rp²) cos²φ + sin²φ):
            x = re² cosφ cosλ / β
            y = re² cosφ sinλ / β
            z = rp² sinφ / β
        """
        lat_rad = np.radians(lat)
        lon_rad = np.radians(lon)
        cos_lat = np.cos(lat_rad)
        sin_lat = np.sin(lat_rad)
        beta = self.rp * np.sqrt(self.re2_over_rp2 * cos_lat**2 + sin_lat**2)
        x = (self.re * cos_lat * np.cos(lon_rad)) / beta * self.re
        y = (self.re * cos_lat * np.sin(lon_rad)) / beta * self.re
        z = (self.rp2 * sin_lat) / (self.re * beta) * self.re
        return x, y, z

    def compute_ecf_into(
        self,
        lat: NDArray[np.float64],
        lon: NDArray[np.float64],
        out: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        """Bulk ECF conversion into a caller buffer of shape (..., 3)."""
        x, y, z = self.compute_ecf(lat, lon)
        out[..., 0] = x
        out[..., 1] = y
        out[..., 2] = z
        return out

    def transform(self, location: EarthLocation, to_datum: "Datum") -> EarthLocation:
        """Shift a location onto another datum (abridged Molodensky).

        The source datum is the location's own datum, or this datum when
        the location is untagged. Shifting onto the source datum itself
        returns the location unchanged.

        Parameters
        ----------
        location : EarthLocation
            Location to shift.
        to_datum : Datum
            Target datum.

        Returns
        -------
        EarthLocation
            New location tagged with ``to_datum``.

        Notes
        -----
        First-order formula; accuracy degrades near the poles where the
        longitude shift divides by cos(lat).
        """
        source = location.datum if location.datum is not None else self
        if source is to_datum:
            return location if location.datum is to_datum else location.with_datum(to_datum)
        if not location.is_valid():
            return EarthLocation.invalid(to_datum)

        from_a = source.axis
        from_f = source.flattening
        from_esq = source.e2
        da = to_datum.axis - source.axis
        df = to_datum.flattening - source.flattening
        dx = source.dx - to_datum.dx
        dy = source.dy - to_datum.dy
        dz = source.dz - to_datum.dz

        slat = np.sin(np.radians(location.lat))
        clat = np.cos(np.radians(location.lat))
        slon = np.sin(np.radians(location.lon))
        clon = np.cos(np.radians(location.lon))
        adb = 1.0 / (1.0 - from_f)
        rn = radius_of_curvature_prime_vertical(np.radians(location.lat), from_a, from_esq)
        rm = radius_of_curvature_meridian(np.radians(location.lat), from_a, from_esq)

        dlat = ((-dx * slat * clon - dy * slat * slon + dz * clat)
                + da * rn * from_esq * slat * clat / from_a
                + df * (rm * adb + rn / adb) * slat * clat) / rm
        dlon = (-dx * slon + dy * clon) / (rn * clat)

        return EarthLocation(
            location.lat + np.degrees(dlat),
            location.lon + np.degrees(dlon),
            to_datum
        )

    def __str__(self) -> str:
        return (
            f"Datum[datumName={self.datum_name},spheroidName={self.spheroid_name},"
            f"dx={self.dx},dy={self.dy},dz={self.dz}]"
        )


def parse_datum_entry(key: str, value: Union[str, Sequence]) -> DatumEntry:
    """Decode one datum table value.

    Parameters
    ----------
    key : str
        Table key, used in error messages.
    value : str or sequence
        ``"name,dx,dy,dz"`` or an equivalent 4-item sequence.

    Raises
    ------
    MalformedTableError
        If the value does not hold a name and three numeric shifts.
    """
    parts = [p.strip() for p in value.split(",")] if isinstance(value, str) else list(value)
    if len(parts) != 4:
        raise MalformedTableError(
            f"Datum entry '{key}' needs 4 values (name,dx,dy,dz), got {len(parts)}"
        )
    try:
        return str(parts[0]), float(parts[1]), float(parts[2]), float(parts[3])
    except (TypeError, ValueError) as e:
        raise MalformedTableError(f"Datum entry '{key}' has a non-numeric shift: {value}") from e


def parse_datum_table(text: str) -> Dict[str, DatumEntry]:
    """Parse ``KEY=name,dx,dy,dz`` lines into a table."""
    table = {}
    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise MalformedTableError(f"Datum table line {line_number} has no '=': {raw!r}")
        table[key.strip()] = parse_datum_entry(key.strip(), value)
    return table


def load_datum_table(path: Optional[Union[str, Path]] = None) -> Dict[str, DatumEntry]:
    """Load a datum table file, or the packaged one when ``path`` is None.

    Raises
    ------
    DatumNotFoundError
        If the file does not exist.
    MalformedTableError
        If a line cannot be decoded.
    """
    if path is None:
        text = resources.files("geodesy").joinpath("data").joinpath(DATUM_TABLE_RESOURCE).read_text()
        source = f"package resource {DATUM_TABLE_RESOURCE}"
    else:
        path = Path(path)
        if not path.is_file():
            raise DatumNotFoundError(f"Datum table file not found: {path}")
        text = path.read_text()
        source = str(path)
    table = parse_datum_table(text)
    logger.info(f"Loaded {len(table)} datum entries from {source}")
    return table


class DatumFactory:
    """Cache of datums keyed by spheroid code.

    Each code is constructed at most once per factory; every later request
    returns the same instance, which is what makes identity equality of
    datums meaningful. Factories are ordinary objects: build one and pass
    it to whatever needs datums, or build several with different tables
    (for example in tests).

    Parameters
    ----------
    table : mapping, optional
        Spheroid key to ``"name,dx,dy,dz"`` string or 4-item sequence.
        When omitted the packaged table is loaded.

    Examples
    --------
    >>> factory = DatumFactory()
    >>> factory.create(0).datum_name
    'North American 1927'
    >>> factory.create(0) is factory.create(0)
    True
    """

    def __init__(self, table: Optional[Mapping[str, Union[str, Sequence]]] = None):
        self._logger = get_logger("DatumFactory")
        if table is None:
            self._table = load_datum_table()
        else:
            self._table = {key: parse_datum_entry(key, value) for key, value in table.items()}
        self._cache: Dict[int, Datum] = {}
        self._custom: Dict[Tuple[float, float], Datum] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DatumFactory":
        """Factory backed by a datum table file."""
        return cls(load_datum_table(path))

    @property
    def table(self) -> Dict[str, DatumEntry]:
        """Copy of the parsed datum table."""
        return dict(self._table)

    @property
    def cached_codes(self) -> Tuple[int, ...]:
        """Spheroid codes constructed so far."""
        with self._lock:
            return tuple(sorted(self._cache))

    def create(self, code: int) -> Datum:
        """Return the datum for a spheroid code.

        Raises
        ------
        DatumNotFoundError
            If the code is out of range or the table has no entry for it.
        """
        with self._lock:
            datum = self._cache.get(code)
            if datum is not None:
                return datum
            try:
                params = spheroid_parameters(code)
            except KeyError:
                self._logger.warning(f"No spheroid with code {code}")
                raise DatumNotFoundError(f"No spheroid with code {code}") from None
            entry = self._table.get(params.key)
            if entry is None:
                self._logger.warning(f"No datum table entry for spheroid {params.key}")
                raise DatumNotFoundError(f"No datum available for spheroid '{params.name}' (code {code})")
            name, dx, dy, dz = entry
            datum = Datum.from_spheroid(name, params, dx, dy, dz)
            self._cache[code] = datum
            self._logger.info(f"Created datum {datum}")
            return datum

    def get(self, code: int) -> Optional[Datum]:
        """Like ``create`` but returns None when no datum is available."""
        try:
            return self.create(code)
        except DatumNotFoundError:
            return None

    def wgs84(self) -> Datum:
        return self.create(Spheroid.WGS84)

    def for_axes(self, semi_major: float, semi_minor: float) -> Datum:
        """Datum for a pair of ellipsoid axes.

        Axes that identify a tabulated spheroid with a datum entry give
        that cached datum. Anything else gives a cached user defined datum
        with no shift, one instance per distinct axis pair.
        """
        code = find_spheroid(semi_major, semi_minor)
        if code is not None:
            datum = self.get(code)
            if datum is not None:
                return datum
        key = (float(semi_major), float(semi_minor))
        with self._lock:
            datum = self._custom.get(key)
            if datum is None:
                datum = Datum.user_defined(*key)
                self._custom[key] = datum
            return datum

    def clear(self):
        """Drop every cached datum. Later requests build new instances."""
        with self._lock:
            self._cache.clear()
            self._custom.clear()

    def __contains__(self, code: int) -> bool:
        with self._lock:
            return code in self._cache
