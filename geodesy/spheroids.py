"""
Reference Spheroid Table.

The twenty reference ellipsoids understood by the projection engine,
addressed by their legacy GCTP integer codes. Each code maps to a name,
semi-major axis, semi-minor axis and inverse flattening. Datum shifts
for these ellipsoids live in the datum table (see ``geodesy.datum``).

References
----------
- USGS General Cartographic Transformation Package (GCTP), sphdz.c.
- Snyder, J.P. (1987). Map Projections - A Working Manual. Table 1.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Sequence, Tuple
import numpy as np

from common.constants import GeodeticConstants, SPHEROID_AXIS_TOLERANCE


class Spheroid(IntEnum):
    """Legacy spheroid codes."""
    CLARKE1866 = 0
    CLARKE1880 = 1
    BESSEL = 2
    INT1967 = 3
    INT1909 = 4
    WGS72 = 5
    EVEREST = 6
    WGS66 = 7
    GRS1980 = 8
    AIRY = 9
    MOD_EVEREST = 10
    MOD_AIRY = 11
    WGS84 = 12
    SE_ASIA = 13
    AUS_NAT = 14
    KRASS = 15
    HOUGH = 16
    MERCURY1960 = 17
    MOD_MER1968 = 18
    SPHERE = 19


MAX_SPHEROIDS = len(Spheroid)


@dataclass(frozen=True)
class SpheroidParameters:
    """Parameters defining a reference ellipsoid.

    Attributes
    ----------
    name : str
        Identifier for the ellipsoid, e.g. "Clarke 1866".
    a : float
        Semi-major axis (equatorial radius) in meters.
    b : float
        Semi-minor axis (polar radius) in meters, as tabulated.
    inverse_flattening : float
        1/f; infinite for a sphere.

    Derived Parameters
    ------------------
    f : float
        Flattening: f = 1 / inverse_flattening
    e2 : float
        First eccentricity squared: e² = 2f - f²
    ep2 : float
        Second eccentricity squared: e'² = e² / (1 - e²)
    """
    name: str
    a: float
    b: float
    inverse_flattening: float

    @property
    def f(self) -> float:
        """Flattening."""
        return 1.0 / self.inverse_flattening

    @property
    def e2(self) -> float:
        """First eccentricity squared."""
        return self.f * (2 - self.f)

    @property
    def ep2(self) -> float:
        """Second eccentricity squared."""
        return self.e2 / (1 - self.e2)

    @property
    def key(self) -> str:
        """Name with spaces replaced by underscores, as used in datum tables."""
        return self.name.replace(" ", "_")


_SPHEROID_TABLE: Dict[Spheroid, SpheroidParameters] = {
    Spheroid.CLARKE1866: SpheroidParameters("Clarke 1866", 6378206.4, 6356583.8, 294.9786982),
    Spheroid.CLARKE1880: SpheroidParameters("Clarke 1880", 6378249.145, 6356514.86955, 293.465),
    Spheroid.BESSEL: SpheroidParameters("Bessel", 6377397.155, 6356078.96284, 299.1528128),
    Spheroid.INT1967: SpheroidParameters("International 1967", 6378157.5, 6356772.2, 298.249615390),
    Spheroid.INT1909: SpheroidParameters("International 1909", 6378388.0, 6356911.94613, 297.0),
    Spheroid.WGS72: SpheroidParameters("WGS 72", 6378135.0, 6356750.519915, 298.26),
    Spheroid.EVEREST: SpheroidParameters("Everest", 6377276.3452, 6356075.4133, 300.8017),
    Spheroid.WGS66: SpheroidParameters("WGS 66", 6378145.0, 6356759.769356, 298.25),
    Spheroid.GRS1980: SpheroidParameters("GRS 1980", 6378137.0, 6356752.31414, 298.257222101),
    Spheroid.AIRY: SpheroidParameters("Airy", 6377563.396, 6356256.91, 299.3249646),
    Spheroid.MOD_EVEREST: SpheroidParameters("Modified Everest", 6377304.063, 6356103.039, 300.8017),
    Spheroid.MOD_AIRY: SpheroidParameters("Modified Airy", 6377340.189, 6356034.448, 299.3249646),
    Spheroid.WGS84: SpheroidParameters("WGS 84", 6378137.0, 6356752.314245, 298.257223563),
    Spheroid.SE_ASIA: SpheroidParameters("SouthEast Asia", 6378155.0, 6356773.3205, 298.3),
    Spheroid.AUS_NAT: SpheroidParameters("Australian National", 6378160.0, 6356774.719, 298.25),
    Spheroid.KRASS: SpheroidParameters("Krassovsky", 6378245.0, 6356863.0188, 298.3),
    Spheroid.HOUGH: SpheroidParameters("Hough", 6378270.0, 6356794.343479, 297.0),
    Spheroid.MERCURY1960: SpheroidParameters("Mercury 1960", 6378166.0, 6356784.283666, 298.3),
    Spheroid.MOD_MER1968: SpheroidParameters("Modified Mercury 1968", 6378150.0, 6356768.337303, 298.3),
    Spheroid.SPHERE: SpheroidParameters(
        "Sphere of radius 6370997 m",
        GeodeticConstants.STD_RADIUS.value,
        GeodeticConstants.STD_RADIUS.value,
        np.inf
    ),
}


def spheroid_parameters(code: int) -> SpheroidParameters:
    """Return the parameters for a spheroid code.

    Raises
    ------
    KeyError
        If the code is outside 0..19.
    """
    try:
        return _SPHEROID_TABLE[Spheroid(code)]
    except ValueError:
        raise KeyError(f"Unknown spheroid code {code}") from None


def all_spheroids() -> Tuple[SpheroidParameters, ...]:
    """All spheroids ordered by code."""
    return tuple(_SPHEROID_TABLE[s] for s in Spheroid)


def find_spheroid(semi_major: float, semi_minor: float) -> Optional[Spheroid]:
    """Identify a spheroid by its axis lengths.

    The closest table entry wins if the summed absolute difference of both
    axes is below ``SPHEROID_AXIS_TOLERANCE`` (0.02 m).

    Parameters
    ----------
    semi_major, semi_minor : float
        Axis lengths in meters.

    Returns
    -------
    Spheroid or None
        The matching code, or None if no spheroid is close enough.
    """
    best_code = None
    best_delta = np.inf
    for code, params in _SPHEROID_TABLE.items():
        delta = abs(params.a - semi_major) + abs(params.b - semi_minor)
        if delta < best_delta:
            best_delta = delta
            best_code = code
    if best_delta < SPHEROID_AXIS_TOLERANCE:
        return best_code
    return None


def find_spheroid_by_name(name: str) -> Optional[Spheroid]:
    """Identify a spheroid by name, ignoring case."""
    for code, params in _SPHEROID_TABLE.items():
        if params.name.lower() == name.lower():
            return code
    return None


def resolve_axes(spheroid: int, parameters: Sequence[float] = ()) -> Tuple[float, float, float]:
    """Resolve ellipsoid axes from a spheroid code or a parameter array.

    Negative codes take the axes from ``parameters[0]`` and
    ``parameters[1]``: a value above 1 in the second slot is a semi-minor
    axis, a value in (0, 1] is an eccentricity squared and zero means a
    sphere. With no usable semi-major axis the result is Clarke 1866 when
    the second slot is positive, otherwise the standard sphere. Codes
    beyond the table fall back to Clarke 1866.

    Returns
    -------
    Tuple[float, float, float]
        (semi_major, semi_minor, sphere_radius) in meters.
    """
    clarke = _SPHEROID_TABLE[Spheroid.CLARKE1866]
    sphere = _SPHEROID_TABLE[Spheroid.SPHERE]

    if spheroid < 0:
        t_major = abs(parameters[0]) if len(parameters) > 0 else 0.0
        t_minor = abs(parameters[1]) if len(parameters) > 1 else 0.0
        if t_major > 0:
            if t_minor > 1:
                return t_major, t_minor, t_major
            if t_minor > 0:
                return t_major, np.sqrt(1.0 - t_minor) * t_major, t_major
            return t_major, t_major, t_major
        if t_minor > 0:
            return clarke.a, clarke.b, clarke.a
        return sphere.a, sphere.a, sphere.a

    code = spheroid if spheroid < MAX_SPHEROIDS else Spheroid.CLARKE1866
    params = _SPHEROID_TABLE[Spheroid(code)]
    return params.a, params.b, sphere.a
