"""
Ellipsoid Math Kernel shared by the Projection Family.

This module implements the scalar helper functions that nearly every map
projection relies on: eccentricity series coefficients for meridian-arc
length, the conformal and authalic auxiliary latitude functions and their
iterative inverses, longitude normalization and a domain-safe arcsine.

Scientific Context
------------------
Domain: Mathematical cartography, ellipsoidal geodesy
Model: Series expansions in the first eccentricity squared (e²)

Failure Convention
------------------
The functions here never raise for numeric reasons. Iterative solvers
return NaN when their iteration cap is exhausted, so that a projection can
flag that single point as NO_CONVERGENCE and a bulk grid transform can
carry on with the next point. Iteration caps and tolerances come from
``common.constants.ConvergenceConstants``.

Packed Angles
-------------
Legacy parameter arrays encode angles as packed degrees-minutes-seconds
(DDDMMMSSS.SS). ``paksz`` and ``pakcz`` decode them; malformed fields can
only appear while decoding configuration, so they raise
``MalformedTableError``.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
  Eqs. 3-21 (meridian distance), 7-9 (t), 14-15 (m), 3-12 (q).
- USGS General Cartographic Transformation Package (GCTP), cproj.c.
"""

from typing import Tuple
import numpy as np

from common.constants import (
    GeodeticConstants,
    ConvergenceConstants,
    SolverLimits,
)
from common.exceptions import MalformedTableError

EPSLN = GeodeticConstants.EPSLN
HALF_PI = GeodeticConstants.HALF_PI
TWO_PI = GeodeticConstants.TWO_PI
PI = np.pi
MAX_LONG = GeodeticConstants.MAX_LONG
DBL_LONG = GeodeticConstants.DBL_LONG


def sign(x: float) -> int:
    """Return -1 for negative values and 1 otherwise (zero is positive)."""
    return -1 if x < 0 else 1


def asinz(con: float) -> float:
    """Arcsine with the argument clamped to [-1, 1].

    Absorbs floating point overshoot at the domain boundary so that, for
    example, ``asinz(1.0000000000000002)`` is exactly pi/2.
    """
    if abs(con) > 1.0:
        con = 1.0 if con > 1.0 else -1.0
    return np.arcsin(con)


def msfnz(eccent: float, sinphi: float, cosphi: float) -> float:
    """Compute the constant m (Snyder eq. 14-15)."""
    con = eccent * sinphi
    return cosphi / np.sqrt(1.0 - con * con)


def qsfnz(eccent: float, sinphi: float, cosphi: float = 0.0) -> float:
    """Compute the authalic function q (Snyder eq. 3-12).

    Falls back to the spherical value ``2 sin(phi)`` for eccentricities
    below 1e-7. ``cosphi`` is accepted for signature compatibility with
    ``msfnz`` and is not used.
    """
    if eccent > 1.0e-7:
        con = eccent * sinphi
        return (1.0 - eccent * eccent) * (
            sinphi / (1.0 - con * con)
            - (0.5 / eccent) * np.log((1.0 - con) / (1.0 + con))
        )
    return 2.0 * sinphi


def tsfnz(eccent: float, phi: float, sinphi: float) -> float:
    """Compute the isometric function t (Snyder eq. 7-9)."""
    con = eccent * sinphi
    com = 0.5 * eccent
    con = ((1.0 - con) / (1.0 + con)) ** com
    return np.tan(0.5 * (HALF_PI - phi)) / con


def phi1z(
    eccent: float,
    qs: float,
    limits: SolverLimits = ConvergenceConstants.AUTHALIC_LATITUDE
) -> float:
    """Latitude from the authalic function q (Snyder eq. 3-16).

    Parameters
    ----------
    eccent : float
        First eccentricity e.
    qs : float
        Value of q for the sought latitude.
    limits : SolverLimits
        Convergence limits.

    Returns
    -------
    float
        Latitude in radians, or NaN if the iteration did not converge.
    """
    phi = asinz(0.5 * qs)
    if eccent < EPSLN:
        return phi
    eccnts = eccent * eccent
    for _ in range(limits.max_iterations):
        sinpi = np.sin(phi)
        cospi = np.cos(phi)
        con = eccent * sinpi
        com = 1.0 - con * con
        dphi = 0.5 * com * com / cospi * (
            qs / (1.0 - eccnts) - sinpi / com
            + 0.5 / eccent * np.log((1.0 - con) / (1.0 + con))
        )
        phi = phi + dphi
        if abs(dphi) <= limits.tolerance:
            return phi
    return np.nan


def phi2z(
    eccent: float,
    ts: float,
    limits: SolverLimits = ConvergenceConstants.CONFORMAL_LATITUDE
) -> float:
    """Latitude from the isometric function t (Snyder eq. 7-9 inverted).

    Returns
    -------
    float
        Latitude in radians, or NaN if the iteration did not converge.
    """
    eccnth = 0.5 * eccent
    phi = HALF_PI - 2.0 * np.arctan(ts)
    for _ in range(limits.max_iterations):
        sinpi = np.sin(phi)
        con = eccent * sinpi
        dphi = HALF_PI - 2.0 * np.arctan(ts * ((1.0 - con) / (1.0 + con)) ** eccnth) - phi
        phi += dphi
        if abs(dphi) <= limits.tolerance:
            return phi
    return np.nan


def phi3z(
    ml: float,
    e0: float,
    e1: float,
    e2: float,
    e3: float,
    limits: SolverLimits = ConvergenceConstants.DEFAULT
) -> float:
    """Latitude (footpoint) from the rectifying meridian distance ml.

    Returns
    -------
    float
        Latitude in radians, or NaN if the iteration did not converge.
    """
    phi = ml
    for _ in range(limits.max_iterations):
        dphi = (ml + e1 * np.sin(2.0 * phi) - e2 * np.sin(4.0 * phi)
                + e3 * np.sin(6.0 * phi)) / e0 - phi
        phi += dphi
        if abs(dphi) <= limits.tolerance:
            return phi
    return np.nan


def phi4z(
    es: float,
    e0: float,
    e1: float,
    e2: float,
    e3: float,
    a: float,
    b: float,
    limits: SolverLimits = ConvergenceConstants.DEFAULT
) -> Tuple[float, float]:
    """Latitude for the ellipsoidal Polyconic inverse (Snyder eq. 18-18).

    Parameters
    ----------
    es : float
        Eccentricity squared.
    e0, e1, e2, e3 : float
        Meridian distance series coefficients.
    a, b : float
        Snyder's A and B for the point being inverted.

    Returns
    -------
    Tuple[float, float]
        (latitude, c) where c = tan(phi) sqrt(1 - e² sin² phi). Both are
        NaN if the iteration did not converge.
    """
    phi = a
    c = np.nan
    for _ in range(limits.max_iterations):
        sinphi = np.sin(phi)
        tanphi = np.tan(phi)
        c = tanphi * np.sqrt(1.0 - es * sinphi * sinphi)
        sin2ph = np.sin(2.0 * phi)
        ml = e0 * phi - e1 * sin2ph + e2 * np.sin(4.0 * phi) - e3 * np.sin(6.0 * phi)
        mlp = (e0 - 2.0 * e1 * np.cos(2.0 * phi) + 4.0 * e2 * np.cos(4.0 * phi)
               - 6.0 * e3 * np.cos(6.0 * phi))
        con1 = 2.0 * ml + c * (ml * ml + b) - 2.0 * a * (c * ml + 1.0)
        con2 = es * sin2ph * (ml * ml + b - 2.0 * a * ml) / (2.0 * c)
        con3 = 2.0 * (a - ml) * (c * mlp - 2.0 / sin2ph) - 2.0 * mlp
        dphi = con1 / (con2 + con3)
        phi += dphi
        if abs(dphi) <= limits.tolerance:
            return phi, c
    return np.nan, np.nan


def e0fn(x: float) -> float:
    """First meridian distance series coefficient for e² = x."""
    return 1.0 - 0.25 * x * (1.0 + x / 16.0 * (3.0 + 1.25 * x))


def e1fn(x: float) -> float:
    """Second meridian distance series coefficient for e² = x."""
    return 0.375 * x * (1.0 + 0.25 * x * (1.0 + 0.46875 * x))


def e2fn(x: float) -> float:
    """Third meridian distance series coefficient for e² = x."""
    return 0.05859375 * x * x * (1.0 + 0.75 * x)


def e3fn(x: float) -> float:
    """Fourth meridian distance series coefficient for e² = x."""
    return x * x * x * (35.0 / 3072.0)


def e4fn(x: float) -> float:
    """Polar Stereographic constant sqrt((1+e)^(1+e) (1-e)^(1-e)) for e = x."""
    con = 1.0 + x
    com = 1.0 - x
    return np.sqrt((con ** con) * (com ** com))


def mlfn(e0: float, e1: float, e2: float, e3: float, phi: float) -> float:
    """Meridian distance from the equator to ``phi`` divided by a (Snyder eq. 3-21)."""
    return (e0 * phi - e1 * np.sin(2.0 * phi) + e2 * np.sin(4.0 * phi)
            - e3 * np.sin(6.0 * phi))


def adjust_lon(
    x: float,
    limits: SolverLimits = ConvergenceConstants.LONGITUDE_NORMALIZATION
) -> float:
    """Normalize a longitude in radians into (-pi, pi].

    Small overshoots are corrected by a single 2 pi step; larger values
    subtract the whole number of turns in one pass (in progressively
    coarser units for astronomically large inputs), so ordinary inputs
    settle within two passes.

    Parameters
    ----------
    x : float
        Longitude in radians.
    limits : SolverLimits
        Only ``max_iterations`` is used: the number of correction passes.

    Returns
    -------
    float
        Equivalent longitude in (-pi, pi], or NaN if ``x`` is not finite
        or did not settle within the pass limit.

    Examples
    --------
    >>> adjust_lon(3 * np.pi) == np.pi
    True
    """
    for _ in range(limits.max_iterations + 1):
        if -PI < x <= PI:
            return x
        turns = abs(x / PI)
        if not np.isfinite(turns):
            return np.nan
        if turns < 2:
            x = x - sign(x) * TWO_PI
        elif abs(x / TWO_PI) < MAX_LONG:
            x = x - np.trunc(x / TWO_PI) * TWO_PI
        elif abs(x / (MAX_LONG * TWO_PI)) < MAX_LONG:
            x = x - np.trunc(x / (MAX_LONG * TWO_PI)) * (TWO_PI * MAX_LONG)
        elif abs(x / (DBL_LONG * TWO_PI)) < MAX_LONG:
            x = x - np.trunc(x / (DBL_LONG * TWO_PI)) * (TWO_PI * DBL_LONG)
        else:
            x = x - sign(x) * TWO_PI
    return np.nan


def calc_utm_zone(lon_deg: float) -> int:
    """UTM zone number (1..60) containing a longitude in degrees."""
    return int(((lon_deg + 180.0) / 6.0) + 1.0)


def paksz(ang: float) -> float:
    """Convert a packed DDDMMMSSS.SS angle to decimal degrees.

    Raises
    ------
    MalformedTableError
        If the degree field exceeds 360, or the minute or second field
        exceeds 60 (legacy error 1116).
    """
    fac = -1.0 if ang < 0.0 else 1.0
    sec = abs(ang)
    deg = int(sec / 1000000.0)
    if deg > 360:
        raise MalformedTableError(f"Illegal DMS degree field in packed angle {ang} (error 1116)")
    sec = sec - deg * 1000000.0
    mins = int(sec / 1000.0)
    if mins > 60:
        raise MalformedTableError(f"Illegal DMS minute field in packed angle {ang} (error 1116)")
    sec = sec - mins * 1000.0
    if sec > 60:
        raise MalformedTableError(f"Illegal DMS second field in packed angle {ang} (error 1116)")
    sec = fac * (deg * 3600.0 + mins * 60.0 + sec)
    return sec / 3600.0


def pakcz(pak: float) -> float:
    """Convert a packed DDDMMSS.SS angle to packed DDDMMMSSS.SS."""
    con = abs(pak)
    degs = int((con / 10000.0) + 0.001)
    con = con - degs * 10000
    mins = int((con / 100.0) + 0.001)
    secs = con - mins * 100
    con = degs * 1000000.0 + mins * 1000.0 + secs
    return -con if pak < 0.0 else con


def pakr2dm(pak: float) -> float:
    """Convert radians to packed DDDMMMSSS.SS."""
    pak = pak * GeodeticConstants.R2D
    con = abs(pak)
    degs = int(con)
    con = (con - degs) * 60
    mins = int(con)
    secs = (con - mins) * 60
    con = degs * 1000000.0 + mins * 1000.0 + secs
    return -con if pak < 0.0 else con


def pack_angle(angle: float) -> float:
    """Pack decimal degrees into DDDMMMSSS.SS."""
    degrees = int(angle)
    minutes = int(angle * 60 - degrees * 60)
    seconds = angle * 3600 - degrees * 3600 - minutes * 60
    return degrees * 1000000 + minutes * 1000 + seconds


def unpack_angle(angle: float) -> float:
    """Unpack DDDMMMSSS.SS into decimal degrees."""
    whole = int(angle)
    degrees = int(whole / 1000000)
    minutes = int(whole / 1000) - degrees * 1000
    seconds = angle - degrees * 1000000 - minutes * 1000
    return degrees + minutes / 60.0 + seconds / 3600.0
