"""
Geodetic Constants and Solver Limits for Earth Transforms.

This module provides the numeric constants shared by the ellipsoid math
kernel, the projection family and the spatial index, together with the
convergence limits of every iterative solver in the library. All values
are documented with units and traceable to authoritative sources.

Solver limits live here rather than next to each solver so that the
non-convergence failure mode is consistent across the library and can be
tightened or relaxed in a single place (for example from a test).

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
- USGS General Cartographic Transformation Package (GCTP), version 2.0.2.
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
"""

from dataclasses import dataclass
from typing import Final
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A numeric constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


@dataclass(frozen=True)
class SolverLimits:
    """Convergence limits for one iterative solver.

    Attributes
    ----------
    tolerance : float
        Stop once successive estimates differ by less than this amount
        (radians for latitude solvers, meters for Robinson).
    max_iterations : int
        Hard iteration cap. Exhausting it is a per-point failure.
    """
    tolerance: float
    max_iterations: int

    def __post_init__(self):
        if self.tolerance <= 0:
            raise ValueError(f"Solver tolerance must be positive, got {self.tolerance}")
        if self.max_iterations < 1:
            raise ValueError(f"Solver needs at least one iteration, got {self.max_iterations}")


class GeodeticConstants:
    """Registry of geodetic constants used throughout the library.

    Earth Geometry
    --------------
    The standard sphere radius is the authalic radius of the Clarke 1866
    ellipsoid used by GCTP for sphere-only projections and for haversine
    distances between Earth locations.

    Angular Constants
    -----------------
    Plain floats used directly by the numeric kernel.
    """

    # =========================================================================
    # Earth Geometry
    # =========================================================================

    STD_RADIUS: Final[Constant] = Constant(
        value=6_370_997.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="USGS GCTP, Snyder (1987) p. 16",
        description="Radius of the standard sphere (authalic Clarke 1866)"
    )

    WGS84_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    WGS84_INVERSE_FLATTENING: Final[Constant] = Constant(
        value=298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Inverse flattening of WGS84 ellipsoid: 1/f"
    )

    # =========================================================================
    # Angular and numeric constants (GCTP cproj.h)
    # =========================================================================

    EPSLN: Final[float] = 1.0e-10
    HALF_PI: Final[float] = np.pi * 0.5
    TWO_PI: Final[float] = np.pi * 2.0
    D2R: Final[float] = np.pi / 180.0
    R2D: Final[float] = 180.0 / np.pi
    C3P: Final[float] = 0.49238743984
    MAX_LONG: Final[float] = 2147483647.0
    DBL_LONG: Final[float] = 4.61168601e18


class ConvergenceConstants:
    """Registry of iterative solver limits.

    Each entry names the solver family it bounds. Functions that iterate
    take a ``limits`` argument defaulting to the entry listed here.
    """

    DEFAULT: Final[SolverLimits] = SolverLimits(tolerance=1.0e-10, max_iterations=15)

    # phi1z: authalic latitude to geodetic latitude
    AUTHALIC_LATITUDE: Final[SolverLimits] = SolverLimits(tolerance=1.0e-7, max_iterations=25)

    # phi2z: isometric (conformal) latitude to geodetic latitude
    CONFORMAL_LATITUDE: Final[SolverLimits] = SolverLimits(tolerance=1.0e-10, max_iterations=16)

    # adjust_lon normalization passes; tolerance unused
    LONGITUDE_NORMALIZATION: Final[SolverLimits] = SolverLimits(tolerance=1.0e-10, max_iterations=4)

    # Newton-Raphson auxiliary angle for Mollweide and Wagner IV
    NEWTON_PSEUDOCYLINDRICAL: Final[SolverLimits] = SolverLimits(tolerance=1.0e-10, max_iterations=50)

    # Robinson inverse (tolerance on the y coordinate in meters)
    ROBINSON: Final[SolverLimits] = SolverLimits(tolerance=1.0e-5, max_iterations=75)

    # Space Oblique Mercator transformed longitude
    SPACE_OBLIQUE_FORWARD: Final[SolverLimits] = SolverLimits(tolerance=1.0e-7, max_iterations=50)
    SPACE_OBLIQUE_INVERSE: Final[SolverLimits] = SolverLimits(tolerance=1.0e-9, max_iterations=50)

    # Footpoint latitude for the ellipsoidal UTM inverse
    TRANSVERSE_MERCATOR_INVERSE: Final[SolverLimits] = SolverLimits(tolerance=1.0e-10, max_iterations=6)

    # Alaska Conformal inverse: complex Newton step and conformal latitude
    ALASKA_CONFORMAL: Final[SolverLimits] = SolverLimits(tolerance=1.0e-10, max_iterations=20)


# Spheroid identification by axis lengths (meters)
SPHEROID_AXIS_TOLERANCE: Final[float] = 0.02

# Relative tolerance used when comparing projection parameters
PARAMETER_RELATIVE_TOLERANCE: Final[float] = 1.0e-10
