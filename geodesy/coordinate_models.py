"""
Earth-Centered-Fixed Coordinate Conversions on a Reference Ellipsoid.

This module converts between geodetic coordinates (latitude, longitude,
height above the ellipsoid) and Earth-Centered-Fixed (ECF) Cartesian
coordinates for any ellipsoid given by its semi-major axis and
eccentricity squared. All functions accept scalars or numpy arrays.

Scientific Context
------------------
Domain: Geodesy, Earth geometry
Model: Oblate ellipsoid of revolution

The ECF frame has:
- Origin at the ellipsoid center
- X-axis through the prime meridian (0° longitude) at the equator
- Y-axis through 90°E at the equator
- Z-axis through the North Pole

References
----------
- Torge, W. (2001). Geodesy (3rd ed.). de Gruyter.
- Bowring, B.R. (1976). Transformation from spatial to geographical
  coordinates. Survey Review, 23(181), 323-327.
"""

from typing import Tuple, Union
import numpy as np
from numpy.typing import NDArray

ArrayLike = Union[float, NDArray[np.float64]]


def radius_of_curvature_meridian(
    latitude_rad: ArrayLike,
    a: float,
    e2: float
) -> ArrayLike:
    """Compute the radius of curvature in the meridian plane.

    Notes
    -----
    M = a(1 - e²) / (1 - e² sin²φ)^(3/2)
    """
    sin_lat = np.sin(latitude_rad)
    return a * (1 - e2) / (1 - e2 * sin_lat**2) ** 1.5


def radius_of_curvature_prime_vertical(
    latitude_rad: ArrayLike,
    a: float,
    e2: float
) -> ArrayLike:
    """Compute the radius of curvature in the prime vertical.

    Notes
    -----
    N = a / (1 - e² sin²φ)^(1/2)
    """
    sin_lat = np.sin(latitude_rad)
    return a / np.sqrt(1 - e2 * sin_lat**2)


def geodetic_to_ecf(
    latitude_rad: ArrayLike,
    longitude_rad: ArrayLike,
    a: float,
    e2: float,
    altitude_m: ArrayLike = 0.0
) -> Tuple[ArrayLike, ArrayLike, ArrayLike]:
    """Convert geodetic coordinates to Earth-Centered-Fixed.

    Parameters
    ----------
    latitude_rad, longitude_rad : float or ndarray
        Geodetic coordinates in radians.
    a : float
        Semi-major axis in meters.
    e2 : float
        First eccentricity squared.
    altitude_m : float or ndarray
        Height above the ellipsoid in meters.

    Returns
    -------
    Tuple
        (X, Y, Z) in meters.
    """
    sin_lat = np.sin(latitude_rad)
    cos_lat = np.cos(latitude_rad)

    N = radius_of_curvature_prime_vertical(latitude_rad, a, e2)

    X = (N + altitude_m) * cos_lat * np.cos(longitude_rad)
    Y = (N + altitude_m) * cos_lat * np.sin(longitude_rad)
    Z = (N * (1 - e2) + altitude_m) * sin_lat

    return X, Y, Z


def ecf_to_geodetic(
    X: float,
    Y: float,
    Z: float,
    a: float,
    e2: float,
    max_iterations: int = 10,
    tolerance: float = 1e-12
) -> Tuple[float, float, float]:
    """Convert ECF coordinates to geodetic (latitude, longitude, altitude).

    Uses Bowring's iterative method for numerical stability.

    Parameters
    ----------
    X, Y, Z : float
        ECF coordinates in meters.
    a : float
        Semi-major axis in meters.
    e2 : float
        First eccentricity squared.
    max_iterations : int
        Maximum iterations for convergence.
    tolerance : float
        Convergence tolerance in radians.

    Returns
    -------
    Tuple[float, float, float]
        (latitude_rad, longitude_rad, altitude_m)

    Notes
    -----
    Bowring's method typically converges in 2-3 iterations for
    points on or near the ellipsoid surface.
    """
    longitude_rad = np.arctan2(Y, X)
    p = np.sqrt(X**2 + Y**2)
    b = a * np.sqrt(1 - e2)

    # Handle polar singularity
    if p < 1e-10:
        latitude_rad = np.sign(Z) * np.pi / 2
        altitude_m = np.abs(Z) - b
        return latitude_rad, longitude_rad, altitude_m

    latitude_rad = np.arctan2(Z, p * (1 - e2))

    for _ in range(max_iterations):
        sin_lat = np.sin(latitude_rad)
        N = radius_of_curvature_prime_vertical(latitude_rad, a, e2)
        latitude_new = np.arctan2(Z + e2 * N * sin_lat, p)
        if np.abs(latitude_new - latitude_rad) < tolerance:
            latitude_rad = latitude_new
            break
        latitude_rad = latitude_new

    sin_lat = np.sin(latitude_rad)
    cos_lat = np.cos(latitude_rad)
    N = radius_of_curvature_prime_vertical(latitude_rad, a, e2)

    if np.abs(cos_lat) > 1e-10:
        altitude_m = p / cos_lat - N
    else:
        altitude_m = np.abs(Z) / np.abs(sin_lat) - N * (1 - e2)

    return latitude_rad, longitude_rad, altitude_m
