"""
Geographic (plate carree in degrees) projection.

Projected x is longitude and y is latitude, both in degrees. A grid laid
out in longitude may cover the antimeridian, so the projection carries a
``LongitudeRange`` that says which 360 degree window forward longitudes
are brought into before they reach the grid affine. ``MapProjection``
derives the range from its affine and rebuilds the projection whenever
the affine changes (subset, re-centering).
"""

from enum import Enum
from typing import Tuple
import numpy as np

from common.types import EarthLocation
from common.units import Length
from geodesy.ellipsoid_math import adjust_lon
from projections.base import (
    GeographicPoint,
    Projection,
    ProjectedPoint,
    ProjectionStatus,
    geographic_failure,
    logger,
    require,
)
from projections.registry import ProjectionCode, register_projection


class LongitudeRange(Enum):
    """Longitude window covered by a geographic grid."""
    SPANS_PRIME = "[-180, 180)"
    SPANS_ANTI_POSITIVE = "[0, 360)"
    SPANS_ANTI_NEGATIVE = "[-360, 0)"
    SPANS_PRIME_ANTI_POSITIVE = "[alpha, alpha+360)"
    SPANS_PRIME_ANTI_NEGATIVE = "[alpha-360, alpha)"


def classify_longitude_range(min_lon: float, max_lon: float) -> Tuple[LongitudeRange, float]:
    """Classify a grid's longitude extent.

    Parameters
    ----------
    min_lon, max_lon : float
        Western and eastern grid edges in degrees. Spans wider than 360
        degrees are cut back to 360.

    Returns
    -------
    Tuple[LongitudeRange, float]
        The range and its ``alpha`` edge in degrees (0 for the fixed
        windows).

    Raises
    ------
    ProjectionParameterError
        If the extent fits none of the five windows.
    """
    if max_lon - min_lon > 360:
        max_lon = min_lon + 360
    if -180 <= min_lon <= 180 and -180 <= max_lon <= 180:
        return LongitudeRange.SPANS_PRIME, 0.0
    if 0 <= min_lon <= 180 and 180 <= max_lon <= 360:
        return LongitudeRange.SPANS_ANTI_POSITIVE, 0.0
    if -360 <= min_lon <= -180 and -180 <= max_lon <= 0:
        return LongitudeRange.SPANS_ANTI_NEGATIVE, 0.0
    if min_lon <= 0 and max_lon >= 180:
        return LongitudeRange.SPANS_PRIME_ANTI_POSITIVE, float(min_lon)
    if min_lon <= -180 and max_lon >= 0:
        return LongitudeRange.SPANS_PRIME_ANTI_NEGATIVE, float(max_lon)
    require(False, f"Unsupported geographic longitude extent [{min_lon}, {max_lon}]")


@register_projection
class GeographicProjection(Projection):
    """Identity projection from radians to degrees.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Axes of the ellipsoid the coordinates refer to.
    longitude_range : LongitudeRange
        Window forward longitudes are wrapped into.
    alpha : float
        Window edge in degrees for the two ``SPANS_PRIME_ANTI`` ranges.
    """

    code = ProjectionCode.GEO

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        longitude_range: LongitudeRange = LongitudeRange.SPANS_PRIME,
        alpha: float = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        self._range = LongitudeRange(longitude_range)
        self._alpha = float(alpha)
        self._log_parameters()

    @property
    def longitude_range(self) -> LongitudeRange:
        return self._range

    @property
    def alpha(self) -> float:
        return self._alpha

    def with_longitude_extent(self, min_lon: float, max_lon: float) -> "GeographicProjection":
        """Same ellipsoid, range classified from a longitude extent in degrees."""
        lon_range, alpha = classify_longitude_range(min_lon, max_lon)
        logger.debug(f"Longitude range type is {lon_range.name} with alpha = {alpha}")
        return GeographicProjection(self._semi_major, self._semi_minor, lon_range, alpha)

    def _report_lines(self):
        lines = super()._report_lines()
        lines.append(("Longitude Range", f"{self._range.name} {self._range.value}"))
        if self._range in (LongitudeRange.SPANS_PRIME_ANTI_POSITIVE,
                           LongitudeRange.SPANS_PRIME_ANTI_NEGATIVE):
            lines.append(("Alpha", f"{self._alpha:.6f} degrees"))
        return lines

    @property
    def proj4_string(self):
        return f"+proj=longlat {self._ellipsoid_proj4()} +no_defs"

    def wrap_longitude(self, lon: float) -> float:
        """Bring a longitude in degrees into this projection's window."""
        lon = (lon + 180.0) % 360.0 - 180.0
        if self._range is LongitudeRange.SPANS_ANTI_POSITIVE:
            if lon < 0:
                lon += 360
        elif self._range is LongitudeRange.SPANS_ANTI_NEGATIVE:
            if lon >= 0:
                lon -= 360
        elif self._range is LongitudeRange.SPANS_PRIME_ANTI_POSITIVE:
            if lon < self._alpha:
                lon += 360
        elif self._range is LongitudeRange.SPANS_PRIME_ANTI_NEGATIVE:
            if lon >= self._alpha:
                lon -= 360
        return lon

    def is_boundary_cut(self, a: EarthLocation, b: EarthLocation) -> bool:
        """True if the segment from ``a`` to ``b`` crosses the grid's longitude seam."""
        if a.is_east(b):
            east, west = a, b
        else:
            east, west = b, a
        if self._range is LongitudeRange.SPANS_PRIME:
            return west.lon > east.lon
        if self._range in (LongitudeRange.SPANS_ANTI_POSITIVE, LongitudeRange.SPANS_ANTI_NEGATIVE):
            return west.lon < 0 <= east.lon
        return west.lon < self._alpha <= east.lon

    def _forward(self, lat, lon):
        return ProjectedPoint(self.wrap_longitude(np.degrees(lon)), float(np.degrees(lat)))

    def _inverse(self, x, y):
        if abs(y) > 90.0:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        return GeographicPoint(float(np.radians(y)), adjust_lon(np.radians(x)))
