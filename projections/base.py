"""
Projection Capability Interface.

Every map projection in the library implements the ``Projection`` abstract
base class: a forward transform from geographic coordinates to projected
plane coordinates, the matching inverse, a parameter report and, where
PROJ knows the same projection, a PROJ definition for cross-checking.

Projections are self-contained and immutable once constructed. All
parameter checking and precomputation happens in ``__init__``; forward
and inverse only read instance state, so a single instance can be used
from several threads at once.

Failure Model
-------------
Construction with inconsistent parameters raises
``ProjectionParameterError``. Per-point failures never raise: forward and
inverse return a point whose coordinates are NaN and whose ``status``
names the geometric cause. A solver that exhausts its iteration cap
reports ``NO_CONVERGENCE`` so it stays distinguishable from a cleanly
detected domain failure.

Units
-----
- ``forward``/``inverse``: radians in, meters out (and back).
- ``forward_deg``/``inverse_deg``: the same in degrees.
- Axes, false easting/northing and heights accept floats in meters or
  pint length quantities.
"""

from abc import ABC, abstractmethod
import logging
from enum import IntEnum
from typing import ClassVar, Dict, List, NamedTuple, Optional, Tuple
import numpy as np
from numpy.typing import NDArray

from pyproj import CRS

from common.logging_config import get_logger, report_parameters
from common.exceptions import ProjectionParameterError, UnsupportedOperationError
from common.units import Length, to_magnitude
from projections.registry import ProjectionCode, projection_name

logger = get_logger(__name__)


class ProjectionStatus(IntEnum):
    """Outcome of a single forward or inverse call."""
    OK = 0
    PROJECTS_TO_INFINITY = 1
    POINT_NOT_PROJECTABLE = 2
    OUTSIDE_DOMAIN = 3
    NO_CONVERGENCE = 4


class ProjectedPoint(NamedTuple):
    """Projected plane coordinates in meters."""
    x: float
    y: float
    status: ProjectionStatus = ProjectionStatus.OK

    @property
    def ok(self) -> bool:
        return self.status == ProjectionStatus.OK


class GeographicPoint(NamedTuple):
    """Geographic coordinates (radians or degrees, depending on the call)."""
    lat: float
    lon: float
    status: ProjectionStatus = ProjectionStatus.OK

    @property
    def ok(self) -> bool:
        return self.status == ProjectionStatus.OK


def projected_failure(status: ProjectionStatus) -> ProjectedPoint:
    return ProjectedPoint(np.nan, np.nan, status)


def geographic_failure(status: ProjectionStatus) -> GeographicPoint:
    return GeographicPoint(np.nan, np.nan, status)


def _checked(point, failure):
    """Demote results with non-finite coordinates to a failure."""
    if point.status != ProjectionStatus.OK:
        return failure(point.status)
    if not (np.isfinite(point[0]) and np.isfinite(point[1])):
        return failure(ProjectionStatus.POINT_NOT_PROJECTABLE
                       if np.isnan(point[0]) or np.isnan(point[1])
                       else ProjectionStatus.PROJECTS_TO_INFINITY)
    return point


class Projection(ABC):
    """Abstract base class for map projections.

    Subclasses set the ``code`` class attribute, call
    ``super().__init__`` with their ellipsoid axes, validate and
    precompute their own parameters, record them with
    ``_set_parameters`` and implement ``_forward`` and ``_inverse``.

    Parameters
    ----------
    semi_major : float or pint.Quantity
        Semi-major axis, meters when a bare float.
    semi_minor : float or pint.Quantity
        Semi-minor axis, meters when a bare float. Equal to
        ``semi_major`` for a sphere.
    """

    code: ClassVar[ProjectionCode]
    title: ClassVar[str] = ""

    def __init__(self, semi_major: Length, semi_minor: Optional[Length] = None):
        a = to_magnitude(semi_major, "m")
        b = a if semi_minor is None else to_magnitude(semi_minor, "m")
        if not a > 0 or not b > 0:
            raise ProjectionParameterError(
                f"Ellipsoid axes must be positive, got a={a}, b={b}"
            )
        if b > a:
            raise ProjectionParameterError(
                f"Semi-minor axis {b} exceeds semi-major axis {a}"
            )
        self._semi_major = a
        self._semi_minor = b
        self._es = 1.0 - (b / a) ** 2
        self._e = np.sqrt(self._es)
        self._parameters: Dict[str, float] = {}

    # ------------------------------------------------------------------
    # Identity and parameters
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        """Display name of the projection system."""
        return projection_name(self.code)

    @property
    def semi_major(self) -> float:
        return self._semi_major

    @property
    def semi_minor(self) -> float:
        return self._semi_minor

    @property
    def es(self) -> float:
        """Eccentricity squared."""
        return self._es

    @property
    def is_spherical(self) -> bool:
        return self._semi_major == self._semi_minor

    @property
    def parameters(self) -> Dict[str, float]:
        """Decoded construction parameters (angles in radians, lengths in meters)."""
        return dict(self._parameters)

    def _set_parameters(self, **values):
        self._parameters = {key: value for key, value in values.items()}

    def _report_lines(self) -> List[Tuple[str, str]]:
        """Label/value pairs for the parameter report."""
        lines = []
        if self.is_spherical:
            lines.append(("Radius of Sphere (meters)", f"{self._semi_major:.6f}"))
        else:
            lines.append(("Semi-Major Axis of Ellipsoid", f"{self._semi_major:.6f}"))
            lines.append(("Semi-Minor Axis of Ellipsoid", f"{self._semi_minor:.6f}"))
        for key, value in self._parameters.items():
            if key in ("semi_major", "semi_minor", "radius"):
                continue
            label = key.replace("_", " ").title()
            if isinstance(value, float) and (key.startswith(("center_", "lat", "lon", "azimuth", "angle", "alpha"))):
                lines.append((label, f"{np.degrees(value):.6f} degrees"))
            else:
                lines.append((label, f"{value}"))
        return lines

    def describe(self) -> str:
        """Multi-line parameter report (also logged at DEBUG)."""
        return report_parameters(logger, (self.title or self.name).upper(), self._report_lines())

    def _log_parameters(self):
        if logger.isEnabledFor(logging.DEBUG):
            self.describe()

    # ------------------------------------------------------------------
    # PROJ cross reference
    # ------------------------------------------------------------------

    @property
    def proj4_string(self) -> Optional[str]:
        """PROJ definition of the same projection, or None if PROJ has none."""
        return None

    def _ellipsoid_proj4(self) -> str:
        if self.is_spherical:
            return f"+R={float(self._semi_major)!r}"
        return f"+a={float(self._semi_major)!r} +b={float(self._semi_minor)!r}"

    def _build_proj4(self, proj: str, **terms) -> str:
        """PROJ definition from a projection name and numeric terms (degrees, meters)."""
        parts = [f"+proj={proj}"]
        parts.extend(f"+{key}={float(value)!r}" for key, value in terms.items())
        parts.append(self._ellipsoid_proj4())
        parts.append("+units=m +no_defs")
        return " ".join(parts)

    def to_crs(self) -> CRS:
        """Equivalent pyproj CRS.

        Raises
        ------
        UnsupportedOperationError
            If PROJ has no equivalent projection.
        """
        proj4 = self.proj4_string
        if proj4 is None:
            raise UnsupportedOperationError(f"{self.name} has no PROJ equivalent")
        return CRS.from_proj4(proj4)

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    @abstractmethod
    def _forward(self, lat: float, lon: float) -> ProjectedPoint:
        """Projection specific forward transform on finite input."""
        pass

    @abstractmethod
    def _inverse(self, x: float, y: float) -> GeographicPoint:
        """Projection specific inverse transform on finite input."""
        pass

    def forward(self, lat: float, lon: float) -> ProjectedPoint:
        """Project geographic coordinates.

        Parameters
        ----------
        lat, lon : float
            Geodetic latitude and longitude in radians.

        Returns
        -------
        ProjectedPoint
            (x, y) in meters, or NaN with a failure status.
        """
        if not (np.isfinite(lat) and np.isfinite(lon)):
            return projected_failure(ProjectionStatus.POINT_NOT_PROJECTABLE)
        if abs(lat) > np.pi / 2 + 1.0e-10:
            return projected_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        with np.errstate(all="ignore"):
            try:
                point = self._forward(float(lat), float(lon))
            except (ZeroDivisionError, OverflowError) as e:
                logger.debug(f"{self.name} forward failed at ({lat}, {lon}): {e}")
                return projected_failure(ProjectionStatus.PROJECTS_TO_INFINITY)
        return _checked(point, projected_failure)

    def inverse(self, x: float, y: float) -> GeographicPoint:
        """Recover geographic coordinates from projected coordinates.

        Parameters
        ----------
        x, y : float
            Projected coordinates in meters.

        Returns
        -------
        GeographicPoint
            (lat, lon) in radians, or NaN with a failure status.
        """
        if not (np.isfinite(x) and np.isfinite(y)):
            return geographic_failure(ProjectionStatus.POINT_NOT_PROJECTABLE)
        with np.errstate(all="ignore"):
            try:
                point = self._inverse(float(x), float(y))
            except (ZeroDivisionError, OverflowError) as e:
                logger.debug(f"{self.name} inverse failed at ({x}, {y}): {e}")
                return geographic_failure(ProjectionStatus.POINT_NOT_PROJECTABLE)
        return _checked(point, geographic_failure)

    def forward_deg(self, lat: float, lon: float) -> ProjectedPoint:
        """Forward transform with latitude and longitude in degrees."""
        return self.forward(np.radians(lat), np.radians(lon))

    def inverse_deg(self, x: float, y: float) -> GeographicPoint:
        """Inverse transform returning latitude and longitude in degrees."""
        lat, lon, status = self.inverse(x, y)
        if status != ProjectionStatus.OK:
            return geographic_failure(status)
        return GeographicPoint(float(np.degrees(lat)), float(np.degrees(lon)), status)

    def forward_arrays(
        self,
        lats: NDArray[np.float64],
        lons: NDArray[np.float64],
        out_x: NDArray[np.float64],
        out_y: NDArray[np.float64]
    ) -> NDArray[np.int8]:
        """Bulk forward transform into caller buffers.

        Parameters
        ----------
        lats, lons : ndarray
            Input coordinates in radians, any matching shape.
        out_x, out_y : ndarray
            Output buffers of the same shape, overwritten.

        Returns
        -------
        ndarray
            Per-point ``ProjectionStatus`` values.
        """
        status = np.zeros(np.shape(lats), dtype=np.int8)
        flat_status = status.reshape(-1)
        for i, (lat, lon) in enumerate(zip(np.ravel(lats), np.ravel(lons))):
            x, y, flat_status[i] = self.forward(lat, lon)
            out_x.flat[i] = x
            out_y.flat[i] = y
        return status

    def inverse_arrays(
        self,
        xs: NDArray[np.float64],
        ys: NDArray[np.float64],
        out_lat: NDArray[np.float64],
        out_lon: NDArray[np.float64]
    ) -> NDArray[np.int8]:
        """Bulk inverse transform into caller buffers (radians out)."""
        status = np.zeros(np.shape(xs), dtype=np.int8)
        flat_status = status.reshape(-1)
        for i, (x, y) in enumerate(zip(np.ravel(xs), np.ravel(ys))):
            lat, lon, flat_status[i] = self.inverse(x, y)
            out_lat.flat[i] = lat
            out_lon.flat[i] = lon
        return status

    def __repr__(self) -> str:
        return f"{type(self).__name__}(a={self._semi_major}, b={self._semi_minor})"


def require(condition: bool, message: str, code: Optional[int] = None):
    """Raise ``ProjectionParameterError`` unless ``condition`` holds."""
    if not condition:
        logger.warning(message if code is None else f"{message} (error {code})")
        raise ProjectionParameterError(message, code)
