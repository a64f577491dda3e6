"""
Azimuthal Projections.

Stereographic, Polar Stereographic, Lambert Azimuthal Equal Area,
Azimuthal Equidistant, Gnomonic, Orthographic and General Vertical
Near-Side Perspective.

Apart from Polar Stereographic these are spherical. They share one
inverse pattern: find the angular distance ``z`` of a point from the
projection center from its radius on the plane, then recover latitude and
longitude by spherical trigonometry. ``_azimuthal_inverse`` implements that
shared tail.

The two perspective projections (Orthographic and General Vertical
Near-Side Perspective) only show one side of the globe. They trace the
visible limb at construction and expose it through ``boundary()``.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual.
  Chapters 21 (Stereographic), 22 (Orthographic), 23 (Perspective),
  24 (Lambert Azimuthal Equal Area), 25 (Azimuthal Equidistant),
  22 (Gnomonic).
"""

from typing import List, Tuple
import numpy as np

from common.exceptions import ConvergenceError
from common.units import Length, to_magnitude
from geodesy.ellipsoid_math import (
    EPSLN,
    HALF_PI,
    PI,
    adjust_lon,
    asinz,
    e4fn,
    msfnz,
    phi2z,
    tsfnz,
)
from projections.base import (
    GeographicPoint,
    Projection,
    ProjectedPoint,
    ProjectionStatus,
    geographic_failure,
    logger,
    projected_failure,
    require,
)
from projections.registry import ProjectionCode, register_projection

BOUNDARY_POINTS = 720


def _azimuthal_inverse(x, y, rh, sin_z, cos_z, lon_center, lat_center, sin_p, cos_p):
    """Latitude and longitude from the angular distance to the center.

    ``x`` and ``y`` have the false offsets already removed and ``rh`` is
    their distance from the origin.
    """
    if abs(rh) <= EPSLN:
        return GeographicPoint(lat_center, lon_center)
    lat = asinz(cos_z * sin_p + (y * sin_z * cos_p) / rh)
    if abs(abs(lat_center) - HALF_PI) <= EPSLN:
        if lat_center >= 0.0:
            return GeographicPoint(lat, adjust_lon(lon_center + np.arctan2(x, -y)))
        return GeographicPoint(lat, adjust_lon(lon_center - np.arctan2(-x, y)))
    con = cos_z - sin_p * np.sin(lat)
    if abs(con) < EPSLN and abs(x) < EPSLN:
        return GeographicPoint(lat, lon_center)
    return GeographicPoint(lat, adjust_lon(lon_center + np.arctan2(x * sin_z * cos_p, con * rh)))


class _SphericalAzimuthal(Projection):
    """Common construction for the spherical azimuthal family.

    Parameters
    ----------
    radius : float or pint.Quantity
        Sphere radius.
    center_lon, center_lat : float
        Projection center in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.
    """

    def __init__(
        self,
        radius: Length,
        center_lon: float = 0.0,
        center_lat: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0,
        **extra
    ):
        super().__init__(radius)
        self._r = self._semi_major
        self._lon_center = center_lon
        self._lat_center = center_lat
        self._sin_p = np.sin(center_lat)
        self._cos_p = np.cos(center_lat)
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")
        self._set_parameters(
            center_lon=center_lon, center_lat=center_lat, **extra,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )

    def _center_terms(self):
        return dict(lat_0=np.degrees(self._lat_center), lon_0=np.degrees(self._lon_center),
                    x_0=self._false_easting, y_0=self._false_northing)

    def _cos_angle(self, lat, lon):
        """Cosine of the angular distance from the center, with the longitude difference."""
        dlon = adjust_lon(lon - self._lon_center)
        sin_phi, cos_phi = np.sin(lat), np.cos(lat)
        cos_lon = np.cos(dlon)
        g = self._sin_p * sin_phi + self._cos_p * cos_phi * cos_lon
        return g, dlon, sin_phi, cos_phi, cos_lon

    def _scaled(self, ksp, dlon, sin_phi, cos_phi, cos_lon):
        return ProjectedPoint(
            self._false_easting + self._r * ksp * cos_phi * np.sin(dlon),
            self._false_northing + self._r * ksp * (self._cos_p * sin_phi
                                                    - self._sin_p * cos_phi * cos_lon),
        )

    def _finish_inverse(self, x, y, rh, z):
        return _azimuthal_inverse(x, y, rh, np.sin(z), np.cos(z), self._lon_center,
                                  self._lat_center, self._sin_p, self._cos_p)


class _LimbBounded:
    """Mixin for perspective projections that trace their visible limb."""

    def _trace_boundary(self, max_radius: float) -> List[Tuple[float, float]]:
        """Inverse project a closed ring of points just inside ``max_radius``.

        Raises
        ------
        ConvergenceError
            If any point of the ring fails to invert.
        """
        vertices = []
        dtheta = 2.0 * PI / BOUNDARY_POINTS
        for index in range(BOUNDARY_POINTS + 1):
            theta = dtheta * index
            x = max_radius * np.cos(theta)
            y = max_radius * np.sin(theta)
            lat, lon, status = self.inverse(x + self._false_easting, y + self._false_northing)
            if status != ProjectionStatus.OK:
                logger.error(f"{self.name} boundary trace failed at theta = {np.degrees(theta)}")
                raise ConvergenceError(
                    f"Error computing {self.name} boundary at theta = {np.degrees(theta)} "
                    f"and (x, y) = ({x}, {y}): {status.name}"
                )
            vertices.append((float(np.degrees(lat)), float(np.degrees(lon))))
        return vertices

    def boundary(self) -> List[Tuple[float, float]]:
        """Closed polygon of the visible limb as (lat, lon) degree pairs."""
        return list(self._boundary)


@register_projection
class Stereographic(_SphericalAzimuthal):
    """Stereographic (sphere). The antipode of the center projects to infinity."""

    code = ProjectionCode.STEREO

    def __init__(self, radius, center_lon=0.0, center_lat=0.0, false_easting=0.0, false_northing=0.0):
        super().__init__(radius, center_lon, center_lat, false_easting, false_northing)
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4("stere", k_0=1.0, **self._center_terms())

    def _forward(self, lat, lon):
        g, dlon, sin_phi, cos_phi, cos_lon = self._cos_angle(lat, lon)
        if abs(g + 1.0) <= EPSLN:
            return projected_failure(ProjectionStatus.PROJECTS_TO_INFINITY)
        return self._scaled(2.0 / (1.0 + g), dlon, sin_phi, cos_phi, cos_lon)

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        rh = np.hypot(x, y)
        return self._finish_inverse(x, y, rh, 2.0 * np.arctan(rh / (2.0 * self._r)))


@register_projection
class PolarStereographic(Projection):
    """Polar Stereographic on the ellipsoid.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    center_lon : float
        Longitude down below the pole, in radians.
    center_lat : float
        Latitude of true scale in radians. Its sign selects the north or
        south polar aspect; a pole gives true scale at the pole itself.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.
    """

    code = ProjectionCode.PS

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        center_lon: float = 0.0,
        center_lat: float = HALF_PI,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        self._lon_center = center_lon
        self._lat_center = center_lat
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")
        self._fac = -1.0 if center_lat < 0 else 1.0
        self._e4 = e4fn(self._e)
        self._true_scale_at_pole = abs(abs(center_lat) - HALF_PI) <= EPSLN
        if not self._true_scale_at_pole:
            con1 = self._fac * center_lat
            sin_phi, cos_phi = np.sin(con1), np.cos(con1)
            self._mcs = msfnz(self._e, sin_phi, cos_phi)
            self._tcs = tsfnz(self._e, con1, sin_phi)
            require(self._tcs > 0, "Latitude of true scale gives a degenerate cone")

        self._set_parameters(
            center_lon=center_lon, center_lat=center_lat,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4(
            "stere", lat_0=90.0 * self._fac, lat_ts=np.degrees(self._lat_center),
            lon_0=np.degrees(self._lon_center),
            x_0=self._false_easting, y_0=self._false_northing,
        )

    def _radius(self, ts):
        if self._true_scale_at_pole:
            return 2.0 * self._semi_major * ts / self._e4
        return self._semi_major * self._mcs * ts / self._tcs

    def _forward(self, lat, lon):
        fac = self._fac
        con1 = fac * adjust_lon(lon - self._lon_center)
        con2 = fac * lat
        rh = self._radius(tsfnz(self._e, con2, np.sin(con2)))
        return ProjectedPoint(
            fac * rh * np.sin(con1) + self._false_easting,
            -fac * rh * np.cos(con1) + self._false_northing,
        )

    def _inverse(self, x, y):
        fac = self._fac
        x = (x - self._false_easting) * fac
        y = (y - self._false_northing) * fac
        rh = np.hypot(x, y)
        if self._true_scale_at_pole:
            ts = rh * self._e4 / (self._semi_major * 2.0)
        else:
            ts = rh * self._tcs / (self._semi_major * self._mcs)
        lat = phi2z(self._e, ts)
        if np.isnan(lat):
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)
        if rh == 0:
            return GeographicPoint(fac * lat, fac * self._lon_center)
        return GeographicPoint(fac * lat, adjust_lon(fac * np.arctan2(x, -y) + self._lon_center))


@register_projection
class LambertAzimuthalEqualArea(_SphericalAzimuthal):
    """Lambert Azimuthal Equal Area (sphere)."""

    code = ProjectionCode.LAMAZ
    title = "Lambert Azimuthal Equal-Area"

    def __init__(self, radius, center_lon=0.0, center_lat=0.0, false_easting=0.0, false_northing=0.0):
        super().__init__(radius, center_lon, center_lat, false_easting, false_northing)
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4("laea", **self._center_terms())

    def _forward(self, lat, lon):
        g, dlon, sin_phi, cos_phi, cos_lon = self._cos_angle(lat, lon)
        # The antipode spreads over a circle of radius 2R
        if abs(g + 1.0) <= EPSLN:
            return projected_failure(ProjectionStatus.POINT_NOT_PROJECTABLE)
        return self._scaled(np.sqrt(2.0 / (1.0 + g)), dlon, sin_phi, cos_phi, cos_lon)

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        rh = np.hypot(x, y)
        temp = rh / (2.0 * self._r)
        if temp > 1:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        return self._finish_inverse(x, y, rh, 2.0 * asinz(temp))


@register_projection
class AzimuthalEquidistant(_SphericalAzimuthal):
    """Azimuthal Equidistant (sphere)."""

    code = ProjectionCode.AZMEQD

    def __init__(self, radius, center_lon=0.0, center_lat=0.0, false_easting=0.0, false_northing=0.0):
        super().__init__(radius, center_lon, center_lat, false_easting, false_northing)
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4("aeqd", **self._center_terms())

    def _forward(self, lat, lon):
        g, dlon, sin_phi, cos_phi, cos_lon = self._cos_angle(lat, lon)
        if abs(abs(g) - 1.0) < EPSLN:
            if g < 0.0:
                return projected_failure(ProjectionStatus.POINT_NOT_PROJECTABLE)
            ksp = 1.0
        else:
            z = np.arccos(g)
            ksp = z / np.sin(z)
        return self._scaled(ksp, dlon, sin_phi, cos_phi, cos_lon)

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        rh = np.hypot(x, y)
        if rh > PI * self._r:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        return self._finish_inverse(x, y, rh, rh / self._r)


@register_projection
class Gnomonic(_SphericalAzimuthal):
    """Gnomonic (sphere). Only the hemisphere facing the center is finite."""

    code = ProjectionCode.GNOMON

    def __init__(self, radius, center_lon=0.0, center_lat=0.0, false_easting=0.0, false_northing=0.0):
        super().__init__(radius, center_lon, center_lat, false_easting, false_northing)
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4("gnom", **self._center_terms())

    def _forward(self, lat, lon):
        g, dlon, sin_phi, cos_phi, cos_lon = self._cos_angle(lat, lon)
        if g <= 0.0:
            return projected_failure(ProjectionStatus.PROJECTS_TO_INFINITY)
        return self._scaled(1.0 / g, dlon, sin_phi, cos_phi, cos_lon)

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        rh = np.hypot(x, y)
        return self._finish_inverse(x, y, rh, np.arctan(rh / self._r))


@register_projection
class Orthographic(_LimbBounded, _SphericalAzimuthal):
    """Orthographic (sphere).

    The far hemisphere cannot be projected. The visible limb is the circle
    of radius R about the center, available from ``boundary()``.

    Raises
    ------
    ConvergenceError
        If the limb trace fails during construction.
    """

    code = ProjectionCode.ORTHO

    def __init__(self, radius, center_lon=0.0, center_lat=0.0, false_easting=0.0, false_northing=0.0):
        super().__init__(radius, center_lon, center_lat, false_easting, false_northing)
        self._log_parameters()
        self._boundary = self._trace_boundary((self._r + 1.0e-7) * (1.0 - EPSLN))

    @property
    def proj4_string(self):
        return self._build_proj4("ortho", **self._center_terms())

    def _forward(self, lat, lon):
        g, dlon, sin_phi, cos_phi, cos_lon = self._cos_angle(lat, lon)
        if g > 0 or abs(g) <= EPSLN:
            return self._scaled(1.0, dlon, sin_phi, cos_phi, cos_lon)
        return projected_failure(ProjectionStatus.POINT_NOT_PROJECTABLE)

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        rh = np.hypot(x, y)
        if rh > self._r + 1.0e-7:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        return self._finish_inverse(x, y, rh, asinz(rh / self._r))


@register_projection
class GeneralVerticalNearsidePerspective(_LimbBounded, _SphericalAzimuthal):
    """General Vertical Near-Side Perspective (sphere).

    Parameters
    ----------
    radius : float or pint.Quantity
        Sphere radius.
    height : float or pint.Quantity
        Height of the perspective point above the surface.
    center_lon, center_lat : float
        Sub-satellite point in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.

    Raises
    ------
    ConvergenceError
        If the limb trace fails during construction.

    Examples
    --------
    >>> geo = GeneralVerticalNearsidePerspective(6370997.0, height=35786000.0)
    >>> len(geo.boundary())
    721
    """

    code = ProjectionCode.GVNSP

    def __init__(
        self,
        radius: Length,
        height: Length = 0.0,
        center_lon: float = 0.0,
        center_lat: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        h = to_magnitude(height, "m")
        super().__init__(radius, center_lon, center_lat, false_easting, false_northing, height=h)
        require(h > 0, f"Perspective height must be positive, got {h}")
        self._height = h
        self._p = 1.0 + h / self._r
        self._log_parameters()
        max_radius = self._r * np.sqrt((self._p - 1.0) / (self._p + 1.0)) * (1.0 - EPSLN)
        self._boundary = self._trace_boundary(max_radius)

    @property
    def proj4_string(self):
        return self._build_proj4("nsper", h=self._height, **self._center_terms())

    def _forward(self, lat, lon):
        g, dlon, sin_phi, cos_phi, cos_lon = self._cos_angle(lat, lon)
        if g < 1.0 / self._p:
            return projected_failure(ProjectionStatus.POINT_NOT_PROJECTABLE)
        return self._scaled((self._p - 1.0) / (self._p - g), dlon, sin_phi, cos_phi, cos_lon)

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        rh = np.hypot(x, y)
        r = rh / self._r
        con = self._p - 1.0
        com = self._p + 1.0
        if r > np.sqrt(con / com):
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        if rh <= EPSLN:
            return GeographicPoint(self._lat_center, self._lon_center)
        sin_z = (self._p - np.sqrt(1.0 - (r * r * com) / con)) / (con / r + r / con)
        return self._finish_inverse(x, y, rh, asinz(sin_z))
