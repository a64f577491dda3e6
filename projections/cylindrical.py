"""
Cylindrical Projections.

Mercator, Transverse Mercator, Universal Transverse Mercator, Miller
Cylindrical and Equirectangular.

The Transverse Mercator uses the Snyder series on the ellipsoid and the
closed spherical form when the eccentricity squared is below 1e-5. UTM is
a Transverse Mercator whose center, scale and offsets follow from a zone
number; it delegates every call to that underlying projection.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual.
  Chapters 7 (Mercator), 8 (Transverse Mercator), 11 (Miller),
  12 (Equidistant Cylindrical).
"""

import numpy as np

from common.constants import ConvergenceConstants, GeodeticConstants
from common.units import Length, to_magnitude
from geodesy.ellipsoid_math import (
    EPSLN,
    HALF_PI,
    PI,
    adjust_lon,
    asinz,
    e0fn, e1fn, e2fn, e3fn,
    mlfn,
    phi2z,
    phi3z,
    sign,
    tsfnz,
)
from projections.base import (
    GeographicPoint,
    Projection,
    ProjectedPoint,
    ProjectionStatus,
    geographic_failure,
    projected_failure,
    require,
)
from projections.registry import ProjectionCode, register_projection

# Below this eccentricity squared the Transverse Mercator uses the sphere
SPHERICAL_ES_LIMIT = 1.0e-5

UTM_SCALE_FACTOR = 0.9996
UTM_FALSE_EASTING = 500000.0
UTM_SOUTH_FALSE_NORTHING = 10000000.0


@register_projection
class Mercator(Projection):
    """Mercator.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    center_lon : float
        Central meridian in radians.
    lat1 : float
        Latitude of true scale in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.

    Notes
    -----
    The poles project to infinity.
    """

    code = ProjectionCode.MERCAT

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        center_lon: float = 0.0,
        lat1: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        self._lon_center = center_lon
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")
        sin_lat1 = np.sin(lat1)
        self._m1 = np.cos(lat1) / np.sqrt(1.0 - self._es * sin_lat1 * sin_lat1)
        require(self._m1 > EPSLN, "Latitude of true scale must not be a pole", 51)

        self._set_parameters(
            center_lon=center_lon, lat1=lat1,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4(
            "merc", lon_0=np.degrees(self._lon_center),
            lat_ts=np.degrees(self._parameters["lat1"]),
            x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        if abs(abs(lat) - HALF_PI) <= EPSLN:
            return projected_failure(ProjectionStatus.PROJECTS_TO_INFINITY)
        ts = tsfnz(self._e, lat, np.sin(lat))
        scale = self._semi_major * self._m1
        return ProjectedPoint(
            self._false_easting + scale * adjust_lon(lon - self._lon_center),
            self._false_northing - scale * np.log(ts),
        )

    def _inverse(self, x, y):
        scale = self._semi_major * self._m1
        x = x - self._false_easting
        y = y - self._false_northing
        ts = np.exp(-y / scale)
        lat = phi2z(self._e, ts)
        if np.isnan(lat):
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)
        return GeographicPoint(lat, adjust_lon(self._lon_center + x / scale))


@register_projection
class TransverseMercator(Projection):
    """Transverse Mercator.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    scale_factor : float
        Scale factor at the central meridian.
    center_lon, center_lat : float
        Central meridian and latitude of origin in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.
    """

    code = ProjectionCode.TM

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        scale_factor: float = 1.0,
        center_lon: float = 0.0,
        center_lat: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        require(scale_factor > 0, f"Scale factor must be positive, got {scale_factor}")
        self._scale_factor = scale_factor
        self._lon_center = center_lon
        self._lat_origin = center_lat
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")

        es = self._es
        self._e0, self._e1, self._e2, self._e3 = e0fn(es), e1fn(es), e2fn(es), e3fn(es)
        self._ml0 = self._semi_major * mlfn(self._e0, self._e1, self._e2, self._e3, center_lat)
        self._esp = es / (1.0 - es)
        self._spherical = es < SPHERICAL_ES_LIMIT

        self._set_parameters(
            scale_factor=scale_factor, center_lon=center_lon, center_lat=center_lat,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4(
            "tmerc", lat_0=np.degrees(self._lat_origin), lon_0=np.degrees(self._lon_center),
            k=self._scale_factor, x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self._lon_center)
        sin_phi, cos_phi = np.sin(lat), np.cos(lat)
        a_k = self._semi_major * self._scale_factor

        if self._spherical:
            b = cos_phi * np.sin(delta_lon)
            if abs(abs(b) - 1.0) < 1.0e-10:
                return projected_failure(ProjectionStatus.PROJECTS_TO_INFINITY)
            x = 0.5 * a_k * np.log((1.0 + b) / (1.0 - b))
            con = np.arccos(np.clip(cos_phi * np.cos(delta_lon) / np.sqrt(1.0 - b * b), -1.0, 1.0))
            if lat < 0:
                con = -con
            return ProjectedPoint(
                x + self._false_easting,
                a_k * (con - self._lat_origin) + self._false_northing,
            )

        esp = self._esp
        al = cos_phi * delta_lon
        als = al * al
        c = esp * cos_phi * cos_phi
        tq = np.tan(lat)
        t = tq * tq
        con = 1.0 - self._es * sin_phi * sin_phi
        n = self._semi_major / np.sqrt(con)
        ml = self._semi_major * mlfn(self._e0, self._e1, self._e2, self._e3, lat)
        x = self._scale_factor * n * al * (
            1.0 + als / 6.0 * (1.0 - t + c + als / 20.0
                               * (5.0 - 18.0 * t + t * t + 72.0 * c - 58.0 * esp))
        ) + self._false_easting
        y = self._scale_factor * (
            ml - self._ml0 + n * tq * (als * (0.5 + als / 24.0 * (
                5.0 - t + 9.0 * c + 4.0 * c * c + als / 30.0
                * (61.0 - 58.0 * t + t * t + 600.0 * c - 330.0 * esp))))
        ) + self._false_northing
        return ProjectedPoint(x, y)

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        a_k = self._semi_major * self._scale_factor

        if self._spherical:
            f = np.exp(x / a_k)
            g = 0.5 * (f - 1.0 / f)
            temp = self._lat_origin + y / a_k
            h = np.cos(temp)
            con = np.sqrt((1.0 - h * h) / (1.0 + g * g))
            lat = asinz(con)
            if temp < 0:
                lat = -lat
            if g == 0 and h == 0:
                return GeographicPoint(lat, self._lon_center)
            return GeographicPoint(lat, adjust_lon(np.arctan2(g, h) + self._lon_center))

        con = (self._ml0 + y / self._scale_factor) / self._semi_major
        phi = phi3z(con, self._e0, self._e1, self._e2, self._e3,
                    ConvergenceConstants.TRANSVERSE_MERCATOR_INVERSE)
        if np.isnan(phi):
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)
        if abs(phi) >= HALF_PI:
            return GeographicPoint(HALF_PI * sign(y), self._lon_center)

        es, esp = self._es, self._esp
        sin_phi, cos_phi, tan_phi = np.sin(phi), np.cos(phi), np.tan(phi)
        c = esp * cos_phi * cos_phi
        cs = c * c
        t = tan_phi * tan_phi
        ts = t * t
        con = 1.0 - es * sin_phi * sin_phi
        n = self._semi_major / np.sqrt(con)
        r = n * (1.0 - es) / con
        d = x / (n * self._scale_factor)
        ds = d * d
        lat = phi - (n * tan_phi * ds / r) * (0.5 - ds / 24.0 * (
            5.0 + 3.0 * t + 10.0 * c - 4.0 * cs - 9.0 * esp - ds / 30.0
            * (61.0 + 90.0 * t + 298.0 * c + 45.0 * ts - 252.0 * esp - 3.0 * cs)))
        lon = adjust_lon(self._lon_center + (d * (1.0 - ds / 6.0 * (
            1.0 + 2.0 * t + c - ds / 20.0
            * (5.0 - 2.0 * c + 28.0 * t - 3.0 * cs + 8.0 * esp + 24.0 * ts))) / cos_phi))
        return GeographicPoint(lat, lon)


@register_projection
class UniversalTransverseMercator(Projection):
    """Universal Transverse Mercator.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    zone : int
        UTM zone, 1 to 60. Negative zones are in the southern hemisphere
        and get a false northing of 10,000 km.
    scale_factor : float
        Scale factor at the central meridian.

    Examples
    --------
    >>> utm = UniversalTransverseMercator(6378137.0, 6356752.314245, zone=19)
    >>> round(np.degrees(utm.parameters["center_lon"]))
    -69
    """

    code = ProjectionCode.UTM
    title = "Universal Transverse Mercator (UTM)"

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        zone: int = 1,
        scale_factor: float = UTM_SCALE_FACTOR
    ):
        super().__init__(semi_major, semi_minor)
        zone = int(zone)
        require(1 <= abs(zone) <= 60, f"Illegal zone number {zone}", 11)
        self._zone = zone
        center_lon = (6 * abs(zone) - 183) * GeodeticConstants.D2R
        self._tm = TransverseMercator(
            self._semi_major, self._semi_minor,
            scale_factor=scale_factor,
            center_lon=center_lon,
            center_lat=0.0,
            false_easting=UTM_FALSE_EASTING,
            false_northing=UTM_SOUTH_FALSE_NORTHING if zone < 0 else 0.0,
        )
        self._set_parameters(zone=zone, scale_factor=scale_factor, center_lon=center_lon)
        self._log_parameters()

    @property
    def zone(self) -> int:
        return self._zone

    @property
    def transverse_mercator(self) -> TransverseMercator:
        """The underlying projection every call is delegated to."""
        return self._tm

    @property
    def proj4_string(self):
        return self._tm.proj4_string

    def _forward(self, lat, lon):
        return self._tm.forward(lat, lon)

    def _inverse(self, x, y):
        return self._tm.inverse(x, y)


@register_projection
class MillerCylindrical(Projection):
    """Miller Cylindrical (sphere only).

    Parameters
    ----------
    radius : float or pint.Quantity
        Sphere radius.
    center_lon : float
        Central meridian in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.
    """

    code = ProjectionCode.MILLER

    def __init__(
        self,
        radius: Length,
        center_lon: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(radius)
        self._r = self._semi_major
        self._lon_center = center_lon
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")
        self._set_parameters(
            center_lon=center_lon,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4(
            "mill", lon_0=np.degrees(self._lon_center),
            x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self._lon_center)
        return ProjectedPoint(
            self._false_easting + self._r * dlon,
            self._false_northing + self._r * np.log(np.tan(PI / 4.0 + lat / 2.5)) * 1.25,
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        lon = adjust_lon(self._lon_center + x / self._r)
        lat = 2.5 * (np.arctan(np.exp(y / self._r / 1.25)) - PI / 4.0)
        return GeographicPoint(lat, lon)


@register_projection
class Equirectangular(Projection):
    """Equirectangular (Equidistant Cylindrical, sphere only).

    Parameters
    ----------
    radius : float or pint.Quantity
        Sphere radius.
    center_lon : float
        Central meridian in radians.
    lat1 : float
        Latitude of true scale in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.
    """

    code = ProjectionCode.EQRECT

    def __init__(
        self,
        radius: Length,
        center_lon: float = 0.0,
        lat1: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(radius)
        require(abs(abs(lat1) - HALF_PI) > EPSLN, "Latitude of true scale must not be a pole", 171)
        self._r = self._semi_major
        self._lon_center = center_lon
        self._cos_lat1 = np.cos(lat1)
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")
        self._set_parameters(
            center_lon=center_lon, lat1=lat1,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4(
            "eqc", lat_ts=np.degrees(self._parameters["lat1"]), lon_0=np.degrees(self._lon_center),
            x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self._lon_center)
        return ProjectedPoint(
            self._false_easting + self._r * dlon * self._cos_lat1,
            self._false_northing + self._r * lat,
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        lat = y / self._r
        if abs(lat) > HALF_PI:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        return GeographicPoint(lat, adjust_lon(self._lon_center + x / (self._r * self._cos_lat1)))
