"""
Polyconic projection on the ellipsoid (Snyder chapter 18).
"""

import numpy as np

from common.units import Length, to_magnitude
from geodesy.ellipsoid_math import (
    adjust_lon,
    asinz,
    e0fn, e1fn, e2fn, e3fn,
    mlfn,
    msfnz,
    phi4z,
)
from projections.base import (
    GeographicPoint,
    Projection,
    ProjectedPoint,
    ProjectionStatus,
    geographic_failure,
)
from projections.registry import ProjectionCode, register_projection

# Latitudes (and meridian distances) below this are treated as the equator
EQUATOR_TOLERANCE = 1.0e-7


@register_projection
class Polyconic(Projection):
    """American Polyconic.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    center_lon : float
        Central meridian in radians.
    center_lat : float
        Latitude of origin in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.

    Notes
    -----
    The inverse solves Snyder eq. 18-18 by Newton-Raphson; a point where
    it does not converge comes back as ``NO_CONVERGENCE``.
    """

    code = ProjectionCode.POLYC

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        center_lon: float = 0.0,
        center_lat: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        self._lon_center = center_lon
        self._lat_origin = center_lat
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")
        es = self._es
        self._e0, self._e1, self._e2, self._e3 = e0fn(es), e1fn(es), e2fn(es), e3fn(es)
        self._ml0 = mlfn(self._e0, self._e1, self._e2, self._e3, center_lat)
        self._set_parameters(
            center_lon=center_lon, center_lat=center_lat,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4(
            "poly", lat_0=np.degrees(self._lat_origin), lon_0=np.degrees(self._lon_center),
            x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        a = self._semi_major
        con = adjust_lon(lon - self._lon_center)
        if abs(lat) <= EQUATOR_TOLERANCE:
            return ProjectedPoint(self._false_easting + a * con,
                                  self._false_northing - a * self._ml0)
        sin_phi, cos_phi = np.sin(lat), np.cos(lat)
        ml = mlfn(self._e0, self._e1, self._e2, self._e3, lat)
        ms = msfnz(self._e, sin_phi, cos_phi)
        con = con * sin_phi
        return ProjectedPoint(
            self._false_easting + a * ms * np.sin(con) / sin_phi,
            self._false_northing + a * (ml - self._ml0 + ms * (1.0 - np.cos(con)) / sin_phi),
        )

    def _inverse(self, x, y):
        a = self._semi_major
        x = x - self._false_easting
        y = y - self._false_northing
        al = self._ml0 + y / a
        if abs(al) <= EQUATOR_TOLERANCE:
            return GeographicPoint(0.0, adjust_lon(x / a + self._lon_center))
        b = al * al + (x / a) * (x / a)
        lat, c = phi4z(self._es, self._e0, self._e1, self._e2, self._e3, al, b)
        if np.isnan(lat):
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)
        return GeographicPoint(lat, adjust_lon(asinz(x * c / a) / np.sin(lat) + self._lon_center))
