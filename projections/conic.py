"""
Conic Projections.

Albers Conical Equal Area, Lambert Conformal Conic and Equidistant Conic
on the ellipsoid (or sphere when both axes are equal).

All three share the same construction: a cone constant ``ns`` derived
from one or two standard parallels, and the radius ``rh`` of the parallel
through the latitude of origin. Standard parallels placed symmetrically on
opposite sides of the equator make the cone degenerate, so construction
fails for them.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual.
  Chapters 14 (Albers), 15 (Lambert Conformal Conic), 16 (Equidistant Conic).
"""

import numpy as np

from common.units import Length, to_magnitude
from geodesy.ellipsoid_math import (
    EPSLN,
    HALF_PI,
    adjust_lon,
    e0fn, e1fn, e2fn, e3fn,
    mlfn,
    msfnz,
    phi1z,
    phi2z,
    phi3z,
    qsfnz,
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


@register_projection
class AlbersConicalEqualArea(Projection):
    """Albers Conical Equal Area.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    lat1, lat2 : float
        Standard parallels in radians.
    center_lon : float
        Central meridian in radians.
    center_lat : float
        Latitude of origin in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.
    """

    code = ProjectionCode.ALBERS
    title = "Albers Conical Equal-Area"

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        lat1: float = 0.0,
        lat2: float = 0.0,
        center_lon: float = 0.0,
        center_lat: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        require(abs(lat1 + lat2) >= EPSLN,
                "Equal latitudes for standard parallels on opposite sides of equator", 31)

        self._lon_center = center_lon
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")

        e3 = self._e
        sin_po, cos_po = np.sin(lat1), np.cos(lat1)
        ms1 = msfnz(e3, sin_po, cos_po)
        qs1 = qsfnz(e3, sin_po, cos_po)
        sin_po2, cos_po2 = np.sin(lat2), np.cos(lat2)
        ms2 = msfnz(e3, sin_po2, cos_po2)
        qs2 = qsfnz(e3, sin_po2, cos_po2)
        qs0 = qsfnz(e3, np.sin(center_lat), np.cos(center_lat))

        if abs(lat1 - lat2) > EPSLN:
            self._ns0 = (ms1 * ms1 - ms2 * ms2) / (qs2 - qs1)
        else:
            self._ns0 = sin_po
        require(abs(self._ns0) > EPSLN, "Standard parallel on the equator gives a degenerate cone", 31)
        self._c = ms1 * ms1 + self._ns0 * qs1
        self._rh = self._semi_major * np.sqrt(self._c - self._ns0 * qs0) / self._ns0

        self._set_parameters(
            lat1=lat1, lat2=lat2, center_lon=center_lon, center_lat=center_lat,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        p = self._parameters
        return self._build_proj4(
            "aea", lat_1=np.degrees(p["lat1"]), lat_2=np.degrees(p["lat2"]),
            lat_0=np.degrees(p["center_lat"]), lon_0=np.degrees(p["center_lon"]),
            x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        qs = qsfnz(self._e, np.sin(lat), np.cos(lat))
        rh1 = self._semi_major * np.sqrt(self._c - self._ns0 * qs) / self._ns0
        theta = self._ns0 * adjust_lon(lon - self._lon_center)
        return ProjectedPoint(
            rh1 * np.sin(theta) + self._false_easting,
            self._rh - rh1 * np.cos(theta) + self._false_northing,
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = self._rh - y + self._false_northing
        if self._ns0 >= 0:
            rh1 = np.sqrt(x * x + y * y)
            con = 1.0
        else:
            rh1 = -np.sqrt(x * x + y * y)
            con = -1.0
        theta = 0.0
        if rh1 != 0.0:
            theta = np.arctan2(con * x, con * y)
        con = rh1 * self._ns0 / self._semi_major
        qs = (self._c - con * con) / self._ns0
        e3 = self._e
        if e3 >= 1e-10:
            con = 1 - 0.5 * (1.0 - self._es) * np.log((1.0 - e3) / (1.0 + e3)) / e3
            if abs(abs(con) - abs(qs)) > 1e-10:
                lat = phi1z(e3, qs)
            else:
                lat = HALF_PI if qs >= 0 else -HALF_PI
        else:
            lat = phi1z(e3, qs)
        if np.isnan(lat):
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)
        return GeographicPoint(lat, adjust_lon(theta / self._ns0 + self._lon_center))


@register_projection
class LambertConformalConic(Projection):
    """Lambert Conformal Conic.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    lat1, lat2 : float
        Standard parallels in radians.
    center_lon, center_lat : float
        Central meridian and latitude of origin in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.

    Notes
    -----
    The pole on the side away from the cone apex cannot be projected.
    """

    code = ProjectionCode.LAMCC

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        lat1: float = 0.0,
        lat2: float = 0.0,
        center_lon: float = 0.0,
        center_lat: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        require(abs(lat1 + lat2) >= EPSLN,
                "Equal latitudes for standard parallels on opposite sides of equator", 41)

        self._center_lon = center_lon
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")

        e = self._e
        sin_po = np.sin(lat1)
        ms1 = msfnz(e, sin_po, np.cos(lat1))
        ts1 = tsfnz(e, lat1, sin_po)
        sin_po2 = np.sin(lat2)
        ms2 = msfnz(e, sin_po2, np.cos(lat2))
        ts2 = tsfnz(e, lat2, sin_po2)
        ts0 = tsfnz(e, center_lat, np.sin(center_lat))

        if abs(lat1 - lat2) > EPSLN:
            self._ns = np.log(ms1 / ms2) / np.log(ts1 / ts2)
        else:
            self._ns = sin_po
        require(abs(self._ns) > EPSLN, "Standard parallel on the equator gives a degenerate cone", 41)
        self._f0 = ms1 / (self._ns * np.power(ts1, self._ns))
        self._rh = self._semi_major * self._f0 * np.power(ts0, self._ns)

        self._set_parameters(
            lat1=lat1, lat2=lat2, center_lon=center_lon, center_lat=center_lat,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        p = self._parameters
        return self._build_proj4(
            "lcc", lat_1=np.degrees(p["lat1"]), lat_2=np.degrees(p["lat2"]),
            lat_0=np.degrees(p["center_lat"]), lon_0=np.degrees(p["center_lon"]),
            x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        if abs(abs(lat) - HALF_PI) > EPSLN:
            ts = tsfnz(self._e, lat, np.sin(lat))
            rh1 = self._semi_major * self._f0 * np.power(ts, self._ns)
        else:
            if lat * self._ns <= 0:
                return projected_failure(ProjectionStatus.POINT_NOT_PROJECTABLE)
            rh1 = 0.0
        theta = self._ns * adjust_lon(lon - self._center_lon)
        return ProjectedPoint(
            rh1 * np.sin(theta) + self._false_easting,
            self._rh - rh1 * np.cos(theta) + self._false_northing,
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = self._rh - y + self._false_northing
        if self._ns > 0:
            rh1 = np.sqrt(x * x + y * y)
            con = 1.0
        else:
            rh1 = -np.sqrt(x * x + y * y)
            con = -1.0
        theta = 0.0
        if rh1 != 0:
            theta = np.arctan2(con * x, con * y)
        if rh1 != 0 or self._ns > 0.0:
            ts = np.power(rh1 / (self._semi_major * self._f0), 1.0 / self._ns)
            lat = phi2z(self._e, ts)
            if np.isnan(lat):
                return geographic_failure(ProjectionStatus.NO_CONVERGENCE)
        else:
            lat = -HALF_PI
        return GeographicPoint(lat, adjust_lon(theta / self._ns + self._center_lon))


@register_projection
class EquidistantConic(Projection):
    """Equidistant Conic.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    lat1 : float
        First (or only) standard parallel in radians.
    lat2 : float
        Second standard parallel in radians, used when ``two_parallels``.
    center_lon, center_lat : float
        Central meridian and latitude of origin in radians.
    two_parallels : bool
        Format B (two standard parallels) when True, format A (one) when
        False.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.
    """

    code = ProjectionCode.EQUIDC

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        lat1: float = 0.0,
        lat2: float = 0.0,
        center_lon: float = 0.0,
        center_lat: float = 0.0,
        two_parallels: bool = True,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        self._lon_center = center_lon
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")

        es = self._es
        self._e0, self._e1, self._e2, self._e3 = e0fn(es), e1fn(es), e2fn(es), e3fn(es)
        coeffs = (self._e0, self._e1, self._e2, self._e3)

        sinphi = np.sin(lat1)
        ms1 = msfnz(self._e, sinphi, np.cos(lat1))
        ml1 = mlfn(*coeffs, lat1)
        if two_parallels:
            require(abs(lat1 + lat2) >= EPSLN,
                    "Standard parallels on opposite sides of equator", 81)
            sinphi = np.sin(lat2)
            ms2 = msfnz(self._e, sinphi, np.cos(lat2))
            ml2 = mlfn(*coeffs, lat2)
            if abs(lat1 - lat2) >= EPSLN:
                self._ns = (ms1 - ms2) / (ml2 - ml1)
            else:
                self._ns = sinphi
        else:
            lat2 = lat1
            self._ns = sinphi
        require(abs(self._ns) > EPSLN, "Standard parallel on the equator gives a degenerate cone", 81)
        self._g = ml1 + ms1 / self._ns
        self._ml0 = mlfn(*coeffs, center_lat)
        self._rh = self._semi_major * (self._g - self._ml0)

        self._set_parameters(
            lat1=lat1, lat2=lat2, center_lon=center_lon, center_lat=center_lat,
            two_parallels=bool(two_parallels),
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        p = self._parameters
        return self._build_proj4(
            "eqdc", lat_1=np.degrees(p["lat1"]), lat_2=np.degrees(p["lat2"]),
            lat_0=np.degrees(p["center_lat"]), lon_0=np.degrees(p["center_lon"]),
            x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        ml = mlfn(self._e0, self._e1, self._e2, self._e3, lat)
        rh1 = self._semi_major * (self._g - ml)
        theta = self._ns * adjust_lon(lon - self._lon_center)
        return ProjectedPoint(
            self._false_easting + rh1 * np.sin(theta),
            self._false_northing + self._rh - rh1 * np.cos(theta),
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = self._rh - y + self._false_northing
        if self._ns >= 0:
            rh1 = np.sqrt(x * x + y * y)
            con = 1.0
        else:
            rh1 = -np.sqrt(x * x + y * y)
            con = -1.0
        theta = 0.0
        if rh1 != 0.0:
            theta = np.arctan2(con * x, con * y)
        ml = self._g - rh1 / self._semi_major
        lat = phi3z(ml, self._e0, self._e1, self._e2, self._e3)
        if np.isnan(lat):
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)
        return GeographicPoint(lat, adjust_lon(self._lon_center + theta / self._ns))
