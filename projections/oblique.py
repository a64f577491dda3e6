"""
Oblique and Special-Purpose Projections.

Hotine Oblique Mercator, Space Oblique Mercator, Oblated Equal Area and
the Modified-Stereographic Conformal projection for Alaska.

Axes
----
False easting is added to x and false northing to y for all four
projections. Space Oblique Mercator puts the along-track coordinate on x,
as PROJ's ``lsat`` does.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual.
  Chapters 9 (Hotine Oblique Mercator), 10 (Space Oblique Mercator),
  19 (Modified-Stereographic Conformal).
- Snyder, J.P. (1988). Oblated Equal-Area Projections.
- USGS GCTP (omerfor.c, somfor.c, obleqfor.c, alconfor.c).
"""

from typing import Tuple
import numpy as np

from common.constants import ConvergenceConstants, GeodeticConstants, SolverLimits
from common.units import Length, to_magnitude
from geodesy.ellipsoid_math import (
    EPSLN,
    HALF_PI,
    PI,
    adjust_lon,
    asinz,
    phi2z,
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

D2R = GeodeticConstants.D2R


@register_projection
class HotineObliqueMercator(Projection):
    """Hotine Oblique Mercator.

    The central line is given either by an azimuth through the center
    (format B, the default) or by two points (format A, ``two_points=True``).

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    scale_factor : float
        Scale factor along the central line.
    center_lat : float
        Latitude of origin in radians.
    azimuth : float
        Format B: azimuth of the central line east of north, radians.
    center_lon : float
        Format B: longitude of the point where the azimuth is measured.
    lon1, lat1, lon2, lat2 : float
        Format A: two points on the central line, radians.
    two_points : bool
        Select format A.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.

    Raises
    ------
    ProjectionParameterError
        Format B with an equatorial or polar origin (error 201); format A
        with equal point latitudes, an equatorial or polar first point or
        a polar origin (error 202).
    """

    code = ProjectionCode.HOM

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        scale_factor: float = 1.0,
        center_lat: float = 0.0,
        azimuth: float = 0.0,
        center_lon: float = 0.0,
        lon1: float = 0.0,
        lat1: float = 0.0,
        lon2: float = 0.0,
        lat2: float = 0.0,
        two_points: bool = False,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        self._scale_factor = scale_factor
        self._lat_origin = center_lat
        self._two_points = bool(two_points)
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")

        if self._two_points:
            require(abs(lat1 - lat2) > EPSLN, "Central line points have equal latitudes", 202)
            require(abs(lat1) > EPSLN and abs(abs(lat1) - HALF_PI) > EPSLN,
                    "First central line point on the equator or a pole", 202)
            require(abs(abs(center_lat) - HALF_PI) > EPSLN, "Latitude of origin at a pole", 202)
        else:
            require(abs(center_lat) > EPSLN and abs(abs(center_lat) - HALF_PI) > EPSLN,
                    "Latitude of origin on the equator or a pole", 201)

        es, e = self._es, self._e
        sin_p20, cos_p20 = np.sin(center_lat), np.cos(center_lat)
        con = 1.0 - es * sin_p20 * sin_p20
        com = np.sqrt(1.0 - es)
        self._bl = bl = np.sqrt(1.0 + es * cos_p20 ** 4 / (1.0 - es))
        self._al = al = self._semi_major * bl * scale_factor * com / con
        if abs(center_lat) < EPSLN:
            d = 1.0
            self._el = el = 1.0
            f = 0.0
        else:
            ts = tsfnz(e, center_lat, sin_p20)
            d = bl * com / (cos_p20 * np.sqrt(con))
            if d * d - 1.0 > 0.0:
                f = d + np.sqrt(d * d - 1.0) if center_lat >= 0.0 else d - np.sqrt(d * d - 1.0)
            else:
                f = d
            self._el = el = f * np.power(ts, bl)

        if self._two_points:
            h = np.power(tsfnz(e, lat1, np.sin(lat1)), bl)
            l = np.power(tsfnz(e, lat2, np.sin(lat2)), bl)
            f = el / h
            g = 0.5 * (f - 1.0 / f)
            j = (el * el - l * h) / (el * el + l * h)
            p = (l - h) / (l + h)
            dlon = lon1 - lon2
            if dlon < -PI:
                lon2 = lon2 - 2.0 * PI
            if dlon > PI:
                lon2 = lon2 + 2.0 * PI
            dlon = lon1 - lon2
            self._lon_origin = 0.5 * (lon1 + lon2) - np.arctan(j * np.tan(0.5 * bl * dlon) / p) / bl
            dlon = adjust_lon(lon1 - self._lon_origin)
            gama = np.arctan(np.sin(bl * dlon) / g)
            azimuth = asinz(d * np.sin(gama))
        else:
            g = 0.5 * (f - 1.0 / f)
            gama = asinz(np.sin(azimuth) / d)
            self._lon_origin = center_lon - asinz(g * np.tan(gama)) / bl

        self._singam, self._cosgam = np.sin(gama), np.cos(gama)
        self._sinaz, self._cosaz = np.sin(azimuth), np.cos(azimuth)
        with np.errstate(divide="ignore"):
            u = (al / bl) * np.arctan(np.sqrt(d * d - 1.0) / self._cosaz)
        self._u = u if center_lat >= 0 else -u

        values = dict(scale_factor=scale_factor, center_lat=center_lat, azimuth=float(azimuth),
                      center_lon=float(self._lon_origin))
        if self._two_points:
            values.update(lon1=lon1, lat1=lat1, lon2=lon2, lat2=lat2)
        self._set_parameters(**values, false_easting=self._false_easting,
                             false_northing=self._false_northing)
        self._log_parameters()

    @property
    def proj4_string(self):
        if self._two_points:
            return None
        p = self._parameters
        return self._build_proj4(
            "omerc", lat_0=np.degrees(self._lat_origin), lonc=np.degrees(p["center_lon"]),
            alpha=np.degrees(p["azimuth"]), gamma=np.degrees(p["azimuth"]),
            k=self._scale_factor, x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        bl, al = self._bl, self._al
        sin_phi = np.sin(lat)
        dlon = adjust_lon(lon - self._lon_origin)
        vl = np.sin(bl * dlon)
        if abs(abs(lat) - HALF_PI) > EPSLN:
            q = self._el / np.power(tsfnz(self._e, lat, sin_phi), bl)
            s = 0.5 * (q - 1.0 / q)
            t = 0.5 * (q + 1.0 / q)
            ul = (s * self._singam - vl * self._cosgam) / t
            con = np.cos(bl * dlon)
            if abs(con) < 1.0e-7:
                us = al * bl * dlon
            else:
                us = al * np.arctan((s * self._cosgam + vl * self._singam) / con) / bl
                if con < 0:
                    us = us + PI * al / bl
        else:
            ul = self._singam if lat >= 0 else -self._singam
            us = al * lat / bl
        if abs(abs(ul) - 1.0) <= EPSLN:
            return projected_failure(ProjectionStatus.PROJECTS_TO_INFINITY)
        vs = 0.5 * al * np.log((1.0 - ul) / (1.0 + ul)) / bl
        us = us - self._u
        return ProjectedPoint(
            self._false_easting + vs * self._cosaz + us * self._sinaz,
            self._false_northing + us * self._cosaz - vs * self._sinaz,
        )

    def _inverse(self, x, y):
        bl, al = self._bl, self._al
        x = x - self._false_easting
        y = y - self._false_northing
        vs = x * self._cosaz - y * self._sinaz
        us = y * self._cosaz + x * self._sinaz + self._u
        q = np.exp(-bl * vs / al)
        s = 0.5 * (q - 1.0 / q)
        t = 0.5 * (q + 1.0 / q)
        vl = np.sin(bl * us / al)
        ul = (vl * self._cosgam + s * self._singam) / t
        if abs(abs(ul) - 1.0) <= EPSLN:
            return GeographicPoint(HALF_PI if ul >= 0.0 else -HALF_PI, self._lon_origin)
        ts1 = np.power(self._el / np.sqrt((1.0 + ul) / (1.0 - ul)), 1.0 / bl)
        lat = phi2z(self._e, ts1)
        if np.isnan(lat):
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)
        con = np.cos(bl * us / al)
        theta = self._lon_origin - np.arctan2(s * self._cosgam - vl * self._singam, con) / bl
        return GeographicPoint(lat, adjust_lon(theta))


LANDSAT_RATIO = 0.5201613


@register_projection
class SpaceObliqueMercator(Projection):
    """Space Oblique Mercator.

    Two ways to describe the orbit:

    - Landsat path mode (default): ``satellite`` number and ``path``
      select the published Landsat orbit.
    - Explicit orbit mode: pass ``inclination`` (radians), ``period``
      (minutes) and the ascending node longitude ``center_lon``.

    Parameters
    ----------
    semi_major, semi_minor : float or pint.Quantity
        Ellipsoid axes.
    satellite : int
        Landsat number; 1 to 3 share one orbit and 4 and 5 another.
    path : int
        Landsat path number.
    inclination : float, optional
        Orbit inclination in radians. Selects explicit orbit mode.
    center_lon : float
        Explicit orbit mode: longitude of the ascending node in radians.
    period : float, optional
        Explicit orbit mode: satellite revolution period in minutes.
    end_of_path : bool
        Explicit orbit mode: start the transformed longitude search at the
        end of the path rather than the beginning.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.
    """

    code = ProjectionCode.SOM

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        satellite: int = 5,
        path: int = 1,
        inclination: float = None,
        center_lon: float = 0.0,
        period: float = None,
        end_of_path: bool = False,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")
        self._landsat = inclination is None

        if not self._landsat:
            require(period is not None and period > 0, "Explicit orbit needs a positive period")
            alf = inclination
            self._p21 = period / 1440.0
            self._lon_center = center_lon
            self._start = bool(end_of_path)
        else:
            require(int(path) > 0, f"Illegal Landsat path {path}")
            satellite, path = int(satellite), int(path)
            if satellite < 4:
                alf = 99.092 * D2R
                self._p21 = 103.2669323 / 1440.0
                self._lon_center = (128.87 - (360.0 / 251.0 * path)) * D2R
            else:
                alf = 98.2 * D2R
                self._p21 = 98.8841202 / 1440.0
                self._lon_center = (129.30 - (360.0 / 233.0 * path)) * D2R
            self._start = False

        es = self._es
        ca = np.cos(alf)
        self._ca = ca if abs(ca) >= 1.0e-9 else 1.0e-9
        self._sa = np.sin(alf)
        e2c = es * self._ca * self._ca
        e2s = es * self._sa * self._sa
        one_es = 1.0 - es
        w = (1.0 - e2c) / one_es
        self._w = w * w - 1.0
        self._q = e2s / one_es
        self._t = (e2s * (2.0 - es)) / (one_es * one_es)
        self._u = e2c / one_es
        self._xj = one_es ** 3
        self._integrate_series()

        if self._landsat:
            values = dict(satellite=satellite, path=path)
        else:
            values = dict(period=period, end_of_path=self._start)
        self._set_parameters(
            **values, inclination=float(alf), center_lon=float(self._lon_center),
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    def _series_terms(self, dlam_deg: float) -> Tuple[float, float, float, float, float]:
        """Integrands of the Fourier coefficients at one transformed longitude."""
        dlam = dlam_deg * 0.0174532925
        sd = np.sin(dlam)
        sdsq = sd * sd
        q, w, t = self._q, self._w, self._t
        s = self._p21 * self._sa * np.cos(dlam) * np.sqrt(
            (1.0 + t * sdsq) / ((1.0 + w * sdsq) * (1.0 + q * sdsq)))
        h = np.sqrt((1.0 + q * sdsq) / (1.0 + w * sdsq)) * (
            ((1.0 + w * sdsq) / ((1.0 + q * sdsq) * (1.0 + q * sdsq))) - self._p21 * self._ca)
        sq = np.sqrt(self._xj * self._xj + s * s)
        fb = (h * self._xj - s * s) / sq
        fc = s * (h + self._xj) / sq
        return (fb, fb * np.cos(2.0 * dlam), fb * np.cos(4.0 * dlam),
                fc * np.cos(dlam), fc * np.cos(3.0 * dlam))

    def _integrate_series(self):
        """Simpson's rule over 0..90 degrees in 9 degree steps."""
        weights = [(0.0, 1.0)]
        weights += [(float(i), 4.0) for i in range(9, 82, 18)]
        weights += [(float(i), 2.0) for i in range(18, 73, 18)]
        weights += [(90.0, 1.0)]
        sums = np.zeros(5)
        for dlam, weight in weights:
            sums += weight * np.array(self._series_terms(dlam))
        sumb, suma2, suma4, sumc1, sumc3 = sums
        self._a2 = suma2 / 30.0
        self._a4 = suma4 / 60.0
        self._b = sumb / 30.0
        self._c1 = sumc1 / 15.0
        self._c3 = sumc3 / 45.0

    def _s(self, tlam):
        sdsq = np.sin(tlam) ** 2
        return self._p21 * self._sa * np.cos(tlam) * np.sqrt(
            (1.0 + self._t * sdsq) / ((1.0 + self._w * sdsq) * (1.0 + self._q * sdsq)))

    @property
    def proj4_string(self):
        p = self._parameters
        if not self._landsat or not 1 <= p["satellite"] <= 5:
            return None
        return self._build_proj4("lsat", lsat=p["satellite"], path=p["path"],
                                 x_0=self._false_easting, y_0=self._false_northing)

    def _forward(self, lat, lon, limits: SolverLimits = ConvergenceConstants.SPACE_OBLIQUE_FORWARD):
        es, sa, ca, p21 = self._es, self._sa, self._ca, self._p21
        conv = limits.tolerance
        radlt = min(max(lat, -1.570796), 1.570796)
        radln = lon - self._lon_center

        tlamp = PI / 2.0
        if self._start:
            tlamp = 2.5 * PI
        if radlt < 0.0:
            tlamp = 1.5 * PI
        rlm = PI * LANDSAT_RATIO
        rlm2 = rlm + 2.0 * PI

        for attempt in range(3):
            sav = tlamp
            scl = 1.0 if np.cos(radln + p21 * tlamp) >= 0.0 else -1.0
            ab2 = tlamp - scl * np.sin(tlamp) * HALF_PI
            for _ in range(limits.max_iterations + 1):
                xlamt = radln + p21 * sav
                c = np.cos(xlamt)
                if abs(c) < 1.0e-7:
                    xlamt = xlamt - 1.0e-7
                xlam = ((1.0 - es) * np.tan(radlt) * sa + np.sin(xlamt) * ca) / c
                tlam = np.arctan(xlam) + ab2
                if abs(abs(sav) - abs(tlam)) < conv:
                    break
                sav = tlam
            else:
                return projected_failure(ProjectionStatus.NO_CONVERGENCE)
            # Adjust for confusion at the beginning and end of the orbit
            if attempt == 2 or rlm < tlam < rlm2:
                break
            if tlam < rlm:
                tlamp = 2.5 * PI
            if tlam >= rlm2:
                tlamp = HALF_PI

        dp = np.sin(radlt)
        tphi = asinz(((1.0 - es) * ca * dp - sa * np.cos(radlt) * np.sin(xlamt))
                     / np.sqrt(1.0 - es * dp * dp))
        tanlg = np.log(np.tan(PI / 4.0 + tphi / 2.0))
        sd = np.sin(tlam)
        s = self._s(tlam)
        d = np.sqrt(self._xj * self._xj + s * s)
        a = self._semi_major
        x = a * (self._b * tlam + self._a2 * np.sin(2.0 * tlam)
                 + self._a4 * np.sin(4.0 * tlam) - tanlg * s / d)
        y = a * (self._c1 * sd + self._c3 * np.sin(3.0 * tlam) + tanlg * self._xj / d)
        return ProjectedPoint(x + self._false_easting, y + self._false_northing)

    def _inverse(self, x, y, limits: SolverLimits = ConvergenceConstants.SPACE_OBLIQUE_INVERSE):
        es, sa, ca, p21, xj = self._es, self._sa, self._ca, self._p21, self._xj
        a = self._semi_major
        x = x - self._false_easting
        y = y - self._false_northing

        # Transformed longitude by fixed point iteration
        tlon = x / (a * self._b)
        for _ in range(limits.max_iterations):
            sav = tlon
            s = self._s(tlon)
            blon = (x / a) + (y / a) * s / xj - self._a2 * np.sin(2.0 * tlon) \
                - self._a4 * np.sin(4.0 * tlon) \
                - (s / xj) * (self._c1 * np.sin(tlon) + self._c3 * np.sin(3.0 * tlon))
            tlon = blon / self._b
            if abs(tlon - sav) < limits.tolerance:
                break
        else:
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)

        st = np.sin(tlon)
        defac = np.exp(np.sqrt(1.0 + s * s / xj / xj)
                       * (y / a - self._c1 * st - self._c3 * np.sin(3.0 * tlon)))
        tlat = 2.0 * (np.arctan(defac) - PI / 4.0)

        dd = st * st
        if abs(np.cos(tlon)) < 1.0e-7:
            tlon = tlon - 1.0e-7
        bigk = np.sin(tlat)
        bigk2 = bigk * bigk
        xlamt = np.arctan(
            ((1.0 - bigk2 / (1.0 - es)) * np.tan(tlon) * ca
             - bigk * sa * np.sqrt((1.0 + self._q * dd) * (1.0 - bigk2) - bigk2 * self._u)
             / np.cos(tlon))
            / (1.0 - bigk2 * (1.0 + self._u)))

        # Correct the quadrant
        sl = 1.0 if xlamt >= 0.0 else -1.0
        scl = 1.0 if np.cos(tlon) >= 0.0 else -1.0
        xlamt = xlamt - (PI / 2.0) * (1.0 - scl) * sl
        dlon = xlamt - p21 * tlon

        if abs(sa) < 1.0e-7:
            dlat = asinz(bigk / np.sqrt((1.0 - es) * (1.0 - es) + es * bigk2))
        else:
            dlat = np.arctan((np.tan(tlon) * np.cos(xlamt) - ca * np.sin(xlamt)) / ((1.0 - es) * sa))
        return GeographicPoint(dlat, adjust_lon(dlon + self._lon_center))


@register_projection
class OblatedEqualArea(Projection):
    """Oblated Equal Area (sphere).

    Parameters
    ----------
    radius : float or pint.Quantity
        Sphere radius.
    center_lon, center_lat : float
        Projection center in radians.
    shape_m, shape_n : float
        Oval shape parameters.
    angle : float
        Rotation angle (theta) in radians.
    false_easting, false_northing : float or pint.Quantity
        Offsets added to projected coordinates.
    """

    code = ProjectionCode.OBEQA

    def __init__(
        self,
        radius: Length,
        center_lon: float = 0.0,
        center_lat: float = 0.0,
        shape_m: float = 1.0,
        shape_n: float = 1.0,
        angle: float = 0.0,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(radius)
        require(shape_m > 0 and shape_n > 0, f"Shape parameters must be positive, got m={shape_m}, n={shape_n}")
        self._r = self._semi_major
        self._lon_center = center_lon
        self._lat_center = center_lat
        self._m = shape_m
        self._n = shape_n
        self._theta = angle
        self._sin_lat_o = np.sin(center_lat)
        self._cos_lat_o = np.cos(center_lat)
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")
        self._set_parameters(
            center_lon=center_lon, center_lat=center_lat, shape_m=shape_m, shape_n=shape_n,
            angle=angle, false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4(
            "oea", m=self._m, n=self._n, theta=np.degrees(self._theta),
            lat_0=np.degrees(self._lat_center), lon_0=np.degrees(self._lon_center),
            x_0=self._false_easting, y_0=self._false_northing,
        )

    def _forward(self, lat, lon):
        m, n, r = self._m, self._n, self._r
        delta_lon = lon - self._lon_center
        sin_lat, cos_lat = np.sin(lat), np.cos(lat)
        sin_dlon, cos_dlon = np.sin(delta_lon), np.cos(delta_lon)
        z = np.arccos(np.clip(self._sin_lat_o * sin_lat + self._cos_lat_o * cos_lat * cos_dlon, -1.0, 1.0))
        az = np.arctan2(cos_lat * sin_dlon,
                        self._cos_lat_o * sin_lat - self._sin_lat_o * cos_lat * cos_dlon) + self._theta
        temp = 2.0 * np.sin(z / 2.0)
        x_prime = temp * np.sin(az)
        y_prime = temp * np.cos(az)
        big_m = np.arcsin(x_prime / 2.0)
        big_n = np.arcsin(y_prime / 2.0 * np.cos(big_m) / np.cos(2.0 * big_m / m))
        return ProjectedPoint(
            m * r * np.sin(2.0 * big_m / m) * np.cos(big_n) / np.cos(2.0 * big_n / n) + self._false_easting,
            n * r * np.sin(2.0 * big_n / n) + self._false_northing,
        )

    def _inverse(self, x, y):
        m, n, r = self._m, self._n, self._r
        x = x - self._false_easting
        y = y - self._false_northing
        big_n = (n / 2.0) * np.arcsin(y / (n * r))
        big_m = (m / 2.0) * np.arcsin(x / (m * r) * np.cos(2.0 * big_n / n) / np.cos(big_n))
        x_prime = 2.0 * np.sin(big_m)
        y_prime = 2.0 * np.sin(big_n) * np.cos(2.0 * big_m / m) / np.cos(big_m)
        z = 2.0 * np.arcsin(np.hypot(x_prime, y_prime) / 2.0)
        diff_angle = np.arctan2(x_prime, y_prime) - self._theta
        sin_z, cos_z = np.sin(z), np.cos(z)
        lat = np.arcsin(self._sin_lat_o * cos_z + self._cos_lat_o * sin_z * np.cos(diff_angle))
        lon = adjust_lon(self._lon_center + np.arctan2(
            sin_z * np.sin(diff_angle),
            self._cos_lat_o * cos_z - self._sin_lat_o * sin_z * np.cos(diff_angle)))
        return GeographicPoint(lat, lon)


# Modified-Stereographic Conformal coefficients for Alaska (index 0 unused)
_ALASKA_A = (0.0, 0.9945303, 0.0052083, 0.0072721, -0.0151089, 0.0642675, 0.3582802)
_ALASKA_B = (0.0, 0.0, -0.0027404, 0.0048181, -0.1932526, -0.1381226, -0.2884586)
_ALASKA_ES = 0.006768657997291094


@register_projection
class AlaskaConformal(Projection):
    """Modified-Stereographic Conformal projection for Alaska.

    The center (64N, 152W) and the Clarke 1866 eccentricity of the
    polynomial fit are fixed; the semi-major axis only scales the result.
    """

    code = ProjectionCode.ALASKA

    def __init__(
        self,
        semi_major: Length,
        semi_minor: Length = None,
        false_easting: Length = 0.0,
        false_northing: Length = 0.0
    ):
        super().__init__(semi_major, semi_minor)
        self._false_easting = to_magnitude(false_easting, "m")
        self._false_northing = to_magnitude(false_northing, "m")
        self._lon_center = -152.0 * D2R
        self._lat_center = 64.0 * D2R
        self._ecc = np.sqrt(_ALASKA_ES)
        chi = self._conformal(self._lat_center)
        self._sin_p26, self._cos_p26 = np.sin(chi), np.cos(chi)
        self._set_parameters(
            center_lon=self._lon_center, center_lat=self._lat_center,
            false_easting=self._false_easting, false_northing=self._false_northing,
        )
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4("alsk", x_0=self._false_easting, y_0=self._false_northing)

    def _conformal(self, lat):
        esphi = self._ecc * np.sin(lat)
        return 2.0 * np.arctan(np.tan((HALF_PI + lat) / 2.0)
                               * np.power((1.0 - esphi) / (1.0 + esphi), self._ecc / 2.0)) - HALF_PI

    @staticmethod
    def _polynomial(xp, yp, with_derivative=False):
        """Evaluate the complex polynomial (and optionally its derivative) by Knuth's method."""
        n = len(_ALASKA_A) - 1
        r = xp + xp
        s = xp * xp + yp * yp
        ar, ai = _ALASKA_A[n], _ALASKA_B[n]
        br, bi = _ALASKA_A[n - 1], _ALASKA_B[n - 1]
        cr, ci = n * ar, n * ai
        dr, di = (n - 1) * br, (n - 1) * bi
        arn = ain = 0.0
        for j in range(2, n + 1):
            arn = br + r * ar
            ain = bi + r * ai
            if j < n:
                br = _ALASKA_A[n - j] - s * ar
                bi = _ALASKA_B[n - j] - s * ai
                ar, ai = arn, ain
                crn = dr + r * cr
                cin = di + r * ci
                dr = (n - j) * _ALASKA_A[n - j] - s * cr
                di = (n - j) * _ALASKA_B[n - j] - s * ci
                cr, ci = crn, cin
        br, bi = -s * ar, -s * ai
        ar, ai = arn, ain
        fr = xp * ar - yp * ai + br
        fi = yp * ar + xp * ai + bi
        if not with_derivative:
            return fr, fi
        return fr, fi, xp * cr - yp * ci + dr, yp * cr + xp * ci + di

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self._lon_center)
        sin_lon, cos_lon = np.sin(dlon), np.cos(dlon)
        chi = self._conformal(lat)
        sin_phi, cos_phi = np.sin(chi), np.cos(chi)
        g = self._sin_p26 * sin_phi + self._cos_p26 * cos_phi * cos_lon
        if abs(g + 1.0) <= EPSLN:
            return projected_failure(ProjectionStatus.PROJECTS_TO_INFINITY)
        s = 2.0 / (1.0 + g)
        xp = s * cos_phi * sin_lon
        yp = s * (self._cos_p26 * sin_phi - self._sin_p26 * cos_phi * cos_lon)
        fr, fi = self._polynomial(xp, yp)
        return ProjectedPoint(fr * self._semi_major + self._false_easting,
                              fi * self._semi_major + self._false_northing)

    def _inverse(self, x, y, limits: SolverLimits = ConvergenceConstants.ALASKA_CONFORMAL):
        x = (x - self._false_easting) / self._semi_major
        y = (y - self._false_northing) / self._semi_major

        # Newton-Raphson in the complex plane back to oblique stereographic
        xp, yp = x, y
        for _ in range(limits.max_iterations):
            fr, fi, fpr, fpi = self._polynomial(xp, yp, with_derivative=True)
            fr -= x
            fi -= y
            den = fpr * fpr + fpi * fpi
            dxp = -(fr * fpr + fi * fpi) / den
            dyp = -(fi * fpr - fr * fpi) / den
            xp += dxp
            yp += dyp
            if abs(dxp) + abs(dyp) <= limits.tolerance:
                break
        else:
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)

        rh = np.hypot(xp, yp)
        if abs(rh) <= EPSLN:
            return GeographicPoint(self._lat_center, self._lon_center)
        z = 2.0 * np.arctan(rh / 2.0)
        sinz, cosz = np.sin(z), np.cos(z)
        chi = asinz(cosz * self._sin_p26 + (yp * sinz * self._cos_p26) / rh)

        # Conformal latitude back to geodetic latitude
        phi = chi
        for _ in range(limits.max_iterations):
            esphi = self._ecc * np.sin(phi)
            dphi = 2.0 * np.arctan(np.tan((HALF_PI + chi) / 2.0)
                                   * np.power((1.0 + esphi) / (1.0 - esphi), self._ecc / 2.0)) - HALF_PI - phi
            phi += dphi
            if abs(dphi) <= limits.tolerance:
                break
        else:
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)

        lon = adjust_lon(self._lon_center + np.arctan2(
            xp * sinz, rh * self._cos_p26 * cosz - yp * self._sin_p26 * sinz))
        return GeographicPoint(phi, lon)
