"""
Pseudocylindrical and Miscellaneous World Projections.

Sinusoidal, Mollweide, Robinson, Wagner IV, Wagner VII, Hammer,
Van der Grinten and the two interrupted world maps (Goode Homolosine and
Mollweide). All are spherical.

The Mollweide family solves ``2t + sin 2t = C sin(lat)`` for the auxiliary
angle ``t`` by Newton-Raphson. Near the poles the iteration converges only
linearly, so the poles are assigned their exact auxiliary angle directly.

The interrupted projections lay several lobes side by side, each with its
own central meridian. Plane points that fall in the gaps between lobes
cannot be inverted and come back as ``OUTSIDE_DOMAIN``.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual.
- Snyder, J.P. and Voxland, P.M. (1989). An Album of Map Projections.
- USGS GCTP (robfor.c, goodfor.c, imolwfor.c).
"""

import numpy as np

from common.constants import ConvergenceConstants, SolverLimits
from common.units import Length, to_magnitude
from geodesy.ellipsoid_math import EPSLN, HALF_PI, PI, adjust_lon, asinz, sign
from projections.base import (
    GeographicPoint,
    Projection,
    ProjectedPoint,
    ProjectionStatus,
    geographic_failure,
    projected_failure,
)
from projections.registry import ProjectionCode, register_projection

# Mollweide constants: 2 sqrt(2) / pi and sqrt(2)
MOLLWEIDE_X = 0.900316316158
MOLLWEIDE_Y = 1.4142135623731

# Goode: offset of the Mollweide lobes and the latitude where they join (40 44' 11.8")
GOODE_Y_OFFSET = 0.0528035274542
GOODE_JOIN_LAT = 0.710987989993

# Robinson table at 5 degree steps, indexed from 1 (index 0 unused)
ROBINSON_PR = np.array([
    0.0, -0.062, 0.0, 0.062, 0.124, 0.186, 0.248, 0.31, 0.372, 0.434, 0.4958,
    0.5571, 0.6176, 0.6769, 0.7346, 0.7903, 0.8435, 0.8936, 0.9394, 0.9761, 1.0,
])
ROBINSON_XLR = 0.9858 * np.array([
    0.0, 0.9986, 1.0, 0.9986, 0.9954, 0.99, 0.9822, 0.973, 0.96, 0.9427, 0.9216,
    0.8962, 0.8679, 0.835, 0.7986, 0.7597, 0.7186, 0.6732, 0.6213, 0.5722, 0.5322,
])
ROBINSON_DEG = 0.01745329252


def mollweide_theta(
    lat: float,
    con: float,
    limits: SolverLimits = ConvergenceConstants.NEWTON_PSEUDOCYLINDRICAL
) -> float:
    """Auxiliary angle t with 2t + sin 2t = con, or NaN without convergence.

    ``con`` is the scaled sine of ``lat`` (pi sin(lat) for Mollweide). At
    ``con = +-pi`` the root is a triple root, so it is returned directly.
    """
    if abs(abs(con) - PI) < EPSLN:
        return HALF_PI * sign(con)
    theta = lat
    for _ in range(limits.max_iterations):
        delta_theta = -(theta + np.sin(theta) - con) / (1.0 + np.cos(theta))
        theta += delta_theta
        if abs(delta_theta) < limits.tolerance:
            return theta / 2.0
    return np.nan


class _WorldProjection(Projection):
    """Spherical world projection with a central meridian and false offsets."""

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

    def _proj4(self, proj):
        return self._build_proj4(proj, lon_0=np.degrees(self._lon_center),
                                 x_0=self._false_easting, y_0=self._false_northing)


@register_projection
class Sinusoidal(_WorldProjection):
    """Sinusoidal (sphere)."""

    code = ProjectionCode.SNSOID

    @property
    def proj4_string(self):
        return self._proj4("sinu")

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self._lon_center)
        return ProjectedPoint(
            self._r * delta_lon * np.cos(lat) + self._false_easting,
            self._r * lat + self._false_northing,
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        lat = y / self._r
        if abs(lat) > HALF_PI:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        if abs(abs(lat) - HALF_PI) > EPSLN:
            return GeographicPoint(lat, adjust_lon(self._lon_center + x / (self._r * np.cos(lat))))
        return GeographicPoint(lat, self._lon_center)


@register_projection
class Mollweide(_WorldProjection):
    """Mollweide (sphere)."""

    code = ProjectionCode.MOLL

    @property
    def proj4_string(self):
        return self._proj4("moll")

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self._lon_center)
        theta = mollweide_theta(lat, PI * np.sin(lat))
        if np.isnan(theta):
            return projected_failure(ProjectionStatus.NO_CONVERGENCE)
        if PI / 2 - abs(lat) < EPSLN:
            delta_lon = 0.0
        return ProjectedPoint(
            MOLLWEIDE_X * self._r * delta_lon * np.cos(theta) + self._false_easting,
            MOLLWEIDE_Y * self._r * np.sin(theta) + self._false_northing,
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        arg = y / (MOLLWEIDE_Y * self._r)
        if abs(arg) > 0.999999999999:
            arg = 0.999999999999 * sign(arg)
        theta = np.arcsin(arg)
        lon = adjust_lon(self._lon_center + x / (MOLLWEIDE_X * self._r * np.cos(theta)))
        lon = min(max(lon, -PI), PI)
        return GeographicPoint(asinz((2.0 * theta + np.sin(2.0 * theta)) / PI), lon)


@register_projection
class Robinson(_WorldProjection):
    """Robinson (sphere), by second-difference interpolation in the Robinson table.

    The inverse refines a first latitude estimate until the forward
    series reproduces ``y`` to within the ``ROBINSON`` solver tolerance.
    """

    code = ProjectionCode.ROBIN

    @property
    def proj4_string(self):
        return self._proj4("robin")

    @staticmethod
    def _interpolate(table, ip1, p2):
        return (table[ip1 + 2] + p2 * (table[ip1 + 3] - table[ip1 + 1]) / 2.0
                + p2 * p2 * (table[ip1 + 3] - 2.0 * table[ip1 + 2] + table[ip1 + 1]) / 2.0)

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self._lon_center)
        p2 = abs(lat / 5.0 / ROBINSON_DEG)
        ip1 = int(p2 - EPSLN)
        p2 -= ip1
        x = self._r * self._interpolate(ROBINSON_XLR, ip1, p2) * dlon + self._false_easting
        y = self._r * self._interpolate(ROBINSON_PR, ip1, p2) * PI / 2.0
        return ProjectedPoint(x, (y if lat >= 0 else -y) + self._false_northing)

    def _inverse(self, x, y, limits: SolverLimits = ConvergenceConstants.ROBINSON):
        x = x - self._false_easting
        y = y - self._false_northing
        yy = 2.0 * y / PI / self._r
        if abs(yy) > ROBINSON_PR[-1] + EPSLN:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        phid = yy * 90.0
        p2 = abs(phid / 5.0)
        ip1 = max(int(p2 - EPSLN), 1)
        ip1 = min(ip1, len(ROBINSON_PR) - 4)
        direction = 1.0 if y >= 0 else -1.0

        # Reverse the interpolation for a first estimate
        while True:
            u = ROBINSON_PR[ip1 + 3] - ROBINSON_PR[ip1 + 1]
            v = ROBINSON_PR[ip1 + 3] - 2.0 * ROBINSON_PR[ip1 + 2] + ROBINSON_PR[ip1 + 1]
            t = 2.0 * (abs(yy) - ROBINSON_PR[ip1 + 2]) / u
            c = v / u
            p2 = t * (1.0 - c * t * (1.0 - 2.0 * c * t))
            if p2 >= 0.0 or ip1 == 1:
                break
            ip1 -= 1

        phid = direction * (p2 + ip1) * 5.0
        for _ in range(limits.max_iterations):
            p2 = abs(phid / 5.0)
            ip1 = min(int(p2 - EPSLN), len(ROBINSON_PR) - 4)
            p2 -= ip1
            y1 = direction * self._r * self._interpolate(ROBINSON_PR, ip1, p2) * PI / 2.0
            phid += -180.0 * (y1 - y) / PI / self._r
            if abs(y1 - y) <= limits.tolerance:
                break
        else:
            return geographic_failure(ProjectionStatus.NO_CONVERGENCE)

        lon = self._lon_center + x / self._r / self._interpolate(ROBINSON_XLR, ip1, p2)
        return GeographicPoint(phid * ROBINSON_DEG, adjust_lon(lon))


@register_projection
class WagnerIV(_WorldProjection):
    """Wagner IV (sphere)."""

    code = ProjectionCode.WAGIV

    @property
    def proj4_string(self):
        return self._proj4("wag4")

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self._lon_center)
        theta = mollweide_theta(lat, 2.9604205062 * np.sin(lat))
        if np.isnan(theta):
            return projected_failure(ProjectionStatus.NO_CONVERGENCE)
        return ProjectedPoint(
            0.86310 * self._r * delta_lon * np.cos(theta) + self._false_easting,
            1.56548 * self._r * np.sin(theta) + self._false_northing,
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        theta = asinz(y / (1.56548 * self._r))
        lon = adjust_lon(self._lon_center + x / (0.86310 * self._r * np.cos(theta)))
        return GeographicPoint(asinz((2.0 * theta + np.sin(2.0 * theta)) / 2.9604205062), lon)


@register_projection
class WagnerVII(_WorldProjection):
    """Wagner VII (sphere)."""

    code = ProjectionCode.WAGVII

    @property
    def proj4_string(self):
        return self._proj4("wag7")

    def _forward(self, lat, lon):
        delta_lon = adjust_lon(lon - self._lon_center)
        sin_lon = np.sin(delta_lon / 3.0)
        cos_lon = np.cos(delta_lon / 3.0)
        s = 0.90631 * np.sin(lat)
        c0 = np.sqrt(1.0 - s * s)
        c1 = np.sqrt(2.0 / (1.0 + c0 * cos_lon))
        return ProjectedPoint(
            2.66723 * self._r * c0 * c1 * sin_lon + self._false_easting,
            1.24104 * self._r * s * c1 + self._false_northing,
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        t1 = (x / 2.66723) ** 2
        t2 = (y / 1.24104) ** 2
        p = np.sqrt(t1 + t2)
        if p <= EPSLN:
            return GeographicPoint(0.0, self._lon_center)
        c = 2.0 * asinz(p / (2.0 * self._r))
        lat = asinz(y * np.sin(c) / (1.24104 * 0.90631 * p))
        lon = adjust_lon(self._lon_center + 3.0 * np.arctan2(x * np.tan(c), 2.66723 * p))
        return GeographicPoint(lat, lon)


@register_projection
class Hammer(_WorldProjection):
    """Hammer (sphere)."""

    code = ProjectionCode.HAMMER

    @property
    def proj4_string(self):
        return self._proj4("hammer")

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self._lon_center)
        fac = self._r * 1.414213562 / np.sqrt(1.0 + np.cos(lat) * np.cos(dlon / 2.0))
        return ProjectedPoint(
            self._false_easting + fac * 2.0 * np.cos(lat) * np.sin(dlon / 2.0),
            self._false_northing + fac * np.sin(lat),
        )

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        r2 = self._r * self._r
        radicand = 4.0 * r2 - x * x / 4.0 - y * y
        if radicand < 0:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        fac = np.sqrt(radicand) / 2.0
        lon = adjust_lon(self._lon_center + 2.0 * np.arctan2(x * fac, 2.0 * r2 - x * x / 4 - y * y))
        return GeographicPoint(asinz(y * fac / r2), lon)


@register_projection
class VanDerGrinten(_WorldProjection):
    """Van der Grinten I (sphere)."""

    code = ProjectionCode.VGRINT

    @property
    def proj4_string(self):
        return self._proj4("vandg")

    def _forward(self, lat, lon):
        dlon = adjust_lon(lon - self._lon_center)
        pi_r = PI * self._r
        if abs(lat) <= EPSLN:
            return ProjectedPoint(self._false_easting + self._r * dlon, self._false_northing)
        theta = asinz(2.0 * abs(lat / PI))
        if abs(dlon) <= EPSLN or abs(abs(lat) - HALF_PI) <= EPSLN:
            y = pi_r * np.tan(0.5 * theta)
            return ProjectedPoint(self._false_easting, self._false_northing + (y if lat >= 0 else -y))

        al = 0.5 * abs(PI / dlon - dlon / PI)
        asq = al * al
        sinth, costh = np.sin(theta), np.cos(theta)
        g = costh / (sinth + costh - 1.0)
        gsq = g * g
        m = g * (2.0 / sinth - 1.0)
        msq = m * m
        con = pi_r * (al * (g - msq) + np.sqrt(
            asq * (g - msq) * (g - msq) - (msq + asq) * (gsq - msq))) / (msq + asq)
        if dlon < 0:
            con = -con
        x = self._false_easting + con
        con = abs(con / pi_r)
        y = pi_r * np.sqrt(1.0 - con * con - 2.0 * al * con)
        return ProjectedPoint(x, self._false_northing + (y if lat >= 0 else -y))

    def _inverse(self, x, y):
        x = x - self._false_easting
        y = y - self._false_northing
        con = PI * self._r
        xx = x / con
        yy = y / con
        xys = xx * xx + yy * yy
        c1 = -abs(yy) * (1.0 + xys)
        c2 = c1 - 2.0 * yy * yy + xx * xx
        c3 = -2.0 * c1 + 1.0 + 2.0 * yy * yy + xys * xys
        d = yy * yy / c3 + (2.0 * c2 ** 3 / c3 ** 3 - 9.0 * c1 * c2 / c3 ** 2) / 27.0
        a1 = (c1 - c2 * c2 / 3.0 / c3) / c3
        m1 = 2.0 * np.sqrt(-a1 / 3.0)
        if abs(m1) < EPSLN:
            lat = 0.0
        else:
            con = np.clip(((3.0 * d) / a1) / m1, -1.0, 1.0)
            th1 = np.arccos(con) / 3.0
            lat = (-m1 * np.cos(th1 + PI / 3.0) - c2 / 3.0 / c3) * PI
            if y < 0:
                lat = -lat
        if abs(xx) < EPSLN:
            return GeographicPoint(lat, self._lon_center)
        lon = adjust_lon(self._lon_center + PI * (
            xys - 1.0 + np.sqrt(1.0 + 2.0 * (xx * xx - yy * yy) + xys * xys)) / 2.0 / xx)
        return GeographicPoint(lat, lon)


# Interrupted Goode Homolosine lobes: central meridian (degrees) and whether
# the lobe is Mollweide (homolographic) rather than Sinusoidal
_GOODE_LOBES = (
    (-100.0, True), (-100.0, False), (30.0, True), (30.0, False),
    (-160.0, False), (-60.0, False), (-160.0, True), (-60.0, True),
    (20.0, False), (140.0, False), (20.0, True), (140.0, True),
)

# Longitude range (radians) covered by each Goode lobe
_GOODE_RANGES = (
    (-PI - EPSLN, -0.698131700798), (-PI - EPSLN, -0.698131700798),
    (-0.698131700798, PI + EPSLN), (-0.698131700798, PI + EPSLN),
    (-PI - EPSLN, -1.74532925199), (-1.74532925199, -0.349065850399),
    (-PI - EPSLN, -1.74532925199), (-1.74532925199, -0.349065850399),
    (-0.349065850399, 1.3962634016), (1.3962634016, PI + EPSLN),
    (-0.349065850399, 1.3962634016), (1.3962634016, PI + EPSLN),
)


def _goode_region(lat_or_y, lon_or_x, scale):
    """Goode lobe index for a point; ``scale`` is 1 for angles and R for plane units."""
    if lat_or_y >= GOODE_JOIN_LAT * scale:
        return 0 if lon_or_x <= -0.698131700798 * scale else 2
    if lat_or_y >= 0.0:
        return 1 if lon_or_x <= -0.698131700798 * scale else 3
    base = 4 if lat_or_y >= -GOODE_JOIN_LAT * scale else 6
    if lon_or_x <= -1.74532925199 * scale:
        return base
    if lon_or_x <= -0.349065850399 * scale:
        return base + 1
    if lon_or_x <= 1.3962634016 * scale:
        return base + 4
    return base + 5


@register_projection
class InterruptedGoodeHomolosine(Projection):
    """Interrupted Goode Homolosine (sphere).

    Twelve lobes: Sinusoidal between 40 44' 11.8" N and S, Mollweide
    poleward of that. The lobe layout is fixed, so the only parameter is
    the sphere radius.
    """

    code = ProjectionCode.GOOD

    def __init__(self, radius: Length):
        super().__init__(radius)
        self._r = self._semi_major
        self._centers = tuple(np.radians(center) for center, _ in _GOODE_LOBES)
        self._feast = tuple(self._r * center for center in self._centers)
        self._set_parameters()
        self._log_parameters()

    @property
    def proj4_string(self):
        return self._build_proj4("igh")

    def _forward(self, lat, lon):
        lon = adjust_lon(lon)
        region = _goode_region(lat, lon, 1.0)
        delta_lon = adjust_lon(lon - self._centers[region])
        if not _GOODE_LOBES[region][1]:
            return ProjectedPoint(self._feast[region] + self._r * delta_lon * np.cos(lat), self._r * lat)
        theta = mollweide_theta(lat, PI * np.sin(lat))
        if np.isnan(theta):
            return projected_failure(ProjectionStatus.NO_CONVERGENCE)
        if PI / 2 - abs(lat) < EPSLN:
            delta_lon = 0.0
        return ProjectedPoint(
            self._feast[region] + MOLLWEIDE_X * self._r * delta_lon * np.cos(theta),
            self._r * (MOLLWEIDE_Y * np.sin(theta) - GOODE_Y_OFFSET * sign(lat)),
        )

    def _inverse(self, x, y):
        region = _goode_region(y, x, self._r)
        x = x - self._feast[region]
        center = self._centers[region]
        if not _GOODE_LOBES[region][1]:
            lat = y / self._r
            if abs(lat) > HALF_PI:
                return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
            if abs(abs(lat) - HALF_PI) > EPSLN:
                lon = adjust_lon(center + x / (self._r * np.cos(lat)))
            else:
                lon = center
        else:
            arg = (y + GOODE_Y_OFFSET * self._r * sign(y)) / (MOLLWEIDE_Y * self._r)
            if abs(arg) > 1.0:
                return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
            theta = np.arcsin(arg)
            lon = center + x / (MOLLWEIDE_X * self._r * np.cos(theta))
            if lon < -(PI + EPSLN):
                return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
            arg = (2.0 * theta + np.sin(2.0 * theta)) / PI
            if abs(arg) > 1.0:
                return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
            lat = np.arcsin(arg)

        # 180 and -180 may be mixed up by rounding
        if (x < 0 and PI - lon < EPSLN) or (x > 0 and PI + lon < EPSLN):
            lon = -lon
        low, high = _GOODE_RANGES[region]
        if lon < low or lon > high:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        return GeographicPoint(lat, lon)


# Interrupted Mollweide lobes: central meridian (radians), false easting / R
_IMOLL_LOBES = (
    (1.0471975512, -2.19988776387),
    (-2.96705972839, -0.15713484),
    (-0.523598776, 2.04275292359),
    (1.57079632679, -1.72848324304),
    (-2.44346095279, 0.31426968),
    (-0.34906585, 2.19988776387),
)


@register_projection
class InterruptedMollweide(Projection):
    """Interrupted Mollweide (sphere), three lobes per hemisphere."""

    code = ProjectionCode.IMOLL

    def __init__(self, radius: Length):
        super().__init__(radius)
        self._r = self._semi_major
        self._set_parameters()
        self._log_parameters()

    @staticmethod
    def _forward_region(lat, lon):
        if lat >= 0.0:
            if 0.34906585 <= lon < 1.91986217719:
                return 0
            if lon >= 1.919862177 or lon < -1.745329252:
                return 1
            return 2
        if 0.34906585 <= lon < 2.44346095279:
            return 3
        if lon >= 2.44346095279 or lon < -1.2217304764:
            return 4
        return 5

    def _inverse_region(self, x, y):
        if y >= 0.0:
            if x <= self._r * -1.41421356248:
                return 0
            return 1 if x <= self._r * 0.942809042 else 2
        if x <= self._r * -0.942809042:
            return 3
        return 4 if x <= self._r * 1.41421356248 else 5

    def _forward(self, lat, lon):
        lon = adjust_lon(lon)
        region = self._forward_region(lat, lon)
        center, feast = _IMOLL_LOBES[region]
        delta_lon = adjust_lon(lon - center)
        theta = mollweide_theta(lat, PI * np.sin(lat))
        if np.isnan(theta):
            return projected_failure(ProjectionStatus.NO_CONVERGENCE)
        if PI / 2 - abs(lat) < EPSLN:
            delta_lon = 0.0
        return ProjectedPoint(
            feast * self._r + MOLLWEIDE_X * self._r * delta_lon * np.cos(theta),
            self._r * MOLLWEIDE_Y * np.sin(theta),
        )

    def _inverse(self, x, y):
        region = self._inverse_region(x, y)
        center, feast = _IMOLL_LOBES[region]
        x = x - feast * self._r
        arg = y / (MOLLWEIDE_Y * self._r)
        if abs(arg) > 1.0:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        theta = np.arcsin(arg)
        lon = adjust_lon(center + x / (MOLLWEIDE_X * self._r * np.cos(theta)))
        lat = asinz((2.0 * theta + np.sin(2.0 * theta)) / PI)
        in_break = {
            0: lon < 0.34906585 or lon > 1.91986217719,
            1: (0.34906585 < lon < 1.91986217719) or (-1.74532925199 < lon < 0.34906585),
            2: lon < -1.745329252 or lon > 0.34906585,
            3: lon < 0.34906585 or lon > 2.44346095279,
            4: (0.34906585 < lon < 2.44346095279) or (-1.2217304764 < lon < 0.34906585),
            5: lon < -1.2217304764 or lon > 0.34906585,
        }[region]
        if in_break:
            return geographic_failure(ProjectionStatus.OUTSIDE_DOMAIN)
        return GeographicPoint(lat, lon)
