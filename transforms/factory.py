"""
GCTP-Style Map Projection Factory.

Builds ``MapProjection`` grids from the classic GCTP description of a
projection: a system code, a zone (UTM and State Plane only), a spheroid
code and an array of 15 projection parameters. Angles in the parameter
array are packed DDDMMMSSS.SS values.

Parameter array layout by system (0-based slots):

============  ===================================================
System        Slots used
============  ===================================================
UTM           0 lon, 1 lat (zone 0 only, to pick the zone)
ALBERS/LAMCC  2 lat1, 3 lat2, 4 center lon, 5 origin lat, 6 FE, 7 FN
MERCAT/PS     4 center lon, 5 true scale lat, 6 FE, 7 FN
POLYC         4 center lon, 5 origin lat, 6 FE, 7 FN
EQUIDC        2 lat1, 3 lat2, 4 center lon, 5 origin lat, 6 FE, 7 FN,
              8 nonzero for two standard parallels
TM            2 scale, 4 center lon, 5 origin lat, 6 FE, 7 FN
azimuthals    4 center lon, 5 center lat, 6 FE, 7 FN (GVNSP: 2 height)
world maps    4 center lon, 6 FE, 7 FN (EQRECT: 5 true scale lat)
HOM           2 scale, 5 origin lat, 6 FE, 7 FN, then 12 nonzero for
              3 azimuth and 4 origin lon, or zero for the two points
              8 lon1, 9 lat1, 10 lon2, 11 lat2
SOM           12 nonzero for Landsat 2 satellite and 3 path, zero for
              3 inclination, 4 ascending lon, 8 period, 10 end of path
OBEQA         2 shape m, 3 shape n, 4 center lon, 5 center lat,
              8 angle, 6 FE, 7 FN
============  ===================================================

Slots 0 and 1 also carry custom ellipsoid axes when the spheroid code is
negative.
"""

from typing import Callable, Dict, Optional, Sequence
import numpy as np

from common.constants import GeodeticConstants
from common.exceptions import ProjectionParameterError
from common.logging_config import get_logger
from common.types import EarthLocation
from geodesy.datum import DatumFactory
from geodesy.ellipsoid_math import calc_utm_zone, paksz
from geodesy.spheroids import Spheroid, resolve_axes
from projections import (
    AlaskaConformal,
    AlbersConicalEqualArea,
    AzimuthalEquidistant,
    EquidistantConic,
    Equirectangular,
    GeneralVerticalNearsidePerspective,
    GeographicProjection,
    Gnomonic,
    Hammer,
    HotineObliqueMercator,
    InterruptedGoodeHomolosine,
    InterruptedMollweide,
    LambertAzimuthalEqualArea,
    LambertConformalConic,
    Mercator,
    MillerCylindrical,
    Mollweide,
    OblatedEqualArea,
    Orthographic,
    PolarStereographic,
    Polyconic,
    ProjectionCode,
    Robinson,
    Sinusoidal,
    SpaceObliqueMercator,
    StatePlane,
    Stereographic,
    TransverseMercator,
    UniversalTransverseMercator,
    VanDerGrinten,
    WagnerIV,
    WagnerVII,
)
from projections.base import Projection
from projections.state_plane import ZoneTable
from transforms.affine import AffineTransform
from transforms.map_projection import MapProjection

logger = get_logger(__name__)

PARAMETER_COUNT = 15

UTM_SCALE_FACTOR = 0.9996


def packed_radians(value: float) -> float:
    """Packed DDDMMMSSS.SS angle to radians."""
    return paksz(value) * GeodeticConstants.D2R


class _Decoded:
    """Values shared by every system's decoder."""

    def __init__(self, parameters: Sequence[float], spheroid: int):
        self.p = parameters
        self.spheroid = spheroid
        self.a, self.b, self.radius = resolve_axes(spheroid, parameters)
        self.fe = parameters[6]
        self.fn = parameters[7]

    def angle(self, slot: int) -> float:
        return packed_radians(self.p[slot])


def _albers(d, zone):
    return AlbersConicalEqualArea(d.a, d.b, lat1=d.angle(2), lat2=d.angle(3),
                                  center_lon=d.angle(4), center_lat=d.angle(5),
                                  false_easting=d.fe, false_northing=d.fn)


def _lambert_conic(d, zone):
    return LambertConformalConic(d.a, d.b, lat1=d.angle(2), lat2=d.angle(3),
                                 center_lon=d.angle(4), center_lat=d.angle(5),
                                 false_easting=d.fe, false_northing=d.fn)


def _mercator(d, zone):
    return Mercator(d.a, d.b, center_lon=d.angle(4), lat1=d.angle(5),
                    false_easting=d.fe, false_northing=d.fn)


def _polar_stereographic(d, zone):
    return PolarStereographic(d.a, d.b, center_lon=d.angle(4), center_lat=d.angle(5),
                              false_easting=d.fe, false_northing=d.fn)


def _polyconic(d, zone):
    return Polyconic(d.a, d.b, center_lon=d.angle(4), center_lat=d.angle(5),
                     false_easting=d.fe, false_northing=d.fn)


def _equidistant_conic(d, zone):
    return EquidistantConic(d.a, d.b, lat1=d.angle(2), lat2=d.angle(3),
                            center_lon=d.angle(4), center_lat=d.angle(5),
                            two_parallels=d.p[8] != 0,
                            false_easting=d.fe, false_northing=d.fn)


def _transverse_mercator(d, zone):
    return TransverseMercator(d.a, d.b, scale_factor=d.p[2], center_lon=d.angle(4),
                              center_lat=d.angle(5), false_easting=d.fe, false_northing=d.fn)


def _azimuthal(cls):
    def build(d, zone):
        return cls(d.radius, center_lon=d.angle(4), center_lat=d.angle(5),
                   false_easting=d.fe, false_northing=d.fn)
    return build


def _perspective(d, zone):
    return GeneralVerticalNearsidePerspective(d.radius, height=d.p[2], center_lon=d.angle(4),
                                              center_lat=d.angle(5),
                                              false_easting=d.fe, false_northing=d.fn)


def _world(cls):
    def build(d, zone):
        return cls(d.radius, center_lon=d.angle(4), false_easting=d.fe, false_northing=d.fn)
    return build


def _equirectangular(d, zone):
    return Equirectangular(d.radius, center_lon=d.angle(4), lat1=d.angle(5),
                           false_easting=d.fe, false_northing=d.fn)


def _hotine(d, zone):
    shared = dict(scale_factor=d.p[2], center_lat=d.angle(5),
                  false_easting=d.fe, false_northing=d.fn)
    if d.p[12] != 0:
        return HotineObliqueMercator(d.a, d.b, azimuth=d.angle(3), center_lon=d.angle(4), **shared)
    return HotineObliqueMercator(d.a, d.b, lon1=d.angle(8), lat1=d.angle(9),
                                 lon2=d.angle(10), lat2=d.angle(11), two_points=True, **shared)


def _space_oblique(d, zone):
    if d.p[12] != 0:
        return SpaceObliqueMercator(d.a, d.b, satellite=int(d.p[2]), path=int(d.p[3]),
                                    false_easting=d.fe, false_northing=d.fn)
    return SpaceObliqueMercator(d.a, d.b, inclination=d.angle(3), center_lon=d.angle(4),
                                period=d.p[8], end_of_path=d.p[10] != 0,
                                false_easting=d.fe, false_northing=d.fn)


def _oblated(d, zone):
    return OblatedEqualArea(d.radius, center_lon=d.angle(4), center_lat=d.angle(5),
                            shape_m=d.p[2], shape_n=d.p[3], angle=d.angle(8),
                            false_easting=d.fe, false_northing=d.fn)


def _utm(d, zone):
    a, b = d.a, d.b
    if d.spheroid < 0:
        a, b, _ = resolve_axes(Spheroid.CLARKE1866)
    if zone == 0:
        lon = paksz(d.p[0])
        lat = paksz(d.p[1])
        zone = calc_utm_zone(lon)
        if lat < 0:
            zone = -zone
        logger.debug(f"UTM zone {zone} selected from ({lat}, {lon})")
    return UniversalTransverseMercator(a, b, zone=zone, scale_factor=UTM_SCALE_FACTOR)


_DECODERS: Dict[ProjectionCode, Callable[[_Decoded, int], Projection]] = {
    ProjectionCode.GEO: lambda d, zone: GeographicProjection(d.a, d.b),
    ProjectionCode.UTM: _utm,
    ProjectionCode.ALBERS: _albers,
    ProjectionCode.LAMCC: _lambert_conic,
    ProjectionCode.MERCAT: _mercator,
    ProjectionCode.PS: _polar_stereographic,
    ProjectionCode.POLYC: _polyconic,
    ProjectionCode.EQUIDC: _equidistant_conic,
    ProjectionCode.TM: _transverse_mercator,
    ProjectionCode.STEREO: _azimuthal(Stereographic),
    ProjectionCode.LAMAZ: _azimuthal(LambertAzimuthalEqualArea),
    ProjectionCode.AZMEQD: _azimuthal(AzimuthalEquidistant),
    ProjectionCode.GNOMON: _azimuthal(Gnomonic),
    ProjectionCode.ORTHO: _azimuthal(Orthographic),
    ProjectionCode.GVNSP: _perspective,
    ProjectionCode.SNSOID: _world(Sinusoidal),
    ProjectionCode.EQRECT: _equirectangular,
    ProjectionCode.MILLER: _world(MillerCylindrical),
    ProjectionCode.VGRINT: _world(VanDerGrinten),
    ProjectionCode.HOM: _hotine,
    ProjectionCode.ROBIN: _world(Robinson),
    ProjectionCode.SOM: _space_oblique,
    ProjectionCode.ALASKA: lambda d, zone: AlaskaConformal(d.a, d.b, false_easting=d.fe,
                                                           false_northing=d.fn),
    ProjectionCode.GOOD: lambda d, zone: InterruptedGoodeHomolosine(d.radius),
    ProjectionCode.MOLL: _world(Mollweide),
    ProjectionCode.IMOLL: lambda d, zone: InterruptedMollweide(d.radius),
    ProjectionCode.HAMMER: _world(Hammer),
    ProjectionCode.WAGIV: _world(WagnerIV),
    ProjectionCode.WAGVII: _world(WagnerVII),
    ProjectionCode.OBEQA: _oblated,
}


class MapProjectionFactory:
    """Creates map projection grids from GCTP projection descriptions.

    Parameters
    ----------
    datum_factory : DatumFactory
        Datum cache shared by every grid this factory creates.
    zone_table : ZoneTable, optional
        State Plane zone source, the packaged table when omitted.

    Examples
    --------
    >>> factory = MapProjectionFactory(DatumFactory())
    >>> params = [0.0] * 15
    >>> grid = factory.create(ProjectionCode.MERCAT, 0, params, Spheroid.WGS84, (100, 100))
    >>> grid.datum.datum_name
    'WGS 84'
    """

    def __init__(self, datum_factory: DatumFactory, zone_table: Optional[ZoneTable] = None):
        self._logger = get_logger("MapProjectionFactory")
        self._datum_factory = datum_factory
        self._zone_table = zone_table

    @property
    def datum_factory(self) -> DatumFactory:
        return self._datum_factory

    def create_projection(
        self,
        system: int,
        zone: int,
        parameters: Sequence[float],
        spheroid: int
    ) -> Projection:
        """Decode a GCTP description into a ``Projection``.

        Raises
        ------
        ProjectionParameterError
            For an unknown system, a short parameter array or
            inconsistent parameters.
        MalformedTableError
            If a packed angle cannot be decoded.
        """
        try:
            code = ProjectionCode(system)
        except ValueError:
            self._logger.warning(f"Unsupported projection system {system}")
            raise ProjectionParameterError(f"Unsupported projection system: {system}") from None
        params = [float(v) for v in parameters]
        if len(params) < PARAMETER_COUNT:
            raise ProjectionParameterError(
                f"Expected {PARAMETER_COUNT} projection parameters, got {len(params)}"
            )
        if code is ProjectionCode.SPCS:
            return StatePlane(zone, spheroid, zone_table=self._zone_table)
        decoded = _Decoded(params, int(spheroid))
        return _DECODERS[code](decoded, int(zone))

    def create(
        self,
        system: int,
        zone: int,
        parameters: Sequence[float],
        spheroid: int,
        dims: Sequence[int],
        affine: Optional[AffineTransform] = None
    ) -> MapProjection:
        """Map projection grid from a GCTP description and a (row, col) to (x, y) affine."""
        projection = self.create_projection(system, zone, parameters, spheroid)
        datum = self._datum_factory.for_axes(projection.semi_major, projection.semi_minor)
        self._logger.info(f"Created {projection.name} grid {tuple(dims)} on {datum.datum_name}")
        return MapProjection(projection, datum, dims, affine)

    def create_centered(
        self,
        system: int,
        zone: int,
        parameters: Sequence[float],
        spheroid: int,
        dims: Sequence[int],
        center: EarthLocation,
        pixel_dims: Sequence[float]
    ) -> MapProjection:
        """Map projection grid centered on an earth location.

        ``pixel_dims`` gives the pixel (height, width) in map units at the
        projection's true scale.
        """
        grid = self.create(system, zone, parameters, spheroid, dims)
        return grid.with_center(center, (pixel_dims[0], pixel_dims[1]))


def packed_parameters(**slots: float) -> np.ndarray:
    """Fifteen-slot parameter array with the named slots filled.

    Slots are addressed as ``p0`` to ``p14``.

    Examples
    --------
    >>> packed_parameters(p4=-75000000.0)[4]
    -75000000.0
    """
    params = np.zeros(PARAMETER_COUNT)
    for key, value in slots.items():
        index = int(key.lstrip("p"))
        if not 0 <= index < PARAMETER_COUNT:
            raise ValueError(f"Parameter slot {key} is out of range")
        params[index] = value
    return params
