"""
Map projections.

This package provides:
- The ``Projection`` capability interface and per-point status values
- The GCTP projection code registry and ``create_projection``
- Forward and inverse transforms for every GCTP projection system
- State Plane zone tables

Importing the package registers every projection class.
"""

from projections.registry import (
    ProjectionCode,
    PROJECTION_NAMES,
    register_projection,
    projection_class,
    create_projection,
    projection_code,
    projection_name,
    registered_codes,
)
from projections.base import (
    Projection,
    ProjectionStatus,
    ProjectedPoint,
    GeographicPoint,
)
from projections.geographic import GeographicProjection, LongitudeRange, classify_longitude_range
from projections.cylindrical import (
    Mercator,
    TransverseMercator,
    UniversalTransverseMercator,
    MillerCylindrical,
    Equirectangular,
)
from projections.conic import AlbersConicalEqualArea, LambertConformalConic, EquidistantConic
from projections.polyconic import Polyconic
from projections.azimuthal import (
    Stereographic,
    PolarStereographic,
    LambertAzimuthalEqualArea,
    AzimuthalEquidistant,
    Gnomonic,
    Orthographic,
    GeneralVerticalNearsidePerspective,
)
from projections.pseudocylindrical import (
    Sinusoidal,
    Mollweide,
    Robinson,
    WagnerIV,
    WagnerVII,
    Hammer,
    VanDerGrinten,
    InterruptedGoodeHomolosine,
    InterruptedMollweide,
)
from projections.oblique import (
    HotineObliqueMercator,
    SpaceObliqueMercator,
    OblatedEqualArea,
    AlaskaConformal,
)
from projections.state_plane import (
    StatePlane,
    ZoneRecord,
    LegacyZoneFile,
    PackagedZoneTable,
)

__all__ = [
    "ProjectionCode",
    "PROJECTION_NAMES",
    "register_projection",
    "projection_class",
    "create_projection",
    "projection_code",
    "projection_name",
    "registered_codes",
    "Projection",
    "ProjectionStatus",
    "ProjectedPoint",
    "GeographicPoint",
    "GeographicProjection",
    "LongitudeRange",
    "classify_longitude_range",
    "Mercator",
    "TransverseMercator",
    "UniversalTransverseMercator",
    "MillerCylindrical",
    "Equirectangular",
    "AlbersConicalEqualArea",
    "LambertConformalConic",
    "EquidistantConic",
    "Polyconic",
    "Stereographic",
    "PolarStereographic",
    "LambertAzimuthalEqualArea",
    "AzimuthalEquidistant",
    "Gnomonic",
    "Orthographic",
    "GeneralVerticalNearsidePerspective",
    "Sinusoidal",
    "Mollweide",
    "Robinson",
    "WagnerIV",
    "WagnerVII",
    "Hammer",
    "VanDerGrinten",
    "InterruptedGoodeHomolosine",
    "InterruptedMollweide",
    "HotineObliqueMercator",
    "SpaceObliqueMercator",
    "OblatedEqualArea",
    "AlaskaConformal",
    "StatePlane",
    "ZoneRecord",
    "LegacyZoneFile",
    "PackagedZoneTable",
]
