"""
Projection Registry.

Projection types are addressed by their legacy GCTP system codes. Each
concrete projection class registers itself with the ``register_projection``
decorator; callers then build projections by code without importing the
implementing module.

Examples
--------
>>> from projections import create_projection, ProjectionCode
>>> merc = create_projection(ProjectionCode.MERCAT, semi_major=6378137.0,
...                          semi_minor=6356752.3142)
>>> projection_code("mercator")
<ProjectionCode.MERCAT: 5>
"""

from enum import IntEnum
from typing import Dict, Optional, Type, TYPE_CHECKING

from common.exceptions import ProjectionParameterError

if TYPE_CHECKING:
    from projections.base import Projection


class ProjectionCode(IntEnum):
    """GCTP projection system codes."""
    GEO = 0
    UTM = 1
    SPCS = 2
    ALBERS = 3
    LAMCC = 4
    MERCAT = 5
    PS = 6
    POLYC = 7
    EQUIDC = 8
    TM = 9
    STEREO = 10
    LAMAZ = 11
    AZMEQD = 12
    GNOMON = 13
    ORTHO = 14
    GVNSP = 15
    SNSOID = 16
    EQRECT = 17
    MILLER = 18
    VGRINT = 19
    HOM = 20
    ROBIN = 21
    SOM = 22
    ALASKA = 23
    GOOD = 24
    MOLL = 25
    IMOLL = 26
    HAMMER = 27
    WAGIV = 28
    WAGVII = 29
    OBEQA = 30


PROJECTION_NAMES: Dict[ProjectionCode, str] = {
    ProjectionCode.GEO: "Geographic",
    ProjectionCode.UTM: "Universal Transverse Mercator",
    ProjectionCode.SPCS: "State Plane Coordinates",
    ProjectionCode.ALBERS: "Albers Conical Equal Area",
    ProjectionCode.LAMCC: "Lambert Conformal Conic",
    ProjectionCode.MERCAT: "Mercator",
    ProjectionCode.PS: "Polar Stereographic",
    ProjectionCode.POLYC: "Polyconic",
    ProjectionCode.EQUIDC: "Equidistant Conic",
    ProjectionCode.TM: "Transverse Mercator",
    ProjectionCode.STEREO: "Stereographic",
    ProjectionCode.LAMAZ: "Lambert Azimuthal Equal Area",
    ProjectionCode.AZMEQD: "Azimuthal Equidistant",
    ProjectionCode.GNOMON: "Gnomonic",
    ProjectionCode.ORTHO: "Orthographic",
    ProjectionCode.GVNSP: "General Vertical Near-Side Perspective",
    ProjectionCode.SNSOID: "Sinusoidal",
    ProjectionCode.EQRECT: "Equirectangular",
    ProjectionCode.MILLER: "Miller Cylindrical",
    ProjectionCode.VGRINT: "Van der Grinten",
    ProjectionCode.HOM: "Hotine Oblique Mercator",
    ProjectionCode.ROBIN: "Robinson",
    ProjectionCode.SOM: "Space Oblique Mercator",
    ProjectionCode.ALASKA: "Alaska Conformal",
    ProjectionCode.GOOD: "Interrupted Goode Homolosine",
    ProjectionCode.MOLL: "Mollweide",
    ProjectionCode.IMOLL: "Interrupted Mollweide",
    ProjectionCode.HAMMER: "Hammer",
    ProjectionCode.WAGIV: "Wagner IV",
    ProjectionCode.WAGVII: "Wagner VII",
    ProjectionCode.OBEQA: "Oblated Equal Area",
}

_REGISTRY: Dict[ProjectionCode, Type["Projection"]] = {}


def register_projection(cls: Type["Projection"]) -> Type["Projection"]:
    """Class decorator adding a projection class under its ``code``."""
    code = ProjectionCode(cls.code)
    if code in _REGISTRY and _REGISTRY[code] is not cls:
        raise ValueError(
            f"Projection code {code.name} already registered to {_REGISTRY[code].__name__}"
        )
    _REGISTRY[code] = cls
    return cls


def projection_class(code: int) -> Type["Projection"]:
    """Return the class implementing a projection code.

    Raises
    ------
    ProjectionParameterError
        If no class is registered for the code.
    """
    try:
        return _REGISTRY[ProjectionCode(code)]
    except (ValueError, KeyError):
        raise ProjectionParameterError(f"Unsupported projection system {code}") from None


def create_projection(code: int, **params) -> "Projection":
    """Build a projection by code from keyword parameters."""
    return projection_class(code)(**params)


def projection_code(name: str) -> Optional[ProjectionCode]:
    """Look up a code by display name or enum name, ignoring case."""
    wanted = name.strip().lower()
    for code, display in PROJECTION_NAMES.items():
        if wanted in (display.lower(), code.name.lower()):
            return code
    return None


def projection_name(code: int) -> str:
    return PROJECTION_NAMES[ProjectionCode(code)]


def registered_codes() -> tuple:
    """Codes that currently have an implementing class."""
    return tuple(sorted(_REGISTRY))
