"""
Geodesy: ellipsoid math, reference spheroids and datums.

This package provides:
- The scalar ellipsoid math kernel shared by every projection
- The legacy spheroid table and axis resolution
- ECF conversions on arbitrary ellipsoids
- Datums, the Molodensky shift and the datum cache
"""

from geodesy.spheroids import (
    Spheroid,
    SpheroidParameters,
    spheroid_parameters,
    find_spheroid,
    find_spheroid_by_name,
    resolve_axes,
)
from geodesy.coordinate_models import geodetic_to_ecf, ecf_to_geodetic
from geodesy.datum import Datum, DatumFactory, load_datum_table

__all__ = [
    "Spheroid",
    "SpheroidParameters",
    "spheroid_parameters",
    "find_spheroid",
    "find_spheroid_by_name",
    "resolve_axes",
    "geodetic_to_ecf",
    "ecf_to_geodetic",
    "Datum",
    "DatumFactory",
    "load_datum_table",
]
