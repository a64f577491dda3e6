"""
Grid to earth transforms.

This package provides:
- Immutable 2D affine transforms between grid and map coordinates
- The ``EarthTransform`` contract (to_grid, to_earth, resolution, subsets)
- ``MapProjection``: a projection, a datum and a grid affine combined
- The GCTP-style ``MapProjectionFactory``
"""

from transforms.affine import AffineTransform
from transforms.earth_transform import EarthTransform
from transforms.map_projection import MapProjection, same_parameters
from transforms.factory import MapProjectionFactory, packed_parameters, packed_radians

__all__ = [
    "AffineTransform",
    "EarthTransform",
    "MapProjection",
    "same_parameters",
    "MapProjectionFactory",
    "packed_parameters",
    "packed_radians",
]
