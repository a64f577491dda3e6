"""
Spatial indexing of earth locations.

This package provides ``EarthLocationSet``, a binned nearest-neighbour
index over the sphere, and its per-caller ``SearchContext``.
"""

from spatial_index.earth_location_set import EarthLocationSet, Entry, SearchContext, location_ecf

__all__ = [
    "EarthLocationSet",
    "Entry",
    "SearchContext",
    "location_ecf",
]
