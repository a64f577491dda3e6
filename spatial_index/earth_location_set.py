"""
Binned Nearest-Neighbour Index for Earth Locations.

``EarthLocationSet`` answers "which stored location is closest to this
one?" for large, spatially clustered point sets such as the pixels along
a satellite track. The sphere is cut into latitude rings of equal height
and every ring into longitude bins of roughly equal area, so that a query
only has to scan the bin it falls in and the bins touching it.

Binning
-------
With ``n`` bins per degree there are ``180 n`` rings. Ring ``i`` covers
latitudes ``[i/n - 90, (i+1)/n - 90)`` and holds

    round(360 n * (sin(top) - sin(bottom)) / sin(1/n))

longitude bins (at least one), which keeps bin areas close to those at
the equator. Bins are numbered ring by ring from the south pole.

Distances are squared Euclidean distances between Earth-Centered-Fixed
coordinates, which order neighbours the same way great circle distances
do for points that are actually close.

Thread Safety
-------------
Insert, clear and query hold a re-entrant lock, so one set can be shared
between threads. A ``SearchContext`` caches adjacency lists for one
caller and must not be shared.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar
import numpy as np

from common.constants import GeodeticConstants
from common.logging_config import get_logger
from common.types import EarthLocation
from geodesy.coordinate_models import geodetic_to_ecf

T = TypeVar("T")

# Inset applied to bin edges before they are mapped into a neighbouring ring
EDGE_EPSILON = 1.0e-6

_WGS84_A = GeodeticConstants.WGS84_SEMI_MAJOR_AXIS.value
_WGS84_F = 1.0 / GeodeticConstants.WGS84_INVERSE_FLATTENING.value
_WGS84_E2 = _WGS84_F * (2.0 - _WGS84_F)


def location_ecf(location: EarthLocation) -> np.ndarray:
    """ECF coordinates in meters on the location's datum (WGS84 when untagged)."""
    if location.datum is not None:
        return np.array(location.datum.compute_ecf(location.lat, location.lon), dtype=np.float64)
    return np.array(
        geodetic_to_ecf(np.radians(location.lat), np.radians(location.lon), _WGS84_A, _WGS84_E2),
        dtype=np.float64,
    )


@dataclass(frozen=True)
class Entry(Generic[T]):
    """A stored location with its ECF coordinates and payload."""
    location: EarthLocation
    ecf: np.ndarray = field(repr=False, compare=False)
    payload: T = None


class SearchContext:
    """Per-caller cache of adjacency lists keyed by bin index."""

    def __init__(self):
        self.adjacency: Dict[int, Tuple[int, ...]] = {}

    def __len__(self) -> int:
        return len(self.adjacency)


class _Bin:
    """Entries of one bin with a lazily stacked coordinate array."""

    __slots__ = ("entries", "_coords")

    def __init__(self):
        self.entries: List[Entry] = []
        self._coords: Optional[np.ndarray] = None

    def add(self, entry: Entry):
        self.entries.append(entry)
        self._coords = None

    def nearest(self, search: np.ndarray) -> Tuple[Entry, float]:
        if self._coords is None:
            self._coords = np.vstack([entry.ecf for entry in self.entries])
        dist2 = np.sum((self._coords - search) ** 2, axis=1)
        index = int(np.argmin(dist2))
        return self.entries[index], float(dist2[index])


class EarthLocationSet(Generic[T]):
    """Set of earth locations with payloads and nearest-neighbour lookup.

    Parameters
    ----------
    bins_per_degree : int
        Latitude rings per degree. Larger values mean smaller bins and
        faster queries over dense data, at the cost of more adjacency
        bookkeeping.

    Examples
    --------
    >>> points = EarthLocationSet(bins_per_degree=2)
    >>> points.insert(EarthLocation(45.0, -120.0), "a")
    True
    >>> points.insert(EarthLocation(45.2, -120.1), "b")
    True
    >>> points.nearest(EarthLocation(45.19, -120.09)).payload
    'b'
    """

    def __init__(self, bins_per_degree: int = 1):
        if bins_per_degree < 1:
            raise ValueError(f"bins_per_degree must be at least 1, got {bins_per_degree}")
        self._logger = get_logger("EarthLocationSet")
        self._bins_per_degree = int(bins_per_degree)
        self._lat_rings = 180 * self._bins_per_degree
        self._lat_degrees_per_bin = 1.0 / self._bins_per_degree

        bins_at_equator = 360 * self._bins_per_degree
        step = self._lat_degrees_per_bin
        base_lat = step * np.arange(self._lat_rings) - 90.0
        factor = ((np.sin(np.radians(base_lat + step)) - np.sin(np.radians(base_lat)))
                  / np.sin(np.radians(step)))
        bins = np.maximum(np.floor(bins_at_equator * factor + 0.5).astype(int), 1)
        self._bins_at_ring = bins
        self._lon_degrees_at_ring = 360.0 / bins
        self._ring_base = np.concatenate([[0], np.cumsum(bins)[:-1]])
        self._total_bins = int(np.sum(bins))

        self._bins: Dict[int, _Bin] = {}
        self._size = 0
        self._lock = threading.RLock()
        self._logger.debug(
            f"Created location set with {self._lat_rings} rings and {self._total_bins} bins"
        )

    # ------------------------------------------------------------------
    # Bin arithmetic
    # ------------------------------------------------------------------

    @property
    def bins_per_degree(self) -> int:
        return self._bins_per_degree

    @property
    def lat_rings(self) -> int:
        return self._lat_rings

    @property
    def total_bins(self) -> int:
        """Number of addressable bins over the whole sphere."""
        return self._total_bins

    def bins_in_ring(self, ring: int) -> int:
        return int(self._bins_at_ring[ring])

    def lat_ring(self, lat: float) -> int:
        """Ring holding a latitude in degrees, or -1 when out of range."""
        if not np.isfinite(lat):
            return -1
        ring = int(np.floor((lat + 90.0) / self._lat_degrees_per_bin))
        if ring == self._lat_rings:
            ring = self._lat_rings - 1
        if ring < 0 or ring > self._lat_rings - 1:
            return -1
        return ring

    def lon_bin(self, ring: int, lon: float) -> int:
        """Bin within a ring holding a longitude in degrees, or -1 when out of range."""
        if not np.isfinite(lon):
            return -1
        if lon >= 180:
            lon -= 360
        lon_bin = int(np.floor((lon + 180.0) / self._lon_degrees_at_ring[ring]))
        if lon_bin < 0 or lon_bin > self._bins_at_ring[ring] - 1:
            return -1
        return lon_bin

    def bin_index(self, ring: int, lon_bin: int) -> int:
        return int(self._ring_base[ring]) + lon_bin

    def locate(self, location: EarthLocation) -> Tuple[int, int]:
        """(ring, lon_bin) of a location, with -1 entries when out of range."""
        ring = self.lat_ring(location.lat)
        if ring == -1:
            return -1, -1
        return ring, self.lon_bin(ring, location.lon)

    def _ring_span(self, ring: int, west_edge: float, east_edge: float) -> List[int]:
        """Bins of ``ring`` covering the longitudes from one edge east to the other."""
        count = self._bins_at_ring[ring]
        first = self.lon_bin(ring, west_edge)
        last = self.lon_bin(ring, east_edge)
        span = [first]
        current = first
        while current != last:
            current = (current + 1) % count
            span.append(current)
        return [self.bin_index(ring, b) for b in span]

    def adjacent_bins(self, ring: int, lon_bin: int) -> Tuple[int, ...]:
        """Bin indices to scan for a query falling in (ring, lon_bin).

        The bin itself, its east and west neighbours (wrapping at the
        antimeridian) and every bin of the rings above and below that
        overlaps the longitudes of those three. Each index appears once.
        """
        count = self._bins_at_ring[ring]
        width = self._lon_degrees_at_ring[ring]
        left = count - 1 if lon_bin == 0 else lon_bin - 1
        right = 0 if lon_bin == count - 1 else lon_bin + 1
        if count <= 2:
            west_edge, east_edge = EDGE_EPSILON - 180.0, 180.0 - EDGE_EPSILON
        else:
            west_edge = left * width + EDGE_EPSILON - 180.0
            east_edge = (right + 1) * width - EDGE_EPSILON - 180.0

        adjacent: List[int] = []
        if ring < self._lat_rings - 1:
            adjacent.extend(self._ring_span(ring + 1, west_edge, east_edge))
        adjacent.extend(self.bin_index(ring, b) for b in (left, lon_bin, right))
        if ring > 0:
            adjacent.extend(self._ring_span(ring - 1, west_edge, east_edge))
        return tuple(dict.fromkeys(adjacent))

    # ------------------------------------------------------------------
    # Contents
    # ------------------------------------------------------------------

    def bin_count(self) -> int:
        """Number of bins that hold at least one entry."""
        with self._lock:
            return len(self._bins)

    def size(self) -> int:
        """Number of entries inserted since the last clear."""
        with self._lock:
            return self._size

    def __len__(self) -> int:
        return self.size()

    def clear(self):
        with self._lock:
            self._bins.clear()
            self._size = 0

    def get_context(self) -> SearchContext:
        """New adjacency cache for a sequence of queries from one caller."""
        return SearchContext()

    def insert(self, location: EarthLocation, payload: Any = None) -> bool:
        """Store a location and its payload.

        Locations outside the representable latitude and longitude range
        are skipped.

        Returns
        -------
        bool
            True if the location was stored.
        """
        ring, lon_bin = self.locate(location)
        if ring == -1 or lon_bin == -1:
            self._logger.debug(f"Skipped location outside the bin grid: {location}")
            return False
        entry = Entry(location, location_ecf(location), payload)
        index = self.bin_index(ring, lon_bin)
        with self._lock:
            bin_data = self._bins.get(index)
            if bin_data is None:
                bin_data = _Bin()
                self._bins[index] = bin_data
            bin_data.add(entry)
            self._size += 1
        return True

    def nearest(self, location: EarthLocation, context: Optional[SearchContext] = None) -> Optional[Entry]:
        """Closest stored entry to a location.

        Parameters
        ----------
        location : EarthLocation
            Query location.
        context : SearchContext, optional
            Adjacency cache from ``get_context`` for repeated queries.

        Returns
        -------
        Entry or None
            None when no entry lies in the query's bin or its neighbours.
        """
        ring, lon_bin = self.locate(location)
        if ring == -1 or lon_bin == -1:
            return None
        index = self.bin_index(ring, lon_bin)
        if context is not None:
            adjacent = context.adjacency.get(index)
            if adjacent is None:
                adjacent = self.adjacent_bins(ring, lon_bin)
                context.adjacency[index] = adjacent
        else:
            adjacent = self.adjacent_bins(ring, lon_bin)

        best: Optional[Entry] = None
        best_dist2 = np.inf
        search = None
        with self._lock:
            for bin_index in adjacent:
                bin_data = self._bins.get(bin_index)
                if bin_data is None:
                    continue
                if search is None:
                    search = location_ecf(location)
                entry, dist2 = bin_data.nearest(search)
                if dist2 < best_dist2:
                    best, best_dist2 = entry, dist2
        return best
