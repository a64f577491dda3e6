"""
Earth Transform Contract.

An earth transform relates a data grid to the earth. ``to_grid`` turns a
geographic location into a (row, col) data location and ``to_earth``
turns a data location back into a geographic location on the
transform's native datum. Everything else here is built from those two
conversions:

- ``resolution``: local grid spacing in km by centered differences
- ``closest``: the nearest grid point that is inside the grid
- ``bounding_box``: a closed polygon tracing a data window's edges
- ``world_axes``: grid-space unit vectors pointing north and east

Locations tagged with a datum other than the native one are shifted
onto the native datum before they reach the grid conversion. Untagged
locations are taken to already be on the native datum.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple
import numpy as np

from common.exceptions import UnsupportedOperationError
from common.logging_config import get_logger
from common.types import DataLocation, EarthLocation
from geodesy.datum import Datum

logger = get_logger(__name__)

ROW = 0
COL = 1

# Degree offset used to probe local north and east directions
AXIS_PROBE_DEGREES = 0.01


class EarthTransform(ABC):
    """Abstract base class for grid to earth transforms.

    Subclasses implement ``_grid_from_native`` and ``_earth_from_grid``
    working in degrees on the native datum; the public methods add the
    datum handling and the derived operations.

    Parameters
    ----------
    datum : Datum
        Native datum of the transform.
    dims : sequence of int
        Grid dimensions as (rows, cols).
    """

    def __init__(self, datum: Datum, dims: Sequence[int]):
        self._datum = datum
        self._dims = tuple(int(d) for d in dims)

    @property
    def datum(self) -> Datum:
        return self._datum

    @property
    def dims(self) -> Tuple[int, ...]:
        return self._dims

    @property
    def description(self) -> str:
        """Short name of the transform type."""
        return type(self).__name__

    # ------------------------------------------------------------------
    # Native conversions
    # ------------------------------------------------------------------

    @abstractmethod
    def _grid_from_native(self, lat: float, lon: float) -> Tuple[float, float]:
        """(row, col) for a location in degrees on the native datum, NaN on failure."""

    @abstractmethod
    def _earth_from_grid(self, row: float, col: float) -> Tuple[float, float]:
        """(lat, lon) in degrees on the native datum, NaN on failure."""

    # ------------------------------------------------------------------
    # Public conversions
    # ------------------------------------------------------------------

    def to_native(self, location: EarthLocation) -> EarthLocation:
        """Shift a location onto the native datum when it carries another one."""
        if location.datum is None or location.datum is self._datum:
            return location
        return location.shift_datum(self._datum)

    def to_grid(self, location: EarthLocation) -> DataLocation:
        """Convert an earth location to a data location.

        Returns an invalid (NaN) data location when the point cannot be
        converted.
        """
        if not location.is_valid():
            return DataLocation.invalid(len(self._dims))
        native = self.to_native(location)
        row, col = self._grid_from_native(native.lat, native.lon)
        return DataLocation((row, col))

    def to_earth(self, location: DataLocation) -> EarthLocation:
        """Convert a data location to an earth location on the native datum."""
        if not location.is_valid():
            return EarthLocation.invalid(self._datum)
        lat, lon = self._earth_from_grid(location[ROW], location[COL])
        return EarthLocation(lat, lon, self._datum)

    def closest(self, location: EarthLocation) -> DataLocation:
        """Nearest grid point, or an invalid location outside the grid."""
        rounded = self.to_grid(location).round()
        if rounded.is_valid() and rounded.is_contained(self._dims):
            return rounded
        return DataLocation.invalid(len(self._dims))

    # ------------------------------------------------------------------
    # Derived geometry
    # ------------------------------------------------------------------

    def distance(self, a: DataLocation, b: DataLocation) -> float:
        """Great circle distance in km between two data locations."""
        return self.to_earth(a).distance(self.to_earth(b))

    def resolution(self, location: DataLocation) -> Tuple[float, ...]:
        """Grid spacing in km along each axis at a data location.

        Each entry is the distance between the points half a grid unit
        either side of ``location`` along that axis.
        """
        spacing = []
        for axis in range(location.rank):
            lower = [0.0] * location.rank
            upper = [0.0] * location.rank
            lower[axis] = -0.5
            upper[axis] = 0.5
            spacing.append(self.distance(location.translate(*lower), location.translate(*upper)))
        return tuple(spacing)

    def bounding_box(
        self,
        upper_left: DataLocation,
        lower_right: DataLocation,
        segments: int = 1
    ) -> List[EarthLocation]:
        """Closed polygon of earth locations around a data window.

        The top, right, bottom and left edges are each split into
        ``segments`` pieces, and the polygon ends back on ``upper_left``.
        """
        if segments < 1:
            raise ValueError(f"Bounding box needs at least one segment per side, got {segments}")
        top, left = upper_left[ROW], upper_left[COL]
        bottom, right = lower_right[ROW], lower_right[COL]
        polygon = []
        for i in range(segments):
            t = i / segments
            polygon.append(self.to_earth(DataLocation.of(top, left * (1 - t) + right * t)))
        for i in range(segments):
            t = i / segments
            polygon.append(self.to_earth(DataLocation.of(top * (1 - t) + bottom * t, right)))
        for i in range(segments):
            t = i / segments
            polygon.append(self.to_earth(DataLocation.of(bottom, right * (1 - t) + left * t)))
        for i in range(segments):
            t = i / segments
            polygon.append(self.to_earth(DataLocation.of(bottom * (1 - t) + top * t, left)))
        polygon.append(self.to_earth(upper_left))
        return polygon

    def world_axes(self, location: EarthLocation) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Unit vectors in (row, col) space pointing north and east.

        Returns
        -------
        Tuple[Tuple[float, float], Tuple[float, float]]
            ``(north, east)``; components are NaN where the grid
            conversion fails.
        """
        d = AXIS_PROBE_DEGREES
        north = self._axis_vector(location.translate(-d, 0), location.translate(d, 0))
        east = self._axis_vector(location.translate(0, -d), location.translate(0, d))
        return north, east

    def _axis_vector(self, base: EarthLocation, tip: EarthLocation) -> Tuple[float, float]:
        base_loc = self.to_grid(base)
        tip_loc = self.to_grid(tip)
        vector = np.array([tip_loc[ROW] - base_loc[ROW], tip_loc[COL] - base_loc[COL]])
        norm = np.hypot(vector[0], vector[1])
        if not np.isfinite(norm) or norm == 0:
            return (np.nan, np.nan)
        return (float(vector[0] / norm), float(vector[1] / norm))

    # ------------------------------------------------------------------
    # Subsets and reporting
    # ------------------------------------------------------------------

    def subset(self, origin: DataLocation, dims: Sequence[int]) -> "EarthTransform":
        """Transform for a sub-window starting at ``origin``."""
        raise UnsupportedOperationError(f"{self.description} does not support subsets")

    def describe(self) -> str:
        return f"{self.description} on {self._datum} with dimensions {self._dims}"
