"""
Map Projection Earth Transforms.

A ``MapProjection`` places a data grid on a map projection. It combines

- a ``Projection`` (geographic radians to map meters and back),
- an affine transform taking (row, col) grid coordinates to map (x, y),
- the grid dimensions and the native ``Datum``.

Grid to earth runs the affine and then the projection inverse; earth to
grid runs the projection forward and then the inverse affine, which is
computed once at construction. Every operation that changes the affine
(re-centering, subsets) returns a new ``MapProjection``.

For a geographic projection the affine also decides which longitude
window the grid covers. The window is classified from the grid's corner
longitudes whenever a ``MapProjection`` is constructed, so it follows
every affine change.

Bulk Paths
----------
``to_earth_into`` and ``to_grid_into`` convert whole coordinate arrays
into caller-provided numpy buffers and return a per-point status array.
They skip datum handling: input coordinates are taken to be on the
native datum.
"""

from typing import Optional, Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from common.constants import PARAMETER_RELATIVE_TOLERANCE
from common.exceptions import ProjectionParameterError
from common.logging_config import get_logger
from common.types import DataLocation, EarthLocation
from geodesy.datum import Datum
from projections.base import GeographicPoint, Projection, ProjectedPoint, ProjectionStatus
from projections.geographic import GeographicProjection, LongitudeRange
from transforms.affine import AffineTransform
from transforms.earth_transform import COL, ROW, EarthTransform

logger = get_logger(__name__)


def _same_parameter(a, b) -> bool:
    if isinstance(a, (float, np.floating)) and isinstance(b, (float, np.floating)):
        if a == b:
            return True
        scale = max(abs(a), abs(b))
        return abs(a - b) <= PARAMETER_RELATIVE_TOLERANCE * scale
    return a == b


def same_parameters(p: Projection, q: Projection) -> bool:
    """True when two projections have the same system and parameters.

    Floating point parameters are compared to a relative tolerance.
    """
    if p.code != q.code:
        return False
    if getattr(p, "zone", 0) != getattr(q, "zone", 0):
        return False
    pa, qa = p.parameters, q.parameters
    if pa.keys() != qa.keys():
        return False
    return all(_same_parameter(pa[key], qa[key]) for key in pa)


class MapProjection(EarthTransform):
    """Earth transform for a data grid laid out on a map projection.

    Parameters
    ----------
    projection : Projection
        The map projection.
    datum : Datum
        Native datum of the projected coordinates.
    dims : sequence of int
        Grid dimensions as (rows, cols).
    affine : AffineTransform, optional
        Transform from (row, col) to map (x, y). Identity when omitted.

    Raises
    ------
    NonInvertibleAffineError
        If ``affine`` cannot be inverted.

    Examples
    --------
    >>> from geodesy.datum import DatumFactory
    >>> from projections import Mercator
    >>> datum = DatumFactory().wgs84()
    >>> merc = Mercator(datum.axis, datum.axis * (1 - datum.flattening))
    >>> grid = MapProjection(merc, datum, (512, 512)).with_center(
    ...     EarthLocation(30.0, -80.0), (1000.0, 1000.0))
    >>> grid.pixel_dims()
    (1000.0, 1000.0)
    """

    def __init__(
        self,
        projection: Projection,
        datum: Datum,
        dims: Sequence[int],
        affine: Optional[AffineTransform] = None
    ):
        super().__init__(datum, dims)
        self._affine = AffineTransform.identity() if affine is None else affine
        self._forward_affine = self._affine.inverse()
        if isinstance(projection, GeographicProjection):
            if not self._affine.is_identity:
                min_lon, max_lon = self._longitude_extent()
                projection = projection.with_longitude_extent(min_lon, max_lon)
            elif projection.longitude_range is not LongitudeRange.SPANS_PRIME:
                projection = GeographicProjection(projection.semi_major, projection.semi_minor)
        self._projection = projection

    def _longitude_extent(self) -> Tuple[float, float]:
        rows, cols = self._dims[ROW], self._dims[COL]
        x0, _ = self._affine.transform(-0.5, -0.5)
        x1, _ = self._affine.transform(rows - 0.5, cols - 0.5)
        return min(x0, x1), max(x0, x1)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def projection(self) -> Projection:
        return self._projection

    @property
    def affine(self) -> AffineTransform:
        """Grid (row, col) to map (x, y) transform."""
        return self._affine

    @property
    def forward_affine(self) -> AffineTransform:
        """Map (x, y) to grid (row, col) transform."""
        return self._forward_affine

    @property
    def system(self) -> int:
        return int(self._projection.code)

    @property
    def zone(self) -> int:
        return getattr(self._projection, "zone", 0)

    @property
    def description(self) -> str:
        return self._projection.name

    # ------------------------------------------------------------------
    # Projection passthroughs
    # ------------------------------------------------------------------

    def forward(self, lat: float, lon: float) -> ProjectedPoint:
        """Projection forward transform (radians to meters)."""
        return self._projection.forward(lat, lon)

    def inverse(self, x: float, y: float) -> GeographicPoint:
        """Projection inverse transform (meters to radians)."""
        return self._projection.inverse(x, y)

    def _grid_from_native(self, lat, lon):
        x, y, status = self._projection.forward_deg(lat, lon)
        if status != ProjectionStatus.OK:
            return np.nan, np.nan
        return self._forward_affine.transform(x, y)

    def _earth_from_grid(self, row, col):
        x, y = self._affine.transform(row, col)
        lat, lon, status = self._projection.inverse_deg(x, y)
        if status != ProjectionStatus.OK:
            return np.nan, np.nan
        return lat, lon

    # ------------------------------------------------------------------
    # Bulk buffer paths
    # ------------------------------------------------------------------

    def to_earth_into(
        self,
        rows: NDArray[np.float64],
        cols: NDArray[np.float64],
        out_lat: NDArray[np.float64],
        out_lon: NDArray[np.float64]
    ) -> NDArray[np.int8]:
        """Convert grid coordinates to degrees, writing into ``out_lat``/``out_lon``.

        Returns
        -------
        ndarray
            Per-point ``ProjectionStatus`` values; failed points are NaN.
        """
        xs, ys = self._affine.transform_arrays(rows, cols)
        status = self._projection.inverse_arrays(xs, ys, out_lat, out_lon)
        np.degrees(out_lat, out=out_lat)
        np.degrees(out_lon, out=out_lon)
        return status

    def to_grid_into(
        self,
        lats: NDArray[np.float64],
        lons: NDArray[np.float64],
        out_rows: NDArray[np.float64],
        out_cols: NDArray[np.float64]
    ) -> NDArray[np.int8]:
        """Convert degrees to grid coordinates, writing into ``out_rows``/``out_cols``."""
        status = self._projection.forward_arrays(
            np.radians(lats), np.radians(lons), out_rows, out_cols
        )
        rows, cols = self._forward_affine.transform_arrays(out_rows, out_cols)
        out_rows[...] = rows
        out_cols[...] = cols
        return status

    # ------------------------------------------------------------------
    # New grids
    # ------------------------------------------------------------------

    def with_affine(self, affine: AffineTransform, dims: Optional[Sequence[int]] = None) -> "MapProjection":
        """Same projection and datum with a new affine (and optionally new dimensions)."""
        return MapProjection(self._projection, self._datum,
                             self._dims if dims is None else dims, affine)

    def with_center(
        self,
        center: EarthLocation,
        pixel_dims: Tuple[float, float],
        dims: Optional[Sequence[int]] = None
    ) -> "MapProjection":
        """Re-center the grid on an earth location.

        Parameters
        ----------
        center : EarthLocation
            Location that lands on the grid center, ``(dims - 1) / 2``.
        pixel_dims : (float, float)
            Pixel height and width in map units (meters, or degrees for a
            geographic projection). Rows run south and columns run east.
        dims : sequence of int, optional
            New grid dimensions, the current ones when omitted.

        Raises
        ------
        ProjectionParameterError
            If the center does not project.
        """
        dims = self._dims if dims is None else tuple(int(d) for d in dims)
        native = self.to_native(center)
        x, y, status = self._projection.forward_deg(native.lat, native.lon)
        if status != ProjectionStatus.OK:
            logger.warning(f"Center {center.format()} does not project: {status.name}")
            raise ProjectionParameterError(
                f"Cannot center {self.description} grid on {center.format()}: {status.name}"
            )
        pd_row, pd_col = float(pixel_dims[ROW]), float(pixel_dims[COL])
        affine = AffineTransform.from_coefficients(
            0.0, -pd_row, pd_col, 0.0,
            x - pd_col * (dims[COL] - 1) / 2.0,
            y + pd_row * (dims[ROW] - 1) / 2.0,
        )
        return MapProjection(self._projection, self._datum, dims, affine)

    def subset(self, origin: DataLocation, dims: Sequence[int]) -> "MapProjection":
        """Grid for the window of size ``dims`` starting at ``origin``."""
        affine = self._affine.concatenate(AffineTransform.translation(origin[ROW], origin[COL]))
        return MapProjection(self._projection, self._datum, dims, affine)

    def subset_strided(
        self,
        start: Sequence[int],
        stride: Sequence[int],
        length: Sequence[int]
    ) -> "MapProjection":
        """Grid sampling every ``stride`` points from ``start``, ``length`` points per axis."""
        affine = self._affine.concatenate(
            AffineTransform.translation(start[ROW], start[COL])
        ).concatenate(
            AffineTransform.scaling(stride[ROW], stride[COL])
        )
        return MapProjection(self._projection, self._datum, length, affine)

    # ------------------------------------------------------------------
    # Pixel geometry
    # ------------------------------------------------------------------

    def pixel_dims(self) -> Tuple[float, float]:
        """Pixel (height, width) in map units.

        Raises
        ------
        ValueError
            If the affine rotates or shears the grid.
        """
        m00, m10, m01, m11, _, _ = self._affine.coefficients
        if m00 != 0 or m11 != 0:
            raise ValueError("Pixel dimensions are undefined for a rotated grid")
        return -m10, m01

    def pixel_size(self) -> float:
        """Side length of a square pixel in map units.

        Raises
        ------
        ValueError
            If pixels are rotated or not square.
        """
        m00, m10, _, _, _, _ = self._affine.coefficients
        height, width = self.pixel_dims()
        if not np.isclose(abs(height), abs(width), rtol=PARAMETER_RELATIVE_TOLERANCE):
            raise ValueError(f"Pixels are not square ({height} by {width})")
        return float(np.hypot(m00, m10))

    # ------------------------------------------------------------------
    # Geographic seams
    # ------------------------------------------------------------------

    def is_boundary_cut(self, a: EarthLocation, b: EarthLocation) -> bool:
        """True if the segment between two locations crosses the grid's longitude seam.

        Only geographic grids have a seam; other projections never cut.
        """
        if isinstance(self._projection, GeographicProjection):
            return self._projection.is_boundary_cut(a, b)
        return False

    # ------------------------------------------------------------------
    # Comparison and reporting
    # ------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, MapProjection):
            return NotImplemented
        return (
            same_parameters(self._projection, other._projection)
            and self._projection.semi_major == other._projection.semi_major
            and self._projection.semi_minor == other._projection.semi_minor
            and self._datum is other._datum
            and self._dims == other._dims
            and self._affine.is_close(other._affine)
        )

    __hash__ = None

    def describe(self) -> str:
        return "\n".join([super().describe(), self._projection.describe()])

    def __repr__(self) -> str:
        return (f"MapProjection({self._projection!r}, datum={self._datum}, "
                f"dims={self._dims}, affine={self._affine!r})")
