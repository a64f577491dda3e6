"""
Two-dimensional affine transforms between grid and projection coordinates.

An ``AffineTransform`` maps a point (a, b) to

    a' = m00 * a + m01 * b + m02
    b' = m10 * a + m11 * b + m12

and is immutable: every composition returns a new instance. Coefficients
are held in a read-only 2x3 numpy array so that bulk grid conversions can
apply them with a single vectorized expression.

Composition follows the usual matrix convention. ``t.concatenate(u)``
is the transform that applies ``u`` first and then ``t``;
``t.pre_concatenate(u)`` applies ``t`` first and then ``u``.
"""

from typing import Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from common.exceptions import NonInvertibleAffineError

# Determinants below this magnitude are treated as singular
SINGULAR_DETERMINANT = 1.0e-300


class AffineTransform:
    """Immutable 2D affine transform.

    Parameters
    ----------
    matrix : array-like, shape (2, 3)
        ``[[m00, m01, m02], [m10, m11, m12]]``.

    Examples
    --------
    >>> t = AffineTransform.translation(10.0, -5.0)
    >>> t.transform(1.0, 1.0)
    (11.0, -4.0)
    >>> t.inverse().transform(11.0, -4.0)
    (1.0, 1.0)
    """

    __slots__ = ("_matrix",)

    def __init__(self, matrix: Sequence[Sequence[float]]):
        m = np.array(matrix, dtype=np.float64)
        if m.shape != (2, 3):
            raise ValueError(f"Affine matrix must have shape (2, 3), got {m.shape}")
        m.setflags(write=False)
        self._matrix = m

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_coefficients(
        cls,
        m00: float,
        m10: float,
        m01: float,
        m11: float,
        m02: float,
        m12: float
    ) -> "AffineTransform":
        """Build a transform from coefficients in column-major flat order."""
        return cls([[m00, m01, m02], [m10, m11, m12]])

    @classmethod
    def identity(cls) -> "AffineTransform":
        return cls([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

    @classmethod
    def translation(cls, ta: float, tb: float) -> "AffineTransform":
        return cls([[1.0, 0.0, ta], [0.0, 1.0, tb]])

    @classmethod
    def scaling(cls, sa: float, sb: float) -> "AffineTransform":
        return cls([[sa, 0.0, 0.0], [0.0, sb, 0.0]])

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def matrix(self) -> NDArray[np.float64]:
        """Read-only 2x3 coefficient array."""
        return self._matrix

    @property
    def coefficients(self) -> Tuple[float, float, float, float, float, float]:
        """Coefficients as (m00, m10, m01, m11, m02, m12)."""
        m = self._matrix
        return (float(m[0, 0]), float(m[1, 0]), float(m[0, 1]),
                float(m[1, 1]), float(m[0, 2]), float(m[1, 2]))

    @property
    def determinant(self) -> float:
        m = self._matrix
        return float(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0])

    @property
    def is_identity(self) -> bool:
        return bool(np.array_equal(self._matrix, AffineTransform.identity().matrix))

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def transform(self, a: float, b: float) -> Tuple[float, float]:
        m = self._matrix
        return (float(m[0, 0] * a + m[0, 1] * b + m[0, 2]),
                float(m[1, 0] * a + m[1, 1] * b + m[1, 2]))

    def transform_arrays(
        self,
        a: NDArray[np.float64],
        b: NDArray[np.float64]
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Vectorized ``transform`` over matching arrays."""
        m = self._matrix
        a = np.asarray(a, dtype=np.float64)
        b = np.asarray(b, dtype=np.float64)
        return (m[0, 0] * a + m[0, 1] * b + m[0, 2],
                m[1, 0] * a + m[1, 1] * b + m[1, 2])

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def _as_3x3(self) -> NDArray[np.float64]:
        return np.vstack([self._matrix, [0.0, 0.0, 1.0]])

    def inverse(self) -> "AffineTransform":
        """Inverse transform.

        Raises
        ------
        NonInvertibleAffineError
            If the determinant is zero.
        """
        det = self.determinant
        if not np.isfinite(det) or abs(det) < SINGULAR_DETERMINANT:
            raise NonInvertibleAffineError(
                f"Affine transform {self.coefficients} is not invertible (determinant {det})"
            )
        return AffineTransform(np.linalg.inv(self._as_3x3())[:2])

    def concatenate(self, other: "AffineTransform") -> "AffineTransform":
        """Transform applying ``other`` first, then this one."""
        return AffineTransform((self._as_3x3() @ other._as_3x3())[:2])

    def pre_concatenate(self, other: "AffineTransform") -> "AffineTransform":
        """Transform applying this one first, then ``other``."""
        return AffineTransform((other._as_3x3() @ self._as_3x3())[:2])

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def is_close(self, other: "AffineTransform", rtol: float = 1.0e-10, atol: float = 1.0e-12) -> bool:
        return bool(np.allclose(self._matrix, other._matrix, rtol=rtol, atol=atol))

    def __eq__(self, other) -> bool:
        if not isinstance(other, AffineTransform):
            return NotImplemented
        return bool(np.array_equal(self._matrix, other._matrix))

    def __hash__(self):
        return hash(self._matrix.tobytes())

    def __repr__(self) -> str:
        m00, m10, m01, m11, m02, m12 = self.coefficients
        return (f"AffineTransform(m00={m00!r}, m10={m10!r}, m01={m01!r}, "
                f"m11={m11!r}, m02={m02!r}, m12={m12!r})")
