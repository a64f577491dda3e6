"""
Exception hierarchy for the earth transform library.

Only construction and resource failures raise. Per-point transform
failures are reported through ``projections.base.ProjectionStatus``.
"""

from typing import Optional


class EarthTransformError(Exception):
    """Base exception for earth transform errors"""
    pass


class ProjectionParameterError(EarthTransformError, ValueError):
    """Projection parameters are inconsistent or out of range.

    Parameters
    ----------
    message : str
        Description of the inconsistency.
    code : int, optional
        Legacy GCTP error number, when one exists.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message if code is None else f"{message} (error {code})")
        self.code = code


class NonInvertibleAffineError(EarthTransformError, ValueError):
    """Affine transform has a zero determinant"""
    pass


class ResourceNotFoundError(EarthTransformError, LookupError):
    """A parameter table has no entry for the requested key"""
    pass


class DatumNotFoundError(ResourceNotFoundError):
    """No datum is available for a spheroid code"""
    pass


class ZoneNotFoundError(ResourceNotFoundError):
    """No State Plane record exists for a zone and datum"""
    pass


class MalformedTableError(EarthTransformError, ValueError):
    """A parameter table or packed angle could not be decoded"""
    pass


class ConvergenceError(EarthTransformError, ArithmeticError):
    """An iterative solver failed where the failure cannot be skipped"""
    pass


class UnsupportedOperationError(EarthTransformError, NotImplementedError):
    """The transform does not support the requested operation"""
    pass
