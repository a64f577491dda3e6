"""
Common utilities and infrastructure for the Earth Transforms library.

This package provides foundational components used across all modules:
- Geodetic constants and centralized solver limits
- Unit registry for length inputs
- Immutable location value types
- Logging and the exception hierarchy
"""

from common.constants import (
    GeodeticConstants,
    ConvergenceConstants,
    SolverLimits,
)
from common.units import ureg, Q_, to_magnitude
from common.types import EarthLocation, DataLocation
from common.logging_config import get_logger
from common.exceptions import (
    EarthTransformError,
    ProjectionParameterError,
    NonInvertibleAffineError,
    ResourceNotFoundError,
    DatumNotFoundError,
    ZoneNotFoundError,
    MalformedTableError,
    ConvergenceError,
    UnsupportedOperationError,
)

__all__ = [
    "GeodeticConstants",
    "ConvergenceConstants",
    "SolverLimits",
    "ureg",
    "Q_",
    "to_magnitude",
    "EarthLocation",
    "DataLocation",
    "get_logger",
    "EarthTransformError",
    "ProjectionParameterError",
    "NonInvertibleAffineError",
    "ResourceNotFoundError",
    "DatumNotFoundError",
    "ZoneNotFoundError",
    "MalformedTableError",
    "ConvergenceError",
    "UnsupportedOperationError",
]
