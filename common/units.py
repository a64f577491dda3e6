"""
Unit Registry for Earth Transforms.

This module provides a centralized unit system using the `pint` library.
Lengths that cross the public API (ellipsoid axes, false easting and
northing, perspective heights, pixel sizes) may be given either as bare
floats in meters or as pint quantities in any length unit; internally
everything is carried as float meters and radians.

Example Usage
-------------
>>> from common.units import Q_, to_magnitude
>>> to_magnitude(Q_(500000, 'ft'), 'm')
152400.0
>>> to_magnitude(152400.0, 'm')
152400.0
"""

from typing import Union

import pint
from pint import UnitRegistry as PintUnitRegistry

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity

Length = Union[float, pint.Quantity]


def to_magnitude(value: Length, unit: str) -> float:
    """Return a value as a float in the given unit.

    Parameters
    ----------
    value : float or pint.Quantity
        Bare numbers are taken to already be in ``unit``.
    unit : str
        Target unit string (e.g. 'm', 'km').

    Returns
    -------
    float
        Magnitude in ``unit``.

    Raises
    ------
    ValueError
        If ``value`` is a quantity of incompatible dimensionality.
    """
    if isinstance(value, pint.Quantity):
        try:
            return float(value.to(unit).magnitude)
        except pint.DimensionalityError as e:
            raise ValueError(
                f"Cannot express {value} in '{unit}'"
            ) from e
    return float(value)


def meters_to_kilometers(value_m: float) -> float:
    """Convert a float length from meters to kilometers through pint."""
    return float(Q_(value_m, 'm').to('km').magnitude)

