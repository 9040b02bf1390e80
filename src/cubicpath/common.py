"""Exceptions and point-array helpers shared by the cubicpath modules."""

from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

###############################################################################
# Types
###############################################################################

PointLike = Union[Sequence[float], NDArray[np.float64]]

PointsLike = Union[
    Sequence[Tuple[float, float]],
    Sequence[Tuple[float, float, float]],
    NDArray[np.float64],
]


###############################################################################
# Exceptions
###############################################################################


class BezierPathError(ValueError):
    """Base exception for cubic Bezier curve and path errors."""


class InvalidControlPointsError(BezierPathError):
    """Raised when knots or control points do not form a valid curve or path."""


class ParameterDomainError(BezierPathError):
    """Raised when a curve parameter lies outside of [0, 1]."""


class EmptyPathError(BezierPathError):
    """Raised when a path without segments is evaluated or searched."""


###############################################################################
# Functions
###############################################################################


def as_points_array(points: PointsLike) -> NDArray[np.float64]:
    """
    Convert the given points into a new float64 array of shape (n, 3).

    2D points (n, 2) are lifted onto the z=0 plane. The returned array never
    shares memory with the input, so callers may keep it as private state.

    Args:
        points: a sequence of (x, y) or (x, y, z) or an array of such rows.

    Returns:
        NDArray[np.float64]: array of shape (n, 3)

    Raises:
        InvalidControlPointsError: if the points are not 2D or 3D rows
    """
    arr = np.array(points, dtype=np.float64)

    if arr.ndim != 2:
        raise InvalidControlPointsError(f"points must have 2 dimensions, got {arr.ndim}")

    if arr.shape[1] == 2:
        arr = np.column_stack([arr, np.zeros(arr.shape[0], dtype=np.float64)])
    elif arr.shape[1] != 3:
        raise InvalidControlPointsError(f"points must have shape (n, 2) or (n, 3), got {arr.shape}")

    return arr


def as_point(point: PointLike) -> NDArray[np.float64]:
    """Convert a single 2D or 3D point into a float64 array of shape (3,)."""
    arr = np.asarray(point, dtype=np.float64)
    if arr.shape == (2,):
        return np.array([arr[0], arr[1], 0.0], dtype=np.float64)
    if arr.shape != (3,):
        raise InvalidControlPointsError(f"point must have shape (2,) or (3,), got {arr.shape}")
    return arr
