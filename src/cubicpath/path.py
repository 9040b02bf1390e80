"""Smooth piecewise cubic Bezier paths interpolating a sequence of knots.

A path is stored as one flat array of control points. Segment i uses the
control points [3i, 3i+3] and shares its first and last point with its
neighbours. The control points at indices 3n are the knots (on the path),
all others are tangent handles.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import numpy as np
import shapely.geometry
from numpy.typing import NDArray

from cubicpath.bezier import BezierCurve
from cubicpath.common import (
    EmptyPathError,
    InvalidControlPointsError,
    PointLike,
    PointsLike,
    as_point,
    as_points_array,
)
from cubicpath.consts import (
    DEFAULT_PARAM_THRESHOLD,
    HANDLE_END_FRACTION,
    HANDLE_INTERIOR_FRACTION,
    MIN_CONTROL_POINTS,
    POLYGONIZE_STEPS_DEFAULT,
    PathType,
)

logger = logging.getLogger(__name__)


def _read_only(arr: NDArray[np.float64]) -> NDArray[np.float64]:
    view = arr.view()
    view.flags.writeable = False
    return view


###############################################################################
# CubicBezierPath
###############################################################################
class CubicBezierPath:
    """A path made of joined cubic Bezier segments.

    With knots supplied, the path passes through every knot and the handles
    around each knot are generated so that the incoming and outgoing tangent
    directions agree. Two knots give a straight line.

    Parameters:
        Path functions take t in [0, num_segments]; segment i covers [i, i+1].
        The *_norm variants take t in [0, 1] over the whole path.
        OPEN paths clamp t, CLOSED paths wrap t around and loop.

    A CLOSED path has one more segment than an OPEN path through the same
    knots. Its last control point duplicates the first knot, so every
    segment is a contiguous 4-row window of the control point array.

    The control points only change through interpolate_points(),
    set_control_points() or clear(). Concurrent readers are fine as long as
    no writer rebuilds the path at the same time; there is no locking.
    """

    _path_type: PathType
    _num_segments: int
    _control_points: NDArray[np.float64]  # shape (n_control_points, 3)

    def __init__(self, knots: Optional[PointsLike] = None, path_type: PathType = PathType.OPEN):
        """
        Initialize a path interpolating the given knots.

        Args:
            knots: at least 2 points the path passes through. None creates an empty path.
            path_type: PathType.OPEN or PathType.CLOSED
        """
        self._path_type = PathType.OPEN
        self._num_segments = 0
        self._control_points = np.empty((0, 3), dtype=np.float64)

        if knots is not None:
            self.interpolate_points(knots, path_type)

    @classmethod
    def from_control_points(cls, points: PointsLike, path_type: PathType = PathType.OPEN) -> CubicBezierPath:
        """Create a path directly from raw control points, see set_control_points()."""
        path = cls()
        path.set_control_points(points, path_type)
        return path

    ###########################################################################
    # Properties
    ###########################################################################

    @property
    def path_type(self) -> PathType:
        """PathType: OPEN or CLOSED."""
        return self._path_type

    @property
    def is_closed(self) -> bool:
        """True if the path loops."""
        return self._path_type is PathType.CLOSED

    @property
    def is_valid(self) -> bool:
        """True if the path has at least one segment."""
        return self._num_segments > 0

    @property
    def num_segments(self) -> int:
        """int: Number of cubic segments."""
        return self._num_segments

    @property
    def max_param(self) -> float:
        """float: Largest path parameter, equal to the number of segments."""
        return float(self._num_segments)

    @property
    def num_control_points(self) -> int:
        """int: Number of control points (knots and handles)."""
        return self._control_points.shape[0]

    @property
    def control_points(self) -> NDArray[np.float64]:
        """
        The control points as a read-only numpy array of shape (n_control_points, 3).
        Use .copy() to get a modifiable array.
        """
        return _read_only(self._control_points)

    @property
    def knots(self) -> NDArray[np.float64]:
        """
        The on-path control points (every third row) as a read-only array.
        For a CLOSED path the first knot appears again as the last row.
        """
        return _read_only(self._control_points[::3])

    def segment_control_points(self, index: int) -> NDArray[np.float64]:
        """Read-only view of the 4 control points of segment index."""
        if not 0 <= index < self._num_segments:
            raise IndexError(f"Segment index {index} out of range for {self._num_segments} segments")
        return _read_only(self._control_points[3 * index : 3 * index + 4])

    ###########################################################################
    # Construction
    ###########################################################################

    def clear(self) -> None:
        """Reset to the empty (invalid) state."""
        self._path_type = PathType.OPEN
        self._num_segments = 0
        self._control_points = np.empty((0, 3), dtype=np.float64)

    def interpolate_points(self, knots: PointsLike, path_type: PathType = PathType.OPEN) -> None:
        """
        Rebuild the path so that it interpolates the given knots.

        Handles are generated automatically. The first and last handle of an
        OPEN path lie a quarter of the way along the first and last span. At
        every other knot both handles lie on a line through the knot whose
        direction bisects the two adjacent spans, at a distance of one eighth
        of the spans' summed length. If a span has zero length the handles
        collapse onto the knot, producing a corner.

        Args:
            knots: at least 2 points the path passes through
            path_type: PathType.OPEN or PathType.CLOSED

        Raises:
            InvalidControlPointsError: if fewer than 2 knots are given.
                The path is left unchanged in that case.
        """
        self._check_path_type(path_type)
        if len(knots) < 2:
            raise InvalidControlPointsError(f"At least 2 knots are required, got {len(knots)}")
        knots_arr = as_points_array(knots)

        if path_type is PathType.OPEN:
            control_points = self._interpolate_open(knots_arr)
            num_segments = knots_arr.shape[0] - 1
        else:
            control_points = self._interpolate_closed(knots_arr)
            num_segments = knots_arr.shape[0]

        self.clear()
        self._path_type = path_type
        self._num_segments = num_segments
        self._control_points = control_points

        logger.debug(
            "Interpolated %s path through %d knots: %d segments, %d control points",
            path_type.name,
            knots_arr.shape[0],
            num_segments,
            control_points.shape[0],
        )

    def set_control_points(self, points: PointsLike, path_type: PathType = PathType.OPEN) -> None:
        """
        Replace the path by the given raw control points.

        No handles are derived; the caller is responsible for tangent
        continuity. The number of points n must satisfy (n - 1) % 3 == 0 with
        n >= 4 for OPEN and n >= 7 for CLOSED paths. For a CLOSED path the
        last point should be equal to the first one.

        Args:
            points: the control points, stored as a private copy
            path_type: PathType.OPEN or PathType.CLOSED

        Raises:
            InvalidControlPointsError: if the number of points is not valid.
                The path is left unchanged in that case.
        """
        self._check_path_type(path_type)
        arr = as_points_array(points)
        num_points = arr.shape[0]

        if num_points < MIN_CONTROL_POINTS[path_type]:
            raise InvalidControlPointsError(
                f"{path_type.name} path requires at least {MIN_CONTROL_POINTS[path_type]} control points, "
                f"got {num_points}"
            )
        if (num_points - 1) % 3 != 0:
            raise InvalidControlPointsError(
                f"Number of control points minus one must be divisible by 3, got {num_points}"
            )

        if path_type is PathType.CLOSED and not np.array_equal(arr[0], arr[-1]):
            logger.warning("Last control point %s of CLOSED path does not match first one %s", arr[-1], arr[0])

        self.clear()
        self._path_type = path_type
        self._num_segments = (num_points - 1) // 3
        self._control_points = arr

    @staticmethod
    def _check_path_type(path_type: PathType) -> None:
        if not isinstance(path_type, PathType):
            raise ValueError(f"path_type must be a PathType, got {path_type!r}")

    @staticmethod
    def _knot_handle_offset(
        prev_knot: NDArray[np.float64], knot: NDArray[np.float64], next_knot: NDArray[np.float64]
    ) -> Optional[NDArray[np.float64]]:
        """
        Offset from a knot to its outgoing handle (the incoming handle is the negated offset).
        Returns None if no direction can be derived.
        """
        a = prev_knot - knot
        b = next_knot - knot
        a_len = float(np.linalg.norm(a))
        b_len = float(np.linalg.norm(b))
        if a_len <= 0.0 or b_len <= 0.0:
            return None

        ab = (b / b_len) - (a / a_len)
        ab_len = float(np.linalg.norm(ab))
        if ab_len <= 0.0:
            # path turns back onto itself
            return None

        return ab * ((a_len + b_len) * HANDLE_INTERIOR_FRACTION / ab_len)

    @classmethod
    def _interpolate_open(cls, knots: NDArray[np.float64]) -> NDArray[np.float64]:
        num_knots = knots.shape[0]
        num_control_points = 3 * num_knots - 2
        control_points = np.empty((num_control_points, 3), dtype=np.float64)

        # Place the knots
        control_points[::3] = knots

        # First and last handle: a quarter along the first and last span
        control_points[1] = knots[0] + (knots[1] - knots[0]) * HANDLE_END_FRACTION
        control_points[-2] = knots[-1] + (knots[-2] - knots[-1]) * HANDLE_END_FRACTION

        for k in range(1, num_knots - 1):
            offset = cls._knot_handle_offset(knots[k - 1], knots[k], knots[k + 1])
            if offset is None:
                logger.debug("Degenerate knot %d at %s, handles collapsed onto knot", k, knots[k])
                control_points[3 * k - 1] = knots[k]
                control_points[3 * k + 1] = knots[k]
            else:
                control_points[3 * k - 1] = knots[k] - offset
                control_points[3 * k + 1] = knots[k] + offset

        return control_points

    @classmethod
    def _interpolate_closed(cls, knots: NDArray[np.float64]) -> NDArray[np.float64]:
        num_knots = knots.shape[0]
        # +1: the first knot is repeated at the end
        num_control_points = 3 * num_knots + 1
        control_points = np.empty((num_control_points, 3), dtype=np.float64)

        control_points[:-1:3] = knots
        control_points[-1] = knots[0]

        # k == num_knots handles the seam at knots[0]
        for k in range(1, num_knots + 1):
            knot = knots[k % num_knots]
            offset = cls._knot_handle_offset(knots[k - 1], knot, knots[(k + 1) % num_knots])

            # The handle after the seam wraps around to index 1
            prev_index = 3 * k - 1
            next_index = (3 * k + 1) % (num_control_points - 1)
            if offset is None:
                logger.debug("Degenerate knot %d at %s, handles collapsed onto knot", k % num_knots, knot)
                control_points[prev_index] = knot
                control_points[next_index] = knot
            else:
                control_points[prev_index] = knot - offset
                control_points[next_index] = knot + offset

        return control_points

    ###########################################################################
    # Evaluation
    ###########################################################################

    def _require_segments(self) -> None:
        if self._num_segments <= 0:
            raise EmptyPathError("Path has no segments")

    def _segment_param(self, t: float) -> Tuple[int, float]:
        """Map a path parameter onto (segment index, segment parameter in [0, 1])."""
        self._require_segments()
        t = float(t)
        if not math.isfinite(t):
            raise ValueError(f"Path parameter must be finite, got {t}")

        max_param = float(self._num_segments)
        if self._path_type is PathType.CLOSED:
            # fmod is exact: negative t ends in [0, max), positive t ends in (0, max]
            wrapped = math.fmod(t, max_param)
            if wrapped < 0.0:
                wrapped += max_param
            elif wrapped == 0.0:
                wrapped = max_param if t > 0.0 else 0.0
            t = min(wrapped, max_param)
        else:
            t = min(max(t, 0.0), max_param)

        # Segment i covers [i, i+1); the last one also includes max_param
        segment = int(t)
        if segment >= self._num_segments:
            segment = self._num_segments - 1

        return segment, t - segment

    def point(self, t: float) -> NDArray[np.float64]:
        """
        Point on the path at parameter t in [0, num_segments].

        OPEN paths clamp t into range, CLOSED paths wrap it around.

        Raises:
            EmptyPathError: if the path has no segments
        """
        segment, local_t = self._segment_param(t)
        return BezierCurve.point(self._control_points[3 * segment : 3 * segment + 4], local_t)

    def point_norm(self, t: float) -> NDArray[np.float64]:
        """Same as point() with t normalized to [0, 1] over the whole path."""
        return self.point(t * self._num_segments)

    def tangent(self, t: float) -> NDArray[np.float64]:
        """
        Tangent of the path at parameter t in [0, num_segments].

        The tangent is not normalized. The longer it is, the more the path is
        pulled in its direction.
        """
        segment, local_t = self._segment_param(t)
        return BezierCurve.tangent(self._control_points[3 * segment : 3 * segment + 4], local_t)

    def tangent_norm(self, t: float) -> NDArray[np.float64]:
        """Same as tangent() with t normalized to [0, 1] over the whole path."""
        return self.tangent(t * self._num_segments)

    ###########################################################################
    # Length
    ###########################################################################

    def approx_length(self) -> float:
        """
        Length of the polyline through the knots.

        This is a lower bound of the true arc length. A CLOSED path includes
        the span from the last knot back to the first one.

        Returns:
            float: the approximate length, 0.0 for an empty path
        """
        if not self.is_valid:
            return 0.0

        knots = self._control_points[::3]
        return float(np.linalg.norm(np.diff(knots, axis=0), axis=1).sum())

    def approx_param_per_unit_length(self) -> float:
        """
        Path parameter per unit of length, e.g. to convert a distance into a param_threshold.
        The path must have a non-zero length, otherwise ZeroDivisionError is raised.
        """
        return self._num_segments / self.approx_length()

    def approx_norm_param_per_unit_length(self) -> float:
        """Same as approx_param_per_unit_length() for normalized parameters."""
        return 1.0 / self.approx_length()

    ###########################################################################
    # Closest point
    ###########################################################################

    def closest_param(self, pos: PointLike, param_threshold: float = DEFAULT_PARAM_THRESHOLD) -> float:
        """
        Path parameter of the point closest to pos.

        Every segment is searched and the best result is kept; within a
        segment the search is greedy (see BezierCurve.closest_param). If
        several points are equally close the one on the earliest segment is
        returned.

        A threshold for a given distance can be derived from the length, e.g.
        for a 0.15 units tolerance:
            path.approx_param_per_unit_length() * 0.15

        Args:
            pos: the position to approach
            param_threshold: accuracy in parameter space

        Returns:
            float: parameter in [0, num_segments]

        Raises:
            EmptyPathError: if the path has no segments
        """
        self._require_segments()
        target = as_point(pos)

        min_dist_sq = math.inf
        closest = 0.0
        for start_index in range(0, self._control_points.shape[0] - 1, 3):
            window = self._control_points[start_index : start_index + 4]
            curve_param = BezierCurve.closest_param(window, target, param_threshold)

            delta = BezierCurve.point(window, curve_param) - target
            dist_sq = float(np.dot(delta, delta))
            if dist_sq < min_dist_sq:
                min_dist_sq = dist_sq
                closest = start_index / 3.0 + curve_param

        return closest

    def closest_norm_param(self, pos: PointLike, param_threshold: float = DEFAULT_PARAM_THRESHOLD) -> float:
        """
        Same search as closest_param() with param_threshold given for normalized parameters.

        The threshold is scaled by num_segments. The result is NOT normalized:
        it is a parameter in [0, num_segments] like the one of closest_param().
        Divide by num_segments to use it with point_norm().
        """
        return self.closest_param(pos, param_threshold * self._num_segments)

    def closest_point(self, pos: PointLike, param_threshold: float = DEFAULT_PARAM_THRESHOLD) -> NDArray[np.float64]:
        """Point on the path closest to pos."""
        return self.point(self.closest_param(pos, param_threshold))

    ###########################################################################
    # Sampling
    ###########################################################################

    def polygonize(self, steps_per_segment: int = POLYGONIZE_STEPS_DEFAULT) -> NDArray[np.float64]:
        """
        Sample the path into a polyline.

        Args:
            steps_per_segment: number of lines each segment is divided into

        Returns:
            NDArray[np.float64] of shape (num_segments * steps_per_segment + 1, 3).
            Joints between segments appear once. An empty path gives shape (0, 3).
        """
        if not self.is_valid:
            return np.empty((0, 3), dtype=np.float64)
        if steps_per_segment < 1:
            raise ValueError(f"steps_per_segment must be at least 1, got {steps_per_segment}")

        result = np.empty((self._num_segments * steps_per_segment + 1, 3), dtype=np.float64)
        result[0] = self._control_points[0]
        for segment in range(self._num_segments):
            samples = BezierCurve.polygonize_cubic_curve(
                self._control_points[3 * segment : 3 * segment + 4], steps_per_segment
            )
            start = segment * steps_per_segment + 1
            result[start : start + steps_per_segment] = samples[1:]

        return result

    def to_linestring(self, steps_per_segment: int = POLYGONIZE_STEPS_DEFAULT) -> shapely.geometry.LineString:
        """The polygonized path as a 3D shapely LineString (empty for an empty path)."""
        if not self.is_valid:
            return shapely.geometry.LineString()
        return shapely.geometry.LineString(self.polygonize(steps_per_segment))

    ###########################################################################
    # Comparison and serialization
    ###########################################################################

    def approx_equal(self, other: CubicBezierPath, rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        """
        Check if two paths are approximately equal.

        Args:
            other: The other CubicBezierPath to compare with
            rtol: Relative tolerance for control point comparison
            atol: Absolute tolerance for control point comparison

        Returns:
            bool: True if both paths have the same type and matching control points
        """
        if not isinstance(other, CubicBezierPath):
            return False
        if self._path_type is not other._path_type:
            return False
        if self._control_points.shape != other._control_points.shape:
            return False
        return bool(np.allclose(self._control_points, other._control_points, rtol=rtol, atol=atol))

    @classmethod
    def from_dict(cls, data: dict) -> CubicBezierPath:
        """Create a CubicBezierPath instance from a dictionary."""
        type_name = data.get("path_type", PathType.OPEN.name)
        try:
            path_type = PathType[type_name]
        except KeyError as exc:
            raise InvalidControlPointsError(f"Unknown path_type {type_name!r}") from exc
        raw_points = data.get("control_points")
        if raw_points is None or len(raw_points) == 0:
            return cls()
        return cls.from_control_points(np.array(raw_points, dtype=np.float64), path_type)

    def to_dict(self) -> dict:
        """Convert the CubicBezierPath instance to a dictionary."""
        return {
            "path_type": self._path_type.name,
            "control_points": self._control_points.tolist(),
        }

    def __str__(self):
        """Returns a string representation of the CubicBezierPath instance."""
        return (
            f"CubicBezierPath(path_type={self._path_type.name}, "
            f"num_segments={self._num_segments}, "
            f"num_control_points={self.num_control_points})"
        )


###############################################################################
# Main
###############################################################################


def main():
    """Main"""
    knots = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0), (0.0, 1.0, 0.0)]
    path = CubicBezierPath(knots, PathType.CLOSED)
    print(path)
    print("approx length:", path.approx_length())
    for i in range(9):
        t = i / 8.0
        print(f"t={t:5.3f}  point={path.point_norm(t)}  tangent={path.tangent_norm(t)}")


if __name__ == "__main__":
    main()
