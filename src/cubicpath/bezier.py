"""Cubic Bezier curve evaluation on a borrowed window of four control points."""

from __future__ import annotations

import math
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from cubicpath.common import (
    InvalidControlPointsError,
    ParameterDomainError,
    PointLike,
    as_point,
)
from cubicpath.consts import DEFAULT_PARAM_THRESHOLD

CurvePoints = Union[Sequence[Tuple[float, float, float]], NDArray[np.float64]]


###############################################################################
# BezierCurve
###############################################################################
class BezierCurve:
    """Class to handle cubic Bezier curve operations.

    A cubic Bezier curve is given by exactly 4 control points: start,
    start handle, end handle and end. All methods are class methods working
    on the points passed in, usually a 4-row view into the control point
    array of a CubicBezierPath. Nothing is copied or stored.
    """

    @classmethod
    def _control_points(cls, points: CurvePoints) -> NDArray[np.float64]:
        pts = np.asarray(points, dtype=np.float64)
        if pts.shape != (4, 3):
            raise InvalidControlPointsError(
                f"Cubic Bezier curve requires 4 control points of shape (4, 3), got {pts.shape}"
            )
        return pts

    @staticmethod
    def _check_param(t: float) -> None:
        if not 0.0 <= t <= 1.0:
            raise ParameterDomainError(f"Curve parameter t={t} is outside of [0, 1]")

    @classmethod
    def point(cls, points: CurvePoints, t: float) -> NDArray[np.float64]:
        """
        Evaluate the curve at parameter t using the Bernstein polynomials.

        Args:
            points: the 4 control points
            t: curve parameter in [0, 1]

        Returns:
            NDArray[np.float64]: the point on the curve

        Raises:
            ParameterDomainError: if t is outside of [0, 1]
        """
        cls._check_param(t)
        pts = cls._control_points(points)

        # B(t) = (1-t)^3*P0 + 3*(1-t)^2*t*P1 + 3*(1-t)*t^2*P2 + t^3*P3
        omt = 1.0 - t
        b0 = omt * omt * omt
        b1 = 3.0 * t * omt * omt
        b2 = 3.0 * t * t * omt
        b3 = t * t * t

        return pts[0] * b0 + pts[1] * b1 + pts[2] * b2 + pts[3] * b3

    @classmethod
    def tangent(cls, points: CurvePoints, t: float) -> NDArray[np.float64]:
        """
        Tangent of the curve at parameter t (De Casteljau reduction).

        The tangent is not normalized: its length grows with the spacing of
        the control points and expresses how strongly the curve pulls in
        that direction.

        Args:
            points: the 4 control points
            t: curve parameter in [0, 1]

        Returns:
            NDArray[np.float64]: the (unnormalized) tangent vector

        Raises:
            ParameterDomainError: if t is outside of [0, 1]
        """
        cls._check_param(t)
        pts = cls._control_points(points)

        q0 = pts[0] + (pts[1] - pts[0]) * t
        q1 = pts[1] + (pts[2] - pts[1]) * t
        q2 = pts[2] + (pts[3] - pts[2]) * t

        r0 = q0 + (q1 - q0) * t
        r1 = q1 + (q2 - q1) * t
        return r1 - r0

    @classmethod
    def closest_param(
        cls,
        points: CurvePoints,
        pos: PointLike,
        param_threshold: float = DEFAULT_PARAM_THRESHOLD,
    ) -> float:
        """
        Find the curve parameter closest to the given position.

        The interval [0, 1] is halved on every step: the midpoints of both
        halves are evaluated and the half with the farther midpoint is dropped.
        The search ends when the interval is narrower than param_threshold and
        returns its midpoint.

        The search is greedy. It assumes the distance to pos has a single
        minimum along the curve and may settle in a local minimum otherwise.

        Args:
            points: the 4 control points
            pos: the position to approach
            param_threshold: interval width (in parameter space) to stop at

        Returns:
            float: parameter in [0, 1]

        Raises:
            ValueError: if param_threshold is not a finite positive number
        """
        if not (math.isfinite(param_threshold) and param_threshold > 0.0):
            raise ValueError(f"param_threshold must be a finite positive number, got {param_threshold}")

        pts = cls._control_points(points)
        target = as_point(pos)

        begin_t = 0.0
        end_t = 1.0
        while True:
            mid = (begin_t + end_t) / 2.0
            if (end_t - begin_t) < param_threshold:
                return mid

            dist_a = cls.point(pts, (begin_t + mid) / 2.0) - target
            dist_b = cls.point(pts, (mid + end_t) / 2.0) - target
            if float(np.dot(dist_a, dist_a)) < float(np.dot(dist_b, dist_b)):
                end_t = mid
            else:
                begin_t = mid

    @classmethod
    def polygonize_cubic_curve(cls, points: CurvePoints, steps: int) -> NDArray[np.float64]:
        """
        Sample the curve at steps+1 evenly spaced parameters.

        Uses direct evaluation with vectorized NumPy operations.

        Args:
            points: the 4 control points
            steps: Number of segments to divide the curve into

        Returns:
            NDArray[np.float64] of shape (steps+1, 3) containing the sampled points
        """
        if steps < 1:
            raise ValueError(f"steps must be at least 1, got {steps}")
        pts = cls._control_points(points)

        # Create parameter array
        t = np.linspace(0.0, 1.0, steps + 1, dtype=np.float64)[:, np.newaxis]

        # Cubic Bezier basis functions
        omt = 1.0 - t
        omt2 = omt**2
        omt3 = omt2 * omt
        t2 = t**2
        t3 = t2 * t

        result = omt3 * pts[0] + 3.0 * omt2 * t * pts[1] + 3.0 * omt * t2 * pts[2] + t3 * pts[3]

        # Pin the end points exactly onto the control points
        result[0] = pts[0]
        result[-1] = pts[3]
        return result


###############################################################################
# Main
###############################################################################


def main():
    """Main"""
    points = np.array([[0.0, 0.0, 0.0], [5.0, 20.0, 0.0], [15.0, 20.0, 5.0], [20.0, 0.0, 5.0]])
    print("point(0.5):  ", BezierCurve.point(points, 0.5))
    print("tangent(0.5):", BezierCurve.tangent(points, 0.5))
    print("closest to (10, 15, 2.5):", BezierCurve.closest_param(points, (10.0, 15.0, 2.5)))


if __name__ == "__main__":
    main()
