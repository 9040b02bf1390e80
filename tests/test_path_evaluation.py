"""Test module for parameter handling, evaluation and length of CubicBezierPath

The tests are run using pytest.
"""

import numpy as np
import pytest

from cubicpath.common import EmptyPathError
from cubicpath.consts import PathType
from cubicpath.path import CubicBezierPath

SQUARE_KNOTS = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0), (0.0, 1.0, 0.0)]
WIGGLE_KNOTS = [(0.0, 0.0, 0.0), (2.0, 3.0, 1.0), (5.0, -1.0, 2.0), (7.0, 4.0, -1.0)]


@pytest.fixture(name="open_path")
def fixture_open_path():
    """OPEN path with 3 segments."""
    return CubicBezierPath(WIGGLE_KNOTS, PathType.OPEN)


@pytest.fixture(name="closed_path")
def fixture_closed_path():
    """CLOSED path with 4 segments."""
    return CubicBezierPath(WIGGLE_KNOTS, PathType.CLOSED)


###############################################################################
# Open Parameter Tests
###############################################################################


class TestOpenParameters:
    """Test clamping of parameters on OPEN paths."""

    def test_end_points(self, open_path):
        """The path starts at the first knot and ends at the last one."""
        assert np.allclose(open_path.point(0.0), WIGGLE_KNOTS[0])
        assert np.allclose(open_path.point(open_path.num_segments), WIGGLE_KNOTS[-1])

    def test_clamping(self, open_path):
        """Parameters beyond the ends are clamped."""
        num_segments = open_path.num_segments
        assert np.array_equal(open_path.point(-5.0), open_path.point(0.0))
        assert np.array_equal(open_path.point(num_segments + 5.0), open_path.point(num_segments))
        assert np.array_equal(open_path.tangent(-1.0), open_path.tangent(0.0))
        assert np.array_equal(open_path.tangent(num_segments + 0.5), open_path.tangent(num_segments))

    def test_upper_bound_uses_last_segment(self, open_path):
        """t == num_segments evaluates the end of the last segment."""
        cvs = open_path.control_points
        assert np.allclose(open_path.tangent(open_path.num_segments), cvs[-1] - cvs[-2])

    def test_integer_param_starts_next_segment(self, open_path):
        """An interior integer parameter evaluates the start of the following segment."""
        cvs = open_path.control_points
        assert np.allclose(open_path.tangent(1.0), cvs[4] - cvs[3])

    def test_large_values(self, open_path):
        """Huge parameters are clamped without error."""
        assert np.allclose(open_path.point(1.0e12), WIGGLE_KNOTS[-1])
        assert np.allclose(open_path.point(-1.0e12), WIGGLE_KNOTS[0])


###############################################################################
# Closed Parameter Tests
###############################################################################


class TestClosedParameters:
    """Test wrapping of parameters on CLOSED paths."""

    def test_loop_closure(self, closed_path):
        """Start and end of the loop coincide with the first knot."""
        assert np.allclose(closed_path.point(0.0), WIGGLE_KNOTS[0])
        assert np.allclose(closed_path.point(closed_path.num_segments), WIGGLE_KNOTS[0])

    @pytest.mark.parametrize("t", [0.0, 0.3, 1.0, 1.75, 2.5, 3.99])
    def test_wraparound(self, closed_path, t):
        """point(t) == point(t + S) == point(t - S)."""
        num_segments = closed_path.num_segments
        expected = closed_path.point(t)
        assert np.allclose(closed_path.point(t + num_segments), expected)
        assert np.allclose(closed_path.point(t - num_segments), expected)
        assert np.allclose(closed_path.point(t + 7 * num_segments), expected)
        assert np.allclose(closed_path.point(t - 7 * num_segments), expected)

    def test_tangent_wraparound(self, closed_path):
        """Tangents wrap like points."""
        num_segments = closed_path.num_segments
        assert np.allclose(closed_path.tangent(1.25 + num_segments), closed_path.tangent(1.25))
        assert np.allclose(closed_path.tangent(1.25 - num_segments), closed_path.tangent(1.25))

    def test_negative_multiple_lands_on_start(self, closed_path):
        """-S wraps onto 0, the start of the first segment."""
        cvs = closed_path.control_points
        assert np.allclose(closed_path.tangent(-float(closed_path.num_segments)), cvs[1] - cvs[0])

    def test_positive_multiple_lands_on_end(self, closed_path):
        """2S wraps onto S, the end of the last segment."""
        cvs = closed_path.control_points
        assert np.allclose(closed_path.tangent(2.0 * closed_path.num_segments), cvs[-1] - cvs[-2])

    @pytest.mark.parametrize("t", [1.0e40, -1.0e40, 1.0e300, -1.0e300, 3.0e33, 7.3e45])
    def test_huge_values_wrap(self, t):
        """Huge parameters wrap onto the knot given by their exact remainder."""
        path = CubicBezierPath([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0)], PathType.CLOSED)
        remainder = float(int(t) % path.num_segments)
        assert np.allclose(path.point(t), path.point(remainder))
        assert np.all(np.isfinite(path.tangent(t)))

    def test_square_example(self):
        """point(4) == point(0) for the unit square loop."""
        path = CubicBezierPath(SQUARE_KNOTS, PathType.CLOSED)
        assert np.array_equal(path.point(4.0), path.point(0.0))
        assert np.allclose(path.point(2.0), [1.0, 1.0, 0.0])


###############################################################################
# Normalized Parameter Tests
###############################################################################


class TestNormalizedParameters:
    """Test the *_norm variants."""

    def test_point_norm(self, open_path):
        """point_norm(t) == point(t * S)."""
        for t in [0.0, 0.2, 0.5, 0.8, 1.0]:
            assert np.allclose(open_path.point_norm(t), open_path.point(t * open_path.num_segments))

    def test_tangent_norm(self, closed_path):
        """tangent_norm(t) == tangent(t * S)."""
        for t in [0.1, 0.45, 0.9]:
            assert np.allclose(closed_path.tangent_norm(t), closed_path.tangent(t * closed_path.num_segments))

    def test_norm_end_points(self, open_path, closed_path):
        """t=1 is the end of the path, or exactly one loop."""
        assert np.allclose(open_path.point_norm(1.0), WIGGLE_KNOTS[-1])
        assert np.allclose(closed_path.point_norm(1.0), WIGGLE_KNOTS[0])
        assert np.allclose(closed_path.point_norm(1.25), closed_path.point_norm(0.25))


###############################################################################
# Invalid Query Tests
###############################################################################


class TestEvaluationErrors:
    """Test queries that cannot be answered."""

    def test_empty_path(self):
        """An empty path cannot be evaluated."""
        path = CubicBezierPath()
        with pytest.raises(EmptyPathError):
            path.point(0.0)
        with pytest.raises(EmptyPathError):
            path.tangent_norm(0.5)

    @pytest.mark.parametrize("t", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_param(self, closed_path, t):
        """Parameters must be finite."""
        with pytest.raises(ValueError, match="finite"):
            closed_path.point(t)


###############################################################################
# Length Tests
###############################################################################


class TestApproxLength:
    """Test the knot polyline length and derived ratios."""

    def test_open_line(self):
        """Collinear knots: the length is exact."""
        path = CubicBezierPath([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0)])
        assert path.approx_length() == pytest.approx(2.0)
        assert path.approx_param_per_unit_length() == pytest.approx(1.0)
        assert path.approx_norm_param_per_unit_length() == pytest.approx(0.5)

    def test_closed_square(self):
        """The closing span is included for CLOSED paths."""
        path = CubicBezierPath(SQUARE_KNOTS, PathType.CLOSED)
        assert path.approx_length() == pytest.approx(4.0)
        assert path.approx_param_per_unit_length() == pytest.approx(1.0)
        assert path.approx_norm_param_per_unit_length() == pytest.approx(0.25)

    def test_lower_bound_of_arc_length(self, open_path):
        """The knot polyline is never longer than a fine sampling of the curve."""
        samples = open_path.polygonize(200)
        sampled_length = float(np.linalg.norm(np.diff(samples, axis=0), axis=1).sum())
        assert open_path.approx_length() <= sampled_length + 1e-9

    def test_empty_path_length(self):
        """An empty path has length 0."""
        assert CubicBezierPath().approx_length() == 0.0

    def test_zero_length_ratio_raises(self):
        """The ratios require a non-zero length."""
        path = CubicBezierPath([(1.0, 1.0, 1.0), (1.0, 1.0, 1.0)])
        assert path.approx_length() == 0.0
        with pytest.raises(ZeroDivisionError):
            path.approx_param_per_unit_length()
        with pytest.raises(ZeroDivisionError):
            CubicBezierPath().approx_norm_param_per_unit_length()
