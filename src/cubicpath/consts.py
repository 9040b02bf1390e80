"""Central module containing constants and definitions for cubic Bezier paths."""

from __future__ import annotations

from enum import Enum, auto

###############################################################################
# Enums
###############################################################################


class PathType(Enum):
    """Enum to define the topology of a path.

    OPEN paths clamp their parameter at both ends,
    CLOSED paths wrap their parameter and form a loop.
    """

    OPEN = auto()
    CLOSED = auto()


###############################################################################
# Consts
###############################################################################

# Width (in parameter space) at which the closest-param search stops
DEFAULT_PARAM_THRESHOLD: float = 1.0e-6

# Number of steps per segment when sampling a path into a polyline
POLYGONIZE_STEPS_DEFAULT: int = 16

# Handle placement relative to the adjacent knot spans
HANDLE_END_FRACTION: float = 0.25  # first/last handle of an open path
HANDLE_INTERIOR_FRACTION: float = 0.125  # (|a| + |b|) / 8 for interior knots

# Minimum number of control points a path of the given type accepts
MIN_CONTROL_POINTS = {
    PathType.OPEN: 4,
    PathType.CLOSED: 7,
}


def main():
    """Main"""
    for path_type in PathType:
        print(path_type, path_type.value, "min control points:", MIN_CONTROL_POINTS[path_type])


if __name__ == "__main__":
    main()
