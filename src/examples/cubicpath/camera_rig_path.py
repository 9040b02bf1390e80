"""Move a camera along a closed path through waypoints and keep it looking along the path."""

import numpy as np

from cubicpath.consts import PathType
from cubicpath.path import CubicBezierPath

WAYPOINTS = [
    (0.0, 0.0, 2.0),
    (10.0, 0.0, 3.0),
    (12.0, 8.0, 5.0),
    (4.0, 12.0, 4.0),
    (-3.0, 6.0, 2.5),
]

FRAMES = 12


def main():
    """Print camera position and viewing direction for each frame of one loop."""
    path = CubicBezierPath(WAYPOINTS, PathType.CLOSED)
    print(path)
    print(f"approx length: {path.approx_length():.3f}")

    for frame in range(FRAMES + 1):
        t = frame / FRAMES
        position = path.point_norm(t)
        direction = path.tangent_norm(t)
        direction = direction / np.linalg.norm(direction)
        print(f"frame {frame:2d}  position={np.round(position, 3)}  look={np.round(direction, 3)}")


if __name__ == "__main__":
    main()
