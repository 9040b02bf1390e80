"""Snap a few positions onto an open path with a tolerance given in units of length."""

import numpy as np

from cubicpath.path import CubicBezierPath

KNOTS = [(0.0, 0.0, 0.0), (4.0, 3.0, 0.0), (8.0, 0.0, 1.0), (12.0, 4.0, 1.0)]

QUERIES = [(2.0, 2.5, 0.0), (8.0, -1.0, 1.0), (20.0, 4.0, 1.0), (-5.0, 0.0, 0.0)]

TOLERANCE = 0.01  # units of length


def main():
    """Print the closest parameter and point for each query position."""
    path = CubicBezierPath(KNOTS)
    param_threshold = path.approx_param_per_unit_length() * TOLERANCE
    print(path)
    print(f"param threshold for {TOLERANCE} units: {param_threshold:.6f}")

    for query in QUERIES:
        t = path.closest_param(query, param_threshold)
        point = path.point(t)
        distance = np.linalg.norm(point - np.asarray(query))
        print(f"query={query}  t={t:.5f}  point={np.round(point, 4)}  distance={distance:.4f}")


if __name__ == "__main__":
    main()
